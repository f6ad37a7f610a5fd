"""HTTP and utility layers for the fitness services."""
