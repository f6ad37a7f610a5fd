"""HTTP middleware shared by the fitness services."""
