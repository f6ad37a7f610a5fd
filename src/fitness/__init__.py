"""Identity reconciliation and JIT provisioning for the fitness platform."""
