"""Network Planner: interactive network-topology editor service."""
