"""Topology editor core: graph model, collision avoidance, layout and interaction."""
