"""HTTP API for the triathlon pace planner."""
