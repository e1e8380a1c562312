"""API layer: dependencies and routers."""
