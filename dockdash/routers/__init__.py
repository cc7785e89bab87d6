"""API routers for dockdash."""
