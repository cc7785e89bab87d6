"""Web management gateway for a Docker engine."""

__version__ = "0.1.0"
