"""buildwrap: one entry point for running and maintaining a build."""

__version__ = "0.1.0"
