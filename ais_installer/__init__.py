"""AIS-catcher installer — dependency resolution and idempotent deployment."""

__version__ = "0.1.0"
