"""CoreSync fitness-coaching backend."""

__version__ = "0.1.0"
