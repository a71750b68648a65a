"""Top-down action-RPG gameplay simulation engine."""

__version__ = "0.1.0"
