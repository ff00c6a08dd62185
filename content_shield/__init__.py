"""Content Shield: content-addressed sharing with license-based access control."""

__version__ = "1.0.0"
