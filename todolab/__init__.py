"""A Flask todo API with pluggable storage, background notifications and concurrent batch creation."""

__version__ = "0.1.0"