"""Command-line client for WHOOP daily statistics."""

__version__ = "0.1.0"
