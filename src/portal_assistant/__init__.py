"""Chat assistant for the assignment portal."""

__version__ = "0.1.0"
