"""Style inspector overlay engine."""

__version__ = "0.4.0"
