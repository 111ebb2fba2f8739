"""Wiener Linien real-time departure board."""

__version__ = "0.1.0"
