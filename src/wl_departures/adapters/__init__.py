"""Adapters layer - implementations of ports."""
