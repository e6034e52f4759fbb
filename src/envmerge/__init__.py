"""Merge, resolve, and distribute per-service environment files."""

__version__ = "0.1.0"
