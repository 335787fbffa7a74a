"""fieldops - maintenance operations tracker for building service crews."""

__version__ = "1.0.0"
