"""Booknav - sidebar navigation for static documentation books."""

__version__ = "0.1.0"
