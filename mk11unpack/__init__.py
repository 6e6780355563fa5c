"""Unpack and inspect Mortal Kombat 11 package archives and their chunks."""

__version__ = "0.1.0"