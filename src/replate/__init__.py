"""Async client for the Replate recipe and inventory backend."""

__version__ = "0.1.0"
