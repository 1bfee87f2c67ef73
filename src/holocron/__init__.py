"""Holocron — film catalog synchronization and view derivation."""

__version__ = "0.1.0"
