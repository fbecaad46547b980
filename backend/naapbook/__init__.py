"""Naapbook: local client-record and measurement store."""

__version__ = "0.1.0"
