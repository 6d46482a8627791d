"""Tin: budget cards and todos on a transactional SQLite store."""

__version__ = "1.0.0"
