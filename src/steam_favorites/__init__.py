"""Steam catalog search, patch notes and favorites reconciliation."""

__version__ = "0.1.0"
