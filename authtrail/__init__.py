"""authtrail - credential management and authentication audit service."""

__version__ = "0.1.0"
