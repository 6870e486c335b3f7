"""Receipt service: validates and stores receipts in memory and awards reward points."""

__version__ = "0.1.0"