"""Scheduled exchange rate ingestion job."""

__version__ = "0.1.0"
