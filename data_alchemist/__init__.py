"""Spreadsheet-style editor core for client / worker / task datasets."""

__version__ = "0.1.0"
