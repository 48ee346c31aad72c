"""Agrobase: AI-assisted crop and livestock tools."""

__version__ = "0.1.0"
