"""Revision history index for a source-control quality-analysis platform."""

__version__ = "0.1.0"
