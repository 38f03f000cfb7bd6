"""Outreach RAG: document knowledge engine for sales outreach and support inbox drafting."""

__version__ = "1.0.0"
