"""Semantic name resolution and response cleaning for the Trello REST API."""

__version__ = "0.1.0"
