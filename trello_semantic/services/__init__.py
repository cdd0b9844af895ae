"""Trello REST API calls and the smart actions built on them."""
