"""Cleaned entity models."""
