"""Adapters for storage, inference and file formats."""
