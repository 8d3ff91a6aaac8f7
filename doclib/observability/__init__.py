"""
Observability helpers.

Exports logging configuration used by library entry points.
"""

from doclib.observability.logger import configure_logging

__all__ = ["configure_logging"]
