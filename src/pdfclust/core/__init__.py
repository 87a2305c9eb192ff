"""Core data model for the pdfclust pipeline.

This module provides the immutable GridRecord passed between stages.
"""

from pdfclust.core.record import GridRecord, DEFAULT_YEAR_KEY, DEFAULT_DAY_KEY

__all__ = ['GridRecord', 'DEFAULT_YEAR_KEY', 'DEFAULT_DAY_KEY']
