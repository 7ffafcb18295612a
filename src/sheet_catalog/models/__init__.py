"""
Data models for the sheet catalog.
"""

from .catalog import CatalogDocument, Company, Problem

__all__ = [
    'CatalogDocument',
    'Company',
    'Problem',
]
