"""
Sheet Catalog

Builds a denormalized companies/solutions JSON catalog from three tabs of a
published spreadsheet (Companies, Problems, Company Solutions).
"""

__version__ = '0.1.0'

# Re-export key classes for convenience
from .csv_parser import parse_csv
from .fields import keyify, norm, pick
from .fetcher import SheetFetcher
from .pipeline import CatalogPipeline, PipelineResult
from .reconciler import ReconciliationResult, reconcile
from .models import CatalogDocument, Company, Problem
from .logging import (
    configure_logging,
    get_logger,
    logging_context,
    PipelineTimer,
)
from .errors import (
    SheetCatalogError,
    ConfigError,
    FetchError,
    EmptyTableError,
    MalformedTableError,
    SchemaError,
    ReconciliationReport,
)

__all__ = [
    # Version
    '__version__',
    # Main Pipeline
    'CatalogPipeline',
    'PipelineResult',
    # Components
    'SheetFetcher',
    'parse_csv',
    'pick',
    'norm',
    'keyify',
    'reconcile',
    'ReconciliationResult',
    # Models
    'CatalogDocument',
    'Company',
    'Problem',
    # Logging
    'configure_logging',
    'get_logger',
    'logging_context',
    'PipelineTimer',
    # Errors
    'SheetCatalogError',
    'ConfigError',
    'FetchError',
    'EmptyTableError',
    'MalformedTableError',
    'SchemaError',
    'ReconciliationReport',
]
