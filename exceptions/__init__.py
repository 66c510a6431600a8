"""
Custom exceptions module.
"""

from exceptions.errors import (
    CatalogImportError,
    ConfigurationError,
    StreamReadError,
    BatchWriteError,
)

__all__ = [
    "CatalogImportError",
    "ConfigurationError",
    "StreamReadError",
    "BatchWriteError",
]
