# exceptions/errors.py
"""
Exception classes for the catalog importer.

Only StreamReadError is allowed to abort a run; everything else raised while
reconciling a chunk is contained by the pipeline driver.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class CatalogImportError(Exception):
    """
    Base exception for all importer errors.

    Attributes:
        code: Error code (e.g., "STREAM_READ_ERROR")
        message: Human-readable message
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to a loggable mapping."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ConfigurationError(CatalogImportError):
    """Required configuration is missing or invalid."""

    def __init__(self, setting: str, message: str):
        super().__init__(
            code="CONFIGURATION_ERROR",
            message=message,
            details={"setting": setting}
        )


class StreamReadError(CatalogImportError):
    """The input feed could not be opened or read. Aborts the run."""

    def __init__(self, source: str, message: str):
        super().__init__(
            code="STREAM_READ_ERROR",
            message=f"Cannot read {source}: {message}",
            details={"source": source}
        )


class BatchWriteError(CatalogImportError):
    """The batched product upsert for one chunk failed."""

    def __init__(self, chunk_index: int, instruction_count: int, message: str):
        self.chunk_index = chunk_index
        self.instruction_count = instruction_count
        super().__init__(
            code="BATCH_WRITE_ERROR",
            message=f"Bulk upsert of chunk {chunk_index} failed: {message}",
            details={
                "chunk_index": chunk_index,
                "instruction_count": instruction_count
            }
        )
