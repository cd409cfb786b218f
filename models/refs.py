"""Reference and diagnostics models for dataset storage and parsing."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class DataReference(BaseModel):
    """Reference to a written dataset file with metadata for verification.

    Attributes:
        storage_uri: Absolute file path to the artifact
        content_hash: SHA256 hash of the content for integrity verification
        content_type: MIME type (e.g., "text/csv", "application/json")
        size_bytes: Size of the artifact in bytes
        stored_at: Timestamp when the artifact was stored
    """
    storage_uri: str = Field(..., description="Absolute file path to the artifact")
    content_hash: str = Field(..., description="SHA256 hash of content")
    content_type: str = Field(default="text/plain", description="MIME type")
    size_bytes: int = Field(..., description="Size in bytes")
    stored_at: datetime = Field(default_factory=datetime.utcnow, description="Storage timestamp")


class RecordError(BaseModel):
    """A single record a parser could not turn into a value."""
    line_number: int = Field(..., description="1-based record position in the source")
    raw: str = Field(default="", description="Raw record text")
    reason: str = Field(..., description="Why the record was dropped")


class ParseDiagnostics(BaseModel):
    """Diagnostics sink for one parse pass.

    Attributes:
        record_kind: "customer" or "invoice"
        records_read: Number of records seen (blank lines excluded)
        parsed: Number of records turned into values
        skipped: Records dropped, with reasons
        fatal: Set when the whole pass failed (unreadable or malformed source)
    """
    record_kind: str = Field(..., description="customer or invoice")
    records_read: int = Field(default=0)
    parsed: int = Field(default=0)
    skipped: List[RecordError] = Field(default_factory=list)
    fatal: Optional[str] = Field(default=None, description="Fatal error message, if any")

    @property
    def ok(self) -> bool:
        return self.fatal is None

    def add_error(self, error: RecordError) -> None:
        self.skipped.append(error)

    def fail(self, message: str) -> None:
        self.fatal = message
