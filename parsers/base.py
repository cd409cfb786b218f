"""Abstract Parser Interface.

This module defines the capability interface every record format implements.
It is intentionally format-agnostic - no CSV, JSON or column layouts here.

Parsers implement this interface to:
1. Split a text stream into raw source records
2. Convert each raw record into a Customer or Invoice (or a RecordError)
3. Serialize customers and invoices back to the same format

Key Design Principles:
- A malformed record never aborts a pass: it becomes a RecordError in the
  ParseDiagnostics sink and the pass continues
- A malformed or unreadable stream aborts the pass: the error is recorded as
  fatal and the pass yields an empty list
- Invoices are linked to the canonical Customer objects in the supplied map
"""

import csv
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Iterator, List, Mapping, Optional, TextIO, TypeVar

from core.errors import MalformedSourceError
from core.observability.logging import get_logger, log_pass_complete, log_record_skipped, with_correlation
from models.canonical import Customer, Invoice
from models.refs import ParseDiagnostics, RecordError


logger = get_logger(__name__)

T = TypeVar("T")

# Errors that mean the stream itself cannot be read
FATAL_ERRORS = (OSError, UnicodeError, csv.Error, MalformedSourceError)


# =============================================================================
# Enums & Result Types
# =============================================================================

class ParseFormat(str, Enum):
    """Supported record formats."""
    CSV = "CSV"          # Delimited, minimal quoting
    FLAT = "FLAT"        # Fixed-width columns
    EXPORT = "EXPORT"    # Quoted CSV with header and NULL literal
    EXCEL = "EXCEL"      # Spreadsheet CSV, unquoted, empty for absent
    JSON = "JSON"        # Whole-collection arrays
    DEFAULT = "DEFAULT"  # Alias for CSV


@dataclass
class SourceRecord:
    """One raw record as split from a source stream."""
    line_number: int
    raw: str
    data: Any


@dataclass
class RecordResult(Generic[T]):
    """Outcome of converting one source record."""
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "RecordResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, reason: str) -> "RecordResult[T]":
        return cls(error=reason)


def lookup_customer(customers: Mapping[str, Customer], first_name: str, last_name: str) -> Optional[Customer]:
    """Find the canonical customer for a pair of names."""
    return customers.get(f"{first_name} {last_name}")


# =============================================================================
# Abstract Parser Interface
# =============================================================================

class Parser(ABC):
    """Abstract base class for record parsers.

    Subclasses provide the record splitting and per-record conversion; this
    class drives a pass, filters failures into diagnostics and logs them.

    Implementations:
    - parsers/csv_parser.py
    - parsers/dialect_csv.py
    - parsers/flat_parser.py
    - parsers/json_parser.py
    """

    format: ParseFormat = ParseFormat.DEFAULT

    # -------------------------------------------------------------------------
    # Record splitting & conversion (implemented per format)
    # -------------------------------------------------------------------------

    @abstractmethod
    def _customer_records(self, reader: TextIO) -> Iterator[SourceRecord]:
        """Split a customer stream into source records."""
        pass

    @abstractmethod
    def _invoice_records(self, reader: TextIO) -> Iterator[SourceRecord]:
        """Split an invoice stream into source records."""
        pass

    @abstractmethod
    def _parse_customer(self, record: SourceRecord) -> RecordResult[Customer]:
        """Convert one source record to a Customer."""
        pass

    @abstractmethod
    def _parse_invoice(
        self,
        record: SourceRecord,
        customers: Mapping[str, Customer],
    ) -> RecordResult[Invoice]:
        """Convert one source record to an Invoice linked into ``customers``."""
        pass

    # -------------------------------------------------------------------------
    # Production (implemented per format)
    # -------------------------------------------------------------------------

    @abstractmethod
    def produce_customers(self, customers: Iterable[Customer], writer: TextIO) -> None:
        """Write the given customers to the given writer."""
        pass

    @abstractmethod
    def produce_invoices(self, invoices: Iterable[Invoice], writer: TextIO) -> None:
        """Write the given invoices to the given writer."""
        pass

    # -------------------------------------------------------------------------
    # Parse drivers
    # -------------------------------------------------------------------------

    def parse_customers(
        self,
        reader: TextIO,
        diagnostics: Optional[ParseDiagnostics] = None,
    ) -> List[Customer]:
        """Consume a customer stream and translate it to Customer objects.

        Args:
            reader: Text stream positioned at the start of the data
            diagnostics: Optional sink for skipped records and fatal errors

        Returns:
            Parsed customers in source order; empty if the stream was unusable
        """
        if diagnostics is None:
            diagnostics = ParseDiagnostics(record_kind="customer")
        return self._drive(
            lambda: self._customer_records(reader),
            self._parse_customer,
            diagnostics,
        )

    def parse_invoices(
        self,
        reader: TextIO,
        customers: Mapping[str, Customer],
        diagnostics: Optional[ParseDiagnostics] = None,
    ) -> List[Invoice]:
        """Consume an invoice stream and translate it to Invoice objects.

        Args:
            reader: Text stream positioned at the start of the data
            customers: We use this to translate the customer name to a
                reference to the already-loaded Customer object
            diagnostics: Optional sink for skipped records and fatal errors

        Returns:
            Parsed invoices in source order; empty if the stream was unusable
        """
        if diagnostics is None:
            diagnostics = ParseDiagnostics(record_kind="invoice")
        return self._drive(
            lambda: self._invoice_records(reader),
            lambda record: self._parse_invoice(record, customers),
            diagnostics,
        )

    def _drive(
        self,
        split: Callable[[], Iterator[SourceRecord]],
        convert: Callable[[SourceRecord], RecordResult[T]],
        diagnostics: ParseDiagnostics,
    ) -> List[T]:
        values: List[T] = []
        with with_correlation(record_kind=diagnostics.record_kind, parser_format=self.format.value):
            try:
                for record in split():
                    diagnostics.records_read += 1
                    result = convert(record)
                    if result.ok:
                        values.append(result.value)
                    else:
                        diagnostics.add_error(RecordError(
                            line_number=record.line_number,
                            raw=record.raw,
                            reason=result.error,
                        ))
                        log_record_skipped(logger, result.error, record.line_number, record.raw)
            except FATAL_ERRORS as ex:
                diagnostics.fail(f"Couldn't parse {diagnostics.record_kind} source: {ex}")
                logger.exception(f"Couldn't parse {diagnostics.record_kind} source.")
                return []

            diagnostics.parsed = len(values)
            log_pass_complete(logger, diagnostics.record_kind, len(values), len(diagnostics.skipped))
        return values

    def __repr__(self) -> str:
        return f"{type(self).__name__}(format={self.format.value})"
