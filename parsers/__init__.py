"""Record Parsers - Pluggable customer/invoice file formats.

This package contains the abstract parser interface and one implementation
per supported format:
- CSV: delimited, the default
- EXPORT: quoted CSV with header row and NULL literal
- EXCEL: spreadsheet-style CSV
- FLAT: fixed-width columns
- JSON: whole-collection arrays

To add a format:
1. Subclass Parser
2. Register it using the @register_parser decorator
3. Select it by name with the BILLING_PARSER setting
"""

from parsers.base import (
    Parser,
    ParseFormat,
    RecordResult,
    SourceRecord,
)
from parsers.csv_parser import CSVParser
from parsers.dialect_csv import DialectCSVParser
from parsers.flat_parser import FlatParser
from parsers.json_parser import JSONParser
from parsers.factory import (
    create_parser,
    create_parser_for_filename,
    format_for_filename,
    register_parser,
    unregister_parser,
    list_available_parsers,
    reset_registry,
)

__all__ = [
    # Core interface
    "Parser",
    "ParseFormat",
    "RecordResult",
    "SourceRecord",
    # Implementations
    "CSVParser",
    "DialectCSVParser",
    "FlatParser",
    "JSONParser",
    # Factory
    "create_parser",
    "create_parser_for_filename",
    "format_for_filename",
    "register_parser",
    "unregister_parser",
    "list_available_parsers",
    "reset_registry",
]
