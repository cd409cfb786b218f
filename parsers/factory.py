"""Parser factory.

Maps a format tag, or a filename extension, to a Parser instance. The
registry holds zero-argument factories keyed by name; every ParseFormat tag
is registered here, and other parsers (test doubles, site-specific formats)
can be added with @register_parser and selected through the BILLING_PARSER
setting.
"""

import os
from typing import Callable, Dict, List, Optional, Union

from core.errors import UnknownFormatError
from core.observability.logging import get_logger
from parsers.base import Parser, ParseFormat
from parsers.csv_parser import CSVParser
from parsers.dialect_csv import DialectCSVParser
from parsers.flat_parser import FlatParser
from parsers.json_parser import JSONParser


logger = get_logger(__name__)

ParserFactory = Callable[[], Parser]

_parser_registry: Dict[str, ParserFactory] = {}


def _key(name: Union[str, ParseFormat]) -> str:
    if isinstance(name, ParseFormat):
        return name.value
    return name.strip().upper()


def register_parser(name: Union[str, ParseFormat]):
    """Decorator to register a parser class or factory under a name."""
    def decorator(factory):
        _parser_registry[_key(name)] = factory
        return factory
    return decorator


def unregister_parser(name: Union[str, ParseFormat]) -> None:
    """Remove a registered parser, if present."""
    _parser_registry.pop(_key(name), None)


def list_available_parsers() -> List[str]:
    """List all registered parser names."""
    return list(_parser_registry.keys())


def _register_builtin_parsers() -> None:
    register_parser(ParseFormat.CSV)(CSVParser)
    register_parser(ParseFormat.FLAT)(FlatParser)
    register_parser(ParseFormat.EXPORT)(DialectCSVParser.create_export_parser)
    register_parser(ParseFormat.EXCEL)(DialectCSVParser.create_excel_parser)
    register_parser(ParseFormat.JSON)(JSONParser)
    register_parser(ParseFormat.DEFAULT)(CSVParser)


_register_builtin_parsers()


def reset_registry() -> None:
    """Restore the built-in registrations, dropping any overrides."""
    _parser_registry.clear()
    _register_builtin_parsers()


def create_parser(
    format: Optional[Union[str, ParseFormat]],
    override: Optional[str] = None,
) -> Parser:
    """Create a parser for a format tag.

    Args:
        format: ParseFormat or its name (case-insensitive); None or an
            unregistered tag falls back to DEFAULT with a warning
        override: Optional registered parser name that takes precedence over
            the tag; an unknown override is logged and ignored

    Returns:
        New parser instance

    Raises:
        UnknownFormatError: If the fallback DEFAULT parser isn't registered
    """
    if override:
        factory = _parser_registry.get(_key(override))
        if factory is not None:
            return factory()
        logger.warning(
            f"Couldn't create parser as configured: {override}",
            extra_fields={"available": list_available_parsers()},
        )

    factory = _parser_registry.get(_key(format)) if format is not None else None
    if factory is None:
        logger.warning(
            f"No parser configured for {format}; using default parser.",
            extra_fields={"available": list_available_parsers()},
        )
        factory = _parser_registry.get(_key(ParseFormat.DEFAULT))
    if factory is None:
        raise UnknownFormatError(
            f"No parser configured for {format} and no default parser. "
            f"Available: {list_available_parsers()}"
        )
    return factory()


def format_for_filename(filename: str) -> ParseFormat:
    """Find the format named by a filename's extension.

    The extension is everything after the first "."; unknown or missing
    extensions fall back to DEFAULT.
    """
    filename = os.path.basename(filename)
    separator_index = filename.find(".")
    if separator_index == -1:
        logger.debug("No file extension; using default parser.")
        return ParseFormat.DEFAULT

    extension = filename[separator_index + 1:]
    for candidate in ParseFormat:
        if candidate.value.lower() == extension.lower():
            return candidate

    logger.debug(f"Unknown format {extension}; using default parser.")
    return ParseFormat.DEFAULT


def create_parser_for_filename(filename: str, override: Optional[str] = None) -> Parser:
    """Create a parser for a file, choosing the format by extension."""
    return create_parser(format_for_filename(filename), override=override)
