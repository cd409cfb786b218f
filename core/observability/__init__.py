"""
Observability Module for the billing ledger

Provides:
- Structured logging with correlation context (dataset, file, record kind)
- Human-readable and JSON-lines formatters
"""

from core.observability.logging import (
    get_logger,
    configure_logging,
    CorrelationContext,
    with_correlation,
    log_record_skipped,
    log_pass_complete,
)

__all__ = [
    "get_logger",
    "configure_logging",
    "CorrelationContext",
    "with_correlation",
    "log_record_skipped",
    "log_pass_complete",
]
