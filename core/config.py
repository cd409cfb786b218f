"""Settings for the billing ledger.

Reads configuration from environment variables, loading a ``.env`` file from
the repository root first if one exists:

- BILLING_CUSTOMER_FILE: Path to the customer file (default "data/customers.csv")
- BILLING_INVOICE_FILE: Path to the invoice file (default "data/invoices.csv")
- BILLING_FORMAT: Format tag (CSV, FLAT, EXPORT, EXCEL, JSON). When unset the
  format follows the customer file's extension.
- BILLING_PARSER: Name of a registered parser that overrides the format tag
- BILLING_LOG_LEVEL: Logging level name (default "INFO")
- BILLING_LOG_JSON: "true" for JSON log lines
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

env_path = Path(__file__).resolve().parents[1] / ".env"
if env_path.exists():
    load_dotenv(env_path)


DEFAULT_CUSTOMER_FILE = "data/customers.csv"
DEFAULT_INVOICE_FILE = "data/invoices.csv"


class BillingSettings(BaseModel):
    """Resolved configuration for one process."""
    customer_file: str = Field(default=DEFAULT_CUSTOMER_FILE, description="Customer source/destination")
    invoice_file: str = Field(default=DEFAULT_INVOICE_FILE, description="Invoice source/destination")
    format: Optional[str] = Field(default=None, description="Format tag; None means by file extension")
    parser_override: Optional[str] = Field(default=None, description="Registered parser name to use instead")
    log_level: str = Field(default="INFO", description="Logging level name")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    @property
    def log_level_value(self) -> int:
        """Numeric logging level, falling back to INFO for unknown names."""
        value = logging.getLevelName(self.log_level.upper())
        return value if isinstance(value, int) else logging.INFO


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_settings() -> BillingSettings:
    """Build settings from the current environment.

    Missing variables fall back to the built-in defaults.
    """
    return BillingSettings(
        customer_file=os.getenv("BILLING_CUSTOMER_FILE", DEFAULT_CUSTOMER_FILE),
        invoice_file=os.getenv("BILLING_INVOICE_FILE", DEFAULT_INVOICE_FILE),
        format=os.getenv("BILLING_FORMAT") or None,
        parser_override=os.getenv("BILLING_PARSER") or None,
        log_level=os.getenv("BILLING_LOG_LEVEL", "INFO"),
        log_json=_env_flag("BILLING_LOG_JSON"),
    )
