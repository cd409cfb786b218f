"""
Print billing reports for a customer file and an invoice file.

Subcommands:
- customers: every customer in load order
- invoices --customer NAME: one customer's invoices by number
- by-customer: every customer with its invoices
- overdue [--as-of YYYY-MM-DD]: unpaid invoices past terms
- volume: customers ranked by total invoiced amount

File locations and format default to the BILLING_* settings.
"""

import argparse
from datetime import date
from pathlib import Path
from typing import List, Optional

import sys
sys.path.append(str(Path(__file__).resolve().parents[1]))

from core.config import BillingSettings, get_settings
from core.errors import DatasetLoadError, UnknownFormatError
from core.observability.logging import configure_logging, get_logger
from reporting.engine import Reporter
from reporting.text import (
    render_customers,
    render_diagnostics,
    render_invoices,
    render_invoices_by_customer,
    render_overdue,
    render_volume,
)


logger = get_logger(__name__)


def add_dataset_arguments(parser: argparse.ArgumentParser, settings: BillingSettings) -> None:
    """Options shared by the report and update scripts."""
    parser.add_argument("--customers", default=settings.customer_file, help="Customer file")
    parser.add_argument("--invoices", default=settings.invoice_file, help="Invoice file")
    parser.add_argument(
        "--format",
        default=settings.format,
        help="Format tag (CSV, FLAT, EXPORT, EXCEL, JSON); by extension when omitted",
    )
    parser.add_argument(
        "--parser",
        dest="parser_override",
        default=settings.parser_override,
        help="Registered parser name to use instead of the format",
    )


def build_parser(settings: BillingSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Billing reports")
    add_dataset_arguments(parser, settings)
    parser.add_argument("--show-skipped", action="store_true", help="List records that were skipped")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("customers", help="List customers")
    invoices = commands.add_parser("invoices", help="List one customer's invoices")
    invoices.add_argument("--customer", required=True, help='Customer name, e.g. "Customer Two"')
    commands.add_parser("by-customer", help="Invoices grouped by customer")
    overdue = commands.add_parser("overdue", help="Overdue invoices")
    overdue.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Reference date (YYYY-MM-DD), default today",
    )
    commands.add_parser("volume", help="Customers by invoiced volume")
    return parser


def render(reporter: Reporter, args: argparse.Namespace) -> List[str]:
    if args.command == "customers":
        return render_customers(reporter.get_customers())
    if args.command == "invoices":
        return render_invoices(
            reporter.get_invoices_for_customer(args.customer),
            title=f"Invoices for {args.customer}",
        )
    if args.command == "by-customer":
        return render_invoices_by_customer(reporter.get_invoices_by_customer())
    if args.command == "overdue":
        as_of = args.as_of or date.today()
        return render_overdue(reporter.get_overdue_invoices(as_of), as_of)
    return render_volume(reporter.get_customers_by_volume())


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    configure_logging(level=settings.log_level_value, json_format=settings.log_json)
    args = build_parser(settings).parse_args(argv)

    try:
        reporter = Reporter.from_files(
            args.customers,
            args.invoices,
            format=args.format,
            override=args.parser_override,
        )
    except (DatasetLoadError, UnknownFormatError) as e:
        logger.error(f"Couldn't load billing data: {e}")
        print(f"❌ {e}")
        return 1

    for line in render(reporter, args):
        print(line)

    if args.show_skipped:
        for diagnostics in (reporter.dataset.customer_diagnostics, reporter.dataset.invoice_diagnostics):
            for line in render_diagnostics(diagnostics):
                print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
