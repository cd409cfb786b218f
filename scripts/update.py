"""
Apply one update to the billing files and save them.

Subcommands:
- add-customer FIRST LAST TERMS
- add-invoice "FIRST LAST" AMOUNT
- pay NUMBER

A rejected update, or one the file format can't hold, prints the reason,
leaves the files untouched and exits with status 1.
"""

import argparse
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

import sys
sys.path.append(str(Path(__file__).resolve().parents[1]))

from core.config import BillingSettings, get_settings
from core.errors import DatasetLoadError, FieldWidthError, MutationError, UnknownFormatError
from core.observability.logging import configure_logging, get_logger
from models.canonical import Terms
from scripts.report import add_dataset_arguments
from updater.engine import Updater


logger = get_logger(__name__)


def _amount(text: str) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"Not an amount: {text}") from None


def build_parser(settings: BillingSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Billing updates")
    add_dataset_arguments(parser, settings)

    commands = parser.add_subparsers(dest="command", required=True)
    customer = commands.add_parser("add-customer", help="Create a customer")
    customer.add_argument("first_name")
    customer.add_argument("last_name")
    customer.add_argument("terms", choices=[t.value for t in Terms])

    invoice = commands.add_parser("add-invoice", help="Create an invoice dated today")
    invoice.add_argument("customer", help='Customer name, e.g. "Customer Two"')
    invoice.add_argument("amount", type=_amount)

    pay = commands.add_parser("pay", help="Mark an invoice paid today")
    pay.add_argument("number", type=int)
    return parser


def apply(updater: Updater, args: argparse.Namespace) -> str:
    """Run the requested mutation and describe the result."""
    if args.command == "add-customer":
        customer = updater.create_customer(args.first_name, args.last_name, Terms.from_name(args.terms))
        return f"Created {customer}"
    if args.command == "add-invoice":
        invoice = updater.create_invoice(args.customer, args.amount)
        return f"Created {invoice}"
    invoice = updater.pay_invoice(args.number)
    return f"Paid invoice {invoice.number} on {invoice.paid_date.isoformat()}"


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    configure_logging(level=settings.log_level_value, json_format=settings.log_json)
    args = build_parser(settings).parse_args(argv)

    try:
        updater = Updater(
            args.customers,
            args.invoices,
            format=args.format,
            override=args.parser_override,
        )
    except (DatasetLoadError, UnknownFormatError) as e:
        logger.error(f"Couldn't load billing data: {e}")
        print(f"❌ {e}")
        return 1

    try:
        message = apply(updater, args)
    except MutationError as e:
        logger.warning(f"Update rejected: {e}")
        print(f"❌ {e}")
        return 1

    try:
        customer_ref, invoice_ref = updater.save()
    except FieldWidthError as e:
        logger.error(f"Couldn't save billing data: {e}")
        print(f"❌ {e}")
        return 1

    print(f"✅ {message}")
    print(f"Saved {customer_ref.storage_uri} and {invoice_ref.storage_uri}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
