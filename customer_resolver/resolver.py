"""Customer Identity Resolution.

This module links parsed invoices to the canonical customer objects of a
dataset:
1. Scan the parsed customers and index them by derived name (last one wins)
2. Parse invoices with that index, so each invoice holds the very object in
   the index rather than an equal copy
3. Drop invoices whose customer can't be found (done by the parsers) and
   invoices that repeat an earlier number

A failed customer pass makes the whole load fail: invoices are meaningless
without the customer set.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, TextIO, Union

from core.errors import DatasetLoadError
from core.observability.logging import get_logger, with_correlation
from models.canonical import Customer, Invoice, customer_name
from models.refs import ParseDiagnostics
from parsers.base import Parser
from storage.artifacts import open_for_read


logger = get_logger(__name__)


@dataclass
class Dataset:
    """One loaded customer/invoice pair.

    Attributes:
        customers: Canonical customers keyed by derived name
        invoices: Invoices in source order, each referencing a map entry
        customer_diagnostics: What happened during the customer pass
        invoice_diagnostics: What happened during the invoice pass
    """
    customers: Dict[str, Customer] = field(default_factory=dict)
    invoices: List[Invoice] = field(default_factory=list)
    customer_diagnostics: Optional[ParseDiagnostics] = None
    invoice_diagnostics: Optional[ParseDiagnostics] = None

    @property
    def skipped_records(self) -> int:
        return sum(
            len(d.skipped)
            for d in (self.customer_diagnostics, self.invoice_diagnostics)
            if d is not None
        )


def customer_key(first_name: str, last_name: str) -> str:
    """Natural key for a customer: first and last name joined by a space."""
    return customer_name(first_name, last_name)


def build_customer_map(customers: Iterable[Customer]) -> Dict[str, Customer]:
    """Index customers by derived name.

    On collision the later customer replaces the earlier one, as ordinary
    dict insertion does.
    """
    customer_map: Dict[str, Customer] = {}
    for customer in customers:
        if customer.name in customer_map:
            logger.warning(
                f"Duplicate customer name, keeping the later record: {customer.name}"
            )
        customer_map[customer.name] = customer
    return customer_map


def drop_duplicate_numbers(invoices: Iterable[Invoice]) -> List[Invoice]:
    """Keep the first invoice for each number."""
    seen = set()
    unique: List[Invoice] = []
    for invoice in invoices:
        if invoice.number in seen:
            logger.warning(
                f"Duplicate invoice number, skipping later record: {invoice.number}"
            )
            continue
        seen.add(invoice.number)
        unique.append(invoice)
    return unique


def verify_identity(dataset: Dataset) -> List[int]:
    """Find invoices whose customer isn't the object held in the map.

    Returns:
        Numbers of offending invoices (empty for a correctly linked dataset)
    """
    return [
        invoice.number
        for invoice in dataset.invoices
        if dataset.customers.get(invoice.customer.name) is not invoice.customer
    ]


def _link(
    customers: List[Customer],
    customer_diagnostics: ParseDiagnostics,
    parse_invoices: Callable[[Dict[str, Customer], ParseDiagnostics], List[Invoice]],
) -> Dataset:
    customer_map = build_customer_map(customers)

    invoice_diagnostics = ParseDiagnostics(record_kind="invoice")
    invoices = drop_duplicate_numbers(parse_invoices(customer_map, invoice_diagnostics))

    dataset = Dataset(
        customers=customer_map,
        invoices=invoices,
        customer_diagnostics=customer_diagnostics,
        invoice_diagnostics=invoice_diagnostics,
    )
    logger.info(
        f"Loaded {len(customer_map)} customers and {len(invoices)} invoices",
        extra_fields={"skipped": dataset.skipped_records},
    )
    if logger.isEnabledFor(logging.DEBUG):
        unlinked = verify_identity(dataset)
        if unlinked:
            logger.warning(f"Invoices not linked to canonical customers: {unlinked}")
        else:
            logger.debug("Identity check passed: every invoice refers to its canonical customer")
    return dataset


def load_dataset(
    parser: Parser,
    customer_reader: TextIO,
    invoice_reader: TextIO,
    source: str = "streams",
) -> Dataset:
    """Parse a customer stream and an invoice stream into a linked Dataset.

    Args:
        parser: Parser for the format of both streams
        customer_reader: Customer text stream
        invoice_reader: Invoice text stream
        source: Label for log correlation

    Returns:
        Dataset with invoices linked to canonical customers

    Raises:
        DatasetLoadError: If the customer stream can't be parsed at all
    """
    with with_correlation(dataset=source, operation="load"):
        customer_diagnostics = ParseDiagnostics(record_kind="customer")
        customers = parser.parse_customers(customer_reader, customer_diagnostics)
        if not customer_diagnostics.ok:
            raise DatasetLoadError(customer_diagnostics.fatal, source=source)

        return _link(
            customers,
            customer_diagnostics,
            lambda customer_map, diagnostics: parser.parse_invoices(invoice_reader, customer_map, diagnostics),
        )


def load_dataset_files(
    parser: Parser,
    customer_path: Union[str, Path],
    invoice_path: Union[str, Path],
) -> Dataset:
    """Load a dataset from its two backing files.

    Each file is open only for its own pass. A missing or unreadable invoice
    file leaves the dataset with no invoices; the failure is recorded in the
    invoice diagnostics.

    Raises:
        DatasetLoadError: If the customer file is missing or can't be parsed
    """
    source = f"{customer_path}+{invoice_path}"
    with with_correlation(dataset=source, operation="load"):
        customer_diagnostics = ParseDiagnostics(record_kind="customer")
        try:
            with open_for_read(customer_path) as reader, with_correlation(source_file=str(customer_path)):
                customers = parser.parse_customers(reader, customer_diagnostics)
        except OSError as ex:
            logger.error(f"Couldn't open customer file: {customer_path}")
            raise DatasetLoadError(f"Couldn't open customer file: {ex}", source=str(customer_path)) from ex

        if not customer_diagnostics.ok:
            raise DatasetLoadError(customer_diagnostics.fatal, source=str(customer_path))

        def parse_invoices(customer_map: Dict[str, Customer], diagnostics: ParseDiagnostics) -> List[Invoice]:
            try:
                with open_for_read(invoice_path) as reader, with_correlation(source_file=str(invoice_path)):
                    return parser.parse_invoices(reader, customer_map, diagnostics)
            except OSError as ex:
                logger.error(f"Couldn't open invoice file: {invoice_path}")
                diagnostics.fail(f"Couldn't open invoice file: {ex}")
                return []

        return _link(customers, customer_diagnostics, parse_invoices)
