"""Reporting engine for loaded billing datasets.

Exposes the Reporter class, which holds one loaded dataset and answers:
- get_invoices_for_customer(name) -> invoices ordered by number
- get_invoices_by_customer() -> every customer with its invoices, ordered by name
- get_overdue_invoices(as_of) -> unpaid invoices past terms, ordered by issue date
- get_customers_by_volume() -> customers ranked by total invoiced amount
"""

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, TextIO, Union

from core.config import BillingSettings, get_settings
from core.observability.logging import get_logger
from customer_resolver.resolver import Dataset, load_dataset, load_dataset_files
from models.canonical import Customer, CustomerVolume, Invoice
from parsers.base import Parser, ParseFormat
from parsers.factory import create_parser, create_parser_for_filename


logger = get_logger(__name__)


# =============================================================================
# Sort Keys
# =============================================================================

def by_name(customer: Customer) -> str:
    """Customers sort by last name then first name, concatenated."""
    return customer.last_name + customer.first_name


def by_number(invoice: Invoice) -> int:
    return invoice.number


def by_issue_date(invoice: Invoice) -> date:
    return invoice.issue_date


def by_volume(entry: CustomerVolume):
    """Highest volume first; equal volumes fall back to customer name."""
    return (-entry.volume, entry.customer_name)


# =============================================================================
# Reporter
# =============================================================================

class Reporter:
    """Reads a file of customers and a file of invoices and produces reports.

    The invoice data names its customers, and in loading the data we
    re-connect the invoices so that they refer directly to the customer
    objects in memory.

    Example:
        reporter = Reporter.from_files("data/customers.csv", "data/invoices.csv")
        for invoice in reporter.get_overdue_invoices(date(2021, 1, 8)):
            print(invoice)
    """

    def __init__(
        self,
        parser: Parser,
        customer_path: Optional[Union[str, Path]] = None,
        invoice_path: Optional[Union[str, Path]] = None,
        dataset: Optional[Dataset] = None,
    ):
        """Set up a reporter over a parser and, optionally, backing files.

        When backing files are given and no dataset is supplied, the files
        are loaded immediately.

        Raises:
            DatasetLoadError: If the customer file can't be read
        """
        self.parser = parser
        self.customer_path = Path(customer_path) if customer_path is not None else None
        self.invoice_path = Path(invoice_path) if invoice_path is not None else None
        self.dataset = dataset if dataset is not None else Dataset()
        if dataset is None and self.customer_path is not None and self.invoice_path is not None:
            self.load()

    @classmethod
    def from_streams(
        cls,
        customer_reader: TextIO,
        invoice_reader: TextIO,
        format: Union[ParseFormat, str] = ParseFormat.DEFAULT,
        parser: Optional[Parser] = None,
    ) -> "Reporter":
        """Load from two open text streams.

        Args:
            customer_reader: Customer data
            invoice_reader: Invoice data
            format: Format of both streams
            parser: Explicit parser, taking precedence over ``format``

        Raises:
            DatasetLoadError: If the customer data can't be parsed
        """
        parser = parser or create_parser(format)
        return cls(parser, dataset=load_dataset(parser, customer_reader, invoice_reader))

    @classmethod
    def from_files(
        cls,
        customer_path: Union[str, Path],
        invoice_path: Union[str, Path],
        format: Optional[Union[ParseFormat, str]] = None,
        override: Optional[str] = None,
    ) -> "Reporter":
        """Load from two files; the format follows the customer file's
        extension unless given."""
        if format is None:
            parser = create_parser_for_filename(str(customer_path), override=override)
        else:
            parser = create_parser(format, override=override)
        return cls(parser, customer_path, invoice_path)

    @classmethod
    def from_settings(cls, settings: Optional[BillingSettings] = None) -> "Reporter":
        """Load the files named by the configuration."""
        settings = settings or get_settings()
        return cls.from_files(
            settings.customer_file,
            settings.invoice_file,
            format=settings.format,
            override=settings.parser_override,
        )

    def load(self) -> None:
        """Re-read the backing files, replacing all loaded data.

        Raises:
            ValueError: If this reporter was built from streams
            DatasetLoadError: If the customer file can't be read
        """
        if self.customer_path is None or self.invoice_path is None:
            raise ValueError("This reporter was loaded from streams and has no backing files")
        logger.debug(f"Loading {self.customer_path} and {self.invoice_path} with {self.parser!r}")
        self.dataset = load_dataset_files(self.parser, self.customer_path, self.invoice_path)

    # -------------------------------------------------------------------------
    # Collections
    # -------------------------------------------------------------------------

    @property
    def customers(self) -> Dict[str, Customer]:
        return self.dataset.customers

    @property
    def invoices(self) -> List[Invoice]:
        return self.dataset.invoices

    def get_customers(self) -> List[Customer]:
        """All customers, in load order."""
        return list(self.dataset.customers.values())

    def get_invoices(self) -> List[Invoice]:
        """All invoices, in load order."""
        return list(self.dataset.invoices)

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def get_invoices_for_customer(self, customer_name: str) -> List[Invoice]:
        """Invoices for the named customer, ordered by invoice number.

        An unknown name yields an empty list.
        """
        customer = self.dataset.customers.get(customer_name)
        if customer is None:
            return []
        return sorted(
            (invoice for invoice in self.dataset.invoices if invoice.customer == customer),
            key=by_number,
        )

    def get_invoices_by_customer(self) -> Dict[Customer, List[Invoice]]:
        """Every customer, with or without invoices, ordered by last then
        first name, each with its invoices ordered by number."""
        grouped: Dict[Customer, List[Invoice]] = {
            customer: [] for customer in sorted(self.dataset.customers.values(), key=by_name)
        }
        for invoice in self.dataset.invoices:
            if invoice.customer in grouped:
                grouped[invoice.customer].append(invoice)
        for invoices in grouped.values():
            invoices.sort(key=by_number)
        return grouped

    def get_overdue_invoices(self, as_of: date) -> List[Invoice]:
        """Unpaid invoices past their terms as of the given date, ordered by
        issue date; invoices issued the same day keep their load order."""
        return sorted(
            (invoice for invoice in self.dataset.invoices if invoice.is_overdue(as_of)),
            key=by_issue_date,
        )

    def get_volume(self, customer: Customer) -> Decimal:
        """Total amount invoiced to one customer."""
        return sum(
            (invoice.amount for invoice in self.dataset.invoices if invoice.customer == customer),
            Decimal("0"),
        )

    def get_customers_by_volume(self) -> List[CustomerVolume]:
        """Customers ranked by total invoiced amount, highest first."""
        volumes: Dict[str, Decimal] = {name: Decimal("0") for name in self.dataset.customers}
        for invoice in self.dataset.invoices:
            name = invoice.customer.name
            if name in volumes:
                volumes[name] += invoice.amount
        return sorted(
            (CustomerVolume(customer_name=name, volume=volume) for name, volume in volumes.items()),
            key=by_volume,
        )
