"""Mutation engine for billing datasets.

The Updater loads a customer file and an invoice file, applies creates and
payments in memory, and writes both files back through the same parser on
save(). A rejected mutation raises a MutationError subclass and leaves the
in-memory dataset exactly as it was.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from core.config import BillingSettings, get_settings
from core.errors import (
    CustomerNotFoundError,
    DuplicateCustomerError,
    InvoiceAlreadyPaidError,
    InvoiceNotFoundError,
    UnknownTermsError,
)
from core.observability.logging import get_logger, with_correlation
from customer_resolver.resolver import load_dataset_files
from models.canonical import Customer, Invoice, Terms, customer_name
from models.refs import DataReference
from parsers.base import Parser, ParseFormat
from parsers.factory import create_parser, create_parser_for_filename
from reporting.engine import by_number
from storage.artifacts import render_text, store_text


logger = get_logger(__name__)


class Updater:
    """Carries out specific updates to the billing data.

    Example:
        updater = Updater("data/customers.json", "data/invoices.json")
        updater.create_customer("Merle", "Haggard", Terms.CASH)
        updater.pay_invoice(107)
        updater.save()
    """

    def __init__(
        self,
        customer_path: Union[str, Path],
        invoice_path: Union[str, Path],
        format: Optional[Union[ParseFormat, str]] = None,
        override: Optional[str] = None,
        parser: Optional[Parser] = None,
        today: Callable[[], date] = date.today,
    ):
        """Load the two files, choosing the parser by format or extension.

        Args:
            customer_path: Customer source and save destination
            invoice_path: Invoice source and save destination
            format: Format tag; the customer file's extension when omitted
            override: Registered parser name that replaces the format
            parser: Explicit parser, taking precedence over both
            today: Source of the current date for new and paid invoices

        Raises:
            DatasetLoadError: If the customer file can't be read
        """
        self.customer_path = Path(customer_path)
        self.invoice_path = Path(invoice_path)
        if parser is not None:
            self.parser = parser
        elif format is None:
            self.parser = create_parser_for_filename(str(customer_path), override=override)
        else:
            self.parser = create_parser(format, override=override)
        self.today = today

        self.customers: Dict[str, Customer] = {}
        self.invoices: Dict[int, Invoice] = {}
        self.load()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[BillingSettings] = None,
        today: Callable[[], date] = date.today,
    ) -> "Updater":
        """Build an updater over the files named by the configuration."""
        settings = settings or get_settings()
        return cls(
            settings.customer_file,
            settings.invoice_file,
            format=settings.format,
            override=settings.parser_override,
            today=today,
        )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load(self) -> None:
        """Re-read both files, discarding any unsaved changes.

        Raises:
            DatasetLoadError: If the customer file can't be read
        """
        dataset = load_dataset_files(self.parser, self.customer_path, self.invoice_path)
        self.customers = dataset.customers
        self.invoices = {invoice.number: invoice for invoice in dataset.invoices}

    def save(self) -> Tuple[DataReference, DataReference]:
        """Write every customer and every invoice back to the backing files.

        Each file is overwritten in full. Invoices are written in number
        order. Both files are rendered before either is written, so a value
        the format can't hold leaves both files untouched.

        Returns:
            References to the customer file and the invoice file

        Raises:
            FieldWidthError: If a value doesn't fit the fixed-width format
        """
        with with_correlation(dataset=f"{self.customer_path}+{self.invoice_path}", operation="save"):
            customers = list(self.customers.values())
            invoices = sorted(self.invoices.values(), key=by_number)

            customer_text = render_text(lambda writer: self.parser.produce_customers(customers, writer))
            invoice_text = render_text(lambda writer: self.parser.produce_invoices(invoices, writer))

            customer_ref = store_text(self.customer_path, customer_text)
            invoice_ref = store_text(self.invoice_path, invoice_text)
            logger.info(
                f"Saved {len(customers)} customers and {len(invoices)} invoices",
                extra_fields={
                    "customer_hash": customer_ref.content_hash[:16],
                    "invoice_hash": invoice_ref.content_hash[:16],
                },
            )
            return customer_ref, invoice_ref

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    @property
    def next_invoice_number(self) -> int:
        return max(self.invoices, default=0) + 1

    def create_customer(self, first_name: str, last_name: str, terms: Union[Terms, str]) -> Customer:
        """Add a customer.

        Raises:
            DuplicateCustomerError: If a customer with the same name exists
            UnknownTermsError: If terms is a string naming no Terms member
        """
        name = customer_name(first_name, last_name)
        if name in self.customers:
            raise DuplicateCustomerError(name)
        if not isinstance(terms, Terms):
            try:
                terms = Terms.from_name(terms)
            except ValueError:
                raise UnknownTermsError(terms) from None

        customer = Customer(first_name=first_name, last_name=last_name, terms=terms)
        self.customers[name] = customer
        logger.info(f"Created customer {name}", extra_fields={"terms": terms.value})
        return customer

    def create_invoice(self, customer_name: str, amount: Union[Decimal, int, float, str]) -> Invoice:
        """Add an unpaid invoice dated today with the next free number.

        Raises:
            CustomerNotFoundError: If no customer has the given name
        """
        customer = self.customers.get(customer_name)
        if customer is None:
            raise CustomerNotFoundError(customer_name)

        invoice = Invoice(
            number=self.next_invoice_number,
            customer=customer,
            amount=amount,
            issue_date=self.today(),
        )
        self.invoices[invoice.number] = invoice
        logger.info(
            f"Created invoice {invoice.number} for {customer_name}",
            extra_fields={"amount": str(invoice.amount)},
        )
        return invoice

    def pay_invoice(self, number: int) -> Invoice:
        """Record today as the paid date of an invoice.

        Raises:
            InvoiceNotFoundError: If no invoice has the given number
            InvoiceAlreadyPaidError: If the invoice was already paid
        """
        invoice = self.invoices.get(number)
        if invoice is None:
            raise InvoiceNotFoundError(number)
        if invoice.is_paid:
            raise InvoiceAlreadyPaidError(number)

        invoice.paid_date = self.today()
        logger.info(f"Paid invoice {number}", extra_fields={"paid_date": invoice.paid_date.isoformat()})
        return invoice

    def get_invoices(self) -> List[Invoice]:
        """All invoices in number order."""
        return sorted(self.invoices.values(), key=by_number)
