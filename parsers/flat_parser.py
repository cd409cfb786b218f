"""Fixed-width flat file parser.

Customer layout (34 columns):
    [0,12)  first name, left-aligned
    [12,24) last name, left-aligned
    [24,34) terms, left-aligned

Invoice layout (48 columns):
    [0,4)   number, right-aligned
    [4,16)  customer first name, left-aligned
    [16,28) customer last name, left-aligned
    [28,36) amount, right-aligned, two decimal places
    [36,42) issue date, MMddyy
    [42,48) paid date, MMddyy, or blank when unpaid
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, Iterator, Mapping, TextIO

from core.errors import FieldWidthError
from models.canonical import Customer, Invoice, Terms
from parsers.base import Parser, ParseFormat, RecordResult, SourceRecord, lookup_customer


CUSTOMER_FIRST_NAME_OFFSET = 0
CUSTOMER_FIRST_NAME_LENGTH = 12
CUSTOMER_LAST_NAME_OFFSET = CUSTOMER_FIRST_NAME_OFFSET + CUSTOMER_FIRST_NAME_LENGTH
CUSTOMER_LAST_NAME_LENGTH = 12
CUSTOMER_TERMS_OFFSET = CUSTOMER_LAST_NAME_OFFSET + CUSTOMER_LAST_NAME_LENGTH
CUSTOMER_TERMS_LENGTH = 10
CUSTOMER_LENGTH = CUSTOMER_TERMS_OFFSET + CUSTOMER_TERMS_LENGTH

INVOICE_NUMBER_OFFSET = 0
INVOICE_NUMBER_LENGTH = 4
INVOICE_FIRST_NAME_OFFSET = INVOICE_NUMBER_OFFSET + INVOICE_NUMBER_LENGTH
INVOICE_FIRST_NAME_LENGTH = 12
INVOICE_LAST_NAME_OFFSET = INVOICE_FIRST_NAME_OFFSET + INVOICE_FIRST_NAME_LENGTH
INVOICE_LAST_NAME_LENGTH = 12
INVOICE_AMOUNT_OFFSET = INVOICE_LAST_NAME_OFFSET + INVOICE_LAST_NAME_LENGTH
INVOICE_AMOUNT_LENGTH = 8
INVOICE_DATE_OFFSET = INVOICE_AMOUNT_OFFSET + INVOICE_AMOUNT_LENGTH
INVOICE_DATE_LENGTH = 6
INVOICE_PAID_DATE_OFFSET = INVOICE_DATE_OFFSET + INVOICE_DATE_LENGTH
INVOICE_PAID_DATE_LENGTH = 6
INVOICE_LENGTH = INVOICE_PAID_DATE_OFFSET + INVOICE_PAID_DATE_LENGTH

DATE_FORMAT = "%m%d%y"


def _check_width(text: str, width: int, field: str) -> str:
    if len(text) > width:
        raise FieldWidthError(field, text, width)
    return text


def _left(text: str, width: int, field: str) -> str:
    return _check_width(text, width, field).ljust(width)


def _right(text: str, width: int, field: str) -> str:
    return _check_width(text, width, field).rjust(width)


def _parse_flat_date(text: str) -> date:
    if len(text) != INVOICE_DATE_LENGTH or not text.isdigit():
        raise ValueError(f"Not an MMddyy date: {text!r}")
    return datetime.strptime(text, DATE_FORMAT).date()


class FlatParser(Parser):
    """A parser that can read and write the fixed-width flat format."""

    format = ParseFormat.FLAT

    def _lines(self, reader: TextIO) -> Iterator[SourceRecord]:
        for line_number, line in enumerate(reader, start=1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            yield SourceRecord(line_number=line_number, raw=line, data=line)

    def _customer_records(self, reader: TextIO) -> Iterator[SourceRecord]:
        return self._lines(reader)

    def _invoice_records(self, reader: TextIO) -> Iterator[SourceRecord]:
        return self._lines(reader)

    def _parse_customer(self, record: SourceRecord) -> RecordResult[Customer]:
        line: str = record.data
        if len(line) < CUSTOMER_LENGTH:
            return RecordResult.failure("Incorrect length")

        first_name = line[CUSTOMER_FIRST_NAME_OFFSET:CUSTOMER_LAST_NAME_OFFSET].strip()
        last_name = line[CUSTOMER_LAST_NAME_OFFSET:CUSTOMER_TERMS_OFFSET].strip()
        try:
            terms = Terms.from_name(line[CUSTOMER_TERMS_OFFSET:CUSTOMER_LENGTH].strip())
        except ValueError:
            return RecordResult.failure("Couldn't parse terms value")

        return RecordResult.success(Customer(first_name=first_name, last_name=last_name, terms=terms))

    def _parse_invoice(
        self,
        record: SourceRecord,
        customers: Mapping[str, Customer],
    ) -> RecordResult[Invoice]:
        line: str = record.data
        if len(line) < INVOICE_LENGTH:
            return RecordResult.failure("Incorrect length")

        try:
            number = int(line[INVOICE_NUMBER_OFFSET:INVOICE_FIRST_NAME_OFFSET].strip())
            first_name = line[INVOICE_FIRST_NAME_OFFSET:INVOICE_LAST_NAME_OFFSET].strip()
            last_name = line[INVOICE_LAST_NAME_OFFSET:INVOICE_AMOUNT_OFFSET].strip()
            amount = Decimal(line[INVOICE_AMOUNT_OFFSET:INVOICE_DATE_OFFSET].strip())
            issue_date = _parse_flat_date(line[INVOICE_DATE_OFFSET:INVOICE_PAID_DATE_OFFSET])
            paid_text = line[INVOICE_PAID_DATE_OFFSET:INVOICE_LENGTH]
            paid_date = _parse_flat_date(paid_text) if paid_text.strip() else None
        except (ValueError, InvalidOperation):
            return RecordResult.failure("Couldn't parse values")

        customer = lookup_customer(customers, first_name, last_name)
        if customer is None:
            return RecordResult.failure("Unknown customer")

        try:
            invoice = Invoice(
                number=number,
                customer=customer,
                amount=amount,
                issue_date=issue_date,
                paid_date=paid_date,
            )
        except ValueError:
            return RecordResult.failure("Invalid invoice values")
        return RecordResult.success(invoice)

    # -------------------------------------------------------------------------
    # Production
    # -------------------------------------------------------------------------

    def format_customer(self, customer: Customer) -> str:
        """Flat representation of one customer, including the newline.

        Raises:
            FieldWidthError: If a name doesn't fit its column
        """
        return (
            _left(customer.first_name, CUSTOMER_FIRST_NAME_LENGTH, "first name")
            + _left(customer.last_name, CUSTOMER_LAST_NAME_LENGTH, "last name")
            + _left(customer.terms.value, CUSTOMER_TERMS_LENGTH, "terms")
            + "\n"
        )

    def format_invoice(self, invoice: Invoice) -> str:
        """Flat representation of one invoice, including the newline.

        Raises:
            FieldWidthError: If the number, a name or the amount doesn't fit
                its column
        """
        paid = invoice.paid_date.strftime(DATE_FORMAT) if invoice.paid_date else ""
        return (
            _right(str(invoice.number), INVOICE_NUMBER_LENGTH, "invoice number")
            + _left(invoice.customer.first_name, INVOICE_FIRST_NAME_LENGTH, "first name")
            + _left(invoice.customer.last_name, INVOICE_LAST_NAME_LENGTH, "last name")
            + _right(f"{invoice.amount:.2f}", INVOICE_AMOUNT_LENGTH, "amount")
            + invoice.issue_date.strftime(DATE_FORMAT)
            + paid.rjust(INVOICE_PAID_DATE_LENGTH)
            + "\n"
        )

    def produce_customers(self, customers: Iterable[Customer], writer: TextIO) -> None:
        for customer in customers:
            writer.write(self.format_customer(customer))

    def produce_invoices(self, invoices: Iterable[Invoice], writer: TextIO) -> None:
        for invoice in invoices:
            writer.write(self.format_invoice(invoice))
