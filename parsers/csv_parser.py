"""Delimited CSV parser (the default format).

Customer records:  first,last,TERMS
Invoice records:   number,first,last,amount,yyyy-MM-dd,paid-date-or-empty

Customer records must have exactly three fields; invoice records at least
six. Anything else is skipped.
"""

import csv
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence, TextIO

from models.canonical import Customer, Invoice, Terms
from parsers.base import Parser, ParseFormat, RecordResult, SourceRecord, lookup_customer


CUSTOMER_COLUMNS = 3
CUSTOMER_FIRST_NAME_COLUMN = 0
CUSTOMER_LAST_NAME_COLUMN = 1
CUSTOMER_TERMS_COLUMN = 2

INVOICE_MIN_COLUMNS = 6
INVOICE_NUMBER_COLUMN = 0
INVOICE_FIRST_NAME_COLUMN = 1
INVOICE_LAST_NAME_COLUMN = 2
INVOICE_AMOUNT_COLUMN = 3
INVOICE_DATE_COLUMN = 4
INVOICE_PAID_DATE_COLUMN = 5

DATE_FORMAT = "%Y-%m-%d"

CUSTOMER_HEADER = ("First", "Last", "Terms")
INVOICE_HEADER = ("Number", "CustomerFirst", "CustomerLast", "Amount", "Date", "Paid")

CENTS = Decimal("0.01")


def parse_date(text: str) -> date:
    return datetime.strptime(text.strip(), DATE_FORMAT).date()


class CSVParser(Parser):
    """A parser for comma-separated customer and invoice records.

    Dialect variations (see parsers/dialect_csv.py) override the class
    attributes below rather than the record logic.
    """

    format = ParseFormat.CSV

    # Literal written for absent values and recognized as absent on read
    null_string: str = ""
    # Whether a header row is written on produce and skipped on parse
    header: bool = False

    def _reader_options(self) -> dict:
        return {"delimiter": ",", "quotechar": '"'}

    def _rows(self, reader: TextIO) -> Iterator[SourceRecord]:
        csv_reader = csv.reader(reader, **self._reader_options())
        header_pending = self.header
        for fields in csv_reader:
            if not fields or fields == [""]:
                continue
            if header_pending:
                header_pending = False
                continue
            yield SourceRecord(
                line_number=csv_reader.line_num,
                raw=",".join(fields),
                data=fields,
            )

    def _customer_records(self, reader: TextIO) -> Iterator[SourceRecord]:
        return self._rows(reader)

    def _invoice_records(self, reader: TextIO) -> Iterator[SourceRecord]:
        return self._rows(reader)

    def _value(self, text: str) -> Optional[str]:
        """Map the null literal (or an empty field) to None."""
        if text == self.null_string or text.strip() == "":
            return None
        return text

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    def _parse_customer(self, record: SourceRecord) -> RecordResult[Customer]:
        fields: List[str] = record.data
        if len(fields) != CUSTOMER_COLUMNS:
            return RecordResult.failure("Incorrect number of fields")

        try:
            terms = Terms.from_name(fields[CUSTOMER_TERMS_COLUMN])
        except ValueError:
            return RecordResult.failure("Couldn't parse terms value")

        return RecordResult.success(Customer(
            first_name=fields[CUSTOMER_FIRST_NAME_COLUMN],
            last_name=fields[CUSTOMER_LAST_NAME_COLUMN],
            terms=terms,
        ))

    def _parse_invoice(
        self,
        record: SourceRecord,
        customers: Mapping[str, Customer],
    ) -> RecordResult[Invoice]:
        fields: List[str] = record.data
        if len(fields) < INVOICE_MIN_COLUMNS:
            return RecordResult.failure("Incorrect number of fields")

        try:
            number = int(fields[INVOICE_NUMBER_COLUMN])
            first = fields[INVOICE_FIRST_NAME_COLUMN]
            last = fields[INVOICE_LAST_NAME_COLUMN]
            amount = Decimal(fields[INVOICE_AMOUNT_COLUMN].strip())
            issue_date = parse_date(fields[INVOICE_DATE_COLUMN])
            paid_text = self._value(fields[INVOICE_PAID_DATE_COLUMN])
            paid_date = parse_date(paid_text) if paid_text is not None else None
        except (ValueError, InvalidOperation):
            return RecordResult.failure("Couldn't parse values")

        customer = lookup_customer(customers, first, last)
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

    def _format_amount(self, amount: Decimal) -> Decimal:
        return amount.quantize(CENTS)

    def _customer_row(self, customer: Customer) -> List[Any]:
        return [customer.first_name, customer.last_name, customer.terms.value]

    def _invoice_row(self, invoice: Invoice) -> List[Any]:
        return [
            invoice.number,
            invoice.customer.first_name,
            invoice.customer.last_name,
            self._format_amount(invoice.amount),
            invoice.issue_date.strftime(DATE_FORMAT),
            invoice.paid_date.strftime(DATE_FORMAT) if invoice.paid_date else None,
        ]

    def _write_rows(self, rows: Iterable[Sequence[Any]], writer: TextIO) -> None:
        csv_writer = csv.writer(writer, lineterminator="\n")
        for row in rows:
            csv_writer.writerow([self.null_string if value is None else value for value in row])

    def produce_customers(self, customers: Iterable[Customer], writer: TextIO) -> None:
        """Write the given customers, preceded by a header if configured."""
        rows = (self._customer_row(customer) for customer in customers)
        if self.header:
            rows = _prepend(CUSTOMER_HEADER, rows)
        self._write_rows(rows, writer)

    def produce_invoices(self, invoices: Iterable[Invoice], writer: TextIO) -> None:
        """Write the given invoices, preceded by a header if configured."""
        rows = (self._invoice_row(invoice) for invoice in invoices)
        if self.header:
            rows = _prepend(INVOICE_HEADER, rows)
        self._write_rows(rows, writer)


def _prepend(first: Sequence[Any], rows: Iterable[Sequence[Any]]) -> Iterator[Sequence[Any]]:
    yield first
    yield from rows
