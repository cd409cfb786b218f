"""JSON parser.

Both files hold a single array. Dates are ISO-8601 strings, amounts are JSON
numbers, and each invoice nests a full copy of its customer:

    [{"number":1,
      "customer":{"firstName":"Customer","lastName":"One","terms":"CASH"},
      "amount":100.0,"theDate":"2021-01-04","paidDate":null}]

On parse, the nested customer is used only for its names; the invoice is
linked to the canonical Customer from the supplied map instead.
"""

import json
from typing import Any, Iterable, Iterator, List, Mapping, TextIO

from pydantic import ValidationError

from core.errors import MalformedSourceError
from models.canonical import Customer, Invoice
from parsers.base import Parser, ParseFormat, RecordResult, SourceRecord, lookup_customer


JSON_SEPARATORS = (",", ":")


def _first_error(ex: ValidationError) -> str:
    errors = ex.errors()
    if not errors:
        return str(ex)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else first.get("msg", str(ex))


class JSONParser(Parser):
    """A parser for whole-collection JSON arrays."""

    format = ParseFormat.JSON

    def _elements(self, reader: TextIO) -> Iterator[SourceRecord]:
        try:
            document = json.load(reader)
        except json.JSONDecodeError as ex:
            raise MalformedSourceError(f"Invalid JSON: {ex}") from ex

        if not isinstance(document, list):
            raise MalformedSourceError(
                f"Expected a JSON array, found {type(document).__name__}"
            )

        for index, element in enumerate(document, start=1):
            yield SourceRecord(
                line_number=index,
                raw=json.dumps(element, separators=JSON_SEPARATORS, default=str),
                data=element,
            )

    def _customer_records(self, reader: TextIO) -> Iterator[SourceRecord]:
        return self._elements(reader)

    def _invoice_records(self, reader: TextIO) -> Iterator[SourceRecord]:
        return self._elements(reader)

    def _parse_customer(self, record: SourceRecord) -> RecordResult[Customer]:
        try:
            return RecordResult.success(Customer.model_validate(record.data))
        except ValidationError as ex:
            return RecordResult.failure(f"Couldn't parse customer: {_first_error(ex)}")

    def _parse_invoice(
        self,
        record: SourceRecord,
        customers: Mapping[str, Customer],
    ) -> RecordResult[Invoice]:
        data: Any = record.data
        if not isinstance(data, dict):
            return RecordResult.failure("Invoice is not an object")

        nested = data.get("customer")
        if not isinstance(nested, dict):
            return RecordResult.failure("Missing customer")

        first_name, last_name = nested.get("firstName"), nested.get("lastName")
        if not isinstance(first_name, str) or not isinstance(last_name, str):
            return RecordResult.failure("Missing customer name")

        customer = lookup_customer(customers, first_name, last_name)
        if customer is None:
            return RecordResult.failure("Unknown customer")

        try:
            invoice = Invoice.model_validate({**data, "customer": customer})
        except ValidationError as ex:
            return RecordResult.failure(f"Couldn't parse invoice: {_first_error(ex)}")
        return RecordResult.success(invoice)

    # -------------------------------------------------------------------------
    # Production
    # -------------------------------------------------------------------------

    def _write(self, records: List[dict], writer: TextIO) -> None:
        json.dump(records, writer, separators=JSON_SEPARATORS)

    def produce_customers(self, customers: Iterable[Customer], writer: TextIO) -> None:
        """Serialize the customers as one array."""
        self._write([c.model_dump(mode="json", by_alias=True) for c in customers], writer)

    def produce_invoices(self, invoices: Iterable[Invoice], writer: TextIO) -> None:
        """Serialize the invoices as one array, each nesting its customer."""
        self._write([i.model_dump(mode="json", by_alias=True) for i in invoices], writer)
