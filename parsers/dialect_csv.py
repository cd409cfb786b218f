"""CSV dialect parsers: the export format and the spreadsheet format.

Export dialect:
    "First","Last","Terms"
    "Customer","One","CASH"

    "Number","CustomerFirst","CustomerLast","Amount","Date","Paid"
    1,"Customer","One",100,"2021-01-04",NULL

Spreadsheet dialect:
    Customer,One,CASH
    1,Customer,One,100,2021-01-04,
"""

from decimal import Decimal
from typing import Any, Iterable, Sequence, TextIO

from parsers.base import ParseFormat
from parsers.csv_parser import CSVParser


def quote_non_numeric(value: Any, null_string: str) -> str:
    """Render one export field: numbers bare, absent values as the null
    literal, everything else double-quoted with embedded quotes doubled."""
    if value is None:
        return null_string
    if isinstance(value, (int, Decimal)) and not isinstance(value, bool):
        return str(value)
    return '"' + str(value).replace('"', '""') + '"'


class DialectCSVParser(CSVParser):
    """A CSV parser configured for one of the supported dialects.

    Use the factory class methods rather than the constructor.
    """

    def __init__(
        self,
        format: ParseFormat,
        null_string: str,
        header: bool,
        quote_all_non_numeric: bool,
    ):
        self.format = format
        self.null_string = null_string
        self.header = header
        self.quote_all_non_numeric = quote_all_non_numeric

    @classmethod
    def create_export_parser(cls) -> "DialectCSVParser":
        return cls(ParseFormat.EXPORT, null_string="NULL", header=True, quote_all_non_numeric=True)

    @classmethod
    def create_excel_parser(cls) -> "DialectCSVParser":
        return cls(ParseFormat.EXCEL, null_string="", header=False, quote_all_non_numeric=False)

    def _format_amount(self, amount: Decimal) -> Decimal:
        return amount

    def _write_rows(self, rows: Iterable[Sequence[Any]], writer: TextIO) -> None:
        if not self.quote_all_non_numeric:
            super()._write_rows(rows, writer)
            return

        for row in rows:
            writer.write(",".join(quote_non_numeric(value, self.null_string) for value in row))
            writer.write("\n")
