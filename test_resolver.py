"""
Customer Resolver Tests

Validates that loading links each invoice to the canonical customer object,
how duplicates are settled, and which failures abort a load.
"""

import io
import logging

import pytest

from conftest import CUSTOMERS_CSV, INVOICES_CSV


class TestLinking:
    """Identity between invoices and the customer map."""

    def test_invoices_hold_map_entries(self):
        """Every invoice's customer is the object held by the map."""
        from customer_resolver import load_dataset, verify_identity
        from parsers.csv_parser import CSVParser
        dataset = load_dataset(CSVParser(), io.StringIO(CUSTOMERS_CSV), io.StringIO(INVOICES_CSV))

        assert len(dataset.customers) == 3
        assert len(dataset.invoices) == 6
        assert verify_identity(dataset) == []
        two = dataset.customers["Customer Two"]
        assert [i.number for i in dataset.invoices if i.customer is two] == [2, 3, 4]

    def test_verify_identity_finds_copies(self):
        """An invoice holding an equal copy is reported."""
        from customer_resolver import load_dataset, verify_identity
        from parsers.csv_parser import CSVParser
        dataset = load_dataset(CSVParser(), io.StringIO(CUSTOMERS_CSV), io.StringIO(INVOICES_CSV))
        invoice = dataset.invoices[0]
        invoice.customer = invoice.customer.model_copy()
        assert verify_identity(dataset) == [invoice.number]

    def test_identity_checked_at_debug(self, caplog):
        """With DEBUG enabled the loader confirms every invoice is linked."""
        from customer_resolver import load_dataset
        from parsers.csv_parser import CSVParser
        with caplog.at_level(logging.DEBUG, logger="customer_resolver.resolver"):
            load_dataset(CSVParser(), io.StringIO(CUSTOMERS_CSV), io.StringIO(INVOICES_CSV))
        assert any("Identity check passed" in r.getMessage() for r in caplog.records)

    def test_identity_not_checked_above_debug(self, caplog):
        """At INFO the check is skipped."""
        from customer_resolver import load_dataset
        from parsers.csv_parser import CSVParser
        with caplog.at_level(logging.INFO, logger="customer_resolver.resolver"):
            load_dataset(CSVParser(), io.StringIO(CUSTOMERS_CSV), io.StringIO(INVOICES_CSV))
        assert not any("Identity check" in r.getMessage() for r in caplog.records)

    def test_customer_key(self):
        """Natural key is first, space, last."""
        from customer_resolver import customer_key
        assert customer_key("Customer", "One") == "Customer One"


class TestDuplicates:
    """Duplicate names and numbers."""

    def test_later_customer_wins(self, caplog):
        """On a name collision the map keeps the later record."""
        from customer_resolver import build_customer_map
        from models.canonical import Customer, Terms
        first = Customer(first_name="A", last_name="B", terms=Terms.CASH)
        second = Customer(first_name="A", last_name="B", terms=Terms.CREDIT_60)
        customer_map = build_customer_map([first, second])
        assert customer_map["A B"] is second
        assert any("Duplicate customer" in r.getMessage() for r in caplog.records)

    def test_first_invoice_number_wins(self):
        """A repeated invoice number is dropped."""
        from customer_resolver import load_dataset
        from parsers.csv_parser import CSVParser
        invoices = INVOICES_CSV + "1,Customer,Two,999.00,2021-02-01,\n"
        dataset = load_dataset(CSVParser(), io.StringIO(CUSTOMERS_CSV), io.StringIO(invoices))
        assert len(dataset.invoices) == 6
        assert dataset.invoices[0].customer.name == "Customer One"


class TestLoadFailures:
    """Whole-load failures."""

    def test_fatal_customer_stream_raises(self):
        """Unparseable customer data aborts the load."""
        from core.errors import DatasetLoadError
        from customer_resolver import load_dataset
        from parsers.json_parser import JSONParser
        with pytest.raises(DatasetLoadError):
            load_dataset(JSONParser(), io.StringIO("{broken"), io.StringIO("[]"))

    def test_missing_customer_file_raises(self, tmp_path):
        """A missing customer file aborts the load."""
        from core.errors import DatasetLoadError
        from customer_resolver import load_dataset_files
        from parsers.csv_parser import CSVParser
        with pytest.raises(DatasetLoadError) as exc_info:
            load_dataset_files(CSVParser(), tmp_path / "nope.csv", tmp_path / "invoices.csv")
        assert exc_info.value.source.endswith("nope.csv")

    def test_missing_invoice_file_leaves_no_invoices(self, csv_files, tmp_path):
        """A missing invoice file loads customers only and records why."""
        from customer_resolver import load_dataset_files
        from parsers.csv_parser import CSVParser
        customer_path, _ = csv_files
        dataset = load_dataset_files(CSVParser(), customer_path, tmp_path / "missing.csv")
        assert len(dataset.customers) == 3
        assert dataset.invoices == []
        assert not dataset.invoice_diagnostics.ok

    def test_skipped_records_counted(self, tmp_path):
        """Skipped records from both passes are summed."""
        from customer_resolver import load_dataset_files
        from parsers.csv_parser import CSVParser
        customer_path = tmp_path / "c.csv"
        invoice_path = tmp_path / "i.csv"
        customer_path.write_text(CUSTOMERS_CSV + "bad\n", encoding="utf-8")
        invoice_path.write_text(INVOICES_CSV + "7,No,Body,1.00,2021-01-01,\n", encoding="utf-8")
        dataset = load_dataset_files(CSVParser(), customer_path, invoice_path)
        assert dataset.skipped_records == 2
