"""
Command-line Script Tests

Runs the report and update entry points in-process against temporary files.
"""

import pytest


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep the scripts from installing handlers on the root logger."""
    import core.observability.logging as billing_logging
    monkeypatch.setattr(billing_logging, "_configured", True)


def dataset_args(csv_files):
    customer_path, invoice_path = csv_files
    return ["--customers", str(customer_path), "--invoices", str(invoice_path)]


class TestReportScript:
    """scripts/report.py"""

    def test_overdue(self, csv_files, capsys):
        """Overdue report lists invoices 4, 6 and 1."""
        from scripts.report import main
        assert main(dataset_args(csv_files) + ["overdue", "--as-of", "2021-01-08"]) == 0
        out = capsys.readouterr().out
        assert "OVERDUE INVOICES AS OF 2021-01-08" in out
        assert "3 overdue invoice(s)" in out

    def test_invoices_for_customer(self, csv_files, capsys):
        """One customer's invoices."""
        from scripts.report import main
        assert main(dataset_args(csv_files) + ["invoices", "--customer", "Customer Two"]) == 0
        assert "3 invoice(s)" in capsys.readouterr().out

    def test_volume(self, csv_files, capsys):
        """Volume ranking starts with the biggest customer."""
        from scripts.report import main
        assert main(dataset_args(csv_files) + ["volume"]) == 0
        out = capsys.readouterr().out
        assert out.index("Customer Three") < out.index("Customer Two") < out.index("Customer One")

    def test_missing_files(self, tmp_path, capsys):
        """An unreadable customer file exits with status 1."""
        from scripts.report import main
        args = ["--customers", str(tmp_path / "c.csv"), "--invoices", str(tmp_path / "i.csv"), "customers"]
        assert main(args) == 1


class TestUpdateScript:
    """scripts/update.py"""

    def test_add_customer(self, csv_files, capsys):
        """The new customer is saved."""
        from scripts.update import main
        assert main(dataset_args(csv_files) + ["add-customer", "Merle", "Haggard", "CASH"]) == 0
        customer_path, _ = csv_files
        assert "Merle,Haggard,CASH" in customer_path.read_text(encoding="utf-8")

    def test_pay_twice_fails(self, csv_files, capsys):
        """Paying a paid invoice exits 1 and leaves the file alone."""
        from scripts.update import main
        _, invoice_path = csv_files
        before = invoice_path.read_text(encoding="utf-8")
        assert main(dataset_args(csv_files) + ["pay", "2"]) == 1
        assert "already been paid" in capsys.readouterr().out
        assert invoice_path.read_text(encoding="utf-8") == before

    def test_add_invoice_unknown_customer(self, csv_files, capsys):
        """Invoicing an unknown customer exits 1."""
        from scripts.update import main
        assert main(dataset_args(csv_files) + ["add-invoice", "Chet Atkins", "777"]) == 1
        assert "No such customer: Chet Atkins" in capsys.readouterr().out

    def test_name_too_wide_for_flat_file(self, tmp_path, sample_customers, capsys):
        """A name the flat format can't hold exits 1 and both files stay as they were."""
        from parsers.flat_parser import FlatParser
        from scripts.update import main
        from storage.artifacts import write_text_artifact
        customer_path = tmp_path / "customers.flat"
        invoice_path = tmp_path / "invoices.flat"
        write_text_artifact(customer_path, lambda w: FlatParser().produce_customers(sample_customers, w))
        invoice_path.write_text("", encoding="utf-8")
        before = customer_path.read_text(encoding="utf-8")

        args = ["--customers", str(customer_path), "--invoices", str(invoice_path), "--format", "FLAT"]
        assert main(args + ["add-customer", "Bartholomewss", "Y", "CASH"]) == 1
        assert "doesn't fit in 12 columns" in capsys.readouterr().out
        assert customer_path.read_text(encoding="utf-8") == before
        assert invoice_path.read_text(encoding="utf-8") == ""
