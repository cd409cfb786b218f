"""Shared sample data for the billing tests.

Three customers and six invoices:

    Customer One    CASH        invoice 1 (100, 2021-01-04, unpaid)
    Customer Two    CREDIT_45   invoices 2 (paid), 3, 4
    Customer Three  CREDIT_30   invoices 5 (paid), 6

As of 2021-01-08 the overdue invoices are 4, 6 and 1, in that order.
"""

from datetime import date
from decimal import Decimal

import pytest


CUSTOMERS_CSV = (
    "Customer,One,CASH\n"
    "Customer,Two,CREDIT_45\n"
    "Customer,Three,CREDIT_30\n"
)

INVOICES_CSV = (
    "1,Customer,One,100.00,2021-01-04,\n"
    "2,Customer,Two,200.00,2021-01-04,2021-01-05\n"
    "3,Customer,Two,300.00,2021-01-06,\n"
    "4,Customer,Two,400.00,2020-11-11,\n"
    "5,Customer,Three,500.00,2021-01-04,2021-01-08\n"
    "6,Customer,Three,600.00,2020-12-04,\n"
)

AS_OF = date(2021, 1, 8)


@pytest.fixture
def sample_customers():
    from models.canonical import Customer, Terms
    return [
        Customer(first_name="Customer", last_name="One", terms=Terms.CASH),
        Customer(first_name="Customer", last_name="Two", terms=Terms.CREDIT_45),
        Customer(first_name="Customer", last_name="Three", terms=Terms.CREDIT_30),
    ]


@pytest.fixture
def customer_map(sample_customers):
    return {c.name: c for c in sample_customers}


@pytest.fixture
def sample_invoices(customer_map):
    from models.canonical import Invoice
    rows = [
        (1, "Customer One", "100", date(2021, 1, 4), None),
        (2, "Customer Two", "200", date(2021, 1, 4), date(2021, 1, 5)),
        (3, "Customer Two", "300", date(2021, 1, 6), None),
        (4, "Customer Two", "400", date(2020, 11, 11), None),
        (5, "Customer Three", "500", date(2021, 1, 4), date(2021, 1, 8)),
        (6, "Customer Three", "600", date(2020, 12, 4), None),
    ]
    return [
        Invoice(
            number=number,
            customer=customer_map[name],
            amount=Decimal(amount),
            issue_date=issued,
            paid_date=paid,
        )
        for number, name, amount, issued, paid in rows
    ]


@pytest.fixture
def csv_files(tmp_path):
    """Sample data written to customers.csv and invoices.csv."""
    customer_path = tmp_path / "customers.csv"
    invoice_path = tmp_path / "invoices.csv"
    customer_path.write_text(CUSTOMERS_CSV, encoding="utf-8")
    invoice_path.write_text(INVOICES_CSV, encoding="utf-8")
    return customer_path, invoice_path


@pytest.fixture
def clean_registry():
    """Restore the built-in parser registrations after the test."""
    from parsers.factory import reset_registry
    yield
    reset_registry()
