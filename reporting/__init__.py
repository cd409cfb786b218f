"""Reporting - read-only queries over a loaded billing dataset."""

from reporting.engine import Reporter, by_name, by_number, by_issue_date, by_volume
from reporting.text import (
    render_customers,
    render_invoices,
    render_invoices_by_customer,
    render_overdue,
    render_volume,
    render_diagnostics,
)

__all__ = [
    "Reporter",
    "by_name",
    "by_number",
    "by_issue_date",
    "by_volume",
    "render_customers",
    "render_invoices",
    "render_invoices_by_customer",
    "render_overdue",
    "render_volume",
    "render_diagnostics",
]
