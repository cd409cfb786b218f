"""Plain-text rendering of reports for terminal output.

Every renderer returns a list of lines; callers decide where they go.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional

from models.canonical import Customer, CustomerVolume, Invoice
from models.refs import ParseDiagnostics


RULE_WIDTH = 60


def banner(title: str) -> List[str]:
    return ["=" * RULE_WIDTH, title.upper(), "=" * RULE_WIDTH]


def format_amount(amount) -> str:
    return f"${amount:,.2f}"


def format_paid(paid_date: Optional[date]) -> str:
    return paid_date.isoformat() if paid_date else "unpaid"


# =============================================================================
# Rows
# =============================================================================

def customer_line(customer: Customer) -> str:
    return f"{customer.name:<30} {customer.terms.value:<10}"


def invoice_line(invoice: Invoice) -> str:
    return (
        f"{invoice.number:>6}  {invoice.customer.name:<30} "
        f"{format_amount(invoice.amount):>14}  {invoice.issue_date.isoformat()}  "
        f"{format_paid(invoice.paid_date)}"
    )


# =============================================================================
# Reports
# =============================================================================

def render_customers(customers: Iterable[Customer]) -> List[str]:
    customers = list(customers)
    lines = banner("Customers")
    lines.extend(customer_line(c) for c in customers)
    lines.append(f"\n{len(customers)} customer(s)")
    return lines


def render_invoices(invoices: Iterable[Invoice], title: str = "Invoices") -> List[str]:
    invoices = list(invoices)
    lines = banner(title)
    lines.extend(invoice_line(i) for i in invoices)
    lines.append(f"\n{len(invoices)} invoice(s)")
    return lines


def render_invoices_by_customer(grouped: Dict[Customer, List[Invoice]]) -> List[str]:
    """One block per customer, including customers without invoices."""
    lines = banner("Invoices by customer")
    for customer, invoices in grouped.items():
        lines.append(f"\n{customer.name} ({customer.terms.value})")
        if not invoices:
            lines.append("  (no invoices)")
            continue
        for invoice in invoices:
            lines.append(
                f"  {invoice.number:>6}  {format_amount(invoice.amount):>14}  "
                f"{invoice.issue_date.isoformat()}  {format_paid(invoice.paid_date)}"
            )
    return lines


def render_overdue(invoices: Iterable[Invoice], as_of: date) -> List[str]:
    invoices = list(invoices)
    lines = banner(f"Overdue invoices as of {as_of.isoformat()}")
    for invoice in invoices:
        days_late = (as_of - invoice.due_date).days
        lines.append(f"{invoice_line(invoice)}  ({days_late} day(s) late)")
    lines.append(f"\n{len(invoices)} overdue invoice(s)")
    return lines


def render_volume(volumes: Iterable[CustomerVolume]) -> List[str]:
    lines = banner("Customers by volume")
    for rank, entry in enumerate(volumes, start=1):
        lines.append(f"{rank:>3}. {entry.customer_name:<30} {format_amount(entry.volume):>14}")
    return lines


def render_diagnostics(diagnostics: Optional[ParseDiagnostics]) -> List[str]:
    """Summarize skipped records; empty when nothing was skipped."""
    if diagnostics is None:
        return []
    lines: List[str] = []
    if diagnostics.fatal:
        lines.append(f"❌ {diagnostics.record_kind} load failed: {diagnostics.fatal}")
    if diagnostics.skipped:
        lines.append(f"⚠️ Skipped {len(diagnostics.skipped)} {diagnostics.record_kind} record(s):")
        for error in diagnostics.skipped:
            lines.append(f"  - line {error.line_number}: {error.reason}")
    return lines
