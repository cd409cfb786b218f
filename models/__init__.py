"""Models Package.

Data models for the billing ledger including:
- Canonical records (customers, invoices, payment terms)
- Data reference models for written dataset files
- Parse diagnostics
"""

from models.canonical import (
    Terms,
    Customer,
    Invoice,
    CustomerVolume,
    customer_name,
    DecimalValue,
    DateValue,
)

from models.refs import (
    DataReference,
    RecordError,
    ParseDiagnostics,
)

__all__ = [
    # Canonical
    "Terms",
    "Customer",
    "Invoice",
    "CustomerVolume",
    "customer_name",
    "DecimalValue",
    "DateValue",
    # References
    "DataReference",
    "RecordError",
    "ParseDiagnostics",
]
