"""Canonical billing models - format-neutral customer and invoice records.

These models represent parsed records independently of the file format they
were read from. Every parser produces and consumes these types; format
specific layouts live in /parsers/.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.functional_validators import BeforeValidator
from typing_extensions import Annotated


# =============================================================================
# Value Parsers
# =============================================================================

def _parse_decimal(value):
    """Parse decimal from strings, ints and floats without binary noise."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError("Boolean is not an amount")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        s = value.strip()
        if s == "":
            return None
        return Decimal(s)
    return value


def _parse_date(value):
    """Parse an ISO-8601 date string."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        s = value.strip()
        if s == "":
            return None
        return date.fromisoformat(s)
    return value


DecimalValue = Annotated[Decimal, BeforeValidator(_parse_decimal)]
DateValue = Annotated[date, BeforeValidator(_parse_date)]


# =============================================================================
# Terms
# =============================================================================

class Terms(str, Enum):
    """Payment terms. The member name is the wire representation."""
    CASH = "CASH"
    CREDIT_30 = "CREDIT_30"
    CREDIT_45 = "CREDIT_45"
    CREDIT_60 = "CREDIT_60"
    CREDIT_90 = "CREDIT_90"

    @property
    def days(self) -> int:
        """Days allowed between issue and payment."""
        if self is Terms.CASH:
            return 0
        return int(self.value.split("_", 1)[1])

    @classmethod
    def from_name(cls, name: str) -> "Terms":
        """Look up terms by exact, case-sensitive name.

        Raises:
            ValueError: If no member has that name
        """
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown terms: {name!r}") from None


# =============================================================================
# Base Model
# =============================================================================

class CanonicalBase(BaseModel):
    """Base model for all canonical billing records."""
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Customer / Invoice
# =============================================================================

class Customer(CanonicalBase):
    """A billed customer.

    Two customers are equal when their first and last names match; terms do
    not take part in equality or hashing, so a Customer can be used as a key
    for the whole lifetime of a dataset.
    """
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    terms: Terms = Field(..., description="Payment terms")

    @property
    def name(self) -> str:
        """Natural key used to cross-reference invoices."""
        return customer_name(self.first_name, self.last_name)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Customer):
            return NotImplemented
        return (self.first_name, self.last_name) == (other.first_name, other.last_name)

    def __hash__(self) -> int:
        return hash((self.first_name, self.last_name))

    def __str__(self) -> str:
        return f"Customer: {self.name}"


class Invoice(CanonicalBase):
    """An invoice issued to a customer.

    ``customer`` is a live reference to the canonical Customer held by the
    dataset, never a copy.
    """
    number: int = Field(..., gt=0, description="Invoice number, unique per dataset")
    customer: Customer
    amount: DecimalValue
    issue_date: DateValue = Field(..., alias="theDate")
    paid_date: Optional[DateValue] = Field(default=None, alias="paidDate")

    @field_serializer("amount", when_used="json")
    def _amount_as_number(self, amount: Decimal) -> float:
        return float(amount)

    @property
    def due_date(self) -> date:
        return self.issue_date + timedelta(days=self.customer.terms.days)

    @property
    def is_paid(self) -> bool:
        return self.paid_date is not None

    def is_overdue(self, as_of: date) -> bool:
        """Unpaid and past the grace period allowed by the customer's terms."""
        return self.paid_date is None and as_of > self.due_date

    def __str__(self) -> str:
        return f"Invoice {self.number}: {self.customer.name} {self.amount}"


class CustomerVolume(BaseModel):
    """Total invoiced amount for one customer."""
    customer_name: str = Field(..., description="Derived customer name")
    volume: Decimal = Field(default=Decimal("0"), description="Sum of invoice amounts")


def customer_name(first_name: str, last_name: str) -> str:
    """Build the natural key for a customer."""
    return f"{first_name} {last_name}"
