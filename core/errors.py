"""Exception taxonomy for the billing ledger.

Three kinds of failure exist:
- Fatal load errors (DatasetLoadError): a backing stream is unreadable or
  fundamentally malformed.
- Record-level problems: never raised to callers, they are collected as
  RecordError entries in ParseDiagnostics (see models.refs).
- Mutation errors (MutationError subclasses): caller-logic mistakes such as
  creating a duplicate customer or paying an invoice twice.
"""


class BillingError(Exception):
    """Base class for all billing ledger errors."""


class DatasetLoadError(BillingError):
    """A dataset could not be loaded from its backing files."""

    def __init__(self, message: str, source: str = None):
        super().__init__(message)
        self.source = source


class MalformedSourceError(BillingError):
    """A source stream is not a container the parser can read at all."""


class UnknownFormatError(BillingError, ValueError):
    """No parser is registered for the requested format."""


class FieldWidthError(BillingError, ValueError):
    """A value is too wide for its fixed-width column."""

    def __init__(self, field: str, value: str, width: int):
        super().__init__(f"The {field} {value!r} doesn't fit in {width} columns")
        self.field = field
        self.value = value
        self.width = width


class MutationError(BillingError):
    """Base class for rejected create/update operations."""


class DuplicateCustomerError(MutationError):
    """A customer with the same derived name already exists."""

    def __init__(self, name: str):
        super().__init__(f"There is already a customer with the name {name}")
        self.name = name


class UnknownTermsError(MutationError, ValueError):
    """The terms name doesn't match any Terms member."""

    def __init__(self, terms: str):
        super().__init__(f"Unknown terms: {terms}")
        self.terms = terms


class CustomerNotFoundError(MutationError, LookupError):
    """No customer with the given name exists."""

    def __init__(self, name: str):
        super().__init__(f"No such customer: {name}")
        self.name = name


class InvoiceNotFoundError(MutationError, LookupError):
    """No invoice with the given number exists."""

    def __init__(self, number: int):
        super().__init__(f"No such invoice: {number}")
        self.number = number


class InvoiceAlreadyPaidError(MutationError):
    """The invoice already carries a paid date."""

    def __init__(self, number: int):
        super().__init__(f"Invoice {number} has already been paid.")
        self.number = number
