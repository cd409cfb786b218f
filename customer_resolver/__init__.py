"""Customer Resolver - links invoices to canonical customers.

Invoices name their customer by first and last name. During a load the
resolver indexes the parsed customers by that natural key and hands the
index to the invoice pass, so every invoice ends up holding the same
Customer object the dataset holds.

Usage:
    from customer_resolver import load_dataset_files
    from parsers import create_parser_for_filename

    dataset = load_dataset_files(
        create_parser_for_filename("customers.flat"),
        "customers.flat",
        "invoices.flat",
    )
    for invoice in dataset.invoices:
        assert dataset.customers[invoice.customer.name] is invoice.customer
"""

from customer_resolver.resolver import (
    Dataset,
    customer_key,
    build_customer_map,
    drop_duplicate_numbers,
    verify_identity,
    load_dataset,
    load_dataset_files,
)

__all__ = [
    "Dataset",
    "customer_key",
    "build_customer_map",
    "drop_duplicate_numbers",
    "verify_identity",
    "load_dataset",
    "load_dataset_files",
]
