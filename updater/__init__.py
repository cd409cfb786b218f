"""Updater - creates customers and invoices and records payments."""

from updater.engine import Updater

__all__ = ["Updater"]
