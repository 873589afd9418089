"""Utilitarios do aplicativo."""

from .console_utils import SafePrinter, get_printer

__all__ = [
    "SafePrinter",
    "get_printer",
]
