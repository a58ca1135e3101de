"""Layer 5: Invoice - Invoice creation and payment lifecycle."""

from .invoice_lifecycle import InvoiceStateMachine, InvoiceService, ALLOWED_SOURCES
from .invoice_numbering import generate_invoice_number, INVOICE_NUMBER_PATTERN

__all__ = [
    "InvoiceStateMachine",
    "InvoiceService",
    "ALLOWED_SOURCES",
    "generate_invoice_number",
    "INVOICE_NUMBER_PATTERN",
]
