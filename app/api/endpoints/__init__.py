"""API endpoints package."""

from . import health
from . import intake
from . import proposals
from . import invoices

__all__ = ["health", "intake", "proposals", "invoices"]
