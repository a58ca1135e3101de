"""Layer 2: Budget - Free-form budget range interpretation."""

from .budget_parser import parse_budget

__all__ = [
    "parse_budget",
]
