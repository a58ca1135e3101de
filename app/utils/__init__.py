"""유틸리티 모듈."""

from .validation import (
    normalize_project_type,
    validate_record_id,
    validate_payment_amount,
    validate_currency,
)

__all__ = [
    "normalize_project_type",
    "validate_record_id",
    "validate_payment_amount",
    "validate_currency",
]
