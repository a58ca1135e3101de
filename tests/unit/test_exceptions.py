"""Unit tests for custom exception classes.

Tests the exception hierarchy, default error codes, message handling,
and details propagation for all custom exceptions in the pipeline.
"""

import pytest

from app.exceptions import (
    PipelineError,
    CatalogIntegrityError,
    InputValidationError,
    IntakeStateError,
    InvalidTransitionError,
    OverpaymentError,
    ConcurrencyConflictError,
    InvoiceNumberCollisionError,
    NotFoundError,
    StorageError,
)


class TestPipelineError:
    def test_base_error_attributes(self):
        err = PipelineError("Something failed", error_code="ERR_TEST", details={"key": "value"})
        assert err.message == "Something failed"
        assert err.error_code == "ERR_TEST"
        assert err.details == {"key": "value"}
        assert str(err) == "Something failed"

    def test_base_error_defaults(self):
        err = PipelineError("Minimal error")
        assert err.error_code == "ERR_UNKNOWN"
        assert err.details is None


class TestSubclassErrorCodes:
    """Each subclass must carry its own default error_code."""

    @pytest.mark.parametrize(
        "error_class, code",
        [
            (CatalogIntegrityError, "ERR_CATALOG_001"),
            (InputValidationError, "ERR_INPUT_001"),
            (ConcurrencyConflictError, "ERR_CONFLICT_001"),
            (InvoiceNumberCollisionError, "ERR_CONFLICT_002"),
            (NotFoundError, "ERR_NOT_FOUND_001"),
            (StorageError, "ERR_STORE_001"),
        ],
    )
    def test_error_code(self, error_class, code):
        err = error_class("failure", details={"id": "x"})
        assert err.error_code == code
        assert err.message == "failure"
        assert err.details == {"id": "x"}
        assert isinstance(err, PipelineError)

    def test_overpayment_is_input_validation(self):
        err = OverpaymentError("too much")
        assert err.error_code == "ERR_PAYMENT_001"
        assert isinstance(err, InputValidationError)


class TestStateErrors:
    def test_invalid_transition_names_state_and_action(self):
        err = InvalidTransitionError("paid", "cancel")
        assert err.message == "'paid' 상태에서는 'cancel' 전이를 할 수 없습니다"
        assert err.current_state == "paid"
        assert err.action == "cancel"
        assert err.details == {"current_state": "paid", "action": "cancel"}
        assert err.error_code == "ERR_TRANSITION_001"

    def test_invalid_transition_custom_details(self):
        err = InvalidTransitionError("draft", "record_payment", details={"invoice_id": "i1"})
        assert err.details == {"invoice_id": "i1"}

    def test_intake_state_error(self):
        err = IntakeStateError("confirmed", "advance")
        assert err.state == "confirmed"
        assert err.action == "advance"
        assert err.error_code == "ERR_INTAKE_001"
        assert "confirmed" in err.message
