"""
Intake-to-Invoice 파이프라인 커스텀 예외 계층입니다.
각 레이어/서비스별 구조화된 에러 코드와 메시지를 제공합니다.
"""

from typing import Optional, Any


class PipelineError(Exception):
    """파이프라인 기본 예외 클래스."""

    def __init__(
        self,
        message: str,
        error_code: str = "ERR_UNKNOWN",
        details: Optional[Any] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class CatalogIntegrityError(PipelineError):
    """질문 카탈로그 무결성 에러 (순환 의존, 전방 참조). 로드 시점에 치명적."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_CATALOG_001", details=details)


class InputValidationError(PipelineError):
    """입력 유효성 검증 에러 (400 응답)."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_INPUT_001", details=details)


class IntakeStateError(PipelineError):
    """Layer 1: 현재 인테이크 상태에서 허용되지 않는 조작."""

    def __init__(self, state: str, action: str, details: Optional[Any] = None):
        self.state = state
        self.action = action
        super().__init__(
            f"'{state}' 상태에서는 '{action}' 조작을 할 수 없습니다",
            error_code="ERR_INTAKE_001",
            details=details or {"state": state, "action": action},
        )


class InvalidTransitionError(PipelineError):
    """
    허용되지 않는 상태 전이.

    현재 상태와 시도한 동작을 함께 담습니다.
    호출자는 이 에러를 재시도해서는 안 됩니다 (버전 충돌과 구분).
    """

    def __init__(self, current_state: str, action: str, details: Optional[Any] = None):
        self.current_state = current_state
        self.action = action
        super().__init__(
            f"'{current_state}' 상태에서는 '{action}' 전이를 할 수 없습니다",
            error_code="ERR_TRANSITION_001",
            details=details or {"current_state": current_state, "action": action},
        )


class OverpaymentError(InputValidationError):
    """결제 금액이 잔액을 초과하는 경우."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, details=details)
        self.error_code = "ERR_PAYMENT_001"


class ConcurrencyConflictError(PipelineError):
    """낙관적 동시성 재시도를 모두 소진한 경우."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_CONFLICT_001", details=details)


class InvoiceNumberCollisionError(PipelineError):
    """인보이스 번호 중복이 재시도 후에도 해소되지 않은 경우."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_CONFLICT_002", details=details)


class NotFoundError(PipelineError):
    """요청한 레코드를 찾을 수 없음 (404 응답)."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_NOT_FOUND_001", details=details)


class StorageError(PipelineError):
    """저장소 관련 에러."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_STORE_001", details=details)
