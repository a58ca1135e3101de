"""입력 유효성 검증 유틸리티.

프로젝트 유형 정규화, 레코드 ID(파일명) 안전성 검사, 금액/통화 검증을 수행합니다.
"""

import re
from decimal import Decimal
from typing import Any

from app.exceptions import InputValidationError
from app.models import to_decimal


# 프로젝트 유형 별칭 (정규화 후 키 → 표준 유형)
PROJECT_TYPE_ALIASES = {
    "ecommerce": "ecommerce",
    "e-commerce": "ecommerce",
    "online-store": "ecommerce",
    "webapp": "web-app",
    "web-application": "web-app",
    "app": "web-app",
    "extension": "browser-extension",
    "chrome-extension": "browser-extension",
    "simple": "simple-site",
    "landing-page": "simple-site",
    "business": "business-site",
    "business-website": "business-site",
    "small-business-website": "business-site",
    "portfolio-website": "portfolio",
    "site": "website",
}

# 레코드 ID에 허용되는 문자 (파일명으로 사용되므로 경로 구분자 금지)
RECORD_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,127}$")

CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


def normalize_project_type(raw: Any) -> str:
    """
    프로젝트 유형 문자열을 표준 형태로 정규화합니다.

    "E-Commerce" → "ecommerce", "web app" → "web-app", "Web_App" → "web-app".
    알 수 없는 유형은 정규화된 문자열 그대로 반환합니다 (호출자가 기본값 처리).
    """
    if raw is None:
        return ""
    text = str(raw).strip().lower()
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"-{2,}", "-", text).strip("-")
    return PROJECT_TYPE_ALIASES.get(text, text)


def validate_record_id(record_id: str) -> str:
    """
    레코드 ID 유효성 검증.

    - 경로 순회 공격 방지 (../, / 등)
    - 허용 문자/길이 제한

    Raises:
        InputValidationError: 유효하지 않은 ID
    """
    if not record_id or not RECORD_ID_PATTERN.match(record_id):
        raise InputValidationError(
            "잘못된 레코드 ID입니다",
            details={"record_id": record_id},
        )
    return record_id


def validate_payment_amount(amount: Any) -> Decimal:
    """
    결제 금액 검증. 0보다 큰 유한한 금액이어야 합니다.

    Raises:
        InputValidationError: 0 이하이거나 숫자가 아닌 금액
    """
    try:
        value = to_decimal(amount)
    except (ArithmeticError, ValueError, TypeError):
        raise InputValidationError("결제 금액이 숫자가 아닙니다", details={"amount": str(amount)})

    if not value.is_finite() or value <= 0:
        raise InputValidationError(
            "결제 금액은 0보다 커야 합니다",
            details={"amount": str(amount)},
        )
    return value


def validate_currency(currency: str) -> str:
    """ISO 4217 형식(대문자 3자리) 통화 코드 검증."""
    code = (currency or "").strip().upper()
    if not CURRENCY_PATTERN.match(code):
        raise InputValidationError(
            f"지원하지 않는 통화 코드입니다: {currency}",
            details={"currency": currency},
        )
    return code
