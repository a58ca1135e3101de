"""Budget range parser for Layer 2.

Layer 2: 예산 해석
고객이 입력한 자유 형식 예산 문자열("5k-10k", "$2,500 - $5,000", "10k+")을
라인 아이템 산정에 쓰이는 단일 기준 금액(baseline)으로 변환합니다.

해석 규칙:
┌──────────────────────┬──────────────────────────────┬─────────────┐
│ 입력 형태            │ baseline                     │ confidence  │
├──────────────────────┼──────────────────────────────┼─────────────┤
│ 두 개의 금액 (A-B)   │ floor((A+B)/2)               │ exact       │
│ 단일 금액 + "+"      │ A × open_ended_multiplier    │ approximate │
│ 단일 금액            │ A                            │ exact       │
│ "under A", "up to A" │ A                            │ approximate │
│ 그 외 (해석 불가)    │ default_budget_baseline      │ default     │
└──────────────────────┴──────────────────────────────┴─────────────┘

이 함수는 절대 예외를 던지지 않습니다. 해석할 수 없거나 금액 상한(MAX_AMOUNT)을 넘는 입력은
DEFAULT 신뢰도로 반환되며, 하위 단계는 이를 그대로 믿지 말고 화면/문서에 경고로 드러내야 합니다.
"""

import logging
import re
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Any, Optional

from app.config import get_settings
from app.models import MAX_AMOUNT, BudgetConfidence, BudgetRange, to_decimal

logger = logging.getLogger(__name__)

_CURRENCY_PATTERN = re.compile(r"[$€£¥₩]|\b(?:usd|eur|gbp|krw)\b")
_SEPARATOR_PATTERN = re.compile(r"[-–\s]+")
_TOKEN_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)(k?)$")
_UNDER_PATTERN = re.compile(r"^(?:under|up\s*to|below|less\s+than|<)[-–\s]*")
_PLUS_SUFFIX_PATTERN = re.compile(r"[-–\s]*(?:plus|\+)$")
_TO_PATTERN = re.compile(r"(?<!\bup)\s+to\s+")

_THOUSAND = Decimal("1000")


def _normalize(raw: str) -> str:
    """통화 기호/구분 쉼표 제거, 소문자화, 'plus' → '+', ' to ' → '-'."""
    text = raw.strip().lower()
    text = _CURRENCY_PATTERN.sub("", text)
    text = text.replace(",", "")
    text = _TO_PATTERN.sub("-", text)
    text = _PLUS_SUFFIX_PATTERN.sub("+", text.strip())
    return text.strip()


def _parse_token(token: str) -> Optional[Decimal]:
    """'2.5k' → 2500, '5000' → 5000. 숫자가 아니면 None."""
    match = _TOKEN_PATTERN.match(token)
    if not match:
        return None
    try:
        amount = Decimal(match.group(1))
    except InvalidOperation:
        return None
    if match.group(2) == "k":
        amount *= _THOUSAND
    return amount


def _tokens(text: str) -> list[str]:
    return [token for token in _SEPARATOR_PATTERN.split(text) if token]


def parse_budget(
    source: Any,
    default_baseline: Optional[Decimal] = None,
    open_ended_multiplier: Optional[Decimal] = None,
) -> BudgetRange:
    """
    자유 형식 예산 문자열을 BudgetRange로 변환합니다.

    Args:
        source: 예산 입력 (문자열, 숫자, None 모두 허용)
        default_baseline: 해석 불가 시 기준 금액 (None이면 설정값)
        open_ended_multiplier: "+" 범위의 추정 배수 (None이면 설정값)

    Returns:
        BudgetRange (항상 반환, 예외 없음)
    """
    settings = get_settings()
    if default_baseline is None:
        default_baseline = settings.default_budget_baseline
    if open_ended_multiplier is None:
        open_ended_multiplier = settings.open_ended_multiplier

    source_text = "" if source is None else str(source)

    try:
        result = _interpret(source, source_text, open_ended_multiplier)
    except (ArithmeticError, ValueError, TypeError) as e:
        logger.warning(f"[BudgetParser] 예산 해석 중 오류, 기본값 사용: {source_text!r} ({e})")
        result = None

    if result is not None and result.baseline_amount > MAX_AMOUNT:
        logger.warning(f"[BudgetParser] 금액 상한 초과, 기본값 사용: {source_text!r}")
        result = None

    if result is None:
        logger.info(f"[BudgetParser] 해석 불가 입력, 기본 예산 사용: {source_text!r}")
        return BudgetRange(
            baseline_amount=to_decimal(default_baseline),
            confidence=BudgetConfidence.DEFAULT,
            source=source_text,
        )

    logger.debug(
        f"[BudgetParser] {source_text!r} → baseline={result.baseline_amount} "
        f"({result.confidence.value})"
    )
    return result


def _interpret(
    source: Any,
    source_text: str,
    open_ended_multiplier: Decimal,
) -> Optional[BudgetRange]:
    if isinstance(source, bool):
        return None
    if isinstance(source, (int, float, Decimal)):
        amount = to_decimal(source)
        if not amount.is_finite() or amount < 0:
            return None
        return BudgetRange(
            baseline_amount=amount,
            min_bound=amount,
            max_bound=amount,
            confidence=BudgetConfidence.EXACT,
            source=source_text,
        )

    text = _normalize(source_text)
    if not text:
        return None

    # "under 1k", "up to 5000"
    under = _UNDER_PATTERN.match(text)
    if under:
        tokens = _tokens(text[under.end():])
        if len(tokens) != 1:
            return None
        ceiling = _parse_token(tokens[0])
        if ceiling is None:
            return None
        return BudgetRange(
            baseline_amount=ceiling,
            min_bound=Decimal("0"),
            max_bound=ceiling,
            confidence=BudgetConfidence.APPROXIMATE,
            source=source_text,
        )

    # "10k+": 상한이 없는 범위
    if text.endswith("+"):
        tokens = _tokens(text[:-1])
        if len(tokens) != 1:
            return None
        floor_amount = _parse_token(tokens[0])
        if floor_amount is None:
            return None
        return BudgetRange(
            baseline_amount=floor_amount * open_ended_multiplier,
            min_bound=floor_amount,
            max_bound=None,
            confidence=BudgetConfidence.APPROXIMATE,
            source=source_text,
        )

    tokens = _tokens(text)
    amounts = [_parse_token(token) for token in tokens]
    if not amounts or len(amounts) > 2 or any(amount is None for amount in amounts):
        return None

    if len(amounts) == 1:
        return BudgetRange(
            baseline_amount=amounts[0],
            min_bound=amounts[0],
            max_bound=amounts[0],
            confidence=BudgetConfidence.EXACT,
            source=source_text,
        )

    low, high = sorted(amounts)
    baseline = ((low + high) / 2).to_integral_value(rounding=ROUND_FLOOR)
    return BudgetRange(
        baseline_amount=baseline,
        min_bound=low,
        max_bound=high,
        confidence=BudgetConfidence.EXACT,
        source=source_text,
    )
