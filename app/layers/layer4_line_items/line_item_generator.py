"""
라인 아이템 생성기(Line-Item Generator) 모듈입니다.

프로젝트 유형별 고정 가중치로 기준 금액을 라인 아이템에 배분합니다.

    amount_i = round(baseline × weight_i, 2)   (마지막 항목 제외, ROUND_HALF_UP)
    amount_last = round(baseline, 2) − Σ amount_i

마지막 항목이 반올림 잔차를 흡수하므로 합계는 항상 round(baseline, 2)와 정확히 같습니다.
"""

import logging
from decimal import Decimal
from typing import Any

from app.exceptions import CatalogIntegrityError, InputValidationError
from app.models import MAX_AMOUNT, LineItem, PriceBreakdown, quantize_money, to_decimal
from app.utils import normalize_project_type

logger = logging.getLogger(__name__)

# 프로젝트 유형 → [(설명, 가중치)]
LINE_ITEM_TEMPLATES: dict[str, list[tuple[str, Decimal]]] = {
    "website": [
        ("Website Design & Development", Decimal("0.7")),
        ("Content Management Setup", Decimal("0.2")),
        ("SEO & Testing", Decimal("0.1")),
    ],
    "web-app": [
        ("Application Development", Decimal("0.6")),
        ("Database & Backend Setup", Decimal("0.2")),
        ("Testing & QA", Decimal("0.1")),
        ("Deployment & Documentation", Decimal("0.1")),
    ],
    "ecommerce": [
        ("E-commerce Platform Development", Decimal("0.5")),
        ("Payment Integration", Decimal("0.2")),
        ("Product Catalog Setup", Decimal("0.2")),
        ("Testing & Launch", Decimal("0.1")),
    ],
    "browser-extension": [
        ("Extension Development", Decimal("0.8")),
        ("Testing & Packaging", Decimal("0.1")),
        ("Store Submission", Decimal("0.1")),
    ],
}

DEFAULT_TEMPLATE: list[tuple[str, Decimal]] = [
    ("Project Development", Decimal("0.7")),
    ("Testing & QA", Decimal("0.2")),
    ("Documentation & Handoff", Decimal("0.1")),
]

# 사이트 계열은 website 템플릿 공유
TEMPLATE_ALIASES = {
    "simple-site": "website",
    "business-site": "website",
    "portfolio": "website",
}


def _validate_templates():
    """가중치 합계가 정확히 1인지 확인합니다 (모듈 로드 시 1회)."""
    for name, template in [*LINE_ITEM_TEMPLATES.items(), ("default", DEFAULT_TEMPLATE)]:
        total = sum((weight for _, weight in template), Decimal("0"))
        if total != Decimal("1"):
            raise CatalogIntegrityError(
                f"라인 아이템 가중치 합계가 1이 아닙니다: {name}",
                details={"template": name, "total": str(total)},
            )


_validate_templates()


def template_for(project_type: Any) -> list[tuple[str, Decimal]]:
    """프로젝트 유형에 맞는 (설명, 가중치) 목록. 알 수 없는 유형은 기본 3단 분할."""
    normalized = normalize_project_type(project_type)
    normalized = TEMPLATE_ALIASES.get(normalized, normalized)
    template = LINE_ITEM_TEMPLATES.get(normalized)
    if template is None:
        logger.debug(f"[LineItemGenerator] 알 수 없는 프로젝트 유형, 기본 분할 사용: {project_type!r}")
        return DEFAULT_TEMPLATE
    return template


def generate_line_items(project_type: Any, baseline: Any) -> list[LineItem]:
    """
    기준 금액을 프로젝트 유형별 가중치로 나눈 라인 아이템을 생성합니다.

    Args:
        project_type: 프로젝트 유형 (별칭 허용: "E-Commerce", "web app")
        baseline: 기준 금액 (0 이상)

    Returns:
        순서가 보장된 LineItem 목록 (합계 == round(baseline, 2))

    Raises:
        InputValidationError: 음수이거나 숫자가 아닌 기준 금액
    """
    try:
        amount = to_decimal(baseline)
    except (ArithmeticError, ValueError, TypeError):
        raise InputValidationError("기준 금액이 숫자가 아닙니다", details={"baseline": str(baseline)})
    if not amount.is_finite() or amount < 0:
        raise InputValidationError(
            "기준 금액은 0 이상이어야 합니다", details={"baseline": str(baseline)}
        )
    if amount > MAX_AMOUNT:
        raise InputValidationError(
            "기준 금액이 상한을 초과합니다",
            details={"baseline": str(baseline), "max": str(MAX_AMOUNT)},
        )

    template = template_for(project_type)
    target = quantize_money(amount)

    items: list[LineItem] = []
    allocated = Decimal("0")
    for description, weight in template[:-1]:
        line_amount = quantize_money(amount * weight)
        allocated += line_amount
        items.append(LineItem(description=description, rate=line_amount, amount=line_amount))

    # 마지막 항목이 반올림 잔차 흡수
    last_description, _ = template[-1]
    remainder = target - allocated
    items.append(LineItem(description=last_description, rate=remainder, amount=remainder))

    return items


def line_items_from_proposal(breakdown: PriceBreakdown) -> list[LineItem]:
    """
    수락된 제안서의 가격 내역을 라인 아이템으로 변환합니다.
    티어 한 줄 + 추가 기능마다 한 줄이며, 유지보수 플랜(월 요금)은 포함하지 않습니다.
    """
    items = []
    for line in breakdown.lines:
        amount = quantize_money(line.amount)
        items.append(LineItem(description=line.description, rate=amount, amount=amount))
    return items
