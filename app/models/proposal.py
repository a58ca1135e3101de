"""
제안서(견적) 관련 데이터 모델입니다.
티어, 기능 카탈로그, 유지보수 플랜, 제안 요청과 가격 내역을 정의합니다.
"""

import uuid
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .budget import BudgetRange
from .common import Money


class TierDefinition(BaseModel):
    """프로젝트 유형별 패키지(티어) 정의."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="티어 ID (예: business-site-better)")
    name: str
    project_type: str
    price_min: Money
    price_max: Money
    included_features: frozenset[str] = frozenset()
    tagline: str = ""

    @property
    def base_price(self) -> Decimal:
        """가격 밴드의 중간값 (정수 반올림)."""
        midpoint = (self.price_min + self.price_max) / 2
        return midpoint.quantize(Decimal("1"), rounding=ROUND_HALF_UP)

    def contains(self, amount: Decimal) -> bool:
        return self.price_min <= amount <= self.price_max


class FeatureCatalogEntry(BaseModel):
    """추가 가능한 기능 하나. 정액(price) 또는 기본가 대비 비율(percent_of_base)."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    project_types: frozenset[str]
    price: Money = Decimal("0")
    percent_of_base: Optional[Decimal] = Field(
        default=None, description="티어 기본가 대비 비율 (%)"
    )
    description: str = ""


class MaintenancePlanOption(BaseModel):
    """월 단위 유지보수 플랜. 일회성 합계에는 절대 포함되지 않습니다."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    monthly_price: Money
    features: tuple[str, ...] = ()


class ProposalStatus(str, Enum):
    """제안 요청 상태입니다."""

    DRAFT = "draft"  # 선택 조작 가능
    SUBMITTED = "submitted"  # 고객 제출
    ACCEPTED = "accepted"  # 수락됨 (인보이스 전환 가능)
    REJECTED = "rejected"
    CONVERTED = "converted"  # 인보이스로 전환 완료


class ProposalRequest(BaseModel):
    """고객이 구성한 제안 요청."""

    id: str = Field(default_factory=lambda: f"PROP-{uuid.uuid4().hex[:8]}")
    client_ref: str
    project_ref: Optional[str] = None
    project_type: str
    tier_id: Optional[str] = None
    included_features: frozenset[str] = frozenset()
    selected_features: frozenset[str] = frozenset()
    maintenance_plan_id: Optional[str] = None
    maintenance_monthly_price: Money = Decimal("0")
    computed_total: Money = Decimal("0")
    budget: Optional[BudgetRange] = None
    notes: str = ""
    status: ProposalStatus = ProposalStatus.DRAFT
    invoice_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def add_ons(self) -> frozenset[str]:
        """티어 포함 기능을 제외한 추가 선택 기능."""
        return self.selected_features - self.included_features


class PriceLine(BaseModel):
    """가격 내역 한 줄."""

    id: str
    description: str
    amount: Money


class PriceBreakdown(BaseModel):
    """제안서 가격 내역. 유지보수 플랜은 별도 필드로만 표시합니다."""

    proposal_id: str
    tier_line: PriceLine
    add_on_lines: list[PriceLine] = Field(default_factory=list)
    included_features: list[str] = Field(default_factory=list)
    maintenance_plan: Optional[MaintenancePlanOption] = None
    one_time_total: Money

    @property
    def lines(self) -> list[PriceLine]:
        return [self.tier_line, *self.add_on_lines]
