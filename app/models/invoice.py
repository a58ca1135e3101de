"""
인보이스 관련 데이터 모델입니다.
라인 아이템, 결제 기록, 인보이스 상태를 정의합니다.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import Money


class InvoiceStatus(str, Enum):
    """
    인보이스 상태입니다.
    OVERDUE는 조회 시점에 계산되는 파생 상태입니다.
    """

    DRAFT = "draft"  # 초안
    SENT = "sent"  # 발송됨
    VIEWED = "viewed"  # 고객 열람 (참고용)
    PARTIAL = "partial"  # 부분 결제
    PAID = "paid"  # 결제 완료 (종료 상태)
    OVERDUE = "overdue"  # 기한 초과 (파생)
    CANCELLED = "cancelled"  # 취소 (종료 상태)


TERMINAL_STATUSES = frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED})
OUTSTANDING_STATUSES = frozenset(
    {InvoiceStatus.SENT, InvoiceStatus.VIEWED, InvoiceStatus.PARTIAL, InvoiceStatus.OVERDUE}
)


class LineItem(BaseModel):
    """인보이스 라인 아이템 (wire format: description, quantity, rate, amount)."""

    model_config = ConfigDict(frozen=True)

    description: str
    quantity: Money = Decimal("1")
    rate: Money
    amount: Money


class PaymentRecord(BaseModel):
    """결제 이력 한 건."""

    amount: Money
    method: str
    reference: Optional[str] = None
    paid_on: date
    recorded_at: datetime = Field(default_factory=datetime.now)


class Invoice(BaseModel):
    """고객 인보이스."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    invoice_number: str = Field(..., description="PREFIX-YYYYMM-XXXXXX")
    project_ref: Optional[str] = None
    client_ref: str
    currency: str = "USD"
    status: InvoiceStatus = InvoiceStatus.DRAFT
    due_date: Optional[date] = None
    issued_date: Optional[date] = None
    paid_date: Optional[date] = None
    line_items: list[LineItem] = Field(default_factory=list)
    amount_paid: Money = Decimal("0")
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    payments: list[PaymentRecord] = Field(default_factory=list)
    proposal_id: Optional[str] = None
    notes: str = ""
    warnings: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def amount_total(self) -> Decimal:
        """라인 아이템 금액 합계 (파생값)."""
        return sum((item.amount for item in self.line_items), Decimal("0"))

    @property
    def amount_due(self) -> Decimal:
        return self.amount_total - self.amount_paid

    def effective_status(self, today: Optional[date] = None) -> InvoiceStatus:
        """
        조회 시점 기준 상태.

        기한이 지났고 종료 상태가 아니면 OVERDUE로 계산합니다.
        저장된 상태는 바꾸지 않습니다.
        """
        today = today or date.today()
        if (
            self.status in OUTSTANDING_STATUSES
            and self.due_date is not None
            and self.due_date < today
        ):
            return InvoiceStatus.OVERDUE
        return self.status

    def to_view(self, today: Optional[date] = None) -> dict:
        """API 응답용 직렬화 (파생 상태와 합계 포함)."""
        data = self.model_dump(mode="json")
        data["status"] = self.effective_status(today).value
        data["amount_total"] = float(self.amount_total)
        data["amount_due"] = float(self.amount_due)
        return data


class InvoiceStats(BaseModel):
    """인보이스 집계 (취소된 인보이스는 금액 합계에서 제외)."""

    total_invoices: int = 0
    total_amount: Money = Decimal("0")
    total_paid: Money = Decimal("0")
    total_outstanding: Money = Decimal("0")
    overdue_count: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
