"""
도메인 이벤트 모델입니다.
알림 협력자에게 전달되는 이름 있는 이벤트를 정의합니다. 실제 발송은 이 시스템의 범위 밖입니다.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EventName(str, Enum):
    INVOICE_SENT = "invoice.sent"
    INVOICE_PAID = "invoice.paid"
    PROPOSAL_SUBMITTED = "proposal.submitted"


class DomainEvent(BaseModel):
    """코어가 발생시키는 이벤트 하나."""

    name: EventName
    subject_id: str = Field(..., description="이벤트 대상 레코드 ID")
    payload: dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=datetime.now)
