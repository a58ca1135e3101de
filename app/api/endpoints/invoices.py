"""
인보이스 API입니다.
임시(ad hoc) 인보이스 생성, 조회, 발송, 열람 표시, 결제 기록, 취소, 통계를 제공합니다.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Union

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.models import MAX_AMOUNT, InvoiceStatus, LineItem, quantize_money
from app.services.orchestrator import get_orchestrator
from app.utils import validate_record_id

logger = logging.getLogger(__name__)

router = APIRouter()


class LineItemInput(BaseModel):
    """라인 아이템 입력 (amount를 생략하면 quantity × rate)"""
    description: str = Field(..., min_length=1)
    quantity: Decimal = Field(Decimal("1"), ge=-MAX_AMOUNT, le=MAX_AMOUNT)
    rate: Decimal = Field(..., ge=-MAX_AMOUNT, le=MAX_AMOUNT)
    amount: Optional[Decimal] = Field(None, ge=-MAX_AMOUNT, le=MAX_AMOUNT)

    def to_line_item(self) -> LineItem:
        amount = self.amount if self.amount is not None else self.quantity * self.rate
        return LineItem(
            description=self.description,
            quantity=self.quantity,
            rate=quantize_money(self.rate),
            amount=quantize_money(amount),
        )


class CreateInvoiceRequest(BaseModel):
    """라인 아이템을 직접 지정하는 인보이스 생성 요청"""
    client_ref: str = Field(..., min_length=1)
    line_items: List[LineItemInput] = Field(..., min_length=1)
    project_ref: Optional[str] = None
    currency: Optional[str] = None
    due_date: Optional[date] = None
    notes: str = ""


class AdHocInvoiceRequest(BaseModel):
    """예산 문자열로 라인 아이템을 산정하는 임시 인보이스 요청"""
    client_ref: str = Field(..., min_length=1)
    project_type: str
    budget: Optional[Union[str, float]] = None
    project_ref: Optional[str] = None
    currency: Optional[str] = None
    notes: str = ""


class SendRequest(BaseModel):
    issued_on: Optional[date] = None


class PaymentRequest(BaseModel):
    """결제 기록 요청"""
    amount: Decimal
    method: str = Field(..., min_length=1)
    reference: Optional[str] = None
    paid_on: Optional[date] = None


@router.post("")
async def create_invoice(request: CreateInvoiceRequest) -> dict:
    invoice = await get_orchestrator().invoices.create_invoice(
        request.client_ref,
        [item.to_line_item() for item in request.line_items],
        project_ref=request.project_ref,
        currency=request.currency,
        due_date=request.due_date,
        notes=request.notes,
    )
    return invoice.to_view()


@router.post("/ad-hoc")
async def create_ad_hoc_invoice(request: AdHocInvoiceRequest) -> dict:
    """
    예산으로 임시 인보이스를 만듭니다.
    예산 해석 신뢰도가 낮으면 응답의 warnings에 표시됩니다.
    """
    invoice = await get_orchestrator().invoices.create_from_budget(
        request.client_ref,
        request.project_type,
        request.budget,
        project_ref=request.project_ref,
        currency=request.currency,
        notes=request.notes,
    )
    return invoice.to_view()


@router.get("")
async def list_invoices(
    status: Optional[InvoiceStatus] = None,
    client_ref: Optional[str] = None,
) -> List[dict]:
    """인보이스 목록 (status는 overdue를 포함한 조회 시점 상태 기준)"""
    invoices = await get_orchestrator().invoices.list_invoices(status=status, client_ref=client_ref)
    return [invoice.to_view() for invoice in invoices]


@router.get("/stats")
async def get_stats(client_ref: Optional[str] = None) -> dict:
    stats = await get_orchestrator().invoices.get_invoice_stats(client_ref=client_ref)
    return stats.model_dump(mode="json")


@router.get("/{invoice_id}")
async def get_invoice(invoice_id: str) -> dict:
    validate_record_id(invoice_id)
    invoice = await get_orchestrator().invoices.get_invoice(invoice_id)
    return invoice.to_view()


# ==================== 상태 전이 ====================

@router.post("/{invoice_id}/send")
async def send_invoice(invoice_id: str, request: Optional[SendRequest] = None) -> dict:
    validate_record_id(invoice_id)
    issued_on = request.issued_on if request else None
    invoice = await get_orchestrator().invoices.send(invoice_id, today=issued_on)
    return invoice.to_view()


@router.post("/{invoice_id}/view")
async def mark_viewed(invoice_id: str) -> dict:
    validate_record_id(invoice_id)
    return (await get_orchestrator().invoices.mark_viewed(invoice_id)).to_view()


@router.post("/{invoice_id}/payments")
async def record_payment(invoice_id: str, request: PaymentRequest) -> dict:
    """결제를 기록합니다. 잔액을 초과하는 금액은 거부됩니다."""
    validate_record_id(invoice_id)
    invoice = await get_orchestrator().invoices.record_payment(
        invoice_id,
        request.amount,
        request.method,
        reference=request.reference,
        paid_on=request.paid_on,
    )
    return invoice.to_view()


@router.post("/{invoice_id}/cancel")
async def cancel_invoice(invoice_id: str) -> dict:
    validate_record_id(invoice_id)
    return (await get_orchestrator().invoices.cancel(invoice_id)).to_view()
