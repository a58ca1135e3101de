"""
인보이스 수명주기 상태 머신(Invoice Lifecycle State Machine)입니다.

상태 전이:
┌───────────────┬──────────────────────────────────────┬────────────────────────┐
│ 동작          │ 출발 상태                            │ 도착 상태              │
├───────────────┼──────────────────────────────────────┼────────────────────────┤
│ send          │ draft                                │ sent                   │
│ mark_viewed   │ sent, overdue (viewed/partial: 무시) │ viewed                 │
│ record_payment│ sent, viewed, partial, overdue       │ partial 또는 paid      │
│ cancel        │ 종료 상태가 아닌 모든 상태           │ cancelled              │
└───────────────┴──────────────────────────────────────┴────────────────────────┘

overdue는 저장하지 않고 조회 시 계산합니다 (Invoice.effective_status).
종료 상태(paid, cancelled)에서의 모든 동작은 InvalidTransitionError입니다.

InvoiceStateMachine은 순수 함수 모음이고, InvoiceService가 저장소/알림 포트와 연결합니다.
"""

import logging
import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional

from app.config import get_settings
from app.exceptions import (
    InputValidationError,
    InvalidTransitionError,
    InvoiceNumberCollisionError,
    NotFoundError,
    OverpaymentError,
    PipelineError,
    StorageError,
)
from app.layers.layer2_budget import parse_budget
from app.layers.layer3_pricing import ProposalService
from app.layers.layer4_line_items import generate_line_items, line_items_from_proposal
from app.models import (
    DomainEvent,
    EventName,
    Invoice,
    InvoiceStats,
    InvoiceStatus,
    LineItem,
    OUTSTANDING_STATUSES,
    PaymentRecord,
    ProposalStatus,
    TERMINAL_STATUSES,
)
from app.services.notifications import NotificationPort
from app.services.repository import PersistencePort, WriteOutcome, update_with_retry
from app.utils import validate_currency, validate_payment_amount

from .invoice_numbering import generate_invoice_number

logger = logging.getLogger(__name__)

# 동작 → 허용되는 저장 상태
ALLOWED_SOURCES: dict[str, frozenset[InvoiceStatus]] = {
    "send": frozenset({InvoiceStatus.DRAFT}),
    "mark_viewed": frozenset(
        {InvoiceStatus.SENT, InvoiceStatus.VIEWED, InvoiceStatus.PARTIAL, InvoiceStatus.OVERDUE}
    ),
    "record_payment": OUTSTANDING_STATUSES,
    "cancel": frozenset(set(InvoiceStatus) - TERMINAL_STATUSES),
}


class InvoiceStateMachine:
    """인보이스 상태 전이를 계산합니다. 입력을 바꾸지 않고 새 Invoice를 반환합니다."""

    @staticmethod
    def check(invoice: Invoice, action: str):
        """
        동작이 현재 상태에서 허용되는지 확인합니다.

        Raises:
            InvalidTransitionError: 현재 상태와 시도한 동작을 담은 거부
        """
        if invoice.status not in ALLOWED_SOURCES[action]:
            raise InvalidTransitionError(
                invoice.status.value,
                action,
                details={
                    "invoice_id": invoice.id,
                    "current_state": invoice.status.value,
                    "action": action,
                },
            )

    @staticmethod
    def _updated(invoice: Invoice, **changes) -> Invoice:
        return invoice.model_copy(update={**changes, "updated_at": datetime.now()})

    @classmethod
    def send(
        cls,
        invoice: Invoice,
        today: Optional[date] = None,
        payment_due_days: Optional[int] = None,
    ) -> Invoice:
        """draft → sent. 발행일을 기록하고 지급 기한이 없으면 채웁니다."""
        cls.check(invoice, "send")
        if not invoice.line_items:
            raise InputValidationError(
                "라인 아이템이 없는 인보이스는 발송할 수 없습니다",
                details={"invoice_id": invoice.id},
            )
        # 합계가 0 이하이면 결제로 paid에 도달할 수 없음
        if invoice.amount_total <= 0:
            raise InputValidationError(
                "합계가 0 이하인 인보이스는 발송할 수 없습니다",
                details={"invoice_id": invoice.id, "amount_total": str(invoice.amount_total)},
            )
        today = today or date.today()
        if payment_due_days is None:
            payment_due_days = get_settings().payment_due_days
        due_date = invoice.due_date or today + timedelta(days=payment_due_days)
        return cls._updated(
            invoice, status=InvoiceStatus.SENT, issued_date=today, due_date=due_date
        )

    @classmethod
    def mark_viewed(cls, invoice: Invoice) -> Invoice:
        """sent → viewed. 참고용 이벤트이며 viewed/partial에서는 변화 없음."""
        cls.check(invoice, "mark_viewed")
        if invoice.status in (InvoiceStatus.VIEWED, InvoiceStatus.PARTIAL):
            return invoice
        return cls._updated(invoice, status=InvoiceStatus.VIEWED)

    @classmethod
    def record_payment(
        cls,
        invoice: Invoice,
        amount: Any,
        method: str,
        reference: Optional[str] = None,
        paid_on: Optional[date] = None,
    ) -> Invoice:
        """
        결제를 기록합니다.
        잔액보다 적으면 partial, 잔액을 채우면 paid(종료)로 전환합니다.

        Raises:
            InputValidationError: 0 이하의 금액
            OverpaymentError: 잔액을 초과하는 금액
        """
        cls.check(invoice, "record_payment")
        payment = validate_payment_amount(amount)
        paid_on = paid_on or date.today()

        if payment > invoice.amount_due:
            raise OverpaymentError(
                f"결제 금액이 잔액을 초과합니다 (잔액 {invoice.amount_due}, 결제 {payment})",
                details={
                    "invoice_id": invoice.id,
                    "amount_due": str(invoice.amount_due),
                    "amount": str(payment),
                },
            )

        amount_paid = invoice.amount_paid + payment
        fully_paid = amount_paid >= invoice.amount_total
        record = PaymentRecord(amount=payment, method=method, reference=reference, paid_on=paid_on)

        return cls._updated(
            invoice,
            amount_paid=amount_paid,
            status=InvoiceStatus.PAID if fully_paid else InvoiceStatus.PARTIAL,
            paid_date=paid_on if fully_paid else invoice.paid_date,
            payment_method=method,
            payment_reference=reference,
            payments=[*invoice.payments, record],
        )

    @classmethod
    def cancel(cls, invoice: Invoice) -> Invoice:
        """종료 상태가 아닌 모든 상태 → cancelled."""
        cls.check(invoice, "cancel")
        return cls._updated(invoice, status=InvoiceStatus.CANCELLED)


class InvoiceService:
    """
    인보이스 생성과 상태 전이를 저장소에 반영하는 서비스입니다.

    모든 상태 변경은 읽기 → 계산 → 버전 지정 쓰기이며,
    버전 충돌 시 write_attempts 횟수까지 전체 사이클을 다시 시도합니다.
    """

    def __init__(
        self,
        repository: PersistencePort,
        notifier: NotificationPort,
        proposals: Optional[ProposalService] = None,
    ):
        settings = get_settings()
        self.repository = repository
        self.notifier = notifier
        self.proposals = proposals
        self.write_attempts = settings.write_attempts
        self.invoice_number_attempts = settings.invoice_number_attempts
        self.default_currency = settings.default_currency
        self.payment_due_days = settings.payment_due_days

    # ==================== 생성 ====================

    async def create_invoice(
        self,
        client_ref: str,
        line_items: list[LineItem],
        project_ref: Optional[str] = None,
        currency: Optional[str] = None,
        due_date: Optional[date] = None,
        notes: str = "",
        proposal_id: Optional[str] = None,
        warnings: Optional[list[str]] = None,
        invoice_id: Optional[str] = None,
    ) -> Invoice:
        """
        draft 인보이스를 생성합니다.
        저장소가 번호 중복을 보고하면 새 번호로 다시 시도합니다.
        invoice_id를 주면 그 ID로 생성합니다 (제안서 전환 시 미리 선점한 ID).

        Raises:
            InvoiceNumberCollisionError: 모든 시도에서 번호가 중복됨
        """
        currency = validate_currency(currency or self.default_currency)
        attempts = max(self.invoice_number_attempts, 2)

        invoice_id = invoice_id or str(uuid.uuid4())

        for attempt in range(attempts):
            invoice = Invoice(
                id=invoice_id,
                invoice_number=generate_invoice_number(attempt=attempt),
                client_ref=client_ref,
                project_ref=project_ref,
                currency=currency,
                due_date=due_date,
                line_items=list(line_items),
                notes=notes,
                proposal_id=proposal_id,
                warnings=list(warnings or []),
            )
            outcome = await self.repository.write_invoice(invoice, None)
            if outcome == WriteOutcome.OK:
                logger.info(
                    f"[InvoiceService] 인보이스 생성: {invoice.invoice_number} "
                    f"(합계 {invoice.amount_total} {currency})"
                )
                return invoice
            if outcome == WriteOutcome.CONFLICT:
                raise StorageError(
                    f"인보이스 ID가 이미 존재합니다: {invoice.id}",
                    details={"invoice_id": invoice.id},
                )
            logger.warning(
                f"[InvoiceService] 인보이스 번호 중복, 재생성 ({attempt + 1}/{attempts}): "
                f"{invoice.invoice_number}"
            )

        raise InvoiceNumberCollisionError(
            "인보이스 번호를 생성하지 못했습니다 (중복)",
            details={"attempts": attempts},
        )

    async def create_from_budget(
        self,
        client_ref: str,
        project_type: str,
        budget: Any,
        project_ref: Optional[str] = None,
        currency: Optional[str] = None,
        notes: str = "",
    ) -> Invoice:
        """
        예산 문자열로 임시(ad hoc) 인보이스를 만듭니다.
        예산 해석 신뢰도가 낮으면 인보이스에 경고를 남깁니다.
        """
        budget_range = parse_budget(budget)
        warnings = []
        if budget_range.is_low_confidence:
            warning = (
                f"Budget '{budget_range.source}' was interpreted with "
                f"{budget_range.confidence.value} confidence; "
                f"line items are based on an estimated baseline of {budget_range.baseline_amount}"
            )
            warnings.append(warning)
            logger.warning(f"[InvoiceService] 예산 신뢰도 낮음: {budget_range.source!r} → {budget_range.baseline_amount}")

        line_items = generate_line_items(project_type, budget_range.baseline_amount)
        return await self.create_invoice(
            client_ref,
            line_items,
            project_ref=project_ref,
            currency=currency,
            notes=notes,
            warnings=warnings,
        )

    async def create_from_proposal(self, proposal_id: str) -> Invoice:
        """
        수락된 제안서를 인보이스로 전환하고 제안서를 converted로 표시합니다.

        제안서를 먼저 converted로 선점한 뒤 인보이스를 만들므로,
        동시에 전환을 요청해도 인보이스는 하나만 생성됩니다.
        인보이스 생성이 실패하면 제안서를 accepted로 되돌립니다.

        Raises:
            InvalidTransitionError: 제안서가 accepted 상태가 아님
        """
        if self.proposals is None:
            raise StorageError("제안서 서비스가 설정되지 않았습니다")

        proposal = await self.proposals.get(proposal_id)
        if proposal.status != ProposalStatus.ACCEPTED:
            raise InvalidTransitionError(proposal.status.value, "convert")

        breakdown = self.proposals.calculator.breakdown(proposal)
        notes = proposal.notes
        if breakdown.maintenance_plan is not None:
            plan = breakdown.maintenance_plan
            notes = (
                f"{notes}\n" if notes else ""
            ) + f"Maintenance plan: {plan.name} ({plan.monthly_price}/month, billed separately)"

        invoice_id = str(uuid.uuid4())
        proposal = await self.proposals.mark_converted(proposal.id, invoice_id)

        try:
            invoice = await self.create_invoice(
                proposal.client_ref,
                line_items_from_proposal(breakdown),
                project_ref=proposal.project_ref,
                notes=notes,
                proposal_id=proposal.id,
                invoice_id=invoice_id,
            )
        except PipelineError:
            await self.proposals.release_conversion(proposal.id, invoice_id)
            raise
        logger.info(f"[InvoiceService] 제안서 {proposal.id} → 인보이스 {invoice.invoice_number}")
        return invoice

    # ==================== 조회 ====================

    async def get_invoice(self, invoice_id: str) -> Invoice:
        stored = await self.repository.read_invoice(invoice_id)
        if stored is None:
            raise NotFoundError(
                f"인보이스를 찾을 수 없습니다: {invoice_id}", details={"invoice_id": invoice_id}
            )
        return stored[0]

    async def list_invoices(
        self,
        status: Optional[InvoiceStatus] = None,
        client_ref: Optional[str] = None,
        today: Optional[date] = None,
    ) -> list[Invoice]:
        """상태 필터는 조회 시점의 파생 상태(overdue 포함) 기준입니다."""
        invoices = await self.repository.list_invoices()
        return [
            invoice
            for invoice in invoices
            if (status is None or invoice.effective_status(today) == status)
            and (client_ref is None or invoice.client_ref == client_ref)
        ]

    async def get_invoice_stats(
        self, client_ref: Optional[str] = None, today: Optional[date] = None
    ) -> InvoiceStats:
        stats = InvoiceStats()
        for invoice in await self.list_invoices(client_ref=client_ref, today=today):
            status = invoice.effective_status(today)
            stats.total_invoices += 1
            stats.by_status[status.value] = stats.by_status.get(status.value, 0) + 1
            if status == InvoiceStatus.CANCELLED:
                continue
            stats.total_amount += invoice.amount_total
            stats.total_paid += invoice.amount_paid
            if status in OUTSTANDING_STATUSES:
                stats.total_outstanding += invoice.amount_due
            if status == InvoiceStatus.OVERDUE:
                stats.overdue_count += 1
        return stats

    # ==================== 상태 전이 ====================

    async def _apply(self, invoice_id: str, compute) -> Invoice:
        return await update_with_retry(
            read=lambda: self.repository.read_invoice(invoice_id),
            write=self.repository.write_invoice,
            compute=compute,
            attempts=self.write_attempts,
            label=invoice_id,
        )

    async def send(self, invoice_id: str, today: Optional[date] = None) -> Invoice:
        invoice = await self._apply(
            invoice_id,
            lambda inv: InvoiceStateMachine.send(inv, today, self.payment_due_days),
        )
        await self.notifier.emit(
            DomainEvent(
                name=EventName.INVOICE_SENT,
                subject_id=invoice.id,
                payload={
                    "invoice_number": invoice.invoice_number,
                    "client_ref": invoice.client_ref,
                    "amount_total": str(invoice.amount_total),
                    "due_date": invoice.due_date.isoformat() if invoice.due_date else None,
                },
            )
        )
        return invoice

    async def mark_viewed(self, invoice_id: str) -> Invoice:
        return await self._apply(invoice_id, InvoiceStateMachine.mark_viewed)

    async def record_payment(
        self,
        invoice_id: str,
        amount: Any,
        method: str,
        reference: Optional[str] = None,
        paid_on: Optional[date] = None,
    ) -> Invoice:
        invoice = await self._apply(
            invoice_id,
            lambda inv: InvoiceStateMachine.record_payment(inv, amount, method, reference, paid_on),
        )
        logger.info(
            f"[InvoiceService] 결제 기록: {invoice.invoice_number} "
            f"{amount} ({invoice.amount_paid}/{invoice.amount_total}) → {invoice.status.value}"
        )
        if invoice.status == InvoiceStatus.PAID:
            await self.notifier.emit(
                DomainEvent(
                    name=EventName.INVOICE_PAID,
                    subject_id=invoice.id,
                    payload={
                        "invoice_number": invoice.invoice_number,
                        "amount_paid": str(invoice.amount_paid),
                        "paid_date": invoice.paid_date.isoformat() if invoice.paid_date else None,
                    },
                )
            )
        return invoice

    async def cancel(self, invoice_id: str) -> Invoice:
        invoice = await self._apply(invoice_id, InvoiceStateMachine.cancel)
        logger.info(f"[InvoiceService] 인보이스 취소: {invoice.invoice_number}")
        return invoice
