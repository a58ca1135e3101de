"""
제안서 서비스입니다.
ProposalCalculator의 순수 계산을 저장소(버전 지정 쓰기)와 알림 포트에 연결합니다.
"""

import logging
from typing import Callable, Optional

from app.config import get_settings
from app.exceptions import NotFoundError, StorageError
from app.models import (
    BudgetRange,
    DomainEvent,
    EventName,
    PriceBreakdown,
    ProposalRequest,
)
from app.services.notifications import NotificationPort
from app.services.repository import PersistencePort, WriteOutcome, update_with_retry

from .pricing_calculator import ProposalCalculator

logger = logging.getLogger(__name__)


class ProposalService:
    """제안서 생성/조작/상태 전이를 저장소에 반영합니다."""

    def __init__(
        self,
        calculator: ProposalCalculator,
        repository: PersistencePort,
        notifier: NotificationPort,
        write_attempts: Optional[int] = None,
    ):
        self.calculator = calculator
        self.repository = repository
        self.notifier = notifier
        self.write_attempts = write_attempts or get_settings().write_attempts

    async def create(
        self,
        project_type: str,
        client_ref: str,
        project_ref: Optional[str] = None,
        budget: Optional[BudgetRange] = None,
        notes: str = "",
    ) -> ProposalRequest:
        proposal = self.calculator.start_proposal(
            project_type, client_ref, project_ref=project_ref, budget=budget, notes=notes
        )
        outcome = await self.repository.write_proposal(proposal, None)
        if outcome != WriteOutcome.OK:
            raise StorageError(
                f"제안서를 저장하지 못했습니다: {proposal.id}",
                details={"outcome": outcome.value},
            )
        return proposal

    async def get(self, proposal_id: str) -> ProposalRequest:
        stored = await self.repository.read_proposal(proposal_id)
        if stored is None:
            raise NotFoundError(
                f"제안서를 찾을 수 없습니다: {proposal_id}", details={"proposal_id": proposal_id}
            )
        return stored[0]

    async def breakdown(self, proposal_id: str) -> PriceBreakdown:
        return self.calculator.breakdown(await self.get(proposal_id))

    async def _apply(
        self, proposal_id: str, compute: Callable[[ProposalRequest], ProposalRequest]
    ) -> ProposalRequest:
        return await update_with_retry(
            read=lambda: self.repository.read_proposal(proposal_id),
            write=self.repository.write_proposal,
            compute=compute,
            attempts=self.write_attempts,
            label=proposal_id,
        )

    # ==================== 선택 조작 ====================

    async def select_tier(self, proposal_id: str, tier_id: str) -> ProposalRequest:
        return await self._apply(proposal_id, lambda p: self.calculator.select_tier(p, tier_id))

    async def switch_tier(self, proposal_id: str, tier_id: str) -> ProposalRequest:
        return await self._apply(proposal_id, lambda p: self.calculator.switch_tier(p, tier_id))

    async def toggle_add_on(self, proposal_id: str, feature_id: str) -> ProposalRequest:
        return await self._apply(
            proposal_id, lambda p: self.calculator.toggle_add_on(p, feature_id)
        )

    async def select_maintenance_plan(
        self, proposal_id: str, plan_id: Optional[str]
    ) -> ProposalRequest:
        return await self._apply(
            proposal_id, lambda p: self.calculator.select_maintenance_plan(p, plan_id)
        )

    # ==================== 상태 전이 ====================

    async def submit(self, proposal_id: str) -> ProposalRequest:
        proposal = await self._apply(proposal_id, self.calculator.submit)
        await self.notifier.emit(
            DomainEvent(
                name=EventName.PROPOSAL_SUBMITTED,
                subject_id=proposal.id,
                payload={
                    "client_ref": proposal.client_ref,
                    "tier_id": proposal.tier_id,
                    "computed_total": str(proposal.computed_total),
                },
            )
        )
        logger.info(f"[ProposalService] 제안서 제출: {proposal.id} (합계 {proposal.computed_total})")
        return proposal

    async def accept(self, proposal_id: str) -> ProposalRequest:
        return await self._apply(proposal_id, self.calculator.accept)

    async def reject(self, proposal_id: str) -> ProposalRequest:
        return await self._apply(proposal_id, self.calculator.reject)

    async def mark_converted(self, proposal_id: str, invoice_id: str) -> ProposalRequest:
        return await self._apply(
            proposal_id, lambda p: self.calculator.mark_converted(p, invoice_id)
        )

    async def release_conversion(self, proposal_id: str, invoice_id: str) -> ProposalRequest:
        proposal = await self._apply(
            proposal_id, lambda p: self.calculator.release_conversion(p, invoice_id)
        )
        logger.warning(f"[ProposalService] 전환 취소, accepted로 복귀: {proposal.id}")
        return proposal
