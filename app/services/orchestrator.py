"""
인테이크 → 제안서 → 인보이스 파이프라인의 전체 흐름을 관리하는 오케스트레이터입니다.

처리 단계(파이프라인):
1. 인테이크 (Intake): 질문/답변, 수정, 검토/확정
2. 예산 해석 (Budget): 확정된 예산 답변을 기준 금액으로 변환
3. 제안서 (Pricing): 추천 티어 + 선택 기능으로 제안서 구성
4. 라인 아이템 (Line Items): 수락된 제안서 또는 예산을 인보이스 항목으로 변환
5. 인보이스 (Invoice): 발송/결제/취소 수명주기
"""

import asyncio
import logging
from typing import Optional

from app.exceptions import IntakeStateError, NotFoundError
from app.models import (
    IntakeEvent,
    IntakeResponse,
    IntakeSession,
    IntakeState,
    ProposalRequest,
)
from app.services.notifications import NotificationPort, get_notifier
from app.services.repository import PersistencePort, get_repository

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """
    각 레이어의 처리기를 저장소/알림 포트와 연결하고,
    확정된 인테이크를 제안서 단계로 넘기는 클래스입니다.
    """

    def __init__(
        self,
        repository: Optional[PersistencePort] = None,
        notifier: Optional[NotificationPort] = None,
        question_catalog=None,
        pricing_catalog=None,
    ):
        self.repository = repository or get_repository()
        self.notifier = notifier or get_notifier()

        # 순환 참조를 피하기 위해 레이어는 여기서 import 합니다.
        from app.layers.layer1_intake import get_default_catalog
        from app.layers.layer3_pricing import (
            ProposalCalculator,
            ProposalService,
            get_pricing_catalog,
        )
        from app.layers.layer5_invoice import InvoiceService

        self.question_catalog = question_catalog or get_default_catalog()
        self.calculator = ProposalCalculator(pricing_catalog or get_pricing_catalog())
        self.proposals = ProposalService(self.calculator, self.repository, self.notifier)
        self.invoices = InvoiceService(self.repository, self.notifier, self.proposals)

        # 세션별 이벤트 직렬화 (한 이벤트가 끝난 뒤 다음 이벤트 처리)
        self._session_locks: dict[str, asyncio.Lock] = {}

    # ==================== 1단계: 인테이크 ====================

    def _navigator(self, session: IntakeSession):
        from app.layers.layer1_intake import IntakeNavigator

        return IntakeNavigator(self.question_catalog, session)

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        return self._session_locks.setdefault(session_id, asyncio.Lock())

    def _release_lock(self, session_id: str):
        """더 이상 이벤트를 받지 않는 세션(삭제됨/없음)의 잠금을 정리합니다."""
        self._session_locks.pop(session_id, None)

    async def _load_session(self, session_id: str) -> IntakeSession:
        session = await self.repository.get_session(session_id)
        if session is None:
            raise NotFoundError(
                f"인테이크 세션을 찾을 수 없습니다: {session_id}",
                details={"session_id": session_id},
            )
        return session

    async def start_intake(self) -> IntakeResponse:
        """새 인테이크 세션을 만들고 첫 질문을 반환합니다."""
        navigator = self._navigator(IntakeSession())
        await self.repository.save_session(navigator.session)
        logger.info(f"[Orchestrator] 인테이크 세션 시작: {navigator.session.session_id}")
        return navigator.response()

    async def get_intake(self, session_id: str) -> IntakeResponse:
        """현재 질문(또는 검토 요약)을 다시 조회합니다."""
        navigator = self._navigator(await self._load_session(session_id))
        summary = None
        if navigator.session.state == IntakeState.AWAITING_CONFIRMATION:
            summary = navigator.review.build_summary()
        return navigator.response(summary=summary)

    async def handle_intake_event(self, session_id: str, event: IntakeEvent) -> IntakeResponse:
        """
        인테이크 이벤트 하나를 처리하고 세션을 저장합니다.
        검증 에러가 나면 세션은 저장되지 않습니다.
        """
        async with self._lock_for(session_id):
            try:
                session = await self._load_session(session_id)
            except NotFoundError:
                self._release_lock(session_id)
                raise
            navigator = self._navigator(session)
            response = navigator.handle(event)
            await self.repository.save_session(navigator.session)
            return response

    async def intake_summary(self, session_id: str) -> str:
        navigator = self._navigator(await self._load_session(session_id))
        return navigator.review.build_summary()

    # ==================== 2~3단계: 예산 해석 + 제안서 ====================

    async def create_proposal_from_intake(self, session_id: str) -> ProposalRequest:
        """
        확정된 인테이크 답변으로 제안서를 만듭니다.
        예산 답변으로 추천 티어를 고르고, 선택한 기능 중 추가 가능한 것은 add-on으로 담습니다.
        제안서로 넘긴 세션은 삭제되므로 같은 세션으로 두 번 만들 수 없습니다.
        """
        async with self._lock_for(session_id):
            try:
                session = await self._load_session(session_id)
            except NotFoundError:
                self._release_lock(session_id)
                raise
            if session.state != IntakeState.CONFIRMED:
                raise IntakeStateError(session.state.value, "create_proposal")

            proposal = await self._propose(session)
            await self.repository.delete_session(session_id)

        self._release_lock(session_id)
        logger.info(
            f"[Orchestrator] 인테이크 {session_id} → 제안서 {proposal.id} "
            f"(티어 {proposal.tier_id}, 합계 {proposal.computed_total})"
        )
        return proposal

    async def _propose(self, session: IntakeSession) -> ProposalRequest:
        from app.layers.layer2_budget import parse_budget

        answers = session.answer_map()
        budget = parse_budget(answers.get("budget"))
        client_ref = str(answers.get("email") or answers.get("name") or session.session_id)

        proposal = await self.proposals.create(
            project_type=str(answers.get("projectType", "other")),
            client_ref=client_ref,
            project_ref=str(answers["company"]) if answers.get("company") else None,
            budget=budget,
            notes=str(answers.get("projectDescription", "")),
        )

        requested = answers.get("features") or []
        if isinstance(requested, list):
            available = {feature.id for feature in self.calculator.available_add_ons(proposal)}
            for feature_id in requested:
                if feature_id in available:
                    proposal = await self.proposals.toggle_add_on(proposal.id, feature_id)
        return proposal


# 싱글톤 인스턴스 (API 계층에서 공유)
_orchestrator: Optional[PipelineOrchestrator] = None


def get_orchestrator() -> PipelineOrchestrator:
    """오케스트레이터 인스턴스를 가져오거나 생성하는 함수"""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = PipelineOrchestrator()
    return _orchestrator
