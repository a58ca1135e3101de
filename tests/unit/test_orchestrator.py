"""
PipelineOrchestrator 단위 테스트.
인테이크 이벤트 처리/저장과 확정된 인테이크 → 제안서 인계를 확인합니다.
"""

import asyncio
from decimal import Decimal

import pytest

from app.exceptions import InputValidationError, IntakeStateError, NotFoundError
from app.models import (
    AnswerSubmitted,
    ConfirmReview,
    IntakeState,
    NavigateBack,
    ProposalRequest,
    ProposalStatus,
)
from app.services.orchestrator import PipelineOrchestrator


@pytest.fixture
def orchestrator(repository, notifier):
    return PipelineOrchestrator(repository=repository, notifier=notifier)


async def _answer_all(orchestrator, session_id, answers):
    response = None
    for value in answers:
        response = await orchestrator.handle_intake_event(session_id, AnswerSubmitted(value=value))
    return response


class TestIntakeFlow:
    async def test_start_returns_first_question(self, orchestrator, repository):
        response = await orchestrator.start_intake()
        assert response.state == IntakeState.ANSWERING_QUESTION
        assert response.directive.question_id == "name"
        assert await repository.get_session(response.session_id) is not None

    async def test_events_are_persisted(self, orchestrator, repository):
        session_id = (await orchestrator.start_intake()).session_id
        response = await orchestrator.handle_intake_event(session_id, AnswerSubmitted(value="Jane"))

        assert response.directive.question_id == "email"
        assert "Jane" in response.directive.prompt
        stored = await repository.get_session(session_id)
        assert stored.answer_map() == {"name": "Jane"}

        await orchestrator.handle_intake_event(session_id, NavigateBack())
        assert (await orchestrator.get_intake(session_id)).directive.question_id == "name"

    async def test_invalid_answer_does_not_save(self, orchestrator, repository):
        session_id = (await orchestrator.start_intake()).session_id
        await orchestrator.handle_intake_event(session_id, AnswerSubmitted(value="Jane"))

        with pytest.raises(InputValidationError):
            await orchestrator.handle_intake_event(session_id, AnswerSubmitted(value="not-an-email"))

        stored = await repository.get_session(session_id)
        assert stored.valid_length == 1

    async def test_unknown_session(self, orchestrator):
        with pytest.raises(NotFoundError):
            await orchestrator.handle_intake_event("no-such-session", NavigateBack())
        assert "no-such-session" not in orchestrator._session_locks

    async def test_last_answer_presents_summary(self, orchestrator, default_flow_answers):
        session_id = (await orchestrator.start_intake()).session_id
        response = await _answer_all(orchestrator, session_id, default_flow_answers)

        assert response.state == IntakeState.AWAITING_CONFIRMATION
        assert response.directive is None
        assert "Small Business Website (5-10 pages)" in response.summary
        assert (await orchestrator.get_intake(session_id)).summary == response.summary


class TestProposalFromIntake:
    async def test_confirmed_intake_creates_proposal(self, orchestrator, default_flow_answers):
        session_id = (await orchestrator.start_intake()).session_id
        await _answer_all(orchestrator, session_id, default_flow_answers)
        confirmed = await orchestrator.handle_intake_event(session_id, ConfirmReview(accepted=True))
        assert confirmed.state == IntakeState.CONFIRMED
        assert confirmed.finalized_answers["budget"] == "2k-5k"

        proposal = await orchestrator.create_proposal_from_intake(session_id)

        assert proposal.status == ProposalStatus.DRAFT
        assert proposal.client_ref == "jane@example.com"
        assert proposal.project_ref == "Acme Bakery"
        assert proposal.tier_id == "business-site-good"
        assert proposal.add_ons == frozenset({"blog", "booking"})
        assert proposal.computed_total == Decimal("4050.00")
        assert proposal.budget.baseline_amount == Decimal("3500")

    async def test_unconfirmed_intake_is_rejected(self, orchestrator):
        session_id = (await orchestrator.start_intake()).session_id
        with pytest.raises(IntakeStateError) as exc_info:
            await orchestrator.create_proposal_from_intake(session_id)
        assert exc_info.value.state == "answering_question"

    async def test_handoff_removes_session_and_lock(self, orchestrator, repository, default_flow_answers):
        """제안서로 넘긴 세션은 저장소와 잠금 테이블에서 모두 사라진다."""
        session_id = (await orchestrator.start_intake()).session_id
        await _answer_all(orchestrator, session_id, default_flow_answers)
        await orchestrator.handle_intake_event(session_id, ConfirmReview(accepted=True))
        assert session_id in orchestrator._session_locks

        await orchestrator.create_proposal_from_intake(session_id)

        assert await repository.get_session(session_id) is None
        assert session_id not in orchestrator._session_locks
        with pytest.raises(NotFoundError):
            await orchestrator.create_proposal_from_intake(session_id)
        assert session_id not in orchestrator._session_locks

    async def test_concurrent_handoff_creates_one_proposal(self, file_repository, notifier, default_flow_answers):
        orchestrator = PipelineOrchestrator(repository=file_repository, notifier=notifier)
        session_id = (await orchestrator.start_intake()).session_id
        await _answer_all(orchestrator, session_id, default_flow_answers)
        await orchestrator.handle_intake_event(session_id, ConfirmReview(accepted=True))

        results = await asyncio.gather(
            orchestrator.create_proposal_from_intake(session_id),
            orchestrator.create_proposal_from_intake(session_id),
            return_exceptions=True,
        )

        assert sum(isinstance(result, ProposalRequest) for result in results) == 1
        assert sum(isinstance(result, NotFoundError) for result in results) == 1
        assert orchestrator._session_locks == {}
