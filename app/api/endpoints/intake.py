"""
대화형 인테이크 API입니다.
세션을 시작하고, 답변/이동/수정/확인 이벤트를 보내고, 확정된 답변으로 제안서를 만듭니다.
"""

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from app.models import IntakeEvent, IntakeResponse
from app.services.orchestrator import get_orchestrator
from app.utils import validate_record_id

logger = logging.getLogger(__name__)

router = APIRouter()


class IntakeEventRequest(BaseModel):
    """
    인테이크 이벤트 요청.

    예: {"event": {"type": "answer_submitted", "value": "Jane"}}
    """
    event: IntakeEvent


@router.post("/sessions", response_model=IntakeResponse)
async def start_session() -> IntakeResponse:
    """새 인테이크 세션을 만들고 첫 질문 표시 지시를 반환합니다."""
    return await get_orchestrator().start_intake()


@router.get("/sessions/{session_id}", response_model=IntakeResponse)
async def get_session(session_id: str) -> IntakeResponse:
    """현재 질문(또는 확인 대기 중인 요약)을 다시 가져옵니다."""
    validate_record_id(session_id)
    return await get_orchestrator().get_intake(session_id)


@router.post("/sessions/{session_id}/events", response_model=IntakeResponse)
async def post_event(session_id: str, request: IntakeEventRequest) -> IntakeResponse:
    """
    이벤트 하나를 처리합니다.

    이벤트 종류:
    - answer_submitted: 현재 질문에 답변
    - navigate_back: 이전 질문으로 (이후 답변은 폐기)
    - edit_question: 특정 위치의 질문을 다시 답변 (이후 답변은 폐기)
    - confirm: 검토 요약 확인 (accepted=true면 확정)
    - change_decision: 확인 거절 후 처음부터 다시(restart) 또는 특정 답변 수정(edit)
    """
    validate_record_id(session_id)
    return await get_orchestrator().handle_intake_event(session_id, request.event)


@router.get("/sessions/{session_id}/summary")
async def get_summary(session_id: str) -> dict:
    validate_record_id(session_id)
    summary = await get_orchestrator().intake_summary(session_id)
    return {"session_id": session_id, "summary": summary}


@router.post("/sessions/{session_id}/proposal")
async def create_proposal(session_id: str) -> dict:
    """확정된 인테이크로 제안서를 만듭니다 (추천 티어 + 선택한 기능)."""
    validate_record_id(session_id)
    orchestrator = get_orchestrator()
    proposal = await orchestrator.create_proposal_from_intake(session_id)
    breakdown = orchestrator.calculator.breakdown(proposal)
    return {
        "proposal": proposal.model_dump(mode="json"),
        "breakdown": breakdown.model_dump(mode="json"),
    }
