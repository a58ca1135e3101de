"""
검토/확인 상태 머신(Review State Machine) 모듈입니다.

상태 흐름:
    answering_question → reviewing → awaiting_confirmation
        → confirmed (예)
        → awaiting_change_decision (아니오)
            → restarted → answering_question (첫 질문부터)
            → answering_question (선택한 위치부터, truncate-from-point)
"""

import logging
from typing import Callable, Optional

from app.exceptions import IntakeStateError
from app.models import AnswerValue, IntakeSession, IntakeState, QuestionDefinition

from .catalog import QuestionCatalog
from .dependency_resolver import active_questions, choices_for, format_scalar

logger = logging.getLogger(__name__)

SUMMARY_DELIMITER = ", "
EMPTY_SELECTION = "None selected"


def render_prompt(prompt: str, answers: dict[str, AnswerValue]) -> str:
    """프롬프트의 {{question_id}} 자리에 이전 답변을 채웁니다."""
    for question_id, value in answers.items():
        token = "{{" + question_id + "}}"
        if token in prompt:
            prompt = prompt.replace(token, format_value(value))
    return prompt


def format_value(value: AnswerValue, labels: Optional[dict[str, str]] = None) -> str:
    labels = labels or {}
    if isinstance(value, list):
        if not value:
            return EMPTY_SELECTION
        return SUMMARY_DELIMITER.join(labels.get(item, item) for item in value)
    text = format_scalar(value)
    return labels.get(text, text)


class ReviewStateMachine:
    """
    인테이크 세션의 검토 단계를 관리합니다.
    세션 객체를 직접 갱신하며, 특정 답변 수정은 주입받은 edit 함수에 위임합니다.
    """

    def __init__(
        self,
        catalog: QuestionCatalog,
        session: IntakeSession,
        select_for_edit: Callable[[int], object],
    ):
        self.catalog = catalog
        self.session = session
        self._select_for_edit = select_for_edit

    def _require(self, action: str, *states: IntakeState):
        if self.session.state not in states:
            raise IntakeStateError(self.session.state.value, action)

    def build_summary(self) -> str:
        """
        활성 + 답변된 질문을 카탈로그 순서대로 "<prompt>: <value>" 형식으로 나열합니다.
        같은 답변 집합이면 항상 같은 문자열을 반환합니다.
        """
        answers = self.session.answer_map()
        lines = []
        for question in active_questions(self.catalog, answers):
            if question.id not in answers:
                continue
            lines.append(self._summary_line(question, answers))
        return "\n".join(lines)

    def _summary_line(self, question: QuestionDefinition, answers: dict[str, AnswerValue]) -> str:
        labels = {choice.value: choice.label for choice in choices_for(question, answers)}
        prompt = render_prompt(question.prompt, answers)
        return f"{prompt}: {format_value(answers[question.id], labels)}"

    def present_summary(self) -> str:
        """요약을 생성하고 예/아니오 확인 대기 상태로 전환합니다."""
        self._require("present_summary", IntakeState.REVIEWING, IntakeState.AWAITING_CONFIRMATION)
        summary = self.build_summary()
        self.session.state = IntakeState.AWAITING_CONFIRMATION
        self.session.touch()
        return summary

    def confirm(self, accepted: bool) -> Optional[dict[str, AnswerValue]]:
        """
        확인 응답 처리.

        Returns:
            예: 확정된 답변 (질문 ID → 값, 카탈로그 순서)
            아니오: None (변경 방식 선택 대기)
        """
        self._require("confirm", IntakeState.AWAITING_CONFIRMATION)
        self.session.touch()

        if not accepted:
            self.session.state = IntakeState.AWAITING_CHANGE_DECISION
            logger.info(f"[Review] 세션 {self.session.session_id}: 변경 요청")
            return None

        self.session.state = IntakeState.CONFIRMED
        answers = self.session.answer_map()
        finalized = {
            q.id: answers[q.id]
            for q in active_questions(self.catalog, answers)
            if q.id in answers
        }
        logger.info(
            f"[Review] 세션 {self.session.session_id}: 확정 (답변 {len(finalized)}개)"
        )
        return finalized

    def restart(self):
        """세션을 비우고 첫 질문으로 돌아갑니다."""
        self._require("restart", IntakeState.AWAITING_CHANGE_DECISION)
        session = self.session
        session.state = IntakeState.RESTARTED
        session.log = []
        session.discarded = []
        session.valid_length = 0
        session.restart_count += 1
        session.cursor = self.catalog.first().position
        session.state = IntakeState.ANSWERING_QUESTION
        session.touch()
        logger.info(
            f"[Review] 세션 {session.session_id}: 처음부터 다시 시작 ({session.restart_count}회)"
        )

    def edit(self, position: int):
        """특정 답변부터 다시 입력합니다 (truncate-from-point)."""
        self._require("edit", IntakeState.AWAITING_CHANGE_DECISION)
        return self._select_for_edit(position)
