"""
탐색/수정 컨트롤러(Navigation & Edit Controller) 모듈입니다.

세션의 답변 로그는 append-only이며 valid_length가 유효 구간을 가리킵니다.
특정 위치를 수정하면 그 위치 이후의 모든 답변이 유효 구간에서 빠지고(discarded에 보관),
이후 질문은 새 답변 기준으로 다시 수집됩니다 (truncate-from-point).
값을 제자리에서 바꾸는 수정은 없습니다.

세션 하나는 단일 스레드로 처리되며, 이벤트 하나가 완전히 반영된 후 다음 이벤트를 받습니다.
"""

import logging
import math
import re
from typing import Optional

from app.exceptions import InputValidationError, IntakeStateError
from app.models import (
    Answer,
    AnswerSubmitted,
    AnswerValue,
    ChangeDecision,
    ConfirmReview,
    EditQuestion,
    InputKind,
    IntakeEvent,
    IntakeResponse,
    IntakeSession,
    IntakeState,
    NavigateBack,
    QuestionDefinition,
    RenderDirective,
)

from .catalog import CHOICE_KINDS, QuestionCatalog
from .dependency_resolver import active_questions, choices_for
from .review import ReviewStateMachine, render_prompt

logger = logging.getLogger(__name__)


class IntakeNavigator:
    """
    인테이크 세션 하나를 진행시키는 컨트롤러입니다.

    사용 예:
        navigator = IntakeNavigator(get_default_catalog())
        directive = navigator.render()
        response = navigator.handle(AnswerSubmitted(value="Jane"))
    """

    def __init__(self, catalog: QuestionCatalog, session: Optional[IntakeSession] = None):
        self.catalog = catalog
        self.session = session or IntakeSession()
        if self.session.cursor is None and self.session.state == IntakeState.ANSWERING_QUESTION:
            self.session.cursor = self._next_position()
        self.review = ReviewStateMachine(catalog, self.session, self.select_for_edit)

    # ==================== 조회 ====================

    def current_question(self) -> Optional[QuestionDefinition]:
        if self.session.cursor is None:
            return None
        return self.catalog.at_position(self.session.cursor)

    def active_sequence(self) -> list[QuestionDefinition]:
        """현재 유효 답변 기준의 활성 질문 순서."""
        return active_questions(self.catalog, self.session.answer_map())

    def _next_position(self) -> Optional[int]:
        """다음 '활성이면서 미답변'인 질문의 position."""
        answers = self.session.answer_map()
        for question in active_questions(self.catalog, answers):
            if question.id not in answers:
                return question.position
        return None

    def _require(self, action: str, *states: IntakeState):
        if self.session.state not in states:
            raise IntakeStateError(self.session.state.value, action)

    def render(self) -> RenderDirective:
        """현재 질문의 표시 지시를 만듭니다."""
        question = self.current_question()
        if question is None:
            raise IntakeStateError(self.session.state.value, "render")

        answers = self.session.answer_map()
        choices = choices_for(question, answers) if question.input_kind in CHOICE_KINDS else None
        return RenderDirective(
            question_id=question.id,
            position=question.position,
            prompt=render_prompt(question.prompt, answers),
            input_kind=question.input_kind,
            choices=choices,
            placeholder=question.placeholder,
        )

    # ==================== 답변 검증 ====================

    def validate_answer(self, question: QuestionDefinition, value: AnswerValue) -> AnswerValue:
        """
        입력 방식과 보기에 맞게 답변을 검증/정규화합니다.

        Raises:
            InputValidationError: 형식이 맞지 않거나 보기에 없는 값
        """
        details = {"question_id": question.id, "value": value}
        kind = question.input_kind

        if kind == InputKind.TEXT:
            if not isinstance(value, str):
                raise InputValidationError("텍스트 답변이 필요합니다", details=details)
            text = value.strip()
            if question.required and not text:
                raise InputValidationError("답변을 입력해주세요", details=details)
            if question.pattern and text and not re.match(question.pattern, text):
                raise InputValidationError("입력 형식이 올바르지 않습니다", details=details)
            return text

        if kind == InputKind.NUMERIC:
            try:
                number = float(value.strip() if isinstance(value, str) else value)
            except (TypeError, ValueError):
                raise InputValidationError("숫자 답변이 필요합니다", details=details)
            if not math.isfinite(number):
                raise InputValidationError("숫자 답변이 필요합니다", details=details)
            return number

        allowed = {choice.value for choice in choices_for(question, self.session.answer_map())}

        if kind == InputKind.SINGLE_CHOICE:
            if not isinstance(value, str) or value.strip() not in allowed:
                raise InputValidationError(
                    "보기에 없는 값입니다", details={**details, "allowed": sorted(allowed)}
                )
            return value.strip()

        # MULTI_CHOICE: 목록 또는 쉼표 구분 문자열
        items = value.split(",") if isinstance(value, str) else value
        if not isinstance(items, list):
            raise InputValidationError("선택 목록이 필요합니다", details=details)
        selected: list[str] = []
        for item in items:
            item = str(item).strip()
            if item and item not in selected:
                selected.append(item)
        unknown = [item for item in selected if item not in allowed]
        if unknown:
            raise InputValidationError(
                f"보기에 없는 값입니다: {unknown}",
                details={**details, "allowed": sorted(allowed)},
            )
        if question.required and not selected:
            raise InputValidationError("하나 이상 선택해주세요", details=details)
        return selected

    # ==================== 탐색 조작 ====================

    def advance(self, value: AnswerValue) -> Optional[RenderDirective]:
        """
        현재 질문에 답변을 기록하고 다음 질문으로 이동합니다.

        Returns:
            다음 질문의 표시 지시. 남은 질문이 없으면 None (reviewing 상태로 전환)
        """
        self._require("advance", IntakeState.ANSWERING_QUESTION)
        question = self.current_question()
        if question is None:
            raise IntakeStateError(self.session.state.value, "advance")

        normalized = self.validate_answer(question, value)
        session = self.session

        # 유효 구간 뒤의 잘린 꼬리는 다음 기록 시 정리
        if len(session.log) > session.valid_length:
            del session.log[session.valid_length:]

        edited = any(old.question_id == question.id for old in session.discarded)
        session.log.append(
            Answer(
                question_id=question.id,
                value=normalized,
                position=question.position,
                edited=edited,
            )
        )
        session.valid_length = len(session.log)
        session.touch()

        next_position = self._next_position()
        if next_position is None:
            session.cursor = None
            session.state = IntakeState.REVIEWING
            logger.info(f"[Navigator] 세션 {session.session_id}: 모든 질문 완료, 검토 단계로 전환")
            return None

        session.cursor = next_position
        return self.render()

    def go_back(self) -> RenderDirective:
        """
        이전 활성 질문으로 돌아갑니다. 그 답변은 다시 수집합니다.
        첫 질문에서는 아무것도 하지 않습니다.
        """
        self._require("go_back", IntakeState.ANSWERING_QUESTION)
        valid = self.session.valid_answers()
        if not valid:
            return self.render()

        self._truncate(valid[-1].position)
        return self.render()

    def select_for_edit(self, position: int) -> RenderDirective:
        """
        position의 답변부터 다시 수집합니다 (truncate-from-point).
        position 이전의 답변은 그대로 유지됩니다.
        """
        self._require(
            "select_for_edit",
            IntakeState.ANSWERING_QUESTION,
            IntakeState.AWAITING_CHANGE_DECISION,
        )
        answered = {answer.position for answer in self.session.valid_answers()}
        if position not in answered and position != self.session.cursor:
            raise InputValidationError(
                f"수정할 수 없는 위치입니다: {position}",
                details={"position": position, "answered_positions": sorted(answered)},
            )

        self._truncate(position)
        self.session.state = IntakeState.ANSWERING_QUESTION
        return self.render()

    def _truncate(self, position: int):
        session = self.session
        valid = session.valid_answers()
        index = next(
            (i for i, answer in enumerate(valid) if answer.position >= position),
            len(valid),
        )
        dropped = valid[index:]
        session.discarded.extend(dropped)
        session.valid_length = index
        session.cursor = position
        session.touch()
        if dropped:
            logger.debug(
                f"[Navigator] 세션 {session.session_id}: position {position}부터 답변 {len(dropped)}개 폐기"
            )

    # ==================== 이벤트 처리 ====================

    def handle(self, event: IntakeEvent) -> IntakeResponse:
        """프레젠테이션 계층에서 들어온 이벤트 하나를 처리합니다."""
        summary = None
        finalized = None

        if isinstance(event, AnswerSubmitted):
            self.advance(event.value)
        elif isinstance(event, NavigateBack):
            self.go_back()
        elif isinstance(event, EditQuestion):
            self.select_for_edit(event.position)
        elif isinstance(event, ConfirmReview):
            finalized = self.review.confirm(event.accepted)
        elif isinstance(event, ChangeDecision):
            if event.choice == "restart":
                self.review.restart()
            else:
                if event.position is None:
                    raise InputValidationError("수정할 위치(position)가 필요합니다")
                self.review.edit(event.position)
        else:
            raise InputValidationError(f"알 수 없는 이벤트입니다: {event!r}")

        # reviewing은 요약 생성 후 바로 확인 대기로 넘어갑니다
        if self.session.state in (IntakeState.REVIEWING, IntakeState.AWAITING_CONFIRMATION):
            summary = self.review.present_summary()

        return self.response(summary=summary, finalized_answers=finalized)

    def response(
        self,
        summary: Optional[str] = None,
        finalized_answers: Optional[dict[str, AnswerValue]] = None,
    ) -> IntakeResponse:
        directive = None
        if self.session.state == IntakeState.ANSWERING_QUESTION:
            directive = self.render()
        return IntakeResponse(
            session_id=self.session.session_id,
            state=self.session.state,
            directive=directive,
            summary=summary,
            finalized_answers=finalized_answers,
        )
