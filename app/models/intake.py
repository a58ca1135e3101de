"""
대화형 인테이크 관련 데이터 모델입니다.
질문 정의, 답변 로그, 세션 상태, 화면 렌더링 지시 및 입력 이벤트를 정의합니다.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# 답변 값: 단일 문자열, 숫자, 또는 다중 선택 문자열 목록
AnswerValue = Union[str, float, list[str]]


class InputKind(str, Enum):
    """질문의 입력 방식입니다."""

    TEXT = "text"
    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    NUMERIC = "numeric"


class Choice(BaseModel):
    """선택형 질문의 보기 하나."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str


class DependsOn(BaseModel):
    """
    선행 질문에 대한 의존 조건입니다.
    선행 답변이 values 중 하나와 일치(단일값)하거나 교집합이 있으면(다중값) 충족됩니다.
    """

    model_config = ConfigDict(frozen=True)

    question_id: str = Field(..., description="선행 질문 ID")
    values: tuple[str, ...] = Field(..., min_length=1, description="충족 값 목록")


class DynamicChoices(BaseModel):
    """
    앞선 답변에 따라 달라지는 보기 목록입니다.
    예: 프로젝트 유형별 예산 범위 보기.
    """

    model_config = ConfigDict(frozen=True)

    source_question_id: str
    options: dict[str, tuple[Choice, ...]]
    fallback_key: str


class QuestionDefinition(BaseModel):
    """카탈로그에 등록된 질문 하나. 로드 후 변경되지 않습니다."""

    model_config = ConfigDict(frozen=True)

    id: str
    prompt: str
    input_kind: InputKind
    position: int = Field(..., ge=0, description="카탈로그 내 순서")
    depends_on: Optional[DependsOn] = None
    choices: tuple[Choice, ...] = ()
    dynamic_choices: Optional[DynamicChoices] = None
    placeholder: Optional[str] = None
    pattern: Optional[str] = Field(default=None, description="텍스트 답변 검증용 정규식")
    required: bool = True


class Answer(BaseModel):
    """세션 로그에 기록된 답변 하나."""

    question_id: str
    value: AnswerValue
    position: int
    edited: bool = False  # 같은 위치에서 이전에 폐기된 답변이 있었는지
    recorded_at: datetime = Field(default_factory=datetime.now)


class IntakeState(str, Enum):
    """인테이크 세션 상태입니다."""

    ANSWERING_QUESTION = "answering_question"  # 질문 응답 중
    REVIEWING = "reviewing"  # 요약 생성 중
    AWAITING_CONFIRMATION = "awaiting_confirmation"  # 예/아니오 확인 대기
    AWAITING_CHANGE_DECISION = "awaiting_change_decision"  # 처음부터/특정 답변 수정 선택 대기
    CONFIRMED = "confirmed"  # 확정 (제안서 단계로 인계)
    RESTARTED = "restarted"  # 초기화됨


class IntakeSession(BaseModel):
    """
    대화 하나에 대응하는 인테이크 세션입니다.

    답변은 append-only 로그(log)에 쌓이고, valid_length가 유효한 접두 구간을 가리킵니다.
    수정 시 잘려나간 답변은 discarded에 감사 기록으로 남습니다.
    """

    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    log: list[Answer] = Field(default_factory=list)
    valid_length: int = 0
    discarded: list[Answer] = Field(default_factory=list)
    cursor: Optional[int] = Field(default=None, description="현재 질문의 position")
    state: IntakeState = IntakeState.ANSWERING_QUESTION
    restart_count: int = 0
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def valid_answers(self) -> list[Answer]:
        """유효 구간의 답변 목록."""
        return self.log[: self.valid_length]

    def answer_map(self) -> dict[str, AnswerValue]:
        """질문 ID → 답변 값."""
        return {answer.question_id: answer.value for answer in self.valid_answers()}

    def touch(self):
        self.updated_at = datetime.now()


class RenderDirective(BaseModel):
    """프레젠테이션 협력자에게 보내는 '질문 표시' 지시."""

    question_id: str
    position: int
    prompt: str
    input_kind: InputKind
    choices: Optional[list[Choice]] = None
    placeholder: Optional[str] = None


# ==================== 입력 이벤트 ====================


class AnswerSubmitted(BaseModel):
    type: Literal["answer_submitted"] = "answer_submitted"
    value: AnswerValue


class NavigateBack(BaseModel):
    type: Literal["navigate_back"] = "navigate_back"


class EditQuestion(BaseModel):
    type: Literal["edit_question"] = "edit_question"
    position: int


class ConfirmReview(BaseModel):
    type: Literal["confirm"] = "confirm"
    accepted: bool


class ChangeDecision(BaseModel):
    type: Literal["change_decision"] = "change_decision"
    choice: Literal["restart", "edit"]
    position: Optional[int] = None


IntakeEvent = Annotated[
    Union[AnswerSubmitted, NavigateBack, EditQuestion, ConfirmReview, ChangeDecision],
    Field(discriminator="type"),
]


class IntakeResponse(BaseModel):
    """이벤트 처리 결과."""

    session_id: str
    state: IntakeState
    directive: Optional[RenderDirective] = None
    summary: Optional[str] = None
    finalized_answers: Optional[dict[str, AnswerValue]] = None
