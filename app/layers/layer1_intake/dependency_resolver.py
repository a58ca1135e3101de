"""
의존성 해석기(Dependency Resolver) 모듈입니다.

질문의 활성 여부를 판단하는 순수 함수들입니다.
항상 '유효 로그 구간의 답변'을 기준으로 평가하며, 전역 상태를 두지 않습니다.

활성 규칙:
1. depends_on이 없는 질문은 항상 활성
2. depends_on이 있으면 선행 질문이 (a) 활성이고 (b) 답변되었으며 (c) 조건을 만족해야 활성
   - 단일 값 답변: 값이 조건 목록에 포함
   - 다중 선택 답변: 조건 목록과 교집합이 존재
3. 선행 질문이 비활성이면 저장된 답변과 무관하게 모든 (전이적) 후속 질문이 비활성
"""

from typing import Mapping, Optional

from app.models import AnswerValue, Choice, DependsOn, QuestionDefinition

from .catalog import QuestionCatalog


def format_scalar(value: AnswerValue) -> str:
    """숫자 답변은 정수면 소수점 없이 문자열로."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def answer_values(value: AnswerValue) -> set[str]:
    """답변을 비교용 문자열 집합으로 변환합니다."""
    if isinstance(value, list):
        return {str(item) for item in value}
    return {format_scalar(value)}


def predicate_holds(depends_on: DependsOn, value: AnswerValue) -> bool:
    """선행 답변이 의존 조건을 만족하는지 확인합니다."""
    return bool(answer_values(value) & set(depends_on.values))


def is_active(
    question: QuestionDefinition,
    answered_so_far: Mapping[str, AnswerValue],
    catalog: QuestionCatalog,
    _memo: Optional[dict[str, bool]] = None,
) -> bool:
    """
    질문이 현재 답변 집합 기준으로 활성인지 판단합니다.

    Args:
        question: 판단할 질문
        answered_so_far: 유효 구간의 답변 (질문 ID → 값)
        catalog: 질문 카탈로그 (선행 질문 조회용)
    """
    memo = _memo if _memo is not None else {}
    if question.id in memo:
        return memo[question.id]

    dependency = question.depends_on
    if dependency is None:
        active = True
    else:
        prerequisite = catalog.get(dependency.question_id)
        active = (
            prerequisite is not None
            and is_active(prerequisite, answered_so_far, catalog, memo)
            and dependency.question_id in answered_so_far
            and predicate_holds(dependency, answered_so_far[dependency.question_id])
        )

    memo[question.id] = active
    return active


def active_questions(
    catalog: QuestionCatalog,
    answers: Mapping[str, AnswerValue],
) -> list[QuestionDefinition]:
    """카탈로그 순서대로 활성 질문 목록을 반환합니다."""
    memo: dict[str, bool] = {}
    return [q for q in catalog if is_active(q, answers, catalog, memo)]


def choices_for(
    question: QuestionDefinition,
    answers: Mapping[str, AnswerValue],
) -> list[Choice]:
    """
    질문의 현재 보기 목록.
    동적 보기는 기준 질문의 답변으로 고르며, 답변이 없거나 알 수 없는 값이면 fallback 키를 씁니다.
    """
    dynamic = question.dynamic_choices
    if dynamic is None:
        return list(question.choices)

    source_value = answers.get(dynamic.source_question_id)
    options = None
    if source_value is not None and not isinstance(source_value, list):
        options = dynamic.options.get(format_scalar(source_value))
    if options is None:
        options = dynamic.options[dynamic.fallback_key]
    return list(options)
