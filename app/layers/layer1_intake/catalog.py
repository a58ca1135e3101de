"""
질문 카탈로그(Question Catalog) 모듈입니다.

질문 정의는 로드 시 한 번 검증되고 이후 변경되지 않습니다.
의존 관계는 데이터로 정의된 DAG이며, 다음 경우 로드 단계에서 CatalogIntegrityError가 발생합니다:
- 중복된 질문 ID 또는 position
- 존재하지 않는 질문을 참조하는 depends_on / dynamic_choices
- 의존 순환(cycle)
- 자기보다 뒤(같은 위치 포함)에 있는 질문을 참조하는 전방 참조(forward reference)
- 선행 질문의 보기에 없는 값을 조건으로 쓰는 depends_on
- 컴파일되지 않는 텍스트 검증 정규식(pattern)
"""

import logging
import re
from functools import lru_cache
from typing import Any, Iterable, Iterator, Optional

from pydantic import ValidationError

from app.exceptions import CatalogIntegrityError
from app.models import (
    Choice,
    DependsOn,
    DynamicChoices,
    InputKind,
    QuestionDefinition,
)

logger = logging.getLogger(__name__)

CHOICE_KINDS = frozenset({InputKind.SINGLE_CHOICE, InputKind.MULTI_CHOICE})


class QuestionCatalog:
    """
    검증된 질문 정의의 불변 집합입니다.
    질문은 position 순으로 정렬되어 보관됩니다.
    """

    def __init__(self, questions: Iterable[QuestionDefinition]):
        ordered = sorted(questions, key=lambda q: q.position)
        validate_catalog(ordered)

        self._questions: tuple[QuestionDefinition, ...] = tuple(ordered)
        self._by_id = {q.id: q for q in self._questions}
        self._by_position = {q.position: q for q in self._questions}

        logger.debug(f"[QuestionCatalog] 질문 {len(self._questions)}개 로드 완료")

    def __iter__(self) -> Iterator[QuestionDefinition]:
        return iter(self._questions)

    def __len__(self) -> int:
        return len(self._questions)

    def __contains__(self, question_id: str) -> bool:
        return question_id in self._by_id

    @property
    def questions(self) -> tuple[QuestionDefinition, ...]:
        return self._questions

    def get(self, question_id: str) -> Optional[QuestionDefinition]:
        return self._by_id.get(question_id)

    def at_position(self, position: int) -> Optional[QuestionDefinition]:
        return self._by_position.get(position)

    def first(self) -> QuestionDefinition:
        return self._questions[0]

    @classmethod
    def from_dicts(cls, raw_questions: list[dict[str, Any]]) -> "QuestionCatalog":
        """
        간결한 dict 형식의 질문 정의 목록으로 카탈로그를 만듭니다.

        - choices: [(value, label), ...]
        - depends_on: (question_id, [values])
        - dynamic_choices: {"source": question_id, "options": {key: [(value, label)]}, "fallback": key}
        - position: 생략 시 목록 순서
        """
        questions = []
        for index, raw in enumerate(raw_questions):
            try:
                questions.append(_build_question(index, raw))
            except (ValidationError, ValueError, TypeError) as e:
                raise CatalogIntegrityError(
                    f"질문 정의가 올바르지 않습니다: {raw.get('id', index)!r}",
                    details={"error": str(e)},
                )
        return cls(questions)


def _to_choices(pairs: Iterable) -> tuple[Choice, ...]:
    return tuple(
        pair if isinstance(pair, Choice) else Choice(value=pair[0], label=pair[1])
        for pair in pairs
    )


def _build_question(index: int, raw: dict[str, Any]) -> QuestionDefinition:
    data = dict(raw)
    data.setdefault("position", index)

    if "choices" in data:
        data["choices"] = _to_choices(data["choices"])

    depends_on = data.get("depends_on")
    if isinstance(depends_on, (tuple, list)):
        question_id, values = depends_on
        data["depends_on"] = DependsOn(question_id=question_id, values=tuple(values))

    dynamic = data.get("dynamic_choices")
    if isinstance(dynamic, dict) and "source" in dynamic:
        options = {key: _to_choices(pairs) for key, pairs in dynamic["options"].items()}
        data["dynamic_choices"] = DynamicChoices(
            source_question_id=dynamic["source"],
            options=options,
            fallback_key=dynamic.get("fallback", "other"),
        )

    return QuestionDefinition.model_validate(data)


def all_choice_values(question: QuestionDefinition) -> set[str]:
    """정적/동적 보기의 모든 값."""
    values = {choice.value for choice in question.choices}
    if question.dynamic_choices:
        for choices in question.dynamic_choices.options.values():
            values.update(choice.value for choice in choices)
    return values


def _references(question: QuestionDefinition) -> list[str]:
    refs = []
    if question.depends_on:
        refs.append(question.depends_on.question_id)
    if question.dynamic_choices:
        refs.append(question.dynamic_choices.source_question_id)
    return refs


def _find_cycle(questions: list[QuestionDefinition]) -> Optional[list[str]]:
    """의존 그래프에서 순환을 찾으면 그 경로를 반환합니다."""
    graph = {q.id: _references(q) for q in questions}
    visiting: set[str] = set()
    done: set[str] = set()
    path: list[str] = []

    def visit(node: str) -> Optional[list[str]]:
        if node in done or node not in graph:
            return None
        if node in visiting:
            return path[path.index(node):] + [node]
        visiting.add(node)
        path.append(node)
        for ref in graph[node]:
            cycle = visit(ref)
            if cycle:
                return cycle
        path.pop()
        visiting.discard(node)
        done.add(node)
        return None

    for question_id in graph:
        cycle = visit(question_id)
        if cycle:
            return cycle
    return None


def validate_catalog(questions: list[QuestionDefinition]) -> None:
    """
    카탈로그 무결성을 검증합니다.

    Raises:
        CatalogIntegrityError: 무결성 위반 시
    """
    if not questions:
        raise CatalogIntegrityError("카탈로그에 질문이 없습니다")

    by_id: dict[str, QuestionDefinition] = {}
    positions: set[int] = set()
    for question in questions:
        if question.id in by_id:
            raise CatalogIntegrityError(
                f"중복된 질문 ID: {question.id}", details={"question_id": question.id}
            )
        if question.position in positions:
            raise CatalogIntegrityError(
                f"중복된 position: {question.position}",
                details={"question_id": question.id, "position": question.position},
            )
        by_id[question.id] = question
        positions.add(question.position)

    for question in questions:
        for ref in _references(question):
            if ref not in by_id:
                raise CatalogIntegrityError(
                    f"존재하지 않는 질문을 참조합니다: {question.id} → {ref}",
                    details={"question_id": question.id, "reference": ref},
                )

    cycle = _find_cycle(questions)
    if cycle:
        raise CatalogIntegrityError(
            f"질문 의존 관계에 순환이 있습니다: {' → '.join(cycle)}",
            details={"cycle": cycle},
        )

    for question in questions:
        for ref in _references(question):
            target = by_id[ref]
            if target.position >= question.position:
                raise CatalogIntegrityError(
                    f"뒤쪽 질문을 참조하는 전방 참조입니다: {question.id} → {ref}",
                    details={"question_id": question.id, "reference": ref},
                )

        if question.input_kind in CHOICE_KINDS and not all_choice_values(question):
            raise CatalogIntegrityError(
                f"선택형 질문에 보기가 없습니다: {question.id}",
                details={"question_id": question.id},
            )

        if question.pattern is not None:
            try:
                re.compile(question.pattern)
            except re.error as e:
                raise CatalogIntegrityError(
                    f"검증 정규식이 올바르지 않습니다: {question.id}",
                    details={"question_id": question.id, "pattern": question.pattern, "error": str(e)},
                )

        dynamic = question.dynamic_choices
        if dynamic and dynamic.fallback_key not in dynamic.options:
            raise CatalogIntegrityError(
                f"동적 보기의 기본 키가 없습니다: {question.id} ({dynamic.fallback_key})",
                details={"question_id": question.id},
            )

        if question.depends_on:
            target = by_id[question.depends_on.question_id]
            if target.input_kind in CHOICE_KINDS:
                unknown = set(question.depends_on.values) - all_choice_values(target)
                if unknown:
                    raise CatalogIntegrityError(
                        f"선행 질문의 보기에 없는 조건 값입니다: {question.id} ({sorted(unknown)})",
                        details={"question_id": question.id, "values": sorted(unknown)},
                    )


@lru_cache()
def get_default_catalog() -> QuestionCatalog:
    """기본 인테이크 카탈로그 (프로세스당 한 번 로드)."""
    from .default_questions import DEFAULT_QUESTIONS

    return QuestionCatalog.from_dicts(DEFAULT_QUESTIONS)
