"""
영속성 포트(Persistence Port)와 구현체입니다.

인보이스/제안서는 버전 토큰과 함께 읽고, 기대 버전이 일치할 때만 씁니다 (낙관적 동시성).
쓰기 결과는 예외가 아닌 WriteOutcome으로 반환되며, 재시도 여부는 호출자가 결정합니다.

구현체:
1. InMemoryRepository: 프로세스 메모리 (기본값, 테스트용)
2. FileRepository: JSON 파일 (aiofiles)
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Generic, Optional, Type, TypeVar

import aiofiles
from pydantic import BaseModel, ValidationError

from app.config import get_settings
from app.exceptions import ConcurrencyConflictError, NotFoundError, StorageError
from app.models import Invoice, IntakeSession, ProposalRequest, TierDefinition
from app.utils import validate_record_id

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class WriteOutcome(str, Enum):
    """버전 지정 쓰기의 결과."""

    OK = "ok"
    CONFLICT = "conflict"  # 기대 버전 불일치 (다른 쓰기가 먼저 반영됨)
    DUPLICATE = "duplicate"  # 인보이스 번호 중복


class Versioned(BaseModel, Generic[T]):
    """파일 저장용 봉투: 레코드 + 버전."""

    version: int
    record: T


class PersistencePort(ABC):
    """코어가 의존하는 저장소 인터페이스."""

    # ==================== 인보이스 ====================

    @abstractmethod
    async def read_invoice(self, invoice_id: str) -> Optional[tuple[Invoice, int]]:
        """인보이스와 버전 토큰. 없으면 None."""

    @abstractmethod
    async def write_invoice(
        self, invoice: Invoice, expected_version: Optional[int]
    ) -> WriteOutcome:
        """expected_version이 None이면 신규 생성."""

    @abstractmethod
    async def list_invoices(self) -> list[Invoice]:
        ...

    # ==================== 제안서 ====================

    @abstractmethod
    async def read_proposal(self, proposal_id: str) -> Optional[tuple[ProposalRequest, int]]:
        ...

    @abstractmethod
    async def write_proposal(
        self, proposal: ProposalRequest, expected_version: Optional[int]
    ) -> WriteOutcome:
        ...

    # ==================== 인테이크 세션 ====================

    @abstractmethod
    async def get_session(self, session_id: str) -> Optional[IntakeSession]:
        ...

    @abstractmethod
    async def save_session(self, session: IntakeSession) -> None:
        ...

    @abstractmethod
    async def delete_session(self, session_id: str) -> None:
        """세션 삭제 (없으면 무시)."""
        ...

    # ==================== 카탈로그 ====================

    async def lookup_catalog(self, project_type: str) -> list[TierDefinition]:
        """프로젝트 유형별 티어 목록."""
        from app.layers.layer3_pricing import get_pricing_catalog

        return get_pricing_catalog().tiers_for(project_type)


class InMemoryRepository(PersistencePort):
    """
    메모리 저장소입니다.
    레코드는 복사본으로 보관하여 호출자의 객체 변경이 저장 상태에 새지 않습니다.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self._invoices: dict[str, tuple[Invoice, int]] = {}
        self._invoice_numbers: dict[str, str] = {}  # 번호 → 인보이스 ID
        self._proposals: dict[str, tuple[ProposalRequest, int]] = {}
        self._sessions: dict[str, IntakeSession] = {}

    async def read_invoice(self, invoice_id: str) -> Optional[tuple[Invoice, int]]:
        async with self._lock:
            stored = self._invoices.get(invoice_id)
            if stored is None:
                return None
            invoice, version = stored
            return invoice.model_copy(deep=True), version

    async def write_invoice(
        self, invoice: Invoice, expected_version: Optional[int]
    ) -> WriteOutcome:
        async with self._lock:
            current = self._invoices.get(invoice.id)
            current_version = current[1] if current else None
            if current_version != expected_version:
                return WriteOutcome.CONFLICT

            owner = self._invoice_numbers.get(invoice.invoice_number)
            if owner is not None and owner != invoice.id:
                return WriteOutcome.DUPLICATE

            self._invoices[invoice.id] = (invoice.model_copy(deep=True), (current_version or 0) + 1)
            self._invoice_numbers[invoice.invoice_number] = invoice.id
            return WriteOutcome.OK

    async def list_invoices(self) -> list[Invoice]:
        async with self._lock:
            return [invoice.model_copy(deep=True) for invoice, _ in self._invoices.values()]

    async def read_proposal(self, proposal_id: str) -> Optional[tuple[ProposalRequest, int]]:
        async with self._lock:
            stored = self._proposals.get(proposal_id)
            if stored is None:
                return None
            proposal, version = stored
            return proposal.model_copy(deep=True), version

    async def write_proposal(
        self, proposal: ProposalRequest, expected_version: Optional[int]
    ) -> WriteOutcome:
        async with self._lock:
            current = self._proposals.get(proposal.id)
            current_version = current[1] if current else None
            if current_version != expected_version:
                return WriteOutcome.CONFLICT
            self._proposals[proposal.id] = (
                proposal.model_copy(deep=True),
                (current_version or 0) + 1,
            )
            return WriteOutcome.OK

    async def get_session(self, session_id: str) -> Optional[IntakeSession]:
        session = self._sessions.get(session_id)
        return session.model_copy(deep=True) if session else None

    async def save_session(self, session: IntakeSession) -> None:
        self._sessions[session.session_id] = session.model_copy(deep=True)

    async def delete_session(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)


class FileRepository(PersistencePort):
    """
    JSON 파일 기반 저장소입니다.

    폴더 구조:
        {base}/invoices/{id}.json         버전 봉투 {"version": n, "record": {...}}
        {base}/invoice_numbers/{번호}     번호 → 인보이스 ID (배타적 생성으로 중복 방지)
        {base}/proposals/{id}.json
        {base}/sessions/{id}.json
    """

    def __init__(self, base_path: str = "data"):
        self.base_path = Path(base_path)
        self.invoices_path = self.base_path / "invoices"
        self.numbers_path = self.base_path / "invoice_numbers"
        self.proposals_path = self.base_path / "proposals"
        self.sessions_path = self.base_path / "sessions"
        self._lock = asyncio.Lock()

        self._ensure_directories()

    def _ensure_directories(self):
        """저장소 폴더 생성 함수"""
        for path in [self.invoices_path, self.numbers_path, self.proposals_path, self.sessions_path]:
            path.mkdir(parents=True, exist_ok=True)

    # ==================== 인보이스 ====================

    async def read_invoice(self, invoice_id: str) -> Optional[tuple[Invoice, int]]:
        file_path = self.invoices_path / f"{validate_record_id(invoice_id)}.json"
        envelope = await self._load_model(file_path, Versioned[Invoice])
        if envelope is None:
            return None
        return envelope.record, envelope.version

    async def write_invoice(
        self, invoice: Invoice, expected_version: Optional[int]
    ) -> WriteOutcome:
        file_path = self.invoices_path / f"{validate_record_id(invoice.id)}.json"
        async with self._lock:
            current = await self._load_model(file_path, Versioned[Invoice])
            current_version = current.version if current else None
            if current_version != expected_version:
                return WriteOutcome.CONFLICT

            if current is None or current.record.invoice_number != invoice.invoice_number:
                if not await self._claim_invoice_number(invoice):
                    return WriteOutcome.DUPLICATE

            envelope = Versioned[Invoice](version=(current_version or 0) + 1, record=invoice)
            await self._save_model(file_path, envelope)
            return WriteOutcome.OK

    async def _claim_invoice_number(self, invoice: Invoice) -> bool:
        """번호 색인 파일을 배타적으로 생성합니다. 이미 있으면 False."""
        number_path = self.numbers_path / validate_record_id(invoice.invoice_number)
        try:
            async with aiofiles.open(number_path, "x", encoding="utf-8") as f:
                await f.write(invoice.id)
        except FileExistsError:
            async with aiofiles.open(number_path, "r", encoding="utf-8") as f:
                owner = (await f.read()).strip()
            return owner == invoice.id
        except OSError as e:
            logger.error(f"[FileRepository] 인보이스 번호 색인 실패 {number_path}: {e}", exc_info=True)
            raise StorageError(
                f"인보이스 번호 색인에 실패했습니다: {invoice.invoice_number}",
                details={"path": str(number_path), "error": str(e)},
            )
        return True

    async def list_invoices(self) -> list[Invoice]:
        invoices = []
        for file_path in sorted(self.invoices_path.glob("*.json")):
            envelope = await self._load_model(file_path, Versioned[Invoice])
            if envelope:
                invoices.append(envelope.record)
        return invoices

    # ==================== 제안서 ====================

    async def read_proposal(self, proposal_id: str) -> Optional[tuple[ProposalRequest, int]]:
        file_path = self.proposals_path / f"{validate_record_id(proposal_id)}.json"
        envelope = await self._load_model(file_path, Versioned[ProposalRequest])
        if envelope is None:
            return None
        return envelope.record, envelope.version

    async def write_proposal(
        self, proposal: ProposalRequest, expected_version: Optional[int]
    ) -> WriteOutcome:
        file_path = self.proposals_path / f"{validate_record_id(proposal.id)}.json"
        async with self._lock:
            current = await self._load_model(file_path, Versioned[ProposalRequest])
            current_version = current.version if current else None
            if current_version != expected_version:
                return WriteOutcome.CONFLICT
            envelope = Versioned[ProposalRequest](
                version=(current_version or 0) + 1, record=proposal
            )
            await self._save_model(file_path, envelope)
            return WriteOutcome.OK

    # ==================== 인테이크 세션 ====================

    async def get_session(self, session_id: str) -> Optional[IntakeSession]:
        file_path = self.sessions_path / f"{validate_record_id(session_id)}.json"
        return await self._load_model(file_path, IntakeSession)

    async def save_session(self, session: IntakeSession) -> None:
        file_path = self.sessions_path / f"{validate_record_id(session.session_id)}.json"
        await self._save_model(file_path, session)

    async def delete_session(self, session_id: str) -> None:
        file_path = self.sessions_path / f"{validate_record_id(session_id)}.json"
        try:
            file_path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"[FileRepository] 세션 삭제 실패 {file_path}: {e}", exc_info=True)
            raise StorageError(
                f"세션 삭제에 실패했습니다: {file_path.name}",
                details={"path": str(file_path), "error": str(e)},
            )

    # ==================== 내부 도우미 함수들 ====================

    async def _save_model(self, file_path: Path, model: BaseModel):
        """데이터 모델을 JSON 파일로 저장하는 공통 함수"""
        try:
            async with aiofiles.open(file_path, "w", encoding="utf-8") as f:
                await f.write(model.model_dump_json(indent=2))
        except OSError as e:
            logger.error(f"[FileRepository] 파일 저장 실패 {file_path}: {e}", exc_info=True)
            raise StorageError(
                f"파일 저장에 실패했습니다: {file_path.name}",
                details={"path": str(file_path), "error": str(e)},
            )

    async def _load_model(self, file_path: Path, model_class: Type[T]) -> Optional[T]:
        """JSON 파일을 읽어서 데이터 모델로 변환하는 공통 함수"""
        if not file_path.exists():
            return None

        try:
            async with aiofiles.open(file_path, "r", encoding="utf-8") as f:
                content = await f.read()
        except OSError as e:
            logger.error(f"[FileRepository] 파일 로딩 에러 {file_path}: {e}", exc_info=True)
            raise StorageError(
                f"파일을 읽을 수 없습니다: {file_path.name}",
                details={"path": str(file_path), "error": str(e)},
            )

        try:
            return model_class.model_validate_json(content)
        except ValidationError as e:
            logger.error(f"[FileRepository] 손상된 레코드 {file_path}: {e}")
            raise StorageError(
                f"저장된 레코드 형식이 올바르지 않습니다: {file_path.name}",
                details={"path": str(file_path)},
            )


# ==================== 낙관적 동시성 재시도 ====================


async def update_with_retry(
    read: Callable[[], Awaitable[Optional[tuple[T, int]]]],
    write: Callable[[T, Optional[int]], Awaitable[WriteOutcome]],
    compute: Callable[[T], T],
    attempts: int,
    label: str,
) -> T:
    """
    읽기 → 계산 → 버전 지정 쓰기를 수행하고, 충돌 시 전체 사이클을 다시 시도합니다.

    compute에서 발생한 예외(예: InvalidTransitionError)는 재시도하지 않고 그대로 전파됩니다.

    Raises:
        NotFoundError: 레코드가 없음
        ConcurrencyConflictError: 모든 시도가 충돌로 끝남
    """
    attempts = max(attempts, 2)
    for attempt in range(1, attempts + 1):
        stored = await read()
        if stored is None:
            raise NotFoundError(f"레코드를 찾을 수 없습니다: {label}", details={"id": label})

        record, version = stored
        updated = compute(record)
        outcome = await write(updated, version)
        if outcome == WriteOutcome.OK:
            return updated

        logger.warning(
            f"[Repository] {label}: 버전 충돌 ({outcome.value}), 재시도 {attempt}/{attempts}"
        )

    raise ConcurrencyConflictError(
        f"동시 수정으로 저장하지 못했습니다: {label}",
        details={"id": label, "attempts": attempts},
    )


# 싱글톤 인스턴스 (API 계층에서 공유)
_repository: Optional[PersistencePort] = None


def get_repository() -> PersistencePort:
    """설정(storage_backend)에 맞는 저장소 인스턴스를 반환합니다."""
    global _repository
    if _repository is None:
        settings = get_settings()
        if settings.storage_backend == "file":
            _repository = FileRepository(settings.data_dir)
        else:
            _repository = InMemoryRepository()
        logger.info(f"[Repository] 저장소 백엔드: {settings.storage_backend}")
    return _repository
