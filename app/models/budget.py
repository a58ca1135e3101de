"""예산 범위 모델."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import Money


class BudgetConfidence(str, Enum):
    """
    예산 해석 신뢰도입니다.

    분류:
    - EXACT: 명확한 범위 또는 단일 금액
    - APPROXIMATE: 상한이 없는 범위("10k+") 등 추정치
    - DEFAULT: 해석 불가, 기본값 사용
    """

    EXACT = "exact"
    APPROXIMATE = "approximate"
    DEFAULT = "default"


class BudgetRange(BaseModel):
    """자유 입력 문자열에서 도출된 예산 범위. 계산 후 변경되지 않습니다."""

    model_config = ConfigDict(frozen=True)

    baseline_amount: Money = Field(..., description="라인 아이템 산정의 기준 금액")
    min_bound: Optional[Money] = None
    max_bound: Optional[Money] = None
    confidence: BudgetConfidence
    source: str = Field("", description="원본 입력 문자열")

    @property
    def is_low_confidence(self) -> bool:
        """EXACT가 아니면 화면/문서에 드러내야 하는 결과입니다."""
        return self.confidence != BudgetConfidence.EXACT
