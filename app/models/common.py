"""
공통 데이터 모델 모듈입니다.
인테이크, 제안서, 인보이스에서 공통으로 사용되는 금액 타입과 도우미를 정의합니다.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, Union

from pydantic import PlainSerializer

CENT = Decimal("0.01")

# 금액 상한 (센트 단위 반올림이 Decimal 기본 정밀도 28자리 안에 들어오는 범위)
MAX_AMOUNT = Decimal("1000000000000")

# 금액 타입: 내부적으로는 Decimal, JSON 직렬화 시에는 숫자(float)
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


def to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    """
    숫자 값을 Decimal로 변환합니다.
    float는 str을 거쳐 변환하여 이진 부동소수점 오차를 피합니다.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """금액을 센트 단위로 반올림합니다 (ROUND_HALF_UP)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
