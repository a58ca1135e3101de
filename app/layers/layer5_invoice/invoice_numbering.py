"""인보이스 번호 생성: PREFIX-YYYYMM-XXXXXX (접미사는 생성 시각의 밀리초 하위 6자리)."""

import random
import re
from datetime import datetime
from typing import Optional

from app.config import get_settings

INVOICE_NUMBER_PATTERN = re.compile(r"^[A-Z0-9]+-\d{6}-\d{6}$")


def generate_invoice_number(
    prefix: Optional[str] = None,
    now: Optional[datetime] = None,
    attempt: int = 0,
) -> str:
    """
    인보이스 번호를 생성합니다.
    첫 시도는 시각 기반 접미사, 중복으로 재시도할 때(attempt > 0)는 임의 접미사를 씁니다.
    """
    prefix = (prefix or get_settings().invoice_prefix).upper()
    now = now or datetime.now()
    if attempt > 0:
        suffix = random.randrange(1_000_000)
    else:
        suffix = int(now.timestamp() * 1000) % 1_000_000
    return f"{prefix}-{now:%Y%m}-{suffix:06d}"
