from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    애플리케이션의 설정을 관리하는 클래스입니다.
    환경 변수(.env 파일)에서 설정값을 읽어옵니다.
    """

    # 서버 설정: 서버가 실행될 주소와 포트 번호
    host: str = "0.0.0.0"  # 모든 외부 접속 허용
    port: int = 8000
    allowed_origins: list[str] = ["*"]
    log_level: str = "INFO"

    # 예산 파서 설정
    default_budget_baseline: Decimal = Decimal("5000")  # 해석 불가 입력의 기본 예산
    open_ended_multiplier: Decimal = Decimal("1.5")  # "10k+" 같은 상한 없는 범위의 추정 배수

    # 인보이스 설정
    invoice_prefix: str = "INV"
    default_currency: str = "USD"
    payment_due_days: int = 30  # 생성일 기준 지급 기한 (일)

    # 동시성 설정: 버전 충돌/번호 중복 시 재시도 횟수 (첫 시도 포함)
    write_attempts: int = 3
    invoice_number_attempts: int = 3

    # 저장소 설정: memory 또는 file
    storage_backend: str = "memory"
    data_dir: str = "data"

    class Config:
        # 설정을 읽어올 파일 지정
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """
    설정을 가져오는 함수입니다.
    @lru_cache를 사용하여 한 번 읽은 설정은 메모리에 저장해두고 재사용합니다.
    """
    return Settings()
