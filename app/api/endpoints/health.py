"""
헬스 체크(Health Check) 엔드포인트입니다.
서버가 살아서 정상적으로 응답하는지 확인하는 용도입니다.
"""

from fastapi import APIRouter

from app.config import get_settings

router = APIRouter()


@router.get("")
async def health_check():
    """
    기본 상태 확인 함수.
    서버가 켜져 있으면 {"status": "healthy"}를 반환합니다.
    """
    return {"status": "healthy"}


@router.get("/detail")
async def health_check_detail():
    """
    상세 상태 확인 함수.
    현재 설정 정보(저장소 백엔드, 통화, 재시도 횟수 등)도 같이 보여줍니다.
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "config": {
            "storage_backend": settings.storage_backend,
            "invoice_prefix": settings.invoice_prefix,
            "default_currency": settings.default_currency,
            "payment_due_days": settings.payment_due_days,
            "write_attempts": settings.write_attempts,
        }
    }
