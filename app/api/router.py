"""
API 라우터 설정 파일입니다.
각 기능별로 나누어진 API 주소들을 하나로 모으는 역할을 합니다.
"""

from fastapi import APIRouter

from app.api.endpoints import health, intake, proposals, invoices

# 메인 API 라우터 생성
api_router = APIRouter()

# 헬스 체크 엔드포인트: 서버 상태 확인용 (/health)
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"]
)

# 인테이크 엔드포인트: 질문/답변 세션 (/intake)
api_router.include_router(
    intake.router,
    prefix="/intake",
    tags=["intake"]
)

# 제안서 엔드포인트: 티어/기능 선택 및 승인 흐름 (/proposals)
api_router.include_router(
    proposals.router,
    prefix="/proposals",
    tags=["proposals"]
)

# 인보이스 엔드포인트: 생성, 발송, 결제, 취소 (/invoices)
api_router.include_router(
    invoices.router,
    prefix="/invoices",
    tags=["invoices"]
)
