"""
인테이크 → 제안서 → 인보이스 파이프라인의 메인 진입점 파일입니다.
웹 서버 애플리케이션을 생성하고 설정하는 역할을 담당합니다.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.api.router import api_router
from app.exceptions import (
    PipelineError,
    CatalogIntegrityError,
    ConcurrencyConflictError,
    InputValidationError,
    IntakeStateError,
    InvalidTransitionError,
    InvoiceNumberCollisionError,
    NotFoundError,
)
from app.models import ErrorResponse

logger = logging.getLogger(__name__)

# 예외 타입 → HTTP 상태 코드 (위에서부터 먼저 일치하는 항목 사용)
ERROR_STATUS_CODES: list[tuple[type, int]] = [
    (InputValidationError, 400),
    (NotFoundError, 404),
    (InvalidTransitionError, 409),
    (IntakeStateError, 409),
    (ConcurrencyConflictError, 409),
    (InvoiceNumberCollisionError, 409),
    (CatalogIntegrityError, 500),
]


def status_code_for(exc: PipelineError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    애플리케이션의 생명주기(시작과 종료)를 관리하는 함수입니다.

    서버가 시작될 때:
    1. 설정을 불러오고 로깅을 구성합니다.
    2. 질문/가격 카탈로그를 미리 로드해 무결성 에러를 시작 시점에 드러냅니다.
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"인테이크-인보이스 파이프라인이 다음 주소에서 시작됩니다: {settings.host}:{settings.port}")
    logger.info(f"저장소 백엔드: {settings.storage_backend}")

    from app.layers.layer1_intake import get_default_catalog
    from app.layers.layer3_pricing import get_pricing_catalog

    logger.info(
        f"질문 {len(get_default_catalog())}개, "
        f"프로젝트 유형 {len(get_pricing_catalog().project_types)}개 로드 완료"
    )

    yield

    # 종료 시: 리소스 정리
    logger.info("인테이크-인보이스 파이프라인이 종료됩니다")


def create_app() -> FastAPI:
    """
    FastAPI 웹 애플리케이션을 생성하고 설정하는 함수입니다.

    주요 기능:
    1. 기본 앱 정보 설정 (제목, 설명 등)
    2. CORS 설정 (프론트엔드와의 통신 허용 설정)
    3. 도메인 예외 → 구조화된 JSON 에러 응답
    4. API 라우터 연결 (기능별 주소 연결)
    """
    settings = get_settings()

    app = FastAPI(
        title="Intake-to-Invoice 파이프라인",
        description="대화형 인테이크, 제안서 가격 산정, 인보이스 수명주기를 제공하는 API",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",  # 개발자용 문서 주소
        redoc_url="/redoc",
    )

    # CORS 미들웨어 설정: 프론트엔드 웹페이지가 이 서버에 접속할 수 있도록 허용하는 설정입니다.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 글로벌 예외 핸들러: 커스텀 예외를 구조화된 JSON 응답으로 변환
    @app.exception_handler(PipelineError)
    async def pipeline_error_handler(request: Request, exc: PipelineError):
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error(f"[API] {exc.error_code}: {exc.message}")
        body = ErrorResponse(error_code=exc.error_code, message=exc.message, details=exc.details)
        return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))

    @app.exception_handler(Exception)
    async def general_error_handler(request: Request, exc: Exception):
        logger.error(f"처리되지 않은 예외: {exc}", exc_info=True)
        body = ErrorResponse(error_code="ERR_INTERNAL", message="내부 서버 오류가 발생했습니다")
        return JSONResponse(status_code=500, content=body.model_dump(mode="json"))

    # API 라우터 포함: /api/v1 주소 아래에 모든 기능을 연결합니다.
    app.include_router(api_router, prefix="/api/v1")

    return app


# 애플리케이션 인스턴스 생성
app = create_app()


@app.get("/")
async def root():
    """
    루트 엔드포인트: 서버가 정상적으로 동작하는지 확인하는 기본 주소입니다.
    """
    return {
        "name": "Intake-to-Invoice 파이프라인",
        "version": "1.0.0",
        "description": "인테이크 → 제안서 → 인보이스",
        "docs": "/docs",
        "api": "/api/v1",
    }


# 이 파일을 직접 실행했을 때 서버를 구동시키는 코드입니다.
if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,  # 코드가 변경되면 자동으로 재시작 (개발 모드)
    )
