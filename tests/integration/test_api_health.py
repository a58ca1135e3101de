"""
API 헬스 체크 및 루트 엔드포인트 통합 테스트.
서버의 기본 응답과 문서 페이지 접근을 확인합니다.
"""

from httpx import AsyncClient


async def test_root_endpoint(client: AsyncClient):
    """GET / 는 서버 기본 정보(name, version, docs)를 200으로 반환해야 한다."""
    response = await client.get("/")

    assert response.status_code == 200

    data = response.json()
    assert "name" in data
    assert data["version"] == "1.0.0"
    assert data["docs"] == "/docs"


async def test_docs_endpoint(client: AsyncClient):
    """GET /docs 는 Swagger UI 페이지를 200으로 반환해야 한다."""
    response = await client.get("/docs")

    assert response.status_code == 200


async def test_health_check(client: AsyncClient):
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


async def test_health_check_detail(client: AsyncClient):
    """상세 헬스 체크는 저장소/인보이스 설정을 포함해야 한다."""
    response = await client.get("/api/v1/health/detail")

    assert response.status_code == 200
    config = response.json()["config"]
    assert config["storage_backend"] in ("memory", "file")
    assert config["invoice_prefix"]
    assert config["write_attempts"] >= 1
