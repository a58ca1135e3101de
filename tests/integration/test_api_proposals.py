"""
제안서 API 통합 테스트.
생성(예산 기반 티어 추천), 기능 토글, 티어 변경, 제출/수락/인보이스 전환을 확인합니다.
"""

from httpx import AsyncClient

BASE = "/api/v1/proposals"


async def _create(client: AsyncClient, **overrides) -> dict:
    payload = {"client_ref": "client@example.com", "project_type": "business-site", "budget": "$5,000"}
    payload.update(overrides)
    response = await client.post(BASE, json=payload)
    assert response.status_code == 200
    return response.json()


async def test_create_recommends_tier_from_budget(client: AsyncClient):
    proposal = await _create(client)

    assert proposal["status"] == "draft"
    assert proposal["tier_id"] == "business-site-better"
    assert proposal["computed_total"] == 5000.0
    assert proposal["budget"]["confidence"] == "exact"


async def test_catalog_endpoint(client: AsyncClient):
    response = await client.get(f"{BASE}/catalog/Business Site")

    assert response.status_code == 200
    data = response.json()
    assert data["project_type"] == "business-site"
    assert [tier["id"] for tier in data["tiers"]] == [
        "business-site-good",
        "business-site-better",
        "business-site-best",
    ]
    assert data["maintenance_plans"]


async def test_toggle_add_on_and_breakdown(client: AsyncClient):
    proposal = await _create(client)

    response = await client.post(f"{BASE}/{proposal['id']}/add-ons", json={"feature_id": "booking"})
    assert response.status_code == 200
    assert response.json()["computed_total"] == 5800.0

    response = await client.get(f"{BASE}/{proposal['id']}/add-ons")
    booking = next(item for item in response.json()["add_ons"] if item["id"] == "booking")
    assert booking["selected"] is True
    assert booking["price"] == 800.0

    response = await client.post(f"{BASE}/{proposal['id']}/maintenance", json={"plan_id": "essential"})
    assert response.json()["computed_total"] == 5800.0

    breakdown = (await client.get(f"{BASE}/{proposal['id']}/breakdown")).json()
    assert breakdown["one_time_total"] == 5800.0
    assert breakdown["maintenance_plan"]["id"] == "essential"


async def test_switch_tier_frees_included_features(client: AsyncClient):
    proposal = await _create(client)
    await client.post(f"{BASE}/{proposal['id']}/add-ons", json={"feature_id": "brand-package"})

    response = await client.post(
        f"{BASE}/{proposal['id']}/switch-tier", json={"tier_id": "business-site-best"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["tier_id"] == "business-site-best"
    assert "brand-package" in data["selected_features"]
    assert data["computed_total"] == 6750.0


async def test_unknown_feature_returns_400(client: AsyncClient):
    proposal = await _create(client)
    response = await client.post(f"{BASE}/{proposal['id']}/add-ons", json={"feature_id": "teleporter"})
    assert response.status_code == 400


async def test_submit_accept_convert(client: AsyncClient):
    proposal = await _create(client, project_ref="Acme")
    proposal_id = proposal["id"]

    assert (await client.post(f"{BASE}/{proposal_id}/submit")).json()["status"] == "submitted"

    # 제출 후에는 선택을 바꿀 수 없다
    response = await client.post(f"{BASE}/{proposal_id}/add-ons", json={"feature_id": "booking"})
    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_TRANSITION_001"

    assert (await client.post(f"{BASE}/{proposal_id}/accept")).json()["status"] == "accepted"

    response = await client.post(f"{BASE}/{proposal_id}/convert")
    assert response.status_code == 200
    invoice = response.json()
    assert invoice["status"] == "draft"
    assert invoice["proposal_id"] == proposal_id
    assert invoice["amount_total"] == 5000.0

    converted = (await client.get(f"{BASE}/{proposal_id}")).json()
    assert converted["status"] == "converted"
    assert converted["invoice_id"] == invoice["id"]

    response = await client.post(f"{BASE}/{proposal_id}/convert")
    assert response.status_code == 409


async def test_reject_draft_returns_409(client: AsyncClient):
    proposal = await _create(client)
    response = await client.post(f"{BASE}/{proposal['id']}/reject")
    assert response.status_code == 409


async def test_unknown_proposal_returns_404(client: AsyncClient):
    response = await client.get(f"{BASE}/PROP-missing")
    assert response.status_code == 404
