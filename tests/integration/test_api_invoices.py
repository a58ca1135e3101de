"""
인보이스 API 통합 테스트.
생성, 발송, 결제(부분/전액/초과), 취소, 기한 초과 조회, 통계 응답을 확인합니다.
"""

import uuid
from datetime import date, timedelta

import pytest
from httpx import AsyncClient

BASE = "/api/v1/invoices"


@pytest.fixture
def client_ref() -> str:
    """테스트 간 데이터가 섞이지 않도록 고객 참조를 매번 새로 만듭니다."""
    return f"client-{uuid.uuid4().hex[:8]}@example.com"


async def _create(client: AsyncClient, client_ref: str) -> dict:
    response = await client.post(
        BASE,
        json={
            "client_ref": client_ref,
            "project_ref": "Acme",
            "line_items": [
                {"description": "Design", "rate": 1500},
                {"description": "Development", "quantity": 2, "rate": 1500},
            ],
        },
    )
    assert response.status_code == 200
    return response.json()


async def test_create_invoice(client: AsyncClient, client_ref):
    invoice = await _create(client, client_ref)

    assert invoice["status"] == "draft"
    assert invoice["invoice_number"].startswith("INV-")
    assert invoice["amount_total"] == 4500.0
    assert invoice["line_items"][1]["amount"] == 3000.0

    fetched = (await client.get(f"{BASE}/{invoice['id']}")).json()
    assert fetched["invoice_number"] == invoice["invoice_number"]


async def test_create_requires_line_items(client: AsyncClient, client_ref):
    response = await client.post(BASE, json={"client_ref": client_ref, "line_items": []})
    assert response.status_code == 422


async def test_ad_hoc_invoice_with_low_confidence_budget(client: AsyncClient, client_ref):
    response = await client.post(
        f"{BASE}/ad-hoc",
        json={"client_ref": client_ref, "project_type": "website", "budget": "Let's discuss"},
    )

    assert response.status_code == 200
    invoice = response.json()
    assert invoice["amount_total"] == 5000.0
    assert len(invoice["warnings"]) == 1


async def test_ad_hoc_invoice_exact_budget(client: AsyncClient, client_ref):
    response = await client.post(
        f"{BASE}/ad-hoc",
        json={"client_ref": client_ref, "project_type": "web app", "budget": "10k-20k"},
    )

    invoice = response.json()
    assert invoice["amount_total"] == 15000.0
    assert len(invoice["line_items"]) == 4
    assert invoice["warnings"] == []


async def test_ad_hoc_invoice_with_oversized_budget_falls_back(client: AsyncClient, client_ref):
    response = await client.post(
        f"{BASE}/ad-hoc",
        json={"client_ref": client_ref, "project_type": "website", "budget": "9" * 29},
    )

    assert response.status_code == 200
    invoice = response.json()
    assert invoice["amount_total"] == 5000.0
    assert len(invoice["warnings"]) == 1


async def test_oversized_line_item_rate_is_rejected(client: AsyncClient, client_ref):
    response = await client.post(
        BASE,
        json={
            "client_ref": client_ref,
            "line_items": [{"description": "Huge", "rate": "1" + "0" * 30}],
        },
    )
    assert response.status_code == 422


async def test_payment_lifecycle(client: AsyncClient, client_ref):
    """발송 → 초과 결제 거부 → 부분 결제 → 전액 결제 → 취소 거부."""
    invoice = await _create(client, client_ref)
    invoice_id = invoice["id"]

    # 발송 전 결제는 거부
    response = await client.post(
        f"{BASE}/{invoice_id}/payments", json={"amount": 100, "method": "bank"}
    )
    assert response.status_code == 409

    sent = (await client.post(f"{BASE}/{invoice_id}/send")).json()
    assert sent["status"] == "sent"
    assert sent["due_date"] == (date.today() + timedelta(days=30)).isoformat()

    assert (await client.post(f"{BASE}/{invoice_id}/view")).json()["status"] == "viewed"

    response = await client.post(
        f"{BASE}/{invoice_id}/payments", json={"amount": 5000, "method": "bank"}
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_PAYMENT_001"

    response = await client.post(
        f"{BASE}/{invoice_id}/payments", json={"amount": 2250, "method": "bank"}
    )
    assert response.json()["status"] == "partial"
    assert response.json()["amount_due"] == 2250.0

    response = await client.post(
        f"{BASE}/{invoice_id}/payments",
        json={"amount": "2250.00", "method": "card", "reference": "ch_123"},
    )
    paid = response.json()
    assert paid["status"] == "paid"
    assert paid["amount_due"] == 0.0
    assert paid["payment_reference"] == "ch_123"
    assert len(paid["payments"]) == 2

    response = await client.post(f"{BASE}/{invoice_id}/cancel")
    assert response.status_code == 409
    details = response.json()["details"]
    assert details["current_state"] == "paid"
    assert details["action"] == "cancel"


async def test_zero_payment_is_rejected(client: AsyncClient, client_ref):
    invoice = await _create(client, client_ref)
    await client.post(f"{BASE}/{invoice['id']}/send")

    response = await client.post(
        f"{BASE}/{invoice['id']}/payments", json={"amount": 0, "method": "bank"}
    )
    assert response.status_code == 400


async def test_overdue_listing_and_stats(client: AsyncClient, client_ref):
    overdue = await _create(client, client_ref)
    issued_on = (date.today() - timedelta(days=45)).isoformat()
    await client.post(f"{BASE}/{overdue['id']}/send", json={"issued_on": issued_on})

    cancelled = await _create(client, client_ref)
    assert (await client.post(f"{BASE}/{cancelled['id']}/cancel")).json()["status"] == "cancelled"

    response = await client.get(BASE, params={"status": "overdue", "client_ref": client_ref})
    assert [invoice["id"] for invoice in response.json()] == [overdue["id"]]
    assert response.json()[0]["status"] == "overdue"

    stats = (await client.get(f"{BASE}/stats", params={"client_ref": client_ref})).json()
    assert stats["total_invoices"] == 2
    assert stats["total_amount"] == 4500.0
    assert stats["total_outstanding"] == 4500.0
    assert stats["overdue_count"] == 1
    assert stats["by_status"] == {"overdue": 1, "cancelled": 1}


async def test_unknown_invoice_returns_404(client: AsyncClient):
    response = await client.get(f"{BASE}/does-not-exist")
    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


async def test_zero_total_invoice_cannot_be_sent(client: AsyncClient, client_ref):
    response = await client.post(
        BASE,
        json={"client_ref": client_ref, "line_items": [{"description": "Free audit", "rate": 0}]},
    )
    invoice = response.json()
    assert invoice["amount_total"] == 0.0

    response = await client.post(f"{BASE}/{invoice['id']}/send")
    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_INPUT_001"
