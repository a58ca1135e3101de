"""
인테이크 API 통합 테스트.
세션 시작 → 답변 → 검토/확정 → 제안서 생성 흐름과 에러 응답 코드를 확인합니다.
"""

from httpx import AsyncClient

BASE = "/api/v1/intake/sessions"


async def _start(client: AsyncClient) -> str:
    response = await client.post(BASE)
    assert response.status_code == 200
    return response.json()["session_id"]


async def _send(client: AsyncClient, session_id: str, event: dict):
    return await client.post(f"{BASE}/{session_id}/events", json={"event": event})


async def _answer(client: AsyncClient, session_id: str, value):
    return await _send(client, session_id, {"type": "answer_submitted", "value": value})


async def test_start_session(client: AsyncClient):
    response = await client.post(BASE)

    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "answering_question"
    assert data["directive"]["question_id"] == "name"
    assert data["directive"]["input_kind"] == "text"


async def test_answer_and_navigate_back(client: AsyncClient):
    session_id = await _start(client)

    response = await _answer(client, session_id, "Jane")
    assert response.status_code == 200
    assert response.json()["directive"]["question_id"] == "email"

    response = await _send(client, session_id, {"type": "navigate_back"})
    assert response.json()["directive"]["question_id"] == "name"

    response = await client.get(f"{BASE}/{session_id}")
    assert response.status_code == 200
    assert response.json()["directive"]["question_id"] == "name"


async def test_invalid_answer_returns_400(client: AsyncClient):
    session_id = await _start(client)
    await _answer(client, session_id, "Jane")

    response = await _answer(client, session_id, "not-an-email")

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_INPUT_001"


async def test_unknown_event_type_returns_422(client: AsyncClient):
    session_id = await _start(client)
    response = await _send(client, session_id, {"type": "teleport"})
    assert response.status_code == 422


async def test_confirm_while_answering_returns_409(client: AsyncClient):
    session_id = await _start(client)

    response = await _send(client, session_id, {"type": "confirm", "accepted": True})

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_INTAKE_001"


async def test_unknown_session_returns_404(client: AsyncClient):
    response = await client.get(f"{BASE}/no-such-session")

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


async def test_invalid_session_id_returns_400(client: AsyncClient):
    response = await client.get(f"{BASE}/bad.id")
    assert response.status_code == 400


async def test_full_flow_to_proposal(client: AsyncClient, default_flow_answers):
    """모든 질문에 답하고 확정하면 추천 티어와 선택 기능이 담긴 제안서가 만들어진다."""
    session_id = await _start(client)
    for value in default_flow_answers:
        response = await _answer(client, session_id, value)
        assert response.status_code == 200

    data = response.json()
    assert data["state"] == "awaiting_confirmation"
    assert "Acme Bakery" in data["summary"]

    response = await client.get(f"{BASE}/{session_id}/summary")
    assert response.json()["summary"] == data["summary"]

    # 프로젝트 설명부터 다시 수정 후 재확정
    await _send(client, session_id, {"type": "confirm", "accepted": False})
    response = await _send(
        client, session_id, {"type": "change_decision", "choice": "edit", "position": 5}
    )
    assert response.json()["directive"]["question_id"] == "projectDescription"
    for value in default_flow_answers[5:]:
        response = await _answer(client, session_id, value)
    assert response.json()["state"] == "awaiting_confirmation"

    response = await _send(client, session_id, {"type": "confirm", "accepted": True})
    assert response.json()["state"] == "confirmed"
    assert response.json()["finalized_answers"]["projectType"] == "business-site"

    response = await client.post(f"{BASE}/{session_id}/proposal")

    assert response.status_code == 200
    proposal = response.json()["proposal"]
    breakdown = response.json()["breakdown"]
    assert proposal["tier_id"] == "business-site-good"
    assert sorted(proposal["selected_features"]) == sorted(
        ["responsive-design", "basic-seo", "contact-form", "social-integration", "blog", "booking"]
    )
    assert proposal["computed_total"] == 4050.0
    assert breakdown["one_time_total"] == 4050.0
    assert {line["id"] for line in breakdown["add_on_lines"]} == {"blog", "booking"}

    # 제안서로 넘긴 세션은 삭제되어 두 번째 요청은 404
    assert (await client.get(f"{BASE}/{session_id}")).status_code == 404
    assert (await client.post(f"{BASE}/{session_id}/proposal")).status_code == 404


async def test_proposal_before_confirm_returns_409(client: AsyncClient):
    session_id = await _start(client)
    response = await client.post(f"{BASE}/{session_id}/proposal")
    assert response.status_code == 409
