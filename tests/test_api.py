"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from makeup_studio.api.app import create_app
from makeup_studio.i18n import notice
from makeup_studio.services.llm import to_data_url
from tests.conftest import AUTH_HEADERS, consultation_payload, make_image


def _client(container) -> TestClient:
    return TestClient(create_app(container))


def _reach_input(client: TestClient, container) -> None:
    structured = container.session_service.consultation_service.client
    structured.payloads["consultation_turn"] = consultation_payload(
        reply="Got it!", style=["Natural"], environment="Office"
    )
    response = client.post(
        "/session/messages", json={"text": "Natural for work"}, headers=AUTH_HEADERS
    )
    assert response.status_code == 200
    response = client.post("/session/proceed", headers=AUTH_HEADERS)
    assert response.status_code == 200
    assert response.json()["stage"] == "INPUT"


def _reach_style_selection(client: TestClient, container) -> dict:
    _reach_input(client, container)
    response = client.post(
        "/session/photo",
        json={"image": to_data_url(make_image())},
        headers=AUTH_HEADERS,
    )
    assert response.status_code == 200
    return response.json()


def _reach_result(client: TestClient, container) -> dict:
    _reach_style_selection(client, container)
    response = client.post("/session/styles/s1", headers=AUTH_HEADERS)
    assert response.status_code == 200
    return response.json()


def test_health_endpoint(container) -> None:
    response = _client(container).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_session_requires_bearer_token(container) -> None:
    client = _client(container)

    assert client.get("/session").status_code == 401
    assert (
        client.get("/session", headers={"Authorization": "Bearer nope"}).status_code
        == 401
    )


def test_new_session_starts_in_consultation(container) -> None:
    response = _client(container).get("/session", headers=AUTH_HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["stage"] == "CONSULTATION"
    assert data["styles"] == []
    assert data["consultation"]["ready"] is False


def test_proceed_before_ready_is_rejected(container) -> None:
    response = _client(container).post("/session/proceed", headers=AUTH_HEADERS)

    assert response.status_code == 409
    assert response.json()["detail"]["reason"] == "not_ready"


def test_blank_message_is_rejected(container) -> None:
    response = _client(container).post(
        "/session/messages", json={"text": "   "}, headers=AUTH_HEADERS
    )

    assert response.status_code == 422


def test_photo_flow_reaches_style_selection(container) -> None:
    data = _reach_style_selection(_client(container), container)

    assert data["stage"] == "STYLE_SELECTION"
    assert data["tier"] == "strict"
    assert data["tier_label"] == notice("tier_strict")
    assert [style["id"] for style in data["styles"]] == ["s1"]
    assert data["styles"][0]["highlights"] == ["圆脸", "Light"]
    assert data["analysis"]["features"] is not None
    assert data["consultation"]["goals"] == ["Natural"]


def test_dark_photo_is_rejected_with_reason(container) -> None:
    client = _client(container)
    _reach_input(client, container)

    response = client.post(
        "/session/photo",
        json={"image": to_data_url(make_image((10, 10, 10)))},
        headers=AUTH_HEADERS,
    )

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["reason"] == "too_dark"
    assert detail["stage"] == "INPUT"


def test_invalid_base64_photo_is_unreadable(container) -> None:
    client = _client(container)
    _reach_input(client, container)

    response = client.post(
        "/session/photo", json={"image": "%%%"}, headers=AUTH_HEADERS
    )

    assert response.status_code == 422
    assert response.json()["detail"]["reason"] == "unreadable"


def test_analysis_failure_returns_view_with_reason(container) -> None:
    client = _client(container)
    _reach_input(client, container)
    structured = container.session_service.analysis_service.client
    structured.errors["face_analysis"] = RuntimeError("model down")

    response = client.post(
        "/session/photo",
        json={"image": to_data_url(make_image())},
        headers=AUTH_HEADERS,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["stage"] == "INPUT"
    assert data["accepted"] is False
    assert data["reason"] == "analysis_failed"
    assert data["notice"] == notice("analysis_failed")


def test_select_style_produces_result(container) -> None:
    client = _client(container)

    data = _reach_result(client, container)

    assert data["stage"] == "TRANSFORMATION"
    assert data["selected_style"]["id"] == "s1"
    assert len(data["breakdown"]) == 4
    assert data["can_navigate"] is True
    processed = client.get("/session/photos/processed", headers=AUTH_HEADERS)
    assert processed.status_code == 200
    assert processed.headers["content-type"] == "image/jpeg"


def test_unknown_style_is_not_found(container) -> None:
    client = _client(container)
    _reach_style_selection(client, container)

    response = client.post("/session/styles/missing", headers=AUTH_HEADERS)

    assert response.status_code == 404
    assert response.json()["detail"]["reason"] == "unknown_style"


def test_generation_failure_returns_bad_gateway(container) -> None:
    client = _client(container)
    _reach_style_selection(client, container)
    container.session_service.transform_service.client.error = RuntimeError("boom")

    response = client.post("/session/styles/s1", headers=AUTH_HEADERS)

    assert response.status_code == 502
    assert response.json()["detail"]["reason"] == "generation_failed"
    state = client.get("/session", headers=AUTH_HEADERS).json()
    assert state["stage"] == "STYLE_SELECTION"
    assert state["generating"] is False


def test_navigate_between_result_tabs(container) -> None:
    client = _client(container)

    rejected = client.post(
        "/session/navigate", json={"stage": "BREAKDOWN"}, headers=AUTH_HEADERS
    )
    assert rejected.status_code == 409
    assert rejected.json()["detail"]["reason"] == "invalid_stage"

    _reach_result(client, container)
    response = client.post(
        "/session/navigate", json={"stage": "BREAKDOWN"}, headers=AUTH_HEADERS
    )

    assert response.status_code == 200
    assert response.json()["stage"] == "BREAKDOWN"


def test_breakdown_images(container) -> None:
    client = _client(container)
    _reach_result(client, container)

    eyes = client.get("/session/breakdown/2/image", headers=AUTH_HEADERS)
    missing = client.get("/session/breakdown/9/image", headers=AUTH_HEADERS)

    assert eyes.status_code == 200
    assert eyes.headers["content-type"] == "image/png"
    assert missing.status_code == 404


def test_breakdown_image_pending_without_landmarks(container) -> None:
    client = _client(container)
    container.session_service.landmark_service.detector.points = None
    _reach_result(client, container)

    response = client.get("/session/breakdown/3/image", headers=AUTH_HEADERS)

    assert response.status_code == 202
    assert response.json() == {"status": "pending"}


def test_save_look_and_list_history(container) -> None:
    client = _client(container)
    _reach_result(client, container)

    saved = client.post("/session/save", headers=AUTH_HEADERS)
    history = client.get("/history", headers=AUTH_HEADERS)

    assert saved.status_code == 200
    assert saved.json() == {"status": "saved", "message": notice("saved")}
    entries = history.json()
    assert len(entries) == 1
    assert entries[0]["style_name"] == "Soft Round"
    assert entries[0]["processed_image_url"].startswith("data:image/jpeg;base64,")


def test_save_without_result_is_rejected(container) -> None:
    response = _client(container).post("/session/save", headers=AUTH_HEADERS)

    assert response.status_code == 409
    assert response.json()["detail"]["reason"] == "not_ready"


def test_save_failure_returns_bad_gateway(container) -> None:
    client = _client(container)
    _reach_result(client, container)
    container.history_service.repository.error = RuntimeError("db down")

    response = client.post("/session/save", headers=AUTH_HEADERS)

    assert response.status_code == 502
    assert response.json()["detail"]["reason"] == "save_failed"


def test_preferences_roundtrip_and_localized_notices(container) -> None:
    client = _client(container)

    assert client.get("/preferences", headers=AUTH_HEADERS).json() == {
        "language": "en"
    }
    updated = client.put(
        "/preferences", json={"language": "ZH"}, headers=AUTH_HEADERS
    )
    rejected = client.post("/session/proceed", headers=AUTH_HEADERS)

    assert updated.json() == {"language": "zh"}
    assert rejected.json()["detail"]["message"] == notice("not_ready", "zh")


def test_restart_keeps_language(container) -> None:
    client = _client(container)
    client.put("/preferences", json={"language": "zh"}, headers=AUTH_HEADERS)
    _reach_style_selection(client, container)

    response = client.post("/session/restart", headers=AUTH_HEADERS)

    data = response.json()
    assert data["stage"] == "CONSULTATION"
    assert data["consultation"]["transcript"] == []
    assert data["styles"] == []
    assert client.get("/preferences", headers=AUTH_HEADERS).json() == {
        "language": "zh"
    }
