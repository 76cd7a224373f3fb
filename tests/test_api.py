"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from fitness_companion.api.app import create_app
from fitness_companion.containers import AppContainer
from tests.conftest import FakeChatClient, FakeWidgetBridge

OATS = {
    "id": "food_oats",
    "name": "Oats",
    "calories": 200,
    "macros": {"protein": 10, "carbs": 20, "fat": 5},
    "serving_size": 100,
}


def _client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


def _log_breakfast(client: TestClient) -> dict[str, object]:
    response = client.post(
        "/nutrition/meals",
        json={
            "type": "breakfast",
            "name": "Oats",
            "date": "2024-05-14T08:00:00Z",
            "foods": [{"food_item": OATS, "amount": 150}],
        },
    )
    assert response.status_code == 201
    return response.json()["meal"]


def test_health(container: AppContainer) -> None:
    response = _client(container).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_profile_lifecycle(container: AppContainer) -> None:
    client = _client(container)

    assert client.get("/profile").status_code == 404
    assert client.post("/profile", json={"name": "Alex"}).status_code == 201
    assert client.post("/profile", json={"name": "Alex"}).status_code == 409

    response = client.patch("/profile/anthropometry", json={"weight": 80})

    assert response.status_code == 200
    goals = response.json()["user"]["nutrition_goals"]
    assert goals["calories"] == 2662
    assert goals["protein"] == 144
    metrics = client.get("/profile/metrics").json()
    assert metrics["bmr"] == 1717.5
    assert client.delete("/profile").status_code == 204
    assert client.get("/profile").status_code == 404


def test_meal_logging_updates_day_totals(container: AppContainer) -> None:
    client = _client(container)
    meal = _log_breakfast(client)

    day = client.get("/nutrition/days/2024-05-14").json()

    assert meal["total_calories"] == 300
    assert day["day"]["meals"][0]["id"] == meal["id"]
    assert day["totals"]["calories"] == 300
    remaining = client.get("/nutrition/days/2024-05-14/remaining").json()
    assert remaining["remaining"]["calories"] == 1700
    assert remaining["remaining"]["percentages"]["calories"] == 15


def test_meal_from_catalog_food(container: AppContainer) -> None:
    client = _client(container)
    food = client.post(
        "/foods",
        json={
            "name": "Greek yogurt",
            "calories": 60,
            "macros": {"protein": 10, "carbs": 4},
            "serving_size": 100,
        },
    ).json()["food"]

    response = client.post(
        "/nutrition/meals",
        json={
            "type": "afternoonSnack",
            "name": "Yogurt",
            "date": "2024-05-14T15:00:00Z",
            "foods": [{"food_id": food["id"], "amount": 200}],
        },
    )

    assert response.status_code == 201
    assert response.json()["meal"]["total_calories"] == 120
    assert client.get("/foods", params={"query": "yog"}).json()["foods"][0]["id"] == (
        food["id"]
    )


def test_missing_resources_return_404(container: AppContainer) -> None:
    client = _client(container)

    assert client.get("/nutrition/meals/meal_missing").status_code == 404
    assert client.delete("/nutrition/meals/meal_missing").status_code == 404
    assert client.get("/foods/food_missing").status_code == 404
    assert (
        client.put("/nutrition/days/2024-05-14/water", json={"milliliters": 500})
    ).status_code == 404
    response = client.post(
        "/nutrition/meals",
        json={
            "type": "lunch",
            "name": "Mystery",
            "date": "2024-05-14T12:00:00Z",
            "foods": [{"food_id": "food_missing", "amount": 100}],
        },
    )
    assert response.status_code == 404


def test_chat_message_round_trip(container: AppContainer) -> None:
    client = _client(container)

    response = client.post("/chat/messages", json={"content": "Hi coach"})

    data = response.json()
    assert response.status_code == 200
    assert data["error"] is None
    assert data["response"]["text"] == "Keep going!"
    context = client.get("/chat/context").json()["messages"]
    assert [message["role"] for message in context] == ["user", "assistant"]


def test_chat_failure_flags_message(
    container: AppContainer, chat_client: FakeChatClient
) -> None:
    chat_client.error = RuntimeError("provider down")
    client = _client(container)

    data = client.post("/chat/messages", json={"content": "Hi coach"}).json()

    assert data["reply_id"] is None
    assert data["error"]
    context = client.get("/chat/context").json()["messages"]
    assert len(context) == 1
    assert context[0]["error"] is True


def test_stateless_ai_failure_returns_502(
    container: AppContainer, chat_client: FakeChatClient
) -> None:
    chat_client.error = RuntimeError("provider down")
    client = _client(container)

    response = client.post("/ai/food-analysis", json={"description": "pizza"})

    assert response.status_code == 502
    assert "detail" in response.json()


def test_invalid_base64_image_is_rejected(container: AppContainer) -> None:
    response = _client(container).post(
        "/ai/food-image-analysis", json={"image_base64": "not base64!"}
    )

    assert response.status_code == 422


def test_chat_sessions_endpoints(container: AppContainer) -> None:
    client = _client(container)

    session_id = client.post("/chat/sessions").json()["session_id"]

    sessions = client.get("/chat/sessions").json()
    assert sessions["current_session_id"] == session_id
    assert client.get(f"/chat/sessions/{session_id}/messages").json() == {
        "messages": []
    }
    assert client.get("/chat/sessions/missing/messages").status_code == 404


def test_widget_sync_endpoint(
    container: AppContainer, widget_bridge: FakeWidgetBridge
) -> None:
    client = _client(container)
    _log_breakfast(client)

    response = client.post("/widget/sync", json={"date": "2024-05-14T20:00:00Z"})

    data = response.json()
    assert data["synced"] is True
    assert data["target"]["calories"] == 2000
    assert data["consumed"]["calories"] == 300
    assert len(widget_bridge.consumed) == 1


def test_progress_weights(container: AppContainer) -> None:
    client = _client(container)

    created = client.post(
        "/progress/weights", json={"date": "2024-05-13T07:00:00Z", "weight": 80.4}
    )

    assert created.status_code == 201
    assert client.get("/progress/weights/latest").json() == {"weight": 80.4}
    entries = client.get(
        "/progress/weights",
        params={"start": "2024-05-01T00:00:00Z", "end": "2024-05-31T00:00:00Z"},
    ).json()["entries"]
    assert [entry["id"] for entry in entries] == [created.json()["id"]]
    assert client.delete("/progress/weights/weight_missing").status_code == 404


def test_unknown_meal_type_is_rejected(container: AppContainer) -> None:
    response = _client(container).post(
        "/nutrition/meals",
        json={
            "type": "snack",
            "name": "Yogurt",
            "date": "2024-05-14T15:00:00Z",
            "foods": [{"food_item": OATS, "amount": 100}],
        },
    )

    assert response.status_code == 422
