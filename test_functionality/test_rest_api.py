"""REST adapter: session lifecycle and chat over FastAPI's TestClient."""

import asyncio
import warnings
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage

from meal_assistant.adapters.rest.app import create_app
from meal_assistant.domain.exceptions import ProfileUnavailable
from meal_assistant.domain.models import FoodLogEntry, UserProfile
from meal_assistant.factory import ServiceFactory
from meal_assistant.infrastructure.config import Settings

from conftest import FakeChatModel, FakeRecipeProvider, FakeWebSearch, echo_synthesis, tool_call


def build_factory(responses=(), profile_source=None) -> ServiceFactory:
    factory = ServiceFactory(
        Settings(),
        llm=FakeChatModel(list(responses)),
        recipe_provider=FakeRecipeProvider(),
        web_search=FakeWebSearch(),
        profile_source=profile_source,
    )
    factory.initialize()
    return factory


@pytest.fixture
def factory():
    return build_factory([
        tool_call("complex-recipe-search", {"query": "chicken rice"}),
        echo_synthesis,
    ])


@pytest.fixture
def client(factory):
    with TestClient(create_app(factory)) as c:
        yield c


def start(client, **body):
    body.setdefault("remaining_calories", 1800)
    response = client.post("/sessions", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_start_session_with_explicit_budget(client, factory):
    data = start(client, dietary_preference="halal")

    assert data["remaining_calories"] == 1800
    assert data["dietary_preference"] == "halal"
    assert data["state"] == "awaiting_user_input"
    assert data["messages"][0]["role"] == "assistant"
    assert len(factory.session_store) == 1


def test_negative_budget_is_rejected(client):
    assert client.post("/sessions", json={"remaining_calories": -1}).status_code == 422


def test_budget_required_without_profile_source(client):
    response = client.post("/sessions", json={}, headers={"Authorization": "Bearer tok"})
    assert response.status_code == 422


def test_missing_budget_response_raises_no_deprecation_warning(client):
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        response = client.post("/sessions", json={})

    assert response.status_code == 422
    assert not [w for w in caught if "HTTP_422" in str(w.message)]


def test_start_from_profile_with_bearer_token():
    source = AsyncMock()
    source.get_profile.return_value = UserProfile(target_calories=2000, dietary_preference="halal")
    source.get_food_log.return_value = [FoodLogEntry("Roti prata", 500)]

    with TestClient(create_app(build_factory(profile_source=source))) as client:
        response = client.post("/sessions", json={}, headers={"Authorization": "Bearer tok"})

    assert response.status_code == 201
    assert response.json()["remaining_calories"] == 1500
    source.get_profile.assert_awaited_once_with("tok")


def test_profile_failure_is_bad_gateway():
    source = AsyncMock()
    source.get_profile.side_effect = ProfileUnavailable("Got 401 error from Profile API: Unauthorized")

    with TestClient(create_app(build_factory(profile_source=source))) as client:
        response = client.post("/sessions", json={}, headers={"Authorization": "Bearer tok"})

    assert response.status_code == 502
    assert "401" in response.json()["detail"]


def test_chat_turn(client):
    session_id = start(client)["session_id"]

    response = client.post(f"/sessions/{session_id}/messages", json={"message": "chicken rice"})

    assert response.status_code == 200
    data = response.json()
    assert "Hainanese Chicken Rice" in data["reply"]
    assert data["tool_runs"] == [
        {"name": "complex-recipe-search", "error": None, "degraded": False},
    ]
    assert data["degraded"] is False

    messages = client.get(f"/sessions/{session_id}/messages").json()
    assert [m["role"] for m in messages] == ["assistant", "user", "assistant"]
    assert messages[1]["content"] == "chicken rice"


def test_empty_message_rejected(client):
    session_id = start(client)["session_id"]
    response = client.post(f"/sessions/{session_id}/messages", json={"message": ""})
    assert response.status_code == 422


def test_unknown_session_is_404(client):
    assert client.get("/sessions/nope").status_code == 404
    assert client.post("/sessions/nope/messages", json={"message": "hi"}).status_code == 404
    assert client.delete("/sessions/nope").status_code == 404


def test_busy_session_is_409(client, factory):
    session_id = start(client)["session_id"]
    session = factory.session_store.get(session_id)
    asyncio.run(session.turn_lock.acquire())
    try:
        response = client.post(f"/sessions/{session_id}/messages", json={"message": "hi"})
    finally:
        session.turn_lock.release()

    assert response.status_code == 409


def test_end_session(client, factory):
    session_id = start(client)["session_id"]

    assert client.delete(f"/sessions/{session_id}").status_code == 204
    assert client.get(f"/sessions/{session_id}").status_code == 404
    assert len(factory.session_store) == 0


def test_model_failure_still_returns_reply():
    factory = build_factory([RuntimeError("upstream 503")])
    with TestClient(create_app(factory)) as client:
        session_id = start(client)["session_id"]
        response = client.post(f"/sessions/{session_id}/messages", json={"message": "hi"})

    assert response.status_code == 200
    assert "error processing your request" in response.json()["reply"]


def test_direct_reply_without_tools():
    factory = build_factory([AIMessage(content="Would you like to cook or eat out?")])
    with TestClient(create_app(factory)) as client:
        session_id = start(client)["session_id"]
        data = client.post(f"/sessions/{session_id}/messages", json={"message": "hi"}).json()

    assert data["reply"] == "Would you like to cook or eat out?"
    assert data["tool_runs"] == []
