"""Spoonacular, Google custom search and profile clients over a mocked requests.Session."""

from datetime import date
from unittest.mock import Mock

import pytest
import requests

from meal_assistant.domain.exceptions import (
    MisconfiguredCredential,
    ProfileUnavailable,
    ToolTimeout,
    ToolUnavailable,
)
from meal_assistant.infrastructure.providers.google_search import GoogleSearchClient
from meal_assistant.infrastructure.providers.profile_client import ProfileClient
from meal_assistant.infrastructure.providers.spoonacular import SpoonacularClient

from conftest import run


def http_session(payload=None, status=200, reason="OK", error=None) -> Mock:
    session = Mock(spec=requests.Session)
    if error is not None:
        session.get.side_effect = error
        return session
    response = Mock()
    response.ok = 200 <= status < 300
    response.status_code = status
    response.reason = reason
    response.json.return_value = payload
    session.get.return_value = response
    return session


def sent(session: Mock):
    args, kwargs = session.get.call_args
    return args[0], kwargs.get("params") or {}, kwargs.get("headers") or {}


# ---------------------------------------------------------------------------
# Spoonacular
# ---------------------------------------------------------------------------

def spoonacular(session) -> SpoonacularClient:
    return SpoonacularClient("spoon-key", base_url="https://api.example.test/", session=session)


def test_spoonacular_requires_key():
    with pytest.raises(MisconfiguredCredential):
        SpoonacularClient("")


def test_find_by_ingredients_request_and_parse():
    session = http_session([
        {"id": 1, "title": "Garlic Rice", "missedIngredients": [{"name": "butter"}]},
        {"title": "no id, skipped"},
    ])
    hits = run(spoonacular(session).find_by_ingredients(["rice", "garlic"]))

    url, params, _ = sent(session)
    assert url == "https://api.example.test/recipes/findByIngredients"
    assert params == {"apiKey": "spoon-key", "ingredients": "rice,garlic", "number": 5}
    assert len(hits) == 1
    assert hits[0].recipe_id == 1
    assert hits[0].missing_ingredients == ["butter"]


def test_complex_search_sends_only_given_filters():
    session = http_session({"results": [{"id": 9, "title": "Laksa"}]})
    hits = run(spoonacular(session).complex_search(
        "laksa", cuisine="asian", exclude_ingredients=["pork", "lard"], number=3,
    ))

    _, params, _ = sent(session)
    assert params == {
        "apiKey": "spoon-key",
        "query": "laksa",
        "number": 3,
        "cuisine": "asian",
        "excludeIngredients": "pork,lard",
    }
    assert hits[0].title == "Laksa"


def test_information_parses_nutrients():
    session = http_session({
        "readyInMinutes": 30,
        "servings": 0,
        "nutrition": {"nutrients": [
            {"name": "Calories", "amount": 520.4, "unit": "kcal"},
            {"name": "Protein", "amount": None, "unit": "g"},
        ]},
    })
    details = run(spoonacular(session).get_information(42))

    url, params, _ = sent(session)
    assert url.endswith("/recipes/42/information")
    assert params["includeNutrition"] == "true"
    assert str(details.nutrient("Calories")) == "520.4 kcal"
    assert details.nutrient("Protein") is None
    assert details.ready_in_minutes == 30
    assert details.servings is None


def test_instructions_take_first_block():
    session = http_session([
        {"steps": [{"step": " Boil water. "}, {"step": ""}, {"step": "Add noodles."}]},
        {"steps": [{"step": "Sauce step"}]},
    ])
    steps = run(spoonacular(session).get_instructions(42))
    assert steps == ["Boil water.", "Add noodles."]


def test_instructions_empty_list():
    assert run(spoonacular(http_session([])).get_instructions(1)) == []


def test_information_skips_unparseable_nutrients():
    session = http_session({
        "readyInMinutes": "soon",
        "servings": "2",
        "nutrition": {"nutrients": [
            {"name": "Calories", "amount": "n/a", "unit": "kcal"},
            {"name": "Fat", "amount": "12.5", "unit": "g"},
            "Protein 30g",
        ]},
    })
    details = run(spoonacular(session).get_information(42))

    assert details.nutrient("Calories") is None
    assert str(details.nutrient("Fat")) == "12.5 g"
    assert details.ready_in_minutes is None
    assert details.servings == 2


def test_information_with_malformed_nutrition_is_tool_unavailable():
    with pytest.raises(ToolUnavailable, match="malformed nutrition"):
        run(spoonacular(http_session({"nutrition": ["Calories"]})).get_information(42))


@pytest.mark.parametrize("payload", [
    [{"id": "abc", "title": "Laksa"}],
    [{"id": None, "title": "Laksa"}],
    [{"id": 7, "missedIngredients": "coconut milk"}],
    [42],
])
def test_malformed_ingredient_hits_are_tool_unavailable(payload):
    with pytest.raises(ToolUnavailable, match="malformed recipe results"):
        run(spoonacular(http_session(payload)).find_by_ingredients(["rice"]))


def test_malformed_search_hits_are_tool_unavailable():
    session = http_session({"results": [{"id": 1, "title": "Laksa"}, {"id": "abc"}]})
    with pytest.raises(ToolUnavailable, match="malformed recipe results"):
        run(spoonacular(session).complex_search("laksa"))


def test_malformed_instruction_steps_are_skipped():
    session = http_session([{"steps": ["Boil water.", {"step": 3}, {"step": "Add noodles."}]}])
    assert run(spoonacular(session).get_instructions(42)) == ["Add noodles."]


def test_malformed_instruction_block_is_tool_unavailable():
    with pytest.raises(ToolUnavailable, match="malformed instructions"):
        run(spoonacular(http_session(["Boil water."])).get_instructions(42))


def test_http_error_is_tool_unavailable():
    session = http_session(status=500, reason="Internal Server Error")
    with pytest.raises(ToolUnavailable, match="Got 500 error from Spoonacular API"):
        run(spoonacular(session).complex_search("rice"))


def test_timeout_is_tool_timeout():
    session = http_session(error=requests.exceptions.Timeout("read timed out"))
    with pytest.raises(ToolTimeout):
        run(spoonacular(session).get_information(1))


def test_connection_error_does_not_leak_key():
    session = http_session(error=requests.exceptions.ConnectionError(
        "Max retries exceeded with url: /recipes/complexSearch?apiKey=spoon-key"
    ))
    with pytest.raises(ToolUnavailable) as info:
        run(spoonacular(session).complex_search("rice"))
    assert "spoon-key" not in str(info.value)


def test_unexpected_shape_is_tool_unavailable():
    with pytest.raises(ToolUnavailable, match="unexpected response shape"):
        run(spoonacular(http_session({"status": "failure"})).complex_search("rice"))


def test_invalid_json_is_tool_unavailable():
    session = http_session()
    session.get.return_value.json.side_effect = ValueError("no json")
    with pytest.raises(ToolUnavailable, match="invalid JSON"):
        run(spoonacular(session).find_by_ingredients(["rice"]))


# ---------------------------------------------------------------------------
# Google custom search
# ---------------------------------------------------------------------------

def test_google_requires_key_and_engine():
    with pytest.raises(MisconfiguredCredential):
        GoogleSearchClient("key", "")


def test_google_search_params_and_hits():
    session = http_session({"items": [
        {"title": "Zam Zam", "snippet": "Murtabak", "link": "https://zamzam.example"},
    ]})
    client = GoogleSearchClient("g-key", "cse-1", url="https://search.example.test", session=session)

    hits = run(client.search("murtabak restaurant Singapore menu calories", num=5))

    url, params, _ = sent(session)
    assert url == "https://search.example.test"
    assert params == {
        "key": "g-key", "cx": "cse-1",
        "q": "murtabak restaurant Singapore menu calories", "num": 5,
    }
    assert hits[0].link == "https://zamzam.example"


def test_google_no_items_means_no_hits():
    client = GoogleSearchClient("g-key", "cse-1", session=http_session({"kind": "customsearch"}))
    assert run(client.search("nothing")) == []


def test_google_http_error():
    client = GoogleSearchClient("g-key", "cse-1", session=http_session(status=403, reason="Forbidden"))
    with pytest.raises(ToolUnavailable, match="403"):
        run(client.search("sushi"))


# ---------------------------------------------------------------------------
# Profile API
# ---------------------------------------------------------------------------

def test_profile_forwards_bearer_token():
    session = http_session({"target_calories": "2000", "dietary_preferences": "halal", "goal": "lose"})
    profile = run(ProfileClient("https://app.example.test/", session=session).get_profile("tok"))

    url, _, headers = sent(session)
    assert url == "https://app.example.test/api/user-data"
    assert headers == {"Authorization": "Bearer tok"}
    assert profile.target_calories == 2000
    assert profile.dietary_preference == "halal"


def test_profile_without_target_is_unavailable():
    client = ProfileClient("https://app.example.test", session=http_session({"goal": "gain"}))
    with pytest.raises(ProfileUnavailable):
        run(client.get_profile("tok"))


def test_profile_http_error_is_profile_unavailable():
    client = ProfileClient("https://app.example.test", session=http_session(status=401, reason="Unauthorized"))
    with pytest.raises(ProfileUnavailable, match="401"):
        run(client.get_profile("bad"))


def test_food_log_skips_invalid_calories():
    session = http_session([
        {"food_name": "Kaya toast", "calories": 300, "meal_type": "breakfast"},
        {"food_name": "Mystery", "calories": "lots"},
        {"food_name": "Kopi", "calories": None},
    ])
    entries = run(ProfileClient("https://app.example.test", session=session).get_food_log(
        "tok", date(2026, 10, 19),
    ))

    _, params, _ = sent(session)
    assert params == {"date": "2026-10-19"}
    assert [(e.food_name, e.calories) for e in entries] == [("Kaya toast", 300.0), ("Kopi", 0.0)]


def test_food_log_skips_non_object_entries():
    session = http_session(["oops", None, {"food_name": "Kopi", "calories": 120}])
    entries = run(ProfileClient("https://app.example.test", session=session).get_food_log(
        "tok", date(2026, 10, 19),
    ))
    assert [(e.food_name, e.calories) for e in entries] == [("Kopi", 120.0)]
