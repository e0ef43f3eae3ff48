"""Tests for HTTP endpoints."""

import base64

from fastapi.testclient import TestClient

from nutri_coach.api.app import create_app
from nutri_coach.containers import AppContainer
from nutri_coach.services.logs import default_meal_type
from tests.conftest import FakeCoachClient, InMemoryUserDataRepository

ONBOARDING = {
    "name": "Alex",
    "age": 30,
    "gender": "Male",
    "height_cm": 180,
    "weight_kg": 80,
    "target_weight_kg": 75,
    "activity_level": "Sedentary",
    "goal": "Maintain",
}

MEAL = {
    "meal_type": "Lunch",
    "items": [
        {
            "name": "Salmon",
            "calories": 400,
            "protein_g": 35,
            "carbs_g": 0,
            "fat_g": 25,
            "portion": "150g",
            "confidence": "High",
        }
    ],
    "quality_score": {"score": 88, "explanation": "Omega-3 rich"},
}


def _login(client: TestClient, username: str = "alex") -> dict[str, str]:
    credentials = {"username": username, "password": "password123"}
    assert client.post("/auth/register", json=credentials).status_code == 201
    response = client.post("/auth/login", json=credentials)
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


def _onboarded_client(container: AppContainer) -> tuple[TestClient, dict[str, str]]:
    client = TestClient(create_app(container))
    headers = _login(client)
    assert client.post("/profile", json=ONBOARDING, headers=headers).status_code == 201
    return client, headers


def test_health(container) -> None:
    client = TestClient(create_app(container))

    assert client.get("/health").json() == {"status": "ok"}


def test_register_rejects_duplicate_username(container) -> None:
    client = TestClient(create_app(container))
    credentials = {"username": "alex", "password": "password123"}
    client.post("/auth/register", json=credentials)

    response = client.post("/auth/register", json=credentials)

    assert response.status_code == 409


def test_login_rejects_wrong_password(container) -> None:
    client = TestClient(create_app(container))
    client.post("/auth/register", json={"username": "alex", "password": "password123"})

    response = client.post(
        "/auth/login", json={"username": "alex", "password": "not-the-password"}
    )

    assert response.status_code == 401


def test_register_rejects_password_over_72_bytes(container) -> None:
    client = TestClient(create_app(container))

    too_long = {"username": "alex", "password": "é" * 40}
    at_limit = {"username": "alex", "password": "é" * 36}

    assert client.post("/auth/register", json=too_long).status_code == 422
    assert client.post("/auth/register", json=at_limit).status_code == 201


def test_requires_bearer_token(container) -> None:
    client = TestClient(create_app(container))

    missing = client.get("/profile")
    unknown = client.get("/profile", headers={"Authorization": "Bearer nope"})
    malformed = client.get("/profile", headers={"Authorization": "Token abc"})

    assert missing.status_code == 401
    assert unknown.status_code == 401
    assert malformed.status_code == 401


def test_profile_is_null_before_onboarding(container) -> None:
    client = TestClient(create_app(container))
    headers = _login(client)

    assert client.get("/profile", headers=headers).json() == {"profile": None}
    assert client.post("/meals", json=MEAL, headers=headers).status_code == 409


def test_onboarding_returns_targets(container) -> None:
    client = TestClient(create_app(container))
    headers = _login(client)

    response = client.post("/profile", json=ONBOARDING, headers=headers)

    profile = response.json()["profile"]
    assert profile["tdee"] == 2136
    assert profile["macro_targets"]["calories"] == 2136
    assert profile["timezone"] == "UTC"


def test_onboarding_rejects_unknown_timezone(container) -> None:
    client = TestClient(create_app(container))
    headers = _login(client)

    response = client.post(
        "/profile", json={**ONBOARDING, "timezone": "Mars/Olympus"}, headers=headers
    )

    assert response.status_code == 422


def test_save_meal_unlocks_badges(container) -> None:
    client, headers = _onboarded_client(container)

    response = client.post("/meals", json=MEAL, headers=headers)

    assert response.status_code == 201
    data = response.json()
    assert data["streak"] == 1
    assert data["celebrate"] is True
    assert data["first_meal_of_day"] is True
    assert [badge["id"] for badge in data["new_badges"]] == ["first_log", "quality_80"]
    assert data["unlocked_badge"]["id"] == "first_log"
    assert data["meal"]["total_calories"] == 400

    badges = client.get("/badges", headers=headers).json()["badges"]
    assert [badge["id"] for badge in badges] == ["first_log", "quality_80"]

    today = client.get("/logs/today", headers=headers).json()
    assert today["totals"]["calories"] == 400
    assert today["streak"] == 1


def test_save_meal_rejects_empty_items(container) -> None:
    client, headers = _onboarded_client(container)

    response = client.post("/meals", json={**MEAL, "items": []}, headers=headers)

    assert response.status_code == 422


def test_edit_profile_and_theme(container) -> None:
    client, headers = _onboarded_client(container)

    edited = client.patch("/profile", json={"goal": "Lose Weight"}, headers=headers)
    theme = client.post("/profile/theme", headers=headers)

    assert edited.json()["profile"]["macro_targets"]["calories"] == 1709
    assert theme.json() == {"theme": "dark"}


def test_template_endpoints(container) -> None:
    client, headers = _onboarded_client(container)
    payload = {
        "name": "Salmon plate",
        "items": MEAL["items"],
        "quality_score": MEAL["quality_score"],
    }

    created = client.post("/templates", json=payload, headers=headers).json()
    template_id = created["template"]["id"]
    renamed = client.patch(
        f"/templates/{template_id}", json={"name": "Fish"}, headers=headers
    )
    deleted = client.delete(f"/templates/{template_id}", headers=headers)
    missing = client.delete(f"/templates/{template_id}", headers=headers)

    assert created["template"]["total_calories"] == 400
    assert renamed.json()["template"]["name"] == "Fish"
    assert deleted.status_code == 200
    assert missing.status_code == 404


def test_progress_endpoints(container) -> None:
    client, headers = _onboarded_client(container)
    client.post("/meals", json=MEAL, headers=headers)
    client.post("/logs/weight", json={"weight_kg": 79.5}, headers=headers)

    history = client.get("/progress/history", headers=headers).json()["history"]
    export = client.get("/progress/export.csv", headers=headers)
    week = client.get("/progress/week", headers=headers).json()
    trend = client.get("/progress/trend", headers=headers).json()["points"]

    assert history[0]["meal_count"] == 1
    assert export.headers["content-type"].startswith("text/csv")
    assert export.text.splitlines()[1].endswith(",400,35,0,25,1")
    assert len(week["daily"]) == 7
    assert trend[-1]["weight_kg"] == 79.5
    assert client.get("/progress/month", headers=headers).status_code == 200
    assert client.get("/streak", headers=headers).json() == {"streak": 1}


def test_logout_flushes_and_revokes_token(
    container, user_data_repository: InMemoryUserDataRepository
) -> None:
    client, headers = _onboarded_client(container)
    client.post("/meals", json=MEAL, headers=headers)

    response = client.post("/auth/logout", headers=headers)

    assert response.status_code == 200
    assert client.get("/profile", headers=headers).status_code == 401
    snapshot = next(iter(user_data_repository.snapshots.values()))
    assert snapshot.profile is not None
    assert len(snapshot.logs[-1].meals) == 1


def test_coach_analyze_image(container) -> None:
    client, headers = _onboarded_client(container)
    image = base64.b64encode(b"\xff\xd8\xffimage").decode()

    response = client.post(
        "/coach/analyze-image",
        json={"image": f"data:image/jpeg;base64,{image}"},
        headers=headers,
    )
    bad = client.post("/coach/analyze-image", json={"image": "!!!"}, headers=headers)

    assert response.status_code == 200
    assert response.json()["qualityScore"]["score"] == 85
    assert bad.status_code == 422


def test_coach_chat_requires_profile(container) -> None:
    client = TestClient(create_app(container))
    headers = _login(client)

    response = client.post("/coach/chat", json={"message": "Hi"}, headers=headers)

    assert response.status_code == 409


def test_coach_chat_reply(container) -> None:
    client, headers = _onboarded_client(container)

    response = client.post(
        "/coach/chat",
        json={
            "message": "Snack ideas?",
            "history": [{"role": "assistant", "content": "Hello!"}],
        },
        headers=headers,
    )

    assert response.json() == {"reply": "Try adding more fibre."}


def test_coach_failure_returns_bad_gateway(container, coach_client) -> None:
    client, headers = _onboarded_client(container)

    async def broken(**_kwargs: object) -> dict[str, object]:
        raise RuntimeError("upstream down")

    coach_client.generate = broken

    response = client.post(
        "/coach/food-lookup", json={"food_name": "apple"}, headers=headers
    )

    assert response.status_code == 502


def test_shutdown_flushes_pending_writes(
    container, user_data_repository: InMemoryUserDataRepository
) -> None:
    container.user_data_store.debounce_seconds = 60
    with TestClient(create_app(container)) as client:
        headers = _login(client)
        client.post("/profile", json=ONBOARDING, headers=headers)

    snapshot = next(iter(user_data_repository.snapshots.values()))
    assert snapshot.profile is not None


def test_save_meal_defaults_meal_type_from_local_hour(container) -> None:
    client, headers = _onboarded_client(container)
    payload = {key: value for key, value in MEAL.items() if key != "meal_type"}

    before = default_meal_type("UTC")
    response = client.post("/meals", json=payload, headers=headers)
    after = default_meal_type("UTC")

    assert response.status_code == 201
    assert response.json()["meal"]["meal_type"] in {before.value, after.value}


def test_streak_endpoint_counts_today(container) -> None:
    client, headers = _onboarded_client(container)

    before = client.get("/streak", headers=headers).json()
    client.post("/meals", json=MEAL, headers=headers)
    after = client.get("/streak", headers=headers).json()

    assert before == {"streak": 0}
    assert after == {"streak": 1}


def test_coach_food_lookup(container, coach_client: FakeCoachClient) -> None:
    client, headers = _onboarded_client(container)
    coach_client.payload = {
        "name": "Apple",
        "calories": 95,
        "protein": 0.5,
        "carbs": 25,
        "fat": 0.3,
        "portion": "1 medium",
        "confidence": "High",
    }

    response = client.post(
        "/coach/food-lookup", json={"food_name": "apple"}, headers=headers
    )

    assert response.status_code == 200
    assert response.json()["item"]["name"] == "Apple"
    assert response.json()["item"]["calories"] == 95


def test_coach_food_suggestions(container, coach_client: FakeCoachClient) -> None:
    client, headers = _onboarded_client(container)
    coach_client.payload = {"suggestions": ["Banana", "Banana bread"]}

    response = client.post(
        "/coach/food-suggestions", json={"query": "ban"}, headers=headers
    )
    too_short = client.post(
        "/coach/food-suggestions", json={"query": "b"}, headers=headers
    )

    assert response.json() == {"suggestions": ["Banana", "Banana bread"]}
    assert too_short.status_code == 422


def test_coach_food_suggestions_hide_failures(
    container, coach_client: FakeCoachClient
) -> None:
    client, headers = _onboarded_client(container)

    async def broken(**_kwargs: object) -> dict[str, object]:
        raise RuntimeError("upstream down")

    coach_client.generate = broken

    response = client.post(
        "/coach/food-suggestions", json={"query": "ban"}, headers=headers
    )

    assert response.status_code == 200
    assert response.json() == {"suggestions": []}


def test_coach_recipe(container, coach_client: FakeCoachClient) -> None:
    client, headers = _onboarded_client(container)
    coach_client.payload = {
        "name": "Salmon bowl",
        "calories": 540,
        "ingredients": ["salmon", "rice"],
        "instructions": ["Cook rice", "Sear salmon"],
        "macros": {"protein": 38, "carbs": 50, "fat": 18},
    }

    response = client.post(
        "/coach/recipe", json={"ingredients": "salmon, rice"}, headers=headers
    )

    assert response.status_code == 200
    assert response.json()["recipe"]["name"] == "Salmon bowl"
    assert "salmon, rice" in str(coach_client.calls[-1]["prompt"])
