"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from nutri_coach.config import Settings
from nutri_coach.containers import AppContainer
from nutri_coach.domain.meals import (
    Confidence,
    DailyLog,
    FoodItem,
    Meal,
    MealType,
    QualityScore,
)
from nutri_coach.domain.models import AuthSession, UserAccount, UserData
from nutri_coach.domain.profile import (
    ActivityLevel,
    DietaryPreference,
    Gender,
    GoalType,
)
from nutri_coach.services.coach import CoachClient, CoachService
from nutri_coach.services.meals import MealLogService
from nutri_coach.services.nutrition import ProfileInput
from nutri_coach.services.profiles import ProfileService
from nutri_coach.services.stats import ProgressService
from nutri_coach.services.user_data import UserDataRepository, UserDataStore
from nutri_coach.services.users import (
    AuthService,
    PasswordHasher,
    SessionRepository,
    UserRepository,
)


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory account repository for tests."""

    accounts: dict[UUID, UserAccount] = field(default_factory=dict)

    def get_by_username(self, username: str) -> UserAccount | None:
        for account in self.accounts.values():
            if account.username == username:
                return account
        return None

    def get_by_id(self, user_id: UUID) -> UserAccount | None:
        return self.accounts.get(user_id)

    def create_user(self, account: UserAccount) -> UserAccount:
        self.accounts[account.id] = account
        return account


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory login session repository for tests."""

    sessions: dict[str, AuthSession] = field(default_factory=dict)

    def create_session(self, session: AuthSession) -> None:
        self.sessions[session.token] = session

    def get_session(self, token: str) -> AuthSession | None:
        return self.sessions.get(token)

    def delete_session(self, token: str) -> None:
        self.sessions.pop(token, None)


@dataclass
class InMemoryUserDataRepository(UserDataRepository):
    """In-memory snapshot repository that counts writes."""

    snapshots: dict[UUID, UserData] = field(default_factory=dict)
    saves: list[UUID] = field(default_factory=list)

    def load(self, user_id: UUID) -> UserData:
        return self.snapshots.get(user_id, UserData())

    def save(self, user_id: UUID, data: UserData) -> None:
        self.snapshots[user_id] = data
        self.saves.append(user_id)


@dataclass
class FakeCoachClient(CoachClient):
    """Fake coach client returning fixed payloads."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "items": [
                {
                    "name": "Grilled chicken",
                    "calories": 250,
                    "protein": 40,
                    "carbs": 0,
                    "fat": 9,
                    "portion": "150g",
                    "confidence": "High",
                }
            ],
            "qualityScore": {
                "score": 85,
                "explanation": "Lean protein",
                "suggestions": ["Add vegetables"],
            },
        }
    )
    reply_text: str = "Try adding more fibre."
    calls: list[dict[str, object]] = field(default_factory=list)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        self.calls.append(
            {
                "schema_name": schema_name,
                "prompt": prompt,
                "image_data_url": image_data_url,
            }
        )
        return self.payload

    async def chat(
        self,
        *,
        model: str,
        store: bool,
        instructions: str,
        messages: list[dict[str, str]],
    ) -> str:
        self.calls.append({"instructions": instructions, "messages": messages})
        return self.reply_text


def make_item(
    calories: float = 500,
    protein_g: float = 30,
    carbs_g: float = 30,
    fat_g: float = 20,
    name: str = "Bowl",
) -> FoodItem:
    return FoodItem(
        name=name,
        calories=calories,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
        portion="1 bowl",
        confidence=Confidence.HIGH,
    )


def make_meal(
    score: float = 60,
    calories: float = 500,
    protein_g: float = 30,
    carbs_g: float = 30,
    fat_g: float = 20,
) -> Meal:
    return Meal(
        id=uuid4(),
        created_at=datetime(2024, 1, 1, 12, 0, tzinfo=UTC),
        meal_type=MealType.LUNCH,
        items=[make_item(calories, protein_g, carbs_g, fat_g)],
        total_calories=calories,
        total_protein_g=protein_g,
        total_carbs_g=carbs_g,
        total_fat_g=fat_g,
        quality_score=QualityScore(score=score),
    )


def logged_days(*days: date) -> list[DailyLog]:
    """Build logs with one meal on each given day."""
    return [DailyLog(day=day, meals=[make_meal()]) for day in days]


def days_before(today: date, count: int) -> list[date]:
    """Return ``count`` consecutive days ending at ``today``, oldest first."""
    return [today - timedelta(days=offset) for offset in reversed(range(count))]


def sample_input(**overrides: object) -> ProfileInput:
    values: dict[str, object] = {
        "name": "Alex",
        "age": 30,
        "gender": Gender.MALE,
        "height_cm": 180,
        "weight_kg": 80,
        "target_weight_kg": 75,
        "activity_level": ActivityLevel.SEDENTARY,
        "goal": GoalType.MAINTAIN,
        "dietary_preference": DietaryPreference.NON_VEGETARIAN,
    }
    values.update(overrides)
    return ProfileInput(**values)  # type: ignore[arg-type]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        openai_api_key="openai-key",
        bcrypt_rounds=4,
    )


@pytest.fixture
def user_data_repository() -> InMemoryUserDataRepository:
    return InMemoryUserDataRepository()


@pytest.fixture
def coach_client() -> FakeCoachClient:
    return FakeCoachClient()


@pytest.fixture
def container(
    settings: Settings,
    user_data_repository: InMemoryUserDataRepository,
    coach_client: FakeCoachClient,
) -> AppContainer:
    auth_service = AuthService(
        users=InMemoryUserRepository(),
        sessions=InMemorySessionRepository(),
        hasher=PasswordHasher(rounds=4),
    )
    store = UserDataStore(repository=user_data_repository, debounce_seconds=0.01)
    coach_service = CoachService(
        client=coach_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
        retry_delay_seconds=0,
    )

    async def close_resources() -> None:
        store.flush_all()

    return AppContainer(
        settings=settings,
        auth_service=auth_service,
        user_data_store=store,
        meal_log_service=MealLogService(store=store),
        profile_service=ProfileService(store=store),
        progress_service=ProgressService(),
        coach_service=coach_service,
        close_resources=close_resources,
    )
