"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta

from supabase import create_client

from nutri_coach.adapters.openai_coach_client import OpenAICoachClient
from nutri_coach.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from nutri_coach.adapters.supabase_user_data_repository import (
    SupabaseUserDataRepository,
)
from nutri_coach.adapters.supabase_user_repository import SupabaseUserRepository
from nutri_coach.config import Settings
from nutri_coach.services.coach import CoachService
from nutri_coach.services.meals import MealLogService
from nutri_coach.services.profiles import ProfileService
from nutri_coach.services.stats import ProgressService
from nutri_coach.services.user_data import UserDataStore
from nutri_coach.services.users import AuthService, PasswordHasher


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    user_data_store: UserDataStore
    meal_log_service: MealLogService
    profile_service: ProfileService
    progress_service: ProgressService
    coach_service: CoachService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    auth_service = AuthService(
        users=SupabaseUserRepository(supabase_client),
        sessions=SupabaseSessionRepository(supabase_client),
        hasher=PasswordHasher(rounds=resolved_settings.bcrypt_rounds),
        session_ttl=timedelta(days=resolved_settings.session_ttl_days),
    )
    user_data_store = UserDataStore(
        repository=SupabaseUserDataRepository(supabase_client),
        debounce_seconds=resolved_settings.save_debounce_seconds,
        cache_ttl_seconds=resolved_settings.user_data_cache_ttl_seconds,
    )
    openai_client = OpenAICoachClient.create(resolved_settings.openai_api_key)
    coach_service = CoachService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        user_data_store.flush_all()
        await openai_client.client.close()

    return AppContainer(
        settings=resolved_settings,
        auth_service=auth_service,
        user_data_store=user_data_store,
        meal_log_service=MealLogService(
            store=user_data_store,
            default_timezone=resolved_settings.default_timezone,
        ),
        profile_service=ProfileService(
            store=user_data_store,
            default_timezone=resolved_settings.default_timezone,
        ),
        progress_service=ProgressService(),
        coach_service=coach_service,
        close_resources=close_resources,
    )
