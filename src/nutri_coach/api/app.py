"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date
from uuid import UUID

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from nutri_coach.api.auth import require_user
from nutri_coach.api.auth import router as auth_router
from nutri_coach.api.coach import router as coach_router
from nutri_coach.api.schemas import (
    MealPayload,
    OnboardingPayload,
    ProfileUpdatePayload,
    TemplatePayload,
    TemplateRenamePayload,
    WeightPayload,
)
from nutri_coach.app_logging import configure_logging
from nutri_coach.containers import AppContainer
from nutri_coach.domain.codec import (
    encode_badge,
    encode_log,
    encode_meal,
    encode_profile,
)
from nutri_coach.domain.models import UserAccount
from nutri_coach.domain.profile import MealTemplate, UserProfile
from nutri_coach.services.logs import local_today
from nutri_coach.services.meals import MealSaveRequest, ProfileRequiredError
from nutri_coach.services.profiles import TemplateNotFoundError
from nutri_coach.services.users import (
    InvalidCredentialsError,
    PasswordTooLongError,
    UsernameTakenError,
)


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            await app.state.container.close_resources()
        except Exception:
            logger.exception("Failed to close resources")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(auth_router)
    app.include_router(coach_router)

    @app.exception_handler(ProfileRequiredError)
    async def profile_required(_: Request, exc: ProfileRequiredError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(UsernameTakenError)
    async def username_taken(_: Request, exc: UsernameTakenError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(InvalidCredentialsError)
    async def invalid_credentials(
        _: Request, exc: InvalidCredentialsError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": str(exc)}
        )

    @app.exception_handler(PasswordTooLongError)
    async def password_too_long(_: Request, exc: PasswordTooLongError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)},
        )

    @app.exception_handler(TemplateNotFoundError)
    async def template_not_found(
        _: Request, exc: TemplateNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": f"Template not found: {exc}"},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/profile")
    async def get_profile(
        request: Request, account: UserAccount = Depends(require_user)
    ) -> dict[str, object]:
        """Return the profile, or null before onboarding."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.get_profile(account.id)
        return {"profile": encode_profile(profile) if profile else None}

    @app.post("/profile", status_code=status.HTTP_201_CREATED)
    async def complete_onboarding(
        payload: OnboardingPayload,
        request: Request,
        account: UserAccount = Depends(require_user),
    ) -> dict[str, object]:
        """Create the profile and its derived targets."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.complete_onboarding(
            account.id, payload.to_input(), timezone=payload.timezone
        )
        state_container.meal_log_service.load_session(account.id)
        return {"profile": encode_profile(profile)}

    @app.patch("/profile")
    async def edit_profile(
        payload: ProfileUpdatePayload,
        request: Request,
        account: UserAccount = Depends(require_user),
    ) -> dict[str, object]:
        """Edit profile fields; biometric edits refresh the targets."""
        state_container: AppContainer = request.app.state.container
        changes = payload.model_dump(exclude_none=True)
        profile = state_container.profile_service.edit_profile(account.id, **changes)
        return {"profile": encode_profile(profile)}

    @app.post("/profile/theme")
    async def toggle_theme(
        request: Request, account: UserAccount = Depends(require_user)
    ) -> dict[str, object]:
        """Switch between light and dark themes."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.toggle_theme(account.id)
        return {"theme": profile.theme.value}

    @app.get("/logs/today")
    async def today(
        request: Request, account: UserAccount = Depends(require_user)
    ) -> dict[str, object]:
        """Return today's meals, totals and streak."""
        state_container: AppContainer = request.app.state.container
        summary = state_container.meal_log_service.today(account.id)
        return {
            "log": encode_log(summary.log),
            "totals": asdict(summary.totals),
            "streak": summary.streak,
        }

    @app.post("/meals", status_code=status.HTTP_201_CREATED)
    async def save_meal(
        payload: MealPayload,
        request: Request,
        account: UserAccount = Depends(require_user),
    ) -> dict[str, object]:
        """Log a meal and report streak, badges and celebration cues."""
        state_container: AppContainer = request.app.state.container
        outcome = state_container.meal_log_service.save_meal(
            account.id,
            MealSaveRequest(
                meal_type=payload.meal_type,
                items=[item.to_domain() for item in payload.items],
                quality_score=payload.quality_score.to_domain(),
                image_url=payload.image_url,
            ),
        )
        highlighted = outcome.highlighted_badge
        return {
            "meal": encode_meal(outcome.meal),
            "streak": outcome.streak,
            "new_badges": [encode_badge(badge) for badge in outcome.new_badges],
            "unlocked_badge": encode_badge(highlighted) if highlighted else None,
            "celebrate": outcome.celebrate,
            "first_meal_of_day": outcome.first_meal_of_day,
        }

    @app.post("/logs/weight")
    async def record_weight(
        payload: WeightPayload,
        request: Request,
        account: UserAccount = Depends(require_user),
    ) -> dict[str, str]:
        """Record today's body weight."""
        state_container: AppContainer = request.app.state.container
        state_container.meal_log_service.record_weight(account.id, payload.weight_kg)
        return {"status": "ok"}

    @app.get("/streak")
    async def streak(
        request: Request, account: UserAccount = Depends(require_user)
    ) -> dict[str, int]:
        """Return the current logging streak."""
        state_container: AppContainer = request.app.state.container
        return {"streak": state_container.meal_log_service.streak(account.id)}

    @app.get("/badges")
    async def badges(
        request: Request, account: UserAccount = Depends(require_user)
    ) -> dict[str, object]:
        """Return owned badges."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.get_profile(account.id)
        owned = profile.badges if profile else []
        return {"badges": [encode_badge(badge) for badge in owned]}

    @app.post("/templates", status_code=status.HTTP_201_CREATED)
    async def add_template(
        payload: TemplatePayload,
        request: Request,
        account: UserAccount = Depends(require_user),
    ) -> dict[str, object]:
        """Save a reusable meal template."""
        state_container: AppContainer = request.app.state.container
        template = state_container.profile_service.add_template(
            account.id,
            payload.name,
            [item.to_domain() for item in payload.items],
            payload.quality_score.to_domain(),
        )
        return {"template": _template_json(template)}

    @app.patch("/templates/{template_id}")
    async def rename_template(
        template_id: UUID,
        payload: TemplateRenamePayload,
        request: Request,
        account: UserAccount = Depends(require_user),
    ) -> dict[str, object]:
        """Rename a saved template."""
        state_container: AppContainer = request.app.state.container
        template = state_container.profile_service.rename_template(
            account.id, template_id, payload.name
        )
        return {"template": _template_json(template)}

    @app.delete("/templates/{template_id}")
    async def delete_template(
        template_id: UUID,
        request: Request,
        account: UserAccount = Depends(require_user),
    ) -> dict[str, str]:
        """Remove a saved template."""
        state_container: AppContainer = request.app.state.container
        state_container.profile_service.delete_template(account.id, template_id)
        return {"status": "ok"}

    @app.get("/progress/history")
    async def history(
        request: Request, account: UserAccount = Depends(require_user)
    ) -> dict[str, object]:
        """Return logged days, newest first."""
        state_container: AppContainer = request.app.state.container
        logs = state_container.user_data_store.get(account.id).logs
        rows = state_container.progress_service.history(logs)
        return {"history": [asdict(row) for row in rows]}

    @app.get("/progress/export.csv", response_class=PlainTextResponse)
    async def export_csv(
        request: Request, account: UserAccount = Depends(require_user)
    ) -> PlainTextResponse:
        """Download the history as CSV."""
        state_container: AppContainer = request.app.state.container
        logs = state_container.user_data_store.get(account.id).logs
        return PlainTextResponse(
            state_container.progress_service.export_csv(logs),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="nutri_coach.csv"'},
        )

    @app.get("/progress/week")
    async def week(
        request: Request, account: UserAccount = Depends(require_user)
    ) -> dict[str, object]:
        """Return week-to-date totals and averages."""
        state_container: AppContainer = request.app.state.container
        data = state_container.user_data_store.get(account.id)
        today = _user_today(state_container, data.profile)
        return asdict(state_container.progress_service.get_week(data.logs, today))

    @app.get("/progress/month")
    async def month(
        request: Request, account: UserAccount = Depends(require_user)
    ) -> dict[str, object]:
        """Return month totals and averages."""
        state_container: AppContainer = request.app.state.container
        data = state_container.user_data_store.get(account.id)
        today = _user_today(state_container, data.profile)
        return asdict(state_container.progress_service.get_month(data.logs, today))

    @app.get("/progress/trend")
    async def trend(
        request: Request, account: UserAccount = Depends(require_user)
    ) -> dict[str, object]:
        """Return calorie and weight chart points."""
        state_container: AppContainer = request.app.state.container
        data = state_container.user_data_store.get(account.id)
        if data.profile is None:
            raise ProfileRequiredError("Complete onboarding first")
        points = state_container.progress_service.trend(
            data.logs, data.profile.weight_kg
        )
        return {"points": [asdict(point) for point in points]}

    return app


def _user_today(container: AppContainer, profile: UserProfile | None) -> date:
    if profile is None:
        return local_today(container.settings.default_timezone)
    return local_today(profile.timezone)


def _template_json(template: MealTemplate) -> dict[str, object]:
    return {
        "id": str(template.id),
        "name": template.name,
        "total_calories": template.total_calories,
        "total_protein_g": template.total_protein_g,
        "total_carbs_g": template.total_carbs_g,
        "total_fat_g": template.total_fat_g,
        "item_count": len(template.items),
        "quality_score": template.quality_score.score,
    }
