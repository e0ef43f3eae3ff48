"""Coach endpoints backed by the LLM collaborator."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status

from nutri_coach.api.auth import require_user
from nutri_coach.api.schemas import (  # noqa: TC001
    ChatPayload,
    FoodLookupPayload,
    FoodSuggestionPayload,
    ImagePayload,
    RecipePayload,
)
from nutri_coach.domain.codec import encode_food_item
from nutri_coach.domain.models import UserAccount  # noqa: TC001
from nutri_coach.services.meals import ProfileRequiredError

if TYPE_CHECKING:
    from nutri_coach.containers import AppContainer
    from nutri_coach.domain.profile import UserProfile

router = APIRouter(prefix="/coach", tags=["coach"])
_logger = logging.getLogger(__name__)

_COACH_UNAVAILABLE = "The coach is unavailable right now. Please try again."


@router.post("/analyze-image")
async def analyze_image(
    payload: ImagePayload,
    request: Request,
    account: UserAccount = Depends(require_user),
) -> dict[str, object]:
    """Estimate food items and a quality score from a meal photo."""
    container: AppContainer = request.app.state.container
    image_bytes = _decode_image(payload.image)
    try:
        analysis = await container.coach_service.analyze_image(image_bytes)
    except Exception as exc:
        _logger.exception("Meal analysis failed", extra={"user_id": account.id})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=_COACH_UNAVAILABLE
        ) from exc
    return analysis.model_dump(by_alias=True)


@router.post("/food-lookup")
async def food_lookup(
    payload: FoodLookupPayload,
    request: Request,
    account: UserAccount = Depends(require_user),
) -> dict[str, object]:
    """Estimate nutrition for a named food."""
    container: AppContainer = request.app.state.container
    try:
        item = await container.coach_service.lookup_food(payload.food_name)
    except Exception as exc:
        _logger.exception("Food lookup failed", extra={"user_id": account.id})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=_COACH_UNAVAILABLE
        ) from exc
    return {"item": encode_food_item(item)}


@router.post("/food-suggestions")
async def food_suggestions(
    payload: FoodSuggestionPayload,
    request: Request,
    _account: UserAccount = Depends(require_user),
) -> dict[str, list[str]]:
    """Suggest food names for a partial query."""
    container: AppContainer = request.app.state.container
    suggestions = await container.coach_service.suggest_foods(payload.query)
    return {"suggestions": suggestions}


@router.post("/recipe")
async def recipe(
    payload: RecipePayload,
    request: Request,
    account: UserAccount = Depends(require_user),
) -> dict[str, object]:
    """Generate a recipe from ingredients."""
    container: AppContainer = request.app.state.container
    profile = _require_profile(container, account)
    try:
        result = await container.coach_service.generate_recipe(
            payload.ingredients, profile
        )
    except Exception as exc:
        _logger.exception("Recipe generation failed", extra={"user_id": account.id})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=_COACH_UNAVAILABLE
        ) from exc
    return {"recipe": result.model_dump()}


@router.post("/chat")
async def chat(
    payload: ChatPayload,
    request: Request,
    account: UserAccount = Depends(require_user),
) -> dict[str, str]:
    """Reply to a coach chat message."""
    container: AppContainer = request.app.state.container
    profile = _require_profile(container, account)
    try:
        reply = await container.coach_service.reply(
            profile, payload.history, payload.message
        )
    except Exception as exc:
        _logger.exception("Coach chat failed", extra={"user_id": account.id})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=_COACH_UNAVAILABLE
        ) from exc
    return {"reply": reply}


def _require_profile(container: AppContainer, account: UserAccount) -> UserProfile:
    profile = container.profile_service.get_profile(account.id)
    if profile is None:
        raise ProfileRequiredError("Complete onboarding first")
    return profile


def _decode_image(value: str) -> bytes:
    """Decode base64 image data, accepting an optional data-URL prefix."""
    _, _, encoded = value.rpartition("base64,")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(
            status_code=422,
            detail="Image must be base64 encoded",
        ) from exc
