"""Authentication endpoints and the bearer-token dependency."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from nutri_coach.api.schemas import CredentialsPayload  # noqa: TC001
from nutri_coach.domain.models import UserAccount  # noqa: TC001

if TYPE_CHECKING:
    from nutri_coach.containers import AppContainer

router = APIRouter(prefix="/auth", tags=["auth"])


def _bearer_token(authorization: str | None = Header(default=None)) -> str:
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return token


async def require_user(
    request: Request, token: str = Depends(_bearer_token)
) -> UserAccount:
    """Resolve the logged-in account from the bearer token."""
    container: AppContainer = request.app.state.container
    account = container.auth_service.resolve(token)
    if account is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return account


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: CredentialsPayload, request: Request) -> dict[str, object]:
    """Create an account with an empty profile and log history."""
    container: AppContainer = request.app.state.container
    account = container.auth_service.register(payload.username, payload.password)
    container.user_data_store.initialize(account.id)
    return {"user": _account_json(account)}


@router.post("/login")
async def login(payload: CredentialsPayload, request: Request) -> dict[str, object]:
    """Exchange credentials for a bearer token."""
    container: AppContainer = request.app.state.container
    account, session = container.auth_service.login(payload.username, payload.password)
    container.meal_log_service.load_session(account.id)
    return {
        "token": session.token,
        "expires_at": session.expires_at.isoformat(),
        "user": _account_json(account),
    }


@router.post("/logout")
async def logout(
    request: Request,
    token: str = Depends(_bearer_token),
    account: UserAccount = Depends(require_user),
) -> dict[str, str]:
    """Flush pending data and invalidate the token."""
    container: AppContainer = request.app.state.container
    container.user_data_store.evict(account.id)
    container.auth_service.logout(token)
    return {"status": "ok"}


def _account_json(account: UserAccount) -> dict[str, object]:
    return {
        "id": str(account.id),
        "username": account.username,
        "created_at": account.created_at.isoformat(),
    }
