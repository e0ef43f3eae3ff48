"""Supabase-backed login session repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutri_coach.domain.codec import parse_datetime
from nutri_coach.domain.models import AuthSession
from nutri_coach.services.users import SessionRepository


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for login sessions."""

    client: Client

    def create_session(self, session: AuthSession) -> None:
        """Insert a session row."""
        response = (
            self.client.table("auth_sessions")
            .insert(
                {
                    "token": session.token,
                    "user_id": str(session.user_id),
                    "expires_at": session.expires_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create session")

    def get_session(self, token: str) -> AuthSession | None:
        """Return a session by token, if present."""
        response = (
            self.client.table("auth_sessions")
            .select("token, user_id, expires_at")
            .eq("token", token)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return AuthSession(
            token=row["token"],
            user_id=UUID(row["user_id"]),
            expires_at=parse_datetime(row["expires_at"]),
        )

    def delete_session(self, token: str) -> None:
        """Delete a session row."""
        self.client.table("auth_sessions").delete().eq("token", token).execute()
