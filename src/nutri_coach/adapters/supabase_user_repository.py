"""Supabase-backed account repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutri_coach.domain.codec import parse_datetime
from nutri_coach.domain.models import UserAccount
from nutri_coach.services.users import UserRepository

_COLUMNS = "id, username, password_hash, created_at"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for account persistence."""

    client: Client

    def get_by_username(self, username: str) -> UserAccount | None:
        """Return the account for a username, if present."""
        response = (
            self.client.table("accounts")
            .select(_COLUMNS)
            .eq("username", username)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_account(response.data[0])

    def get_by_id(self, user_id: UUID) -> UserAccount | None:
        """Return the account for an id, if present."""
        response = (
            self.client.table("accounts")
            .select(_COLUMNS)
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_account(response.data[0])

    def create_user(self, account: UserAccount) -> UserAccount:
        """Insert an account row and return it."""
        response = (
            self.client.table("accounts")
            .insert(
                {
                    "id": str(account.id),
                    "username": account.username,
                    "password_hash": account.password_hash,
                    "created_at": account.created_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create account in Supabase")
        return _row_to_account(response.data[0])


def _row_to_account(row: dict[str, object]) -> UserAccount:
    return UserAccount(
        id=UUID(str(row["id"])),
        username=str(row["username"]),
        password_hash=str(row["password_hash"]),
        created_at=parse_datetime(row["created_at"]),
    )
