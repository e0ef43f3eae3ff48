"""Supabase repository for per-user profile and log snapshots."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from nutri_coach.domain.codec import decode_user_data, encode_user_data
from nutri_coach.domain.models import UserData
from nutri_coach.services.user_data import UserDataRepository


@dataclass
class SupabaseUserDataRepository(UserDataRepository):
    """Stores one JSON document per user in the ``user_data`` table."""

    client: Client

    def load(self, user_id: UUID) -> UserData:
        """Return the stored snapshot, or an empty one."""
        response = (
            self.client.table("user_data")
            .select("data")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return UserData()
        return decode_user_data(response.data[0].get("data"))

    def save(self, user_id: UUID, data: UserData) -> None:
        """Upsert the snapshot for the user."""
        self.client.table("user_data").upsert(
            {
                "user_id": str(user_id),
                "data": encode_user_data(data),
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()
