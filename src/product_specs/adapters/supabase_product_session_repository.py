"""Supabase-backed product session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from product_specs.domain.sessions import ProductSessionRecord
from product_specs.services.product_sessions import ProductSessionRepository

_TABLE = "product_info_sessions"
_COLUMNS = "id, session_data, created_at, updated_at"


@dataclass
class SupabaseProductSessionRepository(ProductSessionRepository):
    """Supabase implementation for product info sessions."""

    client: Client

    def create_session(self, session_data: dict[str, object]) -> ProductSessionRecord:
        """Create a session row and return it."""
        response = (
            self.client.table(_TABLE).insert({"session_data": session_data}).execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create product session")
        return _parse_session(response.data[0])

    def get_session(self, session_id: UUID) -> ProductSessionRecord | None:
        """Return a session by id, if present."""
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("id", str(session_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def update_session(
        self, session_id: UUID, session_data: dict[str, object]
    ) -> ProductSessionRecord | None:
        """Replace the session data and return the updated row."""
        response = (
            self.client.table(_TABLE)
            .update(
                {
                    "session_data": session_data,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", str(session_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def delete_session(self, session_id: UUID) -> None:
        """Delete a session row."""
        self.client.table(_TABLE).delete().eq("id", str(session_id)).execute()


def _parse_timestamp(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def _parse_session(row: dict[str, object]) -> ProductSessionRecord:
    """Parse a session row into a domain model."""
    return ProductSessionRecord(
        id=UUID(str(row["id"])),
        session_data=row.get("session_data") or {},
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )
