"""Product info session persistence."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from product_specs.domain.sessions import ProductSessionRecord


class SessionNotFoundError(LookupError):
    """Raised when a product session does not exist."""


class ProductSessionRepository(Protocol):
    """Persistence interface for product info sessions."""

    def create_session(self, session_data: dict[str, object]) -> ProductSessionRecord:
        """Create a session row and return it."""

    def get_session(self, session_id: UUID) -> ProductSessionRecord | None:
        """Return a session by id, if present."""

    def update_session(
        self, session_id: UUID, session_data: dict[str, object]
    ) -> ProductSessionRecord | None:
        """Replace the session data and return the row, if it exists."""

    def delete_session(self, session_id: UUID) -> None:
        """Delete a session."""


@dataclass
class ProductSessionService:
    """Application service for the product wizard sessions."""

    repository: ProductSessionRepository

    def create(self, session_data: dict[str, object]) -> ProductSessionRecord:
        """Start a new session with the submitted product data."""
        return self.repository.create_session(session_data)

    def get(self, session_id: UUID) -> ProductSessionRecord | None:
        """Return a session, if present."""
        return self.repository.get_session(session_id)

    def update(
        self, session_id: UUID, session_data: dict[str, object]
    ) -> ProductSessionRecord:
        """Replace the product data stored on a session."""
        updated = self.repository.update_session(session_id, session_data)
        if updated is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return updated

    def delete(self, session_id: UUID) -> None:
        """Delete a session."""
        self.repository.delete_session(session_id)
