"""Domain models for product wizard sessions."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class ProductSessionRecord:
    """Represents a persisted product info session."""

    id: UUID
    session_data: dict[str, object]
    created_at: datetime | None
    updated_at: datetime | None
