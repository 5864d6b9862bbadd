"""Venue review as stored in `reviews`, joined with the author's users(name, avatar)."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class Review(BaseModel):
    id: str
    venue_id: str
    user_id: str
    user_name: str = "User"
    user_avatar: str | None = None
    booking_id: str | None = None
    rating: int
    comment: str | None = None
    images: list[str] = Field(default_factory=list)
    provider_response: str | None = None
    response_at: datetime | None = None
    is_verified: bool = False
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Review":
        author = row.get("users") or {}
        return cls(
            id=str(row["id"]),
            venue_id=str(row["venue_id"]),
            user_id=str(row.get("user_id") or ""),
            user_name=author.get("name") or "User",
            user_avatar=author.get("avatar"),
            booking_id=row.get("booking_id"),
            rating=row.get("rating") or 0,
            comment=row.get("comment"),
            images=row.get("images") or [],
            provider_response=row.get("provider_response"),
            response_at=row.get("response_at"),
            is_verified=bool(row.get("is_verified")),
            created_at=row.get("created_at"),
        )
