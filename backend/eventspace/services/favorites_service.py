"""Saved venues per user (favorites table, joined with the venue row)."""
import logging

from eventspace.core.constants import TABLE_FAVORITES
from eventspace.models.user import User
from eventspace.models.venue import Venue
from eventspace.services.store import StoreClient

logger = logging.getLogger(__name__)


async def list_favorites(store: StoreClient, user: User) -> list[Venue]:
    result = await store.select(
        TABLE_FAVORITES,
        columns="*, venues(*)",
        filters=[("user_id", "eq", user.id)],
        order="created_at.desc",
    )
    return [Venue.from_row(row["venues"]) for row in result.rows if row.get("venues")]


async def is_favorite(store: StoreClient, user: User, venue_id: str) -> bool:
    row = await store.select_one(
        TABLE_FAVORITES,
        columns="venue_id",
        filters=[("user_id", "eq", user.id), ("venue_id", "eq", venue_id)],
    )
    return row is not None


async def add_favorite(store: StoreClient, user: User, venue_id: str) -> None:
    """Idempotent: saving a venue twice leaves one row."""
    if await is_favorite(store, user, venue_id):
        return
    await store.insert(TABLE_FAVORITES, {"user_id": user.id, "venue_id": venue_id})
    logger.info("User %s saved venue %s", user.id, venue_id)


async def remove_favorite(store: StoreClient, user: User, venue_id: str) -> None:
    await store.delete(TABLE_FAVORITES, filters=[("user_id", "eq", user.id), ("venue_id", "eq", venue_id)])
