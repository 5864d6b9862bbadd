"""Hosted record store: config, REST client and row types."""
from eventspace.services.store.client import (
    Filter,
    StoreClient,
    StoreResult,
    build_params,
    parse_count,
    render_filter,
)
from eventspace.services.store.config import StoreConfig
from eventspace.services.store.types import (
    AvailabilityRow,
    BookingRow,
    FavoriteRow,
    UserRow,
    VenueRow,
)

__all__ = [
    "AvailabilityRow",
    "BookingRow",
    "FavoriteRow",
    "Filter",
    "StoreClient",
    "StoreConfig",
    "StoreResult",
    "UserRow",
    "VenueRow",
    "build_params",
    "parse_count",
    "render_filter",
]
