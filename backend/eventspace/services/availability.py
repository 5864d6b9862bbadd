"""
Booking calendar: per-day availability for one venue and one month.

A day is open when it is not before today and no venue_availability row closes it.
Past days are never open, whatever the overrides say. Nothing here locks dates or
guards against two clients booking the same day; that is left to the store.
"""
import asyncio
import calendar
import logging
from datetime import date, timedelta
from enum import Enum
from typing import Awaitable, Callable

from eventspace.core.constants import TABLE_VENUE_AVAILABILITY
from eventspace.core.errors import BookingValidationError
from eventspace.models.availability import DateAvailability
from eventspace.services.store import StoreClient

logger = logging.getLogger(__name__)


class AvailabilityLookupFailurePolicy(str, Enum):
    """What a failed override lookup means for the month being shown."""

    FAIL_OPEN = "fail_open"  # treat as "no overrides": future days stay open
    FAIL_CLOSED = "fail_closed"  # close every day of the month


def _check_month(month: int, year: int) -> None:
    if not 1 <= month <= 12:
        raise BookingValidationError("month must be between 1 and 12", field="month")
    if not date.min.year <= year <= date.max.year:
        raise BookingValidationError("year out of range", field="year")


def month_bounds(month: int, year: int) -> tuple[date, date]:
    """First and last day of the month."""
    _check_month(month, year)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def month_dates(month: int, year: int) -> list[date]:
    """Every day of the month, in order."""
    first, last = month_bounds(month, year)
    return [first + timedelta(days=n) for n in range((last - first).days + 1)]


def resolve_from_overrides(
    month: int,
    year: int,
    overrides: dict[date, bool],
    today: date,
) -> list[DateAvailability]:
    """Pure part of the resolver: one entry per day, in order."""
    return [
        DateAvailability(date=d, is_available=d >= today and overrides.get(d) is not False)
        for d in month_dates(month, year)
    ]


async def fetch_overrides(store: StoreClient, venue_id: str, first: date, last: date) -> dict[date, bool]:
    """venue_availability rows for the venue between first and last (inclusive), keyed by date."""
    result = await store.select(
        TABLE_VENUE_AVAILABILITY,
        columns="date,is_available",
        filters=[("venue_id", "eq", venue_id), ("date", "gte", first), ("date", "lte", last)],
    )
    overrides: dict[date, bool] = {}
    for row in result.rows:
        overrides[date.fromisoformat(str(row["date"])[:10])] = bool(row.get("is_available"))
    return overrides


async def resolve_availability(
    store: StoreClient,
    venue_id: str,
    month: int,
    year: int,
    *,
    today: date | None = None,
    failure_policy: AvailabilityLookupFailurePolicy = AvailabilityLookupFailurePolicy.FAIL_OPEN,
) -> list[DateAvailability]:
    """
    Availability for every day of month/year (month is 1-12).
    A failed lookup is logged and handled by failure_policy; this never raises for store errors.
    """
    first, last = month_bounds(month, year)
    today = today or date.today()
    try:
        overrides = await fetch_overrides(store, venue_id, first, last)
    except Exception as e:
        logger.warning(
            "Availability lookup failed for venue %s %04d-%02d (%s): %s",
            venue_id, year, month, failure_policy.value, e,
        )
        if failure_policy is AvailabilityLookupFailurePolicy.FAIL_CLOSED:
            return [DateAvailability(date=d, is_available=False) for d in month_dates(month, year)]
        overrides = {}
    return resolve_from_overrides(month, year, overrides, today)


def calendar_grid(month: int, year: int) -> list[int | None]:
    """Sunday-first month grid: None for the blank cells before day 1, then 1..last day."""
    first, last = month_bounds(month, year)
    leading = (first.weekday() + 1) % 7  # Monday=0 -> Sunday-first offset
    return [None] * leading + list(range(1, last.day + 1))


def is_date_selectable(availability: list[DateAvailability], day: date) -> bool:
    """A day not present in the loaded month is not selectable."""
    for entry in availability:
        if entry.date == day:
            return entry.is_available
    return False


Resolver = Callable[[int, int], Awaitable[list[DateAvailability]]]


class AvailabilityLoader:
    """
    Month navigation for one venue's calendar.

    Each load() supersedes the previous one: the in-flight task is cancelled and a
    generation counter makes sure a late response for an older month is discarded
    instead of overwriting the newer one.
    """

    def __init__(
        self,
        resolve: Resolver,
        on_result: Callable[[int, int, list[DateAvailability]], None] | None = None,
    ) -> None:
        self._resolve = resolve
        self._on_result = on_result
        self._generation = 0
        self._task: asyncio.Task | None = None
        self._current: tuple[int, int, list[DateAvailability]] | None = None

    @classmethod
    def for_venue(
        cls,
        store: StoreClient,
        venue_id: str,
        *,
        failure_policy: AvailabilityLookupFailurePolicy = AvailabilityLookupFailurePolicy.FAIL_OPEN,
        on_result: Callable[[int, int, list[DateAvailability]], None] | None = None,
    ) -> "AvailabilityLoader":
        async def resolve(month: int, year: int) -> list[DateAvailability]:
            return await resolve_availability(store, venue_id, month, year, failure_policy=failure_policy)

        return cls(resolve, on_result)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def current(self) -> tuple[int, int, list[DateAvailability]] | None:
        """(month, year, availability) of the latest applied load."""
        return self._current

    def _cancel_in_flight(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def load(self, month: int, year: int) -> list[DateAvailability] | None:
        """Resolve month/year. Returns None when a newer load superseded this one."""
        self._generation += 1
        generation = self._generation
        self._cancel_in_flight()
        task = asyncio.ensure_future(self._resolve(month, year))
        self._task = task
        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                return None
            raise
        if generation != self._generation:
            logger.debug("Discarding stale availability for %04d-%02d", year, month)
            return None
        self._task = None
        self._current = (month, year, result)
        if self._on_result is not None:
            self._on_result(month, year, result)
        return result

    def close(self) -> None:
        """Stop tracking: cancel the in-flight load and ignore anything it would return."""
        self._generation += 1
        self._cancel_in_flight()
