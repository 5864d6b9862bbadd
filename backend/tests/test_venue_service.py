from decimal import Decimal

import pytest

from conftest import body_of, query_pairs, venue_row
from eventspace.core.errors import BookingValidationError, ExternalServiceError, NotFoundError, PermissionDenied
from eventspace.models.venue import VenueCategory, VenueDraft, VenueFilters, VenueStatus
from eventspace.services import venue_service

VENUES = "/rest/v1/venues"
REVIEWS = "/rest/v1/reviews"
BOOKINGS = "/rest/v1/bookings"


def _draft(**overrides) -> VenueDraft:
    fields = {
        "name": "Terraza del Sol",
        "description": "Rooftop terrace with a view of the whole city, ideal for cocktails and birthdays.",
        "category": "TERRAZA",
        "address": "Calle 5 de Mayo 10",
        "zone": "Centro",
        "price": "12000",
        "price_per_person": "",
        "min_capacity": "20",
        "max_capacity": "120",
        "image_urls": "https://img.test/a.jpg, https://img.test/b.jpg,",
        "payment_methods": ["EFECTIVO"],
        "rules": "No smoking\n\nMusic until 2am\n",
    }
    fields.update(overrides)
    return VenueDraft(**fields)


async def test_get_venues_applies_filters_and_page(store, store_api):
    store_api.add("GET", VENUES, json_body=[venue_row()], headers={"Content-Range": "12-12/13"})
    filters = VenueFilters(
        zone="Coyoacan", category=VenueCategory.GARDEN, price_min=Decimal("1000"), capacity=100, query="jardin"
    )
    venues, total = await venue_service.get_venues(store, filters, page=2)

    assert total == 13
    assert venues[0].provider_name == "Ana Provider"
    params = query_pairs(store_api.requests[0])
    assert ("status", "in.(ACTIVE,FEATURED)") in params
    assert ("zone", "eq.Coyoacan") in params
    assert ("category", "eq.JARDIN") in params
    assert ("price", "gte.1000") in params
    assert ("max_capacity", "gte.100") in params
    assert ("or", "(name.ilike.*jardin*,description.ilike.*jardin*,address.ilike.*jardin*)") in params
    assert ("order", "created_at.desc") in params
    assert ("limit", "12") in params
    assert ("offset", "12") in params


async def test_get_venues_store_failure_is_empty(store, store_api):
    store_api.add("GET", VENUES, status=503, json_body={"message": "unavailable"})
    assert await venue_service.get_venues(store) == ([], 0)


async def test_search_also_matches_zone(store, store_api):
    store_api.add("GET", VENUES, json_body=[])
    await venue_service.search_venues(store, "roma")
    params = dict(query_pairs(store_api.requests[0]))
    assert "zone.ilike.*roma*" in params["or"]
    assert params["limit"] == "20"


async def test_search_with_blank_query_skips_store(store, store_api):
    assert await venue_service.search_venues(store, "  ") == []
    assert store_api.requests == []


async def test_featured_venues(store, store_api):
    store_api.add("GET", VENUES, json_body=[venue_row(status="FEATURED")])
    venues = await venue_service.get_featured_venues(store)
    assert venues[0].status is VenueStatus.FEATURED
    params = query_pairs(store_api.requests[0])
    assert ("status", "eq.FEATURED") in params
    assert ("order", "rating.desc") in params
    assert ("limit", "6") in params


async def test_venue_detail_fetches_venue_and_reviews(store, store_api):
    store_api.add("GET", VENUES, json_body=[venue_row()])
    store_api.add(
        "GET",
        REVIEWS,
        json_body=[{"id": "r1", "venue_id": "venue-1", "user_id": "u1", "rating": 5, "users": {"name": "Luis"}}],
    )
    venue, reviews = await venue_service.get_venue_detail(store, "venue-1")
    assert venue.id == "venue-1"
    assert reviews[0].user_name == "Luis"
    assert len(store_api.requests) == 2


async def test_venue_detail_not_found(store, store_api):
    store_api.add("GET", VENUES, json_body=[])
    store_api.add("GET", REVIEWS, json_body=[])
    with pytest.raises(NotFoundError) as exc:
        await venue_service.get_venue_detail(store, "missing")
    assert exc.value.recovery_url


async def test_venue_detail_store_failure_is_not_not_found(store, store_api):
    store_api.add("GET", VENUES, status=503, json_body={"message": "upstream unavailable"})
    store_api.add("GET", REVIEWS, json_body=[])
    with pytest.raises(ExternalServiceError) as exc:
        await venue_service.get_venue_detail(store, "venue-1")
    assert not isinstance(exc.value, NotFoundError)
    assert exc.value.message == "upstream unavailable"


async def test_bookings_for_date_only_pending_and_confirmed(store, store_api):
    store_api.add("GET", BOOKINGS, json_body=[{"start_time": "18:00:00", "end_time": "23:00:00"}])
    windows = await venue_service.get_bookings_for_venue_date(store, "venue-1", "2026-06-13")
    assert windows[0].start_time.hour == 18
    params = query_pairs(store_api.requests[0])
    assert ("status", "in.(CONFIRMED,PENDING)") in params
    assert ("event_date", "eq.2026-06-13") in params


async def test_increment_views_failure_is_swallowed(store, store_api):
    store_api.add("POST", "/rest/v1/rpc/increment_venue_views", status=500, json_body={"message": "x"})
    await venue_service.increment_views(store, "venue-1")


@pytest.mark.parametrize(
    "step, overrides, bad_field",
    [
        (1, {"name": " "}, "name"),
        (1, {"category": "CASTILLO"}, "category"),
        (1, {"description": "too short"}, "description"),
        (2, {"zone": ""}, "zone"),
        (2, {"price": "999"}, "price"),
        (2, {"price": "abc"}, "price"),
        (3, {"max_capacity": "10"}, "max_capacity"),
        (3, {"payment_methods": []}, "payment_methods"),
    ],
)
def test_validate_step_reports_field(step, overrides, bad_field):
    with pytest.raises(BookingValidationError) as exc:
        venue_service.validate_venue_step(step, _draft(**overrides))
    assert bad_field in exc.value.fields


@pytest.mark.parametrize("step", [1, 2, 3, 4])
def test_complete_draft_passes_every_step(step):
    venue_service.validate_venue_step(step, _draft())


def test_images_are_optional():
    venue_service.validate_venue_step(4, _draft(image_urls=""))


async def test_create_venue_starts_pending(store, store_api, provider_user):
    store_api.add(
        "POST", VENUES, status=201, json_body=[venue_row(id="venue-9", status="PENDING", category="TERRAZA")]
    )
    venue = await venue_service.create_venue(store, provider_user, _draft())

    assert venue.id == "venue-9"
    sent = body_of(store_api.requests[0])
    assert sent["status"] == "PENDING"
    assert sent["provider_id"] == "provider-1"
    assert sent["images"] == ["https://img.test/a.jpg", "https://img.test/b.jpg"]
    assert sent["rules"] == ["No smoking", "Music until 2am"]
    assert sent["price_per_person"] is None


async def test_create_venue_collects_all_errors(store, store_api, provider_user):
    with pytest.raises(BookingValidationError) as exc:
        await venue_service.create_venue(store, provider_user, _draft(name="", price="10"))
    assert {"name", "price"} <= set(exc.value.fields)
    assert store_api.requests == []


async def test_delete_venue_owner_only(store, store_api, client_user):
    store_api.add("GET", VENUES, json_body=[venue_row()])
    with pytest.raises(PermissionDenied):
        await venue_service.delete_venue(store, client_user, "venue-1")
    assert store_api.calls("DELETE", VENUES) == []


async def test_delete_venue(store, store_api, provider_user):
    store_api.add("GET", VENUES, json_body=[venue_row()])
    store_api.add("DELETE", VENUES, status=204)
    await venue_service.delete_venue(store, provider_user, "venue-1")
    assert len(store_api.calls("DELETE", VENUES)) == 1


async def test_provider_metrics(store, store_api, provider_user):
    store_api.add("GET", VENUES, json_body=[venue_row(), venue_row(id="venue-2", views=10, favorites_count=2, status="PENDING")])
    store_api.add(
        "GET",
        BOOKINGS,
        json_body=[
            {"status": "CONFIRMED", "total_price": 16700},
            {"status": "COMPLETED", "total_price": 15000},
            {"status": "PENDING", "total_price": 21000},
            {"status": "CANCELLED", "total_price": 9000},
        ],
    )
    metrics = await venue_service.get_provider_metrics(store, provider_user)

    assert metrics["venues"] == 2
    assert metrics["active_venues"] == 1
    assert metrics["total_views"] == 50
    assert metrics["total_favorites"] == 5
    assert metrics["bookings_by_status"] == {"PENDING": 1, "CONFIRMED": 1, "CANCELLED": 1, "COMPLETED": 1}
    assert metrics["revenue"] == Decimal("31700")
