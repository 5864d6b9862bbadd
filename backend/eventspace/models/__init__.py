from eventspace.models.availability import AvailabilityOverride, DateAvailability
from eventspace.models.booking import Booking, BookingStatus, PaymentStatus, TimeWindow
from eventspace.models.extras import ServiceExtra
from eventspace.models.payment import BackUrls, Payer, PaymentItem, PaymentPreference, PaymentRequest
from eventspace.models.review import Review
from eventspace.models.user import AuthSession, User, UserRole, VerificationStatus
from eventspace.models.venue import (
    PaymentMethod,
    Venue,
    VenueCategory,
    VenueDraft,
    VenueFilters,
    VenueStatus,
)

__all__ = [
    "AuthSession",
    "AvailabilityOverride",
    "BackUrls",
    "Booking",
    "BookingStatus",
    "DateAvailability",
    "Payer",
    "PaymentItem",
    "PaymentMethod",
    "PaymentPreference",
    "PaymentRequest",
    "PaymentStatus",
    "Review",
    "ServiceExtra",
    "TimeWindow",
    "User",
    "UserRole",
    "Venue",
    "VenueCategory",
    "VenueDraft",
    "VenueFilters",
    "VenueStatus",
    "VerificationStatus",
]
