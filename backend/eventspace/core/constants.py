"""
Centralized constants for pricing, availability and checkout.

Change catalog prices, page sizes or return routes here instead of scattering literals
across services and routes. Env-driven values (timeouts, sandbox flag) live in config.
"""
from decimal import Decimal

# Pricing: per-person overage rate when the venue does not set one
DEFAULT_PRICE_PER_PERSON = Decimal("85")
# Minimum capacity used when a venue row has none
DEFAULT_MIN_CAPACITY = 10

# Static extras catalog: (id, name, description, flat price)
EXTRA_SECURITY = "security"
EXTRA_CLEANING = "cleaning"
DEFAULT_EXTRAS_CATALOG: tuple[tuple[str, str, str, Decimal], ...] = (
    (EXTRA_SECURITY, "Private security", "Professional security staff", Decimal("2500")),
    (EXTRA_CLEANING, "Post-event cleaning", "Full cleaning of the space", Decimal("1800")),
)

# Guest-count thresholds for the "ideal for" label (upper bound inclusive)
EVENT_TYPE_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (30, "Intimate gathering"),
    (80, "Medium event"),
    (150, "Large celebration"),
)
EVENT_TYPE_LARGEST = "Grand event"

# Toasts
NOTIFICATION_DURATION_MS = 4000

# Venue listing
VENUES_PAGE_SIZE = 12
FEATURED_VENUES_LIMIT = 6
SEARCH_VENUES_LIMIT = 20
PUBLIC_VENUE_STATUSES = ("ACTIVE", "FEATURED")

# Venue creation form rules
MIN_DESCRIPTION_LENGTH = 50
MIN_VENUE_PRICE = Decimal("1000")
VENUE_FORM_STEPS = (1, 2, 3, 4)

# Checkout (Mercado Pago Checkout Pro)
MP_API_BASE_URL = "https://api.mercadopago.com"
MP_PREFERENCES_PATH = "/checkout/preferences"
MP_SANDBOX_CHECKOUT_URL = "https://sandbox.mercadopago.com.mx/checkout/v1/redirect?pref_id={pref_id}"
MP_CHECKOUT_URL = "https://www.mercadopago.com.mx/checkout/v1/redirect?pref_id={pref_id}"
MP_STATEMENT_DESCRIPTOR = "EVENTSPACE"
MP_AUTO_RETURN = "approved"
DEFAULT_VENUE_PICTURE = "https://images.unsplash.com/photo-1519167758481-83f550bb49b3?w=400"

# Return routes in the web client, appended to APP_BASE_URL
BOOKING_SUCCESS_PATH = "/reserva/confirmada"
BOOKING_FAILURE_PATH = "/reserva/fallida"
BOOKING_PENDING_PATH = "/reserva/pendiente"
AUTH_CALLBACK_PATH = "/auth/callback"
AUTH_RESET_PASSWORD_PATH = "/auth/reset-password"

# Role home routes in the web client
CLIENT_HOME_PATH = "/cliente"
PROVIDER_HOME_PATH = "/proveedor"
ADMIN_HOME_PATH = "/admin"
LOGIN_PATH = "/login"

# Store tables
TABLE_VENUES = "venues"
TABLE_BOOKINGS = "bookings"
TABLE_REVIEWS = "reviews"
TABLE_FAVORITES = "favorites"
TABLE_USERS = "users"
TABLE_VENUE_AVAILABILITY = "venue_availability"
RPC_INCREMENT_VENUE_VIEWS = "increment_venue_views"
