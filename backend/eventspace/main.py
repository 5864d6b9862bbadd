"""
FastAPI app entrypoint.

create_app() builds the app from Settings; a missing credential stops startup with
ConfigurationError before any client exists. Run with:
    uvicorn eventspace.main:create_app --factory
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from eventspace.api.routes import auth, bookings, favorites, provider, venues
from eventspace.config import Settings, get_settings
from eventspace.core.errors import EventSpaceError, status_for
from eventspace.services.auth import AuthClient
from eventspace.services.notifications import NotificationCenter
from eventspace.services.payments import PaymentClient, PaymentConfig
from eventspace.services.store import StoreClient, StoreConfig

logger = logging.getLogger(__name__)

# CORS: dev origins of the web client + optional CORS_ORIGINS (comma-separated) for production
DEV_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:4173",
    "http://127.0.0.1:4173",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(
        "Backend ready: store %s, payments %s",
        settings.supabase_url,
        "sandbox" if settings.mp_sandbox else "production",
    )
    yield
    logger.info("Backend shutting down")


async def handle_eventspace_error(request: Request, exc: EventSpaceError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.warning("%s %s failed (%s): %s", request.method, request.url.path, status_code, exc.message)
    return JSONResponse(status_code=status_code, content={"error": exc.to_dict()})


def create_app(
    settings: Settings | None = None,
    *,
    store: StoreClient | None = None,
    auth_client: AuthClient | None = None,
    payments: PaymentClient | None = None,
) -> FastAPI:
    """
    App with its collaborators on app.state. Tests pass settings and clients built
    on httpx.MockTransport; production builds them from the environment.
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    store_config = StoreConfig.from_settings(settings)
    app = FastAPI(title="EventSpace", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store or StoreClient(store_config)
    app.state.auth = auth_client or AuthClient(store_config, redirect_base_url=settings.app_base_url)
    app.state.payments = payments or PaymentClient(PaymentConfig.from_settings(settings))
    app.state.notifications = NotificationCenter.from_settings(settings)

    cors_origins = DEV_CORS_ORIGINS + settings.extra_cors_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(EventSpaceError, handle_eventspace_error)

    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(venues.router, prefix="/venues", tags=["venues"])
    app.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
    app.include_router(provider.router, prefix="/provider", tags=["provider"])
    app.include_router(favorites.router, prefix="/favorites", tags=["favorites"])

    @app.get("/", include_in_schema=False)
    def root():
        """Root: point to API docs and health."""
        return {"message": "EventSpace API", "docs": "/docs", "health": "/health"}

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("eventspace.main:create_app", factory=True, host="127.0.0.1", port=8000, reload=False)
