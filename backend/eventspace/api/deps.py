"""
FastAPI dependencies: collaborators from app.state and the signed-in user.

The app factory puts settings, the store, auth and payment clients on app.state;
routes never build clients themselves.
"""
from fastapi import Depends, Header, Request

from eventspace.config import Settings
from eventspace.core.errors import AuthenticationRequired
from eventspace.models.user import User, UserRole
from eventspace.services.auth import AuthClient, current_user, require_role
from eventspace.services.payments import PaymentClient
from eventspace.services.store import StoreClient


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> StoreClient:
    return request.app.state.store


def get_auth_client(request: Request) -> AuthClient:
    return request.app.state.auth


def get_payments(request: Request) -> PaymentClient:
    return request.app.state.payments


def get_access_token(authorization: str | None = Header(None)) -> str | None:
    """Bearer token from the Authorization header, or None."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_user_store(
    store: StoreClient = Depends(get_store),
    access_token: str | None = Depends(get_access_token),
) -> StoreClient:
    """Store client acting as the caller, so the store's row-level rules apply to them."""
    return store.as_user(access_token) if access_token else store


async def get_current_user_optional(
    access_token: str | None = Depends(get_access_token),
    auth: AuthClient = Depends(get_auth_client),
    store: StoreClient = Depends(get_store),
) -> User | None:
    return await current_user(auth, store, access_token)


async def get_current_user(user: User | None = Depends(get_current_user_optional)) -> User:
    if user is None:
        raise AuthenticationRequired()
    return user


async def get_provider(user: User | None = Depends(get_current_user_optional)) -> User:
    return require_role(user, UserRole.PROVIDER, UserRole.ADMIN)
