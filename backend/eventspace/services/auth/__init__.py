"""Auth: sign-up/sign-in flows and role routing. Validation here; client below just sends the request."""
import logging
from typing import Any, Iterable

from eventspace.core.constants import (
    ADMIN_HOME_PATH,
    AUTH_CALLBACK_PATH,
    AUTH_RESET_PASSWORD_PATH,
    CLIENT_HOME_PATH,
    LOGIN_PATH,
    PROVIDER_HOME_PATH,
    TABLE_USERS,
)
from eventspace.core.errors import (
    AuthenticationRequired,
    BookingValidationError,
    ExternalServiceError,
    PermissionDenied,
)
from eventspace.models.user import AuthSession, User, UserRole, default_avatar
from eventspace.services.auth.client import AuthClient
from eventspace.services.auth.state import AuthEvent, AuthState
from eventspace.services.store import StoreClient

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# Auth service messages -> what the user sees
ERROR_TRANSLATIONS: dict[str, str] = {
    "Invalid login credentials": "Invalid email or password",
    "Email not confirmed": "Please confirm your email to continue",
    "User already registered": "This email is already registered",
    "Password should be at least 6 characters": "Password must be at least 6 characters",
    "Unable to validate email address: invalid format": "Invalid email format",
    "Signup requires a valid password": "A valid password is required",
}

ROLE_HOME: dict[UserRole, str] = {
    UserRole.CLIENT: CLIENT_HOME_PATH,
    UserRole.PROVIDER: PROVIDER_HOME_PATH,
    UserRole.ADMIN: ADMIN_HOME_PATH,
}


def translate_error(message: str) -> str:
    return ERROR_TRANSLATIONS.get(message, message)


def _auth_failure(e: ExternalServiceError) -> Exception:
    """Credential rejections become AuthenticationRequired; anything else stays a service error."""
    message = translate_error(e.message)
    if e.status_code in (400, 401, 422):
        return AuthenticationRequired(message)
    return ExternalServiceError(message, service="auth", status_code=e.status_code)


def _session_from_payload(payload: dict[str, Any], user: User) -> AuthSession:
    return AuthSession(
        access_token=payload["access_token"],
        refresh_token=payload.get("refresh_token"),
        expires_at=payload.get("expires_at"),
        user=user,
    )


async def load_profile(store: StoreClient, auth_user: dict[str, Any], access_token: str | None) -> User:
    """Profile row from users; falls back to the auth user's metadata when there is none."""
    try:
        row = await store.as_user(access_token).select_one(TABLE_USERS, filters=[("id", "eq", auth_user["id"])])
    except ExternalServiceError as e:
        logger.warning("Profile lookup failed for %s: %s", auth_user.get("id"), e)
        row = None
    if row:
        return User.from_profile_row(row)
    return User.from_auth_user(auth_user)


async def login(
    auth: AuthClient,
    store: StoreClient,
    email: str,
    password: str,
    state: AuthState | None = None,
) -> AuthSession:
    email = (email or "").strip()
    if not email or not password:
        raise BookingValidationError("Email and password are required", field="email" if not email else "password")
    try:
        payload = await auth.sign_in(email, password)
    except ExternalServiceError as e:
        raise _auth_failure(e) from e
    if not payload.get("access_token") or not payload.get("user"):
        raise AuthenticationRequired("Could not sign in")
    user = await load_profile(store, payload["user"], payload["access_token"])
    session = _session_from_payload(payload, user)
    if state is not None:
        state.signed_in(session)
    return session


async def register(
    auth: AuthClient,
    store: StoreClient,
    *,
    name: str,
    email: str,
    password: str,
    phone: str | None = None,
    role: UserRole = UserRole.CLIENT,
    state: AuthState | None = None,
) -> tuple[User, AuthSession | None]:
    """
    Create the auth user and its users row. Admins cannot self-register.
    Returns (user, session); session is None while email confirmation is pending.
    A failed profile insert is logged, not raised: the auth user already exists.
    """
    name = (name or "").strip()
    email = (email or "").strip()
    if role is UserRole.ADMIN:
        raise PermissionDenied("Admin accounts cannot be self-registered")
    if not name:
        raise BookingValidationError("Name is required", field="name")
    if not email:
        raise BookingValidationError("Email is required", field="email")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise BookingValidationError(ERROR_TRANSLATIONS["Password should be at least 6 characters"], field="password")
    try:
        payload = await auth.sign_up(
            email, password, {"name": name, "role": role.value, "phone": phone}, redirect_path=AUTH_CALLBACK_PATH
        )
    except ExternalServiceError as e:
        raise _auth_failure(e) from e
    auth_user = payload.get("user") or (payload if payload.get("id") else None)
    if not auth_user:
        raise ExternalServiceError("Could not create the account", service="auth")
    user = User(
        id=str(auth_user["id"]),
        email=email,
        name=name,
        role=role,
        phone=phone,
        avatar=default_avatar(name.replace(" ", "")),
    )
    access_token = payload.get("access_token")
    try:
        await store.as_user(access_token).insert(
            TABLE_USERS,
            {
                "id": user.id,
                "email": user.email,
                "name": user.name,
                "role": user.role.value,
                "phone": user.phone,
                "avatar": user.avatar,
            },
        )
    except ExternalServiceError as e:
        logger.error("Error creating user profile for %s: %s", user.id, e)
    session = _session_from_payload(payload, user) if access_token else None
    if session is not None and state is not None:
        state.signed_in(session)
    return user, session


async def logout(auth: AuthClient, access_token: str, state: AuthState | None = None) -> None:
    try:
        await auth.sign_out(access_token)
    except ExternalServiceError as e:
        logger.warning("Sign-out failed: %s", e)
        raise ExternalServiceError("Could not sign out", service="auth", status_code=e.status_code) from e
    if state is not None:
        state.signed_out()


async def current_user(auth: AuthClient, store: StoreClient, access_token: str | None) -> User | None:
    """User behind access_token, or None when there is no token or the auth service rejects it."""
    if not access_token:
        return None
    try:
        auth_user = await auth.get_user(access_token)
    except ExternalServiceError as e:
        if e.status_code in (401, 403):
            return None
        raise
    if not auth_user.get("id"):
        return None
    return await load_profile(store, auth_user, access_token)


async def resend_verification_email(auth: AuthClient, email: str) -> None:
    try:
        await auth.resend_verification_email(email, redirect_path=AUTH_CALLBACK_PATH)
    except ExternalServiceError as e:
        raise _auth_failure(e) from e


async def reset_password(auth: AuthClient, email: str) -> None:
    try:
        await auth.reset_password(email, redirect_path=AUTH_RESET_PASSWORD_PATH)
    except ExternalServiceError as e:
        raise _auth_failure(e) from e


def has_role(user: User | None, role: UserRole) -> bool:
    return user is not None and user.role == role


def has_any_role(user: User | None, roles: Iterable[UserRole]) -> bool:
    return user is not None and user.role in set(roles)


def home_route_for(role: UserRole) -> str:
    return ROLE_HOME.get(role, CLIENT_HOME_PATH)


def protected_route_redirect(user: User | None, allowed_roles: Iterable[UserRole] | None = None) -> str | None:
    """Where to send the user instead of the protected view, or None when access is allowed."""
    if user is None:
        return LOGIN_PATH
    if allowed_roles is not None and not has_any_role(user, allowed_roles):
        return home_route_for(user.role)
    return None


def require_role(user: User | None, *roles: UserRole) -> User:
    if user is None:
        raise AuthenticationRequired()
    if roles and not has_any_role(user, roles):
        raise PermissionDenied("Your account cannot access this section")
    return user


__all__ = [
    "AuthClient",
    "AuthEvent",
    "AuthState",
    "current_user",
    "has_any_role",
    "has_role",
    "home_route_for",
    "load_profile",
    "login",
    "logout",
    "protected_route_redirect",
    "register",
    "require_role",
    "resend_verification_email",
    "reset_password",
    "translate_error",
]
