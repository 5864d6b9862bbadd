import pytest

from conftest import body_of, query_pairs
from eventspace.core.errors import AuthenticationRequired, BookingValidationError, PermissionDenied
from eventspace.models.user import AuthSession, User, UserRole
from eventspace.services import auth as auth_service
from eventspace.services.auth import AuthEvent, AuthState

TOKEN_PATH = "/auth/v1/token"
SIGNUP_PATH = "/auth/v1/signup"
USER_PATH = "/auth/v1/user"
USERS_TABLE = "/rest/v1/users"

AUTH_USER = {
    "id": "user-1",
    "email": "maria@example.com",
    "email_confirmed_at": "2026-01-01T00:00:00Z",
    "user_metadata": {"name": "Maria Lopez", "role": "PROVEEDOR"},
}
SESSION = {"access_token": "jwt-1", "refresh_token": "r-1", "expires_at": 1893456000, "user": AUTH_USER}


async def test_login_loads_profile_and_signs_in(auth_client, auth_api, store, store_api):
    auth_api.add("POST", TOKEN_PATH, json_body=SESSION)
    store_api.add(
        "GET", USERS_TABLE, json_body=[{"id": "user-1", "email": "maria@example.com", "name": "Maria L.", "role": "CLIENTE"}]
    )
    state = AuthState()
    events = []
    state.on_auth_state_change(lambda event, session: events.append(event))

    session = await auth_service.login(auth_client, store, "maria@example.com", "secret1", state)

    assert session.access_token == "jwt-1"
    assert session.user.name == "Maria L."
    assert session.user.role is UserRole.CLIENT
    assert state.user == session.user
    assert events == [AuthEvent.SIGNED_IN]
    assert ("grant_type", "password") in query_pairs(auth_api.requests[0])
    assert store_api.requests[0].headers["Authorization"] == "Bearer jwt-1"


async def test_login_falls_back_to_auth_metadata(auth_client, auth_api, store, store_api):
    auth_api.add("POST", TOKEN_PATH, json_body=SESSION)
    store_api.add("GET", USERS_TABLE, json_body=[])
    session = await auth_service.login(auth_client, store, "maria@example.com", "secret1")
    assert session.user.name == "Maria Lopez"
    assert session.user.role is UserRole.PROVIDER
    assert session.user.email_verified is True


async def test_login_falls_back_when_profile_lookup_fails(auth_client, auth_api, store, store_api):
    auth_api.add("POST", TOKEN_PATH, json_body=SESSION)
    store_api.add("GET", USERS_TABLE, status=500, json_body={"message": "down"})
    session = await auth_service.login(auth_client, store, "maria@example.com", "secret1")
    assert session.user.id == "user-1"


async def test_bad_credentials_are_translated(auth_client, auth_api, store):
    auth_api.add(
        "POST", TOKEN_PATH, status=400, json_body={"error": "invalid_grant", "error_description": "Invalid login credentials"}
    )
    with pytest.raises(AuthenticationRequired) as exc:
        await auth_service.login(auth_client, store, "maria@example.com", "wrong")
    assert exc.value.message == "Invalid email or password"


async def test_register_inserts_profile(auth_client, auth_api, store, store_api):
    auth_api.add("POST", SIGNUP_PATH, json_body={"id": "user-2", "email": "new@example.com"})
    store_api.add("POST", USERS_TABLE, status=201, json_body=[{"id": "user-2"}])

    user, session = await auth_service.register(
        auth_client, store, name="Nuevo Cliente", email="new@example.com", password="secret1"
    )

    assert session is None
    assert user.role is UserRole.CLIENT
    signup = auth_api.requests[0]
    assert body_of(signup)["data"] == {"name": "Nuevo Cliente", "role": "CLIENTE", "phone": None}
    assert ("redirect_to", "https://app.test/auth/callback") in query_pairs(signup)
    assert body_of(store_api.requests[0])["name"] == "Nuevo Cliente"


async def test_register_survives_profile_insert_failure(auth_client, auth_api, store, store_api):
    auth_api.add("POST", SIGNUP_PATH, json_body=SESSION | {"user": AUTH_USER})
    store_api.add("POST", USERS_TABLE, status=409, json_body={"message": "duplicate key"})
    state = AuthState()

    user, session = await auth_service.register(
        auth_client, store, name="Maria Lopez", email="maria@example.com", password="secret1",
        role=UserRole.PROVIDER, state=state,
    )

    assert user.id == "user-1"
    assert session is not None and state.is_authenticated


async def test_admin_cannot_self_register(auth_client, auth_api, store):
    with pytest.raises(PermissionDenied):
        await auth_service.register(
            auth_client, store, name="Root", email="root@example.com", password="secret1", role=UserRole.ADMIN
        )
    assert auth_api.requests == []


async def test_short_password_rejected_locally(auth_client, auth_api, store):
    with pytest.raises(BookingValidationError) as exc:
        await auth_service.register(auth_client, store, name="A", email="a@example.com", password="123")
    assert exc.value.field == "password"
    assert auth_api.requests == []


async def test_current_user_none_for_rejected_token(auth_client, auth_api, store):
    auth_api.add("GET", USER_PATH, status=401, json_body={"msg": "invalid JWT"})
    assert await auth_service.current_user(auth_client, store, "expired") is None
    assert await auth_service.current_user(auth_client, store, None) is None


async def test_logout_signs_out_state(auth_client, auth_api):
    auth_api.add("POST", "/auth/v1/logout", status=204)
    user = User(id="u", email="u@example.com", name="U")
    state = AuthState(AuthSession(access_token="jwt", user=user))
    events = []
    unsubscribe = state.on_auth_state_change(lambda event, session: events.append((event, session)))

    await auth_service.logout(auth_client, "jwt", state)

    assert not state.is_authenticated
    assert events == [(AuthEvent.SIGNED_OUT, None)]
    unsubscribe()
    state.signed_in(AuthSession(access_token="jwt2", user=user))
    assert len(events) == 1


async def test_reset_password_redirect(auth_client, auth_api):
    auth_api.add("POST", "/auth/v1/recover", json_body={})
    await auth_service.reset_password(auth_client, "maria@example.com")
    assert ("redirect_to", "https://app.test/auth/reset-password") in query_pairs(auth_api.requests[0])


def test_translate_error_passes_unknown_messages_through():
    assert auth_service.translate_error("User already registered") == "This email is already registered"
    assert auth_service.translate_error("Something else") == "Something else"


@pytest.mark.parametrize(
    "role, home",
    [(UserRole.CLIENT, "/cliente"), (UserRole.PROVIDER, "/proveedor"), (UserRole.ADMIN, "/admin")],
)
def test_home_route_for(role, home):
    assert auth_service.home_route_for(role) == home


def test_protected_route_redirect(client_user):
    assert auth_service.protected_route_redirect(None) == "/login"
    assert auth_service.protected_route_redirect(client_user, [UserRole.CLIENT]) is None
    assert auth_service.protected_route_redirect(client_user, [UserRole.PROVIDER]) == "/cliente"


def test_require_role(client_user, provider_user):
    with pytest.raises(AuthenticationRequired):
        auth_service.require_role(None, UserRole.PROVIDER)
    with pytest.raises(PermissionDenied):
        auth_service.require_role(client_user, UserRole.PROVIDER)
    assert auth_service.require_role(provider_user, UserRole.PROVIDER) is provider_user
    assert auth_service.has_role(provider_user, UserRole.PROVIDER)
    assert not auth_service.has_any_role(None, [UserRole.CLIENT])


async def test_update_password_sends_bearer(auth_client, auth_api):
    auth_api.add("PUT", USER_PATH, json_body=AUTH_USER)
    user = await auth_client.update_password("jwt-1", "newsecret")
    sent = auth_api.requests[0]
    assert sent.headers["Authorization"] == "Bearer jwt-1"
    assert body_of(sent) == {"password": "newsecret"}
    assert user["id"] == "user-1"
