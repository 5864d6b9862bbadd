"""
Auth: sign-up, sign-in, sign-out and session lookup against the hosted auth service.
"""
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field

from eventspace.api.deps import get_access_token, get_auth_client, get_current_user_optional, get_store
from eventspace.core.errors import AuthenticationRequired
from eventspace.models.user import User, UserRole
from eventspace.services import auth as auth_service
from eventspace.services.auth import AuthClient
from eventspace.services.store import StoreClient

router = APIRouter()


class SignUpRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str
    phone: str | None = None
    role: UserRole = UserRole.CLIENT


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class EmailRequest(BaseModel):
    email: EmailStr


def _user_payload(user: User) -> dict[str, Any]:
    return user.model_dump(mode="json") | {"home": auth_service.home_route_for(user.role)}


@router.post("/signup", response_model=dict)
async def signup(
    body: SignUpRequest,
    auth: AuthClient = Depends(get_auth_client),
    store: StoreClient = Depends(get_store),
):
    """Register a client or provider. Without a session in the response, the email must be confirmed first."""
    user, session = await auth_service.register(
        auth,
        store,
        name=body.name,
        email=body.email,
        password=body.password,
        phone=body.phone,
        role=body.role,
    )
    return {
        "user": _user_payload(user),
        "access_token": session.access_token if session else None,
        "refresh_token": session.refresh_token if session else None,
        "email_confirmation_required": session is None,
    }


@router.post("/login", response_model=dict)
async def login(
    body: LoginRequest,
    auth: AuthClient = Depends(get_auth_client),
    store: StoreClient = Depends(get_store),
):
    session = await auth_service.login(auth, store, body.email, body.password)
    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_at": session.expires_at,
        "user": _user_payload(session.user),
    }


@router.post("/logout", response_model=dict)
async def logout(
    access_token: str | None = Depends(get_access_token),
    auth: AuthClient = Depends(get_auth_client),
):
    if not access_token:
        raise AuthenticationRequired()
    await auth_service.logout(auth, access_token)
    return {"ok": True}


@router.get("/session", response_model=dict)
async def session(user: User | None = Depends(get_current_user_optional)):
    """The caller's user, or {"user": null} when signed out."""
    return {"user": _user_payload(user) if user else None}


@router.post("/resend-verification", response_model=dict)
async def resend_verification(body: EmailRequest, auth: AuthClient = Depends(get_auth_client)):
    await auth_service.resend_verification_email(auth, body.email)
    return {"ok": True}


@router.post("/reset-password", response_model=dict)
async def reset_password(body: EmailRequest, auth: AuthClient = Depends(get_auth_client)):
    await auth_service.reset_password(auth, body.email)
    return {"ok": True}
