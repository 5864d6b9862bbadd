"""Users and auth sessions. Roles use the store's wire values."""
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel


class UserRole(str, Enum):
    CLIENT = "CLIENTE"
    PROVIDER = "PROVEEDOR"
    ADMIN = "ADMIN"


class VerificationStatus(str, Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


def default_avatar(seed: str) -> str:
    return f"https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"


class User(BaseModel):
    id: str
    email: str
    name: str
    role: UserRole = UserRole.CLIENT
    phone: str | None = None
    avatar: str | None = None
    verification_status: VerificationStatus | None = None
    email_verified: bool = False
    created_at: datetime | None = None

    @property
    def first_name(self) -> str:
        return self.name.strip().split(" ", 1)[0] if self.name.strip() else ""

    @property
    def last_name(self) -> str:
        parts = self.name.strip().split(" ", 1)
        return parts[1].strip() if len(parts) > 1 else ""

    @classmethod
    def from_profile_row(cls, row: dict[str, Any]) -> "User":
        """users table row."""
        return cls(
            id=str(row["id"]),
            email=row.get("email") or "",
            name=row.get("name") or "User",
            role=row.get("role") or UserRole.CLIENT,
            phone=row.get("phone") or None,
            avatar=row.get("avatar") or default_avatar(row.get("email") or ""),
            verification_status=row.get("verification_status") or None,
            email_verified=bool(row.get("email_verified")),
            created_at=row.get("created_at"),
        )

    @classmethod
    def from_auth_user(cls, auth_user: dict[str, Any]) -> "User":
        """Fallback when there is no profile row: build from the auth user's metadata."""
        metadata = auth_user.get("user_metadata") or {}
        email = auth_user.get("email") or ""
        return cls(
            id=str(auth_user["id"]),
            email=email,
            name=metadata.get("name") or "User",
            role=metadata.get("role") or UserRole.CLIENT,
            phone=metadata.get("phone") or None,
            avatar=default_avatar(email),
            email_verified=auth_user.get("email_confirmed_at") is not None,
            created_at=auth_user.get("created_at"),
        )


class AuthSession(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None
    user: User
