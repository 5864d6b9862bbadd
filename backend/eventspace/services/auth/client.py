"""Hosted auth REST client: lowest level, sends the request and returns the JSON body. No validation."""
import logging
from typing import Any

import httpx

from eventspace.core.errors import ExternalServiceError
from eventspace.services.store.config import StoreConfig

logger = logging.getLogger(__name__)

AUTH_PATH = "/auth/v1"


def _error_message(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return r.text[:500] if r.text else f"Auth error: {r.status_code}"
    if isinstance(body, dict):
        return (
            body.get("error_description")
            or body.get("msg")
            or body.get("message")
            or body.get("error")
            or f"Auth error: {r.status_code}"
        )
    return f"Auth error: {r.status_code}"


class AuthClient:
    """Sign-up, password sign-in, sign-out, user lookup, verification resend and password recovery."""

    def __init__(
        self,
        config: StoreConfig,
        *,
        redirect_base_url: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._redirect_base_url = redirect_base_url.rstrip("/")
        self._transport = transport

    @property
    def redirect_base_url(self) -> str:
        return self._redirect_base_url

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        url = f"{self._config.base_url}{AUTH_PATH}{path}"
        headers = self._config.headers(access_token)
        try:
            async with httpx.AsyncClient(timeout=self._config.timeout, transport=self._transport) as c:
                r = await c.request(method, url, json=json_body, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Auth %s %s failed: %s", method, path, e)
            raise ExternalServiceError(str(e) or e.__class__.__name__, service="auth") from e
        if not r.is_success:
            raise ExternalServiceError(_error_message(r), service="auth", status_code=r.status_code)
        try:
            return r.json() if r.content else {}
        except ValueError:
            return {}

    def _redirect(self, path: str) -> dict[str, str] | None:
        return {"redirect_to": f"{self._redirect_base_url}{path}"} if self._redirect_base_url else None

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: dict[str, Any],
        *,
        redirect_path: str = "/auth/callback",
    ) -> dict[str, Any]:
        """Returns a session (access_token, user) or, when email confirmation is on, just the user."""
        body = {"email": email, "password": password, "data": metadata}
        return await self._request("POST", "/signup", json_body=body, params=self._redirect(redirect_path))

    async def sign_in(self, email: str, password: str) -> dict[str, Any]:
        body = {"email": email, "password": password}
        return await self._request("POST", "/token", json_body=body, params={"grant_type": "password"})

    async def sign_out(self, access_token: str) -> None:
        await self._request("POST", "/logout", access_token=access_token)

    async def get_user(self, access_token: str) -> dict[str, Any]:
        return await self._request("GET", "/user", access_token=access_token)

    async def resend_verification_email(self, email: str, *, redirect_path: str = "/auth/callback") -> None:
        await self._request(
            "POST", "/resend", json_body={"type": "signup", "email": email}, params=self._redirect(redirect_path)
        )

    async def reset_password(self, email: str, *, redirect_path: str = "/auth/reset-password") -> None:
        await self._request("POST", "/recover", json_body={"email": email}, params=self._redirect(redirect_path))

    async def update_password(self, access_token: str, new_password: str) -> dict[str, Any]:
        return await self._request("PUT", "/user", json_body={"password": new_password}, access_token=access_token)
