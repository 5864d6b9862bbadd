"""Hosted store REST client: lowest level, renders the query and sends it. No domain validation."""
import logging
from typing import Any, Iterable

import httpx

from eventspace.core.errors import ExternalServiceError
from eventspace.services.store.config import StoreConfig

logger = logging.getLogger(__name__)

# (column, operator, value), e.g. ("status", "in", ["ACTIVE", "FEATURED"])
Filter = tuple[str, str, Any]

OPERATORS = frozenset({"eq", "neq", "gt", "gte", "lt", "lte", "in", "ilike", "is"})


def _render_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "value"):  # str enums
        return str(value.value)
    return str(value)


def render_filter(op: str, value: Any) -> str:
    """Render one filter value in query-string syntax: eq.x, in.(a,b), ilike.*x*."""
    if op not in OPERATORS:
        raise ValueError(f"Unsupported filter operator: {op}")
    if op == "in":
        return f"in.({','.join(_render_scalar(v) for v in value)})"
    return f"{op}.{_render_scalar(value)}"


def render_or(conditions: Iterable[Filter]) -> str:
    """Group conditions for the or= parameter: (name.ilike.*x*,zone.ilike.*x*)."""
    return "(" + ",".join(f"{col}.{render_filter(op, val)}" for col, op, val in conditions) + ")"


def build_params(
    *,
    columns: str = "*",
    filters: Iterable[Filter] = (),
    or_: Iterable[Filter] | None = None,
    order: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[tuple[str, str]]:
    """Query params as a list so one column can carry two filters (date=gte..&date=lte..)."""
    params: list[tuple[str, str]] = [("select", columns)] if columns else []
    for column, op, value in filters:
        params.append((column, render_filter(op, value)))
    if or_:
        params.append(("or", render_or(or_)))
    if order:
        params.append(("order", order))
    if limit is not None:
        params.append(("limit", str(limit)))
    if offset:
        params.append(("offset", str(offset)))
    return params


def parse_count(content_range: str | None) -> int | None:
    """Total from a Content-Range header like '0-11/42' or '*/0'. None when the total is unknown ('*')."""
    if not content_range or "/" not in content_range:
        return None
    total = content_range.rsplit("/", 1)[1].strip()
    try:
        return int(total)
    except ValueError:
        return None


def _error_message(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return r.text[:500] if r.text else f"Store error: {r.status_code}"
    if isinstance(body, dict):
        return body.get("message") or body.get("error_description") or body.get("error") or f"Store error: {r.status_code}"
    return f"Store error: {r.status_code}"


class StoreResult:
    """Rows from a select plus the exact count when one was requested."""

    __slots__ = ("rows", "count")

    def __init__(self, rows: list[dict[str, Any]], count: int | None = None) -> None:
        self.rows = rows
        self.count = count


class StoreClient:
    """select / insert / update / delete / rpc against the hosted store's REST API."""

    def __init__(
        self,
        config: StoreConfig,
        *,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._access_token = access_token
        self._transport = transport

    def as_user(self, access_token: str | None) -> "StoreClient":
        """Same store, requests authorized as the signed-in user (row-level rules apply to them)."""
        return StoreClient(self._config, access_token=access_token, transport=self._transport)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json_body: Any = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        url = f"{self._config.rest_url}{path}"
        headers = self._config.headers(self._access_token)
        if prefer:
            headers["Prefer"] = prefer
        try:
            async with httpx.AsyncClient(timeout=self._config.timeout, transport=self._transport) as c:
                r = await c.request(method, url, params=params, json=json_body, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Store %s %s failed: %s", method, path, e)
            raise ExternalServiceError(str(e) or e.__class__.__name__, service="store") from e
        if not r.is_success:
            message = _error_message(r)
            logger.warning("Store %s %s returned %s: %s", method, path, r.status_code, message)
            raise ExternalServiceError(message, service="store", status_code=r.status_code)
        return r

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Iterable[Filter] = (),
        or_: Iterable[Filter] | None = None,
        order: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        count: bool = False,
    ) -> StoreResult:
        params = build_params(columns=columns, filters=filters, or_=or_, order=order, limit=limit, offset=offset)
        r = await self._request("GET", f"/{table}", params=params, prefer="count=exact" if count else None)
        rows = r.json() if r.content else []
        return StoreResult(rows, parse_count(r.headers.get("content-range")) if count else None)

    async def select_one(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Iterable[Filter] = (),
    ) -> dict[str, Any] | None:
        """First matching row or None (no row is not an error)."""
        result = await self.select(table, columns=columns, filters=filters, limit=1)
        return result.rows[0] if result.rows else None

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        r = await self._request("POST", f"/{table}", json_body=row, prefer="return=representation")
        created = r.json() if r.content else []
        if isinstance(created, list):
            return created[0] if created else {}
        return created

    async def update(self, table: str, patch: dict[str, Any], *, filters: Iterable[Filter]) -> None:
        params = build_params(columns="", filters=filters)
        await self._request("PATCH", f"/{table}", params=params, json_body=patch, prefer="return=minimal")

    async def delete(self, table: str, *, filters: Iterable[Filter], count: bool = False) -> int | None:
        """Delete matching rows; with count=True returns how many the store actually removed."""
        params = build_params(columns="", filters=filters)
        prefer = "return=minimal,count=exact" if count else "return=minimal"
        r = await self._request("DELETE", f"/{table}", params=params, prefer=prefer)
        return parse_count(r.headers.get("content-range")) if count else None

    async def rpc(self, fn: str, params: dict[str, Any]) -> Any:
        r = await self._request("POST", f"/rpc/{fn}", json_body=params)
        return r.json() if r.content else None
