"""
Legistar web API client (city council legislative data).

Used endpoints:
- GET /bodies                  -> [{"BodyId": ..., "BodyName": ...}, ...]
- GET /persons                 -> [{"PersonId": ..., "PersonFullName": ...}, ...]
- GET /officerecords           -> [{"OfficeRecordPersonId": ..., ...}, ...]
- GET /matters                 -> OData-style $top/$skip/$orderby/$filter
- GET /matters/{id}/votes
- GET /events, /events/{id}/eventitems
"""

from __future__ import annotations

from typing import Any

import httpx

from . import settings

DEFAULT_BASE_URL = "https://webapi.legistar.com/v1"
DEFAULT_CLIENT = "chicago"
DEFAULT_PAGE_SIZE = 1000


class LegistarError(RuntimeError):
    pass


def legistar_client_name() -> str:
    return settings.env_str("LEGISTAR_CLIENT", DEFAULT_CLIENT)


def legistar_token() -> str | None:
    return settings.env_str("LEGISTAR_TOKEN") or None


def legistar_timeout_s() -> float:
    return settings.env_float("LEGISTAR_TIMEOUT_S", 30.0)


class LegistarClient:
    """
    Thin async wrapper over one Legistar client (e.g. "chicago").

    Use as an async context manager so the underlying connection pool is closed:

        async with LegistarClient() as api:
            bodies = await api.bodies()
    """

    def __init__(
        self,
        client: str | None = None,
        *,
        token: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client = (client or legistar_client_name()).strip()
        if not self.client:
            raise LegistarError("Legistar client name is empty.")
        self.token = token if token is not None else legistar_token()
        self.base_url = f"{base_url.rstrip('/')}/{self.client}"
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_s or legistar_timeout_s(),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "LegistarClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        query: dict[str, Any] = {k: v for k, v in (params or {}).items() if v is not None}
        if self.token:
            query["token"] = self.token

        try:
            resp = await self._http.get(f"/{endpoint.lstrip('/')}", params=query)
        except httpx.HTTPError as exc:
            raise LegistarError(f"Legistar request to {endpoint} failed: {exc}") from exc

        if resp.status_code != 200:
            # Avoid dumping huge bodies; include a small snippet.
            raise LegistarError(f"Legistar {endpoint} returned {resp.status_code}: {resp.text[:500]}")

        try:
            return resp.json()
        except ValueError as exc:
            raise LegistarError(f"Legistar {endpoint} returned invalid JSON.") from exc

    async def _get_list(self, endpoint: str, params: dict[str, Any] | None = None) -> list[dict]:
        data = await self.get(endpoint, params)
        if not isinstance(data, list):
            raise LegistarError(f"Legistar {endpoint} did not return a list.")
        return [item for item in data if isinstance(item, dict)]

    async def _get_object(self, endpoint: str) -> dict:
        data = await self.get(endpoint)
        if not isinstance(data, dict):
            raise LegistarError(f"Legistar {endpoint} did not return an object.")
        return data

    async def paginate(
        self,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: int | None = None,
    ) -> list[dict]:
        """
        Walk $top/$skip pages until a short page comes back or `limit` rows are collected.
        """
        if page_size <= 0:
            raise LegistarError("page_size must be > 0.")

        rows: list[dict] = []
        skip = 0
        while limit is None or len(rows) < limit:
            top = page_size if limit is None else min(page_size, limit - len(rows))
            page = await self._get_list(endpoint, {**(params or {}), "$top": top, "$skip": skip})
            rows.extend(page)
            if len(page) < top:
                break
            skip += len(page)
        return rows

    async def bodies(self) -> list[dict]:
        return await self._get_list("bodies")

    async def persons(self) -> list[dict]:
        return await self._get_list("persons")

    async def office_records(self) -> list[dict]:
        return await self.paginate("officerecords")

    async def matters(
        self,
        *,
        top: int = 100,
        skip: int = 0,
        orderby: str | None = None,
        filter_by: str | None = None,
    ) -> list[dict]:
        return await self._get_list(
            "matters",
            {"$top": top, "$skip": skip, "$orderby": orderby, "$filter": filter_by},
        )

    async def matter(self, matter_id: int) -> dict:
        return await self._get_object(f"matters/{matter_id}")

    async def matter_votes(self, matter_id: int) -> list[dict]:
        return await self._get_list(f"matters/{matter_id}/votes")

    async def events(
        self,
        *,
        top: int = 100,
        skip: int = 0,
        orderby: str | None = None,
        filter_by: str | None = None,
    ) -> list[dict]:
        return await self._get_list(
            "events",
            {"$top": top, "$skip": skip, "$orderby": orderby, "$filter": filter_by},
        )

    async def event(self, event_id: int) -> dict:
        return await self._get_object(f"events/{event_id}")

    async def event_items(self, event_id: int) -> list[dict]:
        return await self._get_list(f"events/{event_id}/eventitems")
