import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

logger = logging.getLogger(__name__)

# Characters with meaning inside a PostgREST or=(...) clause
_RESERVED = re.compile(r"[,()*:\"\\]")


class BackendError(Exception):
    """The hosted backend answered with an error status."""
    def __init__(self, status_code: int, message: str):
        super().__init__(f"Backend error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class ConflictError(BackendError):
    """Unique constraint violation (HTTP 409)."""
    pass


class BackendUnavailableError(Exception):
    """The hosted backend could not be reached at all."""
    pass


@dataclass
class QueryResult:
    rows: List[Dict[str, Any]] = field(default_factory=list)
    total: Optional[int] = None # Only set when the query asked for an exact count


def _encode(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def _parse_total(content_range: Optional[str]) -> Optional[int]:
    # e.g. "0-9/42", "*/0"
    if not content_range or "/" not in content_range:
        return None
    total = content_range.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


class BackendClient:
    """
    Async client for the PostgREST-compatible REST endpoint of the hosted
    backend. One instance is created per application and injected where
    needed; it owns its httpx.AsyncClient unless one is passed in.
    """

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0, http_client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        if http_client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, headers=headers, timeout=timeout)
        else:
            http_client.headers.update(headers)
            self._client = http_client

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, table: str, *, params=None, json=None, headers=None) -> httpx.Response:
        try:
            response = await self._client.request(method, f"/{table}", params=params, json=json, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"Backend request {method} /{table} failed: {e}")
            raise BackendUnavailableError(f"Backend unreachable: {e}") from e

        if response.is_error:
            message = response.text
            try:
                body = response.json()
                if isinstance(body, dict):
                    message = body.get("message") or body.get("error") or message
            except ValueError:
                pass
            logger.warning(f"Backend {method} /{table} returned {response.status_code}: {message}")
            if response.status_code == 409:
                raise ConflictError(response.status_code, message)
            raise BackendError(response.status_code, message)
        return response

    @staticmethod
    def _match_params(filters: Optional[Dict[str, Any]]) -> List[Tuple[str, str]]:
        return [(column, f"eq.{_encode(value)}") for column, value in (filters or {}).items()]

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[Dict[str, Any]] = None,
        gte: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None,
        ascending: bool = False,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        search: Optional[Tuple[Sequence[str], str]] = None,
        count: bool = False,
    ) -> QueryResult:
        """
        Reads rows from ``table``.

        Args:
            filters: column -> value equality filters.
            gte: column -> value lower bounds (inclusive).
            order: column to order by; direction from ``ascending``.
            search: (columns, term) case-insensitive substring match on any of the columns.
            count: ask the backend for the exact number of matching rows.
        """
        params: List[Tuple[str, str]] = [("select", columns)]
        params.extend(self._match_params(filters))
        params.extend((column, f"gte.{_encode(value)}") for column, value in (gte or {}).items())
        if search:
            search_columns, term = search
            term = _RESERVED.sub(" ", term).strip()
            if term:
                clauses = ",".join(f"{column}.ilike.*{term}*" for column in search_columns)
                params.append(("or", f"({clauses})"))
        if order:
            params.append(("order", f"{order}.{'asc' if ascending else 'desc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))
        if offset is not None:
            params.append(("offset", str(offset)))

        headers = {"Prefer": "count=exact"} if count else None
        response = await self._request("GET", table, params=params, headers=headers)
        total = _parse_total(response.headers.get("content-range")) if count else None
        return QueryResult(rows=response.json(), total=total)

    async def select_one(self, table: str, columns: str = "*", filters: Optional[Dict[str, Any]] = None, **kwargs) -> Optional[Dict[str, Any]]:
        result = await self.select(table, columns=columns, filters=filters, limit=1, **kwargs)
        return result.rows[0] if result.rows else None

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._request(
            "POST", table, json=row, headers={"Prefer": "return=representation"}
        )
        created = response.json()
        return created[0] if isinstance(created, list) and created else created

    async def update(self, table: str, match: Dict[str, Any], values: Dict[str, Any]) -> List[Dict[str, Any]]:
        if not match:
            raise ValueError("update() requires at least one match column")
        response = await self._request(
            "PATCH", table, params=self._match_params(match), json=values,
            headers={"Prefer": "return=representation"},
        )
        return response.json()

    async def delete(self, table: str, match: Dict[str, Any]) -> int:
        if not match:
            raise ValueError("delete() requires at least one match column")
        response = await self._request(
            "DELETE", table, params=self._match_params(match),
            headers={"Prefer": "return=representation"},
        )
        return len(response.json())
