"""
Remote collection store used by the caches and the curation flow.

RemoteStore is the narrow interface the rest of the package depends on; SupabaseStore
implements it against a hosted Postgres REST endpoint and its object storage over aiohttp.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp

from ..core.errors import RemoteError, ValidationError
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

Row = Dict[str, Any]


class RemoteStore(ABC):
    """Abstract base class for the hosted table and blob store."""

    @abstractmethod
    async def query(
        self,
        table: str,
        match: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None,
        descending: bool = False,
        ilike: Optional[Dict[str, str]] = None,
        columns: str = "*",
    ) -> List[Row]:
        """Return rows of `table` equal to `match` (and case-insensitively containing `ilike`)."""

    @abstractmethod
    async def insert(self, table: str, row: Row) -> Row:
        """Insert a row and return it as stored."""

    @abstractmethod
    async def update(self, table: str, match: Dict[str, Any], patch: Row) -> None:
        """Apply `patch` to the rows equal to `match`."""

    @abstractmethod
    async def delete(self, table: str, match: Dict[str, Any]) -> None:
        """Delete the rows equal to `match`."""

    @abstractmethod
    async def upload_blob(self, bucket: str, path: str, content: bytes, content_type: str) -> None:
        """Store `content` at `bucket/path`."""

    @abstractmethod
    async def remove_blob(self, bucket: str, path: str) -> None:
        """Remove the object at `bucket/path`."""

    @abstractmethod
    def get_public_url(self, bucket: str, path: str) -> str:
        """Return the public URL of an object."""

    async def aclose(self) -> None:
        """Release any held connections."""


class SupabaseStore(RemoteStore):
    """RemoteStore backed by a Supabase project (PostgREST + Storage HTTP APIs)."""

    def __init__(
        self,
        url: str,
        api_key: str,
        access_token: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """Initialize the store.

        Args:
            url: Project URL, e.g. https://<ref>.supabase.co
            api_key: Anon or service key sent as `apikey`.
            access_token: Signed-in user's JWT. Defaults to the api key.
            timeout: Total timeout in seconds for each request.
            session: Optional externally managed aiohttp session.
        """
        if not url or not api_key:
            raise ValidationError("Supabase URL and key must be configured")
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token or api_key
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token}",
        }

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
            self._owns_session = True
        return self._session

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        json_body: Any = None,
        data: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        session = self._get_session()
        all_headers = self._headers()
        if headers:
            all_headers.update(headers)
        try:
            async with session.request(
                method, f"{self.url}{path}", params=params, json=json_body, data=data, headers=all_headers
            ) as resp:
                text = await resp.text()
                if resp.status >= 400:
                    logger.error("%s %s failed with %s: %s", method, path, resp.status, text[:200])
                    raise RemoteError(f"{method} {path} failed: {resp.status}", status=resp.status, body=text)
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            logger.error("%s %s request error: %s", method, path, err)
            raise RemoteError(f"{method} {path} failed: {err}") from err

        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text

    @staticmethod
    def _filters(match: Optional[Dict[str, Any]]) -> Dict[str, str]:
        return {column: f"eq.{value}" for column, value in (match or {}).items()}

    async def query(self, table, match=None, order=None, descending=False, ilike=None, columns="*"):
        params = {"select": columns}
        params.update(self._filters(match))
        for column, pattern in (ilike or {}).items():
            params[column] = f"ilike.*{pattern}*"
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        rows = await self._request("GET", f"/rest/v1/{table}", params=params)
        return rows or []

    async def insert(self, table, row):
        rows = await self._request(
            "POST", f"/rest/v1/{table}", json_body=row, headers={"Prefer": "return=representation"}
        )
        if isinstance(rows, list) and rows:
            return rows[0]
        return dict(row)

    async def update(self, table, match, patch):
        if not match:
            raise ValidationError("update requires a match filter")
        await self._request("PATCH", f"/rest/v1/{table}", params=self._filters(match), json_body=patch)

    async def delete(self, table, match):
        if not match:
            raise ValidationError("delete requires a match filter")
        await self._request("DELETE", f"/rest/v1/{table}", params=self._filters(match))

    async def upload_blob(self, bucket, path, content, content_type):
        await self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{quote(path)}",
            data=content,
            headers={"Content-Type": content_type, "x-upsert": "false"},
        )

    async def remove_blob(self, bucket, path):
        await self._request("DELETE", f"/storage/v1/object/{bucket}", json_body={"prefixes": [path]})

    def get_public_url(self, bucket, path):
        return f"{self.url}/storage/v1/object/public/{bucket}/{quote(path)}"

    async def check_connection(self) -> bool:
        """Return True if the exams table can be read."""
        try:
            await self._request("GET", "/rest/v1/exams", params={"select": "id", "limit": "1"})
        except RemoteError as err:
            logger.warning("Remote store connection check failed: %s", err)
            return False
        return True

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
