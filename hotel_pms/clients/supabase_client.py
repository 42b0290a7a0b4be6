"""Supabase (PostgREST) client for the hotel backend tables."""

import asyncio
from typing import Any, Optional

import httpx
from structlog import get_logger

from hotel_pms.config import settings

logger = get_logger(__name__)


class SupabaseClientError(Exception):
    """Base exception for Supabase client errors."""

    def __init__(self, message: str, status_code: Optional[int] = None, pg_code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.pg_code = pg_code


class SupabaseAuthenticationError(SupabaseClientError):
    """Raised when the API key is rejected."""

    pass


class SupabaseConflictError(SupabaseClientError):
    """Raised when a write violates a database constraint (HTTP 409)."""

    pass


class SupabaseServerError(SupabaseClientError):
    """Raised when Supabase returns a server error."""

    pass


def _pg_code(response: httpx.Response) -> Optional[str]:
    """Extract the Postgres error code PostgREST puts in error bodies."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("code")
    return None


class SupabaseRestClient:
    """Thin async client over the PostgREST endpoints of a Supabase project."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
    ):
        """Initialize the client, falling back to settings for anything not given."""
        self.base_url = (base_url or settings.supabase.url).rstrip("/")
        self.api_key = api_key or settings.supabase.api_key
        self.schema_name = settings.supabase.schema_name
        self.timeout = timeout or settings.supabase.request_timeout
        self.max_retries = max_retries or settings.supabase.max_retries
        self.retry_backoff_base = 2  # Exponential backoff base

    def _get_headers(self, prefer: Optional[str] = None) -> dict[str, str]:
        """Get default headers for PostgREST requests.

        Args:
            prefer: Optional value of the Prefer header (e.g. return=representation)

        Returns:
            Dictionary of HTTP headers including the API key.
        """
        headers = {
            "Content-Type": "application/json",
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept-Profile": self.schema_name,
            "Content-Profile": self.schema_name,
            "User-Agent": "HotelPMSCore/1.0",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _make_request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        data: Optional[Any] = None,
        prefer: Optional[str] = None,
    ) -> Any:
        """Make an HTTP request to PostgREST with retry logic.

        Only server errors, timeouts and transport errors are retried;
        4xx responses fail immediately.

        Args:
            method: HTTP method
            path: Path below the project URL, e.g. /rest/v1/reservations
            params: Query parameters (PostgREST filter syntax)
            data: JSON body
            prefer: Prefer header value

        Returns:
            Decoded JSON response (list, dict or scalar), None when the body is empty

        Raises:
            SupabaseAuthenticationError: If the API key is rejected
            SupabaseConflictError: If a constraint is violated
            SupabaseServerError: If server errors persist after retries
            SupabaseClientError: For other API errors
        """
        url = f"{self.base_url}{path}"
        headers = self._get_headers(prefer)

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(
                        method=method,
                        url=url,
                        headers=headers,
                        params=params,
                        json=data,
                    )

                if response.status_code in (401, 403):
                    logger.error(
                        "Supabase authentication failed",
                        path=path,
                        status_code=response.status_code,
                    )
                    raise SupabaseAuthenticationError(
                        f"Authentication failed for {path}",
                        status_code=response.status_code,
                    )

                if response.status_code == 409:
                    pg_code = _pg_code(response)
                    logger.warning(
                        "Supabase constraint violation",
                        path=path,
                        pg_code=pg_code,
                    )
                    raise SupabaseConflictError(
                        f"Constraint violation at {path}: {response.text[:200]}",
                        status_code=409,
                        pg_code=pg_code,
                    )

                if response.status_code >= 500:
                    if attempt < self.max_retries - 1:
                        wait_time = self.retry_backoff_base ** attempt
                        logger.warning(
                            "Supabase server error, retrying",
                            path=path,
                            status_code=response.status_code,
                            attempt=attempt + 1,
                            max_retries=self.max_retries,
                            wait_seconds=wait_time,
                        )
                        await asyncio.sleep(wait_time)
                        continue
                    logger.error(
                        "Supabase server error, max retries exceeded",
                        path=path,
                        status_code=response.status_code,
                    )
                    raise SupabaseServerError(
                        f"Server error at {path}: {response.text[:200]}",
                        status_code=response.status_code,
                    )

                if 400 <= response.status_code < 500:
                    logger.error(
                        "Supabase client error",
                        path=path,
                        status_code=response.status_code,
                        response_text=response.text[:200],
                    )
                    raise SupabaseClientError(
                        f"Client error at {path}: {response.text[:200]}",
                        status_code=response.status_code,
                        pg_code=_pg_code(response),
                    )

                logger.debug(
                    "Supabase request successful",
                    path=path,
                    method=method,
                    status_code=response.status_code,
                )
                if response.text:
                    return response.json()
                return None

            except (httpx.TimeoutException, httpx.RequestError) as e:
                if attempt < self.max_retries - 1:
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        "Supabase request error, retrying",
                        path=path,
                        error=str(e),
                        attempt=attempt + 1,
                        max_retries=self.max_retries,
                        wait_seconds=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error(
                    "Supabase request error, max retries exceeded",
                    path=path,
                    error=str(e),
                )
                raise SupabaseClientError(f"Request failed for {path}: {str(e)}") from e

        raise SupabaseClientError(f"Failed to complete request to {path}")

    async def select(
        self,
        table: str,
        filters: Optional[dict[str, str]] = None,
        columns: str = "*",
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Select rows from a table.

        Args:
            table: Table name
            filters: PostgREST filters, e.g. {"hotel_id": "eq.abc"}
            columns: Select clause, may embed related tables
            order: Order clause, e.g. "check_in_date.desc"
            limit: Maximum number of rows

        Returns:
            List of row dictionaries
        """
        params: dict[str, Any] = {"select": columns, **(filters or {})}
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = limit
        return await self._make_request("GET", f"/rest/v1/{table}", params=params) or []

    async def select_one(
        self,
        table: str,
        filters: dict[str, str],
        columns: str = "*",
    ) -> Optional[dict[str, Any]]:
        """Select at most one row (the `maybeSingle` pattern)."""
        rows = await self.select(table, filters=filters, columns=columns, limit=1)
        return rows[0] if rows else None

    async def insert(
        self,
        table: str,
        row: dict[str, Any],
        columns: str = "*",
    ) -> dict[str, Any]:
        """Insert one row and return its stored representation."""
        result = await self._make_request(
            "POST",
            f"/rest/v1/{table}",
            params={"select": columns},
            data=row,
            prefer="return=representation",
        )
        return result[0] if isinstance(result, list) else result

    async def update(
        self,
        table: str,
        filters: dict[str, str],
        changes: dict[str, Any],
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        """Update matching rows and return them."""
        return await self._make_request(
            "PATCH",
            f"/rest/v1/{table}",
            params={"select": columns, **filters},
            data=changes,
            prefer="return=representation",
        ) or []

    async def delete(self, table: str, filters: dict[str, str]) -> None:
        """Delete matching rows."""
        await self._make_request("DELETE", f"/rest/v1/{table}", params=filters)

