"""HTTP transport for the Replate backend."""

import uuid
from typing import Any

import httpx
from pydantic import BaseModel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from replate.client.base import (
    InvalidResponseError,
    InvalidURLError,
    NetworkError,
    ServerError,
)
from replate.config import get_settings
from replate.logging_config import LoggingContext, get_logger

logger = get_logger(__name__)


def serialize_body(body: Any) -> Any:
    """Turn a request body into JSON-compatible data."""
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(body, list):
        return [serialize_body(item) for item in body]
    return body


class Transport:
    """Sends JSON requests to the backend and returns raw response bodies."""

    BACKOFF_BASE = 1
    BACKOFF_MAX = 30

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.api_timeout
        self.max_retries = max_retries if max_retries is not None else settings.api_max_retries
        self.user_agent = settings.user_agent
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            kwargs: dict[str, Any] = {
                "headers": {
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                    "User-Agent": self.user_agent,
                },
            }
            if self.timeout is not None:
                kwargs["timeout"] = httpx.Timeout(self.timeout)
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def build_url(self, endpoint: str) -> httpx.URL:
        """Join the base URL and endpoint path, validating the result."""
        if not isinstance(endpoint, str) or not endpoint.strip():
            raise InvalidURLError(f"Invalid endpoint: {endpoint!r}")
        path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        try:
            url = httpx.URL(f"{self.base_url}{path}")
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise InvalidURLError(f"Invalid URL for endpoint {endpoint!r}", response=str(e)) from e
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidURLError(f"Invalid URL for endpoint {endpoint!r}", response=str(url))
        return url

    async def send(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        query: dict[str, Any] | None = None,
    ) -> bytes:
        """
        Send a request and return the raw response body.

        Args:
            endpoint: Path relative to the base URL, e.g. "/ingredients".
            method: HTTP method.
            body: JSON body; pydantic models are dumped by alias.
            query: Query string parameters.

        Returns:
            Raw response bytes.

        Raises:
            InvalidURLError: If the endpoint does not form a valid URL.
            NetworkError: On connectivity failures and timeouts.
            InvalidResponseError: If the server reply is not well-formed HTTP.
            ServerError: For any non-2xx status.
        """
        url = self.build_url(endpoint)
        json_body = serialize_body(body) if body is not None else None
        client = await self._get_client()

        @retry(
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.BACKOFF_BASE, max=self.BACKOFF_MAX),
            reraise=True,
        )
        async def _do_request() -> httpx.Response:
            return await client.request(method.upper(), url, params=query, json=json_body)

        with LoggingContext(request_id=uuid.uuid4().hex, endpoint=endpoint):
            logger.debug(f"{method.upper()} {url}")
            try:
                response = await _do_request()
            except (httpx.RemoteProtocolError, httpx.DecodingError, httpx.TooManyRedirects) as e:
                logger.error(f"Malformed response for {url}: {e}")
                raise InvalidResponseError(response=str(e)) from e
            except httpx.InvalidURL as e:
                raise InvalidURLError(f"Invalid URL for endpoint {endpoint!r}", response=str(e)) from e
            except httpx.RequestError as e:
                logger.error(f"Network failure for {url}: {e!r}")
                raise NetworkError(response=str(e)) from e

            if not response.is_success:
                error_detail = response.text[:500] if response.content else "No details"
                logger.error(f"API error {response.status_code} for {url}: {error_detail}")
                raise ServerError(response.status_code, response=error_detail)

            logger.debug(f"{response.status_code} {url} ({len(response.content)} bytes)")
            return response.content

    async def __aenter__(self) -> "Transport":
        """Async context manager entry."""
        await self._get_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()
