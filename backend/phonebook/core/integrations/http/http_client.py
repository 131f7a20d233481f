"""
Async HTTP client wrapper using aiohttp for outbound JSON APIs.
Transient failures (connection errors, timeouts, gateway errors) are retried
with exponential backoff; client errors such as 401 or 429 fail at once.
"""

import asyncio
from typing import Optional, Dict, Any
import aiohttp
import logging

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({502, 503, 504})


def is_retryable(error: BaseException) -> bool:
    """Whether a failed request is worth another attempt."""
    if isinstance(error, aiohttp.ClientResponseError):
        return error.status in RETRYABLE_STATUSES
    return isinstance(error, (aiohttp.ClientError, asyncio.TimeoutError))


class HttpClient:
    """
    Async HTTP client bound to one base URL.
    The aiohttp session is created lazily and reused until close().
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            base_url: Optional base URL for all requests
            timeout: Total time budget of one attempt, in seconds
            max_retries: Maximum number of attempts (at least one)
            retry_delay: Delay before the second attempt, doubled after each failure
            headers: Headers sent with every request
        """
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.headers = headers or {}
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout, headers=self.headers)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def build_url(self, endpoint: str = "") -> str:
        """Join the base URL and an endpoint; an empty endpoint targets the base URL itself."""
        if not endpoint:
            return self.base_url or ""
        if self.base_url:
            return f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"
        return endpoint

    async def _fetch_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """
        Send one request per attempt until one succeeds or the error is final.

        Returns:
            Decoded JSON body, whatever the response content type

        Raises:
            aiohttp.ClientError or asyncio.TimeoutError from the last attempt
        """
        session = await self._get_session()

        for attempt in range(1, self.max_retries + 1):
            try:
                async with session.request(method, url, **kwargs) as response:
                    response.raise_for_status()
                    return await response.json(content_type=None)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if attempt == self.max_retries or not is_retryable(e):
                    logger.error(
                        f"{method} {url} failed: {e!r}",
                        extra={"attempts": attempt, "exception_type": type(e).__name__},
                    )
                    raise

                delay = self.retry_delay * (2 ** (attempt - 1))
                logger.warning(
                    f"{method} {url} failed (attempt {attempt}/{self.max_retries}): {e!r}. "
                    f"Retrying in {delay}s..."
                )
                await asyncio.sleep(delay)

    async def get(
        self,
        endpoint: str = "",
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Make GET request.

        Args:
            endpoint: Path appended to base_url
            params: Query parameters
            headers: Extra request headers

        Returns:
            JSON response body
        """
        return await self._fetch_json("GET", self.build_url(endpoint), params=params, headers=headers)
