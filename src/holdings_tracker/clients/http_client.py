"""Retrying HTTP caller shared by every provider client.

Expected failure modes (network errors, timeouts, HTTP 429, rate-limit
messages, other 4xx/5xx, application errors in the body) never raise out of
:meth:`RetryingHttpCaller.call`; they come back as a :class:`CallResult`
carrying a :class:`CallError`. Only malformed requests raise.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import aiohttp
from asyncio_throttle import Throttler

from .errors import ProviderError, RateLimitError, TransportError

logger = logging.getLogger(__name__)

RATE_LIMIT_MARKERS = ("rate limit", "too many requests")

SUPPORTED_METHODS = frozenset({"GET", "POST"})


class ErrorKind(str, Enum):
    """Error kinds surfaced by the caller once retries are exhausted."""

    RATE_LIMITED = "rate_limited"
    PROVIDER_ERROR = "provider_error"


@dataclass(frozen=True)
class CallError:
    kind: ErrorKind
    message: str
    status: int | None = None


@dataclass(frozen=True)
class CallResult:
    """Outcome of one logical call, after retries."""

    body: Any = None
    error: CallError | None = None
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class HttpRequest:
    """A single provider request description."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    json: Any = None
    params: dict[str, Any] | None = None
    max_retries: int | None = None

    def validate(self) -> None:
        if self.method.upper() not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {self.method}")
        if not self.url:
            raise ValueError("Request URL must not be empty")
        if self.max_retries is not None and self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")


class RetryPolicy:
    """Exponential backoff policy: ``base_delay * multiplier ** attempt``.

    ``attempt`` starts at 0, so the default policy waits 1s, 2s, 4s... The
    ``sleep`` coroutine is injectable so tests can record delays instead of
    waiting.
    """

    def __init__(
        self,
        max_retries: int = 2,
        base_delay: float = 1.0,
        multiplier: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.multiplier = multiplier
        self._sleep = sleep or asyncio.sleep

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * (self.multiplier**attempt)

    async def wait(self, attempt: int) -> float:
        delay = self.delay_for(attempt)
        await self._sleep(delay)
        return delay


def is_rate_limit_message(message: str | None) -> bool:
    """Case-insensitive check for rate limiting wording in an error message."""
    if not message:
        return False
    lowered = message.lower()
    return any(marker in lowered for marker in RATE_LIMIT_MARKERS)


def extract_error_message(body: Any) -> str | None:
    """Return the application-level error message of a parsed body, if any.

    Handles JSON-RPC style ``{"error": {"message": ...}}`` as well as plain
    ``{"error": "..."}`` bodies.
    """
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if not error:
        return None
    if isinstance(error, dict):
        return str(error.get("message") or error.get("code") or "Unknown API error")
    return str(error)


class RetryingHttpCaller:
    """Issue provider requests with exponential backoff on rate limits and failures."""

    def __init__(
        self,
        name: str,
        session: aiohttp.ClientSession | None = None,
        retry_policy: RetryPolicy | None = None,
        timeout: float = 10.0,
        rate_limit: int | None = None,
        user_agent: str = "HoldingsTracker/1.0",
    ):
        """Initialize the caller.

        Args:
            name: Provider name used in logs and stats
            session: Optional externally owned aiohttp session
            retry_policy: Backoff policy, defaults to 2 retries starting at 1s
            timeout: Upper bound for one request in seconds
            rate_limit: Optional requests per minute for this provider
            user_agent: User-Agent header sent with each request
        """
        self.name = name
        self._session = session
        self._own_session = session is None
        self.retry_policy = retry_policy or RetryPolicy()
        self.timeout = timeout
        self.user_agent = user_agent
        self.throttler = Throttler(rate_limit=rate_limit, period=60) if rate_limit else None

        self._stats = {
            "requests": 0,
            "successes": 0,
            "retries": 0,
            "rate_limit_errors": 0,
            "transport_errors": 0,
            "provider_errors": 0,
        }

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
                raise_for_status=False,
            )
        return self._session

    async def call(self, request: HttpRequest) -> CallResult:
        """Execute a request, retrying on transport failures and rate limits.

        Returns a successful :class:`CallResult` with the parsed body, or one
        carrying a :class:`CallError` once retries are exhausted.
        """
        request.validate()
        retry_count = request.max_retries if request.max_retries is not None else self.retry_policy.max_retries

        last_error: CallError | None = None
        for attempt in range(retry_count + 1):
            self._stats["requests"] += 1
            try:
                body = await self._send(request)
                self._stats["successes"] += 1
                return CallResult(body=body, attempts=attempt + 1)

            except RateLimitError as e:
                self._stats["rate_limit_errors"] += 1
                last_error = CallError(ErrorKind.RATE_LIMITED, str(e), status=429)

            except TransportError as e:
                self._stats["transport_errors"] += 1
                last_error = CallError(ErrorKind.PROVIDER_ERROR, str(e))

            except ProviderError as e:
                self._stats["provider_errors"] += 1
                logger.warning(f"⚠️ {self.name} request failed: {e}")
                return CallResult(error=CallError(ErrorKind.PROVIDER_ERROR, str(e), e.status), attempts=attempt + 1)

            if attempt < retry_count:
                self._stats["retries"] += 1
                delay = self.retry_policy.delay_for(attempt)
                logger.warning(
                    f"⚠️ {self.name}: {last_error.message} (attempt {attempt + 1}/{retry_count + 1}), "
                    f"retrying in {delay:.1f}s"
                )
                await self.retry_policy.wait(attempt)

        logger.error(f"❌ {self.name} request to {request.url} failed after {retry_count + 1} attempts")
        return CallResult(error=last_error, attempts=retry_count + 1)

    async def _send(self, request: HttpRequest) -> Any:
        """Make a single HTTP request and return the parsed body."""
        session = await self._ensure_session()
        kwargs: dict[str, Any] = {"headers": request.headers or None}
        if request.json is not None:
            kwargs["json"] = request.json
        if request.params:
            kwargs["params"] = request.params

        try:
            if self.throttler:
                async with self.throttler:
                    return await self._request(session, request.method.upper(), request.url, kwargs)
            return await self._request(session, request.method.upper(), request.url, kwargs)

        except TimeoutError as e:
            raise TransportError(f"Request timeout after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Request to {request.url} failed: {e}") from e

    async def _request(self, session: aiohttp.ClientSession, method: str, url: str, kwargs: dict[str, Any]) -> Any:
        async with session.request(method, url, **kwargs) as response:
            return await self._handle_response(response)

    async def _handle_response(self, response: aiohttp.ClientResponse) -> Any:
        """Classify the response and extract the parsed body."""
        if response.status == 429:
            raise RateLimitError(f"Rate limited by {self.name} (429)")

        if response.status >= 400:
            error_text = await response.text()
            raise ProviderError(f"HTTP {response.status}: {error_text[:200]}", status=response.status)

        try:
            data = await response.json(content_type=None)
        except ValueError as e:
            raise ProviderError(f"Failed to parse JSON response: {e}", status=response.status) from e

        error_message = extract_error_message(data)
        if error_message:
            if is_rate_limit_message(error_message):
                raise RateLimitError(f"{self.name} rate limit: {error_message}")
            raise ProviderError(f"{self.name} API error: {error_message}", status=response.status)

        return data

    def get_stats(self) -> dict[str, Any]:
        return {"provider": self.name, **self._stats}

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and self._own_session:
            await self._session.close()
            self._session = None
            logger.info(f"🔌 {self.name} client session closed")
