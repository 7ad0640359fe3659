"""Base class for API clients."""

import abc
import logging
from typing import Any, Callable, Optional

import aiohttp
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)


class BaseClientError(Exception):
    """Base exception for all API client errors."""


class RetryableClientError(BaseClientError):
    """Transient error that request_with_retry will retry."""


class NetworkError(RetryableClientError):
    """Transport-level failure talking to an upstream API, including timeouts."""


class HttpStatusError(BaseClientError):
    """Upstream API answered with a non-success status code."""

    def __init__(self, status: int, message: Optional[str] = None) -> None:
        self.status = status
        super().__init__(message or f"HTTP error: {status}")


class ParseError(BaseClientError):
    """Upstream payload was malformed or contained an unparseable field."""


class NoStationsAvailable(BaseClientError):
    """The station catalog is empty or could not be loaded."""


class BaseApiClient(abc.ABC):
    """Abstract base class for API clients.

    Subclasses implement _execute_request, which performs a single attempt.
    Callers go through request_with_retry, which retries RetryableClientError
    with a linear back-off and lets every other error through unchanged.
    """

    _session: aiohttp.ClientSession

    MAX_RETRIES = 3
    RETRY_DELAY = 1.0  # seconds

    @property
    @abc.abstractmethod
    def client_type(self) -> str:
        """Return the string identifier for the client type (e.g., 'coops')."""
        raise NotImplementedError

    def __init__(
        self,
        session: aiohttp.ClientSession,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ) -> None:
        """Initialize the base client with an aiohttp session.

        Args:
            session: The aiohttp client session to use for requests.
            max_retries: Attempts made for transient errors (defaults to MAX_RETRIES).
            retry_delay: Base back-off in seconds (defaults to RETRY_DELAY).
        """
        self._session = session
        self.max_retries = max_retries if max_retries is not None else self.MAX_RETRIES
        self.retry_delay = retry_delay if retry_delay is not None else self.RETRY_DELAY

    def log(
        self,
        message: str,
        level: int = logging.INFO,
        location_code: Optional[str] = None,
    ) -> None:
        """Log a message, automatically prepending client type and optional location code."""
        client_tag = self.client_type
        if location_code:
            prefix = f"[{location_code}][{client_tag}]"
        else:
            prefix = f"[{client_tag}]"
        formatted_message = f"{prefix} {message}"
        logging.log(level, formatted_message)

    @abc.abstractmethod
    async def _execute_request(self, *args: Any, **kwargs: Any) -> Any:
        """Perform a single request attempt.

        Raises:
            RetryableClientError: For transient failures worth retrying.
            BaseClientError: For anything else.
        """
        ...

    def _log_retry(self, location_code: str) -> Callable[[RetryCallState], None]:
        """Build a tenacity before_sleep hook that logs each failed attempt."""

        def before_sleep(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            self.log(
                f"Attempt {retry_state.attempt_number} failed ({error}); retrying",
                level=logging.WARNING,
                location_code=location_code,
            )

        return before_sleep

    async def request_with_retry(
        self, *args: Any, location_code: str = "unknown", **kwargs: Any
    ) -> Any:
        """Call _execute_request, retrying transient failures.

        Waits retry_delay after the first failure, then 2 * retry_delay, and
        so on, for at most max_retries attempts.

        Args:
            location_code: Identifier used to tag log messages
            *args, **kwargs: Passed through to _execute_request

        Returns:
            Whatever _execute_request returns on the first successful attempt

        Raises:
            RetryableClientError: If every attempt failed transiently
            BaseClientError: Non-retryable errors are raised on first occurrence
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(RetryableClientError),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_incrementing(start=self.retry_delay, increment=self.retry_delay),
            before_sleep=self._log_retry(location_code),
            reraise=True,
        )
        try:
            return await retrying(
                self._execute_request, *args, location_code=location_code, **kwargs
            )
        except RetryableClientError as e:
            self.log(
                f"Giving up after {self.max_retries} attempts: {e}",
                level=logging.ERROR,
                location_code=location_code,
            )
            raise
