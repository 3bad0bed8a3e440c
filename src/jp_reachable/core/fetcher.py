"""Rate-limit friendly JSON fetcher with retry and exponential backoff."""

import json
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)
from urllib3.exceptions import HTTPError as Urllib3Error
from urllib3.exceptions import ReadTimeoutError

from ..config import RetryPolicy
from .exceptions import NetworkError, ResponseFormatError

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 8192


class ResilientFetcher:
    """Issue GET requests that expect JSON, retrying any failed attempt.

    The fetcher is stateless apart from its HTTP session. Every attempt has
    its own deadline covering the whole exchange: the socket timeout bounds
    each read, and the body is read incrementally against the deadline so a
    server trickling bytes cannot keep an attempt alive. The response is
    always closed before the next attempt starts.
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the fetcher.

        Args:
            policy: Default retry/backoff/timeout policy
            session: Optional pre-configured requests session
            sleep: Callable used for backoff delays (swap in tests)
            clock: Monotonic clock used for attempt deadlines (swap in tests)
        """
        self.policy = policy or RetryPolicy()
        self.sleep = sleep
        self.clock = clock
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/140.0.0.0 Safari/537.36",
                "Accept": "application/json",
                "Accept-Language": "ja,en-US;q=0.9,en;q=0.8",
            }
        )

    def __enter__(self) -> "ResilientFetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        retries: int | None = None,
        timeout: float | None = None,
        backoff: float | None = None,
    ) -> Any:
        """Fetch ``url`` and decode the JSON body.

        Args:
            url: Request URL
            params: Optional query parameters
            retries: Override the policy's retry count for this request
            timeout: Override the policy's per-attempt deadline (seconds)
            backoff: Override the policy's backoff base (seconds)

        Returns:
            Decoded JSON document

        Raises:
            NetworkError: If the last attempt failed at the transport/HTTP level
            ResponseFormatError: If the last attempt returned a non-JSON body
        """
        policy = self.policy.with_overrides(
            retries=retries, timeout=timeout, backoff=backoff
        )
        retrying = Retrying(
            stop=stop_after_attempt(policy.retries + 1),
            wait=lambda retry_state: policy.delay_before(retry_state.attempt_number),
            retry=retry_if_exception_type((NetworkError, ResponseFormatError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self.sleep,
            reraise=True,
        )
        return retrying(self._fetch_once, url, params, policy.timeout)

    def _fetch_once(
        self, url: str, params: Mapping[str, str] | None, timeout: float
    ) -> Any:
        """Perform a single attempt."""
        deadline = self.clock() + timeout
        try:
            with self.session.get(
                url, params=params, timeout=timeout, stream=True
            ) as response:
                response.raise_for_status()
                body = self._read_body(response, url, timeout, deadline)
        except (requests.exceptions.Timeout, ReadTimeoutError) as e:
            raise NetworkError(f"Request timed out after {timeout}s: {url}") from e
        except (requests.exceptions.RequestException, Urllib3Error) as e:
            raise NetworkError(f"Failed to fetch {url}: {str(e)}") from e

        try:
            return json.loads(body)
        except ValueError as e:
            raise ResponseFormatError(f"Response from {url} is not JSON: {e}") from e

    def _read_body(
        self, response: requests.Response, url: str, timeout: float, deadline: float
    ) -> bytes:
        # read1 returns as soon as any bytes have arrived
        chunks: list[bytes] = []
        while True:
            if self.clock() > deadline:
                raise NetworkError(f"Request timed out after {timeout}s: {url}")
            chunk = response.raw.read1(READ_CHUNK_SIZE, decode_content=True)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)
