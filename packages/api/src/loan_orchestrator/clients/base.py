# This project was developed with assistance from AI tools.
"""Resilient HTTP client base for the dependency services.

Every gateway shares the same policy: a per-call timeout, a bounded
exponential-backoff retry (tenacity) on transport errors and transient
statuses, and a per-gateway circuit breaker. Failures never propagate to the
caller -- they surface as ``None`` (or ``False``) so orchestration code can
degrade instead of aborting.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..core.config import Settings
from ..schemas.gateway import ServiceEnvelope

logger = logging.getLogger(__name__)

_TRANSIENT_STATUSES = frozenset({408, 429})


class TransientResponseError(Exception):
    """A response whose status is worth retrying (408, 429, 5xx)."""

    def __init__(self, response: httpx.Response):
        self.response = response
        super().__init__(f"HTTP {response.status_code}")


def _is_transient(response: httpx.Response) -> bool:
    return response.status_code in _TRANSIENT_STATUSES or response.status_code >= 500


class CircuitBreaker:
    """Consecutive-failure circuit breaker.

    Closed until ``failure_threshold`` consecutive failures, then open for
    ``reset_timeout`` seconds. After the window the breaker is half-open: one
    trial call goes through and its outcome closes or re-opens the circuit.
    Other callers are refused while the trial is in flight. A trial that never
    reports back is abandoned after another ``reset_timeout``.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int,
        reset_timeout: float,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self._failure_threshold = failure_threshold
        self._reset_timeout = reset_timeout
        self._monotonic = monotonic
        self._failures = 0
        self._opened_at: float | None = None
        self._trial_started_at: float | None = None

    @property
    def state(self) -> str:
        if self._opened_at is None:
            return "closed"
        if self._monotonic() - self._opened_at >= self._reset_timeout:
            return "half_open"
        return "open"

    def allow_request(self) -> bool:
        state = self.state
        if state == "closed":
            return True
        if state == "open":
            return False
        now = self._monotonic()
        if (
            self._trial_started_at is not None
            and now - self._trial_started_at < self._reset_timeout
        ):
            return False
        self._trial_started_at = now
        return True

    def record_success(self) -> None:
        if self._opened_at is not None:
            logger.info("Circuit for %s closed", self.name)
        self._failures = 0
        self._opened_at = None
        self._trial_started_at = None

    def record_failure(self) -> None:
        self._failures += 1
        self._trial_started_at = None
        if self.state == "half_open" or self._failures >= self._failure_threshold:
            if self._opened_at is None:
                logger.warning(
                    "Circuit for %s opened after %d consecutive failures",
                    self.name,
                    self._failures,
                )
            self._opened_at = self._monotonic()


class ServiceClient:
    """Base gateway: soft-failing JSON calls against one dependency service."""

    service_name = "service"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        backoff_seconds: float = 2.0,
        backoff_max_seconds: float = 8.0,
        breaker: CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self._retry_attempts = retry_attempts
        self._backoff_seconds = backoff_seconds
        self._backoff_max_seconds = backoff_max_seconds
        self.breaker = breaker or CircuitBreaker(self.service_name, 5, 30.0)

    @classmethod
    def from_settings(
        cls,
        cfg: Settings,
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        return cls(
            base_url,
            timeout=cfg.GATEWAY_TIMEOUT_SECONDS,
            retry_attempts=cfg.GATEWAY_RETRY_ATTEMPTS,
            backoff_seconds=cfg.GATEWAY_RETRY_BACKOFF_SECONDS,
            backoff_max_seconds=cfg.GATEWAY_RETRY_BACKOFF_MAX_SECONDS,
            breaker=CircuitBreaker(
                cls.service_name,
                cfg.CIRCUIT_BREAKER_FAILURE_THRESHOLD,
                cfg.CIRCUIT_BREAKER_RESET_SECONDS,
            ),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response | None:
        """Issue a request under the retry + breaker policy.

        Returns the final non-transient response (any status), or None when
        the circuit is open or every attempt failed.
        """
        if not self.breaker.allow_request():
            logger.warning("%s circuit open -- skipping %s %s", self.service_name, method, path)
            return None

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._retry_attempts),
                wait=wait_exponential(
                    multiplier=self._backoff_seconds, max=self._backoff_max_seconds
                ),
                retry=retry_if_exception_type((httpx.TransportError, TransientResponseError)),
                reraise=True,
            ):
                with attempt:
                    response = await self._client.request(method, path, **kwargs)
                    if _is_transient(response):
                        raise TransientResponseError(response)
        except TransientResponseError as exc:
            self.breaker.record_failure()
            logger.error(
                "%s %s %s failed with HTTP %d after %d attempts",
                self.service_name,
                method,
                path,
                exc.response.status_code,
                self._retry_attempts,
            )
            return None
        except httpx.HTTPError:
            self.breaker.record_failure()
            logger.error(
                "%s %s %s failed after %d attempts",
                self.service_name,
                method,
                path,
                self._retry_attempts,
                exc_info=True,
            )
            return None

        self.breaker.record_success()
        return response

    def _unwrap(self, response: httpx.Response | None, model: Any, what: str) -> Any:
        """Extract ``data`` from a success envelope, or None."""
        if response is None or not response.is_success:
            return None
        try:
            envelope = ServiceEnvelope[model].model_validate(response.json())
        except (ValueError, ValidationError):
            logger.warning("Malformed %s response from %s", what, self.service_name)
            return None
        if not envelope.success:
            logger.info("%s reported no %s: %s", self.service_name, what, envelope.message)
            return None
        return envelope.data

    async def _get_data(self, path: str, model: Any, what: str, **kwargs: Any) -> Any:
        response = await self._send("GET", path, **kwargs)
        return self._unwrap(response, model, what)

    async def _post_data(self, path: str, body: BaseModel, model: Any, what: str) -> Any:
        response = await self._send(
            "POST", path, json=body.model_dump(mode="json", by_alias=True)
        )
        return self._unwrap(response, model, what)

    async def _exists(self, path: str) -> bool:
        response = await self._send("GET", path)
        return response is not None and response.is_success

    async def _post_ok(self, path: str, body: BaseModel, what: str) -> bool:
        """POST and report whether the service acknowledged with ``success``."""
        response = await self._send(
            "POST", path, json=body.model_dump(mode="json", by_alias=True)
        )
        if response is None or not response.is_success:
            return False
        try:
            envelope = ServiceEnvelope[Any].model_validate(response.json())
        except (ValueError, ValidationError):
            logger.warning("Malformed %s response from %s", what, self.service_name)
            return False
        return envelope.success

    async def ping(self) -> bool:
        """Readiness probe: true when the service answers at all."""
        return await self._send("GET", "/health") is not None
