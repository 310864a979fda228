"""
SpellNote Backend - Yandex Speller Client
===========================================

What:  SpellChecker implementation for the Yandex Speller JSON API.
How:   POSTs the note as the single form field `text`
       (application/x-www-form-urlencoded) and returns the raw body.
Who:   Built by CorrectionPipeline.from_settings(); one instance per app.
When:  Once per non-empty note submission, before the note is stored.

Failure mapping:
    httpx.TimeoutException or the overall
    `timeout` deadline (anyio.fail_after)   → TransportFailure(stage="send", timed_out=True)
    httpx.InvalidURL / UnsupportedProtocol  → TransportFailure(stage="request")
    any other httpx.HTTPError               → TransportFailure(stage="send")
    response status outside 2xx             → ServiceFailure(status_code)

Retry policy:
    Off by default (max_attempts=1). When raised, tenacity retries
    TransportFailure(stage="send") only, with exponential backoff and jitter.
    Request construction failures and ServiceFailure are never retried.
"""

import logging
import time
import uuid
from typing import Optional

import anyio
import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from app.exceptions import ServiceFailure, TransportFailure
from app.services.speller_base import SpellChecker

logger = logging.getLogger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, TransportFailure) and exc.stage == "send"


class YandexSpellerClient(SpellChecker):
    """
    Stateless HTTP client for the spell checking service.

    Each call opens its own httpx.AsyncClient, so concurrent requests share
    nothing but the immutable configuration below.

    Args:
        api_url:        Full checkText endpoint URL.
        timeout:        Seconds allowed for one whole request/response exchange.
        max_attempts:   Total attempts on transport failure (1 = no retry).
        retry_min_wait: Initial backoff in seconds.
        retry_max_wait: Backoff ceiling in seconds.
        transport:      Optional httpx transport (tests pass httpx.MockTransport).
    """

    FORM_FIELD = "text"
    HEALTH_PROBE_TEXT = "ok"

    def __init__(
        self,
        api_url: str,
        timeout: float = 5.0,
        max_attempts: int = 1,
        retry_min_wait: float = 0.5,
        retry_max_wait: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_min_wait = retry_min_wait
        self.retry_max_wait = retry_max_wait
        self._transport = transport

    async def check_text(self, text: str) -> bytes:
        request_id = str(uuid.uuid4())[:8]

        retrying = AsyncRetrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.retry_min_wait, max=self.retry_max_wait)
            + wait_random(0, self.retry_min_wait),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        async for attempt in retrying:
            with attempt:
                return await self._post(text, request_id)

    async def _post(self, text: str, request_id: str) -> bytes:
        """Single attempt: build, send, and status-check one request."""
        start_time = time.perf_counter()

        try:
            # httpx limits each phase; fail_after bounds the whole exchange
            with anyio.fail_after(self.timeout):
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self._transport
                ) as client:
                    response = await client.post(
                        self.api_url,
                        data={self.FORM_FIELD: text},
                        headers={"Content-Type": "application/x-www-form-urlencoded"},
                    )
        except (httpx.TimeoutException, TimeoutError) as e:
            logger.warning(
                "[%s] Speller request timed out after %.1fs: %s",
                request_id,
                self.timeout,
                type(e).__name__,
            )
            raise TransportFailure(
                message="Spell checking service did not answer in time",
                timed_out=True,
                context={"request_id": request_id, "timeout": self.timeout},
            ) from e
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            logger.error("[%s] Cannot build speller request: %s", request_id, e)
            raise TransportFailure(
                message="Could not build a request to the spell checking service",
                stage="request",
                context={"request_id": request_id, "error_type": type(e).__name__},
            ) from e
        except httpx.HTTPError as e:
            logger.warning("[%s] Speller request failed: %s", request_id, e)
            raise TransportFailure(
                context={"request_id": request_id, "error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000

        if not response.is_success:
            logger.warning(
                "[%s] Speller answered HTTP %d in %.0fms",
                request_id,
                response.status_code,
                duration_ms,
            )
            raise ServiceFailure(
                status_code=response.status_code,
                context={"request_id": request_id, "body": response.text[:200]},
            )

        logger.info(
            "[%s] Speller checked %d chars in %.0fms (%d bytes returned)",
            request_id,
            len(text),
            duration_ms,
            len(response.content),
        )
        return response.content

    async def health_check(self) -> bool:
        try:
            await self._post(self.HEALTH_PROBE_TEXT, "health")
            return True
        except (TransportFailure, ServiceFailure) as e:
            logger.warning("Speller health check failed: %s", e.message)
            return False
