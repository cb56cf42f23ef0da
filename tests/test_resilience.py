import asyncio
import logging

import httpx
import pytest

from planner.infra.resilience import RetryPolicy, is_transient_error, retry_async


def test_retry_success_after_transient() -> None:
    attempts: list[int] = []
    waits: list[float] = []

    async def _call() -> str:
        attempts.append(len(attempts))
        if len(attempts) < 3:
            raise asyncio.TimeoutError("transient")
        return "ok"

    async def _sleep(delay: float) -> None:
        waits.append(delay)

    policy = RetryPolicy(max_attempts=3, base_delay_ms=1, max_delay_ms=1, jitter_ms=0)

    result = asyncio.run(
        retry_async(
            _call,
            policy=policy,
            timeout_seconds=None,
            logger=logging.getLogger(__name__),
            name="retry",
            is_retryable=lambda exc: True,
            sleep=_sleep,
        )
    )

    assert result == "ok"
    assert len(attempts) == 3
    assert waits == [0.001, 0.001]


def test_retry_non_retryable_error() -> None:
    attempts: list[int] = []

    async def _call() -> str:
        attempts.append(len(attempts))
        raise ValueError("nope")

    policy = RetryPolicy(max_attempts=3, base_delay_ms=1, max_delay_ms=1, jitter_ms=0)

    with pytest.raises(ValueError):
        asyncio.run(
            retry_async(
                _call,
                policy=policy,
                timeout_seconds=None,
                logger=logging.getLogger(__name__),
                name="retry",
                is_retryable=lambda exc: False,
            )
        )

    assert len(attempts) == 1


def test_retry_timeout_is_enforced() -> None:
    async def _call() -> str:
        await asyncio.sleep(1)
        return "late"

    policy = RetryPolicy(max_attempts=1)

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(
            retry_async(
                _call,
                policy=policy,
                timeout_seconds=0.01,
                logger=logging.getLogger(__name__),
                name="retry",
                is_retryable=is_transient_error,
            )
        )


def test_transient_error_classification() -> None:
    request = httpx.Request("GET", "https://holidays.test/2024.json")

    assert is_transient_error(httpx.ConnectError("down", request=request)) is True
    assert is_transient_error(httpx.ReadTimeout("slow", request=request)) is True
    server_error = httpx.HTTPStatusError("boom", request=request, response=httpx.Response(502, request=request))
    client_error = httpx.HTTPStatusError("missing", request=request, response=httpx.Response(404, request=request))
    assert is_transient_error(server_error) is True
    assert is_transient_error(client_error) is False
    assert is_transient_error(ValueError("bad json")) is False
