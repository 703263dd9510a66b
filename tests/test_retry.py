"""Tests for retry logic and the error helpers it relies on."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from parallel_search.utils.errors import (
    ProviderAuthenticationError,
    ProviderRateLimitError,
    ProviderServiceError,
    ProviderTimeoutError,
    QueryValidationError,
    bounded_message,
    http_error_response,
)
from parallel_search.utils.retry import (
    RetryConfig,
    is_retryable_exception,
    with_exponential_backoff,
)

FAST = RetryConfig(max_retries=2, base_delay=0.01, jitter=False)


def status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://example.com")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


class TestRetryConfig:
    def test_delay_grows_exponentially_and_is_capped(self):
        config = RetryConfig(base_delay=1.0, max_delay=3.0, jitter=False)
        assert config.calculate_delay(0) == 1.0
        assert config.calculate_delay(1) == 2.0
        assert config.calculate_delay(2) == 3.0

    def test_jitter_stays_within_bounds(self):
        config = RetryConfig(base_delay=1.0, jitter=True)
        for _ in range(20):
            assert 0.75 <= config.calculate_delay(0) <= 1.25

    def test_negative_retries_are_clamped(self):
        assert RetryConfig(max_retries=-3).max_retries == 0


class TestIsRetryable:
    @pytest.mark.parametrize("status", [408, 429, 500, 502, 503, 504])
    def test_retryable_status_codes(self, status):
        assert is_retryable_exception(status_error(status))

    @pytest.mark.parametrize("status", [400, 401, 403, 404])
    def test_client_errors_are_not_retried(self, status):
        assert not is_retryable_exception(status_error(status))

    def test_provider_errors(self):
        assert is_retryable_exception(ProviderTimeoutError("brave", timeout=1))
        assert is_retryable_exception(ProviderRateLimitError("brave"))
        assert is_retryable_exception(
            ProviderServiceError("brave", message="HTTP 503", status_code=503)
        )
        assert not is_retryable_exception(ProviderAuthenticationError("brave"))
        assert not is_retryable_exception(ValueError("nope"))


class TestWithExponentialBackoff:
    @pytest.mark.asyncio
    async def test_success_is_not_retried(self):
        func = AsyncMock(return_value="ok")
        func.__name__ = "func"

        result = await with_exponential_backoff(FAST)(func)()

        assert result == "ok"
        assert func.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        func = AsyncMock(side_effect=[httpx.ConnectError("down"), "ok"])
        func.__name__ = "func"
        on_retry = MagicMock()

        result = await with_exponential_backoff(FAST, on_retry=on_retry)(func)()

        assert result == "ok"
        assert func.await_count == 2
        on_retry.assert_called_once()

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        func = AsyncMock(side_effect=status_error(503))
        func.__name__ = "func"

        with pytest.raises(httpx.HTTPStatusError):
            await with_exponential_backoff(FAST)(func)()

        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_non_retryable_error_raises_immediately(self):
        func = AsyncMock(side_effect=status_error(401))
        func.__name__ = "func"

        with pytest.raises(httpx.HTTPStatusError):
            await with_exponential_backoff(FAST)(func)()

        assert func.await_count == 1


class TestErrorHelpers:
    def test_bounded_message_truncates(self):
        assert bounded_message("short") == "short"
        message = bounded_message(RuntimeError("y" * 600), max_length=100)
        assert len(message) == 100
        assert message.endswith("...")

    def test_bounded_message_uses_search_error_message(self):
        error = ProviderServiceError("brave", message="HTTP 500: boom")
        assert bounded_message(error) == "HTTP 500: boom"

    def test_bounded_message_names_empty_exceptions(self):
        assert bounded_message(TimeoutError()) == "TimeoutError"

    def test_http_error_response_for_search_error(self):
        error = QueryValidationError("Missing required param: query", query="")

        response = http_error_response(error)

        assert response["error_type"] == "QueryValidationError"
        assert response["message"] == "Missing required param: query"
        assert response["status_code"] == 400
        assert response["details"] == {"query": ""}

    def test_http_error_response_for_plain_exception(self):
        response = http_error_response(RuntimeError("bad"), status_code=500)
        assert response == {
            "error_type": "RuntimeError",
            "message": "bad",
            "status_code": 500,
        }
