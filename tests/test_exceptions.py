"""Tests for exceptions.py: exception hierarchy and status mapping."""

import pytest

from token_search.core.exceptions import (
    AdapterStatus,
    APIError,
    ConfigurationError,
    DataError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    InvalidQueryError,
    ParseError,
    RateLimitError,
    TokenSearchError,
    UpstreamRejectedError,
    UpstreamUnavailableError,
    ValidationError,
    get_retry_delay,
    status_for_error,
)


class TestTokenSearchError:
    @pytest.mark.asyncio
    async def test_basic_creation(self):
        e = TokenSearchError("test error")
        assert str(e) == "test error"
        assert e.severity == ErrorSeverity.ERROR
        assert e.category == ErrorCategory.API
        assert e.retryable is False

    @pytest.mark.asyncio
    async def test_to_dict(self):
        ctx = ErrorContext(source="DexScreener", suggestion="s", retry_after=5.0)
        e = TokenSearchError("fail", context=ctx, retryable=True)
        d = e.to_dict()
        assert d["error"] == "fail"
        assert d["source"] == "DexScreener"
        assert d["suggestion"] == "s"
        assert d["retry_after_seconds"] == 5.0
        assert d["retryable"] is True

    @pytest.mark.asyncio
    async def test_to_dict_minimal(self):
        d = TokenSearchError("fail").to_dict()
        assert "source" not in d
        assert "suggestion" not in d


class TestHierarchy:
    @pytest.mark.asyncio
    async def test_api_errors(self):
        for error in (
            RateLimitError(),
            UpstreamUnavailableError("down"),
            UpstreamRejectedError("bad request"),
        ):
            assert isinstance(error, APIError)
            assert isinstance(error, TokenSearchError)

    @pytest.mark.asyncio
    async def test_validation_errors(self):
        e = InvalidQueryError("a", "Query must be at least 2 characters long")
        assert isinstance(e, ValidationError)
        assert str(e) == "Query must be at least 2 characters long"
        assert e.category == ErrorCategory.VALIDATION
        assert e.context.input_value == "a"

    @pytest.mark.asyncio
    async def test_invalid_query_default_reason(self):
        assert str(InvalidQueryError(None)) == "Query parameter 'q' is required"

    @pytest.mark.asyncio
    async def test_parse_error(self):
        e = ParseError("bad shape", source="GeckoTerminal")
        assert isinstance(e, DataError)
        assert str(e) == "Parse error (GeckoTerminal): bad shape"

    @pytest.mark.asyncio
    async def test_configuration_error(self):
        e = ConfigurationError("broken")
        assert e.severity == ErrorSeverity.CRITICAL
        assert e.category == ErrorCategory.CONFIGURATION

    @pytest.mark.asyncio
    async def test_upstream_messages_carry_source(self):
        e = UpstreamUnavailableError("HTTP 503", source="DexScreener", status_code=503)
        assert str(e) == "DexScreener: HTTP 503"
        assert e.context.status_code == 503


class TestStatusForError:
    @pytest.mark.asyncio
    async def test_timeout(self):
        assert status_for_error(TimeoutError()) is AdapterStatus.TIMEOUT

    @pytest.mark.asyncio
    async def test_upstream(self):
        assert status_for_error(UpstreamUnavailableError("x")) is AdapterStatus.UPSTREAM_UNAVAILABLE
        assert status_for_error(UpstreamRejectedError("x")) is AdapterStatus.UPSTREAM_REJECTED
        assert status_for_error(RateLimitError()) is AdapterStatus.UPSTREAM_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_parse(self):
        assert status_for_error(ParseError("x")) is AdapterStatus.PARSE_ERROR

    @pytest.mark.asyncio
    async def test_unknown_exception(self):
        assert status_for_error(RuntimeError("boom")) is AdapterStatus.UPSTREAM_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_failure_flags(self):
        assert not AdapterStatus.SUCCEEDED.is_failure
        assert not AdapterStatus.SKIPPED.is_failure
        assert AdapterStatus.TIMEOUT.is_failure
        assert AdapterStatus.PARSE_ERROR.is_failure


class TestRetryHelpers:
    @pytest.mark.asyncio
    async def test_retryable(self):
        assert RateLimitError().retryable
        assert UpstreamUnavailableError("x").retryable
        assert not UpstreamRejectedError("x").retryable

    @pytest.mark.asyncio
    async def test_retry_delay_uses_retry_after(self):
        delay = get_retry_delay(RateLimitError(retry_after=2.0), 0)
        assert 2.0 <= delay <= 2.2

    @pytest.mark.asyncio
    async def test_retry_delay_exponential_and_capped(self):
        first = get_retry_delay(Exception("x"), 0)
        second = get_retry_delay(Exception("x"), 1)
        assert first < second
        assert get_retry_delay(Exception("x"), 20) == 5.0
