"""Tests for retry policies and hooks"""

from __future__ import annotations

import json
import logging
from unittest.mock import Mock

import pytest
import requests

from retry_mini import execute, get_status_code, is_transient_error, log_retry, retry_on_exceptions


def _make_response(status_code: int, payload: dict | None = None) -> requests.Response:
    r = requests.Response()
    r.status_code = status_code
    r.url = "http://example.test"
    if payload is None:
        payload = {}
    r._content = json.dumps(payload).encode("utf-8")  # type: ignore[attr-defined]
    r.headers["Content-Type"] = "application/json"
    return r


def _http_error(status_code: int) -> requests.HTTPError:
    response = _make_response(status_code, {"error": "boom"})
    return requests.HTTPError(f"{status_code} error", response=response)


class GitlabLikeError(Exception):
    def __init__(self, message: str, response_code: int):
        super().__init__(message)
        self.response_code = response_code


class TestGetStatusCode:
    """Tests for get_status_code"""

    def test_from_requests_error(self):
        """Test status read from a requests response"""
        assert get_status_code(_http_error(503)) == 503

    def test_from_attributes(self):
        """Test response_code and status attributes"""
        assert get_status_code(GitlabLikeError("nope", 404)) == 404

        error = RuntimeError("x")
        error.status = 429  # type: ignore[attr-defined]
        assert get_status_code(error) == 429

    def test_missing(self):
        """Test errors without any status"""
        assert get_status_code(RuntimeError("no status")) is None
        assert get_status_code(requests.ConnectionError("down")) is None


class TestIsTransientError:
    """Tests for is_transient_error"""

    @pytest.mark.parametrize(
        "status_code, expected",
        [
            (401, False),
            (403, False),
            (404, False),
            (422, False),
            (408, True),
            (429, True),
            (500, True),
            (503, True),
        ],
    )
    def test_by_status(self, status_code, expected):
        """Test classification by status code"""
        assert is_transient_error(_http_error(status_code), 0) is expected
        assert is_transient_error(GitlabLikeError("e", status_code), 0) is expected

    def test_network_errors_are_transient(self):
        """Test connection errors and timeouts are retried"""
        assert is_transient_error(requests.ConnectionError("down"), 0) is True
        assert is_transient_error(requests.Timeout("slow"), 1) is True

    def test_errors_without_status_are_transient(self):
        """Test unknown errors are retried"""
        assert is_transient_error(ValueError("unknown"), 2) is True


class TestRetryOnExceptions:
    """Tests for retry_on_exceptions"""

    def test_matches_given_types(self):
        """Test only listed types are retried"""
        should_retry = retry_on_exceptions(ConnectionError, TimeoutError)

        assert should_retry(ConnectionError("x"), 0) is True
        assert should_retry(TimeoutError("x"), 0) is True
        assert should_retry(ValueError("x"), 0) is False

    def test_requires_types(self):
        """Test that at least one type is needed"""
        with pytest.raises(ValueError, match="At least one exception type"):
            retry_on_exceptions()


class TestLogRetry:
    """Tests for the log_retry hook"""

    def test_writes_warning(self, caplog):
        """Test default WARNING message"""
        hook = log_retry(logging.getLogger("tests.retry"))

        with caplog.at_level(logging.WARNING, logger="tests.retry"):
            hook(RuntimeError("boom"), 0)

        assert "Attempt 1 failed: boom. Retrying..." in caplog.text
        assert caplog.records[0].levelno == logging.WARNING

    def test_custom_level(self, caplog):
        """Test custom level on the module logger"""
        hook = log_retry(level=logging.INFO)

        with caplog.at_level(logging.INFO, logger="retry_mini.infrastructure.policies"):
            hook(RuntimeError("boom"), 2)

        assert caplog.records[0].levelno == logging.INFO
        assert "Attempt 3 failed" in caplog.text


class TestPoliciesWithExecute:
    """Tests for policies driving execute"""

    @pytest.mark.asyncio
    async def test_retries_on_5xx(self):
        """Test a 500 response is retried"""
        calls = {"n": 0}

        def fake_post(attempt):
            calls["n"] += 1
            resp = _make_response(500 if calls["n"] == 1 else 200, {"ok": calls["n"] > 1})
            resp.raise_for_status()
            return resp

        sleep_calls = []

        async def mock_sleep(delay):
            sleep_calls.append(delay)

        resp = await execute(
            fake_post,
            max_retries=1,
            base_delay=100,
            should_retry=is_transient_error,
            sleep=mock_sleep,
        )
        assert resp.status_code == 200
        assert calls["n"] == 2
        assert sleep_calls == [0.1]

    @pytest.mark.asyncio
    async def test_does_not_retry_on_401(self):
        """Test an auth error stops at once"""
        task = Mock(side_effect=_http_error(401))
        on_retry = Mock()

        with pytest.raises(requests.HTTPError) as exc_info:
            await execute(task, max_retries=3, should_retry=is_transient_error, on_retry=on_retry)

        assert exc_info.value.response.status_code == 401
        task.assert_called_once()
        on_retry.assert_not_called()

    @pytest.mark.asyncio
    async def test_logging_hook(self, caplog):
        """Test log_retry as on_retry"""
        task = Mock(side_effect=[requests.ConnectionError("reset"), "ok"])

        with caplog.at_level(logging.WARNING, logger="retry_mini.infrastructure.policies"):
            result = await execute(task, max_retries=1, on_retry=log_retry())

        assert result == "ok"
        assert "Attempt 1 failed: reset" in caplog.text
