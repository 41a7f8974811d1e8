"""Tests for the download retry handler."""

import pytest
import requests

from jvm.utils.retry import RetryHandler


class _Response:
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code


def _failing(exc: Exception, succeed_after: int | None = None):
    calls = {"count": 0}

    def _func():
        calls["count"] += 1
        if succeed_after is not None and calls["count"] > succeed_after:
            return "ok"
        raise exc

    return _func, calls


def test_zero_retries_calls_once() -> None:
    func, calls = _failing(requests.exceptions.ConnectionError("down"))
    with pytest.raises(requests.exceptions.ConnectionError):
        RetryHandler(max_retries=0, sleep=lambda _: None).execute(func)
    assert calls["count"] == 1


def test_retries_transient_errors_until_success() -> None:
    delays: list[float] = []
    func, calls = _failing(requests.exceptions.Timeout("slow"), succeed_after=2)

    result = RetryHandler(max_retries=3, jitter=False, sleep=delays.append).execute(func)

    assert result == "ok"
    assert calls["count"] == 3
    assert delays == [1.0, 2.0]


def test_server_errors_are_retried_client_errors_are_not() -> None:
    server_error = requests.exceptions.HTTPError("503", response=_Response(503))
    func, calls = _failing(server_error)
    with pytest.raises(requests.exceptions.HTTPError):
        RetryHandler(max_retries=2, sleep=lambda _: None).execute(func)
    assert calls["count"] == 3

    client_error = requests.exceptions.HTTPError("404", response=_Response(404))
    func, calls = _failing(client_error)
    with pytest.raises(requests.exceptions.HTTPError):
        RetryHandler(max_retries=2, sleep=lambda _: None).execute(func)
    assert calls["count"] == 1


def test_non_network_errors_propagate_immediately() -> None:
    func, calls = _failing(ValueError("bad"))
    with pytest.raises(ValueError):
        RetryHandler(max_retries=5, sleep=lambda _: None).execute(func)
    assert calls["count"] == 1


def test_delay_is_capped() -> None:
    handler = RetryHandler(base_delay=10, max_delay=15, jitter=False)
    assert handler._calculate_delay(0) == 10
    assert handler._calculate_delay(3) == 15
