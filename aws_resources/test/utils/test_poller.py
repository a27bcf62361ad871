import threading
import time
from typing import Any

import pytest
from pytest_mock import MockerFixture

from aws_resources.test.conftest import TimeMock, sequence
from aws_resources.utils.exceptions import (
    NotFoundError,
    PollCancelledError,
    TransientAPIError,
    WaitTimeoutError,
)
from aws_resources.utils.poller import (
    Poller,
    poll,
    until,
    until_found,
    until_found_n,
    until_not_found,
)


@pytest.fixture
def poller(time_mock: TimeMock) -> Poller:
    return Poller(timeout=300, time_module=time_mock)


def counting(fetch: Any) -> tuple[Any, list[int]]:
    calls: list[int] = []

    def _fetch() -> Any:
        calls.append(1)
        return fetch()

    return _fetch, calls


#
# until_found_n
#


def test_until_found_n_requires_consecutive_found(
    poller: Poller, time_mock: TimeMock
) -> None:
    fetch, calls = counting(
        sequence(
            NotFoundError("not yet"),
            "first",
            NotFoundError("stale"),
            "second",
            "third",
        )
    )
    assert poller.run(fetch, until_found_n(2)) == "third"
    assert len(calls) == 5
    assert time_mock.sleeps == [0.5, 1, 2, 4]


def test_until_found_n_one(poller: Poller, time_mock: TimeMock) -> None:
    assert poller.run(sequence("found"), until_found_n(1)) == "found"
    assert time_mock.time() == 0


def test_until_found_retries_not_found(poller: Poller) -> None:
    fetch = sequence(NotFoundError("not yet"), NotFoundError("not yet"), "found")
    assert poller.run(fetch, until_found()) == "found"


def test_until_found_n_three(poller: Poller) -> None:
    fetch, calls = counting(sequence("a", "b", NotFoundError("stale"), "c", "d", "e"))
    assert poller.run(fetch, until_found_n(3)) == "e"
    assert len(calls) == 6


@pytest.mark.parametrize("n", [0, -1])
def test_until_found_n_invalid(n: int) -> None:
    with pytest.raises(ValueError):
        until_found_n(n)


def test_until_found_n_timeout(time_mock: TimeMock) -> None:
    poller = Poller(timeout=5, time_module=time_mock)

    def fetch() -> str:
        raise NotFoundError("never there")

    with pytest.raises(WaitTimeoutError) as e:
        poller.run(fetch, until_found_n(2))

    assert isinstance(e.value.last_error, NotFoundError)
    assert isinstance(e.value, TimeoutError)
    assert time_mock.time() == 5


#
# until_not_found
#


def test_until_not_found(poller: Poller, time_mock: TimeMock) -> None:
    fetch, calls = counting(sequence("found", "found", NotFoundError("gone")))
    assert poller.run(fetch, until_not_found()) is None
    assert len(calls) == 3
    assert time_mock.time() == 1.5


def test_until_not_found_timeout(time_mock: TimeMock) -> None:
    poller = Poller(timeout=5, time_module=time_mock)
    with pytest.raises(WaitTimeoutError) as e:
        poller.run(lambda: "still there", until_not_found())

    assert e.value.last_error is None
    # 0.5 + 1 + 2 and then only the time left until the deadline
    assert time_mock.sleeps == [0.5, 1, 2, 1.5]


#
# until
#


def test_until_converges(poller: Poller) -> None:
    written = {"email": "new@example.com", "phone": "+1 555"}
    fetch, calls = counting(
        sequence(
            {"email": "old@example.com", "phone": "+1 000"},
            {"email": "new@example.com", "phone": "+1 000"},
            {"email": "new@example.com", "phone": "+1 555"},
            {"email": "never@example.com", "phone": "+1 000"},
        )
    )

    result = poller.run(fetch, until(lambda v: v == written))

    assert result == written
    assert len(calls) == 3


def test_until_mismatch_times_out(time_mock: TimeMock) -> None:
    poller = Poller(timeout=60, time_module=time_mock)
    written = {"email": "new@example.com", "phone": "+1 555"}

    with pytest.raises(WaitTimeoutError):
        poller.run(
            lambda: {"email": "new@example.com", "phone": "+1 000"},
            until(lambda v: v == written),
        )
    assert time_mock.time() == 60


def test_until_retries_not_found(poller: Poller) -> None:
    fetch = sequence(NotFoundError("not yet"), 42)
    assert poller.run(fetch, until(lambda v: v == 42)) == 42


def test_until_fetch_returning_none(time_mock: TimeMock) -> None:
    seen: list[Any] = []

    def condition(value: Any) -> bool:
        seen.append(value)
        return len(seen) == 2

    assert poll(lambda: None, until(condition), timeout=1, time_module=time_mock) is None
    assert seen == [None, None]
    assert time_mock.sleeps == [0.5]


#
# errors
#


@pytest.mark.parametrize(
    "predicate",
    [until_found_n(2), until_not_found(), until(lambda v: True)],
)
def test_terminal_error_is_raised_immediately(
    poller: Poller, time_mock: TimeMock, predicate: Any
) -> None:
    fetch, calls = counting(sequence(RuntimeError("access denied"), "found"))

    with pytest.raises(RuntimeError, match="access denied"):
        poller.run(fetch, predicate)

    assert len(calls) == 1
    assert time_mock.time() == 0


@pytest.mark.parametrize(
    "predicate, items, expected",
    [
        (until_found_n(2), ["a", TransientAPIError("throttled"), "b", "c"], "c"),
        (until_not_found(), [TransientAPIError("busy"), NotFoundError("gone")], None),
        (until(lambda v: v == "b"), [TransientAPIError("throttled"), "b"], "b"),
    ],
)
def test_transient_errors_are_retried(
    poller: Poller, predicate: Any, items: list[Any], expected: Any
) -> None:
    assert poller.run(sequence(*items), predicate) == expected


def test_custom_predicate_terminal_error(poller: Poller) -> None:
    def predicate(value: Any, error: Exception | None) -> tuple[bool, Exception | None]:
        if value == "bad":
            return False, ValueError("unexpected value")
        return True, None

    with pytest.raises(ValueError, match="unexpected value"):
        poller.run(sequence("good", "bad"), predicate)


def test_zero_timeout_single_attempt(time_mock: TimeMock) -> None:
    poller = Poller(timeout=0, time_module=time_mock)
    fetch, calls = counting(sequence(NotFoundError("not yet"), "found"))

    with pytest.raises(WaitTimeoutError) as e:
        poller.run(fetch, until_found())

    assert len(calls) == 1
    assert isinstance(e.value.__cause__, NotFoundError)


#
# backoff
#


def test_backoff_is_capped(time_mock: TimeMock) -> None:
    poller = Poller(timeout=300, time_module=time_mock)
    fetch = sequence(*[NotFoundError("not yet")] * 8, "found")

    assert poller.run(fetch, until_found()) == "found"
    assert time_mock.sleeps == [0.5, 1, 2, 4, 8, 10, 10, 10]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"timeout": -1},
        {"timeout": 10, "min_delay": 0},
        {"timeout": 10, "min_delay": 5, "max_delay": 1},
    ],
)
def test_poller_invalid_settings(kwargs: dict[str, Any]) -> None:
    with pytest.raises(ValueError):
        Poller(**kwargs)


def test_poll(time_mock: TimeMock) -> None:
    fetch = sequence(NotFoundError("not yet"), "found", "found")
    assert poll(fetch, until_found_n(2), timeout=10, time_module=time_mock) == "found"


def test_poll_uses_time_sleep(patch_sleep: Any) -> None:
    fetch = sequence(NotFoundError("not yet"), "found")
    assert poll(fetch, until_found(), timeout=10) == "found"
    patch_sleep.assert_called_once_with(0.5)


#
# cancellation
#


def test_cancelled_before_first_attempt(mocker: MockerFixture) -> None:
    cancel = threading.Event()
    cancel.set()
    fetch = mocker.Mock()

    with pytest.raises(PollCancelledError):
        Poller(timeout=60, cancel=cancel).run(fetch, until_found())

    fetch.assert_not_called()


def test_cancelled_while_waiting() -> None:
    cancel = threading.Event()
    poller = Poller(timeout=60, min_delay=30, max_delay=30, cancel=cancel)

    def fetch() -> str:
        raise NotFoundError("not yet")

    timer = threading.Timer(0.05, cancel.set)
    timer.start()
    start = time.monotonic()
    try:
        with pytest.raises(PollCancelledError):
            poller.run(fetch, until_found())
    finally:
        timer.cancel()

    assert time.monotonic() - start < 10


def test_cancelled_is_not_a_timeout() -> None:
    cancel = threading.Event()

    def fetch() -> str:
        cancel.set()
        raise NotFoundError("not yet")

    with pytest.raises(PollCancelledError) as e:
        Poller(timeout=60, cancel=cancel).run(fetch, until_found())

    assert not isinstance(e.value, TimeoutError)
