"""Polling helpers to wait for eventually consistent AWS APIs.

A mutating API call returning successfully does not mean that subsequent
reads see the change. ``poll`` repeatedly calls a read-only ``fetch``
function and asks a predicate whether the observed state is the expected
one:

    contact = poll(
        lambda: api.account.get_alternate_contact(contact_type="SECURITY"),
        until_found_n(2),
        timeout=300,
    )

A predicate gets the fetched value (or ``None``) and the exception raised by
``fetch`` (or ``None``) and returns a ``(retry, terminal_error)`` tuple.
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Any, Protocol

from aws_resources.utils.exceptions import (
    NotFoundError,
    PollCancelledError,
    TransientAPIError,
    WaitTimeoutError,
)

DEFAULT_MIN_DELAY_SECONDS = 0.5
DEFAULT_MAX_DELAY_SECONDS = 10.0

type Predicate[T] = Callable[
    [T | None, Exception | None], tuple[bool, Exception | None]
]

log = logging.getLogger(__name__)


class TimeProtocol(Protocol):
    def time(self) -> float: ...

    def sleep(self, seconds: float) -> None: ...


def _retryable(error: Exception) -> bool:
    return isinstance(error, NotFoundError | TransientAPIError)


def until_found_n[T](n: int) -> Predicate[T]:
    """Satisfied once the resource was found on ``n`` consecutive polls.

    Some APIs flip between found and not found for a while after a write, a
    single successful read is not enough to trust the change.

    The predicate counts across calls, every poll needs a fresh one.
    """
    if n < 1:
        raise ValueError(f"n must be a positive number, got {n}")
    found_in_a_row = 0

    def _predicate(
        value: T | None, error: Exception | None
    ) -> tuple[bool, Exception | None]:
        nonlocal found_in_a_row
        if error is not None:
            found_in_a_row = 0
            if _retryable(error):
                return True, None
            return False, error
        found_in_a_row += 1
        return found_in_a_row < n, None

    return _predicate


def until_found[T]() -> Predicate[T]:
    return until_found_n(1)


def until_not_found[T]() -> Predicate[T]:
    """Satisfied once fetching the resource raises NotFoundError."""

    def _predicate(
        value: T | None, error: Exception | None
    ) -> tuple[bool, Exception | None]:
        if isinstance(error, NotFoundError):
            return False, None
        if isinstance(error, TransientAPIError):
            return True, None
        if error is not None:
            return False, error
        return True, None

    return _predicate


def until[T](condition: Callable[[T | None], bool]) -> Predicate[T]:
    """Satisfied once ``condition`` holds for the fetched value.

    ``condition`` gets whatever ``fetch`` returned, ``None`` included.
    """

    def _predicate(
        value: T | None, error: Exception | None
    ) -> tuple[bool, Exception | None]:
        if error is not None:
            if _retryable(error):
                return True, None
            return False, error
        return not condition(value), None

    return _predicate


class Poller:
    """Calls a fetch function until a predicate is satisfied.

    Waits between attempts start at ``min_delay`` seconds, double after each
    attempt and are capped at ``max_delay`` seconds. A wait never exceeds the
    time left until ``timeout``.

    If a ``cancel`` event is given, waits happen on that event instead of
    ``time_module.sleep`` and setting it aborts the poll with
    PollCancelledError.
    """

    def __init__(
        self,
        timeout: float,
        min_delay: float = DEFAULT_MIN_DELAY_SECONDS,
        max_delay: float = DEFAULT_MAX_DELAY_SECONDS,
        cancel: threading.Event | None = None,
        time_module: TimeProtocol = time,
    ) -> None:
        if timeout < 0:
            raise ValueError(f"timeout must not be negative, got {timeout}")
        if min_delay <= 0 or max_delay < min_delay:
            raise ValueError(
                f"invalid delays: min_delay={min_delay}, max_delay={max_delay}"
            )
        self.timeout = timeout
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.cancel = cancel
        self.time_module = time_module

    def run[T](self, fetch: Callable[[], T], predicate: Predicate[T]) -> T | None:
        start_time = self.time_module.time()
        delay = self.min_delay
        attempt = 0
        while True:
            self._check_cancelled()
            attempt += 1
            value: T | None = None
            error: Exception | None = None
            try:
                value = fetch()
            except Exception as e:
                error = e

            retry, terminal_error = predicate(value, error)
            if terminal_error is not None:
                raise terminal_error
            if not retry:
                return value

            elapsed_time = self.time_module.time() - start_time
            if elapsed_time >= self.timeout:
                raise WaitTimeoutError(self.timeout, last_error=error) from error
            log.debug(f"attempt {attempt} not satisfied yet (error: {error})")
            self._sleep_until_timeout(elapsed_time, delay)
            delay = min(delay * 2, self.max_delay)

    def _check_cancelled(self) -> None:
        if self.cancel is not None and self.cancel.is_set():
            raise PollCancelledError()

    def _sleep_until_timeout(self, elapsed_time: float, delay: float) -> None:
        sleep_interval_seconds = min(delay, self.timeout - elapsed_time)
        if sleep_interval_seconds <= 0:
            return
        if self.cancel is None:
            self.time_module.sleep(sleep_interval_seconds)
        elif self.cancel.wait(sleep_interval_seconds):
            raise PollCancelledError()


def poll[T](
    fetch: Callable[[], T],
    predicate: Predicate[T],
    timeout: float,
    **kwargs: Any,
) -> T | None:
    return Poller(timeout=timeout, **kwargs).run(fetch, predicate)
