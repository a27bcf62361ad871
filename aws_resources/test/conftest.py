import time
from collections.abc import Callable, Iterable
from typing import Any

import pytest
from botocore.exceptions import ClientError

from aws_resources.utils import config


class TimeMock:
    def __init__(self) -> None:
        self.current_time = 0.0
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.current_time

    def sleep(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("Negative value for sleep seconds not allowed")
        self.sleeps.append(seconds)
        self.current_time += seconds


@pytest.fixture
def time_mock() -> TimeMock:
    return TimeMock()


@pytest.fixture
def patch_sleep(mocker):
    yield mocker.patch.object(time, "sleep")


@pytest.fixture(autouse=True)
def reset_config() -> Iterable[None]:
    yield
    config.init(None)  # type: ignore[arg-type]


ClientErrorBuilder = Callable[[str, str], ClientError]


@pytest.fixture
def client_error() -> ClientErrorBuilder:
    def _client_error(code: str, operation_name: str = "Operation") -> ClientError:
        return ClientError(
            error_response={"Error": {"Code": code, "Message": f"{code} message"}},
            operation_name=operation_name,
        )

    return _client_error


def sequence(*items: Any) -> Callable[[], Any]:
    """Return a fetch function yielding ``items`` one after another.

    Exception instances are raised instead of returned.
    """
    iterator = iter(items)

    def _fetch() -> Any:
        item = next(iterator)
        if isinstance(item, Exception):
            raise item
        return item

    return _fetch
