from typing import Any


class NotFoundError(Exception):
    """The remote resource does not exist (or does not exist yet)."""

    def __init__(self, msg: Any, last_request: Any = None) -> None:
        super().__init__(str(msg))
        self.last_request = last_request


class EmptyResultError(NotFoundError):
    def __init__(self, last_request: Any = None) -> None:
        super().__init__("empty result", last_request=last_request)


class TransientAPIError(Exception):
    """A retryable API error that is not a missing resource."""


class WaitTimeoutError(TimeoutError):
    def __init__(self, timeout: float, last_error: BaseException | None = None) -> None:
        msg = f"timeout while waiting for resource to become consistent after {timeout}s"
        if last_error is not None:
            msg += f" (last error: {last_error})"
        super().__init__(msg)
        self.timeout = timeout
        self.last_error = last_error


class PollCancelledError(Exception):
    def __init__(self) -> None:
        super().__init__("waiting for resource was cancelled")


class ResourceIdFormatError(ValueError):
    pass


class SecretGenerationError(Exception):
    pass


class PasswordGenerationError(SecretGenerationError):
    pass


class RandomSourceError(SecretGenerationError):
    pass


class ResourceOperationError(Exception):
    """A resource handler operation failed.

    The message always names the resource identifier and the underlying cause.
    """
