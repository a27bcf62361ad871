"""Manage the console login profile (password) of an IAM user.

The password is generated when the profile is created and is never readable
from AWS afterwards. It is either returned in plain text or, if a PGP key is
given, encrypted with that key.
"""

import logging
import threading
import time

from pydantic import BaseModel, Field

from aws_resources.utils import gpg
from aws_resources.utils.aws_api_typed.iam import AWSApiIam, AWSLoginProfile
from aws_resources.utils.exceptions import (
    NotFoundError,
    PollCancelledError,
    ResourceOperationError,
    TransientAPIError,
    WaitTimeoutError,
)
from aws_resources.utils.password import (
    DEFAULT_PASSWORD_LENGTH,
    MAX_PASSWORD_LENGTH,
    MIN_PASSWORD_LENGTH,
    generate_password,
)
from aws_resources.utils.poller import Poller, TimeProtocol, until_found
from aws_resources.utils.timeouts import Timeouts

RESOURCE_NAME = "IAM User Login Profile"


class LoginProfileSpec(BaseModel, extra="forbid"):
    user: str = Field(..., min_length=1)
    pgp_key: str | None = None
    password_reset_required: bool | None = None
    password_length: int = Field(
        DEFAULT_PASSWORD_LENGTH, ge=MIN_PASSWORD_LENGTH, le=MAX_PASSWORD_LENGTH
    )


class LoginProfileState(BaseModel):
    id: str
    user: str
    password_reset_required: bool
    pgp_key: str | None = None
    password_length: int | None = None
    password: str | None = None
    encrypted_password: str | None = None
    key_fingerprint: str | None = None


def _deleted(
    value: None, error: Exception | None
) -> tuple[bool, Exception | None]:
    if error is None or isinstance(error, NotFoundError):
        return False, None
    if isinstance(error, TransientAPIError):
        return True, None
    return False, error


class LoginProfileResource:
    def __init__(
        self,
        api: AWSApiIam,
        timeouts: Timeouts | None = None,
        cancel: threading.Event | None = None,
        time_module: TimeProtocol = time,
    ) -> None:
        self.api = api
        self.timeouts = timeouts or Timeouts()
        self.cancel = cancel
        self.time_module = time_module

    def _poller(self, timeout: float) -> Poller:
        return Poller(
            timeout=timeout, cancel=self.cancel, time_module=self.time_module
        )

    def create(self, spec: LoginProfileSpec) -> LoginProfileState:
        user_name = spec.user
        try:
            # resolve the key first, a bad key must not leave a profile behind
            public_key = gpg.retrieve_gpg_key(spec.pgp_key) if spec.pgp_key else None
            initial_password = generate_password(spec.password_length)
            login_profile = self.api.create_login_profile(
                user_name=user_name,
                password=initial_password,
                password_reset_required=bool(spec.password_reset_required),
            )
        except Exception as e:
            raise ResourceOperationError(
                f'creating {RESOURCE_NAME} for "{user_name}": {e}'
            ) from e

        state = LoginProfileState(
            id=login_profile.user_name,
            user=login_profile.user_name,
            password_reset_required=login_profile.password_reset_required,
            pgp_key=spec.pgp_key,
            password_length=spec.password_length,
        )

        if public_key is None:
            state.password = initial_password
            return state

        try:
            fingerprint, encrypted = gpg.gpg_encrypt(initial_password, public_key)
        except Exception as e:
            raise ResourceOperationError(
                f'encrypting password of {RESOURCE_NAME} for "{user_name}": {e}. '
                "The profile was created, delete it before creating it again"
            ) from e
        state.key_fingerprint = fingerprint
        state.encrypted_password = encrypted
        return state

    def _get(self, user_name: str, new_resource: bool) -> AWSLoginProfile:
        if not new_resource:
            return self.api.get_login_profile(user_name)

        # a fresh profile may not be visible yet
        try:
            login_profile = self._poller(self.timeouts.propagation).run(
                lambda: self.api.get_login_profile(user_name),
                until_found(),
            )
        except WaitTimeoutError:
            login_profile = self.api.get_login_profile(user_name)
        assert login_profile is not None
        return login_profile

    def read(
        self,
        resource_id: str,
        prior: LoginProfileState | None = None,
        new_resource: bool = False,
    ) -> LoginProfileState | None:
        """Read the login profile.

        Password and encryption details can't be read from AWS, they are
        carried over from ``prior``. Returns None if the profile was removed
        outside of our control.
        """
        try:
            login_profile = self._get(resource_id, new_resource)
        except PollCancelledError:
            raise
        except NotFoundError as e:
            if not new_resource:
                logging.warning(
                    f"{RESOURCE_NAME} ({resource_id}) not found, removing from state"
                )
                return None
            raise ResourceOperationError(
                f"reading {RESOURCE_NAME} ({resource_id}): {e}"
            ) from e
        except Exception as e:
            raise ResourceOperationError(
                f"reading {RESOURCE_NAME} ({resource_id}): {e}"
            ) from e

        update = {
            "id": resource_id,
            "user": login_profile.user_name,
            "password_reset_required": login_profile.password_reset_required,
        }
        if prior is not None:
            return prior.model_copy(update=update)
        return LoginProfileState(**update)

    def delete(self, resource_id: str) -> None:
        logging.debug(f"Deleting {RESOURCE_NAME} ({resource_id})")
        try:
            try:
                self._poller(self.timeouts.propagation).run(
                    lambda: self.api.delete_login_profile(resource_id),
                    _deleted,
                )
            except WaitTimeoutError:
                self.api.delete_login_profile(resource_id)
        except PollCancelledError:
            raise
        except NotFoundError:
            return
        except Exception as e:
            raise ResourceOperationError(
                f"deleting {RESOURCE_NAME} ({resource_id}): {e}"
            ) from e

    def import_(self, resource_id: str) -> LoginProfileState:
        state = self.read(resource_id)
        if state is None:
            raise ResourceOperationError(
                f"importing {RESOURCE_NAME} ({resource_id}): cannot import non-existent remote object"
            )
        state.encrypted_password = None
        state.key_fingerprint = None
        return state
