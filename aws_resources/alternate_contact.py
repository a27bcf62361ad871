"""Manage the alternate contacts (billing, operations, security) of an AWS account.

The resource id is ``<account_id>/<contact_type>``. The account id is
optional, an empty one addresses the account of the calling credentials.
"""

import logging
import threading
import time

from pydantic import BaseModel, Field

from aws_resources.utils.aws_api_typed.account import (
    AlternateContact,
    AlternateContactType,
    AWSApiAccount,
)
from aws_resources.utils.exceptions import (
    NotFoundError,
    PollCancelledError,
    ResourceIdFormatError,
    ResourceOperationError,
)
from aws_resources.utils.poller import (
    Poller,
    TimeProtocol,
    until,
    until_found_n,
    until_not_found,
)
from aws_resources.utils.resource_id import create_resource_id, parse_resource_id
from aws_resources.utils.timeouts import Timeouts

RESOURCE_NAME = "Account Alternate Contact"

# GetAlternateContact flips between found and not found for a short while
# after a PutAlternateContact
CREATE_FOUND_IN_A_ROW = 2

ACCOUNT_ID_REGEX = r"^(\d{12})?$"
EMAIL_ADDRESS_REGEX = r"[\w+=,.-]+@[\w.-]+\.[\w]+"
PHONE_NUMBER_REGEX = r"^[\s0-9()+-]+$"


class AlternateContactSpec(BaseModel, extra="forbid"):
    account_id: str = Field("", pattern=ACCOUNT_ID_REGEX)
    alternate_contact_type: AlternateContactType
    email_address: str = Field(..., pattern=EMAIL_ADDRESS_REGEX)
    name: str = Field(..., min_length=1, max_length=64)
    phone_number: str = Field(..., pattern=PHONE_NUMBER_REGEX)
    title: str = Field(..., min_length=1, max_length=50)

    @property
    def resource_id(self) -> str:
        return create_resource_id(self.account_id, self.alternate_contact_type)

    def requires_replace(self, other: "AlternateContactSpec") -> bool:
        """Account and contact type can't be changed in place."""
        return (
            self.account_id != other.account_id
            or self.alternate_contact_type != other.alternate_contact_type
        )

    def matches(self, contact: AlternateContact) -> bool:
        return (
            self.email_address == contact.email_address
            and self.name == contact.name
            and self.phone_number == contact.phone_number
            and self.title == contact.title
        )


class AlternateContactState(BaseModel):
    id: str
    account_id: str
    alternate_contact_type: AlternateContactType
    email_address: str
    name: str
    phone_number: str
    title: str


class AlternateContactResource:
    def __init__(
        self,
        api: AWSApiAccount,
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

    def _parse_id(self, resource_id: str) -> tuple[str, str]:
        try:
            return parse_resource_id(resource_id)
        except ResourceIdFormatError as e:
            raise ResourceIdFormatError(
                f"unexpected format for ID ({resource_id}), expected ContactType or AccountID/ContactType"
            ) from e

    def find(self, account_id: str, contact_type: str) -> AlternateContact:
        return self.api.get_alternate_contact(
            contact_type=contact_type, account_id=account_id
        )

    def create(self, spec: AlternateContactSpec) -> AlternateContactState:
        resource_id = spec.resource_id
        try:
            self.api.put_alternate_contact(
                contact_type=spec.alternate_contact_type,
                email=spec.email_address,
                name=spec.name,
                phone_number=spec.phone_number,
                title=spec.title,
                account_id=spec.account_id,
            )
        except Exception as e:
            raise ResourceOperationError(
                f"creating {RESOURCE_NAME} ({resource_id}): {e}"
            ) from e

        try:
            self._poller(self.timeouts.create).run(
                lambda: self.find(spec.account_id, spec.alternate_contact_type),
                until_found_n(CREATE_FOUND_IN_A_ROW),
            )
        except PollCancelledError:
            raise
        except Exception as e:
            raise ResourceOperationError(
                f"waiting for {RESOURCE_NAME} ({resource_id}) create: {e}"
            ) from e

        state = self.read(resource_id, new_resource=True)
        assert state is not None
        return state

    def read(
        self, resource_id: str, new_resource: bool = False
    ) -> AlternateContactState | None:
        """Read the contact. Returns None if it was removed outside of our control."""
        account_id, contact_type = self._parse_id(resource_id)
        try:
            contact = self.find(account_id, contact_type)
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

        return AlternateContactState(
            id=resource_id,
            account_id=account_id,
            alternate_contact_type=contact.alternate_contact_type,
            email_address=contact.email_address,
            name=contact.name,
            phone_number=contact.phone_number,
            title=contact.title,
        )

    def update(
        self, resource_id: str, spec: AlternateContactSpec
    ) -> AlternateContactState:
        account_id, contact_type = self._parse_id(resource_id)
        if (account_id, contact_type) != (
            spec.account_id,
            spec.alternate_contact_type,
        ):
            raise ResourceOperationError(
                f"updating {RESOURCE_NAME} ({resource_id}): account_id and "
                "alternate_contact_type can't be changed, the contact must be replaced"
            )
        try:
            self.api.put_alternate_contact(
                contact_type=contact_type,
                email=spec.email_address,
                name=spec.name,
                phone_number=spec.phone_number,
                title=spec.title,
                account_id=account_id,
            )
        except Exception as e:
            raise ResourceOperationError(
                f"updating {RESOURCE_NAME} ({resource_id}): {e}"
            ) from e

        try:
            self._poller(self.timeouts.update).run(
                lambda: self.find(account_id, contact_type),
                until(lambda c: c is not None and spec.matches(c)),
            )
        except PollCancelledError:
            raise
        except Exception as e:
            raise ResourceOperationError(
                f"waiting for {RESOURCE_NAME} ({resource_id}) update: {e}"
            ) from e

        state = self.read(resource_id, new_resource=True)
        assert state is not None
        return state

    def delete(self, resource_id: str) -> None:
        account_id, contact_type = self._parse_id(resource_id)

        logging.debug(f"Deleting {RESOURCE_NAME}: {resource_id}")
        try:
            self.api.delete_alternate_contact(
                contact_type=contact_type, account_id=account_id
            )
        except NotFoundError:
            return
        except Exception as e:
            raise ResourceOperationError(
                f"deleting {RESOURCE_NAME} ({resource_id}): {e}"
            ) from e

        try:
            self._poller(self.timeouts.delete).run(
                lambda: self.find(account_id, contact_type),
                until_not_found(),
            )
        except PollCancelledError:
            raise
        except Exception as e:
            raise ResourceOperationError(
                f"waiting for {RESOURCE_NAME} ({resource_id}) delete: {e}"
            ) from e

    def import_(self, resource_id: str) -> AlternateContactState:
        state = self.read(resource_id)
        if state is None:
            raise ResourceOperationError(
                f"importing {RESOURCE_NAME} ({resource_id}): cannot import non-existent remote object"
            )
        return state
