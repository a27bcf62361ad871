from enum import StrEnum
from typing import TYPE_CHECKING, Any

import botocore
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from mypy_boto3_account import AccountClient
else:
    AccountClient = object

from aws_resources.utils.exceptions import (
    EmptyResultError,
    NotFoundError,
    TransientAPIError,
)

RESOURCE_NOT_FOUND = "ResourceNotFoundException"
TOO_MANY_REQUESTS = "TooManyRequestsException"


class AlternateContactType(StrEnum):
    BILLING = "BILLING"
    OPERATIONS = "OPERATIONS"
    SECURITY = "SECURITY"


class AlternateContact(BaseModel):
    alternate_contact_type: AlternateContactType = Field(
        ..., alias="AlternateContactType"
    )
    email_address: str = Field(..., alias="EmailAddress")
    name: str = Field(..., alias="Name")
    phone_number: str = Field(..., alias="PhoneNumber")
    title: str = Field(..., alias="Title")


def _error_code(e: botocore.exceptions.ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "")


class AWSApiAccount:
    def __init__(self, client: AccountClient) -> None:
        self.client = client

    @staticmethod
    def _input(contact_type: str, account_id: str, **kwargs: Any) -> dict[str, Any]:
        # an empty account id addresses the account of the calling credentials
        params: dict[str, Any] = {"AlternateContactType": contact_type, **kwargs}
        if account_id:
            params["AccountId"] = account_id
        return params

    def put_alternate_contact(
        self,
        contact_type: str,
        email: str,
        name: str,
        phone_number: str,
        title: str,
        account_id: str = "",
    ) -> None:
        """Create or replace an alternate contact."""
        params = self._input(
            contact_type,
            account_id,
            EmailAddress=email,
            Name=name,
            PhoneNumber=phone_number,
            Title=title,
        )
        try:
            self.client.put_alternate_contact(**params)
        except botocore.exceptions.ClientError as e:
            if _error_code(e) == TOO_MANY_REQUESTS:
                raise TransientAPIError(str(e)) from e
            raise

    def get_alternate_contact(
        self, contact_type: str, account_id: str = ""
    ) -> AlternateContact:
        """Get an alternate contact. Raises NotFoundError if it is not set."""
        params = self._input(contact_type, account_id)
        try:
            output = self.client.get_alternate_contact(**params)
        except botocore.exceptions.ClientError as e:
            code = _error_code(e)
            if code == RESOURCE_NOT_FOUND:
                raise NotFoundError(str(e), last_request=params) from e
            if code == TOO_MANY_REQUESTS:
                raise TransientAPIError(str(e)) from e
            raise

        if not output or not output.get("AlternateContact"):
            raise EmptyResultError(last_request=params)
        return AlternateContact(**output["AlternateContact"])

    def delete_alternate_contact(self, contact_type: str, account_id: str = "") -> None:
        """Delete an alternate contact. Raises NotFoundError if it is not set."""
        params = self._input(contact_type, account_id)
        try:
            self.client.delete_alternate_contact(**params)
        except botocore.exceptions.ClientError as e:
            if _error_code(e) == RESOURCE_NOT_FOUND:
                raise NotFoundError(str(e), last_request=params) from e
            raise
