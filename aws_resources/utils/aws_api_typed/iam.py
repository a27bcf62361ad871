from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import botocore
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from mypy_boto3_iam import IAMClient

from aws_resources.utils.exceptions import (
    EmptyResultError,
    NotFoundError,
    TransientAPIError,
)

NO_SUCH_ENTITY = "NoSuchEntity"
ENTITY_TEMPORARILY_UNMODIFIABLE = "EntityTemporarilyUnmodifiable"


class AWSLoginProfile(BaseModel):
    user_name: str = Field(..., alias="UserName")
    create_date: datetime | None = Field(None, alias="CreateDate")
    password_reset_required: bool = Field(False, alias="PasswordResetRequired")


class AWSApiIam:
    def __init__(self, client: IAMClient) -> None:
        self.client = client

    def create_login_profile(
        self, user_name: str, password: str, password_reset_required: bool = False
    ) -> AWSLoginProfile:
        """Create a console login profile for a given user."""
        output = self.client.create_login_profile(
            UserName=user_name,
            Password=password,
            PasswordResetRequired=password_reset_required,
        )
        return AWSLoginProfile(**output["LoginProfile"])

    def get_login_profile(self, user_name: str) -> AWSLoginProfile:
        """Get the login profile of a user. Raises NotFoundError if there is none."""
        try:
            output = self.client.get_login_profile(UserName=user_name)
        except botocore.exceptions.ClientError as e:
            if e.response["Error"]["Code"] == NO_SUCH_ENTITY:
                raise NotFoundError(
                    str(e), last_request={"UserName": user_name}
                ) from e
            raise
        if not output or not output.get("LoginProfile"):
            raise EmptyResultError(last_request={"UserName": user_name})
        return AWSLoginProfile(**output["LoginProfile"])

    def delete_login_profile(self, user_name: str) -> None:
        """Delete the login profile of a user.

        Raises NotFoundError if there is none and TransientAPIError while the
        profile is still being created.
        """
        try:
            self.client.delete_login_profile(UserName=user_name)
        except botocore.exceptions.ClientError as e:
            code = e.response["Error"]["Code"]
            if code == NO_SUCH_ENTITY:
                raise NotFoundError(
                    str(e), last_request={"UserName": user_name}
                ) from e
            # the profile can't be modified while it is being created
            if code == ENTITY_TEMPORARILY_UNMODIFIABLE:
                raise TransientAPIError(str(e)) from e
            raise
