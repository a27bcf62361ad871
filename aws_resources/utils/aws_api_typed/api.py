from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cached_property
from typing import Any, TypeVar

from boto3 import Session
from botocore.client import BaseClient
from pydantic import BaseModel

import aws_resources.utils.aws_api_typed.account
import aws_resources.utils.aws_api_typed.iam
from aws_resources.utils import config
from aws_resources.utils.aws_api_typed.account import AWSApiAccount
from aws_resources.utils.aws_api_typed.iam import AWSApiIam

SubApi = TypeVar(
    "SubApi",
    AWSApiAccount,
    AWSApiIam,
)


class AWSCredentials(ABC):
    @abstractmethod
    def build_session(self) -> Session:
        """
        Builds an AWS session using these credentials.
        """
        ...


class AWSStaticCredentials(BaseModel, AWSCredentials):
    """
    A model representing AWS credentials.
    """

    access_key_id: str
    secret_access_key: str
    region: str

    def build_session(self) -> Session:
        return Session(
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            region_name=self.region,
        )


class AWSTemporaryCredentials(AWSStaticCredentials):
    """
    A model representing temporary AWS credentials.
    """

    session_token: str

    def build_session(self) -> Session:
        return Session(
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            aws_session_token=self.session_token,
            region_name=self.region,
        )


def credentials_from_config(path: str = "aws") -> AWSCredentials:
    """Build credentials from the ``[aws]`` table of the configuration file."""
    settings = config.read_all({"path": path})
    if settings.get("session_token"):
        return AWSTemporaryCredentials(**settings)
    return AWSStaticCredentials(**settings)


class AWSApi:
    """High-level API for the AWS services used by the resource handlers.

    * Account (alternate contacts)
    * IAM (login profiles)

    Example:

    with AWSApi(AWSStaticCredentials(...)) as api:
        api.iam.get_login_profile("jdoe")
    """

    def __init__(self, aws_credentials: AWSCredentials) -> None:
        self.session = aws_credentials.build_session()
        self._session_clients: list[BaseClient] = []

    def __enter__(self) -> AWSApi:
        return self

    def __exit__(self, *exec: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close all clients created by this API instance."""
        for client in self._session_clients:
            client.close()
        self._session_clients = []

    def _init_sub_api(self, api_cls: type[SubApi]) -> SubApi:
        """Return a new or cached sub api client."""
        match api_cls:
            case aws_resources.utils.aws_api_typed.account.AWSApiAccount:
                client = self.session.client("account")
                api = api_cls(client)
            case aws_resources.utils.aws_api_typed.iam.AWSApiIam:
                client = self.session.client("iam")
                api = api_cls(client)
            case _:
                raise ValueError(f"Unknown API class: {api_cls}")

        self._session_clients.append(client)
        return api

    @cached_property
    def account(self) -> AWSApiAccount:
        """Return an AWS Account Api client"""
        return self._init_sub_api(AWSApiAccount)

    @cached_property
    def iam(self) -> AWSApiIam:
        """Return an AWS IAM Api client."""
        return self._init_sub_api(AWSApiIam)
