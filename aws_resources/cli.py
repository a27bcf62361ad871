import functools
import json
import logging
import os
import signal
import sys
import threading
from collections.abc import Callable
from typing import Any

import click
import sentry_sdk
from pydantic import BaseModel, ValidationError
from sentry_sdk.integrations.logging import LoggingIntegration

from aws_resources.alternate_contact import (
    AlternateContactResource,
    AlternateContactSpec,
)
from aws_resources.login_profile import LoginProfileResource, LoginProfileSpec
from aws_resources.status import ExitCodes
from aws_resources.utils.aws_api_typed.account import AlternateContactType
from aws_resources.utils.aws_api_typed.api import AWSApi, credentials_from_config
from aws_resources.utils.config import ConfigNotFound, SecretNotFound
from aws_resources.utils.environment import AWS_RESOURCES_CONFIG, init_env
from aws_resources.utils.exceptions import (
    PollCancelledError,
    ResourceIdFormatError,
    ResourceOperationError,
)
from aws_resources.utils.password import DEFAULT_PASSWORD_LENGTH
from aws_resources.utils.timeouts import Timeouts

# Enable Sentry
if os.getenv("SENTRY_DSN"):
    sentry_sdk.init(
        os.environ["SENTRY_DSN"],
        integrations=[
            LoggingIntegration(event_level=logging.CRITICAL),
        ],
    )


def config_file(function: Callable) -> Callable:
    help_msg = "Path to configuration file in toml format."
    function = click.option(
        "--config",
        "configfile",
        default=os.environ.get(AWS_RESOURCES_CONFIG),
        help=help_msg,
    )(function)
    return function


def log_level(function: Callable) -> Callable:
    function = click.option(
        "--log-level",
        help="log-level of the command. Defaults to INFO.",
        type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    )(function)
    return function


def dry_run(function: Callable) -> Callable:
    help_msg = (
        "If `true`, it will only print the planned actions "
        "that would be performed, without executing them."
    )

    function = click.option("--dry-run/--no-dry-run", default=False, help=help_msg)(
        function
    )
    return function


def contact_fields(function: Callable) -> Callable:
    function = click.option("--title", required=True, help="contact title.")(function)
    function = click.option(
        "--phone-number", required=True, help="contact phone number."
    )(function)
    function = click.option("--name", required=True, help="contact name.")(function)
    function = click.option(
        "--email-address", required=True, help="contact email address."
    )(function)
    return function


def handle_errors(function: Callable) -> Callable:
    @functools.wraps(function)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return function(*args, **kwargs)
        except PollCancelledError as e:
            logging.error(str(e))
            sys.exit(ExitCodes.CANCELLED)
        except (
            ResourceOperationError,
            ResourceIdFormatError,
            ValidationError,
            SecretNotFound,
        ) as e:
            logging.error(str(e))
            sys.exit(ExitCodes.ERROR)

    return wrapper


def print_state(state: BaseModel | None) -> None:
    if state is None:
        sys.exit(ExitCodes.NOT_FOUND)
    click.echo(json.dumps(state.model_dump(mode="json"), indent=2, sort_keys=True))


def build_api() -> AWSApi:
    return AWSApi(credentials_from_config())


def install_cancel_handler(cancel: threading.Event) -> None:
    """Turn SIGINT and SIGTERM into a cancellation of the running wait."""

    def _cancel(sig: int, frame: Any) -> None:
        logging.warning(f"received signal {sig}, cancelling")
        cancel.set()

    signal.signal(signal.SIGINT, _cancel)
    signal.signal(signal.SIGTERM, _cancel)


def alternate_contact_resource(
    ctx: click.Context, api: AWSApi
) -> AlternateContactResource:
    return AlternateContactResource(
        api.account, Timeouts.from_config(), cancel=ctx.obj["cancel"]
    )


def login_profile_resource(ctx: click.Context, api: AWSApi) -> LoginProfileResource:
    return LoginProfileResource(
        api.iam, Timeouts.from_config(), cancel=ctx.obj["cancel"]
    )


@click.group()
@config_file
@dry_run
@log_level
@click.pass_context
def root(
    ctx: click.Context, configfile: str | None, dry_run: bool, log_level: str | None
) -> None:
    ctx.ensure_object(dict)
    try:
        init_env(log_level=log_level, config_file=configfile, dry_run=dry_run)
    except ConfigNotFound as e:
        logging.fatal(str(e))
        sys.exit(ExitCodes.ERROR)
    ctx.obj["dry_run"] = dry_run
    ctx.obj["cancel"] = threading.Event()
    install_cancel_handler(ctx.obj["cancel"])


@root.group(name="alternate-contact")
def alternate_contact() -> None:
    """Manage AWS account alternate contacts."""


@alternate_contact.command(name="create")
@click.option("--account-id", default="", help="account id, defaults to the caller's")
@click.option(
    "--type",
    "contact_type",
    required=True,
    type=click.Choice([t.value for t in AlternateContactType]),
)
@contact_fields
@click.pass_context
@handle_errors
def alternate_contact_create(
    ctx: click.Context,
    account_id: str,
    contact_type: str,
    email_address: str,
    name: str,
    phone_number: str,
    title: str,
) -> None:
    spec = AlternateContactSpec(
        account_id=account_id,
        alternate_contact_type=contact_type,
        email_address=email_address,
        name=name,
        phone_number=phone_number,
        title=title,
    )
    logging.info(["create_alternate_contact", spec.resource_id])
    if ctx.obj["dry_run"]:
        return
    with build_api() as api:
        resource = alternate_contact_resource(ctx, api)
        print_state(resource.create(spec))


@alternate_contact.command(name="read")
@click.argument("resource_id")
@click.pass_context
@handle_errors
def alternate_contact_read(ctx: click.Context, resource_id: str) -> None:
    with build_api() as api:
        resource = alternate_contact_resource(ctx, api)
        print_state(resource.read(resource_id))


@alternate_contact.command(name="import")
@click.argument("resource_id")
@click.pass_context
@handle_errors
def alternate_contact_import(ctx: click.Context, resource_id: str) -> None:
    with build_api() as api:
        resource = alternate_contact_resource(ctx, api)
        print_state(resource.import_(resource_id))


@alternate_contact.command(name="update")
@click.argument("resource_id")
@contact_fields
@click.pass_context
@handle_errors
def alternate_contact_update(
    ctx: click.Context,
    resource_id: str,
    email_address: str,
    name: str,
    phone_number: str,
    title: str,
) -> None:
    with build_api() as api:
        resource = alternate_contact_resource(ctx, api)
        current = resource.read(resource_id)
        if current is None:
            sys.exit(ExitCodes.NOT_FOUND)
        spec = AlternateContactSpec(
            account_id=current.account_id,
            alternate_contact_type=current.alternate_contact_type,
            email_address=email_address,
            name=name,
            phone_number=phone_number,
            title=title,
        )
        logging.info(["update_alternate_contact", resource_id])
        if ctx.obj["dry_run"]:
            return
        print_state(resource.update(resource_id, spec))


@alternate_contact.command(name="delete")
@click.argument("resource_id")
@click.pass_context
@handle_errors
def alternate_contact_delete(ctx: click.Context, resource_id: str) -> None:
    logging.info(["delete_alternate_contact", resource_id])
    if ctx.obj["dry_run"]:
        return
    with build_api() as api:
        resource = alternate_contact_resource(ctx, api)
        resource.delete(resource_id)


@root.group(name="login-profile")
def login_profile() -> None:
    """Manage IAM user login profiles."""


@login_profile.command(name="create")
@click.option("--user", required=True, help="IAM user name.")
@click.option(
    "--pgp-key",
    default=None,
    help="base64 encoded public key or keybase:<username> to encrypt the password with.",
)
@click.option(
    "--password-reset-required/--no-password-reset-required",
    default=None,
    help="force a password change at first sign-in.",
)
@click.option(
    "--password-length",
    type=int,
    default=DEFAULT_PASSWORD_LENGTH,
    show_default=True,
    help="length of the generated password.",
)
@click.pass_context
@handle_errors
def login_profile_create(
    ctx: click.Context,
    user: str,
    pgp_key: str | None,
    password_reset_required: bool | None,
    password_length: int,
) -> None:
    spec = LoginProfileSpec(
        user=user,
        pgp_key=pgp_key,
        password_reset_required=password_reset_required,
        password_length=password_length,
    )
    logging.info(["create_login_profile", spec.user])
    if ctx.obj["dry_run"]:
        return
    with build_api() as api:
        resource = login_profile_resource(ctx, api)
        print_state(resource.create(spec))


@login_profile.command(name="read")
@click.argument("resource_id")
@click.pass_context
@handle_errors
def login_profile_read(ctx: click.Context, resource_id: str) -> None:
    with build_api() as api:
        resource = login_profile_resource(ctx, api)
        print_state(resource.read(resource_id))


@login_profile.command(name="import")
@click.argument("resource_id")
@click.pass_context
@handle_errors
def login_profile_import(ctx: click.Context, resource_id: str) -> None:
    with build_api() as api:
        resource = login_profile_resource(ctx, api)
        print_state(resource.import_(resource_id))


@login_profile.command(name="delete")
@click.argument("resource_id")
@click.pass_context
@handle_errors
def login_profile_delete(ctx: click.Context, resource_id: str) -> None:
    logging.info(["delete_login_profile", resource_id])
    if ctx.obj["dry_run"]:
        return
    with build_api() as api:
        resource = login_profile_resource(ctx, api)
        resource.delete(resource_id)
