import logging
import os

from aws_resources.utils import config

AWS_RESOURCES_CONFIG = "AWS_RESOURCES_CONFIG"
AWS_RESOURCES_LOG_LEVEL = "AWS_RESOURCES_LOG_LEVEL"

LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def log_fmt(dry_run: bool | None = None) -> str:
    log_fmt = (
        "[%(asctime)s] [%(levelname)s] [DRY-RUN] "
        if dry_run
        else "[%(asctime)s] [%(levelname)s] "
    )

    log_fmt += "[%(filename)s:%(funcName)s:%(lineno)d] - %(message)s"

    return log_fmt


def init_env(
    log_level: str | None = None,
    config_file: str | None = None,
    dry_run: bool | None = None,
) -> None:
    # store env configs in environment variables. this way child processes
    # will inherit them.
    if log_level:
        os.environ[AWS_RESOURCES_LOG_LEVEL] = log_level
    if config_file:
        os.environ[AWS_RESOURCES_CONFIG] = config_file

    # init loglevel
    logging.basicConfig(
        format=log_fmt(dry_run=dry_run),
        datefmt=LOG_DATEFMT,
        level=getattr(logging, os.environ.get(AWS_RESOURCES_LOG_LEVEL, "INFO")),
    )

    # init basic config
    config_file = os.environ.get(AWS_RESOURCES_CONFIG)
    if not config_file:
        raise config.ConfigNotFound("no config file for aws-resources specified")
    config.init_from_toml(config_file)
