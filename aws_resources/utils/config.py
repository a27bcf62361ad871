from typing import Any

import toml

_config: dict[str, Any] | None = None


class ConfigNotFound(Exception):
    pass


class SecretNotFound(Exception):
    pass


def get_config() -> dict[str, Any]:
    if _config is None:
        raise ConfigNotFound("configuration has not been initialized")
    return _config


def init(config: dict[str, Any]) -> dict[str, Any]:
    global _config  # noqa: PLW0603
    _config = config
    return _config


def init_from_toml(configfile: str) -> dict[str, Any]:
    try:
        return init(toml.load(configfile))
    except FileNotFoundError as e:
        raise ConfigNotFound(f"config file {configfile} not found") from e


def read_all(secret: dict[str, str]) -> Any:
    path = secret["path"]
    try:
        config: Any = get_config()
        for t in path.split("/"):
            config = config[t]
        return config
    except (KeyError, TypeError) as e:
        raise SecretNotFound(f"secret {path} not found in config file: {e!s}") from None


def get(path: str, default: Any = None) -> Any:
    """Return the value at the slash separated ``path`` or ``default``."""
    try:
        config: Any = get_config()
        for t in path.split("/"):
            config = config[t]
        return config
    except (ConfigNotFound, KeyError, TypeError):
        return default
