from pydantic import BaseModel, Field

from aws_resources.utils import config

DEFAULT_TIMEOUT_SECONDS = 5 * 60
# time for IAM changes to become visible to all readers
PROPAGATION_TIMEOUT_SECONDS = 2 * 60


class Timeouts(BaseModel, extra="forbid"):
    """Maximum seconds to wait for a change to become consistent."""

    create: float = Field(DEFAULT_TIMEOUT_SECONDS, ge=0)
    update: float = Field(DEFAULT_TIMEOUT_SECONDS, ge=0)
    delete: float = Field(DEFAULT_TIMEOUT_SECONDS, ge=0)
    propagation: float = Field(PROPAGATION_TIMEOUT_SECONDS, ge=0)

    @classmethod
    def from_config(cls) -> "Timeouts":
        return cls(**config.get("timeouts", {}))
