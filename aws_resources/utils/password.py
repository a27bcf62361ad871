import secrets

from aws_resources.utils.exceptions import PasswordGenerationError, RandomSourceError
from aws_resources.utils.password_validator import (
    DIGITS,
    IAM_PASSWORD_POLICY,
    LOWER_CASE_CHARS,
    SPECIAL_CHARS,
    UPPER_CASE_CHARS,
    PasswordValidator,
)

CHARSET = LOWER_CASE_CHARS + UPPER_CASE_CHARS + DIGITS + SPECIAL_CHARS
MAX_ATTEMPTS = 100_000

MIN_PASSWORD_LENGTH = 5
MAX_PASSWORD_LENGTH = 128
DEFAULT_PASSWORD_LENGTH = 20

_validator = PasswordValidator(policy_flags=IAM_PASSWORD_POLICY)


def _draw(length: int) -> str:
    try:
        return "".join(secrets.choice(CHARSET) for _ in range(length))
    except (OSError, NotImplementedError) as e:
        raise RandomSourceError(f"secure random source failed: {e}") from e


def generate_password(length: int, max_attempts: int = MAX_ATTEMPTS) -> str:
    """Generate a random password matching the IAM password policy.

    Every character is drawn uniformly from all character classes and
    passwords missing a class are thrown away. Even for short passwords a
    match is usually found within a handful of draws, longer ones almost
    always match at the first one.

    A length below the number of required character classes can never match
    and ends in PasswordGenerationError once ``max_attempts`` are used up.
    """
    for _ in range(max_attempts):
        password = _draw(length)
        if _validator.is_valid(password):
            return password
    raise PasswordGenerationError(
        f"failed to generate acceptable password of length {length} after {max_attempts} attempts"
    )
