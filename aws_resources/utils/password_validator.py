import string
from enum import IntFlag

LOWER_CASE_CHARS = string.ascii_lowercase
UPPER_CASE_CHARS = string.ascii_uppercase
DIGITS = string.digits
# symbols accepted by the most restrictive IAM account password policy
SPECIAL_CHARS = "!@#$%^&*()_+-=[]{}|'"

NOT_ENOUGH_DIGITS_MSG = "Password does not have at least one digit."
NOT_ENOUGH_SPECIAL_CHARS_MSG = (
    f"Password does not have at least one special character ({SPECIAL_CHARS})."
)
NOT_ENOUGH_LOWER_CASE_CHARS_MSG = (
    "Password does not have at least one lower case character."
)
NOT_ENOUGH_UPPER_CASE_CHARS_MSG = (
    "Password does not have at least one upper case character."
)


class PasswordPolicy(IntFlag):
    HAS_UPPER_CASE_CHAR = 1
    HAS_LOWER_CASE_CHAR = 2
    HAS_DIGIT = 4
    HAS_SPECIAL_CHAR = 8


IAM_PASSWORD_POLICY = (
    PasswordPolicy.HAS_UPPER_CASE_CHAR
    | PasswordPolicy.HAS_LOWER_CASE_CHAR
    | PasswordPolicy.HAS_DIGIT
    | PasswordPolicy.HAS_SPECIAL_CHAR
)


class PasswordValidator:
    def __init__(self, policy_flags: int = 0):
        self._policy_flags = policy_flags

    def errors(self, password: str) -> list[str]:
        errors: list[str] = []

        password_set = set(password)
        if self._policy_flags & PasswordPolicy.HAS_UPPER_CASE_CHAR:
            if password_set.isdisjoint(UPPER_CASE_CHARS):
                errors.append(NOT_ENOUGH_UPPER_CASE_CHARS_MSG)

        if self._policy_flags & PasswordPolicy.HAS_LOWER_CASE_CHAR:
            if password_set.isdisjoint(LOWER_CASE_CHARS):
                errors.append(NOT_ENOUGH_LOWER_CASE_CHARS_MSG)

        if self._policy_flags & PasswordPolicy.HAS_DIGIT:
            if password_set.isdisjoint(DIGITS):
                errors.append(NOT_ENOUGH_DIGITS_MSG)

        if self._policy_flags & PasswordPolicy.HAS_SPECIAL_CHAR:
            if password_set.isdisjoint(SPECIAL_CHARS):
                errors.append(NOT_ENOUGH_SPECIAL_CHARS_MSG)

        return errors

    def is_valid(self, password: str) -> bool:
        return not self.errors(password)
