"""Password strength rules applied on registration, password change and reset."""

import re
from dataclasses import asdict, dataclass

from quillify.domain.exceptions import PasswordPolicyError


@dataclass(frozen=True)
class PasswordValidationError:
    """One violated rule, reported to the client as an entry in ``details``."""

    field: str
    message: str
    code: str


_CHARACTER_RULES = (
    ("require_uppercase", re.compile(r"[A-Z]"), "password_no_uppercase", "one uppercase letter"),
    ("require_lowercase", re.compile(r"[a-z]"), "password_no_lowercase", "one lowercase letter"),
    ("require_digit", re.compile(r"\d"), "password_no_digit", "one number"),
)


class PasswordValidator:
    """Checks a password against a length minimum and character class rules.

    By default a password needs 8 characters, an upper and a lower case
    letter and a digit. Every violated rule is reported, not just the first.
    """

    def __init__(
        self,
        min_length: int = 8,
        require_uppercase: bool = True,
        require_lowercase: bool = True,
        require_digit: bool = True,
    ) -> None:
        self.min_length = min_length
        self.require_uppercase = require_uppercase
        self.require_lowercase = require_lowercase
        self.require_digit = require_digit

    def validate(self, password: str, field: str = "password") -> list[PasswordValidationError]:
        errors = []
        if len(password) < self.min_length:
            errors.append(
                PasswordValidationError(
                    field, f"Password must be at least {self.min_length} characters", "password_too_short"
                )
            )
        for flag, pattern, code, requirement in _CHARACTER_RULES:
            if getattr(self, flag) and not pattern.search(password):
                errors.append(
                    PasswordValidationError(field, f"Password must contain at least {requirement}", code)
                )
        return errors

    def is_valid(self, password: str) -> bool:
        return not self.validate(password)

    def ensure_valid(self, password: str, field: str = "password") -> None:
        """Raise PasswordPolicyError carrying every violated rule.

        Raises:
            PasswordPolicyError: If any rule fails; ``details`` lists them.
        """
        errors = self.validate(password, field=field)
        if errors:
            raise PasswordPolicyError(
                "Password does not meet the requirements",
                details=[asdict(error) for error in errors],
            )


default_password_validator = PasswordValidator()
