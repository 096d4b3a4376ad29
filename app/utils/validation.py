"""Field format validation for the password recovery form."""

import re
from dataclasses import dataclass

from app.config.constants import EMAIL_REGEX, ERROR_MESSAGES
from app.models.enums import RecoveryField, ValidationState

_EMAIL_PATTERN = re.compile(EMAIL_REGEX)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single field check."""

    is_valid: bool
    state: ValidationState
    error: str | None = None

    @classmethod
    def empty(cls) -> "ValidationResult":
        return cls(is_valid=False, state=ValidationState.NONE)

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls(is_valid=True, state=ValidationState.VALID)

    @classmethod
    def invalid(cls, error: str) -> "ValidationResult":
        return cls(is_valid=False, state=ValidationState.INVALID, error=error)


def is_valid_email(email: str) -> bool:
    """
    Check email format.

    Args:
        email: Email address

    Returns:
        True if the whole string matches local@domain.tld
    """
    if not email or not isinstance(email, str):
        return False
    return bool(_EMAIL_PATTERN.fullmatch(email))


class FieldValidator:
    """
    Pure synchronous format checks.

    Empty input always yields state NONE so untouched fields show no error.
    Otherwise the most specific applicable message is returned.
    """

    def __init__(
        self,
        code_length: int = 6,
        min_password_length: int = 6,
        max_password_length: int = 128,
    ) -> None:
        self.code_length = code_length
        self.min_password_length = min_password_length
        self.max_password_length = max_password_length

    @classmethod
    def from_settings(cls, settings) -> "FieldValidator":
        return cls(
            code_length=settings.verification_code_length,
            min_password_length=settings.min_password_length,
            max_password_length=settings.max_password_length,
        )

    def validate_email(self, email: str) -> ValidationResult:
        if not email:
            return ValidationResult.empty()
        if is_valid_email(email):
            return ValidationResult.valid()

        if "@" not in email:
            return ValidationResult.invalid(ERROR_MESSAGES["EMAIL_MISSING_AT"])
        if "." not in email:
            return ValidationResult.invalid(ERROR_MESSAGES["EMAIL_MISSING_DOMAIN"])
        return ValidationResult.invalid(ERROR_MESSAGES["EMAIL_INVALID"])

    def validate_code(self, code: str) -> ValidationResult:
        if not code:
            return ValidationResult.empty()

        if len(code) < self.code_length:
            return ValidationResult.invalid(
                ERROR_MESSAGES["CODE_TOO_SHORT"].format(length=self.code_length)
            )
        if len(code) > self.code_length:
            return ValidationResult.invalid(
                ERROR_MESSAGES["CODE_TOO_LONG"].format(length=self.code_length)
            )
        # str.isdigit() accepts superscripts and other unicode digits
        if not all(ch in "0123456789" for ch in code):
            return ValidationResult.invalid(ERROR_MESSAGES["CODE_NOT_NUMERIC"])
        return ValidationResult.valid()

    def validate_password(self, password: str) -> ValidationResult:
        if not password:
            return ValidationResult.empty()

        if len(password) < self.min_password_length:
            return ValidationResult.invalid(
                ERROR_MESSAGES["PASSWORD_TOO_SHORT"].format(
                    min_length=self.min_password_length
                )
            )
        if len(password) > self.max_password_length:
            return ValidationResult.invalid(
                ERROR_MESSAGES["PASSWORD_TOO_LONG"].format(
                    max_length=self.max_password_length
                )
            )
        return ValidationResult.valid()

    def validate_confirm(self, password: str, confirm: str) -> ValidationResult:
        if not confirm:
            return ValidationResult.empty()
        if password != confirm:
            return ValidationResult.invalid(ERROR_MESSAGES["PASSWORDS_DO_NOT_MATCH"])
        return ValidationResult.valid()

    def validate_field(
        self, recovery_field: RecoveryField, values: dict[RecoveryField, str]
    ) -> ValidationResult:
        """
        Validate one field given the current form values.

        Args:
            recovery_field: Field to check
            values: Current raw value of every field

        Returns:
            ValidationResult for the field
        """
        value = values.get(recovery_field, "")
        if recovery_field == RecoveryField.EMAIL:
            return self.validate_email(value)
        if recovery_field == RecoveryField.CODE:
            return self.validate_code(value)
        if recovery_field == RecoveryField.NEW_PASSWORD:
            return self.validate_password(value)
        return self.validate_confirm(
            values.get(RecoveryField.NEW_PASSWORD, ""), value
        )
