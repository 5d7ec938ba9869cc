"""Edit-form contracts shared by the store and the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass

from .account import Account
from .errors import ValidationFailed, ValidationReason


def split_groups(raw: str) -> list[str]:
    """Split a space-separated groups string into tokens, keeping their order."""
    return raw.split()


def join_groups(groups: list[str]) -> str:
    """Render stored groups back into the editable single-space form."""
    return " ".join(groups)


@dataclass(slots=True)
class AccountEditRequest:
    """Unvalidated input for creating or replacing an account.

    ``name`` is the account identifier. Every save is a full replace, so the
    password has to be supplied (and is re-hashed) on every edit.
    """

    name: str
    display_name: str
    password: str
    confirm_password: str
    disabled: bool = False
    email: str = ""
    groups: str = ""

    def validate(self) -> ValidationFailed | None:
        """Return the first failed rule, or ``None`` when the request is valid."""
        if not self.name:
            return ValidationFailed(ValidationReason.MISSING_NAME)
        if not self.display_name:
            return ValidationFailed(ValidationReason.MISSING_DISPLAY_NAME)
        if not self.password:
            return ValidationFailed(ValidationReason.MISSING_PASSWORD)
        if self.password != self.confirm_password:
            return ValidationFailed(ValidationReason.PASSWORD_MISMATCH)
        return None

    def to_account(self, password_hash: str) -> Account:
        """Build the stored account once the password has been hashed."""
        return Account(
            disabled=self.disabled,
            display_name=self.display_name,
            email=self.email,
            password=password_hash,
            groups=split_groups(self.groups),
        )

    @classmethod
    def from_account(cls, name: str, account: Account) -> "AccountEditRequest":
        """Pre-fill an edit form from a stored account; password fields stay blank."""
        return cls(
            name=name,
            display_name=account.display_name,
            password="",
            confirm_password="",
            disabled=account.disabled,
            email=account.email,
            groups=join_groups(account.groups),
        )
