"""Error taxonomy and tagged outcomes for directory operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .account import Account


class DirectoryError(Exception):
    """Base class for failures raised by the directory core."""


class StoreUnavailable(DirectoryError):
    """The backing file could not be read, written, or parsed."""


class MalformedCredential(DirectoryError):
    """A stored password field is not a parseable encoded hash."""


class ValidationReason(str, Enum):
    """Reasons an edit request is rejected, in the order they are checked."""

    MISSING_NAME = "Name must be present."
    MISSING_DISPLAY_NAME = "Display name must be present."
    MISSING_PASSWORD = "Password must be supplied."
    PASSWORD_MISMATCH = "Passwords do not match."


@dataclass(frozen=True, slots=True)
class ValidationFailed:
    """A caller-supplied edit request failed validation; nothing was mutated."""

    reason: ValidationReason

    @property
    def message(self) -> str:
        return self.reason.value


@dataclass(frozen=True, slots=True)
class Saved:
    """Outcome of a save that validated, hashed and persisted the account."""

    account: Account


@dataclass(frozen=True, slots=True)
class Rejected:
    """Outcome of a save refused before touching the store."""

    error: ValidationFailed


SaveOutcome = Union[Saved, Rejected]
