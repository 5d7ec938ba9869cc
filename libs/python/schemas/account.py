"""Account-related DTOs shared between the directory service and its clients."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AccountSummary(BaseModel):
    """One row of the account listing; never carries the password hash."""

    name: str
    disabled: bool = False
    displayname: str = ""
    email: str = ""
    groups: list[str] = Field(default_factory=list)


class AccountForm(BaseModel):
    """Editable view of an account with groups rendered as one string."""

    name: str
    disabled: bool = False
    displayname: str = ""
    email: str = ""
    groups: str = ""
    exists: bool | None = None
