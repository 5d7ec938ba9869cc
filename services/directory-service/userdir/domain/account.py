from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class Account:
    """A single user record held in the directory.

    ``password`` always holds an encoded argon2 hash (or is empty), never a
    plaintext password. ``groups`` keeps the authored order and duplicates.
    """

    disabled: bool = False
    display_name: str = ""
    email: str = ""
    password: str = ""
    groups: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Directory:
    """The full account collection, rebuilt from the backing file per operation."""

    users: dict[str, Account] = field(default_factory=dict)

    def sorted_items(self) -> list[tuple[str, Account]]:
        """Return ``(identifier, account)`` pairs ordered by identifier."""
        return sorted(self.users.items(), key=lambda item: item[0])
