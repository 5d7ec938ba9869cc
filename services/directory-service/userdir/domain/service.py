"""Directory service orchestrating validation, hashing, and persistence."""

from __future__ import annotations

import logging
from threading import Lock

from .account import Account
from .contracts import AccountEditRequest
from .errors import Rejected, Saved, SaveOutcome
from ..repository import DirectoryRepository
from ..security.passwords import CredentialCodec

logger = logging.getLogger(__name__)


class DirectoryService:
    """Account CRUD over the directory file.

    Every mutating call runs its load-mutate-persist cycle under one lock, so
    writers inside this process never lose each other's updates. Writers in
    other processes sharing the file are not coordinated.
    """

    def __init__(self, repository: DirectoryRepository, codec: CredentialCodec) -> None:
        """Store dependencies used for persistence and password hashing."""
        self._repository = repository
        self._codec = codec
        self._write_lock = Lock()

    def list_accounts(self) -> list[tuple[str, Account]]:
        """Return every account as ``(name, account)`` sorted by name."""
        directory = self._repository.load()
        logger.debug("listing %d accounts", len(directory.users))
        return directory.sorted_items()

    def find_account(self, name: str) -> Account | None:
        """Return the stored account or ``None`` when it does not exist."""
        return self._repository.load().users.get(name)

    def get_account_or_default(self, name: str) -> Account:
        """Return the stored account, or an empty ``Account`` when absent.

        A missing account is not an error here: the empty record is the
        template for the "create new" edit form. Callers that need to know
        whether the account exists should use :meth:`find_account`.
        """
        logger.debug("editing account %s", name)
        account = self.find_account(name)
        return account if account is not None else Account()

    def save_account(self, request: AccountEditRequest) -> SaveOutcome:
        """Validate, hash and store ``request`` as a full replace of its account.

        Validation failures come back as :class:`Rejected` without hashing or
        touching the file. :class:`StoreUnavailable` propagates on I/O failure.
        """
        error = request.validate()
        if error is not None:
            logger.warning("account.rejected name=%r reason=%s", request.name, error.reason.name)
            return Rejected(error)

        account = request.to_account(self._codec.hash_password(request.password))
        with self._write_lock:
            directory = self._repository.load()
            created = request.name not in directory.users
            directory.users[request.name] = account
            self._repository.persist(directory)
        logger.info("account.saved name=%r created=%s", request.name, created)
        return Saved(account)

    def delete_account(self, name: str) -> None:
        """Remove ``name`` from the directory; deleting an absent name succeeds."""
        with self._write_lock:
            directory = self._repository.load()
            removed = directory.users.pop(name, None) is not None
            self._repository.persist(directory)
        logger.info("account.deleted name=%r existed=%s", name, removed)

    def check_password(self, name: str, plaintext: str) -> bool:
        """Verify ``plaintext`` against the stored credential of ``name``.

        Absent or disabled accounts and accounts without a password never
        verify. A corrupt stored hash raises :class:`MalformedCredential`.
        """
        account = self.find_account(name)
        if account is None or account.disabled or not account.password:
            return False
        return self._codec.verify_password(plaintext, account.password)
