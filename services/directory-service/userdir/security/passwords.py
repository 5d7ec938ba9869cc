"""Argon2id hashing and verification of account passwords."""

from __future__ import annotations

from typing import Final

from argon2 import PasswordHasher, Type, extract_parameters
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from ..domain.errors import MalformedCredential

MEMORY_COST_KIB: Final[int] = 65536
TIME_COST: Final[int] = 3
PARALLELISM: Final[int] = 4
HASH_LEN: Final[int] = 32
SALT_LEN: Final[int] = 16


class CredentialCodec:
    """Stateless codec turning plaintext passwords into self-describing hashes.

    Encoded hashes use the PHC string format
    (``$argon2id$v=19$m=65536,t=3,p=4$<salt>$<digest>``), so hashes produced
    under older cost parameters keep verifying after the constants change.
    """

    def __init__(self) -> None:
        self._hasher = PasswordHasher(
            time_cost=TIME_COST,
            memory_cost=MEMORY_COST_KIB,
            parallelism=PARALLELISM,
            hash_len=HASH_LEN,
            salt_len=SALT_LEN,
            type=Type.ID,
        )

    def hash_password(self, plaintext: str) -> str:
        """Hash ``plaintext`` with a fresh random salt.

        Parameters
        ----------
        plaintext:
            Password as submitted by the user.

        Returns
        -------
        str
            The encoded hash embedding algorithm, version, costs, salt and digest.

        Raises
        ------
        argon2.exceptions.HashingError
            Propagated untouched; a failing hash primitive is not recoverable.
        """

        return self._hasher.hash(plaintext)

    def verify_password(self, plaintext: str, encoded: str) -> bool:
        """Check ``plaintext`` against a stored encoded hash.

        Parameters
        ----------
        plaintext:
            Candidate password.
        encoded:
            Encoded hash previously returned by :meth:`hash_password`.

        Returns
        -------
        bool
            ``True`` on a match, ``False`` on a wrong password.

        Raises
        ------
        MalformedCredential
            When ``encoded`` is not a parseable argon2 hash at all.
        """

        self._parse(encoded)
        try:
            return self._hasher.verify(encoded, plaintext)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError, UnicodeError) as exc:
            raise MalformedCredential("stored credential could not be decoded") from exc

    def needs_rehash(self, encoded: str) -> bool:
        """Return ``True`` when ``encoded`` was produced with other cost parameters."""
        self._parse(encoded)
        return self._hasher.check_needs_rehash(encoded)

    def _parse(self, encoded: str) -> None:
        try:
            extract_parameters(encoded)
        except InvalidHashError as exc:
            raise MalformedCredential("stored credential is not an encoded argon2 hash") from exc
