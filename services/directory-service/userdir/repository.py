"""YAML file repository for the user directory."""

from __future__ import annotations

import contextlib
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any

import yaml

from .domain.account import Account, Directory
from .domain.errors import StoreUnavailable

logger = logging.getLogger(__name__)

_FIELD_TYPES: dict[str, type] = {
    "disabled": bool,
    "displayname": str,
    "email": str,
    "password": str,
}


class _StringKeyLoader(yaml.SafeLoader):
    """SafeLoader that keeps scalar mapping keys as the text written in the file.

    Account names such as ``007``, ``no`` or ``null`` stay strings instead of
    resolving to int, bool or None under YAML 1.1 rules.
    """

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        self.flatten_mapping(node)
        mapping: dict[Any, Any] = {}
        for key_node, value_node in node.value:
            if isinstance(key_node, yaml.ScalarNode):
                key = self.construct_scalar(key_node)
            else:
                key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, str):
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    "found a non-scalar key",
                    key_node.start_mark,
                )
            mapping[key] = self.construct_object(value_node, deep=deep)
        return mapping


class DirectoryRepository:
    """Loads and rewrites the whole directory file on every call.

    Nothing is cached between calls; the file is the only source of truth.
    """

    def __init__(self, path: Path) -> None:
        """Store the path of the YAML file backing the directory."""
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Directory:
        """Read and parse the backing file into a :class:`Directory`."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreUnavailable(f"cannot read directory file {self._path}") from exc
        try:
            document = yaml.load(raw, Loader=_StringKeyLoader)
        except yaml.YAMLError as exc:
            raise StoreUnavailable(f"cannot parse directory file {self._path}") from exc
        return self._map_document(document)

    def persist(self, directory: Directory) -> None:
        """Serialise ``directory`` and atomically replace the backing file.

        A symlinked path is followed so the link target is rewritten, and the
        target keeps its permission bits.
        """
        document = {
            "users": {
                name: self._map_account(account)
                for name, account in directory.sorted_items()
            }
        }
        payload = yaml.safe_dump(document, default_flow_style=False, sort_keys=False, allow_unicode=True)
        target = self._path.resolve()
        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            self._copy_mode(target, tmp_name)
            os.replace(tmp_name, target)
        except OSError as exc:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise StoreUnavailable(f"cannot write directory file {self._path}") from exc
        logger.debug("persisted %d accounts to %s", len(directory.users), target)

    def _copy_mode(self, target: Path, tmp_name: str) -> None:
        try:
            mode = stat.S_IMODE(os.stat(target).st_mode)
        except FileNotFoundError:
            return
        os.chmod(tmp_name, mode)

    def _map_document(self, document: Any) -> Directory:
        """Convert the parsed YAML document into the domain ``Directory``."""
        if document is None:
            return Directory()
        if not isinstance(document, dict):
            raise StoreUnavailable("directory file must contain a mapping")
        users = document.get("users") or {}
        if not isinstance(users, dict):
            raise StoreUnavailable("'users' must be a mapping of name to record")
        return Directory(
            users={name: self._map_record(name, record) for name, record in users.items()}
        )

    def _map_record(self, name: str, record: Any) -> Account:
        if record is None:
            return Account()
        if not isinstance(record, dict):
            raise StoreUnavailable(f"record for {name!r} must be a mapping")
        for key, expected in _FIELD_TYPES.items():
            value = record.get(key)
            if value is not None and not isinstance(value, expected):
                raise StoreUnavailable(f"field {key!r} of {name!r} must be {expected.__name__}")
        groups = record.get("groups") or []
        if not isinstance(groups, list) or not all(isinstance(group, str) for group in groups):
            raise StoreUnavailable(f"field 'groups' of {name!r} must be a list of strings")
        return Account(
            disabled=record.get("disabled") or False,
            display_name=record.get("displayname") or "",
            email=record.get("email") or "",
            password=record.get("password") or "",
            groups=list(groups),
        )

    def _map_account(self, account: Account) -> dict[str, Any]:
        """Convert a domain ``Account`` into its on-disk record."""
        return {
            "disabled": account.disabled,
            "displayname": account.display_name,
            "email": account.email,
            "password": account.password,
            "groups": list(account.groups),
        }
