from __future__ import annotations

from pathlib import Path

import pytest

from userdir.repository import DirectoryRepository
from userdir.domain.service import DirectoryService
from userdir.security.passwords import CredentialCodec


@pytest.fixture(scope="session")
def codec() -> CredentialCodec:
    return CredentialCodec()


@pytest.fixture()
def users_file(tmp_path: Path) -> Path:
    """An empty but valid directory file."""
    path = tmp_path / "users.yaml"
    path.write_text("users: {}\n", encoding="utf-8")
    return path


@pytest.fixture()
def repository(users_file: Path) -> DirectoryRepository:
    return DirectoryRepository(users_file)


@pytest.fixture()
def service(repository: DirectoryRepository, codec: CredentialCodec) -> DirectoryService:
    return DirectoryService(repository, codec)
