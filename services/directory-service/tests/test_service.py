"""Tests for directory CRUD semantics against a real backing file."""

from __future__ import annotations

import stat
from concurrent.futures import ThreadPoolExecutor

import pytest

from userdir.domain.account import Account
from userdir.domain.contracts import AccountEditRequest
from userdir.domain.errors import MalformedCredential, Rejected, Saved, StoreUnavailable, ValidationReason
from userdir.domain.service import DirectoryService
from userdir.repository import DirectoryRepository


def _edit(name: str, password: str = "pw", **overrides) -> AccountEditRequest:
    fields = {
        "name": name,
        "display_name": name.title(),
        "password": password,
        "confirm_password": password,
    }
    fields.update(overrides)
    return AccountEditRequest(**fields)


def test_save_then_get_round_trips(service, codec):
    outcome = service.save_account(
        _edit("bob", password="hunter2", disabled=True, email="bob@example.com", groups="  admin   dev ")
    )
    assert isinstance(outcome, Saved)

    account = service.get_account_or_default("bob")
    assert account.disabled is True
    assert account.display_name == "Bob"
    assert account.email == "bob@example.com"
    assert account.groups == ["admin", "dev"]
    assert account.password != "hunter2"
    assert codec.verify_password("hunter2", account.password)
    assert AccountEditRequest.from_account("bob", account).groups == "admin dev"


@pytest.mark.parametrize(
    ("request_", "reason"),
    [
        (_edit("", display_name="Bob", password="x"), ValidationReason.MISSING_NAME),
        (_edit("bob", display_name=""), ValidationReason.MISSING_DISPLAY_NAME),
        (_edit("bob", password=""), ValidationReason.MISSING_PASSWORD),
        (_edit("bob", confirm_password="other"), ValidationReason.PASSWORD_MISMATCH),
    ],
)
def test_rejected_save_leaves_file_untouched(service, users_file, request_, reason):
    service.save_account(_edit("existing"))
    before = users_file.read_bytes()

    outcome = service.save_account(request_)

    assert isinstance(outcome, Rejected)
    assert outcome.error.reason is reason
    assert users_file.read_bytes() == before


def test_rejected_save_does_not_need_the_store(tmp_path, codec):
    service = DirectoryService(DirectoryRepository(tmp_path / "absent.yaml"), codec)
    outcome = service.save_account(_edit("bob", confirm_password="nope"))
    assert isinstance(outcome, Rejected)


def test_save_replaces_whole_account(service):
    service.save_account(_edit("amy", email="amy@example.com", groups="admin"))
    service.save_account(_edit("amy", password="new"))

    account = service.get_account_or_default("amy")
    assert account.email == ""
    assert account.groups == []
    assert service.check_password("amy", "new")
    assert not service.check_password("amy", "pw")


def test_listing_is_sorted_by_name(service):
    for name in ("zoe", "amy", "mike"):
        service.save_account(_edit(name))
    assert [name for name, _ in service.list_accounts()] == ["amy", "mike", "zoe"]


def test_get_absent_returns_default_account(service):
    assert service.get_account_or_default("nobody") == Account()
    assert service.find_account("nobody") is None


def test_delete_absent_is_silent(service):
    service.save_account(_edit("amy"))
    before = service.list_accounts()

    service.delete_account("ghost")

    assert service.list_accounts() == before


def test_delete_removes_account(service):
    service.save_account(_edit("amy"))
    service.save_account(_edit("bob"))

    service.delete_account("amy")

    assert [name for name, _ in service.list_accounts()] == ["bob"]
    assert service.find_account("amy") is None


def test_operations_fail_when_file_missing(tmp_path, codec):
    service = DirectoryService(DirectoryRepository(tmp_path / "absent.yaml"), codec)
    with pytest.raises(StoreUnavailable):
        service.list_accounts()
    with pytest.raises(StoreUnavailable):
        service.get_account_or_default("amy")
    with pytest.raises(StoreUnavailable):
        service.save_account(_edit("amy"))
    with pytest.raises(StoreUnavailable):
        service.delete_account("amy")


def test_check_password_rules(service, users_file):
    service.save_account(_edit("amy", password="pw"))
    service.save_account(_edit("sid", password="pw", disabled=True))
    users_file.write_text(
        users_file.read_text(encoding="utf-8") + "  empty:\n    displayname: Empty\n",
        encoding="utf-8",
    )

    assert service.check_password("amy", "pw")
    assert not service.check_password("amy", "nope")
    assert not service.check_password("sid", "pw")
    assert not service.check_password("empty", "")
    assert not service.check_password("ghost", "pw")


def test_check_password_surfaces_corrupt_hash(service, users_file):
    users_file.write_text("users:\n  amy:\n    password: not-a-hash\n", encoding="utf-8")
    with pytest.raises(MalformedCredential):
        service.check_password("amy", "pw")


def test_concurrent_saves_do_not_lose_updates(service):
    names = [f"user{idx}" for idx in range(4)]
    with ThreadPoolExecutor(max_workers=len(names)) as pool:
        outcomes = list(pool.map(lambda name: service.save_account(_edit(name)), names))

    assert all(isinstance(outcome, Saved) for outcome in outcomes)
    assert [name for name, _ in service.list_accounts()] == sorted(names)


def test_numeric_and_boolean_like_names_are_kept(service, users_file):
    users_file.write_text("users:\n  007: {displayname: Bond}\n  no: {displayname: Nobody}\n", encoding="utf-8")

    assert [name for name, _ in service.list_accounts()] == ["007", "no"]

    service.delete_account("ghost")
    assert service.get_account_or_default("no").display_name == "Nobody"
    assert service.find_account("False") is None


def test_delete_keeps_file_mode(service, users_file):
    users_file.chmod(0o644)
    service.delete_account("ghost")
    assert stat.S_IMODE(users_file.stat().st_mode) == 0o644
