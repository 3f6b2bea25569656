"""Unit tests for the keyring-backed credential store."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from keyring.errors import KeyringError

from credentials.infrastructure.keyring_store import (
    INDEX_ACCOUNT,
    KeyringCredentialStore,
)
from credentials.ports.exceptions import CredentialStoreError
from credentials.ports.repositories import ICredentialStore
from shared_kernel.auth.credentials import BasicCredential
from shared_kernel.auth.exceptions import (
    CredentialCorruptedError,
    CredentialNotFoundError,
)

SERVICE = "c8y-mcp-test"
TENANT = "https://t1.example.com"


def credential(user: str = "jane", password: str = "secret", url: str = TENANT):
    return BasicCredential(user=user, password=password, tenant_url=url)


class TestRoundTrip:
    """Tests for save and lookup."""

    def test_implements_port(self, credential_store) -> None:
        assert isinstance(credential_store, ICredentialStore)

    def test_save_then_lookup(self, credential_store) -> None:
        credential_store.save(credential())

        assert credential_store.lookup(TENANT) == credential()

    def test_lookup_normalizes_tenant_url(self, credential_store) -> None:
        """Lookups should accept any padding, path or trailing slash."""
        credential_store.save(credential())

        assert credential_store.lookup("  https://t1.example.com/apps/ ") == credential()

    def test_overwrite_keeps_last_value(self, credential_store) -> None:
        credential_store.save(credential(password="first"))
        credential_store.save(credential(password="second"))

        assert credential_store.lookup(TENANT).password == "second"
        assert len(credential_store.list_all()) == 1

    def test_record_format(self, credential_store, memory_keyring) -> None:
        """Records should be stored as JSON with a camelCase tenantUrl."""
        credential_store.save(credential())

        raw = memory_keyring.entries[(SERVICE, TENANT)]
        assert json.loads(raw) == {
            "user": "jane",
            "password": "secret",
            "tenantUrl": TENANT,
        }

    def test_lookup_missing_raises_not_found(self, credential_store, store_probe) -> None:
        with pytest.raises(CredentialNotFoundError, match="t2.example.com"):
            credential_store.lookup("https://t2.example.com")

        store_probe.credential_not_found.assert_called_once_with(
            "https://t2.example.com"
        )

    def test_save_reports_probe_event(self, credential_store, store_probe) -> None:
        credential_store.save(credential())

        store_probe.credential_saved.assert_called_once_with(TENANT)


class TestListAll:
    """Tests for enumerating stored credentials."""

    def test_empty_store(self, credential_store) -> None:
        assert credential_store.list_all() == []

    def test_lists_every_saved_tenant(self, credential_store) -> None:
        credential_store.save(credential(url="https://t1.example.com"))
        credential_store.save(credential(url="https://t2.example.com/"))

        urls = [c.tenant_url for c in credential_store.list_all()]

        assert urls == ["https://t1.example.com", "https://t2.example.com"]

    def test_skips_entries_missing_from_keyring(
        self, credential_store, memory_keyring, store_probe
    ) -> None:
        credential_store.save(credential())
        del memory_keyring.entries[(SERVICE, TENANT)]

        assert credential_store.list_all() == []
        store_probe.credential_skipped.assert_called_once_with(TENANT, reason="missing")

    def test_corrupted_index_treated_as_empty(
        self, credential_store, memory_keyring, store_probe
    ) -> None:
        memory_keyring.entries[(SERVICE, INDEX_ACCOUNT)] = "{not json"

        assert credential_store.list_all() == []
        store_probe.index_corrupted.assert_called_once_with(SERVICE)

    def test_corrupted_index_rebuilt_from_stored_records(
        self, credential_store, memory_keyring, store_probe
    ) -> None:
        t2 = "https://t2.example.com"
        credential_store.save(credential())
        credential_store.save(credential(url=t2))
        memory_keyring.entries[(SERVICE, INDEX_ACCOUNT)] = (
            f'["{TENANT}", "{t2}", "https://gone.example.com", 4'
        )

        assert credential_store.list_all() == [credential(), credential(url=t2)]
        store_probe.index_corrupted.assert_called_with(SERVICE)

    def test_save_after_index_corruption_keeps_other_tenants(
        self, credential_store, memory_keyring
    ) -> None:
        t2, t3 = "https://t2.example.com", "https://t3.example.com"
        credential_store.save(credential())
        credential_store.save(credential(url=t2))
        memory_keyring.entries[(SERVICE, INDEX_ACCOUNT)] = f'["{TENANT}", "{t2}"'

        credential_store.save(credential(url=t3))

        assert json.loads(memory_keyring.entries[(SERVICE, INDEX_ACCOUNT)]) == [
            TENANT,
            t2,
            t3,
        ]
        assert [c.tenant_url for c in credential_store.list_all()] == [TENANT, t2, t3]


class TestCorruption:
    """Tests for unreadable records.

    Enumeration skips them, a direct lookup fails loudly.
    """

    @pytest.fixture
    def corrupted_store(self, credential_store, memory_keyring):
        credential_store.save(credential(url="https://good.example.com"))
        credential_store.save(credential(url="https://bad.example.com"))
        memory_keyring.entries[(SERVICE, "https://bad.example.com")] = "not json {"
        return credential_store

    def test_list_all_skips_corrupted(self, corrupted_store, store_probe) -> None:
        urls = [c.tenant_url for c in corrupted_store.list_all()]

        assert urls == ["https://good.example.com"]
        store_probe.credential_skipped.assert_called_once()

    def test_lookup_raises_corrupted(self, corrupted_store) -> None:
        with pytest.raises(CredentialCorruptedError) as exc_info:
            corrupted_store.lookup("https://bad.example.com")

        assert exc_info.value.tenant_url == "https://bad.example.com"

    def test_tenant_url_mismatch_is_corruption(
        self, credential_store, memory_keyring
    ) -> None:
        """A record claiming another tenant must not be used."""
        memory_keyring.entries[(SERVICE, TENANT)] = json.dumps(
            {"user": "u", "password": "p", "tenantUrl": "https://other.example.com"}
        )

        with pytest.raises(CredentialCorruptedError, match="mismatch"):
            credential_store.lookup(TENANT)

    def test_record_without_tenant_url_is_corruption(
        self, credential_store, memory_keyring
    ) -> None:
        memory_keyring.entries[(SERVICE, TENANT)] = json.dumps(
            {"user": "u", "password": "p"}
        )

        with pytest.raises(CredentialCorruptedError):
            credential_store.lookup(TENANT)

    def test_record_without_password_loads_empty(
        self, credential_store, memory_keyring
    ) -> None:
        """Missing fields are left for the resolver to reject."""
        memory_keyring.entries[(SERVICE, TENANT)] = json.dumps(
            {"user": "u", "tenantUrl": TENANT}
        )

        assert credential_store.lookup(TENANT).password == ""


class TestDelete:
    """Tests for removing credentials."""

    def test_delete_existing(self, credential_store, store_probe) -> None:
        credential_store.save(credential())

        assert credential_store.delete(TENANT + "/") is True
        assert credential_store.list_all() == []
        with pytest.raises(CredentialNotFoundError):
            credential_store.lookup(TENANT)
        store_probe.credential_deleted.assert_called_once_with(TENANT)

    def test_delete_twice_returns_false(self, credential_store) -> None:
        credential_store.save(credential())

        assert credential_store.delete(TENANT) is True
        assert credential_store.delete(TENANT) is False

    def test_delete_unknown_tenant(self, credential_store) -> None:
        assert credential_store.delete("https://nobody.example.com") is False

    def test_delete_keeps_other_tenants(self, credential_store) -> None:
        credential_store.save(credential(url="https://t1.example.com"))
        credential_store.save(credential(url="https://t2.example.com"))

        credential_store.delete("https://t1.example.com")

        assert [c.tenant_url for c in credential_store.list_all()] == [
            "https://t2.example.com"
        ]


class TestBackendFailures:
    """Tests for keyring backend errors."""

    def test_save_failure_raises_store_error(self, store_probe) -> None:
        backend = MagicMock()
        backend.get_password.return_value = None
        backend.set_password.side_effect = KeyringError("locked")
        store = KeyringCredentialStore(SERVICE, backend=backend, probe=store_probe)

        with pytest.raises(CredentialStoreError, match="locked"):
            store.save(credential())

        store_probe.backend_failed.assert_called_once()

    def test_failed_record_write_rolls_back_index(
        self, monkeypatch, credential_store, memory_keyring, store_probe
    ) -> None:
        write = memory_keyring.set_password

        def set_password(service, username, password):
            if username == TENANT:
                raise KeyringError("locked")
            write(service, username, password)

        monkeypatch.setattr(memory_keyring, "set_password", set_password)

        with pytest.raises(CredentialStoreError, match="locked"):
            credential_store.save(credential())

        assert json.loads(memory_keyring.entries[(SERVICE, INDEX_ACCOUNT)]) == []
        assert credential_store.list_all() == []
        with pytest.raises(CredentialNotFoundError):
            credential_store.lookup(TENANT)

    def test_failed_index_write_stores_no_record(
        self, monkeypatch, credential_store, memory_keyring
    ) -> None:
        write = memory_keyring.set_password

        def set_password(service, username, password):
            if username == INDEX_ACCOUNT:
                raise KeyringError("index locked")
            write(service, username, password)

        monkeypatch.setattr(memory_keyring, "set_password", set_password)

        with pytest.raises(CredentialStoreError, match="index locked"):
            credential_store.save(credential())

        assert (SERVICE, TENANT) not in memory_keyring.entries

    def test_read_failure_raises_store_error(self, store_probe) -> None:
        backend = MagicMock()
        backend.get_password.side_effect = KeyringError("no backend")
        store = KeyringCredentialStore(SERVICE, backend=backend, probe=store_probe)

        with pytest.raises(CredentialStoreError):
            store.lookup(TENANT)

    def test_uses_default_keyring_lazily(self, monkeypatch, memory_keyring) -> None:
        """The platform keyring should only be looked up on first use."""
        get_keyring = MagicMock(return_value=memory_keyring)
        monkeypatch.setattr("keyring.get_keyring", get_keyring)

        store = KeyringCredentialStore(SERVICE)
        get_keyring.assert_not_called()

        store.save(credential())
        assert store.lookup(TENANT) == credential()
        get_keyring.assert_called_once()
