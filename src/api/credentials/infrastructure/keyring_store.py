"""Credential store backed by the operating system keyring.

Each tenant is one keyring entry: the service is the configured keyring
service identifier, the account is the canonical tenant URL and the secret
is the JSON record ``{"user", "password", "tenantUrl"}``.

The ``keyring`` API cannot enumerate entries, so the store also maintains an
index entry listing every stored tenant URL. The index is written before a
record, and a damaged index is rebuilt from the tenant URLs still legible in
it that have a stored record.
"""

from __future__ import annotations

import json
import re

import keyring
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError, PasswordDeleteError
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from credentials.infrastructure.observability import (
    CredentialStoreProbe,
    DefaultCredentialStoreProbe,
)
from credentials.ports.exceptions import CredentialStoreError
from shared_kernel.auth.credentials import BasicCredential
from shared_kernel.auth.exceptions import (
    CredentialCorruptedError,
    CredentialNotFoundError,
)
from shared_kernel.auth.tenant_url import normalize_tenant_url

INDEX_ACCOUNT = "__tenants__"

_index_adapter = TypeAdapter(list[str])

_TENANT_URL_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*://[^\s\"\\,\[\]{}]+")


class StoredCredentialRecord(BaseModel):
    """Persisted form of a Basic credential.

    Missing ``user`` or ``password`` fields load as empty strings so that the
    resolver can reject them as invalid credentials. The tenant URL is
    required: it is compared with the keyring account on every read.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user: str = ""
    password: str = ""
    tenant_url: str = Field(alias="tenantUrl")

    @classmethod
    def from_credential(cls, credential: BasicCredential) -> StoredCredentialRecord:
        return cls(
            user=credential.user,
            password=credential.password,
            tenant_url=credential.tenant_url,
        )

    def to_credential(self) -> BasicCredential:
        return BasicCredential(
            user=self.user, password=self.password, tenant_url=self.tenant_url
        )


class KeyringCredentialStore:
    """ICredentialStore implementation on top of ``keyring``.

    Keyring I/O is synchronous. The store is meant for single-user mode,
    where tool calls are handled one at a time.
    """

    def __init__(
        self,
        service: str,
        backend: KeyringBackend | None = None,
        probe: CredentialStoreProbe | None = None,
    ):
        """Initialize the store.

        Args:
            service: Keyring service identifier shared by all entries.
            backend: Keyring backend to use. Defaults to the backend
                ``keyring`` selects for the platform, looked up on first use.
            probe: Domain probe for observability.
        """
        self._service = service
        self._backend = backend
        self._probe = probe or DefaultCredentialStoreProbe()

    @property
    def _keyring(self) -> KeyringBackend:
        if self._backend is None:
            self._backend = keyring.get_keyring()
        return self._backend

    def list_all(self) -> list[BasicCredential]:
        credentials = []
        for tenant_url in self._read_index():
            raw = self._get(tenant_url)
            if raw is None:
                self._probe.credential_skipped(tenant_url, reason="missing")
                continue
            try:
                credentials.append(self._deserialize(tenant_url, raw))
            except CredentialCorruptedError as e:
                self._probe.credential_skipped(tenant_url, reason=e.reason)
        return credentials

    def lookup(self, tenant_url: str) -> BasicCredential:
        tenant_url = normalize_tenant_url(tenant_url)
        raw = self._get(tenant_url)
        if raw is None:
            self._probe.credential_not_found(tenant_url)
            raise CredentialNotFoundError(tenant_url)
        credential = self._deserialize(tenant_url, raw)
        self._probe.credential_loaded(tenant_url)
        return credential

    def save(self, credential: BasicCredential) -> None:
        tenant_url = normalize_tenant_url(credential.tenant_url)
        record = StoredCredentialRecord.from_credential(credential)

        # Index first: a record is never stored without being listed
        index = self._read_index()
        added = tenant_url not in index
        if added:
            self._write_index([*index, tenant_url])

        try:
            self._keyring.set_password(
                self._service, tenant_url, record.model_dump_json(by_alias=True)
            )
        except KeyringError as e:
            self._probe.backend_failed(tenant_url, operation="save", error=e)
            if added:
                self._write_index(index)
            raise CredentialStoreError(
                f"Failed to store credentials for tenant {tenant_url}: {e}"
            ) from e

        self._probe.credential_saved(tenant_url)

    def delete(self, tenant_url: str) -> bool:
        tenant_url = normalize_tenant_url(tenant_url)
        existed = self._get(tenant_url) is not None
        if existed:
            try:
                self._keyring.delete_password(self._service, tenant_url)
            except PasswordDeleteError:
                existed = False
            except KeyringError as e:
                self._probe.backend_failed(tenant_url, operation="delete", error=e)
                raise CredentialStoreError(
                    f"Failed to delete credentials for tenant {tenant_url}: {e}"
                ) from e

        index = self._read_index()
        if tenant_url in index:
            self._write_index([url for url in index if url != tenant_url])

        if existed:
            self._probe.credential_deleted(tenant_url)
        return existed

    def _get(self, account: str) -> str | None:
        try:
            return self._keyring.get_password(self._service, account)
        except KeyringError as e:
            self._probe.backend_failed(account, operation="read", error=e)
            raise CredentialStoreError(
                f"Failed to read credentials for tenant {account}: {e}"
            ) from e

    def _deserialize(self, tenant_url: str, raw: str) -> BasicCredential:
        try:
            record = StoredCredentialRecord.model_validate_json(raw)
        except ValidationError as e:
            self._probe.credential_corrupted(tenant_url, reason="invalid JSON record")
            raise CredentialCorruptedError(tenant_url, "invalid JSON record") from e

        if normalize_tenant_url(record.tenant_url) != tenant_url:
            self._probe.credential_corrupted(tenant_url, reason="tenant URL mismatch")
            raise CredentialCorruptedError(tenant_url, "tenant URL mismatch")
        return record.to_credential()

    def _read_index(self) -> list[str]:
        raw = self._get(INDEX_ACCOUNT)
        if raw is None:
            return []
        try:
            return _index_adapter.validate_json(raw)
        except ValidationError:
            self._probe.index_corrupted(self._service)
            return self._recover_index(raw)

    def _recover_index(self, raw: str) -> list[str]:
        """Rebuild the index from tenant URLs still legible in a damaged one.

        Only URLs that still have a stored record are kept.
        """
        candidates = dict.fromkeys(
            normalize_tenant_url(match) for match in _TENANT_URL_PATTERN.findall(raw)
        )
        return [url for url in candidates if self._get(url) is not None]

    def _write_index(self, tenant_urls: list[str]) -> None:
        try:
            self._keyring.set_password(
                self._service, INDEX_ACCOUNT, json.dumps(tenant_urls)
            )
        except KeyringError as e:
            self._probe.backend_failed(INDEX_ACCOUNT, operation="index", error=e)
            raise CredentialStoreError(f"Failed to update credential index: {e}") from e
