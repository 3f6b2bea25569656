"""Unit test fixtures with in-memory replacements for external systems."""

from unittest.mock import MagicMock

import pytest
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

from credentials.infrastructure.keyring_store import KeyringCredentialStore

TEST_SERVICE = "c8y-mcp-test"


class InMemoryKeyring(KeyringBackend):
    """Keyring backend holding entries in a dict instead of the OS keyring."""

    priority = 1

    def __init__(self):
        super().__init__()
        self.entries: dict[tuple[str, str], str] = {}

    def get_password(self, service, username):
        return self.entries.get((service, username))

    def set_password(self, service, username, password):
        self.entries[(service, username)] = password

    def delete_password(self, service, username):
        try:
            del self.entries[(service, username)]
        except KeyError:
            raise PasswordDeleteError(f"No entry for {username}") from None


@pytest.fixture
def memory_keyring() -> InMemoryKeyring:
    """Provide an empty in-memory keyring backend."""
    return InMemoryKeyring()


@pytest.fixture
def store_probe() -> MagicMock:
    """Provide a mocked credential store probe."""
    return MagicMock()


@pytest.fixture
def credential_store(
    memory_keyring: InMemoryKeyring, store_probe: MagicMock
) -> KeyringCredentialStore:
    """Provide a credential store backed by the in-memory keyring."""
    return KeyringCredentialStore(
        service=TEST_SERVICE, backend=memory_keyring, probe=store_probe
    )


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings from the environment in every test."""
    from infrastructure.settings import get_server_settings, get_settings

    get_settings.cache_clear()
    get_server_settings.cache_clear()
    yield
    get_settings.cache_clear()
    get_server_settings.cache_clear()
