"""Architecture tests using pytest-archon.

These tests enforce DDD architectural boundaries between layers and
between the Credentials and Cumulocity bounded contexts.
"""

from pytest_archon import archrule


class TestSharedKernelBoundaries:
    """The shared kernel must not depend on any bounded context."""

    def test_shared_kernel_does_not_import_contexts(self):
        (
            archrule("shared_kernel_independent")
            .match("shared_kernel*")
            .should_not_import("credentials*", "cumulocity*", "infrastructure*")
            .check("shared_kernel")
        )

    def test_auth_does_not_import_web_frameworks(self):
        """Credential parsing should be usable without an ASGI stack."""
        (
            archrule("auth_no_web")
            .match("shared_kernel.auth*")
            .should_not_import("fastapi*", "starlette*", "fastmcp*")
            .check("shared_kernel")
        )


class TestBoundedContextIsolation:
    """Cross-context wiring happens only in infrastructure.mcp_dependencies."""

    def test_cumulocity_does_not_import_credentials(self):
        """The resolver sees stored credentials only through its port."""
        (
            archrule("cumulocity_no_credentials")
            .match("cumulocity*")
            .should_not_import("credentials*", "infrastructure.mcp_dependencies")
            .check("cumulocity")
        )

    def test_credentials_does_not_import_cumulocity(self):
        (
            archrule("credentials_no_cumulocity")
            .match("credentials*")
            .should_not_import("cumulocity*", "infrastructure.mcp_dependencies")
            .check("credentials")
        )


class TestCumulocityLayerBoundaries:
    """Tests for layering inside the Cumulocity context."""

    def test_domain_is_pure(self):
        """Domain objects should be framework-agnostic."""
        (
            archrule("domain_pure")
            .match("cumulocity.domain*")
            .should_not_import(
                "cumulocity.application*",
                "cumulocity.infrastructure*",
                "cumulocity.presentation*",
                "httpx*",
                "fastmcp*",
            )
            .check("cumulocity")
        )

    def test_ports_do_not_import_implementations(self):
        (
            archrule("ports_no_infrastructure")
            .match("cumulocity.ports*")
            .should_not_import("cumulocity.infrastructure*", "cumulocity.application*")
            .check("cumulocity")
        )

    def test_application_does_not_import_infrastructure(self):
        """The resolver depends on ports, not on the HTTP client."""
        (
            archrule("application_no_infrastructure")
            .match("cumulocity.application*")
            .should_not_import(
                "cumulocity.infrastructure*", "cumulocity.presentation*", "httpx*"
            )
            .check("cumulocity")
        )


class TestCredentialsLayerBoundaries:
    def test_ports_do_not_import_keyring(self):
        (
            archrule("credential_ports_no_keyring")
            .match("credentials.ports*")
            .should_not_import("credentials.infrastructure*", "keyring*")
            .check("credentials")
        )
