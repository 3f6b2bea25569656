"""Unit tests for the c8y-mcp command-line entry point."""

from unittest.mock import MagicMock, patch

import pytest

import cli
from shared_kernel.execution_mode import ExecutionMode


class TestParseArgs:
    def test_no_subcommand_means_stdio(self):
        assert cli.parse_args([]).command is None

    def test_serve_options(self):
        args = cli.parse_args(["serve", "--host", "127.0.0.1", "--port", "8080"])

        assert args.command == "serve"
        assert args.host == "127.0.0.1"
        assert args.port == 8080

    def test_remove_accepts_several_tenants(self):
        args = cli.parse_args(
            ["creds", "remove", "https://t1.example.com", "https://t2.example.com"]
        )

        assert args.creds_command == "remove"
        assert args.tenant_urls == ["https://t1.example.com", "https://t2.example.com"]

    def test_creds_requires_subcommand(self):
        with pytest.raises(SystemExit):
            cli.parse_args(["creds"])


class TestMain:
    def test_stdio_runs_single_user_server(self, monkeypatch):
        server = MagicMock()
        monkeypatch.setattr("cumulocity.presentation.mcp.mcp", server)
        monkeypatch.setattr("cumulocity.dependencies._client_resolver", None)
        monkeypatch.setattr("infrastructure.logging.configure_logging", MagicMock())

        with patch("infrastructure.mcp_dependencies.build_client_resolver") as build:
            assert cli.main([]) == 0

        build.assert_called_once_with(ExecutionMode.SINGLE_USER)
        server.tool.assert_called_once()
        assert server.tool.call_args.kwargs["name"] == "list-credentials"
        server.run.assert_called_once_with(transport="stdio", show_banner=False)

    def test_serve_runs_uvicorn(self, monkeypatch):
        monkeypatch.setenv("PORT", "4000")
        run = MagicMock()
        monkeypatch.setattr("uvicorn.run", run)

        assert cli.main(["serve", "--host", "127.0.0.1"]) == 0

        run.assert_called_once_with("main:app", host="127.0.0.1", port=4000)

    def test_creds_list_uses_credential_store(self, credential_store):
        with patch(
            "credentials.dependencies.get_credential_store",
            return_value=credential_store,
        ), patch("credentials.presentation.cli.list_credentials", return_value=0) as run:
            assert cli.main(["creds", "list"]) == 0

        run.assert_called_once_with(credential_store, cli.console)

    def test_interrupt_is_reported(self, credential_store):
        with patch(
            "credentials.dependencies.get_credential_store",
            return_value=credential_store,
        ), patch(
            "credentials.presentation.cli.add_credential", side_effect=KeyboardInterrupt
        ):
            assert cli.main(["creds", "add"]) == 130
