"""Unit tests for tenant URL normalization."""

import itertools

import pytest

from shared_kernel.auth.tenant_url import normalize_tenant_url


class TestNormalizeTenantUrl:
    """Tests for normalize_tenant_url."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("https://t1.example.com", "https://t1.example.com"),
            ("https://t1.example.com/", "https://t1.example.com"),
            ("  https://t1.example.com/  ", "https://t1.example.com"),
            ("https://t1.example.com/apps/cockpit", "https://t1.example.com"),
            ("https://t1.example.com?x=1", "https://t1.example.com?x=1"),
            ("http://localhost:8080/mcp", "http://localhost:8080"),
        ],
    )
    def test_reduces_to_scheme_and_host(self, raw: str, expected: str) -> None:
        """Path, padding and trailing slash should be dropped."""
        assert normalize_tenant_url(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [
            "https://t1.example.com",
            " https://t1.example.com/foo/ ",
            "t1.example.com/",
            "",
            "/",
            "//",
            "///",
            "https://",
            "https:///",
            "https:///foo",
            "x:///",
            "https://t1.example.com /x",
        ],
    )
    def test_is_idempotent(self, raw: str) -> None:
        """Normalizing twice should equal normalizing once."""
        once = normalize_tenant_url(raw)
        assert normalize_tenant_url(once) == once

    def test_is_idempotent_for_all_short_inputs(self) -> None:
        """Every short string of URL punctuation is a fixed point after one pass."""
        alphabet = "h:/. "
        for length in range(7):
            for chars in itertools.product(alphabet, repeat=length):
                once = normalize_tenant_url("".join(chars))
                assert normalize_tenant_url(once) == once, repr("".join(chars))

    def test_scheme_separator_is_never_cut(self) -> None:
        assert normalize_tenant_url("https://") == "https://"
        assert normalize_tenant_url("https:///foo") == "https://"
        assert normalize_tenant_url("//") == ""

    def test_has_no_trailing_slash_or_padding(self) -> None:
        """Canonical form should never end with a slash or whitespace."""
        result = normalize_tenant_url("\thttps://t1.example.com//\n")
        assert result == result.strip()
        assert not result.endswith("/")

    def test_url_without_scheme_is_canonicalized_not_rejected(self) -> None:
        """Malformed input is handled on a best-effort basis."""
        assert normalize_tenant_url("t1.example.com/path") == "t1.example.com"

    def test_empty_input(self) -> None:
        """Empty input should stay empty."""
        assert normalize_tenant_url("   ") == ""
