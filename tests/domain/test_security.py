"""Tests for crypto policy helpers."""

from __future__ import annotations

from elemental.domain.security import CryptoPolicy, append_fips_cmdline


class TestCryptoPolicy:
    def test_is_valid(self) -> None:
        assert CryptoPolicy.is_valid("fips")
        assert CryptoPolicy.is_valid("default")
        assert not CryptoPolicy.is_valid("FIPS-140")


class TestAppendFipsCmdline:
    def test_appends(self) -> None:
        assert append_fips_cmdline("console=ttyS0") == "console=ttyS0 fips=1"

    def test_empty(self) -> None:
        assert append_fips_cmdline("") == "fips=1"

    def test_idempotent(self) -> None:
        once = append_fips_cmdline("quiet")
        assert append_fips_cmdline(once) == once
