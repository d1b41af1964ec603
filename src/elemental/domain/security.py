"""Crypto policies and the FIPS kernel command line."""

from __future__ import annotations

from enum import StrEnum


class CryptoPolicy(StrEnum):
    DEFAULT = "default"
    FIPS = "fips"

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return value in cls._value2member_map_


FIPS_CMDLINE_ARGS: tuple[str, ...] = ("fips=1",)


def append_fips_cmdline(cmdline: str) -> str:
    """Append the FIPS boot parameters to *cmdline* unless already present."""
    args = cmdline.split()
    for arg in FIPS_CMDLINE_ARGS:
        if arg not in args:
            args.append(arg)
    return " ".join(args)
