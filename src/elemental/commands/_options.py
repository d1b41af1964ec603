"""Click options shared by ``install`` and ``reset``."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click

from elemental.domain.deployment import BOOTLOADERS, SNAPSHOTTERS
from elemental.domain.security import CryptoPolicy

F = Callable[..., Any]

_DEPLOYMENT_OPTIONS: tuple[Callable[[F], F], ...] = (
    click.option(
        "--os-image",
        help="OS image to deploy, e.g. registry.example.com/os:1.0 or dir:///srv/os.",
    ),
    click.option("--overlay", help="Image source layered on top of the OS."),
    click.option(
        "--config",
        "config_script",
        type=click.Path(dir_okay=False),
        help="Script run inside the deployed system after installation.",
    ),
    click.option(
        "-d",
        "--description",
        type=click.Path(dir_okay=False),
        help="Deployment description file (YAML).",
    ),
    click.option(
        "-b",
        "--bootloader",
        type=click.Choice(sorted(BOOTLOADERS)),
        help="Bootloader to install; 'none' keeps the described one.",
    ),
    click.option("--cmdline", "kernel_cmdline", help="Kernel command line."),
    click.option(
        "--crypto-policy",
        type=click.Choice([p.value for p in CryptoPolicy]),
        help="System crypto policy.",
    ),
    click.option(
        "--snapshotter",
        type=click.Choice(sorted(SNAPSHOTTERS)),
        help="Snapshotter; 'overwrite' uses ext4 without read-write volumes.",
    ),
    click.option(
        "--verify/--no-verify",
        default=True,
        help="Verify image signatures while unpacking.",
    ),
    click.option("--local", is_flag=True, help="Resolve OCI images from the local store."),
)


def deployment_options(*, create_boot_entry: bool) -> Callable[[F], F]:
    """Apply the deployment flags shared by install and reset.

    *create_boot_entry* is the command's default for
    ``--create-boot-entry/--no-create-boot-entry``.
    """
    boot_entry = click.option(
        "--create-boot-entry/--no-create-boot-entry",
        default=create_boot_entry,
        show_default=True,
        help="Create a firmware boot entry for the installed system.",
    )

    def decorator(func: F) -> F:
        for option in reversed((*_DEPLOYMENT_OPTIONS, boot_entry)):
            func = option(func)
        return func

    return decorator


def given(**options: Any) -> dict[str, Any]:
    """Drop options left unset so flag records fall back to their defaults."""
    return {key: value for key, value in options.items() if value is not None}
