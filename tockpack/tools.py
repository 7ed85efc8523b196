"""Argument vectors for cargo and elf2tab."""
from __future__ import annotations

from typing import List

from .config import PackagingConfig
from .layout import ArtifactLayout

KERNEL_MAJOR = 2
KERNEL_MINOR = 1
STACK_SIZE = 1024
MINIMUM_FOOTER_SIZE = 256


def cargo_build_command(layout: ArtifactLayout, config: PackagingConfig) -> List[str]:
    return [
        *config.cargo,
        "build",
        f"--{layout.profile}",
        "--bin",
        layout.binary_name,
        "--target",
        layout.target_triple,
        *config.cargo_args,
    ]


def elf2tab_command(layout: ArtifactLayout, config: PackagingConfig) -> List[str]:
    """Build the elf2tab invocation that writes the TAB for ``layout``.

    The ELF path is the single positional input and comes last.
    """

    return [
        *config.elf2tab,
        "--package-name",
        layout.binary_name,
        "--kernel-major",
        str(KERNEL_MAJOR),
        "--kernel-minor",
        str(KERNEL_MINOR),
        "--stack",
        str(STACK_SIZE),
        "--minimum-footer-size",
        str(MINIMUM_FOOTER_SIZE),
        "--output-file",
        str(layout.tab_path),
        str(layout.elf_path),
    ]


__all__ = [
    "KERNEL_MAJOR",
    "KERNEL_MINOR",
    "MINIMUM_FOOTER_SIZE",
    "STACK_SIZE",
    "cargo_build_command",
    "elf2tab_command",
]
