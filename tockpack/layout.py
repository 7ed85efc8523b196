"""Artifact locations derived from the binary name and target triple."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

PROFILE = "release"
TARGET_DIR = Path("target")


@dataclass(frozen=True, slots=True)
class ArtifactLayout:
    """Where cargo leaves the ELF and where elf2tab writes its outputs.

    All paths are relative to the workspace directory.
    """

    binary_name: str
    target_triple: str

    @property
    def profile(self) -> str:
        return PROFILE

    @property
    def profile_dir(self) -> Path:
        return TARGET_DIR / self.target_triple / PROFILE

    @property
    def elf_path(self) -> Path:
        return self.profile_dir / self.binary_name

    @property
    def tab_path(self) -> Path:
        return TARGET_DIR / f"{self.binary_name}.tab"

    @property
    def tbf_path(self) -> Path:
        return self.profile_dir / f"{self.binary_name}.tbf"


__all__ = ["ArtifactLayout", "PROFILE", "TARGET_DIR"]
