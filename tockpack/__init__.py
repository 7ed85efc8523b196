"""Build a Tock application with cargo and package it into a TAB with elf2tab."""
from __future__ import annotations

from .cli import main
from .driver import PackageDriver
from .layout import ArtifactLayout

__version__ = "0.1.0"

__all__ = ["ArtifactLayout", "PackageDriver", "main"]
