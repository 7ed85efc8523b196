"""Diagnostic output for the driver, separate from the fixed result lines."""
from __future__ import annotations

import sys


class Console:
    """Prefixed diagnostics filtered by log level.

    Levels: none < error < info < debug. The default 'none' keeps a normal run
    down to the lines the driver prints itself.
    """

    LEVELS = {
        "none": 0,
        "error": 1,
        "info": 2,
        "debug": 3,
    }

    def __init__(self, level: str = "none", dry_run: bool = False) -> None:
        if level not in self.LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        self.level_name = level
        self.level = self.LEVELS[level]
        self.dry_run = dry_run

    @classmethod
    def from_options(cls, *, log: str | None, verbose: bool, dry_run: bool) -> "Console":
        """An explicit ``--log`` wins; otherwise ``--verbose`` means debug."""
        if log and log != "none":
            level = log
        else:
            level = "debug" if verbose else "none"
        return cls(level=level, dry_run=dry_run)

    def _enabled(self, level: str) -> bool:
        return self.level >= self.LEVELS[level]

    def error(self, message: str) -> None:
        if self._enabled("error"):
            print(f"[ERROR] {message}", file=sys.stderr)

    def info(self, message: str) -> None:
        if self._enabled("info"):
            print(f"[INFO] {message}")

    def debug(self, message: str) -> None:
        if self._enabled("debug"):
            print(f"[DEBUG] {message}")

    def dry(self, message: str) -> None:
        if self.dry_run:
            print(f"[DRY] {message}")
