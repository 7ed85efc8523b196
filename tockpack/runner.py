"""Run the external build and packaging tools, or record them for a dry run."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence
import shlex
import subprocess


def format_command(command: Sequence[str]) -> str:
    return " ".join(shlex.quote(part) for part in command)


@dataclass
class CommandResult:
    """Outcome of one tool invocation."""

    command: Sequence[str]
    returncode: int


class CommandError(RuntimeError):
    """Raised by :meth:`CommandRunner.run` when the tool exits non-zero."""

    def __init__(self, result: CommandResult):
        super().__init__(f"Command failed with exit code {result.returncode}: {format_command(result.command)}")
        self.result = result


class CommandRunner:
    """Interface shared by the real and the recording runner."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        note: str | None = None,
    ) -> CommandResult:
        raise NotImplementedError

    def format_command(self, command: Sequence[str]) -> str:
        return format_command(command)


class SubprocessCommandRunner(CommandRunner):
    """Executes tools via :mod:`subprocess` and blocks until they exit.

    The tool's output goes straight to the terminal. A missing executable or
    working directory surfaces as :class:`FileNotFoundError` from
    :func:`subprocess.run`; callers decide how to report it.
    """

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        note: str | None = None,
    ) -> CommandResult:
        process = subprocess.run(list(command), cwd=str(cwd) if cwd else None, check=False)
        result = CommandResult(command=list(command), returncode=process.returncode)
        if result.returncode != 0:
            raise CommandError(result)
        return result


@dataclass(slots=True)
class RecordedCommand:
    command: List[str]
    cwd: str | None
    note: str | None = None


class RecordingCommandRunner(CommandRunner):
    """Records commands instead of executing them; every call reports success."""

    def __init__(self) -> None:
        self.commands: List[RecordedCommand] = []

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        note: str | None = None,
    ) -> CommandResult:
        self.commands.append(RecordedCommand(command=list(command), cwd=str(cwd) if cwd else None, note=note))
        return CommandResult(command=list(command), returncode=0)

    def iter_formatted(self, *, workspace: Path | None = None) -> Iterable[str]:
        default_cwd = str(workspace) if workspace else None
        for record in self.commands:
            parts: List[str] = ["[dry-run]"]
            if record.note:
                parts.append(record.note)
            cwd = record.cwd or default_cwd
            if cwd:
                parts.append(f"(cwd={cwd})")
            parts.append(self.format_command(record.command))
            yield " ".join(parts)


__all__ = [
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "RecordedCommand",
    "RecordingCommandRunner",
    "SubprocessCommandRunner",
    "format_command",
]
