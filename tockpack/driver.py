"""Build a binary with cargo and package it into a TAB with elf2tab."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from .config import PackagingConfig
from .console import Console
from .layout import ArtifactLayout
from .runner import CommandError, CommandRunner, format_command
from .tools import cargo_build_command, elf2tab_command


class DriverError(RuntimeError):
    """Base class for failures that terminate the driver."""

    exit_status = 1


class UsageError(DriverError):
    pass


class MissingArtifact(DriverError):
    def __init__(self, path: Path):
        super().__init__(f"ELF file not found at {path}")
        self.path = path


class WorkspaceError(DriverError):
    def __init__(self, workspace: Path):
        super().__init__(f"{workspace} is not a directory")
        self.workspace = workspace


class ToolNotFound(DriverError):
    exit_status = 127

    def __init__(self, tool: str):
        super().__init__(f"{tool}: command not found")
        self.tool = tool


class ToolFailure(DriverError):
    """A subordinate tool exited non-zero; its status becomes the driver's."""

    label = "tool"

    def __init__(self, returncode: int, command: Sequence[str]):
        super().__init__(f"{self.label} failed with exit code {returncode}")
        self.returncode = returncode
        self.command = list(command)
        # a negative code means the tool died from a signal; report it as a shell would
        self.exit_status = returncode if returncode > 0 else 128 - returncode


class BuildFailure(ToolFailure):
    label = "cargo build"


class PackagingFailure(ToolFailure):
    label = "elf2tab"


@dataclass(slots=True)
class PackageResult:
    layout: ArtifactLayout
    commands: List[List[str]] = field(default_factory=list)
    dry_run: bool = False

    @property
    def completion_message(self) -> str:
        return f"Built `{self.layout.tab_path}` and `{self.layout.tbf_path}`"


class PackageDriver:
    """Runs the build, artifact check and packaging steps in order.

    Every failure raises a :class:`DriverError` subclass and nothing after the
    failing step runs.
    """

    def __init__(
        self,
        runner: CommandRunner,
        console: Console,
        *,
        workspace: Path,
        config: PackagingConfig | None = None,
    ) -> None:
        self._runner = runner
        self._console = console
        self._workspace = workspace
        self._config = config or PackagingConfig()

    def run(self, binary_name: str, target_triple: str) -> PackageResult:
        if not self._workspace.is_dir():
            raise WorkspaceError(self._workspace)
        layout = ArtifactLayout(binary_name=binary_name, target_triple=target_triple)
        result = PackageResult(layout=layout, dry_run=self._console.dry_run)
        self._console.debug(f"ELF: {layout.elf_path}")
        self._console.debug(f"TAB: {layout.tab_path}")
        self._console.debug(f"TBF: {layout.tbf_path}")

        build = cargo_build_command(layout, self._config)
        self._console.info(f"Building {binary_name} for {target_triple}")
        self._invoke(build, note="build", failure=BuildFailure)
        result.commands.append(build)

        self._check_artifact(layout.elf_path)

        package = elf2tab_command(layout, self._config)
        self._console.info(f"Packaging {layout.elf_path} into {layout.tab_path}")
        self._invoke(package, note="package", failure=PackagingFailure)
        result.commands.append(package)
        return result

    def _invoke(self, command: List[str], *, note: str, failure: type[ToolFailure]) -> None:
        self._console.debug(f"Running: {format_command(command)}")
        try:
            self._runner.run(command, cwd=self._workspace, note=note)
        except CommandError as exc:
            raise failure(exc.result.returncode, command) from exc
        except FileNotFoundError as exc:
            if exc.filename != command[0]:
                raise
            raise ToolNotFound(command[0]) from exc

    def _check_artifact(self, elf_path: Path) -> None:
        if self._console.dry_run:
            self._console.dry(f"Would check that {elf_path} exists")
            return
        if not (self._workspace / elf_path).is_file():
            raise MissingArtifact(elf_path)


__all__ = [
    "BuildFailure",
    "DriverError",
    "MissingArtifact",
    "PackageDriver",
    "PackageResult",
    "PackagingFailure",
    "ToolFailure",
    "ToolNotFound",
    "UsageError",
    "WorkspaceError",
]
