"""Command line interface for tockpack."""
from __future__ import annotations

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Iterable, List, Sequence
import sys

from .bundle import BundleError, BundleMember, BundleWriter
from .config import ConfigError, PackagingConfig
from .console import Console
from .driver import DriverError, MissingArtifact, PackageDriver, PackageResult, ToolFailure, UsageError
from .runner import CommandRunner, RecordingCommandRunner, SubprocessCommandRunner, format_command

PROG = "tockpack"
EXAMPLE_ARGS = "blinky thumbv6m-none-eabi"


def _make_runner(dry_run: bool) -> CommandRunner:
    return RecordingCommandRunner() if dry_run else SubprocessCommandRunner()


def _build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog=PROG,
        usage=f"{PROG} [options] <binary-name> <target-triple>",
        description="Build a Tock application with cargo and package it with elf2tab",
    )
    parser.add_argument("positionals", nargs="*", metavar="ARG", help="Binary name followed by the target triple")
    parser.add_argument("--config", "-c", type=Path, default=None, help="Packaging configuration file (toml, json or yaml)")
    parser.add_argument("--directory", "-C", type=Path, default=None, help="Run in this directory instead of the current one")
    parser.add_argument("--dry-run", "-n", action="store_true", help="Show what would be done without doing it")
    parser.add_argument("--bundle", type=Path, default=None, help="Archive the produced TAB and TBF into this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output (maps to debug)")
    parser.add_argument(
        "--log",
        "-l",
        choices=["none", "error", "info", "debug"],
        default="none",
        help="Set log level (default: none)",
    )
    return parser


def _parse_arguments(argv: Sequence[str]) -> tuple[Namespace, List[str]]:
    args, unknown = _build_parser().parse_known_args(list(argv))
    return args, [*args.positionals, *unknown]


def _usage_lines() -> List[str]:
    return [
        f"Usage: {PROG} <binary-name> <target-triple>",
        f"Example: {PROG} {EXAMPLE_ARGS}",
    ]


def _emit_dry_run_output(runner: RecordingCommandRunner, *, workspace: Path) -> None:
    for line in runner.iter_formatted(workspace=workspace):
        print(line)


def _bundle_members(result: PackageResult, workspace: Path, console: Console) -> List[BundleMember]:
    layout = result.layout
    tab = workspace / layout.tab_path
    tbf = workspace / layout.tbf_path
    members = [BundleMember(path=tab, arcname=tab.name)]
    if result.dry_run or tbf.is_file():
        members.append(BundleMember(path=tbf, arcname=tbf.name))
    else:
        console.info(f"{layout.tbf_path} not found; bundling {layout.tab_path} only")
    return members


def _resolve_workspace(args: Namespace) -> Path:
    if args.directory is None:
        return Path.cwd()
    return args.directory.expanduser().resolve()


def main(argv: Iterable[str] | None = None) -> int:
    args, positionals = _parse_arguments(sys.argv[1:] if argv is None else list(argv))

    try:
        if len(positionals) != 2:
            raise UsageError("expected exactly two arguments")
        binary_name, target_triple = positionals

        console = Console.from_options(log=args.log, verbose=args.verbose, dry_run=args.dry_run)
        workspace = _resolve_workspace(args)
        config = PackagingConfig.from_file(args.config) if args.config else PackagingConfig()
        if args.config:
            console.debug(f"Loaded configuration from {args.config}")

        runner = _make_runner(args.dry_run)
        driver = PackageDriver(runner, console, workspace=workspace, config=config)
        result = driver.run(binary_name, target_triple)

        if isinstance(runner, RecordingCommandRunner):
            _emit_dry_run_output(runner, workspace=workspace)
        else:
            print(result.completion_message)

        if args.bundle is not None:
            target = args.bundle if args.bundle.is_absolute() else workspace / args.bundle
            members = _bundle_members(result, workspace, console)
            BundleWriter(console).write(members, target)
            if not result.dry_run:
                print(f"Bundled {len(members)} artifact(s) into {args.bundle}")
    except UsageError:
        for line in _usage_lines():
            print(line)
        return UsageError.exit_status
    except MissingArtifact as exc:
        print(f"Error: {exc}")
        return exc.exit_status
    except DriverError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        if isinstance(exc, ToolFailure):
            console.error(format_command(exc.command))
        return exc.exit_status
    except (ConfigError, BundleError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    return 0


__all__ = ["main"]
