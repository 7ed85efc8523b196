from __future__ import annotations

from contextlib import redirect_stdout
from pathlib import Path
import io
import tempfile
import unittest

from fakes import ScriptedRunner, touch
from tockpack.console import Console
from tockpack.driver import (
    BuildFailure,
    MissingArtifact,
    PackageDriver,
    PackagingFailure,
    ToolNotFound,
    WorkspaceError,
)
from tockpack.runner import CommandRunner, RecordingCommandRunner

ELF = "target/thumbv6m-none-eabi/release/blinky"


class _MissingToolRunner(CommandRunner):
    def run(self, command, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", command[0])


class PackageDriverTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.workspace = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _driver(self, runner: CommandRunner, *, console: Console | None = None) -> PackageDriver:
        return PackageDriver(runner, console or Console(), workspace=self.workspace)

    def test_success_invokes_both_tools_in_order(self) -> None:
        runner = ScriptedRunner(effects={"cargo": touch(ELF)})

        result = self._driver(runner).run("blinky", "thumbv6m-none-eabi")

        self.assertEqual(runner.tools(), ["cargo", "elf2tab"])
        self.assertEqual(runner.cwds, [self.workspace, self.workspace])
        self.assertEqual(
            runner.call_for("elf2tab"),
            [
                "elf2tab",
                "--package-name", "blinky",
                "--kernel-major", "2",
                "--kernel-minor", "1",
                "--stack", "1024",
                "--minimum-footer-size", "256",
                "--output-file", "target/blinky.tab",
                ELF,
            ],
        )
        self.assertEqual(result.commands, runner.calls)
        self.assertIn("target/blinky.tab", result.completion_message)
        self.assertIn("target/thumbv6m-none-eabi/release/blinky.tbf", result.completion_message)

    def test_build_failure_stops_before_packaging(self) -> None:
        runner = ScriptedRunner(returncodes={"cargo": 101}, effects={"cargo": touch(ELF)})

        with self.assertRaises(BuildFailure) as ctx:
            self._driver(runner).run("blinky", "thumbv6m-none-eabi")

        self.assertEqual(ctx.exception.exit_status, 101)
        self.assertEqual(runner.tools(), ["cargo"])
        self.assertFalse((self.workspace / "target/blinky.tab").exists())

    def test_missing_elf_stops_before_packaging(self) -> None:
        runner = ScriptedRunner()

        with self.assertRaises(MissingArtifact) as ctx:
            self._driver(runner).run("blinky", "thumbv6m-none-eabi")

        self.assertEqual(str(ctx.exception), f"ELF file not found at {ELF}")
        self.assertEqual(ctx.exception.exit_status, 1)
        self.assertEqual(runner.tools(), ["cargo"])

    def test_directory_at_elf_path_is_not_an_artifact(self) -> None:
        (self.workspace / ELF).mkdir(parents=True)
        runner = ScriptedRunner()

        with self.assertRaises(MissingArtifact):
            self._driver(runner).run("blinky", "thumbv6m-none-eabi")

    def test_packaging_failure_propagates_status(self) -> None:
        runner = ScriptedRunner(returncodes={"elf2tab": 7}, effects={"cargo": touch(ELF)})

        with self.assertRaises(PackagingFailure) as ctx:
            self._driver(runner).run("blinky", "thumbv6m-none-eabi")

        self.assertEqual(ctx.exception.exit_status, 7)
        self.assertEqual(str(ctx.exception), "elf2tab failed with exit code 7")

    def test_signal_exit_maps_like_a_shell(self) -> None:
        runner = ScriptedRunner(returncodes={"cargo": -9})

        with self.assertRaises(BuildFailure) as ctx:
            self._driver(runner).run("blinky", "thumbv6m-none-eabi")

        self.assertEqual(ctx.exception.exit_status, 137)

    def test_missing_tool(self) -> None:
        with self.assertRaises(ToolNotFound) as ctx:
            self._driver(_MissingToolRunner()).run("blinky", "thumbv6m-none-eabi")

        self.assertEqual(ctx.exception.exit_status, 127)
        self.assertEqual(ctx.exception.tool, "cargo")

    def test_missing_workspace_is_not_a_missing_tool(self) -> None:
        workspace = self.workspace / "gone"
        runner = ScriptedRunner()

        with self.assertRaises(WorkspaceError) as ctx:
            PackageDriver(runner, Console(), workspace=workspace).run("blinky", "thumbv6m-none-eabi")

        self.assertEqual(ctx.exception.exit_status, 1)
        self.assertEqual(str(ctx.exception), f"{workspace} is not a directory")
        self.assertEqual(runner.calls, [])

    def test_other_file_not_found_errors_propagate(self) -> None:
        class _VanishedDirectoryRunner(CommandRunner):
            def run(self, command, **kwargs):
                raise FileNotFoundError(2, "No such file or directory", str(kwargs["cwd"]))

        with self.assertRaises(FileNotFoundError):
            self._driver(_VanishedDirectoryRunner()).run("blinky", "thumbv6m-none-eabi")

    def test_dry_run_skips_artifact_check(self) -> None:
        runner = RecordingCommandRunner()
        console = Console(dry_run=True)
        buffer = io.StringIO()

        with redirect_stdout(buffer):
            result = self._driver(runner, console=console).run("blinky", "thumbv6m-none-eabi")

        self.assertTrue(result.dry_run)
        self.assertEqual([record.note for record in runner.commands], ["build", "package"])
        self.assertIn(f"[DRY] Would check that {ELF} exists", buffer.getvalue())

    def test_verbose_console_logs_paths(self) -> None:
        runner = ScriptedRunner(effects={"cargo": touch(ELF)})
        buffer = io.StringIO()

        with redirect_stdout(buffer):
            self._driver(runner, console=Console(level="debug")).run("blinky", "thumbv6m-none-eabi")

        output = buffer.getvalue()
        self.assertIn(f"[DEBUG] ELF: {ELF}", output)
        self.assertIn("[INFO] Building blinky for thumbv6m-none-eabi", output)
        self.assertIn("[DEBUG] Running: cargo build --release", output)


if __name__ == "__main__":
    unittest.main()
