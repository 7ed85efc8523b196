from __future__ import annotations

from pathlib import Path
import unittest

from tockpack.layout import ArtifactLayout


class ArtifactLayoutTests(unittest.TestCase):
    def test_paths_for_blinky(self) -> None:
        layout = ArtifactLayout(binary_name="blinky", target_triple="thumbv6m-none-eabi")

        self.assertEqual(layout.profile, "release")
        self.assertEqual(layout.elf_path, Path("target/thumbv6m-none-eabi/release/blinky"))
        self.assertEqual(layout.tab_path, Path("target/blinky.tab"))
        self.assertEqual(layout.tbf_path, Path("target/thumbv6m-none-eabi/release/blinky.tbf"))

    def test_paths_are_a_pure_function_of_the_arguments(self) -> None:
        first = ArtifactLayout("hello", "riscv32imac-unknown-none-elf")
        second = ArtifactLayout("hello", "riscv32imac-unknown-none-elf")

        self.assertEqual(first, second)
        self.assertEqual(
            (first.elf_path, first.tab_path, first.tbf_path),
            (second.elf_path, second.tab_path, second.tbf_path),
        )

    def test_tab_path_does_not_depend_on_target(self) -> None:
        arm = ArtifactLayout("blinky", "thumbv7em-none-eabi")
        riscv = ArtifactLayout("blinky", "riscv32imc-unknown-none-elf")

        self.assertEqual(arm.tab_path, riscv.tab_path)
        self.assertNotEqual(arm.elf_path, riscv.elf_path)


if __name__ == "__main__":
    unittest.main()
