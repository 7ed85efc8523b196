"""Release archives of the packaged application artifacts."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List
import gzip
import os
import shutil
import tarfile
import tempfile
import zipfile

import zstandard as zstd

from .console import Console

_SUFFIX_FORMATS: list[tuple[str, str]] = [
    (".tar.zst", "zst"),
    (".tzst", "zst"),
    (".tar.gz", "gztar"),
    (".tgz", "gztar"),
    (".tar", "tar"),
    (".zip", "zip"),
]


class BundleError(RuntimeError):
    """Raised when a release bundle cannot be created."""


@dataclass(slots=True)
class BundleMember:
    """A file to store in the bundle under ``arcname``."""

    path: Path
    arcname: str


def resolve_bundle_format(target: Path) -> str:
    filename = target.name.lower()
    for suffix, fmt in sorted(_SUFFIX_FORMATS, key=lambda item: len(item[0]), reverse=True):
        if filename.endswith(suffix):
            return fmt
    supported = ", ".join(suffix for suffix, _ in _SUFFIX_FORMATS)
    raise BundleError(f"Unable to determine bundle format from '{target.name}'. Supported suffixes: {supported}")


class BundleWriter:
    """Write a set of artifact files into a single archive."""

    def __init__(self, console: Console) -> None:
        self._console = console

    @staticmethod
    def _zstd_compression_params(source_size: int) -> zstd.ZstdCompressionParameters:
        size = max(1, source_size)
        window_log = max(10, min(27, (size - 1).bit_length()))
        threads = min(os.cpu_count() or 1, max(1, size // (32 * 1024 * 1024)))
        return zstd.ZstdCompressionParameters(
            compression_level=19,
            threads=threads,
            write_checksum=True,
            write_content_size=True,
            window_log=window_log,
        )

    def write(self, members: Iterable[BundleMember], target: Path) -> Path:
        """Write ``members`` into ``target``.

        The archive is assembled in a temporary file beside ``target`` and
        renamed into place. A failed write leaves nothing at ``target``.
        """
        items: List[BundleMember] = list(members)
        archive_format = resolve_bundle_format(target)

        if self._console.dry_run:
            names = ", ".join(member.arcname for member in items)
            self._console.dry(f"Would bundle {names} into {target}")
            return target

        for member in items:
            if not member.path.is_file():
                raise BundleError(f"Bundle member '{member.path}' does not exist")

        target.parent.mkdir(parents=True, exist_ok=True)
        self._console.debug(f"Writing {archive_format} bundle {target}")

        with tempfile.NamedTemporaryFile(dir=target.parent, suffix=".partial", delete=False) as handle:
            partial = Path(handle.name)
        try:
            self._write_archive(items, archive_format, partial)
            os.replace(partial, target)
        except zstd.ZstdError as exc:
            raise BundleError(f"Cannot compress bundle '{target}': {exc}") from exc
        finally:
            partial.unlink(missing_ok=True)
        return target

    def _write_archive(self, items: List[BundleMember], archive_format: str, output: Path) -> None:
        if archive_format == "zip":
            self._write_zip(items, output)
            return

        temp_tar = self._write_pax_tar(items, temp_dir=output.parent)
        try:
            if archive_format == "zst":
                params = self._zstd_compression_params(temp_tar.stat().st_size)
                compressor = zstd.ZstdCompressor(compression_params=params)
                with temp_tar.open("rb") as src, output.open("wb") as dst:
                    compressor.copy_stream(src, dst)
            elif archive_format == "gztar":
                with temp_tar.open("rb") as src, gzip.GzipFile(output, "wb", compresslevel=9, mtime=0) as dst:
                    shutil.copyfileobj(src, dst)
            else:
                os.replace(temp_tar, output)
        finally:
            temp_tar.unlink(missing_ok=True)

    @staticmethod
    def _write_pax_tar(members: List[BundleMember], *, temp_dir: Path) -> Path:
        with tempfile.NamedTemporaryFile(dir=temp_dir, suffix=".tar", delete=False) as handle:
            temp_path = Path(handle.name)

        try:
            with tarfile.open(temp_path, mode="w", format=tarfile.PAX_FORMAT) as tar:
                for member in members:
                    tar.add(member.path, arcname=member.arcname)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise
        return temp_path

    @staticmethod
    def _write_zip(members: List[BundleMember], target: Path) -> None:
        with zipfile.ZipFile(
            target,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=9,
            strict_timestamps=False,
        ) as archive:
            for member in members:
                archive.write(member.path, member.arcname)


__all__ = ["BundleError", "BundleMember", "BundleWriter", "resolve_bundle_format"]
