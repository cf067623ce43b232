"""Filesystem writers for generated Go packages."""

from __future__ import annotations

from collections.abc import Mapping
import logging
import os
from pathlib import Path
import shutil
import subprocess
import tempfile
from typing import Optional

log = logging.getLogger(__name__)


class WriteError(RuntimeError):
    """Raised when output files cannot be written."""


def create_output_layout(output_dir: Path, *, package_name: str) -> Path:
    """Create the output directory and the Go package directory inside it.

    Args:
        output_dir (Path): Root output directory; may already exist.
        package_name (str): Go package name, used as the directory name.

    Returns:
        Path: Path to the created package directory.
    """
    package_dir = output_dir / package_name
    if package_dir.exists():
        raise WriteError(f"Output package directory already exists: {package_dir}")
    try:
        package_dir.mkdir(parents=True, exist_ok=False)
    except OSError as exc:
        raise WriteError(f"Failed to create directory {package_dir}: {exc}") from exc
    return package_dir


def write_package_files(*, package_dir: Path, files: Mapping[str, str]) -> list[Path]:
    """Write rendered Go sources into the package directory.

    Args:
        package_dir (Path): Directory created by ``create_output_layout``.
        files (Mapping[str, str]): File name to source text.

    Returns:
        list[Path]: Written paths in the order given.
    """
    written = []
    for file_name, content in files.items():
        path = package_dir / file_name
        _write_file(path, content)
        written.append(path)
    return written


def format_generated_tree(*, package_dir: Path) -> None:
    """Run ``gofmt -w`` over the generated package when gofmt is installed.

    Formatting is cosmetic: a missing binary or a gofmt failure is logged and the
    unformatted sources are kept.
    """
    gofmt = shutil.which("gofmt")
    if gofmt is None:
        log.info("gofmt not found on PATH; leaving %s unformatted", package_dir)
        return
    try:
        subprocess.run(
            [gofmt, "-w", str(package_dir)],
            check=True,
            capture_output=True,
            text=True,
        )
    except OSError as exc:
        log.warning("Failed to execute gofmt for %s: %s", package_dir, exc)
    except subprocess.CalledProcessError as exc:
        error_text = exc.stderr.strip() or exc.stdout.strip() or str(exc)
        log.warning("gofmt failed for %s: %s", package_dir, error_text)


def _write_file(path: Path, content: str) -> None:
    # Write to a sibling temporary file and rename so readers never see a partial file.
    temp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(content)
        os.replace(temp_path, path)
    except OSError as exc:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise WriteError(f"Failed to write file {path}: {exc}") from exc
