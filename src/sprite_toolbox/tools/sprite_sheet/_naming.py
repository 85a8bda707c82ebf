"""Deterministic output names derived from composition inputs."""

from __future__ import annotations

import hashlib
import os
from collections.abc import Sequence
from pathlib import Path, PurePath

OUTPUT_EXTENSION = ".png"
HASH_LENGTH = 6

# Used when the output directory is the build directory itself.
DEFAULT_OUTPUT_DIR_NAME = "image"


def relative_output_dir(build_dir: Path, output_dir: Path) -> str:
    """Return *output_dir* relative to *build_dir* as a POSIX string."""
    try:
        rel = os.path.relpath(output_dir, build_dir)
    except ValueError:
        # Different drives on Windows; no relative form exists.
        rel = str(output_dir)
    rel = PurePath(rel).as_posix()
    if rel in ("", "."):
        return DEFAULT_OUTPUT_DIR_NAME
    return rel


def output_name(
    *,
    pack: str,
    padding: int,
    globs: Sequence[str],
    build_dir: Path,
    output_dir: Path,
) -> str:
    """Return ``<rel-output-dir>/<hash6>.png`` for the given inputs.

    Pixel data is not part of the seed, so the name is known before the
    composite is drawn.  A source file edited in place keeps its old name.
    """
    seed = f"{pack}{padding}{'/'.join(globs)}"
    digest = hashlib.md5(seed.encode("utf-8"), usedforsecurity=False).hexdigest()
    stem = digest[:HASH_LENGTH]
    return f"{relative_output_dir(build_dir, output_dir)}/{stem}{OUTPUT_EXTENSION}"
