"""Glob resolution and raster decoding for sprite sources."""

from __future__ import annotations

import glob
import logging
from collections.abc import Iterable
from pathlib import Path

from PIL import Image

from sprite_toolbox.core.exceptions import DecodeError, NoMatchesError, UnsupportedFormatError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset({".png", ".gif", ".jpg", ".jpeg"})

# Pillow plugins tried when opening a source; anything else fails to decode.
_PIL_FORMATS: tuple[str, ...] = ("PNG", "GIF", "JPEG")


def can_decode(ext: str) -> bool:
    """Return ``True`` if *ext* (with or without the dot) is a supported raster type."""
    ext = ext.lower()
    if not ext.startswith("."):
        ext = f".{ext}"
    return ext in SUPPORTED_EXTENSIONS


def resolve_pattern(image_dir: Path, pattern: str) -> list[str]:
    """Resolve one glob pattern below *image_dir* to a sorted list of files.

    When the pattern matches nothing it is retried with ``*`` appended, so a
    logical base name such as ``"139"`` finds ``139.jpg``.

    Args:
        image_dir: Root directory the pattern is relative to.
        pattern: Glob pattern, e.g. ``"icons/*.png"`` or ``"139"``.

    Returns:
        Matching file paths, sorted; empty when nothing matched.
    """
    matches = _files(_glob(image_dir, pattern))
    if not matches:
        matches = _files(_glob(image_dir, f"{pattern}*"))
        if matches:
            logger.debug("Pattern '%s' resolved via '*' suffix to %d file(s)", pattern, len(matches))
    return matches


def resolve_patterns(image_dir: Path, patterns: Iterable[str]) -> list[str]:
    """Resolve every pattern in order and concatenate the matches.

    Raises:
        NoMatchesError: If no pattern matched a single file.
    """
    patterns = list(patterns)
    matches: list[str] = []
    for pattern in patterns:
        found = resolve_pattern(image_dir, pattern)
        if not found:
            logger.info("No images were found for pattern '%s' in %s", pattern, image_dir)
        matches.extend(found)

    if not matches:
        msg = f"No images matched {patterns} in '{image_dir}'"
        raise NoMatchesError(msg)
    return matches


def relative_path(image_dir: Path, match: str) -> str:
    """Return *match* relative to *image_dir* as a POSIX string.

    The configured root is tried first, then its absolute form; a path
    outside both is returned unchanged.
    """
    path = Path(match)
    try:
        return path.relative_to(image_dir).as_posix()
    except ValueError:
        pass
    try:
        return path.absolute().relative_to(image_dir.absolute()).as_posix()
    except ValueError:
        return path.as_posix()


def decode_image(path: str) -> Image.Image:
    """Fully decode the image at *path* into memory.

    Raises:
        UnsupportedFormatError: If decoding failed and the extension is not
            one of ``SUPPORTED_EXTENSIONS``.
        DecodeError: If a file with a supported extension is malformed.
    """
    try:
        with Image.open(path, formats=_PIL_FORMATS) as img:
            img.load()
            return img.copy()
    except Exception as exc:
        ext = Path(path).suffix
        if not can_decode(ext):
            msg = f"Format '{ext or path}' not supported: {path}"
            raise UnsupportedFormatError(msg) from exc
        msg = f"Error processing '{path}': {exc}"
        raise DecodeError(msg) from exc


def _files(matches: list[str]) -> list[str]:
    return sorted(m for m in matches if Path(m).is_file())


def _glob(image_dir: Path, pattern: str) -> list[str]:
    # Only the pattern is glob syntax; brackets in the root are literal.
    return glob.glob(str(Path(glob.escape(str(image_dir))) / pattern))
