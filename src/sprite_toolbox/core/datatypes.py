"""Shared value objects used across tools."""

from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple

from sprite_toolbox.core.exceptions import ValidationError

VERTICAL = "vertical"
HORIZONTAL = "horizontal"
VALID_PACK_MODES: frozenset[str] = frozenset({VERTICAL, HORIZONTAL})


class Pos(NamedTuple):
    """An ``(x, y)`` pixel offset, or a whole-sheet extent."""

    x: int
    y: int


@dataclass(frozen=True)
class SpriteOptions:
    """Immutable composition options for one ``Sprite``.

    Attributes:
        image_dir: Root that glob patterns are resolved against.
        build_dir: Directory the generated stylesheet lives in.
        output_dir: Directory the composite image is written to.
        pack: Stacking axis, ``"vertical"`` or ``"horizontal"``.
        padding: Pixel gap between consecutive images.
    """

    image_dir: Path = Path()
    build_dir: Path = Path()
    output_dir: Path = Path()
    pack: str = VERTICAL
    padding: int = 0

    def __post_init__(self) -> None:
        """Reject unknown pack modes and negative padding."""
        if self.pack not in VALID_PACK_MODES:
            msg = f"Pack mode must be one of {sorted(VALID_PACK_MODES)}, got '{self.pack}'"
            raise ValidationError(msg)
        if self.padding < 0:
            msg = f"Padding must be >= 0, got {self.padding}"
            raise ValidationError(msg)

    @property
    def vertical(self) -> bool:
        """Return ``True`` when images stack top to bottom."""
        return self.pack == VERTICAL


@dataclass(frozen=True)
class ImageData:
    """Reference to an image file with metadata."""

    path: Path
    width: int
    height: int
    format: str


@dataclass(frozen=True)
class SpriteFrame:
    """Position and size of a single image within a sprite sheet."""

    name: str
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class SpriteSheetResult:
    """Result of a sprite sheet export."""

    sheet: ImageData
    frames: tuple[SpriteFrame, ...]
    pack: str
    padding: int
    output_name: str
    metadata_path: Path | None = None


@dataclass(frozen=True)
class InlineResult:
    """Result of inlining a single asset as a data URI."""

    data_uri: str
    kind: str
    source_bytes: int
