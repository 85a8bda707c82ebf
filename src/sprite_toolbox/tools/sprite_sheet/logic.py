"""Sprite composition logic — loading, packing, combining and export."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path, PurePosixPath
from types import TracebackType

from PIL import Image

from sprite_toolbox.core.datatypes import Pos, SpriteFrame, SpriteOptions
from sprite_toolbox.core.events import EventBus
from sprite_toolbox.core.exceptions import EmptySpriteError, ExportError, NoMatchesError, ToolError, ValidationError
from sprite_toolbox.core.sync import ReadWriteLock
from sprite_toolbox.tools.inliner.logic import encode_png, inline_raster
from sprite_toolbox.tools.sprite_sheet import _loader, _naming, _packer

logger = logging.getLogger(__name__)

# ── Constants ─────────────────────────────────────────────────────────────

VALID_METADATA_FORMATS: frozenset[str] = frozenset({"json", "css", "none"})


# ── Sprite ────────────────────────────────────────────────────────────────


class Sprite:
    """An ordered set of source images packed into one composite sheet.

    ``decode()`` appends images resolved from glob patterns and starts a new
    epoch.  Within an epoch the composite is drawn at most once, on a worker
    thread, and every caller of ``combine()`` shares the same future.  The
    output name is a pure function of the options and resolved paths.

    The image list, the path lists, the output name and the composite each
    sit behind their own lock.  Locks are taken in the order
    combine → images → paths and combine → name → paths.

    Args:
        options: Directories, pack mode and padding.
        event_bus: Receives ``progress`` per decoded image and ``completed``
            after an export.
    """

    def __init__(self, options: SpriteOptions | None = None, *, event_bus: EventBus | None = None) -> None:
        """Initialise an empty sprite."""
        self.options = options or SpriteOptions()
        self.event_bus = event_bus or EventBus()

        self._images: list[Image.Image] = []
        self._images_lock = ReadWriteLock()

        self._paths: list[str] = []
        self._globs: list[str] = []
        self._paths_lock = ReadWriteLock()

        self._output_name: str | None = None
        self._name_lock = threading.Lock()

        self._future: Future[bytes] | None = None
        self._combine_lock = threading.RLock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sprite-combine")
        self._export_lock = threading.Lock()

        #: Number of draw passes performed; one per epoch at most.
        self.draw_count = 0

    # ── context management ─────────────────────────────────────

    def close(self) -> None:
        """Shut down the worker, waiting for an in-flight composite."""
        self._executor.shutdown(wait=True)

    def __enter__(self) -> Sprite:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ── read-only views ────────────────────────────────────────

    def __len__(self) -> int:
        with self._images_lock.read():
            return len(self._images)

    @property
    def images(self) -> tuple[Image.Image, ...]:
        """Return the decoded images in packing order."""
        with self._images_lock.read():
            return tuple(self._images)

    @property
    def paths(self) -> tuple[str, ...]:
        """Return source paths relative to the image directory."""
        with self._paths_lock.read():
            return tuple(self._paths)

    @property
    def globs(self) -> tuple[str, ...]:
        """Return source paths as resolved from the glob patterns."""
        with self._paths_lock.read():
            return tuple(self._globs)

    @property
    def combined(self) -> bool:
        """Return ``True`` once this epoch's composite is available."""
        with self._combine_lock:
            future = self._future
        return future is not None and future.done() and not future.cancelled() and future.exception() is None

    # ── loading ────────────────────────────────────────────────

    def decode(self, *patterns: str) -> None:
        """Resolve *patterns* below the image directory and append the images.

        Images decoded before a failing file are kept; the failing file is
        not appended.  Any successful append starts a new epoch.

        Args:
            *patterns: Glob patterns relative to ``options.image_dir``.

        Raises:
            ValidationError: If no pattern is given.
            NoMatchesError: If the patterns matched no files.
            UnsupportedFormatError: If a file type cannot be decoded.
            DecodeError: If a supported file is malformed.
        """
        if not patterns:
            msg = "At least one glob pattern is required"
            raise ValidationError(msg)

        image_dir = self.options.image_dir
        matches = _loader.resolve_patterns(image_dir, patterns)

        loaded: list[tuple[Image.Image, str, str]] = []
        try:
            for match in matches:
                image = _loader.decode_image(match)
                rel = _loader.relative_path(image_dir, match)
                loaded.append((image, rel, match))
                self.event_bus.emit(
                    "progress",
                    tool="sprite_sheet",
                    current=len(loaded),
                    total=len(matches),
                    message=f"Decoded {rel} ({image.width}x{image.height})",
                )
        finally:
            if loaded:
                self._publish(loaded)

    def _publish(self, loaded: Sequence[tuple[Image.Image, str, str]]) -> None:
        with self._combine_lock:
            with self._images_lock.write(), self._paths_lock.write():
                for image, rel, match in loaded:
                    self._images.append(image)
                    self._paths.append(rel)
                    self._globs.append(match)
            self._future = None
            with self._name_lock:
                self._output_name = None
        logger.debug("Appended %d image(s); composite cache invalidated", len(loaded))

    # ── geometry ───────────────────────────────────────────────

    def _sizes(self) -> list[tuple[int, int]]:
        with self._images_lock.read():
            return [img.size for img in self._images]

    def position(self, index: int) -> Pos:
        """Return the offset of image *index*; ``len(self)`` gives the sheet extent.

        ``-1`` yields ``(0, 0)``; other out-of-range indexes yield ``(-1, -1)``.
        """
        return _packer.position(
            self._sizes(), index, vertical=self.options.vertical, padding=self.options.padding
        )

    def dimensions(self) -> Pos:
        """Return the ``(width, height)`` of the whole sheet."""
        return _packer.extent(self._sizes(), vertical=self.options.vertical, padding=self.options.padding)

    def width(self) -> int:
        """Return the sheet width in pixels."""
        return self.dimensions().x

    def height(self) -> int:
        """Return the sheet height in pixels."""
        return self.dimensions().y

    def image_width(self, index: int) -> int:
        """Return the width of image *index*, or ``-1`` when out of range."""
        with self._images_lock.read():
            if 0 <= index < len(self._images):
                return self._images[index].width
        return -1

    def image_height(self, index: int) -> int:
        """Return the height of image *index*, or ``-1`` when out of range."""
        with self._images_lock.read():
            if 0 <= index < len(self._images):
                return self._images[index].height
        return -1

    # ── name-based lookups ─────────────────────────────────────

    def lookup(self, name: str) -> int:
        """Return the index of the image matching *name*, or ``-1``.

        *name* matches a stored relative path exactly, or its base name
        without extension.  The last match wins.
        """
        with self._images_lock.read(), self._paths_lock.read():
            count = len(self._images)
            paths = list(self._paths)

        found = -1
        for index, path in enumerate(paths):
            if name in (path, PurePosixPath(path).stem):
                found = index
        return found if found < count else -1

    def names(self) -> list[str]:
        """Return the base name of every image, in packing order."""
        return [PurePosixPath(path).stem for path in self.paths]

    def file(self, name: str) -> str:
        """Return the stored relative path for *name*, or ``""``."""
        index = self.lookup(name)
        if index == -1:
            return ""
        return self.paths[index]

    def image_width_of(self, name: str) -> int:
        """Return the width of the image called *name*, or ``-1``."""
        index = self.lookup(name)
        return self.image_width(index) if index > -1 else -1

    def image_height_of(self, name: str) -> int:
        """Return the height of the image called *name*, or ``-1``."""
        index = self.lookup(name)
        return self.image_height(index) if index > -1 else -1

    def css_position(self, name: str) -> str:
        """Return a CSS ``background-position`` value for *name*, or ``""``."""
        index = self._lookup_or_warn(name)
        if index == -1:
            return ""
        pos = self.position(index)
        return f"{-pos.x}px {-pos.y}px"

    def css_dimensions(self, name: str) -> str:
        """Return CSS ``width``/``height`` declarations for *name*, or ``""``."""
        index = self._lookup_or_warn(name)
        if index == -1:
            return ""
        return f"width: {self.image_width(index)}px;\nheight: {self.image_height(index)}px"

    def css_url(self, name: str) -> str:
        """Return a CSS ``background`` shorthand pointing into the sheet, or ``""``."""
        position = self.css_position(name)
        if not position:
            return ""
        return f'url("{self.output_path()}") {position}'

    def frames(self) -> tuple[SpriteFrame, ...]:
        """Return the name, offset and size of every packed image."""
        names = self.names()
        return tuple(
            SpriteFrame(
                name=name,
                x=self.position(index).x,
                y=self.position(index).y,
                width=self.image_width(index),
                height=self.image_height(index),
            )
            for index, name in enumerate(names)
        )

    def _lookup_or_warn(self, name: str) -> int:
        index = self.lookup(name)
        if index == -1:
            logger.warning("File not found: %s. Try one of: %s", name, " ".join(self.names()))
        return index

    # ── composition ────────────────────────────────────────────

    def combine(self) -> Future[bytes]:
        """Start drawing the composite, or return the epoch's existing future.

        The future resolves to PNG bytes, or raises ``EmptySpriteError`` when
        the sheet would have no area.  A failed draw is not cached.
        """
        with self._combine_lock:
            if self._future is None:
                with self._images_lock.read():
                    snapshot = list(self._images)
                future = self._executor.submit(self._draw, snapshot)
                self._future = future
                future.add_done_callback(self._discard_failed)
            return self._future

    def wait(self, timeout: float | None = None) -> bytes:
        """Block until the composite is ready and return its PNG bytes.

        Raises:
            EmptySpriteError: If there is nothing to draw.
            TimeoutError: If *timeout* elapses first; drawing continues.
        """
        return self.combine().result(timeout=timeout)

    def _discard_failed(self, future: Future[bytes]) -> None:
        if future.cancelled() or future.exception() is not None:
            with self._combine_lock:
                if self._future is future:
                    self._future = None

    def _draw(self, images: Sequence[Image.Image]) -> bytes:
        sizes = [img.size for img in images]
        vertical = self.options.vertical
        padding = self.options.padding
        width, height = _packer.extent(sizes, vertical=vertical, padding=padding)
        if width <= 0 or height <= 0:
            msg = f"Sprite is empty: invalid image size {width}x{height}"
            raise EmptySpriteError(msg)

        self.draw_count += 1
        canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        for index, img in enumerate(images):
            offset = _packer.position(sizes, index, vertical=vertical, padding=padding)
            canvas.paste(img.convert("RGBA"), offset)

        data = encode_png(canvas)
        logger.info("Combined %d image(s) into %dx%d sheet (%d bytes)", len(images), width, height, len(data))
        return data

    # ── naming & export ────────────────────────────────────────

    def output_path(self) -> str:
        """Return ``<rel-output-dir>/<hash6>.png`` for this epoch.

        Raises:
            NoMatchesError: If nothing has been decoded yet.
        """
        with self._name_lock:
            if self._output_name is None:
                with self._paths_lock.read():
                    globs = list(self._globs)
                if not globs:
                    msg = "No images decoded; cannot name the sprite"
                    raise NoMatchesError(msg)
                self._output_name = _naming.output_name(
                    pack=self.options.pack,
                    padding=self.options.padding,
                    globs=globs,
                    build_dir=self.options.build_dir,
                    output_dir=self.options.output_dir,
                )
            return self._output_name

    def export(self) -> Path:
        """Write the composite to ``output_dir`` and return its absolute path.

        An existing file at the destination is returned as is, without
        drawing or writing.  The file is written to a temporary sibling and
        moved into place, so the destination never holds a partial sheet.

        Raises:
            EmptySpriteError: If the sheet would be empty; no file is created.
            ExportError: If the file cannot be written.
        """
        if not len(self):
            msg = "Sprite is empty: nothing has been decoded"
            raise EmptySpriteError(msg)

        with self._export_lock:
            # Name and future must come from the same epoch.
            with self._combine_lock:
                name = self.output_path()
                target = (self.options.output_dir / PurePosixPath(name).name).absolute()
                if target.exists():
                    logger.debug("Sprite already exported to %s", target)
                    return target
                future = self.combine()

            data = future.result()
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(prefix=f".{target.stem}-", suffix=".tmp", dir=target.parent)
                os.close(fd)
            except OSError as exc:
                msg = f"Failed to write sprite to '{target}'"
                raise ExportError(msg) from exc

            tmp_path = Path(tmp_name)
            try:
                tmp_path.write_bytes(data)
                os.replace(tmp_path, target)
            except OSError as exc:
                msg = f"Failed to write sprite to '{target}'"
                raise ExportError(msg) from exc
            finally:
                tmp_path.unlink(missing_ok=True)

        logger.info("Exported sprite to %s", target)
        self.event_bus.emit("completed", tool="sprite_sheet", message=f"Wrote {len(data)} bytes to {target}")
        return target

    def inline(self) -> str:
        """Return the composite as a ``url('data:image/png;base64,...')`` value."""
        return inline_raster(self.wait())


# ── Metadata generation ──────────────────────────────────────────────────


def _generate_json_metadata(sheet_path: Path, frames: Sequence[SpriteFrame], pack: str, padding: int) -> str:
    """Generate JSON metadata for the sprite sheet.

    Args:
        sheet_path: Path to the sprite sheet image.
        frames: Frame definitions in packing order.
        pack: Pack mode used.
        padding: Pixel padding between frames.

    Returns:
        A JSON string with sprite sheet metadata.
    """
    data = {
        "sprite_sheet": sheet_path.name,
        "pack": pack,
        "padding": padding,
        "frames": [
            {"name": f.name, "x": f.x, "y": f.y, "width": f.width, "height": f.height} for f in frames
        ],
    }
    return json.dumps(data, indent=2)


def _generate_css_metadata(sheet_url: str, frames: Sequence[SpriteFrame]) -> str:
    """Generate one CSS class per frame, all sharing the sheet as background."""
    lines = [f".sprite {{ background-image: url('{sheet_url}'); }}"]
    for f in frames:
        lines.append(
            f".sprite.{f.name} {{ background-position: {-f.x}px {-f.y}px; width: {f.width}px; height: {f.height}px; }}"
        )
    return "\n".join(lines)


def write_metadata(sprite: Sprite, sheet_path: Path, metadata_format: str) -> Path | None:
    """Write a metadata file next to an exported sheet.

    Args:
        sprite: The exported sprite.
        sheet_path: Absolute path of the written sheet.
        metadata_format: ``json``, ``css`` or ``none``.

    Returns:
        Path to the metadata file, or ``None`` for ``none``.
    """
    frames = sprite.frames()
    match metadata_format:
        case "none":
            return None
        case "json":
            content = _generate_json_metadata(sheet_path, frames, sprite.options.pack, sprite.options.padding)
        case "css":
            content = _generate_css_metadata(sprite.output_path(), frames)
        case _:  # pragma: no cover
            msg = f"Unsupported metadata format: {metadata_format}"
            raise ToolError(msg)

    meta_path = sheet_path.with_suffix(f".{metadata_format}")
    meta_path.write_text(content, encoding="utf-8")
    return meta_path
