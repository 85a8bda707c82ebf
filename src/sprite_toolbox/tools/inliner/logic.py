"""Data-URI inlining of raster and SVG assets."""

from __future__ import annotations

import base64
import io
import logging
import re
from pathlib import Path
from typing import BinaryIO
from urllib.parse import quote

from PIL import Image

from sprite_toolbox.core.datatypes import InlineResult
from sprite_toolbox.core.exceptions import DecodeError

logger = logging.getLogger(__name__)

# ── Constants ─────────────────────────────────────────────────────────────

SVG_SNIFF_BYTES = 512

_SVG_TOKEN = b"<svg"

# Tokens end at whitespace and after ``>`` so ``?><svg`` still yields ``<svg``.
_TOKEN_SPLIT = re.compile(rb"\s+|(?<=>)")

_TAG_GAP = re.compile(rb">\s+<")

# Characters left unescaped in a URL path segment besides the unreserved set.
_PATH_SAFE = "$&+,/:;=@"


# ── Detection ─────────────────────────────────────────────────────────────


def is_svg(data: bytes | BinaryIO) -> bool:
    """Return ``True`` if the first bytes of *data* look like an SVG document.

    The first ``SVG_SNIFF_BYTES`` bytes are split into tokens; the data is
    SVG when a token equal to ``<svg`` appears before any token that is not
    valid UTF-8.  Seekable streams are rewound after peeking.

    Args:
        data: Raw bytes or a binary stream.
    """
    if isinstance(data, bytes | bytearray):
        head = bytes(data[:SVG_SNIFF_BYTES])
    else:
        start = data.tell() if data.seekable() else None
        head = data.read(SVG_SNIFF_BYTES)
        if start is not None:
            data.seek(start)

    for token in _TOKEN_SPLIT.split(head):
        if not token:
            continue
        if token == _SVG_TOKEN:
            return True
        try:
            token.decode("utf-8")
        except UnicodeDecodeError:
            return False
    return False


# ── Encoders ──────────────────────────────────────────────────────────────


def inline_raster(buffer: bytes) -> str:
    """Wrap PNG bytes as ``url('data:image/png;base64,...')``."""
    encoded = base64.b64encode(buffer).decode("ascii")
    return f"url('data:image/png;base64,{encoded}')"


def inline_svg(data: bytes, *, use_base64: bool = False) -> str:
    """Wrap SVG bytes as a CSS ``url("data:image/svg+xml...")`` value.

    The UTF-8 form drops CRLF pairs, closes gaps between tags and
    percent-encodes the result as a URL path.  The base64 form encodes the
    bytes unchanged.

    Args:
        data: Raw SVG document.
        use_base64: Emit the base64 variant instead of the UTF-8 one.
    """
    if use_base64:
        encoded = base64.b64encode(data).decode("ascii")
        return f'url("data:image/svg+xml;base64,{encoded}")'

    compact = _TAG_GAP.sub(b"><", data.replace(b"\r\n", b""))
    encoded = quote(compact, safe=_PATH_SAFE)
    return f'url("data:image/svg+xml;utf8,{encoded}")'


def encode_png(image: Image.Image) -> bytes:
    """Encode *image* losslessly as PNG bytes."""
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


# ── Core logic ────────────────────────────────────────────────────────────


def inline_file(source: Path | BinaryIO, *, use_base64: bool = False) -> InlineResult:
    """Inline a single asset read from a path or binary stream.

    SVG documents go through ``inline_svg``; anything else is decoded by
    Pillow and re-encoded as PNG.

    Args:
        source: File path or readable binary stream.
        use_base64: For SVG input, emit the base64 variant.

    Returns:
        An ``InlineResult`` with the data URI and detected kind.

    Raises:
        DecodeError: If the data is neither SVG nor a decodable raster.
    """
    if isinstance(source, Path):
        data = source.read_bytes()
        label = str(source)
    else:
        data = source.read()
        label = getattr(source, "name", "<stream>")

    if is_svg(data):
        logger.debug("Inlining %s as SVG (%d bytes)", label, len(data))
        return InlineResult(data_uri=inline_svg(data, use_base64=use_base64), kind="svg", source_bytes=len(data))

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            png = encode_png(img)
    except Exception as exc:
        msg = f"Could not decode '{label}' as SVG or raster image"
        raise DecodeError(msg) from exc

    logger.debug("Inlining %s as PNG (%d bytes)", label, len(png))
    return InlineResult(data_uri=inline_raster(png), kind="raster", source_bytes=len(data))
