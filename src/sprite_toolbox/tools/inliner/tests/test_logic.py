"""Tests for data-URI inlining."""

from __future__ import annotations

import base64
import io
from pathlib import Path

import pytest
from PIL import Image

from sprite_toolbox.core.exceptions import DecodeError
from sprite_toolbox.tools.inliner.logic import inline_file, inline_raster, inline_svg, is_svg

SVG = (
    b'<?xml version="1.0" encoding="utf-8"?>\r\n'
    b'<svg version="1.1" xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10">\r\n'
    b"\t<g>\r\n"
    b'\t\t<circle cx="5" cy="5" r="4"/>\r\n'
    b"\t</g>\r\n"
    b"</svg>\r\n"
)


def _png_bytes(size: tuple[int, int] = (1, 1)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", size, color=(255, 0, 0, 255)).save(buf, format="PNG")
    return buf.getvalue()


# ── TestIsSvg ─────────────────────────────────────────────────────────────


class TestIsSvg:
    """Tests for SVG sniffing."""

    def test_xml_prolog_then_svg(self) -> None:
        """An XML prolog followed by an ``<svg`` element is SVG."""
        assert is_svg(SVG)

    def test_prolog_without_whitespace(self) -> None:
        """``?><svg`` on one line is still detected."""
        assert is_svg(b'<?xml version="1.0"?><svg width="1"></svg>')

    def test_png_is_not_svg(self) -> None:
        """PNG data is not SVG."""
        assert not is_svg(_png_bytes())

    def test_binary_before_svg(self) -> None:
        """Invalid UTF-8 ahead of the tag means not SVG."""
        assert not is_svg(b"\xff\xfe\xfd <svg>")

    def test_only_first_bytes_are_checked(self) -> None:
        """A tag past the sniff window is not found."""
        assert not is_svg(b" " + b"x" * 600 + b" <svg>")

    def test_stream_is_rewound(self) -> None:
        """Peeking a seekable stream leaves its position unchanged."""
        stream = io.BytesIO(SVG)
        assert is_svg(stream)
        assert stream.tell() == 0


# ── TestEncoders ──────────────────────────────────────────────────────────


class TestEncoders:
    """Tests for the raw encoders."""

    def test_inline_raster(self) -> None:
        """Raster data is base64-wrapped as a PNG data URI."""
        assert inline_raster(b"abc") == "url('data:image/png;base64,YWJj')"

    def test_inline_svg_base64(self) -> None:
        """The base64 variant encodes bytes unchanged."""
        uri = inline_svg(SVG, use_base64=True)
        prefix = 'url("data:image/svg+xml;base64,'
        assert uri.startswith(prefix)
        assert uri.endswith('")')
        assert base64.b64decode(uri[len(prefix) : -2]) == SVG

    def test_inline_svg_utf8_compacts(self) -> None:
        """CRLF pairs go, tag gaps close, and the result is percent-encoded."""
        assert inline_svg(b"<svg>\r\n  <g/>\r\n</svg>") == 'url("data:image/svg+xml;utf8,%3Csvg%3E%3Cg/%3E%3C/svg%3E")'

    def test_inline_svg_utf8_keeps_path_safe_chars(self) -> None:
        """``=``, ``:`` and ``/`` stay literal; quotes and spaces are escaped."""
        uri = inline_svg(b'<svg xmlns="http://www.w3.org/2000/svg"/>')
        assert "%3Csvg%20xmlns=%22http://www.w3.org/2000/svg%22/%3E" in uri

    def test_inline_svg_utf8_full_document(self) -> None:
        """Whitespace between tags in a real document is removed."""
        uri = inline_svg(SVG)
        assert "%0D" not in uri
        assert "%3E%09" not in uri
        assert "%3E%3Cg%3E%3Ccircle" in uri


# ── TestInlineFile ────────────────────────────────────────────────────────


class TestInlineFile:
    """Tests for ``inline_file``."""

    def test_svg_path(self, tmp_path: Path) -> None:
        """SVG files take the SVG route."""
        src = tmp_path / "logo.svg"
        src.write_bytes(SVG)

        result = inline_file(src)

        assert result.kind == "svg"
        assert result.data_uri.startswith('url("data:image/svg+xml;utf8,')
        assert result.source_bytes == len(SVG)

    def test_svg_base64(self, tmp_path: Path) -> None:
        """The base64 flag applies to SVG input."""
        src = tmp_path / "logo.svg"
        src.write_bytes(SVG)
        assert inline_file(src, use_base64=True).data_uri.startswith('url("data:image/svg+xml;base64,')

    def test_raster_is_reencoded_as_png(self, tmp_path: Path) -> None:
        """Other images are decoded and re-encoded as PNG."""
        src = tmp_path / "photo.jpg"
        Image.new("RGB", (3, 2), color=(0, 128, 0)).save(src)

        result = inline_file(src)

        assert result.kind == "raster"
        prefix = "url('data:image/png;base64,"
        raw = base64.b64decode(result.data_uri[len(prefix) : -2])
        with Image.open(io.BytesIO(raw)) as img:
            assert img.format == "PNG"
            assert img.size == (3, 2)

    def test_stream_input(self) -> None:
        """A binary stream works as well as a path."""
        result = inline_file(io.BytesIO(_png_bytes((2, 2))))
        assert result.kind == "raster"

    def test_undecodable_input(self, tmp_path: Path) -> None:
        """Data that is neither SVG nor an image raises ``DecodeError``."""
        src = tmp_path / "notes.txt"
        src.write_text("hello world")
        with pytest.raises(DecodeError, match="notes.txt"):
            inline_file(src)
