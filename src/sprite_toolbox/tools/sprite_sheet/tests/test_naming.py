"""Tests for deterministic output naming."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

from sprite_toolbox.tools.sprite_sheet._naming import output_name, relative_output_dir

GLOBS = ["test/139.jpg", "test/140.jpg"]


def _name(**overrides: object) -> str:
    kwargs: dict[str, object] = {
        "pack": "vertical",
        "padding": 0,
        "globs": GLOBS,
        "build_dir": Path("build"),
        "output_dir": Path("build/img"),
    }
    kwargs.update(overrides)
    return output_name(**kwargs)  # type: ignore[arg-type]


class TestOutputName:
    """Tests for ``output_name``."""

    def test_shape(self) -> None:
        """Names are ``<rel>/<6 hex>.png``."""
        assert re.fullmatch(r"img/[0-9a-f]{6}\.png", _name())

    def test_hash_of_seed(self) -> None:
        """The stem is the md5 prefix of pack + padding + joined globs."""
        expected = hashlib.md5(b"vertical0test/139.jpg/test/140.jpg").hexdigest()[:6]
        assert _name() == f"img/{expected}.png"

    def test_stable(self) -> None:
        """Identical inputs give identical names."""
        assert _name() == _name()

    def test_padding_changes_name(self) -> None:
        """Padding is part of the seed."""
        assert _name(padding=1) != _name()

    def test_pack_changes_name(self) -> None:
        """Pack mode is part of the seed."""
        assert _name(pack="horizontal") != _name()

    def test_order_changes_name(self) -> None:
        """Glob order is part of the seed."""
        assert _name(globs=list(reversed(GLOBS))) != _name()


class TestRelativeOutputDir:
    """Tests for ``relative_output_dir``."""

    def test_same_directory_is_image(self) -> None:
        """An output dir equal to the build dir becomes ``image``."""
        assert relative_output_dir(Path("build"), Path("build")) == "image"

    def test_nested(self) -> None:
        """A nested output dir is expressed relative to the build dir."""
        assert relative_output_dir(Path("../build"), Path("../build/img")) == "img"

    def test_sibling(self) -> None:
        """A sibling output dir climbs out of the build dir."""
        assert relative_output_dir(Path("build/css"), Path("build/img")) == "../img"
