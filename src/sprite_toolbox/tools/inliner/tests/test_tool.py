"""Tests for InlineTool (BaseTool integration)."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from sprite_toolbox.core.datatypes import InlineResult
from sprite_toolbox.core.events import EventBus
from sprite_toolbox.core.exceptions import ValidationError
from sprite_toolbox.tools.inliner.tool import InlineTool


@pytest.fixture()
def svg_file(tmp_path: Path) -> Path:
    """Write a tiny SVG document."""
    path = tmp_path / "dot.svg"
    path.write_bytes(b'<svg xmlns="http://www.w3.org/2000/svg">\n  <circle r="1"/>\n</svg>\n')
    return path


class TestInlineTool:
    """Tests for the inline tool lifecycle."""

    def test_metadata(self) -> None:
        """Tool exposes the expected identity."""
        tool = InlineTool()
        assert tool.name == "inliner"
        assert [p.name for p in tool.define_parameters()] == ["input", "base64"]

    def test_requires_input(self) -> None:
        """The input parameter is mandatory."""
        with pytest.raises(ValidationError, match="required"):
            InlineTool().run(params={})

    def test_rejects_missing_file(self, tmp_path: Path) -> None:
        """A non-existent input is rejected before reading."""
        with pytest.raises(ValidationError, match="does not exist"):
            InlineTool().run(params={"input": tmp_path / "nope.svg"})

    def test_run_svg(self, svg_file: Path) -> None:
        """SVG input produces a UTF-8 data URI with tag gaps removed."""
        result = InlineTool().run(params={"input": svg_file})

        assert isinstance(result, InlineResult)
        assert result.kind == "svg"
        assert "%3E%3Ccircle" in result.data_uri

    def test_run_emits_completed(self, svg_file: Path) -> None:
        """One ``completed`` event is emitted per run."""
        bus = EventBus()
        events: list[dict[str, Any]] = []
        bus.subscribe("completed", lambda **kw: events.append(kw))

        InlineTool(event_bus=bus).run(params={"input": svg_file, "base64": True})

        assert len(events) == 1
        assert events[0]["tool"] == "inliner"
