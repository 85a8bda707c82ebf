"""InlineTool — BaseTool wrapper for data-URI inlining."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sprite_toolbox.core.base_tool import BaseTool, ToolParameter
from sprite_toolbox.core.datatypes import InlineResult
from sprite_toolbox.core.events import EventBus
from sprite_toolbox.core.exceptions import ValidationError
from sprite_toolbox.tools.inliner.logic import inline_file


class InlineTool(BaseTool):
    """Embed a single raster or SVG asset as a CSS data URI."""

    name = "inliner"
    display_name = "Inliner"
    description = "Encode an image as a data URI for direct embedding"
    version = "0.1.0"
    category = "Image"

    def __init__(self, event_bus: EventBus | None = None) -> None:
        """Initialise the inline tool.

        Args:
            event_bus: Shared event bus for status reporting.
        """
        super().__init__(event_bus=event_bus)

    def define_parameters(self) -> list[ToolParameter]:
        """Return the parameter schema for inlining."""
        return [
            ToolParameter(
                name="input",
                type=Path,
                required=True,
            ),
            ToolParameter(
                name="base64",
                type=bool,
                default=False,
            ),
        ]

    def validate(self, params: dict[str, Any]) -> None:
        """Check that the input file exists.

        Raises:
            ValidationError: If the input is missing or not a file.
        """
        super().validate(params)

        source = Path(params["input"])
        if not source.is_file():
            msg = f"Input file '{source}' does not exist"
            raise ValidationError(msg)

    def _do_execute(self, params: dict[str, Any]) -> InlineResult:
        """Inline the input file.

        Args:
            params: Validated parameter dictionary.

        Returns:
            An ``InlineResult`` holding the data URI.
        """
        result = inline_file(Path(params["input"]), use_base64=bool(params.get("base64")))
        self.event_bus.emit(
            "completed",
            tool=self.name,
            message=f"Inlined {params['input']} as {result.kind} ({len(result.data_uri)} chars)",
        )
        return result
