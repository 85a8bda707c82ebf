"""SpriteSheetTool — BaseTool wrapper for sprite composition and export."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sprite_toolbox.core.base_tool import BaseTool, ToolParameter
from sprite_toolbox.core.datatypes import VALID_PACK_MODES, VERTICAL, ImageData, SpriteOptions, SpriteSheetResult
from sprite_toolbox.core.events import EventBus
from sprite_toolbox.core.exceptions import ValidationError
from sprite_toolbox.tools.sprite_sheet.logic import VALID_METADATA_FORMATS, Sprite, write_metadata


class SpriteSheetTool(BaseTool):
    """Stack images matched by glob patterns into one sheet with metadata."""

    name = "sprite_sheet"
    display_name = "Sprite Sheet"
    description = "Pack images into a vertical or horizontal sprite sheet"
    version = "0.1.0"
    category = "Image"

    def __init__(self, event_bus: EventBus | None = None) -> None:
        """Initialise the sprite sheet tool.

        Args:
            event_bus: Shared event bus for progress reporting.
        """
        super().__init__(event_bus=event_bus)

    def define_parameters(self) -> list[ToolParameter]:
        """Return the parameter schema for sprite sheet generation."""
        return [
            ToolParameter(
                name="patterns",
                type=list,
                required=True,
            ),
            ToolParameter(
                name="image_dir",
                type=Path,
                default=Path(),
            ),
            ToolParameter(
                name="build_dir",
                type=Path,
                default=Path(),
            ),
            ToolParameter(
                name="output_dir",
                type=Path,
                default=Path(),
            ),
            ToolParameter(
                name="pack",
                type=str,
                default=VERTICAL,
                choices=sorted(VALID_PACK_MODES),
            ),
            ToolParameter(
                name="padding",
                type=int,
                default=0,
                min_value=0,
            ),
            ToolParameter(
                name="metadata_format",
                type=str,
                default="json",
                choices=sorted(VALID_METADATA_FORMATS),
            ),
        ]

    def validate(self, params: dict[str, Any]) -> None:
        """Validate parameters with sprite-sheet-specific rules.

        Args:
            params: Parameter dict to validate.

        Raises:
            ValidationError: If parameters are invalid.
        """
        super().validate(params)

        patterns = params.get("patterns")
        if not patterns:
            msg = "At least 1 glob pattern is required"
            raise ValidationError(msg)

    def _do_execute(self, params: dict[str, Any]) -> SpriteSheetResult:
        """Decode, export and describe the sprite sheet.

        Args:
            params: Validated parameter dictionary.

        Returns:
            A ``SpriteSheetResult`` with sheet metadata and frame positions.
        """
        options = SpriteOptions(
            image_dir=Path(params.get("image_dir") or Path()),
            build_dir=Path(params.get("build_dir") or Path()),
            output_dir=Path(params.get("output_dir") or Path()),
            pack=params.get("pack") or VERTICAL,
            padding=params.get("padding") or 0,
        )

        with Sprite(options, event_bus=self.event_bus) as sprite:
            sprite.decode(*[str(p) for p in params["patterns"]])
            sheet_path = sprite.export()
            metadata_path = write_metadata(sprite, sheet_path, params.get("metadata_format") or "json")
            width, height = sprite.dimensions()

            return SpriteSheetResult(
                sheet=ImageData(path=sheet_path, width=width, height=height, format="png"),
                frames=sprite.frames(),
                pack=options.pack,
                padding=options.padding,
                output_name=sprite.output_path(),
                metadata_path=metadata_path,
            )
