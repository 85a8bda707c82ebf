"""Sprite Sheet tool — stacks images into one sheet with deterministic names."""

from sprite_toolbox.tools.sprite_sheet.logic import Sprite
from sprite_toolbox.tools.sprite_sheet.tool import SpriteSheetTool

__all__ = ["Sprite", "SpriteSheetTool"]
