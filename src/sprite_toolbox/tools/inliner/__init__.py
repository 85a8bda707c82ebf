"""Inliner tool — embeds raster and SVG assets as data URIs."""

from sprite_toolbox.tools.inliner.tool import InlineTool

__all__ = ["InlineTool"]
