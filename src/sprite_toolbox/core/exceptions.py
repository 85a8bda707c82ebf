"""Exception hierarchy for the sprite-toolbox framework."""


class ToolboxError(Exception):
    """Base exception for all sprite-toolbox errors."""


class ToolError(ToolboxError):
    """Raised when a tool encounters an error during execution."""


class ValidationError(ToolboxError):
    """Raised when parameter validation fails."""


class SpriteError(ToolError):
    """Base class for failures while loading, combining or exporting a sprite."""


class UnsupportedFormatError(SpriteError):
    """Raised when a matched file has an extension outside the decodable set."""


class DecodeError(SpriteError):
    """Raised when a file with a supported extension cannot be decoded."""


class NoMatchesError(SpriteError):
    """Raised when the given glob patterns resolve to no files at all."""


class EmptySpriteError(SpriteError):
    """Raised when a composite would have zero width or height."""


class ExportError(SpriteError):
    """Raised when the composite cannot be written to disk."""
