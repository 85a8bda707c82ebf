"""ConfigManager — global and per-tool settings backed by TOML files."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from sprite_toolbox.core.datatypes import VERTICAL, SpriteOptions
from sprite_toolbox.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_DIR = Path.home() / ".config" / "sprite-toolbox"

# Keys understood by ``sprite_options`` and their built-in defaults.
_SPRITE_DEFAULTS: dict[str, Any] = {
    "image_dir": ".",
    "build_dir": ".",
    "output_dir": ".",
    "pack": VERTICAL,
    "padding": 0,
}


class ConfigManager:
    """Hierarchical configuration manager.

    Global defaults from ``config.toml`` can be overridden by per-tool
    settings in ``tools/<tool>.toml``, which in turn are overridden by
    explicit values passed by the caller (usually CLI flags).

    Args:
        config_dir: Root directory for configuration files.
                    Defaults to ``~/.config/sprite-toolbox/``.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialise the config manager.

        Args:
            config_dir: Custom configuration directory.  Uses the
                        platform default if ``None``.
        """
        self._config_dir = config_dir or _DEFAULT_CONFIG_DIR
        self._global: dict[str, Any] = {}
        self._per_tool: dict[str, dict[str, Any]] = {}

    @property
    def config_dir(self) -> Path:
        """Return the configuration directory path."""
        return self._config_dir

    def load(self) -> None:
        """Load global and per-tool config from ``config_dir``.

        Missing files are silently skipped.

        Raises:
            ValidationError: If a file exists but is not valid TOML.
        """
        global_file = self._config_dir / "config.toml"
        if global_file.is_file():
            self._global = self._read_toml(global_file)
            logger.info("Loaded global config from %s", global_file)

        tools_dir = self._config_dir / "tools"
        if tools_dir.is_dir():
            for toml_file in sorted(tools_dir.glob("*.toml")):
                tool_name = toml_file.stem
                self._per_tool[tool_name] = self._read_toml(toml_file)
                logger.info("Loaded config for tool '%s'", tool_name)

    def get(self, key: str, *, tool: str | None = None, default: Any = None) -> Any:
        """Retrieve a config value with optional tool-level override.

        Args:
            key: The configuration key.
            tool: If given, check the tool-specific config first.
            default: Fallback value when the key is not found.

        Returns:
            The configuration value, or *default*.
        """
        if tool and tool in self._per_tool:
            value = self._per_tool[tool].get(key)
            if value is not None:
                return value
        return self._global.get(key, default)

    def set_global(self, key: str, value: Any) -> None:
        """Set a global configuration value (in-memory only).

        Args:
            key: The configuration key.
            value: The value to store.
        """
        self._global[key] = value

    def sprite_options(self, *, tool: str = "sprite_sheet", **overrides: Any) -> SpriteOptions:
        """Build ``SpriteOptions`` from config values and explicit overrides.

        ``None`` overrides are ignored so unset CLI flags fall through to
        the configuration files and then to the built-in defaults.

        Args:
            tool: Tool section to consult before the global section.
            **overrides: Explicit option values (``image_dir``, ``pack``...).

        Returns:
            The merged, validated options.

        Raises:
            ValidationError: On unknown keys or invalid option values.
        """
        unknown = set(overrides) - set(_SPRITE_DEFAULTS)
        if unknown:
            msg = f"Unknown sprite option(s): {sorted(unknown)}"
            raise ValidationError(msg)

        values: dict[str, Any] = {}
        for key, fallback in _SPRITE_DEFAULTS.items():
            value = overrides.get(key)
            if value is None:
                value = self.get(key, tool=tool, default=fallback)
            values[key] = value

        return SpriteOptions(
            image_dir=Path(values["image_dir"]),
            build_dir=Path(values["build_dir"]),
            output_dir=Path(values["output_dir"]),
            pack=str(values["pack"]),
            padding=int(values["padding"]),
        )

    @staticmethod
    def _read_toml(path: Path) -> dict[str, Any]:
        """Read and parse a TOML file.

        Args:
            path: Path to the TOML file.

        Returns:
            Parsed dictionary.

        Raises:
            ValidationError: If the file is not valid TOML.
        """
        with path.open("rb") as fh:
            try:
                return tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in '{path}'"
                raise ValidationError(msg) from exc
