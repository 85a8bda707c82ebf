"""CLI entry point — click group exposing the sprite sheet and inline tools."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from sprite_toolbox.core.datatypes import VALID_PACK_MODES
from sprite_toolbox.core.exceptions import ToolboxError
from sprite_toolbox.tools.sprite_sheet.logic import VALID_METADATA_FORMATS


@click.group()
@click.version_option(package_name="sprite-toolbox")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output to stderr.")
def cli(verbose: bool) -> None:
    """Sprite Toolbox — sprite sheet composition and asset inlining."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command(name="sprite-sheet")
@click.argument("patterns", nargs=-1, required=True)
@click.option("-i", "--image-dir", type=click.Path(file_okay=False), default=None, help="Root for the glob patterns.")
@click.option("-b", "--build-dir", type=click.Path(file_okay=False), default=None, help="Stylesheet build directory.")
@click.option("-o", "--output-dir", type=click.Path(file_okay=False), default=None, help="Sprite image directory.")
@click.option("--pack", type=click.Choice(sorted(VALID_PACK_MODES)), default=None, help="Stacking axis.")
@click.option("-p", "--padding", type=click.IntRange(min=0), default=None, help="Pixel padding between images.")
@click.option(
    "-m",
    "--metadata",
    "metadata_format",
    default="json",
    show_default=True,
    type=click.Choice(sorted(VALID_METADATA_FORMATS)),
    help="Metadata output format.",
)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Configuration directory (default: ~/.config/sprite-toolbox).",
)
def sprite_sheet_cmd(
    patterns: tuple[str, ...],
    image_dir: str | None,
    build_dir: str | None,
    output_dir: str | None,
    pack: str | None,
    padding: int | None,
    metadata_format: str,
    config_dir: Path | None,
) -> None:
    """Stack the images matched by PATTERNS into one sprite sheet.

    Unset options fall back to the configuration files, then to defaults.
    """
    from sprite_toolbox.core.config import ConfigManager
    from sprite_toolbox.core.events import EventBus
    from sprite_toolbox.tools.sprite_sheet import SpriteSheetTool

    config = ConfigManager(config_dir=config_dir)
    bus = EventBus()
    bus.subscribe("progress", lambda **kw: click.echo(f"  [{kw['current']:5d}/{kw['total']:5d}] {kw['message']}"))

    try:
        config.load()
        options = config.sprite_options(
            image_dir=image_dir,
            build_dir=build_dir,
            output_dir=output_dir,
            pack=pack,
            padding=padding,
        )
        tool = SpriteSheetTool(event_bus=bus)
        result = tool.run(
            params={
                "patterns": list(patterns),
                "image_dir": options.image_dir,
                "build_dir": options.build_dir,
                "output_dir": options.output_dir,
                "pack": options.pack,
                "padding": options.padding,
                "metadata_format": metadata_format,
            },
        )
    except ToolboxError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(
        f"Generated {result.pack} sprite sheet "
        f"({result.sheet.width}x{result.sheet.height}px, "
        f"{len(result.frames)} images) → {result.sheet.path}"
    )


@cli.command(name="inline")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--base64", "use_base64", is_flag=True, default=False, help="Base64-encode SVG input.")
def inline_cmd(input_file: str, use_base64: bool) -> None:
    """Print INPUT_FILE as a CSS data URI."""
    from sprite_toolbox.tools.inliner import InlineTool

    tool = InlineTool()
    try:
        result = tool.run(params={"input": Path(input_file), "base64": use_base64})
    except ToolboxError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(result.data_uri)
