"""Single-axis stacking geometry.

Images are laid back to back along the main axis with ``padding`` pixels
between neighbours and none at the outer edges.  Querying index ``n`` (one
past the last image) yields the extent of the whole sheet.
"""

from __future__ import annotations

from collections.abc import Sequence

from sprite_toolbox.core.datatypes import Pos

OUT_OF_RANGE = Pos(-1, -1)


def position(sizes: Sequence[tuple[int, int]], index: int, *, vertical: bool, padding: int) -> Pos:
    """Return the top-left offset of image *index*, or the sheet extent.

    Args:
        sizes: ``(width, height)`` of every image, in packing order.
        index: Image index; ``len(sizes)`` asks for the whole-sheet extent and
            ``-1`` is treated like ``0``.
        vertical: Stack top to bottom when ``True``, left to right otherwise.
        padding: Gap between consecutive images.

    Returns:
        The offset, or ``(-1, -1)`` for any other out-of-range index.
    """
    n = len(sizes)
    if index in (-1, 0):
        return Pos(0, 0)
    if index < -1 or index > n:
        return OUT_OF_RANGE

    main_axis = 1 if vertical else 0
    main = padding * index + sum(size[main_axis] for size in sizes[:index])
    cross = 0
    if index == n:
        main -= padding
        cross = max(size[1 - main_axis] for size in sizes)

    return Pos(cross, main) if vertical else Pos(main, cross)


def extent(sizes: Sequence[tuple[int, int]], *, vertical: bool, padding: int) -> Pos:
    """Return ``(width, height)`` of the sheet holding *sizes*."""
    return position(sizes, len(sizes), vertical=vertical, padding=padding)
