"""
Flower style catalog.

Each style is five petals at equal angular steps around the local origin
plus one small center accent. Styles differ only in petal outline:

    peach:   round ellipses
    sakura:  pointed petals from two quadratic curves
    delonix: "spoon" petals, a thin stem with a round head (cubic curves)

The drawers hold no state; the same call serves attached foliage and
falling flower particles.
"""

import math
from typing import Callable

from moodtree.config import FlowerStyle, Palette
from moodtree.surface import Surface

PETAL_COUNT = 5
PETAL_STEP = 2 * math.pi / PETAL_COUNT


def draw_peach(surface: Surface, size: float, palette: Palette) -> None:
    """Classic five round petals."""
    for i in range(PETAL_COUNT):
        surface.push()
        surface.rotate(PETAL_STEP * (i + 1))
        surface.ellipse(0.0, size * 0.4, size * 0.5, size * 0.6, palette.flower_pink)
        surface.pop()
    surface.circle(0.0, 0.0, size * 0.3, palette.center_peach)


def draw_sakura(surface: Surface, size: float, palette: Palette) -> None:
    """Five sharp petals: bow out from the center and meet at a point."""
    petal_len = size * 0.85
    petal_width = size * 0.45
    for i in range(PETAL_COUNT):
        surface.push()
        surface.rotate(PETAL_STEP * i)
        surface.shape(
            (0.0, 0.0),
            [
                ("quad", (-petal_width, -petal_len * 0.5), (0.0, -petal_len)),
                ("quad", (petal_width, -petal_len * 0.5), (0.0, 0.0)),
            ],
            palette.flower_pink,
        )
        surface.pop()
    surface.circle(0.0, 0.0, size * 0.2, palette.center_sakura)


def draw_delonix(surface: Surface, size: float, palette: Palette) -> None:
    """Five spoon petals: very thin stem, oval head."""
    total_len = size * 0.95
    head_width = size * 0.35
    head_height = size * 0.4
    stem_len = total_len - head_height * 0.8
    stem_half = size * 0.04
    for i in range(PETAL_COUNT):
        surface.push()
        surface.rotate(PETAL_STEP * i)
        surface.shape(
            (0.0, 0.0),
            [
                ("line", (-stem_half, -stem_len)),
                ("cubic",
                 (-head_width, -stem_len - head_height * 0.2),
                 (-head_width, -total_len),
                 (0.0, -total_len)),
                ("cubic",
                 (head_width, -total_len),
                 (head_width, -stem_len - head_height * 0.2),
                 (stem_half, -stem_len)),
                ("line", (0.0, 0.0)),
            ],
            palette.flower_pink,
        )
        surface.pop()
    surface.circle(0.0, 0.0, size * 0.15, palette.center_delonix)


FLOWER_DRAWERS: dict[FlowerStyle, Callable[[Surface, float, Palette], None]] = {
    FlowerStyle.PEACH: draw_peach,
    FlowerStyle.SAKURA: draw_sakura,
    FlowerStyle.DELONIX: draw_delonix,
}


def draw_petals(surface: Surface, style: "FlowerStyle | str", size: float,
                palette: Palette | None = None) -> None:
    """
    Draw one flower centered on the surface's current origin.

    Args:
        surface: Where to draw (the caller positions/rotates it)
        style: Style tag; unknown tags draw as peach
        size: Flower diameter scale in pixels
        palette: Colors (defaults if None)
    """
    if palette is None:
        palette = Palette()
    FLOWER_DRAWERS[FlowerStyle.parse(style)](surface, size, palette)
