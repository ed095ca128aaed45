"""
Render surfaces.

The renderer only needs a small 2D drawing vocabulary with a p5-style
transform stack: push/pop, translate/rotate/scale, stroked lines, filled
ellipses/rects, and filled outlines made of line, quadratic and cubic
segments. Two implementations:

- MatplotlibSurface: draws into a matplotlib Axes in screen coordinates
  (y down), one data unit per pixel, and can save frames to disk.
- RecordingSurface: headless; records every primitive with its world-space
  anchor so tests and batch runs can inspect what was drawn.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.lines import Line2D
from matplotlib.patches import Ellipse, PathPatch, Rectangle
from matplotlib.path import Path
from matplotlib.transforms import Affine2D

from moodtree.config import Color

Point = tuple[float, float]
# ("line", p) | ("quad", control, p) | ("cubic", control1, control2, p)
Segment = tuple


class Surface(Protocol):
    """Drawing vocabulary used by the renderer and flower catalog."""

    width: float
    height: float

    def clear(self) -> None: ...
    def push(self) -> None: ...
    def pop(self) -> None: ...
    def translate(self, x: float, y: float) -> None: ...
    def rotate(self, angle: float) -> None: ...
    def scale(self, sx: float, sy: float) -> None: ...
    def line(self, x1: float, y1: float, x2: float, y2: float,
             color: Color, weight: float) -> None: ...
    def ellipse(self, cx: float, cy: float, w: float, h: float, color: Color) -> None: ...
    def circle(self, cx: float, cy: float, d: float, color: Color) -> None: ...
    def rect(self, x: float, y: float, w: float, h: float, color: Color) -> None: ...
    def shape(self, start: Point, segments: list[Segment], color: Color) -> None: ...


# =============================================================================
# TRANSFORM STACK
# =============================================================================

class TransformStack:
    """
    p5-style current transformation matrix with save/restore.

    Transforms compose in call order: after translate then rotate, local
    points are rotated first and translated second.
    """

    def __init__(self) -> None:
        self.matrix = np.eye(3)
        self._saved: list[np.ndarray] = []

    def push(self) -> None:
        self._saved.append(self.matrix.copy())

    def pop(self) -> None:
        if not self._saved:
            raise RuntimeError("pop() without matching push()")
        self.matrix = self._saved.pop()

    def reset(self) -> None:
        self.matrix = np.eye(3)
        self._saved.clear()

    @property
    def depth(self) -> int:
        return len(self._saved)

    def translate(self, x: float, y: float) -> None:
        self.matrix = self.matrix @ np.array([[1.0, 0.0, x], [0.0, 1.0, y], [0.0, 0.0, 1.0]])

    def rotate(self, angle: float) -> None:
        c, s = math.cos(angle), math.sin(angle)
        self.matrix = self.matrix @ np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])

    def scale(self, sx: float, sy: float) -> None:
        self.matrix = self.matrix @ np.array([[sx, 0.0, 0.0], [0.0, sy, 0.0], [0.0, 0.0, 1.0]])

    def to_world(self, x: float, y: float) -> Point:
        wx, wy, _ = self.matrix @ np.array([x, y, 1.0])
        return float(wx), float(wy)


def rgba(color: Color) -> tuple[float, float, float, float]:
    """0-255 RGBA to matplotlib's 0-1 floats."""
    r, g, b, a = color
    return r / 255.0, g / 255.0, b / 255.0, max(0.0, min(255.0, a)) / 255.0


# =============================================================================
# MATPLOTLIB SURFACE
# =============================================================================

class MatplotlibSurface(TransformStack):
    """
    Surface backed by a matplotlib figure.

    Args:
        width: Canvas width in pixels
        height: Canvas height in pixels
        ax: Existing axes to draw on (a borderless figure is created if None)
        dpi: Figure resolution; the figure is sized so 1 data unit = 1 pixel
        background: Figure background color

    Raises:
        ValueError: If the canvas has no area
    """

    def __init__(self, width: float, height: float, ax: plt.Axes | None = None,
                 dpi: float = 100.0, background: str = "#18181b"):
        super().__init__()
        if width <= 0 or height <= 0:
            raise ValueError(f"Render surface must have a positive size, got {width}x{height}")
        self.width = float(width)
        self.height = float(height)
        self.dpi = dpi

        if ax is None:
            fig = plt.figure(figsize=(width / dpi, height / dpi), dpi=dpi)
            ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
        self.ax = ax
        self.figure = ax.figure
        self.figure.set_facecolor(background)
        ax.set_facecolor(background)
        ax.axis("off")
        self._z = 0
        self._apply_limits()

    def _apply_limits(self) -> None:
        self.ax.set_xlim(0, self.width)
        self.ax.set_ylim(self.height, 0)  # Flip Y for screen coords
        self.ax.set_aspect("equal")

    def resize(self, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Render surface must have a positive size, got {width}x{height}")
        self.width = float(width)
        self.height = float(height)
        self._apply_limits()

    def clear(self) -> None:
        for artist in list(self.ax.patches) + list(self.ax.lines):
            artist.remove()
        self.reset()
        self._z = 0

    def _next_z(self) -> int:
        self._z += 1
        return self._z

    def _transform(self):
        return Affine2D(self.matrix.copy()) + self.ax.transData

    def line(self, x1, y1, x2, y2, color, weight):
        points_per_px = 72.0 / self.figure.dpi
        self.ax.add_line(Line2D(
            [x1, x2], [y1, y2],
            color=rgba(color),
            linewidth=weight * points_per_px,
            solid_capstyle="round",
            transform=self._transform(),
            zorder=self._next_z(),
        ))

    def ellipse(self, cx, cy, w, h, color):
        self.ax.add_patch(Ellipse(
            (cx, cy), w, h,
            facecolor=rgba(color), edgecolor="none",
            transform=self._transform(), zorder=self._next_z(),
        ))

    def circle(self, cx, cy, d, color):
        self.ellipse(cx, cy, d, d, color)

    def rect(self, x, y, w, h, color):
        self.ax.add_patch(Rectangle(
            (x, y), w, h,
            facecolor=rgba(color), edgecolor="none",
            transform=self._transform(), zorder=self._next_z(),
        ))

    def shape(self, start, segments, color):
        vertices = [start]
        codes = [Path.MOVETO]
        for segment in segments:
            kind, *pts = segment
            if kind == "line":
                codes.append(Path.LINETO)
            elif kind == "quad":
                codes.extend([Path.CURVE3] * 2)
            elif kind == "cubic":
                codes.extend([Path.CURVE4] * 3)
            else:
                raise ValueError(f"Unknown segment kind: {kind}")
            vertices.extend(pts)
        vertices.append(start)
        codes.append(Path.CLOSEPOLY)

        self.ax.add_patch(PathPatch(
            Path(vertices, codes),
            facecolor=rgba(color), edgecolor="none",
            transform=self._transform(), zorder=self._next_z(),
        ))

    def save(self, filepath: str, dpi: float | None = None) -> None:
        """Write the current frame to an image file."""
        self.figure.savefig(filepath, dpi=dpi or self.dpi, facecolor=self.figure.get_facecolor())

    def close(self) -> None:
        plt.close(self.figure)


# =============================================================================
# RECORDING SURFACE
# =============================================================================

@dataclass(frozen=True)
class DrawCall:
    """One recorded primitive. (x, y) is its local origin in world space."""

    kind: str
    x: float
    y: float
    color: Color
    size: float = 0.0


class RecordingSurface(TransformStack):
    """Headless surface that keeps a list of everything drawn since clear()."""

    def __init__(self, width: float, height: float):
        super().__init__()
        if width <= 0 or height <= 0:
            raise ValueError(f"Render surface must have a positive size, got {width}x{height}")
        self.width = float(width)
        self.height = float(height)
        self.calls: list[DrawCall] = []
        self.clears = 0

    def resize(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)

    def clear(self) -> None:
        self.calls.clear()
        self.reset()
        self.clears += 1

    def _record(self, kind: str, x: float, y: float, color: Color, size: float = 0.0) -> None:
        wx, wy = self.to_world(x, y)
        self.calls.append(DrawCall(kind, wx, wy, color, size))

    def line(self, x1, y1, x2, y2, color, weight):
        self._record("line", x1, y1, color, weight)

    def ellipse(self, cx, cy, w, h, color):
        self._record("ellipse", cx, cy, color, max(w, h))

    def circle(self, cx, cy, d, color):
        self._record("circle", cx, cy, color, d)

    def rect(self, x, y, w, h, color):
        self._record("rect", x, y, color, max(w, h))

    def shape(self, start, segments, color):
        self._record("shape", start[0], start[1], color, float(len(segments)))

    def count(self, kind: str) -> int:
        return sum(1 for c in self.calls if c.kind == kind)
