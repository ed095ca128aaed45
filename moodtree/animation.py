"""
Frame schedulers for a TreeEngine.

The engine only exposes `tick(now)`; these drive it.

- run_frames: synthetic fixed-step frames, no clock, no window. Used by
  tests and batch rendering.
- animate: a live matplotlib window at ~30 fps via FuncAnimation, with
  window resizes forwarded to the engine. `stop()` cancels the timer and
  tears the engine down.
"""

import time
from typing import Callable

from matplotlib.animation import FuncAnimation

from moodtree.config import TreeEvent
from moodtree.engine import TreeEngine
from moodtree.surface import MatplotlibSurface


def run_frames(
    engine: TreeEngine,
    frames: int,
    fps: float = 30.0,
    start: float = 0.0,
    before_frame: Callable[[int], None] | None = None,
) -> list[tuple[int, TreeEvent]]:
    """
    Drive an engine through `frames` fixed-step ticks.

    Args:
        engine: Engine to drive (its surface must be ready)
        frames: Number of ticks
        fps: Synthetic frame rate
        start: Time before the first tick, in seconds
        before_frame: Hook called with the frame index before each tick,
            e.g. to write the next scripted state

    Returns:
        (frame_index, event) for every event fired
    """
    if engine.skeleton is None:
        engine.on_surface_ready()

    dt = 1.0 / fps
    fired: list[tuple[int, TreeEvent]] = []
    for i in range(frames):
        if before_frame is not None:
            before_frame(i)
        for event in engine.tick(start + (i + 1) * dt):
            fired.append((i, event))
    return fired


class TreeAnimation:
    """
    Live animation handle.

    Keep a reference to it for as long as the window is open; matplotlib
    stops animations that are garbage collected.
    """

    def __init__(
        self,
        engine: TreeEngine,
        surface: MatplotlibSurface,
        fps: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.engine = engine
        self.surface = surface
        self.clock = clock
        self.stopped = False

        if engine.skeleton is None:
            engine.on_surface_ready()

        canvas = surface.figure.canvas
        self._resize_cid = canvas.mpl_connect("resize_event", self._on_resize)
        self._close_cid = canvas.mpl_connect("close_event", lambda _event: self.stop())
        self._anim = FuncAnimation(
            surface.figure,
            self._step,
            interval=1000.0 / fps,
            blit=False,
            cache_frame_data=False,
        )

    def _step(self, _frame: int) -> list:
        if not self.stopped:
            self.engine.tick(self.clock())
        return []

    def _on_resize(self, event) -> None:
        if event.width <= 0 or event.height <= 0:
            return
        self.surface.resize(event.width, event.height)
        self.engine.on_surface_resized(event.width, event.height)

    def stop(self) -> None:
        """Cancel future frames and release the engine's memory."""
        if self.stopped:
            return
        self.stopped = True
        if self._anim.event_source is not None:
            self._anim.event_source.stop()
        canvas = self.surface.figure.canvas
        canvas.mpl_disconnect(self._resize_cid)
        canvas.mpl_disconnect(self._close_cid)
        self.engine.on_teardown()


def animate(engine: TreeEngine, surface: MatplotlibSurface, fps: float = 30.0) -> TreeAnimation:
    """Start a live animation; call plt.show() afterwards to open the window."""
    return TreeAnimation(engine, surface, fps)
