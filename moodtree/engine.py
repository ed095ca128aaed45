"""
The engine handle.

A `TreeEngine` owns all mutable render state for one tree: the skeleton,
the smoothed signals and latches, and the particle store. Nothing is
process-global, so several engines (in tests, say) never interfere.

The engine does no scheduling of its own. Whatever drives it (a
matplotlib timer, a headless loop, a test) calls `tick(now)` once per
frame with strictly increasing times and forwards surface lifecycle
hooks:

    on_surface_ready()           build the skeleton (once)
    on_surface_resized(w, h)     queue a rebuild; coalesced per frame
    tick(now)                    one frame; returns events fired
    on_teardown()                release skeleton and particles
"""

import logging
from typing import Callable

from moodtree.config import EngineConfig, FlowerStyle, TreeEvent
from moodtree.noise import Randomness
from moodtree.particles import ParticleStore
from moodtree.renderer import FrameContext, Renderer, wind_angle
from moodtree.signals import SignalSmoother
from moodtree.skeleton import Branch, build_skeleton
from moodtree.state import StateSource, StyleSource
from moodtree.surface import Surface

logger = logging.getLogger(__name__)

EventSink = Callable[[TreeEvent], None]


class TreeEngine:
    """
    Animated generative tree driven by an external mood/wind signal.

    Args:
        surface: Drawing target with a known pixel size
        state_source: Returns the latest MoodWindState; polled once per frame
        style_source: Returns the current flower style (peach if None)
        on_event: Called synchronously with each bloom/wither event
        config: Engine configuration
        randomness: Random/noise source (fresh, unseeded if None)
    """

    def __init__(
        self,
        surface: Surface,
        state_source: StateSource,
        style_source: StyleSource | None = None,
        on_event: EventSink | None = None,
        config: EngineConfig | None = None,
        randomness: Randomness | None = None,
    ):
        self.surface = surface
        self.state_source = state_source
        self.style_source = style_source
        self.on_event = on_event
        self.config = config or EngineConfig()
        self.rng = randomness or Randomness()

        self.smoother = SignalSmoother(self.config.signals)
        self.store = ParticleStore(
            surface.width, surface.height, self.rng,
            self.config.particles, self.config.palette,
        )
        self.renderer = Renderer(self.config, self.rng, self.store)

        self._root: Branch | None = None
        self._pending_size: tuple[float, float] | None = None
        self._last_time: float | None = None
        self._frame = 0
        self._torn_down = False

    # -------------------------------------------------------------------------
    # Lifecycle hooks
    # -------------------------------------------------------------------------

    def on_surface_ready(self) -> None:
        """
        Build the initial skeleton.

        Raises:
            ValueError: If the surface has no area
            RuntimeError: If the engine has been torn down
        """
        self._check_alive()
        self._rebuild(self.surface.width, self.surface.height)

    def on_surface_resized(self, width: float, height: float) -> None:
        """Queue a rebuild for the next frame. Later calls overwrite earlier ones."""
        self._pending_size = (float(width), float(height))

    def on_teardown(self) -> None:
        """Release everything; the engine cannot tick afterwards."""
        self._root = None
        self._pending_size = None
        self.store.clear()
        self._torn_down = True
        logger.debug("Tree engine torn down after %d frames", self._frame)

    # -------------------------------------------------------------------------
    # Frame
    # -------------------------------------------------------------------------

    def tick(self, now: float) -> list[TreeEvent]:
        """
        Run one frame.

        Args:
            now: Monotonic time in seconds, strictly increasing across calls

        Returns:
            Events fired this frame

        Raises:
            RuntimeError: After teardown, or before the surface is ready
            ValueError: If `now` does not increase
        """
        self._check_alive()
        if self._last_time is not None and now <= self._last_time:
            raise ValueError(f"tick time must increase: {now} after {self._last_time}")
        self._last_time = now

        if self._pending_size is not None:
            width, height = self._pending_size
            self._pending_size = None
            self._rebuild(width, height)
        if self._root is None:
            raise RuntimeError("tick() before on_surface_ready()")

        events = self.smoother.update(self.state_source())
        for event in events:
            logger.info("Tree event: %s (mood=%.3f)", event.value, self.smoother.mood)
            if self.on_event is not None:
                self.on_event(event)

        style = FlowerStyle.parse(self.style_source() if self.style_source else None)
        ctx = FrameContext(
            time=now,
            frame=self._frame,
            wind=self.smoother.wind,
            wind_angle=wind_angle(self.smoother.wind, now, self.rng, self.config.wind),
            mood=self.smoother.mood,
            bloom=self.smoother.bloom_factor,
            wither=self.smoother.wither_factor,
            style=style,
        )

        try:
            self.renderer.render(self.surface, self._root, ctx)
        except Exception:
            # The next frame's clear() resets the surface transform stack
            logger.exception("Frame %d failed to render; skipping", self._frame)

        self._frame += 1
        return events

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _check_alive(self) -> None:
        if self._torn_down:
            raise RuntimeError("Tree engine has been torn down")

    def _rebuild(self, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Render surface must have a positive size, got {width}x{height}")
        self._root = build_skeleton(width, height, self.rng, self.config.skeleton)
        self.store.resize(width, height)
        logger.debug("Built skeleton for %.0fx%.0f canvas", width, height)

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def skeleton(self) -> Branch | None:
        return self._root

    @property
    def mood(self) -> float:
        return self.smoother.mood

    @property
    def wind(self) -> float:
        return self.smoother.wind

    @property
    def bloom_factor(self) -> float:
        return self.smoother.bloom_factor

    @property
    def wither_factor(self) -> float:
        return self.smoother.wither_factor

    @property
    def particle_count(self) -> int:
        return len(self.store)

    @property
    def frame_count(self) -> int:
        return self._frame

    @property
    def torn_down(self) -> bool:
        return self._torn_down
