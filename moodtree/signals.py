"""
Signal smoothing and hysteresis event detection.

The raw mood/wind readings are noisy and arrive on their own clock. Each
frame they are low-pass filtered:

    s <- s + alpha * (target - s)

with alpha = 0.10 for mood and 0.12 for wind. From the smoothed mood two
hysteresis latches derive discrete events:

    bloom:  sets above +0.6, clears below +0.2
    wither: sets below -0.6, clears above -0.2

An event fires on the frame a latch sets, and never on clearing, so mood
hovering around a threshold cannot produce chatter.

The per-frame classes drive the live engine. `smooth_trace`, `latch_trace`
and `predict_events` are vectorised (jax.lax.scan) versions used to
analyse a whole scripted mood trace offline.
"""

import jax
import jax.numpy as jnp
from jax import Array

from moodtree.config import SignalConfig, TreeEvent
from moodtree.state import MoodWindState


def lerp(current: float, target: float, alpha: float) -> float:
    """Move `current` a fraction `alpha` of the way to `target`."""
    return current + alpha * (target - current)


def remap(value: float, in_low: float, in_high: float,
          out_low: float = 0.0, out_high: float = 1.0, clamp: bool = True) -> float:
    """
    Linearly map [in_low, in_high] onto [out_low, out_high].

    The input range may be reversed (in_low > in_high).
    """
    if in_high == in_low:
        return out_low
    t = (value - in_low) / (in_high - in_low)
    if clamp:
        t = min(1.0, max(0.0, t))
    return out_low + t * (out_high - out_low)


def bloom_factor(mood: float) -> float:
    """Smoothed mood remapped [0, 1] -> [0, 1]; distress clamps to 0."""
    return remap(mood, 0.0, 1.0)


def wither_factor(mood: float) -> float:
    """Smoothed mood remapped [-0.2, -1] -> [0, 1]."""
    return remap(mood, -0.2, -1.0)


class HysteresisLatch:
    """
    Boolean that needs one threshold to set and a different one to clear.

    If `on > off` the latch watches a rising signal (sets above `on`,
    clears below `off`); otherwise it watches a falling one (sets below
    `on`, clears above `off`).
    """

    def __init__(self, on: float, off: float):
        if on == off:
            raise ValueError("Hysteresis needs distinct on/off thresholds")
        self.on = on
        self.off = off
        self.rising = on > off
        self.latched = False

    def update(self, value: float) -> bool:
        """Feed one value. Returns True only on the frame the latch sets."""
        if self.rising:
            crossed_on, crossed_off = value > self.on, value < self.off
        else:
            crossed_on, crossed_off = value < self.on, value > self.off

        if not self.latched and crossed_on:
            self.latched = True
            return True
        if self.latched and crossed_off:
            self.latched = False
        return False


class SignalSmoother:
    """
    Smoothed mood/wind plus the bloom and wither latches.

    This is the whole signal state of an engine: two floats and two
    booleans.
    """

    def __init__(self, config: SignalConfig | None = None):
        self.config = config or SignalConfig()
        self.mood = 0.0
        self.wind = 0.0
        self.bloom_latch = HysteresisLatch(self.config.bloom_on, self.config.bloom_off)
        self.wither_latch = HysteresisLatch(self.config.wither_on, self.config.wither_off)

    def update(self, state: MoodWindState) -> list[TreeEvent]:
        """
        Advance one frame toward the latest snapshot.

        Returns:
            Events fired this frame (usually empty)
        """
        self.mood = lerp(self.mood, state.mood, self.config.mood_alpha)
        self.wind = lerp(self.wind, state.wind_force, self.config.wind_alpha)

        events: list[TreeEvent] = []
        if self.bloom_latch.update(self.mood):
            events.append(TreeEvent.BLOOM)
        if self.config.detect_wither and self.wither_latch.update(self.mood):
            events.append(TreeEvent.WITHER)
        return events

    @property
    def blooming(self) -> bool:
        return self.bloom_latch.latched

    @property
    def withering(self) -> bool:
        return self.wither_latch.latched

    @property
    def bloom_factor(self) -> float:
        return bloom_factor(self.mood)

    @property
    def wither_factor(self) -> float:
        return wither_factor(self.mood)


# =============================================================================
# OFFLINE TRACE ANALYSIS
# =============================================================================

def smooth_trace(targets: Array, alpha: float, initial: float = 0.0) -> Array:
    """
    Smooth a whole sequence of targets.

    Args:
        targets: Raw values, shape (n,)
        alpha: Blend factor per step
        initial: Smoothed value before the first step

    Returns:
        Smoothed values after each step, shape (n,)
    """
    targets = jnp.asarray(targets, dtype=jnp.float32)

    def step(smoothed: Array, target: Array) -> tuple[Array, Array]:
        smoothed = smoothed + alpha * (target - smoothed)
        return smoothed, smoothed

    _, out = jax.lax.scan(step, jnp.asarray(initial, dtype=jnp.float32), targets)
    return out


def latch_trace(values: Array, on: float, off: float) -> Array:
    """
    Run a hysteresis latch over a sequence.

    Args:
        values: Signal values, shape (n,)
        on: Threshold that sets the latch
        off: Threshold that clears it

    Returns:
        Boolean array, True where the latch set (an event fired)
    """
    values = jnp.asarray(values, dtype=jnp.float32)
    rising = on > off

    def step(latched: Array, value: Array) -> tuple[Array, Array]:
        if rising:
            crossed_on, crossed_off = value > on, value < off
        else:
            crossed_on, crossed_off = value < on, value > off
        fired = jnp.logical_and(jnp.logical_not(latched), crossed_on)
        cleared = jnp.logical_and(latched, crossed_off)
        latched = jnp.where(fired, True, jnp.where(cleared, False, latched))
        return latched, fired

    _, fired = jax.lax.scan(step, jnp.asarray(False), values)
    return fired


def predict_events(
    moods: Array,
    config: SignalConfig | None = None,
    initial: float = 0.0,
) -> list[tuple[int, TreeEvent]]:
    """
    Which frames of a raw mood trace will fire events.

    Args:
        moods: Raw mood per frame
        config: Smoothing and threshold settings
        initial: Smoothed mood before the first frame

    Returns:
        (frame_index, event) pairs in frame order
    """
    if config is None:
        config = SignalConfig()

    smoothed = smooth_trace(moods, config.mood_alpha, initial)
    bloom = latch_trace(smoothed, config.bloom_on, config.bloom_off)
    events = [(int(i), TreeEvent.BLOOM) for i in jnp.nonzero(bloom)[0]]
    if config.detect_wither:
        wither = latch_trace(smoothed, config.wither_on, config.wither_off)
        events += [(int(i), TreeEvent.WITHER) for i in jnp.nonzero(wither)[0]]
    return sorted(events, key=lambda e: (e[0], e[1] != TreeEvent.BLOOM))
