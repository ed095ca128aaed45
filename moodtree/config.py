"""
Configuration and type definitions for the mood tree engine.

This module defines all constants, enums and configuration records for the
animated generative tree. Every record is immutable; an engine instance is
built from one `EngineConfig` and never mutates it.

Coordinate conventions:
    Screen coordinates, origin at the top-left, y grows downward.
    Angles are radians, positive = clockwise on screen.
    Colors are RGBA tuples in 0-255.
"""

import math
from dataclasses import dataclass, field
from enum import Enum

Color = tuple[int, int, int, int]


class FlowerStyle(str, Enum):
    """Petal geometry selector for attached and falling flowers."""

    PEACH = "peach"
    SAKURA = "sakura"
    DELONIX = "delonix"

    @classmethod
    def parse(cls, tag: "str | FlowerStyle | None") -> "FlowerStyle":
        """Resolve a style tag, falling back to peach for unknown tags."""
        if isinstance(tag, cls):
            return tag
        try:
            return cls(str(tag).lower())
        except ValueError:
            return cls.PEACH


class TreeEvent(str, Enum):
    """Discrete lifecycle events emitted on latch transitions."""

    BLOOM = "bloom"
    WITHER = "wither"


class ParticleKind(str, Enum):
    """What a particle draws as. Flowers resolve their geometry at draw time."""

    LEAF = "leaf"
    FLOWER = "flower"


class ParticleLifecycle(str, Enum):
    """
    How falling particles end.

    GROUND: particles settle at a resting height and stay, flattened and
        faded, until evicted by capacity or pushed off-screen.
    FADE: particles carry a life counter that drives alpha; they are
        removed at zero life or once they pass the bottom edge.
    """

    GROUND = "ground"
    FADE = "fade"


@dataclass(frozen=True)
class SkeletonConfig:
    """Parameters for the one-time recursive branch skeleton."""

    max_depth: int = 9  # Depth cap (trunk = 0), binary branching below it
    mobile_width: float = 600.0  # Canvases narrower than this use the small trunk
    trunk_ratio_narrow: float = 0.22  # Trunk length / canvas height (narrow)
    trunk_ratio_wide: float = 0.26  # Trunk length / canvas height (wide)
    trunk_thickness_narrow: float = 18.0
    trunk_thickness_wide: float = 28.0

    # Children sit at -base_angle and +base_angle with organic jitter
    base_angle: float = math.pi / 5.0  # ~36 degrees, sprawling peach tree look
    angle_jitter: float = 0.15  # ~8.6 degrees either way

    # Per-branch length multiplier: center +/- jitter -> [0.64, 0.80]
    len_mult_center: float = 0.72
    len_mult_jitter: float = 0.08
    thickness_decay: float = 0.7

    # Staggered bloom: each branch's foliage appears above its own threshold
    bloom_threshold_low: float = 0.05
    bloom_threshold_high: float = 0.95
    flower_chance: float = 0.5

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError("max_depth must be nonnegative")
        if not 0.0 < self.len_mult_center - self.len_mult_jitter:
            raise ValueError("Length multiplier range must stay positive")
        if not 0.0 <= self.bloom_threshold_low <= self.bloom_threshold_high <= 1.0:
            raise ValueError("Bloom threshold range must lie within [0, 1]")


@dataclass(frozen=True)
class SignalConfig:
    """
    Smoothing factors and hysteresis thresholds.

    Smoothing is a first-order low-pass filter:
        s <- s + alpha * (target - s)

    A latch sets when smoothed mood crosses the "on" threshold and clears
    only once it crosses back over the "off" threshold.
    """

    mood_alpha: float = 0.10
    wind_alpha: float = 0.12
    bloom_on: float = 0.6
    bloom_off: float = 0.2
    wither_on: float = -0.6
    wither_off: float = -0.2
    detect_wither: bool = True

    def __post_init__(self) -> None:
        for name in ("mood_alpha", "wind_alpha"):
            alpha = getattr(self, name)
            if not 0.0 < alpha <= 1.0:
                raise ValueError(f"{name} must be in (0, 1], got {alpha}")
        if not self.bloom_off < self.bloom_on:
            raise ValueError("bloom_off must be below bloom_on")
        if not self.wither_on < self.wither_off:
            raise ValueError("wither_off must be above wither_on")


@dataclass(frozen=True)
class WindConfig:
    """Ambient sway and user-driven bending of the canopy."""

    ambient_speed: float = 0.6  # Noise time scale for the idle sway
    ambient_amplitude: float = 0.04  # Idle sway, radians either way
    power: float = 1.4  # |wind|^power: small inputs barely move the tree
    oscillation_freq: float = 2.5  # rad/s
    oscillation_gain: float = 0.1
    lean_gain: float = 0.3  # Steady lean in the wind direction
    flex_root: float = 0.05  # Trunk barely moves
    flex_tip: float = 1.3  # Twigs move the most
    foliage_sway_gain: float = 3.0


@dataclass(frozen=True)
class ParticleConfig:
    """Falling leaves and petals."""

    capacity: int = 300  # FIFO eviction beyond this
    lifecycle: ParticleLifecycle = ParticleLifecycle.GROUND

    # Dead leaves drop; live petals drift
    gravity_dead: float = 0.1
    gravity_floating: float = 0.015
    drag_dead: float = 0.96  # Velocity multiplier per frame (closer to 1 = weaker drag)
    drag_floating: float = 0.94
    fall_speed_dead: tuple[float, float] = (1.5, 3.5)
    fall_speed_floating: tuple[float, float] = (0.2, 0.8)

    wind_gain: float = 0.25
    spawn_wind_gain: float = 2.5  # Initial horizontal kick from the wind
    turbulence_gain: float = 0.15
    size_range: tuple[float, float] = (7.0, 12.0)

    ground_band: float = 15.0  # Resting height is within this many px of the bottom
    grounded_flatten: float = 0.2
    grounded_alpha: int = 200
    min_tumble_scale: float = 0.1
    removal_margin: float = 100.0  # Removed once this far past either side
    spawn_margin: float = 50.0

    life: float = 255.0  # FADE lifecycle only
    fade_dead: float = 2.5
    fade_floating: float = 1.5

    # Spawn evaluation per eligible branch per frame
    spawn_chance: float = 0.02
    shed_chance_gain: float = 0.06  # Extra shedding at full wither
    bloom_spawn_min: float = 0.3
    wither_spawn_min: float = 0.1

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise ValueError("Particle capacity must be positive")
        if not 0.0 < self.drag_dead <= 1.0 or not 0.0 < self.drag_floating <= 1.0:
            raise ValueError("Drag factors must be in (0, 1]")


@dataclass(frozen=True)
class Palette:
    """Peach tree palette."""

    trunk_dormant: Color = (35, 30, 30, 255)  # Dark charcoal/brown
    trunk_thrive: Color = (100, 70, 50, 255)  # Warm brown
    trunk_withered: Color = (10, 10, 12, 255)  # Near-black
    leaf_tender: Color = (120, 210, 100, 230)  # Bright tender green
    leaf_dead: Color = (140, 105, 60, 235)
    flower_pink: Color = (255, 140, 170, 240)
    center_peach: Color = (255, 220, 100, 255)
    center_sakura: Color = (255, 255, 255, 220)
    center_delonix: Color = (255, 200, 100, 150)
    overlay_warm: Color = (255, 230, 200, 0)  # Alpha set from mood
    overlay_dark: Color = (5, 5, 15, 0)


@dataclass(frozen=True)
class FoliageConfig:
    """Leaves and flowers attached to the outer canopy."""

    canopy_levels: int = 4  # Outer depth levels that carry foliage
    leaf_size: float = 11.0
    leaf_aspect: float = 0.5
    flower_size: float = 14.0
    flower_min_bloom: float = 0.25
    breathe_speed: float = 4.0  # rad/s
    breathe_amount: float = 0.08
    growth_gain: float = 1.5
    min_render_length: float = 4.0  # Recursion stops below this many px


@dataclass(frozen=True)
class EngineConfig:
    """Complete engine configuration."""

    skeleton: SkeletonConfig = field(default_factory=SkeletonConfig)
    signals: SignalConfig = field(default_factory=SignalConfig)
    wind: WindConfig = field(default_factory=WindConfig)
    particles: ParticleConfig = field(default_factory=ParticleConfig)
    foliage: FoliageConfig = field(default_factory=FoliageConfig)
    palette: Palette = field(default_factory=Palette)
    fps: float = 30.0

    def __post_init__(self) -> None:
        if self.fps <= 0:
            raise ValueError("fps must be positive")
        if self.foliage.canopy_levels > self.skeleton.max_depth + 1:
            raise ValueError("canopy_levels cannot exceed the tree depth")
