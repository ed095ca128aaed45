"""
Mood Tree

An animated generative tree whose bark color, foliage, sway and falling
leaves follow an external emotional signal, emitting "bloom" and "wither"
events when that signal crosses hysteresis thresholds.

Modules:
    config: Constants, enums and configuration records
    state: MoodWindState snapshot and single-slot cells
    noise: Injectable random and Perlin noise source
    skeleton: One-time recursive branch skeleton
    signals: Smoothing, hysteresis latches, offline trace analysis
    flowers: Petal geometry per flower style
    particles: Falling leaf/petal physics and drawing
    surface: Matplotlib-backed and recording render surfaces
    renderer: Per-frame wind, color, foliage and spawning
    engine: TreeEngine handle and lifecycle hooks
    animation: Headless and live matplotlib frame schedulers
"""

from moodtree.animation import TreeAnimation, animate, run_frames
from moodtree.config import (
    EngineConfig,
    FlowerStyle,
    FoliageConfig,
    Palette,
    ParticleConfig,
    ParticleKind,
    ParticleLifecycle,
    SignalConfig,
    SkeletonConfig,
    TreeEvent,
    WindConfig,
)
from moodtree.engine import TreeEngine
from moodtree.flowers import draw_petals
from moodtree.noise import PerlinNoise, Randomness
from moodtree.particles import Particle, ParticleStore
from moodtree.renderer import Renderer, wind_angle
from moodtree.signals import (
    HysteresisLatch,
    SignalSmoother,
    latch_trace,
    predict_events,
    smooth_trace,
)
from moodtree.skeleton import Branch, build_skeleton, count_branches, iter_branches
from moodtree.state import LatestCell, MoodWindState, state_cell, style_cell
from moodtree.surface import DrawCall, MatplotlibSurface, RecordingSurface

__all__ = [
    # Config
    "EngineConfig",
    "FlowerStyle",
    "FoliageConfig",
    "Palette",
    "ParticleConfig",
    "ParticleKind",
    "ParticleLifecycle",
    "SignalConfig",
    "SkeletonConfig",
    "TreeEvent",
    "WindConfig",
    # State boundary
    "LatestCell",
    "MoodWindState",
    "state_cell",
    "style_cell",
    # Randomness
    "PerlinNoise",
    "Randomness",
    # Skeleton
    "Branch",
    "build_skeleton",
    "count_branches",
    "iter_branches",
    # Signals
    "HysteresisLatch",
    "SignalSmoother",
    "latch_trace",
    "predict_events",
    "smooth_trace",
    # Drawing
    "DrawCall",
    "MatplotlibSurface",
    "RecordingSurface",
    "draw_petals",
    "Renderer",
    "wind_angle",
    # Particles
    "Particle",
    "ParticleStore",
    # Engine
    "TreeEngine",
    "TreeAnimation",
    "animate",
    "run_frames",
]
