"""
Per-frame tree rendering.

Wind model:
    ambient = noise(t * 0.6) mapped to [-0.04, 0.04] rad (alive at zero wind)
    effective = sign(w) * |w|^1.4
    active = sin(2.5 t) * effective * 0.1 + effective * 0.3
    wind_angle = ambient + active

Each branch hands its children a rotation of
    angle_offset + wind_angle * flexibility(depth)
with flexibility rising linearly from 0.05 at the trunk to 1.3 at the
tips, so the canopy sways far more than the trunk.

Color:
    bloom factor lerps the bark from dormant to thriving;
    wither factor then darkens it toward near-black.

The outer canopy levels carry foliage once the bloom factor passes each
branch's own threshold, and are where particles are released: dead leaves
are shed when wither dominates, live leaves and petals drift off when
bloom does.
"""

import math
from dataclasses import dataclass

from moodtree.config import Color, EngineConfig, FlowerStyle, WindConfig
from moodtree.flowers import draw_petals
from moodtree.noise import Randomness
from moodtree.particles import ParticleStore, with_alpha
from moodtree.signals import remap
from moodtree.skeleton import Branch
from moodtree.surface import Surface


# =============================================================================
# WIND
# =============================================================================

def effective_wind(wind: float, power: float = 1.4) -> float:
    """Sign-preserving power curve: weak input barely registers."""
    sign = -1.0 if wind < 0 else 1.0
    return sign * abs(wind) ** power


def active_sway(wind: float, t: float, config: WindConfig) -> float:
    """User-driven bending: oscillation plus a steady lean."""
    eff = effective_wind(wind, config.power)
    return math.sin(t * config.oscillation_freq) * (eff * config.oscillation_gain) + eff * config.lean_gain


def ambient_sway(t: float, rng: Randomness, config: WindConfig) -> float:
    """Slow idle drift independent of input."""
    n = rng.noise(t * config.ambient_speed)
    return remap(n, 0.0, 1.0, -config.ambient_amplitude, config.ambient_amplitude)


def wind_angle(wind: float, t: float, rng: Randomness, config: WindConfig) -> float:
    return ambient_sway(t, rng, config) + active_sway(wind, t, config)


def flexibility(depth: int, max_depth: int, config: WindConfig) -> float:
    """How much of the wind angle a branch at this depth inherits."""
    return remap(depth, 0, max_depth, config.flex_root, config.flex_tip)


# =============================================================================
# COLOR
# =============================================================================

def lerp_color(a: Color, b: Color, t: float) -> Color:
    t = min(1.0, max(0.0, t))
    return tuple(int(round(ca + (cb - ca) * t)) for ca, cb in zip(a, b))


def branch_color(bloom: float, wither: float, dormant: Color, thrive: Color,
                 withered: Color) -> Color:
    color = lerp_color(dormant, thrive, bloom)
    if wither > 0:
        color = lerp_color(color, withered, wither)
    return color


# =============================================================================
# RENDERER
# =============================================================================

@dataclass(frozen=True)
class FrameContext:
    """Everything one frame's drawing depends on."""

    time: float  # Seconds
    frame: int
    wind: float  # Smoothed wind force
    wind_angle: float
    mood: float  # Smoothed mood
    bloom: float
    wither: float
    style: FlowerStyle


class Renderer:
    """
    Draws the skeleton, foliage and particles for one frame.

    This is the only writer to the surface and the only caller of
    `ParticleStore.spawn`.
    """

    def __init__(self, config: EngineConfig, rng: Randomness, store: ParticleStore):
        self.config = config
        self.rng = rng
        self.store = store

    def render(self, surface: Surface, root: Branch, ctx: FrameContext) -> None:
        surface.clear()
        self.draw_overlay(surface, ctx.mood)

        palette = self.config.palette
        color = branch_color(ctx.bloom, ctx.wither, palette.trunk_dormant,
                             palette.trunk_thrive, palette.trunk_withered)

        start_x, start_y = surface.width / 2, surface.height
        surface.push()
        surface.translate(start_x, start_y)
        self.render_branch(surface, root, start_x, start_y, 0.0, color, ctx)
        surface.pop()

        self.store.advance_and_draw(surface, ctx.wind, ctx.style, ctx.frame)

    def draw_overlay(self, surface: Surface, mood: float) -> None:
        """Warm wash when content, dark veil when distressed."""
        palette = self.config.palette
        if mood > 0:
            tint = with_alpha(palette.overlay_warm, mood * 20)
        elif mood < 0:
            tint = with_alpha(palette.overlay_dark, abs(mood) * 180)
        else:
            return
        surface.rect(0.0, 0.0, surface.width, surface.height, tint)

    def render_branch(self, surface: Surface, branch: Branch, x: float, y: float,
                      cum_angle: float, color: Color, ctx: FrameContext) -> None:
        """
        Draw a branch from the current origin to (0, -length) and recurse.

        (x, y, cum_angle) track the branch base in world space alongside the
        surface transform, for particle spawning.
        """
        max_depth = self.config.skeleton.max_depth
        foliage = self.config.foliage

        surface.line(0.0, 0.0, 0.0, -branch.length, color, branch.thickness)

        tip_x = x + math.sin(cum_angle) * branch.length
        tip_y = y - math.cos(cum_angle) * branch.length
        surface.translate(0.0, -branch.length)

        if branch.depth > max_depth - foliage.canopy_levels:
            if ctx.bloom > branch.bloom_threshold:
                self.draw_foliage(surface, branch.has_flower, ctx)
            self.maybe_spawn(tip_x, tip_y, ctx)

        if branch.depth >= max_depth or branch.length < foliage.min_render_length:
            return

        local_wind = ctx.wind_angle * flexibility(branch.depth, max_depth, self.config.wind)
        for child in branch.children:
            surface.push()
            next_angle = child.angle_offset + local_wind
            surface.rotate(next_angle)
            self.render_branch(surface, child, tip_x, tip_y, cum_angle + next_angle, color, ctx)
            surface.pop()

    def draw_foliage(self, surface: Surface, has_flower: bool, ctx: FrameContext) -> None:
        """Leaf pair, plus a breathing flower on flower-slot branches."""
        foliage = self.config.foliage
        palette = self.config.palette

        breathe = 1 + math.sin(ctx.time * foliage.breathe_speed) * foliage.breathe_amount
        sway = ctx.wind_angle * self.config.wind.foliage_sway_gain
        growth = min(1.0, max(0.5, ctx.bloom * foliage.growth_gain))
        leaf_size = foliage.leaf_size * breathe * growth

        for side in (1.0, -1.0):
            surface.push()
            surface.rotate(side * math.pi / 4 + sway)
            surface.ellipse(0.0, 0.0, leaf_size, leaf_size * foliage.leaf_aspect, palette.leaf_tender)
            surface.pop()

        if has_flower and ctx.bloom > foliage.flower_min_bloom:
            surface.push()
            surface.rotate(sway)
            draw_petals(surface, ctx.style, foliage.flower_size * breathe * growth, palette)
            surface.pop()

    def maybe_spawn(self, tip_x: float, tip_y: float, ctx: FrameContext) -> None:
        """
        Noise-gated particle release at a branch tip.

        The fractional part of a scaled noise sample acts as a cheap
        per-branch, per-moment dice roll.
        """
        cfg = self.config.particles
        n = self.rng.noise(tip_x * 0.1, tip_y * 0.1, ctx.time * 8.0)
        roll = (n * 100.0) % 1.0

        if ctx.wither > ctx.bloom and ctx.wither > cfg.wither_spawn_min:
            if roll < cfg.spawn_chance + cfg.shed_chance_gain * ctx.wither:
                self.store.spawn(tip_x, tip_y, dead=True, wind=ctx.wind)
        elif ctx.bloom > cfg.bloom_spawn_min:
            if roll < cfg.spawn_chance:
                self.store.spawn(tip_x, tip_y, dead=False, wind=ctx.wind)
