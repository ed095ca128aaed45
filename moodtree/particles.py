"""
Falling leaves and petals.

Each particle is a point mass with its own spin, tumble and flutter. Per
frame it feels:

    gravity    heavy for dead leaves, near zero for floating petals
    wind       smoothed wind force * gain
    turbulence Perlin noise at (x, y, frame), centered on zero
    flutter    sin(frame * sway_freq + sway_phase) * sway_amp, sideways

then velocity is damped by a fixed per-frame drag and integrated into
position. Out-of-plane tumbling is faked by scaling the drawing vertically
by |cos(flip)|.

Two lifecycles (one per store, see ParticleLifecycle):
    GROUND: a particle that reaches its resting height stops integrating
        and is drawn flattened and slightly faded.
    FADE: a life counter drives alpha; the particle is removed at zero
        life or once it falls past the bottom edge.

Either way a particle that drifts past either side of the canvas by the
removal margin is dropped. The store is bounded: beyond capacity the
oldest particles are evicted first.
"""

import math
from collections import deque
from dataclasses import dataclass, replace

import numpy as np

from moodtree.config import Color, FlowerStyle, Palette, ParticleConfig, ParticleKind, ParticleLifecycle
from moodtree.flowers import draw_petals
from moodtree.noise import Randomness
from moodtree.surface import Surface


def with_alpha(color: Color, alpha: float) -> Color:
    r, g, b, _ = color
    return (r, g, b, int(max(0.0, min(255.0, alpha))))


@dataclass(eq=False)
class Particle:
    """One leaf or petal in flight (or at rest)."""

    pos: np.ndarray
    vel: np.ndarray
    acc: np.ndarray
    kind: ParticleKind
    dead: bool  # Shed dead leaf vs live drifting foliage
    color: Color
    size: float
    ground_y: float
    angle: float  # In-plane spin
    angle_vel: float
    flip: float  # Out-of-plane tumble phase
    flip_speed: float
    sway_phase: float
    sway_freq: float
    sway_amp: float
    life: float = 255.0
    grounded: bool = False

    @property
    def tumble_scale(self) -> float:
        """Vertical squash that fakes 3D tumbling."""
        return abs(math.cos(self.flip))


class ParticleStore:
    """
    Bounded FIFO collection of particles.

    Args:
        width: Canvas width in pixels
        height: Canvas height in pixels
        rng: Random/noise source
        config: Physics and lifecycle parameters
        palette: Particle colors
    """

    def __init__(
        self,
        width: float,
        height: float,
        rng: Randomness,
        config: ParticleConfig | None = None,
        palette: Palette | None = None,
    ):
        self.config = config or ParticleConfig()
        self.palette = palette or Palette()
        self.rng = rng
        self.width = float(width)
        self.height = float(height)
        self.particles: deque[Particle] = deque(maxlen=self.config.capacity)
        self._faded: dict[int, Palette] = {}

    def __len__(self) -> int:
        return len(self.particles)

    def __iter__(self):
        return iter(self.particles)

    def resize(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)

    def clear(self) -> None:
        self.particles.clear()
        self._faded.clear()

    # -------------------------------------------------------------------------
    # Spawning
    # -------------------------------------------------------------------------

    def spawn(
        self,
        x: float,
        y: float,
        dead: bool,
        wind: float = 0.0,
        kind: ParticleKind | None = None,
    ) -> Particle | None:
        """
        Release a particle at a world position.

        Dead leaves start falling fast; live foliage starts slow and drifts.
        Live particles are a coin flip between leaf and flower unless `kind`
        is given.

        Returns:
            The new particle, or None if the position is off-canvas
        """
        cfg = self.config
        rng = self.rng
        if x < -cfg.spawn_margin or x > self.width + cfg.spawn_margin or y > self.height:
            return None

        if kind is None:
            kind = ParticleKind.LEAF if dead else (
                ParticleKind.FLOWER if rng.random() > 0.5 else ParticleKind.LEAF
            )
        if dead:
            color = self.palette.leaf_dead
        elif kind == ParticleKind.FLOWER:
            color = self.palette.flower_pink
        else:
            color = self.palette.leaf_tender

        fall_low, fall_high = cfg.fall_speed_dead if dead else cfg.fall_speed_floating
        vx = rng.uniform(-0.5, 0.5) + wind * cfg.spawn_wind_gain
        vy = rng.uniform(fall_low, fall_high)

        particle = Particle(
            pos=np.array([x, y], dtype=float),
            vel=np.array([vx, vy], dtype=float),
            acc=np.zeros(2),
            kind=kind,
            dead=dead,
            color=color,
            size=rng.uniform(*cfg.size_range),
            ground_y=self.height - rng.uniform(0.0, cfg.ground_band),
            angle=rng.uniform(0.0, 2 * math.pi),
            angle_vel=rng.uniform(-0.15, 0.15),
            flip=rng.uniform(0.0, 2 * math.pi),
            flip_speed=rng.uniform(0.05, 0.2),
            sway_phase=rng.uniform(0.0, 2 * math.pi),
            sway_freq=rng.uniform(0.05, 0.1),
            sway_amp=rng.uniform(0.02, 0.05),
            life=cfg.life,
        )
        # deque(maxlen) drops the oldest entry when full
        self.particles.append(particle)
        return particle

    # -------------------------------------------------------------------------
    # Physics
    # -------------------------------------------------------------------------

    def step_particle(self, part: Particle, wind: float, frame: int) -> bool:
        """
        Integrate one particle by one frame.

        Returns:
            True if the particle landed on this frame
        """
        cfg = self.config
        if part.grounded:
            return False

        gravity = cfg.gravity_dead if part.dead else cfg.gravity_floating
        part.acc[:] = (0.0, gravity)

        turbulence = self.rng.noise(part.pos[0] * 0.01, part.pos[1] * 0.01, frame * 0.02) - 0.5
        part.acc[0] += wind * cfg.wind_gain + turbulence * cfg.turbulence_gain
        part.acc[0] += math.sin(frame * part.sway_freq + part.sway_phase) * part.sway_amp

        part.vel += part.acc
        part.vel *= cfg.drag_dead if part.dead else cfg.drag_floating
        part.pos += part.vel

        part.angle += part.angle_vel
        part.flip += part.flip_speed

        if cfg.lifecycle == ParticleLifecycle.FADE:
            part.life -= cfg.fade_dead if part.dead else cfg.fade_floating
            return False

        if part.pos[1] >= part.ground_y:
            part.grounded = True
            part.pos[1] = part.ground_y
            part.vel[:] = 0.0
            return True
        return False

    def is_expired(self, part: Particle) -> bool:
        cfg = self.config
        x = part.pos[0]
        if x < -cfg.removal_margin or x > self.width + cfg.removal_margin:
            return True
        if cfg.lifecycle == ParticleLifecycle.FADE:
            return part.life <= 0 or part.pos[1] > self.height
        return False

    def advance(self, wind: float, frame: int) -> int:
        """
        Step every live particle and drop expired ones.

        Returns:
            Number of particles that landed this frame
        """
        landed = 0
        survivors = []
        for part in self.particles:
            if self.step_particle(part, wind, frame):
                landed += 1
            if not self.is_expired(part):
                survivors.append(part)
        self.particles = deque(survivors, maxlen=self.config.capacity)
        return landed

    # -------------------------------------------------------------------------
    # Drawing
    # -------------------------------------------------------------------------

    def _alpha(self, part: Particle) -> float:
        if self.config.lifecycle == ParticleLifecycle.FADE:
            return part.life
        return self.config.grounded_alpha if part.grounded else 255.0

    def _flower_palette(self, alpha: float) -> Palette:
        key = int(alpha)
        if key >= 255:
            return self.palette
        if key not in self._faded:
            self._faded[key] = replace(
                self.palette, flower_pink=with_alpha(self.palette.flower_pink, key)
            )
        return self._faded[key]

    def draw(self, surface: Surface, style: "FlowerStyle | str") -> None:
        """
        Draw every particle.

        Flowers take their geometry from `style` now, so a style change shows
        up on petals that are already falling.
        """
        cfg = self.config
        for part in self.particles:
            surface.push()
            surface.translate(float(part.pos[0]), float(part.pos[1]))
            surface.rotate(part.angle)
            render_scale = cfg.grounded_flatten if part.grounded else part.tumble_scale
            surface.scale(1.0, max(cfg.min_tumble_scale, render_scale))

            alpha = self._alpha(part)
            if part.kind == ParticleKind.FLOWER:
                draw_petals(surface, style, part.size, self._flower_palette(alpha))
            else:
                surface.ellipse(0.0, 0.0, part.size, part.size * 0.7,
                                with_alpha(part.color, min(alpha, part.color[3])))
            surface.pop()

    def advance_and_draw(self, surface: Surface, wind: float,
                         style: "FlowerStyle | str", frame: int) -> int:
        landed = self.advance(wind, frame)
        self.draw(surface, style)
        return landed
