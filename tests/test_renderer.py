"""
Tests for per-frame rendering.

These tests verify the wind model, bark coloring, full-depth recursion,
staggered foliage and the spawning rules, drawing onto a RecordingSurface.
"""

import pytest

from moodtree.config import EngineConfig, FlowerStyle, WindConfig
from moodtree.noise import Randomness
from moodtree.particles import ParticleStore
from moodtree.renderer import (
    FrameContext,
    Renderer,
    active_sway,
    branch_color,
    effective_wind,
    flexibility,
    wind_angle,
)
from moodtree.skeleton import build_skeleton, iter_branches
from moodtree.surface import RecordingSurface


def make_ctx(bloom: float = 0.0, wither: float = 0.0, mood: float = 0.0,
             style: FlowerStyle = FlowerStyle.SAKURA) -> FrameContext:
    return FrameContext(
        time=0.0,
        frame=0,
        wind=0.0,
        wind_angle=0.0,
        mood=mood,
        bloom=bloom,
        wither=wither,
        style=style,
    )


def make_renderer(width: float, height: float, seed: int = 3):
    config = EngineConfig()
    rng = Randomness(seed)
    store = ParticleStore(width, height, rng, config.particles, config.palette)
    root = build_skeleton(width, height, rng, config.skeleton)
    return Renderer(config, rng, store), root, store


def draw_tree(renderer: Renderer, root, surface: RecordingSurface, ctx: FrameContext) -> None:
    surface.push()
    surface.translate(surface.width / 2, surface.height)
    renderer.render_branch(surface, root, surface.width / 2, surface.height, 0.0,
                           (0, 0, 0, 255), ctx)
    surface.pop()


# =============================================================================
# WIND
# =============================================================================

class TestWind:
    """Tests for the wind model."""

    def test_effective_wind_is_nonlinear(self) -> None:
        """Moderate input is damped more than strong input."""
        assert effective_wind(0.0) == 0.0
        assert effective_wind(1.0) == pytest.approx(1.0)
        assert effective_wind(0.5) == pytest.approx(0.5 ** 1.4)
        assert effective_wind(0.5) < 0.5

    def test_effective_wind_preserves_sign(self) -> None:
        """Negative wind bends the other way by the same amount."""
        assert effective_wind(-0.5) == pytest.approx(-effective_wind(0.5))

    def test_no_active_sway_without_wind(self) -> None:
        """Only the ambient drift remains at zero wind."""
        config = WindConfig()
        for t in (0.0, 0.3, 1.7, 12.0):
            assert active_sway(0.0, t, config) == 0.0

    def test_ambient_sway_bounded(self) -> None:
        """Idle drift stays within the ambient amplitude."""
        config = WindConfig()
        rng = Randomness(5)
        angles = [wind_angle(0.0, i * 0.1, rng, config) for i in range(200)]
        assert all(abs(a) <= config.ambient_amplitude + 1e-12 for a in angles)
        assert max(angles) - min(angles) > 0.0

    def test_strong_wind_leans(self) -> None:
        """Sustained wind produces a steady lean in its direction."""
        config = WindConfig()
        rng = Randomness(5)
        angles = [wind_angle(1.0, i * 0.05, rng, config) for i in range(100)]
        assert min(angles) > 0.0

    def test_flexibility_endpoints(self) -> None:
        """The trunk barely moves; the tips move the most."""
        config = WindConfig()
        assert flexibility(0, 9, config) == pytest.approx(0.05)
        assert flexibility(9, 9, config) == pytest.approx(1.3)

    def test_flexibility_monotonic(self) -> None:
        """Deeper branches are always more flexible."""
        config = WindConfig()
        values = [flexibility(d, 9, config) for d in range(10)]
        assert values == sorted(values)
        assert len(set(values)) == 10


# =============================================================================
# COLOR
# =============================================================================

class TestBranchColor:
    """Tests for bark color."""

    DORMANT = (35, 30, 30, 255)
    THRIVE = (100, 70, 50, 255)
    WITHERED = (10, 10, 12, 255)

    def test_endpoints(self) -> None:
        """No bloom gives dormant bark, full bloom thriving bark."""
        assert branch_color(0.0, 0.0, self.DORMANT, self.THRIVE, self.WITHERED) == self.DORMANT
        assert branch_color(1.0, 0.0, self.DORMANT, self.THRIVE, self.WITHERED) == self.THRIVE

    def test_wither_darkens(self) -> None:
        """Full wither overrides whatever bloom did."""
        assert branch_color(1.0, 1.0, self.DORMANT, self.THRIVE, self.WITHERED) == self.WITHERED
        half = branch_color(0.0, 0.5, self.DORMANT, self.THRIVE, self.WITHERED)
        assert all(w <= h <= d for w, h, d in zip(self.WITHERED, half, self.DORMANT))


# =============================================================================
# RECURSION AND FOLIAGE
# =============================================================================

class TestRenderBranch:
    """Tests for recursive branch drawing."""

    def test_draws_every_branch(self) -> None:
        """A full-size tree draws one line per skeleton node."""
        renderer, root, _ = make_renderer(1200, 900)
        surface = RecordingSurface(1200, 900)
        draw_tree(renderer, root, surface, make_ctx())
        assert surface.count("line") == 1023

    def test_transform_stack_balanced(self) -> None:
        """Every push in the recursion is popped."""
        renderer, root, _ = make_renderer(1200, 900)
        surface = RecordingSurface(1200, 900)
        draw_tree(renderer, root, surface, make_ctx(bloom=1.0))
        assert surface.depth == 0

    def test_trunk_starts_at_bottom_center(self) -> None:
        """The first line is anchored at the middle of the bottom edge."""
        renderer, root, _ = make_renderer(1200, 900)
        surface = RecordingSurface(1200, 900)
        draw_tree(renderer, root, surface, make_ctx())
        first = surface.calls[0]
        assert (first.x, first.y) == pytest.approx((600.0, 900.0))
        assert first.size == root.thickness

    def test_full_bloom_leaves_every_canopy_branch(self) -> None:
        """At full bloom each of the 960 canopy branches carries two leaves."""
        renderer, root, _ = make_renderer(1200, 900)
        surface = RecordingSurface(1200, 900)
        draw_tree(renderer, root, surface, make_ctx(bloom=1.0, style=FlowerStyle.SAKURA))
        assert surface.count("ellipse") == 1920

    def test_staggered_bloom(self) -> None:
        """At half bloom only branches below their threshold have leaves."""
        renderer, root, _ = make_renderer(1200, 900)
        surface = RecordingSurface(1200, 900)
        draw_tree(renderer, root, surface, make_ctx(bloom=0.5, style=FlowerStyle.SAKURA))

        leafy = sum(1 for b in iter_branches(root) if b.depth > 5 and b.bloom_threshold < 0.5)
        assert surface.count("ellipse") == 2 * leafy
        assert 0 < leafy < 960

    def test_flowers_only_on_flower_slots(self) -> None:
        """One flower center per flowering canopy branch at full bloom."""
        renderer, root, _ = make_renderer(1200, 900)
        surface = RecordingSurface(1200, 900)
        draw_tree(renderer, root, surface, make_ctx(bloom=1.0, style=FlowerStyle.SAKURA))

        flowering = sum(1 for b in iter_branches(root) if b.depth > 5 and b.has_flower)
        assert surface.count("circle") == flowering
        assert surface.count("shape") == 5 * flowering

    def test_no_foliage_when_dormant(self) -> None:
        """Zero bloom draws bare branches."""
        renderer, root, _ = make_renderer(1200, 900)
        surface = RecordingSurface(1200, 900)
        draw_tree(renderer, root, surface, make_ctx(bloom=0.0))
        assert surface.count("ellipse") == 0
        assert surface.count("circle") == 0

    def test_tiny_canvas_prunes_short_branches(self) -> None:
        """Branches shorter than the minimum render length end recursion."""
        renderer, root, _ = make_renderer(100, 50)
        surface = RecordingSurface(100, 50)
        draw_tree(renderer, root, surface, make_ctx())
        assert 1 < surface.count("line") < 1023


# =============================================================================
# SPAWNING
# =============================================================================

class TestSpawning:
    """Tests for particle release at branch tips."""

    def test_wither_sheds_dead_leaves_only(self) -> None:
        """A withering tree sheds, and sheds nothing alive."""
        renderer, root, store = make_renderer(1200, 900)
        surface = RecordingSurface(1200, 900)
        draw_tree(renderer, root, surface, make_ctx(wither=1.0))
        assert len(store) > 0
        assert all(p.dead for p in store)

    def test_bloom_releases_live_particles_only(self) -> None:
        """A blooming tree lets go of leaves and petals, never dead leaves."""
        renderer, root, store = make_renderer(1200, 900)
        surface = RecordingSurface(1200, 900)
        draw_tree(renderer, root, surface, make_ctx(bloom=1.0))
        assert len(store) > 0
        assert not any(p.dead for p in store)

    def test_quiet_tree_releases_nothing(self) -> None:
        """Low bloom and no wither spawns no particles."""
        renderer, root, store = make_renderer(1200, 900)
        surface = RecordingSurface(1200, 900)
        draw_tree(renderer, root, surface, make_ctx(bloom=0.2))
        assert len(store) == 0


# =============================================================================
# FRAME
# =============================================================================

class TestRender:
    """Tests for a whole frame."""

    def test_overlay_tints(self) -> None:
        """Warm wash when happy, dark veil when distressed, none when neutral."""
        renderer, _, _ = make_renderer(800, 600)
        surface = RecordingSurface(800, 600)

        renderer.draw_overlay(surface, 0.5)
        renderer.draw_overlay(surface, -0.5)
        renderer.draw_overlay(surface, 0.0)

        warm, dark = surface.calls
        assert warm.color[3] == 10
        assert dark.color[3] == 90

    def test_render_clears_first(self) -> None:
        """Each frame starts from an empty surface."""
        renderer, root, _ = make_renderer(800, 600)
        surface = RecordingSurface(800, 600)
        renderer.render(surface, root, make_ctx(mood=0.2))
        first = len(surface.calls)
        renderer.render(surface, root, make_ctx(mood=0.2))
        assert surface.clears == 2
        assert len(surface.calls) == first
        assert surface.calls[0].kind == "rect"
