"""
Tests for frame schedulers and the matplotlib surface.

Everything runs on the Agg backend (see conftest.py); no window is opened.
"""

import itertools
from types import SimpleNamespace

import matplotlib.pyplot as plt
import pytest

from moodtree.animation import TreeAnimation, animate, run_frames
from moodtree.config import TreeEvent
from moodtree.engine import TreeEngine
from moodtree.noise import Randomness
from moodtree.state import MoodWindState, state_cell
from moodtree.surface import MatplotlibSurface, RecordingSurface


@pytest.fixture
def mpl_surface():
    surface = MatplotlibSurface(400, 300)
    yield surface
    surface.close()


def fake_clock(step: float = 1 / 30):
    times = itertools.count(1)
    return lambda: next(times) * step


# =============================================================================
# RUN_FRAMES
# =============================================================================

class TestRunFrames:
    """Tests for the headless scheduler."""

    def test_readies_engine(self) -> None:
        """An engine that has not been readied gets a skeleton first."""
        engine = TreeEngine(RecordingSurface(800, 600), state_cell(), randomness=Randomness(1))
        run_frames(engine, 3)
        assert engine.skeleton is not None
        assert engine.frame_count == 3

    def test_hook_runs_before_each_tick(self) -> None:
        """The hook's state is what the same frame sees."""
        state = state_cell()
        engine = TreeEngine(RecordingSurface(800, 600), state, randomness=Randomness(1))
        seen = []

        def hook(i: int) -> None:
            state.set(MoodWindState(mood=0.9, wind_force=0.0))
            seen.append((i, engine.frame_count))

        run_frames(engine, 5, before_frame=hook)
        assert seen == [(i, i) for i in range(5)]

    def test_event_frame_indices(self) -> None:
        """Events are reported against the zero-based frame that fired them."""
        state = state_cell(mood=0.9)
        engine = TreeEngine(RecordingSurface(800, 600), state, randomness=Randomness(1))

        def hook(i: int) -> None:
            if i == 40:
                state.set(MoodWindState(mood=-0.9, wind_force=0.0))

        fired = run_frames(engine, 100, before_frame=hook)
        assert [event for _, event in fired] == [TreeEvent.BLOOM, TreeEvent.WITHER]
        assert fired[0][0] == 10
        assert fired[1][0] > 40

    def test_consecutive_runs_continue_time(self) -> None:
        """A second run starting where the first ended keeps time increasing."""
        engine = TreeEngine(RecordingSurface(800, 600), state_cell(), randomness=Randomness(1))
        run_frames(engine, 30, fps=30)
        run_frames(engine, 30, fps=30, start=1.0)
        assert engine.frame_count == 60

        with pytest.raises(ValueError):
            run_frames(engine, 1, fps=30, start=0.0)


# =============================================================================
# LIVE ANIMATION
# =============================================================================

class TestTreeAnimation:
    """Tests for the FuncAnimation-driven scheduler."""

    def test_step_ticks_engine(self, mpl_surface: MatplotlibSurface) -> None:
        """Each animation step renders one frame onto the figure."""
        engine = TreeEngine(mpl_surface, state_cell(mood=0.9), randomness=Randomness(2))
        anim = TreeAnimation(engine, mpl_surface, clock=fake_clock())

        anim._step(0)
        anim._step(1)

        assert engine.frame_count == 2
        assert len(mpl_surface.ax.lines) > 0
        anim.stop()

    def test_resize_rebuilds_on_next_frame(self, mpl_surface: MatplotlibSurface) -> None:
        """Window resizes resize the surface and rebuild the tree."""
        engine = TreeEngine(mpl_surface, state_cell(), randomness=Randomness(2))
        anim = TreeAnimation(engine, mpl_surface, clock=fake_clock())

        anim._on_resize(SimpleNamespace(width=500, height=900))
        assert mpl_surface.width == 500.0
        anim._step(0)
        assert engine.skeleton.length == pytest.approx(900 * 0.22)
        anim.stop()

    def test_degenerate_resize_ignored(self, mpl_surface: MatplotlibSurface) -> None:
        """A minimised window does not break the next frame."""
        engine = TreeEngine(mpl_surface, state_cell(), randomness=Randomness(2))
        anim = TreeAnimation(engine, mpl_surface, clock=fake_clock())

        anim._on_resize(SimpleNamespace(width=0, height=0))
        anim._step(0)
        assert mpl_surface.width == 400.0
        assert engine.frame_count == 1
        anim.stop()

    def test_stop_tears_down(self, mpl_surface: MatplotlibSurface) -> None:
        """Stopping cancels frames and releases the engine; twice is harmless."""
        engine = TreeEngine(mpl_surface, state_cell(mood=0.9), randomness=Randomness(2))
        anim = animate(engine, mpl_surface)
        assert isinstance(anim, TreeAnimation)
        anim._step(0)

        anim.stop()
        anim.stop()
        assert anim.stopped
        assert engine.torn_down

        anim._step(1)
        assert engine.frame_count == 1


# =============================================================================
# MATPLOTLIB SURFACE
# =============================================================================

class TestMatplotlibSurface:
    """Tests for the figure-backed surface."""

    def test_zero_size_rejected(self) -> None:
        """A surface needs area."""
        with pytest.raises(ValueError, match="positive size"):
            MatplotlibSurface(0, 300)

    def test_draws_artists(self, mpl_surface: MatplotlibSurface) -> None:
        """Each primitive adds one artist."""
        color = (200, 100, 50, 255)
        mpl_surface.line(0, 0, 10, 10, color, 4)
        mpl_surface.ellipse(20, 20, 10, 5, color)
        mpl_surface.circle(30, 30, 8, color)
        mpl_surface.rect(0, 0, 400, 300, color)
        mpl_surface.shape((0, 0), [("line", (5, 0)), ("quad", (6, 3), (0, 5)),
                                   ("cubic", (-2, 4), (-2, 1), (0, 0))], color)
        assert len(mpl_surface.ax.lines) == 1
        assert len(mpl_surface.ax.patches) == 4

    def test_unknown_segment_rejected(self, mpl_surface: MatplotlibSurface) -> None:
        """Only line, quad and cubic segments are understood."""
        with pytest.raises(ValueError, match="segment"):
            mpl_surface.shape((0, 0), [("arc", (1, 1))], (0, 0, 0, 255))

    def test_clear_removes_artists(self, mpl_surface: MatplotlibSurface) -> None:
        """clear() empties the axes and resets the transform."""
        mpl_surface.push()
        mpl_surface.translate(50, 50)
        mpl_surface.line(0, 0, 10, 10, (0, 0, 0, 255), 2)
        mpl_surface.clear()
        assert len(mpl_surface.ax.lines) == 0
        assert mpl_surface.depth == 0
        assert mpl_surface.to_world(0, 0) == (0.0, 0.0)

    def test_save_frame(self, mpl_surface: MatplotlibSurface, tmp_path) -> None:
        """A rendered frame can be written to disk."""
        engine = TreeEngine(mpl_surface, state_cell(mood=0.3), randomness=Randomness(4))
        run_frames(engine, 5)
        path = tmp_path / "frame.png"
        mpl_surface.save(str(path))
        assert path.exists()
        assert path.stat().st_size > 0

    def test_close_releases_figure(self) -> None:
        """Closing the surface closes its figure."""
        surface = MatplotlibSurface(200, 100)
        number = surface.figure.number
        surface.close()
        assert not plt.fignum_exists(number)
