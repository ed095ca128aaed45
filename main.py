"""
Mood Tree - scripted demo

Drives the tree with a synthetic mood/wind trace instead of a camera:

1. calm      - neutral mood, no wind
2. joy       - mood climbs to +0.9, a steady breeze: the canopy blooms
3. distress  - mood drops to -0.9, gusting wind: the tree withers and sheds
4. recovery  - back to mild contentment

Before running, the whole trace is analysed offline to predict which frames
fire bloom/wither events; the live run then reports what actually fired.

Usage:
    python main.py                         # render snapshots to ./frames
    python main.py --style sakura --live   # open a window instead
"""

import argparse
import logging
import math
from pathlib import Path

import jax.numpy as jnp
import matplotlib.pyplot as plt

from moodtree import (
    EngineConfig,
    MatplotlibSurface,
    ParticleConfig,
    ParticleLifecycle,
    Randomness,
    TreeEngine,
    animate,
    predict_events,
    run_frames,
    state_cell,
    style_cell,
)

PHASES = [
    # (name, frames, mood, wind)
    ("calm", 30, 0.0, 0.0),
    ("joy", 90, 0.9, 0.3),
    ("distress", 90, -0.9, 0.8),
    ("recovery", 60, 0.4, 0.1),
]


def scripted_trace() -> tuple[list[float], list[float]]:
    """Per-frame raw mood and wind for the whole demo."""
    moods: list[float] = []
    winds: list[float] = []
    for _name, frames, mood, wind in PHASES:
        for i in range(frames):
            moods.append(mood)
            # Gusts: wind pulses around its phase level
            winds.append(wind * (0.6 + 0.4 * math.sin(i * 0.2)))
    return moods, winds


def run_snapshots(args: argparse.Namespace, config: EngineConfig) -> None:
    moods, winds = scripted_trace()
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    predicted = predict_events(jnp.array(moods), config.signals)
    print("Predicted events:")
    for frame, event in predicted:
        print(f"  frame {frame:4d}: {event.value}")

    state = state_cell()
    surface = MatplotlibSurface(args.width, args.height)
    engine = TreeEngine(
        surface,
        state_source=state,
        style_source=style_cell(args.style),
        config=config,
        randomness=Randomness(args.seed),
    )
    engine.on_surface_ready()

    def before_frame(i: int) -> None:
        state.set(state.get().model_copy(update={"mood": moods[i], "wind_force": winds[i]}))

    # Snapshot at the end of each phase
    observed = []
    start = 0
    offset = 0.0
    for name, frames, _mood, _wind in PHASES:
        fired = run_frames(
            engine, frames, fps=config.fps, start=offset,
            before_frame=lambda i, base=start: before_frame(base + i),
        )
        observed += [(start + i, event) for i, event in fired]
        start += frames
        offset += frames / config.fps

        path = out_dir / f"{start:04d}_{name}.png"
        surface.save(str(path))
        print(f"  {name:9s} frame {start:4d}: mood={engine.mood:+.2f} "
              f"wind={engine.wind:+.2f} particles={engine.particle_count:3d} -> {path}")

    print("Observed events:")
    for frame, event in observed:
        print(f"  frame {frame:4d}: {event.value}")

    engine.on_teardown()
    surface.close()


def run_live(args: argparse.Namespace, config: EngineConfig) -> None:
    moods, winds = scripted_trace()
    state = state_cell()
    surface = MatplotlibSurface(args.width, args.height)
    engine = TreeEngine(
        surface,
        state_source=state,
        style_source=style_cell(args.style),
        on_event=lambda event: print(f"  event: {event.value}"),
        config=config,
        randomness=Randomness(args.seed),
    )

    # Stand-in producer: advance the script on its own timer, as a camera would
    frame = {"i": 0}

    def produce() -> None:
        i = frame["i"] % len(moods)
        state.set(state.get().model_copy(update={"mood": moods[i], "wind_force": winds[i]}))
        frame["i"] += 1

    timer = surface.figure.canvas.new_timer(interval=int(1000 / config.fps))
    timer.add_callback(produce)
    timer.start()

    animation = animate(engine, surface, fps=config.fps)
    plt.show()
    timer.stop()
    animation.stop()


def main() -> None:
    parser = argparse.ArgumentParser(description="Mood tree demo")
    parser.add_argument("--width", type=int, default=800)
    parser.add_argument("--height", type=int, default=600)
    parser.add_argument("--style", default="peach", help="peach, sakura or delonix")
    parser.add_argument("--lifecycle", default="ground", choices=["ground", "fade"])
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--out", default="frames")
    parser.add_argument("--live", action="store_true", help="Open an animated window")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    config = EngineConfig(particles=ParticleConfig(lifecycle=ParticleLifecycle(args.lifecycle)))

    print("\n" + "=" * 60)
    print("  MOOD TREE")
    print("=" * 60)

    if args.live:
        run_live(args, config)
    else:
        run_snapshots(args, config)


if __name__ == "__main__":
    main()
