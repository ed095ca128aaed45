"""
The producer/consumer boundary.

An external analysis loop writes the latest mood/wind reading; the engine
polls it once per frame. Only the most recent value matters, so the
boundary is a single slot with whole-value replacement: no queue, no lock,
no backpressure. Readers may see a stale value, never a partial one.
"""

import math
from typing import Callable, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from moodtree.config import FlowerStyle

T = TypeVar("T")


class MoodWindState(BaseModel):
    """One snapshot of the external emotional signal."""

    model_config = ConfigDict(frozen=True)

    mood: float = Field(
        default=0.0, ge=-1.0, le=1.0, description="Distress (-1) to contentment (+1)"
    )
    wind_force: float = Field(
        default=0.0, description="Signed wind magnitude, roughly in [-1, 1]"
    )

    @field_validator("wind_force")
    @classmethod
    def _finite_wind(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("wind_force must be finite")
        return value


class LatestCell(Generic[T]):
    """
    Last-write-wins slot.

    Calling the cell returns its current value, so a cell can be handed to
    the engine directly as a pull-based source.
    """

    def __init__(self, value: T) -> None:
        self._value = value

    def set(self, value: T) -> None:
        self._value = value

    def get(self) -> T:
        return self._value

    def __call__(self) -> T:
        return self._value


StateSource = Callable[[], MoodWindState]
StyleSource = Callable[[], "FlowerStyle | str"]


def state_cell(mood: float = 0.0, wind_force: float = 0.0) -> LatestCell[MoodWindState]:
    """Create a state cell holding an initial snapshot."""
    return LatestCell(MoodWindState(mood=mood, wind_force=wind_force))


class _StyleCell(LatestCell[FlowerStyle]):
    def set(self, value: "FlowerStyle | str") -> None:
        super().set(FlowerStyle.parse(value))


def style_cell(style: "FlowerStyle | str" = FlowerStyle.PEACH) -> LatestCell[FlowerStyle]:
    """Create a style cell; tags are resolved on write."""
    return _StyleCell(FlowerStyle.parse(style))
