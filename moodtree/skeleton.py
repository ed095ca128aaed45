"""
Branch skeleton for the animated tree.

The skeleton is a complete binary tree built once per canvas size. Every
random visual property (angle jitter, length multiplier, bloom threshold,
flower slot) is baked in at build time, so the shape never changes between
frames; only mood and wind change what is drawn. A resize throws the whole
tree away and builds a new one.

Structure:
    depth 0 is the trunk, depth `max_depth` are the twig tips.
    Each non-tip branch has exactly two children, left (-angle) first.
    Node count is 2^(max_depth + 1) - 1.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from moodtree.config import SkeletonConfig
from moodtree.noise import Randomness


@dataclass(frozen=True)
class Branch:
    """
    One immutable branch descriptor.

    Attributes:
        length: Rest length in pixels
        thickness: Stroke weight in pixels
        depth: 0 at the trunk
        angle_offset: Rotation relative to the parent's frame (radians)
        len_mult: Length ratio to the parent, in [0.64, 0.80] by default
        bloom_threshold: Bloom factor above which this branch's foliage shows
        has_flower: Whether this branch's foliage includes a flower
        children: Two children, or empty at the depth cap
    """

    length: float
    thickness: float
    depth: int
    angle_offset: float
    len_mult: float
    bloom_threshold: float
    has_flower: bool
    children: tuple[Branch, ...] = ()

    @property
    def is_tip(self) -> bool:
        return not self.children


def trunk_dimensions(width: float, height: float, config: SkeletonConfig) -> tuple[float, float]:
    """
    Trunk length and thickness for a canvas.

    Narrow (phone-sized) canvases get a shorter, thinner trunk.

    Returns:
        (length, thickness) in pixels
    """
    if width < config.mobile_width:
        return height * config.trunk_ratio_narrow, config.trunk_thickness_narrow
    return height * config.trunk_ratio_wide, config.trunk_thickness_wide


def build_skeleton(
    width: float,
    height: float,
    rng: Randomness,
    config: SkeletonConfig | None = None,
) -> Branch:
    """
    Build the full branch tree for a canvas.

    Args:
        width: Canvas width in pixels
        height: Canvas height in pixels
        rng: Random source for jitter, thresholds and flower slots
        config: Skeleton parameters (defaults if None)

    Returns:
        Root (trunk) branch

    Raises:
        ValueError: If the canvas has no area
    """
    if config is None:
        config = SkeletonConfig()
    if width <= 0 or height <= 0:
        raise ValueError(f"Cannot build a tree for a {width}x{height} canvas")

    trunk_len, trunk_thick = trunk_dimensions(width, height, config)

    def make_branch(depth: int, length: float, thickness: float,
                    angle_offset: float, len_mult: float) -> Branch:
        # Draw this branch's own properties before descending
        bloom_threshold = rng.uniform(config.bloom_threshold_low, config.bloom_threshold_high)
        has_flower = rng.random() < config.flower_chance

        children: list[Branch] = []
        if depth < config.max_depth:
            for side in (-1.0, 1.0):
                child_mult = config.len_mult_center + rng.uniform(
                    -config.len_mult_jitter, config.len_mult_jitter
                )
                angle = side * config.base_angle + rng.uniform(
                    -config.angle_jitter, config.angle_jitter
                )
                children.append(make_branch(
                    depth + 1,
                    length * child_mult,
                    thickness * config.thickness_decay,
                    angle,
                    child_mult,
                ))

        return Branch(
            length=length,
            thickness=thickness,
            depth=depth,
            angle_offset=angle_offset,
            len_mult=len_mult,
            bloom_threshold=bloom_threshold,
            has_flower=has_flower,
            children=tuple(children),
        )

    # The trunk is not scaled from anything; it still carries a multiplier
    # so every node satisfies the same range
    trunk_mult = config.len_mult_center + rng.uniform(
        -config.len_mult_jitter, config.len_mult_jitter
    )
    return make_branch(0, trunk_len, trunk_thick, 0.0, trunk_mult)


def iter_branches(root: Branch) -> Iterator[Branch]:
    """Depth-first, parent before children."""
    stack = [root]
    while stack:
        branch = stack.pop()
        yield branch
        stack.extend(reversed(branch.children))


def count_branches(root: Branch) -> int:
    return sum(1 for _ in iter_branches(root))


def tree_depth(root: Branch) -> int:
    """Deepest branch depth in the tree."""
    return max(b.depth for b in iter_branches(root))
