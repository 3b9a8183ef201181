"""Watermark placement against a base canvas.

A placement is the free space on each side of the watermark once it is
aligned on the canvas, so ``left + wm_width + right == base_width`` and
``top + wm_height + bottom == base_height`` always hold. Anchors that would
push the watermark off the canvas are clamped, never rejected.
"""
from __future__ import annotations

from typing import NamedTuple, Tuple

from imgpipe.models import OriginPolicy, Point


class Placement(NamedTuple):
    left: int
    top: int
    right: int
    bottom: int

    @property
    def offset(self) -> Tuple[int, int]:
        """Top-left insertion point of the watermark on the canvas."""
        return self.left, self.top


def _center(base: int, wm: int) -> Tuple[int, int]:
    before = base // 2 - wm // 2
    return before, base - wm - before


def _from_near_edge(base: int, wm: int, anchor: int) -> Tuple[int, int]:
    # anchor measured from the left/top edge
    after = base - anchor - wm
    if after < 0:
        return anchor + after, 0
    return anchor, after


def _from_far_edge(base: int, wm: int, anchor: int) -> Tuple[int, int]:
    # anchor measured from the right/bottom edge
    before = base - anchor - wm
    if before < 0:
        return 0, anchor + before
    return before, anchor


def resolve_placement(
    base_width: int,
    base_height: int,
    wm_width: int,
    wm_height: int,
    anchor: Point,
    origin: OriginPolicy,
) -> Placement:
    """Compute the padding around a watermark for the given origin policy.

    The watermark must fit inside the base canvas; callers crop oversized
    layers first. Negative anchor coordinates are treated as 0.
    """

    x, y = max(anchor.x, 0), max(anchor.y, 0)

    if origin is OriginPolicy.CENTER:
        left, right = _center(base_width, wm_width)
        top, bottom = _center(base_height, wm_height)
    elif origin is OriginPolicy.LEFT_TOP:
        left, right = _from_near_edge(base_width, wm_width, x)
        top, bottom = _from_near_edge(base_height, wm_height, y)
    else:
        left, right = _from_far_edge(base_width, wm_width, x)
        top, bottom = _from_far_edge(base_height, wm_height, y)

    return Placement(left, top, right, bottom)
