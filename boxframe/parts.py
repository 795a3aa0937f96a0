"""Part extraction: each printable part is the frame minus the regions that
do not belong to it, moved into its print position."""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import cadquery as cq

from .frame import Cut, CutKind, apply_cuts, build_frame, frame_cuts
from .params import FrameConfig, Part
from .validation import check_config

log = logging.getLogger(__name__)

REGION_MARGIN = 1.0  # [mm] region cutters overhang the frame

# Disconnected rails per part
EXPECTED_SOLIDS = {
    Part.FRAME: 1,
    Part.FRONT: 1,
    Part.BACK: 1,
    Part.SHELL: 4,
    Part.TOP: 2,
    Part.BOTTOM: 2,
    Part.WIDTH_RAIL: 1,
    Part.LENGTH_RAIL: 1,
    Part.HEIGHT_RAIL: 1,
}

Hook = Callable[[FrameConfig], cq.Workplane]


class GenerationError(RuntimeError):
    """The kernel produced no usable solid."""


def region_cuts(part: Part, config: FrameConfig) -> list[Cut]:
    """Regions removed from the frame to isolate ``part``, in frame coordinates."""
    W, L, H = config.outer_size
    t = config.thickness
    lt = config.tolerance
    m = REGION_MARGIN

    def region(name, x=(None, None), y=(None, None), z=(None, None)) -> Cut:
        spans = (x, y, z)
        lo = tuple(-m if a is None else a for a, _ in spans)
        hi = tuple(s + m if b is None else b for (_, b), s in zip(spans, (W, L, H)))
        return Cut(name, CutKind.REGION, lo, hi)

    behind_front = region("behind_front_ring", y=(t, None))
    front_ring = region("front_ring", y=(None, t))
    back_ring = region("back_ring", y=(L - t, None))
    below_top = region("below_top_rails", z=(None, H - t))
    above_bottom = region("above_bottom_rails", z=(t, None))

    part = Part(part)
    if part is Part.FRAME:
        return []
    if part is Part.FRONT:
        return [behind_front]
    if part is Part.BACK:
        return [region("before_back_ring", y=(None, L - t))]
    if part is Part.SHELL:
        return [front_ring, back_ring]
    if part is Part.TOP:
        return [front_ring, back_ring, below_top]
    if part is Part.BOTTOM:
        return [front_ring, back_ring, above_bottom]
    if part is Part.LENGTH_RAIL:
        return [front_ring, back_ring, below_top, region("right_length_rail", x=(t, None))]
    if part is Part.WIDTH_RAIL:
        # Lower corner blocks carry the front screw heads; the upper ones
        # already go with everything above the rail
        return [
            behind_front,
            above_bottom,
            region("left_head_block", x=(None, t)),
            region("right_head_block", x=(W - t, None)),
            region("left_trim", x=(t - m, t + lt)),
            region("right_trim", x=(W - t - lt, W - t + m)),
        ]
    if part is Part.HEIGHT_RAIL:
        return [
            behind_front,
            region("right_of_left_column", x=(t, None)),
            region("bottom_trim", z=(None, lt)),
            region("top_trim", z=(H - lt, None)),
        ]
    raise ValueError(f"Unknown part: {part}")


def part_cuts(part: Part, config: FrameConfig) -> list[Cut]:
    """Every subtraction that produces ``part``: frame cuts, then regions."""
    return frame_cuts(config) + region_cuts(part, config)


def _on_plate(solid: cq.Workplane) -> cq.Workplane:
    """Move the bounding box corner to the origin."""
    bb = solid.val().BoundingBox()
    return solid.translate((-bb.xmin, -bb.ymin, -bb.zmin))


def place(part: Part, config: FrameConfig, solid: cq.Workplane) -> cq.Workplane:
    """Move an isolated part from frame coordinates to its print position."""
    W, L, H = config.outer_size
    t = config.thickness
    drop = config.height + t  # [mm] top rails down to the build plate

    part = Part(part)
    if part is Part.BACK:
        # Half turn about the vertical axis: the back ring becomes a front ring
        return solid.rotate((W / 2, L / 2, 0), (W / 2, L / 2, 1), 180)
    if part in (Part.TOP, Part.LENGTH_RAIL):
        return solid.translate((0, 0, -drop))
    if part is Part.BOTTOM:
        flipped = solid.rotate((W / 2, 0, H / 2), (W / 2, 1, H / 2), 180)
        return flipped.translate((0, 0, -drop))
    if part is Part.WIDTH_RAIL:
        return solid.translate((-(t + config.tolerance), 0, 0))
    if part is Part.HEIGHT_RAIL:
        return _on_plate(solid.rotate((0, 0, 0), (0, 1, 0), -90))
    return solid


def extract_part(part: Part, config: FrameConfig) -> cq.Workplane:
    """Build the frame and cut it down to ``part`` in print position."""
    part = Part(part)
    frame = build_frame(config)
    body = apply_cuts(frame, region_cuts(part, config))
    return place(part, config, body)


def generate(
    config: FrameConfig,
    custom_add: Optional[Hook] = None,
    custom_remove: Optional[Hook] = None,
) -> cq.Workplane:
    """Build the part selected by ``config.part``.

    ``custom_add`` geometry is unioned to the finished part, then
    ``custom_remove`` geometry is cut from it (standoffs, cable-tie holes).
    Both receive the config and work in the part's print coordinates.
    """
    for finding in check_config(config):
        log.warning("%s: %s", finding.code, finding.message)

    t0 = time.perf_counter()
    solid = extract_part(config.part, config)
    if custom_add is not None:
        solid = solid.union(custom_add(config))
    if custom_remove is not None:
        solid = solid.cut(custom_remove(config))

    if not solid.solids().vals():
        raise GenerationError(f"{config.part.value} produced no solid")

    log.info("Built %s in %.2fs", config.part.value, time.perf_counter() - t0)
    return solid
