"""Frame solid: twelve rails with rounded convex edges, screw bores at the
corners, panel grooves.

Every subtraction is first described as a :class:`Cut` (kind + bounds) so the
cut list can be inspected and checked without touching the CAD kernel; the
solids are only built when the cut is applied.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum

import cadquery as cq

from .geometry import Point, block, convex_edges, y_cylinder
from .params import FrameConfig

log = logging.getLogger(__name__)

CUT_OVERSHOOT = 0.01  # [mm] cutters poke out of the face they open


class CutKind(str, Enum):
    RECESS = "recess"
    SHANK = "shank"
    THREAD = "thread"
    GROOVE = "groove"
    REGION = "region"


SCREW_KINDS = (CutKind.RECESS, CutKind.SHANK, CutKind.THREAD)


@dataclass(frozen=True)
class Cut:
    """One subtraction applied to the frame.

    A box spans ``lo``..``hi``. With a ``diameter`` the cut is a cylinder
    along Y and ``lo``/``hi`` are its bounding box.
    """

    name: str
    kind: CutKind
    lo: Point
    hi: Point
    diameter: float | None = None

    @property
    def axis(self) -> tuple[float, float] | None:
        """(x, z) of a cylinder's axis."""
        if self.diameter is None:
            return None
        return ((self.lo[0] + self.hi[0]) / 2, (self.lo[2] + self.hi[2]) / 2)

    def solid(self) -> cq.Workplane:
        if self.diameter is None:
            return block(self.lo, self.hi)
        x, z = self.axis
        return y_cylinder(self.diameter, x, z, self.lo[1], self.hi[1])


def _bore(name: str, kind: CutKind, diameter: float,
          x: float, z: float, y0: float, y1: float) -> Cut:
    r = diameter / 2
    return Cut(name, kind, (x - r, y0, z - r), (x + r, y1, z + r), diameter)


def rail_bounds(config: FrameConfig) -> list[tuple[Point, Point]]:
    """Bounds of the 12 edge rails; their union is the sharp frame."""
    W, L, H = config.outer_size
    t = config.thickness
    rails = []
    for y0 in (0.0, L - t):
        for z0 in (0.0, H - t):
            rails.append(((0.0, y0, z0), (W, y0 + t, z0 + t)))   # width rails
    for x0 in (0.0, W - t):
        for z0 in (0.0, H - t):
            rails.append(((x0, 0.0, z0), (x0 + t, L, z0 + t)))   # length rails
    for x0 in (0.0, W - t):
        for y0 in (0.0, L - t):
            rails.append(((x0, y0, 0.0), (x0 + t, y0 + t, H)))   # height rails
    return rails


def screw_axes(config: FrameConfig) -> list[tuple[float, float]]:
    """(x, z) of the four screw axes, centred in the corner rails."""
    W, _, H = config.outer_size
    t = config.thickness
    return [(x, z) for x in (t / 2, W - t / 2) for z in (t / 2, H - t / 2)]


def screw_cuts(config: FrameConfig) -> list[Cut]:
    """Recess, clearance bore and thread bore at each of the 8 corners.

    Front screws enter at y = 0, back screws at y = L; each one runs through
    its end ring and threads into the length rail behind it.
    """
    _, L, _ = config.outer_size
    t = config.thickness
    spans = [
        (CutKind.RECESS, config.head_diameter, config.head_height),
        (CutKind.SHANK, config.shank_diameter, t + config.shank_recess),
        (CutKind.THREAD, config.thread_diameter, config.screw_reach),
    ]
    cuts = []
    for end in ("front", "back"):
        for i, (x, z) in enumerate(screw_axes(config)):
            for kind, diameter, depth in spans:
                y0, y1 = -CUT_OVERSHOOT, depth
                if end == "back":
                    y0, y1 = L - depth, L + CUT_OVERSHOOT
                cuts.append(_bore(f"{end}_{kind.value}_{i}", kind, diameter, x, z, y0, y1))
    return cuts


def groove_cuts(config: FrameConfig) -> list[Cut]:
    """One slab per face, cutting the panel groove into the rails around
    the opening. Empty when panels are disabled."""
    if not config.panel:
        return []
    outer = config.outer_size
    t = config.thickness
    reach = config.groove_reach
    near = config.groove_offset - config.groove_width_extra                          # [mm]
    far = config.groove_offset + config.groove_width + config.groove_width_extra     # [mm]

    faces = [
        (1, "front", "back"),
        (0, "left", "right"),
        (2, "bottom", "top"),
    ]
    cuts = []
    for axis, low_name, high_name in faces:
        for name, a, b in (
            (low_name, near, far),
            (high_name, outer[axis] - far, outer[axis] - near),
        ):
            lo = [t - reach] * 3
            hi = [size - t + reach for size in outer]
            lo[axis], hi[axis] = a, b
            cuts.append(Cut(f"{name}_groove", CutKind.GROOVE, tuple(lo), tuple(hi)))
    return cuts


def frame_cuts(config: FrameConfig) -> list[Cut]:
    """All subtractions applied to the rounded body, in order."""
    return screw_cuts(config) + groove_cuts(config)


def sharp_body(config: FrameConfig) -> cq.Workplane:
    """Outer box hollowed by three orthogonal through-slabs: the 12 rails."""
    W, L, H = config.outer_size
    t = config.thickness
    m = CUT_OVERSHOOT
    body = block((0.0, 0.0, 0.0), (W, L, H))
    for lo, hi in (
        ((t, -m, t), (W - t, L + m, H - t)),    # front to back
        ((-m, t, t), (W + m, L - t, H - t)),    # left to right
        ((t, t, -m), (W - t, L - t, H + m)),    # bottom to top
    ):
        body = body.cut(block(lo, hi))
    return body


def rounded_body(config: FrameConfig) -> cq.Workplane:
    """Sharp frame with every convex edge filleted by ``r``.

    This is the Minkowski sum of the frame shrunk by ``r`` and a sphere of
    radius ``r``: convex edges and corners turn round, concave edges stay
    sharp. The edges are filleted in one call.
    """
    body = sharp_body(config)
    r = config.corner_radius
    if r <= 0:
        return body
    edges = convex_edges(body, rail_bounds(config))
    return body.newObject(edges).fillet(r)


def apply_cuts(body: cq.Workplane, cuts: list[Cut]) -> cq.Workplane:
    for cut in cuts:
        body = body.cut(cut.solid())
    return body


def build_frame(config: FrameConfig) -> cq.Workplane:
    """Full assembled frame: rounded rails, screw bores and, if enabled,
    panel grooves."""
    t0 = time.perf_counter()
    cuts = frame_cuts(config)
    body = apply_cuts(rounded_body(config), cuts)
    log.debug(
        "Frame %.1f x %.1f x %.1f mm, r=%.2f, %d cuts in %.2fs",
        *config.outer_size, config.corner_radius, len(cuts), time.perf_counter() - t0,
    )
    return body
