"""CadQuery primitives positioned by absolute bounds.

The frame lives in the positive octant: x along the width, y along the
length (screw axis), z along the height.
"""
from __future__ import annotations

import cadquery as cq

Point = tuple[float, float, float]


def block(lo: Point, hi: Point) -> cq.Workplane:
    """Axis-aligned box spanning ``lo`` to ``hi``."""
    size = [b - a for a, b in zip(lo, hi)]
    return (
        cq.Workplane("XY")
        .box(*size, centered=False)
        .translate(lo)
    )


def convex_edges(body: cq.Workplane, boxes: list[tuple[Point, Point]], step: float = 1e-3) -> list[cq.Edge]:
    """Axis-aligned edges of ``body`` with material in exactly one of the
    four quadrants around them.

    ``boxes`` is the union that ``body`` was built from; it is sampled
    analytically so no point classification goes through the kernel.
    """
    edges = []
    for edge in body.edges().vals():
        centre = edge.Center().toTuple()
        direction = edge.tangentAt().toTuple()
        axis = max(range(3), key=lambda i: abs(direction[i]))
        u, v = [i for i in range(3) if i != axis]
        filled = 0
        for du in (-step, step):
            for dv in (-step, step):
                point = list(centre)
                point[u] += du
                point[v] += dv
                filled += any(contains(lo, hi, point) for lo, hi in boxes)
        if filled == 1:
            edges.append(edge)
    return edges


def y_cylinder(diameter: float, x: float, z: float, y0: float, y1: float) -> cq.Workplane:
    """Cylinder on the axis (x, z) running from y0 to y1."""
    # Workplane("XZ") extrudes towards -Y
    return (
        cq.Workplane("XZ")
        .circle(diameter / 2)
        .extrude(y1 - y0)
        .translate((x, y1, z))
    )


def overlaps(lo_a: Point, hi_a: Point, lo_b: Point, hi_b: Point, eps: float = 1e-9) -> bool:
    """True when two boxes share a volume, touching faces excluded."""
    return all(
        lo_a[i] < hi_b[i] - eps and lo_b[i] < hi_a[i] - eps
        for i in range(3)
    )


def contains(lo: Point, hi: Point, point) -> bool:
    """True when ``point`` lies strictly inside the box."""
    return all(lo[i] < point[i] < hi[i] for i in range(3))
