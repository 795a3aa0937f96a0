"""Measurements of built parts: B-rep metrics from CadQuery, mesh checks
from trimesh.

A malformed configuration shows up as an empty or non-manifold solid;
these are the programmatic checks for that.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

import cadquery as cq
import numpy as np
import trimesh

logger = logging.getLogger(__name__)


def measure(solid: cq.Workplane) -> dict:
    """Bounding box, size, volume and solid count of a part."""
    shape = solid.val()
    bb = shape.BoundingBox()
    return {
        "bounding_box": {
            "min": [round(v, 4) for v in (bb.xmin, bb.ymin, bb.zmin)],
            "max": [round(v, 4) for v in (bb.xmax, bb.ymax, bb.zmax)],
        },
        "size": [round(v, 4) for v in (bb.xlen, bb.ylen, bb.zlen)],
        "volume": round(shape.Volume(), 4),
        "solid_count": len(shape.Solids()),
    }


def circle_radii(solid: cq.Workplane, ndigits: int = 4) -> list[float]:
    """Distinct radii of the circular edges (fillets and bores)."""
    return sorted({round(e.radius(), ndigits) for e in solid.edges("%CIRCLE").vals()})


def topology(solid: cq.Workplane) -> dict:
    """Face, edge and vertex counts."""
    shape = solid.val()
    return {
        "faces": len(shape.Faces()),
        "edges": len(shape.Edges()),
        "vertices": len(shape.Vertices()),
    }


@dataclass
class MeshReport:
    """Checks on an exported triangle mesh."""

    watertight: bool = False
    volume: Optional[float] = None
    bounds: Optional[list[list[float]]] = None
    triangles: int = 0
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def _load_mesh(path: Path) -> trimesh.Trimesh:
    """Load an STL file and return a single trimesh."""
    mesh = trimesh.load(path, force="mesh")
    if not isinstance(mesh, trimesh.Trimesh):
        raise ValueError(f"Expected single mesh, got {type(mesh).__name__}")
    return mesh


def mesh_report(stl_path: Path) -> MeshReport:
    """Watertightness, volume and bounds of an exported STL.

    Never raises; a load failure is stored in ``error``.
    """
    report = MeshReport()
    stl_path = Path(stl_path)
    if not stl_path.exists():
        report.error = f"STL not found: {stl_path}"
        return report

    try:
        mesh = _load_mesh(stl_path)
    except ValueError as e:
        logger.warning("Mesh load failed for %s: %s", stl_path.name, e)
        report.error = str(e)
        return report

    report.triangles = int(len(mesh.faces))
    report.watertight = bool(mesh.is_watertight)
    if len(mesh.faces):
        report.bounds = np.round(mesh.bounds, 4).tolist()
    if report.watertight:
        report.volume = round(abs(float(mesh.volume)), 4)
    else:
        logger.warning("%s is not watertight", stl_path.name)
    return report
