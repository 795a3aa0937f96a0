"""STEP / STL export of built parts."""
from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Iterable, Optional

import cadquery as cq

from .config import STL_TOLERANCE
from .params import FrameConfig

log = logging.getLogger(__name__)

FORMATS = ("step", "stl")


def angular_tolerance(config: FrameConfig) -> float:
    """STL angular deflection from the finer of the two resolutions."""
    segments = max(config.rounding_resolution, config.screw_resolution)
    return 2 * math.pi / segments


def export_part(
    solid: cq.Workplane,
    out_dir: Path,
    name: str,
    formats: Iterable[str] = FORMATS,
    config: Optional[FrameConfig] = None,
    tolerance: float = STL_TOLERANCE,
) -> dict[str, Path]:
    """Write ``<name>.<fmt>`` for each format; returns {format: path}."""
    config = config or FrameConfig()
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = {}
    for fmt in formats:
        fmt = fmt.lower().strip()
        if fmt not in FORMATS:
            raise ValueError(f"Unsupported format {fmt!r}, expected one of {FORMATS}")
        path = out_dir / f"{name}.{fmt}"
        if fmt == "stl":
            cq.exporters.export(
                solid,
                str(path),
                tolerance=tolerance,
                angularTolerance=angular_tolerance(config),
            )
        else:
            cq.exporters.export(solid, str(path))
        log.info("Exported %s", path)
        paths[fmt] = path
    return paths
