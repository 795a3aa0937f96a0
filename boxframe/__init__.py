"""
boxframe - parametric 3D-printable box frame.

Twelve rails with rounded edges, screw bores at the eight corners and
optional panel grooves, cut into printable parts (end rings, length rails,
single rails). Geometry is built with CadQuery.
"""

__version__ = "0.1.0"

from boxframe.frame import Cut, CutKind, build_frame, frame_cuts
from boxframe.params import ConfigError, FrameConfig, Part, RadiusPolicy, load_config
from boxframe.parts import GenerationError, extract_part, generate, part_cuts
from boxframe.validation import Finding, check_config

__all__ = [
    "__version__",
    # Parameters
    "ConfigError",
    "FrameConfig",
    "Part",
    "RadiusPolicy",
    "load_config",
    # Geometry
    "Cut",
    "CutKind",
    "build_frame",
    "frame_cuts",
    "extract_part",
    "generate",
    "part_cuts",
    "GenerationError",
    # Checks
    "Finding",
    "check_config",
]
