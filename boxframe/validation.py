"""Configuration checks: geometry that builds but prints wrong.

Findings are advisory. The CAD kernel still builds the part; the caller
decides whether to stop (the CLI does with ``--strict``).
"""
from __future__ import annotations

from dataclasses import asdict, dataclass

from .frame import SCREW_KINDS, CutKind, frame_cuts
from .geometry import overlaps
from .params import FrameConfig


@dataclass(frozen=True)
class Finding:
    code: str
    message: str
    severity: str = "warning"

    def to_dict(self) -> dict:
        return asdict(self)


def _interferences(config: FrameConfig) -> list[Finding]:
    """Screw cuts whose bounds reach into a groove slab."""
    cuts = frame_cuts(config)
    screws = [c for c in cuts if c.kind in SCREW_KINDS]
    grooves = [c for c in cuts if c.kind is CutKind.GROOVE]
    findings = []
    for groove in grooves:
        hits = [s.name for s in screws if overlaps(s.lo, s.hi, groove.lo, groove.hi)]
        if hits:
            findings.append(Finding(
                "groove_screw_interference",
                f"{groove.name} may cut into {', '.join(hits)}; "
                "reduce groove depth or move the groove",
            ))
    return findings


def check_config(config: FrameConfig) -> list[Finding]:
    """Return every finding for ``config``; empty means the part is sane."""
    t = config.thickness
    findings = []

    if config.panel and config.groove_reach >= t:
        findings.append(Finding(
            "groove_too_deep",
            f"groove depth {config.groove_reach:.2f} mm (gd + gde) cuts through "
            f"the {t:.2f} mm rail",
        ))
    if config.head_diameter >= t:
        findings.append(Finding(
            "head_too_wide",
            f"screw head {config.head_diameter:.2f} mm does not fit the {t:.2f} mm rail",
        ))
    if config.head_height >= t:
        findings.append(Finding(
            "recess_too_deep",
            f"head recess {config.head_height:.2f} mm is as deep as the rail",
        ))
    if config.screw_reach <= t + config.shank_recess:
        findings.append(Finding(
            "thread_too_short",
            f"screw tip at {config.screw_reach:.2f} mm never passes the clearance "
            f"bore ({t + config.shank_recess:.2f} mm)",
        ))
    if config.panel:
        findings.extend(_interferences(config))
    return findings
