"""Part sweep: build every part of one configuration, export it, check the
meshes and write a summary + Markdown report.

A part that fails to build is recorded with its error; the sweep goes on.
"""
from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from .export import export_part
from .metrics import measure, mesh_report
from .params import FrameConfig, Part
from .parts import EXPECTED_SOLIDS, generate
from .validation import check_config

logger = logging.getLogger(__name__)


def run_part(config: FrameConfig, out_dir: Path, formats: Iterable[str] = ("step", "stl")) -> dict:
    """Build, export and measure the part selected by ``config``."""
    part = config.part
    result = {
        "part": part.value,
        "success": False,
        "error": None,
        "build_time_s": 0.0,
        "size": None,
        "volume": None,
        "solid_count": None,
        "expected_solids": EXPECTED_SOLIDS[part],
        "watertight": None,
        "files": [],
    }

    t0 = time.perf_counter()
    try:
        solid = generate(config)
    except Exception as e:
        # Kernel failures arrive as OCC-specific exception types
        result["error"] = f"{type(e).__name__}: {e}"[:300]
        result["build_time_s"] = round(time.perf_counter() - t0, 3)
        return result
    result["build_time_s"] = round(time.perf_counter() - t0, 3)

    metrics = measure(solid)
    result["size"] = metrics["size"]
    result["volume"] = metrics["volume"]
    result["solid_count"] = metrics["solid_count"]

    paths = export_part(solid, out_dir, part.value, formats=formats, config=config)
    result["files"] = [str(p) for p in paths.values()]
    if "stl" in paths:
        mesh = mesh_report(paths["stl"])
        result["watertight"] = mesh.watertight

    if metrics["solid_count"] != result["expected_solids"]:
        result["error"] = (
            f"Expected {result['expected_solids']} solid(s), got {metrics['solid_count']}"
        )
    elif result["watertight"] is False:
        result["error"] = "Exported mesh is not watertight"
    else:
        result["success"] = True
    return result


def run_sweep(
    config: FrameConfig,
    out_dir: Path,
    parts: Optional[Iterable[Part]] = None,
) -> tuple[list[dict], dict]:
    """Run every part (or ``parts``) and write summary.json + report.md.

    Returns (results, summary).
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    parts = list(parts) if parts is not None else list(Part)
    run_id = datetime.now().strftime("%Y%m%d_%H%M%S")

    results = []
    for i, part in enumerate(parts, 1):
        logger.info("[%d/%d] Building %s", i, len(parts), part.value)
        result = run_part(config.with_part(part), out_dir)
        results.append(result)
        if result["success"]:
            logger.info("  PASS  time=%.1fs", result["build_time_s"])
        else:
            logger.info("  FAIL  %s", (result["error"] or "")[:80])

    summary = build_summary(results, config, run_id)
    (out_dir / "summary.json").write_text(json.dumps(summary, indent=2))
    (out_dir / "report.md").write_text(generate_report(results, summary))
    logger.info("Report saved to %s", out_dir / "report.md")
    return results, summary


def build_summary(results: list[dict], config: FrameConfig, run_id: str) -> dict:
    """Build a summary dict from per-part results."""
    total = len(results)
    passed = [r for r in results if r["success"]]
    times = [r["build_time_s"] for r in results]

    return {
        "run_id": run_id,
        "run_date": datetime.now().isoformat(),
        "outer_size": list(config.outer_size),
        "corner_radius": config.corner_radius,
        "panel": config.panel,
        "findings": [f.to_dict() for f in check_config(config)],
        "total": total,
        "pass": len(passed),
        "fail": total - len(passed),
        "success_pct": round(100 * len(passed) / total, 1) if total else 0,
        "total_build_time_s": round(sum(times), 3),
        "results": results,
    }


def generate_report(results: list[dict], summary: dict) -> str:
    """Markdown report from results and summary."""
    lines: list[str] = []
    a = lines.append

    a(f"# Box frame part sweep: {summary['run_date'][:10]}")
    a("")
    a(f"**Run ID:** {summary['run_id']}  ")
    size = " x ".join(f"{v:.1f}" for v in summary["outer_size"])
    a(f"**Outer size:** {size} mm, r = {summary['corner_radius']:.2f} mm, "
      f"panel grooves {'on' if summary['panel'] else 'off'}")
    a("")

    a("## Summary")
    a("")
    a("| Metric | Value |")
    a("|--------|-------|")
    a(f"| Parts built | {summary['pass']}/{summary['total']} ({summary['success_pct']}%) |")
    a(f"| Total build time | {summary['total_build_time_s']:.1f}s |")
    a("")

    a("## Parts")
    a("")
    a("| Part | Size [mm] | Volume [mm3] | Solids | Watertight | Time [s] |")
    a("|------|-----------|--------------|--------|------------|----------|")
    for r in results:
        dims = " x ".join(f"{v:.2f}" for v in r["size"]) if r["size"] else "N/A"
        vol = f"{r['volume']:,.0f}" if r["volume"] is not None else "N/A"
        solids = "N/A" if r["solid_count"] is None else f"{r['solid_count']}/{r['expected_solids']}"
        tight = _fmt_bool(r["watertight"])
        a(f"| {r['part']} | {dims} | {vol} | {solids} | {tight} | {r['build_time_s']:.2f} |")
    a("")

    if summary["findings"]:
        a("## Findings")
        a("")
        for f in summary["findings"]:
            a(f"- `{f['code']}`: {f['message']}")
        a("")

    failed = [r for r in results if not r["success"]]
    if failed:
        a("## Failed Parts")
        a("")
        a("| Part | Error |")
        a("|------|-------|")
        for r in failed:
            a(f"| {r['part']} | {(r['error'] or 'unknown')[:80]} |")
        a("")

    return "\n".join(lines)


def _fmt_bool(val: Optional[bool]) -> str:
    if val is None:
        return "N/A"
    return "yes" if val else "no"
