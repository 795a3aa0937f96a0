"""Part generation for the API: build in a child process, export, encode.

The child is killed when it overruns ``EXEC_TIMEOUT``, so the temporary
directory is only removed once nothing writes to it any more.
"""
from __future__ import annotations

import asyncio
import base64
import json
import logging
import subprocess
import sys
import tempfile
from pathlib import Path

from ..config import EXEC_TIMEOUT
from ..params import FrameConfig
from ..parts import EXPECTED_SOLIDS
from ..validation import check_config
from .worker import METRICS_FILE

log = logging.getLogger(__name__)


def _failure(error: str, findings: list[dict], metrics: dict | None = None) -> dict:
    return {
        "success": False,
        "step_base64": None,
        "stl_base64": None,
        "metrics": metrics,
        "findings": findings,
        "error": error,
    }


def worker_command(params: Path, out_dir: Path) -> list[str]:
    return [sys.executable, "-m", "boxframe.services.worker", str(params), str(out_dir)]


def _run_worker(params: Path, out_dir: Path, timeout: float) -> subprocess.CompletedProcess:
    # subprocess.run kills the child before re-raising TimeoutExpired
    return subprocess.run(
        worker_command(params, out_dir),
        capture_output=True,
        text=True,
        timeout=timeout,
    )


async def generate_and_export(config: FrameConfig, timeout: float = EXEC_TIMEOUT) -> dict:
    """Build the selected part, return STEP/STL as base64 plus metrics.

    Returns dict with keys: success, step_base64, stl_base64, metrics,
    findings, error
    """
    findings = [f.to_dict() for f in check_config(config)]
    part = config.part.value

    with tempfile.TemporaryDirectory(prefix="boxframe_") as tmpdir:
        out_dir = Path(tmpdir)
        params = out_dir / "params.json"
        params.write_text(json.dumps(config.model_dump(mode="json")))

        try:
            proc = await asyncio.to_thread(_run_worker, params, out_dir, timeout)
        except subprocess.TimeoutExpired:
            return _failure(f"Generation timed out after {timeout}s", findings)

        if proc.returncode != 0:
            lines = proc.stderr.strip().splitlines()
            log.warning("Generation of %s failed (exit %d)", part, proc.returncode)
            return _failure(lines[-1][:500] if lines else "Generation failed", findings)

        metrics = json.loads((out_dir / METRICS_FILE).read_text())
        expected = EXPECTED_SOLIDS[config.part]
        if metrics["solid_count"] != expected:
            return _failure(
                f"Expected {expected} solid(s), got {metrics['solid_count']}", findings, metrics
            )

        step_path = out_dir / f"{part}.step"
        stl_path = out_dir / f"{part}.stl"
        if not step_path.exists():
            return _failure("STEP file not produced", findings, metrics)

        return {
            "success": True,
            "step_base64": base64.b64encode(step_path.read_bytes()).decode(),
            "stl_base64": base64.b64encode(stl_path.read_bytes()).decode(),
            "metrics": metrics,
            "findings": findings,
            "error": None,
        }
