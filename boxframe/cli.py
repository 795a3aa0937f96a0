"""Command line entry point.

Examples:
  boxframe generate --part front --out out/
  boxframe generate --config frame.json --set w=90 --set print_top=true
  boxframe check --set screw=M4 --strict
  boxframe sweep --out out/sweep
  boxframe serve --port 8420
"""
import argparse
import json
import logging
import sys
import time
from pathlib import Path

from .config import HOST, LOG_LEVEL, OUT_DIR, PORT
from .export import FORMATS, export_part
from .metrics import measure
from .params import SCREW_TABLE, FrameConfig, Part, load_config, parse_overrides
from .parts import EXPECTED_SOLIDS, GenerationError, generate
from .report import run_sweep
from .validation import check_config

log = logging.getLogger(__name__)


def _add_config_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, help="JSON parameter file")
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override one parameter (repeatable, short names accepted)",
    )
    parser.add_argument(
        "--part",
        choices=[p.value for p in Part],
        help="Part to build (default: frame)",
    )


def _config_from_args(args: argparse.Namespace) -> FrameConfig:
    overrides = parse_overrides(args.overrides)
    if getattr(args, "part", None):
        overrides["part"] = args.part
    return load_config(args.config, overrides)


def _log_findings(config: FrameConfig) -> list:
    findings = check_config(config)
    for f in findings:
        log.warning("%s: %s", f.code, f.message)
    return findings


def cmd_generate(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    findings = _log_findings(config)
    if findings and args.strict:
        log.error("%d finding(s), not building (--strict)", len(findings))
        return 1

    formats = [f.strip() for f in args.format.split(",") if f.strip()]
    t0 = time.perf_counter()
    try:
        solid = generate(config)
    except GenerationError as e:
        log.error("Generation failed: %s", e)
        return 1
    elapsed = time.perf_counter() - t0

    metrics = measure(solid)
    sx, sy, sz = metrics["size"]
    log.info(
        "%s: %.2f x %.2f x %.2f mm, vol=%.1f mm3, solids=%d, time=%.1fs",
        config.part.value.upper(), sx, sy, sz,
        metrics["volume"], metrics["solid_count"], elapsed,
    )
    expected = EXPECTED_SOLIDS[config.part]
    if metrics["solid_count"] != expected:
        log.error("Expected %d solid(s), got %d", expected, metrics["solid_count"])
        return 1

    export_part(solid, args.out, config.part.value, formats=formats, config=config)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    findings = check_config(config)
    out = {
        "config": config.model_dump(mode="json"),
        "derived": {
            "outer_size": list(config.outer_size),
            "corner_radius": config.corner_radius,
        },
        "findings": [f.to_dict() for f in findings],
    }
    print(json.dumps(out, indent=2))
    return 1 if findings and args.strict else 0


def cmd_parts(args: argparse.Namespace) -> int:
    for part in Part:
        print(f"{part.value:<12} solids={EXPECTED_SOLIDS[part]}")
    print("screws: " + ", ".join(SCREW_TABLE))
    return 0


def cmd_sweep(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    parts = [Part(args.part)] if args.part else None
    results, summary = run_sweep(config, args.out, parts)
    log.info("%d/%d parts built", summary["pass"], summary["total"])
    return 0 if summary["fail"] == 0 else 1


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("boxframe.app:app", host=args.host, port=args.port, log_level=LOG_LEVEL.lower())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="boxframe",
        description="Parametric 3D-printable box frame",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("\n\n", 1)[1],
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("generate", help="Build one part and export it")
    _add_config_args(p)
    p.add_argument("--out", type=Path, default=OUT_DIR, help=f"Output directory (default: {OUT_DIR})")
    p.add_argument(
        "--format",
        default=",".join(FORMATS),
        help="Comma-separated export formats (default: step,stl)",
    )
    p.add_argument("--strict", action="store_true", help="Refuse to build with findings")
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("check", help="Print the resolved config and its findings")
    _add_config_args(p)
    p.add_argument("--strict", action="store_true", help="Exit 1 when there are findings")
    p.set_defaults(func=cmd_check)

    p = sub.add_parser("parts", help="List parts and screw sizes")
    p.set_defaults(func=cmd_parts)

    p = sub.add_parser("sweep", help="Build every part and write a report")
    _add_config_args(p)
    p.add_argument("--out", type=Path, default=OUT_DIR / "sweep", help="Report directory")
    p.set_defaults(func=cmd_sweep)

    p = sub.add_parser("serve", help="Run the HTTP API")
    p.add_argument("--host", default=HOST)
    p.add_argument("--port", type=int, default=PORT)
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    try:
        return args.func(args)
    except ValueError as e:
        # pydantic ValidationError and ConfigError both land here
        log.error("Invalid configuration: %s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
