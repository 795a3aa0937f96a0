"""Child-process build: ``python -m boxframe.services.worker PARAMS OUT_DIR``.

Loads the JSON parameters, builds the part, exports STEP/STL into OUT_DIR and
writes the part metrics to ``OUT_DIR/metrics.json``. Exit code 1 with the
error as the last stderr line when the part cannot be built.
"""
import json
import logging
import sys
from pathlib import Path

from ..config import LOG_LEVEL
from ..export import export_part
from ..metrics import measure
from ..params import load_config
from ..parts import GenerationError, generate

METRICS_FILE = "metrics.json"


def main(argv=None) -> int:
    params, out_dir = argv if argv is not None else sys.argv[1:]
    out_dir = Path(out_dir)
    logging.basicConfig(level=LOG_LEVEL, format="%(name)s %(levelname)s: %(message)s")

    config = load_config(params)
    try:
        solid = generate(config)
    except GenerationError as e:
        print(e, file=sys.stderr)
        return 1

    metrics = measure(solid)
    export_part(solid, out_dir, config.part.value, config=config)
    (out_dir / METRICS_FILE).write_text(json.dumps(metrics))
    return 0


if __name__ == "__main__":
    sys.exit(main())
