"""CLI entrypoint: run one forecast from a JSON config and print the result.

Usage:
    python -m seo_forecast ad-value config.json
    python -m seo_forecast ecommerce - < config.json
    python -m seo_forecast ecommerce --preset "Enterprise Store" --bands 30 --seed 7
    python -m seo_forecast ad-value config.json --csv --bands 30
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import SCENARIO_PRESETS, SimulationConfig
from .payloads import (
    INVALID_INPUT_MESSAGE,
    InvalidInputError,
    band_to_dict,
    band_to_frame,
    config_from_dict,
    result_to_dict,
    results_to_frame,
    to_camel,
)
from .variance import DEFAULT_ITERATIONS, MODEL_METRICS, SIMULATORS, resolve_model, sample_variance

logger = logging.getLogger(__name__)

EXIT_INVALID_INPUT = 2


def _input_error(message: str) -> InvalidInputError:
    return InvalidInputError([{"type": "config_source", "loc": ("config",), "msg": message}])


def _load_config(source: Optional[str], preset: Optional[str]) -> SimulationConfig:
    if preset is not None:
        return SCENARIO_PRESETS[preset]
    if source is None:
        raise _input_error("No config file or preset given")

    try:
        text = sys.stdin.read() if source == "-" else Path(source).read_text()
    except OSError as exc:
        raise _input_error(f"Cannot read {source}: {exc}") from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise _input_error(f"Malformed JSON: {exc}") from exc
    return config_from_dict(payload)


def main(args: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Forecast organic search traffic value")
    parser.add_argument("model", choices=["ad-value", "ecommerce"], help="Monetization model")
    parser.add_argument("config", nargs="?", help="JSON config path, or - for stdin")
    parser.add_argument("--preset", choices=sorted(SCENARIO_PRESETS), help="Use a named scenario")
    parser.add_argument(
        "--bands", type=int, nargs="?", const=DEFAULT_ITERATIONS, default=0,
        help=f"Add p10/median/p90 bands from N perturbed runs (default N={DEFAULT_ITERATIONS})",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for bands")
    parser.add_argument("--workers", type=int, default=1, help="Threads for band trials")
    parser.add_argument(
        "--csv", action="store_true",
        help="Print monthly data as CSV (with <metric>_p10/_median/_p90 columns when banded)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    opts = parser.parse_args(args)

    if opts.preset is not None and opts.config is not None:
        parser.error("give either a config file or --preset, not both")

    logging.basicConfig(
        level=logging.DEBUG if opts.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _load_config(opts.config, opts.preset)
    except InvalidInputError as exc:
        for err in exc.errors:
            logger.info("Invalid input at %s: %s", ".".join(map(str, err["loc"])), err["msg"])
        print(json.dumps({"error": INVALID_INPUT_MESSAGE}), file=sys.stderr)
        return EXIT_INVALID_INPUT

    model = resolve_model(opts.model)
    metric = MODEL_METRICS[model]
    result = SIMULATORS[model](config)

    band = None
    if opts.bands > 0:
        band = sample_variance(
            config, model, iterations=opts.bands, seed=opts.seed, max_workers=opts.workers,
        )

    if opts.csv:
        df = results_to_frame(result)
        if band is not None and not df.empty:
            df = df.join(band_to_frame(band, metric).add_prefix(f"{metric}_"))
        sys.stdout.write(df.to_csv())
        return 0

    body = result_to_dict(result)
    if band is not None:
        body["bands"] = band_to_dict(band)
        body["bandMetric"] = to_camel(metric)

    print(json.dumps(body, indent=2))
    return 0
