"""
Uncertainty bands by repeated perturbation.

Domain authority is the input forecasters are least sure about, so each
trial jiggles it by up to ±2 points, re-runs the full forecast, and the
ensemble is reduced to p10 / median / p90 per month. Only clicks and the
model's money metric vary across bands; every other field is taken from
the first trial.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from .config import SimulationConfig
from .monetization import (
    MODEL_AD_VALUE,
    MODEL_ECOMMERCE,
    SimulationResult,
    simulate_ad_value,
    simulate_ecommerce_revenue,
)
from .traffic import MonthlyTraffic

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 30
AUTHORITY_JITTER = 2.0

SIMULATORS: Dict[str, Callable[[SimulationConfig], SimulationResult]] = {
    MODEL_AD_VALUE: simulate_ad_value,
    MODEL_ECOMMERCE: simulate_ecommerce_revenue,
}

# Metric that carries each model's monetary value
MODEL_METRICS: Dict[str, str] = {
    MODEL_AD_VALUE: "traffic_value",
    MODEL_ECOMMERCE: "revenue",
}

MODEL_ALIASES: Dict[str, str] = {
    "adValue": MODEL_AD_VALUE,
    "ad-value": MODEL_AD_VALUE,
    "gsc": MODEL_AD_VALUE,
    "ecom": MODEL_ECOMMERCE,
}


@dataclass(frozen=True)
class VarianceBand:
    median: List[MonthlyTraffic]
    p10: List[MonthlyTraffic]
    p90: List[MonthlyTraffic]


def resolve_model(model: str) -> str:
    name = MODEL_ALIASES.get(model, model)
    if name not in SIMULATORS:
        raise ValueError(f"Unknown model {model!r}, expected one of {sorted(SIMULATORS)}")
    return name


def order_statistic(values: Sequence[float], pct: float) -> float:
    """Value at index floor(n * pct) of the ascending sample (no interpolation)."""
    ordered = np.sort(np.asarray(values))
    return ordered[int(np.floor(len(ordered) * pct))].item()


def sample_variance(
    config: SimulationConfig,
    model: str,
    iterations: int = DEFAULT_ITERATIONS,
    enable_randomness: bool = True,
    seed: Optional[int] = None,
    max_workers: int = 1,
) -> VarianceBand:
    """Run the perturbed ensemble and reduce it to per-month bands.

    With randomness disabled (or no iterations) the deterministic forecast
    is returned as all three bands and no random numbers are drawn.
    Trials are independent; ``max_workers > 1`` fans them out over a
    thread pool. Offsets are drawn up front so a fixed ``seed`` gives the
    same bands regardless of worker count.
    """
    name = resolve_model(model)
    simulate = SIMULATORS[name]

    if iterations <= 0 or not enable_randomness:
        logger.debug("Variance disabled for %s; returning deterministic run", name)
        monthly = simulate(config).monthly_data
        return VarianceBand(median=list(monthly), p10=list(monthly), p90=list(monthly))

    rng = np.random.default_rng(seed)
    offsets = rng.uniform(-AUTHORITY_JITTER, AUTHORITY_JITTER, size=iterations)
    trial_configs = [config.with_authority(config.domain_authority + float(o)) for o in offsets]

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            trials = [r.monthly_data for r in pool.map(simulate, trial_configs)]
    else:
        trials = [simulate(c).monthly_data for c in trial_configs]

    metric = MODEL_METRICS[name]
    median: List[MonthlyTraffic] = []
    p10: List[MonthlyTraffic] = []
    p90: List[MonthlyTraffic] = []
    for m in range(config.months_since_launch):
        values = [t[m] for t in trials]
        metric_vals = [getattr(v, metric) for v in values]
        clicks = [v.clicks for v in values]
        template = values[0]
        for band, pct in ((median, 0.5), (p10, 0.1), (p90, 0.9)):
            band.append(replace(
                template,
                clicks=int(order_statistic(clicks, pct)),
                **{metric: order_statistic(metric_vals, pct)},
            ))

    logger.debug(
        "Sampled %d trials of %s over %d months", iterations, name, config.months_since_launch
    )
    return VarianceBand(median=median, p10=p10, p90=p90)
