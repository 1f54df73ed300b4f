"""
Boundary between JSON payloads and the engine.

Request bodies use the camelCase field names of the web calculator and are
parsed by a pydantic model. Besides types and enum members, numbers must be
finite and within limits that keep the engine's arithmetic in float range;
otherwise out-of-range values (authority above 100, negative inventory)
pass through. Any problem surfaces as a single generic InvalidInputError.
"""

import logging
from dataclasses import MISSING, asdict, fields
from typing import Any, Dict, List

import pandas as pd
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    ValidationError,
)
from pydantic.alias_generators import to_camel

from .config import (
    Competition,
    ContentDepth,
    IntentDistribution,
    SimulationConfig,
    Tier,
)
from .monetization import SimulationResult
from .variance import VarianceBand

logger = logging.getLogger(__name__)

INVALID_INPUT_MESSAGE = "Invalid inputs provided"

MAX_PAGES = 1_000_000_000
MAX_MONTHS = 600
MAX_AUTHORITY = 1000
# Monthly inventory growth, in percent
MAX_GROWTH_RATE = 100

_DEFAULTS = {f.name: f.default for f in fields(SimulationConfig) if f.default is not MISSING}


class InvalidInputError(ValueError):
    """Payload could not be turned into a SimulationConfig."""

    def __init__(self, errors: List[Dict[str, Any]]):
        super().__init__(INVALID_INPUT_MESSAGE)
        self.errors = errors


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, allow_inf_nan=False, extra="ignore")


class IntentPayload(_Payload):
    transactional: StrictFloat = Field(ge=0, le=1)
    commercial: StrictFloat = Field(ge=0, le=1)
    informational: StrictFloat = Field(ge=0, le=1)


class ForecastRequest(_Payload):
    """Request body shared by the ad-value and ecommerce forecasts."""

    total_pages: StrictInt = Field(ge=-MAX_PAGES, le=MAX_PAGES)
    domain_authority: StrictFloat = Field(ge=0, le=MAX_AUTHORITY)
    competition: Competition
    months_since_launch: StrictInt = Field(le=MAX_MONTHS)
    inventory_growth_rate: StrictFloat = Field(
        _DEFAULTS["inventory_growth_rate"], ge=-MAX_GROWTH_RATE, le=MAX_GROWTH_RATE
    )

    brand_strength: Tier = _DEFAULTS["brand_strength"]
    page_speed_score: StrictFloat = _DEFAULTS["page_speed_score"]
    content_depth: ContentDepth = _DEFAULTS["content_depth"]

    avg_cpc: StrictFloat = _DEFAULTS["avg_cpc"]
    avg_cpm: StrictFloat = _DEFAULTS["avg_cpm"]

    avg_product_price: StrictFloat = _DEFAULTS["avg_product_price"]
    net_margin: StrictFloat = _DEFAULTS["net_margin"]
    store_trust: Tier = _DEFAULTS["store_trust"]
    intent_distribution: IntentPayload = Field(
        default_factory=lambda: IntentPayload.model_validate(asdict(IntentDistribution()))
    )

    apply_cannibalization_penalty: StrictBool = _DEFAULTS["apply_cannibalization_penalty"]
    apply_seasonality: StrictBool = _DEFAULTS["apply_seasonality"]
    apply_core_update_volatility: StrictBool = _DEFAULTS["apply_core_update_volatility"]
    apply_content_decay: StrictBool = _DEFAULTS["apply_content_decay"]
    apply_serp_suppression: StrictBool = _DEFAULTS["apply_serp_suppression"]
    apply_reindexation_risk: StrictBool = _DEFAULTS["apply_reindexation_risk"]
    apply_mobile_penalty: StrictBool = _DEFAULTS["apply_mobile_penalty"]

    def to_config(self) -> SimulationConfig:
        values = self.model_dump()
        values["intent_distribution"] = IntentDistribution(**values["intent_distribution"])
        return SimulationConfig(**values)


def validate_payload(payload: Any) -> List[Dict[str, Any]]:
    """Return pydantic error details for the payload (empty = pass)."""
    try:
        ForecastRequest.model_validate(payload)
    except ValidationError as exc:
        return exc.errors(include_url=False)
    return []


def config_from_dict(payload: Any) -> SimulationConfig:
    """Build a SimulationConfig from a camelCase request body."""
    try:
        request = ForecastRequest.model_validate(payload)
    except ValidationError as exc:
        logger.debug("Rejected payload: %s", exc)
        raise InvalidInputError(exc.errors(include_url=False)) from exc
    return request.to_config()


def config_to_dict(config: SimulationConfig) -> Dict[str, Any]:
    return {to_camel(k): v for k, v in asdict(config).items()}


def _camel_record(record: Any) -> Dict[str, Any]:
    return {to_camel(k): v for k, v in asdict(record).items()}


def result_to_dict(result: SimulationResult) -> Dict[str, Any]:
    """JSON-ready response body: monthlyData, totals and (ecommerce) funnel."""
    body: Dict[str, Any] = {
        "monthlyData": [_camel_record(m) for m in result.monthly_data],
        "totals": _camel_record(result.totals),
    }
    if result.funnel is not None:
        body["funnel"] = {
            "atc": result.funnel.add_to_cart,
            "checkout": result.funnel.checkout,
            "purchase": result.funnel.purchase,
        }
    return body


def band_to_dict(band: VarianceBand) -> Dict[str, Any]:
    return {
        "median": [_camel_record(m) for m in band.median],
        "p10": [_camel_record(m) for m in band.p10],
        "p90": [_camel_record(m) for m in band.p90],
    }


def results_to_frame(result: SimulationResult) -> pd.DataFrame:
    """One row per simulated month, indexed by month."""
    df = pd.DataFrame([asdict(m) for m in result.monthly_data])
    if df.empty:
        return df
    return df.set_index("month")


def band_to_frame(band: VarianceBand, metric: str) -> pd.DataFrame:
    """p10 / median / p90 of one metric, one row per month."""
    return pd.DataFrame(
        {
            "month": [m.month for m in band.median],
            "p10": [getattr(m, metric) for m in band.p10],
            "median": [getattr(m, metric) for m in band.median],
            "p90": [getattr(m, metric) for m in band.p90],
        }
    ).set_index("month")
