"""
Monetization converters.

Two business models sit on top of the same traffic forecast:

* Ad value: what the organic clicks would cost to buy as paid media,
  blending a CPC-equivalent and a CPM-equivalent valuation.
* Ecommerce revenue: clicks flow through a conversion funnel whose rate
  stacks store trust, brand, speed, content depth, search intent, device
  mix and a CRO learning curve.

Totals always cover the trailing twelve months of the horizon.
"""

import logging
from dataclasses import asdict, dataclass
from typing import List, Optional, Sequence

import numpy as np

from .config import (
    AOV_MARKUP,
    BASE_CVR,
    BRAND_CVR_MULTIPLIER,
    DEPTH_CVR_MULTIPLIER,
    FUNNEL_ADD_TO_CART,
    FUNNEL_CHECKOUT,
    FUNNEL_PURCHASE,
    INTENT_WEIGHTS,
    SimulationConfig,
)
from .traffic import MonthlyTraffic, simulate_traffic

logger = logging.getLogger(__name__)

MODEL_AD_VALUE = "ad_value"
MODEL_ECOMMERCE = "ecommerce"

# Organic clicks per "paid budget unit" at the configured CPC
CPC_CLICK_DIVISOR = 300
# Standard CPM basis
CPM_CLICK_DIVISOR = 1000

TOTALS_WINDOW = 12


@dataclass(frozen=True)
class AdValueMonth(MonthlyTraffic):
    traffic_value: float


@dataclass(frozen=True)
class EcommerceMonth(MonthlyTraffic):
    orders: int
    revenue: float
    profit: float
    rpv: float  # revenue per click


@dataclass(frozen=True)
class FunnelRates:
    add_to_cart: float = FUNNEL_ADD_TO_CART
    checkout: float = FUNNEL_CHECKOUT
    purchase: float = FUNNEL_PURCHASE


@dataclass(frozen=True)
class Totals:
    """Aggregates over the trailing twelve months (or fewer)."""

    yearly_clicks: int = 0
    monthly_clicks: float = 0.0
    daily_clicks: float = 0.0
    yearly_impressions: int = 0
    monthly_impressions: float = 0.0
    daily_impressions: float = 0.0
    yearly_traffic_value: float = 0.0
    monthly_traffic_value: float = 0.0
    daily_traffic_value: float = 0.0
    yearly_orders: int = 0
    monthly_orders: float = 0.0
    daily_orders: float = 0.0
    yearly_revenue: float = 0.0
    monthly_revenue: float = 0.0
    daily_revenue: float = 0.0
    yearly_profit: float = 0.0
    monthly_profit: float = 0.0
    daily_profit: float = 0.0
    average_ctr: float = 0.0
    avg_position: float = 0.0  # final month
    blended_cvr: float = 0.0


@dataclass(frozen=True)
class SimulationResult:
    model: str
    monthly_data: List[MonthlyTraffic]
    totals: Totals
    funnel: Optional[FunnelRates] = None

    @property
    def months(self) -> int:
        return len(self.monthly_data)


def _sum(records: Sequence[MonthlyTraffic], attr: str) -> float:
    return sum(getattr(r, attr, 0) for r in records)


def compute_totals(monthly_data: Sequence[MonthlyTraffic]) -> Totals:
    """Aggregate the trailing window into yearly, monthly and daily rates."""
    if not monthly_data:
        return Totals()

    window = monthly_data[-TOTALS_WINDOW:]
    clicks = _sum(window, "clicks")
    impressions = _sum(window, "impressions")
    value = _sum(window, "traffic_value")
    orders = _sum(window, "orders")
    revenue = _sum(window, "revenue")
    profit = _sum(window, "profit")

    return Totals(
        yearly_clicks=clicks,
        monthly_clicks=clicks / 12,
        daily_clicks=clicks / 365,
        yearly_impressions=impressions,
        monthly_impressions=impressions / 12,
        daily_impressions=impressions / 365,
        yearly_traffic_value=value,
        monthly_traffic_value=value / 12,
        daily_traffic_value=value / 365,
        yearly_orders=orders,
        monthly_orders=orders / 12,
        daily_orders=orders / 365,
        yearly_revenue=revenue,
        monthly_revenue=revenue / 12,
        daily_revenue=revenue / 365,
        yearly_profit=profit,
        monthly_profit=profit / 12,
        daily_profit=profit / 365,
        average_ctr=clicks / (impressions or 1),
        avg_position=monthly_data[-1].avg_position,
        blended_cvr=orders / (clicks or 1),
    )


# ── Ad value ─────────────────────────────────────────────────────────

def traffic_value(clicks: float, avg_cpc: float, avg_cpm: float) -> float:
    return clicks / CPC_CLICK_DIVISOR * avg_cpc + clicks / CPM_CLICK_DIVISOR * avg_cpm


def simulate_ad_value(config: SimulationConfig) -> SimulationResult:
    """Value organic clicks at the equivalent paid-media spend."""
    monthly = [
        AdValueMonth(
            **asdict(t),
            traffic_value=traffic_value(t.clicks, config.avg_cpc, config.avg_cpm),
        )
        for t in simulate_traffic(config)
    ]
    return SimulationResult(
        model=MODEL_AD_VALUE,
        monthly_data=monthly,
        totals=compute_totals(monthly),
    )


# ── Ecommerce ────────────────────────────────────────────────────────

def _speed_cvr_multiplier(page_speed_score: float) -> float:
    if page_speed_score >= 90:
        return 1.1
    if page_speed_score >= 70:
        return 1.0
    return 0.8


def intent_multiplier(config: SimulationConfig) -> float:
    intent = config.intent_distribution
    return (
        intent.transactional * INTENT_WEIGHTS["transactional"]
        + intent.commercial * INTENT_WEIGHTS["commercial"]
        + intent.informational * INTENT_WEIGHTS["informational"]
    )


def cro_multiplier(month: int) -> float:
    """Conversion optimization learning curve: +20% by month 24, flat after."""
    return 1 + (min(24, month) / 24) * 0.2


def final_cvr(config: SimulationConfig, month: int) -> float:
    """Visit-to-order conversion rate for the given month."""
    mobile_factor = 0.8 if config.apply_mobile_penalty else 1.0
    return (
        BASE_CVR[config.store_trust]
        * BRAND_CVR_MULTIPLIER[config.brand_strength]
        * _speed_cvr_multiplier(config.page_speed_score)
        * DEPTH_CVR_MULTIPLIER[config.content_depth]
        * intent_multiplier(config)
        * mobile_factor
        * cro_multiplier(month)
    )


def simulate_ecommerce_revenue(config: SimulationConfig) -> SimulationResult:
    """Convert organic clicks into orders, revenue and profit."""
    aov = config.avg_product_price * AOV_MARKUP

    monthly = []
    for t in simulate_traffic(config):
        orders = int(np.floor(t.clicks * final_cvr(config, t.month)))
        revenue = orders * aov
        monthly.append(
            EcommerceMonth(
                **asdict(t),
                orders=orders,
                revenue=revenue,
                profit=revenue * config.net_margin,
                rpv=revenue / t.clicks if t.clicks > 0 else 0.0,
            )
        )

    result = SimulationResult(
        model=MODEL_ECOMMERCE,
        monthly_data=monthly,
        totals=compute_totals(monthly),
        funnel=FunnelRates(),
    )
    logger.debug(
        "Ecommerce forecast: %d months, yearly revenue %.2f",
        result.months, result.totals.yearly_revenue,
    )
    return result
