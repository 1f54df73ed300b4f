"""
Configuration for the organic search forecaster.

Defines the simulation inputs, the tier tables every engine stage reads
from, and named scenario presets. Tables are plain module constants: the
engine only ever reads them.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Literal, Tuple, get_args

Competition = Literal["low", "medium", "high"]
Tier = Literal["low", "average", "strong", "elite"]
ContentDepth = Literal["thin", "average", "comprehensive"]

COMPETITION_LEVELS = get_args(Competition)
TRUST_TIERS = get_args(Tier)
CONTENT_DEPTHS = get_args(ContentDepth)

# ── Traffic tables ───────────────────────────────────────────────────

# Average monthly impressions per indexed page at each competition tier
IMPRESSIONS_PER_PAGE: Dict[str, float] = {"low": 90, "medium": 375, "high": 1800}

# Organic CTR by position; ranged keys are buckets past page one
CTR_CURVE: Dict[str, float] = {
    "1": 0.27, "2": 0.15, "3": 0.11, "4": 0.08, "5": 0.07,
    "6": 0.05, "7": 0.04, "8": 0.03, "9": 0.025, "10": 0.022,
    "11-20": 0.01, "21-50": 0.003, "51-100": 0.001,
}


@dataclass(frozen=True)
class RankingBin:
    """A band of SERP positions sharing a slice of the impressions."""

    label: str
    weight: float
    positions: Tuple[str, ...]


BASE_RANKING_DISTRIBUTION: Tuple[RankingBin, ...] = (
    RankingBin("1-3", 0.03, ("1", "2", "3")),
    RankingBin("4-10", 0.12, ("4", "5", "6", "7", "8", "9", "10")),
    RankingBin("11-20", 0.20, ("11-20",)),
    RankingBin("21-50", 0.40, ("21-50",)),
    RankingBin("51-100", 0.25, ("51-100",)),
)

# New domains rank mostly on pages 3+ until they earn links
LOW_AUTHORITY_WEIGHTS = (0.005, 0.04, 0.12, 0.45, 0.385)

BRAND_CTR_MULTIPLIER: Dict[str, float] = {"low": 0.8, "average": 1.0, "strong": 1.25, "elite": 1.6}
DEPTH_INDEX_MULTIPLIER: Dict[str, float] = {"thin": 0.7, "average": 1.0, "comprehensive": 1.1}

# ── Ecommerce tables ─────────────────────────────────────────────────

BASE_CVR: Dict[str, float] = {"low": 0.005, "average": 0.012, "strong": 0.025, "elite": 0.045}
BRAND_CVR_MULTIPLIER: Dict[str, float] = {"low": 0.7, "average": 1.0, "strong": 1.35, "elite": 1.8}
DEPTH_CVR_MULTIPLIER: Dict[str, float] = {"thin": 0.6, "average": 1.0, "comprehensive": 1.25}

# Relative purchase propensity of each search intent
INTENT_WEIGHTS: Dict[str, float] = {"transactional": 1.5, "commercial": 1.2, "informational": 0.3}

# Average order carries ~20% more than a single unit (bundles, add-ons)
AOV_MARKUP = 1.2

# Reference funnel rates reported alongside ecommerce results
FUNNEL_ADD_TO_CART = 0.08
FUNNEL_CHECKOUT = 0.60
FUNNEL_PURCHASE = 0.55


@dataclass(frozen=True)
class IntentDistribution:
    """Share of traffic by search intent. Weights need not sum to 1."""

    transactional: float = 0.25
    commercial: float = 0.35
    informational: float = 0.40


@dataclass(frozen=True)
class SimulationConfig:
    """All inputs for one forecast run."""

    # --- SEO foundation ---
    total_pages: int
    domain_authority: float  # 0-100
    competition: Competition
    months_since_launch: int  # simulation horizon
    inventory_growth_rate: float = 0.0  # %/month growth of total_pages

    # --- Joint impact (traffic and conversion) ---
    brand_strength: Tier = "average"
    page_speed_score: float = 70.0  # Core Web Vitals proxy, 0-100
    content_depth: ContentDepth = "average"

    # --- Ad value ---
    avg_cpc: float = 0.0
    avg_cpm: float = 0.0

    # --- Ecommerce ---
    avg_product_price: float = 0.0
    net_margin: float = 0.0
    store_trust: Tier = "average"
    intent_distribution: IntentDistribution = field(default_factory=IntentDistribution)

    # --- Risk toggles ---
    apply_cannibalization_penalty: bool = False
    apply_seasonality: bool = False  # ±15% sinusoidal monthly swing
    apply_core_update_volatility: bool = False  # every 6th month scaled 0.7-1.0
    apply_content_decay: bool = False  # -2.5%/month after the first year
    apply_serp_suppression: bool = False  # AI answers eat 20% of clicks
    apply_reindexation_risk: bool = False
    apply_mobile_penalty: bool = True  # mobile converts at 80% of desktop

    def with_authority(self, domain_authority: float) -> "SimulationConfig":
        return replace(self, domain_authority=domain_authority)


# Named scenario presets
SCENARIO_PRESETS: Dict[str, SimulationConfig] = {
    "Launch Baseline": SimulationConfig(
        total_pages=2000,
        domain_authority=30,
        competition="medium",
        months_since_launch=24,
        avg_cpc=2.50,
        avg_cpm=12.00,
        avg_product_price=150,
        net_margin=0.35,
    ),
    "Calculator Default": SimulationConfig(
        total_pages=2000,
        domain_authority=30,
        competition="medium",
        months_since_launch=24,
        avg_cpc=2.50,
        avg_cpm=12.00,
        avg_product_price=150,
        net_margin=0.35,
        apply_seasonality=True,
        apply_core_update_volatility=True,
        apply_serp_suppression=True,
    ),
    "Authority Publisher": SimulationConfig(
        total_pages=15000,
        domain_authority=72,
        competition="high",
        months_since_launch=36,
        inventory_growth_rate=2.0,
        brand_strength="strong",
        page_speed_score=92,
        content_depth="comprehensive",
        avg_cpc=1.80,
        avg_cpm=18.00,
        apply_cannibalization_penalty=True,
        apply_content_decay=True,
        apply_serp_suppression=True,
    ),
    "Thin Affiliate Site": SimulationConfig(
        total_pages=800,
        domain_authority=12,
        competition="low",
        months_since_launch=18,
        brand_strength="low",
        page_speed_score=45,
        content_depth="thin",
        avg_cpc=0.90,
        avg_cpm=6.00,
        apply_reindexation_risk=True,
        apply_core_update_volatility=True,
    ),
    "Enterprise Store": SimulationConfig(
        total_pages=40000,
        domain_authority=65,
        competition="high",
        months_since_launch=24,
        inventory_growth_rate=1.0,
        brand_strength="elite",
        page_speed_score=88,
        avg_cpc=3.20,
        avg_cpm=15.00,
        avg_product_price=85,
        net_margin=0.22,
        store_trust="elite",
        intent_distribution=IntentDistribution(0.45, 0.35, 0.20),
        apply_cannibalization_penalty=True,
        apply_seasonality=True,
    ),
}


def month_labels(num_months: int) -> List[str]:
    """Generate chart labels like 'Month 1', 'Month 2', etc."""
    return [f"Month {m}" for m in range(1, num_months + 1)]
