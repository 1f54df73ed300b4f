"""
Organic Search Monetization Studio - Interactive Dashboard

Forecasts organic search traffic and values it either as equivalent
paid-media spend or as ecommerce revenue, with Monte Carlo bands.

Run with: streamlit run app.py
"""

from dataclasses import asdict, replace

import streamlit as st
import plotly.graph_objects as go
import pandas as pd

from seo_forecast.config import (
    COMPETITION_LEVELS,
    CONTENT_DEPTHS,
    SCENARIO_PRESETS,
    TRUST_TIERS,
    IntentDistribution,
    SimulationConfig,
    month_labels,
)
from seo_forecast.monetization import simulate_ad_value, simulate_ecommerce_revenue
from seo_forecast.payloads import band_to_frame, results_to_frame
from seo_forecast.variance import DEFAULT_ITERATIONS, sample_variance

# ── Page config ──────────────────────────────────────────────────────
st.set_page_config(
    page_title="Organic Monetization Studio",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Common layout for all charts
CHART_THEME = dict(
    template="simple_white",
    paper_bgcolor="rgba(0,0,0,0)",
    plot_bgcolor="rgba(0,0,0,0)",
    font=dict(color="#262730"),
)


# ── Helper: line chart with uncertainty band ─────────────────────────
def band_chart(x, y, low, high, title, yaxis, color="#1f77b4"):
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=x, y=high, mode="lines", line=dict(width=0),
            hoverinfo="skip", showlegend=False,
        )
    )
    fig.add_trace(
        go.Scatter(
            x=x, y=low, mode="lines", line=dict(width=0),
            fill="tonexty", fillcolor="rgba(31,119,180,0.15)",
            name="p10-p90", hoverinfo="skip",
        )
    )
    fig.add_trace(
        go.Scatter(
            x=x, y=y, mode="lines", name="Forecast",
            line=dict(color=color, width=2.5),
            hovertemplate="%{y:,.0f}<extra></extra>",
        )
    )
    fig.update_layout(
        **CHART_THEME,
        title=dict(text=title, font=dict(size=14)),
        yaxis_title=yaxis, height=340,
        margin=dict(l=50, r=20, t=35, b=30),
        hovermode="x unified",
        legend=dict(orientation="h", yanchor="bottom", y=-0.3, font=dict(size=10)),
    )
    return fig


def line_chart(x, y, title, yaxis, color="#1f77b4"):
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=x, y=y, mode="lines", line=dict(color=color, width=2.5),
            hovertemplate="%{y:,.1f}<extra></extra>",
        )
    )
    fig.update_layout(
        **CHART_THEME,
        title=dict(text=title, font=dict(size=14)),
        yaxis_title=yaxis, height=300,
        margin=dict(l=50, r=20, t=35, b=30),
        hovermode="x unified",
    )
    return fig


SENSITIVITY_INPUTS = [
    ("total_pages", "URL Inventory"),
    ("domain_authority", "Domain Authority"),
    ("page_speed_score", "Page Speed"),
    ("avg_cpc", "Avg CPC"),
    ("avg_product_price", "Product Price"),
]


def sensitivity_chart(df, metric_col, title):
    """Diverging bars of percent change per input, ranked by largest swing."""
    wide = df.pivot(index="param", columns="direction", values=metric_col)
    wide = wide.assign(swing=wide.abs().max(axis=1)).sort_values("swing")

    fig = go.Figure()
    for direction, color in (("-20%", "#4e79a7"), ("+20%", "#e15759")):
        fig.add_trace(go.Bar(
            y=wide.index, x=wide[direction], name=direction, orientation="h",
            marker_color=color, text=[f"{v:+.1f}%" for v in wide[direction]],
            textposition="outside", hovertemplate="%{y}: %{x:+.1f}%<extra></extra>",
        ))
    fig.update_layout(
        **CHART_THEME,
        title=dict(text=title, font=dict(size=14)),
        xaxis_title="% change in yearly value",
        barmode="group",
        height=320,
        margin=dict(l=130, r=40, t=40, b=30),
        legend=dict(orientation="h", yanchor="bottom", y=-0.3),
    )
    return fig


# ── Sidebar ──────────────────────────────────────────────────────────
st.sidebar.title("Forecast Controls")

preset_name = st.sidebar.selectbox(
    "Scenario Preset",
    ["Custom"] + list(SCENARIO_PRESETS.keys()),
    index=1,
)
preset = SCENARIO_PRESETS.get(preset_name, SCENARIO_PRESETS["Launch Baseline"])

with st.sidebar.expander("SEO Foundation", expanded=True):
    total_pages = st.number_input("URL Inventory", 0, 1_000_000, preset.total_pages, step=100)
    domain_authority = st.slider("Domain Authority", 0, 100, int(preset.domain_authority))
    competition = st.selectbox(
        "Competition", COMPETITION_LEVELS, index=COMPETITION_LEVELS.index(preset.competition),
    )
    months = st.slider("Forecast Horizon (months)", 1, 60, preset.months_since_launch)
    growth_rate = st.slider(
        "Inventory Growth (%/month)", 0.0, 10.0, float(preset.inventory_growth_rate), step=0.5,
    )

with st.sidebar.expander("Brand & Experience", expanded=False):
    brand_strength = st.selectbox(
        "Brand Strength", TRUST_TIERS, index=TRUST_TIERS.index(preset.brand_strength),
        help="Lifts CTR in the SERP and conversion on site",
    )
    page_speed = st.slider("Page Speed Score (CWV)", 0, 100, int(preset.page_speed_score))
    content_depth = st.selectbox(
        "Content Depth", CONTENT_DEPTHS, index=CONTENT_DEPTHS.index(preset.content_depth),
        help="Affects indexation velocity and trust",
    )

with st.sidebar.expander("Ad Value", expanded=False):
    avg_cpc = st.number_input("Avg CPC ($)", 0.0, 100.0, float(preset.avg_cpc), step=0.1)
    avg_cpm = st.number_input("Avg CPM ($)", 0.0, 200.0, float(preset.avg_cpm), step=0.5)

with st.sidebar.expander("Ecommerce", expanded=False):
    price = st.number_input(
        "Avg Product Price ($)", 0.0, 10_000.0, float(preset.avg_product_price), step=5.0,
    )
    margin = st.slider("Net Margin (%)", 0, 100, int(preset.net_margin * 100))
    store_trust = st.selectbox(
        "Store Trust", TRUST_TIERS, index=TRUST_TIERS.index(preset.store_trust),
    )
    st.caption("Search intent mix")
    intent_t = st.slider("Transactional (%)", 0, 100, int(preset.intent_distribution.transactional * 100))
    intent_c = st.slider("Commercial (%)", 0, 100, int(preset.intent_distribution.commercial * 100))
    intent_i = st.slider("Informational (%)", 0, 100, int(preset.intent_distribution.informational * 100))

with st.sidebar.expander("Risk Factors", expanded=False):
    cannibalization = st.checkbox("Keyword cannibalization", preset.apply_cannibalization_penalty)
    seasonality = st.checkbox("Seasonality (±15%)", preset.apply_seasonality)
    volatility = st.checkbox("Core update volatility", preset.apply_core_update_volatility)
    decay = st.checkbox("Content decay after year one", preset.apply_content_decay)
    serp = st.checkbox("AI SERP suppression (-20% clicks)", preset.apply_serp_suppression)
    reindex = st.checkbox("Reindexation risk", preset.apply_reindexation_risk)
    mobile = st.checkbox("Mobile conversion penalty", preset.apply_mobile_penalty)

with st.sidebar.expander("Uncertainty", expanded=False):
    show_bands = st.checkbox("Monte Carlo bands", True)
    iterations = st.slider("Trials", 5, 200, DEFAULT_ITERATIONS, step=5)
    seed = st.number_input("Seed", 0, 1_000_000, 42)

# Build config
config = SimulationConfig(
    total_pages=int(total_pages),
    domain_authority=domain_authority,
    competition=competition,
    months_since_launch=months,
    inventory_growth_rate=growth_rate,
    brand_strength=brand_strength,
    page_speed_score=page_speed,
    content_depth=content_depth,
    avg_cpc=avg_cpc,
    avg_cpm=avg_cpm,
    avg_product_price=price,
    net_margin=margin / 100,
    store_trust=store_trust,
    intent_distribution=IntentDistribution(intent_t / 100, intent_c / 100, intent_i / 100),
    apply_cannibalization_penalty=cannibalization,
    apply_seasonality=seasonality,
    apply_core_update_volatility=volatility,
    apply_content_decay=decay,
    apply_serp_suppression=serp,
    apply_reindexation_risk=reindex,
    apply_mobile_penalty=mobile,
)

# ── Run forecasts ────────────────────────────────────────────────────
ad = simulate_ad_value(config)
ecom = simulate_ecommerce_revenue(config)
ad_band = sample_variance(config, "ad_value", iterations, enable_randomness=show_bands, seed=int(seed))
ecom_band = sample_variance(config, "ecommerce", iterations, enable_randomness=show_bands, seed=int(seed))
labels = month_labels(months)

# ── Header ───────────────────────────────────────────────────────────
st.title("Organic Monetization Studio")
st.markdown(
    "Forecast organic search traffic and value it as paid-media equivalent "
    "or as ecommerce revenue. Totals cover the final twelve months of the horizon."
)

tab_ad, tab_ecom, tab_method = st.tabs(["Ad Value", "Ecommerce", "Methodology"])

# ── TAB: Ad Value ────────────────────────────────────────────────────
with tab_ad:
    t = ad.totals
    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Yearly Clicks", f"{t.yearly_clicks:,}")
    c2.metric("Daily Clicks", f"{t.daily_clicks:,.0f}")
    c3.metric("Yearly Ad Value", f"${t.yearly_traffic_value:,.0f}")
    c4.metric("Average CTR", f"{t.average_ctr * 100:.2f}%")
    c5.metric("Avg Position", f"{t.avg_position:.1f}")

    bands = band_to_frame(ad_band, "traffic_value")
    st.plotly_chart(
        band_chart(
            labels, [m.traffic_value for m in ad.monthly_data],
            bands["p10"], bands["p90"],
            "Monthly Traffic Value ($)", "$", color="#2ca02c",
        ),
        use_container_width=True,
    )
    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(
            line_chart(labels, [m.clicks for m in ad.monthly_data], "Clicks", "Clicks"),
            use_container_width=True,
        )
    with col2:
        st.plotly_chart(
            line_chart(
                labels, [m.indexed_pages for m in ad.monthly_data],
                "Indexed Pages", "Pages", color="#9467bd",
            ),
            use_container_width=True,
        )
    st.dataframe(results_to_frame(ad), use_container_width=True)

# ── TAB: Ecommerce ───────────────────────────────────────────────────
with tab_ecom:
    t = ecom.totals
    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Yearly Revenue", f"${t.yearly_revenue:,.0f}")
    c2.metric("Yearly Profit", f"${t.yearly_profit:,.0f}")
    c3.metric("Yearly Orders", f"{t.yearly_orders:,}")
    c4.metric("Blended CVR", f"{t.blended_cvr * 100:.2f}%")
    last_rpv = ecom.monthly_data[-1].rpv if ecom.monthly_data else 0.0
    c5.metric("Final Month RPV", f"${last_rpv:,.2f}")

    bands = band_to_frame(ecom_band, "revenue")
    st.plotly_chart(
        band_chart(
            labels, [m.revenue for m in ecom.monthly_data],
            bands["p10"], bands["p90"],
            "Monthly Revenue ($)", "$", color="#ff7f0e",
        ),
        use_container_width=True,
    )

    st.subheader("Reference Funnel")
    f = ecom.funnel
    fc1, fc2, fc3 = st.columns(3)
    fc1.metric("Add to Cart", f"{f.add_to_cart:.0%}")
    fc2.metric("Checkout", f"{f.checkout:.0%}")
    fc3.metric("Purchase", f"{f.purchase:.0%}")
    st.dataframe(results_to_frame(ecom), use_container_width=True)

# ── TAB: Methodology ─────────────────────────────────────────────────
with tab_method:
    st.header("Model Structure")
    st.markdown("""
1. **Indexation ramp**: 30% of inventory indexed in month 1, rising to 95% from month 12
2. **Impressions per page**: competition baseline × authority tier × page speed
3. **Growth saturation**: 1 - exp(-k·m), faster for strong domains and deep content
4. **Ranking distribution**: five SERP bins, shifted toward the top for DA > 50
5. **CTR curve**: 27% at position 1 down to 0.1% beyond page five
6. **Ad value**: clicks/300 × CPC + clicks/1000 × CPM
7. **Ecommerce**: store trust CVR × brand × speed × depth × intent × device × CRO curve
""")

    st.header("Known Limitations")
    st.markdown("""
- **Double ramp-up discount**: the indexation ramp and the saturation curve both slow early months.
- **Single-dimension uncertainty**: bands only perturb domain authority by ±2 points.
- **Order-statistic percentiles**: bands use the floor(n·p)-th sorted trial, not interpolation.
""")

    # ── Sensitivity Analysis ──────────────────────────────────────
    st.header("Sensitivity Analysis")
    st.markdown(
        "Each input is varied **±20%** from current settings. "
        "Bars show the percent change in yearly value, largest swing on top."
    )

    @st.cache_data
    def run_sensitivity(config_dict):
        """Run ±20% sweeps for key inputs and return percent changes."""
        intent = IntentDistribution(**config_dict["intent_distribution"])
        base = SimulationConfig(**{**config_dict, "intent_distribution": intent})
        base_ad = simulate_ad_value(base).totals.yearly_traffic_value
        base_rev = simulate_ecommerce_revenue(base).totals.yearly_revenue

        def pct(value, reference):
            return (value - reference) / reference * 100 if reference else 0.0

        rows = []
        for attr, label in SENSITIVITY_INPUTS:
            for direction, mult in (("-20%", 0.8), ("+20%", 1.2)):
                value = getattr(base, attr) * mult
                if attr == "total_pages":
                    value = int(value)
                tweaked = replace(base, **{attr: value})
                rows.append({
                    "param": label,
                    "direction": direction,
                    "ad_pct": pct(simulate_ad_value(tweaked).totals.yearly_traffic_value, base_ad),
                    "revenue_pct": pct(
                        simulate_ecommerce_revenue(tweaked).totals.yearly_revenue, base_rev
                    ),
                })
        return rows

    sens_df = pd.DataFrame(run_sensitivity(asdict(config)))

    tc1, tc2 = st.columns(2)
    with tc1:
        st.plotly_chart(sensitivity_chart(sens_df, "ad_pct", "Yearly Ad Value"), use_container_width=True)
    with tc2:
        st.plotly_chart(
            sensitivity_chart(sens_df, "revenue_pct", "Yearly Revenue"), use_container_width=True
        )

# ── Footer ───────────────────────────────────────────────────────────
st.divider()
st.caption(
    "Directional planning model. Multipliers are calibrated to plausibility, "
    "not fitted to ranking data; use the bands and sensitivity analysis to "
    "judge how much the headline numbers depend on your inputs."
)
