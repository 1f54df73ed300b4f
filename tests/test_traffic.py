"""Tests for the organic traffic simulator."""

import math
from dataclasses import replace

import pytest

from seo_forecast.config import LOW_AUTHORITY_WEIGHTS, SCENARIO_PRESETS, SimulationConfig
from seo_forecast.traffic import ranking_weights, simulate_traffic


BASE_CONFIG = SimulationConfig(
    total_pages=1000,
    domain_authority=40,
    competition="medium",
    months_since_launch=24,
)

ALL_TOGGLES = replace(
    BASE_CONFIG,
    total_pages=5000,
    inventory_growth_rate=3.0,
    apply_cannibalization_penalty=True,
    apply_seasonality=True,
    apply_core_update_volatility=True,
    apply_content_decay=True,
    apply_serp_suppression=True,
    apply_reindexation_risk=True,
    months_since_launch=36,
)


class TestHorizon:
    @pytest.mark.parametrize("months", [0, 1, 13, 24])
    def test_length_matches_horizon(self, months):
        traffic = simulate_traffic(replace(BASE_CONFIG, months_since_launch=months))
        assert len(traffic) == months

    def test_months_contiguous_from_one(self):
        traffic = simulate_traffic(BASE_CONFIG)
        assert [t.month for t in traffic] == list(range(1, 25))

    def test_deterministic(self):
        assert simulate_traffic(ALL_TOGGLES) == simulate_traffic(ALL_TOGGLES)


class TestBounds:
    @pytest.mark.parametrize("config", [BASE_CONFIG, ALL_TOGGLES, *SCENARIO_PRESETS.values()])
    def test_ctr_between_zero_and_one(self, config):
        for t in simulate_traffic(config):
            assert 0 <= t.ctr <= 1

    @pytest.mark.parametrize("config", [BASE_CONFIG, ALL_TOGGLES, *SCENARIO_PRESETS.values()])
    def test_counts_non_negative(self, config):
        for t in simulate_traffic(config):
            assert t.clicks >= 0
            assert t.impressions >= 0
            assert t.indexed_pages >= 0

    def test_ctr_matches_clicks_over_impressions(self):
        for t in simulate_traffic(BASE_CONFIG):
            # ctr is taken before clicks are floored
            assert abs(t.ctr * t.impressions - t.clicks) < 1

    def test_zero_inventory_has_zero_ctr(self):
        traffic = simulate_traffic(replace(BASE_CONFIG, total_pages=0))
        for t in traffic:
            assert t.impressions == 0
            assert t.clicks == 0
            assert t.ctr == 0.0
            assert t.avg_position == 0.0

    def test_out_of_range_inputs_do_not_raise(self):
        weird = replace(BASE_CONFIG, total_pages=-50, domain_authority=140, page_speed_score=-5)
        assert len(simulate_traffic(weird)) == 24


class TestIndexation:
    def test_ramp_starts_at_thirty_percent(self):
        traffic = simulate_traffic(BASE_CONFIG)
        assert traffic[0].indexed_pages == math.floor(1000 * 0.3)
        assert traffic[2].indexed_pages == math.floor(1000 * 0.7)
        assert traffic[11].indexed_pages == math.floor(1000 * 0.95)

    def test_high_authority_capped_at_98_percent(self):
        config = replace(BASE_CONFIG, domain_authority=70, content_depth="comprehensive")
        traffic = simulate_traffic(config)
        assert traffic[11].indexed_pages == math.floor(1000 * 0.98)

    def test_high_authority_bump_below_cap(self):
        traffic = simulate_traffic(replace(BASE_CONFIG, domain_authority=65))
        assert traffic[6].indexed_pages == math.floor(1000 * (0.90 + 0.03))
        assert traffic[0].indexed_pages == math.floor(1000 * (0.30 + 0.03))

    def test_authority_sixty_gets_no_bump(self):
        traffic = simulate_traffic(replace(BASE_CONFIG, domain_authority=60))
        assert traffic[6].indexed_pages == math.floor(1000 * 0.90)
        assert traffic[11].indexed_pages == math.floor(1000 * 0.95)

    def test_thin_content_indexes_slower(self):
        thin = simulate_traffic(replace(BASE_CONFIG, content_depth="thin"))
        base = simulate_traffic(BASE_CONFIG)
        assert all(t.indexed_pages < b.indexed_pages for t, b in zip(thin, base))

    def test_reindexation_risk_after_month_three(self):
        traffic = simulate_traffic(replace(BASE_CONFIG, apply_reindexation_risk=True))
        assert traffic[2].indexed_pages == math.floor(1000 * 0.7)
        assert traffic[11].indexed_pages == math.floor(1000 * (0.95 * 0.985))

    def test_inventory_growth_compounds(self):
        traffic = simulate_traffic(replace(BASE_CONFIG, inventory_growth_rate=10))
        assert traffic[0].total_pages == 1000
        assert traffic[2].total_pages == math.floor(1000 * 1.1 ** 2)


class TestImpressions:
    def test_impressions_grow_without_risk_factors(self):
        imps = [t.impressions for t in simulate_traffic(BASE_CONFIG)]
        assert imps == sorted(imps)
        assert imps[0] > 0

    def test_seasonality_peaks_in_month_three(self):
        seasonal = simulate_traffic(replace(BASE_CONFIG, apply_seasonality=True))
        base = simulate_traffic(BASE_CONFIG)
        assert seasonal[2].impressions > base[2].impressions
        assert seasonal[8].impressions < base[8].impressions

    def test_core_updates_only_hit_every_sixth_month(self):
        volatile = simulate_traffic(replace(BASE_CONFIG, apply_core_update_volatility=True))
        base = simulate_traffic(BASE_CONFIG)
        for v, b in zip(volatile, base):
            if v.month % 6 == 0:
                assert v.impressions <= b.impressions
            else:
                assert v.impressions == b.impressions

    def test_content_decay_starts_after_first_year(self):
        decayed = simulate_traffic(replace(BASE_CONFIG, apply_content_decay=True))
        base = simulate_traffic(BASE_CONFIG)
        assert decayed[:12] == base[:12]
        assert decayed[23].impressions < base[23].impressions

    def test_cannibalization_only_above_500_pages(self):
        small = replace(BASE_CONFIG, total_pages=400)
        assert simulate_traffic(replace(small, apply_cannibalization_penalty=True)) == simulate_traffic(small)

        large = replace(BASE_CONFIG, total_pages=5000)
        penalized = simulate_traffic(replace(large, apply_cannibalization_penalty=True))
        assert penalized[-1].impressions < simulate_traffic(large)[-1].impressions

    def test_competition_scales_impressions(self):
        low = simulate_traffic(replace(BASE_CONFIG, competition="low"))[-1]
        high = simulate_traffic(replace(BASE_CONFIG, competition="high"))[-1]
        assert high.impressions > low.impressions


class TestRankingAndClicks:
    @pytest.mark.parametrize("da", [0, 15, 20, 50, 75, 100])
    def test_weights_sum_to_one(self, da):
        assert sum(ranking_weights(da)) == pytest.approx(1.0)

    def test_low_authority_distribution(self):
        assert ranking_weights(10) == pytest.approx(list(LOW_AUTHORITY_WEIGHTS))

    def test_high_authority_shifts_toward_top(self):
        mid = ranking_weights(50)
        high = ranking_weights(90)
        assert high[0] > mid[0]
        assert high[1] > mid[1]
        assert high[4] < mid[4]

    def test_average_position_constant_across_months(self):
        traffic = simulate_traffic(BASE_CONFIG)
        first = traffic[0].avg_position
        assert 1 <= first <= 75.5
        for t in traffic:
            assert t.avg_position == pytest.approx(first)

    def test_serp_suppression_removes_clicks(self):
        suppressed = simulate_traffic(replace(BASE_CONFIG, apply_serp_suppression=True))[-1]
        base = simulate_traffic(BASE_CONFIG)[-1]
        assert suppressed.impressions == base.impressions
        assert suppressed.clicks < base.clicks
        assert suppressed.ctr == pytest.approx(base.ctr * 0.8)

    def test_brand_strength_lifts_clicks(self):
        elite = simulate_traffic(replace(BASE_CONFIG, brand_strength="elite"))[-1]
        low = simulate_traffic(replace(BASE_CONFIG, brand_strength="low"))[-1]
        assert elite.clicks > low.clicks
        assert elite.ctr == pytest.approx(low.ctr * 1.6 / 0.8)

    @pytest.mark.parametrize("da, expected", [
        # shift s = (DA - 50) * 0.0015: top +2.5s, 4-10 +s, 51-100 -3.5s
        (70, [0.03 + 0.075, 0.12 + 0.03, 0.20, 0.40, 0.25 - 0.105]),
        (90, [0.03 + 0.15, 0.12 + 0.06, 0.20, 0.40, 0.25 - 0.21]),
    ])
    def test_high_authority_shift_amounts(self, da, expected):
        assert ranking_weights(da) == pytest.approx(expected)

    @pytest.mark.parametrize("da", [20, 40, 50])
    def test_mid_authority_uses_base_weights(self, da):
        assert ranking_weights(da) == pytest.approx([0.03, 0.12, 0.20, 0.40, 0.25])

    def test_ctr_and_position_from_curve(self):
        # base weights spread evenly over each bin's positions
        expected_ctr = (
            0.03 / 3 * (0.27 + 0.15 + 0.11)
            + 0.12 / 7 * (0.08 + 0.07 + 0.05 + 0.04 + 0.03 + 0.025 + 0.022)
            + 0.20 * 0.01
            + 0.40 * 0.003
            + 0.25 * 0.001
        )
        expected_position = (
            0.03 / 3 * (1 + 2 + 3)
            + 0.12 / 7 * (4 + 5 + 6 + 7 + 8 + 9 + 10)
            + 0.20 * 15.5
            + 0.40 * 35.5
            + 0.25 * 75.5
        )
        assert expected_position == pytest.approx(37.075)

        for t in simulate_traffic(BASE_CONFIG):
            assert t.ctr == pytest.approx(expected_ctr)
            assert t.avg_position == pytest.approx(expected_position)
            assert t.clicks == pytest.approx(t.impressions * expected_ctr, abs=1)
