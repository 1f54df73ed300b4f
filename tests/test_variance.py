"""Tests for the Monte Carlo variance sampler."""

from dataclasses import replace

import pytest

from seo_forecast.config import SCENARIO_PRESETS, SimulationConfig
from seo_forecast.monetization import simulate_ad_value, simulate_ecommerce_revenue
from seo_forecast.variance import order_statistic, resolve_model, sample_variance


CONFIG = SimulationConfig(
    total_pages=3000,
    domain_authority=40,
    competition="medium",
    months_since_launch=18,
    avg_cpc=2.0,
    avg_cpm=10.0,
    avg_product_price=120,
    net_margin=0.3,
)

MODELS = [("ad_value", "traffic_value"), ("ecommerce", "revenue")]


class TestOrderStatistic:
    def test_thirty_samples_pick_fixed_ranks(self):
        values = list(range(30))[::-1]
        assert order_statistic(values, 0.5) == 15
        assert order_statistic(values, 0.1) == 3
        assert order_statistic(values, 0.9) == 27

    def test_single_sample(self):
        assert order_statistic([7.5], 0.9) == 7.5


class TestReproducibleMode:
    def test_disabled_randomness_returns_deterministic_run(self):
        band = sample_variance(CONFIG, "ad_value", 30, enable_randomness=False)
        expected = simulate_ad_value(CONFIG).monthly_data
        assert band.median == band.p10 == band.p90 == expected

    @pytest.mark.parametrize("iterations", [0, -5])
    def test_no_iterations_short_circuits(self, iterations):
        band = sample_variance(CONFIG, "ecommerce", iterations)
        expected = simulate_ecommerce_revenue(CONFIG).monthly_data
        assert band.median == band.p10 == band.p90 == expected


class TestRandomMode:
    @pytest.mark.parametrize("model, metric", MODELS)
    def test_percentiles_ordered(self, model, metric):
        band = sample_variance(CONFIG, model, 30, seed=11)
        for lo, mid, hi in zip(band.p10, band.median, band.p90):
            assert getattr(lo, metric) <= getattr(mid, metric) <= getattr(hi, metric)
            assert lo.clicks <= mid.clicks <= hi.clicks

    @pytest.mark.parametrize("model, metric", MODELS)
    def test_one_band_entry_per_month(self, model, metric):
        band = sample_variance(CONFIG, model, 10, seed=3)
        for series in (band.median, band.p10, band.p90):
            assert [m.month for m in series] == list(range(1, 19))

    def test_bands_spread_after_launch(self):
        band = sample_variance(CONFIG, "ad_value", 30, seed=5)
        assert band.p90[5].traffic_value > band.p10[5].traffic_value

    def test_non_perturbed_fields_shared(self):
        band = sample_variance(CONFIG, "ecommerce", 20, seed=2)
        for lo, mid, hi in zip(band.p10, band.median, band.p90):
            assert lo.indexed_pages == mid.indexed_pages == hi.indexed_pages
            assert lo.total_pages == mid.total_pages == hi.total_pages

    def test_seed_reproducible(self):
        a = sample_variance(CONFIG, "ad_value", 15, seed=42)
        b = sample_variance(CONFIG, "ad_value", 15, seed=42)
        assert a == b

    def test_thread_pool_matches_serial(self):
        serial = sample_variance(CONFIG, "ecommerce", 16, seed=9)
        pooled = sample_variance(CONFIG, "ecommerce", 16, seed=9, max_workers=4)
        assert serial == pooled

    def test_single_iteration(self):
        band = sample_variance(CONFIG, "ad_value", 1, seed=1)
        assert band.p10 == band.median == band.p90

    def test_zero_horizon(self):
        band = sample_variance(replace(CONFIG, months_since_launch=0), "ecommerce", 5, seed=1)
        assert band.median == band.p10 == band.p90 == []

    def test_preset_runs(self):
        band = sample_variance(SCENARIO_PRESETS["Enterprise Store"], "ecom", 8, seed=4)
        assert len(band.median) == 24


class TestModelNames:
    @pytest.mark.parametrize("alias, expected", [
        ("gsc", "ad_value"),
        ("adValue", "ad_value"),
        ("ad_value", "ad_value"),
        ("ecom", "ecommerce"),
        ("ecommerce", "ecommerce"),
    ])
    def test_aliases(self, alias, expected):
        assert resolve_model(alias) == expected

    def test_unknown_model_rejected(self):
        with pytest.raises(ValueError, match="Unknown model"):
            sample_variance(CONFIG, "affiliate", 5)
