"""
Unit tests for the revenue phase

Tests cover:
- Revenue ceiling, demand limiting and reputation effect
- Customer base wellbeing
- Adoption pressure on operating markets
"""

import pytest

from ubi_sim.config import ModelParameters
from ubi_sim.revenue import (
    compute_revenue,
    customer_base_wellbeing,
    demand_factor,
    generate_revenue,
    nudge_adoption,
    reputation_multiplier,
)

from conftest import make_corp, make_country


class TestRevenue:
    """Test suite for corporate AI revenue"""

    def test_full_demand_hits_ceiling(self):
        """Rich customers: revenue equals adoption * market cap * 0.15"""
        countries = {"AAA": make_country(wellbeing=50.0)}
        corp = make_corp(market_cap=100.0, ai_adoption_level=0.5, reputation=50.0)
        assert demand_factor(corp, countries) == 1.0
        assert compute_revenue(corp, countries) == pytest.approx(7.5)

    def test_poor_customers_limit_revenue(self):
        # demand 10000 * 0.5 * 0.1 = 500 vs baseline 1000
        countries = {"AAA": make_country(population=0.1, wellbeing=50.0)}
        corp = make_corp(market_cap=100.0, ai_adoption_level=0.5)
        assert demand_factor(corp, countries) == pytest.approx(0.5)
        assert compute_revenue(corp, countries) == pytest.approx(3.75)

    def test_zero_market_cap(self):
        countries = {"AAA": make_country()}
        corp = make_corp(market_cap=0.0)
        assert demand_factor(corp, countries) == 0.0
        assert compute_revenue(corp, countries) == 0.0

    def test_reputation_multiplier_range(self):
        assert reputation_multiplier(0) == pytest.approx(0.85)
        assert reputation_multiplier(50) == pytest.approx(1.0)
        assert reputation_multiplier(100) == pytest.approx(1.15)

    def test_missing_operating_countries_ignored(self):
        countries = {"AAA": make_country()}
        corp = make_corp(operating=("ZZZ",))
        assert compute_revenue(corp, countries) == 0.0
        assert customer_base_wellbeing(corp, countries) == 50.0

    def test_customer_base_wellbeing_is_population_weighted(self):
        countries = {
            "AAA": make_country("AAA", population=100, wellbeing=80.0),
            "BBB": make_country("BBB", population=300, wellbeing=40.0),
        }
        corp = make_corp(operating=("AAA", "BBB"))
        assert customer_base_wellbeing(corp, countries) == pytest.approx(50.0)


class TestAdoptionNudge:
    """Operating a market pushes its AI adoption up"""

    def test_logistic_nudge(self):
        countries = {"AAA": make_country(ai_adoption=0.1)}
        corp = make_corp(ai_adoption_level=0.5)
        updated = nudge_adoption(corp, countries, growth_rate=0.08)
        # growth = 0.08 * 1.1 * 0.5 * 0.1 = 0.0044; 0.1 + 0.0044 * 0.9
        assert updated["AAA"].ai_adoption == pytest.approx(0.10396)
        assert countries["AAA"].ai_adoption == 0.1

    def test_only_operating_markets_move(self):
        countries = {"AAA": make_country("AAA"), "BBB": make_country("BBB")}
        updated = nudge_adoption(make_corp(operating=("AAA",)), countries, growth_rate=0.08)
        assert updated["BBB"] is countries["BBB"]

    def test_phase_applies_corporations_in_order(self):
        """Two corporations in the same market nudge it twice"""
        countries = {"AAA": make_country(ai_adoption=0.1)}
        model = ModelParameters(ai_growth_rate=0.08)
        one, _ = generate_revenue([make_corp("c1")], countries, model)
        _, once = generate_revenue([make_corp("c1")], countries, model)
        _, twice = generate_revenue([make_corp("c1"), make_corp("c2")], countries, model)
        assert one[0].ai_revenue == pytest.approx(7.5)
        assert twice["AAA"].ai_adoption > once["AAA"].ai_adoption > 0.1
