"""
Unit tests for model configuration

Tests cover:
- Parameter validation
- Scenario presets
- Month labels
"""

import pytest

from ubi_sim.config import (
    CORP_POLICY_PRESETS,
    DEFAULT_COUNTRIES,
    DEFAULT_CORPORATIONS,
    ModelParameters,
    SCENARIO_PRESETS,
    StepConstants,
    month_labels,
)


class TestModelParameters:
    """Validation of run parameters"""

    def test_defaults_are_valid(self):
        params = ModelParameters()
        assert params.default_corp_policy == "free-market"
        assert params.constants == StepConstants()

    @pytest.mark.parametrize("field", ["ai_growth_rate", "displacement_rate", "gdp_scaling",
                                       "market_pressure", "adoption_incentive"])
    def test_out_of_range_rejected(self, field):
        with pytest.raises(ValueError):
            ModelParameters(**{field: 1.5})
        with pytest.raises(ValueError):
            ModelParameters(**{field: -0.1})

    def test_unknown_corp_policy_rejected(self):
        with pytest.raises(ValueError):
            ModelParameters(default_corp_policy="utopia")

    def test_parameters_are_immutable(self):
        params = ModelParameters()
        with pytest.raises(AttributeError):
            params.ai_growth_rate = 0.5


class TestPresetsAndData:
    """Shipped scenarios and seed data"""

    def test_presets_use_known_policies(self):
        for name, params in SCENARIO_PRESETS.items():
            assert params.name == name
            assert params.default_corp_policy in CORP_POLICY_PRESETS

    def test_country_ids_unique_and_upper_case(self):
        ids = [c.id for c in DEFAULT_COUNTRIES]
        assert len(ids) == len(set(ids))
        assert all(cid.isupper() and len(cid) == 3 for cid in ids)

    def test_corporations_reference_known_countries(self):
        known = {c.id for c in DEFAULT_COUNTRIES}
        for corp in DEFAULT_CORPORATIONS:
            assert corp.headquarters in known
            assert set(corp.operating_countries) <= known

    def test_month_labels(self):
        labels = month_labels(13)
        assert len(labels) == 14
        assert labels[0] == "Jan 2025"
        assert labels[12] == "Jan 2026"
        assert labels[13] == "Feb 2026"
