"""
Citizen wellbeing.

Monthly wellbeing moves with two opposing forces:

1. UBI boost
   UBI received -> Gini damping -> wealth gradient -> utility scale

2. Displacement friction
   Transition anxiety that peaks at mid-adoption and is buffered by
   institutions (governance) and hurt by inequality (Gini)

On top of these a capped crisis penalty applies when UBI leaves a large
share of lost wages uncovered, and a subsistence rule penalises
high-adoption countries with UBI below subsistence (or rewards those far
above it).
"""

import math
from dataclasses import dataclass, replace

from .config import ModelParameters
from .state import CountryState, MAX_WELLBEING, MIN_WELLBEING, clamp


@dataclass(frozen=True)
class WellbeingUpdate:
    country: CountryState
    in_crisis: bool


def base_friction(country: CountryState) -> float:
    # Power 1.5: low-governance countries feel disproportionately more pain
    return 40 * (1 - country.governance) ** 1.5 * (1 + country.gini * 0.5)


def displacement_friction(ai_adoption: float, friction: float) -> float:
    """Zero at both adoption extremes, peaks mid-transition."""
    return math.sin(ai_adoption * math.pi) * friction


def monthly_ubi_per_capita(country: CountryState, model: ModelParameters) -> float:
    if country.population <= 0:
        return 0.0
    return country.total_ubi_received / (country.population * model.constants.ubi_per_capita_scale)


def wealth_gradient(gdp_per_capita: float, gdp_scaling: float) -> float:
    offset = math.log10(gdp_per_capita + 1000) - 4  # centred around ~10k GDP
    return max(0.5, 1 + gdp_scaling * 0.5 * offset)


def ubi_boost(country: CountryState, total_ubi: float, model: ModelParameters) -> float:
    effective = total_ubi * (1.5 - country.gini)
    scaled = effective * wealth_gradient(country.gdp_per_capita, model.gdp_scaling)
    utility_scale = country.gdp_per_capita / 40 + 150
    return (scaled / utility_scale) * model.constants.ubi_utility_multiplier


def update_wellbeing(country: CountryState, model: ModelParameters) -> WellbeingUpdate:
    """Advance one country's wellbeing, displacement gap and trailing history."""
    k = model.constants
    total_ubi = monthly_ubi_per_capita(country, model)

    monthly_wage = country.monthly_wage
    lost_wages = monthly_wage * country.ai_adoption * model.displacement_rate
    gap = max(0.0, lost_wages - total_ubi)

    friction = displacement_friction(country.ai_adoption, base_friction(country))
    wellbeing = (
        country.wellbeing
        + ubi_boost(country, total_ubi, model) * k.ubi_boost_weight
        - friction * k.friction_weight
    )

    in_crisis = monthly_wage > 0 and gap > monthly_wage * k.crisis_gap_threshold
    if in_crisis:
        wellbeing -= min(k.crisis_penalty_cap, (gap / monthly_wage) * k.crisis_penalty_scale)

    subsistence_floor = country.gdp_per_capita / k.subsistence_divisor
    if country.ai_adoption > k.subsistence_adoption_threshold and total_ubi < subsistence_floor:
        wellbeing -= k.subsistence_penalty
    elif total_ubi > subsistence_floor * k.thriving_multiple:
        wellbeing += k.thriving_bonus

    wellbeing = clamp(wellbeing, MIN_WELLBEING, MAX_WELLBEING)
    updated = replace(
        country,
        wellbeing=wellbeing,
        displacement_gap=gap,
        wellbeing_history=country.wellbeing_history.push(wellbeing),
    )
    return WellbeingUpdate(country=updated, in_crisis=in_crisis)
