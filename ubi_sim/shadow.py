"""
No-intervention counterfactual.

Runs the same calendar month for a world without UBI: adoption grows at
half speed, wages collapse with automation, and wellbeing follows a
saturating survival curve. Friction is stronger without a safety net and
high adoption adds an instability penalty. The shadow track is only read
for comparison and never feeds back into the main countries.
"""

import math
from dataclasses import replace

from .config import ModelParameters
from .state import CountryState, MAX_ADOPTION, MAX_WELLBEING, MIN_ADOPTION, MIN_WELLBEING, clamp
from .wellbeing import base_friction, displacement_friction

# Below this monthly income subsistence costs bite harder
LOW_INCOME_DEMAND = 800
LOW_INCOME_SUBSISTENCE_MULTIPLIER = 1.7


def survival_wellbeing(demand: float, subsistence: float) -> float:
    """Michaelis-Menten style saturating ratio scaled to 0-100."""
    adjusted = subsistence * (LOW_INCOME_SUBSISTENCE_MULTIPLIER if demand < LOW_INCOME_DEMAND else 1)
    denom = demand + adjusted
    if denom <= 0:
        return MIN_WELLBEING
    return clamp(demand / denom * 100, MIN_WELLBEING, MAX_WELLBEING)


def update_shadow(shadow: CountryState, model: ModelParameters) -> CountryState:
    """Advance one country's counterfactual twin by a month."""
    k = model.constants
    growth = model.ai_growth_rate * k.shadow_growth_factor * shadow.regional_modifier * (1 - shadow.ai_adoption)
    adoption = clamp(shadow.ai_adoption + growth, MIN_ADOPTION, MAX_ADOPTION)

    monthly_wage = shadow.monthly_wage
    wage = monthly_wage * (1 - adoption * k.shadow_wage_collapse)
    subsistence = shadow.gdp_per_capita / k.subsistence_divisor
    wellbeing = survival_wellbeing(wage, subsistence)

    friction = displacement_friction(adoption, base_friction(shadow)) * k.shadow_friction_multiplier
    wellbeing = clamp(wellbeing - friction * k.shadow_friction_weight, MIN_WELLBEING, MAX_WELLBEING)

    if adoption > 0.5:
        instability = (adoption - 0.5) ** 2 * k.shadow_instability_scale
        wellbeing = clamp(wellbeing - instability, MIN_WELLBEING, MAX_WELLBEING)

    return replace(
        shadow,
        ai_adoption=adoption,
        wellbeing=wellbeing,
        displacement_gap=monthly_wage * adoption * model.displacement_rate,
        wellbeing_history=shadow.wellbeing_history.push(wellbeing),
    )
