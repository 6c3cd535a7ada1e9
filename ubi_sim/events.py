"""
Stochastic company formation.

New AI companies join a country's economy at random, layered on top of
the deterministic monthly step by whoever drives the simulation. The
random source is always passed in, so a fixed seed replays exactly.
"""

from dataclasses import replace

import numpy as np

from .config import ModelParameters
from .state import MAX_ADOPTION, MIN_ADOPTION, WorldState, clamp

# Incentives fade as adoption approaches saturation
INCENTIVE_MIDPOINT = 0.70
INCENTIVE_STEEPNESS = 10
MAX_NEW_COMPANIES = 4
ADOPTION_PER_COMPANY = 1 / 50


def join_probability(ai_adoption: float, regional_modifier: float, params: ModelParameters) -> float:
    sigmoid = 1.0 / (1.0 + np.exp(INCENTIVE_STEEPNESS * (ai_adoption - INCENTIVE_MIDPOINT)))
    effective_incentive = params.adoption_incentive * sigmoid
    p = params.ai_growth_rate * regional_modifier * (1 + effective_incentive) * (1 - ai_adoption)
    return float(clamp(p, 0.0, 1.0))


def form_companies(state: WorldState, params: ModelParameters, rng: np.random.Generator) -> WorldState:
    """Return a new state with randomly formed companies applied."""
    countries = dict(state.countries)
    added_total = 0
    for cid, country in state.countries.items():
        p = join_probability(country.ai_adoption, country.regional_modifier, params)
        if rng.random() < p:
            added = int(rng.integers(1, MAX_NEW_COMPANIES + 1))
            added_total += added
            countries[cid] = replace(
                country,
                companies_joined=country.companies_joined + added,
                ai_adoption=clamp(country.ai_adoption + added * ADOPTION_PER_COMPANY, MIN_ADOPTION, MAX_ADOPTION),
            )
    if added_total == 0:
        return state
    return replace(state, countries=countries, total_ai_companies=state.total_ai_companies + added_total)
