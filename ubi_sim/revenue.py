"""
Corporate AI revenue.

Revenue is capped by the automation ceiling and degrades as the customer
base gets poorer: a corporation cannot sell to people who cannot buy.
Operating in a market also pushes that market's AI adoption upward.
"""

from dataclasses import replace
from typing import Dict, List, Tuple

from .config import ModelParameters
from .state import CountryState, Corporation, MAX_ADOPTION, MIN_ADOPTION, clamp

# AI revenue as a share of market cap at full automation
AUTOMATION_REVENUE_SHARE = 0.15
# Expected customer purchasing power per $B of market cap
DEMAND_BASELINE_MULTIPLE = 10.0


def automation_revenue(corp: Corporation) -> float:
    return corp.ai_adoption_level * corp.market_cap * AUTOMATION_REVENUE_SHARE


def customer_demand(corp: Corporation, countries: Dict[str, CountryState]) -> float:
    """Aggregate purchasing power across operating countries."""
    demand = 0.0
    for cid in corp.operating_countries:
        country = countries.get(cid)
        if country is None:
            continue
        demand += country.gdp_per_capita * (country.wellbeing / 100) * country.population
    return demand


def demand_factor(corp: Corporation, countries: Dict[str, CountryState]) -> float:
    baseline = corp.market_cap * DEMAND_BASELINE_MULTIPLE
    if baseline <= 0:
        return 0.0
    return clamp(customer_demand(corp, countries) / baseline, 0.0, 1.0)


def reputation_multiplier(reputation_score: float) -> float:
    # Customers prefer ethical companies
    return 0.85 + (reputation_score / 100) * 0.30


def compute_revenue(corp: Corporation, countries: Dict[str, CountryState]) -> float:
    """Monthly AI revenue in $billions, never negative."""
    revenue = (
        automation_revenue(corp)
        * demand_factor(corp, countries)
        * reputation_multiplier(corp.reputation_score)
    )
    return max(0.0, revenue)


def customer_base_wellbeing(corp: Corporation, countries: Dict[str, CountryState]) -> float:
    """Population-weighted wellbeing of the corporation's customers (50 if none)."""
    total_pop = 0.0
    weighted = 0.0
    for cid in corp.operating_countries:
        country = countries.get(cid)
        if country is None:
            continue
        total_pop += country.population
        weighted += country.wellbeing * country.population
    return weighted / total_pop if total_pop > 0 else 50.0


def nudge_adoption(
    corp: Corporation,
    countries: Dict[str, CountryState],
    growth_rate: float,
) -> Dict[str, CountryState]:
    """Return a new country map with operating markets' adoption raised."""
    updated = dict(countries)
    for cid in corp.operating_countries:
        country = updated.get(cid)
        if country is None:
            continue
        growth = growth_rate * country.regional_modifier * corp.ai_adoption_level * 0.1
        adoption = country.ai_adoption + growth * (1 - country.ai_adoption)
        updated[cid] = replace(country, ai_adoption=clamp(adoption, MIN_ADOPTION, MAX_ADOPTION))
    return updated


def generate_revenue(
    corporations: List[Corporation],
    countries: Dict[str, CountryState],
    model: ModelParameters,
) -> Tuple[List[Corporation], Dict[str, CountryState]]:
    """Revenue phase: price every corporation and apply adoption pressure."""
    corps = []
    for corp in corporations:
        corps.append(replace(
            corp,
            ai_revenue=compute_revenue(corp, countries),
            customer_base_wellbeing=customer_base_wellbeing(corp, countries),
        ))
        countries = nudge_adoption(corp, countries, model.ai_growth_rate)
    return corps, countries
