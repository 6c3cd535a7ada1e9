"""
Contribution ledger.

Routes each corporation's voluntary contribution through its chosen
distribution strategy into country-level UBI buckets:

- global: pooled, divided by world population, credited to every
  country in proportion to its population
- customer-weighted: split over operating countries by population share
- hq-local: credited whole to the headquarters country

Contributions that cannot be routed (no customer population, missing
headquarters) are recorded as ``undistributed`` instead of dividing by
zero, so inflow always equals outflow plus undistributed.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Tuple

from .state import CountryState, Corporation, DistributionStrategy, GlobalLedger

logger = logging.getLogger(__name__)


def _reset_ubi(countries: Dict[str, CountryState]) -> Dict[str, float]:
    return {cid: 0.0 for cid in countries}


def distribute_contributions(
    corporations: List[Corporation],
    countries: Dict[str, CountryState],
    previous_fund: float,
) -> Tuple[Dict[str, CountryState], GlobalLedger]:
    """Contribution and distribution phases for one month.

    Returns a new country map with the three UBI tallies (and their sum)
    filled in from zero, and the month's ledger.
    """
    local = _reset_ubi(countries)
    customer = _reset_ubi(countries)
    contributor_breakdown: Dict[str, float] = {}
    by_strategy = {s.value: 0.0 for s in DistributionStrategy}
    monthly_inflow = 0.0
    global_pool = 0.0
    undistributed = 0.0

    for corp in corporations:
        contribution = corp.ai_revenue * corp.contribution_rate
        contributor_breakdown[corp.id] = contribution
        monthly_inflow += contribution

        strategy = corp.distribution_strategy
        if strategy is DistributionStrategy.GLOBAL:
            global_pool += contribution
            by_strategy[strategy.value] += contribution
        elif strategy is DistributionStrategy.CUSTOMER_WEIGHTED:
            present = [cid for cid in corp.operating_countries if cid in countries]
            total_pop = sum(countries[cid].population for cid in present)
            if total_pop <= 0:
                logger.debug("No customer population for %s, skipping distribution", corp.id)
                undistributed += contribution
                continue
            for cid in present:
                customer[cid] += contribution * (countries[cid].population / total_pop)
            by_strategy[strategy.value] += contribution
        else:
            if corp.headquarters not in countries:
                logger.debug("Headquarters %s of %s not in world, skipping distribution",
                             corp.headquarters, corp.id)
                undistributed += contribution
                continue
            local[corp.headquarters] += contribution
            by_strategy[strategy.value] += contribution

    world_population = sum(c.population for c in countries.values())
    if world_population > 0:
        per_capita = global_pool / world_population
    else:
        per_capita = 0.0
        if global_pool > 0:
            logger.debug("World population is zero, global pool left undistributed")
            undistributed += global_pool
            by_strategy[DistributionStrategy.GLOBAL.value] -= global_pool

    updated: Dict[str, CountryState] = {}
    funds_by_country: Dict[str, float] = {}
    outflow = 0.0
    for cid, country in countries.items():
        received_global = per_capita * country.population
        total = received_global + customer[cid] + local[cid]
        updated[cid] = replace(
            country,
            ubi_received_global=received_global,
            ubi_received_customer_weighted=customer[cid],
            ubi_received_local=local[cid],
            total_ubi_received=total,
        )
        funds_by_country[cid] = total
        outflow += total

    ledger = GlobalLedger(
        total_funds=previous_fund + monthly_inflow,
        global_pool=global_pool if world_population > 0 else 0.0,
        monthly_inflow=monthly_inflow,
        monthly_outflow=outflow,
        funds_per_capita=per_capita,
        undistributed=undistributed,
        funds_by_country=funds_by_country,
        contributor_breakdown=contributor_breakdown,
        distribution_breakdown=by_strategy,
    )
    return updated, ledger
