"""Shared factories for building small worlds by hand."""

import pytest

from ubi_sim.state import (
    CountryState,
    Corporation,
    DistributionStrategy,
    WellbeingHistory,
    WorldState,
    stance_for_rate,
)


def make_country(
    cid="AAA",
    population=100.0,
    gdp_per_capita=10000.0,
    gini=0.3,
    governance=0.9,
    ai_adoption=0.1,
    wellbeing=60.0,
    history=None,
    **extra,
):
    return CountryState(
        id=cid,
        name=cid.title(),
        population=population,
        gdp_per_capita=gdp_per_capita,
        gini=gini,
        governance=governance,
        ai_adoption=ai_adoption,
        wellbeing=wellbeing,
        wellbeing_history=WellbeingHistory.of(history if history is not None else [wellbeing]),
        **extra,
    )


def make_corp(
    cid="c1",
    headquarters="AAA",
    operating=("AAA",),
    market_cap=100.0,
    ai_adoption_level=0.5,
    contribution_rate=0.15,
    strategy=DistributionStrategy.GLOBAL,
    reputation=50.0,
    **extra,
):
    return Corporation(
        id=cid,
        name=cid.upper(),
        headquarters=headquarters,
        operating_countries=tuple(operating),
        market_cap=market_cap,
        ai_adoption_level=ai_adoption_level,
        contribution_rate=contribution_rate,
        distribution_strategy=strategy,
        policy_stance=stance_for_rate(contribution_rate),
        reputation_score=reputation,
        **extra,
    )


def make_world(countries, month=0, global_fund=0.0):
    by_id = {c.id: c for c in countries}
    avg = sum(c.wellbeing for c in countries) / len(countries) if countries else 50.0
    return WorldState(
        month=month,
        countries=by_id,
        shadow_countries=dict(by_id),
        global_fund=global_fund,
        average_wellbeing=avg,
        shadow_average_wellbeing=avg,
    )


@pytest.fixture
def country():
    return make_country


@pytest.fixture
def corp():
    return make_corp


@pytest.fixture
def world():
    return make_world
