"""
UBI transition simulation engine.

One monthly tick advances a world of countries and corporations through
six phases, in this order:

1. Revenue
   Automation revenue, limited by customer purchasing power and
   reputation; operating markets adopt more AI

2. Contribution
   Each corporation pays a share of its AI revenue into UBI

3. Distribution
   Global pool per capita, customer-weighted, or headquarters-local

4. Wellbeing / Shadow
   UBI boost vs displacement friction, crisis and subsistence rules;
   a no-UBI counterfactual runs alongside for comparison

5. Adaptation
   Corporations react to projected demand collapse, competitors,
   reputation and regional pressure, seeing post-distribution wellbeing

6. Analysis
   Cooperation / defection dynamics of the corporate population

``step`` is pure and deterministic: it builds new records and never
touches the caller's objects. ``TransitionSimulator`` drives many ticks
and keeps the snapshot history for rewinding.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from .config import CorporationProfile, CountryProfile, ModelParameters, month_labels
from .events import form_companies
from .game_theory import analyze
from .ledger import distribute_contributions
from .policy import adapt_corporations
from .revenue import generate_revenue
from .shadow import update_shadow
from .state import (
    CountryState,
    Corporation,
    GameTheoryState,
    GlobalLedger,
    WorldState,
    build_corporations,
    build_world,
)
from .wellbeing import update_wellbeing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepOutput:
    """Everything one tick produces."""

    state: WorldState
    corporations: List[Corporation]
    ledger: GlobalLedger
    game_theory: GameTheoryState


def _mean_wellbeing(countries: Dict[str, CountryState]) -> float:
    if not countries:
        return 0.0
    return sum(c.wellbeing for c in countries.values()) / len(countries)


def step(
    state: WorldState,
    corporations: Sequence[Corporation],
    model: ModelParameters,
) -> StepOutput:
    """Advance the world by exactly one month."""
    next_month = state.month + 1

    # Phase 1: revenue (and adoption pressure on operating markets)
    corps, countries = generate_revenue(list(corporations), state.countries, model)

    # Phases 2-3: contributions routed into country UBI buckets
    countries, ledger = distribute_contributions(corps, countries, state.global_fund)

    # Phase 4: wellbeing and the no-UBI counterfactual
    updated: Dict[str, CountryState] = {}
    crisis_count = 0
    displacement_total = 0.0
    for cid, country in countries.items():
        result = update_wellbeing(country, model)
        updated[cid] = result.country
        crisis_count += int(result.in_crisis)
        displacement_total += result.country.displacement_gap * result.country.population

    shadows = {cid: update_shadow(s, model) for cid, s in state.shadow_countries.items()}

    # Phase 5: adaptation sees post-distribution wellbeing
    corps = adapt_corporations(corps, updated, next_month, model)

    # Phase 6: analysis of the post-adaptation population
    game_theory = analyze(corps)

    new_state = WorldState(
        month=next_month,
        countries=updated,
        shadow_countries=shadows,
        global_fund=ledger.total_funds,
        average_wellbeing=_mean_wellbeing(updated),
        shadow_average_wellbeing=_mean_wellbeing(shadows),
        total_ai_companies=len(corps) + sum(c.companies_joined for c in updated.values()),
        global_displacement_gap=displacement_total,
        countries_in_crisis=crisis_count,
    )
    logger.debug(
        "Month %d: wellbeing %.2f (shadow %.2f), inflow %.3f, fund %.3f",
        next_month, new_state.average_wellbeing, new_state.shadow_average_wellbeing,
        ledger.monthly_inflow, ledger.total_funds,
    )
    return StepOutput(state=new_state, corporations=corps, ledger=ledger, game_theory=game_theory)


@dataclass
class SimulationResults:
    """All output time series from a run, indexed by month (0 = start)."""

    labels: List[str]
    country_ids: List[str]
    corporation_ids: List[str]

    # Aggregate series
    average_wellbeing: np.ndarray
    shadow_average_wellbeing: np.ndarray
    global_fund: np.ndarray
    monthly_inflow: np.ndarray
    countries_in_crisis: np.ndarray
    global_displacement_gap: np.ndarray
    total_ai_companies: np.ndarray

    # Game theory series
    avg_contribution_rate: np.ndarray
    race_to_bottom_risk: np.ndarray
    virtuous_cycle_strength: np.ndarray
    cooperation_count: np.ndarray
    moderate_count: np.ndarray
    defection_count: np.ndarray

    # Per-country arrays: shape (months+1, num_countries)
    wellbeing: np.ndarray
    shadow_wellbeing: np.ndarray
    ai_adoption: np.ndarray
    ubi_received: np.ndarray

    # Per-corporation arrays: shape (months+1, num_corporations)
    contribution_rate: np.ndarray
    reputation: np.ndarray
    ai_revenue: np.ndarray

    # Full snapshots for timeline scrubbing
    history: List[StepOutput]

    # Milestones: list of (month, label)
    milestones: List[tuple]

    def snapshot(self, month: int) -> StepOutput:
        return self.history[month]

    def history_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "month": np.arange(len(self.labels)),
            "label": self.labels,
            "average_wellbeing": self.average_wellbeing,
            "shadow_average_wellbeing": self.shadow_average_wellbeing,
            "global_fund": self.global_fund,
            "monthly_inflow": self.monthly_inflow,
            "countries_in_crisis": self.countries_in_crisis,
            "global_displacement_gap": self.global_displacement_gap,
            "avg_contribution_rate": self.avg_contribution_rate,
            "race_to_bottom_risk": self.race_to_bottom_risk,
            "virtuous_cycle_strength": self.virtuous_cycle_strength,
        })

    def country_frame(self, month: int) -> pd.DataFrame:
        snap = self.history[month].state
        rows = []
        for cid, c in snap.countries.items():
            shadow = snap.shadow_countries.get(cid)
            rows.append({
                "id": cid,
                "name": c.name,
                "population_m": c.population,
                "gdp_per_capita": c.gdp_per_capita,
                "ai_adoption": c.ai_adoption,
                "wellbeing": c.wellbeing,
                "shadow_wellbeing": shadow.wellbeing if shadow else np.nan,
                "displacement_gap": c.displacement_gap,
                "ubi_global": c.ubi_received_global,
                "ubi_customer_weighted": c.ubi_received_customer_weighted,
                "ubi_local": c.ubi_received_local,
                "ubi_total": c.total_ubi_received,
            })
        return pd.DataFrame(rows)

    def corporation_frame(self, month: int) -> pd.DataFrame:
        return pd.DataFrame([
            {
                "id": c.id,
                "name": c.name,
                "headquarters": c.headquarters,
                "ai_revenue": c.ai_revenue,
                "contribution_rate": c.contribution_rate,
                "strategy": c.distribution_strategy.value,
                "stance": c.policy_stance.value,
                "reputation": c.reputation_score,
                "demand_collapse": c.projected_demand_collapse,
                "last_policy_change": c.last_policy_change,
            }
            for c in self.history[month].corporations
        ])


class TransitionSimulator:
    """Drives the monthly step over a whole run."""

    def __init__(
        self,
        params: ModelParameters = None,
        countries: Sequence[CountryProfile] = None,
        corporations: Sequence[CorporationProfile] = None,
        seed: int = None,
        initial_adoption: float = 0.01,
        initial_wellbeing: float = None,
    ):
        self.params = params or ModelParameters()
        self.country_profiles = countries
        self.corporation_profiles = corporations
        # Company formation events only run when a seed is supplied
        self.seed = seed
        self.initial_adoption = initial_adoption
        self.initial_wellbeing = initial_wellbeing

    def initial_state(self) -> WorldState:
        return build_world(
            self.country_profiles,
            initial_adoption=self.initial_adoption,
            initial_wellbeing=self.initial_wellbeing,
            history_capacity=self.params.constants.history_capacity,
        )

    def initial_corporations(self) -> List[Corporation]:
        return build_corporations(self.corporation_profiles, self.params.default_corp_policy)

    def run(self, months: int = 60) -> SimulationResults:
        p = self.params
        logger.info("Running '%s' for %d months (seed=%s)", p.name, months, self.seed)

        state = self.initial_state()
        corps = self.initial_corporations()
        rng = np.random.default_rng(self.seed) if self.seed is not None else None

        history = [StepOutput(state=state, corporations=corps, ledger=GlobalLedger(), game_theory=analyze(corps))]
        for _ in range(months):
            if rng is not None:
                state = form_companies(state, p, rng)
            out = step(state, corps, p)
            history.append(out)
            state, corps = out.state, out.corporations

        results = self._collect(history)
        logger.info(
            "Finished at month %d: wellbeing %.1f (shadow %.1f), fund %.2f",
            state.month, state.average_wellbeing, state.shadow_average_wellbeing, state.global_fund,
        )
        return results

    def _collect(self, history: List[StepOutput]) -> SimulationResults:
        first = history[0]
        country_ids = list(first.state.countries)
        corp_ids = [c.id for c in first.corporations]

        def per_country(attr, shadow=False):
            arr = np.full((len(history), len(country_ids)), np.nan)
            for t, out in enumerate(history):
                source = out.state.shadow_countries if shadow else out.state.countries
                for i, cid in enumerate(country_ids):
                    if cid in source:
                        arr[t, i] = getattr(source[cid], attr)
            return arr

        def per_corp(attr):
            arr = np.full((len(history), len(corp_ids)), np.nan)
            for t, out in enumerate(history):
                by_id = {c.id: c for c in out.corporations}
                for i, cid in enumerate(corp_ids):
                    if cid in by_id:
                        arr[t, i] = getattr(by_id[cid], attr)
            return arr

        def series(fn):
            return np.array([fn(out) for out in history], dtype=float)

        avg_wb = series(lambda o: o.state.average_wellbeing)
        race = series(lambda o: o.game_theory.race_to_bottom_risk)
        virtuous = series(lambda o: o.game_theory.virtuous_cycle_strength)
        fund = series(lambda o: o.state.global_fund)
        crisis = series(lambda o: o.state.countries_in_crisis)

        return SimulationResults(
            labels=month_labels(len(history) - 1),
            country_ids=country_ids,
            corporation_ids=corp_ids,
            average_wellbeing=avg_wb,
            shadow_average_wellbeing=series(lambda o: o.state.shadow_average_wellbeing),
            global_fund=fund,
            monthly_inflow=series(lambda o: o.ledger.monthly_inflow),
            countries_in_crisis=crisis,
            global_displacement_gap=series(lambda o: o.state.global_displacement_gap),
            total_ai_companies=series(lambda o: o.state.total_ai_companies),
            avg_contribution_rate=series(lambda o: o.game_theory.avg_contribution_rate),
            race_to_bottom_risk=race,
            virtuous_cycle_strength=virtuous,
            cooperation_count=series(lambda o: o.game_theory.cooperation_count),
            moderate_count=series(lambda o: o.game_theory.moderate_count),
            defection_count=series(lambda o: o.game_theory.defection_count),
            wellbeing=per_country("wellbeing"),
            shadow_wellbeing=per_country("wellbeing", shadow=True),
            ai_adoption=per_country("ai_adoption"),
            ubi_received=per_country("total_ubi_received"),
            contribution_rate=per_corp("contribution_rate"),
            reputation=per_corp("reputation_score"),
            ai_revenue=per_corp("ai_revenue"),
            history=history,
            milestones=self._milestones(history),
        )

    @staticmethod
    def _milestones(history: List[StepOutput]) -> List[tuple]:
        milestones = []
        milestone_flags = set()

        def mark(month, key, label):
            if key not in milestone_flags:
                milestones.append((month, label))
                milestone_flags.add(key)

        for t, out in enumerate(history[1:], start=1):
            s, g = out.state, out.game_theory
            if s.countries_in_crisis > 0:
                mark(t, "crisis", "First country enters displacement crisis")
            if s.average_wellbeing < 40:
                mark(t, "wb_40", "Average wellbeing falls below 40")
            if g.race_to_bottom_risk > 0.3:
                mark(t, "race", "Race-to-bottom risk exceeds 30%")
            if g.is_in_prisoners_dilemma:
                mark(t, "dilemma", "Corporations caught in a prisoner's dilemma")
            if g.virtuous_cycle_strength > 0.3:
                mark(t, "virtuous", "Virtuous cooperation cycle takes hold")
            if s.global_fund >= 1000:
                mark(t, "fund_1t", "Global UBI fund passes $1T")
        return milestones
