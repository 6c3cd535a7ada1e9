"""
Anchor validation scenarios.

Directional invariants any credible configuration of the model should
satisfy. They test causality (which way things move), not magnitudes:

AT-1  Mass displacement with zero UBI must lower wellbeing
AT-2  Generous global UBI keeps wellbeing within 20% of its start
AT-3  An all-selfish population must show race-to-bottom risk
AT-4  Falling demand must push average contributions up
AT-5  Global distribution helps poor countries more than hq-local
AT-6  Money is conserved month by month

A configuration passes when at least four anchors hold.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Sequence

from .config import DEFAULT_COUNTRIES, ModelParameters
from .engine import StepOutput, step
from .state import (
    Corporation,
    DistributionStrategy,
    PolicyStance,
    WorldState,
    build_corporations,
    build_world,
)

logger = logging.getLogger(__name__)

ANCHOR_START_ADOPTION = 0.10
ANCHOR_START_WELLBEING = 70.0
POOR_GDP_PER_CAPITA = 2500
TIER2_MIN_PASSED = 4


@dataclass(frozen=True)
class AnchorSetup:
    displacement_rate: Optional[float] = None
    contribution_rate: Optional[float] = None
    policy_stance: Optional[PolicyStance] = None
    distribution_strategy: Optional[DistributionStrategy] = None


@dataclass(frozen=True)
class AnchorTest:
    id: str
    name: str
    category: str  # causal | equilibrium | consistency
    description: str
    months: int
    setup: AnchorSetup
    check: Optional[Callable[["AnchorTest", "AnchorRun"], "AnchorResult"]]  # None: compares strategies


@dataclass
class AnchorRun:
    initial: WorldState
    history: List[StepOutput]

    @property
    def final(self) -> WorldState:
        return self.history[-1].state if self.history else self.initial


@dataclass
class AnchorResult:
    test_id: str
    test_name: str
    category: str
    passed: bool
    reason: str
    metrics: Dict[str, float] = field(default_factory=dict)


@dataclass
class AnchorSuiteResult:
    passed: int
    total: int
    results: List[AnchorResult]

    @property
    def tier2_passed(self) -> bool:
        return self.passed >= TIER2_MIN_PASSED


def anchor_model(setup: AnchorSetup, base: ModelParameters = None) -> ModelParameters:
    base = base or ModelParameters(gdp_scaling=0.4)
    overrides = {}
    if setup.displacement_rate is not None:
        overrides["displacement_rate"] = setup.displacement_rate
    return replace(base, **overrides) if overrides else base


def anchor_corporations(setup: AnchorSetup) -> List[Corporation]:
    corps = []
    for corp in build_corporations():
        overrides = {}
        if setup.contribution_rate is not None:
            overrides["contribution_rate"] = setup.contribution_rate
        if setup.policy_stance is not None:
            overrides["policy_stance"] = setup.policy_stance
        if setup.distribution_strategy is not None:
            overrides["distribution_strategy"] = setup.distribution_strategy
        corps.append(replace(corp, **overrides))
    return corps


def run_scenario(months: int, setup: AnchorSetup, base: ModelParameters = None) -> AnchorRun:
    model = anchor_model(setup, base)
    state = build_world(
        DEFAULT_COUNTRIES,
        initial_adoption=ANCHOR_START_ADOPTION,
        initial_wellbeing=ANCHOR_START_WELLBEING,
        history_capacity=model.constants.history_capacity,
    )
    initial = state
    corps = anchor_corporations(setup)
    history = []
    for _ in range(months):
        out = step(state, corps, model)
        history.append(out)
        state, corps = out.state, out.corporations
    return AnchorRun(initial=initial, history=history)


def poor_country_wellbeing(state: WorldState) -> float:
    poor = [c.wellbeing for c in state.countries.values() if c.gdp_per_capita < POOR_GDP_PER_CAPITA]
    return sum(poor) / len(poor) if poor else 0.0


def _result(test: AnchorTest, passed: bool, reason: str, **metrics) -> AnchorResult:
    return AnchorResult(test.id, test.name, test.category, passed, reason, metrics)


def _check_dystopia(test, run):
    delta = run.final.average_wellbeing - run.initial.average_wellbeing
    return _result(test, delta < -5, f"Wellbeing changed by {delta:.2f} (expected < -5)",
                   wellbeing_delta=delta)


def _check_generous(test, run):
    ratio = run.final.average_wellbeing / run.initial.average_wellbeing
    return _result(test, ratio >= 0.8, f"Final wellbeing at {ratio * 100:.1f}% of initial (expected >= 80%)",
                   ratio=ratio)


def _check_dilemma(test, run):
    peak = max((o.game_theory.race_to_bottom_risk for o in run.history), default=0.0)
    return _result(test, peak > 0.6, f"Race-to-bottom risk peaked at {peak * 100:.1f}% (expected > 60%)",
                   max_race_to_bottom_risk=peak)


def _check_adaptation(test, run):
    initial = test.setup.contribution_rate
    final = run.history[-1].game_theory.avg_contribution_rate if run.history else initial
    return _result(test, final > initial, f"Average contribution rate {initial:.3f} -> {final:.3f}",
                   initial_rate=initial, final_rate=final)


def _check_conservation(test, run, tolerance=0.01):
    worst = 0.0
    for out in run.history:
        ledger = out.ledger
        accounted = ledger.monthly_outflow + ledger.undistributed
        worst = max(worst, abs(ledger.monthly_inflow - accounted) / max(ledger.monthly_inflow, 1))
    return _result(test, worst <= tolerance, f"Largest monthly imbalance {worst * 100:.3f}% (allowed 1%)",
                   max_imbalance=worst)


def _compare_global_vs_local(test: AnchorTest) -> AnchorResult:
    outcomes = {}
    for strategy in (DistributionStrategy.GLOBAL, DistributionStrategy.HQ_LOCAL):
        setup = replace(test.setup, distribution_strategy=strategy)
        run = run_scenario(test.months, setup)
        outcomes[strategy] = poor_country_wellbeing(run.final)
    global_wb = outcomes[DistributionStrategy.GLOBAL]
    local_wb = outcomes[DistributionStrategy.HQ_LOCAL]
    return _result(test, global_wb > local_wb,
                   f"Poor countries: global {global_wb:.2f} vs hq-local {local_wb:.2f}",
                   global_poor_wellbeing=global_wb, local_poor_wellbeing=local_wb)


ANCHOR_TESTS: List[AnchorTest] = [
    AnchorTest("AT-1", "Displacement Without UBI", "causal",
               "With 85% displacement and zero contributions, wellbeing must fall by more than 5 points.",
               36, AnchorSetup(displacement_rate=0.85, contribution_rate=0.0,
                               policy_stance=PolicyStance.SELFISH),
               _check_dystopia),
    AnchorTest("AT-2", "Generous UBI Prevents Collapse", "causal",
               "40% contributions distributed globally keep wellbeing within 20% of its start.",
               60, AnchorSetup(displacement_rate=0.80, contribution_rate=0.40,
                               distribution_strategy=DistributionStrategy.GLOBAL,
                               policy_stance=PolicyStance.GENEROUS),
               _check_generous),
    AnchorTest("AT-3", "Prisoner's Dilemma Dynamics", "equilibrium",
               "An all-selfish population at 5% must push race-to-bottom risk above 0.6.",
               48, AnchorSetup(contribution_rate=0.05, policy_stance=PolicyStance.SELFISH),
               _check_dilemma),
    AnchorTest("AT-4", "Demand Collapse Triggers Adaptation", "causal",
               "Starting at 10%, the average contribution rate must rise.",
               48, AnchorSetup(contribution_rate=0.10, policy_stance=PolicyStance.MODERATE),
               _check_adaptation),
    AnchorTest("AT-5", "Global Distribution Helps Poor Countries", "equilibrium",
               "Poor countries end with higher wellbeing under global than hq-local distribution.",
               60, AnchorSetup(contribution_rate=0.20, policy_stance=PolicyStance.MODERATE),
               None),
    AnchorTest("AT-6", "Money Conservation", "consistency",
               "Each month inflow equals outflow plus undistributed within 1%.",
               12, AnchorSetup(),
               _check_conservation),
]


def run_anchor_test(test: AnchorTest) -> AnchorResult:
    try:
        if test.check is None:
            result = _compare_global_vs_local(test)
        else:
            result = test.check(test, run_scenario(test.months, test.setup))
    except Exception as e:
        logger.error("Anchor %s raised: %s", test.id, e)
        return _result(test, False, f"Test execution error: {e}")
    logger.info("Anchor %s %s: %s", test.id, "passed" if result.passed else "failed", result.reason)
    return result


def run_anchor_suite(tests: Sequence[AnchorTest] = None) -> AnchorSuiteResult:
    tests = ANCHOR_TESTS if tests is None else tests
    results = [run_anchor_test(t) for t in tests]
    return AnchorSuiteResult(passed=sum(r.passed for r in results), total=len(results), results=results)
