"""
Aggregate stance of the corporate population.

Detects a race to the bottom (defection becoming self-reinforcing once
more than 40% defect) versus a virtuous cycle (cooperation reinforcing
once more than 60% cooperate).
"""

from typing import Sequence

from .state import Corporation, GameTheoryState, PolicyStance, clamp

DEFECTION_THRESHOLD = 0.4
COOPERATION_THRESHOLD = 0.6
DILEMMA_RISK = 0.3


def analyze(corporations: Sequence[Corporation]) -> GameTheoryState:
    total = len(corporations)
    if total == 0:
        return GameTheoryState()

    defectors = sum(1 for c in corporations if c.policy_stance is PolicyStance.SELFISH)
    cooperators = sum(1 for c in corporations if c.policy_stance is PolicyStance.GENEROUS)
    moderates = sum(1 for c in corporations if c.policy_stance is PolicyStance.MODERATE)
    avg_rate = sum(c.contribution_rate for c in corporations) / total

    race = max(0.0, defectors - DEFECTION_THRESHOLD * total) / ((1 - DEFECTION_THRESHOLD) * total)
    virtuous = max(0.0, cooperators - COOPERATION_THRESHOLD * total) / ((1 - COOPERATION_THRESHOLD) * total)
    race = clamp(race, 0.0, 1.0)
    virtuous = clamp(virtuous, 0.0, 1.0)

    return GameTheoryState(
        is_in_prisoners_dilemma=race > DILEMMA_RISK and virtuous < DILEMMA_RISK,
        defection_count=defectors,
        cooperation_count=cooperators,
        moderate_count=moderates,
        race_to_bottom_risk=race,
        virtuous_cycle_strength=virtuous,
        avg_contribution_rate=avg_rate,
    )


def classify_outcome(game_theory: GameTheoryState) -> str:
    """Label a run by its final game-theory state."""
    if game_theory.virtuous_cycle_strength > DILEMMA_RISK:
        return "virtuous-cycle"
    if game_theory.race_to_bottom_risk >= 0.6:
        return "race-to-bottom"
    if game_theory.is_in_prisoners_dilemma:
        return "prisoners-dilemma"
    return "mixed"
