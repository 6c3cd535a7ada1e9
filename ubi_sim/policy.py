"""
Corporate policy adaptation.

Implements enlightened self-interest in a repeated game: corporations
watch where their customers' wellbeing is heading, what competitors in
the same markets contribute, and how their own reputation compares.

Per corporation, in order:

1. Project demand collapse 12 months ahead from wellbeing trends
2. Self-interest trigger (collapse > 15%): contribute more, stop hoarding
3. Reputation trigger (reputation < 30): contribute more
4. Relaxation (stable demand, strong reputation): drift down slightly
5. Competitor response (Nash dynamics within shared markets)
6. Reputation update relative to the population-wide average
7. Regional overlays, each gated on headquarters country

Corporations are adapted in list order and each sees the peers already
adapted earlier in the same month.
"""

from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .config import EU_HQ_COUNTRIES, ModelParameters
from .state import (
    CountryState,
    Corporation,
    DistributionStrategy,
    MAX_CONTRIBUTION,
    MIN_CONTRIBUTION,
    PolicyStance,
    clamp,
    stance_for_rate,
)

OverlayRule = Callable[[Corporation, Dict[str, CountryState]], Corporation]

COLLAPSE_TRIGGER = 0.15
COLLAPSE_STABLE = 0.05
LOW_REPUTATION = 30
HIGH_REPUTATION = 70
COMPETITOR_GAP = 0.10


def project_demand_collapse(
    corp: Corporation,
    countries: Dict[str, CountryState],
    months_ahead: int = 12,
) -> float:
    """Fractional drop in customer demand implied by current wellbeing trends."""
    current = 0.0
    projected = 0.0
    for cid in corp.operating_countries:
        country = countries.get(cid)
        if country is None:
            continue
        spend = country.population * country.gdp_per_capita
        current += spend * (country.wellbeing / 100)
        future = country.wellbeing_history.extrapolate(months_ahead, default=country.wellbeing)
        projected += spend * (future / 100)
    if current <= 0:
        return 0.0
    return max(0.0, (current - projected) / current)


def apply_market_triggers(corp: Corporation, collapse: float, month: int) -> Corporation:
    rate = corp.contribution_rate
    strategy = corp.distribution_strategy
    stance = corp.policy_stance
    last_change = corp.last_policy_change

    if collapse > COLLAPSE_TRIGGER:
        # Poor customers mean lost revenue: fund them
        rate = min(MAX_CONTRIBUTION, rate + 0.02)
        if strategy is DistributionStrategy.HQ_LOCAL:
            strategy = DistributionStrategy.CUSTOMER_WEIGHTED
        stance = PolicyStance.GENEROUS
        last_change = month

    if corp.reputation_score < LOW_REPUTATION:
        rate = min(MAX_CONTRIBUTION, rate + 0.01)

    if collapse < COLLAPSE_STABLE and corp.reputation_score > HIGH_REPUTATION:
        rate = max(MIN_CONTRIBUTION, rate - 0.005)

    return replace(
        corp,
        contribution_rate=rate,
        distribution_strategy=strategy,
        policy_stance=stance,
        projected_demand_collapse=collapse,
        last_policy_change=last_change,
    )


def respond_to_competitors(corp: Corporation, peers: Sequence[Corporation]) -> Corporation:
    competitors = [c for c in peers if c.id != corp.id and c.shares_market_with(corp)]
    if not competitors:
        return corp

    avg_rate = sum(c.contribution_rate for c in competitors) / len(competitors)
    diff = avg_rate - corp.contribution_rate
    if diff >= COMPETITOR_GAP:
        # Competitors are more generous: reputation pressure to catch up
        return replace(
            corp,
            reputation_score=max(0.0, corp.reputation_score - 2),
            contribution_rate=min(MAX_CONTRIBUTION, corp.contribution_rate + 0.01),
        )
    if diff <= -COMPETITOR_GAP:
        return replace(corp, reputation_score=min(100.0, corp.reputation_score + 1))
    return corp


def update_reputation(corp: Corporation, peers: Sequence[Corporation]) -> Corporation:
    if not peers:
        return corp
    avg_rate = sum(c.contribution_rate for c in peers) / len(peers)
    score = corp.reputation_score
    if corp.contribution_rate > avg_rate * 1.2:
        score = min(100.0, score + 2)
    elif corp.contribution_rate < avg_rate * 0.8:
        score = max(0.0, score - 3)
    elif score > 50:
        score = max(50.0, score - 0.5)
    elif score < 50:
        score = min(50.0, score + 0.5)
    return replace(corp, reputation_score=score)


@dataclass(frozen=True)
class RegionalOverlay:
    """Headquarters-gated policy pressure from regional wellbeing.

    Regional wellbeing is the average over the member countries present in
    the world; a region with no members present leaves the corporation
    untouched.
    """

    name: str
    hq_countries: Tuple[str, ...]
    crisis_below: Optional[float] = None  # -> hq-local / selfish
    concern_below: Optional[float] = None  # global -> customer-weighted
    require_decline: bool = False
    recover_above: Optional[float] = None  # hq-local -> customer-weighted / moderate
    generosity_above: Optional[float] = None
    generosity_rate_cap: float = 0.20

    def regional_wellbeing(self, countries: Dict[str, CountryState]) -> Optional[float]:
        members = [countries[c] for c in self.hq_countries if c in countries]
        if not members:
            return None
        return sum(m.wellbeing for m in members) / len(members)

    def is_declining(self, countries: Dict[str, CountryState]) -> bool:
        members = [countries[c] for c in self.hq_countries if c in countries]
        histories = [m.wellbeing_history for m in members if len(m.wellbeing_history) >= 2]
        if not histories:
            return False
        return sum(h.last for h in histories) < sum(h.first for h in histories)

    def __call__(self, corp: Corporation, countries: Dict[str, CountryState]) -> Corporation:
        if corp.headquarters not in self.hq_countries:
            return corp
        wellbeing = self.regional_wellbeing(countries)
        if wellbeing is None:
            return corp

        strategy = corp.distribution_strategy
        stance = corp.policy_stance
        rate = corp.contribution_rate

        stressed = not self.require_decline or self.is_declining(countries)
        if stressed and self.crisis_below is not None and wellbeing < self.crisis_below:
            strategy = DistributionStrategy.HQ_LOCAL
            stance = PolicyStance.SELFISH
        elif (stressed and self.concern_below is not None and wellbeing < self.concern_below
              and strategy is DistributionStrategy.GLOBAL):
            strategy = DistributionStrategy.CUSTOMER_WEIGHTED

        if (self.recover_above is not None and wellbeing > self.recover_above
                and strategy is DistributionStrategy.HQ_LOCAL):
            strategy = DistributionStrategy.CUSTOMER_WEIGHTED
            stance = PolicyStance.MODERATE

        if (self.generosity_above is not None and wellbeing > self.generosity_above
                and rate < self.generosity_rate_cap):
            rate = min(MAX_CONTRIBUTION, rate + 0.01)

        return replace(corp, distribution_strategy=strategy, policy_stance=stance, contribution_rate=rate)


US_OVERLAY = RegionalOverlay(
    name="United States",
    hq_countries=("USA",),
    crisis_below=30,
    concern_below=50,
    require_decline=True,
    recover_above=70,
)

CHINA_OVERLAY = RegionalOverlay(
    name="China",
    hq_countries=("CHN",),
    crisis_below=40,
    concern_below=60,
)

EU_OVERLAY = RegionalOverlay(
    name="European Union",
    hq_countries=EU_HQ_COUNTRIES,
    concern_below=40,
    generosity_above=65,
)

REGIONAL_OVERLAYS: Tuple[OverlayRule, ...] = (US_OVERLAY, CHINA_OVERLAY, EU_OVERLAY)


def adapt_corporation(
    corp: Corporation,
    peers: Sequence[Corporation],
    countries: Dict[str, CountryState],
    month: int,
    model: ModelParameters,
    overlays: Sequence[OverlayRule] = REGIONAL_OVERLAYS,
) -> Corporation:
    before = corp
    collapse = project_demand_collapse(corp, countries, model.constants.projection_months)
    corp = apply_market_triggers(corp, collapse, month)
    corp = respond_to_competitors(corp, peers)
    # Population average counts this corporation at its current rate
    current = [corp if p.id == corp.id else p for p in peers]
    corp = update_reputation(corp, current)
    for overlay in overlays:
        corp = overlay(corp, countries)

    rate = clamp(corp.contribution_rate, MIN_CONTRIBUTION, MAX_CONTRIBUTION)
    last_change = corp.last_policy_change
    if rate != before.contribution_rate or corp.distribution_strategy is not before.distribution_strategy:
        last_change = month
    return replace(
        corp,
        contribution_rate=rate,
        reputation_score=clamp(corp.reputation_score, 0.0, 100.0),
        policy_stance=stance_for_rate(rate),
        last_policy_change=last_change,
    )


def adapt_corporations(
    corporations: List[Corporation],
    countries: Dict[str, CountryState],
    month: int,
    model: ModelParameters,
    overlays: Sequence[OverlayRule] = REGIONAL_OVERLAYS,
) -> List[Corporation]:
    """Adaptation phase for the whole population, in list order."""
    adapted = list(corporations)
    for i, corp in enumerate(adapted):
        adapted[i] = adapt_corporation(corp, adapted, countries, month, model, overlays)
    return adapted
