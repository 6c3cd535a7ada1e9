"""
World state for the UBI transition model.

Every record here is an immutable value. A monthly step never edits the
caller's objects; it builds new records with ``dataclasses.replace`` so a
history of snapshots can be kept and rewound safely.

Countries and corporations are keyed by stable string ids. Operating
countries are kept as ordered tuples so iteration (and therefore
floating-point summation order) is identical across runs.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import (
    CountryProfile,
    CorporationProfile,
    DEFAULT_COUNTRIES,
    DEFAULT_CORPORATIONS,
)

MIN_ADOPTION = 0.01
MAX_ADOPTION = 0.999
MIN_WELLBEING = 1.0
MAX_WELLBEING = 100.0
MIN_CONTRIBUTION = 0.05
MAX_CONTRIBUTION = 0.50


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class DistributionStrategy(Enum):
    """How a corporation routes its UBI contribution."""

    GLOBAL = "global"
    CUSTOMER_WEIGHTED = "customer-weighted"
    HQ_LOCAL = "hq-local"


class PolicyStance(Enum):
    GENEROUS = "generous"
    MODERATE = "moderate"
    SELFISH = "selfish"


class CorpPolicyPreset(Enum):
    """Starting corporate policy applied to a roster before month 0."""

    FREE_MARKET = "free-market"
    SELFISH_START = "selfish-start"
    ALTRUISTIC_START = "altruistic-start"
    MIXED_REALITY = "mixed-reality"


def stance_for_rate(contribution_rate: float) -> PolicyStance:
    if contribution_rate >= 0.25:
        return PolicyStance.GENEROUS
    if contribution_rate >= 0.12:
        return PolicyStance.MODERATE
    return PolicyStance.SELFISH


@dataclass(frozen=True)
class WellbeingHistory:
    """Fixed-capacity ring buffer of trailing monthly wellbeing values.

    ``push`` returns a new buffer; once full the oldest value is
    overwritten. ``first``/``last`` are O(1), which is all the trend
    extrapolation needs.
    """

    capacity: int = 6
    slots: Tuple[float, ...] = ()
    head: int = 0  # slot the next value is written to
    size: int = 0

    @classmethod
    def of(cls, values: Iterable[float], capacity: int = 6) -> "WellbeingHistory":
        history = cls(capacity=capacity)
        for v in values:
            history = history.push(v)
        return history

    def push(self, value: float) -> "WellbeingHistory":
        slots = list(self.slots) if self.slots else [0.0] * self.capacity
        slots[self.head] = value
        return replace(
            self,
            slots=tuple(slots),
            head=(self.head + 1) % self.capacity,
            size=min(self.size + 1, self.capacity),
        )

    def __len__(self) -> int:
        return self.size

    @property
    def first(self) -> Optional[float]:
        if self.size == 0:
            return None
        return self.slots[(self.head - self.size) % self.capacity]

    @property
    def last(self) -> Optional[float]:
        if self.size == 0:
            return None
        return self.slots[(self.head - 1) % self.capacity]

    def values(self) -> List[float]:
        """Oldest to newest."""
        start = self.head - self.size
        return [self.slots[(start + i) % self.capacity] for i in range(self.size)]

    def is_declining(self) -> bool:
        return self.size >= 2 and self.last < self.first

    def extrapolate(self, months_ahead: int, default: float = 50.0) -> float:
        """Linear projection of the trailing trend, clamped to [0, 100]."""
        if self.size == 0:
            return default
        if self.size < 2:
            return self.last
        monthly_change = (self.last - self.first) / self.size
        return clamp(self.last + monthly_change * months_ahead, 0.0, 100.0)


@dataclass(frozen=True)
class CountryState:
    id: str
    name: str
    population: float  # millions
    gdp_per_capita: float
    gini: float
    governance: float
    ai_adoption: float
    wellbeing: float
    wellbeing_history: WellbeingHistory = field(default_factory=WellbeingHistory)
    displacement_gap: float = 0.0
    ubi_received_global: float = 0.0
    ubi_received_local: float = 0.0
    ubi_received_customer_weighted: float = 0.0
    total_ubi_received: float = 0.0
    companies_joined: int = 0

    @property
    def monthly_wage(self) -> float:
        return self.gdp_per_capita / 12

    @property
    def regional_modifier(self) -> float:
        # Richer markets adopt faster
        return 1 + self.gdp_per_capita / 100000


@dataclass(frozen=True)
class Corporation:
    id: str
    name: str
    headquarters: str
    operating_countries: Tuple[str, ...]
    market_cap: float  # $billions
    ai_adoption_level: float
    contribution_rate: float
    distribution_strategy: DistributionStrategy
    policy_stance: PolicyStance
    reputation_score: float = 50.0
    ai_revenue: float = 0.0  # $billions this month
    customer_base_wellbeing: float = 50.0
    projected_demand_collapse: float = 0.0
    last_policy_change: Optional[int] = None

    def shares_market_with(self, other: "Corporation") -> bool:
        return any(c in other.operating_countries for c in self.operating_countries)


@dataclass(frozen=True)
class GlobalLedger:
    """Per-month accounting of corporate UBI contributions.

    ``total_funds`` is the running accumulated fund and only grows;
    everything else is recomputed from zero each month. Every month
    ``monthly_inflow == monthly_outflow + undistributed``.
    """

    total_funds: float = 0.0
    global_pool: float = 0.0
    monthly_inflow: float = 0.0
    monthly_outflow: float = 0.0
    funds_per_capita: float = 0.0
    undistributed: float = 0.0
    funds_by_country: Dict[str, float] = field(default_factory=dict)
    contributor_breakdown: Dict[str, float] = field(default_factory=dict)
    distribution_breakdown: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class GameTheoryState:
    is_in_prisoners_dilemma: bool = False
    defection_count: int = 0
    cooperation_count: int = 0
    moderate_count: int = 0
    race_to_bottom_risk: float = 0.0
    virtuous_cycle_strength: float = 0.0
    avg_contribution_rate: float = 0.0


@dataclass(frozen=True)
class WorldState:
    month: int
    countries: Dict[str, CountryState]
    shadow_countries: Dict[str, CountryState]
    global_fund: float = 0.0
    average_wellbeing: float = 50.0
    shadow_average_wellbeing: float = 50.0
    total_ai_companies: int = 0
    global_displacement_gap: float = 0.0
    countries_in_crisis: int = 0

    @property
    def world_population(self) -> float:
        return sum(c.population for c in self.countries.values())


def seed_wellbeing(gdp_per_capita: float) -> float:
    """Starting wellbeing: richer countries start happier."""
    return clamp(gdp_per_capita / 1200 + 40, 10.0, 100.0)


def build_world(
    profiles: Sequence[CountryProfile] = None,
    initial_adoption: float = MIN_ADOPTION,
    initial_wellbeing: float = None,
    history_capacity: int = 6,
) -> WorldState:
    """Construct the month-0 world with a zero fund."""
    profiles = DEFAULT_COUNTRIES if profiles is None else profiles
    countries: Dict[str, CountryState] = {}
    for p in profiles:
        wellbeing = seed_wellbeing(p.gdp_per_capita) if initial_wellbeing is None else initial_wellbeing
        wellbeing = clamp(wellbeing, MIN_WELLBEING, MAX_WELLBEING)
        countries[p.id] = CountryState(
            id=p.id,
            name=p.name,
            population=p.population,
            gdp_per_capita=p.gdp_per_capita,
            gini=p.gini,
            governance=p.governance,
            ai_adoption=clamp(initial_adoption, MIN_ADOPTION, MAX_ADOPTION),
            wellbeing=wellbeing,
            wellbeing_history=WellbeingHistory.of([wellbeing], history_capacity),
        )
    average = sum(c.wellbeing for c in countries.values()) / len(countries) if countries else 50.0
    return WorldState(
        month=0,
        countries=countries,
        shadow_countries=dict(countries),
        average_wellbeing=average,
        shadow_average_wellbeing=average,
    )


# (rate, strategy) templates cycled by roster index under mixed-reality
_MIXED_TEMPLATES = (
    (0.30, DistributionStrategy.GLOBAL),
    (0.15, DistributionStrategy.CUSTOMER_WEIGHTED),
    (0.05, DistributionStrategy.HQ_LOCAL),
)


def build_corporations(
    profiles: Sequence[CorporationProfile] = None,
    policy: str = "free-market",
) -> List[Corporation]:
    """Turn roster profiles into corporations under a starting policy."""
    profiles = DEFAULT_CORPORATIONS if profiles is None else profiles
    preset = CorpPolicyPreset(policy)
    corps = []
    for i, p in enumerate(profiles):
        rate = p.contribution_rate
        strategy = DistributionStrategy(p.distribution_strategy)
        if preset is CorpPolicyPreset.SELFISH_START:
            rate, strategy = MIN_CONTRIBUTION, DistributionStrategy.HQ_LOCAL
        elif preset is CorpPolicyPreset.ALTRUISTIC_START:
            rate, strategy = 0.30, DistributionStrategy.GLOBAL
        elif preset is CorpPolicyPreset.MIXED_REALITY:
            rate, strategy = _MIXED_TEMPLATES[i % len(_MIXED_TEMPLATES)]
        corps.append(Corporation(
            id=p.id,
            name=p.name,
            headquarters=p.headquarters,
            operating_countries=tuple(dict.fromkeys(p.operating_countries)),
            market_cap=p.market_cap,
            ai_adoption_level=p.ai_adoption_level,
            contribution_rate=rate,
            distribution_strategy=strategy,
            policy_stance=stance_for_rate(rate),
            reputation_score=p.reputation_score,
        ))
    return corps
