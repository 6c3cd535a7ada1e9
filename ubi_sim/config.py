"""
Configuration for the UBI Transition Simulator.

Defines the model parameters, tuning constants, seed data for countries
and corporations, and named scenario presets for a world in which AI
automation revenue funds a voluntary, corporation-driven universal basic
income.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

CORP_POLICY_PRESETS = ("free-market", "selfish-start", "altruistic-start", "mixed-reality")


@dataclass(frozen=True)
class StepConstants:
    """Hand-tuned coefficients of the monthly step.

    These carry narrative economic justification only; they are exposed
    here so scenarios can vary them rather than treating them as truth.
    """

    # --- Wellbeing ---
    ubi_boost_weight: float = 0.20
    friction_weight: float = 0.12
    ubi_per_capita_scale: float = 10.0  # totalUbi / (population * scale)
    ubi_utility_multiplier: float = 120.0

    # --- Crisis & subsistence ---
    crisis_gap_threshold: float = 0.3  # fraction of monthly wage
    crisis_penalty_cap: float = 5.0
    crisis_penalty_scale: float = 10.0
    subsistence_divisor: float = 25.0  # floor = gdpPerCapita / divisor
    subsistence_adoption_threshold: float = 0.60
    subsistence_penalty: float = 1.5
    thriving_multiple: float = 2.5
    thriving_bonus: float = 2.0

    # --- Shadow baseline ---
    shadow_growth_factor: float = 0.5
    shadow_wage_collapse: float = 0.9
    shadow_friction_multiplier: float = 2.0
    shadow_friction_weight: float = 0.4
    shadow_instability_scale: float = 20.0

    # --- Adaptation ---
    history_capacity: int = 6
    projection_months: int = 12


@dataclass(frozen=True)
class ModelParameters:
    """Immutable configuration for one run."""

    name: str = "Free Market"
    description: str = "Corporations act in self-interest, no central planning."

    # --- AI Dynamics ---
    ai_growth_rate: float = 0.08  # monthly adoption growth driver
    displacement_rate: float = 0.75  # labor income displaced at 100% adoption
    gdp_scaling: float = 0.5  # 0 = flat UBI utility, 1 = skewed to GDP

    # --- Corporate behaviour ---
    market_pressure: float = 0.8  # reserved for custom models, unread by the built-in step
    default_corp_policy: str = "free-market"

    # --- UI-layer company formation ---
    adoption_incentive: float = 0.05

    constants: StepConstants = field(default_factory=StepConstants)

    def __post_init__(self):
        for attr in ("ai_growth_rate", "displacement_rate", "gdp_scaling",
                     "market_pressure", "adoption_incentive"):
            value = getattr(self, attr)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{attr} must be within [0, 1], got {value!r}")
        if self.default_corp_policy not in CORP_POLICY_PRESETS:
            raise ValueError(
                f"default_corp_policy must be one of {CORP_POLICY_PRESETS}, "
                f"got {self.default_corp_policy!r}"
            )


@dataclass(frozen=True)
class CountryProfile:
    """Static description of a country used to seed a world."""

    id: str
    name: str
    population: float  # millions
    gdp_per_capita: float  # USD/year
    gini: float  # 0.2-0.7
    governance: float  # 0-1, institutional quality


@dataclass(frozen=True)
class CorporationProfile:
    """Roster entry for an AI corporation at month 0."""

    id: str
    name: str
    headquarters: str
    operating_countries: Tuple[str, ...]
    market_cap: float  # $billions
    ai_adoption_level: float
    contribution_rate: float
    distribution_strategy: str
    reputation_score: float = 50.0


# Major EU-area headquarters whose corporations share the EU overlay
EU_HQ_COUNTRIES: Tuple[str, ...] = ("DEU", "FRA", "GBR", "ITA", "ESP", "NLD", "SWE", "CHE")

# Gini: World Bank estimates; governance: rough WGI composite rescaled to 0-1
DEFAULT_COUNTRIES: List[CountryProfile] = [
    # North America
    CountryProfile("USA", "United States", 331, 63000, 0.41, 0.78),
    CountryProfile("CAN", "Canada", 38, 43000, 0.33, 0.88),
    CountryProfile("MEX", "Mexico", 128, 8300, 0.45, 0.40),
    # Europe
    CountryProfile("GBR", "United Kingdom", 67, 41000, 0.35, 0.84),
    CountryProfile("FRA", "France", 67, 39000, 0.32, 0.80),
    CountryProfile("DEU", "Germany", 83, 46000, 0.31, 0.88),
    CountryProfile("ITA", "Italy", 60, 31000, 0.35, 0.66),
    CountryProfile("ESP", "Spain", 47, 27000, 0.34, 0.72),
    CountryProfile("NLD", "Netherlands", 17, 52000, 0.28, 0.91),
    CountryProfile("SWE", "Sweden", 10, 51000, 0.29, 0.92),
    CountryProfile("NOR", "Norway", 5, 67000, 0.28, 0.95),
    CountryProfile("CHE", "Switzerland", 8, 86000, 0.33, 0.95),
    CountryProfile("POL", "Poland", 38, 15600, 0.30, 0.68),
    CountryProfile("UKR", "Ukraine", 44, 3700, 0.26, 0.35),
    # Asia
    CountryProfile("CHN", "China", 1400, 12500, 0.38, 0.48),
    CountryProfile("IND", "India", 1380, 2100, 0.36, 0.45),
    CountryProfile("JPN", "Japan", 125, 40000, 0.33, 0.85),
    CountryProfile("KOR", "South Korea", 51, 31000, 0.31, 0.80),
    CountryProfile("VNM", "Vietnam", 97, 2700, 0.36, 0.42),
    CountryProfile("IDN", "Indonesia", 273, 3800, 0.38, 0.45),
    CountryProfile("PAK", "Pakistan", 220, 1100, 0.30, 0.25),
    CountryProfile("BGD", "Bangladesh", 164, 1900, 0.32, 0.30),
    CountryProfile("PHL", "Philippines", 109, 3200, 0.42, 0.40),
    CountryProfile("TUR", "Turkey", 84, 8500, 0.42, 0.38),
    CountryProfile("RUS", "Russia", 144, 10000, 0.36, 0.25),
    # Middle East
    CountryProfile("SAU", "Saudi Arabia", 34, 20000, 0.46, 0.50),
    CountryProfile("IRN", "Iran", 83, 5400, 0.42, 0.22),
    CountryProfile("ISR", "Israel", 9, 43000, 0.39, 0.75),
    # Africa
    CountryProfile("NGA", "Nigeria", 206, 2000, 0.35, 0.22),
    CountryProfile("ZAF", "South Africa", 59, 5000, 0.63, 0.52),
    CountryProfile("EGY", "Egypt", 102, 3500, 0.32, 0.30),
    CountryProfile("ETH", "Ethiopia", 114, 850, 0.35, 0.28),
    CountryProfile("KEN", "Kenya", 53, 1800, 0.41, 0.38),
    CountryProfile("COD", "DR Congo", 89, 550, 0.42, 0.10),
    # South America & Oceania
    CountryProfile("BRA", "Brazil", 212, 6700, 0.53, 0.45),
    CountryProfile("ARG", "Argentina", 45, 8400, 0.42, 0.48),
    CountryProfile("COL", "Colombia", 51, 5300, 0.51, 0.42),
    CountryProfile("AUS", "Australia", 25, 51000, 0.34, 0.90),
    CountryProfile("NZL", "New Zealand", 5, 42000, 0.33, 0.93),
]

_WESTERN_MARKETS = ("USA", "CAN", "GBR", "FRA", "DEU", "ITA", "ESP", "NLD", "AUS", "JPN")
_GLOBAL_MARKETS = _WESTERN_MARKETS + ("MEX", "BRA", "IND", "IDN", "KOR", "ZAF", "NGA", "TUR")

DEFAULT_CORPORATIONS: List[CorporationProfile] = [
    CorporationProfile("nimbus", "Nimbus Systems", "USA", _GLOBAL_MARKETS,
                       2800, 0.70, 0.15, "global", 60),
    CorporationProfile("meridian", "Meridian AI", "USA", _WESTERN_MARKETS + ("IND", "BRA"),
                       1900, 0.65, 0.12, "customer-weighted", 55),
    CorporationProfile("halcyon", "Halcyon Cloud", "USA", ("USA", "CAN", "MEX", "GBR"),
                       1500, 0.55, 0.08, "hq-local", 45),
    CorporationProfile("longwei", "Longwei Intelligence", "CHN", ("CHN", "VNM", "IDN", "PHL", "PAK", "NGA"),
                       1200, 0.60, 0.10, "hq-local", 50),
    CorporationProfile("tianlu", "Tianlu Robotics", "CHN", ("CHN", "IND", "BGD", "EGY", "KEN", "ETH"),
                       800, 0.50, 0.12, "customer-weighted", 50),
    CorporationProfile("kraftwerk", "Kraftwerk Automation", "DEU", ("DEU", "FRA", "ITA", "ESP", "POL", "NLD", "SWE"),
                       600, 0.45, 0.20, "customer-weighted", 65),
    CorporationProfile("albion", "Albion Analytics", "GBR", ("GBR", "USA", "IND", "ZAF", "AUS", "NZL"),
                       400, 0.40, 0.18, "global", 60),
    CorporationProfile("lumiere", "Lumiere Labs", "FRA", ("FRA", "DEU", "ESP", "ITA", "EGY", "NGA"),
                       350, 0.40, 0.25, "global", 70),
    CorporationProfile("alpenrat", "Alpenrat Compute", "CHE", ("CHE", "DEU", "FRA", "ITA", "NOR", "SWE"),
                       300, 0.50, 0.30, "global", 75),
    CorporationProfile("hoshi", "Hoshi Dynamics", "JPN", ("JPN", "KOR", "VNM", "PHL", "IDN", "USA"),
                       700, 0.55, 0.10, "customer-weighted", 50),
    CorporationProfile("hanul", "Hanul Semiconductor", "KOR", ("KOR", "JPN", "CHN", "USA", "VNM"),
                       500, 0.60, 0.06, "hq-local", 40),
    CorporationProfile("vayu", "Vayu Digital", "IND", ("IND", "BGD", "PAK", "KEN", "ETH", "SAU"),
                       250, 0.35, 0.12, "customer-weighted", 55),
]


# Named scenario presets
SCENARIO_PRESETS: Dict[str, ModelParameters] = {
    "Free Market": ModelParameters(),
    "Organic Incentive": ModelParameters(
        name="Organic Incentive",
        description="Prioritizes corporate speed: fast adoption, UBI grows with surplus.",
        ai_growth_rate=0.09,
        gdp_scaling=0.4,
        adoption_incentive=0.30,
    ),
    "Social Stability": ModelParameters(
        name="Social Stability",
        description="Slower growth and generous starting policies to avoid the mid-transition crash.",
        ai_growth_rate=0.04,
        gdp_scaling=0.7,
        displacement_rate=0.60,
        default_corp_policy="altruistic-start",
        adoption_incentive=0.10,
    ),
    "Hyper-Surplus": ModelParameters(
        name="Hyper-Surplus",
        description="Extreme automation speed relying on massive surplus to fund dividends.",
        ai_growth_rate=0.15,
        gdp_scaling=0.2,
        displacement_rate=0.90,
        adoption_incentive=0.50,
    ),
    "Race to the Bottom": ModelParameters(
        name="Race to the Bottom",
        description="Every corporation starts selfish and keeps its UBI at home.",
        default_corp_policy="selfish-start",
        market_pressure=0.3,
    ),
    "Mixed Reality": ModelParameters(
        name="Mixed Reality",
        description="A realistic mix of generous, moderate and selfish corporations.",
        default_corp_policy="mixed-reality",
        market_pressure=0.5,
        gdp_scaling=0.4,
    ),
}


def month_labels(num_months: int, start_year: int = 2025) -> List[str]:
    """Generate month labels like 'Jan 2025', 'Feb 2025', etc."""
    names = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
             "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
    labels = []
    for m in range(num_months + 1):
        year = start_year + m // 12
        labels.append(f"{names[m % 12]} {year}")
    return labels
