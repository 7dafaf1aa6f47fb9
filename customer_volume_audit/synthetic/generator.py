from __future__ import annotations

import math
import random
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Sequence

from customer_volume_audit.foundation.records import (
    CustomerProfile,
    DeliveryCostRate,
    TransactionRecord,
    ZipLocation,
)
from customer_volume_audit.segmentation.tiers import VOLUME_RANGE_BOUNDARIES

ORDER_TYPES = ("MYCOKE LEGACY", "MYCOKE360", "SALES REP", "CALL CENTER", "EDI", "OTHER")
TRADE_CHANNELS = (
    "FAST CASUAL DINING",
    "COMPREHENSIVE DINING",
    "GENERAL",
    "OTHER DINING & BEVERAGE",
    "OUTDOOR ACTIVITIES",
    "ACADEMIC INSTITUTION",
)
COLD_DRINK_CHANNELS = ("DINING", "GOODS", "EVENT", "BULK TRADE", "WORKPLACE", "ACCOMMODATION")
APPLICABLE_TO = ("Bottles and Cans", "Fountain")
CITIES = (
    ("Kansas", "Johnson", "Overland Park"),
    ("Kentucky", "Jefferson", "Louisville"),
    ("Louisiana", "Webster", "Cotton Valley"),
    ("Maryland", "Baltimore", "Towson"),
    ("Massachusetts", "Essex", "Lynn"),
)


@dataclass(frozen=True)
class DistributorScenario:
    """Configuration for the synthetic distributor dataset.

    Attributes
    ----------
    years: Calendar years to simulate, ascending.
    mean_deliveries_per_year: Average delivery events per active customer-year.
    mean_cases_per_delivery: Average cases per delivery (log-normal).
    volume_variability: Sigma of the log-normal volume draw, in (0, 1].
    fountain_share: Probability a delivery carries fountain gallons.
    missing_rate: Probability a cases/gallons field is left blank.
    yearly_growth_sigma: Spread of the per-customer year-over-year trend.
    churn_rate: Probability a customer is inactive in a given later year.
    local_market_partner_rate: Share of customers flagged as local market partners.
    co2_rate: Share of customers flagged as CO2 customers.
    seed: Optional RNG seed for reproducibility.
    """

    years: Sequence[int] = (2023, 2024)
    mean_deliveries_per_year: float = 12.0
    mean_cases_per_delivery: float = 15.0
    volume_variability: float = 0.8
    fountain_share: float = 0.3
    missing_rate: float = 0.02
    yearly_growth_sigma: float = 0.25
    churn_rate: float = 0.05
    local_market_partner_rate: float = 0.85
    co2_rate: float = 0.4
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.years:
            raise ValueError("Scenario needs at least one year")
        if list(self.years) != sorted(self.years):
            raise ValueError("Scenario years must be ascending")
        for name in ("fountain_share", "missing_rate", "churn_rate",
                     "local_market_partner_rate", "co2_rate"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be a probability in [0, 1]: {value}")


@dataclass(frozen=True)
class DistributorDataset:
    """The four source tables of a synthetic distributor."""

    transactions: List[TransactionRecord]
    profiles: List[CustomerProfile]
    locations: List[ZipLocation]
    delivery_costs: List[DeliveryCostRate]


def _lognormal(rng: random.Random, mean: float, sigma: float) -> float:
    sigma = min(max(sigma, 0.01), 1.0)
    mu = math.log(max(mean, 0.01)) - 0.5 * sigma * sigma
    return math.exp(rng.normalvariate(mu, sigma))


def _poisson(rng: random.Random, lam: float) -> int:
    # Knuth's algorithm; lambdas here stay small
    if lam <= 0:
        return 0
    L = math.exp(-lam)
    k = 0
    p = 1.0
    while p > L:
        k += 1
        p *= rng.random()
    return k - 1


def generate_locations(n: int, *, seed: Optional[int] = None) -> List[ZipLocation]:
    """Generate ``n`` zip code locations spread over a handful of counties."""
    rng = random.Random(seed)
    locations: List[ZipLocation] = []
    for i in range(n):
        state, county, city = CITIES[i % len(CITIES)]
        locations.append(
            ZipLocation(
                zip_code=str(66000 + i),
                city=city,
                state=state,
                county=county,
                latitude=round(rng.uniform(30.0, 42.0), 4),
                longitude=round(rng.uniform(-97.0, -71.0), 4),
            )
        )
    return locations


def generate_delivery_costs(*, seed: Optional[int] = None) -> List[DeliveryCostRate]:
    """Generate a delivery cost schedule covering every channel and volume range.

    Costs fall as the volume range grows, mirroring economies of scale.
    """
    rng = random.Random(seed)
    rates: List[DeliveryCostRate] = []
    for channel in COLD_DRINK_CHANNELS:
        base = rng.uniform(4.0, 9.0)
        for idx, boundary in enumerate(VOLUME_RANGE_BOUNDARIES):
            for applicable_to in APPLICABLE_TO:
                cost = base / (1 + 0.15 * idx)
                if applicable_to == "Fountain":
                    cost *= 0.6
                rates.append(
                    DeliveryCostRate(
                        cold_drink_channel=channel,
                        volume_range=boundary.label,
                        median_delivery_cost=round(cost, 4),
                        applicable_to=applicable_to,
                        cost_type="Per Gallon" if applicable_to == "Fountain" else "Per Case",
                    )
                )
    return rates


def generate_profiles(
    n: int,
    locations: Sequence[ZipLocation],
    scenario: DistributorScenario,
    *,
    seed: Optional[int] = None,
) -> List[CustomerProfile]:
    """Generate ``n`` customer profiles onboarded before the first simulated year."""
    if n <= 0:
        return []
    rng = random.Random(seed)
    first_year = scenario.years[0]
    start = date(first_year - 10, 1, 1)
    span = (date(first_year, 1, 1) - start).days

    profiles: List[CustomerProfile] = []
    for i in range(n):
        onboarding = start + timedelta(days=rng.randrange(span))
        first_delivery = onboarding + timedelta(days=rng.randrange(1, 60))
        zip_code = rng.choice(locations).zip_code if locations else None
        profiles.append(
            CustomerProfile(
                customer_id=str(500000000 + i),
                zip_code=zip_code,
                onboarding_date=onboarding,
                first_delivery_date=first_delivery,
                trade_channel=rng.choice(TRADE_CHANNELS),
                sub_trade_channel=None,
                cold_drink_channel=rng.choice(COLD_DRINK_CHANNELS),
                local_market_partner=rng.random() < scenario.local_market_partner_rate,
                co2_customer=rng.random() < scenario.co2_rate,
                frequent_order_type=rng.choice(ORDER_TYPES),
                primary_group_number=None,
            )
        )
    return profiles


def generate_transactions(
    profiles: Sequence[CustomerProfile],
    scenario: DistributorScenario,
    *,
    seed: Optional[int] = None,
) -> List[TransactionRecord]:
    """Generate delivery events for every profile across the scenario years.

    Each customer gets a base size and a personal year-over-year trend, so
    the population contains growing, shrinking and churned accounts.
    """
    rng = random.Random(seed)
    transactions: List[TransactionRecord] = []
    for profile in profiles:
        size = _lognormal(rng, 1.0, scenario.volume_variability)
        trend = rng.normalvariate(0.0, scenario.yearly_growth_sigma)
        preferred = profile.frequent_order_type or rng.choice(ORDER_TYPES)
        for year_idx, year in enumerate(scenario.years):
            if year_idx > 0 and rng.random() < scenario.churn_rate:
                continue
            multiplier = size * math.exp(trend * year_idx)
            n_deliveries = max(1, _poisson(rng, scenario.mean_deliveries_per_year * multiplier))
            for _ in range(n_deliveries):
                cases: Optional[float] = round(
                    _lognormal(rng, scenario.mean_cases_per_delivery, scenario.volume_variability),
                    1,
                )
                gallons: Optional[float] = 0.0
                if rng.random() < scenario.fountain_share:
                    gallons = round(_lognormal(rng, 10.0, scenario.volume_variability), 1)
                if rng.random() < scenario.missing_rate:
                    cases = None
                if rng.random() < scenario.missing_rate:
                    gallons = None
                order_type = preferred if rng.random() < 0.7 else rng.choice(ORDER_TYPES)
                transactions.append(
                    TransactionRecord(
                        customer_id=profile.customer_id,
                        year=year,
                        order_type=order_type,
                        delivered_cases=cases,
                        delivered_gallons=gallons,
                        transaction_date=date(year, 1, 1) + timedelta(days=rng.randrange(365)),
                    )
                )
    return transactions


def generate_distributor_dataset(
    n_customers: int,
    scenario: Optional[DistributorScenario] = None,
    *,
    n_locations: int = 20,
) -> DistributorDataset:
    """Generate all four source tables from one scenario.

    Example
    -------
    >>> data = generate_distributor_dataset(200, DistributorScenario(seed=7))
    >>> result = run_segmentation(data.transactions, data.profiles,
    ...                           data.locations, data.delivery_costs)
    """
    scenario = scenario or DistributorScenario()
    seed = scenario.seed
    locations = generate_locations(n_locations, seed=seed)
    profiles = generate_profiles(n_customers, locations, scenario, seed=seed)
    return DistributorDataset(
        transactions=generate_transactions(
            profiles, scenario, seed=None if seed is None else seed + 1
        ),
        profiles=profiles,
        locations=locations,
        delivery_costs=generate_delivery_costs(seed=seed),
    )
