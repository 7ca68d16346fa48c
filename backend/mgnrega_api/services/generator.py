"""
Placeholder MGNREGA records for when no real source is reachable.

Shape is fixed (every district x 2022-2024 x 12 months); magnitudes are
district base values scaled by yearly growth and season, then jittered.
Every metric comes out non-zero so the dashboard never renders blank.
"""
import random
from datetime import datetime, timezone

from mgnrega_api.models.record import METRIC_FIELDS, MgnregaRecord

YEARS = range(2022, 2025)
MONTHS = range(1, 13)
BASE_YEAR = 2022
YEARLY_GROWTH = 0.15
JITTER = (0.9, 1.1)

NORTH_GOA = "North Goa"
SOUTH_GOA = "South Goa"

DISTRICT_BASES = {
    NORTH_GOA: {
        "person_days": 8200,
        "households": 410,
        "funds_spent": 820000.0,
        "works_completed": 46,
        "average_wage": 315.0,
        "women_participation": 41.0,
    },
    SOUTH_GOA: {
        "person_days": 6600,
        "households": 330,
        "funds_spent": 655000.0,
        "works_completed": 37,
        "average_wage": 322.0,
        "women_participation": 44.5,
    },
}

INTEGER_FIELDS = {"person_days", "households", "works_completed"}


def season_factor(month):
    if 4 <= month <= 8:
        return 1.1
    if month in (11, 12, 1, 2):
        return 0.95
    return 1.0


def growth_factor(year):
    return 1 + YEARLY_GROWTH * (year - BASE_YEAR)


def base_profile(district):
    if "south" in district.lower():
        return DISTRICT_BASES[SOUTH_GOA]
    return DISTRICT_BASES[NORTH_GOA]


class MockDataGenerator:
    def __init__(self, rng=None):
        self.rng = rng or random.Random()

    def default_districts(self):
        return list(DISTRICT_BASES)

    def _value(self, name, base, year, month):
        value = base * growth_factor(year) * season_factor(month) * self.rng.uniform(*JITTER)
        if name in INTEGER_FIELDS:
            return max(1, int(round(value)))
        if name == "women_participation":
            value = min(value, 100.0)
        return max(0.01, round(value, 2))

    def _series(self, district, profile, fetched_at):
        records = []
        for year in YEARS:
            for month in MONTHS:
                metrics = {
                    name: self._value(name, profile[name], year, month)
                    for name in METRIC_FIELDS
                }
                records.append(MgnregaRecord(
                    district=district,
                    month=month,
                    year=year,
                    fetched_at=fetched_at,
                    **metrics,
                ))
        return records

    def generate_all(self):
        fetched_at = datetime.now(timezone.utc)
        records = []
        for district, profile in DISTRICT_BASES.items():
            records.extend(self._series(district, profile, fetched_at))
        return records

    def generate_for_district(self, name):
        return self._series(name, base_profile(name), datetime.now(timezone.utc))
