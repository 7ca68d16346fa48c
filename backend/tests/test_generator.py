import random

import pytest

from mgnrega_api.models.record import METRIC_FIELDS
from mgnrega_api.services.generator import (
    DISTRICT_BASES,
    MockDataGenerator,
    base_profile,
    growth_factor,
    season_factor,
)


def test_generate_all_shape(rng):
    records = MockDataGenerator(rng).generate_all()

    assert len(records) == 72
    assert {r.district for r in records} == {"North Goa", "South Goa"}
    assert {r.year for r in records} == {2022, 2023, 2024}
    assert {r.month for r in records} == set(range(1, 13))
    assert len({r.key for r in records}) == 72


def test_generated_metrics_are_never_zero():
    # unlucky jitter at the low end must still stay positive
    low = MockDataGenerator(random.Random(0))
    low.rng.uniform = lambda a, b: a
    for record in low.generate_all() + low.generate_for_district("Anything"):
        for name in METRIC_FIELDS:
            assert getattr(record, name) > 0, name


def test_women_participation_is_a_percentage(rng):
    high = MockDataGenerator(rng)
    high.rng.uniform = lambda a, b: b
    assert all(r.women_participation <= 100 for r in high.generate_all())


def test_generate_for_district_uses_exact_name(rng):
    records = MockDataGenerator(rng).generate_for_district("south goa")
    assert len(records) == 36
    assert {r.district for r in records} == {"south goa"}


def test_seeded_generators_are_reproducible():
    a = MockDataGenerator(random.Random(7)).generate_all()
    b = MockDataGenerator(random.Random(7)).generate_all()
    assert [r.person_days for r in a] == [r.person_days for r in b]


def test_base_profile_branches_on_south():
    assert base_profile("South Goa") is DISTRICT_BASES["South Goa"]
    assert base_profile("SOUTHERN district") is DISTRICT_BASES["South Goa"]
    assert base_profile("North Goa") is DISTRICT_BASES["North Goa"]
    assert base_profile("Somewhere") is DISTRICT_BASES["North Goa"]


@pytest.mark.parametrize(
    "month, factor",
    [(1, 0.95), (2, 0.95), (3, 1.0), (4, 1.1), (8, 1.1), (9, 1.0), (10, 1.0), (11, 0.95), (12, 0.95)],
)
def test_season_factor(month, factor):
    assert season_factor(month) == factor


def test_growth_factor():
    assert growth_factor(2022) == 1
    assert growth_factor(2024) == pytest.approx(1.3)


def test_values_follow_growth_and_season_without_jitter():
    gen = MockDataGenerator(random.Random(1))
    gen.rng.uniform = lambda a, b: 1.0
    by_key = {r.key: r for r in gen.generate_for_district("North Goa")}

    base = DISTRICT_BASES["North Goa"]["person_days"]
    assert by_key[("North Goa", 3, 2022)].person_days == base
    assert by_key[("North Goa", 6, 2024)].person_days == round(base * 1.3 * 1.1)
    assert by_key[("North Goa", 10, 2023)].person_days == round(base * 1.15)
    assert by_key[("North Goa", 12, 2022)].households < DISTRICT_BASES["North Goa"]["households"]
