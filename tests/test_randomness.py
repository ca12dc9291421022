import random
from datetime import datetime, timedelta, timezone

import pytest

from event_datagen.exceptions import EmptyInputError, InvalidConfigurationError
from event_datagen.randomness import (
    BoundedRange,
    check_ratio,
    now_with_random_offset,
    random_int,
    random_item,
    random_uuid,
    should_do,
)


def test_zero_ratio_is_never_true(rng):
    assert not any(should_do(0.0, rng) for _ in range(1000))


def test_full_ratio_is_always_true(rng):
    assert all(should_do(1.0, rng) for _ in range(1000))


def test_ratio_is_reproducible_with_seed():
    first = [should_do(0.5, random.Random(7)) for _ in range(20)]
    second = [should_do(0.5, random.Random(7)) for _ in range(20)]
    assert first == second


@pytest.mark.parametrize('ratio', [-0.1, 1.5])
def test_check_ratio_rejects_out_of_range(ratio):
    with pytest.raises(InvalidConfigurationError):
        check_ratio('ratio', ratio)


def test_bounded_range_samples_stay_inside_and_hit_both_ends(rng):
    bounds = BoundedRange(3, 7)
    samples = [bounds.sample(rng) for _ in range(10000)]
    assert all(3 <= s <= 7 for s in samples)
    assert 3 in samples
    assert 7 in samples


def test_bounded_range_with_equal_ends(rng):
    assert {BoundedRange(4, 4).sample(rng) for _ in range(100)} == {4}


def test_bounded_range_rejects_min_above_max():
    with pytest.raises(InvalidConfigurationError):
        BoundedRange(5, 2)


def test_bounded_range_contains():
    assert 2 in BoundedRange(1, 3)
    assert 4 not in BoundedRange(1, 3)


def test_random_int_validates_bounds(rng):
    assert random_int(1, 1, rng) == 1
    with pytest.raises(InvalidConfigurationError):
        random_int(2, 1, rng)


def test_random_item_picks_from_list(rng):
    items = ['a', 'b', 'c']
    assert {random_item(items, rng) for _ in range(200)} == set(items)


def test_random_item_rejects_empty_list(rng):
    with pytest.raises(EmptyInputError):
        random_item([], rng)


def test_now_with_random_offset_stays_within_max(rng):
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for _ in range(100):
        jittered = now_with_random_offset(10, rng, now)
        assert now <= jittered <= now + timedelta(seconds=10)


def test_random_uuid_is_reproducible():
    assert random_uuid(random.Random(1)) == random_uuid(random.Random(1))
    assert random_uuid(random.Random(1)) != random_uuid(random.Random(2))
