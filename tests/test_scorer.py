import logging

import pytest

from address_reconcile.components import AddressRecord
from address_reconcile.scorer import nearest_record, numbers_match, planar_distance, select_nearest


def at(x, y, house="1", **extra):
    return AddressRecord(point=(x, y), house_number=house, **extra)


def test_planar_distance_is_rounded_euclidean():
    assert planar_distance((0.0, 0.0), (3.0, 4.0)) == 5.0
    assert planar_distance((16.0, 49.0), (16.0001, 49.0001)) == 0.0001414


def test_select_nearest_picks_candidate_within_tolerance():
    anchor = at(0.0, 0.0)
    near = at(0.002, 0.0)
    far = at(0.02, 0.0)

    selection = select_nearest(anchor, [far, near], tolerance=0.01)

    assert selection.accepted
    assert selection.candidate is near
    assert selection.distance == 0.002


def test_select_nearest_rejects_when_nearest_is_too_far(caplog):
    anchor = at(0.0, 0.0, street="Main")
    candidate = at(0.02, 0.0, street="Main")

    with caplog.at_level(logging.INFO, logger="address_reconcile.scorer"):
        selection = select_nearest(anchor, [candidate], tolerance=0.01)

    assert not selection.accepted
    assert selection.candidate is None
    assert selection.distance == 0.02
    assert "0.0200000 is over the limit 0.0100000" in caplog.text


def test_select_nearest_accepts_distance_equal_to_tolerance():
    selection = select_nearest(at(0.0, 0.0), [at(0.01, 0.0)], tolerance=0.01)
    assert selection.accepted


def test_select_nearest_first_wins_on_tie():
    anchor = at(0.0, 0.0)
    first = at(0.0, 0.001)
    second = at(0.0, -0.001)

    assert select_nearest(anchor, [first, second], 0.01).candidate is first
    assert select_nearest(anchor, [second, first], 0.01).candidate is second


def test_select_nearest_requires_candidates():
    with pytest.raises(ValueError):
        select_nearest(at(0.0, 0.0), [], 0.01)


def test_numbers_match_on_house_number():
    assert numbers_match(at(0, 0, house="12"), at(0, 0, house="12"))
    assert not numbers_match(at(0, 0, house="12"), at(0, 0, house="12a"))


def test_numbers_match_on_conscription_and_provisional_numbers():
    registry = at(0, 0, house="450/3", conscription_number="450")
    assert numbers_match(registry, at(0, 0, house="450", conscription_number="450"))
    assert not numbers_match(registry, at(0, 0, house="451", conscription_number="451"))

    provisional = at(0, 0, house="ev.17", provisional_number="17")
    assert numbers_match(provisional, at(0, 0, house="17", provisional_number="17"))


def test_numbers_match_ignores_absent_numbers():
    a = at(0, 0, house="1")
    b = at(0, 0, house="2")
    assert a.conscription_number is None and b.conscription_number is None
    assert not numbers_match(a, b)


def test_nearest_record_returns_distance_and_prefers_first_on_tie():
    origin = at(0.0, 0.0)
    first = at(0.003, 0.0)
    second = at(0.0, -0.003)
    closest = at(0.0, 0.001)

    assert nearest_record(origin, [first, second]) == (first, 0.003)
    assert nearest_record(origin, [first, closest, second]) == (closest, 0.001)
