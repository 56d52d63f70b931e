import pytest

from tanksim.teamstate import TeamState


def make(w=10, h=6):
    tv = TeamState()
    tv.ensure(w, h)
    return tv


def test_fresh_state_is_free():
    tv = make()
    assert all(tv.move_reservation(x, y) is None for x in range(10) for y in range(6))
    assert not any(tv.has_shot(x, y) for x in range(10) for y in range(6))


def test_reserve_and_query():
    tv = make()
    assert tv.reserve_move(3, 2, 0, 3)
    assert tv.move_reservation(3, 2) == 0
    assert tv.move_reservation(2, 3) is None


def test_lower_id_wins():
    tv = make()
    assert tv.reserve_move(5, 2, 4, 5)
    assert not tv.reserve_move(5, 2, 7, 5)
    assert tv.move_reservation(5, 2) == 4
    assert tv.reserve_move(5, 2, 1, 5)
    assert tv.move_reservation(5, 2) == 1


def test_age_expires_reservation():
    tv = make()
    tv.reserve_move(1, 1, 2, 2)
    tv.age()
    assert tv.move_reservation(1, 1) == 2
    tv.age()
    assert tv.move_reservation(1, 1) is None
    assert tv.reserve_move(1, 1, 9, 1)


def test_shot_lane_ttl_zero_counts_as_one():
    tv = make()
    tv.mark_shot(4, 4, 0)
    assert tv.has_shot(4, 4)
    tv.age()
    assert not tv.has_shot(4, 4)


def test_shot_lane_lasts_ttl_ticks():
    tv = make()
    tv.mark_shot(0, 0, 2)
    tv.age()
    assert tv.has_shot(0, 0)
    tv.age()
    assert not tv.has_shot(0, 0)


def test_clear_reservations_keeps_size():
    tv = make(8, 5)
    tv.reserve_move(2, 2, 0, 5)
    tv.mark_shot(3, 3, 5)
    tv.clear_reservations()
    assert (tv.w, tv.h) == (8, 5)
    assert tv.move_reservation(2, 2) is None
    assert not tv.has_shot(3, 3)


def test_ensure_keeps_same_size_and_resets_new_size():
    tv = make(12, 5)
    tv.reserve_move(5, 2, 0, 5)
    tv.ensure(12, 5)
    assert tv.move_reservation(5, 2) == 0
    tv.ensure(6, 6)
    assert len(tv.move_owner) == 36
    assert tv.move_reservation(5, 2) is None


def test_bad_ttl_and_bounds():
    tv = make()
    with pytest.raises(ValueError):
        tv.reserve_move(0, 0, 0, 256)
    with pytest.raises(IndexError):
        tv.reserve_move(10, 0, 0, 1)