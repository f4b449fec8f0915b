"""Tests for habitup/streak.py — current/longest streak derivation."""

import random
from datetime import timedelta

import pytest

from conftest import TODAY, make_record

from habitup.errors import MalformedRecord
from habitup.models import CompletionStatus, StreakState
from habitup.streak import compute_streak, is_milestone, merge_streak

C = CompletionStatus.COMPLETED


def test_empty_history():
    assert compute_streak([], TODAY) == StreakState(0, 0)


def test_single_completion_today():
    assert compute_streak([make_record(0)], TODAY) == StreakState(1, 1)


def test_gap_terminates_run():
    records = [make_record(0), make_record(1), make_record(2), make_record(4)]
    assert compute_streak(records, TODAY) == StreakState(3, 3)


def test_missed_day_terminates_run():
    records = [make_record(0), make_record(1, "MISSED"), make_record(2)]
    assert compute_streak(records, TODAY) == StreakState(1, 1)


def test_unlogged_today_anchors_yesterday():
    records = [make_record(1), make_record(2), make_record(3)]
    assert compute_streak(records, TODAY).current_streak == 3


def test_non_completed_today_breaks_current():
    records = [make_record(0, "PARTIAL"), make_record(1), make_record(2)]
    state = compute_streak(records, TODAY)
    assert state.current_streak == 0
    assert state.longest_streak == 2


def test_longest_older_run():
    records = [make_record(0)] + [make_record(d) for d in range(5, 10)]
    assert compute_streak(records, TODAY) == StreakState(1, 5)


def test_input_order_does_not_matter():
    records = [make_record(d) for d in (0, 1, 2, 4, 5)] + [make_record(3, "SKIPPED")]
    shuffled = records[:]
    random.Random(7).shuffle(shuffled)
    assert compute_streak(records, TODAY) == compute_streak(shuffled, TODAY)


def test_idempotent():
    records = [make_record(d) for d in range(10)]
    first = compute_streak(records, TODAY)
    assert compute_streak(records, TODAY) == first


def test_future_records_ignored():
    records = [make_record(-1), make_record(0)]
    assert compute_streak(records, TODAY) == StreakState(1, 1)


def test_lookback_limits_scan():
    records = [make_record(d) for d in range(400)]
    state = compute_streak(records, TODAY)
    assert state.current_streak == 365
    assert state.longest_streak == 365
    assert compute_streak(records, TODAY, lookback=10) == StreakState(10, 10)


def test_as_of_in_the_past():
    as_of = TODAY - timedelta(days=5)
    records = [make_record(d) for d in range(3, 8)]
    assert compute_streak(records, as_of) == StreakState(3, 3)


def test_merge_keeps_stored_longest():
    merged = merge_streak(StreakState(3, 3), stored_longest=12)
    assert merged == StreakState(3, 12)
    assert merge_streak(StreakState(4, 4), stored_longest=2) == StreakState(4, 4)


def test_merge_never_below_current():
    merged = merge_streak(StreakState(5, 2), stored_longest=0)
    assert merged.longest_streak >= merged.current_streak


def test_milestones():
    assert [n for n in range(1, 101) if is_milestone(n)] == [7, 21, 30, 50, 100]


def test_malformed_record_rejected():
    bad = make_record(1)
    bad.status = "DONE"
    with pytest.raises(MalformedRecord):
        compute_streak([make_record(0), bad], TODAY)
