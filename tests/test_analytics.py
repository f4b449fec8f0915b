"""Tests for habitup/analytics.py — rates, breakdowns and insights."""

import pytest

from conftest import TODAY, make_record

from habitup.analytics import (
    best_day,
    compute_analytics,
    compute_progress,
    compute_weekly_summary,
    day_of_week_stats,
    weekday_name,
    weekly_breakdown,
)
from habitup.errors import InvalidWindow, MalformedRecord
from habitup.models import DayOfWeekStat, Mood


def test_weekday_name_starts_sunday():
    # 2026-02-11 is a Wednesday
    assert weekday_name(TODAY) == "Wednesday"
    assert weekday_name(make_record(3).calendar_date) == "Sunday"


def test_empty_window_rate_zero():
    report = compute_analytics([], 30, TODAY)
    assert report.completion_rate == 0
    assert report.total_records == 0


def test_full_window_rate_hundred():
    records = [make_record(d) for d in range(30)]
    report = compute_analytics(records, 30, TODAY)
    assert report.completion_rate == 100.00
    assert report.completed_days == 30


def test_rate_uses_window_as_denominator():
    records = [make_record(0), make_record(1), make_record(2, "MISSED")]
    report = compute_analytics(records, 90, TODAY)
    assert report.completion_rate == 2.22
    assert report.missed_days == 1


def test_status_counts():
    records = [
        make_record(0),
        make_record(1, "PARTIAL"),
        make_record(2, "MISSED"),
        make_record(3, "SKIPPED"),
        make_record(4, "SKIPPED"),
    ]
    report = compute_analytics(records, 7, TODAY)
    assert (report.completed_days, report.partial_days, report.missed_days, report.skipped_days) == (1, 1, 1, 2)


def test_unlogged_weekday_zero_filled():
    # Wednesdays only
    records = [make_record(0), make_record(7), make_record(14)]
    stats = day_of_week_stats(records)
    assert list(stats) == ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
    assert stats["Tuesday"] == DayOfWeekStat(total=0, completed=0, rate=0.0)
    assert stats["Wednesday"] == DayOfWeekStat(total=3, completed=3, rate=100.0)


def test_weekly_breakdown_oldest_first():
    records = [make_record(0), make_record(1), make_record(8), make_record(9, "MISSED")]
    buckets = weekly_breakdown(records, 14, TODAY)
    assert [(b.week, b.completed) for b in buckets] == [(2, 1), (1, 2)]
    assert all(b.total == 7 for b in buckets)
    assert buckets[1].rate == 28.57


def test_weekly_breakdown_partial_week():
    buckets = weekly_breakdown([make_record(9)], 10, TODAY)
    assert len(buckets) == 2
    assert buckets[0].completed == 1


def test_weekly_bucket_boundary():
    # Day 7 belongs to the second bucket only
    buckets = weekly_breakdown([make_record(7)], 14, TODAY)
    assert [b.completed for b in buckets] == [1, 0]


def test_mood_and_effort_count_completed_only():
    records = [
        make_record(0, mood=Mood.GOOD, effort=4),
        make_record(1, mood=Mood.GOOD, effort=4),
        make_record(2, "PARTIAL", mood=Mood.BAD, effort=9),
    ]
    report = compute_analytics(records, 7, TODAY)
    assert report.mood_stats == {"EXCELLENT": 0, "GOOD": 2, "NEUTRAL": 0, "BAD": 0, "TERRIBLE": 0}
    assert report.effort_stats[4] == 2
    assert report.effort_stats[9] == 0
    assert sorted(report.effort_stats) == list(range(1, 11))


def test_best_day_tie_goes_to_earliest_from_sunday():
    # Tuesday and Wednesday both at 100%
    stats = day_of_week_stats([make_record(0), make_record(1)])
    name, stat = best_day(stats)
    assert name == "Tuesday"
    assert stat.rate == 100.0


def test_insights_low_consistency():
    report = compute_analytics([make_record(0)], 30, TODAY)
    assert report.insights == [
        "Your best day is Wednesday with a 100.00% completion rate",
        "Focus on building consistency. Small daily actions lead to big changes.",
    ]


def test_insights_no_best_day_without_completions():
    report = compute_analytics([make_record(0, "MISSED")], 30, TODAY)
    assert not any(i.startswith("Your best day") for i in report.insights)


def test_insights_high_consistency_and_streak():
    records = [make_record(d) for d in range(30)]
    report = compute_analytics(records, 30, TODAY, current_streak=30, longest_streak=30)
    assert "Great consistency! You're maintaining excellent habits." in report.insights
    assert report.insights[-1] == "Amazing! You're on a 30-day streak. Keep it up!"


def test_insights_good_progress():
    records = [make_record(d) for d in range(7)]
    report = compute_analytics(records, 10, TODAY)
    assert report.completion_rate == 70.0
    assert "Good progress! Try to maintain consistency for better results." in report.insights


def test_zero_window_report():
    report = compute_analytics([], 0, TODAY)
    assert report.completion_rate == 0
    assert report.weekly_breakdown == []


def test_negative_window_raises():
    with pytest.raises(InvalidWindow):
        compute_analytics([], -1, TODAY)
    with pytest.raises(InvalidWindow):
        compute_progress([], -7)


def test_progress_stats():
    records = [make_record(0), make_record(1, "PARTIAL"), make_record(2, "MISSED")]
    stats = compute_progress(records, 30, current_streak=1, longest_streak=4)
    d = stats.to_dict()
    assert d == {
        "totalDays": 30,
        "completedDays": 1,
        "partialDays": 1,
        "missedDays": 1,
        "currentStreak": 1,
        "longestStreak": 4,
        "completionRate": 3.33,
    }


def test_weekly_summary():
    records = [make_record(0), make_record(3), make_record(6), make_record(7), make_record(1, "MISSED")]
    summary = compute_weekly_summary("alice", records, 2, TODAY)
    assert summary.week_start == "2026-02-05"
    assert summary.week_end == "2026-02-11"
    assert summary.completed == 3
    assert summary.completion_rate == 21.4


def test_weekly_summary_no_active_habits():
    summary = compute_weekly_summary("alice", [], 0, TODAY)
    assert summary.completion_rate == 0.0


def test_malformed_record_rejected():
    with pytest.raises(MalformedRecord):
        compute_analytics([make_record(0), make_record(1, effort=0)], 30, TODAY)
