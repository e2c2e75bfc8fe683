"""Tests for the sleep quality score."""

import pytest

from app.tracker.scoring import base_score, sleep_quality


class TestBaseScore:
    @pytest.mark.parametrize(
        "hours,expected",
        [
            (7.0, 8),
            (8.0, 8),
            (9.0, 8),
            (6.0, 6),
            (6.9, 6),
            (9.1, 7),
            (10.0, 7),
            (5.0, 3),
            (2.0, 3),
            (0.0, 3),
            (5.5, 5),
            (10.5, 5),
            (24.0, 5),
        ],
    )
    def test_bands(self, hours, expected):
        assert base_score(hours) == expected


class TestSleepQuality:
    def test_normal_bedtime(self):
        assert sleep_quality(8, "22:00") == 8

    def test_late_bedtime_penalty(self):
        assert sleep_quality(8, "02:00") == 6

    def test_short_sleep(self):
        assert sleep_quality(4, "23:00") == 3

    def test_penalty_floored_at_one(self):
        assert sleep_quality(4, "03:00") == 1

    def test_no_start_no_penalty(self):
        assert sleep_quality(8, None) == 8

    def test_penalty_window_edges(self):
        assert sleep_quality(8, "00:59") == 8
        assert sleep_quality(8, "01:00") == 6
        assert sleep_quality(8, "05:59") == 6
        assert sleep_quality(8, "06:00") == 8

    def test_range_over_domain(self):
        starts = [None] + [f"{h:02d}:{m:02d}" for h in range(24) for m in (0, 30)]
        for tenths in range(0, 241):
            for start in starts:
                assert 1 <= sleep_quality(tenths / 10, start) <= 10
