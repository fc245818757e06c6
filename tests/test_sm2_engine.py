"""
Tests for the SM-2 engine - pure transition logic.

Tests cover:
- Quality clamping
- Ease factor updates and the 1.3 floor
- Fixed first/second intervals and growth afterwards
- Due date computation from an injected clock
"""

import datetime

import pytest

from recallstack_app.modules.reviews import Rating, ReviewState, advance
from recallstack_app.modules.reviews.config import ReviewDefaultConfig
from recallstack_app.modules.reviews.engine import Sm2Engine

NOW = datetime.datetime(2024, 3, 1, 12, 0, tzinfo=datetime.timezone.utc)
DAY = datetime.timedelta(days=1)


def fresh_state(now=NOW):
    return ReviewState.initial(now)


class TestReviewDefaults:

    def test_initial_state(self):
        state = fresh_state()
        assert state.reps == 0
        assert state.interval == 0
        assert state.ease == 2.5
        assert state.due == NOW
        assert state.version == 0

    def test_min_ease(self):
        assert ReviewDefaultConfig.MIN_EASE == 1.3


class TestClampQuality:

    @pytest.mark.parametrize('raw, expected', [
        (-3, 0), (0, 0), (2, 2), (5, 5), (9, 5), (3.9, 3), (-0.5, 0),
    ])
    def test_clamps_and_floors(self, raw, expected):
        assert Sm2Engine.clamp_quality(raw) == expected

    @pytest.mark.parametrize('raw, expected', [
        (float('inf'), 5), (float('-inf'), 0), (float('nan'), 0),
    ])
    def test_non_finite_quality(self, raw, expected):
        assert Sm2Engine.clamp_quality(raw) == expected

    @pytest.mark.parametrize('raw, same_as', [
        (float('inf'), 5), (float('-inf'), 0), (float('nan'), 0),
    ])
    def test_advance_accepts_non_finite_quality(self, raw, same_as):
        assert advance(fresh_state(), raw, NOW) == advance(fresh_state(), same_as, NOW)

    def test_out_of_range_quality_is_not_rejected(self):
        high = advance(fresh_state(), 42, NOW)
        top = advance(fresh_state(), 5, NOW)
        assert high == top

        low = advance(fresh_state(), -7, NOW)
        bottom = advance(fresh_state(), 0, NOW)
        assert low == bottom


class TestEaseUpdate:

    def test_quality_four_keeps_ease(self):
        assert Sm2Engine.next_ease(2.5, 4) == pytest.approx(2.5)

    def test_quality_five_raises_ease(self):
        assert Sm2Engine.next_ease(2.5, 5) == pytest.approx(2.6)

    def test_quality_three_lowers_ease(self):
        assert Sm2Engine.next_ease(2.5, 3) == pytest.approx(2.36)

    def test_failure_still_updates_ease(self):
        state = ReviewState(reps=4, interval=20, ease=2.5, due=NOW)
        result = advance(state, 1, NOW)
        assert result.ease == pytest.approx(2.5 - 0.54)

    @pytest.mark.parametrize('quality', range(0, 6))
    @pytest.mark.parametrize('ease', [1.3, 1.35, 1.5, 2.5])
    def test_ease_never_below_floor(self, quality, ease):
        state = ReviewState(reps=3, interval=10, ease=ease, due=NOW)
        assert advance(state, quality, NOW).ease >= 1.3

    def test_blackout_at_floor_stays_at_floor(self):
        state = ReviewState(reps=0, interval=1, ease=1.3, due=NOW)
        assert advance(state, 0, NOW).ease == 1.3


class TestFailurePath:

    @pytest.mark.parametrize('quality', [0, 1, 2])
    def test_failure_resets_reps(self, quality):
        state = ReviewState(reps=7, interval=120, ease=2.2, due=NOW)
        result = advance(state, quality, NOW)
        assert result.reps == 0
        assert result.interval == 1
        assert result.due == NOW + DAY

    def test_hard_label_is_a_failure(self):
        state = ReviewState(reps=2, interval=6, ease=2.5, due=NOW)
        assert advance(state, Rating.HARD, NOW).reps == 0


class TestSuccessPath:

    @pytest.mark.parametrize('quality', [3, 4, 5])
    def test_success_increments_reps(self, quality):
        state = ReviewState(reps=3, interval=15, ease=2.5, due=NOW)
        assert advance(state, quality, NOW).reps == 4

    def test_first_two_successes_use_fixed_intervals(self):
        first = advance(fresh_state(), 3, NOW)
        assert (first.reps, first.interval) == (1, 1)

        second = advance(first, 3, NOW + DAY)
        assert (second.reps, second.interval) == (2, 6)

    def test_third_success_multiplies_by_new_ease(self):
        state = ReviewState(reps=2, interval=6, ease=2.5, due=NOW)
        result = advance(state, 5, NOW)
        # ease becomes 2.6; 6 * 2.6 = 15.6 -> 16
        assert result.interval == 16
        assert result.due == NOW + 16 * DAY

    def test_interval_floor_of_one_day(self):
        # a reset card carried reps over manually with interval 0
        state = ReviewState(reps=2, interval=0, ease=1.3, due=NOW)
        assert advance(state, 3, NOW).interval == 1

    @pytest.mark.parametrize('quality', [3, 4, 5])
    @pytest.mark.parametrize('reps, interval', [(0, 0), (1, 1), (2, 6), (6, 40)])
    def test_due_always_in_future_on_success(self, quality, reps, interval):
        state = ReviewState(reps=reps, interval=interval, ease=1.3, due=NOW)
        assert advance(state, quality, NOW).due > NOW


class TestRounding:

    @pytest.mark.parametrize('value, expected', [
        (12.5, 13), (2.5, 3), (15.6, 16), (15.4, 15), (1.0, 1),
    ])
    def test_round_half_up(self, value, expected):
        assert Sm2Engine.round_interval(value) == expected


class TestAdvanceIsPure:

    def test_input_state_is_unchanged(self):
        state = ReviewState(reps=2, interval=6, ease=2.5, due=NOW, version=4)
        advance(state, 5, NOW)
        assert state == ReviewState(reps=2, interval=6, ease=2.5, due=NOW, version=4)

    def test_version_is_carried_over(self):
        state = ReviewState(reps=2, interval=6, ease=2.5, due=NOW, version=4)
        assert advance(state, 5, NOW).version == 4

    def test_naive_now_is_read_as_utc(self):
        naive = NOW.replace(tzinfo=None)
        assert advance(fresh_state(), 4, naive).due == NOW + DAY

    def test_defaults_to_wall_clock(self):
        before = datetime.datetime.now(datetime.timezone.utc)
        result = advance(fresh_state(), 4)
        assert before + DAY <= result.due <= datetime.datetime.now(datetime.timezone.utc) + DAY


class TestReviewScenario:
    """Three answers in a row from a brand-new card."""

    def test_good_easy_again(self):
        s1 = advance(fresh_state(), 4, NOW)
        assert s1.reps == 1
        assert s1.interval == 1
        assert s1.ease == pytest.approx(2.5)
        assert s1.due == NOW + DAY

        s2 = advance(s1, 5, NOW + DAY)
        assert s2.reps == 2
        assert s2.interval == 6
        assert s2.ease == pytest.approx(2.6)
        assert s2.due == NOW + 7 * DAY

        s3 = advance(s2, 1, NOW + 7 * DAY)
        assert s3.reps == 0
        assert s3.interval == 1
        assert s3.ease == pytest.approx(2.06)
        assert s3.due == NOW + 8 * DAY


class TestRatingLabels:

    def test_label_mapping(self):
        assert [int(r) for r in (Rating.AGAIN, Rating.HARD, Rating.GOOD, Rating.EASY)] == [0, 2, 4, 5]

    def test_from_label_is_case_insensitive(self):
        assert Rating.from_label(' Easy ') is Rating.EASY

    def test_unknown_label(self):
        with pytest.raises(ValueError):
            Rating.from_label('meh')
