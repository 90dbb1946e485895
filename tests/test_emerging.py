# tests for emerging / fading topic detection

import pytest

from aggregation.history import TopicHistory
from conftest import questions_from_counts
from trends.config import TrendAnalysisOptions
from trends.emerging import (
    EmergingTopic,
    detect_emerging_topics,
    detect_fading_topics,
    topic_trend,
    velocity_score,
    window_counts,
)


@pytest.fixture
def options():
    return TrendAnalysisOptions(
        granularity="monthly", min_sample_size=5, significance_level=0.05,
        baseline_periods=3, forecast_horizon=3,
    )


def _history(counts, pairs=None):
    return TopicHistory.from_questions(questions_from_counts(counts, pairs), "monthly")


class TestWindows:

    def test_current_and_baseline(self, options):
        assert window_counts([10, 10, 10, 25], options) == (25.0, 10.0)

    def test_baseline_limited_to_baseline_periods(self, options):
        assert window_counts([100, 4, 4, 4, 8], options) == (8.0, 4.0)

    def test_short_baseline_is_averaged(self, options):
        assert window_counts([6, 10], options) == (10.0, 6.0)

    def test_longer_current_window(self):
        options = TrendAnalysisOptions(current_periods=2, baseline_periods=2)
        # current = 9 + 11, baseline = (2 + 2 + 3 + 3) / 2
        assert window_counts([2, 2, 3, 3, 9, 11], options) == (20.0, 5.0)

    def test_no_baseline(self, options):
        assert window_counts([7], options) is None

    def test_velocity_bounded(self):
        assert velocity_score(50.0, 1.0, 0.5) <= 1.0
        assert velocity_score(-3.0, 0.0, 0.5) == 0.0


class TestEmerging:

    def test_sharp_rise_is_emerging(self, options):
        history = _history({"flu": [10, 10, 10, 25]})
        emerging = detect_emerging_topics(history, options)
        assert len(emerging) == 1
        topic = emerging[0]
        assert isinstance(topic, EmergingTopic)
        assert topic.topic_id == "disease_flu"
        assert topic.name == "flu"
        assert topic.growth_rate == pytest.approx(1.5)
        assert topic.percentage_change == pytest.approx(150.0)
        assert topic.p_value < 0.05
        assert topic.total_frequency == 55

    def test_brand_new_topic(self, options):
        history = _history({"mpox": [0, 0, 0, 0, 0, 6], "background": [1, 1, 1, 1, 1, 1]})
        emerging = detect_emerging_topics(history, options)
        assert [t.topic_id for t in emerging] == ["disease_mpox"]
        assert emerging[0].newness == pytest.approx(1.0)
        assert emerging[0].baseline_frequency == 0.0
        assert emerging[0].velocity_score > 0.9

    def test_flat_topic_not_emerging(self, options):
        history = _history({"flu": [10, 10, 10, 10]})
        assert detect_emerging_topics(history, options) == []

    def test_below_min_sample_ignored(self, options):
        history = _history({"rare": [0, 0, 1, 3], "background": [2, 2, 2, 2]})
        assert topic_trend(history, "disease_rare", options) is None

    def test_sorted_by_velocity(self, options):
        history = _history({
            "slow": [10, 10, 10, 18],
            "fast": [1, 1, 1, 20],
        })
        emerging = detect_emerging_topics(history, options)
        assert [t.topic_id for t in emerging] == ["disease_fast", "disease_slow"]
        assert emerging[0].velocity_score >= emerging[1].velocity_score

    def test_related_topics(self, options):
        history = _history({"flu": [5, 5, 5, 5]}, pairs={("flu", "cough"): [0, 0, 1, 12]})
        emerging = {t.topic_id: t for t in detect_emerging_topics(history, options)}
        assert emerging["disease_flu"].related_topics == ["disease_cough"]
        assert emerging["disease_cough"].related_topics == ["disease_flu"]

    def test_single_period_history(self, options):
        history = _history({"flu": [40]})
        assert detect_emerging_topics(history, options) == []
        assert detect_fading_topics(history, options) == []


class TestFading:

    def test_sharp_drop_is_fading(self, options):
        history = _history({"h1n1": [20, 20, 20, 2], "flu": [10, 10, 10, 10]})
        fading = detect_fading_topics(history, options)
        assert [t.topic_id for t in fading] == ["disease_h1n1"]
        assert fading[0].percentage_change == pytest.approx(-90.0)
        assert fading[0].p_value < 0.05
        assert not hasattr(fading[0], "velocity_score")

    def test_sorted_by_steepest_decline(self, options):
        history = _history({"a": [20, 20, 20, 2], "b": [20, 20, 20, 8]})
        fading = detect_fading_topics(history, options)
        assert [t.topic_id for t in fading] == ["disease_a", "disease_b"]

    def test_rising_topic_not_fading(self, options):
        history = _history({"flu": [10, 10, 10, 25]})
        assert detect_fading_topics(history, options) == []
