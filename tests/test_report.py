# tests for trend_report.py
# covers report generation, coverage notes and saving

import json
from datetime import timedelta

import pytest

from aggregation.temporal_aggregator import TemporalAggregator
from conftest import make_question, month_start, questions_from_counts
from reporting.trend_report import TrendReportWriter, TrendRunReport
from trends.config import TrendAnalysisOptions
from trends.detector import analyze_trends


@pytest.fixture
def options():
    return TrendAnalysisOptions(granularity="monthly", min_sample_size=5, significance_level=0.05)


@pytest.fixture
def writer(mock_settings):
    w = TrendReportWriter()
    w.settings = mock_settings
    return w


def _run(questions, options):
    distributions = TemporalAggregator().aggregate(questions, options.granularity)
    summary = analyze_trends(questions, options)
    return distributions, summary


class TestNotes:

    def test_no_data(self, writer, options):
        distributions, summary = _run([], options)
        notes = writer.generate_notes(0, distributions, summary, options)
        assert len(notes) == 1
        assert notes[0].startswith("NO DATA")

    def test_sparse_history(self, writer, options):
        questions = questions_from_counts({"flu": [6]})
        distributions, summary = _run(questions, options)
        notes = writer.generate_notes(len(questions), distributions, summary, options)
        assert any(n.startswith("SPARSE HISTORY") for n in notes)
        assert any(n.startswith("SEASONALITY") for n in notes)
        assert any(n.startswith("No significant trends") for n in notes)

    def test_journey_timing_note(self, writer, options):
        questions = [
            make_question(month_start(0), ["influenza", "test results"]),
            make_question(month_start(0) + timedelta(days=4), ["influenza", "medication"]),
            make_question(month_start(0), ["asthma", "therapy"]),
        ]
        distributions, summary = _run(questions, options)
        notes = writer.generate_notes(len(questions), distributions, summary, options)
        journey = [n for n in notes if n.startswith("JOURNEY TIMING")]
        assert len(journey) == 0

        questions.append(make_question(month_start(0), ["copd", "long-term"]))
        distributions, summary = _run(questions, options)
        notes = writer.generate_notes(len(questions), distributions, summary, options)
        journey = [n for n in notes if n.startswith("JOURNEY TIMING")]
        assert len(journey) == 1
        assert "long_term_management" in journey[0]

    def test_no_sparse_note_with_history(self, writer, options):
        questions = questions_from_counts({"flu": [10, 10, 10, 25]})
        distributions, summary = _run(questions, options)
        notes = writer.generate_notes(len(questions), distributions, summary, options)
        assert not any(n.startswith("SPARSE HISTORY") for n in notes)
        assert not any(n.startswith("No significant trends") for n in notes)


class TestReport:

    def test_generate_report(self, writer, options):
        questions = questions_from_counts({"flu": [10, 10, 10, 25]})
        distributions, summary = _run(questions, options)
        report = writer.generate_report(len(questions), distributions, summary, options, dataset_name="test")
        assert isinstance(report, TrendRunReport)
        assert report.dataset_name == "test"
        assert report.total_questions == 55
        assert report.granularity == "monthly"
        assert len(report.distributions) == 4
        assert report.trends["emerging_topics"][0]["topic_id"] == "disease_flu"
        assert report.options["min_sample_size"] == 5

    def test_save_report(self, writer, options, mock_settings):
        questions = questions_from_counts({"flu": [10, 10, 10, 25]})
        distributions, summary = _run(questions, options)
        report = writer.generate_report(len(questions), distributions, summary, options)

        path = writer.save_report(report)
        assert path == mock_settings.REPORTS_DIR / "trends" / "trend_report.json"
        data = json.loads(path.read_text())
        assert data["total_questions"] == 55
        assert data["distributions"][0]["period"] == "2023-01"

    def test_custom_reports_dir(self, tmp_path, options):
        writer = TrendReportWriter(reports_dir=tmp_path / "out")
        distributions, summary = _run([], options)
        report = writer.generate_report(0, distributions, summary, options)
        path = writer.save_report(report, filename="empty.json")
        assert path == tmp_path / "out" / "empty.json"
        assert json.loads(path.read_text())["notes"][0].startswith("NO DATA")
