# shared fixtures for the entire test suite
# keeps individual test files short by centralising common setup

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest

# make src/ and configs/ importable without installing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent / "configs"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from records import MedicalConcept, PatientDemographics, QuestionContext


# mock settings: used by loaders and the report writer
@pytest.fixture
def mock_settings(tmp_path):
    """minimal mock of configs.config.settings that points at tmp dirs"""
    s = Mock()
    s.RAW_DATA_DIR = tmp_path / "raw"
    s.PROCESSED_DATA_DIR = tmp_path / "processed"
    s.REPORTS_DIR = tmp_path / "reports"
    s.CONFIGS_DIR = tmp_path / "configs"
    s.LOGS_DIR = tmp_path / "logs"
    s.PROJECT_ROOT = tmp_path
    s.CLASSIFICATION_RULES_PATH = Path(__file__).parent.parent / "configs" / "classification_rules.yaml"
    s.TREND_GRANULARITY = "monthly"
    s.TREND_MIN_SAMPLE_SIZE = 5
    s.TREND_SIGNIFICANCE_LEVEL = 0.05
    s.TREND_BASELINE_PERIODS = 3
    s.TREND_FORECAST_HORIZON = 3
    s.API_CORS_ORIGINS = ["http://localhost:3000"]
    s.ensure_directories = Mock()
    return s


# question builders

def month_start(index: int, year: int = 2023) -> datetime:
    """first day (10:00 utc) of the index-th month counting from january of `year`"""
    y, m = divmod(index, 12)
    return datetime(year + y, m + 1, 1, 10, tzinfo=timezone.utc)


def make_question(timestamp, terms=(), category="disease", intent=None, demographics=None, qid=None, text=""):
    """a QuestionContext with one concept per term (all in `category`)"""
    concepts = [MedicalConcept(term=t, category=category) for t in terms]
    return QuestionContext(
        id=qid or f"q_{abs(hash((str(timestamp), tuple(terms), text))) % 10**10}",
        timestamp=timestamp,
        concepts=concepts,
        clinical_intent=intent,
        demographics=demographics,
        text=text,
    )


def questions_from_counts(counts, pairs=None, year=2023):
    """monthly synthetic history.
    counts: {term: [n_month0, n_month1, ...]} -> n single-topic questions per month
    pairs: {(term_a, term_b): [...]} -> n questions mentioning both terms per month"""
    questions = []
    for term, series in counts.items():
        for month, n in enumerate(series):
            for i in range(n):
                ts = month_start(month, year) + timedelta(hours=i)
                questions.append(make_question(ts, [term], qid=f"q_{term}_{month}_{i}"))
    for (a, b), series in (pairs or {}).items():
        for month, n in enumerate(series):
            for i in range(n):
                ts = month_start(month, year) + timedelta(days=1, hours=i)
                questions.append(make_question(ts, [a, b], qid=f"q_{a}_{b}_{month}_{i}"))
    return questions


@pytest.fixture
def classifier():
    from classification.intent_classifier import IntentClassifier
    return IntentClassifier()


@pytest.fixture
def sample_questions():
    """a handful of questions over two months with demographics and intents"""
    jan = datetime(2024, 1, 10, tzinfo=timezone.utc)
    feb = datetime(2024, 2, 12, tzinfo=timezone.utc)
    return [
        make_question(jan, ["type 2 diabetes", "metformin"], intent="treatment", qid="q1",
                      demographics=PatientDemographics(age_group="elderly", gender="female",
                                                       comorbidities=("hypertension", "ckd"))),
        make_question(jan, ["asthma"], intent="diagnosis", qid="q2",
                      demographics=PatientDemographics(age_group="8 year old child", gender="male",
                                                       comorbidities=("eczema",))),
        make_question(jan + timedelta(days=3), ["hypertension"], intent="treatment", qid="q3"),
        make_question(feb, ["viral pneumonia"], intent="prognosis", qid="q4",
                      demographics=PatientDemographics(age_group="middle-aged", gender="male",
                                                       comorbidities=("hypertension",),
                                                       risk_factors=("smoking",))),
        make_question(feb, [], intent=None, qid="q5"),
    ]
