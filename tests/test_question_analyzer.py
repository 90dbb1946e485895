# tests for question_analyzer.py
# covers clinical intent, setting, demographics and treatment indications

from datetime import datetime, timezone

import pytest

from classification.question_analyzer import QuestionAnalyzer
from records import ClinicalIntent, ClinicalSetting, MedicalConcept


@pytest.fixture
def analyzer():
    return QuestionAnalyzer()


class TestClinicalIntent:

    @pytest.mark.parametrize("text, expected", [
        ("What is the best way to diagnose this rash?", ClinicalIntent.DIAGNOSIS),
        ("Should I prescribe metformin here?", ClinicalIntent.TREATMENT),
        ("How does this drug lower blood pressure?", ClinicalIntent.MECHANISM),
        ("How often should we monitor potassium?", ClinicalIntent.MONITORING),
        ("Can vaccination prevent shingles in adults?", ClinicalIntent.PREVENTION),
        ("What is the long-term prognosis after an MI?", ClinicalIntent.DIAGNOSIS),
        ("Survival rates after stage 2 melanoma", ClinicalIntent.PROGNOSIS),
    ])
    def test_first_matching_intent_wins(self, analyzer, text, expected):
        assert analyzer.determine_clinical_intent(text) == expected

    @pytest.mark.parametrize("text", ["", None, "hello there"])
    def test_default_is_treatment(self, analyzer, text):
        assert analyzer.determine_clinical_intent(text) == ClinicalIntent.TREATMENT


class TestClinicalSetting:

    def test_emergency(self, analyzer):
        assert analyzer.identify_clinical_setting("seen in the emergency room") == ClinicalSetting.EMERGENCY

    def test_inpatient(self, analyzer):
        assert analyzer.identify_clinical_setting("admitted overnight") == ClinicalSetting.INPATIENT

    def test_none_when_not_mentioned(self, analyzer):
        assert analyzer.identify_clinical_setting("what dose of amoxicillin?") is None


class TestDemographics:

    def test_years_old_maps_to_descriptor(self, analyzer):
        demo = analyzer.extract_demographics("A 72-year-old woman with new chest pain")
        assert demo.age_group == "elderly"
        assert demo.gender == "female"

    def test_descriptor_preferred_over_years(self, analyzer):
        demo = analyzer.extract_demographics("an elderly man, 60 year old")
        assert demo.age_group == "elderly"
        assert demo.gender == "male"

    @pytest.mark.parametrize("years, expected", [
        (1, "infant"), (8, "child"), (15, "adolescent"), (25, "young adult"),
        (40, "adult"), (45, "middle-aged"), (80, "elderly"),
    ])
    def test_age_descriptor_bands(self, years, expected):
        assert QuestionAnalyzer._age_descriptor(years) == expected

    def test_age_only(self, analyzer):
        demo = analyzer.extract_demographics("fever in a toddler")
        assert demo.age_group == "toddler"
        assert demo.gender is None

    def test_none_without_mentions(self, analyzer):
        assert analyzer.extract_demographics("usual dose of metformin") is None


class TestTreatmentIndications:

    def test_diseases_with_a_drug(self):
        concepts = [
            MedicalConcept("hypertension", "disease"),
            MedicalConcept("lisinopril", "drug"),
            MedicalConcept("ckd", "disease"),
            MedicalConcept("hypertension", "disease"),
        ]
        assert QuestionAnalyzer.map_treatment_indications(concepts) == ["hypertension", "ckd"]

    def test_no_therapy_no_indications(self):
        concepts = [MedicalConcept("hypertension", "disease"), MedicalConcept("headache", "symptom")]
        assert QuestionAnalyzer.map_treatment_indications(concepts) == []


class TestAnalyzeQuestion:

    def test_builds_context(self, analyzer):
        ts = datetime(2024, 3, 1, 9, tzinfo=timezone.utc)
        concepts = [MedicalConcept("asthma", "disease"), MedicalConcept("salbutamol", "drug")]
        question = analyzer.analyze_question(
            "Should I prescribe salbutamol to a 9 year old boy at the clinic?",
            timestamp=ts,
            concepts=concepts,
            question_id="q42",
        )
        assert question.id == "q42"
        assert question.timestamp == ts
        assert question.clinical_intent == ClinicalIntent.TREATMENT
        assert question.clinical_setting == ClinicalSetting.OUTPATIENT
        assert question.demographics.age_group == "child"
        assert question.demographics.gender == "male"
        assert question.treatment_indications == ("asthma",)
        assert question.topic_ids() == ["disease_asthma", "drug_salbutamol"]

    def test_defaults(self, analyzer):
        question = analyzer.analyze_question("")
        assert question.id.startswith("q_")
        assert question.timestamp.tzinfo is not None
        assert question.concepts == ()
        assert question.demographics is None
