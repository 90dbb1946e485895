# tests for rules.py and deidentify.py
# covers loading the yaml rule table, validation errors and text de-identification

from pathlib import Path

import pytest
import yaml

from classification.deidentify import deidentify
from classification.labels import DecisionType, TAXONOMIES
from classification.rules import load_rules, parse_rules

RULES_PATH = Path(__file__).parent.parent / "configs" / "classification_rules.yaml"


@pytest.fixture
def raw_rules():
    with open(RULES_PATH) as f:
        return yaml.safe_load(f)


def _write(tmp_path, cfg):
    path = tmp_path / "rules.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(cfg, f)
    return path


class TestLoadRules:

    def test_loads_default_table(self):
        rules = load_rules()
        assert set(rules.taxonomies) == set(TAXONOMIES)
        assert len(rules.taxonomies["decision"].rules) == 6
        assert rules.taxonomies["decision"].default == DecisionType.OTHER

    def test_explicit_path(self, tmp_path, raw_rules):
        rules = load_rules(_write(tmp_path, raw_rules))
        assert "oncology" in rules.topic_areas
        assert len(rules.deidentification) == 4

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "nope.yaml")

    def test_missing_taxonomy_raises(self, raw_rules):
        del raw_rules["taxonomies"]["workflow"]
        with pytest.raises(ValueError, match="missing taxonomies"):
            parse_rules(raw_rules)

    def test_unknown_taxonomy_raises(self, raw_rules):
        raw_rules["taxonomies"]["billing"] = [{"pattern": "bill", "label": "billing"}]
        with pytest.raises(ValueError, match="Unknown taxonomy"):
            parse_rules(raw_rules)

    def test_unknown_label_raises(self, raw_rules):
        raw_rules["taxonomies"]["decision"].append({"pattern": "stop", "label": "stopping"})
        with pytest.raises(ValueError):
            parse_rules(raw_rules)

    def test_match_keeps_rule_order(self):
        taxonomy = load_rules().taxonomies["decision"]
        labels = taxonomy.match("refer them, then adjust the dose")
        assert labels == [DecisionType.DOSING, DecisionType.REFERRAL]


class TestDeidentify:

    @pytest.fixture
    def substitutions(self):
        return load_rules().deidentification

    def test_names_phones_dates(self, substitutions):
        text = "The patient John Smith called 555-123-4567 on 3/14/2024."
        assert deidentify(text, substitutions) == "The patient [PATIENT NAME] called [PHONE] on [DATE]."

    def test_identifier(self, substitutions):
        assert deidentify("record 123-45-6789 attached", substitutions) == "record [ID] attached"

    def test_plain_text_untouched(self, substitutions):
        text = "what is the usual dose of metformin in ckd?"
        assert deidentify(text, substitutions) == text

    def test_empty(self, substitutions):
        assert deidentify("", substitutions) == ""

    def test_classifier_uses_original_casing(self, classifier):
        analysis = classifier.analyze_comprehensive("Can Mary Jones take ibuprofen?")
        assert "[PATIENT NAME]" in analysis.anonymized_text
        assert "Mary" not in analysis.anonymized_text
