# loads the classifier rule table from yaml and compiles it once
# the matching engine in intent_classifier never branches on labels

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Pattern, Tuple, Type

import yaml

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "configs"))
import config

from .labels import TAXONOMIES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rule:
    pattern: Pattern
    label: str


@dataclass(frozen=True)
class Taxonomy:
    name: str
    label_type: Type
    default: object
    rules: Tuple[Rule, ...]

    def match(self, lowered_text: str) -> List[object]:
        """labels of every matching rule, in rule order, duplicates removed"""
        labels = []
        for rule in self.rules:
            if rule.pattern.search(lowered_text):
                label = self.label_type(rule.label)
                if label not in labels:
                    labels.append(label)
        return labels


@dataclass(frozen=True)
class ClassificationRules:
    taxonomies: Dict[str, Taxonomy]
    urgent_pattern: Pattern
    moderate_pattern: Pattern
    critical_gap_pattern: Pattern
    patient_context_patterns: Tuple[Pattern, ...]
    topic_areas: Tuple[str, ...]
    deidentification: Tuple[Tuple[Pattern, str], ...] = field(default_factory=tuple)


def _compile_taxonomy(name: str, raw_rules: List[Dict[str, str]]) -> Taxonomy:
    if name not in TAXONOMIES:
        raise ValueError(f"Unknown taxonomy in rule file: {name}")
    label_type, default = TAXONOMIES[name]

    rules = []
    for raw in raw_rules or []:
        # unknown labels raise here
        label_type(raw["label"])
        rules.append(Rule(pattern=re.compile(raw["pattern"]), label=raw["label"]))

    return Taxonomy(name=name, label_type=label_type, default=default, rules=tuple(rules))


def parse_rules(cfg: Dict) -> ClassificationRules:
    taxonomies = {
        name: _compile_taxonomy(name, raw_rules)
        for name, raw_rules in cfg.get("taxonomies", {}).items()
    }
    missing = set(TAXONOMIES) - set(taxonomies)
    if missing:
        raise ValueError(f"Rule file is missing taxonomies: {sorted(missing)}")

    urgency = cfg.get("urgency", {})
    return ClassificationRules(
        taxonomies=taxonomies,
        urgent_pattern=re.compile(urgency["high"]),
        moderate_pattern=re.compile(urgency["medium"]),
        critical_gap_pattern=re.compile(cfg["gap_severity"]["critical"]),
        patient_context_patterns=tuple(re.compile(p) for p in cfg.get("patient_context", [])),
        topic_areas=tuple(cfg.get("topic_areas", [])),
        deidentification=tuple(
            (re.compile(item["pattern"]), item["replacement"])
            for item in cfg.get("deidentification", [])
        ),
    )


def load_rules(path: Optional[Path] = None) -> ClassificationRules:
    """read and compile the rule table. defaults to settings.CLASSIFICATION_RULES_PATH"""
    rules_path = Path(path) if path else config.settings.CLASSIFICATION_RULES_PATH
    if not rules_path.exists():
        raise FileNotFoundError(f"Classification rules not found: {rules_path}")

    with open(rules_path, "r") as f:
        cfg = yaml.safe_load(f)

    rules = parse_rules(cfg)
    logger.debug(
        "Loaded classification rules from %s (%s)",
        rules_path,
        ", ".join(f"{name}={len(t.rules)}" for name, t in rules.taxonomies.items()),
    )
    return rules
