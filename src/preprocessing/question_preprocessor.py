# loads raw clinical question records and turns them into QuestionContexts
# accepts json / json lines / csv / parquet exports. records with a missing or
# malformed timestamp are skipped with a warning; fields an upstream extractor
# did not fill (intent, setting, demographics) are derived from the text.

import json
import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "configs"))
import config

from classification.intent_classifier import ComprehensiveAnalysis, IntentClassifier
from classification.question_analyzer import QuestionAnalyzer
from records import QuestionContext, to_native

from .base_preprocessor import BasePreprocessor

logger = logging.getLogger(__name__)

READERS = {
    ".json": lambda path: pd.read_json(path),
    ".jsonl": lambda path: pd.read_json(path, lines=True),
    ".csv": lambda path: pd.read_csv(path),
    ".parquet": lambda path: pd.read_parquet(path),
}

# csv exports carry nested fields as json strings
NESTED_FIELDS = ["medicalConcepts", "concepts", "demographics", "treatmentIndications"]


class QuestionPreprocessor:

    def __init__(
        self,
        analyzer: Optional[QuestionAnalyzer] = None,
        classifier: Optional[IntentClassifier] = None,
    ):
        self.settings = config.settings
        self.preprocessor = BasePreprocessor()
        self.analyzer = analyzer or QuestionAnalyzer()
        self.classifier = classifier or IntentClassifier()
        self.df = None

    # paths
    def get_input_path(self) -> Path:
        return self.settings.RAW_DATA_DIR / "questions" / "questions.jsonl"

    def get_output_path(self) -> Path:
        return self.settings.PROCESSED_DATA_DIR / "questions" / "classified_questions.jsonl"

    # loading
    def load_data(self, path: Optional[Path] = None) -> pd.DataFrame:
        input_path = Path(path) if path else self.get_input_path()
        if not input_path.exists():
            raise FileNotFoundError(f"Question data not found: {input_path}")

        reader = READERS.get(input_path.suffix.lower())
        if reader is None:
            raise ValueError(f"Unsupported question file type: {input_path.suffix}")

        self.df = reader(input_path)
        logger.info(f"Loaded {len(self.df)} question records from {input_path}")
        return self.df

    # text cleanup, drops empty questions and duplicate ids
    def clean(self) -> pd.DataFrame:
        if "text" not in self.df.columns:
            raise ValueError("Question records have no 'text' column")

        self.df["text"] = self.df["text"].fillna("").astype(str).apply(self.preprocessor.process)

        empty = (self.df["text"] == "").sum()
        if empty > 0:
            logger.warning(f"Dropping {empty} records with empty text")
            self.df = self.df[self.df["text"] != ""].reset_index(drop=True)

        if "id" in self.df.columns:
            duplicate_ids = self.df["id"].duplicated().sum()
            if duplicate_ids > 0:
                logger.warning(f"Found {duplicate_ids} duplicate question IDs")
                self.df = self.df.drop_duplicates(subset=["id"]).reset_index(drop=True)

        return self.df

    @staticmethod
    def _record_from_row(row: Dict[str, Any]) -> Dict[str, Any]:
        record = {}
        for key, value in to_native(row).items():
            if isinstance(value, float) and math.isnan(value):
                value = None
            if key in NESTED_FIELDS and isinstance(value, str):
                value = json.loads(value) if value.strip() else None
            record[key] = value
        return record

    def enrich(self, question: QuestionContext) -> QuestionContext:
        """fill fields the upstream extractor left empty"""
        text = question.text
        return replace(
            question,
            clinical_intent=question.clinical_intent or self.analyzer.determine_clinical_intent(text),
            clinical_setting=question.clinical_setting or self.analyzer.identify_clinical_setting(text),
            demographics=question.demographics or self.analyzer.extract_demographics(text),
            treatment_indications=(
                question.treatment_indications
                or tuple(self.analyzer.map_treatment_indications(question.concepts))
            ),
        )

    def build_contexts(self, df: Optional[pd.DataFrame] = None) -> List[QuestionContext]:
        df = self.df if df is None else df
        contexts = []
        skipped = 0
        for row in df.to_dict("records"):
            try:
                record = self._record_from_row(row)
                question = QuestionContext.from_dict(record)
            except (ValueError, KeyError, TypeError) as e:
                skipped += 1
                logger.warning(f"Skipping malformed question record {row.get('id', '?')}: {e}")
                continue
            contexts.append(self.enrich(question))

        if skipped:
            logger.warning(f"Skipped {skipped} of {len(df)} question records")
        return contexts

    def classify(self, contexts: List[QuestionContext]) -> List[ComprehensiveAnalysis]:
        return [self.classifier.analyze_comprehensive(q.text, q.timestamp) for q in contexts]

    def save(self, contexts: List[QuestionContext], analyses: List[ComprehensiveAnalysis]) -> Path:
        output_path = self.get_output_path()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            for question, analysis in zip(contexts, analyses):
                f.write(json.dumps({
                    "id": question.id,
                    "timestamp": question.timestamp.isoformat(),
                    "clinical_intent": to_native(question.clinical_intent),
                    "topics": question.topic_ids(),
                    "classification": analysis.to_dict(),
                }) + "\n")
        logger.info(f"Saved {len(contexts)} classified questions to {output_path}")
        return output_path

    def run(self, path: Optional[Path] = None, save: bool = True) -> Tuple[List[QuestionContext], List[ComprehensiveAnalysis]]:
        self.settings.ensure_directories()

        logger.info("Step 1/4: Loading raw question data")
        self.load_data(path)

        logger.info("Step 2/4: Cleaning question text")
        before = len(self.df)
        self.clean()
        logger.info(f"{before} → {len(self.df)} records after cleaning")

        logger.info("Step 3/4: Building question contexts")
        contexts = self.build_contexts()
        logger.info(f"{len(contexts)} question contexts built")

        logger.info("Step 4/4: Classifying questions")
        analyses = self.classify(contexts)

        if save:
            self.save(contexts, analyses)
        return contexts, analyses
