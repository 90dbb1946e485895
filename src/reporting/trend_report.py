# packages one analysis run (per-period distributions + trend summary) into a
# json report under reports/trends, with plain-language notes on data coverage

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "configs"))
import config

from aggregation.journey_aggregator import JourneyStage
from aggregation.temporal_aggregator import PeriodDistribution
from records import to_native
from trends.config import TrendAnalysisOptions
from trends.detector import TrendSummary
from trends.seasonality import MONTHS_PER_YEAR

logger = logging.getLogger(__name__)

REPORT_FILENAME = "trend_report.json"


@dataclass
class TrendRunReport:
    dataset_name: str
    timestamp: str
    total_questions: int
    granularity: str
    options: Dict[str, Any]
    distributions: List[Dict[str, Any]]
    trends: Dict[str, Any]
    notes: List[str]


class TrendReportWriter:

    def __init__(self, reports_dir: Path = None):
        self.settings = config.settings
        self._reports_dir = reports_dir

    def get_reports_dir(self) -> Path:
        reports_dir = self._reports_dir or self.settings.REPORTS_DIR / "trends"
        reports_dir.mkdir(parents=True, exist_ok=True)
        return reports_dir

    def generate_notes(
        self,
        total_questions: int,
        distributions: List[PeriodDistribution],
        summary: TrendSummary,
        options: TrendAnalysisOptions,
    ) -> List[str]:
        notes = []

        if total_questions == 0:
            return ["NO DATA: no questions were available for this run."]

        periods = summary.data_timeframe["periods"] if summary.data_timeframe else 0
        if periods <= options.current_periods:
            notes.append(
                f"SPARSE HISTORY: only {periods} {options.granularity.value} period(s). "
                f"Emerging/fading topics need at least one baseline period."
            )

        needed_months = MONTHS_PER_YEAR * options.seasonal_cycles
        if not summary.seasonal_patterns:
            notes.append(
                f"SEASONALITY: not evaluated or no eligible topics. "
                f"Needs {needed_months} months of history and topics with >= {options.min_sample_size} questions."
            )

        # journey stages where no question could be anchored to a diagnosis
        unanchored = set()
        for distribution in distributions:
            for stage in distribution.journey:
                if stage.question_count > 0 and stage.timing_samples == 0:
                    unanchored.add(stage.stage)
        if unanchored:
            stages = ", ".join(s.value for s in JourneyStage if s in unanchored)
            notes.append(
                f"JOURNEY TIMING: average timing is reported as 0 for stages without "
                f"a matching diagnosis-stage question ({stages})."
            )

        if summary.is_empty:
            notes.append(
                "No significant trends detected at the configured thresholds "
                f"(min sample size {options.min_sample_size}, significance {options.significance_level})."
            )

        return notes

    def generate_report(
        self,
        total_questions: int,
        distributions: List[PeriodDistribution],
        summary: TrendSummary,
        options: TrendAnalysisOptions,
        dataset_name: str = "questions",
    ) -> TrendRunReport:
        return TrendRunReport(
            dataset_name=dataset_name,
            timestamp=datetime.now(timezone.utc).isoformat(),
            total_questions=total_questions,
            granularity=options.granularity.value,
            options=options.to_dict(),
            distributions=[d.to_dict() for d in distributions],
            trends=summary.to_dict(),
            notes=self.generate_notes(total_questions, distributions, summary, options),
        )

    def save_report(self, report: TrendRunReport, filename: str = REPORT_FILENAME) -> Path:
        output_path = self.get_reports_dir() / filename
        with open(output_path, 'w') as f:
            json.dump(to_native(asdict(report)), f, indent=2)
        logger.info(f"Saved trend report to {output_path}")
        return output_path
