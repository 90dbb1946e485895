# local pipeline runner
# load -> clean -> build contexts -> classify -> aggregate -> detect trends -> report
# with timing for each step

import argparse
import sys
import time
import logging
from collections import Counter
from pathlib import Path
from datetime import datetime, timezone

sys.path.insert(0, str(Path(__file__).parent / "configs"))
sys.path.insert(0, str(Path(__file__).parent / "src"))

import config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger("pipeline")

# helpers

DIVIDER = "=" * 60
TOTAL_STEPS = 6


def step(number, name):
    logger.info(f"\n{DIVIDER}\n  Step {number}/{TOTAL_STEPS}: {name}\n{DIVIDER}")


def timed(fn):
    start = time.time()
    result = fn()
    elapsed = time.time() - start
    logger.info(f"  completed in {elapsed:.1f}s")
    return result, elapsed


def run(args):
    settings = config.settings
    settings.ensure_directories()

    run_id = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    metrics = {}
    logger.info(f"Pipeline run: {run_id}")

    from preprocessing.question_preprocessor import QuestionPreprocessor
    from trends.config import TrendAnalysisOptions

    options = TrendAnalysisOptions(
        granularity=args.granularity,
        min_sample_size=args.min_sample_size,
        significance_level=args.significance_level,
        forecast_horizon=args.forecast_horizon,
    )
    preprocessor = QuestionPreprocessor()

    # 1. load raw question records
    step(1, "Load questions")

    def load_questions():
        return preprocessor.load_data(args.input)

    df, metrics["load_questions"] = timed(load_questions)
    logger.info(f"  {len(df)} raw records")

    # 2. text cleanup
    step(2, "Clean question text")
    before = len(df)
    df, metrics["clean_questions"] = timed(preprocessor.clean)
    logger.info(f"  {before} → {len(df)} records")

    # 3. question contexts
    step(3, "Build question contexts")
    contexts, metrics["build_contexts"] = timed(preprocessor.build_contexts)
    if not contexts:
        logger.error("No usable question records, halting pipeline")
        sys.exit(1)

    # 4. rule-based classification
    step(4, "Classify questions")

    def classify():
        return preprocessor.classify(contexts)

    analyses, metrics["classify_questions"] = timed(classify)
    urgency = Counter(a.decision_point.urgency.value for a in analyses)
    severity = Counter(a.information_gap.severity.value for a in analyses)
    logger.info(f"  urgency: {dict(urgency)}")
    logger.info(f"  gap severity: {dict(severity)}")
    if urgency.get("high"):
        logger.warning(f"  {urgency['high']} questions flagged as high urgency")
    if not args.skip_save:
        preprocessor.save(contexts, analyses)

    # 5. aggregate and detect trends
    step(5, "Aggregate + detect trends")
    from aggregation.temporal_aggregator import TemporalAggregator
    from trends.detector import analyze_trends

    aggregator = TemporalAggregator()

    def aggregate():
        return aggregator.aggregate(contexts, options.granularity)

    distributions, metrics["aggregate"] = timed(aggregate)

    def detect():
        return analyze_trends(contexts, options, aggregator)

    summary, metrics["detect_trends"] = timed(detect)
    for topic in summary.emerging_topics[:5]:
        logger.info(f"  emerging: {topic.name} ({topic.percentage_change:+.0f}%, velocity {topic.velocity_score:.2f})")
    for corr in summary.correlations[:5]:
        novel = " [novel]" if corr.is_novel else ""
        logger.info(f"  correlated: {corr.source_name} ~ {corr.target_name} (r={corr.correlation_coefficient:.2f}){novel}")

    # 6. report
    step(6, "Write trend report")
    from reporting.trend_report import TrendReportWriter

    def write_report():
        writer = TrendReportWriter()
        report = writer.generate_report(len(contexts), distributions, summary, options)
        for note in report.notes:
            logger.info(f"  note: {note}")
        return writer.save_report(report, filename=f"trend_report_{run_id}.json")

    report_path, metrics["write_report"] = timed(write_report)
    logger.info(f"  report → {report_path}")

    # summary
    total = sum(metrics.values())
    logger.info(f"\n{DIVIDER}\n  Pipeline Complete\n{DIVIDER}")
    logger.info("")
    for name, duration in metrics.items():
        logger.info(f"  {name:<30s} {duration:>9.2f}s")
    logger.info(f"  {'─' * 42}")
    logger.info(f"  {'TOTAL':<30s} {total:>9.2f}s")
    logger.info(f"\n  run_id: {run_id}")


def main():
    parser = argparse.ArgumentParser(
        description="Local clinical question trend pipeline runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  python run_pipeline.py                                  # data/raw/questions/questions.jsonl, monthly
  python run_pipeline.py --input export.csv --granularity weekly
  python run_pipeline.py --min-sample-size 10 --significance-level 0.01
        """,
    )
    parser.add_argument(
        "--input", type=Path, default=None,
        help="Question export (.json, .jsonl, .csv or .parquet). Defaults to data/raw/questions/questions.jsonl",
    )
    parser.add_argument(
        "--granularity", choices=["daily", "weekly", "monthly", "quarterly", "yearly"], default=None,
        help="Time bucket size (default: TREND_GRANULARITY)",
    )
    parser.add_argument(
        "--min-sample-size", type=int, default=None,
        help="Minimum occurrences for a topic or topic pair to be analysed (default: TREND_MIN_SAMPLE_SIZE)",
    )
    parser.add_argument(
        "--significance-level", type=float, default=None,
        help="p-value cutoff for emerging topics and correlations (default: TREND_SIGNIFICANCE_LEVEL)",
    )
    parser.add_argument(
        "--forecast-horizon", type=int, default=None,
        help="Number of periods to forecast ahead (default: TREND_FORECAST_HORIZON)",
    )
    parser.add_argument(
        "--skip-save", action="store_true",
        help="Do not write the classified questions file",
    )

    args = parser.parse_args()
    run(args)


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        raise
    except Exception as e:
        logger.error(f"Pipeline failed: {e}", exc_info=True)
        sys.exit(1)
