from .trend_report import TrendReportWriter, TrendRunReport

__all__ = [
    "TrendReportWriter",
    "TrendRunReport",
]
