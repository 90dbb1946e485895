from .config import TrendAnalysisOptions
from .detector import TrendDetector, TrendSummary, analyze_trends

__all__ = ["TrendAnalysisOptions", "TrendDetector", "TrendSummary", "analyze_trends"]
