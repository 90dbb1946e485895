# central configuration for the trend pipeline
# loads env vars and provides paths + analysis defaults used everywhere

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    # paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    RAW_DATA_DIR: Path = PROJECT_ROOT / "data" / "raw"
    PROCESSED_DATA_DIR: Path = PROJECT_ROOT / "data" / "processed"
    REPORTS_DIR: Path = PROJECT_ROOT / "reports"
    CONFIGS_DIR: Path = PROJECT_ROOT / "configs"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # classifier rule table (pattern, label) per taxonomy
    CLASSIFICATION_RULES_PATH: Path = Path(
        os.getenv("CLASSIFICATION_RULES_PATH", str(CONFIGS_DIR / "classification_rules.yaml"))
    )

    # trend analysis defaults (callers can override per request)
    TREND_GRANULARITY: str = os.getenv("TREND_GRANULARITY", "monthly")
    TREND_MIN_SAMPLE_SIZE: int = int(os.getenv("TREND_MIN_SAMPLE_SIZE", "5"))
    TREND_SIGNIFICANCE_LEVEL: float = float(os.getenv("TREND_SIGNIFICANCE_LEVEL", "0.05"))
    TREND_BASELINE_PERIODS: int = int(os.getenv("TREND_BASELINE_PERIODS", "3"))
    TREND_FORECAST_HORIZON: int = int(os.getenv("TREND_FORECAST_HORIZON", "3"))

    # api
    API_CORS_ORIGINS: List[str] = field(
        default_factory=lambda: _env_list("API_CORS_ORIGINS", "http://localhost:3000")
    )

    def ensure_directories(self):
        dirs = [
            self.RAW_DATA_DIR / "questions",
            self.PROCESSED_DATA_DIR / "questions",
            self.REPORTS_DIR / "trends",
            self.LOGS_DIR,
        ]
        for d in dirs:
            d.mkdir(parents=True, exist_ok=True)


settings = Settings()
