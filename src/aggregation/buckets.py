# calendar bucketing for question timestamps
# bucket keys are pure functions of (timestamp, granularity); pandas periods are
# used only to order keys and fill gaps between them

from collections import defaultdict
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Union

import pandas as pd

from records import QuestionContext, ensure_utc


class Granularity(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


# weeks are monday..sunday to line up with iso weeks
PERIOD_FREQ = {
    Granularity.DAILY: "D",
    Granularity.WEEKLY: "W-SUN",
    Granularity.MONTHLY: "M",
    Granularity.QUARTERLY: "Q",
    Granularity.YEARLY: "Y",
}


def bucket_key(timestamp: Any, granularity: Union[Granularity, str]) -> str:
    """daily YYYY-MM-DD, weekly YYYY-W{n} (iso year/week), monthly YYYY-MM,
    quarterly YYYY-Q{n}, yearly YYYY"""
    granularity = Granularity(granularity)
    ts = ensure_utc(timestamp)

    if granularity == Granularity.DAILY:
        return ts.strftime("%Y-%m-%d")
    if granularity == Granularity.WEEKLY:
        iso_year, iso_week, _ = ts.isocalendar()
        return f"{iso_year}-W{iso_week}"
    if granularity == Granularity.MONTHLY:
        return f"{ts.year}-{ts.month:02d}"
    if granularity == Granularity.QUARTERLY:
        return f"{ts.year}-Q{(ts.month - 1) // 3 + 1}"
    return str(ts.year)


def period_start(key: str, granularity: Union[Granularity, str]) -> pd.Period:
    """inverse of bucket_key: the pandas period a key stands for"""
    granularity = Granularity(granularity)
    freq = PERIOD_FREQ[granularity]

    if granularity == Granularity.WEEKLY:
        year, week = key.split("-W")
        monday = date.fromisocalendar(int(year), int(week), 1)
        return pd.Period(pd.Timestamp(monday), freq=freq)
    if granularity == Granularity.QUARTERLY:
        year, quarter = key.split("-Q")
        return pd.Period(year=int(year), quarter=int(quarter), freq=freq)
    if granularity == Granularity.YEARLY:
        return pd.Period(year=int(key), freq=freq)
    return pd.Period(key, freq=freq)


def key_for_period(period: pd.Period, granularity: Union[Granularity, str]) -> str:
    return bucket_key(period.start_time, granularity)


def sort_periods(keys: Iterable[str], granularity: Union[Granularity, str]) -> List[str]:
    return sorted(set(keys), key=lambda k: period_start(k, granularity))


def fill_periods(keys: Iterable[str], granularity: Union[Granularity, str]) -> List[str]:
    """every bucket between the first and last key, chronological, no gaps"""
    periods = [period_start(k, granularity) for k in set(keys)]
    if not periods:
        return []
    granularity = Granularity(granularity)
    full_range = pd.period_range(min(periods), max(periods), freq=PERIOD_FREQ[granularity])
    return [key_for_period(p, granularity) for p in full_range]


def group_by_period(
    questions: Iterable[QuestionContext],
    granularity: Union[Granularity, str],
) -> Dict[str, List[QuestionContext]]:
    """single pass; buckets and the questions inside them keep insertion order"""
    grouped: Dict[str, List[QuestionContext]] = defaultdict(list)
    for question in questions:
        grouped[bucket_key(question.timestamp, granularity)].append(question)
    return dict(grouped)
