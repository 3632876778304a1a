"""
Daily XP history for the streak statistics view.
"""

from dataclasses import dataclass
from datetime import date, timedelta

import pandas as pd

from .progress import ProgressTracker

HISTORY_PERIODS = (7, 30, 90)


@dataclass
class HistorySummary:
    total_days: int
    total_points: int

    @property
    def average_points(self) -> float:
        return self.total_points / self.total_days if self.total_days else 0.0


def daily_history(tracker: ProgressTracker, user_id: str, days: int, today: date) -> pd.DataFrame:
    """
    Points per active day over the last `days` days.

    Returns a DataFrame indexed by date with a single `points` column; days
    without activity are absent.
    """
    since = (today - timedelta(days=days)).isoformat()
    rows = tracker.get_daily_history(user_id, since)
    frame = pd.DataFrame(
        {"points": [row.points for row in rows]},
        index=pd.to_datetime([row.date for row in rows]),
    )
    frame.index.name = "date"
    return frame


def summarize_history(frame: pd.DataFrame) -> HistorySummary:
    return HistorySummary(
        total_days=len(frame),
        total_points=int(frame["points"].sum()) if len(frame) else 0,
    )
