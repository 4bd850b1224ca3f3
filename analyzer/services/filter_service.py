"""
Date-range views of a committed analysis.

Narrows an analysis to a window without re-segmenting raw rows: trips and
charging sessions are selected by start time and every derived field is
recomputed from the selection.
"""

from datetime import datetime
from typing import Optional

from ..models import AnalysisResult
from ..utils.time_utils import (
    day_window,
    millis_from_iso,
    month_window,
    to_epoch_millis,
    whole_days_ceil,
)
from ..utils.wide_events import track_operation
from .metrics_service import calculate_summary_and_metrics


def _in_window(start_time: str, start_millis: Optional[int], end_millis: Optional[int]) -> bool:
    millis = millis_from_iso(start_time)
    if start_millis is not None and millis < start_millis:
        return False
    if end_millis is not None and millis > end_millis:
        return False
    return True


def filter_analysis_by_date(
    full_analysis: AnalysisResult,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None
) -> AnalysisResult:
    """
    Restrict an analysis to trips and sessions starting within [start, end].

    The odometer span comes from the first and last selected trip in
    chronological order. An empty selection resets the odometer span and
    log duration to 0. A bounded, non-empty window reports its own length
    in days (rounded up) as the log duration.

    Args:
        full_analysis: Analysis to narrow; left untouched
        start: Inclusive lower bound, or None for no lower bound
        end: Inclusive upper bound, or None for no upper bound

    Returns:
        A new AnalysisResult
    """
    start_millis = to_epoch_millis(start) if start is not None else None
    end_millis = to_epoch_millis(end) if end is not None else None

    with track_operation(
        "filter_analysis",
        vehicle_id=full_analysis.vehicle_id,
        window_start=start.isoformat() if start is not None else None,
        window_end=end.isoformat() if end is not None else None,
    ) as event:
        filtered = full_analysis.clone()
        filtered.trips = [
            trip for trip in filtered.trips
            if _in_window(trip.start_time, start_millis, end_millis)
        ]
        filtered.charging_sessions = [
            session for session in filtered.charging_sessions
            if _in_window(session.start_time, start_millis, end_millis)
        ]

        filtered.summary, filtered.trips_by_day, filtered.trips_by_hour = (
            calculate_summary_and_metrics(filtered.trips, filtered.charging_sessions)
        )

        car_info = filtered.car_info
        if filtered.trips:
            chronological = sorted(filtered.trips, key=lambda trip: millis_from_iso(trip.start_time))
            car_info.start_odometer = chronological[0].start_odometer
            car_info.end_odometer = chronological[-1].end_odometer
            if start_millis is not None and end_millis is not None:
                car_info.log_duration_days = whole_days_ceil(start_millis, end_millis)
        else:
            car_info.start_odometer = 0
            car_info.end_odometer = 0
            car_info.log_duration_days = 0

        event.add_business_metric("trips", len(filtered.trips))
        event.add_business_metric("charging_sessions", len(filtered.charging_sessions))

    return filtered

def filter_analysis_by_month(full_analysis: AnalysisResult, month: str) -> AnalysisResult:
    """Analysis restricted to a UTC "YYYY-MM" month."""
    start, end = month_window(month)
    return filter_analysis_by_date(full_analysis, start, end)


def filter_analysis_by_day(full_analysis: AnalysisResult, day: str) -> AnalysisResult:
    """Analysis restricted to a UTC "YYYY-MM-DD" day."""
    start, end = day_window(day)
    return filter_analysis_by_date(full_analysis, start, end)


def latest_month(analysis: AnalysisResult) -> Optional[str]:
    """Most recent month with data, the default for a detailed view."""
    if not analysis.unique_months:
        return None
    return analysis.unique_months[-1]
