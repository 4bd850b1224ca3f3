"""
Incremental merge of per-vehicle analyses.

Folds a freshly computed batch analysis into the running analysis of the
same vehicle without reprocessing raw rows. Raw rows are gone by the time a
merge happens, so the summary is folded field by field here instead of
being recomputed from trips.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..calculations import calculate_weighted_ratio
from ..calculations.policies import is_empty
from ..models import AnalysisResult, CarInfo, Summary
from ..utils.time_utils import iso_from_millis, millis_from_iso, whole_days_rounded

logger = logging.getLogger(__name__)


def merge_summaries(current: Summary, batch: Summary) -> Summary:
    """Fold two summaries: sums add, max takes max, ratios are recomputed."""
    merged = current.clone()
    merged.total_trips += batch.total_trips
    merged.total_distance_km += batch.total_distance_km
    merged.total_driving_time_minutes += batch.total_driving_time_minutes
    merged.total_energy_consumed_kwh += batch.total_energy_consumed_kwh
    merged.total_charging_sessions += batch.total_charging_sessions
    merged.total_energy_added_kwh += batch.total_energy_added_kwh
    merged.max_speed_ever_kph = max(current.max_speed_ever_kph, batch.max_speed_ever_kph)

    if merged.total_distance_km > 0 and merged.total_driving_time_minutes > 0:
        merged.overall_avg_speed_kph = (
            merged.total_distance_km / (merged.total_driving_time_minutes / 60)
        )
    else:
        merged.overall_avg_speed_kph = 0.0
    merged.overall_efficiency_kwh_km = (
        merged.total_energy_consumed_kwh / merged.total_distance_km
        if merged.total_distance_km > 0 else 0.0
    )
    merged.avg_trip_distance_km = (
        merged.total_distance_km / merged.total_trips if merged.total_trips > 0 else 0.0
    )
    merged.total_climate_on_ratio = calculate_weighted_ratio(
        current.total_climate_on_ratio,
        current.total_driving_time_minutes,
        batch.total_climate_on_ratio,
        batch.total_driving_time_minutes,
    )
    return merged


def merge_car_info(current: CarInfo, batch: CarInfo) -> CarInfo:
    """
    Fold car info: odometer span widens, descriptive fields keep the first
    value seen, the latest rated range reading wins.
    """
    merged = current.clone(
        start_odometer=min(current.start_odometer, batch.start_odometer),
        end_odometer=max(current.end_odometer, batch.end_odometer),
    )

    for field_name in (
        'vin', 'vehicle_name', 'software_version', 'car_type', 'battery_type',
        'avg_outside_temp_c', 'avg_inside_temp_c', 'start_rated_range_km',
    ):
        if is_empty(getattr(merged, field_name)):
            setattr(merged, field_name, getattr(batch, field_name))

    if batch.end_rated_range_km is not None:
        merged.end_rated_range_km = batch.end_rated_range_km

    return merged


def merge_analysis(
    current: Optional[AnalysisResult],
    batch: AnalysisResult
) -> AnalysisResult:
    """
    Fold one vehicle's batch analysis into its running analysis.

    ``current`` is never modified; the caller may keep it for rollback.
    Batch trip and session ids are shifted past the current arrays and
    appended without re-sorting.

    Args:
        current: Running analysis, or None for the first batch
        batch: Analysis of the new batch for the same vehicle

    Returns:
        The merged analysis (``batch`` itself when there is no current one)
    """
    if current is None:
        return batch

    merged = current.clone()
    merged.summary = merge_summaries(current.summary, batch.summary)

    trip_offset = len(merged.trips)
    merged.trips.extend(trip.clone(id=trip.id + trip_offset) for trip in batch.trips)

    session_offset = len(merged.charging_sessions)
    merged.charging_sessions.extend(
        session.clone(id=session.id + session_offset) for session in batch.charging_sessions
    )

    for day, count in batch.trips_by_day.items():
        merged.trips_by_day[day] = merged.trips_by_day.get(day, 0) + count
    merged.trips_by_hour = [
        existing + added for existing, added in zip(merged.trips_by_hour, batch.trips_by_hour)
    ]

    merged.car_info = merge_car_info(current.car_info, batch.car_info)

    start_millis = min(millis_from_iso(current.date_range.start), millis_from_iso(batch.date_range.start))
    end_millis = max(millis_from_iso(current.date_range.end), millis_from_iso(batch.date_range.end))
    merged.date_range.start = iso_from_millis(start_millis)
    merged.date_range.end = iso_from_millis(end_millis)
    merged.car_info.log_duration_days = whole_days_rounded(start_millis, end_millis)

    merged.unique_months = sorted(set(current.unique_months) | set(batch.unique_months))

    return merged


def merge_analyses(
    current_analyses: Optional[Sequence[AnalysisResult]],
    batch_analyses: Sequence[AnalysisResult]
) -> List[AnalysisResult]:
    """
    Fold a batch of per-vehicle analyses into the running list, keyed by vehicle id.

    Vehicles new in the batch are appended in batch order. An empty batch
    returns the current analyses unchanged.
    """
    if not current_analyses:
        return list(batch_analyses)
    if not batch_analyses:
        return list(current_analyses)

    by_vehicle: Dict[str, AnalysisResult] = {
        analysis.vehicle_id: analysis for analysis in current_analyses
    }
    for batch in batch_analyses:
        existing = by_vehicle.get(batch.vehicle_id)
        if existing is None:
            logger.info(f"New vehicle in batch: {batch.vehicle_id}")
        by_vehicle[batch.vehicle_id] = merge_analysis(existing, batch)

    return list(by_vehicle.values())
