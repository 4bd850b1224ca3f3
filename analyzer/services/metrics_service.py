"""
Summary statistics and trip histograms.

Everything here is a pure reduction over trips and charging sessions, so
recomputing is always safe and always preferred over patching a summary.
"""

from typing import Dict, List, Sequence, Tuple

from ..models import ChargingSession, Summary, Trip, empty_trips_by_hour
from ..utils.time_utils import local_hour, millis_from_iso, utc_weekday_abbrev


def calculate_summary(trips: Sequence[Trip], sessions: Sequence[ChargingSession]) -> Summary:
    """
    Reduce trips and charging sessions to a Summary.

    Ratios fall back to 0 when their denominator is zero; the climate ratio is
    weighted by trip duration and divides by 1 when there is no driving time.
    """
    total_distance_km = sum(trip.distance_km for trip in trips)
    total_minutes = sum(trip.duration_minutes for trip in trips)
    total_energy_kwh = sum(trip.energy_used_kwh for trip in trips)
    weighted_climate = sum(trip.climate_on_ratio * trip.duration_minutes for trip in trips)

    if total_distance_km > 0 and total_minutes > 0:
        overall_avg_speed = total_distance_km / (total_minutes / 60)
    else:
        overall_avg_speed = 0.0

    return Summary(
        total_trips=len(trips),
        total_distance_km=total_distance_km,
        total_driving_time_minutes=total_minutes,
        overall_avg_speed_kph=overall_avg_speed,
        total_energy_consumed_kwh=total_energy_kwh,
        overall_efficiency_kwh_km=(
            total_energy_kwh / total_distance_km if total_distance_km > 0 else 0.0
        ),
        total_charging_sessions=len(sessions),
        total_energy_added_kwh=sum(session.energy_added_kwh for session in sessions),
        total_climate_on_ratio=weighted_climate / (total_minutes or 1),
        max_speed_ever_kph=max((trip.max_speed_kph for trip in trips), default=0.0),
        avg_trip_distance_km=total_distance_km / len(trips) if trips else 0.0,
    )


def count_trips_by_day(trips: Sequence[Trip]) -> Dict[str, int]:
    """Trip counts keyed by the UTC weekday of each trip's start."""
    counts: Dict[str, int] = {}
    for trip in trips:
        day = utc_weekday_abbrev(millis_from_iso(trip.start_time))
        counts[day] = counts.get(day, 0) + 1
    return counts


def count_trips_by_hour(trips: Sequence[Trip], tz=None) -> List[int]:
    """Trip counts indexed by the local hour of each trip's start."""
    counts = empty_trips_by_hour()
    for trip in trips:
        counts[local_hour(millis_from_iso(trip.start_time), tz)] += 1
    return counts


def calculate_summary_and_metrics(
    trips: Sequence[Trip],
    sessions: Sequence[ChargingSession],
    tz=None
) -> Tuple[Summary, Dict[str, int], List[int]]:
    """
    Compute the summary plus day-of-week and hour-of-day histograms.

    Args:
        trips: Trips to aggregate
        sessions: Charging sessions to aggregate
        tz: Timezone for the hour histogram (default: process local time)

    Returns:
        Tuple of (summary, trips_by_day, trips_by_hour)
    """
    return (
        calculate_summary(trips, sessions),
        count_trips_by_day(trips),
        count_trips_by_hour(trips, tz),
    )
