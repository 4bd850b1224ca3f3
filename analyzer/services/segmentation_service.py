"""
Trip and charging session segmentation for the EV log analyzer.

Walks one vehicle's time-ordered rows once and runs two independent state
machines over them:

- Trips: Idle -> InTrip on a driving row (moving, or discharging harder than
  the power threshold). A trip closes when the vehicle stops (the stop row is
  the trip's last sample) or when the gap since the previous row exceeds the
  configurable break threshold (the trip ends at the previous row and the
  current row may open the next trip).
- Charging: Idle -> Charging on a charging row (flagged, or charger power
  above zero). A session closes on the first non-charging row or on a gap
  longer than a fixed 15 minutes; the closing row is not part of it.

Keeping the stop row differs from a close rule that ends the trip at the
last driving row: the final stop segment (odometer, battery and duration up
to the stop) counts toward the trip. A parked, moving, stopped sequence
therefore yields a trip covering the moving and stopped samples.

Intervals still open after the last row are closed with the same rules.
Degenerate intervals (too few samples, too little distance, no net charge)
are discarded, not reported as errors.
"""

import logging
from typing import List, Optional, Tuple

from ..calculations import (
    calculate_avg_speed_kph,
    calculate_energy_added,
    calculate_energy_used,
    calculate_finite_mean,
    calculate_flag_ratio,
    calculate_kwh_per_km,
    discard_if_below,
    downsample,
    soc_to_kwh,
)
from ..calculations.constants import (
    CHARGING_BREAK_MINUTES,
    DISTANCE_PRECISION,
    DURATION_PRECISION,
    MAX_TRIP_PATH_POINTS,
    MIN_INTERVAL_POINTS,
    MIN_TRIP_DISTANCE_KM,
    POWER_PRECISION,
    RATIO_PRECISION,
    TEMPERATURE_PRECISION,
)
from ..models import ChargingSession, Row, Settings, Trip
from ..utils.time_utils import iso_from_millis, minutes_between

logger = logging.getLogger(__name__)

is_noise_distance = discard_if_below(MIN_TRIP_DISTANCE_KM)


def is_driving(row: Row, settings: Settings) -> bool:
    return row.speed > 0 or row.power < -settings.power_threshold_kw


def is_charging(row: Row) -> bool:
    return bool(row.is_charging) or row.charger_power > 0


def has_position(row: Row) -> bool:
    return bool(row.latitude) and bool(row.longitude)


class _OpenTrip:
    """Samples and map path collected for a trip in progress."""

    def __init__(self, row: Row):
        self.points: List[Row] = []
        self.path: List[Tuple[float, float]] = []
        self.append(row)

    def append(self, row: Row) -> None:
        self.points.append(row)
        if has_position(row):
            self.path.append((row.latitude, row.longitude))


def build_trip(
    trip_id: int,
    points: List[Row],
    path: List[Tuple[float, float]],
    settings: Settings
) -> Optional[Trip]:
    """
    Turn the samples of a closed driving interval into a Trip.

    Returns:
        Trip, or None when the interval is too short to count
    """
    if len(points) < MIN_INTERVAL_POINTS:
        return None

    start, end = points[0], points[-1]
    raw_distance_km = end.odometer - start.odometer
    distance_km = round(raw_distance_km, DISTANCE_PRECISION)
    if is_noise_distance(distance_km):
        logger.debug(
            f"Discarding trip starting {iso_from_millis(start.epoch_millis)}: "
            f"{distance_km} km is below {MIN_TRIP_DISTANCE_KM} km"
        )
        return None

    duration_minutes = minutes_between(start.epoch_millis, end.epoch_millis)
    capacity = settings.usable_battery_capacity_kwh
    raw_energy_kwh = soc_to_kwh(start.battery_level - end.battery_level, capacity)

    return Trip(
        id=trip_id,
        start_time=iso_from_millis(start.epoch_millis),
        end_time=iso_from_millis(end.epoch_millis),
        duration_minutes=round(duration_minutes, DURATION_PRECISION),
        distance_km=distance_km,
        start_odometer=start.odometer,
        end_odometer=end.odometer,
        avg_speed_kph=calculate_avg_speed_kph(raw_distance_km, duration_minutes),
        max_speed_kph=max([0.0] + [point.speed for point in points]),
        start_battery=start.battery_level,
        end_battery=end.battery_level,
        energy_used_kwh=calculate_energy_used(start.battery_level, end.battery_level, capacity),
        efficiency_kwh_km=calculate_kwh_per_km(raw_energy_kwh, raw_distance_km),
        climate_on_ratio=round(
            calculate_flag_ratio([point.climate_on for point in points]), RATIO_PRECISION
        ),
        path=downsample(path, MAX_TRIP_PATH_POINTS),
        avg_outside_temp_c=calculate_finite_mean(
            [point.outside_temp for point in points], TEMPERATURE_PRECISION
        ),
    )


def build_charging_session(
    session_id: int,
    points: List[Row],
    settings: Settings
) -> Optional[ChargingSession]:
    """
    Turn the samples of a closed charging interval into a ChargingSession.

    Returns:
        ChargingSession, or None when the battery gained no charge
    """
    if len(points) < MIN_INTERVAL_POINTS:
        return None

    start, end = points[0], points[-1]
    energy_added_kwh = calculate_energy_added(
        start.battery_level, end.battery_level, settings.usable_battery_capacity_kwh
    )
    if energy_added_kwh is None:
        logger.debug(
            f"Discarding charging interval starting {iso_from_millis(start.epoch_millis)}: "
            f"battery {start.battery_level}% -> {end.battery_level}%"
        )
        return None

    avg_power_kw = sum(point.charger_power for point in points) / len(points)

    return ChargingSession(
        id=session_id,
        start_time=iso_from_millis(start.epoch_millis),
        end_time=iso_from_millis(end.epoch_millis),
        duration_minutes=round(
            minutes_between(start.epoch_millis, end.epoch_millis), DURATION_PRECISION
        ),
        start_battery=start.battery_level,
        end_battery=end.battery_level,
        energy_added_kwh=energy_added_kwh,
        avg_charge_power_kw=round(avg_power_kw, POWER_PRECISION),
    )


def segment_rows(
    rows: List[Row],
    settings: Settings
) -> Tuple[List[Trip], List[ChargingSession]]:
    """
    Split one vehicle's time-ordered rows into trips and charging sessions.

    Args:
        rows: Rows of a single vehicle, ascending by epoch_millis
        settings: Battery capacity, trip break and power thresholds

    Returns:
        Tuple of (trips, charging sessions), each with dense 1-based ids
    """
    trips: List[Trip] = []
    sessions: List[ChargingSession] = []
    open_trip: Optional[_OpenTrip] = None
    open_charge: Optional[List[Row]] = None

    def close_trip(interval: _OpenTrip) -> None:
        trip = build_trip(len(trips) + 1, interval.points, interval.path, settings)
        if trip is not None:
            trips.append(trip)

    def close_charge(points: List[Row]) -> None:
        session = build_charging_session(len(sessions) + 1, points, settings)
        if session is not None:
            sessions.append(session)

    previous: Optional[Row] = None
    for row in rows:
        elapsed = minutes_between(previous.epoch_millis, row.epoch_millis) if previous else 0.0
        previous = row

        # Trip state machine
        driving = is_driving(row, settings)
        if open_trip is not None:
            if elapsed > settings.trip_min_break_minutes:
                close_trip(open_trip)
                open_trip = None
            elif driving:
                open_trip.append(row)
            else:
                open_trip.append(row)
                close_trip(open_trip)
                open_trip = None
        if open_trip is None and driving:
            open_trip = _OpenTrip(row)

        # Charging state machine
        charging = is_charging(row)
        if open_charge is not None:
            if charging and elapsed <= CHARGING_BREAK_MINUTES:
                open_charge.append(row)
                continue
            close_charge(open_charge)
            open_charge = None
        if charging:
            open_charge = [row]

    if open_trip is not None:
        close_trip(open_trip)
    if open_charge is not None:
        close_charge(open_charge)

    return trips, sessions
