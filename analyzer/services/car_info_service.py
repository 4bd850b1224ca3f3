"""
Descriptive vehicle metadata derived from a batch of raw rows.
"""

from typing import List, Optional, Sequence

from ..calculations import (
    calculate_finite_mean,
    first_matching,
    first_non_empty,
    is_finite_number,
    last_matching,
)
from ..models import CarInfo, DateRange, Row, Settings
from ..utils.time_utils import iso_from_millis, month_key, whole_days_rounded


def _first_text(rows: Sequence[Row], *fields: str) -> Optional[str]:
    """First non-empty value of the first field that has one, then the next field."""
    for field_name in fields:
        value = first_non_empty(getattr(row, field_name) for row in rows)
        if value is not None:
            return value
    return None


def _has_odometer(row: Row) -> bool:
    return row.odometer > 0


def extract_car_info(rows: Sequence[Row], settings: Settings, vehicle_id: str) -> CarInfo:
    """
    Build CarInfo for one vehicle from its time-sorted rows.

    Text fields take the first non-empty occurrence. Odometer span ignores
    zero readings; rated range is the first and last finite reading.
    """
    first_odometer = first_matching(rows, _has_odometer)
    last_odometer = last_matching(rows, _has_odometer)
    first_range = first_matching(rows, lambda row: is_finite_number(row.rated_range_km))
    last_range = last_matching(rows, lambda row: is_finite_number(row.rated_range_km))

    return CarInfo(
        id=vehicle_id,
        usable_battery_capacity_kwh=settings.usable_battery_capacity_kwh,
        start_odometer=first_odometer.odometer if first_odometer else 0.0,
        end_odometer=last_odometer.odometer if last_odometer else 0.0,
        log_duration_days=(
            whole_days_rounded(rows[0].epoch_millis, rows[-1].epoch_millis)
            if len(rows) > 1 else 0
        ),
        vin=_first_text(rows, 'vin'),
        vehicle_name=_first_text(rows, 'vehicle_name', 'display_name'),
        software_version=_first_text(rows, 'software_version', 'car_version'),
        car_type=_first_text(rows, 'car_type'),
        battery_type=_first_text(rows, 'battery_type'),
        avg_outside_temp_c=calculate_finite_mean(row.outside_temp for row in rows),
        avg_inside_temp_c=calculate_finite_mean(row.inside_temp for row in rows),
        start_rated_range_km=first_range.rated_range_km if first_range else None,
        end_rated_range_km=last_range.rated_range_km if last_range else None,
    )


def unique_months(rows: Sequence[Row]) -> List[str]:
    """Sorted UTC "YYYY-MM" months the rows cover."""
    return sorted({month_key(row.epoch_millis) for row in rows})


def date_range(rows: Sequence[Row]) -> DateRange:
    """First and last timestamp of time-sorted rows."""
    return DateRange(
        start=iso_from_millis(rows[0].epoch_millis),
        end=iso_from_millis(rows[-1].epoch_millis),
    )
