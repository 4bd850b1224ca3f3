"""
Vehicle partitioning for multi-vehicle log files.

A vehicle is identified solely by its VehicleKey string; rows with equal
keys belong to the same vehicle.
"""

import logging
from typing import Dict, Iterable, List

from ..models import Row

logger = logging.getLogger(__name__)

UNKNOWN_VIN = 'unknown_vin'
UNKNOWN_VEHICLE_NAME = 'Unknown Vehicle'


def vehicle_key(row: Row) -> str:
    """VIN plus display name, e.g. ``"5YJ3E1EA7KF000001-Model 3"``."""
    vin = row.vin or UNKNOWN_VIN
    name = row.vehicle_name or row.display_name or UNKNOWN_VEHICLE_NAME
    return f"{vin}-{name}"


def sort_rows(rows: Iterable[Row]) -> List[Row]:
    """Stable ascending sort by timestamp."""
    return sorted(rows, key=lambda row: row.epoch_millis)


def partition_rows(rows: Iterable[Row]) -> Dict[str, List[Row]]:
    """
    Group rows by vehicle.

    Returns:
        Dict of vehicle key -> time-sorted rows, in first-seen vehicle order
    """
    partitions: Dict[str, List[Row]] = {}
    for row in rows:
        partitions.setdefault(vehicle_key(row), []).append(row)

    return {key: sort_rows(vehicle_rows) for key, vehicle_rows in partitions.items()}


def merge_partitions(
    existing: Dict[str, List[Row]],
    new: Dict[str, List[Row]]
) -> Dict[str, List[Row]]:
    """
    Combine two partitions into a new one, re-sorting every touched vehicle.

    Neither input is modified.
    """
    merged = dict(existing)
    for key, rows in new.items():
        merged[key] = sort_rows([*existing.get(key, []), *rows])

    if len(merged) > len(existing):
        logger.debug(f"Partition grew from {len(existing)} to {len(merged)} vehicles")
    return merged
