"""Utility modules for the EV log analyzer."""

from .csv_importer import REQUIRED_COLUMNS, TeslaCSVImporter
from .time_utils import (
    day_key,
    day_window,
    iso_from_millis,
    local_hour,
    millis_from_iso,
    month_key,
    month_window,
    parse_datetime,
    parse_epoch_millis,
    utc_weekday_abbrev,
)
from .wide_events import WideEvent, configure_logging, track_operation

__all__ = [
    'REQUIRED_COLUMNS',
    'TeslaCSVImporter',
    'day_key',
    'day_window',
    'iso_from_millis',
    'local_hour',
    'millis_from_iso',
    'month_key',
    'month_window',
    'parse_datetime',
    'parse_epoch_millis',
    'utc_weekday_abbrev',
    'WideEvent',
    'configure_logging',
    'track_operation',
]
