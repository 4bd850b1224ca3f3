"""CSV importer for vehicle telemetry log files."""

import csv
import io
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import CSVImportError, CSVTimestampParseError, MissingColumnsError
from ..models import Row
from .time_utils import parse_epoch_millis

logger = logging.getLogger(__name__)


REQUIRED_COLUMNS = [
    'date', 'battery_level', 'speed', 'power', 'odometer',
    'latitude', 'longitude', 'charger_power',
]

# Columns kept verbatim as text even when they look numeric
STRING_COLUMNS = {
    'date', 'vin', 'vehicle_name', 'display_name', 'software_version',
    'car_version', 'car_type', 'battery_type',
}

# Validation ranges for key fields
VALIDATION_RANGES = {
    'battery_level': (0, 100),   # SOC is 0-100%
    'latitude': (-90, 90),       # Valid GPS range
    'longitude': (-180, 180),    # Valid GPS range
}

TRUE_STRINGS = {'true', 'yes', 'on', '1'}
FALSE_STRINGS = {'false', 'no', 'off', '0'}

MAX_REPORTED_MESSAGES = 10


def normalize_header(header: str) -> str:
    """Trim, lower-case and join inner whitespace with underscores."""
    return '_'.join(header.strip().lower().split())


def coerce_value(column: str, raw: Optional[str]) -> Any:
    """
    Type a raw cell the way a spreadsheet would.

    Empty cells become None, true/false become booleans, numeric text
    becomes float. Identity and date columns stay strings.
    """
    if raw is None:
        return None
    value = raw.strip()
    if value == '' or value == '-':
        return None
    if column in STRING_COLUMNS:
        return value

    lowered = value.lower()
    if lowered == 'true':
        return True
    if lowered == 'false':
        return False

    try:
        return float(value)
    except ValueError:
        return value


def coerce_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def coerce_flag(value: Any) -> Optional[bool]:
    """Tri-state flag: True/False when recognizable, None when missing."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    lowered = str(value).strip().lower()
    if lowered in TRUE_STRINGS:
        return True
    if lowered in FALSE_STRINGS:
        return False
    return bool(lowered)


class TeslaCSVImporter:
    """
    Parse and normalize CSV log files exported by vehicle data loggers.

    The expected format has one row per sample with at least:
    - date: Timestamp in any common format (naive times are UTC)
    - battery_level: State of charge (%)
    - speed (km/h), power (kW, negative while discharging), odometer (km)
    - latitude, longitude
    - charger_power (kW)

    Optional columns include climate_on, is_charging, outside_temp,
    inside_temp, rated_range_km and vehicle identity columns (vin,
    vehicle_name, display_name, software_version, car_version, car_type,
    battery_type).
    """

    @classmethod
    def _validate_row(cls, row: Row) -> List[str]:
        """Return warnings for values outside their plausible ranges."""
        warnings = []

        for field_name, (min_val, max_val) in VALIDATION_RANGES.items():
            value = getattr(row, field_name)
            if value is not None and (value < min_val or value > max_val):
                warnings.append(
                    f"{field_name}={value} outside range [{min_val}, {max_val}]"
                )

        return warnings

    @classmethod
    def parse_csv(
        cls,
        csv_content: str,
        filename: str = '<memory>'
    ) -> Tuple[List[Row], Dict[str, Any]]:
        """
        Parse CSV content into normalized rows.

        Args:
            csv_content: Raw CSV file content as string
            filename: Name used in error messages

        Returns:
            Tuple of (list of Row, stats dict with validation info)

        Raises:
            MissingColumnsError: If the header lacks a required column
        """
        rows = []
        stats = {
            'filename': filename,
            'total_rows': 0,
            'parsed_rows': 0,
            'skipped_rows': 0,
            'validation_warnings': 0,
            'columns_found': [],
            'errors': [],
            'warnings': []
        }

        try:
            # Try to detect delimiter
            dialect = csv.Sniffer().sniff(csv_content[:2000], delimiters=',;\t')
        except csv.Error:
            dialect = csv.excel

        reader = csv.DictReader(io.StringIO(csv_content), dialect=dialect)

        column_mapping = {}
        for col in reader.fieldnames or []:
            if col is not None:
                column_mapping[col] = normalize_header(col)
        stats['columns_found'] = list(column_mapping.values())

        missing = [col for col in REQUIRED_COLUMNS if col not in stats['columns_found']]
        if missing:
            raise MissingColumnsError(filename, missing)

        for row_num, raw_row in enumerate(reader, start=2):  # Header is row 1
            stats['total_rows'] += 1

            try:
                row = cls._parse_row(raw_row, column_mapping, row_num)
            except CSVImportError as e:
                stats['skipped_rows'] += 1
                if len(stats['errors']) < MAX_REPORTED_MESSAGES:
                    stats['errors'].append(str(e))
                continue

            if row is None:
                stats['skipped_rows'] += 1
                continue

            warnings = cls._validate_row(row)
            if warnings:
                stats['validation_warnings'] += len(warnings)
                if len(stats['warnings']) < MAX_REPORTED_MESSAGES:
                    stats['warnings'].append(f"Row {row_num}: {', '.join(warnings)}")

            rows.append(row)
            stats['parsed_rows'] += 1

        logger.debug(
            f"Parsed {filename}: {stats['parsed_rows']} rows, "
            f"{stats['skipped_rows']} skipped"
        )
        return rows, stats

    @classmethod
    def parse_file(cls, path) -> Tuple[List[Row], Dict[str, Any]]:
        """Read and parse a CSV file from disk."""
        path = Path(path)
        try:
            content = path.read_text(encoding='utf-8-sig')
        except (OSError, UnicodeDecodeError) as e:
            raise CSVImportError(f"Failed to read file: {e}", filename=path.name) from e
        return cls.parse_csv(content, filename=path.name)

    @classmethod
    def _parse_row(
        cls,
        raw_row: Dict[str, str],
        column_mapping: Dict[str, str],
        row_num: int
    ) -> Optional[Row]:
        """Parse a single CSV row; returns None for rows that carry no sample."""
        values = {}
        for csv_col, field_name in column_mapping.items():
            values[field_name] = coerce_value(field_name, raw_row.get(csv_col))

        if all(value is None for value in values.values()):
            return None

        raw_date = values.get('date')
        if raw_date is None:
            return None

        epoch_millis = parse_epoch_millis(raw_date)
        if epoch_millis is None:
            raise CSVTimestampParseError(
                "Could not parse timestamp", row_number=row_num, raw_value=raw_date
            )

        battery_level = coerce_number(values.get('battery_level'))
        odometer = coerce_number(values.get('odometer'))
        if battery_level is None or odometer is None:
            raise CSVImportError(
                "Row is missing a numeric battery_level or odometer",
                row_number=row_num
            )

        return Row(
            epoch_millis=epoch_millis,
            date=raw_date,
            battery_level=battery_level,
            odometer=odometer,
            speed=coerce_number(values.get('speed')) or 0.0,
            power=coerce_number(values.get('power')) or 0.0,
            charger_power=coerce_number(values.get('charger_power')) or 0.0,
            latitude=coerce_number(values.get('latitude')),
            longitude=coerce_number(values.get('longitude')),
            climate_on=bool(coerce_flag(values.get('climate_on'))),
            is_charging=coerce_flag(values.get('is_charging')),
            outside_temp=coerce_number(values.get('outside_temp')),
            inside_temp=coerce_number(values.get('inside_temp')),
            rated_range_km=coerce_number(values.get('rated_range_km')),
            vin=values.get('vin'),
            vehicle_name=values.get('vehicle_name'),
            display_name=values.get('display_name'),
            software_version=values.get('software_version'),
            car_version=values.get('car_version'),
            car_type=values.get('car_type'),
            battery_type=values.get('battery_type'),
        )
