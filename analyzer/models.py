"""
Data models for the EV log analyzer.

Plain dataclasses, one per entity. Every entity exposes ``to_dict()`` for
serialization by the surrounding storage/display collaborators and an
explicit ``clone()`` so the merge engine can copy a running result without
a serialization round trip.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .config import Config
from .exceptions import ConfigurationError

WEEKDAY_ABBREVIATIONS = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']
HOURS_PER_DAY = 24


def _is_finite(value) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


@dataclass
class Settings:
    """User-adjustable analysis parameters."""

    usable_battery_capacity_kwh: float = Config.USABLE_BATTERY_CAPACITY_KWH
    trip_min_break_minutes: float = Config.TRIP_MIN_BREAK_MINUTES
    power_threshold_kw: float = Config.POWER_THRESHOLD_KW

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if not _is_finite(self.usable_battery_capacity_kwh) or self.usable_battery_capacity_kwh <= 0:
            raise ConfigurationError(
                "Usable battery capacity must be a finite number greater than 0",
                config_key='usable_battery_capacity_kwh'
            )
        if not _is_finite(self.trip_min_break_minutes) or self.trip_min_break_minutes < 0:
            raise ConfigurationError(
                "Trip break threshold must be a finite number of at least 0",
                config_key='trip_min_break_minutes'
            )
        if not _is_finite(self.power_threshold_kw) or self.power_threshold_kw < 0:
            raise ConfigurationError(
                "Power threshold must be a finite number of at least 0",
                config_key='power_threshold_kw'
            )

    def to_dict(self):
        return {
            'usable_battery_capacity_kwh': self.usable_battery_capacity_kwh,
            'trip_min_break_minutes': self.trip_min_break_minutes,
            'power_threshold_kw': self.power_threshold_kw,
        }


@dataclass
class Row:
    """A single normalized telemetry sample."""

    epoch_millis: int
    battery_level: float
    odometer: float
    speed: float = 0.0
    power: float = 0.0
    charger_power: float = 0.0
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    climate_on: bool = False
    is_charging: Optional[bool] = None
    outside_temp: Optional[float] = None
    inside_temp: Optional[float] = None
    rated_range_km: Optional[float] = None
    vin: Optional[str] = None
    vehicle_name: Optional[str] = None
    display_name: Optional[str] = None
    software_version: Optional[str] = None
    car_version: Optional[str] = None
    car_type: Optional[str] = None
    battery_type: Optional[str] = None
    date: Optional[str] = None

    def to_dict(self):
        return {
            'epoch_millis': self.epoch_millis,
            'date': self.date,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'battery_level': self.battery_level,
            'speed': self.speed,
            'power': self.power,
            'odometer': self.odometer,
            'charger_power': self.charger_power,
            'climate_on': self.climate_on,
            'is_charging': self.is_charging,
            'outside_temp': self.outside_temp,
            'inside_temp': self.inside_temp,
            'rated_range_km': self.rated_range_km,
            'vin': self.vin,
            'vehicle_name': self.vehicle_name,
            'display_name': self.display_name,
            'software_version': self.software_version,
            'car_version': self.car_version,
            'car_type': self.car_type,
            'battery_type': self.battery_type,
        }


@dataclass
class Trip:
    """A driving interval that survived the minimum-distance filter."""

    id: int
    start_time: str
    end_time: str
    duration_minutes: float
    distance_km: float
    start_odometer: float
    end_odometer: float
    avg_speed_kph: float
    max_speed_kph: float
    start_battery: float
    end_battery: float
    energy_used_kwh: float
    efficiency_kwh_km: float
    climate_on_ratio: float
    path: List[Tuple[float, float]] = field(default_factory=list)
    avg_outside_temp_c: Optional[float] = None

    def clone(self, **overrides) -> 'Trip':
        values = dict(self.__dict__, path=list(self.path))
        values.update(overrides)
        return Trip(**values)

    def to_dict(self):
        return {
            'id': self.id,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'duration_minutes': self.duration_minutes,
            'distance_km': self.distance_km,
            'start_odometer': self.start_odometer,
            'end_odometer': self.end_odometer,
            'avg_speed_kph': self.avg_speed_kph,
            'max_speed_kph': self.max_speed_kph,
            'start_battery': self.start_battery,
            'end_battery': self.end_battery,
            'energy_used_kwh': self.energy_used_kwh,
            'efficiency_kwh_km': self.efficiency_kwh_km,
            'climate_on_ratio': self.climate_on_ratio,
            'path': [list(point) for point in self.path],
            'avg_outside_temp_c': self.avg_outside_temp_c,
        }


@dataclass
class ChargingSession:
    """A charging interval with a positive net battery gain."""

    id: int
    start_time: str
    end_time: str
    duration_minutes: float
    start_battery: float
    end_battery: float
    energy_added_kwh: float
    avg_charge_power_kw: float

    def clone(self, **overrides) -> 'ChargingSession':
        values = dict(self.__dict__)
        values.update(overrides)
        return ChargingSession(**values)

    def to_dict(self):
        return {
            'id': self.id,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'duration_minutes': self.duration_minutes,
            'start_battery': self.start_battery,
            'end_battery': self.end_battery,
            'energy_added_kwh': self.energy_added_kwh,
            'avg_charge_power_kw': self.avg_charge_power_kw,
        }


@dataclass
class Summary:
    """Totals derived from a trip and charging session set."""

    total_trips: int = 0
    total_distance_km: float = 0.0
    total_driving_time_minutes: float = 0.0
    overall_avg_speed_kph: float = 0.0
    total_energy_consumed_kwh: float = 0.0
    overall_efficiency_kwh_km: float = 0.0
    total_charging_sessions: int = 0
    total_energy_added_kwh: float = 0.0
    total_climate_on_ratio: float = 0.0
    max_speed_ever_kph: float = 0.0
    avg_trip_distance_km: float = 0.0

    def clone(self) -> 'Summary':
        return Summary(**self.__dict__)

    def to_dict(self):
        return dict(self.__dict__)


@dataclass
class CarInfo:
    """Descriptive metadata for one vehicle."""

    id: str
    usable_battery_capacity_kwh: float
    start_odometer: float = 0.0
    end_odometer: float = 0.0
    log_duration_days: int = 0
    vin: Optional[str] = None
    vehicle_name: Optional[str] = None
    software_version: Optional[str] = None
    car_type: Optional[str] = None
    battery_type: Optional[str] = None
    avg_outside_temp_c: Optional[float] = None
    avg_inside_temp_c: Optional[float] = None
    start_rated_range_km: Optional[float] = None
    end_rated_range_km: Optional[float] = None

    def clone(self, **overrides) -> 'CarInfo':
        values = dict(self.__dict__)
        values.update(overrides)
        return CarInfo(**values)

    def to_dict(self):
        return dict(self.__dict__)


@dataclass
class DateRange:
    start: str
    end: str

    def clone(self) -> 'DateRange':
        return DateRange(start=self.start, end=self.end)

    def to_dict(self):
        return {'start': self.start, 'end': self.end}


@dataclass
class FileInfo:
    """Provenance of the rows an analysis was built from."""

    name: str
    size_mb: float = 0.0
    rows: int = 0

    def clone(self) -> 'FileInfo':
        return FileInfo(name=self.name, size_mb=self.size_mb, rows=self.rows)

    def to_dict(self):
        return {'name': self.name, 'size_mb': self.size_mb, 'rows': self.rows}


def empty_trips_by_hour() -> List[int]:
    return [0] * HOURS_PER_DAY


@dataclass
class AnalysisResult:
    """Everything derived for one vehicle."""

    summary: Summary
    trips: List[Trip]
    charging_sessions: List[ChargingSession]
    trips_by_day: Dict[str, int]
    trips_by_hour: List[int]
    car_info: CarInfo
    date_range: DateRange
    unique_months: List[str]
    file_info: FileInfo

    @property
    def vehicle_id(self) -> str:
        return self.car_info.id

    def clone(self) -> 'AnalysisResult':
        """Deep copy of every nested entity."""
        return AnalysisResult(
            summary=self.summary.clone(),
            trips=[trip.clone() for trip in self.trips],
            charging_sessions=[session.clone() for session in self.charging_sessions],
            trips_by_day=dict(self.trips_by_day),
            trips_by_hour=list(self.trips_by_hour),
            car_info=self.car_info.clone(),
            date_range=self.date_range.clone(),
            unique_months=list(self.unique_months),
            file_info=self.file_info.clone(),
        )

    def to_dict(self):
        return {
            'summary': self.summary.to_dict(),
            'trips': [trip.to_dict() for trip in self.trips],
            'charging_sessions': [session.to_dict() for session in self.charging_sessions],
            'trips_by_day': dict(self.trips_by_day),
            'trips_by_hour': list(self.trips_by_hour),
            'car_info': self.car_info.to_dict(),
            'date_range': self.date_range.to_dict(),
            'unique_months': list(self.unique_months),
            'file_info': self.file_info.to_dict(),
        }
