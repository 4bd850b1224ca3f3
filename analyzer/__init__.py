"""EV log analyzer: trips, charging sessions and statistics from vehicle telemetry logs."""

from .models import (
    AnalysisResult,
    CarInfo,
    ChargingSession,
    DateRange,
    FileInfo,
    Row,
    Settings,
    Summary,
    Trip,
)

__version__ = "1.0.0"

__all__ = [
    'AnalysisResult',
    'CarInfo',
    'ChargingSession',
    'DateRange',
    'FileInfo',
    'Row',
    'Settings',
    'Summary',
    'Trip',
]
