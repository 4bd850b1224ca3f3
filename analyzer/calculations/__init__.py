"""
EV Log Analyzer Calculation Module

Consolidated calculation utilities for energy, efficiency and statistics,
plus the named policy functions the services apply.

Usage:
    from analyzer.calculations import calculate_energy_used, downsample
    from analyzer.calculations.constants import MIN_TRIP_DISTANCE_KM
"""

# Energy conversions
from .energy import (
    calculate_energy_added,
    calculate_energy_used,
    soc_to_kwh,
)

# Efficiency calculations
from .efficiency import (
    calculate_avg_speed_kph,
    calculate_kwh_per_km,
)

# Statistical calculations
from .statistics import (
    calculate_finite_mean,
    calculate_flag_ratio,
    calculate_weighted_ratio,
    finite_values,
    is_finite_number,
)

# Policies
from .policies import (
    discard_if_below,
    downsample,
    first_matching,
    first_non_empty,
    last_matching,
)

# Constants (re-export for convenience)
from .constants import (
    CHARGING_BREAK_MINUTES,
    MAX_CHART_POINTS,
    MAX_TRIP_PATH_POINTS,
    MIN_TRIP_DISTANCE_KM,
)

__all__ = [
    # Energy
    "soc_to_kwh",
    "calculate_energy_used",
    "calculate_energy_added",
    # Efficiency
    "calculate_kwh_per_km",
    "calculate_avg_speed_kph",
    # Statistics
    "calculate_finite_mean",
    "calculate_flag_ratio",
    "calculate_weighted_ratio",
    "finite_values",
    "is_finite_number",
    # Policies
    "first_non_empty",
    "first_matching",
    "last_matching",
    "discard_if_below",
    "downsample",
    # Constants
    "MIN_TRIP_DISTANCE_KM",
    "CHARGING_BREAK_MINUTES",
    "MAX_TRIP_PATH_POINTS",
    "MAX_CHART_POINTS",
]
