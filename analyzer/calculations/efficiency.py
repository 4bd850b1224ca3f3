"""
Efficiency Calculations

Handles driving efficiency metrics:
- kWh per km
- Average speed over an interval
"""

from .constants import EFFICIENCY_PRECISION, SPEED_PRECISION


def calculate_kwh_per_km(energy_kwh: float, distance_km: float) -> float:
    """
    Calculate efficiency in kWh/km.

    Returns 0 when there is no distance to divide by.

    Examples:
        >>> calculate_kwh_per_km(5.0, 5.0)
        1.0
        >>> calculate_kwh_per_km(5.0, 0)
        0.0
    """
    if not distance_km or distance_km <= 0:
        return 0.0
    return round(energy_kwh / distance_km, EFFICIENCY_PRECISION)


def calculate_avg_speed_kph(distance_km: float, duration_minutes: float) -> float:
    """
    Calculate average speed from distance and elapsed minutes.

    Examples:
        >>> calculate_avg_speed_kph(30.0, 30.0)
        60.0
        >>> calculate_avg_speed_kph(30.0, 0)
        0.0
    """
    if not distance_km or distance_km <= 0:
        return 0.0
    if not duration_minutes or duration_minutes <= 0:
        return 0.0
    return round(distance_km / (duration_minutes / 60), SPEED_PRECISION)
