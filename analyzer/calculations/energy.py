"""
Energy Conversion Calculations

Handles conversions between battery state of charge and energy:
- SOC percentage to kWh
- Signed energy delta between two SOC readings
"""

from typing import Optional

from .constants import DEFAULT_USABLE_BATTERY_CAPACITY_KWH, ENERGY_PRECISION


def soc_to_kwh(
    soc_percent: float,
    battery_capacity_kwh: float = DEFAULT_USABLE_BATTERY_CAPACITY_KWH
) -> float:
    """
    Convert State of Charge percentage to kWh.

    Args:
        soc_percent: Battery state of charge (0-100%)
        battery_capacity_kwh: Usable battery capacity in kWh

    Returns:
        Energy in kWh

    Examples:
        >>> soc_to_kwh(50.0, 75.0)
        37.5
        >>> soc_to_kwh(100.0, 75.0)
        75.0
    """
    return (soc_percent / 100.0) * battery_capacity_kwh


def calculate_energy_used(
    start_soc: float,
    end_soc: float,
    battery_capacity_kwh: float = DEFAULT_USABLE_BATTERY_CAPACITY_KWH
) -> float:
    """
    Energy drawn from the battery between two SOC readings.

    The result is signed: a battery that rose during an interval (regen,
    logging anomalies) yields a negative value, which is passed through
    unclamped.

    Examples:
        >>> calculate_energy_used(80.0, 75.0, 100.0)
        5.0
        >>> calculate_energy_used(75.0, 80.0, 100.0)
        -5.0
    """
    return round(soc_to_kwh(start_soc - end_soc, battery_capacity_kwh), ENERGY_PRECISION)


def calculate_energy_added(
    start_soc: float,
    end_soc: float,
    battery_capacity_kwh: float = DEFAULT_USABLE_BATTERY_CAPACITY_KWH
) -> Optional[float]:
    """
    Energy added to the battery between two SOC readings.

    Returns:
        kWh added, or None if the battery did not gain charge

    Examples:
        >>> calculate_energy_added(20.0, 80.0, 50.0)
        30.0
        >>> calculate_energy_added(50.0, 50.0, 50.0)  # No net gain
        None
    """
    if start_soc is None or end_soc is None:
        return None

    soc_gained = end_soc - start_soc
    if soc_gained <= 0:
        return None

    return round(soc_to_kwh(soc_gained, battery_capacity_kwh), ENERGY_PRECISION)
