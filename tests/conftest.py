"""
Pytest fixtures for EV log analyzer tests.
"""

import os
import sys

import pytest

# Make the analyzer package importable without installing it
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from analyzer.models import Settings  # noqa: E402

from factories import RowFactory  # noqa: E402


@pytest.fixture
def settings():
    """Settings matching the reference scenario: 100 kWh, 3 min break, 0.1 kW."""
    return Settings(
        usable_battery_capacity_kwh=100.0,
        trip_min_break_minutes=3.0,
        power_threshold_kw=0.1,
    )


@pytest.fixture
def drive_then_charge_rows():
    """A 5.5 km drive ending on a stop row, then a 5-sample charge an hour later."""
    rows = RowFactory.drive(start_minute=0, samples=6, km_per_sample=1.0)
    rows.append(RowFactory.build(minute=6, odometer=1005.5, battery_level=76.5))
    rows.extend(RowFactory.charge(start_minute=60, samples=5, start_battery=76.0, odometer=1005.5))
    return rows


@pytest.fixture
def sample_csv_content():
    """CSV log with a short drive followed by a charge."""
    return (
        "date,battery_level,speed,power,odometer,latitude,longitude,charger_power,"
        "climate_on,outside_temp,vin,vehicle_name,software_version\n"
        "2024-03-04T08:00:00Z,80,0,0,1000.0,52.52,13.405,0,false,10,VIN1,Model 3,2024.2.7\n"
        "2024-03-04T08:01:00Z,80,40,-12,1000.0,52.521,13.406,0,true,10,VIN1,Model 3,2024.2.7\n"
        "2024-03-04T08:02:00Z,79,55,-15,1001.0,52.522,13.407,0,true,11,VIN1,Model 3,2024.2.7\n"
        "2024-03-04T08:03:00Z,78,0,0,1002.0,52.523,13.408,0,false,12,VIN1,Model 3,2024.2.7\n"
        "2024-03-04T09:00:00Z,78,0,0,1002.0,52.523,13.408,11,false,12,VIN1,Model 3,2024.2.7\n"
        "2024-03-04T09:10:00Z,80,0,0,1002.0,52.523,13.408,11,false,12,VIN1,Model 3,2024.2.7\n"
        "2024-03-04T09:20:00Z,82,0,0,1002.0,52.523,13.408,0,false,12,VIN1,Model 3,2024.2.7\n"
    )
