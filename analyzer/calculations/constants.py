"""
Calculation Constants for the EV log analyzer

Centralized location for all thresholds and precisions used in calculations.
Values that users may override come from Config.
"""

from ..config import Config

# Battery Constants
DEFAULT_USABLE_BATTERY_CAPACITY_KWH = Config.USABLE_BATTERY_CAPACITY_KWH

# Segmentation Constants
MIN_TRIP_DISTANCE_KM = 0.1  # Trips at or below this are odometer noise
MIN_INTERVAL_POINTS = 2  # Fewer samples than this cannot form an interval
CHARGING_BREAK_MINUTES = Config.CHARGING_BREAK_MINUTES  # Gap that ends a charging session

# Downsampling Constants
MAX_TRIP_PATH_POINTS = 200  # Map path points kept per trip
MAX_CHART_POINTS = 1500  # Raw rows kept per chart bucket

# Time Constants
MILLIS_PER_MINUTE = 60 * 1000
MILLIS_PER_HOUR = 60 * MILLIS_PER_MINUTE
MILLIS_PER_DAY = 24 * MILLIS_PER_HOUR

# Rounding Precisions (decimal places)
DURATION_PRECISION = 1
DISTANCE_PRECISION = 2
SPEED_PRECISION = 1
ENERGY_PRECISION = 3
EFFICIENCY_PRECISION = 3
RATIO_PRECISION = 3
POWER_PRECISION = 2
TEMPERATURE_PRECISION = 1
