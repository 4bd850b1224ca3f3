import os


class Config:
    """Application configuration from environment variables."""

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Default analysis settings (overridable per run via Settings)
    USABLE_BATTERY_CAPACITY_KWH = float(os.environ.get('USABLE_BATTERY_CAPACITY_KWH', 100))
    TRIP_MIN_BREAK_MINUTES = float(os.environ.get('TRIP_MIN_BREAK_MINUTES', 3))
    POWER_THRESHOLD_KW = float(os.environ.get('POWER_THRESHOLD_KW', 0.1))

    # Charging sessions always split on a fixed gap, independent of trip settings
    CHARGING_BREAK_MINUTES = 15

    # Batch processing
    BATCH_SIZE = int(os.environ.get('BATCH_SIZE', 10))

    # Wide event sampling
    EVENT_SAMPLE_RATE = float(os.environ.get('EVENT_SAMPLE_RATE', 1.0))
    SLOW_BATCH_THRESHOLD_MS = float(os.environ.get('SLOW_BATCH_THRESHOLD_MS', 1000))
