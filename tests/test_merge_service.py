"""
Tests for incremental merging of analyses.
"""

import pytest

from analyzer.models import CarInfo
from analyzer.services.merge_service import (
    merge_analyses,
    merge_analysis,
    merge_car_info,
    merge_summaries,
)
from factories import (
    AnalysisFactory,
    ChargingSessionFactory,
    TripFactory,
    VEHICLE_ID,
)

DAY_MINUTES = 24 * 60


@pytest.fixture
def current():
    trips = [
        TripFactory.build(id=1, minute=0, distance_km=20.0, duration_minutes=30.0,
                          energy_used_kwh=3.0, climate_on_ratio=1.0, max_speed_kph=90.0),
        TripFactory.build(id=2, minute=60, distance_km=10.0, duration_minutes=10.0,
                          energy_used_kwh=2.0, climate_on_ratio=1.0, max_speed_kph=70.0),
    ]
    sessions = [ChargingSessionFactory.build(id=1, minute=120, energy_added_kwh=10.0)]
    return AnalysisFactory.build(
        trips=trips, sessions=sessions, start_minute=0, end_minute=180,
        start_odometer=1000.0, end_odometer=1030.0,
    )


@pytest.fixture
def batch():
    trips = [
        TripFactory.build(id=1, minute=2 * DAY_MINUTES, distance_km=30.0, duration_minutes=40.0,
                          energy_used_kwh=5.0, climate_on_ratio=0.0, max_speed_kph=130.0),
    ]
    sessions = [
        ChargingSessionFactory.build(id=1, minute=2 * DAY_MINUTES + 60, energy_added_kwh=4.0),
        ChargingSessionFactory.build(id=2, minute=2 * DAY_MINUTES + 200, energy_added_kwh=6.0),
    ]
    return AnalysisFactory.build(
        trips=trips, sessions=sessions,
        start_minute=2 * DAY_MINUTES, end_minute=2 * DAY_MINUTES + 300,
        start_odometer=1030.0, end_odometer=1060.0,
    )


class TestMergeSummaries:
    """Tests for summary folding."""

    def test_sums_max_and_recomputed_ratios(self, current, batch):
        merged = merge_summaries(current.summary, batch.summary)

        assert merged.total_trips == 3
        assert merged.total_distance_km == 60.0
        assert merged.total_driving_time_minutes == 80.0
        assert merged.total_energy_consumed_kwh == 10.0
        assert merged.total_charging_sessions == 3
        assert merged.total_energy_added_kwh == 20.0
        assert merged.max_speed_ever_kph == 130.0
        assert merged.overall_efficiency_kwh_km == 10.0 / 60.0
        assert merged.avg_trip_distance_km == 20.0
        assert merged.overall_avg_speed_kph == pytest.approx(45.0)
        assert merged.total_climate_on_ratio == 0.5

    def test_zero_minutes_guard(self):
        from analyzer.models import Summary

        merged = merge_summaries(Summary(), Summary())

        assert merged.total_climate_on_ratio == 0.0
        assert merged.overall_efficiency_kwh_km == 0.0
        assert merged.avg_trip_distance_km == 0.0


class TestMergeCarInfo:
    """Tests for car info folding."""

    def test_odometer_span_widens(self):
        current = CarInfo(id="v", usable_battery_capacity_kwh=75, start_odometer=500, end_odometer=600)
        batch = CarInfo(id="v", usable_battery_capacity_kwh=75, start_odometer=400, end_odometer=550)

        merged = merge_car_info(current, batch)

        assert merged.start_odometer == 400
        assert merged.end_odometer == 600

    def test_first_seen_and_latest_range(self):
        current = CarInfo(id="v", usable_battery_capacity_kwh=75, vin="VIN1", software_version=None,
                          end_rated_range_km=300.0)
        batch = CarInfo(id="v", usable_battery_capacity_kwh=75, vin="VIN2", software_version="2024.2",
                        end_rated_range_km=280.0)

        merged = merge_car_info(current, batch)

        assert merged.vin == "VIN1"
        assert merged.software_version == "2024.2"
        assert merged.end_rated_range_km == 280.0
        assert current.software_version is None


class TestMergeAnalysis:
    """Tests for merge_analysis."""

    def test_no_current_returns_batch(self, batch):
        assert merge_analysis(None, batch) is batch

    def test_ids_offset_and_appended(self, current, batch):
        merged = merge_analysis(current, batch)

        assert [trip.id for trip in merged.trips] == [1, 2, 3]
        assert [session.id for session in merged.charging_sessions] == [1, 2, 3]
        assert merged.trips[2].distance_km == 30.0
        assert batch.trips[0].id == 1

    def test_histograms_summed(self, current, batch):
        merged = merge_analysis(current, batch)

        expected_days = dict(current.trips_by_day)
        for day, count in batch.trips_by_day.items():
            expected_days[day] = expected_days.get(day, 0) + count
        assert merged.trips_by_day == expected_days
        assert merged.trips_by_hour == [
            a + b for a, b in zip(current.trips_by_hour, batch.trips_by_hour)
        ]
        assert sum(merged.trips_by_hour) == 3

    def test_date_range_and_duration(self, current, batch):
        merged = merge_analysis(current, batch)

        assert merged.date_range.start == current.date_range.start
        assert merged.date_range.end == batch.date_range.end
        # 2 days + 300 minutes rounds to 2
        assert merged.car_info.log_duration_days == 2
        assert merged.car_info.start_odometer == 1000.0
        assert merged.car_info.end_odometer == 1060.0

    def test_months_unioned(self, current, batch):
        batch.unique_months = ["2024-04", "2024-03"]
        current.unique_months = ["2024-02", "2024-03"]

        merged = merge_analysis(current, batch)

        assert merged.unique_months == ["2024-02", "2024-03", "2024-04"]

    def test_current_not_mutated(self, current, batch):
        before = current.to_dict()

        merge_analysis(current, batch)

        assert current.to_dict() == before

    def test_file_info_kept(self, current, batch):
        batch.file_info.name = "other"

        assert merge_analysis(current, batch).file_info.name == current.file_info.name


class TestMergeAnalyses:
    """Tests for list-level merging keyed by vehicle id."""

    def test_first_batch(self, batch):
        assert merge_analyses([], [batch]) == [batch]
        assert merge_analyses(None, [batch]) == [batch]

    def test_empty_batch_returns_current(self, current):
        result = merge_analyses([current], [])

        assert result == [current]
        assert result[0] is current

    def test_keyed_by_vehicle(self, current, batch):
        other = AnalysisFactory.build(vehicle_id="VIN9-Other")

        result = merge_analyses([current], [batch, other])

        assert [analysis.vehicle_id for analysis in result] == [VEHICLE_ID, "VIN9-Other"]
        assert result[0].summary.total_trips == 3
        assert result[1] is other
