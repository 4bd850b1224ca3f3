"""
Per-vehicle analysis: segmentation, aggregation and car info for one batch.
"""

import logging
from typing import Dict, List, Sequence

from ..exceptions import AnalyzerError
from ..models import AnalysisResult, FileInfo, Row, Settings
from .car_info_service import date_range, extract_car_info, unique_months
from .metrics_service import calculate_summary_and_metrics
from .partition_service import sort_rows
from .segmentation_service import segment_rows

logger = logging.getLogger(__name__)


def perform_analysis(
    rows: Sequence[Row],
    settings: Settings,
    file_info: FileInfo,
    vehicle_id: str
) -> AnalysisResult:
    """
    Analyze one vehicle's rows.

    Args:
        rows: Rows of a single vehicle, ascending by epoch_millis
        settings: Analysis settings
        file_info: Provenance attached verbatim to the result
        vehicle_id: VehicleKey of the rows

    Returns:
        A fresh AnalysisResult

    Raises:
        AnalyzerError: If rows is empty
    """
    if not rows:
        raise AnalyzerError("Cannot analyze an empty row set", {'vehicle_id': vehicle_id})

    trips, sessions = segment_rows(list(rows), settings)
    summary, trips_by_day, trips_by_hour = calculate_summary_and_metrics(trips, sessions)

    logger.debug(
        f"Analyzed {vehicle_id}: {len(rows)} rows, {len(trips)} trips, "
        f"{len(sessions)} charging sessions"
    )

    return AnalysisResult(
        summary=summary,
        trips=trips,
        charging_sessions=sessions,
        trips_by_day=trips_by_day,
        trips_by_hour=trips_by_hour,
        car_info=extract_car_info(rows, settings, vehicle_id),
        date_range=date_range(rows),
        unique_months=unique_months(rows),
        file_info=file_info,
    )


def analyze_multiple_vehicles(
    vehicle_data: Dict[str, List[Row]],
    settings: Settings,
    file_info: FileInfo
) -> List[AnalysisResult]:
    """
    Analyze every vehicle of a partitioned batch.

    Vehicles without rows are skipped. Each result gets its own FileInfo
    naming the vehicle and counting only its rows.
    """
    results = []
    for vehicle_id, rows in vehicle_data.items():
        if not rows:
            continue

        sorted_rows = sort_rows(rows)
        vehicle_file_info = FileInfo(
            name=f"{file_info.name} - {vehicle_id}",
            size_mb=0.0,
            rows=len(sorted_rows),
        )
        results.append(perform_analysis(sorted_rows, settings, vehicle_file_info, vehicle_id))

    return results
