"""
Services package for the EV log analyzer.

Contains the analysis pipeline: partitioning, segmentation, aggregation,
car info extraction, merging, filtering, indexing and batch orchestration.
"""

from .analysis_service import analyze_multiple_vehicles, perform_analysis
from .batch_service import BatchAnalyzer, BatchReport, CancellationToken, LogFile, file_id
from .car_info_service import extract_car_info
from .filter_service import (
    filter_analysis_by_date,
    filter_analysis_by_day,
    filter_analysis_by_month,
    latest_month,
)
from .index_service import RowIndex
from .merge_service import merge_analyses, merge_analysis
from .metrics_service import calculate_summary, calculate_summary_and_metrics
from .partition_service import partition_rows, vehicle_key
from .segmentation_service import segment_rows

__all__ = [
    'analyze_multiple_vehicles',
    'perform_analysis',
    'BatchAnalyzer',
    'BatchReport',
    'CancellationToken',
    'LogFile',
    'file_id',
    'extract_car_info',
    'filter_analysis_by_date',
    'filter_analysis_by_day',
    'filter_analysis_by_month',
    'latest_month',
    'RowIndex',
    'merge_analyses',
    'merge_analysis',
    'calculate_summary',
    'calculate_summary_and_metrics',
    'partition_rows',
    'vehicle_key',
    'segment_rows',
]
