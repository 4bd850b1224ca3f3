"""
Batch orchestration for incremental analysis of many log files.

Files are processed in fixed-size batches. Each batch is parsed,
partitioned, analyzed and folded into the running per-vehicle analyses
before the next one starts, so a caller can interleave other work between
batches. Running state is only replaced once a batch has fully succeeded;
a cancelled batch leaves it untouched.
"""

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ..config import Config
from ..exceptions import AnalysisCancelledError, CSVImportError
from ..models import AnalysisResult, FileInfo, Row, Settings
from ..utils.csv_importer import TeslaCSVImporter
from ..utils.wide_events import WideEvent
from .analysis_service import analyze_multiple_vehicles
from .index_service import RowIndex
from .merge_service import merge_analyses
from .partition_service import merge_partitions, partition_rows

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


@dataclass
class LogFile:
    """An input file handed over by the upload/storage collaborator."""

    name: str
    content: str
    size_bytes: int = 0
    last_modified: int = 0

    @classmethod
    def from_path(cls, path) -> 'LogFile':
        path = Path(path)
        stat = path.stat()
        return cls(
            name=path.name,
            content=path.read_text(encoding='utf-8-sig'),
            size_bytes=stat.st_size,
            last_modified=int(stat.st_mtime * 1000),
        )


def file_id(log_file: LogFile) -> str:
    """Stable identity used to skip files that were already analyzed."""
    return f"{log_file.name}-{log_file.size_bytes}-{log_file.last_modified}"


class CancellationToken:
    """Liveness flag checked between files and before a batch is committed."""

    def __init__(self, run_id: int = 0):
        self.run_id = run_id
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise AnalysisCancelledError(run_id=self.run_id)


@dataclass
class BatchReport:
    """Outcome of one committed batch."""

    files: List[str]
    rows: int
    analyses: List[AnalysisResult]
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def vehicles(self) -> int:
        return len(self.analyses)


class BatchAnalyzer:
    """
    Running analysis state plus the loop that feeds batches into it.

    Usage:
        analyzer = BatchAnalyzer(Settings(usable_battery_capacity_kwh=75))
        token = analyzer.start_run()
        analyzer.run(files, token)
        analyzer.analyses  # one AnalysisResult per vehicle
    """

    def __init__(self, settings: Optional[Settings] = None, batch_size: int = Config.BATCH_SIZE):
        self.settings = settings or Settings()
        self.batch_size = max(1, batch_size)
        self.analyses: List[AnalysisResult] = []
        self.index = RowIndex()
        self.processed_files: Set[str] = set()
        self.errors: Dict[str, str] = {}
        self._run_id = 0
        self._token: Optional[CancellationToken] = None

    def start_run(self) -> CancellationToken:
        """Supersede any in-flight run and return the token of the new one."""
        if self._token is not None:
            self._token.cancel()
        self._run_id += 1
        self._token = CancellationToken(self._run_id)
        return self._token

    def pending(self, files: Iterable[LogFile]) -> List[LogFile]:
        return [log_file for log_file in files if file_id(log_file) not in self.processed_files]

    def _parse_batch(
        self,
        batch: Sequence[LogFile],
        token: CancellationToken,
        errors: Dict[str, str]
    ) -> Dict[str, List[Row]]:
        vehicle_data: Dict[str, List[Row]] = {}
        for log_file in batch:
            token.raise_if_cancelled()
            try:
                rows, stats = TeslaCSVImporter.parse_csv(log_file.content, filename=log_file.name)
            except CSVImportError as e:
                logger.warning(f"Skipping {log_file.name}: {e}")
                errors[log_file.name] = str(e)
                continue

            if stats['skipped_rows']:
                logger.info(f"{log_file.name}: skipped {stats['skipped_rows']} unusable rows")
            vehicle_data = merge_partitions(vehicle_data, partition_rows(rows))
        return vehicle_data

    def process_batch(
        self,
        batch: Sequence[LogFile],
        token: Optional[CancellationToken] = None
    ) -> BatchReport:
        """
        Parse, analyze and merge one batch of files.

        Files failing validation are reported in the batch errors and
        skipped; the rest of the batch still commits.

        Raises:
            AnalysisCancelledError: If the token was cancelled; nothing is committed
        """
        token = token or CancellationToken(self._run_id)
        event = WideEvent("analysis_batch", trace_id=str(token.run_id))
        event.add_context(files=[log_file.name for log_file in batch])
        errors: Dict[str, str] = {}

        try:
            with event.timer("parse"):
                vehicle_data = self._parse_batch(batch, token, errors)

            total_rows = sum(len(rows) for rows in vehicle_data.values())
            file_info = FileInfo(
                name=f"{len(batch)} files",
                size_mb=sum(log_file.size_bytes for log_file in batch) / BYTES_PER_MB,
                rows=total_rows,
            )

            with event.timer("analyze"):
                batch_analyses = analyze_multiple_vehicles(vehicle_data, self.settings, file_info)
            if not batch_analyses:
                logger.warning("Analysis of batch resulted in no valid vehicle data.")

            with event.timer("merge"):
                merged = merge_analyses(self.analyses, batch_analyses)
            with event.timer("index"):
                index = self.index.with_rows(vehicle_data)

            token.raise_if_cancelled()
        except AnalysisCancelledError as e:
            event.add_error(e)
            event.mark_failure("cancelled")
            event.emit(level="warning")
            raise
        except Exception as e:
            event.add_error(e)
            event.mark_failure(str(e))
            event.emit(level="error")
            raise

        self.analyses = merged
        self.index = index
        self.processed_files.update(
            file_id(log_file) for log_file in batch if log_file.name not in errors
        )
        for log_file in batch:
            if log_file.name not in errors:
                self.errors.pop(log_file.name, None)
        self.errors.update(errors)

        event.add_business_metric("rows", total_rows)
        event.add_business_metric("vehicles", len(batch_analyses))
        event.add_business_metric("trips", sum(len(a.trips) for a in batch_analyses))
        event.add_business_metric(
            "charging_sessions", sum(len(a.charging_sessions) for a in batch_analyses)
        )
        event.add_business_metric("failed_files", len(errors))
        event.mark_success()
        event.emit()

        return BatchReport(
            files=[log_file.name for log_file in batch],
            rows=total_rows,
            analyses=batch_analyses,
            errors=errors,
        )

    def run(
        self,
        files: Iterable[LogFile],
        token: Optional[CancellationToken] = None
    ) -> List[AnalysisResult]:
        """
        Analyze every file not processed yet, one batch at a time.

        Returns:
            The running per-vehicle analyses after the last batch
        """
        token = token or self.start_run()
        queue = self.pending(files)
        if not queue:
            logger.info("All available files have already been analyzed.")
            return self.analyses

        for offset in range(0, len(queue), self.batch_size):
            token.raise_if_cancelled()
            report = self.process_batch(queue[offset:offset + self.batch_size], token)
            logger.info(
                f"Batch committed: {len(report.files)} files, {report.rows} rows, "
                f"{report.vehicles} vehicles"
            )

        return self.analyses
