"""
Multi-resolution row index for charting.

Rows are bucketed per vehicle at three resolutions, all in one flat map
keyed by ``(vehicle_id, period_key)``:

- all time: period key ``None``
- month: ``"YYYY-MM"`` (UTC)
- day: ``"YYYY-MM-DD"`` (UTC)

Every bucket is kept time-sorted alongside a downsampled copy of at most
MAX_CHART_POINTS rows. The index is immutable by convention:
``with_rows`` returns a new index and leaves the old one intact.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..calculations import downsample
from ..calculations.constants import MAX_CHART_POINTS
from ..models import Row
from ..utils.time_utils import day_key, month_key
from .partition_service import sort_rows

logger = logging.getLogger(__name__)

BucketKey = Tuple[str, Optional[str]]

MONTH_KEY_LENGTH = len('YYYY-MM')
DAY_KEY_LENGTH = len('YYYY-MM-DD')


class RowIndex:
    """Per-vehicle, per-month and per-day row buckets with downsampled views."""

    def __init__(
        self,
        buckets: Optional[Dict[BucketKey, List[Row]]] = None,
        downsampled: Optional[Dict[BucketKey, List[Row]]] = None,
        max_points: int = MAX_CHART_POINTS
    ):
        self._buckets: Dict[BucketKey, List[Row]] = buckets or {}
        self._downsampled: Dict[BucketKey, List[Row]] = downsampled or {}
        self.max_points = max_points

    @staticmethod
    def _bucket_keys(vehicle_id: str, row: Row) -> Iterable[BucketKey]:
        yield (vehicle_id, None)
        yield (vehicle_id, month_key(row.epoch_millis))
        yield (vehicle_id, day_key(row.epoch_millis))

    def with_rows(self, vehicle_data: Dict[str, List[Row]]) -> 'RowIndex':
        """
        Return a new index with the given rows added.

        Only buckets that receive rows are re-sorted and re-downsampled.

        Args:
            vehicle_data: Vehicle id -> new rows (any order)
        """
        additions: Dict[BucketKey, List[Row]] = {}
        for vehicle_id, rows in vehicle_data.items():
            for row in rows:
                for key in self._bucket_keys(vehicle_id, row):
                    additions.setdefault(key, []).append(row)

        buckets = dict(self._buckets)
        downsampled = dict(self._downsampled)
        for key, rows in additions.items():
            updated = sort_rows([*buckets.get(key, []), *rows])
            buckets[key] = updated
            downsampled[key] = downsample(updated, self.max_points)

        logger.debug(f"Index updated: {len(additions)} buckets touched")
        return RowIndex(buckets, downsampled, self.max_points)

    def vehicles(self) -> List[str]:
        return [vehicle_id for vehicle_id, period in self._buckets if period is None]

    def months(self, vehicle_id: str) -> List[str]:
        return sorted(
            period for vid, period in self._buckets
            if vid == vehicle_id and period is not None and len(period) == MONTH_KEY_LENGTH
        )

    def days(self, vehicle_id: str, month: Optional[str] = None) -> List[str]:
        return sorted(
            period for vid, period in self._buckets
            if vid == vehicle_id and period is not None and len(period) == DAY_KEY_LENGTH
            and (month is None or period.startswith(month))
        )

    def rows(self, vehicle_id: str, period: Optional[str] = None) -> List[Row]:
        """Full-resolution rows of a bucket (empty if unknown)."""
        return list(self._buckets.get((vehicle_id, period), []))

    def chart_rows(
        self,
        vehicle_id: str,
        month: Optional[str] = None,
        day: Optional[str] = None
    ) -> List[Row]:
        """
        Downsampled rows for display; a day wins over a month, a month over all time.
        """
        period = day or month
        return list(self._downsampled.get((vehicle_id, period), []))

    def __len__(self):
        return len(self._buckets)
