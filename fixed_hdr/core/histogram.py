"""
Fixed-layout HDR histogram.

Records non-negative integers into a counts array sized once at construction
and answers percentile queries with bounded relative error.

Not thread-safe. A concurrent reader can observe a counter incremented before
total_count/min_value/max_value catch up; callers that share a histogram
across threads must lock or double-buffer around it.
"""

import math
import operator
from typing import Iterator, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import ErrorCode, RecordingRejected
from .index import IndexMapper
from .layout import HistogramLayout, INT64_MAX, resolve_layout
from .summary import DEFAULT_PERCENTILES, HistogramSummary


RecordResult = Union[bool, RecordingRejected]


class HdrHistogram:
    """
    Logarithmically bucketed histogram over [0, highest_trackable_value].

    Example:
        hist = HdrHistogram(1, 3_600_000_000, 3)
        for latency_us in latencies:
            if not hist.record(latency_us):
                dropped += 1
        p99 = hist.value_at_percentile(99.0)
        p50, p90, p999 = hist.value_at_percentiles(50.0, 90.0, 99.9)
    """

    def __init__(self,
                 lowest_discernible_value: int,
                 highest_trackable_value: int,
                 significant_figures: int):
        """
        Args:
            lowest_discernible_value: Smallest value distinguishable from 0 (>= 1)
            highest_trackable_value: Largest recordable value (>= 2 * lowest)
            significant_figures: Decimal digits of precision, 1 to 5

        Raises:
            ConfigurationError: if the parameters do not form a valid layout.
        """
        self.layout: HistogramLayout = resolve_layout(
            lowest_discernible_value, highest_trackable_value, significant_figures
        )
        self._mapper = IndexMapper(self.layout)
        self._highest = self.layout.highest_trackable_value
        self._counts_len = self.layout.counts_len

        self._counts = np.zeros(self._counts_len, dtype=np.int64)
        # scratch space for percentile scans, reused by every query
        self._cumulative_buf = np.zeros(self._counts_len, dtype=np.int64)
        self.total_count: int = 0
        self.min_value: int = INT64_MAX
        self.max_value: int = 0

    @classmethod
    def from_config(cls, config) -> 'HdrHistogram':
        """Build from a FixedHdrConfig or its `histogram` section."""
        section = getattr(config, 'histogram', config)
        return cls(
            section.lowest_discernible_value,
            section.highest_trackable_value,
            section.significant_figures,
        )

    def __repr__(self) -> str:
        return (
            f"HdrHistogram(lowest_discernible_value={self.lowest_discernible_value}, "
            f"highest_trackable_value={self.highest_trackable_value}, "
            f"significant_figures={self.significant_figures}, "
            f"total_count={self.total_count})"
        )

    # === Layout introspection ===

    @property
    def lowest_discernible_value(self) -> int:
        return self.layout.lowest_discernible_value

    @property
    def highest_trackable_value(self) -> int:
        return self.layout.highest_trackable_value

    @property
    def significant_figures(self) -> int:
        return self.layout.significant_figures

    @property
    def unit_magnitude(self) -> int:
        return self.layout.unit_magnitude

    @property
    def sub_bucket_count(self) -> int:
        return self.layout.sub_bucket_count

    @property
    def sub_bucket_half_count(self) -> int:
        return self.layout.sub_bucket_half_count

    @property
    def sub_bucket_mask(self) -> int:
        return self.layout.sub_bucket_mask

    @property
    def bucket_count(self) -> int:
        return self.layout.bucket_count

    @property
    def counts_len(self) -> int:
        return self._counts_len

    @property
    def mapper(self) -> IndexMapper:
        return self._mapper

    @property
    def counts(self) -> np.ndarray:
        """Read-only view of the counts array."""
        view = self._counts.view()
        view.flags.writeable = False
        return view

    @property
    def is_empty(self) -> bool:
        return self.total_count == 0

    # === Recording ===

    def record(self, value: int, count: int = 1) -> RecordResult:
        """
        Record `count` occurrences of `value`.

        Returns True on success. Out-of-range input returns a falsy
        RecordingRejected and leaves the histogram untouched.

        Zero is counted but never becomes min_value.
        """
        value = operator.index(value)
        count = operator.index(count)

        if value < 0:
            return RecordingRejected(ErrorCode.E2001_NEGATIVE_VALUE, value, count)
        if value > self._highest:
            return RecordingRejected(ErrorCode.E2002_VALUE_TOO_LARGE, value, count)
        # total_count bounds every slot and every running sum to int64
        if count < 1 or count > INT64_MAX - self.total_count:
            return RecordingRejected(ErrorCode.E2004_INVALID_COUNT, value, count)

        counts_index = self._mapper.counts_index_for(value)
        if counts_index < 0 or counts_index >= self._counts_len:
            return RecordingRejected(ErrorCode.E2003_INDEX_OUT_OF_RANGE, value, count)

        self._counts[counts_index] += count
        self.total_count += count

        if value < self.min_value and value != 0:
            self.min_value = value
        if value > self.max_value:
            self.max_value = value

        return True

    # === Percentiles ===

    def _count_at_percentile(self, percentile: float) -> int:
        requested = percentile if percentile < 100.0 else 100.0
        count_at_percentile = int((requested / 100) * self.total_count + 0.5)
        # float rounding near 2**63 must not push the target past int64
        count_at_percentile = min(count_at_percentile, max(self.total_count, 1))
        return count_at_percentile if count_at_percentile > 1 else 1

    def _cumulative(self) -> np.ndarray:
        """Running sum of the counts, written into the preallocated buffer."""
        # counts are non-negative, so the running sum is sorted
        return np.cumsum(self._counts, out=self._cumulative_buf)

    def _index_for_count(self, count_at_percentile: int) -> Optional[int]:
        """First slot whose running sum reaches count_at_percentile."""
        idx = int(np.searchsorted(self._cumulative(), count_at_percentile, side='left'))
        if idx >= self._counts_len:
            return None
        return idx

    def value_at_percentile(self, percentile: float) -> int:
        """
        Value at `percentile` (0.0 to 100.0).

        0.0 reports the lowest equivalent value of the bucket found, anything
        else the highest, so no percentile is understated. Returns 0 when
        nothing has been recorded.
        """
        idx = self._index_for_count(self._count_at_percentile(percentile))
        if idx is None:
            return 0

        value_from_idx = self._mapper.value_at_index(idx)
        if percentile == 0.0:
            return self._mapper.lowest_equivalent_value(value_from_idx)
        return self._mapper.highest_equivalent_value(value_from_idx)

    def value_at_percentiles(self, *percentiles: float) -> Tuple[int, ...]:
        """
        Values at several percentiles, resolved in one sweep of the counts.

        Percentiles must be supplied in non-decreasing order. They are NOT
        sorted: each one is resolved no earlier than the slot where the
        previous one was, so a smaller percentile after a larger one gets the
        larger one's value. Every result uses the highest equivalent value,
        including 0.0. Unresolved entries (empty histogram) are 0.
        """
        if not percentiles:
            return ()

        targets = [self._count_at_percentile(p) for p in percentiles]
        positions = np.searchsorted(self._cumulative(), targets, side='left')

        values = []
        floor = 0
        for pos in positions:
            pos = max(int(pos), floor)
            if pos >= self._counts_len:
                break
            floor = pos
            values.append(self._mapper.highest_equivalent_value(self._mapper.value_at_index(pos)))

        values.extend([0] * (len(percentiles) - len(values)))
        return tuple(values)

    # === Other queries ===

    def count_at_value(self, value: int) -> int:
        """Count recorded in the slot `value` maps to (0 if out of range)."""
        if value < 0 or value > self._highest:
            return 0
        idx = self._mapper.counts_index_for(value)
        if idx < 0 or idx >= self._counts_len:
            return 0
        return int(self._counts[idx])

    def recorded_values(self) -> Iterator[Tuple[int, int]]:
        """Yield (lowest_equivalent_value, count) for populated slots, ascending."""
        for idx in np.flatnonzero(self._counts):
            yield self._mapper.value_at_index(int(idx)), int(self._counts[idx])

    def min(self) -> int:
        """Lowest recorded value, at bucket resolution (0 if empty or 0 recorded)."""
        if self.total_count == 0 or self._counts[0] > 0:
            return 0
        return self._mapper.lowest_equivalent_value(self.min_value)

    def max(self) -> int:
        if self.max_value == 0:
            return 0
        return self._mapper.highest_equivalent_value(self.max_value)

    def mean(self) -> float:
        if self.total_count == 0:
            return 0.0
        total = 0
        for value, count in self.recorded_values():
            total += self._mapper.median_equivalent_value(value) * count
        return total / self.total_count

    def stddev(self) -> float:
        if self.total_count == 0:
            return 0.0
        mean = self.mean()
        geometric_dev_total = 0.0
        for value, count in self.recorded_values():
            dev = self._mapper.median_equivalent_value(value) - mean
            geometric_dev_total += (dev * dev) * count
        return math.sqrt(geometric_dev_total / self.total_count)

    def lowest_equivalent_value(self, value: int) -> int:
        return self._mapper.lowest_equivalent_value(value)

    def highest_equivalent_value(self, value: int) -> int:
        return self._mapper.highest_equivalent_value(value)

    def next_non_equivalent_value(self, value: int) -> int:
        return self._mapper.next_non_equivalent_value(value)

    def size_of_equivalent_value_range(self, value: int) -> int:
        return self._mapper.size_of_equivalent_value_range(value)

    def values_are_equivalent(self, value1: int, value2: int) -> bool:
        return self._mapper.values_are_equivalent(value1, value2)

    def summary(self, percentiles: Sequence[float] = DEFAULT_PERCENTILES) -> HistogramSummary:
        """Snapshot of counts, extremes and percentiles."""
        return HistogramSummary.from_histogram(self, percentiles)
