"""
Percentile summary of a histogram.

A summary is a report of query results (counts, extremes, percentiles). It is
not a serialization of the counts array and cannot rebuild a histogram.
"""

import json
from dataclasses import dataclass, field, asdict
from typing import Dict, Sequence


DEFAULT_PERCENTILES = (50.0, 75.0, 90.0, 95.0, 99.0, 99.9)


def percentile_key(percentile: float) -> str:
    """50.0 -> 'p50', 99.9 -> 'p99.9'."""
    return f"p{float(percentile):g}"


@dataclass
class HistogramSummary:
    """Summary section, values in recorded units."""
    total_count: int = 0
    min: int = 0
    max: int = 0
    mean: float = 0.0
    stddev: float = 0.0
    percentiles: Dict[str, int] = field(default_factory=dict)
    unit: str = ''
    layout: dict = field(default_factory=dict)

    @classmethod
    def from_histogram(cls, hist, percentiles: Sequence[float] = DEFAULT_PERCENTILES,
                       unit: str = '') -> 'HistogramSummary':
        ordered = sorted(float(p) for p in percentiles)
        values = hist.value_at_percentiles(*ordered)
        return cls(
            total_count=hist.total_count,
            min=hist.min(),
            max=hist.max(),
            mean=hist.mean(),
            stddev=hist.stddev(),
            percentiles={percentile_key(p): v for p, v in zip(ordered, values)},
            unit=unit,
            layout=hist.layout.to_dict(),
        )

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self, indent: int = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)
