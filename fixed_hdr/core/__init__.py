"""Histogram core: layout, index arithmetic, store."""

from .errors import (
    ErrorCode,
    HdrError,
    ConfigurationError,
    RecordingRejected,
    ERROR_METADATA,
)
from .layout import HistogramLayout, resolve_layout, validate_parameters, INT64_MAX
from .index import IndexMapper, count_leading_zeros_64
from .summary import HistogramSummary, DEFAULT_PERCENTILES, percentile_key
from .histogram import HdrHistogram

__all__ = [
    # Errors
    'ErrorCode',
    'HdrError',
    'ConfigurationError',
    'RecordingRejected',
    'ERROR_METADATA',
    # Layout
    'HistogramLayout',
    'resolve_layout',
    'validate_parameters',
    'INT64_MAX',
    # Index
    'IndexMapper',
    'count_leading_zeros_64',
    # Summary
    'HistogramSummary',
    'DEFAULT_PERCENTILES',
    'percentile_key',
    # Store
    'HdrHistogram',
]
