"""
fixed-hdr v1.0 - Fixed-layout HDR histogram for latency recording.

This package provides:
- core: Layout resolution, index arithmetic and the histogram store
- config: YAML configuration with environment variable support
- cli: Command-line interface for capacity planning and summaries
"""

__version__ = "1.0.0"

from .core import (
    HdrHistogram,
    HistogramLayout,
    HistogramSummary,
    IndexMapper,
    ConfigurationError,
    RecordingRejected,
    ErrorCode,
    resolve_layout,
)
from .config import FixedHdrConfig, load_config

__all__ = [
    # Version
    '__version__',
    # Core
    'HdrHistogram',
    'HistogramLayout',
    'HistogramSummary',
    'IndexMapper',
    'resolve_layout',
    # Errors
    'ConfigurationError',
    'RecordingRejected',
    'ErrorCode',
    # Config
    'FixedHdrConfig',
    'load_config',
]
