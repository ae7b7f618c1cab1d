"""Configuration management for fixed-hdr."""

from .schema import (
    FixedHdrConfig,
    HistogramSection,
    ReportConfig,
    load_config,
    generate_default_config,
)

__all__ = [
    'FixedHdrConfig',
    'HistogramSection',
    'ReportConfig',
    'load_config',
    'generate_default_config',
]
