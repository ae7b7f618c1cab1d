"""
Configuration schema for fixed-hdr.

Supports:
- YAML file loading
- Environment variable substitution (${VAR_NAME})
- Validation with error messages

Example config (fixed_hdr.yml):
    version: 1

    histogram:
      lowest_discernible_value: 1
      highest_trackable_value: ${HDR_MAX_LATENCY_US}
      significant_figures: 3

    report:
      percentiles: [50, 90, 99, 99.9]
      unit: us
"""

import logging
import os
import re
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Any

import yaml

from ..core.errors import ConfigurationError, ErrorCode
from ..core.layout import validate_parameters, resolve_layout, HistogramLayout
from ..core.summary import DEFAULT_PERCENTILES

logger = logging.getLogger(__name__)

_ENV_PATTERN = r'\$\{([^}]+)\}'


def _substitute_env_vars(value: Any) -> Any:
    """
    Substitute ${VAR_NAME} with environment variable values.

    Example:
        ${HDR_MAX_LATENCY_US} → os.environ.get('HDR_MAX_LATENCY_US')
    """
    if isinstance(value, str):
        def replace(match):
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                logger.warning("Environment variable not set: %s", var_name)
                return match.group(0)  # Keep original if not found
            return env_value

        substituted = re.sub(_ENV_PATTERN, replace, value)
        if substituted != value:
            return yaml.safe_load(substituted) if substituted.strip() else substituted
        return substituted

    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]

    return value


@dataclass
class HistogramSection:
    """Layout parameters."""
    lowest_discernible_value: int = 1
    highest_trackable_value: int = 3_600_000_000
    significant_figures: int = 3

    def layout(self) -> HistogramLayout:
        """Resolve the layout. Raises ConfigurationError if invalid."""
        return resolve_layout(
            self.lowest_discernible_value,
            self.highest_trackable_value,
            self.significant_figures,
        )


@dataclass
class ReportConfig:
    """Summary report settings."""
    percentiles: List[float] = field(default_factory=lambda: list(DEFAULT_PERCENTILES))
    unit: str = 'us'


@dataclass
class FixedHdrConfig:
    """Root configuration."""

    version: int = 1
    histogram: HistogramSection = field(default_factory=HistogramSection)
    report: ReportConfig = field(default_factory=ReportConfig)

    @classmethod
    def load(cls, path: Path) -> 'FixedHdrConfig':
        """Load from YAML file with env var substitution."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")

        logger.info("Loading config from %s", path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        data = _substitute_env_vars(data)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'FixedHdrConfig':
        """Create from dictionary."""
        try:
            return cls(
                version=data.get('version', 1),
                histogram=HistogramSection(**data.get('histogram', {})),
                report=ReportConfig(**data.get('report', {})),
            )
        except TypeError as e:
            raise ConfigurationError(ErrorCode.E1006_INVALID_CONFIG, {'reason': str(e)}) from e

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Convert to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """Validate config. Returns list of errors (empty if valid)."""
        errors = []

        if self.version != 1:
            errors.append(f"Unsupported config version: {self.version}")

        hist = self.histogram
        try:
            validate_parameters(
                hist.lowest_discernible_value,
                hist.highest_trackable_value,
                hist.significant_figures,
            )
            hist.layout()
        except ConfigurationError as e:
            errors.append(f"Invalid histogram layout: {e}")

        if not self.report.percentiles:
            errors.append("report.percentiles must not be empty")
        for p in self.report.percentiles:
            if isinstance(p, bool) or not isinstance(p, (int, float)) or not 0.0 <= p <= 100.0:
                errors.append(f"Invalid percentile: {p}")

        return errors


def load_config(path: Optional[Path] = None) -> FixedHdrConfig:
    """Load config from file or return defaults."""
    if path and Path(path).exists():
        return FixedHdrConfig.load(path)

    search_paths = [
        Path('./fixed_hdr.yml'),
        Path('./fixed_hdr.yaml'),
        Path.home() / '.fixed_hdr' / 'config.yml',
    ]

    for p in search_paths:
        if p.exists():
            return FixedHdrConfig.load(p)

    return FixedHdrConfig()


def generate_default_config() -> str:
    """Generate default config as YAML."""
    return """# fixed-hdr Configuration
version: 1

histogram:
  lowest_discernible_value: 1
  highest_trackable_value: 3600000000
  significant_figures: 3

report:
  percentiles: [50.0, 75.0, 90.0, 95.0, 99.0, 99.9]
  unit: us
"""
