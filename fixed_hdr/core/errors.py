"""
Error codes for fixed-hdr.

Structured error codes for machine-parseable diagnostics.

Format: E{category}{number}
- E1xxx: Configuration errors (raised at construction)
- E2xxx: Recording errors (returned from record, never raised)
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class ErrorCode(Enum):
    """Structured error codes."""

    # E1xxx: Configuration errors
    E1001_LOWEST_TOO_SMALL = "E1001"
    E1002_RANGE_TOO_NARROW = "E1002"
    E1003_SIGNIFICANT_FIGURES_OUT_OF_RANGE = "E1003"
    E1004_SHIFT_OVERFLOW = "E1004"
    E1005_VALUE_OUT_OF_DOMAIN = "E1005"
    E1006_INVALID_CONFIG = "E1006"

    # E2xxx: Recording errors
    E2001_NEGATIVE_VALUE = "E2001"
    E2002_VALUE_TOO_LARGE = "E2002"
    E2003_INDEX_OUT_OF_RANGE = "E2003"
    E2004_INVALID_COUNT = "E2004"


# Error code metadata
ERROR_METADATA = {
    ErrorCode.E1001_LOWEST_TOO_SMALL: {
        'severity': 'error',
        'message': 'lowest_discernible_value must be >= 1',
        'recoverable': False,
    },
    ErrorCode.E1002_RANGE_TOO_NARROW: {
        'severity': 'error',
        'message': 'highest_trackable_value must be >= 2 * lowest_discernible_value',
        'recoverable': False,
    },
    ErrorCode.E1003_SIGNIFICANT_FIGURES_OUT_OF_RANGE: {
        'severity': 'error',
        'message': 'significant_figures must be in [1, 5]',
        'recoverable': False,
    },
    ErrorCode.E1004_SHIFT_OVERFLOW: {
        'severity': 'error',
        'message': 'Layout would overflow a 64-bit shift',
        'recoverable': False,
    },
    ErrorCode.E1005_VALUE_OUT_OF_DOMAIN: {
        'severity': 'error',
        'message': 'Layout parameter outside the 64-bit integer domain',
        'recoverable': False,
    },
    ErrorCode.E1006_INVALID_CONFIG: {
        'severity': 'error',
        'message': 'Invalid configuration',
        'recoverable': False,
    },
    ErrorCode.E2001_NEGATIVE_VALUE: {
        'severity': 'warning',
        'message': 'Negative value cannot be recorded',
        'recoverable': True,
    },
    ErrorCode.E2002_VALUE_TOO_LARGE: {
        'severity': 'warning',
        'message': 'Value exceeds highest_trackable_value',
        'recoverable': True,
    },
    ErrorCode.E2003_INDEX_OUT_OF_RANGE: {
        'severity': 'error',
        'message': 'Value maps outside the counts array',
        'recoverable': True,
    },
    ErrorCode.E2004_INVALID_COUNT: {
        'severity': 'warning',
        'message': 'Count must be >= 1',
        'recoverable': True,
    },
}


@dataclass
class HdrError:
    """
    Structured error with context.

    Example:
        error = HdrError(
            code=ErrorCode.E1002_RANGE_TOO_NARROW,
            context={'lowest_discernible_value': 2, 'highest_trackable_value': 1},
        )
    """
    code: ErrorCode
    context: Optional[dict] = None

    @property
    def severity(self) -> str:
        return ERROR_METADATA.get(self.code, {}).get('severity', 'error')

    @property
    def message(self) -> str:
        base_msg = ERROR_METADATA.get(self.code, {}).get('message', 'Unknown error')
        if self.context:
            return f"{base_msg}: {self.context}"
        return base_msg

    @property
    def recoverable(self) -> bool:
        return ERROR_METADATA.get(self.code, {}).get('recoverable', False)

    def to_dict(self) -> dict:
        return {
            'code': self.code.value,
            'severity': self.severity,
            'message': self.message,
            'recoverable': self.recoverable,
            'context': self.context,
        }


class ConfigurationError(ValueError):
    """
    Raised when layout parameters violate an invariant.

    Not recoverable by the histogram: construct a new one with valid
    parameters.
    """

    def __init__(self, code: ErrorCode, context: Optional[dict] = None):
        self.error = HdrError(code=code, context=context)
        super().__init__(f"[{code.value}] {self.error.message}")

    @property
    def code(self) -> ErrorCode:
        return self.error.code


@dataclass(frozen=True)
class RecordingRejected:
    """
    Outcome of a record() call that did not change the histogram.

    Falsy, so callers can write ``if not hist.record(v): ...``.
    """
    code: ErrorCode
    value: int
    count: int = 1

    def __bool__(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return HdrError(self.code, {'value': self.value, 'count': self.count}).message

    def to_dict(self) -> dict:
        return {
            'code': self.code.value,
            'value': self.value,
            'count': self.count,
            'message': self.message,
        }
