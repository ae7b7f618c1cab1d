"""
Bucket layout resolution.

Derives every constant the index arithmetic needs from the three layout
parameters. Values are kept like a float: each bucket is an exponent and the
sub-buckets inside it are the mantissa.

With 2048 sub-buckets and a lowest discernible value of 1:

    bucket 0 covers 0..2047 in steps of 1 (all 2048 sub-buckets)
    bucket 1 covers 2048..4095 in steps of 2 (top 1024 sub-buckets)
    bucket 2 covers 4096..8191 in steps of 4 (top 1024 sub-buckets)
    ...

Only bucket 0 uses its lower half. Every other bucket's lower half is already
covered, at finer resolution, by the buckets before it, so storage is
(bucket_count + 1) * sub_bucket_half_count counters.
"""

import logging
from dataclasses import dataclass, asdict
from functools import lru_cache

from .errors import ConfigurationError, ErrorCode

logger = logging.getLogger(__name__)

INT64_MAX = (1 << 63) - 1

MIN_SIGNIFICANT_FIGURES = 1
MAX_SIGNIFICANT_FIGURES = 5

# Largest shift the index math may perform on a signed 64-bit value
MAX_SHIFT_MAGNITUDE = 61

COUNTER_BYTES = 8


@dataclass(frozen=True)
class HistogramLayout:
    """Immutable derived constants for one parameter triple."""
    lowest_discernible_value: int
    highest_trackable_value: int
    significant_figures: int

    largest_value_with_single_unit_resolution: int
    sub_bucket_count_magnitude: int
    sub_bucket_half_count_magnitude: int
    unit_magnitude: int
    sub_bucket_count: int
    sub_bucket_half_count: int
    sub_bucket_mask: int
    bucket_count: int
    counts_len: int

    @property
    def footprint_bytes(self) -> int:
        """Size of the counts array in bytes."""
        return self.counts_len * COUNTER_BYTES

    def to_dict(self) -> dict:
        data = asdict(self)
        data['footprint_bytes'] = self.footprint_bytes
        return data


def buckets_needed_to_cover_value(highest_trackable_value: int,
                                  sub_bucket_count: int,
                                  unit_magnitude: int) -> int:
    """Number of buckets whose top reaches past highest_trackable_value."""
    smallest_untrackable_value = sub_bucket_count << unit_magnitude
    buckets_needed = 1
    while smallest_untrackable_value <= highest_trackable_value:
        if smallest_untrackable_value > INT64_MAX // 2:
            return buckets_needed + 1
        smallest_untrackable_value <<= 1
        buckets_needed += 1
    return buckets_needed


def _require_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(
            ErrorCode.E1006_INVALID_CONFIG,
            {name: value, 'reason': 'must be an integer'},
        )


def validate_parameters(lowest_discernible_value: int,
                        highest_trackable_value: int,
                        significant_figures: int) -> None:
    """Raise ConfigurationError if the parameter triple is unusable."""
    _require_int('lowest_discernible_value', lowest_discernible_value)
    _require_int('highest_trackable_value', highest_trackable_value)
    _require_int('significant_figures', significant_figures)

    if lowest_discernible_value < 1:
        raise ConfigurationError(
            ErrorCode.E1001_LOWEST_TOO_SMALL,
            {'lowest_discernible_value': lowest_discernible_value},
        )
    if highest_trackable_value > INT64_MAX:
        raise ConfigurationError(
            ErrorCode.E1005_VALUE_OUT_OF_DOMAIN,
            {'highest_trackable_value': highest_trackable_value},
        )
    if highest_trackable_value < 2 * lowest_discernible_value:
        raise ConfigurationError(
            ErrorCode.E1002_RANGE_TOO_NARROW,
            {
                'lowest_discernible_value': lowest_discernible_value,
                'highest_trackable_value': highest_trackable_value,
            },
        )
    if not MIN_SIGNIFICANT_FIGURES <= significant_figures <= MAX_SIGNIFICANT_FIGURES:
        raise ConfigurationError(
            ErrorCode.E1003_SIGNIFICANT_FIGURES_OUT_OF_RANGE,
            {'significant_figures': significant_figures},
        )


@lru_cache(maxsize=128, typed=True)
def resolve_layout(lowest_discernible_value: int,
                   highest_trackable_value: int,
                   significant_figures: int) -> HistogramLayout:
    """
    Compute the layout for a parameter triple.

    Results are cached, so histograms sharing parameters share one layout
    object and pay for resolution once.

    Raises:
        ConfigurationError: if any parameter or derived constant is invalid.
    """
    validate_parameters(lowest_discernible_value, highest_trackable_value, significant_figures)

    largest = 2 * 10 ** significant_figures
    # ceil(log2(n)) for n >= 1
    sub_bucket_count_magnitude = (largest - 1).bit_length()
    sub_bucket_half_count_magnitude = max(sub_bucket_count_magnitude - 1, 0)
    # floor(log2(n)) for n >= 1
    unit_magnitude = lowest_discernible_value.bit_length() - 1

    if unit_magnitude + sub_bucket_half_count_magnitude > MAX_SHIFT_MAGNITUDE:
        raise ConfigurationError(
            ErrorCode.E1004_SHIFT_OVERFLOW,
            {
                'unit_magnitude': unit_magnitude,
                'sub_bucket_half_count_magnitude': sub_bucket_half_count_magnitude,
            },
        )

    sub_bucket_count = 1 << (sub_bucket_half_count_magnitude + 1)
    sub_bucket_half_count = sub_bucket_count // 2
    sub_bucket_mask = (sub_bucket_count - 1) << unit_magnitude

    bucket_count = buckets_needed_to_cover_value(
        highest_trackable_value, sub_bucket_count, unit_magnitude
    )
    counts_len = (bucket_count + 1) * sub_bucket_half_count

    layout = HistogramLayout(
        lowest_discernible_value=lowest_discernible_value,
        highest_trackable_value=highest_trackable_value,
        significant_figures=significant_figures,
        largest_value_with_single_unit_resolution=largest,
        sub_bucket_count_magnitude=sub_bucket_count_magnitude,
        sub_bucket_half_count_magnitude=sub_bucket_half_count_magnitude,
        unit_magnitude=unit_magnitude,
        sub_bucket_count=sub_bucket_count,
        sub_bucket_half_count=sub_bucket_half_count,
        sub_bucket_mask=sub_bucket_mask,
        bucket_count=bucket_count,
        counts_len=counts_len,
    )
    logger.debug(
        "Resolved layout (%d, %d, %d): unit_magnitude=%d sub_bucket_count=%d "
        "bucket_count=%d counts_len=%d",
        lowest_discernible_value, highest_trackable_value, significant_figures,
        unit_magnitude, sub_bucket_count, bucket_count, counts_len,
    )
    return layout
