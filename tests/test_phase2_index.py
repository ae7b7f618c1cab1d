"""
Tests for Phase 2: Index Mapping.

CRITICAL TESTS:
1. test_bijection_exhaustive - value_at_index(counts_index_for(v)) == lowest_equivalent_value(v)
2. test_index_order_is_value_order - Ascending index means ascending value
"""

import numpy as np
import pytest

from fixed_hdr.core.index import IndexMapper, count_leading_zeros_64
from fixed_hdr.core.layout import INT64_MAX, resolve_layout


@pytest.fixture
def mapper() -> IndexMapper:
    return IndexMapper(resolve_layout(1, 8191, 3))


class TestLeadingZeros:
    """Test the 64-bit leading zero count."""

    def test_zero(self):
        assert count_leading_zeros_64(0) == 64

    def test_small_values(self):
        assert count_leading_zeros_64(1) == 63
        assert count_leading_zeros_64(2) == 62
        assert count_leading_zeros_64(2047) == 53

    def test_top_bits(self):
        assert count_leading_zeros_64(INT64_MAX) == 1
        assert count_leading_zeros_64(1 << 63) == 0

    def test_negative_is_full_width(self):
        """Negative values have the sign bit set."""
        assert count_leading_zeros_64(-1) == 0
        assert count_leading_zeros_64(-(1 << 62)) == 0


class TestForwardMapping:
    """Test value -> slot."""

    def test_bucket_index(self, mapper):
        assert mapper.bucket_index(0) == 0
        assert mapper.bucket_index(2047) == 0
        assert mapper.bucket_index(2048) == 1
        assert mapper.bucket_index(4095) == 1
        assert mapper.bucket_index(4096) == 2
        assert mapper.bucket_index(8191) == 2

    def test_sub_bucket_index(self, mapper):
        assert mapper.sub_bucket_index(100, 0) == 100
        assert mapper.sub_bucket_index(2049, 1) == 1024
        assert mapper.sub_bucket_index(4095, 1) == 2047

    def test_first_bucket_is_identity(self, mapper):
        """Bucket 0 stores every value at unit resolution."""
        for v in (0, 1, 2, 1023, 1024, 2046, 2047):
            assert mapper.counts_index_for(v) == v

    def test_upper_buckets_store_top_half(self, mapper):
        assert mapper.counts_index_for(2048) == 2048
        assert mapper.counts_index_for(2049) == 2048
        assert mapper.counts_index_for(4094) == 3071
        assert mapper.counts_index_for(4095) == 3071
        assert mapper.counts_index_for(4096) == 3072
        assert mapper.counts_index_for(8191) == 4095

    def test_counts_index(self, mapper):
        assert mapper.counts_index(0, 0) == 0
        assert mapper.counts_index(1, 1024) == 2048
        assert mapper.counts_index(2, 2047) == 4095

    def test_unit_magnitude_drops_low_bits(self):
        """With lowest=1024, values below 1024 share slot 0."""
        mapper = IndexMapper(resolve_layout(1024, 10**9, 2))
        assert mapper.counts_index_for(0) == 0
        assert mapper.counts_index_for(1023) == 0
        assert mapper.counts_index_for(1024) == 1


class TestInverseMapping:
    """Test slot -> value."""

    def test_value_at_index(self, mapper):
        assert mapper.value_at_index(0) == 0
        assert mapper.value_at_index(100) == 100
        assert mapper.value_at_index(2047) == 2047
        assert mapper.value_at_index(2048) == 2048
        assert mapper.value_at_index(3071) == 4094
        assert mapper.value_at_index(3072) == 4096

    def test_value_from_index(self, mapper):
        assert mapper.value_from_index(0, 5) == 5
        assert mapper.value_from_index(2, 1024) == 4096

    def test_bijection_exhaustive(self, mapper):
        """CRITICAL: every trackable value round-trips to its lowest equivalent."""
        for v in range(0, 8192):
            lowest = mapper.lowest_equivalent_value(v)
            highest = mapper.highest_equivalent_value(v)
            assert lowest <= v <= highest
            assert mapper.value_at_index(mapper.counts_index_for(v)) == lowest

    def test_bijection_wide_range(self, deterministic_seed):
        """Round trip over a wide layout with a coarse unit."""
        layout = resolve_layout(1000, 3_600_000_000, 3)
        mapper = IndexMapper(layout)
        rng = np.random.default_rng(deterministic_seed)

        for v in rng.integers(0, layout.highest_trackable_value + 1, 5000):
            v = int(v)
            idx = mapper.counts_index_for(v)
            assert 0 <= idx < layout.counts_len
            assert mapper.value_at_index(idx) == mapper.lowest_equivalent_value(v)
            assert mapper.lowest_equivalent_value(v) <= v <= mapper.highest_equivalent_value(v)

    def test_int64_max_in_range(self):
        """The largest 64-bit value maps to the last slot."""
        layout = resolve_layout(1, INT64_MAX, 2)
        mapper = IndexMapper(layout)
        idx = mapper.counts_index_for(INT64_MAX)
        assert idx == layout.counts_len - 1

    @pytest.mark.parametrize("params", [(1, 8191, 3), (1, 360_000, 2), (1000, 10**9, 3), (3, 10**12, 1)])
    def test_index_order_is_value_order(self, params):
        """CRITICAL: value_at_index is strictly increasing across the table."""
        layout = resolve_layout(*params)
        mapper = IndexMapper(layout)
        values = [mapper.value_at_index(i) for i in range(layout.counts_len)]
        assert all(a < b for a, b in zip(values, values[1:]))


class TestEquivalenceRanges:
    """Test equivalence range queries."""

    def test_size_of_equivalent_value_range(self, mapper):
        assert mapper.size_of_equivalent_value_range(0) == 1
        assert mapper.size_of_equivalent_value_range(2047) == 1
        assert mapper.size_of_equivalent_value_range(2048) == 2
        assert mapper.size_of_equivalent_value_range(4096) == 4

    def test_bounds(self, mapper):
        assert mapper.lowest_equivalent_value(4097) == 4096
        assert mapper.highest_equivalent_value(4097) == 4099
        assert mapper.next_non_equivalent_value(4097) == 4100
        assert mapper.median_equivalent_value(4097) == 4098

    def test_first_bucket_ranges_are_single_values(self, mapper):
        for v in (0, 1, 1000, 2047):
            assert mapper.lowest_equivalent_value(v) == v
            assert mapper.highest_equivalent_value(v) == v

    def test_values_are_equivalent(self, mapper):
        assert mapper.values_are_equivalent(2048, 2049)
        assert not mapper.values_are_equivalent(2049, 2050)
        assert mapper.values_are_equivalent(4096, 4099)
        assert not mapper.values_are_equivalent(4099, 4100)

    def test_ranges_tile_the_value_space(self, mapper):
        """next_non_equivalent_value of one range is the start of the next slot."""
        for idx in range(mapper.layout.counts_len - 1):
            value = mapper.value_at_index(idx)
            assert mapper.next_non_equivalent_value(value) == mapper.value_at_index(idx + 1)

    def test_relative_error_bound(self):
        """Range width never exceeds value / 10^(sig_figs) above the first bucket."""
        layout = resolve_layout(1, 10**9, 3)
        mapper = IndexMapper(layout)
        for v in (2048, 10_000, 123_456, 999_999_999):
            assert mapper.size_of_equivalent_value_range(v) / v <= 10**-3


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
