"""
Value <-> counter slot arithmetic.

IndexMapper is pure: it holds only the layout constants and never touches
counters. Every value in [0, highest_trackable_value] maps to exactly one slot,
and value_at_index(counts_index_for(v)) == lowest_equivalent_value(v).
"""

from .layout import HistogramLayout

_U64_MASK = (1 << 64) - 1


def count_leading_zeros_64(value: int) -> int:
    """
    Leading zero bits of value as a 64-bit two's-complement word.

    Returns 64 for zero and 0 for negative values.
    """
    value &= _U64_MASK
    return 64 - value.bit_length()


class IndexMapper:
    """
    Bucket/sub-bucket arithmetic for a resolved layout.

    Example:
        mapper = IndexMapper(resolve_layout(1, 8191, 3))
        idx = mapper.counts_index_for(2049)     # 2048
        mapper.value_at_index(idx)              # 2048
        mapper.highest_equivalent_value(2049)   # 2049
    """

    __slots__ = (
        'layout',
        'unit_magnitude',
        'sub_bucket_count',
        'sub_bucket_half_count',
        'sub_bucket_half_count_magnitude',
        'sub_bucket_mask',
        '_bucket_shift',
    )

    def __init__(self, layout: HistogramLayout):
        self.layout = layout
        self.unit_magnitude = layout.unit_magnitude
        self.sub_bucket_count = layout.sub_bucket_count
        self.sub_bucket_half_count = layout.sub_bucket_half_count
        self.sub_bucket_half_count_magnitude = layout.sub_bucket_half_count_magnitude
        self.sub_bucket_mask = layout.sub_bucket_mask
        self._bucket_shift = layout.unit_magnitude + layout.sub_bucket_half_count_magnitude + 1

    # === Forward: value -> slot ===

    def bucket_index(self, value: int) -> int:
        """Exponent row of value. Values below the first bucket map to 0."""
        pow2ceiling = 64 - count_leading_zeros_64(value | self.sub_bucket_mask)
        return pow2ceiling - self._bucket_shift

    def sub_bucket_index(self, value: int, bucket_index: int) -> int:
        return value >> (bucket_index + self.unit_magnitude)

    def counts_index(self, bucket_index: int, sub_bucket_index: int) -> int:
        bucket_base_index = (bucket_index + 1) << self.sub_bucket_half_count_magnitude
        offset_in_bucket = sub_bucket_index - self.sub_bucket_half_count
        return bucket_base_index + offset_in_bucket

    def counts_index_for(self, value: int) -> int:
        """Slot for value. Not range-checked; callers validate the result."""
        bucket_index = self.bucket_index(value)
        sub_bucket_index = self.sub_bucket_index(value, bucket_index)
        return self.counts_index(bucket_index, sub_bucket_index)

    # === Inverse: slot -> value ===

    def value_from_index(self, bucket_index: int, sub_bucket_index: int) -> int:
        return sub_bucket_index << (bucket_index + self.unit_magnitude)

    def value_at_index(self, index: int) -> int:
        """Lowest value recorded into slot index."""
        bucket_index = (index >> self.sub_bucket_half_count_magnitude) - 1
        sub_bucket_index = (index & (self.sub_bucket_half_count - 1)) + self.sub_bucket_half_count

        # bucket 0 spans the full sub-bucket range
        if bucket_index < 0:
            sub_bucket_index -= self.sub_bucket_half_count
            bucket_index = 0

        return self.value_from_index(bucket_index, sub_bucket_index)

    # === Equivalence ranges ===

    def size_of_equivalent_value_range(self, value: int) -> int:
        bucket_index = self.bucket_index(value)
        sub_bucket_index = self.sub_bucket_index(value, bucket_index)
        if sub_bucket_index >= self.sub_bucket_count:
            bucket_index += 1
        return 1 << (self.unit_magnitude + bucket_index)

    def lowest_equivalent_value(self, value: int) -> int:
        bucket_index = self.bucket_index(value)
        sub_bucket_index = self.sub_bucket_index(value, bucket_index)
        return self.value_from_index(bucket_index, sub_bucket_index)

    def next_non_equivalent_value(self, value: int) -> int:
        return self.lowest_equivalent_value(value) + self.size_of_equivalent_value_range(value)

    def highest_equivalent_value(self, value: int) -> int:
        return self.next_non_equivalent_value(value) - 1

    def median_equivalent_value(self, value: int) -> int:
        """Midpoint of the equivalence range, used for mean/stddev."""
        return self.lowest_equivalent_value(value) + (self.size_of_equivalent_value_range(value) >> 1)

    def values_are_equivalent(self, value1: int, value2: int) -> bool:
        """True if both values land in the same slot."""
        return self.lowest_equivalent_value(value1) == self.lowest_equivalent_value(value2)
