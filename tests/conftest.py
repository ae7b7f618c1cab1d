"""Pytest fixtures shared by the histogram tests."""

from typing import List

import numpy as np
import pytest

from fixed_hdr import HdrHistogram


# Reference layout used by the regression scenarios
REFERENCE_PARAMS = (1, 8191, 3)

SCENARIO_A_VALUES = [2, 2046, 2047, 2048, 2049, 4094, 4095, 4096, 4097]


@pytest.fixture
def deterministic_seed() -> int:
    """Fixed seed for reproducible tests."""
    return 0xDEADBEEF


@pytest.fixture
def reference_hist() -> HdrHistogram:
    """Empty histogram with the reference layout."""
    return HdrHistogram(*REFERENCE_PARAMS)


@pytest.fixture
def scenario_a_values() -> List[int]:
    return list(SCENARIO_A_VALUES)


@pytest.fixture
def scenario_a_hist(scenario_a_values) -> HdrHistogram:
    """Reference histogram with the Scenario A values recorded."""
    hist = HdrHistogram(*REFERENCE_PARAMS)
    for v in scenario_a_values:
        assert hist.record(v)
    return hist


@pytest.fixture
def gamma_samples(deterministic_seed) -> np.ndarray:
    """10000 latency-like samples: gamma(shape=1, scale=100000), clipped to 360000."""
    rng = np.random.default_rng(deterministic_seed)
    samples = rng.gamma(1.0, 100_000.0, 10_000).astype(np.int64) + 1
    return np.minimum(samples, 360_000)
