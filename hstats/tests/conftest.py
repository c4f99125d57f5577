"""Pytest configuration and shared fixtures."""

import logging

import numpy as np
import pytest

from hstats.histogram import HistogramAccumulator


@pytest.fixture
def unit_histogram():
    """Ten unit-width bins over [0, 10)."""
    return HistogramAccumulator(0.0, 10.0, 10)


@pytest.fixture
def normal_samples():
    """10,000 seeded draws from normal(2, 3)."""
    rng = np.random.default_rng(42)
    return rng.normal(loc=2.0, scale=3.0, size=10_000)


@pytest.fixture
def mixed_samples():
    """Samples spread across underflow, every bin and overflow of [-10, 10)."""
    rng = np.random.default_rng(7)
    values = rng.uniform(-15.0, 15.0, size=2_000)
    edges = np.array([-10.0, 0.0, 10.0, -15.0, 15.0, np.inf, -np.inf])
    return np.concatenate([values, edges])


@pytest.fixture
def restore_hstats_logger():
    """Put the package logger back the way it was after the test."""
    logger = logging.getLogger("hstats")
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
