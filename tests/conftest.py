import numpy as np
import pytest

from iterstats.core.ledger import SnapshotLedger, create_test_connection


EXAMPLE_STREAM = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]


@pytest.fixture
def example_stream():
    """The textbook stream with mean 5 and population variance 4."""
    return list(EXAMPLE_STREAM)


@pytest.fixture
def rng():
    """Seeded generator so every run sees the same samples."""
    return np.random.default_rng(20240521)


@pytest.fixture
def skewed_samples(rng):
    """A few thousand samples from a skewed, heavy-tailed distribution."""
    return rng.gamma(shape=2.0, scale=3.0, size=5000).tolist()


@pytest.fixture
def ledger():
    """An in-memory duckdb snapshot ledger."""
    return SnapshotLedger(create_test_connection("duckdb"), "test")
