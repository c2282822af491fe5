"""Shared test configuration and utilities."""

import pytest
from hypothesis import settings
from hypothesis import strategies as st

from scalargrad.engine import Scalar


@pytest.fixture
def rtol() -> float:
    """Relative tolerance for float64."""
    return 1e-7


@pytest.fixture
def atol() -> float:
    """Absolute tolerance for float64."""
    return 1e-9


# Set test parameters
settings.register_profile("dev", max_examples=20, deadline=None)
settings.load_profile("dev")


@pytest.fixture
def default_floats_strategy() -> st.SearchStrategy:
    """Default strategy for floating point numbers."""
    return st.floats(
        min_value=-10.0,
        max_value=10.0,
        allow_infinity=False,
        allow_nan=False,
        allow_subnormal=False,
    )


@pytest.fixture
def positive_floats_strategy() -> st.SearchStrategy:
    """Strictly positive floats, for division and logarithms."""
    return st.floats(
        min_value=0.001,
        max_value=10.0,
        allow_infinity=False,
        allow_nan=False,
        allow_subnormal=False,
    )


@pytest.fixture
def default_ints_strategy() -> st.SearchStrategy:
    """Default strategy for integers."""
    return st.integers(min_value=-1000, max_value=1000)


@pytest.fixture
def scalars_strategy(default_floats_strategy):
    """Strategy to generate leaf Scalar instances."""

    def _scalars_strategy(floats_strategy=None) -> st.SearchStrategy[Scalar]:
        if floats_strategy is None:
            floats_strategy = default_floats_strategy
        return floats_strategy.map(Scalar)

    return _scalars_strategy


@pytest.fixture
def scalar_pairs_strategy(scalars_strategy):
    """Strategy to generate two independent leaf Scalars."""

    def _scalar_pairs_strategy(floats_strategy=None) -> st.SearchStrategy[tuple[Scalar, Scalar]]:
        return st.tuples(scalars_strategy(floats_strategy), scalars_strategy(floats_strategy))

    return _scalar_pairs_strategy
