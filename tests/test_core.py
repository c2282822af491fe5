"""Tests for core Scalar functionality."""

import math

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from scalargrad.engine import Operation, Scalar, _cast_float, _cast_scalar


def test_constructor_and_core_properties(default_floats_strategy):
    """Test scalar construction.

    Tests: data type, zero gradient, leaf properties
    """

    @given(default_floats_strategy)
    def _test(value: float):
        scalar = Scalar(value)
        assert isinstance(scalar.data, float)
        assert scalar.data == value
        assert scalar.grad == 0.0
        assert scalar.is_leaf
        assert scalar.op is None
        assert scalar.children == ()

    _test()


def test_cast_numbers(default_ints_strategy):
    """Test numeric casting.

    Tests: ints and numpy scalars become python floats
    """

    @given(default_ints_strategy)
    def _test(value: int):
        assert _cast_float(value) == float(value)
        assert isinstance(Scalar(value).data, float)

    _test()

    assert Scalar(np.float32(1.5)).data == 1.5
    assert Scalar(np.int64(7)).data == 7.0


def test_cast_invalid_input():
    """Test casting errors.

    Tests: TypeError for invalid inputs
    """

    @given(
        st.one_of(
            st.dictionaries(st.text(), st.integers()),
            st.text(),
            st.binary(),
            st.none(),
            st.lists(st.floats(), min_size=1),
        )
    )
    def _test(invalid_data):
        with pytest.raises(TypeError):
            Scalar(invalid_data)
        with pytest.raises(TypeError):
            _cast_scalar(invalid_data)

    _test()


def test_cast_scalar_passes_nodes_through():
    """Existing nodes are not wrapped again."""
    x = Scalar(2.0)
    assert _cast_scalar(x) is x
    assert _cast_scalar(3).is_leaf


def test_non_finite_values_are_accepted():
    """Infinities and NaN are stored without validation."""
    assert Scalar(float("inf")).data == math.inf
    assert math.isnan(Scalar(float("nan")).data)
    assert math.isnan((Scalar(float("inf")) * 0.0).data)


def test_scalar_labeling(default_floats_strategy):
    """Test scalar labeling.

    Tests: label storage, None handling
    """

    @given(default_floats_strategy, st.text(min_size=1))
    def _test(value: float, label: str):
        scalar = Scalar(value, label=label)
        assert scalar.label == label
        assert Scalar(value).label is None

    _test()


def test_repr():
    """Test string representations.

    Tests: unlabeled and labeled repr, __repr__ == __str__
    """
    x = Scalar(2.0)
    assert repr(x) == "Scalar(data=2.0, grad=0.0)"
    assert str(x) == repr(x)

    y = Scalar(-3.0, label="y")
    assert repr(y) == "Scalar(y, data=-3.0, grad=0.0)"
    assert str(y) == repr(y)


def test_negation_operation(scalars_strategy):
    """Test scalar negation.

    Tests: double negation, -1 multiplication, zero handling
    """

    @given(scalars_strategy())
    def _test(scalar: Scalar):
        # Test double negation
        double_neg = -(-scalar)
        assert double_neg.data == scalar.data

        # Test negation is same as multiplying by -1
        neg = -scalar
        assert neg.data == (scalar * -1).data
        assert neg.op == Operation.MULT  # Negation uses multiplication internally
        assert neg.children[0] is scalar

    _test()

    assert (-Scalar(0.0)).data == 0.0


def test_derived_nodes_are_not_leaves():
    """Every operation yields a non-leaf that remembers its operands."""
    x = Scalar(1.0)
    for node in (x + 1, x * 2, x**2, x.exp(), x.tanh(), x.relu(), x.lin()):
        assert not node.is_leaf
        assert x in node.children
