"""
This module implements reverse-mode automatic differentiation over scalar values.
Every arithmetic operation on a Scalar creates a new node that remembers its
operands and the operation that produced it, so that a later call to backward()
can walk the recorded graph from the output back to the leaves and accumulate
exact gradients with the chain rule.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

import numpy as np

from scalargrad.visualization import plot_graph

logger = logging.getLogger(__name__)

Number = Union[int, float, np.integer, np.floating]
ScalarLike = Union[Number, "Scalar"]


class Operation(Enum):
    """Operations that can produce a node."""

    ADD = "+"
    MULT = "*"
    POW = "**"
    EXP = "exp"
    LOG = "log"
    TANH = "tanh"
    RELU = "relu"
    IDENT = "ident"


def _cast_float(data: Number) -> float:
    """Cast a real number to a python float, raises if not compatible."""
    if isinstance(data, (int, float, np.integer, np.floating)):
        return float(data)
    raise TypeError(f"Wrong data type: {type(data).__name__}")


def _cast_scalar(x: ScalarLike) -> Scalar:
    """Casts compatible datatypes to Scalar, raises if not compatible."""
    return x if isinstance(x, Scalar) else Scalar(_cast_float(x))


class Scalar(object):
    """A single value and the node of the computational graph that produced it."""

    def __init__(
        self,
        data: Number,
        label: Optional[str] = None,
        _children: Tuple[Scalar, ...] = (),
        _op: Optional[Operation] = None,
        _exponent: Optional[float] = None,
    ) -> None:
        """Initialize a new Scalar with data and optional operands and operation."""
        self.data: float = _cast_float(data)
        self.grad: float = 0.0
        self.label = label
        self._children = tuple(_children)
        self._op = _op
        self._exponent = _exponent

    def __repr__(self) -> str:
        """Return string representation of the scalar."""
        return (
            "Scalar"
            + (f"({self.label}, " if self.label is not None else "(")
            + f"data={self.data}, grad={self.grad})"
        )

    def __str__(self) -> str:
        """Return string representation of the scalar."""
        return self.__repr__()

    def render(self, output_format: str = "png") -> None:
        """Renders the computational graph."""
        plot_graph(self, output_format)

    @property
    def op(self) -> Optional[Operation]:
        """Operation that produced this node, None for leaves."""
        return self._op

    @property
    def children(self) -> Tuple[Scalar, ...]:
        """Operands consumed to produce this node, in order."""
        return self._children

    @property
    def is_leaf(self) -> bool:
        """True for inputs, constants and parameters."""
        return self._op is None

    def __add__(self, other: ScalarLike) -> Scalar:
        """Add other scalar-like object to this scalar.

        Forward pass: z = x + y
        Backward pass:
            dz/dx = 1
            dz/dy = 1
        """
        other = _cast_scalar(other)
        return Scalar(self.data + other.data, None, (self, other), Operation.ADD)

    def __radd__(self, other: ScalarLike) -> Scalar:
        """Handle addition when scalar is the right operand."""
        return _cast_scalar(other) + self

    def __mul__(self, other: ScalarLike) -> Scalar:
        """Multiply other scalar-like object with this scalar.

        Forward pass: z = x * y
        Backward pass:
            dz/dx = y
            dz/dy = x
        """
        other = _cast_scalar(other)
        return Scalar(self.data * other.data, None, (self, other), Operation.MULT)

    def __rmul__(self, other: ScalarLike) -> Scalar:
        """Handle multiplication when scalar is the right operand."""
        return _cast_scalar(other) * self

    def __neg__(self) -> Scalar:
        """Return the negation of this scalar as multiplication by -1."""
        return self * -1

    def __sub__(self, other: ScalarLike) -> Scalar:
        """Subtract other scalar-like object from this scalar as x + (-y)."""
        return self + (-_cast_scalar(other))

    def __rsub__(self, other: ScalarLike) -> Scalar:
        """Handle subtraction when scalar is the right operand."""
        return _cast_scalar(other) - self

    def __pow__(self, exponent: Number) -> Scalar:
        """Raise scalar to a constant power.

        Forward pass: z = x^n
        Backward pass:
            dz/dx = n * x^(n-1)  (power rule)

        The exponent is a plain number and is not differentiated.
        """
        if isinstance(exponent, Scalar):
            raise TypeError("Exponent must be a number, not a Scalar")
        n = _cast_float(exponent)
        return Scalar(_power(self.data, n), None, (self,), Operation.POW, _exponent=n)

    def __truediv__(self, other: ScalarLike) -> Scalar:
        """Divide scalar by other scalar-like object as x * y^-1."""
        return self * (_cast_scalar(other) ** -1)

    def __rtruediv__(self, other: ScalarLike) -> Scalar:
        """Handle division when scalar is the denominator (other / self)."""
        return _cast_scalar(other) / self

    def exp(self) -> Scalar:
        """Compute the exponential of the scalar.

        Forward pass: z = e^x
        Backward pass:
            dz/dx = e^x  (the output itself)
        """
        with np.errstate(over="ignore"):
            data = float(np.exp(self.data))
        return Scalar(data, None, (self,), Operation.EXP)

    def log(self) -> Scalar:
        """Compute the natural logarithm of the scalar.

        Forward pass: z = ln(x)
        Backward pass:
            dz/dx = 1/x
        """
        with np.errstate(divide="ignore", invalid="ignore"):
            data = float(np.log(self.data))
        return Scalar(data, None, (self,), Operation.LOG)

    def tanh(self) -> Scalar:
        """Hyperbolic tangent activation.

        Forward pass: z = tanh(x)
        Backward pass:
            dz/dx = 1 - tanh(x)^2
        """
        return Scalar(float(np.tanh(self.data)), None, (self,), Operation.TANH)

    def relu(self) -> Scalar:
        """Compute ReLU activation function: max(0, x).

        Forward pass: z = max(0, x)
        Backward pass:
            dz/dx = 1 if x > 0 else 0  (0 at the kink)
        """
        return Scalar(max(self.data, 0.0), None, (self,), Operation.RELU)

    def lin(self) -> Scalar:
        """Linear (identity) activation function.

        Forward pass: z = x
        Backward pass: dz/dx = 1
        """
        return Scalar(self.data, None, (self,), Operation.IDENT)

    def sigmoid(self) -> Scalar:
        """Compute sigmoid activation function of scalar."""
        exp = (-1 * self).exp()
        return 1 / (1 + exp)

    def topological_order(self) -> List[Scalar]:
        """Return every node reachable from this one, operands before consumers.

        Depth-first traversal driven by an explicit stack, so deep graphs do not
        hit the interpreter's recursion limit. Each node appears exactly once,
        however many paths lead to it.
        """
        topo: List[Scalar] = []
        visited = set()
        stack: List[Tuple[Scalar, bool]] = [(self, False)]

        while stack:
            node, expanded = stack.pop()
            if expanded:
                topo.append(node)
                continue
            if node in visited:
                continue
            visited.add(node)
            stack.append((node, True))
            for child in reversed(node._children):
                if child not in visited:
                    stack.append((child, False))

        return topo

    def zero_grad(self) -> None:
        """Reset the gradient of every node reachable from this one."""
        for node in self.topological_order():
            node.grad = 0.0

    def backward(self) -> None:
        """Compute gradients through back propagation.

        First builds a topologically sorted list of all nodes in the graph,
        starting from this scalar, and clears their gradients. Then iterates
        through the nodes in reverse order, applying each node's backward rule
        to accumulate gradients into its operands.
        """
        topo = self.topological_order()
        for node in topo:
            node.grad = 0.0

        # Go one node at a time and apply the chain rule.
        self.grad = 1.0
        for node in reversed(topo):
            if node._op is not None:
                _BACKWARD_RULES[node._op](node)

        logger.debug("Backpropagated through %d nodes", len(topo))


def _power(base: float, exponent: float) -> float:
    """Power with IEEE semantics (0^-1 is inf, negative base with fractional exponent is nan)."""
    with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
        return float(np.power(np.float64(base), exponent))


def _add_backward(node: Scalar) -> None:
    """Local derivative is 1 for both operands."""
    a, b = node._children
    a.grad += node.grad
    b.grad += node.grad


def _mul_backward(node: Scalar) -> None:
    """Local derivatives are the opposite operand."""
    a, b = node._children
    a.grad += b.data * node.grad
    b.grad += a.data * node.grad


def _pow_backward(node: Scalar) -> None:
    """Local derivative is n * x^(n-1)."""
    (a,) = node._children
    n = node._exponent
    assert n is not None
    a.grad += n * _power(a.data, n - 1) * node.grad


def _exp_backward(node: Scalar) -> None:
    (a,) = node._children
    a.grad += node.data * node.grad


def _log_backward(node: Scalar) -> None:
    (a,) = node._children
    with np.errstate(divide="ignore", invalid="ignore"):
        a.grad += float(np.divide(node.grad, np.float64(a.data)))


def _tanh_backward(node: Scalar) -> None:
    """Local derivative is 1 - tanh(x)^2, read off the output."""
    (a,) = node._children
    a.grad += (1.0 - node.data**2) * node.grad


def _relu_backward(node: Scalar) -> None:
    """Local derivative is 1 for positive input, 0 elsewhere."""
    (a,) = node._children
    if a.data > 0:
        a.grad += node.grad


def _ident_backward(node: Scalar) -> None:
    (a,) = node._children
    a.grad += node.grad


_BACKWARD_RULES: Dict[Operation, Callable[[Scalar], None]] = {
    Operation.ADD: _add_backward,
    Operation.MULT: _mul_backward,
    Operation.POW: _pow_backward,
    Operation.EXP: _exp_backward,
    Operation.LOG: _log_backward,
    Operation.TANH: _tanh_backward,
    Operation.RELU: _relu_backward,
    Operation.IDENT: _ident_backward,
}
