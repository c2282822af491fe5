"""Implementation of different neural architecture modules."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum
from functools import reduce

import numpy as np

from scalargrad.engine import Scalar, ScalarLike

logger = logging.getLogger(__name__)

# Range of the uniform distribution weights and biases are drawn from.
INIT_RANGE = (-1.0, 1.0)

RandomState = np.random.Generator | int | None


class ArityError(ValueError):
    """Raised when a module receives a different number of values than it was built for.

    This error occurs when:
    1. A neuron or layer is called with the wrong number of inputs
    2. Consecutive layers of a network do not line up
    """

    def __init__(self, expected: int, actual: int, what: str = "inputs") -> None:
        super().__init__(f"Expected {expected} {what}, got {actual}")
        self.expected = expected
        self.actual = actual


class Activation(Enum):
    """Options for activation functions."""

    TANH = "tanh"
    SIGMOID = "sigmoid"
    RELU = "relu"
    LIN = "lin"


class Module(ABC):
    """Abstract baseclass for different modules."""

    @abstractmethod
    def __call__(self, x: Sequence[ScalarLike]) -> Scalar | list[Scalar]:
        """Implements the forward pass. Must be implemented for a module."""
        raise NotImplementedError

    @property
    @abstractmethod
    def parameters(self) -> list[Scalar]:
        """Returns list of trainable parameters. Must be implemented by subclasses."""
        raise NotImplementedError

    def zero_grad(self) -> None:
        """Resets gradients to zero for all trainable parameters."""
        for p in self.parameters:
            p.grad = 0.0


class Neuron(Module):
    """Single neuron implementation."""

    def __init__(
        self,
        n_input: int,
        activation: Activation = Activation.TANH,
        rng: RandomState = None,
        label: str | None = None,
    ) -> None:
        """Initialize neuron with uniformly drawn weights and bias.

        Parameters
        ----------
        n_input : int
            Number of input values
        activation : Activation, optional
            Activation function to use
        rng : numpy.random.Generator or int, optional
            Generator (or seed for one) the initial values are drawn from
        label : str, optional
            Name for visualization

        Notes
        ----------
        Weights and bias are drawn independently from U(INIT_RANGE), so the
        weights of a neuron are never all equal.
        """
        if n_input < 1:
            raise ValueError(f"A neuron needs at least one input, got {n_input}")

        self.label = label
        self.n_input = n_input
        self.activation = activation

        rng = np.random.default_rng(rng)
        low, high = INIT_RANGE
        self.w = [Scalar(v, label=f"w{i}") for i, v in enumerate(rng.uniform(low, high, n_input))]
        self.b = Scalar(rng.uniform(low, high), label="b")

    @property
    def parameters(self) -> list[Scalar]:
        """Access all tunable parameters, weights first."""
        return self.w + [self.b]

    def __call__(self, x: Sequence[ScalarLike]) -> Scalar:
        """Implements the forward pass.

        Parameters
        ----------
        x : sequence of Scalar or numbers
            One value per weight

        Returns
        -------
        Scalar
            activation(sum(w_i * x_i) + b)

        Raises
        ------
        ArityError
            If the number of inputs differs from the number of weights.
        """
        if len(x) != self.n_input:
            raise ArityError(self.n_input, len(x))
        z = reduce(lambda acc, wx: acc + wx[0] * wx[1], zip(self.w, x), self.b)
        return getattr(z, self.activation.value)()

    def __repr__(self) -> str:
        """Return detailed string representation of the neuron."""
        return (
            f"Neuron("
            f"n_input={self.n_input}, "
            f"activation={self.activation.value}"
            f"{f', label={self.label}' if self.label else ''}"
            f")"
        )

    def __str__(self) -> str:
        """Return concise string representation of the neuron."""
        return f"Neuron({self.activation.value})"


class Layer(Module):
    """Collection of neurons sharing the same inputs."""

    def __init__(
        self,
        n_input: int,
        n_neurons: int = 1,
        activation: Activation = Activation.TANH,
        rng: RandomState = None,
        label: str | None = None,
    ) -> None:
        """Initialize layer of neurons.

        Parameters
        ----------
        n_input : int
            Number of input values
        n_neurons : int, optional
            Number of neurons in layer
        activation : Activation, optional
            Activation function for all neurons
        rng : numpy.random.Generator or int, optional
            Generator shared by all neurons of the layer
        label : str, optional
            Name for visualization
        """
        if n_neurons < 1:
            raise ValueError(f"A layer needs at least one neuron, got {n_neurons}")

        self.label = label
        self.n_input = n_input
        self.n_neurons = n_neurons
        self.activation = activation

        rng = np.random.default_rng(rng)
        self.neurons = [
            Neuron(n_input, activation, rng=rng, label=f"neuron_{i}") for i in range(n_neurons)
        ]

    def __repr__(self) -> str:
        """Return detailed string representation of the layer."""
        return (
            f"Layer("
            f"n_input={self.n_input}, "
            f"n_neurons={self.n_neurons}, "
            f"activation={self.activation.value}"
            f"{f', label={self.label}' if self.label else ''}"
            f")"
        )

    def __str__(self) -> str:
        """Return concise string representation of the layer."""
        return f"Layer({self.n_neurons} neurons, {self.activation.value})"

    def __call__(self, x: Sequence[ScalarLike]) -> list[Scalar]:
        """Forward pass through the layer.

        Every neuron sees the same inputs; the result holds one Scalar per
        neuron, in neuron order.
        """
        if len(x) != self.n_input:
            raise ArityError(self.n_input, len(x))
        return [neuron(x) for neuron in self.neurons]

    @property
    def parameters(self) -> list[Scalar]:
        """Returns list of trainable parameters from all neurons."""
        return [p for neuron in self.neurons for p in neuron.parameters]


class MLP(Module):
    """Collection of layers forming a multi-layer perceptron."""

    def __init__(
        self,
        n_input: int,
        layers: Sequence[int | tuple[int, Activation]],
        activation: Activation = Activation.TANH,
        rng: RandomState = None,
        label: str | None = None,
    ) -> None:
        """Initialize MLP.

        Parameters
        ----------
        n_input : int
            Number of input values
        layers : sequence of int or (int, Activation)
            Neuron count of each layer, optionally paired with its activation.
            Bare counts use ``activation`` for hidden layers and a linear
            output layer.
        activation : Activation, optional
            Activation for layers given as bare counts
        rng : numpy.random.Generator or int, optional
            Generator (or seed) threaded through every layer, so a seeded
            network is reproducible
        label : Optional[str]
            Optional label for visualization
        """
        if not layers:
            raise ValueError("An MLP needs at least one layer")

        self.label = label
        rng = np.random.default_rng(rng)

        last = len(layers) - 1
        sizes: list[int] = []
        activations: list[Activation] = []
        for i, entry in enumerate(layers):
            if isinstance(entry, tuple):
                n, act = entry
            else:
                n, act = entry, (Activation.LIN if i == last else activation)
            sizes.append(n)
            activations.append(act)

        # Build list of consecutive pairs of dimensions for each layer
        dims = [n_input] + sizes
        self.layers = [
            Layer(n_input=n_in, n_neurons=n_out, activation=act, rng=rng, label=f"layer_{i}")
            for i, (n_in, n_out, act) in enumerate(zip(dims[:-1], dims[1:], activations))
        ]
        logger.debug("Built %s", self)

    @classmethod
    def from_layers(cls, layers: Sequence[Layer], label: str | None = None) -> MLP:
        """Assemble an MLP from existing layers, checking that they chain."""
        if not layers:
            raise ValueError("An MLP needs at least one layer")
        for prev, layer in zip(layers[:-1], layers[1:]):
            if layer.n_input != prev.n_neurons:
                raise ArityError(layer.n_input, prev.n_neurons, "outputs from previous layer")

        mlp = cls.__new__(cls)
        mlp.label = label
        mlp.layers = list(layers)
        return mlp

    @property
    def n_input(self) -> int:
        """Number of input values."""
        return self.layers[0].n_input

    def __call__(self, x: Sequence[ScalarLike]) -> list[Scalar]:
        """Forward pass through MLP using function composition."""
        return reduce(lambda xi, layer: layer(xi), self.layers, x)

    def __repr__(self) -> str:
        """Return detailed string representation of the MLP."""
        layers_str = ",\n    ".join(
            f"Layer({layer.n_input}->{layer.n_neurons}, {layer.activation.value})"
            for layer in self.layers
        )
        label_str = f',  label="{self.label}"' if self.label else ""
        return (
            "MLP(\n"
            + f"  input_dim={self.n_input},\n"
            + f"  layers=[\n    {layers_str}\n  ]"
            + label_str
            + "\n"
            + ")"
        )

    def __str__(self) -> str:
        """Return concise string representation showing layer dimensions."""
        layers_str = " -> ".join(
            f"{layer.n_neurons}/{layer.activation.value}" for layer in self.layers
        )
        return f"MLP({self.n_input} -> [{layers_str}])"

    @property
    def parameters(self) -> list[Scalar]:
        """Returns list of trainable parameters from all layers."""
        return [p for layer in self.layers for p in layer.parameters]
