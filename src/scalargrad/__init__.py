from .engine import Operation, Scalar, ScalarLike
from .nn import MLP, Activation, ArityError, Layer, Module, Neuron

__all__ = [
    "MLP",
    "Activation",
    "ArityError",
    "Layer",
    "Module",
    "Neuron",
    "Operation",
    "Scalar",
    "ScalarLike",
]
