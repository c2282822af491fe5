"""Module for computational graph visualizations."""

from typing import TYPE_CHECKING

from graphviz import Digraph

if TYPE_CHECKING:
    from scalargrad.engine import Scalar


def format_value(x: float) -> str:
    """Format a node value for display."""
    return f"{x:.4f}"


def build_graph(root: "Scalar") -> Digraph:
    """Build the graphviz description of the graph that produced ``root``."""
    dot = Digraph(root.label or "Scalar")
    dot.attr(rankdir="LR")  # Left to right direction

    # Operands come first in topological order, so their keys exist before use.
    keys: dict["Scalar", str] = {}
    for node in root.topological_order():
        node_key = f"n{len(keys)}"
        keys[node] = node_key

        name = node.label or node_key
        dot.node(
            node_key,
            f"{{{name} | data {format_value(node.data)} | grad {format_value(node.grad)}}}",
            shape="record",
        )

        # Leaves have no operation node
        if node.op is None:
            continue

        op_key = f"{node_key}_op"
        dot.node(op_key, node.op.value, shape="circle")
        dot.edge(op_key, node_key)
        for child in node.children:
            dot.edge(keys[child], op_key)

    return dot


def plot_graph(root: "Scalar", output_format: str = "png") -> None:
    """Plot computational graph for a scalar using graphviz."""
    dot = build_graph(root)
    dot.format = output_format
    dot.render("computational_graph", view=True, cleanup=True)
