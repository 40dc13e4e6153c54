"""Output formatting."""

from .formatter import format_graph, format_products, format_stages

__all__ = [
    "format_graph",
    "format_products",
    "format_stages",
]
