"""Visualization module for layout, styling and connection derivation."""

from .connection_builder import ConnectionBuilder
from .graph_builder import GraphBuilder
from .layout_engine import LayoutEngine
from .styling import NodeStyler

__all__ = ["ConnectionBuilder", "GraphBuilder", "LayoutEngine", "NodeStyler"]
