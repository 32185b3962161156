"""Core AzTfViz module."""

from .models import (
    ArrowDirection,
    ConnectionScoring,
    ConnectionStyle,
    ConnectionType,
    DependencyEdge,
    Diagram,
    DiagramConnection,
    DiagramNode,
    FlowDirection,
    GroupBy,
    Layer,
    LayoutMode,
    LayoutOptions,
    ResourceCategory,
    TerraformResource,
    Theme,
    TypePriority,
    Zone,
)
from .zones import ZoneClassifier
from .aztfviz import AzTfViz

__all__ = [
    "ArrowDirection",
    "AzTfViz",
    "ConnectionScoring",
    "ConnectionStyle",
    "ConnectionType",
    "DependencyEdge",
    "Diagram",
    "DiagramConnection",
    "DiagramNode",
    "FlowDirection",
    "GroupBy",
    "Layer",
    "LayoutMode",
    "LayoutOptions",
    "ResourceCategory",
    "TerraformResource",
    "Theme",
    "TypePriority",
    "Zone",
    "ZoneClassifier",
]
