"""Derives typed, styled connections between positioned nodes."""

import logging
import math
from typing import Dict, List, NamedTuple, Optional, Union

from ..core.models import (
    ArrowDirection,
    ConnectionStyle,
    ConnectionType,
    DiagramConnection,
    DiagramNode,
    LayoutOptions,
)

logger = logging.getLogger(__name__)

CRITICAL_PAIRS = [
    ("azurerm_virtual_machine", "azurerm_network_interface"),
    ("azurerm_network_interface", "azurerm_public_ip"),
    ("azurerm_network_interface", "azurerm_subnet"),
    ("azurerm_subnet", "azurerm_virtual_network"),
    ("azurerm_app_service", "azurerm_app_service_plan"),
    ("azurerm_sql_database", "azurerm_sql_server"),
    ("azurerm_kubernetes_cluster", "azurerm_network_interface"),
]

DATA_CONSUMERS = ("app_service", "function_app", "virtual_machine", "container")
DATA_SOURCES = ("sql", "cosmosdb", "storage_account", "redis")
DATA_SINKS = ("sql", "cosmosdb", "storage_account")
SECURITY_KEYWORDS = ("firewall", "network_security_group", "key_vault", "bastion")

CONNECTION_COLORS: Dict[ConnectionType, str] = {
    ConnectionType.DATA: "#107C10",
    ConnectionType.CONTROL: "#0078D4",
    ConnectionType.SECURITY: "#FF8C00",
    ConnectionType.DEPENDENCY: "#666666",
    ConnectionType.REFERENCE: "#666666",
}

CONNECTION_ARROWS: Dict[ConnectionType, ArrowDirection] = {
    ConnectionType.DATA: ArrowDirection.FORWARD,
    ConnectionType.CONTROL: ArrowDirection.FORWARD,
    ConnectionType.SECURITY: ArrowDirection.BOTH,
}


class ArrowStyle(NamedTuple):
    stroke: str
    stroke_width: int
    stroke_dasharray: str


ARROW_STYLES: Dict[ConnectionType, ArrowStyle] = {
    ConnectionType.DATA: ArrowStyle("#107C10", 2, ""),
    ConnectionType.CONTROL: ArrowStyle("#0078D4", 2, ""),
    ConnectionType.SECURITY: ArrowStyle("#FF8C00", 2, "5,2"),
}
DEFAULT_ARROW_STYLE = ArrowStyle("#666666", 1, "5,5")


def is_critical_dependency(source: DiagramNode, target: DiagramNode) -> bool:
    """Pairs of types that always belong together, in either direction."""
    return any(
        (first in source.type and second in target.type)
        or (second in source.type and first in target.type)
        for first, second in CRITICAL_PAIRS
    )


def is_data_flow(source: DiagramNode, target: DiagramNode) -> bool:
    return any(keyword in source.type for keyword in DATA_CONSUMERS) and any(
        keyword in target.type for keyword in DATA_SOURCES
    )


def is_security_related(source: DiagramNode, target: DiagramNode) -> bool:
    return any(keyword in source.type or keyword in target.type for keyword in SECURITY_KEYWORDS)


def get_connection_color(connection_type: Union[ConnectionType, str]) -> str:
    """Stroke color of a connection type, gray for anything unrecognised."""
    try:
        return CONNECTION_COLORS.get(ConnectionType(connection_type), "#666666")
    except ValueError:
        return "#666666"


def calculate_arrow_rotation(source_x: float, source_y: float, target_x: float, target_y: float) -> float:
    """Rotation in degrees for a downward-pointing arrow glyph, in [0, 360)."""
    angle = math.degrees(math.atan2(target_y - source_y, target_x - source_x)) - 90
    angle %= 360
    if angle >= 360:
        angle -= 360
    return angle


def _format_number(value: float) -> str:
    return f"{value:.10g}"


def arrow_path(
    source_x: float,
    source_y: float,
    target_x: float,
    target_y: float,
    curvature: float = 0,
) -> str:
    """SVG path between two points.

    Args:
        source_x: Start x.
        source_y: Start y.
        target_x: End x.
        target_y: End y.
        curvature: Offset of the control point along the normal; 0 draws a line.

    Returns:
        ``M .. L ..`` for a straight line, ``M .. Q .. ..`` for a curve.
    """
    start = f"M {_format_number(source_x)} {_format_number(source_y)}"
    end = f"{_format_number(target_x)} {_format_number(target_y)}"

    dx = target_x - source_x
    dy = target_y - source_y
    length = math.hypot(dx, dy)
    if curvature == 0 or length == 0:
        return f"{start} L {end}"

    control_x = (source_x + target_x) / 2 + (-dy / length) * curvature
    control_y = (source_y + target_y) / 2 + (dx / length) * curvature
    return f"{start} Q {_format_number(control_x)} {_format_number(control_y)} {end}"


def arrow_style(connection_type: Union[ConnectionType, str]) -> ArrowStyle:
    """Stroke, width and dash array for a connection type."""
    try:
        return ARROW_STYLES.get(ConnectionType(connection_type), DEFAULT_ARROW_STYLE)
    except ValueError:
        return DEFAULT_ARROW_STYLE


class ConnectionBuilder:
    """Turns retained dependencies on nodes into renderable connections."""

    def __init__(self, options: Optional[LayoutOptions] = None):
        """Initialize connection builder.

        Args:
            options: Layout options; the fan-out cap and scoring weights come from here.
        """
        self.options = options or LayoutOptions()

    def derive_connections(self, nodes: List[DiagramNode]) -> List[DiagramConnection]:
        """Build connections for every leaf node.

        Args:
            nodes: Styled, normalized nodes.

        Returns:
            Connections in node order, highest scoring targets first per node.
        """
        nodes_by_id = {node.id: node for node in nodes}
        connections: List[DiagramConnection] = []

        for source in nodes:
            if source.is_decoration:
                continue
            for target_id in self.filter_connections(source, nodes_by_id):
                connections.append(self._create_connection(source, nodes_by_id[target_id]))

        logger.info(f"Derived {len(connections)} connections from {len(nodes)} nodes")
        return connections

    def filter_connections(self, source: DiagramNode, nodes_by_id: Dict[str, DiagramNode]) -> List[str]:
        """Drop unusable targets, rank the rest by score and apply the fan-out cap."""
        candidates = []
        for target_id in dict.fromkeys(source.connections or []):
            target = nodes_by_id.get(target_id)
            if target is None or target is source or target.is_decoration:
                continue
            candidates.append(target_id)

        ranked = sorted(
            candidates,
            key=lambda target_id: -self.score_connection(source, nodes_by_id[target_id]),
        )

        limit = self.options.max_connections_per_resource
        if limit is not None:
            ranked = ranked[:limit]
        return ranked

    def score_connection(self, source: DiagramNode, target: DiagramNode) -> int:
        """Render-time importance of an edge."""
        weights = self.options.scoring
        score = 0
        if source.zone != target.zone:
            score += weights.cross_zone
        if is_critical_dependency(source, target):
            score += weights.critical_pair
        if is_data_flow(source, target):
            score += weights.data_flow
        if is_security_related(source, target):
            score += weights.security
        if any(keyword in target.type for keyword in DATA_SINKS):
            score += weights.data_sink
        return score

    @staticmethod
    def connection_type(source: DiagramNode, target: DiagramNode) -> ConnectionType:
        if is_data_flow(source, target):
            return ConnectionType.DATA
        if is_security_related(source, target):
            return ConnectionType.SECURITY
        if source.zone != target.zone:
            return ConnectionType.CONTROL
        return ConnectionType.DEPENDENCY

    @staticmethod
    def connection_label(source: DiagramNode, target: DiagramNode) -> str:
        if is_data_flow(source, target):
            return "data"
        if "network_security_group" in source.type and "network_interface" in target.type:
            return "secures"
        if "application_gateway" in source.type and "app_service" in target.type:
            return "routes to"
        return ""

    def _create_connection(self, source: DiagramNode, target: DiagramNode) -> DiagramConnection:
        connection_type = self.connection_type(source, target)
        source_x, source_y = source.center
        target_x, target_y = target.center

        return DiagramConnection(
            source=source.id,
            target=target.id,
            type=connection_type,
            style=ConnectionStyle.DASHED if connection_type == ConnectionType.DEPENDENCY else ConnectionStyle.SOLID,
            color=get_connection_color(connection_type),
            arrow=CONNECTION_ARROWS.get(connection_type, ArrowDirection.NONE),
            label=self.connection_label(source, target),
            rotation=calculate_arrow_rotation(source_x, source_y, target_x, target_y),
        )
