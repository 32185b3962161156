"""Tests for connection scoring, typing and arrow geometry."""

import pytest

from aztfviz.core.models import (
    ZONE_CONTAINER,
    ArrowDirection,
    ConnectionStyle,
    ConnectionType,
    DiagramNode,
    LayoutOptions,
)
from aztfviz.visualization.connection_builder import (
    ConnectionBuilder,
    arrow_path,
    arrow_style,
    calculate_arrow_rotation,
    get_connection_color,
)


def _node(node_id, node_type, zone, x=0.0, y=0.0, connections=None):
    return DiagramNode(
        node_id, node_type, node_id, x, y, 180, 64, "General", zone, 1, connections=list(connections or []),
    )


def _by_target(connections):
    return {connection.target: connection for connection in connections}


def test_arrow_rotation():
    """Test rotation for the four axis directions."""
    assert calculate_arrow_rotation(0, 0, 0, 10) == pytest.approx(0)
    assert calculate_arrow_rotation(0, 0, -10, 0) == pytest.approx(90)
    assert calculate_arrow_rotation(0, 0, 0, -10) == pytest.approx(180)
    assert calculate_arrow_rotation(0, 0, 10, 0) == pytest.approx(270)
    assert 0 <= calculate_arrow_rotation(0, 0, 10, -1e-12) < 360


def test_arrow_path():
    """Test straight and curved SVG paths."""
    assert arrow_path(0, 0, 10, 0) == "M 0 0 L 10 0"
    assert arrow_path(0, 0, 10, 0, curvature=5) == "M 0 0 Q 5 5 10 0"
    assert arrow_path(3, 3, 3, 3, curvature=5) == "M 3 3 L 3 3"
    assert arrow_path(0.5, 1, 2.25, 4) == "M 0.5 1 L 2.25 4"


def test_arrow_style():
    """Test stroke styles per connection type."""
    assert arrow_style(ConnectionType.DATA) == ("#107C10", 2, "")
    assert arrow_style("control") == ("#0078D4", 2, "")
    assert arrow_style(ConnectionType.SECURITY) == ("#FF8C00", 2, "5,2")
    assert arrow_style(ConnectionType.DEPENDENCY) == ("#666666", 1, "5,5")
    assert arrow_style("bogus").stroke_dasharray == "5,5"


def test_connection_colors():
    """Test the connection color table and its fallback."""
    assert get_connection_color(ConnectionType.DATA) == "#107C10"
    assert get_connection_color("reference") == "#666666"
    assert get_connection_color("bogus") == "#666666"


def test_connection_types_labels_and_arrows():
    """Test type precedence, labels, styles and arrowheads."""
    nodes = [
        _node("app", "azurerm_app_service", "Presentation", connections=["db"]),
        _node("db", "azurerm_sql_database", "Data", x=500),
        _node("nsg", "azurerm_network_security_group", "Edge", connections=["nic"]),
        _node("nic", "azurerm_network_interface", "Edge", y=300),
        _node("gw", "azurerm_application_gateway", "Edge", connections=["app"]),
        _node("vm", "azurerm_virtual_machine", "Application", connections=["disk"]),
        _node("disk", "azurerm_managed_disk", "Application", x=300),
    ]

    connections = _by_target(ConnectionBuilder(LayoutOptions()).derive_connections(nodes))

    data = connections["db"]
    assert data.type == ConnectionType.DATA
    assert data.label == "data"
    assert data.arrow == ArrowDirection.FORWARD
    assert data.style == ConnectionStyle.SOLID
    assert data.color == "#107C10"

    security = connections["nic"]
    assert security.type == ConnectionType.SECURITY
    assert security.label == "secures"
    assert security.arrow == ArrowDirection.BOTH

    control = connections["app"]
    assert control.type == ConnectionType.CONTROL
    assert control.label == "routes to"
    assert control.arrow == ArrowDirection.FORWARD
    assert control.color == "#0078D4"

    dependency = connections["disk"]
    assert dependency.type == ConnectionType.DEPENDENCY
    assert dependency.label == ""
    assert dependency.arrow == ArrowDirection.NONE
    assert dependency.style == ConnectionStyle.DASHED
    assert dependency.rotation == pytest.approx(270)


def test_scoring_ranks_before_truncating():
    """Test that the highest scoring targets survive the cap."""
    nodes = [
        _node("app", "azurerm_app_service", "Presentation", connections=["plan", "db", "vault", "storage"]),
        _node("plan", "azurerm_app_service_plan", "Presentation"),
        _node("db", "azurerm_sql_database", "Data"),
        _node("vault", "azurerm_key_vault", "Identity"),
        _node("storage", "azurerm_storage_account", "Data"),
    ]
    builder = ConnectionBuilder(LayoutOptions(max_connections_per_resource=2))

    assert builder.score_connection(nodes[0], nodes[1]) == 20
    assert builder.score_connection(nodes[0], nodes[2]) == 30
    assert builder.score_connection(nodes[0], nodes[3]) == 20
    assert builder.score_connection(nodes[0], nodes[4]) == 30

    connections = builder.derive_connections(nodes)
    assert [c.target for c in connections] == ["db", "storage"]


def test_scoring_weights_are_tunable():
    """Test that scoring weights come from the options."""
    nodes = [
        _node("app", "azurerm_app_service", "Presentation", connections=["db", "plan"]),
        _node("plan", "azurerm_app_service_plan", "Presentation"),
        _node("db", "azurerm_sql_database", "Data"),
    ]
    options = LayoutOptions(max_connections_per_resource=1, scoring={"criticalPair": 100})

    connections = ConnectionBuilder(options).derive_connections(nodes)

    assert [c.target for c in connections] == ["plan"]


def test_unusable_targets_are_dropped():
    """Test missing, self, duplicate and container targets."""
    container = DiagramNode(
        "zone_container_Edge", ZONE_CONTAINER, "Edge", 0, 0, 500, 500, "General", "Edge", 0,
        is_group_container=True, children=["a"], connections=["a"],
    )
    nodes = [
        container,
        _node("a", "azurerm_subnet", "Edge", connections=["missing", "a", "zone_container_Edge", "b", "b"]),
        _node("b", "azurerm_virtual_network", "Edge"),
    ]

    connections = ConnectionBuilder(LayoutOptions(max_connections_per_resource=None)).derive_connections(nodes)

    assert [(c.source, c.target) for c in connections] == [("a", "b")]


def test_filtering_happens_before_the_cap():
    """Test that dropped targets do not use up the fan-out budget."""
    nodes = [
        _node("a", "azurerm_subnet", "Edge", connections=["missing", "a", "b"]),
        _node("b", "azurerm_virtual_network", "Edge"),
    ]

    connections = ConnectionBuilder(LayoutOptions(max_connections_per_resource=1)).derive_connections(nodes)

    assert [c.target for c in connections] == ["b"]


def test_zero_cap_means_no_connections():
    """Test a fan-out cap of zero."""
    nodes = [
        _node("a", "azurerm_subnet", "Edge", connections=["b"]),
        _node("b", "azurerm_virtual_network", "Edge"),
    ]

    assert ConnectionBuilder(LayoutOptions(max_connections_per_resource=0)).derive_connections(nodes) == []


def test_connection_to_dict():
    """Test JSON-ready serialization of a connection."""
    nodes = [
        _node("a", "azurerm_subnet", "Edge", connections=["b"]),
        _node("b", "azurerm_virtual_network", "Data", y=100),
    ]

    data = ConnectionBuilder().derive_connections(nodes)[0].to_dict()

    assert data["type"] == "control"
    assert data["style"] == "solid"
    assert data["arrow"] == "forward"
    assert data["rotation"] == pytest.approx(0)
    assert data["weight"] == 1
