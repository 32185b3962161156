"""Tests for node styling and canvas normalization."""

import pytest

from aztfviz.core.models import ZONE_CONTAINER, ZONE_TITLE, DiagramNode, LayoutOptions
from aztfviz.visualization.styling import NodeStyler, darken_color, get_display_name


def _leaf(node_id, x=0.0, y=0.0, width=10.0, height=10.0, color="#107C10", name="web"):
    return DiagramNode(node_id, "azurerm_subnet", name, x, y, width, height, "Networking", "Edge", 1, color=color)


def _container(node_id="zone_container_Edge", color="#F3F2F1"):
    return DiagramNode(
        node_id, ZONE_CONTAINER, "Edge", 0, 0, 500, 300, "General", "Edge", 0,
        is_group_container=True, children=[], color=color, display_name="Edge",
    )


def test_display_name_cleanup():
    """Test prefix stripping, separators and environment tokens."""
    assert get_display_name("azurerm_linux_virtual_machine", "web_server_prod") == "Web Server"
    assert get_display_name("azurerm_virtual_network", "azurerm_main_vnet") == "Main Vnet"
    assert get_display_name("azurerm_api_management", "api-gateway-dev") == "Api Gateway"
    assert get_display_name("azurerm_subnet", "STAGING_backend") == "Backend"


def test_display_name_keeps_inner_case():
    """Test that words are capitalised without lowercasing the rest."""
    assert get_display_name("azurerm_dev_test_lab", "DevOps_tools") == "DevOps Tools"


def test_display_name_truncation():
    """Test the 20 character budget."""
    assert get_display_name("azurerm_subnet", "abcdefghij_klmnopqrs") == "Abcdefghij Klmnopqrs"
    assert get_display_name("azurerm_subnet", "very_long_resource_name_here") == "Very Long Resourc..."


def test_display_name_fallback():
    """Test falling back to the type when nothing is left of the name."""
    assert get_display_name("azurerm_linux_virtual_machine", "prod") == "linux_virtual_machine"


def test_darken_color():
    """Test channel darkening with clamping."""
    assert darken_color("#FFFFFF") == "#cccccc"
    assert darken_color("#107C10") == "#004900"
    assert darken_color("red") == "red"


def test_apply_styling_sizes_leaves_only():
    """Test that leaves get the configured size and a display name."""
    leaf = _leaf("azurerm_subnet_app", name="app_subnet")
    container = _container()
    title = DiagramNode("zone_title_Edge", ZONE_TITLE, "Edge", 0, 0, 200, 30, "General", "Edge", 0)

    NodeStyler(LayoutOptions(compact_mode=True)).apply_styling([leaf, container, title])

    assert (leaf.width, leaf.height) == (140, 52)
    assert leaf.display_name == "App Subnet"
    assert (container.width, container.height) == (500, 300)
    assert (title.width, title.height) == (200, 30)


def test_apply_styling_keeps_existing_display_name():
    """Test that an explicit display name is left alone."""
    leaf = _leaf("azurerm_subnet_app")
    leaf.display_name = "Frontend"

    NodeStyler().apply_styling([leaf])

    assert leaf.display_name == "Frontend"
    assert (leaf.width, leaf.height) == (180, 64)


def test_apply_styling_follows_normalization_scale():
    """Test that a scaled leaf keeps its scaled size."""
    leaf = _leaf("azurerm_subnet_app")
    leaf.scale = 0.5

    NodeStyler().apply_styling([leaf])

    assert (leaf.width, leaf.height) == (90, 32)


def test_dark_theme():
    """Test that every node color is darkened."""
    leaf = _leaf("azurerm_subnet_app", color="#FFFFFF")
    container = _container(color="#F3F2F1")

    NodeStyler(LayoutOptions(theme="dark")).apply_styling([leaf, container])

    assert leaf.color == "#cccccc"
    assert container.color == "#c0bfbe"


def test_blueprint_theme():
    """Test that only containers are recolored."""
    leaf = _leaf("azurerm_subnet_app", color="#107C10")
    container = _container()

    NodeStyler(LayoutOptions(theme="blueprint")).apply_styling([leaf, container])

    assert leaf.color == "#107C10"
    assert container.color == "#E6F2FF"


def test_ensure_within_bounds_scales_large_content():
    """Test 2000x2000 content fitted into a 100x100 canvas without padding."""
    first = _leaf("a", x=0, y=0, width=1000, height=1000)
    second = _leaf("b", x=1000, y=1000, width=1000, height=1000)

    NodeStyler(LayoutOptions(width=100, height=100, padding=0)).ensure_within_bounds([first, second])

    assert (first.x, first.y, first.width, first.height) == pytest.approx((0, 0, 50, 50))
    assert (second.x, second.y, second.width, second.height) == pytest.approx((50, 50, 50, 50))
    assert first.scale == pytest.approx(0.05)
    assert second.scale == pytest.approx(0.05)


def test_ensure_within_bounds_centres_content():
    """Test centring along the axis with spare room."""
    node = _leaf("a", x=-500, y=300, width=2000, height=1000)

    NodeStyler(LayoutOptions(width=100, height=100, padding=0)).ensure_within_bounds([node])

    assert (node.x, node.y, node.width, node.height) == pytest.approx((0, 25, 100, 50))


def test_ensure_within_bounds_never_scales_up():
    """Test that small content is only translated."""
    node = _leaf("a", x=5000, y=-40, width=200, height=100)

    NodeStyler(LayoutOptions(width=1000, height=600, padding=100)).ensure_within_bounds([node])

    assert (node.x, node.y, node.width, node.height) == pytest.approx((400, 250, 200, 100))
    assert node.scale == 1.0


def test_ensure_within_bounds_empty():
    """Test that an empty list is a no-op."""
    assert NodeStyler().ensure_within_bounds([]) == []
