"""Tests for zone and layer classification."""

from aztfviz.core.models import Layer, ResourceCategory, Zone
from aztfviz.core.zones import (
    ZoneClassifier,
    get_category_color,
    get_zone_color,
    layer_of,
    zone_order,
)
from aztfviz.icons.icon_manager import IconManager


def test_fixed_zone_table():
    """Test types listed in the zone table."""
    classifier = ZoneClassifier()

    assert classifier.classify("azurerm_application_gateway") == Zone.EDGE
    assert classifier.classify("azurerm_firewall") == Zone.DMZ
    assert classifier.classify("azurerm_app_service") == Zone.PRESENTATION
    assert classifier.classify("azurerm_kubernetes_cluster") == Zone.APPLICATION
    assert classifier.classify("azurerm_storage_account") == Zone.DATA
    assert classifier.classify("azurerm_log_analytics_workspace") == Zone.MANAGEMENT
    assert classifier.classify("azurerm_key_vault") == Zone.IDENTITY


def test_category_fallback():
    """Test zones derived from the resource category."""
    classifier = ZoneClassifier()

    # Compute
    assert classifier.classify("azurerm_linux_virtual_machine") == Zone.APPLICATION
    # Networking
    assert classifier.classify("azurerm_virtual_network") == Zone.EDGE
    assert classifier.classify("azurerm_subnet") == Zone.EDGE
    # Storage / Databases
    assert classifier.classify("azurerm_storage_container") == Zone.DATA
    assert classifier.classify("azurerm_sql_server") == Zone.DATA
    # Security
    assert classifier.classify("azurerm_security_center_subscription_pricing") == Zone.SECURITY
    # General and unmapped
    assert classifier.classify("azurerm_resource_group") == Zone.UNKNOWN
    assert classifier.classify("azurerm_brand_new_service") == Zone.UNKNOWN


def test_category_fallback_uses_custom_mappings():
    """Test that the classifier follows the icon manager it was given."""
    icon_manager = IconManager()
    icon_manager.add_custom_mapping("azurerm_edge_firewall_policy", "Policy", ResourceCategory.NETWORKING, "policy")
    icon_manager.add_custom_mapping("azurerm_key_vault_key", "Key", ResourceCategory.SECURITY, "key")

    classifier = ZoneClassifier(icon_manager)

    assert classifier.classify("azurerm_edge_firewall_policy") == Zone.DMZ
    assert classifier.classify("azurerm_key_vault_key") == Zone.IDENTITY


def test_layer_of():
    """Test zone to layer collapse."""
    assert layer_of(Zone.INTERNET) == Layer.CLIENT
    assert layer_of(Zone.EDGE) == Layer.DELIVERY
    assert layer_of(Zone.DMZ) == Layer.DELIVERY
    assert layer_of(Zone.SECURITY) == Layer.SECURITY
    assert layer_of(Zone.PRESENTATION) == Layer.PRESENTATION
    assert layer_of(Zone.APPLICATION) == Layer.APPLICATION
    assert layer_of(Zone.DATA) == Layer.DATA
    assert layer_of(Zone.IDENTITY) == Layer.MANAGEMENT
    assert layer_of(Zone.UNKNOWN) == Layer.MANAGEMENT
    assert layer_of("not-a-zone") == Layer.MANAGEMENT
    assert ZoneClassifier().layer("azurerm_sql_database") == Layer.DATA


def test_zone_order():
    """Test spatial ordering, with Internet first and unknown zones last."""
    assert zone_order(Zone.INTERNET) == 0
    assert zone_order(Zone.EDGE) < zone_order(Zone.DMZ) < zone_order(Zone.APPLICATION) < zone_order(Zone.DATA)
    assert zone_order("Data") == zone_order(Zone.DATA)
    assert zone_order(Zone.UNKNOWN) == 999
    assert zone_order("Somewhere") == 999


def test_colors():
    """Test color lookups and their fallbacks."""
    assert get_zone_color(Zone.DMZ) == "#EDEBE9"
    assert get_zone_color("Nowhere") == "#E1E1E1"
    assert get_category_color(ResourceCategory.NETWORKING) == "#107C10"
    assert get_category_color("Databases") == "#E3008C"
    assert get_category_color("Quantum") == "#666666"
