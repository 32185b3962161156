"""Zone and layer classification of Terraform resource types."""

import logging
from typing import Dict, NamedTuple, Optional, Union

from ..icons.icon_manager import IconManager
from .models import Layer, ResourceCategory, Zone

logger = logging.getLogger(__name__)


class ZoneStyle(NamedTuple):
    color: str
    order: int


ZONE_STYLES: Dict[Zone, ZoneStyle] = {
    Zone.INTERNET: ZoneStyle("#E1E1E1", 0),
    Zone.EDGE: ZoneStyle("#F3F2F1", 1),
    Zone.DMZ: ZoneStyle("#EDEBE9", 2),
    Zone.PRESENTATION: ZoneStyle("#F3F2F1", 3),
    Zone.APPLICATION: ZoneStyle("#E1E1E1", 4),
    Zone.DATA: ZoneStyle("#F3F2F1", 5),
    Zone.MANAGEMENT: ZoneStyle("#EDEBE9", 6),
    Zone.IDENTITY: ZoneStyle("#F3F2F1", 7),
    Zone.SECURITY: ZoneStyle("#EDEBE9", 8),
    Zone.OTHER: ZoneStyle("#F3F2F1", 998),
}

DEFAULT_ZONE_COLOR = "#E1E1E1"
UNORDERED_ZONE = 999

# Microsoft Azure standard colors by category
CATEGORY_COLORS: Dict[ResourceCategory, str] = {
    ResourceCategory.COMPUTE: "#0078D4",
    ResourceCategory.NETWORKING: "#107C10",
    ResourceCategory.STORAGE: "#0078D4",
    ResourceCategory.DATABASES: "#E3008C",
    ResourceCategory.SECURITY: "#FF8C00",
    ResourceCategory.MONITORING: "#68217A",
    ResourceCategory.GENERAL: "#666666",
    ResourceCategory.ANALYTICS: "#2D7DB5",
    ResourceCategory.AI_ML: "#7719AA",
    ResourceCategory.INTEGRATION: "#D4450D",
    ResourceCategory.IDENTITY: "#D13438",
    ResourceCategory.WEB: "#107C10",
    ResourceCategory.CONTAINERS: "#0078D4",
    ResourceCategory.DEVOPS: "#68217A",
}

DEFAULT_CATEGORY_COLOR = "#666666"

RESOURCE_ZONES: Dict[str, Zone] = {
    "azurerm_frontdoor": Zone.EDGE,
    "azurerm_cdn_endpoint": Zone.EDGE,
    "azurerm_application_gateway": Zone.EDGE,
    "azurerm_traffic_manager": Zone.EDGE,
    "azurerm_firewall": Zone.DMZ,
    "azurerm_bastion_host": Zone.DMZ,
    "azurerm_nat_gateway": Zone.DMZ,
    "azurerm_app_service": Zone.PRESENTATION,
    "azurerm_app_service_plan": Zone.PRESENTATION,
    "azurerm_static_site": Zone.PRESENTATION,
    "azurerm_function_app": Zone.PRESENTATION,
    "azurerm_virtual_machine": Zone.APPLICATION,
    "azurerm_kubernetes_cluster": Zone.APPLICATION,
    "azurerm_container_group": Zone.APPLICATION,
    "azurerm_container_registry": Zone.APPLICATION,
    "azurerm_sql_database": Zone.DATA,
    "azurerm_cosmosdb_account": Zone.DATA,
    "azurerm_storage_account": Zone.DATA,
    "azurerm_redis_cache": Zone.DATA,
    "azurerm_postgresql_server": Zone.DATA,
    "azurerm_mysql_server": Zone.DATA,
    "azurerm_monitor_action_group": Zone.MANAGEMENT,
    "azurerm_log_analytics_workspace": Zone.MANAGEMENT,
    "azurerm_application_insights": Zone.MANAGEMENT,
    "azurerm_automation_account": Zone.MANAGEMENT,
    "azurerm_key_vault": Zone.IDENTITY,
    "azurerm_user_assigned_identity": Zone.IDENTITY,
}

ZONE_LAYERS: Dict[Zone, Layer] = {
    Zone.INTERNET: Layer.CLIENT,
    Zone.EDGE: Layer.DELIVERY,
    Zone.DMZ: Layer.DELIVERY,
    Zone.SECURITY: Layer.SECURITY,
    Zone.PRESENTATION: Layer.PRESENTATION,
    Zone.APPLICATION: Layer.APPLICATION,
    Zone.DATA: Layer.DATA,
    Zone.IDENTITY: Layer.MANAGEMENT,
    Zone.MANAGEMENT: Layer.MANAGEMENT,
}


def _as_zone(zone: Union[Zone, str]) -> Optional[Zone]:
    try:
        return Zone(zone)
    except ValueError:
        return None


def layer_of(zone: Union[Zone, str]) -> Layer:
    """Collapse a zone into one of the seven ordered layers."""
    return ZONE_LAYERS.get(_as_zone(zone), Layer.MANAGEMENT)


def zone_order(zone: Union[Zone, str]) -> int:
    """Spatial ordering index of a zone; unknown zones sort last."""
    style = ZONE_STYLES.get(_as_zone(zone))
    return style.order if style else UNORDERED_ZONE


def get_zone_color(zone: Union[Zone, str]) -> str:
    """Display color of a zone, gray for anything unrecognised."""
    style = ZONE_STYLES.get(_as_zone(zone))
    return style.color if style else DEFAULT_ZONE_COLOR


def get_category_color(category: Union[ResourceCategory, str]) -> str:
    """Display color of a resource category, gray for anything unrecognised."""
    try:
        return CATEGORY_COLORS.get(ResourceCategory(category), DEFAULT_CATEGORY_COLOR)
    except ValueError:
        return DEFAULT_CATEGORY_COLOR


class ZoneClassifier:
    """Assigns resource types to security/network zones."""

    def __init__(self, icon_manager: Optional[IconManager] = None):
        self.icon_manager = icon_manager or IconManager()

    def classify(self, resource_type: str) -> Zone:
        """Zone of a resource type: fixed table first, then category rules."""
        predefined = RESOURCE_ZONES.get(resource_type)
        if predefined is not None:
            return predefined

        category = self.icon_manager.get_resource_info(resource_type).category
        if category == ResourceCategory.COMPUTE:
            return Zone.APPLICATION
        if category == ResourceCategory.NETWORKING:
            return Zone.DMZ if "firewall" in resource_type else Zone.EDGE
        if category in (ResourceCategory.STORAGE, ResourceCategory.DATABASES):
            return Zone.DATA
        if category == ResourceCategory.SECURITY:
            return Zone.IDENTITY if "key_vault" in resource_type else Zone.SECURITY
        if category == ResourceCategory.MONITORING:
            return Zone.MANAGEMENT
        return Zone.UNKNOWN

    def layer(self, resource_type: str) -> Layer:
        return layer_of(self.classify(resource_type))
