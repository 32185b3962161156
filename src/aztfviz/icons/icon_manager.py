"""Azure resource classification and icon lookup."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from ..core.models import ResourceCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceInfo:
    """Classifier answer for a Terraform resource type."""

    display_name: str
    category: ResourceCategory
    icon_file_name: str
    icon: str


C = ResourceCategory

UNKNOWN_RESOURCE = ResourceInfo("Unknown Resource", C.GENERAL, "10007-icon-service-Resource-Groups.svg", "resource")


class IconManager:
    """Maps azurerm resource types to a category, display name and icon."""

    def __init__(self, icon_directory: Optional[Union[str, Path]] = None):
        """Initialize icon manager.

        Args:
            icon_directory: Path to directory containing Azure service icons.
                          If None, uses package icons directory.
        """
        if icon_directory:
            self.icon_directory = Path(icon_directory)
        else:
            self.icon_directory = Path(__file__).parent / "azure_icons"

        self.resource_mappings: Dict[str, ResourceInfo] = {
            # Compute
            "azurerm_virtual_machine": ResourceInfo("Virtual Machine", C.COMPUTE, "10021-icon-service-Virtual-Machine.svg", "virtual-machine"),
            "azurerm_linux_virtual_machine": ResourceInfo("Linux Virtual Machine", C.COMPUTE, "10021-icon-service-Virtual-Machine.svg", "linux-vm"),
            "azurerm_windows_virtual_machine": ResourceInfo("Windows Virtual Machine", C.COMPUTE, "10021-icon-service-Virtual-Machine.svg", "windows-vm"),
            "azurerm_virtual_machine_scale_set": ResourceInfo("Virtual Machine Scale Set", C.COMPUTE, "10034-icon-service-VM-Scale-Sets.svg", "vm-scale-set"),
            "azurerm_app_service": ResourceInfo("App Service", C.COMPUTE, "10035-icon-service-App-Services.svg", "app-service"),
            "azurerm_app_service_plan": ResourceInfo("App Service Plan", C.COMPUTE, "00046-icon-service-App-Service-Plans.svg", "app-service-plan"),
            "azurerm_function_app": ResourceInfo("Function App", C.COMPUTE, "10029-icon-service-Function-Apps.svg", "function-app"),
            "azurerm_static_site": ResourceInfo("Static Web App", C.COMPUTE, "01007-icon-service-Static-Apps.svg", "static-web-app"),
            # Networking
            "azurerm_virtual_network": ResourceInfo("Virtual Network", C.NETWORKING, "10061-icon-service-Virtual-Networks.svg", "virtual-network"),
            "azurerm_subnet": ResourceInfo("Subnet", C.NETWORKING, "02742-icon-service-Subnet.svg", "subnet"),
            "azurerm_network_interface": ResourceInfo("Network Interface", C.NETWORKING, "10080-icon-service-Network-Interfaces.svg", "network-interface"),
            "azurerm_public_ip": ResourceInfo("Public IP Address", C.NETWORKING, "10069-icon-service-Public-IP-Addresses.svg", "public-ip"),
            "azurerm_network_security_group": ResourceInfo("Network Security Group", C.NETWORKING, "10067-icon-service-Network-Security-Groups.svg", "nsg"),
            "azurerm_application_gateway": ResourceInfo("Application Gateway", C.NETWORKING, "10076-icon-service-Application-Gateways.svg", "application-gateway"),
            "azurerm_frontdoor": ResourceInfo("Front Door", C.NETWORKING, "10073-icon-service-Front-Door-and-CDN-Profiles.svg", "front-door"),
            "azurerm_firewall": ResourceInfo("Firewall", C.NETWORKING, "10084-icon-service-Firewalls.svg", "firewall"),
            "azurerm_route_table": ResourceInfo("Route Table", C.NETWORKING, "10082-icon-service-Route-Tables.svg", "route-table"),
            "azurerm_local_network_gateway": ResourceInfo("Local Network Gateway", C.NETWORKING, "10077-icon-service-Local-Network-Gateways.svg", "local-network-gateway"),
            "azurerm_virtual_network_gateway": ResourceInfo("Virtual Network Gateway", C.NETWORKING, "10063-icon-service-Virtual-Network-Gateways.svg", "vpn-gateway"),
            "azurerm_nat_gateway": ResourceInfo("NAT Gateway", C.NETWORKING, "10310-icon-service-NAT.svg", "nat-gateway"),
            "azurerm_bastion_host": ResourceInfo("Bastion Host", C.NETWORKING, "02422-icon-service-Bastions.svg", "bastion"),
            # Storage
            "azurerm_storage_account": ResourceInfo("Storage Account", C.STORAGE, "10086-icon-service-Storage-Accounts.svg", "storage-account"),
            "azurerm_storage_container": ResourceInfo("Blob Container", C.STORAGE, "10839-icon-service-Storage-Container.svg", "blob-storage"),
            "azurerm_storage_share": ResourceInfo("File Share", C.STORAGE, "10400-icon-service-Azure-Fileshares.svg", "file-share"),
            "azurerm_storage_queue": ResourceInfo("Queue Storage", C.STORAGE, "10840-icon-service-Storage-Queue.svg", "queue-storage"),
            "azurerm_storage_table": ResourceInfo("Table Storage", C.STORAGE, "10041-icon-service-Table-Storage.svg", "table-storage"),
            # Databases
            "azurerm_sql_server": ResourceInfo("SQL Server", C.DATABASES, "10132-icon-service-SQL-Server.svg", "sql-server"),
            "azurerm_sql_database": ResourceInfo("SQL Database", C.DATABASES, "10130-icon-service-SQL-Database.svg", "sql-database"),
            "azurerm_cosmosdb_account": ResourceInfo("Azure Cosmos DB", C.DATABASES, "10121-icon-service-Azure-Cosmos-DB.svg", "cosmos-db"),
            "azurerm_mysql_server": ResourceInfo("MySQL Server", C.DATABASES, "10122-icon-service-Azure-Database-MySQL-Server.svg", "mysql"),
            "azurerm_postgresql_server": ResourceInfo("PostgreSQL Server", C.DATABASES, "10131-icon-service-Azure-Database-PostgreSQL-Server.svg", "postgresql"),
            "azurerm_redis_cache": ResourceInfo("Redis Cache", C.DATABASES, "10137-icon-service-Cache-Redis.svg", "redis-cache"),
            # Security
            "azurerm_key_vault": ResourceInfo("Key Vault", C.SECURITY, "10245-icon-service-Key-Vaults.svg", "key-vault"),
            "azurerm_security_center_subscription_pricing": ResourceInfo("Security Center", C.SECURITY, "10241-icon-service-Microsoft-Defender-for-Cloud.svg", "security-center"),
            # Monitoring + Management
            "azurerm_monitor_action_group": ResourceInfo("Action Group", C.MONITORING, "00002-icon-service-Alerts.svg", "action-group"),
            "azurerm_log_analytics_workspace": ResourceInfo("Log Analytics Workspace", C.MONITORING, "00009-icon-service-Log-Analytics-Workspaces.svg", "log-analytics"),
            "azurerm_application_insights": ResourceInfo("Application Insights", C.MONITORING, "00012-icon-service-Application-Insights.svg", "application-insights"),
            "azurerm_automation_account": ResourceInfo("Automation Account", C.MONITORING, "00022-icon-service-Automation-Accounts.svg", "automation"),
            # Containers
            "azurerm_kubernetes_cluster": ResourceInfo("Azure Kubernetes Service", C.CONTAINERS, "10023-icon-service-Kubernetes-Services.svg", "aks"),
            "azurerm_container_registry": ResourceInfo("Container Registry", C.CONTAINERS, "10105-icon-service-Container-Registries.svg", "container-registry"),
            "azurerm_container_group": ResourceInfo("Container Instance", C.CONTAINERS, "10104-icon-service-Container-Instances.svg", "container-instance"),
            # Web
            "azurerm_cdn_endpoint": ResourceInfo("CDN Endpoint", C.WEB, "00056-icon-service-CDN-Profiles.svg", "cdn"),
            "azurerm_cdn_profile": ResourceInfo("CDN Profile", C.WEB, "00056-icon-service-CDN-Profiles.svg", "cdn-profile"),
            # Identity
            "azurerm_user_assigned_identity": ResourceInfo("Managed Identity", C.IDENTITY, "10227-icon-service-Entra-Managed-Identities.svg", "managed-identity"),
            # Analytics
            "azurerm_stream_analytics_job": ResourceInfo("Stream Analytics Job", C.ANALYTICS, "00042-icon-service-Stream-Analytics-Jobs.svg", "stream-analytics"),
            "azurerm_event_hubs_namespace": ResourceInfo("Event Hubs Namespace", C.ANALYTICS, "00039-icon-service-Event-Hubs.svg", "event-hubs"),
            # AI + Machine Learning
            "azurerm_cognitive_account": ResourceInfo("Cognitive Services", C.AI_ML, "10162-icon-service-Cognitive-Services.svg", "cognitive-services"),
            "azurerm_machine_learning_workspace": ResourceInfo("Machine Learning Workspace", C.AI_ML, "10166-icon-service-Machine-Learning.svg", "machine-learning"),
            # Integration
            "azurerm_servicebus_namespace": ResourceInfo("Service Bus Namespace", C.INTEGRATION, "10836-icon-service-Azure-Service-Bus.svg", "service-bus"),
            "azurerm_eventgrid_topic": ResourceInfo("Event Grid Topic", C.INTEGRATION, "10206-icon-service-Event-Grid-Topics.svg", "event-grid"),
            "azurerm_eventgrid_domain": ResourceInfo("Event Grid Domain", C.INTEGRATION, "10215-icon-service-Event-Grid-Domains.svg", "event-grid-domain"),
            # DevOps
            "azurerm_dev_test_lab": ResourceInfo("DevTest Labs", C.DEVOPS, "10264-icon-service-DevTest-Labs.svg", "dev-test-lab"),
            # General
            "azurerm_resource_group": ResourceInfo("Resource Group", C.GENERAL, "10007-icon-service-Resource-Groups.svg", "resource-group"),
        }

        logger.debug(
            f"IconManager initialized with {len(self.resource_mappings)} resource mappings",
        )

    def get_resource_info(self, resource_type: str) -> ResourceInfo:
        """Classify a resource type.

        Args:
            resource_type: Terraform resource type (e.g., 'azurerm_key_vault').

        Returns:
            Resource info; unknown types get the General fallback.
        """
        info = self.resource_mappings.get(resource_type.lower())
        if info is None:
            logger.debug(f"No mapping found for resource type: {resource_type}")
            return UNKNOWN_RESOURCE
        return info

    def get_icon_path(self, resource_type: str) -> Optional[Path]:
        """Get icon file path for a resource type.

        Returns:
            Path to icon file, or None if it is not on disk.
        """
        icon_path = self.icon_directory / self.get_resource_info(resource_type).icon_file_name
        if icon_path.exists():
            return icon_path
        logger.debug(f"Icon file not found: {icon_path}")
        return None

    def get_available_icons(self) -> Dict[str, str]:
        """Get all resource type to icon key mappings."""
        return {resource_type: info.icon for resource_type, info in self.resource_mappings.items()}

    def add_custom_mapping(
        self,
        resource_type: str,
        display_name: str,
        category: ResourceCategory,
        icon: str,
        icon_file_name: str = UNKNOWN_RESOURCE.icon_file_name,
    ) -> None:
        """Add or override the classification of a resource type."""
        self.resource_mappings[resource_type.lower()] = ResourceInfo(
            display_name, ResourceCategory(category), icon_file_name, icon
        )
        logger.info(f"Added custom mapping: {resource_type} -> {category} ({icon})")

