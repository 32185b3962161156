"""Main AzTfViz class for generating Terraform/Azure diagram layouts."""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ..icons import IconManager
from ..visualization import ConnectionBuilder, GraphBuilder, LayoutEngine, NodeStyler
from .models import (
    Diagram,
    FlowDirection,
    GroupBy,
    LayoutMode,
    LayoutOptions,
    ResourceCategory,
    TerraformResource,
    Theme,
    Zone,
)
from .zones import get_category_color, get_zone_color

logger = logging.getLogger(__name__)

MICROSERVICE_KEYWORDS = ("app_service", "function_app", "container")
NETWORK_SECURITY_KEYWORDS = ("firewall", "application_gateway", "network_security_group")

ResourceInput = Union[TerraformResource, Dict[str, Any]]
OptionsInput = Union[LayoutOptions, Dict[str, Any], None]


class AzTfViz:
    """Main class for Terraform/Azure diagram layout."""

    def __init__(self, icon_directory: Optional[Union[str, Path]] = None):
        """Initialize AzTfViz instance.

        Args:
            icon_directory: Path to Azure service icons. If None, uses package icons.
        """
        self.icon_manager = IconManager(icon_directory)
        logger.debug("AzTfViz initialized")

    def generate(
        self,
        resources: Iterable[ResourceInput],
        options: OptionsInput = None,
        dependencies: Optional[Dict[str, List[str]]] = None,
    ) -> Diagram:
        """Lay out resources and derive their connections.

        Args:
            resources: Resources as ``TerraformResource`` objects or extractor dicts.
            options: Layout options, or a dict of them (camelCase keys accepted).
            dependencies: Pre-computed dependency mapping. Extracted when omitted.

        Returns:
            Diagram with positioned nodes and connections.
        """
        config = self.resolve_options(options)
        all_resources = self.load_resources(resources)

        graph_builder = GraphBuilder(config, self.icon_manager)
        filtered = graph_builder.filter_resources(all_resources)

        if dependencies is None:
            dependencies = graph_builder.extract_dependencies(filtered)
        else:
            dependencies = {source: list(targets) for source, targets in dependencies.items()}

        logger.info(
            f"Generating {config.layout.value} diagram for {len(filtered)} resources (group by {config.group_by.value})",
        )

        nodes = LayoutEngine(config, self.icon_manager).layout(filtered, dependencies)

        styler = NodeStyler(config)
        styler.apply_styling(nodes)
        styler.ensure_within_bounds(nodes)

        connections = ConnectionBuilder(config).derive_connections(nodes)

        return Diagram(nodes=nodes, connections=connections, dependencies=dependencies)

    def extract_dependencies(
        self,
        resources: Iterable[ResourceInput],
        options: OptionsInput = None,
    ) -> Dict[str, List[str]]:
        """Pruned dependency mapping for resources, without layout."""
        config = self.resolve_options(options)
        return GraphBuilder(config, self.icon_manager).extract_dependencies(self.load_resources(resources))

    @staticmethod
    def resolve_options(options: OptionsInput) -> LayoutOptions:
        """Turn caller options into a validated ``LayoutOptions``.

        Raises:
            ValueError: If options are neither ``LayoutOptions``, a dict nor None,
                or fail validation.
        """
        if options is None:
            return LayoutOptions()
        if isinstance(options, LayoutOptions):
            return options
        if isinstance(options, dict):
            return LayoutOptions.model_validate(options)
        raise ValueError(f"Unsupported options type: {type(options).__name__}")

    @staticmethod
    def load_resources(resources: Iterable[ResourceInput]) -> List[TerraformResource]:
        loaded = []
        for resource in resources:
            if isinstance(resource, TerraformResource):
                loaded.append(resource)
            elif isinstance(resource, dict):
                loaded.append(TerraformResource.from_dict(resource))
            else:
                raise ValueError(f"Unsupported resource type: {type(resource).__name__}")
        return loaded

    @staticmethod
    def get_recommended_layout(resource_count: int, resource_types: Iterable[str]) -> LayoutOptions:
        """Suggest layout options for a resource set.

        Args:
            resource_count: Number of resources.
            resource_types: Terraform types present.

        Returns:
            Options for microservices, zones, compact flow or layered layout.
        """
        types = list(resource_types)
        has_microservices = any(
            keyword in resource_type for resource_type in types for keyword in MICROSERVICE_KEYWORDS
        )
        has_network_security = any(
            keyword in resource_type for resource_type in types for keyword in NETWORK_SECURITY_KEYWORDS
        )

        if has_microservices and resource_count <= 20:
            return LayoutOptions(
                layout=LayoutMode.MICROSERVICES,
                flow_direction=FlowDirection.LEFT_RIGHT,
                show_zones=False,
                group_by=GroupBy.NONE,
            )
        if has_network_security or resource_count > 15:
            return LayoutOptions(
                layout=LayoutMode.ZONES,
                flow_direction=FlowDirection.LEFT_RIGHT,
                group_by=GroupBy.ZONE,
            )
        if resource_count <= 10:
            return LayoutOptions(
                layout=LayoutMode.FLOW,
                flow_direction=FlowDirection.LEFT_RIGHT,
                compact_mode=True,
                group_by=GroupBy.ZONE,
            )
        return LayoutOptions(
            layout=LayoutMode.LAYERED,
            flow_direction=FlowDirection.TOP_BOTTOM,
            group_by=GroupBy.LAYER,
        )

    @staticmethod
    def get_category_color(category: Union[ResourceCategory, str]) -> str:
        return get_category_color(category)

    @staticmethod
    def get_zone_color(zone: Union[Zone, str]) -> str:
        return get_zone_color(zone)

    def get_supported_themes(self) -> List[str]:
        """Get list of supported visual themes.

        Returns:
            List of theme names.
        """
        return [theme.value for theme in Theme]

    def get_supported_layouts(self) -> List[str]:
        """Get list of supported layout strategies.

        Returns:
            List of layout names.
        """
        return [layout.value for layout in LayoutMode]

    def get_icon_mappings(self) -> Dict[str, str]:
        """Get Azure resource icon mappings.

        Returns:
            Dictionary mapping resource types to icon keys.
        """
        return self.icon_manager.get_available_icons()
