"""Spatial layout strategies that place resources on the canvas."""

import logging
import math
import re
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from ..core.models import (
    LAYER_CONTAINER,
    RESOURCE_GROUP_CONTAINER,
    RESOURCE_GROUP_TYPE,
    ZONE_CONTAINER,
    ZONE_TITLE,
    DiagramNode,
    GroupBy,
    Layer,
    LayoutMode,
    LayoutOptions,
    ResourceCategory,
    TerraformResource,
    TypePriority,
    Zone,
)
from ..core.zones import ZoneClassifier, get_category_color, get_zone_color, layer_of, zone_order
from ..icons.icon_manager import IconManager

logger = logging.getLogger(__name__)

# parentheses keep the sentinel apart from any Terraform resource name
DEFAULT_RESOURCE_GROUP = "(default)"
RESOURCE_GROUP_REFERENCE = re.compile(r"azurerm_resource_group\.([^.\s}]+)")

PRIMARY_ZONES = [Zone.INTERNET, Zone.EDGE, Zone.DMZ, Zone.PRESENTATION, Zone.APPLICATION, Zone.DATA]
COMPUTE_KEYWORDS = ("app_service", "function_app", "container", "kubernetes")

OTHER_CONTAINER_ID = "zone_container_other"
OTHER_CONTAINER_NAME = "Other Services"
LAYER_COLOR = "#F3F2F1"
RESOURCE_GROUP_COLOR = "#E6F2FF"
TITLE_COLOR = "#000000"

# Microservices rings
SHARED_RING_OFFSET = 250
RING_GAP = 20


def resolve_group_reference(value: str) -> str:
    """Bare name behind a literal or symbolic resource group reference.

    ``azurerm_resource_group.main.name``, ``var.main`` and ``local.main`` all
    resolve to ``main``; literals are returned stripped.
    """
    value = value.strip()
    if value.startswith("${") and value.endswith("}"):
        value = value[2:-1].strip()
    match = RESOURCE_GROUP_REFERENCE.search(value)
    if match:
        return match.group(1)
    if value.startswith("var."):
        return value[len("var."):]
    if value.startswith("local."):
        return value[len("local."):]
    return value


def extract_resource_group_name(resource: TerraformResource) -> str:
    """Name of the resource group a resource belongs to.

    A resource group buckets under its own name and anything without a
    ``resource_group_name`` attribute falls into the ``(default)`` bucket.
    """
    value = (resource.attributes or {}).get("resource_group_name")
    if isinstance(value, str) and value.strip():
        return resolve_group_reference(value)

    if resource.type == RESOURCE_GROUP_TYPE:
        return resource.name

    return DEFAULT_RESOURCE_GROUP


def check_containment(nodes: List[DiagramNode]) -> List[str]:
    """Return every violation of the parent_group/children pairing."""
    problems: List[str] = []
    nodes_by_id = {node.id: node for node in nodes}

    for node in nodes:
        if node.parent_group is not None:
            parent = nodes_by_id.get(node.parent_group)
            if parent is None or not parent.is_group_container:
                problems.append(f"{node.id}: parent group {node.parent_group} is not a container")
            elif node.id not in (parent.children or []):
                problems.append(f"{node.id}: missing from children of {parent.id}")
        for child_id in node.children or []:
            child = nodes_by_id.get(child_id)
            if child is None or child.parent_group != node.id:
                problems.append(f"{node.id}: child {child_id} does not point back")

    return problems


class LayoutEngine:
    """Places resources and group containers according to the options."""

    def __init__(self, options: Optional[LayoutOptions] = None, icon_manager: Optional[IconManager] = None):
        """Initialize layout engine.

        Args:
            options: Layout options; defaults are used when omitted.
            icon_manager: Resource classifier; a fresh one is created when omitted.
        """
        self.options = options or LayoutOptions()
        self.icon_manager = icon_manager or IconManager()
        self.zone_classifier = ZoneClassifier(self.icon_manager)
        self.nodes: List[DiagramNode] = []
        self._nodes_by_id: Dict[str, DiagramNode] = {}
        self._dependencies: Dict[str, List[str]] = {}

    def layout(
        self,
        resources: List[TerraformResource],
        dependencies: Dict[str, List[str]],
    ) -> List[DiagramNode]:
        """Run the configured strategy.

        Args:
            resources: Filtered resources to place.
            dependencies: Resource id to retained dependency targets.

        Returns:
            Positioned leaf nodes plus group containers and titles.
        """
        self.nodes = []
        self._nodes_by_id = {}
        self._dependencies = dependencies or {}

        if not resources:
            return []

        if self.options.group_by == GroupBy.RESOURCE_GROUP:
            strategy = "resource-group"
            self._create_resource_group_layout(resources)
        elif self.options.layout == LayoutMode.LAYERED:
            strategy = "layered"
            self._create_layered_layout(resources)
        elif self.options.layout == LayoutMode.ZONES:
            strategy = "zones"
            self._create_zone_based_layout(resources)
        elif self.options.layout == LayoutMode.MICROSERVICES:
            strategy = "microservices"
            self._create_microservices_layout(resources)
        else:
            strategy = "flow"
            self._create_flow_layout(resources)

        for problem in check_containment(self.nodes):
            logger.warning(f"Containment check failed: {problem}")

        logger.info(f"Placed {len(self.nodes)} nodes using the {strategy} layout")
        return list(self.nodes)

    # ====================
    # FLOW
    # ====================

    def _create_flow_layout(self, resources: List[TerraformResource]) -> None:
        bands = self._zone_bands(resources)
        if self.options.flow_direction.is_reversed:
            bands.reverse()

        if self.options.flow_direction.is_horizontal:
            self._flow_horizontal(bands)
        else:
            self._flow_vertical(bands)

    def _zone_bands(self, resources: List[TerraformResource]) -> List[Tuple[Zone, List[TerraformResource]]]:
        """Zones in spatial order, with unclassified resources as a trailing Other band."""
        grouped = self._group_by_zone(resources)
        zones = sorted((zone for zone in grouped if zone != Zone.UNKNOWN), key=zone_order)
        bands = [(zone, grouped[zone]) for zone in zones]
        if grouped.get(Zone.UNKNOWN):
            bands.append((Zone.OTHER, grouped[Zone.UNKNOWN]))
        return bands

    def _flow_horizontal(self, bands: List[Tuple[Zone, List[TerraformResource]]]) -> None:
        """Each zone is a column band holding a square-ish grid."""
        options = self.options
        node_width, node_height = options.node_width, options.node_height
        column_spacing = 15
        row_spacing = 8
        band_margin = 30
        header = 35 if options.show_zones else 15

        equal_share = options.available_width / max(len(bands), 1)
        band_x = options.padding

        for zone, zone_resources in bands:
            columns = max(math.ceil(math.sqrt(len(zone_resources))), 1)
            rows = math.ceil(len(zone_resources) / columns)
            grid_width = columns * node_width + (columns - 1) * column_spacing
            band_width = max(equal_share, grid_width + 2 * band_margin)

            container = None
            if options.show_zones:
                container = self._create_zone_container(
                    zone,
                    x=band_x + 10,
                    y=options.padding,
                    width=band_width - 20,
                    height=max(35 + rows * (node_height + row_spacing) + 10, 120),
                )

            start_x = band_x + band_margin
            start_y = options.padding + header
            for index, resource in enumerate(zone_resources):
                column = index % columns
                row = index // columns
                self._create_resource_node(
                    resource,
                    x=start_x + column * (node_width + column_spacing),
                    y=start_y + row * (node_height + row_spacing),
                    zone=zone.value,
                    parent=container,
                )

            band_x += band_width

    def _flow_vertical(self, bands: List[Tuple[Zone, List[TerraformResource]]]) -> None:
        """Zones stacked vertically; same-type resources side by side."""
        options = self.options
        node_width, node_height = options.node_width, options.node_height
        column_spacing = 12
        row_spacing = 6
        type_group_spacing = 14
        max_per_row = 6
        zone_gap = 20
        header = 35
        container_padding = 12

        current_y = options.padding

        for zone, zone_resources in bands:
            by_type = self._group_by_type(zone_resources)

            max_row_width = max(
                self._row_width(min(len(items), max_per_row), node_width, column_spacing)
                for items in by_type.values()
            )
            container_width = max_row_width + container_padding * 2
            container_x = options.padding + (options.available_width - container_width) / 2
            container_top = current_y

            container = None
            if options.show_zones:
                container = self._create_zone_container(
                    zone,
                    x=container_x,
                    y=container_top,
                    width=container_width,
                    height=70,
                )

            node_y = container_top + (header if options.show_zones else 10)
            for items in by_type.values():
                row_count = self._place_rows(
                    items,
                    left=container_x,
                    width=container_width,
                    top=node_y,
                    max_per_row=max_per_row,
                    column_spacing=column_spacing,
                    row_spacing=row_spacing,
                    zone=zone.value,
                    parent=container,
                )
                node_y += row_count * (node_height + row_spacing) + type_group_spacing

            if container is not None:
                container.height = max(node_y - container_top + 5, 70)

            current_y = node_y + zone_gap

    # ====================
    # LAYERED
    # ====================

    def _create_layered_layout(self, resources: List[TerraformResource]) -> None:
        options = self.options
        node_width, node_height = options.node_width, options.node_height
        spacing = 8

        layers: Dict[Layer, List[TerraformResource]] = {layer: [] for layer in Layer}
        for resource in resources:
            layers[layer_of(self.zone_classifier.classify(resource.type))].append(resource)

        populated = [(layer, members) for layer, members in layers.items() if members]
        layer_width = max(options.available_width / max(len(populated), 1), node_width + 40)
        center_y = options.height / 2

        for layer_index, (layer, members) in enumerate(populated):
            layer_x = options.padding + layer_index * layer_width
            total_height = len(members) * (node_height + spacing) - spacing
            start_y = center_y - total_height / 2

            container_top = start_y - 30
            container_bottom = start_y + total_height + 20
            container = self._create_container(
                f"layer_{layer.value}",
                LAYER_CONTAINER,
                layer.value,
                x=layer_x + 10,
                y=container_top,
                width=layer_width - 20,
                height=container_bottom - container_top,
                zone=layer.value,
                color=LAYER_COLOR,
            )

            for index, resource in enumerate(members):
                self._create_resource_node(
                    resource,
                    x=layer_x + (layer_width - node_width) / 2,
                    y=start_y + index * (node_height + spacing),
                    zone=layer.value,
                    parent=container,
                )

    # ====================
    # ZONES
    # ====================

    def _create_zone_based_layout(self, resources: List[TerraformResource]) -> None:
        options = self.options
        node_width, node_height = options.node_width, options.node_height
        row_spacing = 6
        column_spacing = 12
        title_width = 200

        grouped = self._group_by_zone(resources)
        zones = [zone for zone in PRIMARY_ZONES if zone in grouped]

        if not zones:
            logger.info("No primary zones present, falling back to the flow layout")
            self._create_flow_layout(resources)
            return

        skipped = len(resources) - sum(len(grouped[zone]) for zone in zones)
        if skipped:
            logger.info(f"Zones layout leaves out {skipped} resources outside the primary zones")

        grids = {}
        for zone in zones:
            per_row = max(math.ceil(math.sqrt(len(grouped[zone]))), 1)
            rows = math.ceil(len(grouped[zone]) / per_row)
            grids[zone] = (per_row, rows, self._row_width(per_row, node_width, column_spacing))

        widest_grid = max(content_width for _, _, content_width in grids.values())
        zone_width = max(options.available_width / len(zones), widest_grid + 40, title_width + 20)
        zone_y = options.padding + 80
        tallest_grid = max(rows for _, rows, _ in grids.values())
        zone_height = max(
            options.height - 2 * options.padding - 100,
            40 + tallest_grid * (node_height + row_spacing) - row_spacing + 20,
        )

        for zone_index, zone in enumerate(zones):
            zone_x = options.padding + zone_index * zone_width

            container = self._create_zone_container(
                zone,
                x=zone_x + 10,
                y=zone_y,
                width=zone_width - 20,
                height=zone_height,
            )
            self._add_node(
                DiagramNode(
                    id=f"zone_title_{zone.value}",
                    type=ZONE_TITLE,
                    name=zone.value,
                    x=zone_x + (zone_width - title_width) / 2,
                    y=options.padding + 20,
                    width=title_width,
                    height=30,
                    category=ResourceCategory.GENERAL.value,
                    zone=zone.value,
                    level=0,
                    color=TITLE_COLOR,
                    display_name=zone.value,
                ),
            )

            per_row, _, content_width = grids[zone]
            start_x = zone_x + (zone_width - content_width) / 2
            start_y = zone_y + 40
            for index, resource in enumerate(grouped[zone]):
                row = index // per_row
                column = index % per_row
                self._create_resource_node(
                    resource,
                    x=start_x + column * (node_width + column_spacing),
                    y=start_y + row * (node_height + row_spacing),
                    zone=zone.value,
                    parent=container,
                )

    # ====================
    # MICROSERVICES
    # ====================

    def _create_microservices_layout(self, resources: List[TerraformResource]) -> None:
        """Compute-like resources on an inner ring, shared services on an outer ring."""
        options = self.options

        compute_resources = [
            resource for resource in resources
            if any(keyword in resource.type for keyword in COMPUTE_KEYWORDS)
        ]
        compute_ids = {resource.id for resource in compute_resources}
        other_resources = [resource for resource in resources if resource.id not in compute_ids]

        center_x = options.width / 2
        center_y = options.height / 2
        inner_radius = max(min(options.width, options.height) / 4, self._ring_radius(len(compute_resources)))
        outer_radius = max(inner_radius + SHARED_RING_OFFSET, self._ring_radius(len(other_resources)))

        for index, resource in enumerate(compute_resources):
            angle = (index / len(compute_resources)) * 2 * math.pi
            self._place_on_ring(resource, center_x, center_y, inner_radius, angle, Zone.APPLICATION.value, level=1)

        angle_increment = (2 * math.pi) / max(len(other_resources), 1)
        for index, resource in enumerate(other_resources):
            zone = self.zone_classifier.classify(resource.type)
            self._place_on_ring(resource, center_x, center_y, outer_radius, index * angle_increment, zone.value, level=2)

    def _ring_radius(self, count: int) -> float:
        """Smallest radius at which ``count`` evenly spaced nodes don't touch."""
        if count < 2:
            return 0.0
        chord = math.hypot(self.options.node_width, self.options.node_height) + RING_GAP
        return chord / (2 * math.sin(math.pi / count))

    def _place_on_ring(
        self,
        resource: TerraformResource,
        center_x: float,
        center_y: float,
        radius: float,
        angle: float,
        zone: str,
        level: int,
    ) -> None:
        node_width, node_height = self.options.node_width, self.options.node_height
        self._create_resource_node(
            resource,
            x=center_x + radius * math.cos(angle) - node_width / 2,
            y=center_y + radius * math.sin(angle) - node_height / 2,
            zone=zone,
            level=level,
        )

    # ====================
    # RESOURCE GROUPS
    # ====================

    def _create_resource_group_layout(self, resources: List[TerraformResource]) -> None:
        """Resource group containers stacked vertically, members grouped by type."""
        options = self.options
        node_width, node_height = options.node_width, options.node_height
        column_spacing = 12
        row_spacing = 8
        max_per_row = 4
        group_gap = 25
        header = 32
        container_padding = 15
        min_container_width = 250

        buckets = self._group_by_resource_group(resources)
        group_names = sorted(
            buckets,
            key=lambda name: (name == DEFAULT_RESOURCE_GROUP, name),
        )

        current_y = options.padding

        for group_name in group_names:
            members = buckets[group_name]
            group_resource = next(
                (r for r in members if r.type == RESOURCE_GROUP_TYPE and r.name == group_name),
                None,
            )
            others = [r for r in members if r is not group_resource]

            by_type = self._group_by_type(others)
            sorted_types = sorted(by_type, key=TypePriority.get_rank)

            max_row_width = max(
                (
                    self._row_width(min(len(items), max_per_row), node_width, column_spacing)
                    for items in by_type.values()
                ),
                default=0,
            )
            container_width = max(max_row_width + container_padding * 2, min_container_width)
            container_x = options.padding + (options.available_width - container_width) / 2

            container = self._create_container(
                f"rg_container_{group_name}",
                RESOURCE_GROUP_CONTAINER,
                group_name,
                x=container_x,
                y=current_y,
                width=container_width,
                height=header + container_padding,
                zone=group_name,
                color=RESOURCE_GROUP_COLOR,
                display_name=f"Resource Group: {group_name}",
            )
            if group_resource is not None:
                # the container stands in for the resource group resource itself
                info = self.icon_manager.get_resource_info(group_resource.type)
                container.icon = info.icon
                container.tags = dict(group_resource.tags or {})
                container.environment = group_resource.environment
                container.module = group_resource.module

            node_y = current_y + header
            for resource_type in sorted_types:
                row_count = self._place_rows(
                    by_type[resource_type],
                    left=container_x,
                    width=container_width,
                    top=node_y,
                    max_per_row=max_per_row,
                    column_spacing=column_spacing,
                    row_spacing=row_spacing,
                    zone=group_name,
                    parent=container,
                )
                node_y += row_count * (node_height + row_spacing)

            container.height = node_y - current_y + container_padding
            current_y = container.y + container.height + group_gap

    def _group_by_resource_group(self, resources: List[TerraformResource]) -> Dict[str, List[TerraformResource]]:
        """Bucket resources by resource group, declared groups first."""
        buckets: Dict[str, List[TerraformResource]] = {}
        aliases: Dict[str, str] = {}

        for resource in resources:
            if resource.type == RESOURCE_GROUP_TYPE:
                buckets.setdefault(resource.name, []).append(resource)
                display_name = (resource.attributes or {}).get("name")
                if isinstance(display_name, str) and display_name:
                    aliases.setdefault(resolve_group_reference(display_name), resource.name)

        for resource in resources:
            if resource.type == RESOURCE_GROUP_TYPE:
                continue
            group_name = extract_resource_group_name(resource)
            if group_name not in buckets:
                group_name = aliases.get(group_name, group_name)
            buckets.setdefault(group_name, []).append(resource)

        return buckets

    # ====================
    # HELPER METHODS
    # ====================

    def _group_by_zone(self, resources: List[TerraformResource]) -> Dict[Zone, List[TerraformResource]]:
        grouped: Dict[Zone, List[TerraformResource]] = defaultdict(list)
        for resource in resources:
            grouped[self.zone_classifier.classify(resource.type)].append(resource)
        return dict(grouped)

    @staticmethod
    def _group_by_type(resources: List[TerraformResource]) -> Dict[str, List[TerraformResource]]:
        grouped: Dict[str, List[TerraformResource]] = defaultdict(list)
        for resource in resources:
            grouped[resource.type].append(resource)
        return dict(grouped)

    @staticmethod
    def _row_width(items: int, node_width: float, spacing: float) -> float:
        return items * node_width + (items - 1) * spacing if items else 0

    def _place_rows(
        self,
        items: List[TerraformResource],
        left: float,
        width: float,
        top: float,
        max_per_row: int,
        column_spacing: float,
        row_spacing: float,
        zone: str,
        parent: Optional[DiagramNode],
    ) -> int:
        """Wrap items into centred rows inside [left, left + width]; return the row count."""
        node_width, node_height = self.options.node_width, self.options.node_height
        row_count = math.ceil(len(items) / max_per_row)

        for row in range(row_count):
            row_items = items[row * max_per_row:(row + 1) * max_per_row]
            row_start_x = left + (width - self._row_width(len(row_items), node_width, column_spacing)) / 2
            for column, resource in enumerate(row_items):
                self._create_resource_node(
                    resource,
                    x=row_start_x + column * (node_width + column_spacing),
                    y=top + row * (node_height + row_spacing),
                    zone=zone,
                    parent=parent,
                )

        return row_count

    def _add_node(self, node: DiagramNode) -> DiagramNode:
        if node.id in self._nodes_by_id:
            logger.warning(f"Duplicate node id {node.id}; keeping the first one")
            return self._nodes_by_id[node.id]
        self.nodes.append(node)
        self._nodes_by_id[node.id] = node
        return node

    def _create_container(
        self,
        node_id: str,
        node_type: str,
        name: str,
        x: float,
        y: float,
        width: float,
        height: float,
        zone: str,
        color: str,
        display_name: Optional[str] = None,
    ) -> DiagramNode:
        return self._add_node(
            DiagramNode(
                id=node_id,
                type=node_type,
                name=name,
                x=x,
                y=y,
                width=width,
                height=height,
                category=ResourceCategory.GENERAL.value,
                zone=zone,
                level=0,
                is_group_container=True,
                children=[],
                color=color,
                display_name=display_name or name,
            ),
        )

    def _create_zone_container(self, zone: Zone, x: float, y: float, width: float, height: float) -> DiagramNode:
        if zone == Zone.OTHER:
            return self._create_container(
                OTHER_CONTAINER_ID, ZONE_CONTAINER, OTHER_CONTAINER_NAME,
                x=x, y=y, width=width, height=height,
                zone=Zone.OTHER.value, color=get_zone_color(Zone.OTHER),
            )
        return self._create_container(
            f"zone_container_{zone.value}", ZONE_CONTAINER, zone.value,
            x=x, y=y, width=width, height=height,
            zone=zone.value, color=get_zone_color(zone),
        )

    def _create_resource_node(
        self,
        resource: TerraformResource,
        x: float,
        y: float,
        zone: str,
        level: int = 1,
        parent: Optional[DiagramNode] = None,
    ) -> DiagramNode:
        info = self.icon_manager.get_resource_info(resource.type)
        node = self._add_node(
            DiagramNode(
                id=resource.id,
                type=resource.type,
                name=resource.name,
                x=x,
                y=y,
                width=self.options.node_width,
                height=self.options.node_height,
                category=info.category.value,
                zone=zone,
                level=level,
                parent_group=parent.id if parent is not None else None,
                color=get_category_color(info.category),
                icon=info.icon,
                connections=list(self._dependencies.get(resource.id, [])),
                tags=dict(resource.tags or {}),
                environment=resource.environment,
                module=resource.module,
                network_info=resource.network_info,
                security_rules=resource.security_rules,
            ),
        )
        if parent is not None and node.parent_group == parent.id and node.id not in parent.children:
            parent.children.append(node.id)
        return node
