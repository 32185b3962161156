"""Dependency graph extraction from Terraform resources."""

import logging
import re
from typing import Any, Dict, List, Optional

import networkx as nx

from ..core.models import (
    RESOURCE_GROUP_TYPE,
    DependencyEdge,
    GroupBy,
    LayoutOptions,
    TerraformResource,
    normalize_reference,
)
from ..icons.icon_manager import IconManager

logger = logging.getLogger(__name__)

# Symbols that never become diagram nodes
NON_RESOURCE_PREFIXES = ("var_", "local_", "data.", "var.", "local.")

# type.name, but not when it is the tail of data.type.name / var.x.y / local.x.y
RESOURCE_REFERENCE = re.compile(r"(?<![\w.])([a-z][a-z0-9]*_[a-z0-9_]+)\.([A-Za-z0-9_-]+)")
MODULE_REFERENCE = re.compile(r"(?<![\w.])module\.([A-Za-z0-9_-]+)")
DATA_REFERENCE = re.compile(r"(?<![\w.])data\.([A-Za-z0-9_]+)\.([A-Za-z0-9_-]+)")

PRIORITY_TARGETS = ("azurerm_resource_group", "azurerm_virtual_network")


def find_references(value: Any) -> List[str]:
    """Collect reference ids found anywhere inside an attribute value.

    Strings are scanned for ``type.name``, ``module.name`` and
    ``data.type.name`` references; lists and dicts are walked recursively.
    ``var`` and ``local`` symbols are ignored.
    """
    found: List[str] = []

    def _scan(val: Any) -> None:
        if isinstance(val, str):
            for match in RESOURCE_REFERENCE.finditer(val):
                ref_type, ref_name = match.groups()
                found.append(f"{ref_type}_{ref_name}")
            for match in MODULE_REFERENCE.finditer(val):
                found.append(f"module_{match.group(1)}")
            for match in DATA_REFERENCE.finditer(val):
                data_type, data_name = match.groups()
                found.append(f"data.{data_type}_{data_name}")
        elif isinstance(val, dict):
            for item in val.values():
                _scan(item)
        elif isinstance(val, (list, tuple)):
            for item in val:
                _scan(item)

    _scan(value)
    return found


def edge_priority(target_id: str) -> int:
    """Extraction-time priority: resource groups and networks are kept first."""
    return 1 if any(prefix in target_id for prefix in PRIORITY_TARGETS) else 0


class GraphBuilder:
    """Builds the pruned dependency graph between resources."""

    def __init__(self, options: Optional[LayoutOptions] = None, icon_manager: Optional[IconManager] = None):
        """Initialize graph builder with options.

        Args:
            options: Layout options; defaults are used when omitted.
            icon_manager: Classifier used by the category filters.
        """
        self.options = options or LayoutOptions()
        self.icon_manager = icon_manager or IconManager()
        self.graph: nx.DiGraph = nx.DiGraph()

    def filter_resources(self, resources: List[TerraformResource]) -> List[TerraformResource]:
        """Filter resources by category, type and environment options.

        Args:
            resources: All resources.

        Returns:
            Filtered list of resources, input order preserved.
        """
        options = self.options
        if not options.has_filters:
            return list(resources)

        filtered = []
        for resource in resources:
            category = self.icon_manager.get_resource_info(resource.type).category

            if options.include_categories and category not in options.include_categories:
                continue
            if options.exclude_categories and category in options.exclude_categories:
                continue
            if options.include_types and not any(
                self._matches_pattern(resource.type, pattern) for pattern in options.include_types
            ):
                continue
            if options.exclude_types and any(
                self._matches_pattern(resource.type, pattern) for pattern in options.exclude_types
            ):
                continue
            if options.environment:
                environment = resource.environment
                if not environment or environment.lower() != options.environment.lower():
                    continue

            filtered.append(resource)

        logger.info(
            f"Filtered {len(resources)} resources to {len(filtered)} after filtering",
        )
        return filtered

    @staticmethod
    def _matches_pattern(resource_type: str, pattern: str) -> bool:
        """Check if resource type matches a filter pattern.

        Args:
            resource_type: Terraform resource type.
            pattern: Type pattern (supports ``*`` wildcards).

        Returns:
            True if resource type matches pattern.
        """
        resource_type_lower = resource_type.lower()
        pattern_lower = pattern.lower()

        if "*" not in pattern_lower:
            return resource_type_lower == pattern_lower

        # Every literal piece must appear in order, anchored at both ends
        parts = pattern_lower.split("*")
        if not resource_type_lower.startswith(parts[0]):
            return False
        position = len(parts[0])
        for part in parts[1:-1]:
            found = resource_type_lower.find(part, position)
            if found < 0:
                return False
            position = found + len(part)
        return resource_type_lower.endswith(parts[-1]) and len(resource_type_lower) - len(parts[-1]) >= position

    def build_graph(self, resources: List[TerraformResource]) -> nx.DiGraph:
        """Build the dependency graph.

        Args:
            resources: Resources taking part in the diagram.

        Returns:
            Directed graph whose successor order is the retained edge order.
        """
        self.graph.clear()
        resource_by_id: Dict[str, TerraformResource] = {}
        for resource in resources:
            resource_by_id[resource.id] = resource
            self.graph.add_node(resource.id)

        for resource in resources:
            edges = self._collect_edges(resource, resource_by_id)
            for edge in self._prune_edges(edges):
                self.graph.add_edge(edge.source, edge.target, score=edge.score)

        logger.info(
            f"Built dependency graph with {self.graph.number_of_nodes()} nodes and {self.graph.number_of_edges()} edges",
        )
        return self.graph

    def extract_dependencies(self, resources: List[TerraformResource]) -> Dict[str, List[str]]:
        """Map each resource id to its ordered dependency targets.

        Resources without dependencies are left out of the mapping.
        """
        graph = self.build_graph(resources)
        return {
            node: list(graph.successors(node))
            for node in graph.nodes
            if graph.out_degree(node) > 0
        }

    def _collect_edges(
        self,
        resource: TerraformResource,
        resource_by_id: Dict[str, TerraformResource],
    ) -> List[DependencyEdge]:
        """Explicit references first, then implicit ones from attribute values."""
        targets: List[str] = []

        for dependency in resource.dependencies or []:
            if dependency.startswith(NON_RESOURCE_PREFIXES):
                continue
            target_id = normalize_reference(dependency)
            if self._accepts(resource, target_id, targets, resource_by_id):
                targets.append(target_id)

        if not self.options.hide_implicit_dependencies:
            for value in (resource.attributes or {}).values():
                for target_id in find_references(value):
                    if self._accepts(resource, target_id, targets, resource_by_id):
                        targets.append(target_id)

        return [
            DependencyEdge(resource.id, target_id, edge_priority(target_id))
            for target_id in targets
        ]

    def _accepts(
        self,
        resource: TerraformResource,
        target_id: str,
        targets: List[str],
        resource_by_id: Dict[str, TerraformResource],
    ) -> bool:
        if target_id == resource.id or target_id in targets:
            return False
        target = resource_by_id.get(target_id)
        if target is None:
            logger.debug(f"Dropping reference {resource.id} -> {target_id}: not in diagram")
            return False
        if self.options.group_by == GroupBy.RESOURCE_GROUP and target.type == RESOURCE_GROUP_TYPE:
            # drawn as the enclosing container, never as a node
            logger.debug(f"Dropping reference {resource.id} -> {target_id}: resource group container")
            return False
        if self.options.hide_cross_environment:
            source_env = resource.environment
            target_env = target.environment
            if source_env and target_env and source_env != target_env:
                logger.debug(
                    f"Dropping cross-environment reference {resource.id} ({source_env}) -> {target_id} ({target_env})",
                )
                return False
        return True

    def _prune_edges(self, edges: List[DependencyEdge]) -> List[DependencyEdge]:
        """Keep at most ``max_connections_per_resource`` edges, priority first."""
        limit = self.options.max_connections_per_resource
        if limit is None or len(edges) <= limit:
            return edges
        # sorted() is stable, so equal priorities keep declaration order
        ranked = sorted(edges, key=lambda edge: -edge.score)
        return ranked[:limit]
