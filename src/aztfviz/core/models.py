"""Data models and enums for AzTfViz."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class Theme(str, Enum):
    """Visual themes for diagram styling."""

    LIGHT = "light"
    DARK = "dark"
    BLUEPRINT = "blueprint"


class LayoutMode(str, Enum):
    """Spatial layout strategies."""

    FLOW = "flow"
    LAYERED = "layered"
    ZONES = "zones"
    MICROSERVICES = "microservices"


class FlowDirection(str, Enum):
    """Primary axis of the flow layout."""

    LEFT_RIGHT = "left-right"
    TOP_BOTTOM = "top-bottom"
    RIGHT_LEFT = "right-left"
    BOTTOM_TOP = "bottom-top"

    @property
    def is_horizontal(self) -> bool:
        return self in (FlowDirection.LEFT_RIGHT, FlowDirection.RIGHT_LEFT)

    @property
    def is_reversed(self) -> bool:
        return self in (FlowDirection.RIGHT_LEFT, FlowDirection.BOTTOM_TOP)


class GroupBy(str, Enum):
    """Grouping criteria. RESOURCE_GROUP bypasses the layout selection."""

    ZONE = "zone"
    FUNCTION = "function"
    LAYER = "layer"
    RESOURCE_GROUP = "resourceGroup"
    NONE = "none"


class ResourceCategory(str, Enum):
    """Azure service categories reported by the icon classifier."""

    COMPUTE = "Compute"
    NETWORKING = "Networking"
    STORAGE = "Storage"
    DATABASES = "Databases"
    SECURITY = "Security"
    MONITORING = "Monitoring + Management"
    GENERAL = "General"
    ANALYTICS = "Analytics"
    AI_ML = "AI + Machine Learning"
    INTEGRATION = "Integration"
    IDENTITY = "Identity"
    WEB = "Web"
    CONTAINERS = "Containers"
    DEVOPS = "DevOps"


class Zone(str, Enum):
    """Security/network zones used to group and order resources."""

    INTERNET = "Internet"
    EDGE = "Edge"
    DMZ = "DMZ"
    PRESENTATION = "Presentation"
    APPLICATION = "Application"
    DATA = "Data"
    MANAGEMENT = "Management"
    IDENTITY = "Identity"
    SECURITY = "Security"
    UNKNOWN = "Unknown"
    OTHER = "Other"  # display zone for the trailing band of unclassified resources


class Layer(str, Enum):
    """Fixed tiers of the layered layout, in drawing order."""

    CLIENT = "Client"
    DELIVERY = "Delivery"
    SECURITY = "Security"
    PRESENTATION = "Presentation"
    APPLICATION = "Application"
    DATA = "Data"
    MANAGEMENT = "Management"


class ConnectionType(str, Enum):
    """Semantic type of a diagram connection."""

    DATA = "data"
    CONTROL = "control"
    SECURITY = "security"
    DEPENDENCY = "dependency"
    REFERENCE = "reference"


class ConnectionStyle(str, Enum):
    """Line style of a diagram connection."""

    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"


class ArrowDirection(str, Enum):
    """Where arrowheads are drawn on a connection."""

    FORWARD = "forward"
    BACKWARD = "backward"
    BOTH = "both"
    NONE = "none"


# Node types that are not resources
ZONE_CONTAINER = "zone-container"
LAYER_CONTAINER = "layer-container"
RESOURCE_GROUP_CONTAINER = "resource-group-container"
ZONE_TITLE = "zone-title"

CONTAINER_TYPES = frozenset({ZONE_CONTAINER, LAYER_CONTAINER, RESOURCE_GROUP_CONTAINER})
DECORATION_TYPES = CONTAINER_TYPES | {ZONE_TITLE}

RESOURCE_GROUP_TYPE = "azurerm_resource_group"

_ENVIRONMENT_KEYWORDS = (
    ("prod", "production"),
    ("staging", "staging"),
    ("dev", "development"),
    ("test", "test"),
    ("qa", "qa"),
)

_DOTTED_REFERENCE = re.compile(r"^([A-Za-z][A-Za-z0-9_]*)\.([A-Za-z0-9_-]+)(?:\..*)?$")


def normalize_reference(reference: str) -> str:
    """Turn a ``type.name[.attr]`` reference into a ``type_name`` resource id.

    Symbolic references (``var``, ``local``, ``data``, ``module``) and values
    that already look like ids are returned unchanged.
    """
    match = _DOTTED_REFERENCE.match(reference)
    if not match:
        return reference
    prefix, name = match.groups()
    if prefix in ("var", "local", "data"):
        return reference
    if prefix == "module":
        return f"module_{name}"
    return f"{prefix}_{name}"


def environment_from_name(name: str) -> str | None:
    """Guess an environment from keywords in a resource name."""
    lower_name = name.lower()
    for keyword, environment in _ENVIRONMENT_KEYWORDS:
        if keyword in lower_name:
            return environment
    return None


@dataclass
class TerraformResource:
    """A declared infrastructure resource as produced by the extractor."""

    type: str
    name: str
    attributes: dict[str, Any] = field(default_factory=dict)
    tags: dict[str, str] = field(default_factory=dict)
    dependencies: list[str] = field(default_factory=list)
    security_rules: list[dict[str, Any]] | None = None
    network_info: dict[str, Any] | None = None
    module: str | None = None
    file: str | None = None
    line: int | None = None

    @property
    def id(self) -> str:
        return f"{self.type}_{self.name}"

    @property
    def environment(self) -> str | None:
        """Environment from tags, attributes, or finally name keywords."""
        tags = self.tags or {}
        for value in (tags.get("environment"), tags.get("env"), (self.attributes or {}).get("environment")):
            # blocks and numbers are not environment names
            if isinstance(value, str) and value:
                return value
        return environment_from_name(self.name)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TerraformResource:
        """Build a resource from extractor JSON (snake_case or camelCase keys)."""
        return cls(
            type=data["type"],
            name=data["name"],
            attributes=data.get("attributes") or {},
            tags=data.get("tags") or {},
            dependencies=list(data.get("dependencies") or []),
            security_rules=data.get("security_rules", data.get("securityRules")),
            network_info=data.get("network_info", data.get("networkInfo")),
            module=data.get("module"),
            file=data.get("file"),
            line=data.get("line"),
        )


@dataclass
class DependencyEdge:
    """Directed reference between two resources, scored for pruning."""

    source: str
    target: str
    score: int = 0


@dataclass
class DiagramNode:
    """Positioned diagram node: a resource, a group container or a title."""

    id: str
    type: str
    name: str
    x: float
    y: float
    width: float
    height: float
    category: str
    zone: str
    level: int
    display_name: str | None = None
    parent_group: str | None = None
    children: list[str] | None = None
    is_group_container: bool = False
    color: str | None = None
    icon: str | None = None
    connections: list[str] = field(default_factory=list)
    tags: dict[str, str] = field(default_factory=dict)
    environment: str | None = None
    module: str | None = None
    network_info: dict[str, Any] | None = None
    security_rules: list[dict[str, Any]] | None = None
    scale: float = 1.0

    @property
    def is_decoration(self) -> bool:
        """True for containers and titles, which never carry connections."""
        return self.is_group_container or self.type in DECORATION_TYPES

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DiagramConnection:
    """Typed, styled, directed connection ready for rendering."""

    source: str
    target: str
    type: ConnectionType
    style: ConnectionStyle
    color: str
    arrow: ArrowDirection
    label: str = ""
    rotation: float | None = None
    weight: int = 1

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        data["style"] = self.style.value
        data["arrow"] = self.arrow.value
        return data


@dataclass
class Diagram:
    """Complete layout result."""

    nodes: list[DiagramNode] = field(default_factory=list)
    connections: list[DiagramConnection] = field(default_factory=list)
    dependencies: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "connections": [connection.to_dict() for connection in self.connections],
            "dependencies": {key: list(value) for key, value in self.dependencies.items()},
        }


class ConnectionScoring(BaseModel):
    """Render-time connection scoring bonuses (tuning parameters)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    cross_zone: int = 10
    critical_pair: int = 20
    data_flow: int = 15
    security: int = 10
    data_sink: int = 5


class LayoutOptions(BaseModel):
    """Configuration for diagram generation.

    Unset options fall back to the defaults below; camelCase aliases such as
    ``maxConnectionsPerResource`` are accepted alongside the field names.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    layout: LayoutMode = LayoutMode.FLOW
    flow_direction: FlowDirection = FlowDirection.TOP_BOTTOM
    show_zones: bool = True
    max_connections_per_resource: int | None = Field(default=2, ge=0)
    hide_implicit_dependencies: bool = True
    hide_cross_environment: bool = False
    group_by: GroupBy = GroupBy.RESOURCE_GROUP
    theme: Theme = Theme.LIGHT
    compact_mode: bool = False
    width: float = Field(default=4000, gt=0)
    height: float = Field(default=3000, gt=0)
    padding: float = Field(default=100, ge=0)

    include_categories: list[ResourceCategory] | None = None
    exclude_categories: list[ResourceCategory] | None = None
    include_types: list[str] | None = None
    exclude_types: list[str] | None = None
    environment: str | None = None

    scoring: ConnectionScoring = Field(default_factory=ConnectionScoring)

    @model_validator(mode="after")
    def _check_canvas(self) -> LayoutOptions:
        if 2 * self.padding >= self.width or 2 * self.padding >= self.height:
            raise ValueError(
                f"padding {self.padding} leaves no drawable area on a "
                f"{self.width}x{self.height} canvas",
            )
        return self

    @property
    def node_width(self) -> float:
        return 140 if self.compact_mode else 180

    @property
    def node_height(self) -> float:
        return 52 if self.compact_mode else 64

    @property
    def available_width(self) -> float:
        return self.width - 2 * self.padding

    @property
    def available_height(self) -> float:
        return self.height - 2 * self.padding

    @property
    def has_filters(self) -> bool:
        return bool(
            self.include_categories
            or self.exclude_categories
            or self.include_types
            or self.exclude_types
            or self.environment,
        )


class TypePriority:
    """Ordering of resource types inside a resource group container."""

    RANKINGS = {
        "azurerm_virtual_network": 1,
        "azurerm_subnet": 2,
        "azurerm_network_security_group": 3,
        "azurerm_public_ip": 4,
        "azurerm_network_interface": 5,
        "azurerm_linux_virtual_machine": 10,  # compute after network primitives
        "azurerm_windows_virtual_machine": 10,
        "azurerm_virtual_machine": 10,
        "azurerm_storage_account": 20,
        "azurerm_key_vault": 30,
    }

    @classmethod
    def get_rank(cls, resource_type: str) -> int:
        """Get ranking for resource type."""
        return cls.RANKINGS.get(resource_type.lower(), 100)
