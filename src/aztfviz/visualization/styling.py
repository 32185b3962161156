"""Post-layout styling and canvas normalization."""

import logging
import re
from typing import List, Optional

from ..core.models import DiagramNode, LayoutOptions, Theme

logger = logging.getLogger(__name__)

PROVIDER_PREFIX = re.compile(r"^(azurerm_|azure_)")
ENVIRONMENT_TOKENS = re.compile(r"\b(prod|dev|staging|test|qa)\b", re.IGNORECASE)
MAX_DISPLAY_NAME = 20
TRUNCATED_LENGTH = 17

DARK_THEME_OFFSET = 0x33
BLUEPRINT_CONTAINER_COLOR = "#E6F2FF"

# Scales this close to 1 are treated as exactly 1
SCALE_TOLERANCE = 1e-9


def get_display_name(resource_type: str, name: str) -> str:
    """Readable label for a resource.

    Args:
        resource_type: Terraform resource type, used as the fallback.
        name: Terraform resource name.

    Returns:
        Title-cased name without provider prefix or environment tokens,
        truncated with an ellipsis past 20 characters.
    """
    display_name = PROVIDER_PREFIX.sub("", name or "")
    display_name = re.sub(r"[_-]", " ", display_name)
    display_name = ENVIRONMENT_TOKENS.sub("", display_name)
    display_name = " ".join(word[:1].upper() + word[1:] for word in display_name.split())

    if len(display_name) > MAX_DISPLAY_NAME:
        display_name = display_name[:TRUNCATED_LENGTH] + "..."

    return display_name or resource_type.replace("azurerm_", "")


def darken_color(color: str, offset: int = DARK_THEME_OFFSET) -> str:
    """Subtract ``offset`` from each channel of a ``#RRGGBB`` color."""
    if not re.fullmatch(r"#[0-9A-Fa-f]{6}", color or ""):
        return color
    channels = [int(color[i:i + 2], 16) for i in (1, 3, 5)]
    return "#" + "".join(f"{max(0, channel - offset):02x}" for channel in channels)


class NodeStyler:
    """Applies sizing, labels and theme colors, then fits nodes to the canvas."""

    def __init__(self, options: Optional[LayoutOptions] = None):
        self.options = options or LayoutOptions()

    def apply_styling(self, nodes: List[DiagramNode]) -> List[DiagramNode]:
        """Style nodes in place.

        Leaves get the configured size, multiplied by any normalization scale
        already applied to them, so repeated passes leave geometry unchanged.

        Args:
            nodes: Positioned nodes.

        Returns:
            The same nodes.
        """
        options = self.options

        for node in nodes:
            if not node.is_decoration:
                node.width = options.node_width * node.scale
                node.height = options.node_height * node.scale
                if not node.display_name and node.name:
                    node.display_name = get_display_name(node.type, node.name)

            if options.theme == Theme.DARK:
                if node.color:
                    node.color = darken_color(node.color)
            elif options.theme == Theme.BLUEPRINT:
                if node.is_group_container:
                    node.color = BLUEPRINT_CONTAINER_COLOR

        return nodes

    def ensure_within_bounds(self, nodes: List[DiagramNode]) -> List[DiagramNode]:
        """Scale down and translate nodes so they sit centred inside the padded canvas.

        Content is never scaled up.

        Args:
            nodes: Styled nodes.

        Returns:
            The same nodes.
        """
        if not nodes:
            return nodes

        options = self.options
        min_x = min(node.x for node in nodes)
        min_y = min(node.y for node in nodes)
        max_x = max(node.x + node.width for node in nodes)
        max_y = max(node.y + node.height for node in nodes)

        content_width = max_x - min_x
        content_height = max_y - min_y
        target_width = options.available_width
        target_height = options.available_height

        scale = 1.0
        if content_width > 0:
            scale = min(scale, target_width / content_width)
        if content_height > 0:
            scale = min(scale, target_height / content_height)
        if abs(scale - 1.0) < SCALE_TOLERANCE:
            scale = 1.0

        offset_x = options.padding + (target_width - content_width * scale) / 2
        offset_y = options.padding + (target_height - content_height * scale) / 2

        for node in nodes:
            node.x = (node.x - min_x) * scale + offset_x
            node.y = (node.y - min_y) * scale + offset_y
            node.width *= scale
            node.height *= scale
            node.scale *= scale
            if abs(node.scale - 1.0) < SCALE_TOLERANCE:
                node.scale = 1.0

        if scale < 1.0:
            logger.info(f"Scaled diagram by {scale:.4f} to fit a {options.width}x{options.height} canvas")
        return nodes
