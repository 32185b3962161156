"""Python AzTfViz - Terraform/Azure diagram layout engine.

Turns declared Terraform resources into a positioned diagram: boxes with
coordinates, nested group containers and typed connections ready to render.
"""

from .core.aztfviz import AzTfViz
from .core.models import Diagram, LayoutMode, LayoutOptions, TerraformResource, Theme

__version__ = "0.1.0"
__all__ = ["AzTfViz", "Diagram", "LayoutMode", "LayoutOptions", "TerraformResource", "Theme"]
