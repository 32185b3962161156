"""Azure resource classification and icons."""

from .icon_manager import IconManager, ResourceInfo

__all__ = ["IconManager", "ResourceInfo"]
