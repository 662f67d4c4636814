from .viewport import LayoutMode, ViewportState

__all__ = ["LayoutMode", "ViewportState"]
