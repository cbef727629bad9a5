"""Preview surface coordination and geometry."""

from __future__ import annotations

from .coordinator import PreviewCoordinator
from .geometry import layout_signature, preview_context

__all__ = ["PreviewCoordinator", "layout_signature", "preview_context"]
