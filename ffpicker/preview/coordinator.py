"""Preview surface state machine.

The coordinator is either closed or open on exactly one item. Opening needs
a content resolver; a resolver that returns nothing leaves the current state
untouched so a failed lookup never flickers the surface. Geometry is derived
from the host layout on every open.
"""

from __future__ import annotations

import logging
from typing import Any

from ..actions import ActionFlags
from ..config import UiParams
from ..host import HostSurface, PreviewContent, PreviewContext, PreviewResolver
from ..item_model import Item
from .geometry import layout_signature, preview_context

logger = logging.getLogger(__name__)


class PreviewCoordinator:
    """Track the previewed item and drive the host preview surface."""

    def __init__(self, host: HostSurface) -> None:
        self.host = host
        self.previewed_item: Item | None = None
        self.handle = -1
        self.context: PreviewContext | None = None
        self._signature: tuple[object, ...] | None = None

    @property
    def visible(self) -> bool:
        return self.handle >= 0

    def is_already_previewed(self, item: Item) -> bool:
        return self.visible and self.previewed_item is not None and self.previewed_item.identity == item.identity

    def is_changed_params(self, params: UiParams) -> bool:
        """Return whether layout params differ from those used at open."""
        return self._signature is not None and self._signature != layout_signature(params)

    def needs_reopen_for_filter(self, params: UiParams) -> bool:
        """A horizontal main window cannot keep a vertical preview beside the filter."""
        return self.visible and params.split == "horizontal" and params.preview_split == "vertical"

    def toggle(
        self,
        item: Item,
        params: UiParams,
        action_params: dict[str, Any],
        resolve: PreviewResolver | None,
    ) -> ActionFlags:
        """Close when ``item`` is already previewed, otherwise preview it."""
        if self.is_already_previewed(item):
            self.close()
            return ActionFlags.NONE
        return self.preview(item, params, action_params, resolve)

    def preview(
        self,
        item: Item,
        params: UiParams,
        action_params: dict[str, Any],
        resolve: PreviewResolver | None,
    ) -> ActionFlags:
        """Show ``item`` in the preview surface, opening it when closed."""
        if params.preview_split == "no" or resolve is None:
            return ActionFlags.NONE

        context = preview_context(params, self.host.layout())
        content = resolve(item, action_params, context)
        if content is None:
            return ActionFlags.NONE

        if self.visible and self.is_changed_params(params):
            self.close()

        if self.visible:
            self.host.update_preview(self.handle, context, content)
        else:
            self.handle = self.host.open_preview(context, content)
        self.previewed_item = item
        self.context = context
        self._signature = layout_signature(params)
        self._run_on_preview(params, item, content)
        return ActionFlags.PERSIST

    def close(self) -> None:
        """Close the surface when open; state is always closed afterwards."""
        handle = self.handle
        self.handle = -1
        self.previewed_item = None
        self.context = None
        self._signature = None
        if handle >= 0:
            self.host.close_preview(handle)

    def execute(self, command: str) -> None:
        if not self.visible:
            return
        self.host.execute_in_preview(self.handle, command)

    def _run_on_preview(self, params: UiParams, item: Item, content: PreviewContent) -> None:
        hook = params.on_preview
        if hook is None:
            return
        try:
            hook(item=item, content=content, preview_handle=self.handle)
        except Exception as exc:
            logger.warning("on_preview hook failed: %s", exc)
            self.host.report_error(f"[ffpicker] on_preview failed: {exc}")
