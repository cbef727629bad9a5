"""Preview surface geometry derived from the current host layout."""

from __future__ import annotations

from ..config import UiParams
from ..host import HostLayout, PreviewContext


def _as_int(value: object, fallback: int) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback


def preview_context(params: UiParams, layout: HostLayout) -> PreviewContext:
    """Return preview row/col/size for ``params`` against ``layout``.

    Floating previews use the configured position verbatim. Split previews
    sit beside (vertical) or above/below (horizontal) the main list window
    and share its height or width respectively.
    """
    width = max(1, _as_int(params.preview_width, 80))
    height = max(1, _as_int(params.preview_height, 10))

    if params.preview_floating:
        return PreviewContext(
            row=max(0, _as_int(params.preview_row, 0)),
            col=max(0, _as_int(params.preview_col, 0)),
            width=min(width, max(1, layout.columns)),
            height=min(height, max(1, layout.lines)),
            is_floating=True,
            split=params.preview_split,
            border=params.preview_floating_border,
            title=params.preview_floating_title,
            title_pos=params.preview_floating_title_pos,
            zindex=_as_int(params.preview_floating_zindex, 100),
        )

    if params.preview_split == "vertical":
        right_space = layout.columns - (layout.win_col + layout.win_width)
        if right_space >= width or right_space >= layout.win_col:
            col = layout.win_col + layout.win_width
            width = min(width, max(1, right_space))
        else:
            width = min(width, max(1, layout.win_col))
            col = layout.win_col - width
        return PreviewContext(
            row=layout.win_row,
            col=max(0, col),
            width=width,
            height=max(1, layout.win_height),
            is_floating=False,
            split="vertical",
        )

    below_space = layout.lines - (layout.win_row + layout.win_height)
    if layout.win_row >= height or layout.win_row >= below_space:
        height = min(height, max(1, layout.win_row))
        row = layout.win_row - height
    else:
        height = min(height, max(1, below_space))
        row = layout.win_row + layout.win_height
    return PreviewContext(
        row=max(0, row),
        col=layout.win_col,
        width=max(1, layout.win_width),
        height=height,
        is_floating=False,
        split="horizontal",
    )


def layout_signature(params: UiParams) -> tuple[object, ...]:
    """Return the params that decide where the preview surface lives."""
    return (
        params.preview_split,
        params.preview_floating,
        params.preview_width,
        params.preview_height,
        params.preview_row,
        params.preview_col,
        params.split,
    )
