"""UI parameters and persistent JSON config helpers.

``UiParams`` carries every option the list UI consumes, with documented
defaults. Options listed in ``expr_params`` may hold expression strings that
the host evaluates at redraw time. The user config file lives in the platform
config directory; all access is defensive and malformed files fall back to
defaults.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

APP_NAME = "ffpicker"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

SPLIT_MODES = ("horizontal", "vertical", "floating", "no")
PREVIEW_SPLIT_MODES = ("horizontal", "vertical", "no")
SOURCE_NAME_MODES = ("long", "short", "no")

DEFAULT_AUTO_ACTION_DELAY_MS = 100

ExprNumber = int | float | str


def _default_expr_params() -> list[str]:
    # Width/height come first so position expressions can refer to them.
    return [
        "win_width",
        "win_height",
        "win_col",
        "win_row",
        "preview_width",
        "preview_height",
        "preview_col",
        "preview_row",
    ]


@dataclass
class UiParams:
    """Options consumed by :class:`ffpicker.ui.ListUi`."""

    auto_action: dict[str, Any] = field(default_factory=dict)
    auto_resize: bool = False
    cursor_pos: int = 0
    display_source_name: str = "no"
    display_tree: bool = False
    expr_params: list[str] = field(default_factory=_default_expr_params)
    filter_update_max: int = 0
    filter_update_time: int = 0
    floating_border: str | list[str] = "none"
    floating_title: str = ""
    floating_title_pos: str = "left"
    ignore_empty: bool = False
    immediate_action: str = ""
    max_display_items: int = 1000
    max_highlight_items: int = 100
    on_preview: Callable[..., None] | None = None
    preview_col: ExprNumber = 0
    preview_floating: bool = False
    preview_floating_border: str | list[str] = "none"
    preview_floating_title: str = ""
    preview_floating_title_pos: str = "left"
    preview_floating_zindex: int = 100
    preview_height: ExprNumber = 10
    preview_row: ExprNumber = 0
    preview_split: str = "horizontal"
    preview_width: ExprNumber = 80
    prompt: str = ""
    reversed: bool = False
    split: str = "horizontal"
    split_direction: str = "botright"
    start_auto_action: bool = False
    statusline: bool = True
    win_col: ExprNumber = "(columns - win_width) // 2"
    win_height: ExprNumber = 20
    win_row: ExprNumber = "lines // 2 - 10"
    win_width: ExprNumber = "columns // 2"

    @classmethod
    def from_mapping(cls, data: Mapping[str, object] | None) -> UiParams:
        """Build params from a mapping with camelCase or snake_case keys.

        Unknown keys are ignored so stale config entries never break startup.
        """
        return cls().merged(data)

    def merged(self, data: Mapping[str, object] | None) -> UiParams:
        """Return a copy with values from ``data`` applied on top."""
        if not data:
            return replace(self)
        known = {f.name for f in fields(self)}
        changes: dict[str, object] = {}
        for key, value in data.items():
            name = snake_case(str(key))
            if name in known:
                changes[name] = value
        return replace(self, **changes)

    def as_dict(self) -> dict[str, object]:
        """Return a JSON-friendly mapping of option values."""
        data = asdict(self)
        data.pop("on_preview", None)
        return data

    def auto_action_settings(self) -> dict[str, Any] | None:
        """Return auto-action settings with defaults, or ``None`` when unset."""
        if "name" not in self.auto_action:
            return None
        settings: dict[str, Any] = {"delay": DEFAULT_AUTO_ACTION_DELAY_MS, "params": {}, "sync": True}
        settings.update(self.auto_action)
        return settings


_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")


def snake_case(name: str) -> str:
    """Convert ``maxDisplayItems`` style names to ``max_display_items``."""
    return _CAMEL_BOUNDARY_RE.sub(r"_\1", name).lower()


def default_param(name: str) -> object:
    """Return the documented default value for option ``name``."""
    return getattr(UiParams(), name)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is ignored to keep runtime behavior
    non-fatal when config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


def load_ui_params(overrides: Mapping[str, object] | None = None) -> UiParams:
    """Return defaults, then the ``ui_params`` config object, then ``overrides``."""
    stored = load_config().get("ui_params")
    params = UiParams.from_mapping(stored if isinstance(stored, dict) else None)
    return params.merged(overrides)


def save_ui_params(values: Mapping[str, object]) -> None:
    """Persist option overrides under the ``ui_params`` config key."""
    known = {f.name for f in fields(UiParams)} - {"on_preview"}
    config = load_config()
    stored = config.get("ui_params")
    merged: dict[str, object] = dict(stored) if isinstance(stored, dict) else {}
    for key, value in values.items():
        name = snake_case(str(key))
        if name in known:
            merged[name] = value
    config["ui_params"] = merged
    save_config(config)
