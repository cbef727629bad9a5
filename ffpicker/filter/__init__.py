"""Live filter-input coordination."""

from __future__ import annotations

from .debounce import RedrawDebouncer

__all__ = ["RedrawDebouncer"]
