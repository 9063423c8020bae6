"""Viewport-aware lint scheduling."""

from __future__ import annotations

from .annotations import Annotation, is_visible, select_targets
from .scheduler import LintScheduler, is_ignored

__all__ = ["Annotation", "LintScheduler", "is_ignored", "is_visible", "select_targets"]
