"""Merge the per-table event columns into one event universe."""

from __future__ import annotations

from collections.abc import Iterable


def merge_event_names(*axes: Iterable[str]) -> list[str]:
    """Union of all event names, in first-seen order across *axes*."""
    merged: dict[str, None] = {}
    for axis in axes:
        for name in axis:
            merged.setdefault(name, None)
    return list(merged)
