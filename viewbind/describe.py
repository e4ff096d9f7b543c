"""
viewbind/describe.py
====================

Human-readable phrasing of binding lists for diagnostics.
"""

from __future__ import annotations

from typing import Sequence

__all__ = ["as_human_description"]


def as_human_description(bindings: Sequence) -> str:
    """Join binding descriptions as ``"A"``, ``"A and B"`` or ``"A, B, and C"``.

    Each element only needs a ``description`` attribute.
    """
    descriptions = [binding.description for binding in bindings]
    if not descriptions:
        return ""
    if len(descriptions) == 1:
        return descriptions[0]
    if len(descriptions) == 2:
        return f"{descriptions[0]} and {descriptions[1]}"
    return ", ".join(descriptions[:-1]) + ", and " + descriptions[-1]
