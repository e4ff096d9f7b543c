"""
viewbind/unbinder.py
====================

Teardown interface implemented by every generated binder.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

__all__ = ["Unbinder"]


class Unbinder(ABC):
    """Something that can undo the wiring it performed."""

    EMPTY: ClassVar["Unbinder"]

    @abstractmethod
    def unbind(self) -> None:
        """Clear bound fields and detach listeners; fails when called twice."""

    @abstractmethod
    def get_layout(self) -> object:
        """The root element the bindings were resolved against."""


class _EmptyUnbinder(Unbinder):
    def unbind(self) -> None:
        pass

    def get_layout(self) -> object:
        return None

    def __repr__(self) -> str:
        return "Unbinder.EMPTY"


Unbinder.EMPTY = _EmptyUnbinder()
