# viewbind/errors.py
"""
viewbind Error Types

Structured error codes and the exception hierarchy shared by the binder
generator (build time) and the helpers called by generated binders
(run time).

Error Hierarchy:
────────────────
    ViewBindError (base)
    ├── DescriptionError        - Invalid binding description input
    ├── TypeResolutionError     - Unparsable textual type name
    ├── CodeGenError            - Binder synthesis / rendering failures
    ├── RegistryError           - Defective listener catalog (fatal)
    └── BindingRuntimeError     - Raised while a generated binder runs
        ├── ViewNotFoundError
        ├── ViewCastError
        ├── ParamCastError
        ├── BindingsAlreadyClearedError
        └── LayoutUnavailableError

Error Codes:
────────────
Each error carries a code of the form VBND-NNNN:
  - 1000-1999: Description (front end input) errors
  - 2000-2999: Type resolution errors
  - 4000-4999: Code generation errors
  - 5000-5999: Runtime errors
  - 9000-9999: Internal / catalog errors
"""

from __future__ import annotations

from enum import Enum, unique
from typing import Any, Optional

__all__ = [
    "ErrorPhase",
    "ErrorCode",
    "ErrorCodes",
    "ViewBindError",
    "DescriptionError",
    "TypeResolutionError",
    "CodeGenError",
    "RegistryError",
    "BindingRuntimeError",
    "ViewNotFoundError",
    "ViewCastError",
    "ParamCastError",
    "BindingsAlreadyClearedError",
    "LayoutUnavailableError",
]


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES
# ═══════════════════════════════════════════════════════════════════════════════

@unique
class ErrorPhase(Enum):
    """Pipeline phase an error belongs to."""

    DESCRIPTION = "description"
    TYPES = "types"
    CODEGEN = "codegen"
    RUNTIME = "runtime"
    INTERNAL = "internal"


class ErrorCode:
    """
    Structured error code.

    Codes follow the pattern VBND-NNNN; the number range identifies the
    phase (see module docstring).
    """

    __slots__ = ("prefix", "number", "phase", "title")

    def __init__(
        self,
        number: int,
        phase: ErrorPhase,
        title: str,
        prefix: str = "VBND",
    ) -> None:
        self.prefix = prefix
        self.number = number
        self.phase = phase
        self.title = title

    @property
    def code(self) -> str:
        """Get the full error code string."""
        return f"{self.prefix}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.phase.name})"

    def __hash__(self) -> int:
        return hash((self.prefix, self.number))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.prefix == other.prefix and self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


class ErrorCodes:
    """Predefined error codes."""

    # Description errors (1000-1999)
    MALFORMED_DESCRIPTION = ErrorCode(1000, ErrorPhase.DESCRIPTION, "malformed description")
    UNKNOWN_LISTENER = ErrorCode(1001, ErrorPhase.DESCRIPTION, "unknown listener")
    UNKNOWN_CALLBACK = ErrorCode(1002, ErrorPhase.DESCRIPTION, "unknown listener callback")
    DUPLICATE_LISTENER_CLAIM = ErrorCode(1003, ErrorPhase.DESCRIPTION, "duplicate listener claim")
    UNKNOWN_PARENT = ErrorCode(1004, ErrorPhase.DESCRIPTION, "unknown parent type")
    CYCLIC_PARENT = ErrorCode(1005, ErrorPhase.DESCRIPTION, "cyclic parent chain")
    INVALID_CONFIG = ErrorCode(1006, ErrorPhase.DESCRIPTION, "invalid configuration")

    # Type resolution errors (2000-2999)
    UNRESOLVABLE_TYPE = ErrorCode(2000, ErrorPhase.TYPES, "unresolvable type name")

    # Code generation errors (4000-4999)
    UNSUPPORTED_NODE = ErrorCode(4000, ErrorPhase.CODEGEN, "unsupported node")
    UNBALANCED_CONTROL_FLOW = ErrorCode(4001, ErrorPhase.CODEGEN, "unbalanced control flow")

    # Runtime errors (5000-5999)
    VIEW_NOT_FOUND = ErrorCode(5000, ErrorPhase.RUNTIME, "view not found")
    VIEW_CAST = ErrorCode(5001, ErrorPhase.RUNTIME, "view type mismatch")
    PARAM_CAST = ErrorCode(5002, ErrorPhase.RUNTIME, "listener parameter type mismatch")
    ALREADY_CLEARED = ErrorCode(5003, ErrorPhase.RUNTIME, "bindings already cleared")
    LAYOUT_UNAVAILABLE = ErrorCode(5004, ErrorPhase.RUNTIME, "layout unavailable")

    # Internal errors (9000-9999)
    INTERNAL_ERROR = ErrorCode(9000, ErrorPhase.INTERNAL, "internal error")
    REGISTRY_DEFECT = ErrorCode(9001, ErrorPhase.INTERNAL, "listener registry defect")


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTION CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class ViewBindError(Exception):
    """
    Base exception for all viewbind errors.

    Carries an :class:`ErrorCode` and an optional hint so the command line
    can print a uniform one-line diagnostic.
    """

    default_code: ErrorCode = ErrorCodes.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        hint: str = "",
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.hint = hint
        self.cause = cause

    def with_hint(self, hint: str) -> "ViewBindError":
        """Attach a hint to this error."""
        self.hint = hint
        return self

    def format(self) -> str:
        """Format as ``error[VBND-NNNN]: message (hint: ...)``."""
        text = f"error[{self.code}]: {self.message}"
        if self.hint:
            text += f" (hint: {self.hint})"
        return text


# ───────────────────────────────────────────────────────────────────────────────
# BUILD-TIME ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class DescriptionError(ViewBindError):
    """Binding description rejected by the front end."""

    default_code = ErrorCodes.MALFORMED_DESCRIPTION

    def __init__(self, message: str, target: str = "", **kwargs: Any) -> None:
        if target:
            message = f"{target}: {message}"
        super().__init__(message, **kwargs)
        self.target = target


class TypeResolutionError(ViewBindError):
    """A textual type name could not be resolved to a structured type."""

    default_code = ErrorCodes.UNRESOLVABLE_TYPE

    def __init__(self, type_name: str, reason: str = "", **kwargs: Any) -> None:
        message = f"Cannot resolve type name {type_name!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message, **kwargs)
        self.type_name = type_name


class CodeGenError(ViewBindError):
    """Binder synthesis or rendering failed."""

    default_code = ErrorCodes.UNSUPPORTED_NODE


class RegistryError(ViewBindError):
    """
    The static listener catalog is defective.

    Not user-recoverable: a correctly populated registry never raises this.
    """

    default_code = ErrorCodes.REGISTRY_DEFECT


# ───────────────────────────────────────────────────────────────────────────────
# RUNTIME ERRORS (raised from generated binders)
# ───────────────────────────────────────────────────────────────────────────────

class BindingRuntimeError(ViewBindError):
    """Base class for failures raised while a generated binder runs."""


class ViewNotFoundError(BindingRuntimeError):
    """A required element was absent from the element tree."""

    default_code = ErrorCodes.VIEW_NOT_FOUND

    def __init__(self, view_id: int, who: str, **kwargs: Any) -> None:
        super().__init__(
            f"Required view with ID {view_id} for {who} was not found. "
            "If this view is optional mark the binding as not required.",
            **kwargs,
        )
        self.view_id = view_id
        self.who = who


class ViewCastError(BindingRuntimeError):
    """A looked-up element is not an instance of the declared type."""

    default_code = ErrorCodes.VIEW_CAST

    def __init__(
        self,
        view_id: int,
        who: str,
        expected: type,
        actual: type,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"View with ID {view_id} for {who} was of the wrong type. "
            f"Expected {expected.__name__} but was {actual.__name__}.",
            **kwargs,
        )
        self.view_id = view_id
        self.who = who
        self.expected = expected
        self.actual = actual


class ParamCastError(BindingRuntimeError):
    """A listener callback argument does not fit the target method parameter."""

    default_code = ErrorCodes.PARAM_CAST

    def __init__(
        self,
        from_method: str,
        from_position: int,
        to_method: str,
        to_position: int,
        expected: type,
        actual: type,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"Parameter #{from_position + 1} of method '{from_method}' was of the "
            f"wrong type for parameter #{to_position + 1} of method '{to_method}'. "
            f"Expected {expected.__name__} but was {actual.__name__}.",
            **kwargs,
        )
        self.from_method = from_method
        self.from_position = from_position
        self.to_method = to_method
        self.to_position = to_position


class BindingsAlreadyClearedError(BindingRuntimeError):
    """``unbind()`` was called on a binder that was already torn down."""

    default_code = ErrorCodes.ALREADY_CLEARED


class LayoutUnavailableError(BindingRuntimeError):
    """The root element of a root-owning binder cannot be handed out."""

    default_code = ErrorCodes.LAYOUT_UNAVAILABLE
