"""
viewbind/config.py
==================

Generation settings for the binder synthesizer.

The defaults describe an Android-style UI object model; a project that
binds against a different element tree points ``view_type`` and friends
at its own classes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, List, Mapping, Union

from viewbind.errors import DescriptionError, ErrorCodes

__all__ = ["BinderConfig", "DEFAULT_FILE_COMMENT"]

DEFAULT_FILE_COMMENT = "Generated code from viewbind. Do not modify!"


@dataclass(frozen=True)
class BinderConfig:
    """Tuning knobs for binder synthesis and rendering."""

    view_type: str = "android.view.View"
    layout_inflater_type: str = "android.view.LayoutInflater"
    view_group_type: str = "android.view.ViewGroup"
    binding_suffix: str = "_ViewBinding"
    file_comment: str = DEFAULT_FILE_COMMENT
    indent: str = "    "

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if "." not in self.view_type:
            warnings.append("view_type should be a package-qualified class name")
        if not self.binding_suffix:
            warnings.append("binding_suffix must not be empty")
        if not self.indent or self.indent.strip():
            warnings.append("indent must be non-empty whitespace")
        return warnings

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BinderConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise DescriptionError(
                f"Unknown configuration key(s): {', '.join(unknown)}",
                code=ErrorCodes.INVALID_CONFIG,
            )
        for key, value in data.items():
            if not isinstance(value, str):
                raise DescriptionError(
                    f"Configuration key {key!r} must be a string",
                    code=ErrorCodes.INVALID_CONFIG,
                )
        return cls(**dict(data))

    @classmethod
    def load(cls, path: Union[str, Path]) -> "BinderConfig":
        """Load a config from a JSON file."""
        text = Path(path).read_text(encoding="utf-8")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DescriptionError(
                f"Configuration file {path} is not valid JSON: {exc}",
                code=ErrorCodes.INVALID_CONFIG,
                cause=exc,
            ) from exc
        if not isinstance(data, dict):
            raise DescriptionError(
                f"Configuration file {path} must contain a JSON object",
                code=ErrorCodes.INVALID_CONFIG,
            )
        return cls.from_mapping(data)
