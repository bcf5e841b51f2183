"""Descriptors produced by reflecting over a template object."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, List, Optional

_MARKERS = {
    inspect.Parameter.VAR_POSITIONAL: "*",
    inspect.Parameter.VAR_KEYWORD: "**",
}


@dataclass(frozen=True)
class ParameterDescriptor:
    """A single parameter of an exposed method."""

    name: str
    kind: inspect._ParameterKind = inspect.Parameter.POSITIONAL_OR_KEYWORD
    default: Any = inspect.Parameter.empty

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty and not self.marker

    @property
    def marker(self) -> str:
        """Prefix for variadic parameters, which never carry a default."""
        return _MARKERS.get(self.kind, "")

    @property
    def is_keyword(self) -> bool:
        return self.kind in (inspect.Parameter.KEYWORD_ONLY, inspect.Parameter.VAR_KEYWORD)


@dataclass
class MethodDescriptor:
    """Public method selected from the template class."""

    name: str
    doc: Optional[str]
    parameters: List[ParameterDescriptor] = field(default_factory=list)


@dataclass
class ClassDescriptor:
    """Reflected view of the template object's class."""

    name: str
    module: str
    doc: Optional[str]
    methods: List[MethodDescriptor] = field(default_factory=list)
