"""Reflection over the public surface of a template object."""

from __future__ import annotations

import inspect
from typing import Any, Iterator, List, Set, Tuple

from .models import ClassDescriptor, MethodDescriptor, ParameterDescriptor

_NON_OBJECT_TYPES = (
    type,
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    bytearray,
    list,
    tuple,
    dict,
    set,
    frozenset,
)


def is_template_object(value: Any) -> bool:
    """Return True for values that can be wrapped by a proxy."""
    return value is not None and not isinstance(value, _NON_OBJECT_TYPES)


def reflect_class(template: Any) -> ClassDescriptor:
    """Describe the class of ``template`` and all of its public methods."""
    cls = type(template)
    methods = [describe_method(name, function) for name, function in _public_functions(cls)]
    return ClassDescriptor(
        name=cls.__name__,
        module=cls.__module__,
        doc=cls.__doc__,
        methods=methods,
    )


def describe_method(name: str, function: Any) -> MethodDescriptor:
    """Build a descriptor for ``function`` as bound on an instance."""
    parameters: List[ParameterDescriptor] = []
    for index, parameter in enumerate(inspect.signature(function).parameters.values()):
        if index == 0 and parameter.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            # bound instance
            continue
        parameters.append(
            ParameterDescriptor(name=parameter.name, kind=parameter.kind, default=parameter.default)
        )
    return MethodDescriptor(name=name, doc=function.__doc__, parameters=parameters)


def _public_functions(cls: type) -> Iterator[Tuple[str, Any]]:
    # Own class first, then bases in MRO order; overridden names are reported once.
    seen: Set[str] = set()
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, attribute in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if name.startswith("_") or not inspect.isfunction(attribute):
                continue
            yield name, attribute


__all__ = ["describe_method", "is_template_object", "reflect_class"]
