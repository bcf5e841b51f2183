"""Compiles generated source text and registers the resulting classes."""

from __future__ import annotations

import importlib
import linecache
import sys
import types
from typing import Any, Dict, Tuple

from .exceptions import LoadError
from .logging import get_logger

GLOBAL_MODULE = "sigen.generated"

logger = get_logger("loader")


def split_name(qualified_name: str) -> Tuple[str, str]:
    """Return ``(module, class)`` for a fully qualified generated class name."""
    module_name, _, class_name = qualified_name.rpartition(".")
    return module_name or GLOBAL_MODULE, class_name


def load_class(qualified_name: str, source: str) -> type:
    """Execute ``source`` and register the class it defines under ``qualified_name``.

    Syntax errors in ``source`` propagate unchanged. Registering a name the
    target module already defines raises :class:`LoadError`.
    """
    module_name, class_name = split_name(qualified_name)
    filename = f"<sigen:{qualified_name}>"
    code = compile(source, filename, "exec")

    module = _target_module(module_name)
    if hasattr(module, class_name):
        raise LoadError(f"Cannot redeclare class '{qualified_name}'")

    scope: Dict[str, Any] = {"__name__": module_name}
    exec(code, scope)
    cls = scope.get(class_name)
    if not isinstance(cls, type):
        raise LoadError(f"Generated source does not define class '{class_name}'")

    linecache.cache[filename] = (len(source), None, source.splitlines(True), filename)
    setattr(module, class_name, cls)
    logger.info("Loaded generated class %s", qualified_name)
    return cls


def resolve_class(qualified_name: str) -> type:
    """Return a class previously registered by :func:`load_class`."""
    module_name, class_name = split_name(qualified_name)
    module = sys.modules.get(module_name)
    cls = getattr(module, class_name, None) if module is not None else None
    if not isinstance(cls, type):
        raise LoadError(f"Class '{qualified_name}' has not been loaded")
    return cls


def _target_module(module_name: str) -> types.ModuleType:
    module = sys.modules.get(module_name)
    if module is not None:
        return module
    try:
        return importlib.import_module(module_name)
    except ImportError:
        module = types.ModuleType(module_name)
        module.__doc__ = "Namespace for generated proxy classes."
        sys.modules[module_name] = module
        logger.debug("Created namespace module %s", module_name)
        return module


__all__ = ["GLOBAL_MODULE", "load_class", "resolve_class", "split_name"]
