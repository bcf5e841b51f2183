"""Runtime generation of proxy classes for annotated service objects."""

from .builder import InterfaceBuilder, InterfaceSource
from .evaluator import ExpressionEvaluator, RestrictedEvaluator
from .exceptions import (
    ConfigError,
    EvalError,
    InvalidArgumentError,
    LoadError,
    RequirementError,
    SIGenError,
)
from .proxy import SimpleProxy

__all__ = [
    "ConfigError",
    "EvalError",
    "ExpressionEvaluator",
    "InterfaceBuilder",
    "InterfaceSource",
    "InvalidArgumentError",
    "LoadError",
    "RequirementError",
    "RestrictedEvaluator",
    "SIGenError",
    "SimpleProxy",
]
