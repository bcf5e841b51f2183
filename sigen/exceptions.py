"""Exception hierarchy for sigen."""

from __future__ import annotations


class SIGenError(RuntimeError):
    """Base class for every error raised by sigen."""


class InvalidArgumentError(SIGenError, ValueError):
    """Raised when a caller passes a malformed value."""


class EvalError(SIGenError):
    """Raised when an expression cannot be evaluated."""

    def __init__(self, message: str, expression: str | None = None) -> None:
        super().__init__(message)
        self.expression = expression


class RequirementError(SIGenError):
    """Raised when a precondition for class generation is not met."""


class LoadError(SIGenError):
    """Raised when a generated class cannot be registered."""


class ConfigError(SIGenError):
    """Raised when the configuration file cannot be parsed."""


__all__ = [
    "ConfigError",
    "EvalError",
    "InvalidArgumentError",
    "LoadError",
    "RequirementError",
    "SIGenError",
]
