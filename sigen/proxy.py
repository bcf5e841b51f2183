"""Base class for generated proxy classes."""

from __future__ import annotations

from abc import ABC
from typing import Any, Dict, Mapping, Sequence, Tuple

from .exceptions import InvalidArgumentError
from .reflection import is_template_object


class SimpleProxy(ABC):
    """Forwards method calls to a wrapped service template.

    Generated classes extend this and route every exposed method through
    :meth:`call`. Subclasses may override :meth:`pre_process` and
    :meth:`post_process` to rewrite invocations and results.
    """

    def __init__(self, service_template: Any) -> None:
        if not is_template_object(service_template):
            raise InvalidArgumentError("Argument must be an object")
        self._service_template = service_template

    def pre_process(
        self, method: str, arguments: Sequence[Any], keywords: Mapping[str, Any]
    ) -> Tuple[str, Sequence[Any], Mapping[str, Any]]:
        """Return the method name and arguments used for the actual invocation."""
        return method, arguments, keywords

    def post_process(self, method: str, result: Any = None) -> Any:
        """Return the value handed back to the caller of ``method``."""
        return result

    def call(
        self,
        method: str,
        arguments: Sequence[Any] = (),
        keywords: Dict[str, Any] | None = None,
    ) -> Any:
        """Invoke ``method`` on the service template."""
        processed_method, processed_arguments, processed_keywords = self.pre_process(
            method, list(arguments), dict(keywords or {})
        )
        target = getattr(self._service_template, processed_method)
        result = target(*processed_arguments, **processed_keywords)
        return self.post_process(method, result)


__all__ = ["SimpleProxy"]
