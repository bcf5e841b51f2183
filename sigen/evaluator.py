"""Evaluation of caller supplied expressions against a named context."""

from __future__ import annotations

import ast
import inspect
import warnings
from typing import Any, Dict, Mapping, Optional

from .exceptions import EvalError
from .logging import get_logger

RESULT_SLOT = "__sigen_result__"

_SHARED_NAMESPACE: Dict[str, Any] = {"__name__": "sigen.expressions"}


class ExpressionEvaluator:
    """Runs Python code fragments with every context entry bound as a variable.

    Fragments are executed as statements. Functions, classes and modules a
    fragment defines are kept in :attr:`namespace` and stay visible to later
    evaluations; plain variable assignments stay local to the fragment. All
    evaluators share one namespace unless given their own.
    """

    def __init__(self, namespace: Optional[Dict[str, Any]] = None) -> None:
        self.namespace = _SHARED_NAMESPACE if namespace is None else namespace
        self.logger = get_logger("evaluator")

    @staticmethod
    def format_expression(expression: str, produce_result: bool) -> str:
        """Wrap ``expression`` as the statement that is actually executed."""
        if produce_result:
            return f"{RESULT_SLOT} = {expression}"
        return expression

    def evaluate(
        self,
        expression: str,
        produce_result: bool = False,
        context: Mapping[str, Any] | None = None,
    ) -> Any:
        """Execute ``expression`` and return its value, or ``True`` without ``produce_result``."""
        context = context or {}
        statement = self.format_expression(expression, produce_result)
        try:
            code = compile(statement, "<sigen-expression>", "exec")
        except (SyntaxError, ValueError) as exc:
            raise EvalError(f'Parse error in expression "{statement}"', expression) from exc

        scope: Dict[str, Any] = dict(self.namespace)
        scope.update(context)
        scope[RESULT_SLOT] = True

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            warnings.simplefilter("ignore", DeprecationWarning)
            warnings.simplefilter("ignore", PendingDeprecationWarning)
            try:
                exec(code, scope)
            except Exception as exc:
                raise EvalError(str(exc) or type(exc).__name__, expression) from exc

        result = scope.pop(RESULT_SLOT)
        self._publish(scope, context)
        self.logger.debug("Evaluated %r -> %r", expression, result)
        return result

    def reset(self) -> None:
        """Forget every name defined by previous evaluations."""
        name = self.namespace.get("__name__", "sigen.expressions")
        self.namespace.clear()
        self.namespace["__name__"] = name

    def _publish(self, scope: Dict[str, Any], context: Mapping[str, Any]) -> None:
        for name, value in scope.items():
            if name == "__builtins__" or name in context:
                continue
            if not (inspect.isfunction(value) or inspect.isclass(value) or inspect.ismodule(value)):
                continue
            self.namespace[name] = value


_ALLOWED_NODES = (
    ast.Expression,
    ast.BoolOp,
    ast.And,
    ast.Or,
    ast.UnaryOp,
    ast.Not,
    ast.UAdd,
    ast.USub,
    ast.BinOp,
    ast.Add,
    ast.Sub,
    ast.Mult,
    ast.Div,
    ast.FloorDiv,
    ast.Mod,
    ast.Pow,
    ast.Compare,
    ast.Eq,
    ast.NotEq,
    ast.Lt,
    ast.LtE,
    ast.Gt,
    ast.GtE,
    ast.In,
    ast.NotIn,
    ast.Is,
    ast.IsNot,
    ast.IfExp,
    ast.Constant,
    ast.Name,
    ast.Load,
    ast.Tuple,
    ast.List,
    ast.Set,
    ast.Dict,
    ast.Subscript,
    ast.Slice,
    ast.Attribute,
)


class RestrictedEvaluator(ExpressionEvaluator):
    """Evaluates a single expression limited to boolean algebra over context values.

    Only literals, context names, arithmetic, comparisons, conditional
    expressions, subscripts and public attribute reads are accepted. Nothing
    the expression does can define new names.
    """

    def __init__(self) -> None:
        super().__init__(namespace={"__name__": "sigen.restricted"})

    def evaluate(
        self,
        expression: str,
        produce_result: bool = False,
        context: Mapping[str, Any] | None = None,
    ) -> Any:
        try:
            tree = ast.parse(expression.strip(), mode="eval")
        except (SyntaxError, ValueError) as exc:
            raise EvalError(f'Parse error in expression "{expression}"', expression) from exc
        self._check(tree, expression)

        scope: Dict[str, Any] = {"__builtins__": {}}
        scope.update(context or {})
        try:
            result = eval(compile(tree, "<sigen-restricted>", "eval"), scope)
        except Exception as exc:
            raise EvalError(str(exc) or type(exc).__name__, expression) from exc

        self.logger.debug("Evaluated restricted %r -> %r", expression, result)
        return result if produce_result else True

    @staticmethod
    def _check(tree: ast.AST, expression: str) -> None:
        for node in ast.walk(tree):
            if not isinstance(node, _ALLOWED_NODES):
                raise EvalError(
                    f"{type(node).__name__} is not allowed in expression \"{expression}\"",
                    expression,
                )
            if isinstance(node, ast.Attribute) and node.attr.startswith("_"):
                raise EvalError(
                    f"Access to private attribute '{node.attr}' is not allowed",
                    expression,
                )
            if isinstance(node, ast.Name) and node.id.startswith("__"):
                raise EvalError(f"Access to name '{node.id}' is not allowed", expression)


EVALUATORS = {
    "python": ExpressionEvaluator,
    "restricted": RestrictedEvaluator,
}


__all__ = ["EVALUATORS", "ExpressionEvaluator", "RESULT_SLOT", "RestrictedEvaluator"]
