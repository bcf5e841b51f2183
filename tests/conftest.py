from __future__ import annotations

import re
import sys
from typing import Iterator

import pytest

from sigen.builder import InterfaceBuilder
from sigen.evaluator import ExpressionEvaluator


@pytest.fixture(autouse=True)
def _restore_default_proxy_parent() -> Iterator[None]:
    """Keep the process-wide default parent class isolated between tests."""
    yield
    InterfaceBuilder.reset_default_proxy_parent_class()


@pytest.fixture
def evaluator() -> ExpressionEvaluator:
    """Evaluator with a private namespace so defined names do not leak between tests."""
    return ExpressionEvaluator(namespace={})


@pytest.fixture
def builder(evaluator: ExpressionEvaluator) -> InterfaceBuilder:
    return InterfaceBuilder(evaluator=evaluator)


@pytest.fixture
def namespace(request: pytest.FixtureRequest) -> Iterator[str]:
    """Unique module name for generated classes, removed after the test."""
    name = "sigen_test_" + re.sub(r"\W", "_", request.node.name)
    yield name
    sys.modules.pop(name, None)
