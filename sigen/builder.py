"""Generates proxy classes exposing a whitelisted subset of a template object."""

from __future__ import annotations

import ast
import importlib
import inspect
import re
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, List, Mapping, NamedTuple, Optional, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .evaluator import EVALUATORS, ExpressionEvaluator
from .exceptions import InvalidArgumentError, RequirementError
from .loader import load_class, resolve_class
from .logging import get_logger
from .models import ClassDescriptor, MethodDescriptor, ParameterDescriptor
from .reflection import is_template_object, reflect_class

if TYPE_CHECKING:
    from .config import SIGenConfig

ParentClass = Union[str, type]


class InterfaceSource(NamedTuple):
    """Fully qualified class name and module source of a generated proxy."""

    name: str
    source: str


class InterfaceBuilder:
    """Builds proxy classes from the docstring annotations of a template object.

    A class is exposed unless its docstring carries ``@expose ##<expr>##``
    evaluating false. A public method is exposed only when its docstring
    carries ``@expose ##<expr>##`` evaluating true. Expressions, and any
    ``##<expr>##`` placeholder in the generated text, are evaluated against
    the builder's context.
    """

    EXPOSE_TAG = "expose"
    VARIABLE_FORMAT = "##%s##"
    DEFAULT_PROXY_PARENT_CLASS = "sigen.proxy.SimpleProxy"

    _default_proxy_parent_class: Optional[str] = DEFAULT_PROXY_PARENT_CLASS

    def __init__(
        self,
        context: Mapping[str, Any] | None = None,
        *,
        proxy_parent_class: ParentClass | None = None,
        evaluator: ExpressionEvaluator | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        self.logger = get_logger("builder")
        self.evaluator = evaluator or ExpressionEvaluator()
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = self._create_env(self.templates_dir)
        self._context: Mapping[str, Any] = MappingProxyType({})
        self._proxy_parent_class: Optional[str] = None
        self.set_context({} if context is None else context)
        self.set_proxy_parent_class(proxy_parent_class)

    @classmethod
    def from_config(cls, config: "SIGenConfig") -> "InterfaceBuilder":
        """Create a builder from a loaded ``.sigen.yml`` configuration."""
        return cls(
            config.context,
            proxy_parent_class=config.proxy_parent_class,
            evaluator=EVALUATORS[config.evaluator](),
            templates_dir=config.templates_dir,
        )

    # -- proxy parent class -------------------------------------------------

    @classmethod
    def set_default_proxy_parent_class(cls, classname: ParentClass | None) -> None:
        """Set the process-wide parent class; ``None`` leaves no default configured."""
        if classname is not None:
            cls._validate_parent_proxy_class(classname)
            classname = _class_path(classname) if isinstance(classname, type) else classname
        cls._default_proxy_parent_class = classname

    @classmethod
    def get_default_proxy_parent_class(cls) -> Optional[str]:
        return cls._default_proxy_parent_class

    @classmethod
    def reset_default_proxy_parent_class(cls) -> None:
        """Restore the built-in default parent class."""
        cls._default_proxy_parent_class = cls.DEFAULT_PROXY_PARENT_CLASS

    def set_proxy_parent_class(self, classname: ParentClass | None) -> "InterfaceBuilder":
        """Set the parent class for this builder; ``None`` falls back to the default."""
        if classname is not None:
            self._validate_parent_proxy_class(classname)
            classname = _class_path(classname) if isinstance(classname, type) else classname
        self._proxy_parent_class = classname
        return self

    def get_proxy_parent_class(self) -> Optional[str]:
        return self._proxy_parent_class or self.get_default_proxy_parent_class()

    @staticmethod
    def _validate_parent_proxy_class(classname: ParentClass) -> type:
        """Return the parent class, ensuring it is importable and provides ``call``."""
        if isinstance(classname, type):
            label = _class_path(classname)
            cls = classname if _import_class(label) is classname else None
        else:
            label = classname
            cls = _import_class(classname) if isinstance(classname, str) else None
        if cls is None:
            raise InvalidArgumentError(f"Class '{label}' could not be found")

        if not _provides_call(cls):
            raise InvalidArgumentError(f"Class '{label}' does not have the required method 'call'")
        return cls

    # -- context ------------------------------------------------------------

    def set_context(self, context: Mapping[str, Any]) -> "InterfaceBuilder":
        """Replace the context used for expose expressions and placeholders."""
        if not isinstance(context, Mapping):
            raise InvalidArgumentError("Argument must be a mapping")
        self._context = MappingProxyType(dict(context))
        return self

    def get_context(self) -> Mapping[str, Any]:
        return self._context

    @property
    def context(self) -> Mapping[str, Any]:
        return self._context

    def get_variable_identifier(self) -> str:
        """Return the format used to recognise ``##expr##`` placeholders."""
        return self.VARIABLE_FORMAT

    # -- generation ---------------------------------------------------------

    def generate_interface_class_source(
        self,
        service_template: Any,
        interface_class_name: Any = False,
        namespace_name: Any = False,
    ) -> Union[InterfaceSource, bool]:
        """Return the qualified name and source of the proxy, or False if nothing is exposed."""
        if not is_template_object(service_template):
            raise InvalidArgumentError(f"Argument is not an object: {service_template!r}")

        proxy_parent_class = self.get_proxy_parent_class()
        if not proxy_parent_class:
            raise RequirementError("A proxy parent class is required for class generation")
        parent = self._validate_parent_proxy_class(proxy_parent_class)

        descriptor = reflect_class(service_template)
        class_name = self._generate_class_name(descriptor, interface_class_name)
        namespace = self._generate_namespace_name(descriptor, namespace_name)
        self.logger.debug(
            "Generating %s for %s.%s", class_name, descriptor.module, descriptor.name
        )

        class_body = self._generate_class_body(descriptor, class_name, parent)
        if not class_body:
            return False

        source = self._replace_vars(self._generate_namespace_body(class_body, namespace, parent))
        qualified_name = f"{namespace}.{class_name}" if namespace else class_name
        return InterfaceSource(qualified_name, source)

    def generate_interface_class(
        self,
        service_template: Any,
        interface_class_name: Any = False,
        namespace_name: Any = False,
    ) -> Union[str, bool]:
        """Generate and load the proxy class, returning its fully qualified name."""
        generated = self.generate_interface_class_source(
            service_template, interface_class_name, namespace_name
        )
        if not generated:
            return False
        name, source = generated
        load_class(name, source)
        return name

    def generate_instance(
        self,
        service_template: Any,
        interface_class_name: Any = False,
        namespace_name: Any = False,
    ) -> Any:
        """Generate the proxy class and return an instance wrapping ``service_template``."""
        class_name = self.generate_interface_class(
            service_template, interface_class_name, namespace_name
        )
        if not class_name:
            return False
        return resolve_class(class_name)(service_template)

    # -- expressions --------------------------------------------------------

    def _eval(self, expression: str, produce_result: bool = False) -> Any:
        return self.evaluator.evaluate(expression, produce_result, self._context)

    def _variable_pattern(self) -> str:
        prefix, _, suffix = self.get_variable_identifier().partition("%s")
        return f"{re.escape(prefix)}(.+?){re.escape(suffix)}"

    def _get_expose_expression(self, docstring: Optional[str], defaults_true: bool = False) -> str:
        """Return the expose expression of a docstring, or the literal default."""
        expression = repr(bool(defaults_true))
        pattern = rf"@{re.escape(self.EXPOSE_TAG)}\W*{self._variable_pattern()}"
        match = re.search(pattern, docstring or "", re.IGNORECASE)
        if match and match.group(1):
            expression = match.group(1)
        return expression

    def _meets_condition(self, docstring: Optional[str], defaults_true: bool = False) -> bool:
        return bool(self._eval(self._get_expose_expression(docstring, defaults_true), True))

    def _replace_vars(self, source: str) -> str:
        """Substitute every placeholder with the evaluated result of its expression."""
        pattern = re.compile(self._variable_pattern(), re.IGNORECASE)
        matches = [(match.group(0), match.group(1)) for match in pattern.finditer(source)]
        for token, expression in matches:
            value = self._eval(expression, True)
            self.logger.debug("Resolved placeholder %s -> %r", token, value)
            source = source.replace(token, str(value))
        return source

    # -- rendering ----------------------------------------------------------

    def _get_argument_definition(
        self, name: str, with_value: bool = False, value: Any = None, marker: str = ""
    ) -> str:
        definition = f"{marker}{name}"
        if with_value:
            definition += f"={repr(value)}"
        return definition

    def _get_signature_arguments(self, method: MethodDescriptor) -> str:
        """Render the parameter list of the proxy method, defaults included."""
        definitions: List[str] = ["self"]
        previous: Optional[ParameterDescriptor] = None
        for parameter in method.parameters:
            if _is_positional_only(previous) and not _is_positional_only(parameter):
                definitions.append("/")
            if parameter.kind is inspect.Parameter.KEYWORD_ONLY and (
                previous is None or previous.kind < inspect.Parameter.VAR_POSITIONAL
            ):
                definitions.append("*")
            if parameter.has_default:
                _check_literal(method, parameter)
            definitions.append(
                self._get_argument_definition(
                    parameter.name, parameter.has_default, parameter.default, parameter.marker
                )
            )
            previous = parameter
        if _is_positional_only(previous):
            definitions.append("/")
        return ", ".join(definitions)

    def _get_forward_arguments(self, method: MethodDescriptor) -> str:
        """Render the arguments of the ``call`` statement, in declared order."""
        positional = [
            self._get_argument_definition(p.name, marker=p.marker)
            for p in method.parameters
            if not p.is_keyword
        ]
        keywords = [
            f"**{p.name}" if p.marker else f"{p.name!r}: {p.name}"
            for p in method.parameters
            if p.is_keyword
        ]
        arguments = [repr(method.name), f"[{', '.join(positional)}]"]
        if keywords:
            arguments.append(f"{{{', '.join(keywords)}}}")
        return ", ".join(arguments)

    def _generate_method(self, method: MethodDescriptor) -> str:
        return self._render(
            "method.py.j2",
            name=method.name,
            signature=self._get_signature_arguments(method),
            doc=_docstring_literal(method.doc),
            call_arguments=self._get_forward_arguments(method),
        )

    def _generate_method_bodies(self, descriptor: ClassDescriptor) -> List[str]:
        bodies: List[str] = []
        for method in descriptor.methods:
            if not self._meets_condition(method.doc):
                self.logger.debug("Skipping %s.%s: not exposed", descriptor.name, method.name)
                continue
            bodies.append(self._generate_method(method))
        return bodies

    def _generate_class_name(self, descriptor: ClassDescriptor, classname: Any = False) -> str:
        if isinstance(classname, str) and classname:
            return classname
        return f"{descriptor.name}Proxy"

    def _generate_namespace_name(self, descriptor: ClassDescriptor, namespace: Any = False) -> str:
        if namespace is None or namespace == "":
            return ""
        if isinstance(namespace, str):
            return namespace
        return descriptor.module

    def _generate_class_body(
        self, descriptor: ClassDescriptor, interface_class_name: str, parent: type
    ) -> Union[str, bool]:
        if not self._meets_condition(descriptor.doc, True):
            self.logger.debug("Class %s is not exposed", descriptor.name)
            return False

        method_bodies = self._generate_method_bodies(descriptor)
        if not method_bodies:
            self.logger.debug("Class %s has no exposed methods", descriptor.name)
            return False

        return self._render(
            "class.py.j2",
            class_name=interface_class_name,
            parent=parent.__qualname__,
            methods=method_bodies,
        )

    def _generate_namespace_body(self, class_body: str, namespace: str, parent: type) -> str:
        head = parent.__qualname__.split(".")[0]
        return (
            self._render(
                "module.py.j2",
                namespace=repr(namespace) if namespace else "",
                parent_import=f"from {parent.__module__} import {head}",
                class_body=class_body,
            )
            + "\n"
        )

    def _render(self, template_name: str, **values: Any) -> str:
        template = self._env.get_template(template_name)
        return template.render(**values).rstrip("\n")

    def _create_env(self, templates_dir: Path) -> Environment:
        directories = [str(templates_dir)]
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        return Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )


def _class_path(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _import_class(path: str) -> Optional[type]:
    """Import a class by dotted path, allowing nested class names."""
    parts = path.split(".")
    for index in range(len(parts) - 1, 0, -1):
        try:
            target: Any = importlib.import_module(".".join(parts[:index]))
        except ImportError:
            continue
        for attribute in parts[index:]:
            target = getattr(target, attribute, None)
        return target if isinstance(target, type) else None
    return None


def _provides_call(cls: type) -> bool:
    call = getattr(cls, "call", None)
    if not callable(call):
        return False
    try:
        # unbound: instance, method name, arguments
        inspect.signature(call).bind(None, "method", [])
    except (TypeError, ValueError):
        return False
    return True


def _is_positional_only(parameter: Optional[ParameterDescriptor]) -> bool:
    return parameter is not None and parameter.kind is inspect.Parameter.POSITIONAL_ONLY


def _check_literal(method: MethodDescriptor, parameter: ParameterDescriptor) -> None:
    try:
        restored = ast.literal_eval(repr(parameter.default))
    except (SyntaxError, ValueError):
        restored = inspect.Parameter.empty
    if type(restored) is not type(parameter.default) or restored != parameter.default:
        raise InvalidArgumentError(
            f"Default value of parameter '{parameter.name}' of method '{method.name}' "
            "cannot be written as a literal"
        )


def _docstring_literal(doc: Optional[str]) -> Optional[str]:
    if not doc:
        return None
    if '"""' in doc or "\\" in doc or doc.endswith('"'):
        return repr(doc)
    return f'"""{doc}"""'


__all__ = ["InterfaceBuilder", "InterfaceSource"]
