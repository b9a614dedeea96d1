"""Metadata queries over command classes.

These helpers answer the questions the command model asks of a class: its
declaration, its output-type declarations, its public members and which of
them are parameters, its nested parameter bags, and whether it computes
dynamic parameters.
"""

from __future__ import annotations

import ast
import inspect
import logging
import sys
from functools import cached_property
from typing import Annotated, Any, ForwardRef, Protocol, get_args, get_origin
from collections.abc import Iterator

from cmdletdoc.domain.errors import UnresolvableMemberError
from cmdletdoc.metadata import (
    CMDLET_ATTRIBUTE_KEY,
    OUTPUT_TYPE_ATTRIBUTE_KEY,
    CmdletAttribute,
    DynamicParameters,
    OutputTypeAttribute,
    ParameterAttribute,
    TypeReference,
)

LOGGER = logging.getLogger(__name__)


class _NoDefault:
    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


class MemberInfo:
    """A public instance member (annotated field or property) of a class.

    The annotation is kept raw until it is needed. Whether a member can be a
    parameter is decided from the raw form, so annotations naming
    ``TYPE_CHECKING``-only imports are never evaluated unless they wrap a
    parameter attribute.
    """

    def __init__(
        self,
        name: str,
        declaring_type: type,
        annotation: Any,
        *,
        kind: str = "field",
        default: Any = NO_DEFAULT,
    ) -> None:
        self.name = name
        self.declaring_type = declaring_type
        self.annotation = annotation.__forward_arg__ if isinstance(annotation, ForwardRef) else annotation
        self.kind = kind
        self.default = default

    @property
    def is_annotated(self) -> bool:
        """Whether the raw annotation is an ``Annotated[...]`` form."""
        if isinstance(self.annotation, str):
            return _parse_annotated(self.annotation) is not None
        return get_origin(self.annotation) is Annotated

    @property
    def names_parameter_attribute(self) -> bool:
        """Whether the raw ``Annotated`` metadata holds or names a parameter
        attribute."""
        if isinstance(self.annotation, str):
            node = _parse_annotated(self.annotation)
            if node is None:
                return False
            elements = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]
            return any(
                _node_name(child) == ParameterAttribute.__name__
                for element in elements[1:]
                for child in ast.walk(element)
            )
        if get_origin(self.annotation) is Annotated:
            return any(isinstance(attr, ParameterAttribute) for attr in get_args(self.annotation)[1:])
        return False

    @cached_property
    def _annotation(self) -> Any:
        # Annotated bases may still be forward references here
        return self._evaluate(self.annotation)

    @property
    def attributes(self) -> tuple[Any, ...]:
        annotation = self._annotation
        if get_origin(annotation) is Annotated:
            return tuple(get_args(annotation)[1:])
        return ()

    @cached_property
    def member_type(self) -> Any:
        annotation = self._annotation
        if get_origin(annotation) is Annotated:
            return self._evaluate(get_args(annotation)[0])
        return annotation

    @property
    def resolved(self) -> tuple[Any, tuple[Any, ...]]:
        """``(member_type, metadata)`` with ``Annotated`` metadata split
        off."""
        return self.member_type, self.attributes

    def _evaluate(self, annotation: Any) -> Any:
        if isinstance(annotation, ForwardRef):
            annotation = annotation.__forward_arg__
        if not isinstance(annotation, str):
            return annotation
        module = sys.modules.get(self.declaring_type.__module__)
        globalns = dict(vars(module)) if module is not None else {}
        localns = dict(vars(self.declaring_type))
        try:
            return eval(annotation, globalns, localns)  # noqa: S307
        except Exception as exc:
            raise UnresolvableMemberError(
                f"Cannot resolve type {annotation!r} of member "
                f"{self.declaring_type.__qualname__}.{self.name}: {exc}"
            ) from exc

    def __repr__(self) -> str:
        return f"MemberInfo({self.declaring_type.__qualname__}.{self.name}, kind={self.kind})"


def _node_name(node: ast.AST) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _parse_annotated(text: str) -> ast.Subscript | None:
    try:
        node = ast.parse(text, mode="eval").body
    except SyntaxError:
        return None
    if isinstance(node, ast.Subscript) and _node_name(node.value) == "Annotated":
        return node
    return None


class InstanceFactory(Protocol):
    """Creates a live instance of a command class."""

    def __call__(self, command_type: type) -> object:  # pragma: no cover
        ...


def construct_default_instance(command_type: type) -> object:
    """Instantiate ``command_type`` without arguments."""
    return command_type()


def full_type_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def get_command_declaration(cls: type) -> CmdletAttribute | None:
    declaration = vars(cls).get(CMDLET_ATTRIBUTE_KEY)
    return declaration if isinstance(declaration, CmdletAttribute) else None


def get_output_type_declarations(cls: type) -> tuple[OutputTypeAttribute, ...]:
    declared = vars(cls).get(OUTPUT_TYPE_ATTRIBUTE_KEY, ())
    return tuple(attr for attr in declared if isinstance(attr, OutputTypeAttribute))


def resolve_type_reference(reference: TypeReference) -> type | None:
    return reference.type


def implements_dynamic_parameters(cls: type) -> bool:
    return issubclass(cls, DynamicParameters)


def _get_annotations(obj: Any) -> dict[str, Any]:
    if sys.version_info >= (3, 14):
        import annotationlib

        # undefined names come back as forward references instead of raising
        return dict(annotationlib.get_annotations(obj, format=annotationlib.Format.FORWARDREF))
    return dict(inspect.get_annotations(obj))


def _own_annotations(klass: type) -> dict[str, Any]:
    try:
        return _get_annotations(klass)
    except NameError as exc:
        raise UnresolvableMemberError(f"Cannot resolve annotations of {klass.__qualname__}: {exc}") from exc


def _property_annotation(prop: property) -> Any:
    if prop.fget is None:
        return Any
    try:
        return _get_annotations(prop.fget).get("return", Any)
    except NameError as exc:
        raise UnresolvableMemberError(f"Cannot resolve return annotation of {prop.fget.__qualname__}: {exc}") from exc


def iter_public_members(cls: type) -> Iterator[MemberInfo]:
    """Yield public instance members across the MRO, most-derived first.

    Within one class, annotated fields come first (declaration order), then
    properties. A name is reported once, from the first class defining it.
    """
    seen: set[str] = set()
    for klass in cls.__mro__:
        if klass is object:
            continue
        namespace = vars(klass)
        for name, annotation in _own_annotations(klass).items():
            if name.startswith("_") or name in seen:
                continue
            seen.add(name)
            yield MemberInfo(name, klass, annotation, kind="field", default=namespace.get(name, NO_DEFAULT))
        for name, value in namespace.items():
            if name.startswith("_") or name in seen or not isinstance(value, property):
                continue
            seen.add(name)
            yield MemberInfo(name, klass, _property_annotation(value), kind="property")


def has_parameter_attribute(member: MemberInfo) -> bool:
    """Whether ``member`` carries a parameter attribute.

    Only ``Annotated`` members are evaluated. A member whose annotation
    cannot be evaluated is an error only when its metadata names a parameter
    attribute.
    """
    if not member.is_annotated:
        return False
    try:
        attributes = member.attributes
    except UnresolvableMemberError:
        if member.names_parameter_attribute:
            raise
        LOGGER.debug("Skipping %r, its annotation cannot be evaluated", member)
        return False
    return any(isinstance(attr, ParameterAttribute) for attr in attributes)


def iter_parameter_members(cls: type) -> Iterator[MemberInfo]:
    """Public instance members of ``cls`` carrying a parameter attribute."""
    for member in iter_public_members(cls):
        if has_parameter_attribute(member):
            yield member


def iter_nested_types(cls: type) -> Iterator[type]:
    """Classes declared inside ``cls`` (any visibility), in declaration
    order."""
    for name, value in vars(cls).items():
        if isinstance(value, type) and value.__qualname__ == f"{cls.__qualname__}.{name}":
            yield value


__all__ = [
    "InstanceFactory",
    "MemberInfo",
    "NO_DEFAULT",
    "construct_default_instance",
    "full_type_name",
    "get_command_declaration",
    "get_output_type_declarations",
    "has_parameter_attribute",
    "implements_dynamic_parameters",
    "iter_nested_types",
    "iter_parameter_members",
    "iter_public_members",
    "resolve_type_reference",
]
