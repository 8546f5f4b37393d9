"""Compiled property accessors.

A :class:`PropertyAccessor` is built once per target type and caches a
:class:`PropertyDescriptor` for every public instance property. Getters are
``operator.attrgetter`` objects and setters are prebuilt closures, so reading
or writing a property after compilation is a dictionary lookup plus a call.

Supported target types:

* dataclasses (frozen dataclasses compile read-only)
* pydantic models (frozen models compile read-only)
* ``NamedTuple`` classes (always read-only)
* plain classes with annotations and/or ``property`` objects
"""

import dataclasses
import inspect
import logging
import operator
import typing
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from datetime import date, time, timedelta
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from threading import Lock
from typing import Any, ClassVar
from uuid import UUID

from pydantic import BaseModel

from .exceptions import PropertyReadOnlyError, create_property_not_found_error

logger = logging.getLogger(__name__)

Getter = Callable[[Any], Any]
Setter = Callable[[Any, Any], None]

_ACCESSOR_LOCK = Lock()
_ACCESSORS: dict[type, "PropertyAccessor"] = {}


@dataclass(frozen=True)
class PropertyDescriptor:
    """One accessible property of a target type.

    Attributes:
        name: Attribute name on the instance
        declared_type: Resolved type annotation, or ``Any`` when unknown
        getter: Compiled getter
        setter: Compiled setter, ``None`` for read-only properties
    """

    name: str
    declared_type: Any
    getter: Getter
    setter: Setter | None = None

    @property
    def is_read_only(self) -> bool:
        return self.setter is None


def _make_setter(name: str) -> Setter:
    def setter(instance: Any, value: Any) -> None:
        setattr(instance, name, value)

    setter.__name__ = f"set_{name}"
    return setter


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError, AttributeError):
        # Unresolvable forward references; fall back to the raw annotations.
        hints: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            hints.update(inspect.get_annotations(klass))
        return hints


def _is_class_var(hint: Any) -> bool:
    if hint is ClassVar or typing.get_origin(hint) is ClassVar:
        return True
    return isinstance(hint, str) and hint.startswith(("ClassVar", "typing.ClassVar"))


def _is_named_tuple(cls: type) -> bool:
    return issubclass(cls, tuple) and hasattr(cls, "_fields")


def _collect(cls: type) -> list[PropertyDescriptor]:
    hints = _type_hints(cls)
    descriptors: list[PropertyDescriptor] = []

    if dataclasses.is_dataclass(cls):
        frozen = cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
        for f in dataclasses.fields(cls):
            if f.name.startswith("_"):
                continue
            descriptors.append(
                PropertyDescriptor(
                    name=f.name,
                    declared_type=hints.get(f.name, Any),
                    getter=operator.attrgetter(f.name),
                    setter=None if frozen else _make_setter(f.name),
                )
            )
        return descriptors

    if issubclass(cls, BaseModel):
        frozen = bool(cls.model_config.get("frozen", False))
        for name, field_info in cls.model_fields.items():
            if name.startswith("_"):
                continue
            descriptors.append(
                PropertyDescriptor(
                    name=name,
                    declared_type=field_info.annotation if field_info.annotation is not None else Any,
                    getter=operator.attrgetter(name),
                    setter=None if frozen else _make_setter(name),
                )
            )
        return descriptors

    if _is_named_tuple(cls):
        for name in cls._fields:  # type: ignore[attr-defined]
            if name.startswith("_"):
                continue
            descriptors.append(
                PropertyDescriptor(name, hints.get(name, Any), operator.attrgetter(name))
            )
        return descriptors

    seen: set[str] = set()
    for name, hint in hints.items():
        if name.startswith("_") or _is_class_var(hint):
            continue
        seen.add(name)
        descriptors.append(
            PropertyDescriptor(name, hint, operator.attrgetter(name), _make_setter(name))
        )

    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, attr in vars(klass).items():
            if not isinstance(attr, property) or name.startswith("_") or name in seen:
                continue
            seen.add(name)
            returns = inspect.signature(attr.fget).return_annotation if attr.fget else Any
            descriptors.append(
                PropertyDescriptor(
                    name=name,
                    declared_type=Any if returns is inspect.Signature.empty else returns,
                    getter=operator.attrgetter(name),
                    setter=_make_setter(name) if attr.fset is not None else None,
                )
            )
    return descriptors


class PropertyAccessor:
    """Immutable lookup table of compiled property accessors for one type.

    Use :func:`get_accessor` (or :meth:`compile`) rather than instantiating
    directly so the table is built only once per type.

    Examples:
        >>> accessor = get_accessor(Person)
        >>> accessor.get_value(person, "email")
        'jane@example.com'
    """

    def __init__(self, target_type: type):
        if not isinstance(target_type, type):
            raise TypeError(f"target_type must be a class, got {target_type!r}")
        self._target_type = target_type
        descriptors = _collect(target_type)
        self._descriptors: dict[str, PropertyDescriptor] = {d.name: d for d in descriptors}
        self._names = tuple(self._descriptors)

    @classmethod
    def compile(cls, target_type: type) -> "PropertyAccessor":
        """Return the cached accessor for ``target_type``, compiling it on first use."""
        accessor = _ACCESSORS.get(target_type)
        if accessor is not None:
            return accessor
        with _ACCESSOR_LOCK:
            accessor = _ACCESSORS.get(target_type)
            if accessor is None:
                accessor = cls(target_type)
                _ACCESSORS[target_type] = accessor
                logger.debug(
                    f"Compiled accessor for {target_type.__name__} "
                    f"with {len(accessor)} properties: {list(accessor.property_names)}"
                )
        return accessor

    @property
    def target_type(self) -> type:
        return self._target_type

    @property
    def property_names(self) -> tuple[str, ...]:
        """Compiled property names in declaration order."""
        return self._names

    def has_property(self, name: str) -> bool:
        return name in self._descriptors

    def descriptor(self, name: str) -> PropertyDescriptor:
        try:
            return self._descriptors[name]
        except KeyError:
            raise create_property_not_found_error(name, self._target_type, self._names) from None

    def get_value(self, instance: Any, name: str) -> Any:
        """Read ``name`` from ``instance``.

        Raises:
            PropertyNotFoundError: If ``name`` was never compiled
        """
        return self.descriptor(name).getter(instance)

    def set_value(self, instance: Any, name: str, value: Any) -> None:
        """Write ``value`` to ``name`` on ``instance``.

        Raises:
            PropertyNotFoundError: If ``name`` was never compiled
            PropertyReadOnlyError: If the property has no setter
        """
        descriptor = self.descriptor(name)
        if descriptor.setter is None:
            raise PropertyReadOnlyError(
                f"Property '{name}' on type {self._target_type.__name__} is read-only",
                property_name=name,
                target_type=self._target_type.__name__,
            )
        descriptor.setter(instance, value)

    def to_dict(self, instance: Any) -> dict[str, Any]:
        """Read every compiled property into an ordered mapping."""
        return {name: d.getter(instance) for name, d in self._descriptors.items()}

    def __iter__(self) -> Iterator[PropertyDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __repr__(self) -> str:
        return f"PropertyAccessor({self._target_type.__name__}, properties={list(self._names)})"


def get_accessor(target_type: type) -> PropertyAccessor:
    """Return the compiled accessor for ``target_type``."""
    return PropertyAccessor.compile(target_type)


# Value types the serializer renders itself; never flattened even when they
# expose ``property`` objects (``UUID.hex``, ``PurePath.name``).
_SCALAR_TYPES: tuple[type, ...] = (
    str, bytes, bytearray, int, float, complex,
    date, time, timedelta, Decimal, Enum, UUID, PurePath,
    Mapping, list, tuple, set, frozenset,
)


def is_accessible_type(value_type: type) -> bool:
    """Whether instances of ``value_type`` are structured objects worth flattening.

    Dataclasses, pydantic models and named tuples always qualify. Any other
    user class qualifies when its compiled accessor exposes at least one
    property, which makes plain annotated classes usable as nested values.
    """
    if not isinstance(value_type, type):
        return False
    if (
        dataclasses.is_dataclass(value_type)
        or issubclass(value_type, BaseModel)
        or _is_named_tuple(value_type)
    ):
        return True
    if value_type.__module__ == "builtins" or issubclass(value_type, _SCALAR_TYPES):
        return False
    return len(get_accessor(value_type)) > 0


def clear_accessor_cache() -> None:
    """Drop every compiled accessor. Intended for tests."""
    with _ACCESSOR_LOCK:
        _ACCESSORS.clear()
