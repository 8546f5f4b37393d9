"""Resolve property selectors (``"email"`` or ``lambda p: p.email``) to names."""

from collections.abc import Callable
from typing import Any

from ..core.accessor import PropertyAccessor

Selector = str | Callable[[Any], Any]


class _AttributeRecorder:
    """Stand-in instance that records the first attribute read from it."""

    __slots__ = ("_accessed",)

    def __init__(self) -> None:
        object.__setattr__(self, "_accessed", [])

    def __getattr__(self, name: str) -> "_AttributeRecorder":
        self._accessed.append(name)
        return self


def resolve_selector(selector: Selector, accessor: PropertyAccessor) -> str:
    """Return the property name a selector refers to.

    Raises:
        PropertyNotFoundError: If the name is not a compiled property
        TypeError: If the selector is neither a string nor a single-attribute lambda
    """
    if isinstance(selector, str):
        name = selector
    elif callable(selector):
        recorder = _AttributeRecorder()
        selector(recorder)
        accessed = recorder._accessed
        if len(accessed) != 1:
            raise TypeError(
                "Selector must read exactly one attribute of its argument, "
                f"e.g. lambda p: p.email (read {accessed or 'nothing'})"
            )
        name = accessed[0]
    else:
        raise TypeError(f"Selector must be a property name or a callable, got {type(selector).__name__}")

    accessor.descriptor(name)
    return name
