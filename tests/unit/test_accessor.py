"""Tests for compiled property accessors."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, ClassVar, Optional
from uuid import UUID

import pytest
from conftest import Account, Coordinates, FrozenPoint, Person

from fluentmask.core.accessor import (
    PropertyAccessor,
    clear_accessor_cache,
    get_accessor,
    is_accessible_type,
)
from fluentmask.core.exceptions import (
    PropertyAccessError,
    PropertyNotFoundError,
    PropertyReadOnlyError,
)


class Plain:
    label: str
    count: int
    registry: ClassVar[dict] = {}

    def __init__(self, label: str, count: int) -> None:
        self.label = label
        self.count = count
        self._secret = "hidden"

    @property
    def shout(self) -> str:
        return self.label.upper()


class TestPropertyAccessor:
    """Test accessor compilation and lookups."""

    def test_dataclass_names_in_declaration_order(self):
        """Test that dataclass fields compile in declaration order."""
        accessor = get_accessor(Person)
        assert accessor.property_names == ("name", "email", "phone", "age")
        assert len(accessor) == 4

    def test_compile_is_cached(self):
        """Test that compiling the same type twice returns the same accessor."""
        assert get_accessor(Person) is PropertyAccessor.compile(Person)

    def test_clear_cache_forces_recompilation(self):
        """Test that clearing the cache yields a new accessor instance."""
        first = get_accessor(Person)
        clear_accessor_cache()
        assert get_accessor(Person) is not first

    def test_get_and_set_value(self, person):
        """Test reading and writing through compiled descriptors."""
        accessor = get_accessor(Person)
        assert accessor.get_value(person, "email") == "jane.doe@example.com"
        accessor.set_value(person, "email", "other@example.com")
        assert person.email == "other@example.com"

    def test_declared_types(self):
        """Test that resolved annotations are recorded."""
        accessor = get_accessor(Person)
        assert accessor.descriptor("name").declared_type is str
        assert accessor.descriptor("phone").declared_type == Optional[str]

    def test_unknown_property_raises(self, person):
        """Test that unknown names raise PropertyNotFoundError."""
        accessor = get_accessor(Person)
        with pytest.raises(PropertyNotFoundError) as exc_info:
            accessor.get_value(person, "ssn")
        assert isinstance(exc_info.value, LookupError)
        assert isinstance(exc_info.value, PropertyAccessError)
        assert exc_info.value.context["property_name"] == "ssn"

    def test_frozen_dataclass_is_read_only(self):
        """Test that frozen dataclass properties compile without setters."""
        accessor = get_accessor(FrozenPoint)
        assert accessor.descriptor("x").is_read_only
        with pytest.raises(PropertyReadOnlyError) as exc_info:
            accessor.set_value(FrozenPoint(1, 2), "x", 5)
        assert isinstance(exc_info.value, AttributeError)

    def test_pydantic_model(self):
        """Test that pydantic model fields are compiled."""
        accessor = get_accessor(Account)
        account = Account(owner="Jane", iban="DE89370400440532013000")
        assert accessor.property_names == ("owner", "iban", "balance")
        assert accessor.get_value(account, "owner") == "Jane"
        assert accessor.descriptor("balance").declared_type is float

    def test_named_tuple_is_read_only(self):
        """Test that NamedTuple fields compile read-only."""
        accessor = get_accessor(Coordinates)
        assert accessor.property_names == ("lat", "lon")
        assert all(d.is_read_only for d in accessor)

    def test_plain_class_annotations_and_properties(self):
        """Test that plain classes expose annotations and properties, not ClassVars or privates."""
        accessor = get_accessor(Plain)
        assert accessor.property_names == ("label", "count", "shout")
        plain = Plain("hi", 2)
        assert accessor.get_value(plain, "shout") == "HI"
        assert accessor.descriptor("shout").is_read_only
        assert "registry" not in accessor
        assert "_secret" not in accessor

    def test_to_dict(self, person):
        """Test that to_dict reads every property in order."""
        assert list(get_accessor(Person).to_dict(person)) == ["name", "email", "phone", "age"]

    def test_non_type_rejected(self):
        """Test that compiling a non-class raises TypeError."""
        with pytest.raises(TypeError):
            PropertyAccessor("Person")  # type: ignore[arg-type]


class Opaque:
    def __init__(self) -> None:
        self._handle = object()


class Color(Enum):
    RED = "red"


class TestIsAccessibleType:
    """Test structured type detection used by the assembler."""

    @pytest.mark.parametrize("value_type", [Person, Account, Coordinates, Plain])
    def test_structured_types(self, value_type: Any):
        """Test that dataclasses, models, named tuples and annotated classes are accessible."""
        assert is_accessible_type(value_type)

    @pytest.mark.parametrize(
        "value_type", [str, int, dict, list, Decimal, UUID, date, datetime, PurePosixPath, Color, Opaque]
    )
    def test_other_types(self, value_type: Any):
        """Test that scalars, collections and classes without properties are not flattened."""
        assert not is_accessible_type(value_type)
