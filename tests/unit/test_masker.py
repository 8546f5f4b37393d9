"""Tests for AbstractMasker registration, behavior modes and execution."""

import json
import math
from dataclasses import dataclass

import pytest
from conftest import Account, Address, AddressMasker, Coordinates, Customer, Order, Person, PersonMasker

from fluentmask import AbstractMasker, JsonSerializer, OperationStatus, PropertyRuleBehavior
from fluentmask.core.config import MaskingConfig
from fluentmask.core.exceptions import PropertyNotFoundError
from fluentmask.rules import KeepLastRule, MaskEndRule, MaskStartRule, RegexReplaceRule, RoundToRule


@dataclass
class Greeting:
    text: str


@dataclass
class Reading:
    value: float
    label: str


class PlainAddress:
    street: str

    def __init__(self, street: str) -> None:
        self.street = street


@dataclass
class Resident:
    name: str
    home: PlainAddress


class _TimingOutPattern:
    pattern = "(a+)+$"

    def sub(self, repl, string, timeout=None):
        raise TimeoutError("regex timed out")


def _timing_out_rule() -> RegexReplaceRule:
    rule = RegexReplaceRule("(a+)+$", "x", timeout_ms=10)
    object.__setattr__(rule, "_compiled", _TimingOutPattern())
    return rule


class TestTargetType:
    """Test target type resolution."""

    def test_inferred_from_generic_argument(self, person_masker):
        """Test that subclasses infer the target type."""
        assert person_masker.target_type is Person

    def test_explicit_target_type(self):
        """Test constructing a masker directly."""
        assert AbstractMasker(Person).target_type is Person

    def test_missing_target_type(self):
        """Test that a masker without a target type is rejected."""
        with pytest.raises(TypeError, match="no target type"):
            AbstractMasker()

    def test_indirect_subclass(self):
        """Test inference through an intermediate subclass."""

        class ExtendedPersonMasker(PersonMasker):
            pass

        assert ExtendedPersonMasker().target_type is Person


class TestHelloWorld:
    """Test the positional chain walkthrough end to end."""

    def test_fluent_chain(self):
        """Test that the chain applies left to right."""
        masker = AbstractMasker(Greeting)
        masker.mask_for("text", lambda b: b.mask_start(2).mask_end(2).keep_last(4))

        result = masker.mask(Greeting("HelloWorld"))

        assert result.is_success
        assert result.masked_data == '{"text": "******or**"}'

    def test_rule_objects(self, hello_world_chain):
        """Test the same chain registered as rule objects."""
        masker = AbstractMasker(Greeting)
        for rule in hello_world_chain:
            masker.register_rule(lambda g: g.text, rule)

        assert masker.mask(Greeting("HelloWorld")).data == {"text": "******or**"}

    def test_registration_order_changes_output(self):
        """Test that registering the same rules in reverse order yields a different result."""
        forward = AbstractMasker(Greeting)
        forward.mask_for("text", lambda b: b.keep_last(4).truncate(5, ""))
        backward = AbstractMasker(Greeting)
        backward.mask_for("text", lambda b: b.truncate(5, "").keep_last(4))

        forward_data = forward.mask(Greeting("HelloWorld")).data
        backward_data = backward.mask(Greeting("HelloWorld")).data

        assert forward_data == {"text": "*****"}
        assert backward_data == {"text": "*ello"}
        assert forward_data != backward_data


class TestRegistration:
    """Test rule registration and chain ordering."""

    def test_registrations_append(self, person_masker):
        """Test that registering twice appends to the chain."""
        person_masker.mask_for("name", lambda b: b.keep_first(1))
        person_masker.mask_for("name", MaskEndRule(1))

        chain = person_masker.rules_for("name")
        assert [r.name for r in chain] == ["KeepFirstRule", "MaskEndRule"]

    def test_registered_properties_in_order(self, person_masker):
        """Test registration order is kept."""
        assert person_masker.registered_properties == ("email", "phone")

    def test_fresh_builder_per_registration(self):
        """Test that each registration configures its own builder."""
        seen = []

        def configure(builder):
            seen.append(builder)
            builder.keep_first(1)

        masker = AbstractMasker(Person)
        masker.mask_for("name", configure)
        masker.mask_for("email", configure)

        assert seen[0] is not seen[1]
        assert len(masker.rules_for("name")) == 1
        assert len(masker.rules_for("email")) == 1

    def test_explicit_builder_kind(self, person):
        """Test overriding the inferred builder kind."""
        masker = AbstractMasker(Person, config=MaskingConfig(default_behavior="include"))
        masker.mask_for("age", lambda b: b.keep_last(1), builder="string")
        assert masker.mask(person).data == {"age": "*4"}

    def test_builder_kind_inferred_from_declared_type(self, person):
        """Test that an int property gets the numeric builder."""
        masker = AbstractMasker(Person)
        masker.mask_for("age", lambda b: b.round_to(10))
        assert masker.mask(person).data["age"] == 30

    def test_unknown_property(self, person_masker):
        """Test that unknown properties fail fast."""
        with pytest.raises(PropertyNotFoundError):
            person_masker.mask_for("ssn", MaskEndRule(4))

    def test_selector_reading_two_attributes(self, person_masker):
        """Test that selectors must read exactly one attribute."""
        with pytest.raises(TypeError):
            person_masker.mask_for(lambda p: (p.name, p.email), MaskEndRule(1))

    def test_invalid_selector_type(self, person_masker):
        """Test that selectors must be names or callables."""
        with pytest.raises(TypeError):
            person_masker.register_rule(5, MaskEndRule(1))  # type: ignore[arg-type]

    def test_non_rule_rejected(self, person_masker):
        """Test that register_rule and mask_for reject non-rules."""
        with pytest.raises(TypeError):
            person_masker.register_rule("name", "mask")  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            person_masker.mask_for("name", 42)  # type: ignore[arg-type]

    def test_repr(self, person_masker):
        """Test the masker repr."""
        assert repr(person_masker) == "PersonMasker(target=Person, behavior=exclude, properties=['email', 'phone'])"


class TestBehaviorModes:
    """Test INCLUDE, EXCLUDE and REMOVE."""

    def test_exclude_is_default(self, person_masker, person):
        """Test that every property appears and unregistered ones are raw."""
        result = person_masker.mask(person)
        assert person_masker.behavior is PropertyRuleBehavior.EXCLUDE
        assert json.loads(result.masked_data) == {
            "name": "Jane Doe",
            "email": "j*******@example.com",
            "phone": "+** ** ** ** 78",
            "age": 34,
        }
        assert result.stats.properties_masked == 2
        assert result.stats.properties_passed_through == 2

    def test_include(self, person_masker, person):
        """Test that only registered properties appear."""
        person_masker.set_property_rule_behavior(PropertyRuleBehavior.INCLUDE)
        result = person_masker.mask(person)
        assert list(result.data) == ["email", "phone"]
        assert result.stats.properties_omitted == 2

    def test_remove(self, person_masker, person):
        """Test that registered properties are omitted."""
        person_masker.set_property_rule_behavior("remove")
        assert person_masker.mask(person).data == {"name": "Jane Doe", "age": 34}

    def test_output_order_follows_declaration(self, person):
        """Test that output order is declaration order, not registration order."""
        masker = AbstractMasker(Person)
        masker.mask_for("age", RoundToRule(10))
        masker.mask_for("name", MaskStartRule(1))
        assert list(masker.mask(person).data) == ["name", "email", "phone", "age"]

    def test_invalid_behavior(self, person_masker):
        """Test that unknown behaviors are rejected."""
        with pytest.raises(ValueError):
            person_masker.set_property_rule_behavior("hide")

    def test_config_default_behavior(self, person):
        """Test that the configured behavior applies to new maskers."""
        masker = AbstractMasker(Person, config=MaskingConfig(default_behavior="include"))
        masker.mask_for("name", MaskStartRule(4))
        assert masker.mask(person).data == {"name": "**** Doe"}


class TestErrorCapture:
    """Test per-property error capture."""

    def test_failure_omits_property_and_continues(self, person_masker, person):
        """Test that a failing property is reported and siblings still mask."""
        person_masker.register_rule("name", _timing_out_rule())

        result = person_masker.mask(person)

        assert not result.is_success
        assert "name" not in result.data
        assert result.data["email"] == "j*******@example.com"
        assert len(result.errors) == 1
        assert result.errors[0].startswith("name: ")
        assert "Regex timeout exceeded" in result.error
        assert result.stats.properties_failed == 1
        assert result.status is OperationStatus.PARTIAL

    def test_every_failure_reported(self, person):
        """Test that each failing property gets its own message."""
        masker = AbstractMasker(Person, config=MaskingConfig(default_behavior="include"))
        masker.register_rule("name", _timing_out_rule())
        masker.register_rule("email", _timing_out_rule())

        result = masker.mask(person)

        assert [e.split(":")[0] for e in result.errors] == ["name", "email"]
        assert result.data == {}
        assert result.status is OperationStatus.FAILED

    def test_non_finite_number_is_captured(self):
        """Test that an infinite value fails only its own property."""
        masker = AbstractMasker(Reading)
        masker.mask_for("value", RoundToRule(10))
        masker.mask_for("label", KeepLastRule(1))

        result = masker.mask(Reading(math.inf, "abc"))

        assert result.errors == ("value: RoundToRule expects a finite number, got inf",)
        assert result.data == {"label": "**c"}
        assert result.status is OperationStatus.PARTIAL

    def test_wrong_instance_type(self, person_masker, address):
        """Test that masking the wrong type raises."""
        with pytest.raises(TypeError, match="masks Person instances"):
            person_masker.mask(address)

    def test_conversion_disabled(self, customer):
        """Test that category mismatches are captured when conversion is off."""
        masker = AbstractMasker(Customer, config=MaskingConfig(convert_types=False))
        masker.mask_for("id", KeepLastRule(2))
        masker.mask_for("name", KeepLastRule(2))

        result = masker.mask(customer)

        assert result.errors == (
            "id: KeepLastRule expects a string value, got int (type conversion is disabled)",
        )
        assert result.data["name"] == "******oe"


class TestTypeConversion:
    """Test masking of non-string properties."""

    def test_string_rule_on_int(self, customer):
        """Test that masked numbers that no longer parse become text."""
        masker = AbstractMasker(Customer)
        masker.mask_for("id", lambda b: b.keep_last(2), builder="string")
        assert masker.mask(customer).data["id"] == "**01"

    def test_scalar_normalization(self, customer):
        """Test how decimals, dates and nested objects are serialized."""
        payload = json.loads(AbstractMasker(Customer).mask(customer).masked_data)
        assert payload["salary"] == "52499.50"
        assert payload["birthday"] == "1990-05-17"
        assert payload["created_at"] == "2024-01-02T03:04:05"
        assert payload["address"] == {"street": "1 Main Street", "city": "Springfield", "zip_code": "12345"}
        assert payload["tags"] == ["vip", "newsletter"]

    def test_numeric_and_date_rules(self, customer):
        """Test numeric and date builders on typed properties."""
        masker = AbstractMasker(Customer, config=MaskingConfig(default_behavior="include"))
        masker.mask_for("salary", lambda b: b.round_to(1000))
        masker.mask_for("birthday", lambda b: b.time_bucket("year"))
        assert json.loads(masker.mask(customer).masked_data) == {"salary": "52000", "birthday": "1990-01-01"}

    def test_date_age_mask_on_date_property(self, customer):
        """Test that a date property can be generalized to text."""
        masker = AbstractMasker(Customer)
        masker.mask_for("birthday", lambda b: b.date_age_mask())
        assert masker.mask(customer).data["birthday"] == "1990-**-**"

    def test_seeded_noise_is_deterministic(self, person):
        """Test reproducible noise through the builder seed."""
        masker = AbstractMasker(Person)
        masker.mask_for("age", lambda b: b.with_seed(99).noise_additive(5))
        assert masker.mask(person).masked_data == masker.mask(person).masked_data

    def test_masking_is_deterministic(self, person_masker, person):
        """Test that repeated masking gives identical payloads."""
        assert person_masker.mask(person) == person_masker.mask(person)


class TestNested:
    """Test mask_nested and mask_each."""

    @pytest.fixture
    def order(self, customer, address) -> Order:
        return Order(number="A-1", customer=customer, addresses=[address, None])

    def test_mask_nested(self, customer):
        """Test masking a nested object with its own masker."""

        class CustomerMasker(AbstractMasker[Customer]):
            def __init__(self):
                super().__init__(config=MaskingConfig(default_behavior="include"))
                self.mask_for("card", lambda b: b.card_mask())
                self.mask_nested("address", AddressMasker())

        data = CustomerMasker().mask(customer).data
        assert data == {
            "card": "**** **** **** 1111",
            "address": {"street": "[STREET]", "city": "Springfield", "zip_code": "12***"},
        }

    def test_plain_class_value_is_flattened(self):
        """Test that an unregistered plain-class property is serialized as a mapping."""
        masker = AbstractMasker(Resident)
        masker.mask_for("name", lambda b: b.keep_first(1))

        result = masker.mask(Resident("Jane", PlainAddress("Main St 1")))

        assert result.is_success
        assert result.data == {"name": "J***", "home": {"street": "Main St 1"}}
        assert result.masked_data == '{"name": "J***", "home": {"street": "Main St 1"}}'

    def test_mask_nested_plain_class(self):
        """Test masking a plain-class property with its own masker."""
        nested = AbstractMasker(PlainAddress)
        nested.mask_for("street", lambda b: b.keep_first(1))
        masker = AbstractMasker(Resident)
        masker.mask_nested("home", nested)

        data = masker.mask(Resident("Jane", PlainAddress("Main St 1"))).data
        assert data == {"name": "Jane", "home": {"street": "M********"}}

    def test_mask_each(self, order):
        """Test masking every item of a collection."""
        masker = AbstractMasker(Order, config=MaskingConfig(default_behavior="include"))
        masker.mask_each("addresses", AddressMasker())
        assert masker.mask(order).data == {
            "addresses": [{"street": "[STREET]", "city": "Springfield", "zip_code": "12***"}, None]
        }

    def test_mask_each_reports_item_index(self, address):
        """Test that nested failures name the failing item."""
        failing = AbstractMasker(Address)
        failing.mask_for("zip_code", RoundToRule(10))
        masker = AbstractMasker(Order)
        masker.mask_each("addresses", failing)

        order = Order(number="A-2", customer=None, addresses=[address, Address("x", "y", "ABC")])
        result = masker.mask(order)

        assert not result.is_success
        assert "addresses" not in result.data
        assert result.errors[0].startswith("addresses: Masking failed for 1 nested item error(s): [1] zip_code:")

    def test_mask_nested_none(self):
        """Test that a None nested value stays None."""
        masker = AbstractMasker(Order)
        masker.mask_nested("customer", AbstractMasker(Customer))
        assert masker.mask(Order(number="A-3", customer=None)).data["customer"] is None

    def test_mask_each_on_scalar_fails(self):
        """Test that mask_each on a non-collection is a captured error."""
        masker = AbstractMasker(Order)
        masker.mask_each("number", AddressMasker())
        result = masker.mask(Order(number="A-4", customer=None))
        assert result.errors == ("number: MaskEachRule expects a collection, got str",)


class TestOutputFormats:
    """Test serializer selection."""

    def test_yaml_output(self, person_masker, person):
        """Test YAML payloads keep property order."""
        masker = AbstractMasker(Person, output_format="yaml")
        assert masker.mask(person).masked_data.splitlines()[0] == "name: Jane Doe"

    def test_json_indent_from_config(self, person):
        """Test that the configured indent is used."""
        masker = AbstractMasker(Person, config=MaskingConfig(json_indent=2))
        assert '\n  "name": "Jane Doe"' in masker.mask(person).masked_data

    def test_custom_serializer(self, person):
        """Test passing a serializer instance."""
        serializer = JsonSerializer(indent=4)
        masker = AbstractMasker(Person, serializer=serializer)
        assert masker.serializer is serializer
        assert '\n    "age": 34' in masker.mask(person).masked_data

    def test_unsupported_format(self):
        """Test that an unknown output format is rejected."""
        with pytest.raises(ValueError, match="Unsupported format"):
            AbstractMasker(Person, output_format="xml")

    def test_mask_structure(self, person_masker, person):
        """Test masking without serialization."""
        structure, errors = person_masker.mask_structure(person)
        assert structure["phone"] == "+** ** ** ** 78"
        assert errors == []


class TestOtherModelKinds:
    """Test pydantic models and named tuples as targets."""

    def test_pydantic_model(self):
        """Test masking a pydantic model."""
        masker = AbstractMasker(Account)
        masker.mask_for("iban", lambda b: b.iban_mask())
        data = masker.mask(Account(owner="Jane", iban="DE89 3704 0044 0532 0130 00", balance=10.5)).data
        assert data == {"owner": "Jane", "iban": "DE89 **** **** **** **30 00", "balance": 10.5}

    def test_named_tuple(self):
        """Test masking a named tuple."""
        masker = AbstractMasker(Coordinates)
        masker.mask_for("lat", lambda b: b.round_to(1))
        assert masker.mask(Coordinates(55.68, 12.57)).data == {"lat": 56.0, "lon": 12.57}
