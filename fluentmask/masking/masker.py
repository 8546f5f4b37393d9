"""Per-type masker: property rule registry, behavior policy and execution.

Subclass :class:`AbstractMasker` with the target type as generic argument and
register rule chains in ``__init__``::

    class PersonMasker(AbstractMasker[Person]):
        def __init__(self):
            super().__init__()
            self.mask_for("email", lambda b: b.email_mask())
            self.mask_for(lambda p: p.ssn, MaskEndRule(4))

    result = PersonMasker().mask(person)
    result.masked_data  # '{"name": "Jane", "email": "j***@example.com", ...}'
"""

import logging
import typing
from collections.abc import Callable
from datetime import date
from decimal import Decimal
from threading import Lock
from typing import Any, Generic, Optional, TypeVar

from ..core.accessor import PropertyAccessor, get_accessor
from ..core.config import MaskingConfig, get_default_config
from ..core.converters import TypeConverterRegistry, apply_rule, get_default_registry
from ..core.exceptions import MaskingError, ValueConversionError
from ..core.results import MaskingResult, MaskingStats
from ..core.types import PropertyRuleBehavior, RuleCategory
from ..formats.registry import get_format_registry
from ..formats.serialization import Serializer
from ..rules import MaskEachRule, MaskNestedRule, MaskRule, StructureMasker
from .assembler import assemble_result, to_structure
from .builders import MaskingBuilder, create_builder, infer_builder_kind
from .selectors import Selector, resolve_selector

logger = logging.getLogger(__name__)

T = TypeVar("T")

BuilderConfigurator = Callable[[Any], Any]


def _resolve_target_type(masker_cls: type) -> Optional[type]:
    """Find ``Person`` in ``class PersonMasker(AbstractMasker[Person])``."""
    for klass in masker_cls.__mro__:
        for base in getattr(klass, "__orig_bases__", ()):
            origin = typing.get_origin(base)
            if isinstance(origin, type) and issubclass(origin, AbstractMasker):
                args = typing.get_args(base)
                if args and isinstance(args[0], type):
                    return args[0]
    return None


def _apply_without_conversion(rule: MaskRule, value: Any) -> Any:
    if value is None or rule.category is RuleCategory.ANY:
        return rule.apply(value)
    expected: tuple[type, ...] = {
        RuleCategory.STRING: (str,),
        RuleCategory.NUMERIC: (int, float, Decimal),
        RuleCategory.DATE: (date,),
    }[rule.category]
    if not isinstance(value, expected) or (rule.category is RuleCategory.NUMERIC and isinstance(value, bool)):
        raise ValueConversionError(
            f"{rule.name} expects a {rule.category.value} value, got {type(value).__name__} "
            "(type conversion is disabled)",
            rule=rule.name,
        )
    return rule.apply(value)


class AbstractMasker(Generic[T]):
    """Registry of ordered rule chains for the properties of one type.

    Chains are stored as tuples and replaced, never mutated, when a rule is
    appended, so a ``mask`` call running concurrently with registration sees
    either the old or the new chain. Registration is expected to finish
    before the masker is shared; ``mask`` itself keeps no per-call state on
    the masker.

    Args:
        target_type: Type to mask; inferred from the generic argument of a
            subclass when omitted
        config: Engine defaults (process default when omitted)
        serializer: Payload serializer; overrides ``output_format``
        output_format: Name of a registered format (``json`` or ``yaml``)
        converters: Type converter registry for cross-category rules
    """

    def __init__(
        self,
        target_type: Optional[type] = None,
        *,
        config: Optional[MaskingConfig] = None,
        serializer: Optional[Serializer] = None,
        output_format: Optional[str] = None,
        converters: Optional[TypeConverterRegistry] = None,
    ):
        resolved = target_type or _resolve_target_type(type(self))
        if resolved is None:
            raise TypeError(
                f"{type(self).__name__} has no target type; subclass AbstractMasker[YourType] "
                "or pass target_type="
            )
        self._config = config or get_default_config()
        self._accessor: PropertyAccessor = get_accessor(resolved)
        self._behavior = self._config.default_behavior
        self._chains: dict[str, tuple[MaskRule, ...]] = {}
        self._lock = Lock()
        self._converters = converters or get_default_registry()

        if serializer is None:
            format_name = output_format or self._config.output_format
            options = {"indent": self._config.json_indent} if format_name == "json" else {}
            serializer = get_format_registry().get_serializer(format_name, **options)
        self._serializer = serializer

    @property
    def target_type(self) -> type:
        return self._accessor.target_type

    @property
    def accessor(self) -> PropertyAccessor:
        return self._accessor

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    @property
    def behavior(self) -> PropertyRuleBehavior:
        return self._behavior

    # Registration

    def register_rule(self, selector: Selector, rule: MaskRule) -> "AbstractMasker[T]":
        """Append ``rule`` to the chain of the selected property.

        Args:
            selector: Property name or single-attribute lambda
            rule: Rule to append

        Returns:
            Self for method chaining

        Raises:
            PropertyNotFoundError: If the property does not exist on the target type
            TypeError: If ``rule`` is not a MaskRule or the selector is invalid
        """
        if not isinstance(rule, MaskRule):
            raise TypeError(f"Expected a MaskRule, got {type(rule).__name__}")
        name = resolve_selector(selector, self._accessor)
        self._append(name, (rule,))
        return self

    def register_builder(
        self,
        selector: Selector,
        configure: BuilderConfigurator,
        *,
        builder: Optional[str] = None,
    ) -> "AbstractMasker[T]":
        """Configure a fresh builder and append its chain to the selected property.

        The builder kind is inferred from the declared property type unless
        ``builder`` names one explicitly (``string``, ``numeric`` or ``date``).

        Returns:
            Self for method chaining
        """
        name = resolve_selector(selector, self._accessor)
        kind = builder or infer_builder_kind(self._accessor.descriptor(name).declared_type)
        fresh = create_builder(kind)
        returned = configure(fresh)
        target = returned if isinstance(returned, MaskingBuilder) else fresh
        self._append(name, target.build())
        return self

    def mask_for(
        self,
        selector: Selector,
        rule_or_configure: "MaskRule | BuilderConfigurator",
        *,
        builder: Optional[str] = None,
    ) -> "AbstractMasker[T]":
        """Register either a rule object or a builder configuration."""
        if isinstance(rule_or_configure, MaskRule):
            return self.register_rule(selector, rule_or_configure)
        if callable(rule_or_configure):
            return self.register_builder(selector, rule_or_configure, builder=builder)
        raise TypeError(
            f"Expected a MaskRule or a builder callable, got {type(rule_or_configure).__name__}"
        )

    def mask_each(self, selector: Selector, nested_masker: StructureMasker) -> "AbstractMasker[T]":
        """Mask every item of a collection property with ``nested_masker``."""
        return self.register_rule(selector, MaskEachRule(nested_masker))

    def mask_nested(self, selector: Selector, nested_masker: StructureMasker) -> "AbstractMasker[T]":
        """Mask a single nested object property with ``nested_masker``."""
        return self.register_rule(selector, MaskNestedRule(nested_masker))

    def set_property_rule_behavior(self, behavior: "PropertyRuleBehavior | str") -> "AbstractMasker[T]":
        """Select which properties reach the output (include, exclude or remove)."""
        self._behavior = PropertyRuleBehavior.from_string(behavior)
        logger.debug(f"{type(self).__name__}: behavior set to {self._behavior.value}")
        return self

    def _append(self, name: str, rules: tuple[MaskRule, ...]) -> None:
        with self._lock:
            self._chains[name] = self._chains.get(name, ()) + rules
        logger.debug(
            f"{type(self).__name__}: registered {[r.name for r in rules]} for "
            f"'{name}' (chain length {len(self._chains[name])})"
        )

    # Introspection

    def rules_for(self, selector: Selector) -> tuple[MaskRule, ...]:
        """Return the chain registered for a property (empty if none)."""
        name = resolve_selector(selector, self._accessor)
        return self._chains.get(name, ())

    @property
    def registered_properties(self) -> tuple[str, ...]:
        """Registered property names in registration order."""
        return tuple(self._chains)

    # Execution

    def _apply_chain(self, chain: tuple[MaskRule, ...], value: Any) -> Any:
        for rule in chain:
            if self._config.convert_types:
                value = apply_rule(rule, value, self._converters)
            else:
                value = _apply_without_conversion(rule, value)
        return value

    def collect(self, instance: Any) -> tuple[dict[str, Any], list[str], MaskingStats]:
        """Run every chain against ``instance`` and return mapping, errors and stats."""
        if not isinstance(instance, self.target_type):
            raise TypeError(
                f"{type(self).__name__} masks {self.target_type.__name__} instances, "
                f"got {type(instance).__name__}"
            )

        chains = dict(self._chains)
        behavior = self._behavior
        structure: dict[str, Any] = {}
        errors: list[str] = []
        masked = passed = omitted = failed = 0

        for name in self._accessor.property_names:
            chain = chains.get(name)
            registered = chain is not None
            if (behavior is PropertyRuleBehavior.INCLUDE and not registered) or (
                behavior is PropertyRuleBehavior.REMOVE and registered
            ):
                omitted += 1
                continue

            raw = self._accessor.get_value(instance, name)
            if not registered:
                structure[name] = to_structure(raw)
                passed += 1
                continue

            try:
                value = self._apply_chain(chain, raw)
            except MaskingError as e:
                failed += 1
                errors.append(f"{name}: {e.message}")
                logger.debug(f"{type(self).__name__}: masking '{name}' failed: {e.message}")
                continue
            structure[name] = to_structure(value)
            masked += 1

        stats = MaskingStats(
            properties_total=len(self._accessor),
            properties_masked=masked,
            properties_passed_through=passed,
            properties_omitted=omitted,
            properties_failed=failed,
        )
        return structure, errors, stats

    def mask_structure(self, instance: Any) -> tuple[dict[str, Any], list[str]]:
        """Mask ``instance`` into an ordered mapping without serializing it.

        Returns:
            The assembled mapping and one error message per failed property

        Raises:
            TypeError: If ``instance`` is not of the target type
        """
        structure, errors, _ = self.collect(instance)
        return structure, errors

    def mask(self, instance: T) -> MaskingResult:
        """Mask ``instance`` and serialize the result.

        Anticipated rule failures (timeouts, conversion errors, nested
        failures) are captured: the property is left out of the payload and
        its message recorded in ``errors``. Accessor misuse and a wrong
        instance type propagate.

        Raises:
            TypeError: If ``instance`` is not of the target type
            SerializationError: If the assembled mapping cannot be serialized
        """
        structure, errors, stats = self.collect(instance)
        return assemble_result(structure, errors, stats, self._serializer)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(target={self.target_type.__name__}, "
            f"behavior={self._behavior.value}, properties={list(self._chains)})"
        )
