"""fluentmask exception hierarchy.

Configuration problems (bad rule parameters, malformed profiles) surface
synchronously to the caller. Programmer errors (unknown or read-only
properties) fail fast. Anticipated per-value failures derive from
:class:`MaskingError` and are captured into a ``MaskingResult`` by the masker
instead of aborting the whole pass.
"""

from typing import Any, Dict, List, Optional


class FluentMaskError(Exception):
    """Base exception for all fluentmask errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error identifier
        context: Additional error context and metadata
        recovery_suggestions: List of suggested recovery actions
        component: Component where the error originated
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        recovery_suggestions: Optional[List[str]] = None,
        component: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._default_error_code()
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        self.component = component or self._infer_component()

    def _default_error_code(self) -> str:
        return self.__class__.__name__.upper().replace("ERROR", "_ERROR")

    def _infer_component(self) -> str:
        name = self.__class__.__name__.lower()
        if "property" in name:
            return "accessor"
        if "rule" in name or "pattern" in name:
            return "rules"
        if "profile" in name:
            return "profile"
        if "serialization" in name:
            return "serialization"
        if "masking" in name or "conversion" in name:
            return "masking"
        return "core"

    def add_context(self, key: str, value: Any) -> None:
        """Add additional context to the error."""
        self.context[key] = value

    def add_recovery_suggestion(self, suggestion: str) -> None:
        """Add a recovery suggestion to help users resolve the error."""
        if suggestion not in self.recovery_suggestions:
            self.recovery_suggestions.append(suggestion)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to structured dictionary for logging/reporting."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "component": self.component,
            "context": self.context,
            "recovery_suggestions": self.recovery_suggestions,
        }


class ValidationError(FluentMaskError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        expected_type: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        if field_name:
            self.add_context("field_name", field_name)
        if expected_type:
            self.add_context("expected_type", expected_type)
        if actual_value is not None:
            self.add_context("actual_value", str(actual_value))


class ConfigurationError(ValidationError):
    """Raised when configuration is invalid or incomplete."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        super().__init__(message, field_name=config_key, **kwargs)


class RuleConfigurationError(ConfigurationError, ValueError):
    """Raised when a mask rule is constructed with invalid parameters.

    Subclasses ``ValueError`` so callers treating parameter problems the
    conventional Python way keep working.
    """

    def __init__(self, message: str, rule: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if rule:
            self.add_context("rule", rule)


class ProfileValidationError(ConfigurationError):
    """Raised when a mask profile file fails to load or validate."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        errors: Optional[List[str]] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.file_path = file_path
        self.errors = errors or []
        if file_path:
            self.add_context("file_path", file_path)
        if self.errors:
            self.add_context("errors", list(self.errors))


class PropertyAccessError(FluentMaskError):
    """Base class for accessor misuse. Always a programmer error."""

    def __init__(
        self,
        message: str,
        property_name: Optional[str] = None,
        target_type: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.property_name = property_name
        self.target_type = target_type
        if property_name:
            self.add_context("property_name", property_name)
        if target_type:
            self.add_context("target_type", target_type)


class PropertyNotFoundError(PropertyAccessError, LookupError):
    """Raised when a property name was never compiled for the target type."""


class PropertyReadOnlyError(PropertyAccessError, AttributeError):
    """Raised when writing to a property compiled without a setter."""


class MaskingError(FluentMaskError):
    """Anticipated failure while applying a rule chain to one value."""

    def __init__(
        self,
        message: str,
        property_name: Optional[str] = None,
        rule: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        if property_name:
            self.add_context("property_name", property_name)
        if rule:
            self.add_context("rule", rule)


class PatternTimeoutError(MaskingError, TimeoutError):
    """Raised when a pattern-matching rule exceeds its execution timeout."""

    def __init__(self, message: str, pattern: Optional[str] = None, timeout_ms: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        if pattern is not None:
            self.add_context("pattern", pattern)
        if timeout_ms is not None:
            self.add_context("timeout_ms", timeout_ms)


class ValueConversionError(MaskingError):
    """Raised when a value cannot be converted to the type a rule expects."""


class NestedMaskingError(MaskingError):
    """Raised when masking one or more items of a nested collection fails."""

    def __init__(self, message: str, item_errors: Optional[List[str]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.item_errors = item_errors or []
        if self.item_errors:
            self.add_context("item_errors", list(self.item_errors))


class SerializationError(FluentMaskError):
    """Raised when an assembled structure cannot be serialized."""

    def __init__(self, message: str, format_name: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if format_name:
            self.add_context("format", format_name)


# Convenience functions for creating common errors


def create_rule_configuration_error(
    rule: str, parameter: str, value: Any, expectation: str
) -> RuleConfigurationError:
    """Create a standardized rule configuration error."""
    error = RuleConfigurationError(
        f"{rule}: {parameter} {expectation}, got {value!r}",
        rule=rule,
        config_key=parameter,
        actual_value=value,
    )
    error.add_recovery_suggestion(f"Check the '{parameter}' argument passed to {rule}")
    return error


def create_property_not_found_error(
    name: str, target_type: type, known: "list[str] | tuple[str, ...]"
) -> PropertyNotFoundError:
    """Create a property lookup error listing the known property names."""
    error = PropertyNotFoundError(
        f"Property '{name}' not found on type {target_type.__name__}",
        property_name=name,
        target_type=target_type.__name__,
    )
    if known:
        error.add_recovery_suggestion(f"Known properties: {', '.join(known)}")
    return error
