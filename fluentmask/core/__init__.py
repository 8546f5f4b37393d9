"""Core types, configuration, accessors and results.

:mod:`fluentmask.core.profile_loader` depends on the masking package and is
imported explicitly rather than re-exported here.
"""

from .accessor import PropertyAccessor, PropertyDescriptor, clear_accessor_cache, get_accessor
from .config import MaskingConfig, get_default_config, set_default_config
from .converters import TypeConverter, TypeConverterRegistry, get_default_registry
from .exceptions import (
    ConfigurationError,
    FluentMaskError,
    MaskingError,
    NestedMaskingError,
    PatternTimeoutError,
    ProfileValidationError,
    PropertyAccessError,
    PropertyNotFoundError,
    PropertyReadOnlyError,
    RuleConfigurationError,
    SerializationError,
    ValidationError,
    ValueConversionError,
)
from .results import MaskingResult, MaskingStats, OperationStatus
from .types import PropertyRuleBehavior, RuleCategory, SeedProvider, as_seed_provider, constant_seed

__all__ = [
    # Accessors
    "PropertyAccessor",
    "PropertyDescriptor",
    "get_accessor",
    "clear_accessor_cache",
    # Configuration
    "MaskingConfig",
    "get_default_config",
    "set_default_config",
    # Conversion
    "TypeConverter",
    "TypeConverterRegistry",
    "get_default_registry",
    # Exceptions
    "FluentMaskError",
    "ValidationError",
    "ConfigurationError",
    "RuleConfigurationError",
    "ProfileValidationError",
    "PropertyAccessError",
    "PropertyNotFoundError",
    "PropertyReadOnlyError",
    "MaskingError",
    "PatternTimeoutError",
    "ValueConversionError",
    "NestedMaskingError",
    "SerializationError",
    # Results
    "MaskingResult",
    "MaskingStats",
    "OperationStatus",
    # Types
    "PropertyRuleBehavior",
    "RuleCategory",
    "SeedProvider",
    "as_seed_provider",
    "constant_seed",
]
