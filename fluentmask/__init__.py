"""fluentmask: declarative, type-safe property masking for Python objects.

Declare once, per type, which properties are transformed and how, then mask
instances into a redacted JSON or YAML payload:

    class CustomerMasker(AbstractMasker[Customer]):
        def __init__(self):
            super().__init__()
            self.mask_for("email", lambda b: b.email_mask())
            self.mask_for("card", lambda b: b.card_mask(keep_last=4))

    CustomerMasker().mask(customer).masked_data
"""

__version__ = "0.1.0"

from .core import (
    FluentMaskError,
    MaskingConfig,
    MaskingError,
    MaskingResult,
    MaskingStats,
    NestedMaskingError,
    OperationStatus,
    PatternTimeoutError,
    PropertyAccessError,
    PropertyAccessor,
    PropertyNotFoundError,
    PropertyReadOnlyError,
    PropertyRuleBehavior,
    RuleConfigurationError,
    SerializationError,
    ValueConversionError,
    get_accessor,
)
from .formats import JsonSerializer, Serializer, YamlSerializer
from .masking import (
    AbstractMasker,
    DateTimeMaskingBuilder,
    MaskingBuilder,
    NumericMaskingBuilder,
    StringMaskingBuilder,
)
from .rules import MaskRule, SeededMaskRule

__all__ = [
    "__version__",
    # Masking
    "AbstractMasker",
    "MaskingBuilder",
    "StringMaskingBuilder",
    "NumericMaskingBuilder",
    "DateTimeMaskingBuilder",
    "MaskRule",
    "SeededMaskRule",
    "PropertyRuleBehavior",
    # Accessors
    "PropertyAccessor",
    "get_accessor",
    # Results
    "MaskingResult",
    "MaskingStats",
    "OperationStatus",
    # Serialization
    "Serializer",
    "JsonSerializer",
    "YamlSerializer",
    # Configuration
    "MaskingConfig",
    # Exceptions
    "FluentMaskError",
    "RuleConfigurationError",
    "PropertyAccessError",
    "PropertyNotFoundError",
    "PropertyReadOnlyError",
    "MaskingError",
    "PatternTimeoutError",
    "ValueConversionError",
    "NestedMaskingError",
    "SerializationError",
]
