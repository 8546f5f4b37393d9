"""Masker, builders and result assembly."""

from .assembler import assemble_result, to_structure
from .builders import (
    BUILDERS,
    DateTimeMaskingBuilder,
    MaskingBuilder,
    NumericMaskingBuilder,
    StringMaskingBuilder,
    create_builder,
    infer_builder_kind,
)
from .masker import AbstractMasker
from .selectors import Selector, resolve_selector

__all__ = [
    "AbstractMasker",
    "MaskingBuilder",
    "StringMaskingBuilder",
    "NumericMaskingBuilder",
    "DateTimeMaskingBuilder",
    "BUILDERS",
    "create_builder",
    "infer_builder_kind",
    "Selector",
    "resolve_selector",
    "assemble_result",
    "to_structure",
]
