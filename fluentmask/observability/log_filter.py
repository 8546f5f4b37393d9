"""Logging filter that replaces registered objects with their masked payload."""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from ..masking.masker import AbstractMasker

__all__ = ["MaskingLogFilter"]


class MaskingLogFilter(logging.Filter):
    """Masks log record arguments whose type has a registered masker.

    Examples:
        >>> log_filter = MaskingLogFilter({Person: PersonMasker()})
        >>> logger.addFilter(log_filter)
        >>> logger.info("created %s", person)  # logs the masked JSON payload
    """

    def __init__(self, maskers: Optional[Mapping[type, AbstractMasker[Any]]] = None, name: str = "") -> None:
        super().__init__(name)
        self._maskers: dict[type, AbstractMasker[Any]] = dict(maskers or {})

    def register(self, masker: AbstractMasker[Any]) -> "MaskingLogFilter":
        """Register ``masker`` for its target type."""
        self._maskers[masker.target_type] = masker
        return self

    def _masker_for(self, value: Any) -> Optional[AbstractMasker[Any]]:
        return self._maskers.get(type(value))

    def _mask(self, value: Any) -> Any:
        masker = self._masker_for(value)
        if masker is None:
            return value
        return masker.mask(value).masked_data

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        if self._masker_for(record.msg) is not None:
            payload = self._mask(record.msg)
            # getMessage() %-formats msg whenever args are present
            record.msg = payload.replace("%", "%%") if record.args else payload
        if isinstance(record.args, Mapping):
            record.args = {key: self._mask(value) for key, value in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(self._mask(arg) for arg in record.args)
        return True
