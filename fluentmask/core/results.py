"""Result data structures for masking operations."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class OperationStatus(Enum):
    """Status of a masking operation."""

    SUCCESS = "success"
    PARTIAL = "partial"  # Some properties masked, some failed
    FAILED = "failed"


@dataclass(frozen=True)
class MaskingStats:
    """Statistics about property processing during one masking pass."""

    properties_total: int = 0
    properties_masked: int = 0
    properties_passed_through: int = 0
    properties_omitted: int = 0
    properties_failed: int = 0

    @property
    def success_rate(self) -> float:
        """Share of rule-bearing properties that masked without error."""
        attempted = self.properties_masked + self.properties_failed
        if attempted == 0:
            return 1.0
        return self.properties_masked / attempted

    @property
    def properties_by_outcome(self) -> dict[str, int]:
        return {
            "masked": self.properties_masked,
            "passed_through": self.properties_passed_through,
            "omitted": self.properties_omitted,
            "failed": self.properties_failed,
        }


@dataclass(frozen=True)
class MaskingResult:
    """Outcome of one ``mask`` invocation.

    Attributes:
        masked_data: Serialized payload of the assembled structure
        is_success: False when at least one property failed to mask
        errors: One message per failed property, in property order
        data: The assembled name→value mapping that was serialized
        stats: Per-property outcome counts
    """

    masked_data: str
    is_success: bool = True
    errors: tuple[str, ...] = ()
    data: dict[str, Any] = field(default_factory=dict, compare=False)
    stats: MaskingStats = field(default_factory=MaskingStats, compare=False)

    @property
    def payload(self) -> str:
        return self.masked_data

    @property
    def error(self) -> Optional[str]:
        """All error messages joined into one line, or None on success."""
        if not self.errors:
            return None
        return "; ".join(self.errors)

    @property
    def status(self) -> OperationStatus:
        if self.is_success:
            return OperationStatus.SUCCESS
        if self.stats.properties_masked or self.stats.properties_passed_through:
            return OperationStatus.PARTIAL
        return OperationStatus.FAILED

    def to_dict(self) -> dict[str, Any]:
        """Convert the result to a dictionary for reporting."""
        return {
            "status": self.status.value,
            "is_success": self.is_success,
            "errors": list(self.errors),
            "masked_data": self.masked_data,
            "stats": self.stats.properties_by_outcome,
        }
