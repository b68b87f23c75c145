"""Per-resource outcomes collected during a reconciliation pass."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class OutcomeStatus(Enum):
    """What happened to a single resource."""
    CREATED = "created"
    REPLACED = "replaced"
    DELETED = "deleted"
    SKIPPED = "skipped"  # Already converged, or already gone
    FAILED = "failed"


@dataclass
class ResourceOutcome:
    """Result of converging a single resource."""

    resource_id: str
    resource_type: str
    status: OutcomeStatus
    message: str = ""
    error: Optional[Exception] = None

    def is_failed(self) -> bool:
        """Check if the operation failed."""
        return self.status == OutcomeStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'resource_id': self.resource_id,
            'resource_type': self.resource_type,
            'status': self.status.value,
            'message': self.message,
            'error': str(self.error) if self.error else None,
        }


@dataclass
class ReconcileSummary:
    """All outcomes of one pass, in the order they were attempted."""

    operation: str
    outcomes: List[ResourceOutcome] = field(default_factory=list)

    def add(self, outcome: ResourceOutcome) -> ResourceOutcome:
        self.outcomes.append(outcome)
        return outcome

    def extend(self, other: "ReconcileSummary") -> None:
        self.outcomes.extend(other.outcomes)

    def by_status(self, *statuses: OutcomeStatus) -> List[ResourceOutcome]:
        return [o for o in self.outcomes if o.status in statuses]

    @property
    def succeeded(self) -> List[ResourceOutcome]:
        return self.by_status(OutcomeStatus.CREATED, OutcomeStatus.REPLACED, OutcomeStatus.DELETED)

    @property
    def skipped(self) -> List[ResourceOutcome]:
        return self.by_status(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> List[ResourceOutcome]:
        return self.by_status(OutcomeStatus.FAILED)

    def has_failures(self) -> bool:
        """Check if any resource failed."""
        return len(self.failed) > 0

    def to_dict(self) -> Dict[str, Any]:
        """Summary for logging; never returned to the stack."""
        return {
            'operation': self.operation,
            'total': len(self.outcomes),
            'succeeded': len(self.succeeded),
            'skipped': len(self.skipped),
            'failed': len(self.failed),
            'outcomes': [o.to_dict() for o in self.outcomes],
        }
