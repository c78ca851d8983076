"""
Data models for the stack inventory.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .status import StackStatus

TRAILING_PARENTHETICAL = re.compile(r"\s*\([^)]*\)\s*$")


def strip_parenthetical(name: str) -> str:
    """Remove a trailing "(backing-id)" annotation from a stack name."""
    return TRAILING_PARENTHETICAL.sub("", name)


@dataclass(frozen=True)
class DeclaredStack:
    """A stack known to the CDK app, in declared order."""
    display_name: str
    full_name: str  # e.g. "Pipeline/ServiceA (cf-pipeline-servicea-prod)"
    backing_id: str  # CloudFormation stack name used for the status lookup

    @property
    def cdk_name(self) -> str:
        """Name passed to the CDK CLI for deploy/destroy."""
        return strip_parenthetical(self.full_name)


@dataclass
class StackRecord:
    """A stack as found in CloudFormation."""
    stack_id: str
    raw_status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    description: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class ReconciledStack:
    """One declared stack annotated with its live status."""
    declared: DeclaredStack
    status: StackStatus
    checked_at: datetime  # when the lookup ran; never a CloudFormation timestamp
    stack_id: Optional[str] = None
    raw_status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    description: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.declared.display_name

    @property
    def full_name(self) -> str:
        return self.declared.full_name

    @property
    def backing_id(self) -> str:
        return self.declared.backing_id

    @property
    def is_deployed(self) -> bool:
        """True when CloudFormation resolved a stack id for this stack."""
        return self.stack_id is not None

    def to_dict(self) -> Dict[str, object]:
        return {
            "display_name": self.display_name,
            "full_name": self.full_name,
            "backing_id": self.backing_id,
            "status": self.status.value,
            "raw_status": self.raw_status,
            "stack_id": self.stack_id,
            "deployed": self.is_deployed,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "checked_at": self.checked_at.isoformat(),
            "description": self.description,
            "tags": dict(self.tags),
            "error": self.error,
        }


@dataclass
class InventorySummary:
    """Counters derived from a reconciled inventory."""
    total: int
    deployed: int
    not_deployed: int
    unknown: int

    @classmethod
    def from_stacks(cls, stacks: List[ReconciledStack]) -> "InventorySummary":
        deployed = sum(1 for stack in stacks if stack.is_deployed)
        not_deployed = sum(1 for stack in stacks if stack.status is StackStatus.NOT_DEPLOYED)
        unknown = sum(1 for stack in stacks if not stack.is_deployed and stack.status is StackStatus.UNKNOWN)
        return cls(total=len(stacks), deployed=deployed, not_deployed=not_deployed, unknown=unknown)

    def describe(self) -> str:
        text = f"Found {self.total} stacks ({self.deployed} deployed, {self.not_deployed} not deployed"
        if self.unknown:
            text += f", {self.unknown} unknown"
        return text + ")"
