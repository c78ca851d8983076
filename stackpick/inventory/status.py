"""
Stack lifecycle status and its terminal presentation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union

import click


class StackStatus(Enum):
    """CloudFormation stack states plus two synthetic ones."""
    CREATE_IN_PROGRESS = "CREATE_IN_PROGRESS"
    CREATE_FAILED = "CREATE_FAILED"
    CREATE_COMPLETE = "CREATE_COMPLETE"
    ROLLBACK_IN_PROGRESS = "ROLLBACK_IN_PROGRESS"
    ROLLBACK_FAILED = "ROLLBACK_FAILED"
    ROLLBACK_COMPLETE = "ROLLBACK_COMPLETE"
    DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"
    DELETE_FAILED = "DELETE_FAILED"
    DELETE_COMPLETE = "DELETE_COMPLETE"
    UPDATE_IN_PROGRESS = "UPDATE_IN_PROGRESS"
    UPDATE_COMPLETE_CLEANUP_IN_PROGRESS = "UPDATE_COMPLETE_CLEANUP_IN_PROGRESS"
    UPDATE_COMPLETE = "UPDATE_COMPLETE"
    UPDATE_FAILED = "UPDATE_FAILED"
    UPDATE_ROLLBACK_IN_PROGRESS = "UPDATE_ROLLBACK_IN_PROGRESS"
    UPDATE_ROLLBACK_FAILED = "UPDATE_ROLLBACK_FAILED"
    UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS = "UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS"
    UPDATE_ROLLBACK_COMPLETE = "UPDATE_ROLLBACK_COMPLETE"
    REVIEW_IN_PROGRESS = "REVIEW_IN_PROGRESS"
    IMPORT_IN_PROGRESS = "IMPORT_IN_PROGRESS"
    IMPORT_COMPLETE = "IMPORT_COMPLETE"
    IMPORT_ROLLBACK_IN_PROGRESS = "IMPORT_ROLLBACK_IN_PROGRESS"
    IMPORT_ROLLBACK_FAILED = "IMPORT_ROLLBACK_FAILED"
    IMPORT_ROLLBACK_COMPLETE = "IMPORT_ROLLBACK_COMPLETE"
    # No CloudFormation record exists for the backing id
    NOT_DEPLOYED = "NOT_DEPLOYED"
    # The lookup itself failed, or CloudFormation reported a state we do not know
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_cloudformation(cls, raw: Optional[str]) -> "StackStatus":
        """Map a raw CloudFormation StackStatus string onto the enum."""
        if not raw:
            return cls.UNKNOWN
        try:
            status = cls(raw)
        except ValueError:
            return cls.UNKNOWN
        if status in (cls.NOT_DEPLOYED, cls.UNKNOWN):
            # Synthetic states never come from CloudFormation
            return cls.UNKNOWN
        return status


Color = Union[str, Tuple[int, int, int]]

ORANGE: Color = (255, 165, 0)


@dataclass(frozen=True)
class StatusStyle:
    """How a status is shown to the operator."""
    emoji: str
    color: Color
    text: str

    def render(self, text: Optional[str] = None) -> str:
        return click.style(f"{self.emoji} {text or self.text}", fg=self.color)


STATUS_STYLES: Dict[StackStatus, StatusStyle] = {
    StackStatus.CREATE_COMPLETE: StatusStyle("✅", "green", "Active"),
    StackStatus.UPDATE_COMPLETE: StatusStyle("✅", "green", "Updated"),
    StackStatus.IMPORT_COMPLETE: StatusStyle("✅", "green", "Imported"),
    StackStatus.CREATE_FAILED: StatusStyle("❌", "red", "Create Failed"),
    StackStatus.UPDATE_FAILED: StatusStyle("❌", "red", "Update Failed"),
    StackStatus.UPDATE_ROLLBACK_FAILED: StatusStyle("❌", "red", "Rollback Failed"),
    StackStatus.DELETE_FAILED: StatusStyle("❌", "red", "Delete Failed"),
    StackStatus.ROLLBACK_FAILED: StatusStyle("❌", "red", "Rollback Failed"),
    StackStatus.IMPORT_ROLLBACK_FAILED: StatusStyle("❌", "red", "Import Rollback Failed"),
    StackStatus.CREATE_IN_PROGRESS: StatusStyle("🔄", "yellow", "Creating"),
    StackStatus.UPDATE_IN_PROGRESS: StatusStyle("🔄", "yellow", "Updating"),
    StackStatus.UPDATE_COMPLETE_CLEANUP_IN_PROGRESS: StatusStyle("🔄", "yellow", "Cleaning Up"),
    StackStatus.UPDATE_ROLLBACK_IN_PROGRESS: StatusStyle("🔄", "yellow", "Rolling Back"),
    StackStatus.UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS: StatusStyle("🔄", "yellow", "Rollback Cleanup"),
    StackStatus.ROLLBACK_IN_PROGRESS: StatusStyle("🔄", "yellow", "Rolling Back"),
    StackStatus.IMPORT_ROLLBACK_IN_PROGRESS: StatusStyle("🔄", "yellow", "Import Rolling Back"),
    StackStatus.DELETE_IN_PROGRESS: StatusStyle("🗑️", "yellow", "Deleting"),
    StackStatus.ROLLBACK_COMPLETE: StatusStyle("⚠️", ORANGE, "Rolled Back"),
    StackStatus.UPDATE_ROLLBACK_COMPLETE: StatusStyle("⚠️", ORANGE, "Rolled Back"),
    StackStatus.IMPORT_ROLLBACK_COMPLETE: StatusStyle("⚠️", ORANGE, "Import Rolled Back"),
    StackStatus.DELETE_COMPLETE: StatusStyle("🗑️", "bright_black", "Deleted"),
    StackStatus.REVIEW_IN_PROGRESS: StatusStyle("👀", "blue", "Reviewing"),
    StackStatus.IMPORT_IN_PROGRESS: StatusStyle("📥", "blue", "Importing"),
    StackStatus.NOT_DEPLOYED: StatusStyle("⏳", "bright_black", "Not Deployed"),
    StackStatus.UNKNOWN: StatusStyle("❓", "bright_black", "Unknown"),
}

_missing_styles = [status.name for status in StackStatus if status not in STATUS_STYLES]
if _missing_styles:
    raise RuntimeError(f"No presentation defined for stack status: {', '.join(_missing_styles)}")


def status_style(status: StackStatus) -> StatusStyle:
    """Return the presentation for a status."""
    return STATUS_STYLES[status]


def format_status(status: StackStatus, raw_status: Optional[str] = None) -> str:
    """
    Render a status as a colored "emoji text" label.

    Args:
        status: Reconciled status
        raw_status: Raw CloudFormation status, shown when it had no enum member

    Returns:
        Styled label
    """
    style = STATUS_STYLES[status]
    if status is StackStatus.UNKNOWN and raw_status:
        return style.render(raw_status)
    return style.render()
