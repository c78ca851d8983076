"""
Stack inventory: declared stacks, live status lookups and reconciliation.
"""

from .models import DeclaredStack, StackRecord, ReconciledStack, InventorySummary, strip_parenthetical
from .status import StackStatus, StatusStyle, STATUS_STYLES, format_status, status_style
from .listing import parse_stack_listing, parse_stack_line, is_noise_line
from .lookup import CloudFormationLookup
from .reconcile import reconcile, reconcile_stack

__all__ = [
    "DeclaredStack",
    "StackRecord",
    "ReconciledStack",
    "InventorySummary",
    "strip_parenthetical",
    "StackStatus",
    "StatusStyle",
    "STATUS_STYLES",
    "format_status",
    "status_style",
    "parse_stack_listing",
    "parse_stack_line",
    "is_noise_line",
    "CloudFormationLookup",
    "reconcile",
    "reconcile_stack",
]
