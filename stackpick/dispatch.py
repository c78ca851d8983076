"""
Batched deploy/destroy dispatch of a confirmed selection.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from .errors import DispatchError
from .inventory.models import strip_parenthetical

logger = logging.getLogger(__name__)


class Verb(Enum):
    """Batch operations the executor supports."""
    DEPLOY = "deploy"
    DESTROY = "destroy"


@dataclass
class DispatchResult:
    """Aggregate outcome of one batch; the executor reports no per-stack detail."""
    verb: Verb
    stacks: List[str]
    succeeded: bool
    reason: Optional[str] = None

    def describe(self) -> str:
        action = "deployed" if self.verb is Verb.DEPLOY else "destroyed"
        if self.succeeded:
            return f"✅ Successfully {action} {len(self.stacks)} stack(s)!"
        text = f"❌ Failed to {self.verb.value} {len(self.stacks)} stack(s)."
        if self.reason:
            text += f" {self.reason}."
        return text + " Which stacks succeeded is unknown; check the output above for details."


class ActionDispatcher:
    """Sends a whole selection to the executor as one batch."""

    def __init__(self, executor):
        self.executor = executor

    def dispatch(self, verb: Verb, full_names: Sequence[str]) -> DispatchResult:
        """
        Run one deploy/destroy invocation for all selected stacks.

        Args:
            verb: Operation to perform
            full_names: Selected stack full names, in the order of the list they were picked from

        Returns:
            DispatchResult with the aggregate success flag

        Raises:
            ValueError: If nothing was selected
        """
        if not full_names:
            raise ValueError("No stacks selected")

        names = []
        for full_name in full_names:
            name = strip_parenthetical(full_name)
            if name not in names:
                names.append(name)

        logger.info(f"Dispatching {verb.value} for {len(names)} stack(s): {', '.join(names)}")

        run = self.executor.deploy if verb is Verb.DEPLOY else self.executor.destroy
        try:
            succeeded = run(names)
        except DispatchError as e:
            logger.error(f"{verb.value} batch could not start: {e}")
            return DispatchResult(verb=verb, stacks=names, succeeded=False, reason=str(e))

        if not succeeded:
            logger.error(f"{verb.value} batch failed for {len(names)} stack(s)")
        return DispatchResult(verb=verb, stacks=names, succeeded=bool(succeeded))
