"""
Parsing of the CDK app's declared-stack listing (`cdk list` output).
"""

import logging
import re
from typing import List, Optional

from .models import DeclaredStack, strip_parenthetical

logger = logging.getLogger(__name__)

NOISE_PREFIXES = (
    "[WARNING]",
    "> nx run",
    "NX   Successfully ran target",
    "CDK",
    "npm",
    "yarn",
    "pnpm",
    "————",
)

NOISE_FRAGMENTS = (
    "deprecated",
    "This API will be removed",
    "Installing",
    "Building",
    "Synthesizing",
    "✨",
    "⚠",
    "ℹ",
    "⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏",
)

STACK_LINE = re.compile(r"^[a-zA-Z0-9\-_/()\s]+$")
HAS_LETTER = re.compile(r"[a-zA-Z]")
BACKING_ID = re.compile(r"\(([^)]+)\)$")


def is_noise_line(line: str) -> bool:
    """Return True for lines of build/tool chatter that are not stack names."""
    trimmed = line.strip()
    if not trimmed:
        return True
    if trimmed.startswith(NOISE_PREFIXES):
        return True
    if any(fragment in trimmed for fragment in NOISE_FRAGMENTS):
        return True
    if not STACK_LINE.match(trimmed):
        return True
    return not HAS_LETTER.search(trimmed)


def parse_stack_line(line: str) -> Optional[DeclaredStack]:
    """
    Parse a single listing line into a declared stack.

    Args:
        line: Line such as "Pipeline/ServiceA (cf-pipeline-servicea-prod)"

    Returns:
        DeclaredStack, or None when the line is noise
    """
    if is_noise_line(line):
        return None

    full_name = line.strip()
    clean_name = strip_parenthetical(full_name)

    match = BACKING_ID.search(full_name)
    backing_id = match.group(1) if match else clean_name

    display_name = clean_name.split("/")[-1] if "/" in clean_name else clean_name

    return DeclaredStack(
        display_name=display_name.strip() or clean_name,
        full_name=full_name,
        backing_id=backing_id.strip(),
    )


def parse_stack_listing(output: str) -> List[DeclaredStack]:
    """
    Parse a full listing into declared stacks, preserving order.

    Duplicate lines keep their first occurrence.
    """
    stacks = []
    seen = set()

    for line in output.splitlines():
        stack = parse_stack_line(line)
        if stack is None:
            if line.strip():
                logger.debug(f"Skipping listing noise: {line.strip()}")
            continue
        if stack.full_name in seen:
            logger.debug(f"Skipping duplicate stack line: {stack.full_name}")
            continue
        seen.add(stack.full_name)
        stacks.append(stack)

    logger.debug(f"Parsed {len(stacks)} declared stacks")
    return stacks
