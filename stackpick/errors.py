"""
Exception types raised across stackpick.
"""

from typing import Optional


class StackpickError(Exception):
    """Base class for all stackpick errors."""


class StackListingError(StackpickError):
    """The declared-stack listing could not be obtained at all."""

    def __init__(self, message: str, output: Optional[str] = None, stderr: Optional[str] = None):
        super().__init__(message)
        self.output = output
        self.stderr = stderr


class StackLookupError(StackpickError):
    """A single CloudFormation status lookup failed."""

    def __init__(self, backing_id: str, message: str):
        super().__init__(f"Lookup failed for {backing_id}: {message}")
        self.backing_id = backing_id


class DispatchError(StackpickError):
    """The external deploy/destroy executor could not be launched."""


class TerminalUnavailableError(StackpickError):
    """Interactive selection was requested without a terminal on stdin."""


class VaultError(StackpickError):
    """aws-vault could not provide session credentials for a profile."""

    def __init__(self, profile: str, message: str):
        super().__init__(f"aws-vault credentials for {profile} unavailable: {message}")
        self.profile = profile
