"""
Error taxonomy for the setup wizard.

None of these errors is fatal to the host: each one is caught where it occurs
and converted into a navigation outcome or a logged issue.
"""

from typing import Optional


class SetupWizardError(Exception):
    """Base class for wizard errors."""


class UserCanceled(SetupWizardError):
    """The user backed out of a sub-flow; handled as PREVIOUS navigation."""


class ExternalUnavailable(SetupWizardError):
    """An external sub-flow could not be started (no authenticator, no handler)."""


class TransientNetwork(SetupWizardError):
    """The connectivity probe failed with an I/O error."""


class StateRestoreMismatch(SetupWizardError):
    """A restored state blob references a page key that no longer exists."""

    def __init__(self, key: str, message: Optional[str] = None):
        super().__init__(message or f"Unknown page key in saved state: {key}")
        self.key = key


class HostContractViolation(SetupWizardError):
    """The wizard was driven into an impossible state (e.g. cursor out of range)."""
