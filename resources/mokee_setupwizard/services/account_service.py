"""
Account authenticator seam for the setup wizard.

The account page asks an external authenticator to add an account. The
authenticator answers with an intent for the host to start, with an
in-progress status, or with a failure.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any

from ..models.errors import ExternalUnavailable
from ..models.subflow import (
    SubFlowIntent, ACTION_ADD_ACCOUNT, EXTRA_ACCOUNT_TYPE,
    EXTRA_FIRST_RUN, EXTRA_ALLOW_SKIP, EXTRA_USE_IMMERSIVE
)
from .platform_service import Platform, ACCOUNT_AUTHENTICATORS, ACCOUNTS


class AuthenticatorStatus(Enum):
    INTENT = "intent"
    IN_PROGRESS = "in_progress"
    FAILED = "failed"


@dataclass
class AuthenticatorResponse:
    """Answer of an authenticator to an add-account request."""
    status: AuthenticatorStatus
    intent: Optional[SubFlowIntent] = None
    error: Optional[str] = None


def first_run_options() -> Dict[str, Any]:
    """Options passed to the authenticator during first boot."""
    return {
        EXTRA_FIRST_RUN: True,
        EXTRA_ALLOW_SKIP: True,
        EXTRA_USE_IMMERSIVE: True,
    }


class AccountService(ABC):
    """Interface to the platform account manager."""

    @abstractmethod
    def is_available(self, account_type: str) -> bool:
        """Whether an authenticator for the account type is installed."""

    @abstractmethod
    def add_account(self, account_type: str, options: Dict[str, Any]) -> AuthenticatorResponse:
        """
        Ask the authenticator to add an account. May block on IPC.

        Raises:
            ExternalUnavailable: If no authenticator handles the account type
        """

    @abstractmethod
    def account_exists(self, account_type: str) -> bool:
        """Whether at least one account of the type is present."""


class PlatformAccountService(AccountService):
    """
    Account service reading the platform settings.

    ``account_authenticators`` lists installed authenticator types and
    ``accounts`` lists the types that currently have an account.
    """

    def __init__(self, platform: Platform):
        self.platform = platform
        self._logger = logging.getLogger(__name__)

    def is_available(self, account_type: str) -> bool:
        return account_type in self.platform.get_list_setting(ACCOUNT_AUTHENTICATORS)

    def add_account(self, account_type: str, options: Dict[str, Any]) -> AuthenticatorResponse:
        if not self.is_available(account_type):
            raise ExternalUnavailable(f"No authenticator for account type {account_type}")

        extras = dict(options)
        extras[EXTRA_ACCOUNT_TYPE] = account_type
        self._logger.debug(f"Requesting add-account flow for {account_type}")
        return AuthenticatorResponse(
            status=AuthenticatorStatus.INTENT,
            intent=SubFlowIntent(ACTION_ADD_ACCOUNT, extras)
        )

    def account_exists(self, account_type: str) -> bool:
        return account_type in self.platform.get_list_setting(ACCOUNTS)
