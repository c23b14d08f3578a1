"""
Account setup page.

Asks the account authenticator to add an account on a worker thread and
starts the flow it returns. The page only counts as completed when an
account of the type exists afterwards.
"""

import logging
from concurrent.futures import Future
from typing import Any

from ..models.errors import ExternalUnavailable
from ..models.page import Page, WizardCallbacks
from ..models.strings import R
from ..models.subflow import RequestCode, ResultStatus
from ..services.account_service import (
    AccountService, AuthenticatorResponse, AuthenticatorStatus, first_run_options
)
from ..services.subflow_service import (
    create_subflow_page, finish_with, launch, run_guarded, SUCCESS_STATUSES
)


logger = logging.getLogger(__name__)

KEY = "GmsAccountPage"
DEFAULT_ACCOUNT_TYPE = "com.google"


def create_account_page(account_service: AccountService,
                        account_type: str = DEFAULT_ACCOUNT_TYPE) -> Page:
    """
    Build the account page.

    Args:
        account_service: Authenticator seam
        account_type: Account type to add

    Returns:
        The page, hidden while no authenticator handles the account type
    """

    def _on_response(page: Page, callbacks: WizardCallbacks, future: Future) -> None:
        try:
            response: AuthenticatorResponse = future.result()
        except ExternalUnavailable as e:
            logger.warning(f"Account setup unavailable: {e}")
            response = AuthenticatorResponse(AuthenticatorStatus.FAILED, error=str(e))
        except Exception as e:
            logger.error(f"Authenticator call failed: {e}")
            response = AuthenticatorResponse(AuthenticatorStatus.FAILED, error=str(e))

        if response.status is AuthenticatorStatus.INTENT and response.intent is not None:
            launch(callbacks, page.subflow, response.intent, RequestCode.SETUP_ACCOUNT)
        elif response.status is AuthenticatorStatus.IN_PROGRESS:
            logger.info("Account setup in progress, waiting for the authenticator")
            page.subflow.expect(RequestCode.SETUP_ACCOUNT)
        else:
            page.subflow.resolve(advance=True)
            callbacks.advance()

    def _start(page: Page, callbacks: WizardCallbacks) -> None:
        run_guarded(
            page, callbacks,
            lambda: account_service.add_account(account_type, first_run_options()),
            lambda future: _on_response(page, callbacks, future)
        )

    def _on_result(page: Page, callbacks: WizardCallbacks, request_id: int,
                   status: ResultStatus, payload: Any) -> None:
        completed = status in SUCCESS_STATUSES and account_service.account_exists(account_type)
        if status in SUCCESS_STATUSES and not completed:
            logger.info(f"No {account_type} account after setup, leaving page incomplete")
        finish_with(page, callbacks, status, completed=completed)

    return create_subflow_page(
        KEY, R.LOADING,
        start=_start,
        on_result=_on_result,
        retreat_on_back=True,
        hidden_check=lambda: not account_service.is_available(account_type),
        next_button_title_id=R.SKIP,
        optional=True
    )
