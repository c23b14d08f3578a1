"""
Async sub-flow adapter for the setup wizard.

Pages that front an external interaction (network picker, captive portal
login, account authenticator, system settings) share one pattern: LOAD
dispatches the interaction, and its result either advances, retreats or
skips forward. This module holds the per-page state machine for that
pattern and the factory that builds such pages over the plain Page record.
"""

import copy
import logging
from enum import Enum
from concurrent.futures import Future
from typing import Callable, Optional, Set, Dict, Any

from ..models.errors import ExternalUnavailable, UserCanceled
from ..models.page import Page, PageAction, WizardCallbacks
from ..models.subflow import SubFlowIntent, ResultStatus


logger = logging.getLogger(__name__)

SUCCESS_STATUSES = (ResultStatus.OK, ResultStatus.FIRST_USER)


class SubFlowState(Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    ADVANCING = "advancing"
    RETREATING = "retreating"


class SubFlow:
    """
    State machine of one page's external interaction.

    The generation counter changes whenever the flow is restarted or
    abandoned, so worker results captured under an older generation can be
    recognised and dropped. Request ids are accepted at most once.
    """

    def __init__(self):
        self.state = SubFlowState.IDLE
        self.generation = 0
        self.pending: Set[int] = set()

    @property
    def dispatching(self) -> bool:
        return self.state is SubFlowState.DISPATCHING

    def begin(self) -> int:
        """Enter DISPATCHING under a new generation."""
        self.generation += 1
        self.state = SubFlowState.DISPATCHING
        self.pending.clear()
        return self.generation

    def is_current(self, generation: int) -> bool:
        return self.dispatching and generation == self.generation

    def expect(self, request_id: int) -> None:
        self.pending.add(int(request_id))

    def accept(self, request_id: int) -> bool:
        """Consume a pending request id; False for unknown or repeated ids."""
        request_id = int(request_id)
        if not self.dispatching or request_id not in self.pending:
            return False
        self.pending.discard(request_id)
        return True

    def resolve(self, advance: bool) -> None:
        self.state = SubFlowState.ADVANCING if advance else SubFlowState.RETREATING
        self.pending.clear()

    def reset(self) -> None:
        self.state = SubFlowState.IDLE
        self.pending.clear()

    def abandon(self) -> None:
        """Drop the interaction in flight; late results no longer match."""
        if self.dispatching:
            logger.debug(f"Abandoning sub-flow, pending requests: {sorted(self.pending)}")
        self.generation += 1
        self.reset()

    def save(self) -> Dict[str, Any]:
        return {"state": self.state.value, "pending": sorted(self.pending)}

    def load(self, blob: Dict[str, Any]) -> None:
        """
        Restore a saved flow. Only a dispatching flow with pending requests
        is carried over; anything else restarts idle.
        """
        pending = blob.get("pending") or []
        if blob.get("state") == SubFlowState.DISPATCHING.value and pending:
            self.state = SubFlowState.DISPATCHING
            self.pending = {int(request_id) for request_id in pending}
        else:
            self.reset()

    def __repr__(self) -> str:
        return f"SubFlow(state={self.state.name}, generation={self.generation}, pending={sorted(self.pending)})"


def classify(status: ResultStatus) -> SubFlowState:
    """OK and FIRST_USER advance, CANCELED retreats, anything else skips forward."""
    if status is ResultStatus.CANCELED:
        return SubFlowState.RETREATING
    return SubFlowState.ADVANCING


def launch(callbacks: WizardCallbacks, flow: SubFlow, intent: SubFlowIntent,
           request_id: int) -> bool:
    """
    Ask the host to start an external interaction.

    Returns:
        True if the interaction was started; otherwise the wizard has already
        moved on (advanced when unavailable, retreated when canceled)
    """
    flow.expect(request_id)
    try:
        callbacks.start_external_flow(intent, request_id)
        return True
    except ExternalUnavailable as e:
        logger.warning(f"Cannot start {intent.describe()}: {e}")
        flow.resolve(advance=True)
        callbacks.advance()
    except UserCanceled:
        logger.info(f"User canceled {intent.describe()}")
        flow.resolve(advance=False)
        callbacks.retreat()
    return False


def finish_with(page: Page, callbacks: WizardCallbacks, status: ResultStatus,
                completed: Optional[bool] = None) -> None:
    """
    Resolve the page's flow according to a result status.

    Args:
        completed: Whether an advancing result completes the page; defaults
            to True for successful statuses
    """
    outcome = classify(status)
    page.subflow.resolve(advance=outcome is SubFlowState.ADVANCING)
    if outcome is SubFlowState.RETREATING:
        callbacks.retreat()
        return

    if completed is None:
        completed = status in SUCCESS_STATUSES
    if completed:
        page.mark_completed()
    callbacks.advance()


def run_guarded(page: Page, callbacks: WizardCallbacks, task: Callable[[], Any],
                handle: Callable[[Future], None]) -> Future:
    """Run a worker for the page's flow; its completion is dropped if the flow moved on."""
    generation = page.subflow.generation

    def _on_done(future: Future) -> None:
        if not page.subflow.is_current(generation):
            logger.debug(f"Dropping stale worker result for {page.key}")
            return
        handle(future)

    return callbacks.run_worker(task, _on_done)


def _save_with_flow(page: Page) -> Dict[str, Any]:
    extra = copy.deepcopy(page.extra)
    extra["subflow"] = page.subflow.save()
    return extra


def _load_with_flow(page: Page, extra: Dict[str, Any]) -> None:
    extra = copy.deepcopy(extra)
    flow_blob = extra.pop("subflow", None)
    page.extra.update(extra)
    if isinstance(flow_blob, dict):
        page.subflow.load(flow_blob)
    else:
        page.subflow.reset()


def create_subflow_page(key: str, title_id: str,
                        start: Callable[[Page, WizardCallbacks], None],
                        on_result: Callable[[Page, WizardCallbacks, int, ResultStatus, Any], None],
                        retreat_on_back: bool = False,
                        **kwargs: Any) -> Page:
    """
    Build a page fronting an external interaction.

    Args:
        key: Page key
        title_id: Title string id
        start: Called on LOAD with the flow freshly begun; dispatches the interaction
        on_result: Called for every accepted external result
        retreat_on_back: Whether a LOAD reached by moving backward retreats
            further instead of restarting the interaction
        **kwargs: Remaining Page fields

    Returns:
        The page
    """

    def _action(page: Page, callbacks: WizardCallbacks, action: PageAction) -> None:
        flow = page.subflow
        if action is PageAction.LOAD:
            if retreat_on_back and callbacks.direction is PageAction.PREVIOUS:
                flow.reset()
                callbacks.retreat()
                return
            flow.begin()
            start(page, callbacks)
        elif action is PageAction.NEXT:
            if flow.dispatching:
                logger.info(f"Skipping {page.key}")
            flow.abandon()
            callbacks.advance()
        elif action is PageAction.PREVIOUS:
            if callbacks.is_first_page:
                # Nothing to go back to; the interaction stays live
                return
            flow.abandon()
            callbacks.retreat()

    def _result(page: Page, callbacks: WizardCallbacks, request_id: int,
                status: ResultStatus, payload: Any) -> bool:
        if not page.subflow.accept(request_id):
            logger.debug(f"{page.key} ignoring result for request {request_id}")
            return False
        on_result(page, callbacks, request_id, status, payload)
        return True

    kwargs.setdefault("layout", "loading")
    return Page(
        key=key,
        title_id=title_id,
        subflow=SubFlow(),
        action_handler=_action,
        result_handler=_result,
        state_saver=_save_with_flow,
        state_loader=_load_with_flow,
        **kwargs
    )
