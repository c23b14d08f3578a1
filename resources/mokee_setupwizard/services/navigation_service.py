"""
Navigation controller for the setup wizard.

The controller turns host intents (next, previous, external results) into
page actions and cursor moves. Every intent is queued and executed serially
on the navigation thread; work a handler enqueues (a LOAD on the page it
advanced to, a worker completion) runs only after that handler returns.
"""

import logging
from collections import deque
from concurrent.futures import Future
from typing import Callable, Any, Deque, Optional, Union, TYPE_CHECKING

from ..models.page import Page, PageAction, WizardCallbacks
from ..models.subflow import SubFlowIntent, ResultStatus
from ..models.wizard_data import WizardData

if TYPE_CHECKING:
    from ..gui.host_shell import HostShell
    from .platform_service import Platform
    from .scheduler import Scheduler


class NavigationController(WizardCallbacks):
    """
    Drives the cursor of a WizardData on behalf of the host.

    The controller is handed to page handlers on each call as their
    WizardCallbacks; pages keep no reference to it.
    """

    def __init__(self, data: WizardData, host: 'HostShell', platform: 'Platform',
                 scheduler: 'Scheduler'):
        """
        Initialize controller.

        Args:
            data: Wizard data whose cursor this controller moves
            host: Host shell receiving chrome updates and external flows
            platform: Platform handle exposed to pages
            scheduler: Scheduler running workers and posting back
        """
        self.data = data
        self._host = host
        self._platform = platform
        self._scheduler = scheduler

        self._direction = PageAction.NEXT
        self._queue: Deque[Callable[[], None]] = deque()
        self._dispatching = False
        self._finished = False
        self._torn_down = False

        # Handler nesting, observed by tests
        self.depth = 0
        self.max_depth = 0

        self._logger = logging.getLogger(__name__)

    # WizardCallbacks

    @property
    def host(self) -> 'HostShell':
        return self._host

    @property
    def platform(self) -> 'Platform':
        return self._platform

    @property
    def direction(self) -> PageAction:
        return self._direction

    @property
    def is_first_page(self) -> bool:
        return self.data.is_first_page()

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    @property
    def finished(self) -> bool:
        return self._finished

    def advance(self) -> None:
        """Move to the next visible page and queue its LOAD; finish past the last one."""
        index = self.data.next_visible_index()
        if index is None:
            self._finish()
            return
        self._direction = PageAction.NEXT
        page = self.data.move_to(index)
        self._queue_load(page)

    def retreat(self) -> None:
        index = self.data.previous_visible_index()
        if index is None:
            self._logger.debug("Already on the first page, not retreating")
            return
        self._direction = PageAction.PREVIOUS
        page = self.data.move_to(index)
        self._queue_load(page)

    def start_external_flow(self, intent: SubFlowIntent, request_id: int) -> None:
        if self._torn_down:
            self._logger.debug(f"Torn down, not starting {intent.describe()}")
            return
        self._logger.info(f"Starting external flow: {intent.describe()} (request {int(request_id)})")
        self._host.start_external_flow(intent, int(request_id))

    def run_worker(self, task: Callable[[], Any],
                   on_done: Callable[[Future], None]) -> Future:
        def _posted(future: Future) -> None:
            if self._torn_down:
                self._logger.debug("Torn down, dropping worker result")
                return
            self._submit(lambda: on_done(future))

        return self._scheduler.run_worker(task, _posted)

    # Host intents

    def mount(self, restored: bool = False) -> None:
        """
        Show the current page.

        A fresh mount also fires LOAD on it. A restored mount does not, so a
        sub-flow started before the state was saved is not started again,
        unless nothing of that sub-flow is left to wait for.
        """
        self._submit(lambda: self._mount(restored))

    def on_next_page(self) -> None:
        self._submit(lambda: self._page_action(PageAction.NEXT))

    def on_previous_page(self) -> None:
        self._submit(lambda: self._page_action(PageAction.PREVIOUS))

    def on_external_result(self, request_id: int,
                           status: Union[ResultStatus, int, str],
                           payload: Any = None) -> None:
        if self._torn_down:
            self._logger.debug(f"Torn down, dropping result for request {request_id}")
            return
        status = ResultStatus.coerce(status)
        self._submit(lambda: self._deliver_result(int(request_id), status, payload))

    def revalidate(self) -> None:
        """Re-check visibility of the current page and skip it if it became hidden."""
        self._submit(self._revalidate)

    def teardown(self) -> None:
        """Abandon pending sub-flows and drop queued and future work."""
        if self._torn_down:
            return
        self._torn_down = True
        self._queue.clear()
        for page in self.data.registry:
            if page.subflow is not None:
                page.subflow.abandon()
        self._logger.debug("Navigation controller torn down")

    # Dispatch

    def _submit(self, task: Callable[[], None]) -> None:
        if self._torn_down or self._finished:
            return
        self._queue.append(task)
        if not self._dispatching:
            self._drain()

    def _drain(self) -> None:
        self._dispatching = True
        self._host.enable_chrome(False)
        try:
            while self._queue and not self._torn_down and not self._finished:
                task = self._queue.popleft()
                self.depth += 1
                self.max_depth = max(self.max_depth, self.depth)
                try:
                    task()
                except Exception as e:
                    self._logger.exception(f"Navigation action failed: {e}")
                finally:
                    self.depth -= 1
        finally:
            self._dispatching = False
            # Chrome stays off through the finish transition
            if not self._torn_down and not self._finished:
                self._host.enable_chrome(True)

    def _queue_load(self, page: Page) -> None:
        self._queue.append(lambda: self._load(page))

    def _load(self, page: Page) -> None:
        if self.data.get_current_page() is not page:
            self._logger.debug(f"Dropping LOAD for {page.key}, no longer current")
            return
        page.on_action(self, PageAction.LOAD)

    def _page_action(self, action: PageAction) -> None:
        page = self.data.get_current_page()
        self._logger.debug(f"{action.name} on {page.key}")
        page.on_action(self, action)

    def _deliver_result(self, request_id: int, status: ResultStatus, payload: Any) -> None:
        page = self.data.get_current_page()
        if not page.on_external_result(self, request_id, status, payload):
            self._logger.debug(f"Unhandled result for request {request_id} on {page.key}")

    def _mount(self, restored: bool) -> None:
        self._direction = PageAction.NEXT
        index = self._visible_index_for(self.data.cursor)
        if index is not None and index != self.data.cursor:
            self.data.move_to(index, notify=False)
        page = self.data.get_current_page()
        self._logger.info(f"Mounting wizard at {page.key} ({'restored' if restored else 'fresh'})")
        self.data.notify_page_loaded(page)
        if not restored:
            self._queue_load(page)
        elif page.subflow is not None and not page.subflow.dispatching:
            # Worker results in flight at save time are lost
            self._logger.info(f"Restarting {page.key}, its interaction did not survive the restore")
            self._queue_load(page)

    def _revalidate(self) -> None:
        page = self.data.get_current_page()
        if page.hidden:
            index = self._visible_index_for(self.data.cursor)
            if index is None:
                self._logger.warning("No visible page left to move to")
            else:
                self._logger.info(f"Current page {page.key} became hidden, skipping it")
                moved = self.data.move_to(index)
                self._queue_load(moved)
        self.data.notify_page_tree_changed()

    def _visible_index_for(self, index: int) -> Optional[int]:
        """The index itself if visible, else the nearest one in the move direction, then the other."""
        if not self.data.registry.at(index).hidden:
            return index
        forward = self.data.next_visible_index(index)
        backward = self.data.previous_visible_index(index)
        if self._direction is PageAction.PREVIOUS:
            return backward if backward is not None else forward
        return forward if forward is not None else backward

    def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._logger.info("Last page passed, finishing wizard")
        self.data.notify_finish()
