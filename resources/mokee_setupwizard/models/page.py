"""
Page model for the setup wizard.

A page is a capability record: a handful of data fields plus function
references for rendering, action handling and external results. Variants
(loading pages fronting a sub-flow, settings pages with a payload) are built
by factory functions over this one record type instead of subclasses.
"""

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Callable, Dict, Any, TYPE_CHECKING

from .strings import R

if TYPE_CHECKING:
    from concurrent.futures import Future
    from .subflow import SubFlowIntent, ResultStatus
    from ..gui.host_shell import HostShell
    from ..services.platform_service import Platform


logger = logging.getLogger(__name__)


class PageAction(Enum):
    """Actions delivered to Page.on_action."""
    NEXT = "next"
    PREVIOUS = "previous"
    LOAD = "load"


@dataclass
class PageView:
    """
    Framework-neutral rendering of a page.

    ``layout`` names the host template to use, ``arguments`` carries the data
    it displays and ``bindings`` maps UI event names to page callables.
    """
    key: str
    title_id: str
    layout: str
    action: PageAction
    arguments: Dict[str, Any] = field(default_factory=dict)
    bindings: Dict[str, Callable[..., None]] = field(default_factory=dict)


class WizardCallbacks(ABC):
    """
    Narrow controller interface handed to page handlers on every call.

    Pages never store it; the controller passes itself per invocation.
    """

    @property
    @abstractmethod
    def host(self) -> 'HostShell':
        """The host shell the wizard is mounted in."""

    @property
    @abstractmethod
    def platform(self) -> 'Platform':
        """Platform settings/broadcast handle."""

    @property
    @abstractmethod
    def direction(self) -> PageAction:
        """Direction of the last cursor move (NEXT or PREVIOUS)."""

    @property
    @abstractmethod
    def is_first_page(self) -> bool:
        """Whether no visible page precedes the current one."""

    @abstractmethod
    def advance(self) -> None:
        """Move to the next visible page, or finish at the last one."""

    @abstractmethod
    def retreat(self) -> None:
        """Move to the previous visible page; no-op on the first one."""

    @abstractmethod
    def start_external_flow(self, intent: 'SubFlowIntent', request_id: int) -> None:
        """Ask the host to start a platform sub-flow."""

    @abstractmethod
    def run_worker(self, task: Callable[[], Any],
                   on_done: Callable[['Future'], None]) -> 'Future':
        """Run ``task`` off the navigation thread; ``on_done`` runs back on it."""


def default_render(page: 'Page', host: 'HostShell', action: PageAction) -> PageView:
    return PageView(
        key=page.key,
        title_id=page.title_id,
        layout=page.layout,
        action=action,
        arguments=copy.deepcopy(page.extra)
    )


def default_action(page: 'Page', callbacks: WizardCallbacks, action: PageAction) -> None:
    """NEXT completes and advances, PREVIOUS retreats, LOAD does nothing."""
    if action is PageAction.NEXT:
        page.mark_completed()
        callbacks.advance()
    elif action is PageAction.PREVIOUS:
        callbacks.retreat()


def default_result(page: 'Page', callbacks: WizardCallbacks, request_id: int,
                   status: 'ResultStatus', payload: Any) -> bool:
    return False


@dataclass(eq=False)
class Page:
    """
    Unit of wizard progression.

    Attributes:
        key: Stable unique identifier, also the tag of the rendered view
        title_id: Title string resource id
        next_button_title_id: Label of the next button while this page is current
        prev_button_title_id: Label of the previous button; None means chevron only
        layout: Host template used to render the page
        optional: Whether the page may be skipped without completing it
        completed: Completion flag; only reset() clears it within a session
        extra: Opaque page payload persisted with the wizard state
        subflow: State machine of the external sub-flow the page fronts, if any
    """
    key: str
    title_id: str
    next_button_title_id: str = R.NEXT
    prev_button_title_id: Optional[str] = None
    layout: str = "page"
    optional: bool = False
    completed: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)
    subflow: Optional[Any] = None

    renderer: Callable[['Page', Any, PageAction], PageView] = default_render
    action_handler: Callable[['Page', WizardCallbacks, PageAction], None] = default_action
    result_handler: Callable[..., bool] = default_result
    hidden_check: Optional[Callable[[], bool]] = None
    state_saver: Optional[Callable[['Page'], Dict[str, Any]]] = None
    state_loader: Optional[Callable[['Page', Dict[str, Any]], None]] = None
    finalizer: Optional[Callable[['Page', 'Platform'], None]] = None

    @property
    def hidden(self) -> bool:
        """Whether navigation skips this page, evaluated against the environment."""
        if self.hidden_check is None:
            return False
        try:
            return bool(self.hidden_check())
        except Exception as e:
            logger.error(f"Visibility check failed for {self.key}: {e}")
            return False

    def render_binding(self, host: 'HostShell', action: PageAction) -> PageView:
        return self.renderer(self, host, action)

    def on_action(self, callbacks: WizardCallbacks, action: PageAction) -> None:
        self.action_handler(self, callbacks, action)

    def on_external_result(self, callbacks: WizardCallbacks, request_id: int,
                           status: 'ResultStatus', payload: Any = None) -> bool:
        return bool(self.result_handler(self, callbacks, request_id, status, payload))

    def mark_completed(self) -> None:
        if not self.completed:
            logger.debug(f"Page completed: {self.key}")
        self.completed = True

    def reset(self) -> None:
        """Explicitly clear completion and any sub-flow state."""
        self.completed = False
        if self.subflow is not None:
            self.subflow.reset()

    def save_state(self) -> Dict[str, Any]:
        """Per-page state record: completion plus the page's own payload."""
        if self.state_saver is not None:
            extra = self.state_saver(self)
        else:
            extra = copy.deepcopy(self.extra)
        return {"completed": self.completed, "extra": extra}

    def load_state(self, extra: Dict[str, Any]) -> None:
        if self.state_loader is not None:
            self.state_loader(self, extra)
        else:
            self.extra.update(copy.deepcopy(extra))

    def finalize(self, platform: 'Platform') -> None:
        if self.finalizer is not None:
            self.finalizer(self, platform)

    def __repr__(self) -> str:
        return f"Page(key={self.key!r}, completed={self.completed})"


def create_page(key: str, title_id: str, **kwargs: Any) -> Page:
    """Build a plain page with the default NEXT/PREVIOUS behavior."""
    return Page(key=key, title_id=title_id, **kwargs)
