"""
Wizard-wide data model.

This module holds the WizardData class: the page registry, the cursor over
it, the listeners observing page changes and the save/restore of the whole
wizard state across host reconfiguration and process restarts.
"""

import logging
from typing import Dict, Any, Optional, List, Union, Iterable, TYPE_CHECKING

from .page import Page
from .registry import PageRegistry
from .errors import SetupWizardError, StateRestoreMismatch, HostContractViolation

if TYPE_CHECKING:
    from ..services.platform_service import Platform


STATE_VERSION = "1.0"


class WizardDataListener:
    """Observer of wizard data events; every callback defaults to a no-op."""

    def on_page_loaded(self, page: Page) -> None:
        pass

    def on_page_tree_changed(self) -> None:
        pass

    def on_finish(self) -> None:
        pass


class WizardData:
    """
    Owns the page registry and the current-page cursor.

    The cursor is a registry position; the helpers below derive first/last
    and neighbour positions from the visibility-filtered view of the
    registry. Mutations are only made by the navigation controller and page
    handlers running on the navigation thread.
    """

    def __init__(self, pages: Union[PageRegistry, Iterable[Page]]):
        """
        Initialize wizard data.

        Args:
            pages: A PageRegistry, or pages in wizard order
        """
        self.registry = pages if isinstance(pages, PageRegistry) else PageRegistry(pages)
        self._cursor = 0
        self._listeners: List[WizardDataListener] = []
        self._logger = logging.getLogger(__name__)

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self.registry)

    # Page lookup

    def get_current_page(self) -> Page:
        return self.registry.at(self._cursor)

    def get_page(self, key: Union[str, int]) -> Optional[Page]:
        """Look a page up by key or by registry position."""
        if isinstance(key, int):
            if 0 <= key < len(self.registry):
                return self.registry.at(key)
            return None
        return self.registry.get(key)

    def visible_indexes(self) -> List[int]:
        return [i for i, page in enumerate(self.registry) if not page.hidden]

    def next_visible_index(self, start: Optional[int] = None) -> Optional[int]:
        """Position of the first visible page after ``start`` (default: cursor)."""
        start = self._cursor if start is None else start
        for index in range(start + 1, len(self.registry)):
            if not self.registry.at(index).hidden:
                return index
        return None

    def previous_visible_index(self, start: Optional[int] = None) -> Optional[int]:
        """Position of the last visible page before ``start`` (default: cursor)."""
        start = self._cursor if start is None else start
        for index in range(start - 1, -1, -1):
            if not self.registry.at(index).hidden:
                return index
        return None

    def is_first_page(self) -> bool:
        return self.previous_visible_index() is None

    def is_last_page(self) -> bool:
        return self.next_visible_index() is None

    def completion_map(self) -> Dict[str, bool]:
        return {page.key: page.completed for page in self.registry}

    # Cursor

    def move_to(self, index: int, notify: bool = True) -> Page:
        """
        Move the cursor and announce the new current page.

        Raises:
            IndexError: If the index is outside the registry
        """
        page = self.registry.at(index)
        self._cursor = index
        if notify:
            self.notify_page_loaded(page)
        return page

    # Listeners

    def register_listener(self, listener: WizardDataListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unregister_listener(self, listener: WizardDataListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify_page_loaded(self, page: Page) -> None:
        self._notify("on_page_loaded", page)

    def notify_page_tree_changed(self) -> None:
        self._notify("on_page_tree_changed")

    def notify_finish(self) -> None:
        self._notify("on_finish")

    def _notify(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners):
            try:
                getattr(listener, event)(*args)
            except Exception as e:
                self._logger.error(f"Listener {listener!r} failed on {event}: {e}")

    # Persistence

    def save(self) -> Dict[str, Any]:
        """Serialize the cursor and every page's state record."""
        return {
            "cursor": self._cursor,
            "pages": {page.key: page.save_state() for page in self.registry},
            "state_version": STATE_VERSION
        }

    def load(self, blob: Dict[str, Any]) -> List[SetupWizardError]:
        """
        Restore state produced by save().

        Unknown page keys are dropped, missing pages restore as not
        completed and an invalid cursor is clamped. Every such deviation is
        logged and returned; none is raised.

        Returns:
            Issues found while restoring
        """
        issues: List[SetupWizardError] = []

        if not isinstance(blob, dict):
            issue = HostContractViolation(f"Saved wizard state is not a mapping: {type(blob).__name__}")
            self._logger.warning(str(issue))
            return [issue]

        pages_blob = blob.get("pages")
        if not isinstance(pages_blob, dict):
            pages_blob = {}

        for page in self.registry:
            record = pages_blob.get(page.key)
            if not isinstance(record, dict):
                page.reset()
                continue

            page.completed = bool(record.get("completed", False))
            extra = record.get("extra")
            if isinstance(extra, dict):
                try:
                    page.load_state(extra)
                except Exception as e:
                    self._logger.error(f"Failed to restore payload of page {page.key}: {e}")

        for key in pages_blob:
            if key not in self.registry:
                issue = StateRestoreMismatch(key)
                self._logger.warning(str(issue))
                issues.append(issue)

        cursor = blob.get("cursor", 0)
        last = len(self.registry) - 1
        is_index = isinstance(cursor, int) and not isinstance(cursor, bool)
        if is_index and 0 <= cursor <= last:
            self._cursor = cursor
        else:
            clamped = max(0, min(cursor, last)) if is_index else 0
            issue = HostContractViolation(f"Saved cursor {cursor!r} out of range, clamped to {clamped}")
            self._logger.warning(str(issue))
            issues.append(issue)
            self._cursor = clamped
            self.notify_page_tree_changed()

        return issues

    def finish_pages(self, platform: 'Platform') -> None:
        """Run every page finalizer in order; failures are logged and skipped."""
        for page in self.registry:
            try:
                page.finalize(platform)
            except Exception as e:
                self._logger.error(f"Failed to finalize page {page.key}: {e}")
