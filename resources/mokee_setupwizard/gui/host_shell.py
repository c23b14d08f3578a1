"""
Host shell interface for the setup wizard.

The wizard engine never touches widgets directly. Everything it needs from
the surrounding window (or terminal) goes through this interface.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.page import PageView
    from ..models.subflow import SubFlowIntent


class ButtonTheme(Enum):
    """Styling of the button bar."""
    NORMAL = "normal"
    FINISH = "finish"


class HostShell(ABC):
    """What pages and the controller require from the host."""

    @abstractmethod
    def start_external_flow(self, intent: 'SubFlowIntent', request_id: int) -> None:
        """
        Begin a platform sub-flow; its result comes back through the
        session's on_external_result.

        Raises:
            ExternalUnavailable: If nothing can handle the intent
        """

    @abstractmethod
    def show_page(self, view: 'PageView') -> None:
        """Mount a page view in the content slot, reusing the one tagged view.key."""

    @abstractmethod
    def set_button_bar(self, next_label: str, prev_label: Optional[str],
                       prev_visible: bool, theme: ButtonTheme,
                       prev_chevron: bool = True) -> None:
        """
        Update the button bar.

        prev_label None means no text; prev_chevron False drops the chevron,
        which leaves a label-less previous button blank on the first page.
        """

    @abstractmethod
    def animate_finish(self, done: Callable[[], None]) -> None:
        """Play the completion transition, then call done."""

    @abstractmethod
    def enable_chrome(self, enabled: bool) -> None:
        """Toggle button bar interactivity."""

    def close(self) -> None:
        """Dismiss the host once setup is finished."""
