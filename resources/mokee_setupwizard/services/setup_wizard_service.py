"""
Setup wizard session for MoKee first boot.

This module ties the wizard data, the navigation controller and a host
shell together, and implements the lifecycle around them: the already
provisioned short-circuit, save and restore of the wizard state, and the
finish sequence that marks the device as provisioned.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any, Iterable, Union

from ..gui.host_shell import HostShell, ButtonTheme
from ..models.page import Page
from ..models.subflow import ResultStatus
from ..models.wizard_data import WizardData, WizardDataListener
from .navigation_service import NavigationController
from .platform_service import (
    Platform, DEVICE_PROVISIONED, USER_SETUP_COMPLETE, ACTION_SETUP_FINISHED
)
from .scheduler import Scheduler


class SetupWizardSession(WizardDataListener):
    """
    One run of the setup wizard inside a host.

    The session is the host-facing object: hosts forward button presses,
    back presses and external results here, and call the lifecycle methods
    (resume, save_instance_state, destroy) at the matching moments.
    """

    def __init__(self, host: HostShell, platform: Platform, pages: Iterable[Page],
                 scheduler: Scheduler, guest_user: bool = False,
                 state_file: Optional[Union[str, Path]] = None):
        """
        Initialize session.

        Args:
            host: Host shell the wizard is shown in
            platform: Platform settings/broadcast handle
            pages: Wizard pages in order
            scheduler: Scheduler for worker threads
            guest_user: Whether setup runs for a secondary (guest) user
            state_file: File used to persist the wizard across restarts
        """
        self.host = host
        self.platform = platform
        self.scheduler = scheduler
        self.guest_user = guest_user
        self.state_file = Path(state_file) if state_file else None

        self.data = WizardData(pages)
        self.controller = NavigationController(self.data, host, platform, scheduler)

        self._started = False
        self._finished = False
        self._destroyed = False

        self._logger = logging.getLogger(__name__)

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def is_provisioned(self) -> bool:
        return self.platform.get_int_setting(USER_SETUP_COMPLETE, 0) == 1

    def start(self, saved_state: Optional[Dict[str, Any]] = None) -> None:
        """
        Start the wizard.

        Args:
            saved_state: Blob from save_instance_state; restores cursor and
                pages and mounts without firing LOAD
        """
        if self._started:
            return
        self._started = True

        if self.is_provisioned() or self.guest_user:
            self._logger.info("Setup already complete for this user, finishing immediately")
            self.finish_setup()
            return

        self.data.register_listener(self)

        restored = False
        if isinstance(saved_state, dict) and isinstance(saved_state.get("data"), dict):
            issues = self.data.load(saved_state["data"])
            if issues:
                self._logger.warning(f"Restored wizard state with {len(issues)} issue(s)")
            restored = True

        self.controller.mount(restored=restored)

    # Listener

    def on_page_loaded(self, page: Page) -> None:
        view = page.render_binding(self.host, self.controller.direction)
        self.host.show_page(view)
        self.update_button_bar()

    def on_page_tree_changed(self) -> None:
        self.update_button_bar()

    def on_finish(self) -> None:
        self.host.animate_finish(self.finish_setup)

    def update_button_bar(self) -> None:
        page = self.data.get_current_page()
        is_first = self.data.is_first_page()
        is_last = self.data.is_last_page()
        self.host.set_button_bar(
            next_label=page.next_button_title_id,
            prev_label=page.prev_button_title_id,
            prev_visible=not is_last,
            theme=ButtonTheme.FINISH if is_last else ButtonTheme.NORMAL,
            prev_chevron=not is_first
        )

    # Host input

    def on_next_page(self) -> None:
        if self._active():
            self.controller.on_next_page()

    def on_previous_page(self) -> None:
        if self._active():
            self.controller.on_previous_page()

    def on_back_pressed(self) -> None:
        """System back: previous page, ignored on the first page."""
        if not self._active() or self.data.is_first_page():
            return
        self.controller.on_previous_page()

    def on_external_result(self, request_id: int, status: Union[ResultStatus, int, str],
                           payload: Any = None) -> None:
        if not self._active():
            self._logger.debug(f"Session inactive, dropping result for request {request_id}")
            return
        self.controller.on_external_result(request_id, status, payload)

    def _active(self) -> bool:
        return (self._started and not self._finished and not self._destroyed
                and not self.controller.finished)

    # Lifecycle

    def resume(self) -> None:
        """Host came back to the foreground."""
        if not self._active():
            return
        self.host.enable_chrome(True)
        self.controller.revalidate()

    def save_instance_state(self) -> Dict[str, Any]:
        return {"data": self.data.save()}

    def save_to_file(self, file_path: Optional[Union[str, Path]] = None) -> None:
        """
        Persist the wizard state for a process restart.

        Raises:
            IOError: If the file cannot be written
        """
        file_path = Path(file_path) if file_path else self.state_file
        if file_path is None:
            return

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(self.save_instance_state(), f, indent=2)
            self._logger.debug(f"Wizard state saved to {file_path}")
        except Exception as e:
            raise IOError(f"Failed to save wizard state: {e}")

    def load_from_file(self, file_path: Optional[Union[str, Path]] = None) -> Optional[Dict[str, Any]]:
        """
        Read a state blob written by save_to_file.

        Returns:
            The blob, or None when there is no usable file
        """
        file_path = Path(file_path) if file_path else self.state_file
        if file_path is None or not file_path.exists():
            return None

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                blob = json.load(f)
        except (OSError, ValueError) as e:
            self._logger.warning(f"Ignoring unreadable wizard state {file_path}: {e}")
            return None

        return blob if isinstance(blob, dict) else None

    def clear_state_file(self) -> None:
        if self.state_file is None or not self.state_file.exists():
            return
        try:
            self.state_file.unlink()
        except OSError as e:
            self._logger.warning(f"Failed to remove wizard state {self.state_file}: {e}")

    def destroy(self) -> None:
        """Tear down; pending sub-flows are abandoned and late results dropped."""
        if self._destroyed:
            return
        self._destroyed = True
        self.data.unregister_listener(self)
        self.controller.teardown()

    def finish_setup(self) -> None:
        """Persist page settings, mark the device provisioned and close the host."""
        if self._finished:
            return
        self._finished = True

        self.data.finish_pages(self.platform)
        if not self.guest_user:
            self.platform.send_broadcast(ACTION_SETUP_FINISHED)
        self.platform.put_setting(DEVICE_PROVISIONED, "1")
        self.platform.put_setting(USER_SETUP_COMPLETE, "1")
        self._logger.info("Setup finished, device provisioned")

        self.clear_state_file()
        self.destroy()
        self.host.close()
