"""
Terminal host for the setup wizard.

Renders pages as plain text and reads the user's choices from stdin. It is
used by the --cli mode and for headless provisioning runs.
"""

import logging
from typing import Callable, Optional, List, Tuple, TextIO, Any
import sys

from ..models.errors import ExternalUnavailable
from ..models.page import PageView
from ..models.subflow import SubFlowIntent, ResultStatus
from ..utils.logger import ColorCodes
from .host_shell import HostShell, ButtonTheme
from .resources import resolve_string, CHEVRON_NEXT, CHEVRON_PREVIOUS


class ConsoleHostShell(HostShell):
    """
    HostShell rendering to a terminal.

    External flows cannot really run here; the user is asked for the result
    they would have produced instead.
    """

    RESULT_CHOICES = {
        "o": ResultStatus.OK,
        "c": ResultStatus.CANCELED,
        "s": ResultStatus.OTHER,
    }

    def __init__(self, input_stream: Optional[TextIO] = None, output_stream: Optional[TextIO] = None,
                 colored: bool = True, supported_actions: Optional[List[str]] = None):
        """
        Initialize console host.

        Args:
            input_stream: Where answers are read from (default stdin)
            output_stream: Where pages are printed (default stdout)
            colored: Whether to use ANSI colors
            supported_actions: Intent actions this host can answer; None means all
        """
        self.input = input_stream or sys.stdin
        self.output = output_stream or sys.stdout
        self.colored = colored
        self.supported_actions = supported_actions

        self.pending_flows: List[Tuple[SubFlowIntent, int]] = []
        self.chrome_enabled = True
        self.closed = False
        self._next_label = ""
        self._prev_label: Optional[str] = None
        self._prev_visible = False
        self._prev_chevron = True
        self._theme = ButtonTheme.NORMAL

        self._logger = logging.getLogger(__name__)

    def _write(self, text: str, color: str = "") -> None:
        if self.colored and color:
            text = f"{color}{text}{ColorCodes.NC}"
        self.output.write(text + "\n")
        self.output.flush()

    # HostShell

    def start_external_flow(self, intent: SubFlowIntent, request_id: int) -> None:
        if self.supported_actions is not None and intent.action not in self.supported_actions:
            raise ExternalUnavailable(f"No handler for {intent.action}")
        self.pending_flows.append((intent, request_id))

    def show_page(self, view: PageView) -> None:
        self._write("")
        self._write(resolve_string(view.title_id), ColorCodes.PURPLE)
        for name, value in view.arguments.items():
            if isinstance(value, bool):
                mark = "x" if value else " "
                self._write(f"  [{mark}] {name}")
            elif isinstance(value, str):
                self._write(f"  {resolve_string(value)}")

    def set_button_bar(self, next_label: str, prev_label: Optional[str],
                       prev_visible: bool, theme: ButtonTheme,
                       prev_chevron: bool = True) -> None:
        self._next_label = resolve_string(next_label)
        self._prev_label = resolve_string(prev_label)
        # A blank previous button is not offered as a choice
        self._prev_visible = prev_visible and (prev_chevron or prev_label is not None)
        self._prev_chevron = prev_chevron
        self._theme = theme

    def animate_finish(self, done: Callable[[], None]) -> None:
        self._write("Setup complete!", ColorCodes.GREEN)
        done()

    def enable_chrome(self, enabled: bool) -> None:
        self.chrome_enabled = enabled

    def close(self) -> None:
        self.closed = True

    # Prompting

    def prompt_line(self) -> str:
        """Describe the available navigation choices."""
        parts = [f"[n] {self._next_label} {CHEVRON_NEXT}"]
        if self._prev_visible:
            words = ["[p]", CHEVRON_PREVIOUS if self._prev_chevron else "", self._prev_label]
            parts.insert(0, " ".join(word for word in words if word))
        parts.append("[q] quit")
        return "  ".join(parts)

    def read_choice(self, prompt: str) -> Optional[str]:
        self.output.write(prompt + " ")
        self.output.flush()
        line = self.input.readline()
        if not line:
            return None
        return line.strip().lower()

    def ask_flow_result(self, intent: SubFlowIntent) -> Optional[ResultStatus]:
        answer = self.read_choice(f"{intent.describe()}: [o]k / [c]ancel / [s]kip?")
        if answer is None:
            return None
        return self.RESULT_CHOICES.get(answer[:1], ResultStatus.OTHER)

    def run(self, session: Any, pump: Callable[[], None]) -> bool:
        """
        Drive a session until it finishes or the user quits.

        Args:
            session: SetupWizardSession to drive
            pump: Runs pending scheduler work on this thread

        Returns:
            True if setup finished
        """
        while not session.finished and not session.destroyed:
            pump()
            if session.finished or session.destroyed:
                break

            if self.pending_flows:
                intent, request_id = self.pending_flows.pop(0)
                status = self.ask_flow_result(intent)
                if status is None:
                    break
                session.on_external_result(request_id, status)
                continue

            choice = self.read_choice(self.prompt_line())
            if choice is None or choice == "q":
                break
            if choice == "n":
                session.on_next_page()
            elif choice == "p" and self._prev_visible:
                session.on_previous_page()
            else:
                self._logger.debug(f"Ignoring input {choice!r}")

        return session.finished
