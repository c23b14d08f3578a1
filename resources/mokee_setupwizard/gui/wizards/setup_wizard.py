"""
Setup wizard window for MoKee.

This module provides the CustomTkinter host shell: a window with a header,
a content area holding one cached frame per page, and a button bar. Platform
sub-flows are shown as modal dialogs that answer with OK, Cancel or Skip.
"""

import tkinter as tk
from typing import Optional, Callable, Dict, Any, TYPE_CHECKING
import customtkinter as ctk

from mokee_setupwizard.gui.host_shell import HostShell, ButtonTheme
from mokee_setupwizard.gui.resources import resolve_string, CHEVRON_NEXT, CHEVRON_PREVIOUS
from mokee_setupwizard.models.page import PageView
from mokee_setupwizard.models.strings import R
from mokee_setupwizard.models.subflow import SubFlowIntent, ResultStatus
from mokee_setupwizard.utils.logger import get_logger
from mokee_setupwizard.config.settings import get_config

if TYPE_CHECKING:
    from mokee_setupwizard.services.scheduler import Scheduler
    from mokee_setupwizard.services.setup_wizard_service import SetupWizardSession


PUMP_INTERVAL_MS = 50
ANIMATION_STEPS = 20

TOGGLE_LABELS = {
    "backup_enabled": R.BACKUP,
    "location_access": R.LOCATION_ACCESS,
    "gps_enabled": R.LOCATION_GPS,
    "network_location_enabled": R.LOCATION_NETWORK,
}

TOGGLE_BINDINGS = {
    "backup_enabled": "toggle_backup",
    "location_access": "toggle_location_access",
    "gps_enabled": "toggle_gps",
    "network_location_enabled": "toggle_network_location",
}


class SetupWizardWindow(HostShell):
    """
    Desktop host shell for the setup wizard.

    The window's event loop is the navigation thread: it pumps the
    scheduler periodically so worker results are handled on it.
    """

    def __init__(self, on_close: Optional[Callable[[], None]] = None):
        """
        Initialize wizard window.

        Args:
            on_close: Called when the user closes the window before finishing
        """
        self.on_close = on_close
        self.logger = get_logger()

        try:
            self.config = get_config()
        except RuntimeError:
            self.config = None

        self.session: Optional['SetupWizardSession'] = None
        self.scheduler: Optional['Scheduler'] = None

        # UI components
        self.window: Optional[ctk.CTk] = None
        self.page_frames: Dict[str, ctk.CTkFrame] = {}
        self.page_widgets: Dict[str, Dict[str, Any]] = {}
        self.current_key: Optional[str] = None
        self._current_bindings: Dict[str, Callable[..., Any]] = {}
        self.back_button: Optional[ctk.CTkButton] = None
        self.next_button: Optional[ctk.CTkButton] = None
        self.flow_dialog: Optional[ctk.CTkToplevel] = None
        self.overlay: Optional[ctk.CTkFrame] = None
        self._pump_job: Optional[str] = None
        self._closed = False

        self._create_window()
        self._setup_navigation()

    def _color(self, name: str, default: str) -> str:
        return self.config.get_color(name) if self.config else default

    def _create_window(self) -> None:
        """Create the main wizard window."""
        width = self.config.ui.window_width if self.config else 720
        height = self.config.ui.window_height if self.config else 540

        if self.config:
            ctk.set_appearance_mode(self.config.ui.appearance_mode)
            ctk.set_default_color_theme(self.config.ui.color_theme)

        self.window = ctk.CTk()
        self.window.title("MoKee Setup Wizard")
        self.window.geometry(f"{width}x{height}")
        self.window.resizable(False, False)

        # Center the window
        self.window.update_idletasks()
        x = (self.window.winfo_screenwidth() // 2) - (width // 2)
        y = (self.window.winfo_screenheight() // 2) - (height // 2)
        self.window.geometry(f"{width}x{height}+{x}+{y}")

        self.window.protocol("WM_DELETE_WINDOW", self._on_window_close)
        self.window.bind("<Escape>", lambda event: self._on_back_pressed())

        self.window.grid_columnconfigure(0, weight=1)
        self.window.grid_rowconfigure(0, weight=1)

        self.content_frame = ctk.CTkFrame(self.window)
        self.content_frame.grid(row=0, column=0, sticky="nsew", padx=20, pady=20)
        self.content_frame.grid_columnconfigure(0, weight=1)
        self.content_frame.grid_rowconfigure(1, weight=1)

        # Header
        header_frame = ctk.CTkFrame(self.content_frame, fg_color=self._color("primary", "#263238"))
        header_frame.grid(row=0, column=0, sticky="ew", pady=(0, 20))
        header_frame.grid_columnconfigure(0, weight=1)

        self.title_label = ctk.CTkLabel(
            header_frame,
            text="",
            font=ctk.CTkFont(size=24, weight="bold"),
            text_color=self._color("white", "#ffffff")
        )
        self.title_label.grid(row=0, column=0, sticky="w", padx=20, pady=15)

        # Pages container
        self.pages_container = ctk.CTkFrame(self.content_frame)
        self.pages_container.grid(row=1, column=0, sticky="nsew")
        self.pages_container.grid_columnconfigure(0, weight=1)
        self.pages_container.grid_rowconfigure(0, weight=1)

    def _setup_navigation(self) -> None:
        """Setup the button bar."""
        navigation_frame = ctk.CTkFrame(self.content_frame, fg_color="transparent")
        navigation_frame.grid(row=2, column=0, sticky="ew", pady=(20, 0))
        navigation_frame.grid_columnconfigure(1, weight=1)

        self.back_button = ctk.CTkButton(
            navigation_frame,
            text=CHEVRON_PREVIOUS,
            command=self._on_back,
            width=100
        )
        self.back_button.grid(row=0, column=0, sticky="w")

        self.next_button = ctk.CTkButton(
            navigation_frame,
            text=CHEVRON_NEXT,
            command=self._on_next,
            width=100
        )
        self.next_button.grid(row=0, column=2, sticky="e")

    # Session wiring

    def attach(self, session: 'SetupWizardSession', scheduler: 'Scheduler') -> None:
        """Bind the session this window hosts and start pumping its scheduler."""
        self.session = session
        self.scheduler = scheduler
        self._schedule_pump()

    def _schedule_pump(self) -> None:
        if self._closed:
            return
        self._pump_job = self.window.after(PUMP_INTERVAL_MS, self._pump)

    def _pump(self) -> None:
        self._pump_job = None
        if self.scheduler is not None and not self.scheduler.closed:
            self.scheduler.run_pending()
        self._schedule_pump()

    def run(self) -> None:
        self.window.mainloop()

    # Page frames

    def _create_page_frame(self, view: PageView) -> ctk.CTkFrame:
        frame = ctk.CTkFrame(self.pages_container, fg_color="transparent")
        frame.grid(row=0, column=0, sticky="nsew")
        frame.grid_columnconfigure(0, weight=1)
        frame.grid_remove()

        widgets: Dict[str, Any] = {}
        if view.layout == "loading":
            self._create_loading_layout(frame, widgets)
        elif view.layout == "other_settings":
            self._create_other_settings_layout(frame, view, widgets)
        elif view.layout == "finish":
            self._create_finish_layout(frame, view)
        else:
            label = ctk.CTkLabel(frame, text=resolve_string(view.title_id),
                                 font=ctk.CTkFont(size=16))
            label.grid(row=0, column=0, pady=40)

        self.page_frames[view.key] = frame
        self.page_widgets[view.key] = widgets
        return frame

    def _create_loading_layout(self, parent: ctk.CTkFrame, widgets: Dict[str, Any]) -> None:
        label = ctk.CTkLabel(parent, text=resolve_string(R.LOADING), font=ctk.CTkFont(size=16))
        label.grid(row=0, column=0, pady=(60, 20))

        progress = ctk.CTkProgressBar(parent, mode="indeterminate", width=300,
                                      progress_color=self._color("accent", "#1de9b6"))
        progress.grid(row=1, column=0)
        widgets["progress"] = progress

    def _create_other_settings_layout(self, parent: ctk.CTkFrame, view: PageView,
                                      widgets: Dict[str, Any]) -> None:
        for row, (name, label_id) in enumerate(TOGGLE_LABELS.items()):
            variable = tk.BooleanVar(value=bool(view.arguments.get(name)))
            checkbox = ctk.CTkCheckBox(
                parent,
                text=resolve_string(label_id),
                variable=variable,
                command=lambda n=name: self._on_toggle(n)
            )
            # Provider rows sit under location access
            padx = (60, 20) if name in ("gps_enabled", "network_location_enabled") else (20, 20)
            checkbox.grid(row=row, column=0, sticky="w", padx=padx, pady=10)
            widgets[name] = variable

    def _create_finish_layout(self, parent: ctk.CTkFrame, view: PageView) -> None:
        summary = ctk.CTkLabel(
            parent,
            text=resolve_string(view.arguments.get("summary", R.FINISH_SUMMARY)),
            font=ctk.CTkFont(size=14),
            wraplength=500
        )
        summary.grid(row=0, column=0, pady=60)

    def _on_toggle(self, name: str) -> None:
        key = self.current_key
        widgets = self.page_widgets.get(key, {})
        binding = self._current_bindings.get(TOGGLE_BINDINGS[name])
        if binding is None:
            return
        state = binding(widgets[name].get())
        for toggle, variable in widgets.items():
            if toggle in state:
                variable.set(bool(state[toggle]))

    # HostShell

    def show_page(self, view: PageView) -> None:
        frame = self.page_frames.get(view.key)
        if frame is None:
            frame = self._create_page_frame(view)

        for key, other in self.page_frames.items():
            if key != view.key:
                other.grid_remove()
                progress = self.page_widgets[key].get("progress")
                if progress is not None:
                    progress.stop()

        widgets = self.page_widgets[view.key]
        for name, value in view.arguments.items():
            variable = widgets.get(name)
            if isinstance(variable, tk.BooleanVar):
                variable.set(bool(value))
        if "progress" in widgets:
            widgets["progress"].start()

        self._current_bindings = dict(view.bindings)
        self.current_key = view.key
        self.title_label.configure(text=resolve_string(view.title_id))
        frame.grid()
        self.logger.highlight(f"Showing {view.key}")

    def set_button_bar(self, next_label: str, prev_label: Optional[str],
                       prev_visible: bool, theme: ButtonTheme,
                       prev_chevron: bool = True) -> None:
        self.next_button.configure(text=f"{resolve_string(next_label)} {CHEVRON_NEXT}")

        words = [CHEVRON_PREVIOUS if prev_chevron else "", resolve_string(prev_label)]
        back_text = " ".join(word for word in words if word)
        # A blank back button keeps its slot but shows nothing
        self.back_button.configure(
            text=back_text,
            fg_color=self._color("primary", "#263238") if back_text else "transparent",
            hover=bool(back_text)
        )

        if prev_visible:
            self.back_button.grid()
        else:
            self.back_button.grid_remove()

        if theme is ButtonTheme.FINISH:
            self.next_button.configure(fg_color=self._color("accent", "#1de9b6"),
                                       text_color=self._color("primary_text", "#212121"))
        else:
            self.next_button.configure(fg_color=self._color("primary", "#263238"),
                                       text_color=self._color("white", "#ffffff"))

    def enable_chrome(self, enabled: bool) -> None:
        state = "normal" if enabled else "disabled"
        self.next_button.configure(state=state)
        self.back_button.configure(state=state)

    def animate_finish(self, done: Callable[[], None]) -> None:
        """Grow an accent overlay over the window, then call done."""
        duration = self.config.ui.finish_animation_ms if self.config else 400
        interval = max(1, duration // ANIMATION_STEPS)

        self.enable_chrome(False)
        self.overlay = ctk.CTkFrame(self.window, fg_color=self._color("accent", "#1de9b6"),
                                    corner_radius=0)

        def _step(step: int) -> None:
            if self._closed:
                return
            fraction = step / ANIMATION_STEPS
            self.overlay.place(relx=0.5, rely=0.5, anchor="center",
                               relwidth=fraction, relheight=fraction)
            if step < ANIMATION_STEPS:
                self.window.after(interval, _step, step + 1)
            else:
                done()

        self.window.after(0, _step, 1)

    def start_external_flow(self, intent: SubFlowIntent, request_id: int) -> None:
        self.window.after(0, self._show_flow_dialog, intent, request_id)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._pump_job is not None:
            self.window.after_cancel(self._pump_job)
            self._pump_job = None
        self.window.after(0, self.window.destroy)

    # External flows

    def _show_flow_dialog(self, intent: SubFlowIntent, request_id: int) -> None:
        if self._closed:
            return
        if self.flow_dialog is not None:
            self.flow_dialog.destroy()

        dialog = ctk.CTkToplevel(self.window)
        dialog.title(intent.describe().capitalize())
        dialog.geometry("420x200")
        dialog.transient(self.window)
        dialog.grab_set()
        dialog.grid_columnconfigure((0, 1, 2), weight=1)

        message = ctk.CTkLabel(
            dialog,
            text=f"The platform would now open: {intent.describe()}.\nHow did it end?",
            wraplength=380
        )
        message.grid(row=0, column=0, columnspan=3, pady=30, padx=20)

        choices = (("OK", ResultStatus.OK), ("Cancel", ResultStatus.CANCELED),
                   ("Skip", ResultStatus.OTHER))
        for column, (label, status) in enumerate(choices):
            button = ctk.CTkButton(
                dialog, text=label, width=100,
                command=lambda s=status: self._finish_flow(request_id, s)
            )
            button.grid(row=1, column=column, padx=10, pady=10)

        dialog.protocol("WM_DELETE_WINDOW",
                        lambda: self._finish_flow(request_id, ResultStatus.CANCELED))
        self.flow_dialog = dialog

    def _finish_flow(self, request_id: int, status: ResultStatus) -> None:
        if self.flow_dialog is not None:
            self.flow_dialog.grab_release()
            self.flow_dialog.destroy()
            self.flow_dialog = None
        if self.session is not None:
            self.session.on_external_result(request_id, status)

    # Input

    def _on_next(self) -> None:
        if self.session is not None:
            self.session.on_next_page()

    def _on_back(self) -> None:
        if self.session is not None:
            self.session.on_previous_page()

    def _on_back_pressed(self) -> None:
        if self.session is not None and self.flow_dialog is None:
            self.session.on_back_pressed()

    def _on_window_close(self) -> None:
        """Save progress and close without finishing setup."""
        if self.on_close is not None:
            self.on_close()
        self.close()
