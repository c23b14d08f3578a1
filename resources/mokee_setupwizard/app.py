"""
MoKee Setup Wizard - Application Entry Point

Runs the first-boot setup wizard in a CustomTkinter window or in the
terminal, resuming from the persisted wizard state when one exists.
"""

import sys
import argparse
import traceback
from typing import Optional

from mokee_setupwizard.config.settings import init_config, AppConfig, LogLevel
from mokee_setupwizard.gui.console_host import ConsoleHostShell
from mokee_setupwizard.gui.host_shell import HostShell
from mokee_setupwizard.pages import create_setup_pages
from mokee_setupwizard.services.captive_portal_service import CaptivePortalProbe
from mokee_setupwizard.services.platform_service import FilePlatform, Platform
from mokee_setupwizard.services.scheduler import Scheduler
from mokee_setupwizard.services.setup_wizard_service import SetupWizardSession
from mokee_setupwizard.utils.logger import setup_logging


class SetupWizardApp:
    """Main application class for the MoKee setup wizard."""

    def __init__(self):
        self.config: Optional[AppConfig] = None
        self.platform: Optional[Platform] = None
        self.scheduler: Optional[Scheduler] = None
        self.session: Optional[SetupWizardSession] = None
        self.logger = None

    def initialize(self, config_file: Optional[str] = None, debug: bool = False) -> None:
        """Initialize configuration, logging and the platform handle."""
        try:
            self.config = init_config(config_file)
            if debug:
                self.config.debug_mode = True
                self.config.log_level = LogLevel.DEBUG

            self.logger = setup_logging(
                colored=self.config.ui.colored_output,
                log_file=self.config.get_log_file_path(),
                level=self.config.log_level
            )
            self.logger.info(f"Starting {self.config.app_name} v{self.config.version}")

            self.platform = FilePlatform(self.config.get_platform_settings_path())
            self.scheduler = Scheduler(max_workers=self.config.wizard.worker_threads)

            self.logger.debug("Application initialization completed")

        except Exception as e:
            print(f"Failed to initialize application: {e}")
            if self.logger:
                self.logger.error(f"Initialization failed: {e}")
                self.logger.debug(traceback.format_exc())
            sys.exit(1)

    def create_session(self, host: HostShell) -> SetupWizardSession:
        pages = create_setup_pages(self.platform, config=self.config)
        state_file = self.config.get_state_file_path() if self.config.wizard.persist_state else None
        self.session = SetupWizardSession(
            host=host,
            platform=self.platform,
            pages=pages,
            scheduler=self.scheduler,
            guest_user=self.config.wizard.guest_user,
            state_file=state_file
        )
        return self.session

    def reset_state(self) -> None:
        """Forget saved wizard progress."""
        path = self.config.get_state_file_path()
        if path.exists():
            path.unlink()
            self.logger.info(f"Removed saved wizard state {path}")

    def save_progress(self) -> None:
        """Persist the running wizard so the next start resumes it."""
        if self.session is None or self.session.finished:
            return
        try:
            self.session.save_to_file()
        except IOError as e:
            self.logger.error(str(e))
        self.session.destroy()

    def pump(self) -> None:
        """Run navigation work until no worker is outstanding."""
        while self.scheduler.has_pending_work():
            self.scheduler.run_pending(timeout=0.1)

    def run_probe(self) -> bool:
        """Print the captive portal verdict for the current network."""
        probe = CaptivePortalProbe.from_platform(self.platform, self.config)
        result = probe.probe()
        if result.error:
            self.logger.warning(f"Probe failed ({result.error}); treating network as open")
        verdict = "captive portal" if result.captive else "open internet"
        self.logger.highlight(f"{probe.url}: {verdict}")
        return True

    def run_cli_mode(self) -> bool:
        host = ConsoleHostShell(colored=self.config.ui.colored_output)
        session = self.create_session(host)
        session.start(session.load_from_file())
        self.pump()

        finished = host.run(session, self.pump)
        if not finished:
            self.logger.info("Setup not finished, progress saved")
            self.save_progress()
        return True

    def run_gui_mode(self) -> bool:
        try:
            from mokee_setupwizard.gui.wizards.setup_wizard import SetupWizardWindow
        except ImportError as e:
            self.logger.error(f"GUI dependencies not available: {e}")
            self.logger.info("Falling back to CLI mode")
            return self.run_cli_mode()

        window = SetupWizardWindow(on_close=self.save_progress)
        session = self.create_session(window)
        window.attach(session, self.scheduler)
        session.start(session.load_from_file())
        if session.finished:
            return True

        window.run()
        return True

    def cleanup(self) -> None:
        if self.scheduler is not None:
            self.scheduler.shutdown()


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the command line argument parser."""
    parser = argparse.ArgumentParser(
        description="MoKee Setup Wizard - first-boot device setup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                  # Start the wizard window
  %(prog)s --cli                            # Run the wizard in the terminal
  %(prog)s --reset                          # Start over, forgetting saved progress
  %(prog)s --probe                          # Check the network for a captive portal
  %(prog)s --captive-portal-server host     # Use another probe server
        """)

    interface_group = parser.add_argument_group('Interface Mode')
    interface_group.add_argument(
        '--cli',
        action='store_true',
        help='Run in the terminal instead of a window'
    )
    interface_group.add_argument(
        '--probe',
        action='store_true',
        help='Only run the captive portal probe and print its verdict'
    )

    wizard_group = parser.add_argument_group('Wizard')
    wizard_group.add_argument(
        '--guest',
        action='store_true',
        help='Run setup for a guest user (no setup-finished broadcast)'
    )
    wizard_group.add_argument(
        '--reset',
        action='store_true',
        help='Discard saved wizard progress before starting'
    )
    wizard_group.add_argument(
        '--captive-portal-server',
        metavar='HOST',
        help='Server answering /generate_204 (default: download.mokeedev.com)'
    )

    config_group = parser.add_argument_group('Configuration')
    config_group.add_argument(
        '--config',
        metavar='CONFIG_FILE',
        help='Path to configuration file'
    )
    config_group.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    return parser


def main() -> int:
    """Main application entry point."""
    app = SetupWizardApp()
    exit_code = 0

    try:
        parser = create_argument_parser()
        args = parser.parse_args()

        app.initialize(args.config, debug=args.debug)

        if args.guest:
            app.config.wizard.guest_user = True
        if args.captive_portal_server:
            app.config.network.captive_portal_server = args.captive_portal_server
        if args.reset:
            app.reset_state()

        if args.probe:
            success = app.run_probe()
        elif args.cli:
            success = app.run_cli_mode()
        else:
            success = app.run_gui_mode()
        exit_code = 0 if success else 1

    except KeyboardInterrupt:
        if app.logger:
            app.logger.info("Setup interrupted by user")
            app.save_progress()
        else:
            print("\nSetup interrupted by user")
        exit_code = 130

    except Exception as e:
        if app.logger:
            app.logger.error(f"Unexpected error: {e}")
            app.logger.debug(traceback.format_exc())
        else:
            print(f"Unexpected error: {e}")
        exit_code = 1

    finally:
        app.cleanup()

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
