"""
End-to-end tests for a setup wizard session driven through a recording host.
"""

import json

import pytest

from mokee_setupwizard.gui.host_shell import ButtonTheme
from mokee_setupwizard.models.strings import R
from mokee_setupwizard.models.subflow import RequestCode, ResultStatus, ACTION_CAPTIVE_PORTAL_LOGIN
from mokee_setupwizard.pages import create_setup_pages
from mokee_setupwizard.pages.account_page import create_account_page
from mokee_setupwizard.pages.finish_page import create_finish_page
from mokee_setupwizard.pages.other_settings_page import create_other_settings_page
from mokee_setupwizard.pages.wifi_setup_page import create_wifi_setup_page
from mokee_setupwizard.services.platform_service import (
    DEVICE_PROVISIONED, USER_SETUP_COMPLETE, BACKUP_ENABLED, ACTION_SETUP_FINISHED
)
from mokee_setupwizard.services.setup_wizard_service import SetupWizardSession

from conftest import RecordingHost, StubAccountService, StubProbe


WIFI = "WifiSetupPage"
ACCOUNT = "GmsAccountPage"
OTHER = "OtherSettingsPage"
FINISH = "FinishPage"


def build_pages(platform, probe, account_service):
    return [
        create_wifi_setup_page(lambda: probe),
        create_account_page(account_service),
        create_other_settings_page(platform),
        create_finish_page(),
    ]


@pytest.fixture
def make_session(platform, scheduler, probe, account_service):
    def _make(host=None, guest_user=False, state_file=None, probe_=None, service=None):
        return SetupWizardSession(
            host=host or RecordingHost(),
            platform=platform,
            pages=build_pages(platform, probe_ or probe, service or account_service),
            scheduler=scheduler,
            guest_user=guest_user,
            state_file=state_file
        )
    return _make


def walk_to_other_settings(session):
    """Join an open network and add an account; ends on the other settings page."""
    session.on_external_result(RequestCode.SETUP_WIFI, ResultStatus.OK)
    session.on_external_result(RequestCode.SETUP_ACCOUNT, ResultStatus.OK)


class TestScenarios:

    def test_happy_path(self, make_session, platform):
        host = RecordingHost()
        session = make_session(host=host)

        session.start()
        assert host.last_flow[1] == RequestCode.SETUP_WIFI

        walk_to_other_settings(session)
        session.on_next_page()
        session.on_next_page()

        assert host.shown_keys == [WIFI, ACCOUNT, OTHER, FINISH]
        assert all(session.data.completion_map().values())
        assert session.finished
        assert host.finish_animations == 1
        assert host.closed
        assert platform.get_setting(DEVICE_PROVISIONED) == "1"
        assert platform.get_setting(USER_SETUP_COMPLETE) == "1"
        assert platform.broadcasts == [ACTION_SETUP_FINISHED]
        assert session.controller.max_depth == 1

    def test_cancel_on_account_page_goes_back_to_wifi(self, make_session):
        host = RecordingHost()
        session = make_session(host=host)
        session.start()
        session.on_external_result(RequestCode.SETUP_WIFI, ResultStatus.OK)
        assert session.data.get_current_page().key == ACCOUNT

        session.on_external_result(RequestCode.SETUP_ACCOUNT, ResultStatus.CANCELED)

        assert session.data.get_current_page().key == WIFI
        assert not session.data.get_page(ACCOUNT).completed
        # The network picker is offered again
        assert host.last_flow[1] == RequestCode.SETUP_WIFI

    def test_captive_portal(self, make_session):
        host = RecordingHost()
        session = make_session(host=host, probe_=StubProbe(captive=True))
        session.start()

        session.on_external_result(RequestCode.SETUP_WIFI, ResultStatus.OK)
        intent, request_id = host.last_flow
        assert request_id == RequestCode.SETUP_CAPTIVE_PORTAL
        assert intent.action == ACTION_CAPTIVE_PORTAL_LOGIN

        session.on_external_result(RequestCode.SETUP_CAPTIVE_PORTAL, ResultStatus.CANCELED)
        assert host.last_flow[1] == RequestCode.SETUP_WIFI
        assert session.data.get_current_page().key == WIFI

        session.on_external_result(RequestCode.SETUP_WIFI, ResultStatus.OK)
        session.on_external_result(RequestCode.SETUP_CAPTIVE_PORTAL, ResultStatus.OK)

        assert session.data.get_current_page().key == ACCOUNT
        assert session.data.get_page(WIFI).completed
        assert session.data.get_page(WIFI).extra["captive_portal"] is True

    def test_restore_mid_flow(self, make_session):
        session = make_session()
        session.start()
        walk_to_other_settings(session)
        assert session.data.cursor == 2
        blob = json.loads(json.dumps(session.save_instance_state()))
        session.destroy()

        host = RecordingHost()
        restored = make_session(host=host, service=StubAccountService())
        restored.start(blob)

        assert restored.data.cursor == 2
        assert restored.data.completion_map() == session.data.completion_map()
        assert host.shown_keys == [OTHER]
        assert host.flows == []

    def test_already_provisioned(self, make_session, platform):
        platform.put_setting(USER_SETUP_COMPLETE, "1")
        host = RecordingHost()
        session = make_session(host=host)

        session.start()

        assert session.finished
        assert host.views == []
        assert host.flows == []
        assert host.closed

    def test_guest_user_finishes_without_broadcast(self, make_session, platform):
        host = RecordingHost()
        session = make_session(host=host, guest_user=True)

        session.start()

        assert session.finished
        assert host.views == []
        assert platform.broadcasts == []
        assert platform.get_setting(USER_SETUP_COMPLETE) == "1"


class TestButtonBar:

    def test_first_page_drops_previous_chevron(self, make_session):
        host = RecordingHost()
        make_session(host=host).start()

        next_label, prev_label, prev_visible, theme, prev_chevron = host.button_bars[-1]
        assert next_label == R.SKIP
        assert prev_label is None
        assert prev_visible is True
        assert prev_chevron is False
        assert theme is ButtonTheme.NORMAL

    def test_middle_page_shows_previous(self, make_session):
        host = RecordingHost()
        session = make_session(host=host)
        session.start()
        walk_to_other_settings(session)

        next_label, prev_label, prev_visible, theme, prev_chevron = host.button_bars[-1]
        assert next_label == R.NEXT
        assert prev_label is None
        assert prev_visible is True
        assert prev_chevron is True
        assert theme is ButtonTheme.NORMAL

    def test_last_page_uses_finish_theme(self, make_session):
        host = RecordingHost()
        session = make_session(host=host)
        session.start()
        walk_to_other_settings(session)
        session.on_next_page()

        next_label, prev_label, prev_visible, theme, prev_chevron = host.button_bars[-1]
        assert next_label == R.START
        assert prev_visible is False
        assert theme is ButtonTheme.FINISH


class TestHostInput:

    def test_repeated_result_is_applied_once(self, make_session):
        session = make_session()
        session.start()

        session.on_external_result(RequestCode.SETUP_WIFI, ResultStatus.OK)
        session.on_external_result(RequestCode.SETUP_WIFI, ResultStatus.OK)

        assert session.data.get_current_page().key == ACCOUNT

    def test_back_on_first_page_is_ignored(self, make_session):
        host = RecordingHost()
        session = make_session(host=host)
        session.start()

        session.on_back_pressed()

        assert session.data.cursor == 0
        assert host.shown_keys == [WIFI]

    def test_back_goes_to_previous_page(self, make_session):
        session = make_session()
        session.start()
        walk_to_other_settings(session)

        session.on_back_pressed()

        # Reaching the account page backward skips past it
        assert session.data.get_current_page().key == WIFI

    def test_input_before_start_or_after_destroy_is_dropped(self, make_session):
        host = RecordingHost()
        session = make_session(host=host)
        session.on_next_page()
        assert host.views == []

        session.start()
        session.destroy()
        session.on_external_result(RequestCode.SETUP_WIFI, ResultStatus.OK)
        session.on_next_page()

        assert session.data.cursor == 0
        assert not session.finished

    def test_finish_runs_once(self, make_session, platform):
        host = RecordingHost()
        session = make_session(host=host)
        session.start()
        walk_to_other_settings(session)
        session.on_next_page()
        session.on_next_page()
        session.on_next_page()

        assert host.finish_animations == 1
        assert platform.broadcasts == [ACTION_SETUP_FINISHED]

    def test_input_during_finish_animation_is_dropped(self, make_session, platform):
        host = RecordingHost(hold_finish=True)
        session = make_session(host=host)
        session.start()
        walk_to_other_settings(session)
        session.on_next_page()
        session.on_next_page()
        assert host.pending_finish is not None
        assert host.chrome[-1] is False

        session.on_back_pressed()
        session.on_previous_page()
        session.on_next_page()

        assert session.data.get_current_page().key == FINISH
        assert host.shown_keys[-1] == FINISH
        assert not session.finished

        host.pending_finish()

        assert session.finished
        assert host.closed
        assert host.chrome[-1] is False
        assert platform.broadcasts == [ACTION_SETUP_FINISHED]

    def test_previous_on_first_page_keeps_network_picker(self, make_session):
        host = RecordingHost()
        session = make_session(host=host)
        session.start()

        session.on_previous_page()
        session.on_external_result(RequestCode.SETUP_WIFI, ResultStatus.OK)

        assert len(host.flows) == 1
        assert session.data.get_current_page().key == ACCOUNT
        assert session.data.get_page(WIFI).completed


class TestLifecycle:

    def test_resume_reenables_chrome_and_refreshes(self, make_session):
        host = RecordingHost()
        session = make_session(host=host)
        session.start()
        bars = len(host.button_bars)

        session.resume()

        assert host.chrome[-1] is True
        assert len(host.button_bars) > bars
        assert session.data.cursor == 0

    def test_resume_skips_page_that_became_hidden(self, make_session):
        service = StubAccountService()
        session = make_session(service=service)
        session.start()
        session.on_external_result(RequestCode.SETUP_WIFI, ResultStatus.OK)
        assert session.data.get_current_page().key == ACCOUNT

        service.available = False
        session.resume()

        assert session.data.get_current_page().key == OTHER

    def test_state_file_round_trip(self, make_session, tmp_path):
        state_file = tmp_path / "state" / "wizard.json"
        session = make_session(state_file=state_file)
        session.start()
        walk_to_other_settings(session)
        session.save_to_file()
        session.destroy()

        host = RecordingHost()
        restored = make_session(host=host, state_file=state_file,
                                service=StubAccountService())
        restored.start(restored.load_from_file())

        assert restored.data.get_current_page().key == OTHER
        assert host.flows == []

    def test_finish_removes_state_file(self, make_session, tmp_path, platform):
        state_file = tmp_path / "wizard.json"
        session = make_session(state_file=state_file)
        session.start()
        walk_to_other_settings(session)
        session.save_to_file()
        assert state_file.exists()

        session.on_next_page()
        session.on_next_page()

        assert not state_file.exists()

    def test_unreadable_state_file_is_ignored(self, make_session, tmp_path):
        state_file = tmp_path / "wizard.json"
        state_file.write_text("{not json")
        session = make_session(state_file=state_file)

        assert session.load_from_file() is None

    def test_save_failure_raises_ioerror(self, make_session, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        session = make_session(state_file=blocker / "wizard.json")
        session.start()

        with pytest.raises(IOError):
            session.save_to_file()

    def test_other_settings_written_on_finish(self, make_session, platform):
        session = make_session()
        session.start()
        walk_to_other_settings(session)
        view = session.host.views[-1]
        view.bindings["toggle_backup"](True)

        session.on_next_page()
        session.on_next_page()

        assert platform.get_setting(BACKUP_ENABLED) == "1"


def test_default_page_list(platform):
    keys = [page.key for page in create_setup_pages(platform, StubAccountService())]
    assert keys == [WIFI, "MobileNetworkPage", ACCOUNT, OTHER, FINISH]
