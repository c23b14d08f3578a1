"""
Tests for the page record, the registry and the wizard data model.
"""

import pytest

from mokee_setupwizard.models.errors import StateRestoreMismatch, HostContractViolation
from mokee_setupwizard.models.page import Page, PageAction, create_page
from mokee_setupwizard.models.registry import PageRegistry
from mokee_setupwizard.models.strings import R
from mokee_setupwizard.models.wizard_data import WizardData, WizardDataListener


class RecordingListener(WizardDataListener):

    def __init__(self):
        self.events = []

    def on_page_loaded(self, page):
        self.events.append(("loaded", page.key))

    def on_page_tree_changed(self):
        self.events.append(("tree_changed",))

    def on_finish(self):
        self.events.append(("finish",))


class FailingListener(WizardDataListener):

    def on_page_loaded(self, page):
        raise RuntimeError("listener exploded")


def make_pages(*keys, hidden=()):
    return [create_page(key, R.NEXT, hidden_check=(lambda k=key: k in hidden)) for key in keys]


class TestRegistry:

    def test_rejects_empty_registry(self):
        with pytest.raises(ValueError):
            PageRegistry([])

    def test_rejects_duplicate_keys(self):
        with pytest.raises(ValueError):
            PageRegistry(make_pages("a", "b", "a"))

    def test_lookup_by_key_and_position(self):
        registry = PageRegistry(make_pages("a", "b", "c"))
        assert registry.keys == ("a", "b", "c")
        assert registry.at(1).key == "b"
        assert registry.get("c").key == "c"
        assert registry.get("missing") is None
        assert registry.index_of("b") == 1
        assert "a" in registry and "z" not in registry

    def test_position_out_of_range(self):
        registry = PageRegistry(make_pages("a"))
        with pytest.raises(IndexError):
            registry.at(1)
        with pytest.raises(KeyError):
            registry.index_of("nope")


class TestPage:

    def test_default_next_completes_and_previous_does_not(self):
        calls = []

        class Callbacks:
            def advance(self):
                calls.append("advance")

            def retreat(self):
                calls.append("retreat")

        page = create_page("a", R.NEXT)
        page.on_action(Callbacks(), PageAction.LOAD)
        assert calls == [] and not page.completed

        page.on_action(Callbacks(), PageAction.PREVIOUS)
        assert calls == ["retreat"] and not page.completed

        page.on_action(Callbacks(), PageAction.NEXT)
        assert calls == ["retreat", "advance"] and page.completed

    def test_default_result_is_unhandled(self):
        page = create_page("a", R.NEXT)
        assert page.on_external_result(None, 1, "ok") is False

    def test_failing_visibility_check_counts_as_visible(self):
        def broken():
            raise RuntimeError("boom")

        page = create_page("a", R.NEXT, hidden_check=broken)
        assert page.hidden is False

    def test_completion_only_cleared_by_reset(self):
        page = create_page("a", R.NEXT)
        page.mark_completed()
        page.mark_completed()
        assert page.completed
        page.reset()
        assert not page.completed

    def test_render_carries_payload_copy(self):
        page = create_page("a", R.SETUP_OTHER, extra={"flag": True})
        view = page.render_binding(None, PageAction.PREVIOUS)
        assert view.key == "a"
        assert view.action is PageAction.PREVIOUS
        view.arguments["flag"] = False
        assert page.extra["flag"] is True


class TestNavigationHelpers:

    def test_visible_neighbours_skip_hidden_pages(self):
        data = WizardData(make_pages("a", "b", "c", "d", hidden=("b", "d")))
        assert data.visible_indexes() == [0, 2]
        assert data.next_visible_index(0) == 2
        assert data.next_visible_index(2) is None
        assert data.previous_visible_index(2) == 0
        assert data.is_first_page()

        data.move_to(2)
        assert data.is_last_page()
        assert not data.is_first_page()

    def test_get_page_by_key_or_position(self):
        data = WizardData(make_pages("a", "b"))
        assert data.get_page("b").key == "b"
        assert data.get_page(0).key == "a"
        assert data.get_page(5) is None
        assert data.get_page("zzz") is None


class TestListeners:

    def test_listener_registered_twice_receives_events_once(self):
        data = WizardData(make_pages("a", "b"))
        listener = RecordingListener()
        data.register_listener(listener)
        data.register_listener(listener)

        data.move_to(1)
        assert listener.events == [("loaded", "b")]

        data.unregister_listener(listener)
        data.move_to(0)
        assert listener.events == [("loaded", "b")]

    def test_failing_listener_does_not_stop_delivery(self):
        data = WizardData(make_pages("a", "b"))
        listener = RecordingListener()
        data.register_listener(FailingListener())
        data.register_listener(listener)

        data.move_to(1)
        assert listener.events == [("loaded", "b")]

    def test_events_follow_mutation_order(self):
        data = WizardData(make_pages("a", "b", "c"))
        listener = RecordingListener()
        data.register_listener(listener)

        data.move_to(1)
        data.notify_page_tree_changed()
        data.move_to(2)
        data.notify_finish()

        assert listener.events == [
            ("loaded", "b"), ("tree_changed",), ("loaded", "c"), ("finish",)
        ]


class TestPersistence:

    def test_round_trip_restores_cursor_completion_and_payloads(self):
        pages = make_pages("a", "b", "c")
        pages[1].extra["choice"] = {"nested": [1, 2]}
        data = WizardData(pages)
        pages[0].mark_completed()
        data.move_to(1, notify=False)

        blob = data.save()

        restored = WizardData(make_pages("a", "b", "c"))
        issues = restored.load(blob)

        assert issues == []
        assert restored.cursor == 1
        assert restored.completion_map() == data.completion_map()
        assert restored.get_page("b").extra == {"choice": {"nested": [1, 2]}}
        assert restored.save() == blob

    def test_unknown_page_key_is_reported_and_dropped(self):
        data = WizardData(make_pages("a", "b"))
        blob = {
            "cursor": 0,
            "pages": {
                "a": {"completed": True, "extra": {}},
                "gone": {"completed": True, "extra": {}},
            }
        }

        issues = data.load(blob)

        assert len(issues) == 1
        assert isinstance(issues[0], StateRestoreMismatch)
        assert issues[0].key == "gone"
        assert data.completion_map() == {"a": True, "b": False}

    def test_missing_page_restores_incomplete(self):
        pages = make_pages("a", "b")
        pages[1].mark_completed()
        data = WizardData(pages)

        data.load({"cursor": 0, "pages": {"a": {"completed": True}}})

        assert data.completion_map() == {"a": True, "b": False}

    @pytest.mark.parametrize("cursor, expected", [(7, 2), (-3, 0), ("two", 0), (None, 0), (True, 0)])
    def test_invalid_cursor_is_clamped(self, cursor, expected):
        data = WizardData(make_pages("a", "b", "c"))
        listener = RecordingListener()
        data.register_listener(listener)

        issues = data.load({"cursor": cursor, "pages": {}})

        assert data.cursor == expected
        assert type(data.save()["cursor"]) is int
        assert any(isinstance(issue, HostContractViolation) for issue in issues)
        assert ("tree_changed",) in listener.events

    def test_non_mapping_blob_is_rejected_without_raising(self):
        data = WizardData(make_pages("a"))
        issues = data.load(["not", "a", "mapping"])
        assert isinstance(issues[0], HostContractViolation)
        assert data.cursor == 0

    def test_missing_fields_use_defaults(self):
        data = WizardData(make_pages("a", "b"))
        assert data.load({}) == []
        assert data.cursor == 0
        assert data.completion_map() == {"a": False, "b": False}


class TestFinishPages:

    def test_finalizers_run_in_order_and_errors_are_skipped(self):
        order = []

        def broken(page, platform):
            order.append(page.key)
            raise RuntimeError("cannot persist")

        def record(page, platform):
            order.append(page.key)

        pages = [
            create_page("a", R.NEXT, finalizer=record),
            create_page("b", R.NEXT, finalizer=broken),
            create_page("c", R.NEXT),
            create_page("d", R.NEXT, finalizer=record),
        ]
        WizardData(pages).finish_pages(platform=None)

        assert order == ["a", "b", "d"]
