"""Tests for the alert bus and client session."""

import pytest

from groundtruth.client.alerts import Alert, AlertBus
from groundtruth.client.session import Session


def make_alert(text="Something happened", level="info"):
    return Alert(id="test", level=level, title="Test", text=text)


class TestAlertBus:

    def test_keeps_insertion_order_and_duplicates(self):
        bus = AlertBus()
        first, second = make_alert("one"), make_alert("two")
        bus.add(first)
        bus.add(second)
        bus.add(first)

        assert [a.text for a in bus] == ["one", "two", "one"]
        assert len(bus) == 3

    def test_remove_first_equal(self):
        bus = AlertBus()
        bus.add(make_alert("one"))
        bus.add(make_alert("two"))
        bus.add(make_alert("one"))

        bus.remove(make_alert("one"))
        assert [a.text for a in bus] == ["two", "one"]

    def test_remove_absent_is_noop(self):
        bus = AlertBus()
        bus.add(make_alert("one"))
        bus.remove(make_alert("other"))
        assert len(bus) == 1

    def test_clear_keeps_list_identity(self):
        bus = AlertBus()
        view = bus.alerts
        bus.add(make_alert())
        bus.clear()
        assert view == [] and bus.alerts is view

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            make_alert(level="fatal")


class TestSession:

    def test_lifecycle(self):
        session = Session()
        assert not session.active

        session.create("alice", "alice")
        assert session.active
        assert session.tenant == "alice"

        session.destroy()
        assert session == Session()
