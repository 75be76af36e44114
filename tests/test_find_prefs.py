"""
Union matching: find_prefs() ORs together every non-empty field.
"""

import pytest

from scopedprefs.core.db import PrefsStore
from scopedprefs.core.prefs import PrefDecodeError, find_prefs, set_pref


def _rows(prefs):
    return {tuple(p.row()) for p in prefs}


@pytest.fixture
def store(tmp_path):
    store = PrefsStore(str(tmp_path / "prefs.db"))
    set_pref(store, "alice", "", "", "weather", "units", "metric")
    set_pref(store, "carol", "", "", "uptime", "interval", "60")
    set_pref(store, "dave", "slack", "CORE", "", "tz", "PST")
    set_pref(store, "", "", "", "", "tz", "UTC")
    return store


def test_or_semantics_across_fields(store):
    prefs = find_prefs(store, user="alice", plugin="uptime", key="")

    assert len(prefs) == 2
    assert _rows(prefs) == {
        ("alice", "", "", "weather", "units", "metric"),
        ("carol", "", "", "uptime", "interval", "60"),
    }
    assert all(p.found and p.error is None for p in prefs)


def test_key_is_a_clause(store):
    prefs = find_prefs(store, key="tz")

    assert {p.value for p in prefs} == {"PST", "UTC"}


def test_channel_and_broker_clauses(store):
    assert len(find_prefs(store, channel="CORE")) == 1
    assert len(find_prefs(store, broker="slack")) == 1


def test_all_empty_returns_everything(store):
    assert len(find_prefs(store)) == 4


@pytest.mark.parametrize("smaller,larger", [
    ({"user": "alice"}, {"user": "alice", "plugin": "uptime"}),
    ({"plugin": "uptime"}, {"plugin": "uptime", "key": "tz"}),
    ({"key": "tz"}, {"key": "tz", "user": "carol", "broker": "slack"}),
])
def test_more_fields_never_shrink_results(store, smaller, larger):
    assert _rows(find_prefs(store, **smaller)) <= _rows(find_prefs(store, **larger))


def test_no_match(store):
    assert find_prefs(store, user="nobody") == []


def test_ordered_results(store):
    prefs = find_prefs(store, ordered=True)

    keys = [(p.user, p.channel, p.broker, p.plugin, p.key) for p in prefs]
    assert keys == sorted(keys)


def test_ordered_by_environment(store, monkeypatch):
    monkeypatch.setenv("PREFS_DETERMINISTIC_ORDER", "true")

    prefs = find_prefs(store)
    assert [p.user for p in prefs] == ["", "alice", "carol", "dave"]


def test_undecodable_row_gets_default(store):
    with store.get_db() as conn:
        conn.execute(
            "INSERT INTO prefs (user, pkey, value) VALUES (?, ?, ?)",
            ("erin", "tz", b"\xff\xfe")
        )
        conn.commit()

    prefs = find_prefs(store, user="erin", key="units", default="fallback")

    assert len(prefs) == 2
    failed = [p for p in prefs if not p.found]
    assert len(failed) == 1
    assert failed[0].value == "fallback"
    assert isinstance(failed[0].error, PrefDecodeError)
    ok = [p for p in prefs if p.found]
    assert ok[0].value == "metric"


def test_invalid_utf8_text_row_gets_default(store):
    with store.get_db() as conn:
        conn.execute("INSERT INTO prefs (user, pkey, value) VALUES ('erin', 'tz', CAST(X'FFFE' AS TEXT))")
        conn.commit()

    prefs = find_prefs(store, user="erin", key="units", default="fallback")

    assert len(prefs) == 2
    failed = [p for p in prefs if not p.found]
    assert len(failed) == 1
    assert failed[0].value == "fallback"
    assert isinstance(failed[0].error, PrefDecodeError)
    ok = [p for p in prefs if p.found]
    assert ok[0].value == "metric"
    assert ok[0].error is None


def test_query_failure_returns_empty(tmp_path):
    assert find_prefs(PrefsStore(str(tmp_path)), user="alice") == []
