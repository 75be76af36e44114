"""
Precedence cascade: user -> channel -> broker -> plugin -> global -> default.
"""

import pytest

from scopedprefs.core.db import PrefsStore
from scopedprefs.core.prefs import PrefDecodeError, cascade_scopes, resolve_pref, set_pref


@pytest.fixture
def store(tmp_path):
    store = PrefsStore(str(tmp_path / "prefs.db"))
    # set_pref argument order is user, broker, channel, plugin
    set_pref(store, "tobert", "slack", "CORE", "uptime", "foo", "user")
    set_pref(store, "", "slack", "CORE", "uptime", "foo", "channel")
    set_pref(store, "", "slack", "", "uptime", "foo", "broker")
    set_pref(store, "", "", "", "uptime", "foo", "plugin")
    set_pref(store, "", "", "", "", "foo", "global")
    return store


def test_cascade_scopes_order():
    assert cascade_scopes("tobert", "slack", "CORE", "uptime") == [
        ("tobert", "CORE", "slack", "uptime"),
        ("", "CORE", "slack", "uptime"),
        ("", "", "slack", "uptime"),
        ("", "", "", "uptime"),
        ("", "", "", ""),
    ]


def test_cascade_scopes_skips_duplicates():
    assert cascade_scopes("", "", "", "") == [("", "", "", "")]
    assert cascade_scopes("", "", "", "uptime") == [("", "", "", "uptime"), ("", "", "", "")]
    assert cascade_scopes("tobert", "", "", "") == [("tobert", "", "", ""), ("", "", "", "")]


@pytest.mark.parametrize("user,broker,channel,plugin,expected", [
    ("tobert", "slack", "CORE", "uptime", "user"),
    ("pford", "slack", "CORE", "uptime", "channel"),
    ("pford", "slack", "magrathea", "uptime", "broker"),
    ("pford", "irc", "magrathea", "uptime", "plugin"),
    ("pford", "irc", "magrathea", "autoresponder", "global"),
    ("", "", "", "", "global"),
])
def test_most_specific_wins(store, user, broker, channel, plugin, expected):
    pref = resolve_pref(store, user, broker, channel, plugin, "foo", "default")

    assert pref.found is True
    assert pref.value == expected


def test_hit_reports_scope_it_was_found_at(store):
    pref = resolve_pref(store, "pford", "slack", "magrathea", "uptime", "foo", "default")

    assert pref.scope() == ("", "", "slack", "uptime")


def test_full_miss_returns_default_with_original_scope(store):
    pref = resolve_pref(store, "pford", "irc", "magrathea", "autoresponder", "missing", "default")

    assert pref.found is False
    assert pref.value == "default"
    assert pref.default == "default"
    assert pref.scope() == ("pford", "magrathea", "irc", "autoresponder")
    assert pref.key == "missing"


def test_does_not_cascade_sideways(tmp_path):
    store = PrefsStore(str(tmp_path / "prefs.db"))
    # a user-only pref is not reachable from another user's lookup
    set_pref(store, "tobert", "", "", "", "foo", "tobert-only")

    pref = resolve_pref(store, "pford", "", "", "", "foo", "default")
    assert pref.value == "default"


def test_undecodable_row_stops_the_walk(store):
    with store.get_db() as conn:
        conn.execute("INSERT INTO prefs (user, pkey, value) VALUES ('erin', 'foo', CAST(X'FFFE' AS TEXT))")
        conn.commit()

    pref = resolve_pref(store, "erin", "", "", "", "foo", "default")

    assert pref.found is False
    assert pref.value == "default"
    assert isinstance(pref.error, PrefDecodeError)
    assert pref.scope() == ("erin", "", "", "")
