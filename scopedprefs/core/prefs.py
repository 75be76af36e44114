"""
Preference lookup and storage.

Order of precedence for prefs:
    user -> channel -> broker -> plugin -> global -> default

get_pref() makes exactly one exact-match lookup with the scope it is given.
resolve_pref() walks the precedence order above by calling get_pref() with
progressively less specific scopes.
"""

from typing import List, Optional, Sequence, Tuple

from .config import deterministic_order
from .db import PrefsStore
from .schema import PREF_COLUMNS, Pref, Prefs
from ..util.logging import logger


class PrefsCorruptionError(RuntimeError):
    """More than one stored row shares a (user, channel, broker, plugin, pkey) key."""

    def __init__(self, scope: Tuple[str, str, str, str], key: str, count: int):
        self.scope = scope
        self.key = key
        self.count = count
        super().__init__(
            f"{count} prefs stored for scope {scope} key {key!r}; expected at most one"
        )


class PrefDecodeError(ValueError):
    """A stored row could not be read back as six strings."""


def _decode_column(value) -> str:
    if isinstance(value, str):
        try:
            # lone surrogates mark bytes that were not valid UTF-8 in storage
            value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise PrefDecodeError(f"column is not valid UTF-8: {e}") from e
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise PrefDecodeError(f"column is not valid UTF-8: {e}") from e
    if value is None:
        raise PrefDecodeError("column is NULL")
    raise PrefDecodeError(f"unexpected column type {type(value).__name__}")


def _scan_row(row: Sequence, template: Pref) -> Pref:
    """Build a Pref from a result row; on failure return the template with the default."""
    try:
        user, channel, broker, plugin, key, value = (_decode_column(c) for c in row)
    except (PrefDecodeError, ValueError) as e:
        logger.warning(f"Returning default due to row decode failure: {e}")
        return template.copy(found=False, value=template.default, error=e)

    return template.copy(
        user=user, channel=channel, broker=broker, plugin=plugin,
        key=key, value=value, found=True, error=None
    )


def _select_exact(store: PrefsStore, pref: Pref) -> Prefs:
    """All rows matching the pref's scope exactly, and its key when one is given."""
    sql = f'''
        SELECT {PREF_COLUMNS}
        FROM prefs
        WHERE user = ?
          AND channel = ?
          AND broker = ?
          AND plugin = ?
    '''
    params = list(pref.scope())

    # only query by key if it's specified, otherwise get all keys for the selection
    if pref.key:
        sql += " AND pkey = ?"
        params.append(pref.key)

    if deterministic_order():
        sql += " ORDER BY pkey"

    return Prefs(_scan_row(row, pref) for row in store.query(sql, params))


def get_exact(store: PrefsStore, pref: Pref) -> Pref:
    """Return the single stored record for the pref's exact scope and key.

    A miss returns a copy of ``pref`` with found=False. More than one row is a
    broken primary key and raises PrefsCorruptionError.
    """
    prefs = _select_exact(store, pref)

    if len(prefs) > 1:
        logger.log_corruption(pref.scope(), pref.key, len(prefs))
        raise PrefsCorruptionError(pref.scope(), pref.key, len(prefs))

    if len(prefs) == 1:
        return prefs[0]

    return pref.copy(found=False, error=None)


def get_pref(store: PrefsStore, user: str, broker: str, channel: str, plugin: str,
             key: str, default: str = "") -> Pref:
    """Retrieve the preference stored at exactly this scope, or the default."""
    pref = Pref(user=user, channel=channel, broker=broker, plugin=plugin,
                key=key, default=default)

    found = get_exact(store, pref)
    if found.found:
        return found

    # no match, return the default
    return pref.copy(value=default, found=False, error=found.error)


def cascade_scopes(user: str, broker: str, channel: str, plugin: str) -> List[Tuple[str, str, str, str]]:
    """Scopes tried by resolve_pref(), most specific first, duplicates removed.

    Returned tuples are in (user, channel, broker, plugin) order.
    """
    levels = [
        (user, channel, broker, plugin),
        ("", channel, broker, plugin),
        ("", "", broker, plugin),
        ("", "", "", plugin),
        ("", "", "", ""),
    ]
    out = []
    for level in levels:
        if level not in out:
            out.append(level)
    return out


def resolve_pref(store: PrefsStore, user: str, broker: str, channel: str, plugin: str,
                 key: str, default: str = "") -> Pref:
    """Find the most specific preference, falling back through the precedence order.

    The returned record carries the scope it was found at. A stored row that
    cannot be decoded stops the walk: it comes back with found=False, the
    default and its error rather than a broader scope's value. When nothing
    matches, the original scope is kept and the value is the default.
    """
    for u, c, b, p in cascade_scopes(user, broker, channel, plugin):
        pref = get_pref(store, u, b, c, p, key, default)
        if pref.found:
            logger.debug(f"Resolved pref {key!r} at scope {(u, c, b, p)}")
            return pref
        if pref.error is not None:
            return pref

    return Pref(user=user, channel=channel, broker=broker, plugin=plugin,
                key=key, value=default, default=default, found=False)


def get_prefs(store: PrefsStore, user: str = "", broker: str = "", channel: str = "",
              plugin: str = "") -> Prefs:
    """Retrieve every key stored at exactly this scope.

    Matching is exact on all four fields: get_prefs(plugin="uptime") returns
    only records whose user, broker and channel are empty. A record with user
    "pford" and plugin "uptime" is not included.
    """
    return _select_exact(store, Pref(user=user, channel=channel, broker=broker, plugin=plugin))


def get_user_prefs(store: PrefsStore, user: str) -> Prefs:
    return get_prefs(store, user=user)


def get_channel_prefs(store: PrefsStore, channel: str) -> Prefs:
    return get_prefs(store, channel=channel)


def get_broker_prefs(store: PrefsStore, broker: str) -> Prefs:
    return get_prefs(store, broker=broker)


def get_plugin_prefs(store: PrefsStore, plugin: str) -> Prefs:
    return get_prefs(store, plugin=plugin)


def find_prefs(store: PrefsStore, user: str = "", broker: str = "", channel: str = "",
               plugin: str = "", key: str = "", default: str = "",
               ordered: Optional[bool] = None) -> Prefs:
    """Retrieve all preferences matching any of the non-empty fields.

    user="x", broker="y" becomes ``WHERE user=? OR broker=?``. With every
    field empty there is no WHERE clause and the whole table is returned.
    """
    fields = []
    params = []
    for column, value in (("user", user), ("channel", channel), ("broker", broker),
                          ("plugin", plugin), ("pkey", key)):
        if value:
            fields.append(f"{column} = ?")
            params.append(value)

    sql = f"SELECT {PREF_COLUMNS}\nFROM prefs"
    if fields:
        sql += "\nWHERE " + "\n   OR ".join(fields)

    if ordered is None:
        ordered = deterministic_order()
    if ordered:
        sql += "\nORDER BY user, channel, broker, plugin, pkey"

    template = Pref(default=default)
    return Prefs(_scan_row(row, template) for row in store.query(sql, params))


def set_pref(store: PrefsStore, user: str, broker: str, channel: str, plugin: str,
             key: str, value: str) -> Pref:
    """Write the value and return the stored record.

    On a backend failure the returned record has found=False and carries the
    error; nothing is raised.
    """
    if not key or not key.strip():
        raise ValueError("pref key cannot be empty")

    pref = Pref(user=user, channel=channel, broker=broker, plugin=plugin,
                key=key, value=value)

    error = store.upsert(pref)
    if error is not None:
        return pref.copy(found=False, error=error)

    logger.log_pref_operation("set", pref)
    stored = get_exact(store, pref)
    if not stored.found:
        error = stored.error or RuntimeError(
            f"pref {key!r} was written but could not be read back"
        )
        logger.log_pref_operation("set", pref, "failed", {"error": str(error)[:100]})
        return pref.copy(found=False, error=error)
    return stored
