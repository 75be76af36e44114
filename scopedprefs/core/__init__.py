"""
Scoped preference storage and resolution.
"""

from .db import PrefsStore
from .prefs import (
    PrefDecodeError,
    PrefsCorruptionError,
    cascade_scopes,
    find_prefs,
    get_broker_prefs,
    get_channel_prefs,
    get_exact,
    get_plugin_prefs,
    get_pref,
    get_prefs,
    get_user_prefs,
    resolve_pref,
    set_pref,
)
from .schema import Pref, Prefs, TABLE_HEADER
