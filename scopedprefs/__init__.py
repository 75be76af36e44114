"""
scopedprefs - key/value settings scoped by user, channel, broker and plugin.
"""

from .core import (
    Pref,
    Prefs,
    PrefsCorruptionError,
    PrefsStore,
    find_prefs,
    get_pref,
    get_prefs,
    resolve_pref,
    set_pref,
)
from .core.config import VERSION

__version__ = VERSION
