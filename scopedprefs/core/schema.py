"""
Record types for scoped preferences and the DDL of the backing table.
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

# key column is called pkey because key is a reserved word in some backends
PREFS_TABLE = '''
    CREATE TABLE IF NOT EXISTS prefs (
        user    VARCHAR(32) DEFAULT '',
        channel VARCHAR(32) DEFAULT '',
        broker  VARCHAR(32) DEFAULT '',
        plugin  VARCHAR(32) DEFAULT '',
        pkey    VARCHAR(32) NOT NULL,
        value   TEXT,
        PRIMARY KEY (user, channel, broker, plugin, pkey)
    )
'''

PREF_COLUMNS = "user, channel, broker, plugin, pkey, value"

TABLE_HEADER = ["User", "Channel", "Broker", "Plugin", "Key", "Value"]


@dataclass
class Pref:
    """A key/value pair associated with a combination of user, channel, broker and plugin.

    An empty string in any scope field means the setting is global for that
    dimension. ``default`` is the caller's fallback and is never persisted.
    """
    user: str = ""
    channel: str = ""
    broker: str = ""
    plugin: str = ""
    key: str = ""
    value: str = ""
    default: str = ""
    found: bool = False
    error: Optional[Exception] = field(default=None, compare=False)

    def scope(self) -> Tuple[str, str, str, str]:
        """Scope tuple in storage column order."""
        return (self.user, self.channel, self.broker, self.plugin)

    def row(self) -> List[str]:
        """The six display fields in table order."""
        return [self.user, self.channel, self.broker, self.plugin, self.key, self.value]

    def copy(self, **changes) -> "Pref":
        return replace(self, **changes)


class Prefs(list):
    """Ordered result set of Pref records.

    Filters return a new Prefs and never modify the receiver, so they chain:
    ``prefs.channel("magrathea").plugin("uptime").broker("slack")``.
    """

    def user(self, user: str) -> "Prefs":
        return Prefs(p for p in self if p.user == user)

    def channel(self, channel: str) -> "Prefs":
        return Prefs(p for p in self if p.channel == channel)

    def broker(self, broker: str) -> "Prefs":
        return Prefs(p for p in self if p.broker == broker)

    def plugin(self, plugin: str) -> "Prefs":
        return Prefs(p for p in self if p.plugin == plugin)

    def sorted(self) -> "Prefs":
        """Copy ordered by the primary key tuple."""
        return Prefs(sorted(self, key=lambda p: (*p.scope(), p.key)))

    def table(self) -> List[List[str]]:
        """Header row followed by one row per record, ready for render_table()."""
        out = [list(TABLE_HEADER)]
        out.extend(p.row() for p in self)
        return out
