#!/usr/bin/env python3
"""
Command-line access to scoped preferences.

    prefs list --plugin autoresponder
    prefs get --plugin autoresponder --channel CORE --key timezone --cascade
    prefs set --user tobert --plugin autoresponder --key timezone --value UTC
    prefs find --user tobert --plugin uptime
"""

import argparse
import sys
from typing import List, Optional

from .core.config import get_db_path
from .core.db import PrefsStore
from .core.prefs import (
    PrefsCorruptionError,
    find_prefs,
    get_pref,
    get_prefs,
    resolve_pref,
    set_pref,
)
from .core.schema import Prefs
from .util.table import render_table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prefs",
        description="List, get, set and find scoped preferences",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Precedence when --cascade is given:
  user -> channel -> broker -> plugin -> global -> default

Environment variables:
- PREFS_DB_PATH=./data/prefs.db (database file)
- PREFS_DETERMINISTIC_ORDER=false (sort list/find output)
        """
    )
    parser.add_argument("--db", default=None, help="Database path (default: PREFS_DB_PATH)")

    scope = argparse.ArgumentParser(add_help=False)
    scope.add_argument("--user", default="", help="User scope")
    scope.add_argument("--channel", default="", help="Channel scope")
    scope.add_argument("--broker", default="", help="Broker scope")
    scope.add_argument("--plugin", default="", help="Plugin scope")

    commands = parser.add_subparsers(dest="command", required=True)

    list_cmd = commands.add_parser("list", parents=[scope], help="Prefs stored at exactly this scope")
    list_cmd.add_argument("--sorted", action="store_true", help="Sort by user, channel, broker, plugin, key")

    get_cmd = commands.add_parser("get", parents=[scope], help="Resolve one pref")
    get_cmd.add_argument("--key", required=True)
    get_cmd.add_argument("--default", default="", help="Value printed when nothing matches")
    get_cmd.add_argument("--cascade", action="store_true", help="Fall back through less specific scopes")

    set_cmd = commands.add_parser("set", parents=[scope], help="Store a pref")
    set_cmd.add_argument("--key", required=True)
    set_cmd.add_argument("--value", required=True)

    find_cmd = commands.add_parser("find", parents=[scope], help="Prefs matching any given field")
    find_cmd.add_argument("--key", default="")
    find_cmd.add_argument("--sorted", action="store_true", help="Sort by user, channel, broker, plugin, key")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    store = PrefsStore(args.db or get_db_path())

    try:
        if args.command == "list":
            prefs = get_prefs(store, args.user, args.broker, args.channel, args.plugin)
            if args.sorted:
                prefs = prefs.sorted()
            print(render_table(prefs.table()))

        elif args.command == "find":
            prefs = find_prefs(store, args.user, args.broker, args.channel, args.plugin, args.key,
                               ordered=args.sorted or None)
            print(render_table(prefs.table()))

        elif args.command == "get":
            lookup = resolve_pref if args.cascade else get_pref
            pref = lookup(store, args.user, args.broker, args.channel, args.plugin,
                          args.key, args.default)
            print(pref.value)

        elif args.command == "set":
            pref = set_pref(store, args.user, args.broker, args.channel, args.plugin,
                            args.key, args.value)
            if pref.error is not None:
                print(f"ERROR: Failed to store pref: {pref.error}", file=sys.stderr)
                return 1
            print(render_table(Prefs([pref]).table()))

    except PrefsCorruptionError as e:
        print(f"ERROR: Prefs storage is corrupt: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
