"""
Plain ascii table rendering for Prefs.table() output.
"""

from typing import List, Sequence


def render_table(rows: Sequence[Sequence[str]]) -> str:
    """Render rows as a fixed-width table; the first row is the header.

    >>> print(render_table([["Key", "Value"], ["tz", "UTC"]]))
    +-----+-------+
    | Key | Value |
    +-----+-------+
    | tz  | UTC   |
    +-----+-------+
    """
    if not rows:
        return ""

    widths = [0] * max(len(r) for r in rows)
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def line(row: Sequence[str]) -> str:
        cells = [str(c) for c in row] + [""] * (len(widths) - len(row))
        return "| " + " | ".join(c.ljust(w) for c, w in zip(cells, widths)) + " |"

    out: List[str] = [border, line(rows[0]), border]
    out.extend(line(r) for r in rows[1:])
    if len(rows) > 1:
        out.append(border)
    return "\n".join(out)
