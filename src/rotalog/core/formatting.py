"""
Pattern-based line formatting for log records.

Patterns are plain text with ``%`` verbs:

- ``%T`` time ``HH:MM:SS``, ``%t`` time ``HH:MM``
- ``%D`` date ``YYYY/MM/DD``, ``%d`` date ``MM/DD/YY``
- ``%L`` level tag, ``%S`` source, ``%s`` last path segment of the source
- ``%M`` message, ``%%`` a literal percent

Unknown verbs are dropped; the text after them is kept. An empty pattern
renders as an empty string, anything else renders followed by one newline.
"""

from __future__ import annotations

from typing import Callable, Final

from .record import LogRecord

DEFAULT_FORMAT: Final[str] = "[%D %T] [%L] (%S) %M"

XML_FORMAT: Final[str] = (
    '\t<record level="%L">\n'
    "\t\t<timestamp>%D %T</timestamp>\n"
    "\t\t<source>%S</source>\n"
    "\t\t<message>%M</message>\n"
    "\t</record>"
)
XML_HEADER: Final[str] = '<log created="%D %T">'
XML_TRAILER: Final[str] = "</log>"


def _short_source(record: LogRecord) -> str:
    return record.source.rsplit("/", 1)[-1]


_VERBS: Final[dict[str, Callable[[LogRecord], str]]] = {
    "T": lambda r: r.created.strftime("%H:%M:%S"),
    "t": lambda r: r.created.strftime("%H:%M"),
    "D": lambda r: r.created.strftime("%Y/%m/%d"),
    "d": lambda r: r.created.strftime("%m/%d/%y"),
    "L": lambda r: r.level.label,
    "S": lambda r: r.source,
    "s": _short_source,
    "M": lambda r: r.message,
}


def format_record(pattern: str, record: LogRecord) -> str:
    """Render ``record`` through ``pattern``.

    Args:
        pattern: Format pattern (see module docstring).
        record: Record to render.

    Returns:
        The rendered line including its trailing newline, or ``""`` when the
        pattern is empty.
    """
    if not pattern:
        return ""
    out: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        j = pattern.find("%", i)
        if j < 0:
            out.append(pattern[i:])
            break
        out.append(pattern[i:j])
        if j + 1 >= n:
            # trailing lone '%' is dropped
            break
        verb = pattern[j + 1]
        if verb == "%":
            out.append("%")
        else:
            render = _VERBS.get(verb)
            if render is not None:
                out.append(render(record))
        i = j + 2
    out.append("\n")
    return "".join(out)
