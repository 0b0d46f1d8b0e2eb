from __future__ import annotations

from datetime import datetime

import pytest

from rotalog.core.formatting import (
    DEFAULT_FORMAT,
    XML_FORMAT,
    XML_HEADER,
    format_record,
)
from rotalog.core.levels import Level
from rotalog.core.record import LogRecord

pytestmark = pytest.mark.critical


def _record(message: str = "hello", source: str = "pkg/mod.py:12") -> LogRecord:
    return LogRecord(
        level=Level.ERROR,
        created=datetime(2024, 3, 5, 7, 8, 9),
        source=source,
        message=message,
    )


class TestVerbs:
    def test_default_format(self) -> None:
        line = format_record(DEFAULT_FORMAT, _record())
        assert line == "[2024/03/05 07:08:09] [EROR] (pkg/mod.py:12) hello\n"

    @pytest.mark.parametrize(
        ("pattern", "expected"),
        [
            ("%T", "07:08:09\n"),
            ("%t", "07:08\n"),
            ("%D", "2024/03/05\n"),
            ("%d", "03/05/24\n"),
            ("%L", "EROR\n"),
            ("%S", "pkg/mod.py:12\n"),
            ("%s", "mod.py:12\n"),
            ("%M", "hello\n"),
            ("100%%", "100%\n"),
        ],
    )
    def test_single_verb(self, pattern: str, expected: str) -> None:
        assert format_record(pattern, _record()) == expected

    def test_unknown_verb_is_dropped(self) -> None:
        assert format_record("a%Qb", _record()) == "ab\n"

    def test_trailing_percent_is_dropped(self) -> None:
        assert format_record("done %", _record()) == "done \n"

    def test_empty_pattern_renders_nothing(self) -> None:
        assert format_record("", _record()) == ""

    def test_plain_text_gets_newline(self) -> None:
        assert format_record("static", _record()) == "static\n"

    def test_message_percent_not_reinterpreted(self) -> None:
        assert format_record("%M", _record(message="50%M")) == "50%M\n"


class TestXmlPatterns:
    def test_xml_record_shape(self) -> None:
        out = format_record(XML_FORMAT, _record())
        assert out.startswith('\t<record level="EROR">\n')
        assert "<timestamp>2024/03/05 07:08:09</timestamp>" in out
        assert out.endswith("\t</record>\n")

    def test_header_uses_synthetic_record(self) -> None:
        out = format_record(XML_HEADER, LogRecord.synthetic(datetime(2024, 1, 2)))
        assert out == '<log created="2024/01/02 00:00:00">\n'
