from __future__ import annotations

from datetime import datetime

import pytest

from rotalog.core.coalesce import Coalescer, annotate
from rotalog.core.levels import Level
from rotalog.core.record import LogRecord

pytestmark = pytest.mark.critical


def _rec(message: str, source: str = "src") -> LogRecord:
    return LogRecord(Level.INFO, datetime(2024, 1, 1), source, message)


class TestAnnotate:
    def test_single_occurrence_unchanged(self) -> None:
        rec = _rec("m")
        assert annotate(rec, 1) is rec

    def test_run_prefixes_count(self) -> None:
        assert annotate(_rec("m"), 3).message == "3 times: m"


class TestCoalescer:
    def test_first_record_is_held_back(self) -> None:
        c = Coalescer()
        assert c.offer(_rec("a")) is None
        assert c.pending is not None

    def test_distinct_record_releases_previous(self) -> None:
        c = Coalescer()
        c.offer(_rec("a"))
        ready = c.offer(_rec("b"))
        assert ready is not None and ready.message == "a"
        assert c.pending is not None and c.pending.message == "b"

    def test_run_collapses_into_one_entry(self) -> None:
        c = Coalescer()
        for _ in range(5):
            assert c.offer(_rec("same")) is None
        assert c.repeats == 4
        ready = c.offer(_rec("next"))
        assert ready is not None and ready.message == "5 times: same"
        assert c.coalesced == 4

    def test_same_message_other_source_is_distinct(self) -> None:
        c = Coalescer()
        c.offer(_rec("m", source="a"))
        ready = c.offer(_rec("m", source="b"))
        assert ready is not None and ready.message == "m"

    def test_flush_empties(self) -> None:
        c = Coalescer()
        c.offer(_rec("x"))
        c.offer(_rec("x"))
        flushed = c.flush()
        assert flushed is not None and flushed.message == "2 times: x"
        assert c.pending is None
        assert c.flush() is None

    def test_run_keeps_first_timestamp(self) -> None:
        c = Coalescer()
        first = LogRecord(Level.INFO, datetime(2024, 1, 1, 0, 0, 1), "s", "m")
        c.offer(first)
        c.offer(LogRecord(Level.INFO, datetime(2024, 1, 1, 0, 0, 9), "s", "m"))
        flushed = c.flush()
        assert flushed is not None and flushed.created == first.created
