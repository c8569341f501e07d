"""Tests for timing"""

import pytest

from studio_compositor.timing import TimingLog, timed_phase


class TestTimingLog:

    def test_log_accumulates_repeated_phases(self):
        log = TimingLog()
        log.log("load", 0.1)
        log.log("load", 0.2)
        log.log("render", 0.5)
        assert log.phases["load"] == pytest.approx(0.3)
        assert log.total == pytest.approx(0.8)

    def test_slowest(self):
        log = TimingLog()
        assert log.slowest() is None
        log.log("load", 0.1)
        log.log("encode", 0.4)
        assert log.slowest() == "encode"

    def test_summary_and_dict(self):
        log = TimingLog()
        log.log("render", 0.25)
        assert "render=0.250s" in log.summary()
        assert log.to_dict() == {"render": 0.25}


class TestTimedPhase:

    def test_timed_phase_records_duration(self):
        log = TimingLog()
        with timed_phase(log, "render"):
            pass
        assert "render" in log.phases
        assert log.phases["render"] >= 0

    def test_timed_phase_records_even_on_error(self):
        log = TimingLog()
        with pytest.raises(RuntimeError):
            with timed_phase(log, "encode"):
                raise RuntimeError("boom")
        assert "encode" in log.phases

    def test_timed_phase_without_log(self):
        with timed_phase(None, "load"):
            pass
