"""Tests for detection history and the listening loop."""

import asyncio

import numpy as np
import pytest
from pathlib import Path
import sys

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from theory_engine.analysis import SpectrumBuffer
from theory_engine.realtime import (
    AsyncioFrameScheduler,
    DetectedSample,
    DetectionHistory,
    FrameScheduler,
    ListeningSession,
    SessionConfig,
)


class ManualScheduler(FrameScheduler):
    """Scheduler driven by the test: fire() runs the pending tick."""

    def __init__(self):
        self.pending = None
        self.cancels = 0

    def schedule(self, callback):
        self.pending = callback

    def cancel(self):
        self.pending = None
        self.cancels += 1

    def fire(self):
        callback, self.pending = self.pending, None
        callback()


def c_major_frame():
    frame = np.zeros(4096)
    frame[[49, 61, 73]] = [1.0, 0.9, 0.8]
    return frame


def sample(i, notes=("C4", "E4", "G4")):
    return DetectedSample(chord_name=f"chord{i}", notes=notes, timestamp=float(i))


# ============================================================================
# DetectionHistory Tests
# ============================================================================

class TestDetectionHistory:
    """Tests for DetectionHistory."""

    def test_empty(self):
        history = DetectionHistory()
        assert len(history) == 0
        assert history.latest is None
        assert history.capacity == 10

    def test_chronological_order(self):
        history = DetectionHistory()
        for i in range(3):
            history.push(sample(i))
        assert [s.chord_name for s in history] == ["chord0", "chord1", "chord2"]
        assert history.latest.chord_name == "chord2"

    def test_evicts_oldest(self):
        history = DetectionHistory()
        for i in range(12):
            history.push(sample(i))

        assert len(history) == 10
        assert history.chord_names() == [f"chord{i}" for i in range(2, 12)]

    def test_snapshot_is_a_copy(self):
        history = DetectionHistory()
        history.push(sample(0))
        snapshot = history.snapshot()
        history.push(sample(1))

        assert isinstance(snapshot, tuple)
        assert len(snapshot) == 1

    def test_clear(self):
        history = DetectionHistory()
        history.push(sample(0))
        history.clear()
        assert len(history) == 0

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            DetectionHistory(0)

    def test_confidence(self):
        assert sample(0).confidence == pytest.approx(0.5)
        assert sample(0, notes=("C4",) * 6).confidence == pytest.approx(1.0)


# ============================================================================
# ListeningSession Tests
# ============================================================================

class TestListeningSession:
    """Tests for ListeningSession with a manual scheduler."""

    def make_session(self, frame=None):
        source = SpectrumBuffer(8192)
        if frame is not None:
            source.push_frame(frame)
        scheduler = ManualScheduler()
        session = ListeningSession(source, scheduler=scheduler, clock=lambda: 1.5)
        return session, source, scheduler

    def test_start_arms_first_tick(self):
        session, _, scheduler = self.make_session()
        session.start()
        assert session.running
        assert scheduler.pending is not None

    def test_tick_records_detection(self):
        session, _, scheduler = self.make_session(c_major_frame())
        session.start()
        scheduler.fire()

        latest = session.history.latest
        assert latest.chord_name == "C"
        assert latest.notes == ("C4", "E4", "G4")
        assert latest.timestamp == 1.5
        assert scheduler.pending is not None  # Re-armed

    def test_no_frame_no_detection(self):
        session, _, scheduler = self.make_session()
        session.start()
        scheduler.fire()
        assert len(session.history) == 0
        assert scheduler.pending is not None

    def test_null_chord_leaves_history_unchanged(self):
        session, source, scheduler = self.make_session(c_major_frame())
        session.start()
        scheduler.fire()

        source.push_frame(np.zeros(4096))
        scheduler.fire()
        assert len(session.history) == 1

    def test_history_bounded(self):
        session, _, scheduler = self.make_session(c_major_frame())
        session.start()
        for _ in range(15):
            scheduler.fire()
        assert len(session.history) == 10

    def test_stop_cancels_pending_tick(self):
        session, _, scheduler = self.make_session(c_major_frame())
        session.start()
        session.stop()

        assert not session.running
        assert scheduler.pending is None
        assert scheduler.cancels == 1

    def test_stale_callback_does_nothing_after_stop(self):
        session, _, scheduler = self.make_session(c_major_frame())
        session.start()
        callback = scheduler.pending
        session.stop()

        callback()
        assert len(session.history) == 0
        assert scheduler.pending is None

    def test_start_twice_is_noop(self):
        session, _, scheduler = self.make_session()
        session.start()
        first = scheduler.pending
        session.start()
        assert scheduler.pending is first

    def test_on_detection_callbacks(self):
        session, _, scheduler = self.make_session(c_major_frame())
        seen = []
        session.on_detection(seen.append)
        session.start()
        scheduler.fire()
        assert [s.chord_name for s in seen] == ["C"]

    def test_callback_may_stop_session(self):
        session, _, scheduler = self.make_session(c_major_frame())
        session.on_detection(lambda s: session.stop())
        session.start()
        scheduler.fire()
        assert scheduler.pending is None

    def test_raising_callback_keeps_loop_armed(self):
        session, _, scheduler = self.make_session(c_major_frame())

        def broken(sample):
            raise RuntimeError("display went away")

        session.on_detection(broken)
        session.start()

        with pytest.raises(RuntimeError):
            scheduler.fire()

        assert session.running
        assert scheduler.pending is not None
        assert len(session.history) == 1

    def test_sessions_do_not_share_history(self):
        first, _, scheduler = self.make_session(c_major_frame())
        second, _, _ = self.make_session(c_major_frame())
        first.start()
        scheduler.fire()
        assert len(first.history) == 1
        assert len(second.history) == 0


class TestAsyncioScheduling:
    """Tests for the asyncio-driven loop."""

    def test_config_validation(self):
        assert SessionConfig(fps=50).interval == pytest.approx(0.02)
        with pytest.raises(ValueError):
            SessionConfig(fps=0)

    def test_run_for(self):
        source = SpectrumBuffer(8192)
        source.push_frame(c_major_frame())
        session = ListeningSession(source, config=SessionConfig(fps=100))

        history = asyncio.run(session.run_for(0.1))

        assert len(history) >= 1
        assert all(s.chord_name == "C" for s in history)
        assert not session.running
        assert not session.scheduler.pending

    def test_start_without_event_loop(self):
        """A failed start leaves the session stopped and restartable."""
        source = SpectrumBuffer(8192)
        source.push_frame(c_major_frame())
        session = ListeningSession(source, config=SessionConfig(fps=100))

        with pytest.raises(RuntimeError):
            session.start()
        assert not session.running

        history = asyncio.run(session.run_for(0.05))
        assert len(history) >= 1

    def test_raising_callback_does_not_stop_detection(self):
        source = SpectrumBuffer(8192)
        source.push_frame(c_major_frame())
        session = ListeningSession(source, config=SessionConfig(fps=100))
        calls = []

        def broken(sample):
            calls.append(sample)
            raise RuntimeError("display went away")

        session.on_detection(broken)

        async def listen():
            loop = asyncio.get_running_loop()
            loop.set_exception_handler(lambda loop, context: None)
            return await session.run_for(0.1)

        history = asyncio.run(listen())

        assert len(history) >= 2
        assert len(calls) >= 2

    def test_cancel_without_pending(self):
        AsyncioFrameScheduler().cancel()
