"""Integration tests for the tick-driven MonitoringSession."""

import logging
from datetime import datetime, timezone

import numpy as np
import pytest

from cardiosim.interpretation.rules import ArrhythmiaClassifier
from cardiosim.session import MonitoringSession
from cardiosim.simulator.leads import LEAD_NAMES


@pytest.fixture
def session(clean_settings):
    return MonitoringSession(clean_settings)


def _run(session, n_ticks):
    return [session.tick() for _ in range(n_ticks)]


class TestTick:
    def test_first_tick_shape(self, session):
        result = session.tick()
        assert [lead.name for lead in result.leads] == list(LEAD_NAMES)
        assert all(len(lead) == 100 for lead in result.leads)
        assert result.detection is None
        assert result.interpretation is None
        assert not result.alarm

    def test_display_retention_capped(self, session):
        results = _run(session, 60)
        assert all(len(lead) == 5000 for lead in results[-1].leads)

    def test_display_holds_latest_samples(self, session):
        results = _run(session, 3)
        latest = results[-1].leads[1].data
        assert len(latest) == 300
        np.testing.assert_array_equal(latest[:100], results[0].leads[1].data)

    def test_analysis_window_size(self, session):
        assert session.analysis_window_samples == 2000

    def test_detections_only_on_window_boundaries(self, session):
        results = _run(session, 100)
        ticks = [i + 1 for i, r in enumerate(results) if r.detection is not None]
        assert ticks
        assert all(t % 20 == 0 for t in ticks)

    def test_normal_rhythm_detected(self, session):
        results = _run(session, 100)
        detections = [r.detection for r in results if r.detection is not None]
        assert detections
        assert all(d.type == "normal" for d in detections)
        assert session.last_detection is detections[-1]
        assert session.last_interpretation.rhythm == "Normal Sinus Rhythm - HR: 72 BPM"

    def test_first_normal_detection_after_three_windows(self, session):
        # Two intervals in the first window, then two per window with the boundary one
        results = _run(session, 60)
        ticks = [i + 1 for i, r in enumerate(results) if r.detection is not None]
        assert ticks[0] == 60
        assert len(session.detector.rr_intervals) == 6

    def test_slow_rhythm_counts_intervals_across_windows(self, clean_settings):
        # At 35 bpm most 2 s windows hold a single beat
        clean_settings.session.heart_rate = 35.0
        session = MonitoringSession(clean_settings)
        results = _run(session, 100)
        assert len(session.detector.rr_intervals) == 5
        assert all(rr == pytest.approx(1714.3, abs=1.5) for rr in session.detector.rr_intervals.values)
        results += _run(session, 60)
        ticks = [i + 1 for i, r in enumerate(results) if r.detection is not None]
        assert ticks[0] == 160

    def test_reset_clears_state(self, session):
        _run(session, 100)
        session.reset()
        assert session.last_detection is None
        assert session.generator.time == 0.0
        assert len(session.detector.rr_intervals) == 0
        result = session.tick()
        assert all(len(lead) == 100 for lead in result.leads)


class TestAlarms:
    def test_alarm_logged(self, session, monkeypatch, caplog):
        vt = ArrhythmiaClassifier._detection(
            "ventricular_tachycardia", 180, datetime.now(timezone.utc),
        )
        monkeypatch.setattr(session.detector, "detect", lambda *args, **kwargs: vt)
        with caplog.at_level(logging.WARNING, logger="cardiosim.session"):
            results = _run(session, 20)
        assert results[-1].alarm
        assert results[-1].interpretation.urgency == "stat"
        assert any("ALARM" in rec.message for rec in caplog.records)

    def test_no_alarm_for_normal(self, session):
        results = _run(session, 100)
        assert not any(r.alarm for r in results)
