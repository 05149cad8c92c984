"""Tests for the ArrhythmiaDetector facade."""

from datetime import datetime, timezone

import numpy as np
import pytest

from conftest import make_r_peak_train, make_wide_qrs_train
from cardiosim.ecg_system.exceptions import InvalidConfigurationError, SampleRateMismatchError
from cardiosim.prediction.arrhythmia_detector import ArrhythmiaDetector
from cardiosim.simulator.leads import create_leads


@pytest.fixture
def detector():
    return ArrhythmiaDetector()


class TestInsufficientData:
    def test_missing_lead_ii(self, detector, normal_lead_ii, fs):
        assert detector.detect({"I": normal_lead_ii}, fs) is None

    def test_lead_ii_shorter_than_one_second(self, detector, fs):
        assert detector.detect({"II": np.zeros(999)}, fs) is None

    def test_fewer_than_two_complexes(self, detector, fs):
        signal = make_r_peak_train(heart_rate=40.0, duration=1.2, start=0.5)
        assert detector.detect({"II": signal}, fs) is None

    def test_needs_five_rr_intervals(self, detector, fs):
        # Three beats per call: two intervals inside, one across the boundary
        chunk = make_r_peak_train(heart_rate=72.0, duration=2.5)
        assert detector.detect({"II": chunk}, fs) is None
        assert len(detector.rr_intervals) == 2
        assert detector.detect({"II": chunk}, fs) is not None
        assert len(detector.rr_intervals) == 5

    def test_disabled_lead_ii_ignored(self, detector, normal_lead_ii, fs):
        leads = create_leads()
        for lead in leads:
            lead.append(normal_lead_ii)
        leads[1].enabled = False
        assert detector.detect(leads, fs) is None


class TestClassification:
    def test_clean_normal_rhythm(self, detector, normal_lead_ii, fs):
        detection = detector.detect({"II": normal_lead_ii}, fs)
        assert detection is not None
        assert detection.type == "normal"
        assert detection.confidence >= 0.9
        assert detection.description == "Normal Sinus Rhythm - HR: 72 BPM"

    def test_wide_qrs_train_is_ventricular(self, detector, wide_qrs_lead_ii, fs):
        detection = detector.detect({"II": wide_qrs_lead_ii}, fs)
        assert detection is not None
        assert detection.type in {"ventricular_tachycardia", "ventricular_fibrillation"}
        assert detection.severity in {"critical", "life_threatening"}

    def test_sinus_tachycardia(self, detector, fs):
        signal = make_r_peak_train(heart_rate=130.0, duration=4.0)
        detection = detector.detect({"II": signal}, fs)
        assert detection.type == "sinus_tachycardia"
        assert detection.severity == "moderate"

    def test_sinus_bradycardia(self, detector, fs):
        signal = make_r_peak_train(heart_rate=45.0, duration=9.0)
        detection = detector.detect({"II": signal}, fs)
        assert detection.type == "sinus_bradycardia"
        assert detection.severity == "moderate"

    def test_accepts_lead_objects(self, detector, normal_lead_ii, fs):
        leads = create_leads()
        for lead in leads:
            lead.append(normal_lead_ii * 0.0)
        leads[1].clear()
        leads[1].append(normal_lead_ii)
        detection = detector.detect(leads, fs)
        assert detection is not None and detection.type == "normal"

    def test_timestamp_passthrough(self, detector, normal_lead_ii, fs):
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        detection = detector.detect({"II": normal_lead_ii}, fs, timestamp=ts)
        assert detection.timestamp == ts


class TestStateAndReset:
    def test_rr_history_accumulates(self, detector, normal_lead_ii, fs):
        detector.detect({"II": normal_lead_ii}, fs)
        detector.detect({"II": normal_lead_ii}, fs)
        # Six intervals per block plus 800 + 200 ms across the boundary
        assert len(detector.rr_intervals) == 13
        assert detector.rr_intervals.values[6] == pytest.approx(1000.0)

    def test_single_beat_blocks_keep_boundary_intervals(self, detector, fs):
        # At 35 bpm most 2 s blocks hold one beat
        signal = make_r_peak_train(heart_rate=35.0, duration=20.0)
        block = int(2 * fs)
        detections = [
            detector.detect({"II": signal[start:start + block]}, fs)
            for start in range(0, len(signal), block)
        ]
        assert len(detector.rr_intervals) == 11
        assert all(rr == pytest.approx(1714.3, abs=1.5) for rr in detector.rr_intervals.values)
        first = next(i for i, d in enumerate(detections) if d is not None)
        assert first == 6
        assert detections[first].type == "sinus_bradycardia"
        assert detections[first].severity == "severe"

    def test_missing_lead_ii_breaks_boundary(self, detector, fs):
        chunk = make_r_peak_train(heart_rate=72.0, duration=2.5)
        detector.detect({"II": chunk}, fs)
        detector.detect({"I": chunk}, fs)
        detector.detect({"II": chunk}, fs)
        assert len(detector.rr_intervals) == 4

    def test_reset_returns_to_no_detection(self, detector, fs):
        chunk = make_r_peak_train(heart_rate=72.0, duration=2.5)
        for _ in range(3):
            last = detector.detect({"II": chunk}, fs)
        assert last is not None
        detector.reset()
        assert len(detector.rr_intervals) == 0
        assert len(detector.beat_detector.qrs_history) == 0
        assert detector.detect({"II": chunk}, fs) is None
        assert len(detector.rr_intervals) == 2

    def test_sample_rate_mismatch(self, detector, normal_lead_ii, fs):
        detector.detect({"II": normal_lead_ii}, fs)
        with pytest.raises(SampleRateMismatchError):
            detector.detect({"II": normal_lead_ii}, 500.0)

    def test_reset_allows_new_sample_rate(self, detector, normal_lead_ii, fs):
        detector.detect({"II": normal_lead_ii}, fs)
        detector.reset()
        assert detector.detect({"II": np.zeros(100)}, 500.0) is None

    def test_invalid_sample_rate(self, detector, normal_lead_ii):
        with pytest.raises(InvalidConfigurationError):
            detector.detect({"II": normal_lead_ii}, 0.0)

    def test_invalid_patient_age(self, detector, normal_lead_ii, fs):
        with pytest.raises(InvalidConfigurationError):
            detector.detect({"II": normal_lead_ii}, fs, patient_age=-1)

    def test_wide_train_needs_no_warmup(self, fs):
        detector = ArrhythmiaDetector()
        signal = make_wide_qrs_train(duration=3.0)
        assert detector.detect({"II": signal}, fs) is not None
