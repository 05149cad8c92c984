"""Arrhythmia detector facade: beat detection, feature analysis, classification.

Usage:
    detector = ArrhythmiaDetector()
    detection = detector.detect(leads, sample_rate=1000)
    if detection is None:
        ...  # not enough data yet
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from config.settings import DetectorConfig
from cardiosim.ecg_system.exceptions import InvalidConfigurationError, SampleRateMismatchError
from cardiosim.ecg_system.schemas import ArrhythmiaDetection, LeadInput, QRSComplex, lead_buffers
from cardiosim.interpretation.analyzers import (
    analyze_morphology,
    analyze_rhythm,
    analyze_st_segment,
    rr_intervals_ms,
)
from cardiosim.interpretation.rules import ArrhythmiaClassifier
from cardiosim.prediction.history import RRIntervalSeries
from cardiosim.prediction.signal_beat_detector import SignalBasedBeatDetector

logger = logging.getLogger(__name__)

PRIMARY_LEAD = "II"


class ArrhythmiaDetector:
    """Stateful detector for one monitoring session.

    Beat and RR histories persist across ``detect`` calls until ``reset``.
    Consecutive calls are treated as contiguous blocks of one recording: the
    interval from the last complex of one block to the first complex of the
    next is added to the RR history. Buffers should therefore neither
    overlap nor skip samples.

    Args:
        config: detection thresholds and history capacities.
        classifier: classifier instance (default loads the bundled rules).
    """

    def __init__(
        self,
        config: DetectorConfig | None = None,
        classifier: ArrhythmiaClassifier | None = None,
    ) -> None:
        self.config = config or DetectorConfig()
        self.beat_detector = SignalBasedBeatDetector(self.config)
        self.rr_intervals = RRIntervalSeries(
            capacity=self.config.rr_capacity,
            min_ms=self.config.rr_min_ms,
            max_ms=self.config.rr_max_ms,
        )
        self.classifier = classifier or ArrhythmiaClassifier()
        self._sample_rate: Optional[float] = None
        # Samples elapsed since the last complex seen in earlier blocks
        self._samples_since_qrs: Optional[int] = None

    def detect(
        self,
        leads: LeadInput,
        sample_rate: float,
        patient_age: float = 45.0,
        timestamp: datetime | None = None,
    ) -> Optional[ArrhythmiaDetection]:
        """Analyse one block of lead data.

        Args:
            leads: ``Lead`` objects or a lead name -> samples mapping. Lead II
                is required; other leads feed the ST analysis and V1 the
                bundle-branch check.
            sample_rate: sampling rate in Hz; must stay constant until reset.
            patient_age: patient age in years.
            timestamp: detection time passed through to the classifier.

        Returns:
            The highest-priority detection, or ``None`` while there is not
            yet enough data to classify.
        """
        self._check_sample_rate(sample_rate)
        if not 0 < patient_age < 150:
            raise InvalidConfigurationError("patient_age", patient_age, "must be within (0, 150)")

        buffers = lead_buffers(leads)
        lead_ii = buffers.get(PRIMARY_LEAD)
        if lead_ii is None or len(lead_ii) < sample_rate:
            logger.debug("Lead %s missing or shorter than one second; no detection", PRIMARY_LEAD)
            self._samples_since_qrs = None
            return None

        complexes = self.beat_detector.detect_qrs(lead_ii, sample_rate)
        p_waves = self.beat_detector.detect_p_waves(lead_ii, sample_rate)

        intervals = self._boundary_interval(complexes, sample_rate)
        intervals += rr_intervals_ms(complexes, sample_rate)
        self._advance_boundary(complexes, len(lead_ii))
        accepted = self.rr_intervals.extend(intervals)
        if accepted < len(intervals):
            logger.debug("Rejected %d implausible RR intervals", len(intervals) - accepted)

        if len(complexes) < self.config.min_qrs_complexes:
            logger.debug("Only %d QRS complexes found; no detection", len(complexes))
            return None
        if len(self.rr_intervals) < self.config.min_rr_intervals:
            logger.debug(
                "RR history holds %d of %d required intervals; no detection",
                len(self.rr_intervals), self.config.min_rr_intervals,
            )
            return None

        rhythm = analyze_rhythm(self.rr_intervals, p_waves, self.config)
        morphology = analyze_morphology(
            complexes, lead_ii, buffers.get("V1"), sample_rate, self.beat_detector,
        )
        st = analyze_st_segment(buffers, self.config)

        detection = self.classifier.classify(
            rhythm, morphology, st, self.rr_intervals.values, timestamp,
        )
        logger.debug(
            "Detection %s (%s) at %.0f bpm, age %.0f",
            detection.type, detection.severity, rhythm.heart_rate_bpm, patient_age,
        )
        return detection

    def reset(self) -> None:
        """Discard all beat and RR history."""
        self.beat_detector.reset()
        self.rr_intervals.clear()
        self._sample_rate = None
        self._samples_since_qrs = None

    def _boundary_interval(self, complexes: list[QRSComplex], sample_rate: float) -> list[float]:
        """RR interval spanning the previous block boundary, if one is known."""
        if self._samples_since_qrs is None or not complexes:
            return []
        return [(self._samples_since_qrs + complexes[0].sample) * 1000.0 / sample_rate]

    def _advance_boundary(self, complexes: list[QRSComplex], n_samples: int) -> None:
        if complexes:
            self._samples_since_qrs = n_samples - complexes[-1].sample
        elif self._samples_since_qrs is not None:
            self._samples_since_qrs += n_samples

    def _check_sample_rate(self, sample_rate: float) -> None:
        if sample_rate <= 0:
            raise InvalidConfigurationError("sample_rate", sample_rate, "must be positive")
        if self._sample_rate is None:
            self._sample_rate = sample_rate
        elif sample_rate != self._sample_rate:
            raise SampleRateMismatchError(self._sample_rate, sample_rate)
