"""Tick-driven monitoring session: one generator feeding one detector."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from config.settings import Settings
from cardiosim.ecg_system.schemas import ArrhythmiaDetection, ECGInterpretation, Lead, TickResult
from cardiosim.interpretation.assembly import InterpretationBuilder, is_alarm
from cardiosim.prediction.arrhythmia_detector import ArrhythmiaDetector
from cardiosim.prediction.history import RingBuffer
from cardiosim.simulator.ecg_simulator import ClinicalECGGenerator
from cardiosim.simulator.leads import LEAD_NAMES, create_leads

logger = logging.getLogger(__name__)


class MonitoringSession:
    """Simulated bedside monitor.

    Each ``tick`` generates a short block of 12-lead signal, keeps the most
    recent samples per lead for display and, once enough new signal has
    accumulated, runs arrhythmia detection on that non-overlapping window.
    Windows are contiguous, so the detector also counts the RR interval
    that spans each window boundary.

    A session is not thread-safe; drive each one from a single thread.

    Args:
        settings: application settings (defaults when ``None``).
        rng: explicit random generator for the waveform artifacts.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.settings = settings or Settings()
        sim = self.settings.simulator
        self.generator = ClinicalECGGenerator(
            fs=sim.sample_rate,
            patient_age=sim.patient_age,
            patient_gender=sim.patient_gender,
            seed=sim.seed,
            rng=rng,
            artifact_config=sim.artifact_preset,
        )
        self.detector = ArrhythmiaDetector(self.settings.detector)
        self.interpreter = InterpretationBuilder()

        retention = self.settings.session.retention_samples
        self._display: dict[str, RingBuffer[float]] = {
            name: RingBuffer(retention) for name in LEAD_NAMES
        }
        self._pending: dict[str, list[np.ndarray]] = {name: [] for name in LEAD_NAMES}
        self._pending_samples = 0
        self.last_detection: Optional[ArrhythmiaDetection] = None
        self.last_interpretation: Optional[ECGInterpretation] = None

    @property
    def sample_rate(self) -> float:
        return self.settings.simulator.sample_rate

    @property
    def analysis_window_samples(self) -> int:
        return int(round(self.settings.session.analysis_window_seconds * self.sample_rate))

    def tick(self) -> TickResult:
        """Advance the session by one tick."""
        params = self.settings.session
        block = self.generator.generate(
            heart_rate=params.heart_rate,
            amplitude=params.amplitude,
            noise_level=params.noise_level,
            pathology=params.pathology,
            duration=params.tick_seconds,
        )

        for lead in block.leads:
            self._display[lead.name].extend(lead.data)
            self._pending[lead.name].append(lead.data)
        self._pending_samples += len(block.leads[0])

        detection = None
        interpretation = None
        if self._pending_samples >= self.analysis_window_samples:
            window = self._drain_pending()
            detection = self.detector.detect(
                window, self.sample_rate, patient_age=self.settings.simulator.patient_age,
            )
            if detection is not None:
                interpretation = self.interpreter.build(
                    block.measurements, detection, params.heart_rate,
                )
                self.last_detection = detection
                self.last_interpretation = interpretation
                if is_alarm(detection):
                    logger.warning("ALARM %s: %s", detection.severity, detection.description)
                elif not detection.is_normal:
                    logger.info("Detection %s: %s", detection.type, detection.description)

        return TickResult(
            leads=self._display_leads(),
            measurements=block.measurements,
            detection=detection,
            interpretation=interpretation,
            alarm=is_alarm(detection),
        )

    def reset(self) -> None:
        """Clear generator time, detector history and all buffers."""
        self.generator.reset()
        self.detector.reset()
        for buffer in self._display.values():
            buffer.clear()
        for blocks in self._pending.values():
            blocks.clear()
        self._pending_samples = 0
        self.last_detection = None
        self.last_interpretation = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _drain_pending(self) -> dict[str, np.ndarray]:
        window = {name: np.concatenate(blocks) for name, blocks in self._pending.items()}
        for blocks in self._pending.values():
            blocks.clear()
        self._pending_samples = 0
        return window

    def _display_leads(self) -> list[Lead]:
        leads = create_leads()
        for lead in leads:
            lead.append(self._display[lead.name].to_array())
        return leads
