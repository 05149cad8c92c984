"""ECG generator facade: single entry point for synthetic 12-lead blocks."""

from __future__ import annotations

import logging
from typing import NamedTuple

import numpy as np

from cardiosim.ecg_system.exceptions import InvalidConfigurationError
from cardiosim.ecg_system.schemas import ClinicalMeasurements, Lead
from cardiosim.interpretation.measurements import ClinicalMeasurementCalculator
from cardiosim.simulator.leads import LEAD_GEOMETRY, create_leads, project
from cardiosim.simulator.morphology import synthesize
from cardiosim.simulator.noise import (
    ArtifactConfig,
    apply_artifact_pipeline,
    resolve_artifact_config,
)
from cardiosim.simulator.pathology import (
    PATHOLOGY_REGISTRY,
    Pathology,
    age_gender_modifiers,
    parse_pathology,
)

logger = logging.getLogger(__name__)

FS_ECG = 1000.0
DEFAULT_DURATION = 10.0


class GeneratedECG(NamedTuple):
    """One generated block: 12 lead buffers plus their measurement snapshot."""

    leads: list[Lead]
    measurements: ClinicalMeasurements


class ClinicalECGGenerator:
    """Facade for generating synthetic 12-lead ECG blocks.

    Consecutive ``generate`` calls continue from where the previous block
    ended, so the blocks concatenate into one continuous recording.

    Args:
        fs: sampling frequency in Hz (default 1000).
        patient_age: age in years, selects the age modifier table.
        patient_gender: ``"male"`` or ``"female"``.
        seed: random seed for reproducibility. ``None`` for non-deterministic.
        rng: explicit generator; takes precedence over *seed*.
        artifact_config: artifact preset name or ``ArtifactConfig``.
    """

    def __init__(
        self,
        fs: float = FS_ECG,
        patient_age: float = 45.0,
        patient_gender: str = "male",
        seed: int | None = None,
        rng: np.random.Generator | None = None,
        artifact_config: str | ArtifactConfig | None = None,
    ) -> None:
        if fs <= 0:
            raise InvalidConfigurationError("fs", fs, "must be positive")
        self.fs = fs
        self.patient_age = patient_age
        self.patient_gender = patient_gender
        self.modifiers = age_gender_modifiers(patient_age, patient_gender)
        self.artifact_config = resolve_artifact_config(artifact_config)
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._time = 0.0
        self._calculator = ClinicalMeasurementCalculator()

    @property
    def time(self) -> float:
        """Start time (s) of the next generated block."""
        return self._time

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(
        self,
        heart_rate: float,
        amplitude: float = 1.0,
        noise_level: float = 0.0,
        pathology: Pathology | str = Pathology.NORMAL,
        duration: float = DEFAULT_DURATION,
    ) -> GeneratedECG:
        """Generate *duration* seconds of 12-lead ECG.

        Returns:
            ``GeneratedECG`` with 12 leads of ``round(duration * fs)`` samples
            each, in standard lead order.
        """
        self._validate(heart_rate, amplitude, noise_level, duration)
        pathology = parse_pathology(pathology)
        cfg = PATHOLOGY_REGISTRY[pathology]

        pr_interval = cfg.pr_interval_ms
        if cfg.pr_interval_range_ms is not None:
            pr_interval = float(self._rng.uniform(*cfg.pr_interval_range_ms))

        n_samples = int(round(duration * self.fs))
        time = self._time + np.arange(n_samples) / self.fs

        leads = create_leads()
        for lead, geometry in zip(leads, LEAD_GEOMETRY):
            base = synthesize(
                time,
                heart_rate,
                amplitude,
                pathology,
                pr_interval_ms=pr_interval,
                qrs_width_ms=cfg.qrs_width_ms,
                qt_interval_ms=cfg.qt_interval_ms,
                modifiers=self.modifiers,
                rng=self._rng,
            )
            projected = project(base, geometry.name, pathology)
            lead.append(apply_artifact_pipeline(
                projected, time, noise_level, geometry.impedance,
                self._rng, self.artifact_config,
            ))

        measurements = self._calculator.compute(
            leads, heart_rate, pr_interval, cfg.qrs_width_ms, cfg.qt_interval_ms,
        )

        logger.debug(
            "Generated %d samples x %d leads at t=%.3fs (%s, %.0f bpm)",
            n_samples, len(leads), self._time, pathology.value, heart_rate,
        )
        self._time += duration
        return GeneratedECG(leads, measurements)

    def reset(self) -> None:
        """Restart the time origin at zero."""
        self._time = 0.0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(
        heart_rate: float, amplitude: float, noise_level: float, duration: float,
    ) -> None:
        if heart_rate <= 0:
            raise InvalidConfigurationError("heart_rate", heart_rate, "must be positive")
        if amplitude <= 0:
            raise InvalidConfigurationError("amplitude", amplitude, "must be positive")
        if not 0.0 <= noise_level <= 1.0:
            raise InvalidConfigurationError("noise_level", noise_level, "must be within [0, 1]")
        if duration <= 0:
            raise InvalidConfigurationError("duration", duration, "must be positive")
