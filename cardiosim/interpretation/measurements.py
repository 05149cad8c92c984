"""Clinical measurement calculator for synthesized 12-lead buffers.

Computes QTc, electrical axis, R-wave progression and per-lead ST/T/Q
findings with auditable calculation traces.
"""

from __future__ import annotations

import math
from typing import Mapping

import numpy as np

from cardiosim.ecg_system.exceptions import InvalidConfigurationError
from cardiosim.ecg_system.schemas import ClinicalMeasurements, LeadInput, lead_buffers

PRECORDIAL_ORDER = ("V1", "V2", "V3", "V4", "V5", "V6")

DEFAULT_AXIS_DEG = 60.0
R_PROGRESSION_RATIO = 0.8
Q_TO_R_RATIO = 0.25


def _window(samples: np.ndarray, start: float, end: float) -> np.ndarray:
    """Slice the fraction ``[start, end)`` of a buffer."""
    n = len(samples)
    return samples[int(n * start):int(n * end)]


def st_deviation(samples: np.ndarray) -> float:
    """Mean of the 40-60 % window minus mean of the first 10 % (mV)."""
    x = np.asarray(samples, dtype=np.float64)
    st_segment = _window(x, 0.4, 0.6)
    baseline = _window(x, 0.0, 0.1)
    if st_segment.size == 0 or baseline.size == 0:
        return 0.0
    return float(np.mean(st_segment) - np.mean(baseline))


def t_wave_inverted(samples: np.ndarray) -> bool:
    """True when the 60-90 % window is dominated by a negative deflection.

    Compares the magnitudes of the window minimum and maximum; equal
    magnitudes (including a flat window) are not inverted.
    """
    t_segment = _window(np.asarray(samples, dtype=np.float64), 0.6, 0.9)
    if t_segment.size == 0:
        return False
    return bool(abs(t_segment.min()) > abs(t_segment.max()))


def pathological_q_wave(samples: np.ndarray) -> bool:
    """True when the Q window depth exceeds a quarter of the R window peak."""
    x = np.asarray(samples, dtype=np.float64)
    q_segment = _window(x, 0.25, 0.35)
    r_segment = _window(x, 0.35, 0.5)
    if q_segment.size == 0 or r_segment.size == 0:
        return False
    return bool(abs(q_segment.min()) > Q_TO_R_RATIO * r_segment.max())


def peak_to_peak(samples: np.ndarray) -> float:
    x = np.asarray(samples, dtype=np.float64)
    if x.size == 0:
        return 0.0
    return float(x.max() - x.min())


class ClinicalMeasurementCalculator:
    """Compute a ``ClinicalMeasurements`` snapshot from lead buffers.

    The calculator keeps no state between calls apart from ``traces``, which
    holds the human-readable steps of the most recent calculation.
    """

    def __init__(self) -> None:
        self.traces: list[str] = []

    def compute(
        self,
        leads: LeadInput,
        heart_rate: float,
        pr_interval_ms: float,
        qrs_width_ms: float,
        qt_interval_ms: float,
    ) -> ClinicalMeasurements:
        """Build the measurement snapshot for one block of lead data.

        Args:
            leads: ``Lead`` objects or a name -> samples mapping.
            heart_rate: heart rate used for the QTc correction (bpm).
            pr_interval_ms: PR interval in effect for this block.
            qrs_width_ms: QRS width in effect for this block.
            qt_interval_ms: QT interval in effect for this block.
        """
        self.traces.clear()
        buffers = lead_buffers(leads)

        qtc = self.qtc_bazett(qt_interval_ms, heart_rate)
        axis = self.electrical_axis(buffers)
        progression = self.r_wave_progression(buffers)

        st: dict[str, float] = {}
        t_inversion: dict[str, bool] = {}
        q_waves: dict[str, bool] = {}
        for name, samples in buffers.items():
            st[name] = st_deviation(samples)
            t_inversion[name] = t_wave_inverted(samples)
            q_waves[name] = pathological_q_wave(samples)

        return ClinicalMeasurements(
            pr_interval_ms=float(pr_interval_ms),
            qrs_width_ms=float(qrs_width_ms),
            qt_interval_ms=float(qt_interval_ms),
            qtc_interval_ms=qtc,
            axis_deg=axis,
            r_wave_progression=progression,
            st_deviation=st,
            t_wave_inversion=t_inversion,
            pathological_q_waves=q_waves,
        )

    # ------------------------------------------------------------------
    # QTc
    # ------------------------------------------------------------------

    def qtc_bazett(self, qt_ms: float, heart_rate: float) -> float:
        """QTc Bazett = QT / sqrt(RR in seconds), RR = 60 / HR."""
        if heart_rate <= 0:
            raise InvalidConfigurationError("heart_rate", heart_rate, "must be positive")
        rr_sec = 60.0 / heart_rate
        qtc = qt_ms / math.sqrt(rr_sec)
        self.traces.append(f"QTc Bazett: {qt_ms:.1f} / sqrt({rr_sec:.3f}) = {qtc:.1f}ms")
        return qtc

    # ------------------------------------------------------------------
    # Axis and R-wave progression
    # ------------------------------------------------------------------

    def electrical_axis(self, buffers: Mapping[str, np.ndarray]) -> float:
        """Frontal-plane axis from the Lead I and aVF peak-to-peak amplitudes."""
        lead_i = buffers.get("I")
        lead_avf = buffers.get("aVF")
        if lead_i is None or lead_avf is None or len(lead_i) == 0 or len(lead_avf) == 0:
            self.traces.append(f"Axis: Lead I or aVF unavailable, defaulting to {DEFAULT_AXIS_DEG:.0f} deg")
            return DEFAULT_AXIS_DEG
        amp_i = peak_to_peak(lead_i)
        amp_avf = peak_to_peak(lead_avf)
        axis = math.degrees(math.atan2(amp_avf, amp_i))
        self.traces.append(f"Axis: atan2({amp_avf:.3f}, {amp_i:.3f}) = {axis:.1f} deg")
        return axis

    def r_wave_progression(self, buffers: Mapping[str, np.ndarray]) -> bool:
        """False (poor progression) when a precordial peak drops below 80 % of its predecessor."""
        peaks = [
            float(np.max(buffers[name]))
            for name in PRECORDIAL_ORDER
            if name in buffers and len(buffers[name]) > 0
        ]
        for prev, curr in zip(peaks, peaks[1:]):
            if curr < prev * R_PROGRESSION_RATIO:
                self.traces.append(
                    f"R-wave progression: poor ({curr:.3f} < {R_PROGRESSION_RATIO} x {prev:.3f})"
                )
                return False
        return True
