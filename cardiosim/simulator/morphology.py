"""Phase-segmented PQRST waveform synthesizer.

The cardiac cycle is mapped onto ``[0, 2π)`` and partitioned into named
segments (P, QRS, ST, T, U). Each segment contributes an additive half-sine
term scaled by the amplitude and by the patient's age/gender modifiers.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from cardiosim.ecg_system.exceptions import InvalidConfigurationError
from cardiosim.simulator.pathology import (
    PATHOLOGY_REGISTRY,
    Pathology,
    WaveModifiers,
    parse_pathology,
)

TWO_PI = 2.0 * np.pi

# Intervals at which the segment bounds take their nominal values
NOMINAL_PR_MS = 160.0
NOMINAL_QRS_MS = 90.0
NOMINAL_QT_MS = 400.0

# Nominal segment bounds (radians of cardiac phase)
_QRS_ONSET = 1.4
_QRS_SPAN = 0.4
_P_SPAN = 0.3
_P_TO_QRS = 1.0
_QRS_TO_T_END = 2.6
_T_SPAN = 1.5
_ST_T_OVERLAP = 0.3
_U_SPAN = 0.5

# Fibrillatory baseline is only present early in the cycle
_FIBRILLATION_PHASE_LIMIT = 1.5


@dataclass(frozen=True)
class PhaseSegments:
    """Segment bounds in radians of cardiac phase.

    ``p_start`` may be negative when a long PR interval pushes the P wave
    into the previous cycle.
    """

    p_start: float
    p_end: float
    qrs_start: float
    qrs_end: float
    st_start: float
    st_end: float
    t_start: float
    t_end: float
    u_start: float
    u_end: float


def phase_segments(
    pr_interval_ms: float = NOMINAL_PR_MS,
    qrs_width_ms: float = NOMINAL_QRS_MS,
    qt_interval_ms: float = NOMINAL_QT_MS,
) -> PhaseSegments:
    """Scale the nominal segment bounds by the given intervals."""
    qrs_end = _QRS_ONSET + _QRS_SPAN * qrs_width_ms / NOMINAL_QRS_MS
    p_end = _QRS_ONSET - _P_TO_QRS * pr_interval_ms / NOMINAL_PR_MS
    qt_scale = qt_interval_ms / NOMINAL_QT_MS
    t_end = _QRS_ONSET + _QRS_TO_T_END * qt_scale
    t_start = t_end - _T_SPAN * qt_scale
    return PhaseSegments(
        p_start=p_end - _P_SPAN,
        p_end=p_end,
        qrs_start=_QRS_ONSET,
        qrs_end=qrs_end,
        st_start=qrs_end,
        st_end=t_start + _ST_T_OVERLAP * qt_scale,
        t_start=t_start,
        t_end=t_end,
        u_start=t_end,
        u_end=min(t_end + _U_SPAN, TWO_PI),
    )


def cardiac_phase(t: np.ndarray | float, heart_rate: float) -> np.ndarray:
    """Phase in ``[0, 2π)`` of time *t* (seconds) within the current beat."""
    beat_interval = 60.0 / heart_rate
    return np.mod(np.asarray(t, dtype=np.float64), beat_interval) / beat_interval * TWO_PI


def _half_sine(x: np.ndarray, start: float, end: float) -> np.ndarray:
    """Positive half-sine lobe over the open interval ``(start, end)``."""
    inside = (x > start) & (x < end)
    return np.where(inside, np.sin((x - start) / (end - start) * np.pi), 0.0)


def synthesize(
    t: np.ndarray | float,
    heart_rate: float,
    amplitude: float,
    pathology: Pathology | str = Pathology.NORMAL,
    pr_interval_ms: float | None = None,
    qrs_width_ms: float | None = None,
    qt_interval_ms: float | None = None,
    modifiers: WaveModifiers | None = None,
    rng: np.random.Generator | None = None,
) -> np.ndarray | float:
    """Canonical (un-projected) ECG voltage at time *t*.

    Args:
        t: time in seconds, scalar or array.
        heart_rate: beats per minute, must be positive.
        amplitude: overall amplitude scale in mV.
        pathology: pathology tag controlling the waveform.
        pr_interval_ms: PR interval override; defaults to the pathology's.
        qrs_width_ms: QRS width override; defaults to the pathology's.
        qt_interval_ms: QT interval override; defaults to the pathology's.
        modifiers: per-wave age/gender multipliers.
        rng: source for the fibrillatory baseline. Without one the
            fibrillatory term uses its mean and is deterministic.

    Returns:
        Voltage in mV with the same shape as *t* (``float`` for scalar input).
    """
    if heart_rate <= 0:
        raise InvalidConfigurationError("heart_rate", heart_rate, "must be positive")

    cfg = PATHOLOGY_REGISTRY[parse_pathology(pathology)]
    pr = cfg.pr_interval_ms if pr_interval_ms is None else pr_interval_ms
    qrs = cfg.qrs_width_ms if qrs_width_ms is None else qrs_width_ms
    qt = cfg.qt_interval_ms if qt_interval_ms is None else qt_interval_ms
    mods = modifiers or WaveModifiers()
    seg = phase_segments(pr, qrs, qt)

    phase = cardiac_phase(t, heart_rate)
    ecg = np.zeros_like(phase)

    # P wave (atrial depolarisation)
    if pr > 0 and not cfg.fibrillatory_baseline:
        p_span = seg.p_end - seg.p_start
        p_rel = np.mod(phase - seg.p_start, TWO_PI)
        ecg += 0.15 * amplitude * _half_sine(p_rel, 0.0, p_span) * mods.p_wave

    # Atrial fibrillation: bounded random baseline instead of a P wave
    if cfg.fibrillatory_baseline:
        if rng is not None:
            u = rng.random(phase.shape)
        else:
            u = np.full(phase.shape, 0.5)
        f_wave = 0.05 * amplitude * (u - 0.5) * np.sin(phase * 20.0)
        ecg += np.where(phase < _FIBRILLATION_PHASE_LIMIT, f_wave, 0.0)

    # QRS complex, expressed as a fraction of the QRS segment
    in_qrs = (phase > seg.qrs_start) & (phase < seg.qrs_end)
    qrs_rel = np.where(in_qrs, (phase - seg.qrs_start) / (seg.qrs_end - seg.qrs_start), -1.0)

    if cfg.pathological_q:
        ecg -= 0.3 * amplitude * _half_sine(qrs_rel, 0.0, 0.15)

    r_rel = np.clip((qrs_rel - 0.1) / 0.5, 0.0, 1.0)
    r_amplitude = np.full(phase.shape, 1.2 * amplitude)
    if cfg.notched_r:
        r_amplitude = r_amplitude * 0.8 + 0.2 * amplitude * np.sin(r_rel * np.pi * 3.0)
    ecg += r_amplitude * _half_sine(qrs_rel, 0.1, 0.6) * mods.r_wave

    ecg -= 0.4 * amplitude * _half_sine(qrs_rel, 0.6, 0.9)

    # ST segment offset (elevation or depression)
    if cfg.st_offset:
        in_st = (phase > seg.st_start) & (phase < seg.st_end)
        ecg += np.where(in_st, cfg.st_offset * amplitude, 0.0)

    # T wave (ventricular repolarisation), inverted for ischemic patterns
    t_amplitude = 0.25 * amplitude * cfg.t_wave_polarity
    ecg += t_amplitude * _half_sine(phase, seg.t_start, seg.t_end) * mods.t_wave

    # U wave
    ecg += 0.05 * amplitude * _half_sine(phase, seg.u_start, seg.u_end)

    if ecg.ndim == 0:
        return float(ecg)
    return ecg
