"""Signal-based beat detector for streaming Lead II analysis.

Finds QRS complexes with an amplitude + slope rule, characterises each one
from a short local segment and samples P-wave activity over fixed windows.
Detected records are kept in bounded rolling histories.

Usage:
    detector = SignalBasedBeatDetector()
    complexes = detector.detect_qrs(lead_ii, fs=1000)
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.signal import find_peaks

from config.settings import DetectorConfig
from cardiosim.ecg_system.schemas import PWaveWindow, QRSComplex
from cardiosim.prediction.history import RingBuffer

logger = logging.getLogger(__name__)


class SignalBasedBeatDetector:
    """Detect QRS complexes and P-wave windows from a single lead.

    Args:
        config: detection thresholds and history capacities.
    """

    def __init__(self, config: DetectorConfig | None = None) -> None:
        self.config = config or DetectorConfig()
        self.qrs_history: RingBuffer[QRSComplex] = RingBuffer(self.config.qrs_history_capacity)
        self.p_wave_history: RingBuffer[PWaveWindow] = RingBuffer(self.config.p_wave_history_capacity)

    def reset(self) -> None:
        self.qrs_history.clear()
        self.p_wave_history.clear()

    # ------------------------------------------------------------------
    # QRS detection
    # ------------------------------------------------------------------

    def detect_qrs(self, signal: np.ndarray, fs: float) -> list[QRSComplex]:
        """Detect QRS complexes in *signal* and append them to the history.

        Returns:
            Complexes found in this call, in time order.
        """
        x = np.asarray(signal, dtype=np.float64)
        peaks = self._find_qrs_peaks(x, fs)

        half_window = int(round(self.config.qrs_window_s * fs))
        complexes: list[QRSComplex] = []
        for idx in peaks:
            segment = x[max(0, idx - half_window):min(len(x), idx + half_window + 1)]
            width_ms = self.qrs_width_ms(segment, fs)
            n_peaks = self.count_sub_peaks(segment)
            complexes.append(QRSComplex(
                sample=int(idx),
                time_s=idx / fs,
                amplitude=float(x[idx]),
                width_ms=width_ms,
                morphology=self._classify_morphology(width_ms, n_peaks),
            ))

        self.qrs_history.extend(complexes)
        logger.debug("Detected %d QRS complexes in %d samples", len(complexes), len(x))
        return complexes

    def _find_qrs_peaks(self, x: np.ndarray, fs: float) -> np.ndarray:
        """Amplitude + slope candidates, dominant-peak gate, then refractory period.

        Strategy: a candidate must exceed a fraction of the buffer RMS while
        rising into it and falling after it. Candidates well below the
        tallest one (P and T waves) are dropped before the refractory
        period is enforced.
        """
        cfg = self.config
        offset = cfg.slope_offset_samples
        margin = max(cfg.edge_margin_samples, offset)
        n = len(x)
        if n <= 2 * margin:
            return np.array([], dtype=int)

        threshold = cfg.rms_threshold_fraction * np.sqrt(np.mean(x ** 2))
        idx = np.arange(margin, n - margin)
        rising = x[idx] - x[idx - offset] > 0
        falling = x[idx + offset] - x[idx] < 0
        candidates = idx[(np.abs(x[idx]) > threshold) & rising & falling]
        if len(candidates) == 0:
            return candidates

        # Adaptive gate: QRS complexes are the tallest deflections
        amplitudes = np.abs(x[candidates])
        candidates = candidates[amplitudes >= cfg.dominant_peak_fraction * amplitudes.max()]

        min_distance = cfg.refractory_s * fs
        kept = [candidates[0]]
        for c in candidates[1:]:
            if c - kept[-1] >= min_distance:
                kept.append(c)
        return np.array(kept, dtype=int)

    def qrs_width_ms(self, segment: np.ndarray, fs: float) -> float:
        """Span between the first and last samples above 10 % of the segment peak."""
        if len(segment) == 0:
            return 0.0
        magnitude = np.abs(segment)
        above = np.flatnonzero(magnitude > self.config.width_threshold_fraction * magnitude.max())
        if len(above) == 0:
            return 0.0
        return float((above[-1] - above[0]) / fs * 1000.0)

    def count_sub_peaks(self, segment: np.ndarray) -> int:
        """Number of local maxima above 30 % of the segment peak."""
        if len(segment) < 3:
            return 0
        height = self.config.sub_peak_threshold_fraction * float(np.max(segment))
        peaks, _ = find_peaks(segment, height=height)
        return int(len(peaks))

    def _classify_morphology(self, width_ms: float, n_peaks: int) -> str:
        if n_peaks > 3:
            return "bizarre"
        if n_peaks == 3:
            return "notched"
        if width_ms > self.config.wide_qrs_ms:
            return "wide"
        return "normal"

    # ------------------------------------------------------------------
    # P-wave windows
    # ------------------------------------------------------------------

    def detect_p_waves(self, signal: np.ndarray, fs: float) -> list[PWaveWindow]:
        """Sample fixed windows for low-amplitude atrial activity.

        A window counts as a P wave when its peak-to-peak swing falls inside
        the configured millivolt band.
        """
        cfg = self.config
        x = np.asarray(signal, dtype=np.float64)
        step = int(round(cfg.p_wave_step_s * fs))
        window = int(round(cfg.p_wave_window_s * fs))
        stop = len(x) - int(round(cfg.p_wave_tail_s * fs))

        windows: list[PWaveWindow] = []
        for start in range(0, max(stop, 0), step):
            segment = x[start:start + window]
            if len(segment) == 0:
                continue
            swing = float(segment.max() - segment.min())
            windows.append(PWaveWindow(
                time_s=start / fs,
                amplitude=swing,
                present=cfg.p_wave_min_mv < swing < cfg.p_wave_max_mv,
            ))

        self.p_wave_history.extend(windows)
        return windows
