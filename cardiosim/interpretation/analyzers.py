"""Rhythm, QRS-morphology and ST-segment feature extraction.

Each analyzer turns detector output into a small frozen record consumed by
the arrhythmia classifier.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

import numpy as np

from config.settings import DetectorConfig
from cardiosim.ecg_system.schemas import (
    MorphologyAnalysis,
    PWaveWindow,
    QRSComplex,
    RhythmAnalysis,
    STAnalysis,
)
from cardiosim.interpretation.measurements import st_deviation
from cardiosim.prediction.history import RRIntervalSeries
from cardiosim.prediction.signal_beat_detector import SignalBasedBeatDetector

# Median sub-peak count inside QRS segments above which a conduction
# pattern (RSR') is reported
BUNDLE_BRANCH_MIN_PEAKS = 2


def rr_intervals_ms(complexes: Sequence[QRSComplex], fs: float) -> list[float]:
    """Intervals between consecutive complexes, from integer sample indices."""
    return [
        (curr.sample - prev.sample) * 1000.0 / fs
        for prev, curr in zip(complexes, complexes[1:])
    ]


def analyze_rhythm(
    rr_series: RRIntervalSeries,
    p_waves: Sequence[PWaveWindow],
    config: DetectorConfig | None = None,
) -> RhythmAnalysis:
    cfg = config or DetectorConfig()
    cv = rr_series.coefficient_of_variation()
    consistency = sum(1 for p in p_waves if p.present) / len(p_waves) if p_waves else 0.0
    return RhythmAnalysis(
        heart_rate_bpm=rr_series.heart_rate(),
        hrv_ms=rr_series.std(),
        p_wave_consistency=consistency,
        rr_variability=cv,
        regular_rhythm=cv < cfg.regular_rr_cv,
        atrial_activity=consistency > cfg.atrial_activity_consistency,
    )


def analyze_morphology(
    complexes: Sequence[QRSComplex],
    lead_ii: np.ndarray,
    lead_v1: Optional[np.ndarray],
    fs: float,
    beat_detector: SignalBasedBeatDetector,
) -> MorphologyAnalysis:
    """QRS shape ratios for the complexes found in the current window.

    A complex counts as wide when its measured width exceeds the configured
    limit, whatever its morphology label. The bundle-branch pattern is judged from the sub-peak count inside each
    detected QRS segment of Lead II and V1.
    """
    total = len(complexes)
    if total == 0:
        return MorphologyAnalysis(0.0, 0.0, False, False)

    wide_ms = beat_detector.config.wide_qrs_ms
    wide = sum(1 for c in complexes if c.width_ms > wide_ms) / total
    bizarre = sum(1 for c in complexes if c.morphology == "bizarre") / total

    half_window = int(round(beat_detector.config.qrs_window_s * fs))
    bundle_branch = False
    for lead in (lead_ii, lead_v1):
        if lead is None or len(lead) == 0:
            continue
        counts = [
            beat_detector.count_sub_peaks(
                lead[max(0, c.sample - half_window):c.sample + half_window + 1]
            )
            for c in complexes
            if c.sample < len(lead)
        ]
        if counts and np.median(counts) > BUNDLE_BRANCH_MIN_PEAKS:
            bundle_branch = True
            break

    return MorphologyAnalysis(
        wide_qrs_ratio=wide,
        bizarre_qrs_ratio=bizarre,
        bundle_branch_pattern=bundle_branch,
        ventricular_origin=wide > 0.5 and bizarre > 0.3,
    )


def analyze_st_segment(
    buffers: Mapping[str, np.ndarray],
    config: DetectorConfig | None = None,
) -> STAnalysis:
    """Count leads with significant ST elevation or depression."""
    cfg = config or DetectorConfig()
    deviations = {
        name: st_deviation(samples)
        for name, samples in buffers.items()
        if len(samples) > 0
    }
    values = list(deviations.values())
    elevated = sum(1 for v in values if v > cfg.st_threshold_mv)
    depressed = sum(1 for v in values if v < -cfg.st_threshold_mv)
    return STAnalysis(
        st_elevation=elevated > cfg.st_min_leads,
        st_depression=depressed > cfg.st_min_leads,
        max_elevation=max(values) if values else 0.0,
        max_depression=min(values) if values else 0.0,
        deviations=deviations,
    )
