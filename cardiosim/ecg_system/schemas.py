"""Data classes shared by the simulator and the analysis pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence, Union

import numpy as np


# ============== Lead buffers ==============


@dataclass
class Lead:
    """One ECG lead with an exclusively-owned, growable sample buffer (mV).

    Other components receive the lead by reference and only read ``data``.
    """

    name: str
    vector: tuple[float, float, float]
    placement: str
    impedance: float  # kOhm, synthetic
    quality: str  # "excellent", "good", "fair", "poor", "disconnected"
    enabled: bool = True
    _data: np.ndarray = field(
        default_factory=lambda: np.zeros(0, dtype=np.float64), repr=False,
    )

    @property
    def data(self) -> np.ndarray:
        return self._data

    def append(self, samples: np.ndarray) -> None:
        """Append a block of samples to the end of the buffer."""
        block = np.asarray(samples, dtype=np.float64).ravel()
        self._data = np.concatenate([self._data, block])

    def clear(self) -> None:
        self._data = np.zeros(0, dtype=np.float64)

    def __len__(self) -> int:
        return int(self._data.shape[0])


LeadInput = Union[Sequence[Lead], Mapping[str, np.ndarray]]


def lead_buffers(leads: LeadInput) -> dict[str, np.ndarray]:
    """Name -> sample array for every enabled lead.

    Accepts either ``Lead`` objects or a plain mapping of lead name to samples.
    """
    if isinstance(leads, Mapping):
        return {name: np.asarray(samples, dtype=np.float64) for name, samples in leads.items()}
    return {lead.name: lead.data for lead in leads if lead.enabled}


# ============== Measurements ==============


@dataclass
class ClinicalMeasurements:
    """Interval, axis and morphology measurements for one tick."""

    pr_interval_ms: float
    qrs_width_ms: float
    qt_interval_ms: float
    qtc_interval_ms: float
    axis_deg: float
    r_wave_progression: bool  # False = poor progression
    st_deviation: dict[str, float]  # mV per lead
    t_wave_inversion: dict[str, bool]
    pathological_q_waves: dict[str, bool]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ============== Beat detection records ==============


@dataclass(frozen=True)
class QRSComplex:
    """Single detected QRS complex."""

    sample: int  # index into the analysed buffer
    time_s: float
    amplitude: float
    width_ms: float
    morphology: str  # "normal", "wide", "bizarre", "notched"


@dataclass(frozen=True)
class PWaveWindow:
    """P-wave presence sampled over one fixed search window."""

    time_s: float
    amplitude: float
    present: bool


# ============== Analyzer outputs ==============


@dataclass(frozen=True)
class RhythmAnalysis:
    """Rhythm-level features from RR intervals and P-wave windows."""

    heart_rate_bpm: float
    hrv_ms: float
    p_wave_consistency: float
    rr_variability: float  # coefficient of variation
    regular_rhythm: bool
    atrial_activity: bool


@dataclass(frozen=True)
class MorphologyAnalysis:
    """QRS morphology ratios for the current analysis window."""

    wide_qrs_ratio: float
    bizarre_qrs_ratio: float
    bundle_branch_pattern: bool
    ventricular_origin: bool


@dataclass(frozen=True)
class STAnalysis:
    """ST-segment deviation summary across leads."""

    st_elevation: bool
    st_depression: bool
    max_elevation: float
    max_depression: float
    deviations: dict[str, float] = field(default_factory=dict)


# ============== Detection output ==============


@dataclass(frozen=True)
class HeartRateRange:
    min: float
    max: float


@dataclass(frozen=True)
class ArrhythmiaDetection:
    """One prioritised clinical classification. Immutable once produced."""

    type: str  # "normal", "sinus_tachycardia", "ventricular_tachycardia", ...
    severity: str  # "normal", "mild", "moderate", "severe", "critical", "life_threatening"
    description: str
    clinical_significance: str
    recommended_action: str
    confidence: float
    timestamp: datetime
    heart_rate_range: Optional[HeartRateRange] = None

    @property
    def is_normal(self) -> bool:
        return self.type == "normal"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": self.type,
            "severity": self.severity,
            "description": self.description,
            "clinical_significance": self.clinical_significance,
            "recommended_action": self.recommended_action,
            "confidence": self.confidence,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.heart_rate_range is not None:
            result["heart_rate_range"] = {
                "min": self.heart_rate_range.min,
                "max": self.heart_rate_range.max,
            }
        return result


@dataclass
class ECGInterpretation:
    """Readable interpretation combining measurements and a detection."""

    rhythm: str
    rate: float
    axis: str
    intervals: dict[str, str]  # pr / qrs / qt / qtc -> "Normal", "Short", ...
    morphology: list[str]
    clinical_correlation: str
    recommendations: list[str]
    urgency: str  # "routine", "urgent", "stat", "critical"
    confidence: float
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        result["timestamp"] = self.timestamp.isoformat()
        return result


@dataclass
class TickResult:
    """Output of one monitoring-session tick."""

    leads: list[Lead]
    measurements: ClinicalMeasurements
    detection: Optional[ArrhythmiaDetection] = None
    interpretation: Optional[ECGInterpretation] = None
    alarm: bool = False
