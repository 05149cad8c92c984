"""Pathology definitions and waveform modifier tables."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from cardiosim.ecg_system.exceptions import UnknownPathologyError


class Pathology(Enum):
    """Clinical scenarios supported by the waveform synthesizer."""

    NORMAL = "normal"

    # Infarction / ischemia
    MYOCARDIAL_INFARCTION = "myocardial_infarction"
    OLD_MI = "old_mi"
    STEMI = "stemi"
    NSTEMI = "nstemi"
    PERICARDITIS = "pericarditis"
    ISCHEMIA = "ischemia"

    # Rhythm / conduction
    ATRIAL_FIBRILLATION = "atrial_fibrillation"
    BUNDLE_BRANCH_BLOCK = "bundle_branch_block"
    AV_BLOCK_FIRST = "av_block_first"
    AV_BLOCK_THIRD = "av_block_third"

    # Axis
    LEFT_AXIS_DEVIATION = "left_axis_deviation"
    RIGHT_AXIS_DEVIATION = "right_axis_deviation"

    # Regional infarction (lead attenuation only)
    ANTERIOR_MI = "anterior_mi"
    INFERIOR_MI = "inferior_mi"
    LATERAL_MI = "lateral_mi"


class AxisState(Enum):
    NORMAL = "normal"
    LEFT = "left"
    RIGHT = "right"


def parse_pathology(value: Pathology | str) -> Pathology:
    """Resolve a pathology tag, rejecting anything outside the enumerated set."""
    if isinstance(value, Pathology):
        return value
    try:
        return Pathology(value)
    except ValueError:
        raise UnknownPathologyError(str(value)) from None


@dataclass(frozen=True)
class PathologyConfig:
    """Waveform and projection parameters for one pathology.

    Attributes:
        pr_interval_ms: PR interval; ``0`` suppresses the P wave.
        pr_interval_range_ms: when set, PR is drawn uniformly from this range
            on each generate call (AV dissociation).
        qrs_width_ms: QRS width used to scale the QRS segment.
        qt_interval_ms: QT interval used to scale the ST/T/U segments.
        fibrillatory_baseline: replace the P wave with a random f-wave baseline.
        pathological_q: add a negative Q deflection at QRS onset.
        notched_r: attenuate and notch the R wave.
        st_offset: ST-segment offset as a fraction of amplitude.
        t_wave_polarity: multiplier applied to the T wave.
        axis: global electrical axis used for lead projection.
        damped_leads: leads attenuated by a regional pathology.
        damping: multiplier applied to ``damped_leads``.
    """

    pr_interval_ms: float = 160.0
    pr_interval_range_ms: tuple[float, float] | None = None
    qrs_width_ms: float = 90.0
    qt_interval_ms: float = 400.0
    fibrillatory_baseline: bool = False
    pathological_q: bool = False
    notched_r: bool = False
    st_offset: float = 0.0
    t_wave_polarity: float = 1.0
    axis: AxisState = AxisState.NORMAL
    damped_leads: frozenset[str] = frozenset()
    damping: float = 1.0


ANTERIOR_LEADS = frozenset({"V1", "V2", "V3", "V4"})
INFERIOR_LEADS = frozenset({"II", "III", "aVF"})
LATERAL_LEADS = frozenset({"I", "aVL", "V5", "V6"})


PATHOLOGY_REGISTRY: Mapping[Pathology, PathologyConfig] = MappingProxyType({
    Pathology.NORMAL: PathologyConfig(),
    # --- Infarction / ischemia ---
    Pathology.MYOCARDIAL_INFARCTION: PathologyConfig(
        pr_interval_ms=180.0,
        qrs_width_ms=110.0,
        pathological_q=True,
        t_wave_polarity=-0.8,
    ),
    Pathology.OLD_MI: PathologyConfig(pathological_q=True),
    Pathology.STEMI: PathologyConfig(st_offset=0.3),
    Pathology.NSTEMI: PathologyConfig(st_offset=-0.15),
    Pathology.PERICARDITIS: PathologyConfig(st_offset=0.1),
    Pathology.ISCHEMIA: PathologyConfig(t_wave_polarity=-0.8),
    # --- Rhythm / conduction ---
    Pathology.ATRIAL_FIBRILLATION: PathologyConfig(
        pr_interval_ms=0.0,
        fibrillatory_baseline=True,
    ),
    Pathology.BUNDLE_BRANCH_BLOCK: PathologyConfig(
        qrs_width_ms=140.0,
        notched_r=True,
    ),
    Pathology.AV_BLOCK_FIRST: PathologyConfig(pr_interval_ms=240.0),
    Pathology.AV_BLOCK_THIRD: PathologyConfig(pr_interval_range_ms=(200.0, 600.0)),
    # --- Axis ---
    Pathology.LEFT_AXIS_DEVIATION: PathologyConfig(axis=AxisState.LEFT),
    Pathology.RIGHT_AXIS_DEVIATION: PathologyConfig(axis=AxisState.RIGHT),
    # --- Regional ---
    Pathology.ANTERIOR_MI: PathologyConfig(damped_leads=ANTERIOR_LEADS, damping=0.6),
    Pathology.INFERIOR_MI: PathologyConfig(damped_leads=INFERIOR_LEADS, damping=0.5),
    Pathology.LATERAL_MI: PathologyConfig(damped_leads=LATERAL_LEADS, damping=0.7),
})


# ---------------------------------------------------------------------------
# Age / gender amplitude modifiers
# ---------------------------------------------------------------------------

ELDERLY_AGE_YEARS = 65

_ELDERLY_MODIFIERS: Mapping[str, float] = MappingProxyType({
    "p_wave": 1.2,
    "r_wave": 0.9,
    "t_wave": 0.8,
})

_FEMALE_MODIFIERS: Mapping[str, float] = MappingProxyType({
    "r_wave": 0.85,
    "t_wave": 1.1,
})


@dataclass(frozen=True)
class WaveModifiers:
    """Per-wave amplitude multipliers for one patient."""

    p_wave: float = 1.0
    r_wave: float = 1.0
    t_wave: float = 1.0


def age_gender_modifiers(age: float, gender: str) -> WaveModifiers:
    """Combine the age and gender modifier tables for a patient."""
    values = {"p_wave": 1.0, "r_wave": 1.0, "t_wave": 1.0}
    if age > ELDERLY_AGE_YEARS:
        for wave, factor in _ELDERLY_MODIFIERS.items():
            values[wave] *= factor
    if gender == "female":
        for wave, factor in _FEMALE_MODIFIERS.items():
            values[wave] *= factor
    return WaveModifiers(**values)
