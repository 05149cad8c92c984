"""Rule-based arrhythmia classifier.

Maps rhythm, morphology and ST features to one prioritised clinical
diagnosis through an ordered first-match cascade. Thresholds are loaded
from ``config/rules_config.yaml``; the clinical text is fixed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

import yaml

from cardiosim.ecg_system.schemas import (
    ArrhythmiaDetection,
    HeartRateRange,
    MorphologyAnalysis,
    RhythmAnalysis,
    STAnalysis,
)

_DEFAULT_RULES_PATH = Path(__file__).resolve().parents[2] / "config" / "rules_config.yaml"


def _load_rules(path: Path | None = None) -> dict:
    p = path or _DEFAULT_RULES_PATH
    with open(p) as f:
        return yaml.safe_load(f) or {}


@dataclass(frozen=True)
class ClinicalText:
    """Fixed wording and confidence attached to one detection type."""

    severity: str
    description: str
    clinical_significance: str
    recommended_action: str
    confidence: float
    hr_margin: Optional[float] = None


CLINICAL_TEXT: Mapping[str, ClinicalText] = MappingProxyType({
    "ventricular_fibrillation": ClinicalText(
        severity="life_threatening",
        description="Ventricular Fibrillation - Chaotic ventricular rhythm",
        clinical_significance="Immediate cardiac arrest risk",
        recommended_action="IMMEDIATE DEFIBRILLATION - Call Code Blue",
        confidence=0.95,
        hr_margin=20,
    ),
    "ventricular_tachycardia": ClinicalText(
        severity="critical",
        description="Sustained Ventricular Tachycardia",
        clinical_significance="High risk of hemodynamic compromise",
        recommended_action="Immediate cardioversion if unstable, antiarrhythmic therapy",
        confidence=0.90,
        hr_margin=10,
    ),
    "st_elevation": ClinicalText(
        severity="critical",
        description="ST Elevation - Acute STEMI pattern",
        clinical_significance="Acute myocardial infarction in progress",
        recommended_action="IMMEDIATE PCI or thrombolytic therapy - STEMI protocol",
        confidence=0.88,
    ),
    "st_depression": ClinicalText(
        severity="severe",
        description="Significant ST Depression",
        clinical_significance="Myocardial ischemia or NSTEMI",
        recommended_action="Urgent cardiology consultation, serial troponins",
        confidence=0.82,
    ),
    "atrial_fibrillation": ClinicalText(
        severity="moderate",
        description="Atrial Fibrillation - Irregularly irregular rhythm",
        clinical_significance="Increased stroke risk, hemodynamic effects",
        recommended_action="Rate control, anticoagulation assessment, rhythm vs rate strategy",
        confidence=0.85,
    ),
    "sinus_tachycardia": ClinicalText(
        severity="mild",
        description="Sinus Tachycardia - HR: {hr} BPM",
        clinical_significance="May indicate underlying pathology or physiological stress",
        recommended_action="Identify and treat underlying cause, monitor hemodynamics",
        confidence=0.92,
        hr_margin=5,
    ),
    "sinus_bradycardia": ClinicalText(
        severity="mild",
        description="Sinus Bradycardia - HR: {hr} BPM",
        clinical_significance="May cause hemodynamic compromise, especially in elderly",
        recommended_action="Assess symptoms, consider pacing if symptomatic",
        confidence=0.90,
        hr_margin=5,
    ),
    "bundle_branch_block": ClinicalText(
        severity="moderate",
        description="Bundle Branch Block - Wide QRS complexes",
        clinical_significance="May indicate underlying cardiac disease",
        recommended_action="Echocardiogram, assess for structural heart disease",
        confidence=0.78,
    ),
    "pvc": ClinicalText(
        severity="mild",
        description="Premature Ventricular Contractions",
        clinical_significance="Usually benign if structurally normal heart",
        recommended_action="Monitor frequency, assess for underlying heart disease if frequent",
        confidence=0.75,
    ),
    "normal": ClinicalText(
        severity="normal",
        description="Normal Sinus Rhythm - HR: {hr} BPM",
        clinical_significance="Normal cardiac electrical activity",
        recommended_action="Continue routine monitoring",
        confidence=0.95,
        hr_margin=5,
    ),
})


class ArrhythmiaClassifier:
    """Classify analyzer output into a single ``ArrhythmiaDetection``.

    The classifier holds only its threshold table; ``classify`` has no side
    effects.

    Args:
        rules_path: Path to YAML rules config (default: config/rules_config.yaml).
    """

    def __init__(self, rules_path: Path | None = None) -> None:
        self.rules = _load_rules(rules_path)

    def classify(
        self,
        rhythm: RhythmAnalysis,
        morphology: MorphologyAnalysis,
        st: STAnalysis,
        rr_intervals_ms: Sequence[float],
        timestamp: datetime | None = None,
    ) -> ArrhythmiaDetection:
        """Run the cascade and return the first matching detection.

        Args:
            rhythm: rhythm features from the RR series and P-wave windows.
            morphology: QRS morphology ratios.
            st: ST deviation summary.
            rr_intervals_ms: current RR series, used for the AF rate range.
            timestamp: detection time; defaults to now (UTC).
        """
        ts = timestamp or datetime.now(timezone.utc)
        hr = round(rhythm.heart_rate_bpm)
        r = self.rules

        vf = r.get("ventricular_fibrillation", {})
        if hr > vf.get("hr_min_bpm", 250) and morphology.ventricular_origin:
            return self._detection("ventricular_fibrillation", hr, ts)

        vt = r.get("ventricular_tachycardia", {})
        if (
            vt.get("hr_min_bpm", 150) < hr < vt.get("hr_max_bpm", 250)
            and morphology.wide_qrs_ratio > vt.get("wide_qrs_ratio_min", 0.8)
        ):
            return self._detection("ventricular_tachycardia", hr, ts)

        if st.st_elevation and st.max_elevation > r.get("st_elevation", {}).get("max_elevation_mv", 0.2):
            return self._detection("st_elevation", hr, ts)

        if st.st_depression and st.max_depression < r.get("st_depression", {}).get("max_depression_mv", -0.15):
            return self._detection("st_depression", hr, ts)

        af = r.get("atrial_fibrillation", {})
        if not rhythm.atrial_activity and rhythm.rr_variability > af.get("rr_cv_min", 0.3):
            rates = [round(60000.0 / rr) for rr in rr_intervals_ms if rr > 0]
            hr_range = HeartRateRange(min(rates), max(rates)) if rates else None
            return self._detection("atrial_fibrillation", hr, ts, hr_range=hr_range)

        tachy = r.get("sinus_tachycardia", {})
        if hr > tachy.get("hr_min_bpm", 100):
            if hr > tachy.get("severe_above_bpm", 150):
                severity = "severe"
            elif hr > tachy.get("moderate_above_bpm", 120):
                severity = "moderate"
            else:
                severity = "mild"
            return self._detection("sinus_tachycardia", hr, ts, severity=severity)

        brady = r.get("sinus_bradycardia", {})
        if hr < brady.get("hr_max_bpm", 60):
            if hr < brady.get("severe_below_bpm", 40):
                severity = "severe"
            elif hr < brady.get("moderate_below_bpm", 50):
                severity = "moderate"
            else:
                severity = "mild"
            return self._detection("sinus_bradycardia", hr, ts, severity=severity)

        if morphology.bundle_branch_pattern:
            return self._detection("bundle_branch_block", hr, ts)

        pvc = r.get("pvc", {})
        if pvc.get("bizarre_ratio_min", 0.1) < morphology.bizarre_qrs_ratio < pvc.get("bizarre_ratio_max", 0.5):
            return self._detection("pvc", hr, ts)

        return self._detection("normal", hr, ts)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _detection(
        kind: str,
        hr: int,
        timestamp: datetime,
        severity: str | None = None,
        hr_range: HeartRateRange | None = None,
    ) -> ArrhythmiaDetection:
        text = CLINICAL_TEXT[kind]
        if hr_range is None and text.hr_margin is not None:
            hr_range = HeartRateRange(hr - text.hr_margin, hr + text.hr_margin)
        return ArrhythmiaDetection(
            type=kind,
            severity=severity or text.severity,
            description=text.description.format(hr=hr),
            clinical_significance=text.clinical_significance,
            recommended_action=text.recommended_action,
            confidence=text.confidence,
            timestamp=timestamp,
            heart_rate_range=hr_range,
        )
