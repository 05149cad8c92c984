"""Clinical interpretation builder and JSON/text output assembly.

Combines a measurement snapshot with an arrhythmia detection into a readable
interpretation, and renders tick results as JSON-serializable documents or a
plain-text report.
"""

from __future__ import annotations

from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Optional

from cardiosim.ecg_system.schemas import (
    ArrhythmiaDetection,
    ClinicalMeasurements,
    ECGInterpretation,
    TickResult,
)

ALARM_SEVERITIES = frozenset({"critical", "life_threatening"})

URGENCY_BY_SEVERITY: Mapping[str, str] = MappingProxyType({
    "life_threatening": "critical",
    "critical": "stat",
    "severe": "urgent",
})


def is_alarm(detection: Optional[ArrhythmiaDetection]) -> bool:
    """True for detections that must raise a bedside alarm."""
    return detection is not None and detection.severity in ALARM_SEVERITIES


def alarm_priority(detection: Optional[ArrhythmiaDetection]) -> Optional[str]:
    """Alarm priority ("critical" or "high"), or ``None`` when no alarm is due."""
    if not is_alarm(detection):
        return None
    return "critical" if detection.severity == "life_threatening" else "high"


def _grade(value: float, low: float, high: float, above: str) -> str:
    """Grade an interval against its normal range; both bounds count as normal."""
    if value < low:
        return "Short"
    if value > high:
        return above
    return "Normal"


class InterpretationBuilder:
    """Build an ``ECGInterpretation`` from measurements and a detection."""

    def build(
        self,
        measurements: ClinicalMeasurements,
        detection: ArrhythmiaDetection,
        heart_rate: float,
        timestamp: datetime | None = None,
    ) -> ECGInterpretation:
        return ECGInterpretation(
            rhythm=detection.description,
            rate=heart_rate,
            axis=self._axis_text(measurements.axis_deg),
            intervals=self._grade_intervals(measurements),
            morphology=self._morphology_statements(measurements),
            clinical_correlation=detection.clinical_significance,
            recommendations=[detection.recommended_action],
            urgency=URGENCY_BY_SEVERITY.get(detection.severity, "routine"),
            confidence=detection.confidence,
            timestamp=timestamp or datetime.now(timezone.utc),
        )

    @staticmethod
    def _axis_text(axis_deg: float) -> str:
        if axis_deg > 90:
            return "Right axis deviation"
        if axis_deg < -30:
            return "Left axis deviation"
        return "Normal axis"

    @staticmethod
    def _grade_intervals(m: ClinicalMeasurements) -> dict[str, str]:
        return {
            "pr": _grade(m.pr_interval_ms, 120, 200, "Prolonged"),
            "qrs": _grade(m.qrs_width_ms, 60, 100, "Wide"),
            "qt": _grade(m.qt_interval_ms, 350, 450, "Prolonged"),
            "qtc": _grade(m.qtc_interval_ms, 350, 440, "Prolonged"),
        }

    @staticmethod
    def _morphology_statements(m: ClinicalMeasurements) -> list[str]:
        statements = []
        if any(m.pathological_q_waves.values()):
            statements.append("Pathological Q waves present")
        if any(m.t_wave_inversion.values()):
            statements.append("T wave inversions noted")
        if not m.r_wave_progression:
            statements.append("Poor R wave progression")
        return statements


# ----------------------------------------------------------------------
# Output assembly
# ----------------------------------------------------------------------


def assemble(tick: TickResult) -> dict[str, Any]:
    """JSON-serializable view of one tick (lead samples are summarised)."""
    return {
        "leads": {
            lead.name: {
                "samples": len(lead),
                "quality": lead.quality,
                "impedance_kohm": lead.impedance,
            }
            for lead in tick.leads
        },
        "measurements": tick.measurements.to_dict(),
        "detection": tick.detection.to_dict() if tick.detection else None,
        "interpretation": tick.interpretation.to_dict() if tick.interpretation else None,
        "alarm": tick.alarm,
        "alarm_priority": alarm_priority(tick.detection),
    }


def render_report(
    interpretation: ECGInterpretation,
    measurements: ClinicalMeasurements,
) -> str:
    """Plain-text clinical ECG report."""
    iv = interpretation.intervals
    lines = [
        "CLINICAL ECG REPORT",
        "==================",
        "",
        "INTERPRETATION:",
        interpretation.rhythm,
        f"Rate: {interpretation.rate:.0f} BPM",
        f"Axis: {interpretation.axis}",
        "",
        "INTERVALS:",
        f"PR: {measurements.pr_interval_ms:.0f} ms ({iv['pr']})",
        f"QRS: {measurements.qrs_width_ms:.0f} ms ({iv['qrs']})",
        f"QT: {measurements.qt_interval_ms:.0f} ms ({iv['qt']})",
        f"QTc: {measurements.qtc_interval_ms:.0f} ms ({iv['qtc']})",
    ]
    if interpretation.morphology:
        lines += ["", "MORPHOLOGY:", *interpretation.morphology]
    lines += [
        "",
        "CLINICAL CORRELATION:",
        interpretation.clinical_correlation,
        "",
        "RECOMMENDATIONS:",
        *interpretation.recommendations,
        "",
        f"Urgency: {interpretation.urgency}",
    ]
    return "\n".join(lines)
