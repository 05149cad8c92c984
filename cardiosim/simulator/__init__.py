"""ECG Simulator: synthetic 12-lead ECG generation."""

from cardiosim.simulator.pathology import (
    Pathology,
    PathologyConfig,
    PATHOLOGY_REGISTRY,
    WaveModifiers,
    age_gender_modifiers,
    parse_pathology,
)
from cardiosim.simulator.leads import LEAD_GEOMETRY, LEAD_NAMES, create_leads
from cardiosim.simulator.noise import ArtifactConfig, ARTIFACT_PRESETS
from cardiosim.simulator.ecg_simulator import ClinicalECGGenerator, GeneratedECG

__all__ = [
    "Pathology",
    "PathologyConfig",
    "PATHOLOGY_REGISTRY",
    "WaveModifiers",
    "age_gender_modifiers",
    "parse_pathology",
    "LEAD_GEOMETRY",
    "LEAD_NAMES",
    "create_leads",
    "ArtifactConfig",
    "ARTIFACT_PRESETS",
    "ClinicalECGGenerator",
    "GeneratedECG",
]
