"""12-lead geometry and per-lead projection of the canonical waveform."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

import numpy as np

from cardiosim.ecg_system.schemas import Lead
from cardiosim.simulator.pathology import (
    PATHOLOGY_REGISTRY,
    AxisState,
    Pathology,
    parse_pathology,
)


@dataclass(frozen=True)
class LeadGeometry:
    """Static description of one electrode configuration."""

    name: str
    vector: tuple[float, float, float]
    placement: str
    impedance: float  # kOhm
    quality: str


LEAD_GEOMETRY: tuple[LeadGeometry, ...] = (
    LeadGeometry("I", (1.0, 0.0, 0.0), "Limb Lead (LA-RA)", 2.1, "excellent"),
    LeadGeometry("II", (0.5, 0.866, 0.0), "Limb Lead (LL-RA)", 1.8, "excellent"),
    LeadGeometry("III", (-0.5, 0.866, 0.0), "Limb Lead (LL-LA)", 2.3, "good"),
    LeadGeometry("aVR", (-0.866, -0.5, 0.0), "Augmented (RA)", 1.9, "excellent"),
    LeadGeometry("aVL", (0.866, -0.5, 0.0), "Augmented (LA)", 2.0, "good"),
    LeadGeometry("aVF", (0.0, 1.0, 0.0), "Augmented (LL)", 1.7, "excellent"),
    LeadGeometry("V1", (0.0, 0.0, -0.9), "4th ICS, R sternal border", 2.2, "good"),
    LeadGeometry("V2", (0.0, 0.0, -0.7), "4th ICS, L sternal border", 1.6, "excellent"),
    LeadGeometry("V3", (0.0, 0.0, -0.3), "Between V2 and V4", 1.9, "excellent"),
    LeadGeometry("V4", (0.0, 0.0, 0.3), "5th ICS, midclavicular", 2.1, "good"),
    LeadGeometry("V5", (0.0, 0.0, 0.7), "5th ICS, anterior axillary", 2.4, "fair"),
    LeadGeometry("V6", (0.0, 0.0, 0.9), "5th ICS, midaxillary", 2.0, "good"),
)

LEAD_NAMES: tuple[str, ...] = tuple(g.name for g in LEAD_GEOMETRY)
LIMB_LEADS: tuple[str, ...] = LEAD_NAMES[:6]
PRECORDIAL_LEADS: tuple[str, ...] = LEAD_NAMES[6:]

GEOMETRY_BY_NAME: Mapping[str, LeadGeometry] = MappingProxyType(
    {g.name: g for g in LEAD_GEOMETRY}
)

# Projection weights (x, y, z) of the cardiac vector for each axis state
AXIS_WEIGHTS: Mapping[AxisState, tuple[float, float, float]] = MappingProxyType({
    AxisState.NORMAL: (0.7, 0.7, 0.5),
    AxisState.LEFT: (0.8, 0.6, 0.5),
    AxisState.RIGHT: (0.6, 0.8, 0.5),
})


def projection_multiplier(lead_name: str, pathology: Pathology | str) -> float:
    """Gain applied to the canonical waveform for *lead_name*.

    The cardiac vector is projected onto the lead vector using the axis
    weights of the pathology; regional infarcts then attenuate their leads.
    Left and right axis deviation keep the 0.5 z weight of the normal axis,
    so precordial leads stay visible rather than dropping to zero gain.
    """
    cfg = PATHOLOGY_REGISTRY[parse_pathology(pathology)]
    geometry = GEOMETRY_BY_NAME[lead_name]
    weights = AXIS_WEIGHTS[cfg.axis]
    multiplier = abs(float(np.dot(weights, geometry.vector)))
    if lead_name in cfg.damped_leads:
        multiplier *= cfg.damping
    return multiplier


def project(signal: np.ndarray, lead_name: str, pathology: Pathology | str) -> np.ndarray:
    """Project a canonical waveform onto one lead."""
    return np.asarray(signal, dtype=np.float64) * projection_multiplier(lead_name, pathology)


def create_leads() -> list[Lead]:
    """Fresh, empty buffers for all 12 leads in standard order."""
    return [
        Lead(
            name=g.name,
            vector=g.vector,
            placement=g.placement,
            impedance=g.impedance,
            quality=g.quality,
        )
        for g in LEAD_GEOMETRY
    ]
