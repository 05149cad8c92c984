"""Composable artifact pipeline for synthetic ECG leads."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

import numpy as np

from cardiosim.ecg_system.exceptions import InvalidConfigurationError


@dataclass(frozen=True)
class ArtifactConfig:
    """Gains of each artifact source.

    Muscle, respiration and powerline terms are additionally scaled by the
    caller's ``noise_level``; impedance and motion terms are not.

    Attributes:
        muscle_gain: uniform high-frequency muscle noise.
        respiration_gain: 0.3 Hz baseline modulation.
        powerline_gain: mains interference amplitude.
        powerline_hz: mains frequency.
        impedance_gain: per-lead noise proportional to ``impedance - 2 kOhm``.
        motion_probability: per-sample probability of a motion spike.
        motion_amplitude: peak-to-peak amplitude of a motion spike (mV).
    """

    muscle_gain: float = 0.3
    respiration_gain: float = 0.1
    powerline_gain: float = 0.05
    powerline_hz: float = 60.0
    impedance_gain: float = 0.02
    motion_probability: float = 0.001
    motion_amplitude: float = 2.0


ARTIFACT_PRESETS: Mapping[str, ArtifactConfig] = MappingProxyType({
    "none": ArtifactConfig(
        muscle_gain=0.0,
        respiration_gain=0.0,
        powerline_gain=0.0,
        impedance_gain=0.0,
        motion_probability=0.0,
    ),
    "default": ArtifactConfig(),
    "no_motion": ArtifactConfig(motion_probability=0.0),
})

RESPIRATION_HZ = 0.3
REFERENCE_IMPEDANCE_KOHM = 2.0


def resolve_artifact_config(preset: str | ArtifactConfig | None) -> ArtifactConfig:
    """Look up a named preset, passing configs through unchanged."""
    if preset is None:
        return ARTIFACT_PRESETS["default"]
    if isinstance(preset, ArtifactConfig):
        return preset
    try:
        return ARTIFACT_PRESETS[preset]
    except KeyError:
        raise InvalidConfigurationError(
            "artifact_preset", preset, f"expected one of {sorted(ARTIFACT_PRESETS)}",
        ) from None


def add_muscle_artifact(
    signal: np.ndarray,
    noise_level: float,
    rng: np.random.Generator,
    config: ArtifactConfig,
) -> np.ndarray:
    """Add uniform high-frequency muscle noise."""
    if config.muscle_gain == 0.0 or noise_level == 0.0:
        return signal
    noise = (rng.random(len(signal)) - 0.5) * noise_level * config.muscle_gain
    return signal + noise


def add_respiratory_modulation(
    signal: np.ndarray,
    time: np.ndarray,
    noise_level: float,
    config: ArtifactConfig,
) -> np.ndarray:
    """Add slow baseline modulation from breathing."""
    if config.respiration_gain == 0.0 or noise_level == 0.0:
        return signal
    wander = np.sin(2 * np.pi * RESPIRATION_HZ * time) * noise_level * config.respiration_gain
    return signal + wander


def add_powerline_interference(
    signal: np.ndarray,
    time: np.ndarray,
    noise_level: float,
    config: ArtifactConfig,
) -> np.ndarray:
    """Add mains interference."""
    if config.powerline_gain == 0.0 or noise_level == 0.0:
        return signal
    hum = np.sin(2 * np.pi * config.powerline_hz * time) * noise_level * config.powerline_gain
    return signal + hum


def add_impedance_noise(
    signal: np.ndarray,
    impedance: float,
    rng: np.random.Generator,
    config: ArtifactConfig,
) -> np.ndarray:
    """Add electrode-contact noise that grows with lead impedance."""
    if config.impedance_gain == 0.0:
        return signal
    scale = (impedance - REFERENCE_IMPEDANCE_KOHM) * config.impedance_gain
    return signal + scale * (rng.random(len(signal)) - 0.5)


def add_motion_artifact(
    signal: np.ndarray,
    rng: np.random.Generator,
    config: ArtifactConfig,
) -> np.ndarray:
    """Add rare single-sample motion spikes."""
    if config.motion_probability == 0.0:
        return signal
    n = len(signal)
    hits = rng.random(n) < config.motion_probability
    spikes = (rng.random(n) - 0.5) * config.motion_amplitude
    return signal + np.where(hits, spikes, 0.0)


def apply_artifact_pipeline(
    signal: np.ndarray,
    time: np.ndarray,
    noise_level: float,
    impedance: float,
    rng: np.random.Generator,
    config: ArtifactConfig,
) -> np.ndarray:
    """Apply every artifact source in order."""
    out = add_muscle_artifact(signal, noise_level, rng, config)
    out = add_respiratory_modulation(out, time, noise_level, config)
    out = add_powerline_interference(out, time, noise_level, config)
    out = add_impedance_noise(out, impedance, rng, config)
    out = add_motion_artifact(out, rng, config)
    return out
