"""Configuration management for the ECG simulation and monitoring core."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


@dataclass
class SimulatorConfig:
    """Configuration for the 12-lead waveform generator."""

    sample_rate: float = 1000.0
    patient_age: float = 45.0
    patient_gender: str = "male"
    seed: Optional[int] = None
    artifact_preset: str = "default"
    """Artifact preset name: 'none', 'default' or 'no_motion'."""


@dataclass
class DetectorConfig:
    """Thresholds and history capacities for beat detection and classification."""

    # QRS candidate search
    rms_threshold_fraction: float = 0.6
    dominant_peak_fraction: float = 0.4
    slope_offset_samples: int = 5
    edge_margin_samples: int = 10
    refractory_s: float = 0.25

    # QRS local segment
    qrs_window_s: float = 0.08
    width_threshold_fraction: float = 0.1
    sub_peak_threshold_fraction: float = 0.3
    wide_qrs_ms: float = 120.0

    # P-wave windows
    p_wave_step_s: float = 0.8
    p_wave_window_s: float = 0.2
    p_wave_tail_s: float = 0.4
    p_wave_min_mv: float = 0.1
    p_wave_max_mv: float = 0.5

    # Rolling histories
    rr_min_ms: float = 300.0
    rr_max_ms: float = 2000.0
    rr_capacity: int = 50
    qrs_history_capacity: int = 100
    p_wave_history_capacity: int = 50

    # Minimum data before a detection is produced
    min_qrs_complexes: int = 2
    min_rr_intervals: int = 5

    # Analyzer thresholds
    regular_rr_cv: float = 0.1
    atrial_activity_consistency: float = 0.8
    st_threshold_mv: float = 0.1
    st_min_leads: int = 2
    """A flag is raised when *more than* this many leads cross the threshold."""


@dataclass
class SessionConfig:
    """Configuration for the tick-driven monitoring session."""

    tick_seconds: float = 0.1
    retention_samples: int = 5000
    analysis_window_seconds: float = 2.0
    heart_rate: float = 72.0
    amplitude: float = 1.0
    noise_level: float = 0.1
    pathology: str = "normal"


@dataclass
class Settings:
    """Top-level application settings."""

    simulator: SimulatorConfig = field(default_factory=SimulatorConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        settings = cls(log_level=os.getenv("CARDIOSIM_LOG_LEVEL", "INFO"))
        if "CARDIOSIM_SAMPLE_RATE" in os.environ:
            settings.simulator.sample_rate = float(os.environ["CARDIOSIM_SAMPLE_RATE"])
        if "CARDIOSIM_SEED" in os.environ:
            settings.simulator.seed = int(os.environ["CARDIOSIM_SEED"])
        if "CARDIOSIM_PATIENT_AGE" in os.environ:
            settings.simulator.patient_age = float(os.environ["CARDIOSIM_PATIENT_AGE"])
        if "CARDIOSIM_PATIENT_GENDER" in os.environ:
            settings.simulator.patient_gender = os.environ["CARDIOSIM_PATIENT_GENDER"]
        if "CARDIOSIM_ARTIFACT_PRESET" in os.environ:
            settings.simulator.artifact_preset = os.environ["CARDIOSIM_ARTIFACT_PRESET"]
        return settings

    @classmethod
    def from_yaml(cls, path: str) -> Settings:
        """Load settings from YAML config file."""
        config_path = Path(path)
        if not config_path.exists():
            return cls()
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        settings = cls()
        if "simulator" in data:
            settings.simulator = SimulatorConfig(**data["simulator"])
        if "detector" in data:
            settings.detector = DetectorConfig(**data["detector"])
        if "session" in data:
            settings.session = SessionConfig(**data["session"])
        if "log_level" in data:
            settings.log_level = data["log_level"]
        return settings
