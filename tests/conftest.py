"""Shared pytest fixtures for cardiosim tests."""

from __future__ import annotations

import numpy as np
import pytest

from config.settings import Settings

FS = 1000.0


def make_r_peak_train(
    heart_rate: float = 72.0,
    duration: float = 6.0,
    fs: float = FS,
    start: float = 0.2,
    amplitude: float = 1.0,
    sigma_s: float = 0.008,
) -> np.ndarray:
    """Narrow Gaussian R peaks on a flat baseline (normal QRS morphology)."""
    n = int(round(duration * fs))
    t = np.arange(n) / fs
    signal = np.zeros(n)
    rr = 60.0 / heart_rate
    for k in range(int((duration - start) / rr) + 1):
        centre = round((start + k * rr) * fs) / fs
        if centre >= duration:
            break
        signal += amplitude * np.exp(-((t - centre) ** 2) / (2 * sigma_s ** 2))
    return signal


def make_wide_qrs_train(
    heart_rate: float = 200.0,
    duration: float = 3.0,
    fs: float = FS,
    start: float = 0.1,
    amplitude: float = 1.5,
    width_s: float = 0.150,
) -> np.ndarray:
    """Monophasic half-sine complexes of fixed width (wide QRS morphology)."""
    n = int(round(duration * fs))
    signal = np.zeros(n)
    width = int(round(width_s * fs))
    step = int(round(60.0 / heart_rate * fs))
    lobe = amplitude * np.sin(np.pi * np.arange(width) / width)
    for onset in range(int(round(start * fs)), n - width, step):
        signal[onset:onset + width] = lobe
    return signal


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def fs():
    return FS


@pytest.fixture
def normal_lead_ii():
    """Six seconds of clean 72 bpm Lead II with narrow QRS complexes."""
    return make_r_peak_train(heart_rate=72.0, duration=6.0)


@pytest.fixture
def wide_qrs_lead_ii():
    """Three seconds of a regular 150 ms QRS train at 200 bpm."""
    return make_wide_qrs_train()


@pytest.fixture
def clean_settings():
    """Settings with artifacts and noise disabled and a fixed seed."""
    settings = Settings()
    settings.simulator.seed = 7
    settings.simulator.artifact_preset = "none"
    settings.session.noise_level = 0.0
    return settings
