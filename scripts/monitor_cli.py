#!/usr/bin/env python3
"""CLI for the simulated 12-lead monitor: run a session and print detections.

Usage examples:
    python scripts/monitor_cli.py --seconds 10 --seed 42
    python scripts/monitor_cli.py --pathology stemi --heart-rate 85 --report
    python scripts/monitor_cli.py --config config/monitor.yaml --json
    python scripts/monitor_cli.py --pathology atrial_fibrillation --plot af_strip.png
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

import matplotlib.pyplot as plt
import numpy as np

# Ensure project root on sys.path
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from config.settings import Settings
from cardiosim.interpretation.assembly import assemble, render_report
from cardiosim.ecg_system.schemas import Lead
from cardiosim.session import MonitoringSession
from cardiosim.simulator.noise import ARTIFACT_PRESETS
from cardiosim.simulator.pathology import Pathology


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run a simulated ECG monitoring session.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=str, default=None, help="YAML settings file.")
    parser.add_argument(
        "--seconds", type=float, default=10.0,
        help="Simulated monitoring time in seconds (default 10).",
    )
    parser.add_argument("--heart-rate", type=float, default=None, help="Heart rate (bpm).")
    parser.add_argument("--amplitude", type=float, default=None, help="Amplitude scale (mV).")
    parser.add_argument("--noise-level", type=float, default=None, help="Noise level in [0, 1].")
    parser.add_argument(
        "--pathology", type=str, default=None,
        choices=[p.value for p in Pathology],
        help="Pathology to simulate (default normal).",
    )
    parser.add_argument(
        "--artifacts", type=str, default=None,
        choices=sorted(ARTIFACT_PRESETS),
        help="Artifact preset (default 'default').",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed.")
    parser.add_argument("--json", action="store_true", help="Print each detection tick as JSON.")
    parser.add_argument("--report", action="store_true", help="Print a text report at the end.")
    parser.add_argument(
        "--plot", type=str, default=None, metavar="PNG",
        help="Save the final display buffers of all 12 leads to a PNG file.",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Environment/YAML settings overridden by explicit CLI flags."""
    settings = Settings.from_yaml(args.config) if args.config else Settings.from_env()
    session = settings.session
    if args.heart_rate is not None:
        session.heart_rate = args.heart_rate
    if args.amplitude is not None:
        session.amplitude = args.amplitude
    if args.noise_level is not None:
        session.noise_level = args.noise_level
    if args.pathology is not None:
        session.pathology = args.pathology
    if args.artifacts is not None:
        settings.simulator.artifact_preset = args.artifacts
    if args.seed is not None:
        settings.simulator.seed = args.seed
    return settings


def plot_leads(leads: list[Lead], fs: float, title: str, output_path: str) -> None:
    """Plot the 12 leads as vertically stacked subplots sharing the x-axis."""
    fig, axes = plt.subplots(
        len(leads), 1,
        figsize=(14, 1.2 * len(leads) + 1),
        sharex=True,
        squeeze=False,
    )
    for idx, lead in enumerate(leads):
        t = np.arange(len(lead)) / fs
        ax = axes[idx, 0]
        ax.plot(t, lead.data, linewidth=0.8, color="#1a1a2e")
        ax.set_ylabel(lead.name, fontsize=9, fontweight="bold")
        ax.grid(True, alpha=0.3, linestyle="--", linewidth=0.5)
        ax.set_facecolor("#f8f9fa")

    axes[-1, 0].set_xlabel("Time (seconds)", fontsize=11)
    fig.suptitle(title, fontsize=13, fontweight="bold", y=1.0)
    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight", facecolor="white")
    print(f"Saved: {output_path}")
    plt.close(fig)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    settings = load_settings(args)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    session = MonitoringSession(settings)
    n_ticks = int(round(args.seconds / settings.session.tick_seconds))
    last = None
    result = None
    for i in range(n_ticks):
        result = session.tick()
        if result.detection is None:
            continue
        last = result
        if args.json:
            print(json.dumps(assemble(result)))
        else:
            flag = " [ALARM]" if result.alarm else ""
            print(
                f"  t={(i + 1) * settings.session.tick_seconds:6.1f}s  "
                f"{result.detection.type:<26} {result.detection.severity:<16} "
                f"conf={result.detection.confidence:.2f}{flag}"
            )

    if args.plot and result is not None:
        title = f"{settings.session.pathology} at {settings.session.heart_rate:.0f} bpm"
        plot_leads(result.leads, session.sample_rate, title, args.plot)

    if last is None:
        print("No detection: not enough signal for analysis.")
        return

    if args.report and last.interpretation is not None:
        print()
        print(render_report(last.interpretation, last.measurements))


if __name__ == "__main__":
    main()
