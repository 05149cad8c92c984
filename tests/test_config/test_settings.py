"""Tests for Settings loading from the environment and YAML."""

import yaml

from config.settings import DetectorConfig, Settings


class TestDefaults:
    def test_defaults(self):
        s = Settings()
        assert s.simulator.sample_rate == 1000.0
        assert s.simulator.artifact_preset == "default"
        assert s.detector.rr_capacity == 50
        assert s.detector.min_rr_intervals == 5
        assert s.session.analysis_window_seconds == 2.0
        assert s.log_level == "INFO"

    def test_instances_independent(self):
        a, b = Settings(), Settings()
        a.simulator.seed = 3
        assert b.simulator.seed is None


class TestFromEnv:
    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("CARDIOSIM_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("CARDIOSIM_SAMPLE_RATE", "500")
        monkeypatch.setenv("CARDIOSIM_SEED", "9")
        monkeypatch.setenv("CARDIOSIM_PATIENT_AGE", "70")
        monkeypatch.setenv("CARDIOSIM_PATIENT_GENDER", "female")
        monkeypatch.setenv("CARDIOSIM_ARTIFACT_PRESET", "none")
        s = Settings.from_env()
        assert s.log_level == "DEBUG"
        assert s.simulator.sample_rate == 500.0
        assert s.simulator.seed == 9
        assert s.simulator.patient_age == 70.0
        assert s.simulator.patient_gender == "female"
        assert s.simulator.artifact_preset == "none"

    def test_unset_keeps_defaults(self, monkeypatch):
        for name in ("CARDIOSIM_SAMPLE_RATE", "CARDIOSIM_SEED", "CARDIOSIM_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        s = Settings.from_env()
        assert s.simulator.sample_rate == 1000.0
        assert s.simulator.seed is None
        assert s.log_level == "INFO"


class TestFromYaml:
    def test_sections(self, tmp_path):
        path = tmp_path / "monitor.yaml"
        path.write_text(yaml.safe_dump({
            "simulator": {"seed": 5, "artifact_preset": "no_motion"},
            "detector": {"st_threshold_mv": 0.05},
            "session": {"heart_rate": 110.0, "pathology": "stemi"},
            "log_level": "WARNING",
        }))
        s = Settings.from_yaml(str(path))
        assert s.simulator.seed == 5
        assert s.simulator.artifact_preset == "no_motion"
        assert s.detector.st_threshold_mv == 0.05
        assert s.detector.rr_capacity == DetectorConfig().rr_capacity
        assert s.session.heart_rate == 110.0
        assert s.session.pathology == "stemi"
        assert s.log_level == "WARNING"

    def test_missing_file_gives_defaults(self, tmp_path):
        s = Settings.from_yaml(str(tmp_path / "absent.yaml"))
        assert s == Settings()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert Settings.from_yaml(str(path)) == Settings()
