"""Tests for lead geometry and projection."""

import numpy as np
import pytest

from cardiosim.simulator.leads import (
    AXIS_WEIGHTS,
    GEOMETRY_BY_NAME,
    LEAD_GEOMETRY,
    LEAD_NAMES,
    PRECORDIAL_LEADS,
    create_leads,
    project,
    projection_multiplier,
)
from cardiosim.simulator.pathology import AxisState, Pathology

STANDARD_ORDER = ["I", "II", "III", "aVR", "aVL", "aVF", "V1", "V2", "V3", "V4", "V5", "V6"]


class TestLeadGeometry:
    def test_standard_order(self):
        assert list(LEAD_NAMES) == STANDARD_ORDER

    def test_precordial_leads(self):
        assert PRECORDIAL_LEADS == ("V1", "V2", "V3", "V4", "V5", "V6")

    def test_precordial_vectors_are_horizontal(self):
        for name in PRECORDIAL_LEADS:
            x, y, _ = GEOMETRY_BY_NAME[name].vector
            assert x == 0.0 and y == 0.0

    def test_impedances_and_quality(self):
        assert GEOMETRY_BY_NAME["II"].impedance == pytest.approx(1.8)
        assert GEOMETRY_BY_NAME["V5"].quality == "fair"
        assert GEOMETRY_BY_NAME["V1"].placement == "4th ICS, R sternal border"

    def test_axis_weights_read_only(self):
        with pytest.raises(TypeError):
            AXIS_WEIGHTS[AxisState.NORMAL] = (1.0, 1.0, 1.0)


class TestProjectionMultiplier:
    def test_lead_ii_normal_axis(self):
        assert projection_multiplier("II", Pathology.NORMAL) == pytest.approx(0.7 * 0.5 + 0.7 * 0.866)

    def test_lead_i_axis_states(self):
        assert projection_multiplier("I", "normal") == pytest.approx(0.7)
        assert projection_multiplier("I", "left_axis_deviation") == pytest.approx(0.8)
        assert projection_multiplier("I", "right_axis_deviation") == pytest.approx(0.6)

    def test_precordial_uses_z_weight(self):
        assert projection_multiplier("V1", "normal") == pytest.approx(0.45)
        assert projection_multiplier("V6", "left_axis_deviation") == pytest.approx(0.45)

    @pytest.mark.parametrize("pathology", ["left_axis_deviation", "right_axis_deviation"])
    def test_deviated_axes_keep_precordial_gain(self, pathology):
        for name in PRECORDIAL_LEADS:
            assert projection_multiplier(name, pathology) == pytest.approx(
                projection_multiplier(name, "normal")
            )
            assert projection_multiplier(name, pathology) > 0.0

    def test_multiplier_is_non_negative(self):
        for name in LEAD_NAMES:
            for pathology in Pathology:
                assert projection_multiplier(name, pathology) >= 0.0

    def test_avr_is_rectified(self):
        # -0.866 * 0.7 - 0.5 * 0.7 is negative before rectification
        assert projection_multiplier("aVR", "normal") == pytest.approx(0.7 * 1.366)

    def test_anterior_mi_damps_anterior_leads(self):
        assert projection_multiplier("V2", "anterior_mi") == pytest.approx(0.35 * 0.6)
        assert projection_multiplier("V5", "anterior_mi") == pytest.approx(0.35)

    def test_inferior_mi_damps_inferior_leads(self):
        normal = projection_multiplier("aVF", "normal")
        assert projection_multiplier("aVF", "inferior_mi") == pytest.approx(normal * 0.5)
        assert projection_multiplier("I", "inferior_mi") == pytest.approx(0.7)

    def test_lateral_mi_damps_lateral_leads(self):
        assert projection_multiplier("I", "lateral_mi") == pytest.approx(0.7 * 0.7)


class TestProject:
    def test_scales_signal(self):
        sig = np.linspace(-1.0, 1.0, 11)
        np.testing.assert_allclose(project(sig, "V1", "normal"), sig * 0.45)


class TestCreateLeads:
    def test_twelve_empty_leads(self):
        leads = create_leads()
        assert [lead.name for lead in leads] == STANDARD_ORDER
        assert all(len(lead) == 0 for lead in leads)
        assert all(lead.enabled for lead in leads)

    def test_leads_are_independent(self):
        a, b = create_leads(), create_leads()
        a[0].append(np.ones(5))
        assert len(b[0]) == 0

    def test_geometry_copied(self):
        for lead, geometry in zip(create_leads(), LEAD_GEOMETRY):
            assert lead.vector == geometry.vector
            assert lead.impedance == geometry.impedance
