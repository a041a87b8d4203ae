"""
Tests for carbonate equilibrium constants.

Validates:
1. Freshwater constants against the published headspace tool values
2. Estuarine/marine pK1, pK2 at S = 35, 25 °C against literature
3. Salinity / constant-set consistency checks
4. Selector resolution (enum, name, spreadsheet code)
"""

import math
import pytest
import sys
from pathlib import Path

# Add parent directory to path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

from utils.equilibrium_constants import (
    ConstantSet,
    EquilibriumConstants,
    _estuarine_k1_k2,
    _freshwater_k1_k2,
    co2_solubility,
    compute_constants,
    resolve_constant_set,
    water_dissociation_constant,
)
from utils.exceptions import ConfigurationError


class TestFreshwaterConstants:
    """Temperature-only constants used by the freshwater headspace tool."""

    def test_reference_values_25c(self):
        c = compute_constants(temp_equil_c=25.0, temp_insitu_c=20.0)

        assert isinstance(c, EquilibriumConstants)
        assert c.kw == pytest.approx(1.0764652136e-14, rel=1e-8)
        assert c.k1 == pytest.approx(4.4555446961e-07, rel=1e-8)
        assert c.k2 == pytest.approx(4.6810980739e-11, rel=1e-8)
        assert c.kh == pytest.approx(3.4061037478e-02, rel=1e-8)
        assert c.kh2 == pytest.approx(3.9162228400e-02, rel=1e-8)

    def test_solubility_decreases_with_temperature(self):
        """CO2 is less soluble in warmer water."""
        values = [co2_solubility(t) for t in (0.0, 10.0, 20.0, 30.0)]
        assert all(a > b for a, b in zip(values, values[1:]))

    def test_kh_and_kh2_use_their_own_temperatures(self):
        c = compute_constants(temp_equil_c=25.0, temp_insitu_c=5.0)
        assert c.kh == pytest.approx(co2_solubility(25.0))
        assert c.kh2 == pytest.approx(co2_solubility(5.0))
        assert c.kh2 > c.kh

    def test_same_temperatures_give_equal_solubilities(self):
        c = compute_constants(temp_equil_c=18.0, temp_insitu_c=18.0)
        assert c.kh == c.kh2

    def test_pkw_near_14(self):
        assert -math.log10(water_dissociation_constant(25.0)) == pytest.approx(13.968, abs=1e-3)


class TestSalineConstants:
    """Estuarine (Millero 2010) and marine (Dickson & Millero 1987) sets."""

    def test_estuarine_seawater_salinity(self):
        c = compute_constants(25.0, 25.0, ConstantSet.ESTUARINE, 35.0)
        assert -math.log10(c.k1) == pytest.approx(5.8413, abs=1e-3)
        assert -math.log10(c.k2) == pytest.approx(8.9609, abs=1e-3)

    def test_marine_seawater_salinity(self):
        c = compute_constants(25.0, 25.0, ConstantSet.MARINE, 35.0)
        assert -math.log10(c.k1) == pytest.approx(5.8372, abs=1e-3)
        assert -math.log10(c.k2) == pytest.approx(8.9554, abs=1e-3)

    def test_salinity_raises_k1(self):
        low = compute_constants(25.0, 25.0, ConstantSet.ESTUARINE, 5.0)
        high = compute_constants(25.0, 25.0, ConstantSet.ESTUARINE, 30.0)
        assert high.k1 > low.k1
        assert high.k2 > low.k2

    def test_estuarine_zero_salinity_differs_from_freshwater(self):
        """The two zero-salinity curves come from different calibrations."""
        temp_k = 298.15
        k1_est, k2_est = _estuarine_k1_k2(temp_k, 0.0)
        k1_fw, k2_fw = _freshwater_k1_k2(temp_k, 0.0)

        assert k1_est != k1_fw
        assert abs(k1_est - k1_fw) / k1_fw > 1e-4
        # Both describe pure water, so they stay close
        assert abs(math.log10(k1_est) - math.log10(k1_fw)) < 0.01
        assert abs(math.log10(k2_est) - math.log10(k2_fw)) < 0.01

    def test_solubility_ignores_constant_set(self):
        fw = compute_constants(20.0, 10.0)
        marine = compute_constants(20.0, 10.0, ConstantSet.MARINE, 35.0)
        assert fw.kh == marine.kh
        assert fw.kh2 == marine.kh2
        assert fw.kw == marine.kw


class TestConfigurationErrors:
    """Invalid selectors and inconsistent salinity."""

    @pytest.mark.parametrize("selector", [0, 4, "brackish", "", 2.5, None, True])
    def test_unknown_selector(self, selector):
        with pytest.raises(ConfigurationError):
            compute_constants(25.0, 20.0, selector)

    def test_freshwater_with_salinity(self):
        with pytest.raises(ConfigurationError, match="salinity = 0"):
            compute_constants(25.0, 20.0, ConstantSet.FRESHWATER, 5.0)

    @pytest.mark.parametrize("constant_set", [ConstantSet.ESTUARINE, ConstantSet.MARINE])
    def test_saline_sets_need_salinity(self, constant_set):
        with pytest.raises(ConfigurationError, match="salinity > 0"):
            compute_constants(25.0, 20.0, constant_set, 0.0)

    def test_negative_salinity(self):
        with pytest.raises(ConfigurationError):
            compute_constants(25.0, 20.0, ConstantSet.MARINE, -1.0)

    @pytest.mark.parametrize("temps", [(-273.15, 20.0), (25.0, -300.0)])
    def test_below_absolute_zero(self, temps):
        with pytest.raises(ConfigurationError, match="absolute zero"):
            compute_constants(*temps)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            compute_constants(25.0, 20.0, "unknown")


class TestSelectorResolution:

    @pytest.mark.parametrize("selector,expected", [
        (ConstantSet.MARINE, ConstantSet.MARINE),
        ("freshwater", ConstantSet.FRESHWATER),
        ("Estuarine", ConstantSet.ESTUARINE),
        (" MARINE ", ConstantSet.MARINE),
        (1, ConstantSet.FRESHWATER),
        (2.0, ConstantSet.ESTUARINE),
        ("3", ConstantSet.MARINE),
    ])
    def test_resolve(self, selector, expected):
        assert resolve_constant_set(selector) is expected


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
