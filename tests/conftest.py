"""Shared fixtures for headspace tests."""

import sys
from pathlib import Path

import pytest

# Add parent directory to path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))


@pytest.fixture
def reference_sample():
    """Worked example of the published headspace tool (freshwater, N2 headspace)."""
    return {
        "sample_id": "reference",
        "pco2_before_ppmv": 0.0,
        "pco2_after_ppmv": 80.0,
        "temp_insitu_c": 20.0,
        "temp_equil_c": 25.0,
        "alkalinity_ueq_l": 1050.0,
        "volume_gas_ml": 30.0,
        "volume_water_ml": 30.0,
    }


@pytest.fixture
def mixed_samples(reference_sample):
    """Samples across all three constant sets."""
    return [
        reference_sample,
        {
            "sample_id": "air-headspace",
            "pco2_before_ppmv": 1000.0,
            "pco2_after_ppmv": 800.0,
            "temp_insitu_c": 20.0,
            "temp_equil_c": 20.0,
            "alkalinity_ueq_l": 2000.0,
            "volume_gas_ml": 30.0,
            "volume_water_ml": 30.0,
        },
        {
            "sample_id": "estuary",
            "pco2_before_ppmv": 0.0,
            "pco2_after_ppmv": 900.0,
            "temp_insitu_c": 12.0,
            "temp_equil_c": 18.0,
            "alkalinity_ueq_l": 1800.0,
            "volume_gas_ml": 20.0,
            "volume_water_ml": 40.0,
            "constants": "estuarine",
            "salinity_psu": 12.0,
        },
        {
            "sample_id": "coastal",
            "pco2_before_ppmv": 420.0,
            "pco2_after_ppmv": 450.0,
            "temp_insitu_c": 15.0,
            "temp_equil_c": 22.0,
            "alkalinity_ueq_l": 2300.0,
            "volume_gas_ml": 60.0,
            "volume_water_ml": 1000.0,
            "bar_pressure_kpa": 99.0,
            "constants": 3,
            "salinity_psu": 35.0,
        },
    ]
