"""
Default values for headspace pCO2 calculations.

Physical constants, solver tolerances and the column names of the
headspace sample tables exchanged with field/lab spreadsheets.

References:
- Koschorreck, M., Prairie, Y.T., Kim, J., and Marcé, R. (2021).
  "Technical note: CO2 is not like CH4 - limits of and corrections to the
  headspace method to analyse pCO2 in fresh water." Biogeosciences 18, 1619-1627.
"""

from typing import Dict, List

# Ideal gas constant, L·atm/(K·mol)
GAS_CONSTANT_L_ATM = 0.082057338

# 0 °C in Kelvin
KELVIN_OFFSET = 273.15

# Standard atmosphere, kPa
STANDARD_PRESSURE_KPA = 101.325

# ppmv <-> mole fraction
PPMV_PER_UNIT = 1.0e6

# Relative tolerance on the imaginary part of a polynomial root, |Im z| <= tol * |z|.
# Real eigenvalues of the companion matrix come back with Im z == 0 exactly;
# conjugate pairs of the charge-balance polynomials are far above this.
DEFAULT_IMAG_TOL = 1.0e-8

# Worker threads for batch solving (None lets ThreadPoolExecutor decide)
DEFAULT_MAX_WORKERS = None

# Sanity thresholds (warnings only)
MAX_TYPICAL_PCO2_PPMV = 100000.0

# ---------------------------------------------------------------------------
# Sample table columns
# ---------------------------------------------------------------------------

# Input column -> HeadspaceSampleInput field
INPUT_COLUMNS: Dict[str, str] = {
    "Sample.ID": "sample_id",
    "HS.pCO2.before": "pco2_before_ppmv",
    "HS.pCO2.after": "pco2_after_ppmv",
    "Temp.insitu": "temp_insitu_c",
    "Temp.equil": "temp_equil_c",
    "Alkalinity.measured": "alkalinity_ueq_l",
    "Volume.gas": "volume_gas_ml",
    "Volume.water": "volume_water_ml",
    "Bar.pressure": "bar_pressure_kpa",
    "Constants": "constants",
    "Salinity": "salinity_psu",
}

# Some instruments report the headspace before equilibration as a mixing ratio
INPUT_COLUMN_ALIASES: Dict[str, str] = {
    "HS.mCO2.before": "HS.pCO2.before",
}

# Columns the original freshwater tables did not carry
OPTIONAL_INPUT_COLUMNS: List[str] = ["Bar.pressure", "Constants", "Salinity"]

# HeadspaceResult field -> output column
OUTPUT_COLUMNS: Dict[str, str] = {
    "sample_id": "Sample.ID",
    "pco2_complete_ppmv": "pCO2 complete headspace (ppmv)",
    "pco2_complete_uatm": "pCO2 complete headspace (micro-atm)",
    "co2_complete_umol_l": "CO2 complete headspace (micro-mol/L)",
    "ph_complete": "pH",
    "pco2_simple_ppmv": "pCO2 simple headspace (ppmv)",
    "pco2_simple_uatm": "pCO2 simple headspace (micro-atm)",
    "co2_simple_umol_l": "CO2 simple headspace (micro-mol/L)",
    "percent_error": "% error",
}
