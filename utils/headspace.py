"""
Headspace Method - Complete and Simple pCO2 Back-Calculation

A water sample is equilibrated with a gas headspace in a closed vessel and
the headspace pCO2 is measured afterwards. Two estimates of the pCO2 of the
original sample are computed:

Complete method (carbonate buffer accounted for):
1. CO2* at equilibrium from the measured headspace pCO2 (Henry's law),
   cubic charge balance -> [H+] -> DIC at equilibrium
2. DIC of the original sample = DIC at equilibrium + CO2 moved into the
   headspace (ideal gas, scaled by the headspace ratio)
3. Quartic charge balance with the original DIC and the same alkalinity
   -> [H+] -> CO2* -> pCO2 at in-situ temperature

Simple method (buffer ignored): all CO2 is CO2*, mass conserved between
phases; gives a biased estimate used only for the % error.

Both estimates are computed on a 1 atm basis (ppmv); true partial pressures
and concentrations are linear scalings by barometric pressure.

Reference:
- Koschorreck, M., Prairie, Y.T., Kim, J., and Marcé, R. (2021).
  Biogeosciences 18, 1619-1627
"""

import logging
from dataclasses import dataclass
from typing import Optional

from utils.equilibrium_constants import EquilibriumConstants
from utils.exceptions import ConfigurationError
from utils.headspace_defaults import (
    DEFAULT_IMAG_TOL,
    GAS_CONSTANT_L_ATM,
    KELVIN_OFFSET,
    PPMV_PER_UNIT,
    STANDARD_PRESSURE_KPA,
)
from utils.speciation import solve_speciation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompleteHeadspace:
    """Complete-method result (1 atm basis)."""
    pco2_ppmv: float
    ph: float
    co2_mol_l: float
    dic_equilibration_mol_l: float
    dic_original_mol_l: float
    ph_equilibration: float


@dataclass(frozen=True)
class SimpleHeadspace:
    """Simple-method result (1 atm basis)."""
    pco2_ppmv: float
    co2_mol_l: float


def _check_vessel(volume_gas_ml: float, volume_water_ml: float, temp_equil_c: float) -> None:
    if not volume_gas_ml > 0.0:
        raise ConfigurationError(f"Gas volume must be > 0 mL, got {volume_gas_ml}")
    if not volume_water_ml > 0.0:
        raise ConfigurationError(f"Water volume must be > 0 mL, got {volume_water_ml}")
    if not temp_equil_c + KELVIN_OFFSET > 0.0:
        raise ConfigurationError(
            f"Equilibration temperature must be above absolute zero, got {temp_equil_c} °C"
        )


def headspace_co2_transfer(
    pco2_before_ppmv: float,
    pco2_after_ppmv: float,
    temp_equil_c: float,
    headspace_ratio: float
) -> float:
    """
    CO2 moved from water into the headspace per litre of water, mol/L.

    Ideal gas: n/V_gas = Δp / (R·T); multiplied by V_gas/V_water.
    Negative when the headspace lost CO2 to the water.
    """
    temp_k = temp_equil_c + KELVIN_OFFSET
    delta_atm = (pco2_after_ppmv - pco2_before_ppmv) / PPMV_PER_UNIT
    return delta_atm / (GAS_CONSTANT_L_ATM * temp_k) * headspace_ratio


def complete_headspace(
    pco2_before_ppmv: float,
    pco2_after_ppmv: float,
    temp_equil_c: float,
    alkalinity_ueq_l: float,
    volume_gas_ml: float,
    volume_water_ml: float,
    constants: EquilibriumConstants,
    imag_tol: float = DEFAULT_IMAG_TOL
) -> CompleteHeadspace:
    """
    pCO2 and pH of the original sample, accounting for carbonate buffering.

    Args:
        pco2_before_ppmv: Headspace pCO2 before equilibration, ppmv
        pco2_after_ppmv: Headspace pCO2 after equilibration, ppmv
        temp_equil_c: Equilibration temperature, °C
        alkalinity_ueq_l: Total alkalinity, µeq/L
        volume_gas_ml: Headspace gas volume, mL
        volume_water_ml: Water volume in the vessel, mL
        constants: Constants from compute_constants() for this sample
        imag_tol: Relative tolerance on root imaginary parts

    Returns:
        CompleteHeadspace (pCO2 in ppmv at in-situ temperature)

    Raises:
        ConfigurationError: Non-physical vessel volumes or temperature
        NumericalError: Either charge balance has no unique positive root
    """
    _check_vessel(volume_gas_ml, volume_water_ml, temp_equil_c)

    alkalinity = alkalinity_ueq_l * 1e-6  # mol/L
    headspace_ratio = volume_gas_ml / volume_water_ml

    # Stage 1: equilibrated vessel
    co2_star_eq = constants.kh * pco2_after_ppmv / PPMV_PER_UNIT
    equilibrated = solve_speciation(co2_star_eq, alkalinity, constants, degree=3, imag_tol=imag_tol)

    # Stage 2: mass balance back to the original sample
    transfer = headspace_co2_transfer(pco2_before_ppmv, pco2_after_ppmv, temp_equil_c, headspace_ratio)
    dic_original = equilibrated.dic + transfer

    logger.debug(
        f"DIC at equilibrium {equilibrated.dic * 1e6:.3f} µmol/L, "
        f"headspace transfer {transfer * 1e6:+.3f} µmol/L -> original {dic_original * 1e6:.3f} µmol/L"
    )

    if dic_original < 0.0:
        raise ConfigurationError(
            f"Original DIC is negative ({dic_original:.3e} mol/L): the headspace lost more "
            "CO2 than the water can hold. Check the before/after pCO2 values."
        )

    # Stage 3: original sample
    original = solve_speciation(dic_original, alkalinity, constants, degree=4, imag_tol=imag_tol)

    return CompleteHeadspace(
        pco2_ppmv=original.co2_star / constants.kh2 * PPMV_PER_UNIT,
        ph=original.ph,
        co2_mol_l=original.co2_star,
        dic_equilibration_mol_l=equilibrated.dic,
        dic_original_mol_l=dic_original,
        ph_equilibration=equilibrated.ph,
    )


def simple_headspace(
    pco2_before_ppmv: float,
    pco2_after_ppmv: float,
    temp_equil_c: float,
    volume_gas_ml: float,
    volume_water_ml: float,
    constants: EquilibriumConstants
) -> SimpleHeadspace:
    """
    pCO2 of the original sample ignoring the carbonate equilibrium.

    Mass in the original sample = mass in solution after equilibration
    + mass in the final headspace - mass in the initial headspace.
    Can be negative when the initial headspace held more CO2 than the
    water and final headspace together.
    """
    _check_vessel(volume_gas_ml, volume_water_ml, temp_equil_c)

    rt = GAS_CONSTANT_L_ATM * (temp_equil_c + KELVIN_OFFSET)
    volume_gas_l = volume_gas_ml / 1000.0
    volume_water_l = volume_water_ml / 1000.0

    solution_mol = pco2_after_ppmv / PPMV_PER_UNIT * constants.kh * volume_water_l
    final_headspace_mol = pco2_after_ppmv / PPMV_PER_UNIT * volume_gas_l / rt
    initial_headspace_mol = pco2_before_ppmv / PPMV_PER_UNIT * volume_gas_l / rt

    sample_mol = solution_mol + final_headspace_mol - initial_headspace_mol
    co2_mol_l = sample_mol / volume_water_l

    return SimpleHeadspace(
        pco2_ppmv=co2_mol_l / constants.kh2 * PPMV_PER_UNIT,
        co2_mol_l=co2_mol_l,
    )


def percent_error(simple: float, complete: float) -> Optional[float]:
    """(simple - complete) / complete × 100; None when complete is zero."""
    if complete == 0.0:
        return None
    return (simple - complete) / complete * 100.0


def pressure_atm(bar_pressure_kpa: float) -> float:
    """Barometric pressure in atm."""
    return bar_pressure_kpa / STANDARD_PRESSURE_KPA
