"""
Carbonate System Equilibrium Constants

Temperature- and salinity-dependent constants for the CO2 / HCO3⁻ / CO3²⁻
system used by the headspace calculation:

- Kw:  dissociation of H2O into H+ and OH-
- K1:  CO2* = H+ + HCO3-
- K2:  HCO3- = H+ + CO3 2-
- Kh:  CO2 solubility at equilibration temperature, mol/(L·atm)
- Kh2: CO2 solubility at in-situ (field) temperature, mol/(L·atm)

Kw, Kh and Kh2 depend on temperature only. K1 and K2 come from one of three
constant sets:

- FRESHWATER: Harned & Davis (1943), Harned & Scholes (1941)
- ESTUARINE:  Millero (2010), valid 0-40 PSU
- MARINE:     Dickson & Millero (1987) refit of Mehrbach et al. (1973)

The estuarine curve at S = 0 is NOT the freshwater curve; the two come from
different calibrations and are kept separate.

Reference:
- Weiss, R.F. (1974). Mar. Chem. 2, 203-215
- Millero, F.J. (2010). Mar. Freshwater Res. 61, 139-142
- Dickson, A.G. and Millero, F.J. (1987). Deep-Sea Res. 34, 1733-1743
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Tuple, Union

from utils.exceptions import ConfigurationError
from utils.headspace_defaults import KELVIN_OFFSET

logger = logging.getLogger(__name__)


class ConstantSet(str, Enum):
    """Source of the carbonic acid dissociation constants K1 and K2."""

    FRESHWATER = "freshwater"
    ESTUARINE = "estuarine"
    MARINE = "marine"


# Selector codes used by headspace spreadsheets ("Constants" column)
CONSTANT_SET_CODES: Dict[int, ConstantSet] = {
    1: ConstantSet.FRESHWATER,
    2: ConstantSet.ESTUARINE,
    3: ConstantSet.MARINE,
}


@dataclass(frozen=True)
class EquilibriumConstants:
    """Equilibrium constants for one sample (all mol/L based, Kh in mol/(L·atm))."""
    kw: float
    k1: float
    k2: float
    kh: float  # equilibration temperature
    kh2: float  # in-situ temperature


def resolve_constant_set(selector: Union[ConstantSet, str, int]) -> ConstantSet:
    """
    Map a constant-set selector to ConstantSet.

    Accepts the enum itself, its name/value ("marine", "MARINE") or the
    spreadsheet code (1, 2, 3).

    Raises:
        ConfigurationError: If the selector does not name a known constant set
    """
    if isinstance(selector, ConstantSet):
        return selector

    if isinstance(selector, bool):
        raise ConfigurationError(f"Invalid constant set selector: {selector!r}")

    if isinstance(selector, (int, float)):
        if float(selector).is_integer() and int(selector) in CONSTANT_SET_CODES:
            return CONSTANT_SET_CODES[int(selector)]
        raise ConfigurationError(
            f"Unknown constant set code {selector!r}; expected one of "
            f"{sorted(CONSTANT_SET_CODES)}"
        )

    if isinstance(selector, str):
        text = selector.strip().lower()
        if text.isdigit() and int(text) in CONSTANT_SET_CODES:
            return CONSTANT_SET_CODES[int(text)]
        try:
            return ConstantSet(text)
        except ValueError:
            pass

    raise ConfigurationError(
        f"Unknown constant set {selector!r}; expected one of "
        f"{[c.value for c in ConstantSet]}"
    )


def _kelvin(temp_c: float, label: str) -> float:
    temp_k = temp_c + KELVIN_OFFSET
    if not math.isfinite(temp_k) or temp_k <= 0.0:
        raise ConfigurationError(f"{label} must be above absolute zero, got {temp_c} °C")
    return temp_k


def water_dissociation_constant(temp_c: float) -> float:
    """Kw at temperature (°C), quadratic pKw fit."""
    pkw = 0.0002 * temp_c ** 2 - 0.0444 * temp_c + 14.953
    return 10.0 ** (-pkw)


def co2_solubility(temp_c: float) -> float:
    """
    CO2 solubility (Henry's constant K0) at temperature, mol/(L·atm).

    Weiss (1974) fresh water form:
        ln K0 = -60.2409 + 93.4517·(100/T) + 23.3585·ln(T/100)
    """
    temp_k = _kelvin(temp_c, "Temperature")
    ln_k0 = -60.2409 + 93.4517 * (100.0 / temp_k) + 23.3585 * math.log(temp_k / 100.0)
    return 10.0 ** (ln_k0 / math.log(10.0))


# ---------------------------------------------------------------------------
# K1/K2 correlations, one function per constant set
# ---------------------------------------------------------------------------

def _freshwater_k1_k2(temp_k: float, salinity_psu: float) -> Tuple[float, float]:
    log_k1 = -3404.71 / temp_k + 14.8435 - 0.032786 * temp_k
    log_k2 = -2902.39 / temp_k + 6.498 - 0.02379 * temp_k
    return 10.0 ** log_k1, 10.0 ** log_k2


def _estuarine_k1_k2(temp_k: float, salinity_psu: float) -> Tuple[float, float]:
    s = salinity_psu
    sqrt_s = math.sqrt(s)
    ln_t = math.log(temp_k)

    pk1_0 = -126.34048 + 6320.813 / temp_k + 19.568224 * ln_t
    a1 = 13.4038 * sqrt_s + 0.03206 * s - 5.242e-5 * s ** 2
    b1 = -530.659 * sqrt_s - 5.8210 * s
    c1 = -2.0664 * sqrt_s
    pk1 = pk1_0 + a1 + b1 / temp_k + c1 * ln_t

    pk2_0 = -90.18333 + 5143.692 / temp_k + 14.613358 * ln_t
    a2 = 21.3728 * sqrt_s + 0.1218 * s - 3.688e-4 * s ** 2
    b2 = -788.289 * sqrt_s - 19.189 * s
    c2 = -3.374 * sqrt_s
    pk2 = pk2_0 + a2 + b2 / temp_k + c2 * ln_t

    return 10.0 ** (-pk1), 10.0 ** (-pk2)


def _marine_k1_k2(temp_k: float, salinity_psu: float) -> Tuple[float, float]:
    s = salinity_psu
    pk1 = 3670.7 / temp_k - 62.008 + 9.7944 * math.log(temp_k) - 0.0118 * s + 0.000116 * s ** 2
    pk2 = 1394.7 / temp_k + 4.777 - 0.0184 * s + 0.000118 * s ** 2
    return 10.0 ** (-pk1), 10.0 ** (-pk2)


_DISSOCIATION_CONSTANTS: Dict[ConstantSet, Callable[[float, float], Tuple[float, float]]] = {
    ConstantSet.FRESHWATER: _freshwater_k1_k2,
    ConstantSet.ESTUARINE: _estuarine_k1_k2,
    ConstantSet.MARINE: _marine_k1_k2,
}


def validate_salinity(constant_set: ConstantSet, salinity_psu: float) -> None:
    """
    Check salinity against the constant set.

    Freshwater constants have no salinity term, so salinity must be 0.
    Estuarine and marine constants need a measured salinity > 0.

    Raises:
        ConfigurationError: On negative, non-finite or inconsistent salinity
    """
    if not math.isfinite(salinity_psu) or salinity_psu < 0.0:
        raise ConfigurationError(f"Salinity must be a non-negative number, got {salinity_psu}")

    if constant_set is ConstantSet.FRESHWATER and salinity_psu != 0.0:
        raise ConfigurationError(
            f"Freshwater constants require salinity = 0, got {salinity_psu} PSU. "
            "Use the estuarine or marine constant set for saline samples."
        )

    if constant_set is not ConstantSet.FRESHWATER and salinity_psu == 0.0:
        raise ConfigurationError(
            f"{constant_set.value.capitalize()} constants require salinity > 0"
        )


def compute_constants(
    temp_equil_c: float,
    temp_insitu_c: float,
    constant_set: Union[ConstantSet, str, int] = ConstantSet.FRESHWATER,
    salinity_psu: float = 0.0
) -> EquilibriumConstants:
    """
    Compute the carbonate equilibrium constants for one sample.

    Kw, K1 and K2 are evaluated at the equilibration temperature (the
    conditions inside the headspace vessel). Kh is the CO2 solubility at the
    equilibration temperature and Kh2 at the in-situ temperature.

    Args:
        temp_equil_c: Water temperature after equilibration, °C
        temp_insitu_c: In-situ (field) water temperature, °C
        constant_set: ConstantSet, its name, or spreadsheet code 1/2/3
        salinity_psu: Salinity, PSU (0 for freshwater)

    Returns:
        EquilibriumConstants

    Example:
        >>> c = compute_constants(25.0, 20.0, ConstantSet.FRESHWATER)
        >>> print(f"pK1 = {-math.log10(c.k1):.3f}")  # ~6.351

    Raises:
        ConfigurationError: Unknown constant set, salinity inconsistent with
            the constant set, or temperatures at/below absolute zero
    """
    resolved = resolve_constant_set(constant_set)
    validate_salinity(resolved, salinity_psu)

    temp_equil_k = _kelvin(temp_equil_c, "Equilibration temperature")
    _kelvin(temp_insitu_c, "In-situ temperature")

    k1, k2 = _DISSOCIATION_CONSTANTS[resolved](temp_equil_k, salinity_psu)

    constants = EquilibriumConstants(
        kw=water_dissociation_constant(temp_equil_c),
        k1=k1,
        k2=k2,
        kh=co2_solubility(temp_equil_c),
        kh2=co2_solubility(temp_insitu_c),
    )

    logger.debug(
        f"{resolved.value} constants at {temp_equil_c:.2f} °C (in situ {temp_insitu_c:.2f} °C, "
        f"S={salinity_psu:g}): pKw={-math.log10(constants.kw):.3f}, "
        f"pK1={-math.log10(k1):.3f}, pK2={-math.log10(k2):.3f}, "
        f"Kh={constants.kh:.4e}, Kh2={constants.kh2:.4e}"
    )

    return constants


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    print("=== Carbonate Equilibrium Constants ===\n")
    for cs, sal in [(ConstantSet.FRESHWATER, 0.0), (ConstantSet.ESTUARINE, 15.0), (ConstantSet.MARINE, 35.0)]:
        c = compute_constants(25.0, 25.0, cs, sal)
        print(
            f"{cs.value:>10s} (S={sal:4.1f}): pK1={-math.log10(c.k1):.3f}  "
            f"pK2={-math.log10(c.k2):.3f}  Kh={c.kh:.4f} mol/L/atm"
        )
