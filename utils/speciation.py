"""
Aqueous Carbonate Speciation - Charge Balance Solver

Solves the alkalinity charge balance of a closed DIC/alkalinity system
for hydrogen ion concentration:

    AT = [HCO3-] + 2[CO3 2-] + [OH-] - [H+]

Two parameterisations are used by the headspace method:

- Degree 3, CO2* known (from headspace pCO2 and Henry's law):
    [HCO3-] = K1·CO2*/H,  [CO3 2-] = K1·K2·CO2*/H²
    H³ + AT·H² - (K1·CO2* + Kw)·H - 2·K1·K2·CO2* = 0

- Degree 4, DIC known:
    [HCO3-] = DIC·K1·H/D,  [CO3 2-] = DIC·K1·K2/D,  D = H² + K1·H + K1·K2
    H⁴ + (AT + K1)·H³ + (AT·K1 - Kw + K1·K2 - DIC·K1)·H²
       + (K1·K2·AT - K1·Kw - 2·DIC·K1·K2)·H - K1·K2·Kw = 0

Only CO2* (CO2(aq) + H2CO3) exchanges with the gas phase; HCO3⁻/CO3²⁻ are
non-volatile.

Reference:
- Stumm, W. and Morgan, J.J. (1996). Aquatic Chemistry, 3rd Ed., Ch. 4
"""

import logging
import math
from dataclasses import dataclass
from typing import List

from utils.equilibrium_constants import EquilibriumConstants
from utils.exceptions import ConfigurationError
from utils.headspace_defaults import DEFAULT_IMAG_TOL
from utils.polynomial_roots import solve_positive_root

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeciationState:
    """Carbonate system state (mol/L)."""
    dic: float
    alkalinity: float
    h: float
    co2_star: float

    @property
    def ph(self) -> float:
        return -math.log10(self.h)


def co2_star_coefficients(
    co2_star: float,
    alkalinity: float,
    constants: EquilibriumConstants
) -> List[float]:
    """Cubic charge-balance coefficients for known CO2*, highest degree first."""
    k1, k2, kw = constants.k1, constants.k2, constants.kw
    return [
        1.0,
        alkalinity,
        -(co2_star * k1 + kw),
        -(2.0 * k1 * k2 * co2_star),
    ]


def dic_coefficients(
    dic: float,
    alkalinity: float,
    constants: EquilibriumConstants
) -> List[float]:
    """Quartic charge-balance coefficients for known DIC, highest degree first."""
    k1, k2, kw = constants.k1, constants.k2, constants.kw
    return [
        1.0,
        alkalinity + k1,
        alkalinity * k1 - kw + k1 * k2 - dic * k1,
        k1 * k2 * alkalinity - k1 * kw - 2.0 * dic * k1 * k2,
        -(k1 * k2 * kw),
    ]


def co2_fraction(h: float, k1: float, k2: float) -> float:
    """Fraction of DIC present as CO2* (alpha0)."""
    return h * h / (h * h + k1 * h + k1 * k2)


def dic_from_co2_star(co2_star: float, h: float, k1: float, k2: float) -> float:
    """DIC from CO2* at a given [H+]."""
    return co2_star * (1.0 + k1 / h + k1 * k2 / (h * h))


def charge_balance_residual(
    h: float,
    dic: float,
    alkalinity: float,
    constants: EquilibriumConstants
) -> float:
    """
    Alkalinity implied by (H, DIC) minus the given alkalinity, mol/L.

    Zero at the solution; used to check roots independently of the
    polynomial rearrangement.
    """
    k1, k2, kw = constants.k1, constants.k2, constants.kw
    denom = h * h + k1 * h + k1 * k2
    hco3 = dic * k1 * h / denom
    co3 = dic * k1 * k2 / denom
    return hco3 + 2.0 * co3 + kw / h - h - alkalinity


def solve_speciation(
    value: float,
    alkalinity: float,
    constants: EquilibriumConstants,
    degree: int,
    imag_tol: float = DEFAULT_IMAG_TOL
) -> SpeciationState:
    """
    Solve the charge balance for [H+].

    Args:
        value: CO2* (degree 3) or DIC (degree 4), mol/L
        alkalinity: Total alkalinity, mol/L (eq/L)
        constants: Equilibrium constants at the conditions of interest
        degree: 3 for the CO2*-parameterised cubic, 4 for the DIC quartic
        imag_tol: Relative tolerance on root imaginary parts

    Returns:
        SpeciationState with DIC, alkalinity, [H+] and CO2*

    Example:
        >>> c = compute_constants(25.0, 25.0)
        >>> state = solve_speciation(2.0e-3, 1.9e-3, c, degree=4)
        >>> print(f"pH {state.ph:.2f}")

    Raises:
        ConfigurationError: Unsupported degree or negative concentrations
        NumericalError: No unique positive real root
    """
    if not (math.isfinite(value) and value >= 0.0):
        raise ConfigurationError(f"CO2*/DIC must be a non-negative number, got {value}")
    if not (math.isfinite(alkalinity) and alkalinity >= 0.0):
        raise ConfigurationError(f"Alkalinity must be a non-negative number, got {alkalinity}")

    k1, k2 = constants.k1, constants.k2

    if degree == 3:
        h = solve_positive_root(co2_star_coefficients(value, alkalinity, constants), imag_tol)
        state = SpeciationState(
            dic=dic_from_co2_star(value, h, k1, k2),
            alkalinity=alkalinity,
            h=h,
            co2_star=value,
        )
    elif degree == 4:
        h = solve_positive_root(dic_coefficients(value, alkalinity, constants), imag_tol)
        state = SpeciationState(
            dic=value,
            alkalinity=alkalinity,
            h=h,
            co2_star=value * co2_fraction(h, k1, k2),
        )
    else:
        raise ConfigurationError(f"Charge balance degree must be 3 or 4, got {degree}")

    logger.debug(
        f"Speciation (degree {degree}): AT={alkalinity:.4e}, DIC={state.dic:.4e}, "
        f"CO2*={state.co2_star:.4e}, pH={state.ph:.4f}"
    )

    return state


if __name__ == "__main__":
    from utils.equilibrium_constants import compute_constants

    logging.basicConfig(level=logging.INFO)

    print("=== Carbonate Speciation Test ===\n")
    c = compute_constants(25.0, 25.0)
    print("pH of 2 mmol/L DIC across alkalinity (freshwater, 25 °C):")
    for alk_ueq in [500, 1000, 1900, 2000, 2100, 3000]:
        state = solve_speciation(2.0e-3, alk_ueq * 1e-6, c, degree=4)
        print(f"   AT {alk_ueq:5d} µeq/L: pH {state.ph:.3f}, CO2* {state.co2_star * 1e6:8.2f} µmol/L")
