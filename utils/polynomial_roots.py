"""
Polynomial Roots and Physical Root Selection

Charge-balance equations of the carbonate system are polynomials in [H+].
All roots are computed (numpy companion-matrix eigenvalues) and exactly one
of them must be physical: real and positive.

Selection contract:
1. Keep roots whose imaginary part is negligible, |Im z| <= imag_tol * |z|
2. Keep those with Re z > 0
3. Exactly one must remain; zero or several raise NumericalError

Picking "the first positive root" is never done: an ambiguous polynomial
means the inputs are outside the range the chemistry is valid for.
"""

import logging
from typing import Sequence

import numpy as np

from utils.exceptions import NumericalError
from utils.headspace_defaults import DEFAULT_IMAG_TOL

logger = logging.getLogger(__name__)


def polynomial_roots(coefficients: Sequence[float]) -> np.ndarray:
    """
    All (complex) roots of a real polynomial.

    Args:
        coefficients: Polynomial coefficients, highest degree first
            (numpy.roots convention)

    Returns:
        Complex array of length degree

    Raises:
        NumericalError: If coefficients are non-finite or the leading
            coefficient is zero
    """
    coeffs = np.asarray(coefficients, dtype=float)

    if coeffs.ndim != 1 or coeffs.size < 2:
        raise NumericalError(f"Need at least a degree-1 polynomial, got {coeffs.tolist()}")

    if not np.all(np.isfinite(coeffs)):
        raise NumericalError(f"Non-finite polynomial coefficients: {coeffs.tolist()}")

    if coeffs[0] == 0.0:
        raise NumericalError("Leading polynomial coefficient is zero")

    return np.roots(coeffs).astype(complex)


def real_roots(roots: Sequence[complex], imag_tol: float = DEFAULT_IMAG_TOL) -> np.ndarray:
    """Real parts of the roots whose imaginary part is within imag_tol·|z|."""
    if imag_tol < 0.0:
        raise ValueError(f"imag_tol must be >= 0, got {imag_tol}")

    z = np.asarray(roots, dtype=complex)
    mask = np.abs(z.imag) <= imag_tol * np.abs(z)
    return z.real[mask]


def select_positive_real_root(
    roots: Sequence[complex],
    imag_tol: float = DEFAULT_IMAG_TOL
) -> float:
    """
    Select the unique positive real root.

    Args:
        roots: Polynomial roots (complex)
        imag_tol: Relative tolerance on the imaginary part

    Returns:
        The positive real root

    Raises:
        NumericalError: If no root or more than one root is positive and real
    """
    candidates = real_roots(roots, imag_tol)
    positive = candidates[candidates > 0.0]

    if positive.size != 1:
        raise NumericalError(
            f"Expected exactly one positive real root, found {positive.size} "
            f"(roots: {np.asarray(roots, dtype=complex).tolist()})"
        )

    return float(positive[0])


def polish_root(coefficients: Sequence[float], root: float, max_iterations: int = 3) -> float:
    """
    Refine a real root with Newton steps.

    Eigenvalues of the companion matrix lose relative accuracy on the small
    roots when root magnitudes span many decades (e.g. [H+] ~ 1e-12 next to
    -AT ~ 1e-3). A step is only kept if it reduces |p(x)| and keeps x > 0.
    """
    p = np.poly1d(coefficients)
    dp = p.deriv()

    x = root
    fx = abs(p(x))
    for _ in range(max_iterations):
        slope = dp(x)
        if slope == 0.0 or fx == 0.0:
            break
        candidate = x - p(x) / slope
        f_candidate = abs(p(candidate))
        if candidate <= 0.0 or f_candidate >= fx:
            break
        x, fx = candidate, f_candidate

    return float(x)


def solve_positive_root(
    coefficients: Sequence[float],
    imag_tol: float = DEFAULT_IMAG_TOL
) -> float:
    """Roots of a polynomial reduced to its unique positive real root."""
    roots = polynomial_roots(coefficients)
    logger.debug(f"Polynomial roots: {roots}")
    return polish_root(coefficients, select_positive_real_root(roots, imag_tol))
