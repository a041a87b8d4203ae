"""
Headspace pCO2 Tool

Single-sample and table entry points for the headspace pCO2 calculation.
Each sample is solved independently:

    constants -> stage 1 (cubic) -> mass balance -> stage 2 (quartic)
              -> simple estimate -> % error

Batch semantics:
- Every record is validated before anything is computed; a malformed record
  (missing field, non-numeric value, unknown constant set, non-physical
  value) fails the whole call with ConfigurationError naming the row.
- Computation failures (NumericalError/ConfigurationError) are recorded on
  the row (status "failed") so other samples are kept, unless fail_fast=True.
- Results are returned in input order. Samples share no state, so they are
  mapped over a thread pool.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from .schemas import BatchSummary, ConstantSetInfo, HeadspaceResult, HeadspaceSampleInput
from utils.equilibrium_constants import CONSTANT_SET_CODES, ConstantSet, compute_constants
from utils.exceptions import ConfigurationError, HeadspaceError
from utils.headspace import complete_headspace, percent_error, pressure_atm, simple_headspace
from utils.headspace_defaults import (
    DEFAULT_IMAG_TOL,
    DEFAULT_MAX_WORKERS,
    MAX_TYPICAL_PCO2_PPMV,
    STANDARD_PRESSURE_KPA,
)

logger = logging.getLogger(__name__)

SampleRecord = Union[HeadspaceSampleInput, Mapping[str, Any]]

_CONSTANT_SET_DESCRIPTIONS = {
    ConstantSet.FRESHWATER: "Harned & Davis (1943) / Harned & Scholes (1941), no salinity term",
    ConstantSet.ESTUARINE: "Millero (2010), 0-40 PSU",
    ConstantSet.MARINE: "Dickson & Millero (1987) refit of Mehrbach et al. (1973)",
}


def validate_sample(record: SampleRecord, row: Optional[int] = None) -> HeadspaceSampleInput:
    """
    Validate a record into HeadspaceSampleInput.

    Raises:
        ConfigurationError: If the record is malformed (pydantic errors are
            chained as the cause)
    """
    if isinstance(record, HeadspaceSampleInput):
        return record

    try:
        return HeadspaceSampleInput.model_validate(dict(record))
    except (ValidationError, TypeError) as e:
        where = f"Row {row}" if row is not None else "Sample"
        raise ConfigurationError(f"{where} is invalid: {e}") from e


def solve_sample(
    sample: SampleRecord,
    imag_tol: float = DEFAULT_IMAG_TOL
) -> HeadspaceResult:
    """
    Solve one headspace sample with the complete and simple methods.

    Args:
        sample: HeadspaceSampleInput or a mapping of its fields
        imag_tol: Relative tolerance on root imaginary parts

    Returns:
        HeadspaceResult (status "ok")

    Example:
        >>> result = solve_sample({
        ...     "pco2_before_ppmv": 0, "pco2_after_ppmv": 80,
        ...     "temp_insitu_c": 20, "temp_equil_c": 25,
        ...     "alkalinity_ueq_l": 1050, "volume_gas_ml": 30, "volume_water_ml": 30
        ... })
        >>> print(f"{result.pco2_complete_ppmv:.1f} ppmv, pH {result.ph_complete:.2f}")

    Raises:
        ConfigurationError: Invalid input
        NumericalError: Charge balance without a unique positive root
    """
    s = validate_sample(sample)

    if s.pco2_after_ppmv > MAX_TYPICAL_PCO2_PPMV:
        logger.warning(
            f"Sample '{s.sample_id}': headspace pCO2 after equilibration "
            f"{s.pco2_after_ppmv:.0f} ppmv is unusually high"
        )
    if s.alkalinity_ueq_l == 0.0:
        logger.info(f"Sample '{s.sample_id}': zero alkalinity, carbonate buffer is absent")

    constants = compute_constants(s.temp_equil_c, s.temp_insitu_c, s.constants, s.salinity_psu)

    complete = complete_headspace(
        pco2_before_ppmv=s.pco2_before_ppmv,
        pco2_after_ppmv=s.pco2_after_ppmv,
        temp_equil_c=s.temp_equil_c,
        alkalinity_ueq_l=s.alkalinity_ueq_l,
        volume_gas_ml=s.volume_gas_ml,
        volume_water_ml=s.volume_water_ml,
        constants=constants,
        imag_tol=imag_tol
    )

    simple = simple_headspace(
        pco2_before_ppmv=s.pco2_before_ppmv,
        pco2_after_ppmv=s.pco2_after_ppmv,
        temp_equil_c=s.temp_equil_c,
        volume_gas_ml=s.volume_gas_ml,
        volume_water_ml=s.volume_water_ml,
        constants=constants
    )

    p_atm = pressure_atm(s.bar_pressure_kpa)
    error_pct = percent_error(simple.pco2_ppmv, complete.pco2_ppmv)

    logger.debug(
        f"Sample '{s.sample_id}': complete {complete.pco2_ppmv:.2f} ppmv (pH {complete.ph:.3f}), "
        f"simple {simple.pco2_ppmv:.2f} ppmv"
    )

    return HeadspaceResult(
        sample_id=s.sample_id,
        pco2_complete_ppmv=complete.pco2_ppmv,
        pco2_complete_uatm=complete.pco2_ppmv * p_atm,
        co2_complete_umol_l=complete.co2_mol_l * 1e6 * p_atm,
        ph_complete=complete.ph,
        pco2_simple_ppmv=simple.pco2_ppmv,
        pco2_simple_uatm=simple.pco2_ppmv * p_atm,
        co2_simple_umol_l=simple.co2_mol_l * 1e6 * p_atm,
        percent_error=error_pct,
        dic_equilibration_umol_l=complete.dic_equilibration_mol_l * 1e6 * p_atm,
        dic_original_umol_l=complete.dic_original_mol_l * 1e6 * p_atm,
    )


def solve_batch(
    samples: Sequence[SampleRecord],
    max_workers: Optional[int] = DEFAULT_MAX_WORKERS,
    fail_fast: bool = False,
    imag_tol: float = DEFAULT_IMAG_TOL
) -> List[HeadspaceResult]:
    """
    Solve a sequence of samples, one result per sample in input order.

    Args:
        samples: HeadspaceSampleInput objects or mappings of their fields
        max_workers: Thread pool size (None: executor default, 1: sequential)
        fail_fast: Raise on the first sample that fails to compute instead of
            recording a failed row
        imag_tol: Relative tolerance on root imaginary parts

    Returns:
        List of HeadspaceResult, same length and order as samples

    Raises:
        ConfigurationError: If any record fails validation (whole call fails)
        NumericalError: Only with fail_fast=True
    """
    validated = [validate_sample(record, row=i) for i, record in enumerate(samples)]

    def run(sample: HeadspaceSampleInput) -> HeadspaceResult:
        try:
            return solve_sample(sample, imag_tol=imag_tol)
        except HeadspaceError as e:
            if fail_fast:
                raise
            logger.warning(f"Sample '{sample.sample_id}' failed: {e}")
            return HeadspaceResult(sample_id=sample.sample_id, status="failed", error=str(e))

    if max_workers == 1 or len(validated) <= 1:
        results = [run(sample) for sample in validated]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(run, validated))

    summary = summarize_results(results)
    logger.info(
        f"Solved {summary.total} headspace samples: {summary.succeeded} ok, {summary.failed} failed"
    )

    return results


def summarize_results(results: Sequence[HeadspaceResult]) -> BatchSummary:
    failed = [r.sample_id for r in results if r.status == "failed"]
    return BatchSummary(
        total=len(results),
        succeeded=len(results) - len(failed),
        failed=len(failed),
        failed_sample_ids=failed,
    )


async def headspace_pco2(
    pco2_before_ppmv: float,
    pco2_after_ppmv: float,
    temp_insitu_c: float,
    temp_equil_c: float,
    alkalinity_ueq_l: float,
    volume_gas_ml: float,
    volume_water_ml: float,
    bar_pressure_kpa: float = STANDARD_PRESSURE_KPA,
    constants: str = "freshwater",
    salinity_psu: float = 0.0,
    sample_id: str = "",
    imag_tol: float = DEFAULT_IMAG_TOL
) -> HeadspaceResult:
    """
    Calculate pCO2 and pH of one water sample from a headspace measurement.

    Args:
        pco2_before_ppmv: Headspace pCO2 before equilibration, ppmv
        pco2_after_ppmv: Headspace pCO2 after equilibration, ppmv
        temp_insitu_c: In-situ water temperature, °C
        temp_equil_c: Water temperature after equilibration, °C
        alkalinity_ueq_l: Total alkalinity, µeq/L
        volume_gas_ml: Headspace gas volume, mL
        volume_water_ml: Water volume, mL
        bar_pressure_kpa: Barometric pressure, kPa (default: 101.325)
        constants: "freshwater", "estuarine" or "marine" (or 1/2/3)
        salinity_psu: Salinity, PSU (0 for freshwater)
        sample_id: Optional label
        imag_tol: Relative tolerance on root imaginary parts

    Returns:
        HeadspaceResult

    Example:
        >>> result = await headspace_pco2(0, 80, 20, 25, 1050, 30, 30)
        >>> print(f"{result.pco2_complete_ppmv:.1f} ppmv, error {result.percent_error:.0f}%")
    """
    sample = validate_sample({
        "sample_id": sample_id,
        "pco2_before_ppmv": pco2_before_ppmv,
        "pco2_after_ppmv": pco2_after_ppmv,
        "temp_insitu_c": temp_insitu_c,
        "temp_equil_c": temp_equil_c,
        "alkalinity_ueq_l": alkalinity_ueq_l,
        "volume_gas_ml": volume_gas_ml,
        "volume_water_ml": volume_water_ml,
        "bar_pressure_kpa": bar_pressure_kpa,
        "constants": constants,
        "salinity_psu": salinity_psu,
    })
    return solve_sample(sample, imag_tol=imag_tol)


async def headspace_pco2_table(
    records: Sequence[SampleRecord],
    max_workers: Optional[int] = DEFAULT_MAX_WORKERS,
    fail_fast: bool = False,
    imag_tol: float = DEFAULT_IMAG_TOL
) -> List[HeadspaceResult]:
    """Table version of headspace_pco2; runs solve_batch off the event loop."""
    return await asyncio.to_thread(
        solve_batch, records, max_workers=max_workers, fail_fast=fail_fast, imag_tol=imag_tol
    )


def list_constant_sets() -> List[ConstantSetInfo]:
    """Available carbonate constant sets and their spreadsheet codes."""
    codes = {cs: code for code, cs in CONSTANT_SET_CODES.items()}
    return [
        ConstantSetInfo(
            name=cs.value,
            code=codes[cs],
            description=_CONSTANT_SET_DESCRIPTIONS[cs],
            requires_salinity=cs is not ConstantSet.FRESHWATER,
        )
        for cs in ConstantSet
    ]
