"""
Headspace pCO2 MCP Server.

This server provides headspace-method tools for dissolved CO2 in water:
- Complete headspace method: pCO2 and pH of the original sample accounting
  for the carbonate equilibrium inside the equilibration vessel
- Simple headspace method: ideal-gas mass balance ignoring the carbonate
  buffer, reported with its % error against the complete method
- Table processing for CSV files of headspace samples

Constant sets:
- Freshwater (Harned & Davis 1943)
- Estuarine (Millero 2010)
- Marine (Dickson & Millero 1987)
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from mcp.server.fastmcp import FastMCP

from tools.headspace_calculation import (
    headspace_pco2,
    headspace_pco2_table,
    list_constant_sets,
    summarize_results,
)
from utils.exceptions import HeadspaceError
from utils.headspace_defaults import STANDARD_PRESSURE_KPA
from utils.sample_table import read_sample_table, write_result_table

# Configure logging - file and stderr, stdout carries the JSON-RPC transport
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('debug.log'),
        logging.StreamHandler(sys.stderr)
    ]
)
logger = logging.getLogger("headspace-pco2-mcp")

# Initialize the MCP server
mcp = FastMCP("headspace-pco2-calculator")


async def headspace_pco2_mcp(
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
    sample_id: str = ""
):
    """
    pCO2 (ppmv, µatm) and pH of a water sample from a headspace measurement.

    Returns the complete-method result (carbonate equilibrium accounted for),
    the simple-method result, and the % error of the simple method.

    Args:
        pco2_before_ppmv: Headspace pCO2 before equilibration (0 for N2), ppmv
        pco2_after_ppmv: Headspace pCO2 after equilibration, ppmv
        temp_insitu_c: In-situ water temperature, °C
        temp_equil_c: Water temperature after equilibration, °C
        alkalinity_ueq_l: Total alkalinity, µeq/L
        volume_gas_ml: Headspace gas volume, mL
        volume_water_ml: Water volume, mL
        bar_pressure_kpa: Field barometric pressure, kPa
        constants: freshwater | estuarine | marine
        salinity_psu: Salinity, PSU (0 for freshwater)
        sample_id: Optional label
    """
    try:
        result = await headspace_pco2(
            pco2_before_ppmv=pco2_before_ppmv,
            pco2_after_ppmv=pco2_after_ppmv,
            temp_insitu_c=temp_insitu_c,
            temp_equil_c=temp_equil_c,
            alkalinity_ueq_l=alkalinity_ueq_l,
            volume_gas_ml=volume_gas_ml,
            volume_water_ml=volume_water_ml,
            bar_pressure_kpa=bar_pressure_kpa,
            constants=constants,
            salinity_psu=salinity_psu,
            sample_id=sample_id
        )
    except HeadspaceError as e:
        logger.error(f"Headspace calculation failed: {e}")
        return {"status": "error", "error_type": type(e).__name__, "message": str(e)}

    return result.model_dump()


async def headspace_table_mcp(
    input_csv_path: str,
    output_csv_path: Optional[str] = None,
    fail_fast: bool = False,
    max_workers: Optional[int] = None
):
    """
    Solve every sample of a headspace CSV table.

    Required columns: Sample.ID, HS.pCO2.before (or HS.mCO2.before),
    HS.pCO2.after, Temp.insitu, Temp.equil, Alkalinity.measured, Volume.gas,
    Volume.water. Optional: Bar.pressure, Constants (1/2/3 or name), Salinity.

    Args:
        input_csv_path: Path of the input table
        output_csv_path: Optional path to write the result table
        fail_fast: Stop at the first sample that cannot be solved
        max_workers: Worker threads (default: executor default)

    Returns:
        Dict with per-sample results, summary counts and output path
    """
    try:
        records = read_sample_table(Path(input_csv_path))
        results = await headspace_pco2_table(records, max_workers=max_workers, fail_fast=fail_fast)
    except (HeadspaceError, OSError) as e:
        logger.error(f"Headspace table failed: {e}")
        return {"status": "error", "error_type": type(e).__name__, "message": str(e)}

    output = None
    if output_csv_path:
        output = str(write_result_table(results, output_csv_path))

    return {
        "status": "ok",
        "summary": summarize_results(results).model_dump(),
        "results": [r.model_dump() for r in results],
        "output_csv_path": output,
    }


async def list_constant_sets_mcp():
    """List carbonate constant sets, their selector codes and salinity needs."""
    return [info.model_dump() for info in list_constant_sets()]


# Register tools
mcp.tool()(headspace_pco2_mcp)
mcp.tool()(headspace_table_mcp)
mcp.tool()(list_constant_sets_mcp)


if __name__ == "__main__":
    logger.info("Starting Headspace pCO2 MCP server...")
    logger.info("  Tools: headspace_pco2_mcp, headspace_table_mcp, list_constant_sets_mcp")
    for info in list_constant_sets():
        logger.info(f"  Constants {info.code}: {info.name} - {info.description}")

    # Start the server
    mcp.run()
