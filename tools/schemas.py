"""
Pydantic Schemas for the Headspace pCO2 Tools

Defines input and output models for single-sample and table headspace
calculations. Field names map one-to-one onto the columns of headspace
sample tables (see utils.headspace_defaults.INPUT_COLUMNS/OUTPUT_COLUMNS).

Reference:
- Koschorreck et al. (2021), Biogeosciences 18, 1619-1627
"""

from typing import Optional, Literal, List

from pydantic import BaseModel, Field, PositiveFloat, field_validator, model_validator

from utils.equilibrium_constants import ConstantSet, resolve_constant_set
from utils.exceptions import ConfigurationError
from utils.headspace_defaults import STANDARD_PRESSURE_KPA

ABSOLUTE_ZERO_C = -273.15


class HeadspaceSampleInput(BaseModel):
    """
    One headspace equilibration.

    pCO2 values are gas-phase mixing ratios (ppmv) as reported by the
    GC/IRGA. Alkalinity is total alkalinity of the water sample.
    """

    sample_id: str = Field(
        default="",
        description="User label for the sample (traceability only)",
        examples=["Lake-01", "S12"]
    )

    pco2_before_ppmv: float = Field(
        ge=0.0,
        description="pCO2 of the headspace gas before equilibration, ppmv "
        "(0 for N2, ~420 for ambient air)",
        examples=[0.0, 420.0]
    )

    pco2_after_ppmv: float = Field(
        ge=0.0,
        description="Measured pCO2 of the headspace gas after equilibration, ppmv",
        examples=[80.0, 1500.0]
    )

    temp_insitu_c: float = Field(
        gt=ABSOLUTE_ZERO_C,
        description="In-situ (field) water temperature, °C",
        examples=[20.0, 4.5]
    )

    temp_equil_c: float = Field(
        gt=ABSOLUTE_ZERO_C,
        description="Water temperature after equilibration, °C",
        examples=[25.0, 21.0]
    )

    alkalinity_ueq_l: float = Field(
        ge=0.0,
        description="Total alkalinity of the water sample, µeq/L",
        examples=[1050.0, 2300.0]
    )

    volume_gas_ml: PositiveFloat = Field(
        description="Volume of gas in the headspace vessel, mL",
        examples=[30.0, 60.0]
    )

    volume_water_ml: PositiveFloat = Field(
        description="Volume of water in the headspace vessel, mL",
        examples=[30.0, 1000.0]
    )

    bar_pressure_kpa: float = Field(
        default=STANDARD_PRESSURE_KPA,
        ge=0.0,
        description="Barometric pressure at field conditions, kPa. Only used to "
        "convert ppmv to true partial pressure (µatm) and concentration.",
        examples=[101.325, 95.0]
    )

    constants: ConstantSet = Field(
        default=ConstantSet.FRESHWATER,
        description="Carbonate constants: freshwater (Harned & Davis), estuarine "
        "(Millero 2010) or marine (Dickson & Millero 1987). Codes 1/2/3 accepted."
    )

    salinity_psu: float = Field(
        default=0.0,
        ge=0.0,
        description="Salinity, PSU. Must be 0 for freshwater and > 0 for "
        "estuarine/marine constants.",
        examples=[0.0, 12.0, 35.0]
    )

    @field_validator("sample_id", mode="before")
    @classmethod
    def coerce_sample_id(cls, v):
        """Spreadsheet IDs may come in as numbers."""
        if v is None:
            return ""
        if isinstance(v, float) and v.is_integer():
            return str(int(v))
        return str(v)

    @field_validator("constants", mode="before")
    @classmethod
    def resolve_constants(cls, v):
        """Accept enum, name or spreadsheet code."""
        try:
            return resolve_constant_set(v)
        except ConfigurationError as e:
            raise ValueError(str(e)) from e

    @model_validator(mode="after")
    def check_salinity_matches_constants(self):
        """Freshwater has no salinity term; saline constant sets need one."""
        if self.constants is ConstantSet.FRESHWATER and self.salinity_psu != 0.0:
            raise ValueError(
                f"salinity_psu must be 0 for freshwater constants, got {self.salinity_psu}"
            )
        if self.constants is not ConstantSet.FRESHWATER and self.salinity_psu == 0.0:
            raise ValueError(
                f"salinity_psu must be > 0 for {self.constants.value} constants"
            )
        return self

    model_config = {
        "allow_inf_nan": False,
        "json_schema_extra": {
            "examples": [
                {
                    "sample_id": "example",
                    "pco2_before_ppmv": 0.0,
                    "pco2_after_ppmv": 80.0,
                    "temp_insitu_c": 20.0,
                    "temp_equil_c": 25.0,
                    "alkalinity_ueq_l": 1050.0,
                    "volume_gas_ml": 30.0,
                    "volume_water_ml": 30.0
                }
            ]
        }
    }


class HeadspaceResult(BaseModel):
    """
    Complete and simple headspace estimates for one sample.

    Numeric fields are None only for rows that failed in a batch
    (status "failed"); percent_error is also None if the complete pCO2 is 0.
    """

    sample_id: str = Field(description="Sample label (echoed from input)")

    status: Literal["ok", "failed"] = Field(
        default="ok",
        description="'failed' when the calculation raised for this sample in a batch"
    )

    # Complete method
    pco2_complete_ppmv: Optional[float] = Field(
        default=None,
        description="pCO2 of the original sample, complete headspace method, ppmv",
        examples=[75.41]
    )

    pco2_complete_uatm: Optional[float] = Field(
        default=None,
        description="pCO2 of the original sample, complete method, µatm at field pressure"
    )

    co2_complete_umol_l: Optional[float] = Field(
        default=None,
        description="Dissolved CO2* of the original sample, complete method, µmol/L"
    )

    ph_complete: Optional[float] = Field(
        default=None,
        description="pH of the original sample at in-situ conditions (complete method)",
        examples=[8.87]
    )

    # Simple method
    pco2_simple_ppmv: Optional[float] = Field(
        default=None,
        description="pCO2 of the original sample ignoring carbonate equilibrium, ppmv",
        examples=[153.08]
    )

    pco2_simple_uatm: Optional[float] = Field(
        default=None,
        description="pCO2 from the simple method, µatm at field pressure"
    )

    co2_simple_umol_l: Optional[float] = Field(
        default=None,
        description="Dissolved CO2 from the simple method, µmol/L"
    )

    percent_error: Optional[float] = Field(
        default=None,
        description="Error of the simple method: (simple - complete) / complete × 100",
        examples=[102.99]
    )

    # Diagnostics
    dic_equilibration_umol_l: Optional[float] = Field(
        default=None,
        description="DIC in the vessel after equilibration, µmol/L at field pressure"
    )

    dic_original_umol_l: Optional[float] = Field(
        default=None,
        description="DIC of the original sample, µmol/L at field pressure"
    )

    error: Optional[str] = Field(
        default=None,
        description="Failure message for failed batch rows"
    )


class ConstantSetInfo(BaseModel):
    """Description of an available carbonate constant set."""

    name: str = Field(description="Constant set identifier")
    code: int = Field(description="Spreadsheet selector code")
    description: str = Field(description="Source of K1/K2")
    requires_salinity: bool = Field(description="Whether salinity > 0 is required")


class BatchSummary(BaseModel):
    """Counts for a table run."""

    total: int
    succeeded: int
    failed: int
    failed_sample_ids: List[str] = Field(default=[])
