"""
Headspace sample tables (CSV) in and out.

Input tables carry one row per sample with the columns

    Sample.ID, HS.pCO2.before (or HS.mCO2.before), HS.pCO2.after,
    Temp.insitu, Temp.equil, Alkalinity.measured, Volume.gas,
    Volume.water[, Bar.pressure, Constants, Salinity]

The last three are optional so 8-column freshwater tables still load.
Rows are returned as dicts keyed by HeadspaceSampleInput field names;
validation of the values themselves happens in the tool layer.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import pandas as pd

from utils.exceptions import ConfigurationError
from utils.headspace_defaults import (
    INPUT_COLUMN_ALIASES,
    INPUT_COLUMNS,
    OPTIONAL_INPUT_COLUMNS,
    OUTPUT_COLUMNS,
)

logger = logging.getLogger(__name__)


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Strip header whitespace and map column aliases onto canonical names."""
    df = df.rename(columns=lambda c: str(c).strip())
    renames = {
        alias: canonical
        for alias, canonical in INPUT_COLUMN_ALIASES.items()
        if alias in df.columns and canonical not in df.columns
    }
    if renames:
        logger.debug(f"Renaming table columns: {renames}")
    return df.rename(columns=renames)


def frame_to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """
    Convert a sample table to HeadspaceSampleInput field dicts.

    Raises:
        ConfigurationError: If required columns are missing
    """
    df = normalize_columns(df)

    required = [c for c in INPUT_COLUMNS if c not in OPTIONAL_INPUT_COLUMNS]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ConfigurationError(f"Missing required columns: {missing}")

    present = [c for c in INPUT_COLUMNS if c in df.columns]
    unknown = [c for c in df.columns if c not in INPUT_COLUMNS]
    if unknown:
        logger.info(f"Ignoring extra columns: {unknown}")

    subset = df[present].rename(columns=INPUT_COLUMNS)

    records = []
    for raw in subset.to_dict(orient="records"):
        # Empty cells are dropped: optional fields fall back to their defaults,
        # missing required fields are reported by validation
        record = {
            key: value.item() if hasattr(value, "item") else value
            for key, value in raw.items()
            if not pd.isna(value)
        }
        record.setdefault("sample_id", "")
        records.append(record)

    return records


def read_sample_table(source: Union[str, Path, Any]) -> List[Dict[str, Any]]:
    """
    Read a headspace sample table.

    Args:
        source: CSV path or file-like object

    Returns:
        List of sample dicts in row order
    """
    df = pd.read_csv(source, dtype={"Sample.ID": str})
    logger.info(f"Read {len(df)} headspace samples from {source}")
    return frame_to_records(df)


def results_to_frame(results: Sequence[Any]) -> pd.DataFrame:
    """
    Build the output table from HeadspaceResult objects.

    Failed rows keep their position with empty values.
    """
    rows = []
    for result in results:
        data = result.model_dump() if hasattr(result, "model_dump") else dict(result)
        rows.append({column: data.get(field) for field, column in OUTPUT_COLUMNS.items()})
    return pd.DataFrame(rows, columns=list(OUTPUT_COLUMNS.values()))


def write_result_table(results: Sequence[Any], path: Union[str, Path]) -> Path:
    """Write results to CSV and return the path."""
    path = Path(path)
    results_to_frame(results).to_csv(path, index=False)
    logger.info(f"Wrote {len(results)} headspace results to {path}")
    return path
