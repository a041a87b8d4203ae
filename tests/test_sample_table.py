"""
Tests for reading and writing headspace sample tables.
"""

import io

import pandas as pd
import pytest
import sys
from pathlib import Path

# Add parent directory to path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

from tools.headspace_calculation import solve_batch
from utils.exceptions import ConfigurationError
from utils.headspace_defaults import OUTPUT_COLUMNS
from utils.sample_table import (
    frame_to_records,
    normalize_columns,
    read_sample_table,
    results_to_frame,
    write_result_table,
)

FRESHWATER_TABLE = """Sample.ID,HS.mCO2.before,HS.pCO2.after,Temp.insitu,Temp.equil,Alkalinity.measured,Volume.gas,Volume.water
lake-1,0,80,20,25,1050,30,30
lake-2,1000,800,20,20,2000,30,30
"""

FULL_TABLE = """Sample.ID,HS.pCO2.before,HS.pCO2.after,Temp.insitu,Temp.equil,Alkalinity.measured,Volume.gas,Volume.water,Bar.pressure,Constants,Salinity
A,0,80,20,25,1050,30,30,,1,0
B,0,900,12,18,1800,20,40,100.2,2,12
C,420,450,15,22,2300,60,1000,99,3,35
"""


@pytest.fixture
def freshwater_csv(tmp_path):
    path = tmp_path / "freshwater.csv"
    path.write_text(FRESHWATER_TABLE)
    return path


@pytest.fixture
def full_csv(tmp_path):
    path = tmp_path / "full.csv"
    path.write_text(FULL_TABLE)
    return path


class TestReadSampleTable:

    def test_eight_column_table(self, freshwater_csv):
        records = read_sample_table(freshwater_csv)

        assert len(records) == 2
        assert records[0]["sample_id"] == "lake-1"
        assert records[0]["pco2_before_ppmv"] == 0
        assert records[1]["pco2_after_ppmv"] == 800
        # Optional columns absent: schema defaults apply
        assert "bar_pressure_kpa" not in records[0]
        assert "constants" not in records[0]

    def test_full_table(self, full_csv):
        records = read_sample_table(full_csv)

        assert [r["constants"] for r in records] == [1, 2, 3]
        assert "bar_pressure_kpa" not in records[0]  # empty cell
        assert records[2]["bar_pressure_kpa"] == 99.0
        assert records[1]["salinity_psu"] == 12.0

    def test_values_are_python_scalars(self, full_csv):
        records = read_sample_table(full_csv)
        assert all(type(v) in (str, int, float) for r in records for v in r.values())

    def test_missing_required_column(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("Sample.ID,HS.pCO2.before,HS.pCO2.after\nx,0,80\n")

        with pytest.raises(ConfigurationError, match="Temp.insitu"):
            read_sample_table(path)

    def test_extra_columns_ignored(self):
        df = pd.read_csv(io.StringIO(FRESHWATER_TABLE))
        df["Notes"] = ["dup", ""]
        records = frame_to_records(df)
        assert all("Notes" not in r for r in records)

    def test_header_whitespace_and_alias(self):
        df = pd.DataFrame(columns=[" Sample.ID ", "HS.mCO2.before"])
        assert list(normalize_columns(df).columns) == ["Sample.ID", "HS.pCO2.before"]

    def test_alias_does_not_override_canonical(self):
        df = pd.DataFrame(columns=["HS.pCO2.before", "HS.mCO2.before"])
        assert list(normalize_columns(df).columns) == ["HS.pCO2.before", "HS.mCO2.before"]

    def test_empty_required_cell_fails_batch(self, tmp_path):
        path = tmp_path / "gap.csv"
        path.write_text(FRESHWATER_TABLE.replace("1000,800,20,20,2000", "1000,800,20,20,"))
        records = read_sample_table(path)

        with pytest.raises(ConfigurationError, match="Row 1"):
            solve_batch(records)


class TestWriteResultTable:

    def test_round_trip_through_batch(self, full_csv, tmp_path):
        results = solve_batch(read_sample_table(full_csv), max_workers=1)
        out = write_result_table(results, tmp_path / "results.csv")

        table = pd.read_csv(out, dtype={"Sample.ID": str})
        assert list(table.columns) == list(OUTPUT_COLUMNS.values())
        assert list(table["Sample.ID"]) == ["A", "B", "C"]
        assert table.loc[0, "pCO2 complete headspace (ppmv)"] == pytest.approx(75.41068162, rel=1e-6)
        assert table.loc[0, "% error"] == pytest.approx(102.99016, rel=1e-5)

    def test_failed_rows_keep_position(self):
        from tools.schemas import HeadspaceResult

        results = [
            HeadspaceResult(sample_id="ok", pco2_complete_ppmv=10.0, ph_complete=7.0),
            HeadspaceResult(sample_id="bad", status="failed", error="no root"),
        ]
        frame = results_to_frame(results)

        assert list(frame["Sample.ID"]) == ["ok", "bad"]
        assert pd.isna(frame.loc[1, "pH"])


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
