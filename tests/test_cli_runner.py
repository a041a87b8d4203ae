"""
Tests for the command-line runner.
"""

import json
import pytest
import sys
from pathlib import Path

# Add parent directory to path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

from cli_runner import main

SAMPLE_ARGS = [
    "sample",
    "--sample-id", "cli",
    "--before", "0",
    "--after", "80",
    "--temp-insitu", "20",
    "--temp-equil", "25",
    "--alkalinity", "1050",
    "--volume-gas", "30",
    "--volume-water", "30",
]


def test_sample_command(capsys):
    assert main(SAMPLE_ARGS) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "success"
    assert payload["result"]["sample_id"] == "cli"
    assert payload["result"]["pco2_complete_ppmv"] == pytest.approx(75.41068162, rel=1e-6)


def test_sample_command_invalid_volume(capsys):
    args = [a if a != "30" else "0" for a in SAMPLE_ARGS]
    assert main(args) == 1

    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "error"
    assert payload["error_type"] == "ConfigurationError"


def test_sample_command_marine(capsys):
    args = SAMPLE_ARGS + ["--constants", "3", "--salinity", "35", "--pressure", "95"]
    assert main(args) == 0

    result = json.loads(capsys.readouterr().out)["result"]
    assert result["pco2_complete_uatm"] == pytest.approx(result["pco2_complete_ppmv"] * 95 / 101.325)


def test_table_command(tmp_path, capsys):
    source = tmp_path / "samples.csv"
    source.write_text(
        "Sample.ID,HS.pCO2.before,HS.pCO2.after,Temp.insitu,Temp.equil,"
        "Alkalinity.measured,Volume.gas,Volume.water\n"
        "a,0,80,20,25,1050,30,30\n"
        "b,1000,800,20,20,2000,30,30\n"
    )
    output = tmp_path / "results.csv"

    assert main(["table", str(source), "--output", str(output), "--workers", "2"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["summary"] == {"total": 2, "succeeded": 2, "failed": 0, "failed_sample_ids": []}
    assert [r["sample_id"] for r in payload["results"]] == ["a", "b"]
    assert payload["output"] == str(output)
    assert output.exists()


def test_table_command_missing_file(tmp_path, capsys):
    assert main(["table", str(tmp_path / "nope.csv")]) == 1
    assert json.loads(capsys.readouterr().out)["status"] == "error"


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
