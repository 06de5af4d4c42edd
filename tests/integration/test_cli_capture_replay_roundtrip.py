import json
from pathlib import Path

import pandas as pd

from dhl_tracking import cli
from dhl_tracking.api.response_writer import ResponseWriter


def test_capture_then_replay_then_export(tmp_path: Path, monkeypatch, shipment_body, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DHL_API_KEY", "unused")

    source = tmp_path / "source.json"
    source.write_text(json.dumps(shipment_body), encoding="utf-8")
    captured = tmp_path / "out" / "captured.json"
    xlsx = tmp_path / "out" / "tracking.xlsx"
    log_file = tmp_path / "out" / "run.log"

    code = cli.main([
        "00340434161094681800",
        "--replay", str(source),
        "--capture", str(captured),
        "--xlsx", str(xlsx),
        "--log-file", str(log_file),
        "--log-level", "DEBUG",
        "--no-console",
    ])
    assert code == 0
    first = capsys.readouterr().out

    # what was captured is the same body, and replays to the same output
    assert ResponseWriter(captured).read_all() == [shipment_body]
    assert cli.main(["00340434161094681800", "--replay", str(captured), "--no-console"]) == 0
    assert capsys.readouterr().out == first

    shipments = pd.read_excel(xlsx, sheet_name="Shipments", engine="openpyxl",
                              dtype={"Tracking Number": str})
    assert list(shipments["Tracking Number"]) == ["00340434161094681800"]
    assert list(shipments["StatusCode"]) == ["transit"]

    assert "Replay mode enabled" in log_file.read_text(encoding="utf-8")
