"""Tests for the command-line interface."""

import json
import logging

import pytest

from springforming import __main__ as cli
from springforming.logging_config import PACKAGE_LOGGER, parse_level
from springforming.model.process import CompressionSpringProcess


@pytest.fixture(autouse=True)
def restore_package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate


def test_default_run_prints_timeline(capsys):
    assert cli.main([]) == 0
    out = capsys.readouterr().out
    assert "Cycle time: 10.753 s" in out
    assert "body_coils" in out
    assert "reset" in out


def test_steps_control_row_count(capsys):
    assert cli.main(["--steps", "4"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    # summary, phases, blank, header, 5 rows
    assert len(lines) == 4 + 5


def test_invalid_coils_fail(capsys):
    assert cli.main(["--active", "12", "--total", "10"]) == 1
    assert "error:" in capsys.readouterr().err


def test_invalid_log_level(capsys):
    assert cli.main(["--log-level", "LOUD"]) == 2


def test_input_file_and_exports(tmp_path, capsys):
    spring = tmp_path / "spring.json"
    spring.write_text(json.dumps({
        "wireDiameter": 1.5, "meanDiameter": 12, "activeCoils": 6, "totalCoils": 8, "pitch": 3,
    }), encoding="utf-8")
    csv_path = tmp_path / "timeline.csv"
    h5_path = tmp_path / "process.h5"
    log_path = tmp_path / "run.log"

    code = cli.main([
        "--input", str(spring), "--csv", str(csv_path), "--h5", str(h5_path),
        "--log-level", "info", "--log-file", str(log_path),
    ])

    assert code == 0
    assert len(csv_path.read_text(encoding="utf-8").strip().splitlines()) == 1 + 21
    assert h5_path.exists()
    assert "Process saved" in log_path.read_text(encoding="utf-8")


def test_missing_input_file(tmp_path, capsys):
    assert cli.main(["--input", str(tmp_path / "absent.json")]) == 1


def test_plot(monkeypatch, capsys):
    shown = []
    monkeypatch.setattr(CompressionSpringProcess, "plot", lambda self: shown.append(self))
    assert cli.main(["--plot"]) == 0
    assert len(shown) == 1


def test_parse_level():
    assert parse_level("debug") == logging.DEBUG
    with pytest.raises(ValueError):
        parse_level("LOUD")


def test_steps_must_be_positive(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--steps", "0"])
    assert excinfo.value.code == 2
    assert "--steps" in capsys.readouterr().err


def test_export_into_missing_directory(tmp_path, capsys):
    code = cli.main(["--csv", str(tmp_path / "missing" / "timeline.csv")])
    assert code == 1
    assert "error:" in capsys.readouterr().err


@pytest.mark.parametrize("content", ["[1, 2]", '{"wire_diameter": "thick", "mean_diameter": 16, '
                                               '"active_coils": 8, "total_coils": 10, "pitch": 4}'])
def test_malformed_input_file(tmp_path, capsys, content):
    spring = tmp_path / "spring.json"
    spring.write_text(content, encoding="utf-8")
    assert cli.main(["--input", str(spring)]) == 1
    assert "error:" in capsys.readouterr().err


def test_gcode_preview(capsys):
    assert cli.main(["--gcode"]) == 0
    out = capsys.readouterr().out
    assert "Spring rate: 4.395 N/mm (SUS304)" in out
    assert "Machine (Generic-16Axis)" in out
    assert "%SPRING-PROGRAM" in out
    moves = [line for line in out.splitlines() if line.startswith("G01 X")]
    assert len(moves) == 8
    assert moves[-1] == "G01 X9.000 Z28.000"


def test_gcode_preview_from_input_file(tmp_path, capsys):
    spring = tmp_path / "spring.json"
    spring.write_text(json.dumps({
        "wireDiameter": 1.5, "meanDiameter": 12, "activeCoils": 6, "totalCoils": 8, "pitch": 3,
        "endType": "ground",
    }), encoding="utf-8")
    assert cli.main(["--input", str(spring), "--gcode"]) == 0
    out = capsys.readouterr().out
    assert "; OD=13.500 Dm=12.000 WIRE=1.500 N=6 PITCH=3.000" in out
    assert len([line for line in out.splitlines() if line.startswith("G01 X")]) == 6
