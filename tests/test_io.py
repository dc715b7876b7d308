"""Tests for JSON input, CSV export and HDF5 snapshots."""

import csv
import json
import logging

import h5py
import numpy as np
import pytest

from springforming.model.generator import generate_process
from springforming.model.io import GRID_SAMPLES, IOManager, TIMELINE_COLUMNS
from springforming.model.process import EndType


@pytest.fixture
def process(scenario_a):
    return generate_process(scenario_a)


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestLoadInput:

    def test_snake_case(self, tmp_path, scenario_a):
        path = write_json(tmp_path / "spring.json", scenario_a.to_dict())
        assert IOManager.load_input(path) == scenario_a

    def test_camel_case(self, tmp_path):
        path = write_json(tmp_path / "spring.json", {
            "wireDiameter": 2, "meanDiameter": 16, "activeCoils": 8, "totalCoils": 10,
            "pitch": 4, "endType": "open", "feedSpeed": 80,
        })
        params = IOManager.load_input(path)
        assert params.mean_diameter == 16
        assert params.end_type == EndType.OPEN
        assert params.feed_speed == 80

    def test_defaults_for_optional_keys(self, tmp_path):
        path = write_json(tmp_path / "spring.json", {
            "wire_diameter": 2, "mean_diameter": 16, "active_coils": 8, "total_coils": 10, "pitch": 4,
        })
        params = IOManager.load_input(path)
        assert params.end_type == EndType.CLOSED
        assert params.feed_speed == 50.0

    def test_unknown_keys_are_ignored(self, tmp_path, scenario_a, caplog):
        path = write_json(tmp_path / "spring.json", {**scenario_a.to_dict(), "colour": "red"})
        with caplog.at_level(logging.WARNING, logger="springforming"):
            assert IOManager.load_input(path) == scenario_a
        assert "colour" in caplog.text

    def test_missing_key(self, tmp_path):
        path = write_json(tmp_path / "spring.json", {"wire_diameter": 2})
        with pytest.raises(ValueError, match="mean_diameter"):
            IOManager.load_input(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "spring.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="not valid JSON"):
            IOManager.load_input(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            IOManager.load_input(str(tmp_path / "absent.json"))


class TestTimelineCsv:

    def test_export(self, tmp_path, process):
        path = tmp_path / "timeline.csv"
        IOManager.export_timeline_csv(process, str(path))
        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 21
        assert tuple(rows[0]) == TIMELINE_COLUMNS
        assert rows[0]["phase"] == "idle"
        assert rows[-1]["phase"] == "reset"
        assert float(rows[-1]["feed"]) == pytest.approx(502.7)


class TestProcessSnapshot:

    def test_round_trip(self, tmp_path, process):
        path = str(tmp_path / "process.h5")
        IOManager.save_process(process, path)
        assert IOManager.load_process(path) == process

    def test_layout(self, tmp_path, process):
        path = str(tmp_path / "process.h5")
        IOManager.save_process(process, path)
        with h5py.File(path, "r") as f:
            assert f.attrs["total_cycle_time"] == pytest.approx(process.total_cycle_time)
            assert set(f["axes"]) == {"feed", "coiling", "pitch", "cut", "additional"}
            assert f["phases"]["intervals"].shape == (len(process.phases), 2)
            assert f["samples"]["feed"].shape == (GRID_SAMPLES,)
            np.testing.assert_allclose(f["samples"]["feed"][-1], process.spring_geometry.total_wire_length)

    def test_not_hdf5(self, tmp_path):
        path = tmp_path / "process.h5"
        path.write_text("plain text", encoding="utf-8")
        with pytest.raises(ValueError, match="not a valid HDF5"):
            IOManager.load_process(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError):
            IOManager.load_process(str(tmp_path / "absent.h5"))


class TestMalformedInput:

    VALID = {"wire_diameter": 2, "mean_diameter": 16, "active_coils": 8, "total_coils": 10, "pitch": 4}

    def test_top_level_must_be_object(self, tmp_path):
        path = write_json(tmp_path / "spring.json", [1, 2])
        with pytest.raises(ValueError, match="JSON object"):
            IOManager.load_input(path)

    def test_numeric_strings_are_coerced(self, tmp_path):
        path = write_json(tmp_path / "spring.json", {**self.VALID, "wire_diameter": "2", "feedSpeed": "80"})
        params = IOManager.load_input(path)
        assert params.wire_diameter == 2.0
        assert params.feed_speed == 80.0

    @pytest.mark.parametrize("changes", [
        {"wire_diameter": "thick"},
        {"pitch": None},
        {"end_type": "hooked"},
    ])
    def test_invalid_values(self, tmp_path, changes):
        path = write_json(tmp_path / "spring.json", {**self.VALID, **changes})
        with pytest.raises(ValueError, match="invalid value"):
            IOManager.load_input(path)
