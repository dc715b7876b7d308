"""
Input/Output Manager
Loads process input from JSON, exports the debug timeline table to CSV and
stores process snapshots as HDF5 golden files.
"""
import csv
import json
import logging
import os
from importlib.metadata import version, PackageNotFoundError
from typing import Any, Dict

import h5py
import numpy as np

from springforming.config import DEFAULT_TIMELINE_STEPS
from springforming.model.process import (
    AxisId,
    AxisProfile,
    CompressionSpringProcess,
    Keyframe,
    ProcessPhase,
    ProcessPhaseData,
    SpringGeometry,
    SpringProcessInput,
)
from springforming.model.sampler import sample_grid, timeline_table

logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("springforming")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

# Keys as written by the browser front end
CAMEL_CASE_KEYS: Dict[str, str] = {
    "wireDiameter": "wire_diameter",
    "meanDiameter": "mean_diameter",
    "activeCoils": "active_coils",
    "totalCoils": "total_coils",
    "endType": "end_type",
    "feedSpeed": "feed_speed",
}

INPUT_KEYS = ("wire_diameter", "mean_diameter", "active_coils", "total_coils", "pitch")
NUMERIC_KEYS = INPUT_KEYS + ("feed_speed",)

TIMELINE_COLUMNS = ("time", "phase", "feed", "pitch", "cut", "coils")

GRID_SAMPLES = 201


class IOManager:

    @staticmethod
    def load_input(filepath: str) -> SpringProcessInput:
        logger.info(f"Loading process input from: {filepath}")
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            msg = f"File '{filepath}' is not valid JSON: {e}"
            logger.error(msg)
            raise ValueError(msg) from e

        if not isinstance(raw, dict):
            msg = f"Process input '{filepath}' must be a JSON object, got {type(raw).__name__}."
            logger.error(msg)
            raise ValueError(msg)

        data: Dict[str, Any] = {CAMEL_CASE_KEYS.get(k, k): v for k, v in raw.items()}
        missing = [k for k in INPUT_KEYS if k not in data]
        if missing:
            msg = f"Process input '{filepath}' is missing: {', '.join(missing)}"
            logger.error(msg)
            raise ValueError(msg)

        known = set(INPUT_KEYS) | {"end_type", "feed_speed"}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown input keys: {unknown}")

        values = {k: v for k, v in data.items() if k in known}
        try:
            for key in NUMERIC_KEYS:
                if key in values:
                    values[key] = float(values[key])
            return SpringProcessInput.from_dict(values)
        except (TypeError, ValueError) as e:
            msg = f"Process input '{filepath}' has an invalid value: {e}"
            logger.error(msg)
            raise ValueError(msg) from e

    @staticmethod
    def export_timeline_csv(
        process: CompressionSpringProcess,
        filepath: str,
        step_count: int = DEFAULT_TIMELINE_STEPS,
    ) -> None:
        rows = timeline_table(process, step_count)
        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=TIMELINE_COLUMNS)
            writer.writeheader()
            writer.writerows(rows)
        logger.info(f"Timeline table ({len(rows)} rows) exported to: {filepath}")

    @staticmethod
    def save_process(process: CompressionSpringProcess, filepath: str) -> None:
        logger.info(f"Saving process to: {filepath}")
        try:
            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION
                f.attrs["total_cycle_time"] = process.total_cycle_time

                # --- 1. GEOMETRY ---
                grp_geo = f.create_group("spring_geometry")
                for key, val in vars(process.spring_geometry).items():
                    grp_geo.attrs[key] = val

                # --- 2. PHASES ---
                grp_phases = f.create_group("phases")
                grp_phases.attrs["names"] = json.dumps([p.name.value for p in process.phases])
                grp_phases.attrs["display_names"] = json.dumps([p.display_name for p in process.phases])
                grp_phases.attrs["descriptions"] = json.dumps([p.description for p in process.phases])
                grp_phases.create_dataset(
                    "intervals",
                    data=np.array([[p.start_time, p.end_time] for p in process.phases], dtype=float),
                )

                # --- 3. AXIS KEYFRAMES (time, position) ---
                grp_axes = f.create_group("axes")
                for profile in process.axes:
                    ds = grp_axes.create_dataset(
                        profile.axis_id.value,
                        data=np.column_stack((profile.times, profile.positions)),
                    )
                    ds.attrs["name"] = profile.name
                    ds.attrs["unit"] = profile.unit

                # --- 4. SAMPLED GRID (for regression comparisons) ---
                grp_grid = f.create_group("samples")
                grid = sample_grid(process, np.linspace(0.0, process.total_cycle_time, GRID_SAMPLES))
                for key, values in grid.items():
                    grp_grid.create_dataset(key, data=values, compression="gzip")

            logger.info(f"Process saved to: {filepath}")

        except Exception as e:
            logger.exception(f"Failed to save process: {e}")
            raise e

    @staticmethod
    def load_process(filepath: str) -> CompressionSpringProcess:
        logger.info(f"Loading process from: {filepath}")
        if not os.path.exists(filepath) or not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ValueError(msg)

        with h5py.File(filepath, "r") as f:
            # HDF5 returns numpy scalars, convert to native python
            geometry = SpringGeometry(**{
                key: float(val) for key, val in f["spring_geometry"].attrs.items()
            })

            grp_phases = f["phases"]
            names = json.loads(grp_phases.attrs["names"])
            display_names = json.loads(grp_phases.attrs["display_names"])
            descriptions = json.loads(grp_phases.attrs["descriptions"])
            intervals = grp_phases["intervals"][()]
            phases = tuple(
                ProcessPhaseData(
                    name=ProcessPhase(name),
                    display_name=display,
                    start_time=float(start),
                    end_time=float(end),
                    description=description,
                )
                for name, display, description, (start, end)
                in zip(names, display_names, descriptions, intervals)
            )

            axes = []
            for axis_id in AxisId:
                if axis_id.value not in f["axes"]:
                    logger.warning(f"Axis '{axis_id}' missing in '{filepath}'")
                    continue
                ds = f["axes"][axis_id.value]
                axes.append(AxisProfile(
                    axis_id=axis_id,
                    name=str(ds.attrs["name"]),
                    unit=str(ds.attrs["unit"]),
                    keyframes=tuple(Keyframe(float(t), float(p)) for t, p in ds[()]),
                ))

            process = CompressionSpringProcess(
                total_cycle_time=float(f.attrs["total_cycle_time"]),
                phases=phases,
                axes=tuple(axes),
                spring_geometry=geometry,
            )

        logger.debug(f"Loaded process with {len(process.phases)} phases and {len(process.axes)} axes.")
        return process
