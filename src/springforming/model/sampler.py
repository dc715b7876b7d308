from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, TYPE_CHECKING

import numpy as np

from springforming.config import DEFAULT_TIMELINE_STEPS
from springforming.model.interpolation import interpolate, interpolate_many
from springforming.model.process import (
    AxisId,
    AxisPositions,
    CompressionSpringProcess,
    ProcessPhase,
)

if TYPE_CHECKING:
    import numpy.typing as npt


def clamp_time(process: CompressionSpringProcess, time: float) -> float:
    return max(0.0, min(time, process.total_cycle_time))


def round_half_up(value: float, digits: int) -> float:
    """
    Round ``value`` to ``digits`` decimals, exact halves away from zero.

    Works on the exact binary value, so 0.125 rounds to 0.13 while 1.005
    (stored slightly below) rounds to 1.0. The builtin ``round(0.125, 2)`` gives 0.12.
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def phase_at(process: CompressionSpringProcess, time: float) -> ProcessPhase:
    """
    Phase whose [start, end) interval holds ``time``. A boundary time belongs
    to the next phase; the end of the cycle belongs to ``reset``.
    """
    t = clamp_time(process, time)
    if process.phases and t >= process.phases[-1].end_time:
        return ProcessPhase.RESET
    for phase in process.phases:
        if phase.contains(t):
            return phase.name
    return ProcessPhase.IDLE


def axis_position(process: CompressionSpringProcess, axis_id: AxisId | str, time: float) -> float:
    """Position of a single axis at ``time`` (0.0 if the process has no such axis)."""
    profile = process.axis(axis_id)
    if profile is None:
        return 0.0
    return interpolate(profile.keyframes, clamp_time(process, time))


def sample_axis_positions(process: CompressionSpringProcess, time: float) -> AxisPositions:
    """
    Resolve every axis of the process at a given time.

    Args:
        process: Generated forming process.
        time: Time in seconds, clamped to [0, total_cycle_time].

    Returns:
        Snapshot of all axis positions, the current phase and the number of
        coils formed so far (derived from the fed wire length).
    """
    t = clamp_time(process, time)
    feed = axis_position(process, AxisId.FEED, t)

    return AxisPositions(
        feed=feed,
        coiling=axis_position(process, AxisId.COILING, t),
        pitch=axis_position(process, AxisId.PITCH, t),
        cut=axis_position(process, AxisId.CUT, t),
        additional=axis_position(process, AxisId.ADDITIONAL, t),
        current_phase=phase_at(process, t),
        current_coils=feed / process.spring_geometry.wire_per_coil,
    )


def timeline_table(
    process: CompressionSpringProcess,
    step_count: int = DEFAULT_TIMELINE_STEPS,
) -> List[Dict[str, Any]]:
    """
    Debug export of the process: ``step_count + 1`` rows evenly spaced over
    the cycle with time, phase, feed, pitch, cut and coil count.
    """
    if step_count < 1:
        raise ValueError(f"Step count must be at least 1, got {step_count}.")

    table = []
    dt = process.total_cycle_time / step_count
    for i in range(step_count + 1):
        t = i * dt
        pos = sample_axis_positions(process, t)
        table.append({
            "time": round_half_up(t, 2),
            "phase": pos.current_phase.value,
            "feed": round_half_up(pos.feed, 1),
            "pitch": round_half_up(pos.pitch, 1),
            "cut": round_half_up(pos.cut, 1),
            "coils": round_half_up(pos.current_coils, 2),
        })
    return table


def sample_grid(process: CompressionSpringProcess, times: Iterable[float]) -> Dict[str, npt.NDArray[np.float64]]:
    """All axis positions on an arbitrary time grid, one array per axis id."""
    t = np.clip(np.asarray(list(times), dtype=float), 0.0, process.total_cycle_time)
    grid = {"time": t}
    for profile in process.axes:
        grid[profile.axis_id.value] = interpolate_many(profile.keyframes, t)
    return grid
