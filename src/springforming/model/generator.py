"""
Compression Spring Process Generator
====================================
Turns spring parameters into a complete forming cycle: the phase schedule and
the keyframes of every machine axis.

Why is this file needed?
------------------------
It holds the manufacturing knowledge of the simulator (how many closed coils
go on each end, how long each phase takes at a given feed speed, when the
cutter approaches). Everything else only replays what is generated here.

Functions:
    generate_process: SpringProcessInput -> CompressionSpringProcess
"""
from __future__ import annotations

import logging
import math
from typing import List

from springforming.config import ProcessTiming, DEFAULT_TIMING
from springforming.model.process import (
    AXIS_NAMES,
    PHASE_LABELS,
    AxisId,
    AxisProfile,
    CompressionSpringProcess,
    Keyframe,
    ProcessPhase,
    ProcessPhaseData,
    SpringGeometry,
    SpringProcessInput,
)

logger = logging.getLogger(__name__)


def _validate(params: SpringProcessInput) -> None:
    if params.feed_speed <= 0:
        raise ValueError(f"Feed speed must be positive, got {params.feed_speed} mm/s.")
    for field_name in ("wire_diameter", "mean_diameter", "active_coils", "total_coils", "pitch"):
        value = getattr(params, field_name)
        if value <= 0:
            raise ValueError(f"'{field_name}' must be positive, got {value}.")
    if params.active_coils > params.total_coils:
        raise ValueError(
            f"Active coils ({params.active_coils}) exceed total coils ({params.total_coils})."
        )


def _profile(axis_id: AxisId, keyframes: List[Keyframe]) -> AxisProfile:
    profile = AxisProfile(axis_id=axis_id, name=AXIS_NAMES[axis_id], unit="mm", keyframes=tuple(keyframes))
    if not profile.is_monotonic():
        logger.warning(f"Keyframe times of axis '{axis_id}' are not monotonic: {profile.times.tolist()}")
    return profile


def generate_process(
    params: SpringProcessInput,
    timing: ProcessTiming = DEFAULT_TIMING,
) -> CompressionSpringProcess:
    """
    Generate the full production cycle of a compression spring.

    Args:
        params: Spring geometry and feed speed.
        timing: Fixed phase durations and axis positions of the machine.

    Returns:
        Immutable process snapshot.

    Raises:
        ValueError: On non-positive feed speed or geometry, or when the active
            coils exceed the total coils.
    """
    _validate(params)

    wire_per_coil = math.pi * params.mean_diameter
    closed_coils = (params.total_coils - params.active_coils) / 2
    # The leading end gets the odd closed coil
    first_closed_coils = math.ceil(closed_coils)
    end_closed_coils = math.floor(closed_coils)

    first_closed_length = wire_per_coil * first_closed_coils
    body_length = wire_per_coil * params.active_coils
    end_closed_length = wire_per_coil * end_closed_coils
    total_wire_length = first_closed_length + body_length + end_closed_length

    time_first_closed = first_closed_length / params.feed_speed
    time_body = body_length / params.feed_speed
    time_end_closed = end_closed_length / params.feed_speed

    # --- 1. PHASE SCHEDULE ---
    phases: List[ProcessPhaseData] = []
    t = 0.0

    def add_phase(name: ProcessPhase, duration: float, description: str) -> float:
        nonlocal t
        phases.append(ProcessPhaseData(
            name=name,
            display_name=PHASE_LABELS[name],
            start_time=t,
            end_time=t + duration,
            description=description,
        ))
        t += duration
        return t

    idle_end = add_phase(ProcessPhase.IDLE, timing.idle_duration, "All axes move to their safe positions")
    t1_end = add_phase(
        ProcessPhase.FIRST_CLOSED_COIL, time_first_closed,
        f"Form {first_closed_coils:.1f} closed coils, pitch close to zero",
    )
    t2_end = add_phase(
        ProcessPhase.BODY_COILS, time_body,
        f"Coil {params.active_coils:g} active coils, pitch {params.pitch:g} mm",
    )
    end_closed_end = t2_end
    if end_closed_coils > 0:
        end_closed_end = add_phase(
            ProcessPhase.END_CLOSED_COIL, time_end_closed,
            f"Form {end_closed_coils:.1f} closed end coils",
        )
    pre_cut_start = t
    add_phase(ProcessPhase.PRE_CUT, timing.pre_cut_duration, "Feed stops, cutter approaches")
    cut_end = add_phase(ProcessPhase.CUTTING, timing.cut_duration, "Cutter strokes through the wire")
    total_cycle_time = add_phase(ProcessPhase.RESET, timing.reset_duration, "All axes return to their start positions")

    # --- 2. AXIS KEYFRAMES ---
    # F axis: wire feed, stands still during cutting and reset
    feed = [
        Keyframe(0.0, 0.0),
        Keyframe(idle_end, 0.0),
        Keyframe(t1_end, first_closed_length),
        Keyframe(t2_end, first_closed_length + body_length),
    ]
    if end_closed_coils > 0:
        feed.append(Keyframe(end_closed_end, total_wire_length))
    feed.append(Keyframe(cut_end, total_wire_length))
    feed.append(Keyframe(total_cycle_time, total_wire_length))

    # C axis: engages once at the coil radius and holds until the cut is done
    coiling_target = params.mean_diameter / 2
    coiling_retracted = coiling_target + timing.coiling_retract_margin
    coiling = [
        Keyframe(0.0, coiling_retracted),
        Keyframe(idle_end, coiling_target),
        Keyframe(cut_end, coiling_target),
        Keyframe(total_cycle_time, coiling_retracted),
    ]

    # P axis: ~wire diameter per closed coil, nominal pitch per active coil
    body_pitch_start = params.wire_diameter * first_closed_coils
    body_pitch_end = body_pitch_start + params.pitch * params.active_coils
    pitch = [
        Keyframe(0.0, 0.0),
        Keyframe(idle_end, 0.0),
        Keyframe(t1_end, body_pitch_start),
        Keyframe(t2_end, body_pitch_end),
    ]
    if end_closed_coils > 0:
        pitch.append(Keyframe(end_closed_end, body_pitch_end + params.wire_diameter * end_closed_coils))
    pitch.append(Keyframe(cut_end, pitch[-1].position))
    # Rapid return to zero
    pitch.append(Keyframe(total_cycle_time, 0.0))

    # K axis
    cut_safe = timing.cut_safe_position
    cut = [
        Keyframe(0.0, cut_safe),
        Keyframe(pre_cut_start, cut_safe),
        Keyframe(pre_cut_start + timing.approach_delay, cut_safe * 0.5),
        Keyframe(cut_end - timing.approach_delay, timing.cut_active_position),
        Keyframe(cut_end, timing.cut_active_position),
        Keyframe(total_cycle_time, cut_safe),
    ]

    # A axis: shapes the leading closed coils, and the trailing ones if present
    add_safe = timing.additional_safe_position
    add_active = timing.additional_active_position
    additional = [
        Keyframe(0.0, add_safe),
        Keyframe(timing.approach_delay, add_active),
        Keyframe(t1_end, add_active),
        Keyframe(t1_end + timing.approach_delay, add_safe),
        Keyframe(t2_end - timing.approach_delay, add_safe),
        Keyframe(t2_end, add_active if end_closed_coils > 0 else add_safe),
        Keyframe(cut_end, add_safe),
        Keyframe(total_cycle_time, add_safe),
    ]

    axes = (
        _profile(AxisId.FEED, feed),
        _profile(AxisId.COILING, coiling),
        _profile(AxisId.PITCH, pitch),
        _profile(AxisId.CUT, cut),
        _profile(AxisId.ADDITIONAL, additional),
    )

    geometry = SpringGeometry(
        wire_diameter=params.wire_diameter,
        mean_diameter=params.mean_diameter,
        pitch=params.pitch,
        total_coils=params.total_coils,
        active_coils=params.active_coils,
        wire_per_coil=wire_per_coil,
        total_wire_length=total_wire_length,
    )

    logger.debug(
        f"Generated process: {len(phases)} phases, cycle {total_cycle_time:.3f} s, "
        f"wire {total_wire_length:.1f} mm ({first_closed_coils}+{params.active_coils:g}+{end_closed_coils} coils)"
    )

    return CompressionSpringProcess(
        total_cycle_time=total_cycle_time,
        phases=tuple(phases),
        axes=axes,
        spring_geometry=geometry,
    )
