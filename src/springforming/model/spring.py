"""
Spring Parameters & Engineering Calculations
============================================
Defines the editable spring description and the closed-form calculations
shown next to the simulation (stiffness, mass, stress, wire path).

Why is this file needed?
------------------------
1. Parameter rules: The process generator assumes ``active_coils <=
   total_coils``. ``SpringParameters.updated`` is the one place that enforces it.
2. Calculator: Quick design checks that do not need the timeline at all.

Classes:
    SpringParameters: Geometry and design data of one spring.
    MaterialProperties: Wire material data.
    SpringCalculatedProperties: Result of ``calculate_spring_properties``.
    MachineCalculatedParameters: Result of ``calculate_machine_parameters``.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
import logging
import math
from typing import Optional, Tuple, Any, TYPE_CHECKING

import numpy as np

from springforming.model.process import EndType, SpringProcessInput

if TYPE_CHECKING:
    import numpy.typing as npt
    from springforming.model.machine import MachineLimits

logger = logging.getLogger(__name__)

PATH_STEPS_PER_TURN = 32
PATH_MIN_STEPS = 4
TARGET_CYCLE_TIME = 3.0  # s, used to estimate machine parameters


class SpringType(StrEnum):
    COMPRESSION = "compression"
    TENSION = "tension"
    TORSION = "torsion"
    VARIABLE_PITCH = "variable_pitch"
    CONICAL = "conical"


class SpringEndType(StrEnum):
    PLAIN = "plain"
    GROUND = "ground"
    CLOSED = "closed"
    CLOSED_GROUND = "closed_ground"
    HOOK_GERMAN = "hook_german"
    HOOK_ENGLISH = "hook_english"


class Hand(StrEnum):
    LEFT = "LH"
    RIGHT = "RH"


# Collapse the design end types onto what the forming process distinguishes
END_TYPE_TO_PROCESS: dict[SpringEndType, EndType] = {
    SpringEndType.PLAIN: EndType.OPEN,
    SpringEndType.HOOK_GERMAN: EndType.OPEN,
    SpringEndType.HOOK_ENGLISH: EndType.OPEN,
    SpringEndType.CLOSED: EndType.CLOSED,
    SpringEndType.GROUND: EndType.GROUND,
    SpringEndType.CLOSED_GROUND: EndType.GROUND,
}

PROCESS_TO_END_TYPE: dict[EndType, SpringEndType] = {
    EndType.OPEN: SpringEndType.PLAIN,
    EndType.CLOSED: SpringEndType.CLOSED,
    EndType.GROUND: SpringEndType.GROUND,
}


@dataclass(frozen=True)
class VariablePitchSegment:
    start_turn: float
    end_turn: float
    pitch: float  # mm

    def contains(self, turn: float) -> bool:
        return self.start_turn <= turn <= self.end_turn


@dataclass(frozen=True)
class ConicalGeometry:
    small_outer_diameter: float  # mm
    large_outer_diameter: float  # mm
    from_small_to_large: bool = True


DEFAULT_CONICAL_GEOMETRY = ConicalGeometry(small_outer_diameter=10.0, large_outer_diameter=20.0)
DEFAULT_VARIABLE_PITCH: Tuple[VariablePitchSegment, ...] = (
    VariablePitchSegment(0, 2, 3.0),
    VariablePitchSegment(2, 5, 6.0),
    VariablePitchSegment(5, 8, 4.0),
)


@dataclass(frozen=True)
class SpringParameters:
    spring_type: SpringType = SpringType.COMPRESSION
    wire_diameter: float = 2.0  # d, mm
    mean_diameter: float = 16.0  # Dm, mm
    outer_diameter: float = 18.0  # Dm + d
    inner_diameter: float = 14.0  # Dm - d
    active_coils: float = 6
    total_coils: float = 8  # including closed end coils
    pitch: float = 5.0  # mm
    free_length: float = 40.0  # mm
    hand: Hand = Hand.RIGHT
    end_type: SpringEndType = SpringEndType.CLOSED_GROUND
    variable_pitch: Tuple[VariablePitchSegment, ...] = field(default_factory=tuple)
    conical_geometry: Optional[ConicalGeometry] = None
    design_load: Optional[float] = 100.0  # N
    design_deflection: Optional[float] = 10.0  # mm
    notes: str = ""

    def updated(self, **changes: Any) -> SpringParameters:
        """
        Return a copy with ``changes`` applied and the derived values kept
        consistent:

        * active coils never exceed total coils,
        * outer/inner diameter follow mean and wire diameter,
        * switching to a conical / variable pitch spring fills in default
          geometry when none is set.
        """
        new = replace(self, **changes)

        if "active_coils" in changes or "total_coils" in changes:
            new = replace(new, active_coils=min(new.active_coils, new.total_coils))

        if "mean_diameter" in changes or "wire_diameter" in changes:
            new = replace(
                new,
                outer_diameter=new.mean_diameter + new.wire_diameter,
                inner_diameter=new.mean_diameter - new.wire_diameter,
            )

        if "spring_type" in changes:
            if new.spring_type == SpringType.CONICAL and new.conical_geometry is None:
                new = replace(new, conical_geometry=DEFAULT_CONICAL_GEOMETRY)
            if new.spring_type == SpringType.VARIABLE_PITCH and not new.variable_pitch:
                new = replace(new, variable_pitch=DEFAULT_VARIABLE_PITCH)

        return new

    def to_process_input(self, feed_speed: float) -> SpringProcessInput:
        return SpringProcessInput(
            wire_diameter=self.wire_diameter,
            mean_diameter=self.mean_diameter,
            active_coils=self.active_coils,
            total_coils=self.total_coils,
            pitch=self.pitch,
            end_type=END_TYPE_TO_PROCESS[self.end_type],
            feed_speed=feed_speed,
        )

    @staticmethod
    def from_process_input(params: SpringProcessInput) -> SpringParameters:
        """Compression spring matching the geometry of a process input."""
        return SpringParameters(
            wire_diameter=params.wire_diameter,
            mean_diameter=params.mean_diameter,
            outer_diameter=params.mean_diameter + params.wire_diameter,
            inner_diameter=params.mean_diameter - params.wire_diameter,
            active_coils=params.active_coils,
            total_coils=params.total_coils,
            pitch=params.pitch,
            end_type=PROCESS_TO_END_TYPE[params.end_type],
        )


DEFAULT_SPRING_PARAMETERS = SpringParameters()


@dataclass(frozen=True)
class MaterialProperties:
    name: str
    young_modulus: float  # E, MPa
    shear_modulus: float  # G, MPa
    density: float  # kg/m³
    allowable_shear_stress: float  # MPa
    allowable_tensile_stress: float  # MPa
    springback_factor: float  # 0..1
    recommended_safety_factor_range: Optional[Tuple[float, float]] = None


SUS304 = MaterialProperties(
    name="SUS304",
    young_modulus=193000.0,
    shear_modulus=72000.0,
    density=7850.0,
    allowable_shear_stress=600.0,
    allowable_tensile_stress=1000.0,
    springback_factor=0.1,
    recommended_safety_factor_range=(1.2, 2.0),
)


@dataclass(frozen=True)
class SpringCalculatedProperties:
    stiffness_n_per_mm: float
    wire_length_mm: float
    mass_grams: float
    max_shear_stress_mpa: float
    recommended_safety_factor: float


@dataclass(frozen=True)
class MachineCalculatedParameters:
    feed_speed_mm_per_sec: float
    coiling_rpm: float
    pitch_stroke_mm: float
    bend_angle_deg: float


def calculate_spring_properties(params: SpringParameters, material: MaterialProperties) -> SpringCalculatedProperties:
    """
    Basic performance figures of a helical compression spring.

    Stiffness uses the classic formula

        k = G d^4 / (8 D^3 n)

    with G shear modulus (MPa), d wire diameter, D mean diameter (mm) and n the
    number of active coils.
    """
    d = params.wire_diameter
    D = params.mean_diameter
    n = params.active_coils

    stiffness = (material.shear_modulus * d ** 4) / (8 * D ** 3 * n)

    wire_length = math.pi * D * params.total_coils

    cross_section = math.pi * (d / 2) ** 2  # mm²
    volume_m3 = cross_section * wire_length * 1e-9
    mass_grams = volume_m3 * material.density * 1000

    wahl = 1 + 0.5 * (d / D)
    max_shear_stress = (8 * material.allowable_shear_stress * D * wahl) / (math.pi * d ** 3)

    return SpringCalculatedProperties(
        stiffness_n_per_mm=stiffness,
        wire_length_mm=wire_length,
        mass_grams=mass_grams,
        max_shear_stress_mpa=max_shear_stress,
        recommended_safety_factor=1.0 + material.springback_factor * 2.0,
    )


def generate_spring_path(params: SpringParameters, progress: float) -> npt.NDArray[np.float64]:
    """
    Points along the wire centreline, for drawing the spring.

    Args:
        params: Spring parameters.
        progress: Fraction of the spring formed so far, clamped to [0, 1].

    Returns:
        Array of shape (N, 4) with columns x, y, z (mm) and the polar angle
        (rad). The spring axis is +Y.
    """
    clamped = min(max(progress, 0.0), 1.0)
    turns = params.total_coils * clamped
    total_steps = max(PATH_MIN_STEPS, round(turns * PATH_STEPS_PER_TURN))

    current_turn = turns * np.linspace(0.0, 1.0, total_steps + 1)

    pitch = np.full_like(current_turn, params.pitch)
    for i, turn in enumerate(current_turn):
        segment = next((s for s in params.variable_pitch if s.contains(turn)), None)
        if segment is not None:
            pitch[i] = segment.pitch

    if params.conical_geometry is not None:
        cone = params.conical_geometry
        if cone.from_small_to_large:
            start_r, end_r = cone.small_outer_diameter / 2, cone.large_outer_diameter / 2
        else:
            start_r, end_r = cone.large_outer_diameter / 2, cone.small_outer_diameter / 2
        radius = start_r + (end_r - start_r) * (current_turn / max(turns, 1.0))
    else:
        radius = np.full_like(current_turn, params.mean_diameter / 2)

    angle = current_turn * 2 * np.pi
    return np.column_stack((
        radius * np.cos(angle),
        current_turn * pitch,
        radius * np.sin(angle),
        angle,
    ))


def calculate_machine_parameters(params: SpringParameters, limits: MachineLimits) -> MachineCalculatedParameters:
    """Estimate feed speed, coiling speed etc., capped at the machine limits."""
    axial_travel = params.pitch * params.total_coils
    result = MachineCalculatedParameters(
        feed_speed_mm_per_sec=min(limits.max_feed_speed, axial_travel / TARGET_CYCLE_TIME),
        coiling_rpm=min(limits.max_coiling_rpm, (params.total_coils / TARGET_CYCLE_TIME) * 60),
        pitch_stroke_mm=min(limits.max_pitch_stroke, params.pitch),
        bend_angle_deg=min(limits.max_bend_angle, 90.0),
    )
    logger.debug(f"Machine parameters for '{limits.name}': {result}")
    return result


def apply_springback_compensation(params: SpringParameters, material: MaterialProperties) -> SpringParameters:
    """
    Shrink diameters and pitch by the spring-back factor so the released
    spring springs back to the nominal geometry.
    """
    factor = 1 + material.springback_factor
    return replace(
        params,
        mean_diameter=params.mean_diameter / factor,
        outer_diameter=params.outer_diameter / factor,
        inner_diameter=params.inner_diameter / factor,
        pitch=params.pitch / factor,
    )
