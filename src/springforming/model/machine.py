"""
Machine Layout Configuration
============================
Physical arrangement of a jaw-type spring forming machine: where each jaw sits,
which way it strokes and which tool it carries.

Why is this file needed?
------------------------
The layout is consumed by the renderers only. The timeline engine never reads
it, so another machine can be swapped in without touching the process code.

Classes:
    ToolDefinition: Tool mounted on a jaw.
    JawConfig: One linear jaw.
    MachineLayout: All jaws plus the forming centre and feed exit.
    MachineLimits: Axis limits used by the machine parameter estimate.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
import math
from typing import Dict, Optional, Tuple

import numpy as np

Vector3 = Tuple[float, float, float]


class ToolKind(StrEnum):
    IDLE = "idle"
    COILING_PIN = "coiling_pin"
    PITCH_TOOL = "pitch_tool"
    CUTTING_TOOL = "cutting_tool"
    GUIDE = "guide"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ToolDefinition:
    kind: ToolKind
    name: str
    tip_offset: Vector3 = (0.0, 0.0, 0.0)
    pin_radius: Optional[float] = None  # mm, coiling pins
    blade_width: Optional[float] = None  # mm, cutters
    description: str = ""


TOOL_LIBRARY: Dict[ToolKind, ToolDefinition] = {
    ToolKind.COILING_PIN: ToolDefinition(
        ToolKind.COILING_PIN, "Standard Coiling Pin", pin_radius=8.0,
        description="Sets the coil diameter",
    ),
    ToolKind.PITCH_TOOL: ToolDefinition(
        ToolKind.PITCH_TOOL, "Pitch Tool",
        description="Sets the coil pitch",
    ),
    ToolKind.CUTTING_TOOL: ToolDefinition(
        ToolKind.CUTTING_TOOL, "Cutting Tool", blade_width=2.0,
        description="Cuts the wire",
    ),
    ToolKind.GUIDE: ToolDefinition(
        ToolKind.GUIDE, "Wire Guide",
        description="Supports the wire",
    ),
    ToolKind.IDLE: ToolDefinition(ToolKind.IDLE, "Empty"),
}


def get_tool(kind: ToolKind | str) -> ToolDefinition:
    """Tool definition for ``kind``; kinds without a library entry resolve to an empty slot."""
    return TOOL_LIBRARY.get(ToolKind(kind), TOOL_LIBRARY[ToolKind.IDLE])


@dataclass(frozen=True)
class JawConfig:
    jaw_id: str
    base_position: Vector3  # mm
    base_direction: Vector3  # unit vector towards the forming centre
    stroke_min: float = 0.0
    stroke_max: float = 25.0
    default_home: float = 0.0
    mounted_tool: ToolKind = ToolKind.GUIDE

    def clamp_stroke(self, stroke: float) -> float:
        return min(max(stroke, self.stroke_min), self.stroke_max)

    def tip_position(self, stroke: float) -> np.ndarray:
        """Jaw tip position for a stroke value, clamped to the stroke range."""
        base = np.asarray(self.base_position, dtype=float)
        direction = np.asarray(self.base_direction, dtype=float)
        return base + direction * self.clamp_stroke(stroke)


@dataclass(frozen=True)
class MachineLayout:
    machine_id: str
    name: str
    forming_center: Vector3
    feed_exit: Vector3
    feed_direction: Vector3
    jaws: Tuple[JawConfig, ...]

    def jaw(self, jaw_id: str) -> Optional[JawConfig]:
        for jaw in self.jaws:
            if jaw.jaw_id == jaw_id:
                return jaw
        return None


EIGHT_JAW_TOOLS: Dict[str, ToolKind] = {
    "J1": ToolKind.COILING_PIN,
    "J2": ToolKind.PITCH_TOOL,
    "J3": ToolKind.CUTTING_TOOL,
    "J4": ToolKind.GUIDE,
    "J5": ToolKind.GUIDE,
    "J6": ToolKind.GUIDE,
    "J7": ToolKind.GUIDE,
    "J8": ToolKind.GUIDE,
}


def build_eight_jaw_machine(radius: float = 40.0) -> MachineLayout:
    """
    Virtual eight-jaw spring former.

    Jaws sit at 45° steps in the X-Y plane at ``radius`` from the forming
    centre (origin) and stroke towards it. Wire enters from -Z, the spring
    grows along +Z::

                 J3 (90°)
                  │
        J4 (135°) │  J2 (45°)
                ╲ │ ╱
       J5 ────────●──────── J1 (0°)
                ╱ │ ╲
        J6 (225°) │  J8 (315°)
                  │
                 J7 (270°)
    """
    jaws = []
    for index in range(8):
        angle = math.radians(index * 45.0)
        jaw_id = f"J{index + 1}"
        jaws.append(JawConfig(
            jaw_id=jaw_id,
            base_position=(radius * math.cos(angle), radius * math.sin(angle), 0.0),
            base_direction=(-math.cos(angle), -math.sin(angle), 0.0),
            mounted_tool=EIGHT_JAW_TOOLS[jaw_id],
        ))

    return MachineLayout(
        machine_id="virtual-eight-jaw",
        name="Virtual Eight-Jaw Spring Former",
        forming_center=(0.0, 0.0, 0.0),
        feed_exit=(0.0, 0.0, -50.0),
        feed_direction=(0.0, 0.0, 1.0),
        jaws=tuple(jaws),
    )


@dataclass(frozen=True)
class MachineLimits:
    name: str
    max_feed_speed: float  # mm/s
    max_coiling_rpm: float
    max_pitch_stroke: float  # mm
    max_bend_angle: float  # deg
    max_acceleration: float  # mm/s²


GENERIC_16_AXIS = MachineLimits(
    name="Generic-16Axis",
    max_feed_speed=2000.0,
    max_coiling_rpm=1200.0,
    max_pitch_stroke=50.0,
    max_bend_angle=180.0,
    max_acceleration=5000.0,
)
