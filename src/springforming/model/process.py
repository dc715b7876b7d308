"""
Forming Process Data Model
==========================
Defines the data structures shared by the generator, the sampler and the
timeline store.

Why is this file needed?
------------------------
1. Contract: Renderers and status panels only ever see these types, never the
   generator internals.
2. Immutability: A ``CompressionSpringProcess`` is a frozen snapshot. When the
   spring parameters change, a new one is generated and the old one dropped.

Machine model (4+1 axes):
    F (feed)       - wire feed, length of wire pushed out
    C (coiling)    - coiling tool, sets the coil diameter
    P (pitch)      - pitch tool, axial displacement
    K (cut)        - cutter
    A (additional) - end coil shaping arm
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import StrEnum
from typing import Dict, Optional, Tuple, Any

import numpy as np
import matplotlib.pyplot as plt


class ProcessPhase(StrEnum):
    IDLE = "idle"
    FIRST_CLOSED_COIL = "first_closed_coil"
    BODY_COILS = "body_coils"
    END_CLOSED_COIL = "end_closed_coil"
    PRE_CUT = "pre_cut"
    CUTTING = "cutting"
    DONE = "done"
    RESET = "reset"


class AxisId(StrEnum):
    FEED = "feed"
    COILING = "coiling"
    PITCH = "pitch"
    CUT = "cut"
    ADDITIONAL = "additional"


class EndType(StrEnum):
    OPEN = "open"
    CLOSED = "closed"
    GROUND = "ground"


# Human readable phase names for status displays
PHASE_LABELS: Dict[ProcessPhase, str] = {
    ProcessPhase.IDLE: "Idle",
    ProcessPhase.FIRST_CLOSED_COIL: "First closed coils",
    ProcessPhase.BODY_COILS: "Body coils",
    ProcessPhase.END_CLOSED_COIL: "End closed coils",
    ProcessPhase.PRE_CUT: "Pre-cut",
    ProcessPhase.CUTTING: "Cutting",
    ProcessPhase.DONE: "Done",
    ProcessPhase.RESET: "Reset",
}

AXIS_NAMES: Dict[AxisId, str] = {
    AxisId.FEED: "F axis - wire feed",
    AxisId.COILING: "C axis - coiling tool",
    AxisId.PITCH: "P axis - pitch tool",
    AxisId.CUT: "K axis - cutter",
    AxisId.ADDITIONAL: "A axis - additional arm",
}


@dataclass(frozen=True)
class SpringProcessInput:
    """
    Input of the process generator.

    ``active_coils <= total_coils`` is guaranteed by the parameter store
    (see ``SpringParameters.updated``).
    """
    wire_diameter: float  # mm
    mean_diameter: float  # mm
    active_coils: float
    total_coils: float
    pitch: float  # mm
    end_type: EndType = EndType.CLOSED
    feed_speed: float = 50.0  # mm/s

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["end_type"] = self.end_type.value
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> SpringProcessInput:
        values = dict(data)
        values["end_type"] = EndType(values.get("end_type", EndType.CLOSED))
        return SpringProcessInput(**values)


@dataclass(frozen=True)
class Keyframe:
    time: float  # s
    position: float  # mm
    velocity: Optional[float] = None


@dataclass(frozen=True)
class AxisProfile:
    """Motion curve of a single axis."""
    axis_id: AxisId
    name: str
    unit: str
    keyframes: Tuple[Keyframe, ...]

    @property
    def times(self) -> np.ndarray:
        return np.array([k.time for k in self.keyframes], dtype=float)

    @property
    def positions(self) -> np.ndarray:
        return np.array([k.position for k in self.keyframes], dtype=float)

    def is_monotonic(self) -> bool:
        """True if keyframe times never decrease."""
        return bool(np.all(np.diff(self.times) >= 0.0))


@dataclass(frozen=True)
class ProcessPhaseData:
    name: ProcessPhase
    display_name: str
    start_time: float
    end_time: float
    description: str

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def contains(self, time: float) -> bool:
        """Right-open interval test: [start_time, end_time)."""
        return self.start_time <= time < self.end_time


@dataclass(frozen=True)
class SpringGeometry:
    wire_diameter: float
    mean_diameter: float
    pitch: float
    total_coils: float
    active_coils: float
    wire_per_coil: float  # mm of wire per turn
    total_wire_length: float  # mm


@dataclass(frozen=True)
class CompressionSpringProcess:
    """Complete production cycle of one compression spring."""
    total_cycle_time: float
    phases: Tuple[ProcessPhaseData, ...]
    axes: Tuple[AxisProfile, ...]
    spring_geometry: SpringGeometry

    def axis(self, axis_id: AxisId | str) -> Optional[AxisProfile]:
        for profile in self.axes:
            if profile.axis_id == axis_id:
                return profile
        return None

    def phase(self, name: ProcessPhase | str) -> Optional[ProcessPhaseData]:
        for phase in self.phases:
            if phase.name == name:
                return phase
        return None

    @property
    def phase_names(self) -> Tuple[ProcessPhase, ...]:
        return tuple(p.name for p in self.phases)

    def plot(self) -> None:
        """
        Plot all axis profiles over the cycle, with the phases as background bands.
        """
        plt.rcParams["figure.constrained_layout.use"] = True
        fig, ax_list = plt.subplots(len(self.axes), 1, figsize=(8, 2 * len(self.axes)), sharex=True)
        ax_list = np.atleast_1d(ax_list)

        for ax, profile in zip(ax_list, self.axes):
            for i, phase in enumerate(self.phases):
                if i % 2 == 0 and phase.duration > 0:
                    ax.axvspan(phase.start_time, phase.end_time, color='gray', alpha=0.1, lw=0)
            ax.plot(profile.times, profile.positions, 'b-o', lw=1.5, ms=3)
            ax.set_ylabel(f"{profile.axis_id.value} ({profile.unit})")
            ax.grid(visible=True, which='major', axis='both', linestyle='-', color='gray', lw=0.5)
            ax.set_title(profile.name, fontsize=9, loc='left')

        ax_list[-1].set_xlabel("Time (s)")
        ax_list[-1].set_xlim(0, self.total_cycle_time)
        fig.suptitle(f"Forming cycle {self.total_cycle_time:.2f} s")
        plt.show()


@dataclass(frozen=True)
class AxisPositions:
    """Resolved axis positions at one instant (all mm)."""
    feed: float
    coiling: float
    pitch: float
    cut: float
    additional: float
    current_phase: ProcessPhase
    current_coils: float

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["current_phase"] = self.current_phase.value
        return data
