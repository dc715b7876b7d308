from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, Optional

import numpy as np
from PySide6.QtCore import QObject, Signal

from springforming.model.generator import generate_process
from springforming.model.machine import MachineLayout, build_eight_jaw_machine
from springforming.model.process import AxisPositions, CompressionSpringProcess, SpringProcessInput
from springforming.model.recipe import JawId, SpringRecipe, sample_all_jaws, sample_jaw
from springforming.model.sampler import clamp_time, sample_axis_positions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimelineFrame:
    """Playback time and the axis positions sampled at that time, always published together."""
    current_time: float = 0.0
    axis_positions: Optional[AxisPositions] = None


class TimelineStore(QObject):
    """
    Owner of the active forming process and its playback state.

    One instance per simulation; renderers and status panels subscribe to the
    signals and never write the state themselves.
    """
    process_changed = Signal(object)   # CompressionSpringProcess
    frame_changed = Signal(object)     # TimelineFrame
    playing_changed = Signal(bool)
    speed_changed = Signal(float)
    cycle_completed = Signal(int)      # number of completed cycles
    recipe_changed = Signal(object)    # SpringRecipe or None

    def __init__(self, machine: Optional[MachineLayout] = None) -> None:
        super().__init__()
        self._process: Optional[CompressionSpringProcess] = None
        self._frame = TimelineFrame()
        self._playing = False
        self._speed = 1.0
        self._cycle_count = 0
        self._recipe: Optional[SpringRecipe] = None
        self._machine = machine if machine is not None else build_eight_jaw_machine()

    # --- Read access ---
    @property
    def process(self) -> Optional[CompressionSpringProcess]:
        return self._process

    @property
    def frame(self) -> TimelineFrame:
        return self._frame

    @property
    def current_time(self) -> float:
        return self._frame.current_time

    @property
    def axis_positions(self) -> Optional[AxisPositions]:
        return self._frame.axis_positions

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def speed_multiplier(self) -> float:
        return self._speed

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @property
    def progress(self) -> float:
        if self._process is None:
            return 0.0
        return self._frame.current_time / self._process.total_cycle_time

    @property
    def current_recipe(self) -> Optional[SpringRecipe]:
        return self._recipe

    @property
    def machine(self) -> MachineLayout:
        return self._machine

    @property
    def jaw_positions(self) -> Dict[JawId, float]:
        """Stroke of every jaw of the current recipe at the current time."""
        return sample_all_jaws(self._recipe, self._frame.current_time)

    def jaw_tip_positions(self) -> Dict[str, np.ndarray]:
        """Tool tip of every machine jaw, driven by the current recipe."""
        t = self._frame.current_time
        return {
            jaw.jaw_id: jaw.tip_position(sample_jaw(self._recipe, jaw.jaw_id, t))
            for jaw in self._machine.jaws
        }

    # --- Mutations ---
    def set_current_recipe(self, recipe: Optional[SpringRecipe]) -> None:
        self._recipe = recipe
        logger.info(f"Recipe set: {recipe.name if recipe is not None else None}")
        self.recipe_changed.emit(recipe)

    def _commit_frame(self, time: float) -> None:
        positions = sample_axis_positions(self._process, time) if self._process is not None else None
        self._frame = TimelineFrame(current_time=time, axis_positions=positions)
        self.frame_changed.emit(self._frame)

    def generate_process(self, params: SpringProcessInput) -> CompressionSpringProcess:
        """
        Regenerate the process for new spring parameters and rewind to t=0.
        Must be called by the owner whenever the spring parameters change.
        """
        process = generate_process(params)
        # Process and its t=0 frame are replaced before anyone is notified
        self._process = process
        self._frame = TimelineFrame(current_time=0.0, axis_positions=sample_axis_positions(process, 0.0))
        self._cycle_count = 0
        logger.info(
            f"Process loaded: cycle {process.total_cycle_time:.2f} s, "
            f"{len(process.phases)} phases, wire {process.spring_geometry.total_wire_length:.1f} mm"
        )
        self.process_changed.emit(process)
        self.frame_changed.emit(self._frame)
        return process

    def set_time(self, time: float) -> None:
        if self._process is None:
            return
        self._commit_frame(clamp_time(self._process, time))

    def play(self) -> None:
        self._set_playing(True)

    def pause(self) -> None:
        self._set_playing(False)

    def _set_playing(self, playing: bool) -> None:
        if playing != self._playing:
            self._playing = playing
            self.playing_changed.emit(playing)

    def set_speed_multiplier(self, speed: float) -> None:
        if speed <= 0:
            raise ValueError(f"Playback speed must be positive, got {speed}.")
        self._speed = float(speed)
        self.speed_changed.emit(self._speed)

    def reset(self) -> None:
        self.pause()
        self._commit_frame(0.0)

    def tick(self, delta_time: float) -> None:
        """
        Advance playback by one animation frame.

        Args:
            delta_time: Wall time since the previous frame in seconds.
                Non-positive deltas are ignored.
        """
        if not self._playing or self._process is None or delta_time <= 0:
            return

        new_time = self._frame.current_time + delta_time * self._speed
        wrapped = new_time >= self._process.total_cycle_time
        if wrapped:
            # Looping playback restarts from idle
            new_time = 0.0
            self._cycle_count += 1

        self._commit_frame(new_time)

        if wrapped:
            logger.debug(f"Cycle {self._cycle_count} completed.")
            self.cycle_completed.emit(self._cycle_count)
