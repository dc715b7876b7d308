"""
Configuration & Process Constants
=================================
This module serves as the central registry for the timing and position
constants of the forming cycle.

Why is this file needed?
------------------------
1. Single source: The generator, the store and the CLI all read the same
   defaults instead of scattering magic numbers (0.1 s, 30 mm, ...) around.
2. Swappable: A different machine can pass its own ``ProcessTiming`` to the
   generator without touching the generator code.

Exports:
    ProcessTiming: Frozen dataclass with all phase durations and axis positions.
    DEFAULT_TIMING: Reference values of the 4+1 axis compression spring machine.
    DEFAULT_TIMELINE_STEPS (int): Default row count of the debug timeline table.
    DEFAULT_FRAME_INTERVAL_MS (int): Default playback timer interval.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class ProcessTiming:
    # Fixed phase durations (s)
    idle_duration: float = 0.1
    pre_cut_duration: float = 0.1
    cut_duration: float = 0.3
    reset_duration: float = 0.2

    # Approach delays (s)
    approach_delay: float = 0.1

    # C axis: retract margin over the coil radius (mm)
    coiling_retract_margin: float = 10.0

    # K axis (mm)
    cut_safe_position: float = 30.0
    cut_active_position: float = 0.0

    # A axis (mm)
    additional_safe_position: float = 20.0
    additional_active_position: float = 5.0


DEFAULT_TIMING = ProcessTiming()

DEFAULT_TIMELINE_STEPS: int = 20
DEFAULT_FRAME_INTERVAL_MS: int = 16
DEFAULT_FEED_SPEED: float = 50.0  # mm/s
