"""
Spring Recipes
==============
A recipe bundles spring parameters with hand-authored jaw motion profiles, so
that the jaws of a jaw-type machine and the spring share one timeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Dict, Optional, Tuple

from springforming.model.interpolation import interpolate
from springforming.model.process import Keyframe
from springforming.model.spring import SpringParameters, SpringEndType, SpringType


class JawId(StrEnum):
    J1 = "J1"
    J2 = "J2"
    J3 = "J3"
    J4 = "J4"
    J5 = "J5"
    J6 = "J6"
    J7 = "J7"
    J8 = "J8"
    FEED = "FEED"


@dataclass(frozen=True)
class JawProfile:
    axis_id: JawId
    keyframes: Tuple[Keyframe, ...]
    name: str = ""
    unit: str = "mm"


@dataclass(frozen=True)
class SpringRecipe:
    recipe_id: str
    name: str
    spring_params: SpringParameters
    jaw_profiles: Tuple[JawProfile, ...] = field(default_factory=tuple)
    total_cycle_time: Optional[float] = None
    description: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def profile(self, jaw_id: JawId | str) -> Optional[JawProfile]:
        for profile in self.jaw_profiles:
            if profile.axis_id == jaw_id:
                return profile
        return None


def sample_jaw(recipe: Optional[SpringRecipe], jaw_id: JawId | str, time: float) -> float:
    """Position of one jaw at ``time``; 0.0 without a recipe or without a profile for the jaw."""
    if recipe is None:
        return 0.0
    profile = recipe.profile(jaw_id)
    if profile is None:
        return 0.0
    return interpolate(profile.keyframes, time)


def sample_all_jaws(recipe: Optional[SpringRecipe], time: float) -> Dict[JawId, float]:
    return {jaw_id: sample_jaw(recipe, jaw_id, time) for jaw_id in JawId}


def _keyframes(*pairs: Tuple[float, float]) -> Tuple[Keyframe, ...]:
    return tuple(Keyframe(t, p) for t, p in pairs)


# Reference 10 s cycle:
#   0.0-0.5 idle, 0.5-2.0 first closed coils, 2.0-7.0 body,
#   7.0-8.5 end closed coils, 8.5-9.0 pre-cut, 9.0-9.5 cut, 9.5-10.0 reset
SAMPLE_COMPRESSION_RECIPE = SpringRecipe(
    recipe_id="sample-compression-001",
    name="Sample Compression Spring",
    description="A standard compression spring with 5 active coils, 2mm wire, 20mm mean diameter",
    spring_params=SpringParameters(
        spring_type=SpringType.COMPRESSION,
        wire_diameter=2.0,
        mean_diameter=20.0,
        outer_diameter=22.0,
        inner_diameter=18.0,
        active_coils=5,
        total_coils=7,
        pitch=4.0,
        free_length=28.0,
        end_type=SpringEndType.CLOSED_GROUND,
        design_load=None,
        design_deflection=None,
    ),
    jaw_profiles=(
        JawProfile(JawId.FEED, _keyframes(
            (0.0, 0), (0.5, 0), (2.0, 15), (7.0, 95), (8.5, 110), (9.0, 110), (10.0, 110),
        ), name="Wire Feed"),
        JawProfile(JawId.J1, _keyframes(
            (0.0, 0), (0.3, 8), (0.5, 10), (8.5, 10), (9.0, 5), (9.5, 0), (10.0, 0),
        ), name="Coiling Pin"),
        # Pitch tool stays at the outer edge, never enters the spring
        JawProfile(JawId.J2, _keyframes(
            (0.0, 0), (0.5, 15), (8.5, 15), (9.0, 0), (10.0, 0),
        ), name="Pitch Tool"),
        JawProfile(JawId.J3, _keyframes(
            (0.0, 0), (8.5, 0), (9.0, 20), (9.2, 28), (9.4, 0), (10.0, 0),
        ), name="Cutting Tool"),
    ),
    total_cycle_time=10.0,
    created_at="2024-01-01T00:00:00Z",
    updated_at="2024-01-01T00:00:00Z",
)
