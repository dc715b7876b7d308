from __future__ import annotations

from typing import Iterable, Sequence, Tuple, TYPE_CHECKING

import numpy as np

from springforming.model.process import Keyframe

if TYPE_CHECKING:
    import numpy.typing as npt


def interpolate(keyframes: Sequence[Keyframe], time: float) -> float:
    """
    Linear interpolation of an axis position over its keyframes.

    Positions are clamped to the first/last keyframe outside the keyframe
    range.

    Args:
        keyframes: Keyframes ordered by time.
        time: Time in seconds.

    Returns:
        Position at ``time``; 0.0 for an empty keyframe sequence.
    """
    if not keyframes:
        return 0.0

    first = keyframes[0]
    last = keyframes[-1]
    if time <= first.time:
        return first.position
    if time >= last.time:
        return last.position

    for k0, k1 in zip(keyframes[:-1], keyframes[1:]):
        if k0.time <= time < k1.time:
            span = k1.time - k0.time
            if span <= 0:
                return k0.position
            ratio = (time - k0.time) / span
            return k0.position + ratio * (k1.position - k0.position)

    # Non-monotonic keyframe times
    return last.position


def interpolate_many(keyframes: Sequence[Keyframe], times: Iterable[float]) -> npt.NDArray[np.float64]:
    """
    Vectorised form of ``interpolate`` for plotting and table export, with the
    same edge rules: a time repeated inside the range resolves to the later
    keyframe, while the first and last keyframe times clamp to the first and
    last keyframe.
    """
    return np.fromiter((interpolate(keyframes, float(t)) for t in times), dtype=np.float64)


def profile_time_range(keyframes: Sequence[Keyframe]) -> Tuple[float, float]:
    if not keyframes:
        return 0.0, 0.0
    return keyframes[0].time, keyframes[-1].time


def profile_position_range(keyframes: Sequence[Keyframe]) -> Tuple[float, float]:
    if not keyframes:
        return 0.0, 0.0
    positions = [k.position for k in keyframes]
    return min(positions), max(positions)
