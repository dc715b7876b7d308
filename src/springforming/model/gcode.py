from __future__ import annotations

import math
from typing import List

from springforming.model.spring import SpringParameters


def build_spring_program(params: SpringParameters) -> List[str]:
    """
    Generic G-code preview of a spring program.

    Only illustrative: one linear move per active coil at the outer radius,
    then spindle stop, cut and rewind.
    """
    outer_diameter = params.mean_diameter + params.wire_diameter

    lines = [
        "%SPRING-PROGRAM",
        f"; TYPE={params.spring_type.value}",
        f"; OD={outer_diameter:.3f} Dm={params.mean_diameter:.3f} WIRE={params.wire_diameter:.3f} "
        f"N={params.active_coils:g} PITCH={params.pitch:.3f}",
        "G90 G21",
        "G92 X0 Y0 Z0 ; reference point",
        "",
        "; --- feed and coiling ---",
        "M03 ; coiling spindle on",
        "G01 F1000 ; feed rate",
        "",
    ]

    turns = max(params.active_coils, 1)
    for i in range(math.ceil(turns)):
        lines.append(f"G01 X{outer_diameter / 2:.3f} Z{i * params.pitch:.3f}")

    lines += [
        "",
        "; --- finish and cut ---",
        "M05 ; spindle stop",
        "M10 ; cut",
        "G00 X0 Z0",
        "M30",
    ]
    return lines
