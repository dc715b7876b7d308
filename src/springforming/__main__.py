"""
Command-line interface.

Generates the forming process of one spring, prints the debug timeline table
and optionally exports it.

Usage:
    $ python -m springforming --wire 2 --mean 16 --active 8 --total 10 --pitch 4
    $ python -m springforming --input spring.json --csv timeline.csv --h5 golden.h5
    $ python -m springforming --gcode
"""
import argparse
import logging
import sys
from typing import List, Optional

from springforming.config import DEFAULT_FEED_SPEED, DEFAULT_TIMELINE_STEPS
from springforming.logging_config import parse_level, setup_logging
from springforming.model.generator import generate_process
from springforming.model.gcode import build_spring_program
from springforming.model.io import IOManager, TIMELINE_COLUMNS
from springforming.model.machine import GENERIC_16_AXIS
from springforming.model.process import CompressionSpringProcess, EndType
from springforming.model.sampler import timeline_table
from springforming.model.spring import (
    PROCESS_TO_END_TYPE,
    SUS304,
    SpringParameters,
    calculate_machine_parameters,
    calculate_spring_properties,
)

logger = logging.getLogger("springforming.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="springforming",
        description="Simulate the forming cycle of a compression spring.",
    )
    parser.add_argument("--input", help="JSON file with the process input")
    parser.add_argument("--wire", type=float, default=2.0, help="wire diameter (mm)")
    parser.add_argument("--mean", type=float, default=16.0, help="mean coil diameter (mm)")
    parser.add_argument("--active", type=float, default=8, help="active coils")
    parser.add_argument("--total", type=float, default=10, help="total coils")
    parser.add_argument("--pitch", type=float, default=4.0, help="pitch (mm)")
    parser.add_argument("--end-type", choices=[e.value for e in EndType], default=EndType.CLOSED.value)
    parser.add_argument("--feed-speed", type=float, default=DEFAULT_FEED_SPEED, help="feed speed (mm/s)")
    parser.add_argument("--steps", type=int, default=DEFAULT_TIMELINE_STEPS, help="timeline table steps")
    parser.add_argument("--csv", help="export the timeline table to this CSV file")
    parser.add_argument("--h5", help="save the process snapshot to this HDF5 file")
    parser.add_argument("--gcode", action="store_true", help="print the spring calculation and a G-code preview")
    parser.add_argument("--plot", action="store_true", help="plot the axis profiles")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--log-file")
    return parser


def format_table(process: CompressionSpringProcess, step_count: int) -> List[str]:
    lines = [
        f"Cycle time: {process.total_cycle_time:.3f} s  "
        f"Wire length: {process.spring_geometry.total_wire_length:.1f} mm",
        "Phases: " + " -> ".join(p.name.value for p in process.phases),
        "",
        "".join(f"{c:>20}" if c == "phase" else f"{c:>8}" for c in TIMELINE_COLUMNS),
    ]
    for row in timeline_table(process, step_count):
        lines.append("".join(
            f"{row[c]:>20}" if c == "phase" else f"{row[c]:>8}" for c in TIMELINE_COLUMNS
        ))
    return lines


def format_summary(spring: SpringParameters) -> List[str]:
    props = calculate_spring_properties(spring, SUS304)
    machine = calculate_machine_parameters(spring, GENERIC_16_AXIS)
    return [
        f"Spring rate: {props.stiffness_n_per_mm:.3f} N/mm ({SUS304.name})",
        f"Wire length: {props.wire_length_mm:.1f} mm  Mass: {props.mass_grams:.2f} g",
        f"Max shear stress: {props.max_shear_stress_mpa:.0f} MPa",
        f"Machine ({GENERIC_16_AXIS.name}): feed {machine.feed_speed_mm_per_sec:.1f} mm/s, "
        f"coiling {machine.coiling_rpm:.0f} rpm, pitch stroke {machine.pitch_stroke_mm:.1f} mm",
    ]


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.steps < 1:
        parser.error(f"--steps must be at least 1, got {args.steps}")

    try:
        setup_logging(level=parse_level(args.log_level), log_file=args.log_file)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    try:
        if args.input:
            params = IOManager.load_input(args.input)
            spring = SpringParameters.from_process_input(params)
        else:
            spring = SpringParameters(
                wire_diameter=args.wire,
                mean_diameter=args.mean,
                outer_diameter=args.mean + args.wire,
                inner_diameter=args.mean - args.wire,
                active_coils=args.active,
                total_coils=args.total,
                pitch=args.pitch,
                end_type=PROCESS_TO_END_TYPE[EndType(args.end_type)],
            )
            params = spring.to_process_input(args.feed_speed)
        process = generate_process(params)

        print("\n".join(format_table(process, args.steps)))
        if args.gcode:
            print()
            print("\n".join(format_summary(spring)))
            print()
            print("\n".join(build_spring_program(spring)))

        if args.csv:
            IOManager.export_timeline_csv(process, args.csv, args.steps)
        if args.h5:
            IOManager.save_process(process, args.h5)
    except (OSError, ValueError) as e:
        logger.error(f"Run failed: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.plot:
        process.plot()

    return 0


if __name__ == "__main__":
    sys.exit(main())
