"""Command that prints a summary of an Aseprite file."""

from __future__ import annotations

import sys

from .aseprite import AsepriteError, AsepriteFile, Direction, load_file

PROG = "aseprite-inspector"

_DIRECTION_NAMES = {
    Direction.FORWARD: "Forward",
    Direction.REVERSE: "Reverse",
    Direction.PING_PONG: "Ping-pong",
    Direction.PING_PONG_REVERSE: "Ping-pong Reverse",
}


def direction_name(direction: int) -> str:
    """Human-readable name of a tag direction."""
    name = _DIRECTION_NAMES.get(direction)
    return name if name is not None else f"Unknown ({direction})"


def repeat_name(repeat: int) -> str:
    """Human-readable description of a tag repeat count."""
    if repeat == 0:
        return "Infinite"
    if repeat == 1:
        return "Once"
    return f"{repeat} times"


def format_report(filename: str, ase_file: AsepriteFile) -> str:
    """Build the text report printed for one file."""
    header = ase_file.header
    lines = [
        f"Inspecting: {filename}",
        "-" * (len(filename) + 12),
        f"Dimensions:  {header.width}x{header.height}",
        f"Frames:      {header.frames}",
        f"Color Depth: {header.color_depth} bpp",
        f"Speed:       {header.speed} ms (deprecated)",
    ]

    if ase_file.tags:
        lines += ["", "Animation Tags:"]
        lines += [
            f'- "{tag.name}" (Frames: {tag.from_frame}-{tag.to_frame}, '
            f"Direction: {direction_name(tag.direction)}, Repeat: {repeat_name(tag.repeat)})"
            for tag in ase_file.tags
        ]
    else:
        lines += ["", "No animation tags found."]

    lines += ["", "Frame Information:"]
    lines += [
        f"Frame {index}: {frame.header.duration} ms"
        for index, frame in enumerate(ase_file.frames)
        if frame.header.duration > 0
    ]

    lines += ["", "Developer Summary:", f"- Total animation length: {len(ase_file.frames)} frames"]
    if ase_file.tags:
        lines += [
            f"- Animation sequences: {len(ase_file.tags)}",
            "- Use tag names to reference specific animations in your game code",
        ]
    else:
        lines.append("- No tagged sequences - consider adding animation tags in Aseprite")
    return "\n".join(lines) + "\n"


def main(argv: list[str] | None = None) -> int:
    """Print a report for the file named by the first argument."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print(f"Usage: {PROG} <aseprite-file>", file=sys.stderr)
        print(f"Example: {PROG} assets/Soldier.aseprite", file=sys.stderr)
        return 1

    filename = args[0]
    try:
        ase_file = load_file(filename)
    except AsepriteError as exc:
        print(f"Error loading file: {exc}", file=sys.stderr)
        return 1

    sys.stdout.write(format_report(filename, ase_file))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())