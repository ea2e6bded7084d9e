#!/usr/bin/env python
"""
SnapDust CLI - Make a sprite crumble into dust

Usage:
    snapdust <input_image> [options]

Examples:
    snapdust card.png                       # Classic snap to card_snap.gif
    snapdust card.png --preset shatter      # Use a preset
    snapdust card.png --buckets 32 --seed 7 # Finer, reproducible dust
    snapdust card.png --format layers       # Just write the dust layers
    snapdust card.png --preview             # Click to snap in a window
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .core.easing import EASING_FUNCTIONS
from .core.utils import Vec2


def _vector(text: str) -> Vec2:
    try:
        return Vec2.parse(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='snapdust',
        description="Disintegrate a sprite into dust, layer by layer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Output Formats:
  gif          - Animated GIF of the whole snap (default)
  spritesheet  - All frames on one PNG with JSON metadata
  frames       - Directory of numbered PNG frames
  layers       - Directory with one PNG per dust layer

Examples:
  %(prog)s card.png
  %(prog)s card.png --preset ember_rise --fps 24
  %(prog)s card.png --offset 0,-80 --dislocation 20,20
  %(prog)s --list-presets
        """
    )

    parser.add_argument(
        'input',
        type=str,
        nargs='?',
        default=None,
        help='Input sprite image (PNG, GIF, etc.)'
    )

    parser.add_argument(
        '-o', '--output',
        type=str,
        default=None,
        help='Output path (auto-generated if not specified)'
    )

    parser.add_argument(
        '--format',
        type=str,
        default='gif',
        choices=['gif', 'spritesheet', 'frames', 'layers'],
        help='Output format (default: gif)'
    )

    parser.add_argument(
        '-p', '--preset',
        type=str,
        default='thanos',
        metavar='NAME',
        help='Preset providing the defaults (default: thanos)'
    )

    parser.add_argument(
        '-b', '--buckets',
        type=int,
        default=None,
        help='Number of dust layers (preset default: 16)'
    )

    parser.add_argument(
        '-d', '--duration',
        type=float,
        default=None,
        metavar='MS',
        help='Duration of the whole animation in milliseconds (preset default: 5000)'
    )

    parser.add_argument(
        '--easing',
        type=str,
        default=None,
        choices=sorted(EASING_FUNCTIONS),
        help='Curve shaping the fade and drift of each layer (preset default: ease_out)'
    )

    parser.add_argument(
        '--offset',
        type=_vector,
        default=None,
        metavar='X,Y',
        help='Direction and range of the drift (preset default: 64,-32)'
    )

    parser.add_argument(
        '--dislocation',
        type=_vector,
        default=None,
        metavar='X,Y',
        help='Maximum random dislocation per layer (preset default: 64,32)'
    )

    parser.add_argument(
        '--fps',
        type=int,
        default=None,
        help='Frames per second of the output (preset default: 30)'
    )

    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for reproducible dust'
    )

    parser.add_argument(
        '--remove-bg',
        action='store_true',
        help='Remove a flat background before snapping'
    )

    parser.add_argument(
        '--preview',
        action='store_true',
        help='Open an interactive preview window (requires pygame)'
    )

    parser.add_argument(
        '--preview-zoom',
        type=float,
        default=2.0,
        help='Initial zoom level for preview (default: 2.0)'
    )

    parser.add_argument(
        '--list-presets',
        action='store_true',
        help='List all available presets and exit'
    )

    parser.add_argument(
        '--preset-info',
        type=str,
        default=None,
        metavar='NAME',
        help='Show detailed info about a preset and exit'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Debug logging and tracebacks'
    )

    return parser


def _list_presets() -> None:
    from .core.presets import get_preset_manager
    manager = get_preset_manager()

    print("Available Snap Presets:\n")
    for name in manager.list_all():
        preset = manager.get(name)
        desc = preset.description[:50] + "..." if len(preset.description) > 50 else preset.description
        origin = "" if manager.is_builtin(name) else " (user)"
        print(f"  {name:<16} - {desc}{origin}")
    print(f"\nTotal: {len(manager.list_all())} presets")
    print("\nUsage: --preset <name>")
    print("Details: --preset-info <name>")


def _preset_info(name: str) -> int:
    from .core.presets import get_preset
    preset = get_preset(name)
    if not preset:
        print(f"Error: Preset '{name}' not found")
        print("Use --list-presets to see available presets")
        return 1

    print(f"Preset: {preset.name}")
    print(f"Description: {preset.description}")
    print("\nSettings:")
    print(f"  Offset: {preset.offset[0]:g},{preset.offset[1]:g}")
    print(f"  Dislocation: {preset.random_dislocation[0]:g},{preset.random_dislocation[1]:g}")
    print(f"  Duration: {preset.duration_ms:g} ms")
    print(f"  Easing: {preset.easing}")
    print(f"  Layers: {preset.bucket_count}")
    print(f"  Grace delay: {preset.grace_ms:g} ms")
    print(f"  Snap on tap: {'yes' if preset.snap_on_tap else 'no'}")
    print(f"  FPS: {preset.fps}")
    print(f"\nTags: {', '.join(preset.tags)}")
    return 0


def _preview(args) -> int:
    from .core import Snappable, SpriteParser, get_preset
    from .core.preview import check_pygame_available, preview_snap

    if not check_pygame_available():
        print("Error: Preview requires pygame. Install with: pip install pygame")
        return 1

    preset = get_preset(args.preset)
    config = preset.to_config(
        on_snapped=lambda: print("Snapped!"),
        seed=args.seed,
        bucket_count=args.buckets,
        duration_ms=args.duration,
        easing=args.easing,
        offset=args.offset,
        random_dislocation=args.dislocation,
    )
    capture = SpriteParser.capture_file(args.input, remove_background=args.remove_bg)

    print(f"Opening preview window (zoom: {args.preview_zoom}x)...")
    print("Controls: CLICK/SPACE=snap, R=reset, ESC=quit")
    with Snappable(config, capture) as effect:
        preview_snap(effect, zoom=args.preview_zoom, title=f"Snap: {Path(args.input).name}")
    print("Preview closed.")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    if args.list_presets:
        _list_presets()
        return 0

    if args.preset_info:
        return _preset_info(args.preset_info)

    if not args.input:
        print("Error: Input file is required")
        print("Usage: snapdust <input_image> [options]")
        print("       snapdust --list-presets")
        return 1

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {args.input}")
        return 1

    from .core.presets import get_preset_manager
    if not get_preset_manager().exists(args.preset):
        print(f"Error: Preset '{args.preset}' not found")
        print("Use --list-presets to see available presets")
        return 1

    # Import here to avoid slow startup for --help
    from . import snap
    from .core.errors import SnapError

    try:
        if args.preview:
            return _preview(args)

        print(f"Snapping: {args.input} (preset: {args.preset})")
        output = snap(
            args.input,
            output_path=args.output,
            format=args.format,
            preset=args.preset,
            fps=args.fps,
            seed=args.seed,
            bucket_count=args.buckets,
            duration_ms=args.duration,
            easing=args.easing,
            offset=args.offset,
            random_dislocation=args.dislocation,
            remove_background=args.remove_bg,
            on_snapped=lambda: print("Snapped!"),
        )
    except (SnapError, OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    if isinstance(output, list):
        print(f"Output: {len(output)} files in {output[0].parent if output else args.output}")
    else:
        print(f"Output: {output}")
    print("Done!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
