#!/usr/bin/env python3
"""
Rig Validator - Command Line Version
Compare the skeleton and skin binding of a USD file against a Maya ASCII scene
"""

import argparse
import sys
from pathlib import Path

from core import MATRIX_TOLERANCE
from readers import ExtractionError, USD_EXTENSIONS, MAYA_EXTENSIONS
from rig_validator import RigValidator

# Exit codes
EXIT_MATCH = 0
EXIT_MISMATCH = 1
EXIT_ERROR = 2


def build_parser():
    parser = argparse.ArgumentParser(
        prog='validate-rig',
        description='Validate a UsdSkel rig against the rig of a Maya ASCII scene',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compare the only skeleton of the scene with its USD counterpart
  validate-rig character.usda character.ma

  # Pick joints and skeleton explicitly, include skin weights
  validate-rig character.usda character.ma --root hips --skeleton /Rig/Skel --geometry body

  # Pass/fail only
  validate-rig character.usda character.ma --quick

  # List USD skeletons
  validate-rig character.usda --list-skeletons

Exit codes:
  0  rig matches
  1  mismatches found
  2  extraction failed or bad input
        """
    )

    parser.add_argument('usd_file', type=str, help='USD file (.usd, .usda, .usdc)')
    parser.add_argument('scene_file', type=str, nargs='?', help='Maya ASCII scene (.ma)')
    parser.add_argument('-r', '--root', type=str,
                        help='Scene root joint (default: the only root joint in the scene)')
    parser.add_argument('-s', '--skeleton', type=str,
                        help='USD skeleton prim path (default: skeleton with the same root joint)')
    parser.add_argument('-g', '--geometry', type=str,
                        help='Scene mesh to compare skin weights on')
    parser.add_argument('--usd-geometry', type=str,
                        help='USD mesh prim path (default: prim named like --geometry)')
    parser.add_argument('--quick', action='store_true',
                        help='Report pass/fail only')
    parser.add_argument('--tolerance', type=float, default=MATRIX_TOLERANCE,
                        help=f'Per-entry matrix tolerance (default: {MATRIX_TOLERANCE})')
    parser.add_argument('--strict-bind', action='store_true',
                        help='Fail when a joint has no skinCluster bind matrix')
    parser.add_argument('--list-skeletons', action='store_true',
                        help='List skeleton prim paths of the USD file and exit')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Validate input files
    usd_path = Path(args.usd_file)
    if not usd_path.exists():
        print(f"Error: USD file not found: {args.usd_file}", file=sys.stderr)
        return EXIT_ERROR
    if usd_path.suffix.lower() not in USD_EXTENSIONS:
        print(f"Error: Unsupported USD format: {usd_path.suffix}", file=sys.stderr)
        print(f"Supported formats: {', '.join(sorted(USD_EXTENSIONS))}", file=sys.stderr)
        return EXIT_ERROR

    validator = RigValidator(tolerance=args.tolerance, strict_bind=args.strict_bind)

    try:
        if args.list_skeletons:
            skeletons = validator.list_skeletons(str(usd_path))
            for path in skeletons:
                print(path)
            return EXIT_MATCH

        if not args.scene_file:
            print("Error: Please specify the Maya scene file", file=sys.stderr)
            return EXIT_ERROR
        scene_path = Path(args.scene_file)
        if not scene_path.exists():
            print(f"Error: Scene file not found: {args.scene_file}", file=sys.stderr)
            return EXIT_ERROR
        if scene_path.suffix.lower() not in MAYA_EXTENSIONS:
            print(f"Error: Unsupported scene format: {scene_path.suffix}", file=sys.stderr)
            print(f"Supported formats: {', '.join(sorted(MAYA_EXTENSIONS))}", file=sys.stderr)
            return EXIT_ERROR

        results = validator.validate(
            usd_file=str(usd_path),
            scene_file=str(scene_path),
            root_joint=args.root,
            skeleton_path=args.skeleton,
            geometry=args.geometry,
            usd_geometry=args.usd_geometry,
            quick=args.quick
        )
    except (ExtractionError, ImportError) as e:
        print(f"\n✗ {e}", file=sys.stderr)
        return EXIT_ERROR

    if results.get('error'):
        print(f"\n✗ {results['message']}", file=sys.stderr)
        return EXIT_ERROR
    if not results.get('success'):
        print(f"\n✗ {results['message']}", file=sys.stderr)
        return EXIT_MISMATCH
    return EXIT_MATCH


if __name__ == "__main__":
    sys.exit(main())
