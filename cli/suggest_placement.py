"""
Print the suggested overlay placement for a background photo.

    overlay-suggest room.heic
    overlay-suggest room.jpg --json
"""
import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from pipeline.overlay_session import OverlaySession


def _configure_logging() -> None:
    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="overlay-suggest",
        description="Suggest where to place a 3D product overlay on a photo.",
    )
    parser.add_argument("image", type=Path, help="Background photo (JPEG, PNG, HEIC, ...)")
    parser.add_argument("--format", dest="declared_format", default=None,
                        help="Media type of the upload, e.g. image/heic")
    parser.add_argument("--model", default="model.glb", help="3D model URI (informational)")
    parser.add_argument("--json", action="store_true", help="Print the full outcome as JSON")
    return parser


async def _run(args: argparse.Namespace) -> int:
    if not args.image.is_file():
        print(f"Image not found: {args.image}", file=sys.stderr)
        return 2

    session = OverlaySession(args.model)
    outcome = await session.on_background_image_changed(
        args.image.read_bytes(), args.declared_format, args.image.name
    )
    if outcome is None:
        print(f"Failed to load image: {args.image}", file=sys.stderr)
        return 1

    if args.json:
        payload = asdict(outcome)
        payload["available"] = outcome.is_available
        print(json.dumps(payload, indent=2))
    else:
        s = outcome.suggestion
        source = "detected" if outcome.is_available else f"default ({outcome.reason})"
        print(f"position: ({s.position.x:.1f}%, {s.position.y:.1f}%)")
        print(f"scale:    {s.scale:.2f}")
        print(f"source:   {source}")
        print(f"features: {len(outcome.points)}  candidates: {len(outcome.candidates)}")
    return 0


def main(argv=None) -> int:
    _configure_logging()
    args = build_parser().parse_args(argv)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
