#!/usr/bin/env python3
"""Write the host registration manifest next to the built panel bundle."""

from __future__ import annotations

import argparse
from pathlib import Path

from stream_panel.config import load_config
from stream_panel.manifest import MANIFEST_DEFAULTS, write_manifest


def project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--out",
        type=Path,
        default=project_root() / "build" / "manifest.json",
        help="Destination JSON path.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional YAML config whose chart defaults seed the style panel.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    defaults = load_config(args.config).chart if args.config else MANIFEST_DEFAULTS
    output_path = write_manifest(args.out, defaults=defaults)
    print(f"Wrote {output_path}")


if __name__ == "__main__":
    main()
