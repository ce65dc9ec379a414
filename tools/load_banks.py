#!/usr/bin/env python3
"""
Another World resource check.

Loads MEMLIST.BIN and unpacks every resource from the bank files in
the given directory. Exits with status 1 if anything fails to load.

Usage:
    python load_banks.py DATA/
"""

import argparse
import sys
from pathlib import Path

# Add tools directory to path
sys.path.insert(0, str(Path(__file__).parent))

from bytekiller import BytekillerError
from resources import load_resources


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Load and unpack Another World resources from MEMLIST.BIN and bank files"
    )
    parser.add_argument(
        "resources_path",
        help="Directory containing MEMLIST.BIN and BANKxx files"
    )

    args = parser.parse_args(argv)
    resources_path = Path(args.resources_path)

    try:
        resources = load_resources(resources_path)
    except (OSError, BytekillerError) as e:
        print(f"Cannot load resources from `{resources_path}`: {e}")
        return 1

    print(f"Loaded {len(resources)} entries ({resources.total_size} bytes)")
    print("Ready to run game !")
    return 0


if __name__ == "__main__":
    sys.exit(main())
