#!/usr/bin/env python3
"""Validate a notifier configuration file (default: notifier.example.yaml)."""

import sys
from pathlib import Path

from build_notifier.config.loader import validate_config_file


def main() -> int:
    config_file = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("notifier.example.yaml")

    if not config_file.exists():
        print(f"✗ {config_file} not found")
        return 1

    return 0 if validate_config_file(config_file) else 1


if __name__ == "__main__":
    sys.exit(main())
