#!/usr/bin/env python3
"""
Wavefront Animation Script

Runs the room wavefront simulation from a YAML configuration and/or command
line overrides. Equivalent to the ``soundprop-animate`` console script.

Example:
    python scripts/animate_propagation.py --config config/default.yaml
    python scripts/animate_propagation.py --room 10 30 20 \
        --source 1 1 10 --source 9 29 10 --spl 110 --spl 100 \
        --no-display --output output/hall --save hall.gif --export json
"""

import os
import sys

# Ensure project root is on sys.path before importing the local package
script_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if script_root not in sys.path:
    sys.path.insert(0, script_root)

from soundprop.driver import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
