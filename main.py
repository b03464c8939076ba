#!/usr/bin/env python3
"""
Adaptive paper chunking command-line entry point
"""

import sys

from paperchunk.cli import main

if __name__ == "__main__":
    sys.exit(main())
