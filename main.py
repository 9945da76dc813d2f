#!/usr/bin/env python3
"""
srtchunker Entry Point Script

This script initializes the CLI handler and runs the chunking process.
"""

import sys
from srtchunker.cli import CLIHandler

if __name__ == "__main__":
    if sys.version_info < (3, 9):
        sys.stderr.write("srtchunker requires Python 3.9 or later.\n")
        sys.exit(1)

    cli = CLIHandler()
    sys.exit(cli.run())
