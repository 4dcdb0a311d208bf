"""
Main entry point for running the package as a module.

Uses the Click-based CLI from terminal_intel/cli/.
"""
import sys

from terminal_intel.cli import main

if __name__ == "__main__":
    sys.exit(main())
