#!/usr/bin/env python3
"""
Entry point for running WFScan as a module.

Usage:
    python -m wfscan <command> [options]
"""

from .cli import main

if __name__ == "__main__":
    main()
