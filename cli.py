#!/usr/bin/env python3
"""
Convenience shim for 'python cli.py'.

Installed environments should use the 'assignflow' command or
'python -m assignflow' instead.
"""
import sys

if __name__ == "__main__":
    from assignflow.cli import main
    sys.exit(main())
