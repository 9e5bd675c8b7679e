#!/usr/bin/env python3
"""Run script for the Decent profile MCP server.

This script can be called from any directory using an absolute path.
It puts the ``src`` directory on the import path so the server runs
from a checkout without installing it.

Usage:
    python3 "/absolute/path/to/run_server.py"
    or
    ./run_server.py
"""

import sys
from pathlib import Path

# Get the directory where this script is located (works even if called with absolute path)
script_dir = Path(__file__).resolve().parent
sys.path.insert(0, str(script_dir / "src"))

if __name__ == "__main__":
    from decent_profile_mcp.server import main
    main()
