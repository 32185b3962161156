#!/usr/bin/env python3
"""
Wrapper script to run Python AzTfViz directly from the project directory.

This script allows you to run Python AzTfViz without installing it:
    python aztfviz.py export resources.json -o diagram.json
    python aztfviz.py preview resources.json
    python aztfviz.py --help
"""

import sys
from pathlib import Path

# Add src directory to Python path so we can import aztfviz
project_root = Path(__file__).parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

# Import and run the CLI
try:
    from aztfviz.cli import main

    if __name__ == "__main__":
        main()

except ImportError as e:
    print(f"❌ Error importing aztfviz: {e}")
    print(
        "\n💡 Make sure you're running from the python-aztfviz directory and have installed dependencies:",
    )
    print("   pip install -e .")
    sys.exit(1)
