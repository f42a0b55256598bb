#!/usr/bin/env python3
"""
UBC course schedule scraper entry point

Runs the CLI from the src package without installing it:

    python main.py crawl --subject 145
"""

import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

try:
    from ubcscraper.main import main
except ImportError as e:
    print(f"Error importing main module: {e}")
    print("Make sure you've installed the package in development mode:")
    print("pip install -e .")
    sys.exit(1)

if __name__ == "__main__":
    main()
