#!/usr/bin/env python3
"""Standalone Flask application for the wdplaces proxy.

This script provides an easy way to run the proxy during development.

Usage:
    python app.py

The API will be available at http://localhost:10000/api/
"""

import sys
from pathlib import Path

# Add the src directory to the Python path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from wdplaces.backend import create_app  # noqa: E402
from wdplaces.backend.config import Config  # noqa: E402


def main():
    """Run the Flask development server."""
    app = create_app()

    print("Starting wdplaces proxy...")
    print(f"Server will be available at: http://localhost:{Config.PORT}")
    print(f"Debug mode: {Config.DEBUG}")

    app.run(debug=Config.DEBUG, host="0.0.0.0", port=Config.PORT)


if __name__ == '__main__':
    main()
