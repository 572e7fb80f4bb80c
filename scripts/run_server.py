#!/usr/bin/env python3
"""
Development Server

Usage:
    python scripts/run_server.py
    python scripts/run_server.py --port 3000 --reload
"""

import argparse
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
import uvicorn


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Run the Keyword Opportunity Engine API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "3000")))
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    uvicorn.run("api.analyze:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
