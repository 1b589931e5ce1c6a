#!/usr/bin/env python3
"""
Bank Ledger Entry Point

    python run.py          interactive menu
    python run.py serve    HTTP API (host/port from BANK_LEDGER_API_* settings)
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from bank_ledger.config import get_config


if __name__ == "__main__":
    settings = get_config()

    if len(sys.argv) > 1 and sys.argv[1] == "serve":
        from bank_ledger.api import run_server

        print(f"🏦 Bank Ledger API at http://{settings.api_host}:{settings.api_port}")
        print(f"📚 Documentation at http://{settings.api_host}:{settings.api_port}/docs")
        try:
            run_server()
        except KeyboardInterrupt:
            print("\n👋 Shutting down Bank Ledger...")
    else:
        from bank_ledger.cli import main

        try:
            main()
        except KeyboardInterrupt:
            print("\n👋 Exiting the program.")
