#!/usr/bin/env python3
"""
Ledger Service Entry Point

Starts the FastAPI server with the configured ledger store.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from core_ledger.api import run_server
from core_ledger.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("Starting ledger service...")
    print(f"Store: {config.database_url}")
    print(f"API available at: http://{config.api_host}:{config.api_port}")
    print(f"Documentation at: http://{config.api_host}:{config.api_port}/docs")
    print()

    try:
        run_server()
    except KeyboardInterrupt:
        print("\nShutting down ledger service...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
