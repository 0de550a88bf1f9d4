#!/usr/bin/env python3
"""
Money Transfers Entry Point

Starts the FastAPI server with the storage backend named by
MONEY_TRANSFERS_DATABASE_URL (SQLite file by default).
"""

import sys

from money_transfers.api import run_server
from money_transfers.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("Starting Money Transfers service...")
    print(f"Storage: {config.database_url}")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server()
    except KeyboardInterrupt:
        print("\nShutting down Money Transfers service...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
