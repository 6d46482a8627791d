#!/usr/bin/env python3
"""Run the Tin ledger web server."""
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from dotenv import load_dotenv
load_dotenv()


def main():
    import uvicorn

    from tin.config import get_settings

    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    print(f"""
    ╔═══════════════════════════════════════════════════════╗
    ║           Tin Ledger Server                           ║
    ╠═══════════════════════════════════════════════════════╣
    ║  URL: http://{settings.SERVER_HOST}:{settings.SERVER_PORT:<5}
    ║  Database: {settings.DATABASE_PATH}
    ║  Auto-archive: {str(settings.ARCHIVER_ENABLED):<5}
    ╚═══════════════════════════════════════════════════════╝
    """)

    uvicorn.run(
        "server.app:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.SERVER_RELOAD,
    )


if __name__ == "__main__":
    main()
