"""
Container entry point for the PhotoSpot API.

    python startup.py            # prepare upload dirs, then serve
    python startup.py --init-db  # also create missing tables before serving

The port comes from $PORT (default 8000); everything else from core.config.
"""

import asyncio
import os
import sys
from pathlib import Path

from core.config import settings


def setup_upload_dirs():
    """Uploaded photos are written to <UPLOAD_DIR>/photos"""
    for directory in (Path(settings.UPLOAD_DIR), Path(settings.UPLOAD_DIR) / "photos"):
        directory.mkdir(parents=True, exist_ok=True)
        print(f"✓ Directory ready: {directory}")


async def init_database():
    from db.database import create_db_and_tables, dispose_engine

    try:
        await create_db_and_tables()
        print("✓ Tables ready")
    finally:
        await dispose_engine()


def main():
    print("=" * 60)
    print("📷 PhotoSpot API - Startup")
    print("=" * 60)

    setup_upload_dirs()

    if "--init-db" in sys.argv:
        asyncio.run(init_database())

    port = int(os.getenv("PORT", "8000"))
    print(f"\nServing on 0.0.0.0:{port}")
    print("=" * 60)

    import uvicorn

    try:
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=port,
            log_level=settings.LOG_LEVEL.lower(),
            access_log=True
        )
    except KeyboardInterrupt:
        print("\n⏹️  Shutting down...")
        sys.exit(0)


if __name__ == "__main__":
    main()
