"""Initialize the ClipVault metadata store."""

import asyncio

from src.clipvault.config import load_config
from src.clipvault.db.db_session import ConnectionCache


async def _init() -> None:
    connections = ConnectionCache(load_config().database_url, create_schema=True)
    try:
        await connections.connect()
    finally:
        await connections.dispose()


def main() -> None:
    asyncio.run(_init())
    print("Database initialized.")


if __name__ == "__main__":
    main()
