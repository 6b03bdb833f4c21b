#!/usr/bin/env python3
"""
Show Manager Links Script.

Prints the employee link and the manager link of every department,
creating the manager tokens first if they do not exist yet.

Usage:
    python scripts/show_manager_links.py [--base-url https://leave.example.com]
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.app_context import ConfigLoader
from core.database import close_db_connections, get_standalone_session, init_database
from modules.vacation.core.config import get_vacation_settings
from modules.vacation.services.manager_auth import load_manager_tokens
from modules.vacation.vacation_module import build_links


async def show_manager_links(base_url: str) -> dict[str, str]:
    """Resolve tokens and return the links keyed by audience."""
    await init_database()
    try:
        async with get_standalone_session() as session:
            tokens = await load_manager_tokens(
                session, get_vacation_settings().token_overrides()
            )
    finally:
        await close_db_connections()

    return build_links(base_url, tokens)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Print the employee and manager links"
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Frontend base URL (defaults to FRONTEND_URL or http://localhost:<port>)"
    )
    args = parser.parse_args()

    base_url = args.base_url or get_vacation_settings().frontend_url
    if not base_url:
        config = ConfigLoader()
        config.load()
        base_url = f"http://localhost:{config.get('server.port', 8787)}"

    links = asyncio.run(show_manager_links(base_url))

    print(f"Employee link:                      {links['employee']}")
    print(f"Manager link (administration, all): {links['administration']}")
    print(f"Manager link (production only):     {links['production']}")


if __name__ == "__main__":
    main()
