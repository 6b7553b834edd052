#!/usr/bin/env python3
"""Eclipse Oracle feed reader.

Fetches the complete on-chain state of an Eclipse Oracle feed on Aleo and
prints it as JSON.
"""

import argparse
import asyncio
import json
import logging
import os
import sys

from .src.address import AddressError, convert_address_to_field
from .src.base import BaseClient
from .src.ExplorerClient import (
    DEFAULT_BASE_URL,
    DEFAULT_NETWORK,
    DEFAULT_RPC_URL,
    MAX_PROVIDERS,
    NETWORKS,
    ApiClientConfig,
)
from .src.FeedService import FeedService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


async def fetch_feed(
    config: ApiClientConfig, feed_id: str, name: str | None, max_providers: int
) -> dict:
    """Fetch a feed and return it as a dict, closing the shared client."""
    try:
        feed = await FeedService(config).get_feed_full_data(feed_id, name, max_providers)
        return feed.to_dict()
    finally:
        await BaseClient.close_shared_client()


def main() -> None:
    """Main entry point for the Eclipse Oracle CLI."""
    parser = argparse.ArgumentParser(
        description="Eclipse Oracle: read feed state from Aleo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Full state of feed 3 on testnet
  python -m eclipse_oracle.main --feed-id 3 --name ALEO/USD

  # Mainnet, probing up to 16 provider slots
  python -m eclipse_oracle.main --feed-id 3 --network mainnet --max-providers 16

  # Convert an address to its field representation
  python -m eclipse_oracle.main --address aleo1...

Environment variables (CLI args take precedence):
  FEED_ID, FEED_NAME, MAX_PROVIDERS, NETWORK, EXPLORER_BASE_URL, RPC_URL
""",
    )

    parser.add_argument(
        "--feed-id",
        dest="feed_id",
        type=str,
        help="Feed id (default: 3)",
        default=os.environ.get("FEED_ID") or "3",
    )

    parser.add_argument(
        "--name",
        type=str,
        help="Display name for the feed (default: 'Feed <id>')",
        default=os.environ.get("FEED_NAME"),
    )

    parser.add_argument(
        "--max-providers",
        dest="max_providers",
        type=int,
        help=f"Provider slots to probe (default: {MAX_PROVIDERS})",
        default=int(os.environ.get("MAX_PROVIDERS") or MAX_PROVIDERS),
    )

    parser.add_argument(
        "--network",
        type=str,
        choices=NETWORKS,
        help=f"Network to query (default: {DEFAULT_NETWORK})",
        default=os.environ.get("NETWORK") or DEFAULT_NETWORK,
    )

    parser.add_argument(
        "--base-url",
        dest="base_url",
        type=str,
        help=f"Explorer API base URL (default: {DEFAULT_BASE_URL})",
        default=os.environ.get("EXPLORER_BASE_URL") or DEFAULT_BASE_URL,
    )

    parser.add_argument(
        "--rpc-url",
        dest="rpc_url",
        type=str,
        help=f"Transaction search JSON-RPC URL (default: {DEFAULT_RPC_URL})",
        default=os.environ.get("RPC_URL") or DEFAULT_RPC_URL,
    )

    parser.add_argument(
        "--address",
        type=str,
        help="Print the field representation of an Aleo address and exit",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.address:
        try:
            print(f"{convert_address_to_field(args.address)}field")
        except AddressError as e:
            parser.error(str(e))
        return

    if args.max_providers < 1:
        parser.error("--max-providers must be at least 1")

    if not args.feed_id.isdigit():
        parser.error("--feed-id must be a non-negative integer")

    config = ApiClientConfig(
        base_url=args.base_url,
        network=args.network,
        rpc_url=args.rpc_url,
    )

    logger.info(f"Network:       {config.network}")
    logger.info(f"Explorer:      {config.base_url}")
    logger.info(f"RPC:           {config.rpc_url}")
    logger.info(f"Feed:          {args.feed_id}")

    try:
        feed = asyncio.run(fetch_feed(config, args.feed_id, args.name, args.max_providers))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)

    print(json.dumps(feed, indent=2))


if __name__ == "__main__":
    main()
