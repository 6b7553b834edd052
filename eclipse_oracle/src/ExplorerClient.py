"""AleoExplorerClient: Mapping lookups through the Aleo explorer REST API.

Endpoint: {base_url}/{network}/program/{program}/mapping/{mapping}/{key}

Every lookup returns the parsed value, or the parser's sentinel (0 / None)
when the entry is missing or the request fails. Network errors are logged
and never propagated.

.. code-block:: python

    client = AleoExplorerClient(ApiClientConfig(network="mainnet"))
    price = await client.get_current_price("3")
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass

import httpx

from .address import convert_address_to_field
from .base import BaseClient, ClientError
from .models import FeedInfo, scale_price
from .parsing import parse_address, parse_bool, parse_field, parse_struct, parse_uint

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.explorer.provable.com/v1"
DEFAULT_NETWORK = "testnet"
DEFAULT_RPC_URL = "https://testnet.aleorpc.com"
NETWORKS = ("testnet", "mainnet")

# Deployed Eclipse Oracle programs.
STAKING_PROGRAM = "eclipse_oracle_staking_2.aleo"
SUBMIT_PROGRAM = "eclipse_oracle_submit_2.aleo"
AGGREGATE_PROGRAM = "eclipse_oracle_aggregate_2.aleo"
FEED_PROGRAM = "eclipse_oracle_feed.aleo"

MAX_PROVIDERS = 8


@dataclass(frozen=True)
class ApiClientConfig:
    """Connection settings shared by the explorer and RPC clients.

    :ivar base_url: Explorer API base URL.
    :ivar network: "testnet" or "mainnet".
    :ivar rpc_url: JSON-RPC endpoint for transaction search.
    :ivar timeout: Request timeout in seconds.
    """

    base_url: str = DEFAULT_BASE_URL
    network: str = DEFAULT_NETWORK
    rpc_url: str = DEFAULT_RPC_URL
    timeout: float = BaseClient.DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if self.network not in NETWORKS:
            raise ValueError(
                f"Unknown network '{self.network}'. Available: {', '.join(NETWORKS)}"
            )


def decode_mapping_value(body: str) -> str | None:
    """Unwrap an explorer response body.

    The explorer answers with a JSON string for present keys and JSON
    ``null`` for missing ones; an empty body counts as missing and anything
    else is returned as-is.
    """
    if not body.strip():
        return None
    try:
        value = json.loads(body)
    except ValueError:
        return body
    if value is None:
        return None
    return value if isinstance(value, str) else body


def field_key(value: int) -> str:
    """Render an integer as a ``field`` literal mapping key."""
    return f"{value}field"


def feed_key(feed_id: str) -> str:
    """Build the feed-level mapping key; ``"03"`` and ``"3"`` give ``3field``."""
    return field_key(int(feed_id))


def provider_key(address: str, feed_id: str) -> str:
    """Build the ``(address field + feed id)`` mapping key.

    :raises AddressError: If ``address`` is not a valid Aleo address.
    """
    return field_key(convert_address_to_field(address) + int(feed_id))


class AleoExplorerClient(BaseClient):
    """Client for Eclipse Oracle contracts via the explorer API.

    :ivar config: Connection settings.
    """

    def __init__(
        self,
        config: ApiClientConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        :param config: Connection settings (defaults to testnet explorer).
        :param http_client: Optional dedicated httpx client.
        """
        self.config = config or ApiClientConfig()
        super().__init__(timeout=self.config.timeout, http_client=http_client)

    @property
    def base_url(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/{self.config.network}"

    async def get_mapping_value(self, program: str, mapping: str, key: str) -> str | None:
        """Fetch a raw mapping value.

        :param program: Program id (e.g., "eclipse_oracle_feed.aleo").
        :param mapping: Mapping name.
        :param key: Mapping key (e.g., "3field").
        :returns: Mapping value text, or None if the key is missing or on
            non-success status or network error.
        """
        url = f"{self.base_url}/program/{program}/mapping/{mapping}/{key}"
        try:
            response = await self._get(url)
        except ClientError as e:
            logger.warning(f"[explorer] Failed to fetch {program}/{mapping}/{key}: {e}")
            return None
        return decode_mapping_value(response.text)

    async def get_feed_providers(
        self, feed_id: str, max_providers: int = MAX_PROVIDERS
    ) -> list[str]:
        """Fetch provider addresses from slots ``feed_id .. feed_id + max_providers - 1``.

        Empty slots are dropped; the remaining addresses keep slot order.

        :param feed_id: Feed id.
        :param max_providers: Number of slots to probe.
        :returns: Provider addresses.
        """
        base = int(feed_id)
        raws = await asyncio.gather(
            *(
                self.get_mapping_value(STAKING_PROGRAM, "provider_list", field_key(base + i))
                for i in range(max_providers)
            )
        )
        addresses = [parse_address(raw) for raw in raws]
        return [address for address in addresses if address]

    async def get_provider_stake(self, address: str, feed_id: str) -> int:
        """Fetch a provider's stake on a feed.

        :raises AddressError: If ``address`` is not a valid Aleo address.
        """
        raw = await self.get_mapping_value(
            STAKING_PROGRAM, "stakes", provider_key(address, feed_id)
        )
        return parse_uint(raw, "u128")

    async def get_provider_proposed_price(self, address: str, feed_id: str) -> float | None:
        """Fetch a provider's pending proposed price, None if no proposal.

        :raises AddressError: If ``address`` is not a valid Aleo address.
        """
        raw = await self.get_mapping_value(
            SUBMIT_PROGRAM, "temp_price", provider_key(address, feed_id)
        )
        return scale_price(parse_uint(raw, "u128")) if raw else None

    async def get_total_staked(self, feed_id: str) -> int:
        raw = await self.get_mapping_value(STAKING_PROGRAM, "total_staked", feed_key(feed_id))
        return parse_uint(raw, "u128")

    async def get_current_price(self, feed_id: str) -> float | None:
        raw = await self.get_mapping_value(AGGREGATE_PROGRAM, "latest_price", feed_key(feed_id))
        return scale_price(parse_uint(raw, "u128")) if raw else None

    async def get_feed_info(self, feed_id: str) -> FeedInfo | None:
        """Fetch and decode a feed's configuration struct.

        :param feed_id: Feed id.
        :returns: FeedInfo, or None if the feed entry is missing.
        """
        raw = await self.get_mapping_value(FEED_PROGRAM, "feeds", feed_key(feed_id))
        if not raw:
            return None

        members = parse_struct(raw)
        return FeedInfo(
            creator=parse_address(members.get("creator")) or "",
            min_stake=parse_uint(members.get("min_stake"), "u64"),
            slashing_threshold=parse_uint(members.get("slashing_threshold"), "u64"),
            aggregation_window=parse_uint(members.get("aggregation_window"), "u32"),
            challenge_window=parse_uint(members.get("challenge_window"), "u32"),
            paused=members.get("paused") == "true",
        )

    async def get_provider_count(self, feed_id: str) -> int | None:
        raw = await self.get_mapping_value(STAKING_PROGRAM, "provider_count", feed_key(feed_id))
        return parse_field(raw)

    async def get_proposal_median(self, feed_id: str) -> float | None:
        """Fetch the median of the current proposal, None if unset or zero."""
        raw = await self.get_mapping_value(AGGREGATE_PROGRAM, "proposal_median", feed_key(feed_id))
        median = parse_field(raw)
        return scale_price(median) if median else None

    async def get_proposal_proposer(self, feed_id: str) -> str | None:
        raw = await self.get_mapping_value(
            AGGREGATE_PROGRAM, "proposal_proposer", feed_key(feed_id)
        )
        return parse_address(raw)

    async def get_proposal_block(self, feed_id: str) -> int | None:
        raw = await self.get_mapping_value(AGGREGATE_PROGRAM, "proposal_block", feed_key(feed_id))
        return parse_field(raw)

    async def get_proposal_slashed(self, feed_id: str) -> bool | None:
        raw = await self.get_mapping_value(
            AGGREGATE_PROGRAM, "proposal_slashed", feed_key(feed_id)
        )
        return parse_bool(raw)

    async def get_aggregate_done(self, feed_id: str) -> bool | None:
        raw = await self.get_mapping_value(AGGREGATE_PROGRAM, "aggregate_done", feed_key(feed_id))
        return parse_bool(raw)

    async def get_slasher(self, feed_id: str) -> str | None:
        raw = await self.get_mapping_value(AGGREGATE_PROGRAM, "slasher", feed_key(feed_id))
        return parse_address(raw)

    async def get_slasher_reward(self, feed_id: str) -> int | None:
        raw = await self.get_mapping_value(AGGREGATE_PROGRAM, "slasher_reward", feed_key(feed_id))
        return parse_field(raw)

    async def get_last_propose_block(self, feed_id: str) -> int | None:
        raw = await self.get_mapping_value(
            AGGREGATE_PROGRAM, "last_propose_block", feed_key(feed_id)
        )
        return parse_field(raw)
