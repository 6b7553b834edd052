"""FeedService: Assembles the complete view of an Eclipse Oracle feed.

Architecture:
    - Probe the provider list slots of the feed
    - Fetch each provider's stake and proposed price concurrently
    - Fetch feed-level scalars (total stake, price, config, proposal state)
      concurrently with the price history and slashing searches
    - Merge everything into one Feed, providers zipped by slot position

Individual lookups fail soft (None / 0 / []), so a Feed is always returned
for network-level failures. An invalid provider address raises AddressError.

.. code-block:: python

    service = FeedService(ApiClientConfig(network="testnet"))
    feed = await service.get_feed_full_data("3", name="ALEO/USD")
"""

from __future__ import annotations

import asyncio
import logging

from .address import convert_address_to_field
from .ExplorerClient import MAX_PROVIDERS, AleoExplorerClient, ApiClientConfig
from .models import Feed, PricePoint, Provider, SlashedAddress
from .TransactionSearch import AleoRpcClient

logger = logging.getLogger(__name__)


class FeedService:
    """Feed service for retrieving complete feed data.

    :ivar client: Explorer client for mapping lookups.
    :ivar rpc_client: Transaction-search client for history and slashing.
    """

    def __init__(
        self,
        client: AleoExplorerClient | ApiClientConfig | None = None,
        rpc_client: AleoRpcClient | None = None,
    ) -> None:
        """Initialize the service.

        :param client: Explorer client, or the config to build one with.
        :param rpc_client: Optional RPC client. Built from the explorer
            client's config when omitted.
        """
        if isinstance(client, AleoExplorerClient):
            self.client = client
        else:
            self.client = AleoExplorerClient(client)
        self.rpc_client = rpc_client or AleoRpcClient(self.client.config)

    async def get_feed_full_data(
        self,
        feed_id: str,
        name: str | None = None,
        max_providers: int = MAX_PROVIDERS,
    ) -> Feed:
        """Fetch everything known about a feed.

        :param feed_id: Feed id.
        :param name: Display name (default: "Feed {feed_id}").
        :param max_providers: Provider slots to probe (default: 8).
        :returns: Feed with submitters in slot order.
        :raises AddressError: If a provider address cannot be converted.
        """
        client = self.client
        addresses = await client.get_feed_providers(feed_id, max_providers)
        logger.debug(f"[feed {feed_id}] {len(addresses)} provider(s)")

        # Reject malformed addresses before any lookup is in flight
        for address in addresses:
            convert_address_to_field(address)

        (
            stakes,
            proposed_prices,
            total_staked,
            current_price,
            feed_info,
            advanced,
            price_history,
            slashed_addresses,
        ) = await asyncio.gather(
            asyncio.gather(
                *(client.get_provider_stake(address, feed_id) for address in addresses)
            ),
            asyncio.gather(
                *(client.get_provider_proposed_price(address, feed_id) for address in addresses)
            ),
            client.get_total_staked(feed_id),
            client.get_current_price(feed_id),
            client.get_feed_info(feed_id),
            asyncio.gather(
                client.get_provider_count(feed_id),
                client.get_proposal_median(feed_id),
                client.get_proposal_proposer(feed_id),
                client.get_proposal_block(feed_id),
                client.get_proposal_slashed(feed_id),
                client.get_aggregate_done(feed_id),
                client.get_slasher(feed_id),
                client.get_slasher_reward(feed_id),
                client.get_last_propose_block(feed_id),
            ),
            self.get_price_history(feed_id),
            self.get_slashed_addresses(feed_id),
        )

        submitters = [
            Provider(address=address, staked_credits=stake, proposed_price=price)
            for address, stake, price in zip(addresses, stakes, proposed_prices, strict=True)
        ]

        (
            provider_count,
            proposal_median,
            proposal_proposer,
            proposal_block,
            proposal_slashed,
            aggregate_done,
            slasher,
            slasher_reward,
            last_propose_block,
        ) = advanced

        return Feed(
            id=feed_id,
            name=name or f"Feed {feed_id}",
            infos=feed_info,
            total_staked=total_staked,
            submitters=submitters,
            price_history=price_history,
            slashed_addresses=slashed_addresses,
            current_price=current_price,
            provider_count=provider_count,
            proposal_median=proposal_median,
            proposal_proposer=proposal_proposer,
            proposal_block=proposal_block,
            proposal_slashed=proposal_slashed,
            aggregate_done=aggregate_done,
            slasher=slasher,
            slasher_reward=slasher_reward,
            last_propose_block=last_propose_block,
        )

    async def get_price_history(self, feed_id: str) -> list[PricePoint]:
        """Fetch the proposed price history of a feed, oldest first."""
        return await self.rpc_client.get_price_history(feed_id)

    async def get_slashed_addresses(self, feed_id: str) -> list[SlashedAddress]:
        """Fetch slashing events of a feed, oldest first."""
        return await self.rpc_client.get_slashed_addresses(feed_id)
