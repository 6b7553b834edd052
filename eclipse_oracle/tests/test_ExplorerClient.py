"""Unit tests for AleoExplorerClient."""

import httpx
import pytest

from eclipse_oracle.src.address import AddressError, convert_address_to_field
from eclipse_oracle.src.ExplorerClient import (
    AGGREGATE_PROGRAM,
    FEED_PROGRAM,
    STAKING_PROGRAM,
    SUBMIT_PROGRAM,
    AleoExplorerClient,
    ApiClientConfig,
    decode_mapping_value,
    feed_key,
    provider_key,
)
from eclipse_oracle.src.models import FeedInfo
from eclipse_oracle.tests.helpers import make_address

CREATOR = make_address(9)

FEED_STRUCT = f"""{{
  creator: {CREATOR},
  min_stake: 1000000u64,
  slashing_threshold: 3u64,
  aggregation_window: 10u32,
  challenge_window: 20u32,
  paused: true
}}"""


class TestApiClientConfig:
    """Test ApiClientConfig defaults and validation."""

    def test_defaults(self) -> None:
        """Defaults point at the public testnet explorer."""
        config = ApiClientConfig()
        assert config.base_url == "https://api.explorer.provable.com/v1"
        assert config.network == "testnet"

    def test_invalid_network(self) -> None:
        """Unknown networks are rejected."""
        with pytest.raises(ValueError, match="Unknown network"):
            ApiClientConfig(network="devnet")

    def test_base_url_joins_network(self) -> None:
        """The network is appended to the base URL."""
        config = ApiClientConfig(base_url="https://x.test/v1/", network="mainnet")
        client = AleoExplorerClient(config)
        assert client.base_url == "https://x.test/v1/mainnet"


class TestDecodeMappingValue:
    """Test decode_mapping_value()."""

    def test_json_string_unwrapped(self) -> None:
        """JSON string bodies are decoded."""
        assert decode_mapping_value('"{\\n  paused: true\\n}"') == "{\n  paused: true\n}"

    def test_json_null(self) -> None:
        """A JSON null body means the key is missing."""
        assert decode_mapping_value("null") is None

    def test_empty_body(self) -> None:
        """An empty body means the key is missing."""
        assert decode_mapping_value("") is None

    def test_plain_text_passthrough(self) -> None:
        """Non-JSON bodies are returned unchanged."""
        assert decode_mapping_value("42u64") == "42u64"


class TestGetMappingValue:
    """Test the transport seam."""

    @pytest.mark.asyncio
    async def test_url_layout(self, explorer_factory) -> None:
        """Lookups hit program/<id>/mapping/<name>/<key>."""
        calls: list[str] = []
        client = explorer_factory({(FEED_PROGRAM, "feeds", "3field"): "x"}, calls)

        assert await client.get_mapping_value(FEED_PROGRAM, "feeds", "3field") == "x"
        assert calls == ["/v1/testnet/program/eclipse_oracle_feed.aleo/mapping/feeds/3field"]

    @pytest.mark.asyncio
    async def test_non_success_status_is_none(self) -> None:
        """A non-success status is reported as missing."""
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
        client = AleoExplorerClient(http_client=httpx.AsyncClient(transport=transport))

        assert await client.get_mapping_value(FEED_PROGRAM, "feeds", "3field") is None

    @pytest.mark.asyncio
    async def test_network_error_is_none(self) -> None:
        """Network errors degrade to the documented sentinels."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        client = AleoExplorerClient(
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
        )

        assert await client.get_mapping_value(FEED_PROGRAM, "feeds", "3field") is None
        assert await client.get_total_staked("3") == 0
        assert await client.get_current_price("3") is None


class TestProviders:
    """Test provider list, stake and proposed price lookups."""

    @pytest.mark.asyncio
    async def test_slots_probed_relative_to_feed_id(self, explorer_factory) -> None:
        """Slots start at the feed id."""
        calls: list[str] = []
        client = explorer_factory({}, calls)

        assert await client.get_feed_providers("3", max_providers=4) == []
        keys = sorted(path.rsplit("/", 1)[1] for path in calls)
        assert keys == ["3field", "4field", "5field", "6field"]

    @pytest.mark.asyncio
    async def test_missing_slots_dropped_in_order(self, explorer_factory) -> None:
        """Empty or unparseable slots are dropped, order kept."""
        first, second = make_address(1), make_address(2)
        client = explorer_factory(
            {
                (STAKING_PROGRAM, "provider_list", "3field"): first,
                (STAKING_PROGRAM, "provider_list", "5field"): second,
                (STAKING_PROGRAM, "provider_list", "6field"): "garbage",
            }
        )

        assert await client.get_feed_providers("3", max_providers=8) == [first, second]

    @pytest.mark.asyncio
    async def test_stake_uses_composite_key(self, explorer_factory) -> None:
        """Stake is keyed by address field plus feed id."""
        address = make_address(1)
        key = f"{convert_address_to_field(address) + 3}field"
        assert provider_key(address, "3") == key

        client = explorer_factory({(STAKING_PROGRAM, "stakes", key): "5000000u128"})
        assert await client.get_provider_stake(address, "3") == 5000000

    @pytest.mark.asyncio
    async def test_proposed_price_scaled(self, explorer_factory) -> None:
        """Proposed prices are scaled to decimals."""
        address = make_address(1)
        key = provider_key(address, "3")
        client = explorer_factory({(SUBMIT_PROGRAM, "temp_price", key): "1035000u128"})

        assert await client.get_provider_proposed_price(address, "3") == 1.035

    @pytest.mark.asyncio
    async def test_no_proposal_is_none(self, explorer_factory) -> None:
        """A missing proposal is None."""
        client = explorer_factory({})
        assert await client.get_provider_proposed_price(make_address(1), "3") is None

    @pytest.mark.asyncio
    async def test_malformed_address_raises(self, explorer_factory) -> None:
        """Invalid provider addresses raise."""
        client = explorer_factory({})
        with pytest.raises(AddressError):
            await client.get_provider_stake("not-an-address", "3")


class TestFeedScalars:
    """Test feed-level lookups."""

    @pytest.mark.asyncio
    async def test_feed_info(self, explorer_factory) -> None:
        """The feed struct decodes member by member."""
        client = explorer_factory({(FEED_PROGRAM, "feeds", "3field"): FEED_STRUCT})

        assert await client.get_feed_info("3") == FeedInfo(
            creator=CREATOR,
            min_stake=1000000,
            slashing_threshold=3,
            aggregation_window=10,
            challenge_window=20,
            paused=True,
        )

    @pytest.mark.asyncio
    async def test_feed_info_missing(self, explorer_factory) -> None:
        """A missing feed entry is None."""
        client = explorer_factory({})
        assert await client.get_feed_info("3") is None

    @pytest.mark.asyncio
    async def test_feed_info_partial(self, explorer_factory) -> None:
        """Absent members fall back to defaults."""
        client = explorer_factory(
            {(FEED_PROGRAM, "feeds", "3field"): "owner: aleo1..., paused: true"}
        )

        info = await client.get_feed_info("3")
        assert info is not None
        assert info.paused is True
        assert info.creator == ""
        assert info.min_stake == 0

    @pytest.mark.asyncio
    async def test_prices_and_totals(self, explorer_factory) -> None:
        """Totals stay integers, prices are scaled."""
        client = explorer_factory(
            {
                (STAKING_PROGRAM, "total_staked", "3field"): "250000000u128",
                (AGGREGATE_PROGRAM, "latest_price", "3field"): "1040000u128",
                (AGGREGATE_PROGRAM, "proposal_median", "3field"): "1030000u128",
            }
        )

        assert await client.get_total_staked("3") == 250000000
        assert await client.get_current_price("3") == 1.04
        assert await client.get_proposal_median("3") == 1.03

    @pytest.mark.asyncio
    async def test_zero_median_is_none(self, explorer_factory) -> None:
        """A zero median means no proposal."""
        client = explorer_factory({(AGGREGATE_PROGRAM, "proposal_median", "3field"): "0u128"})
        assert await client.get_proposal_median("3") is None

    @pytest.mark.asyncio
    async def test_proposal_state(self, explorer_factory) -> None:
        """Proposal state fields decode with their parsers."""
        proposer = make_address(4)
        client = explorer_factory(
            {
                (STAKING_PROGRAM, "provider_count", "3field"): "5u8",
                (AGGREGATE_PROGRAM, "proposal_proposer", "3field"): proposer,
                (AGGREGATE_PROGRAM, "proposal_block", "3field"): "812345u32",
                (AGGREGATE_PROGRAM, "proposal_slashed", "3field"): "false",
                (AGGREGATE_PROGRAM, "aggregate_done", "3field"): "true",
                (AGGREGATE_PROGRAM, "slasher_reward", "3field"): "1500u64",
                (AGGREGATE_PROGRAM, "last_propose_block", "3field"): "812300u32",
            }
        )

        assert await client.get_provider_count("3") == 5
        assert await client.get_proposal_proposer("3") == proposer
        assert await client.get_proposal_block("3") == 812345
        assert await client.get_proposal_slashed("3") is False
        assert await client.get_aggregate_done("3") is True
        assert await client.get_slasher("3") is None
        assert await client.get_slasher_reward("3") == 1500
        assert await client.get_last_propose_block("3") == 812300

    @pytest.mark.asyncio
    async def test_missing_scalars_are_none(self, explorer_factory) -> None:
        """Missing proposal fields are None."""
        client = explorer_factory({})

        assert await client.get_provider_count("3") is None
        assert await client.get_proposal_block("3") is None
        assert await client.get_proposal_slashed("3") is None
        assert await client.get_aggregate_done("3") is None

    @pytest.mark.asyncio
    async def test_feed_id_normalised_in_keys(self, explorer_factory) -> None:
        """Feed ids with leading zeros address the same entries as the plain id."""
        calls: list[str] = []
        client = explorer_factory(
            {
                (STAKING_PROGRAM, "total_staked", "3field"): "600u128",
                (STAKING_PROGRAM, "provider_list", "3field"): CREATOR,
            },
            calls,
        )

        assert feed_key("03") == "3field"
        assert await client.get_total_staked("03") == 600
        assert await client.get_feed_providers("03", max_providers=1) == [CREATOR]
        assert all(path.endswith("/3field") for path in calls)
