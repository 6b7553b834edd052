"""Typed views over Eclipse Oracle feed data.

All models are built fresh per request and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

# On-chain prices are u128 integers scaled by 10**PRICE_DECIMALS.
PRICE_DECIMALS = 6
PRICE_SCALE = 10**PRICE_DECIMALS

SlashType = Literal["aggregator", "provider"]


def scale_price(value: int) -> float:
    """Convert a raw on-chain price to its decimal value."""
    return value / PRICE_SCALE


@dataclass(frozen=True)
class FeedInfo:
    """Configuration snapshot of a feed.

    :ivar creator: Creator address (empty when absent).
    :ivar min_stake: Minimum provider stake.
    :ivar slashing_threshold: Deviation threshold triggering slashing.
    :ivar aggregation_window: Blocks in an aggregation round.
    :ivar challenge_window: Blocks during which a proposal can be challenged.
    :ivar paused: Whether the feed is paused.
    """

    creator: str
    min_stake: int
    slashing_threshold: int
    aggregation_window: int
    challenge_window: int
    paused: bool


@dataclass(frozen=True)
class Provider:
    """A provider staking on a feed.

    :ivar address: Provider address.
    :ivar staked_credits: Staked amount.
    :ivar proposed_price: Pending proposed price, None if no proposal.
    """

    address: str
    staked_credits: int
    proposed_price: float | None = None


@dataclass(frozen=True)
class PricePoint:
    timestamp: str
    price: float


@dataclass(frozen=True)
class SlashedAddress:
    address: str
    date: str
    type: SlashType


@dataclass(frozen=True)
class Feed:
    """Aggregate view of a feed.

    Optional fields are None when the corresponding mapping entry is absent
    (or could not be fetched).
    """

    id: str
    name: str
    infos: FeedInfo | None
    total_staked: int
    submitters: list[Provider] = field(default_factory=list)
    price_history: list[PricePoint] = field(default_factory=list)
    slashed_addresses: list[SlashedAddress] = field(default_factory=list)
    current_price: float | None = None
    provider_count: int | None = None
    proposal_median: float | None = None
    proposal_proposer: str | None = None
    proposal_block: int | None = None
    proposal_slashed: bool | None = None
    aggregate_done: bool | None = None
    slasher: str | None = None
    slasher_reward: int | None = None
    last_propose_block: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dict."""
        return asdict(self)
