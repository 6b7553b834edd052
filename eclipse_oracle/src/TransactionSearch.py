"""AleoRpcClient: Feed history mined from the transaction-search JSON-RPC.

Endpoint: POST {rpc_url}, method ``aleoTransactionsForProgram``
Params: {programId, functionName, page, maxTransactions}
Response: {"result": [Transaction, ...]}

A transaction as consumed here:

.. code-block:: json

    {
      "finalizedAt": "2025-03-01T10:00:00Z",
      "transaction": {
        "execution": {
          "transitions": [
            {
              "program": "eclipse_oracle_aggregate_2.aleo",
              "function": "propose",
              "inputs": [
                {"name": "feed_id", "value": "3field"},
                {"name": "price", "value": "1030000u128"}
              ]
            }
          ]
        }
      }
    }

Price history comes from ``propose`` transitions; slashing events from
``slash_aggregator`` / ``slash_provider`` transitions. Both keep only
transitions whose inputs reference the requested feed id.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

import httpx

from .address import ADDRESS_PREFIX
from .base import BaseClient, ClientError
from .ExplorerClient import AGGREGATE_PROGRAM, ApiClientConfig, feed_key
from .models import PricePoint, SlashedAddress, scale_price
from .parsing import parse_address, parse_uint_or_none

logger = logging.getLogger(__name__)

RPC_METHOD = "aleoTransactionsForProgram"
PAGE_SIZE = 1000

PROPOSE_FUNCTION = "propose"
SLASH_FUNCTIONS = {
    "slash_aggregator": "aggregator",
    "slash_provider": "provider",
}

_TIMESTAMP_KEYS = ("finalizedAt", "timestamp", "block_timestamp")


def transaction_timestamp(tx: dict[str, Any]) -> str:
    """Return the finalization timestamp of a transaction as a string."""
    for key in _TIMESTAMP_KEYS:
        value = tx.get(key)
        if value is not None:
            return str(value)
    return ""


def iter_transitions(tx: dict[str, Any]) -> Iterator[dict[str, Any]]:
    """Yield the execution transitions of a transaction.

    Deployments, fee-only entries and other shapes without an execution
    yield nothing; non-dict transitions are skipped.
    """
    body = tx.get("transaction", tx)
    if not isinstance(body, dict):
        return
    execution = body.get("execution")
    if not isinstance(execution, dict):
        return
    transitions = execution.get("transitions")
    if not isinstance(transitions, list):
        return
    for transition in transitions:
        if isinstance(transition, dict):
            yield transition


def transition_inputs(transition: dict[str, Any]) -> list[dict[str, Any]]:
    """Return the dict entries of a transition's inputs."""
    inputs = transition.get("inputs")
    if not isinstance(inputs, list):
        return []
    return [item for item in inputs if isinstance(item, dict)]


def input_values(transition: dict[str, Any]) -> list[str]:
    """Return the string values of a transition's inputs."""
    return [str(item.get("value", "")) for item in transition_inputs(transition)]


def references_feed(transition: dict[str, Any], feed_id: str) -> bool:
    """Check whether any input is the ``{feed_id}field`` literal."""
    target = feed_key(feed_id)
    return any(value.strip() == target for value in input_values(transition))


def proposed_price(transition: dict[str, Any]) -> int | None:
    """Extract the raw proposed price from a ``propose`` transition.

    Prefers the input named ``price``; falls back to the first u128 input.
    """
    inputs = transition_inputs(transition)
    for item in inputs:
        if item.get("name") == "price":
            value = parse_uint_or_none(str(item.get("value", "")), "u128")
            if value is not None:
                return value
    for item in inputs:
        value = parse_uint_or_none(str(item.get("value", "")), "u128")
        if value is not None:
            return value
    return None


def slashed_address(transition: dict[str, Any]) -> str | None:
    """Extract the offender address from a slash transition.

    Only ``aleo1`` values count, so long field literals are never mistaken
    for an address.
    """
    for value in input_values(transition):
        address = parse_address(value)
        if address and address.startswith(ADDRESS_PREFIX):
            return address
    return None


class AleoRpcClient(BaseClient):
    """JSON-RPC client for the Aleo transaction-search service.

    :ivar rpc_url: JSON-RPC endpoint.
    :ivar program_id: Program whose transitions are searched.
    :ivar page_size: Transactions requested per page.
    """

    def __init__(
        self,
        config: ApiClientConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        program_id: str = AGGREGATE_PROGRAM,
        page_size: int = PAGE_SIZE,
    ) -> None:
        """Initialize the RPC client.

        :param config: Connection settings; only ``rpc_url`` and ``timeout`` apply.
        :param http_client: Optional dedicated httpx client.
        :param program_id: Program to search (default: aggregate program).
        :param page_size: Transactions per page, at most 1000.
        :raises ValueError: If page_size is out of range.
        """
        if not 1 <= page_size <= PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {PAGE_SIZE}")
        config = config or ApiClientConfig()
        super().__init__(timeout=config.timeout, http_client=http_client)
        self.rpc_url = config.rpc_url
        self.program_id = program_id
        self.page_size = page_size

    async def transactions_for_program(
        self,
        program_id: str,
        function_name: str | None = None,
        page: int = 0,
        max_transactions: int = PAGE_SIZE,
    ) -> list[dict[str, Any]] | None:
        """Fetch one page of transactions for a program.

        :param program_id: Program id to search.
        :param function_name: Optional function filter.
        :param page: Zero-based page index.
        :param max_transactions: Page size.
        :returns: Transactions, or None on transport or RPC error.
        """
        params: dict[str, Any] = {
            "programId": program_id,
            "page": page,
            "maxTransactions": max_transactions,
        }
        if function_name:
            params["functionName"] = function_name

        payload = {"jsonrpc": "2.0", "id": 1, "method": RPC_METHOD, "params": params}

        try:
            response = await self._post(self.rpc_url, json=payload)
            data = response.json()
        except ClientError as e:
            logger.warning(
                f"[rpc] {RPC_METHOD} {program_id}/{function_name} page {page} failed: {e}"
            )
            return None
        except ValueError as e:
            logger.warning(f"[rpc] Failed to parse response: {e}")
            return None

        if not isinstance(data, dict) or "error" in data:
            logger.warning(f"[rpc] {RPC_METHOD} returned an error: {data}")
            return None

        result = data.get("result")
        if not isinstance(result, list):
            logger.warning(f"[rpc] Unexpected result shape: {result!r}")
            return None
        return [tx for tx in result if isinstance(tx, dict)]

    async def _paginate(
        self, function_name: str, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Collect transactions page by page.

        Stops on a failed or empty page, a page shorter than ``page_size``,
        or once ``limit`` transactions have been collected.
        """
        transactions: list[dict[str, Any]] = []
        page = 0
        while limit is None or len(transactions) < limit:
            batch = await self.transactions_for_program(
                self.program_id, function_name, page, self.page_size
            )
            if not batch:
                break
            transactions.extend(batch)
            if len(batch) < self.page_size:
                break
            page += 1
        logger.debug(f"[rpc] {function_name}: {len(transactions)} transactions fetched")
        return transactions

    async def get_price_history(self, feed_id: str) -> list[PricePoint]:
        """Collect proposed prices for a feed, oldest first.

        :param feed_id: Feed id.
        :returns: Price points sorted by timestamp.
        """
        history: list[PricePoint] = []
        for tx in await self._paginate(PROPOSE_FUNCTION):
            timestamp = transaction_timestamp(tx)
            for transition in iter_transitions(tx):
                if not self._matches(transition, PROPOSE_FUNCTION, feed_id):
                    continue
                price = proposed_price(transition)
                if price is not None:
                    history.append(PricePoint(timestamp=timestamp, price=scale_price(price)))

        history.sort(key=lambda point: point.timestamp)
        return history

    async def get_slashed_addresses(self, feed_id: str) -> list[SlashedAddress]:
        """Collect slashing events for a feed, oldest first.

        Each slash function is searched separately; the search for each stops
        once one page worth of transactions has been collected.

        :param feed_id: Feed id.
        :returns: Slashed addresses sorted by date.
        """
        slashed: list[SlashedAddress] = []
        for function_name, slash_type in SLASH_FUNCTIONS.items():
            for tx in await self._paginate(function_name, limit=self.page_size):
                date = transaction_timestamp(tx)
                for transition in iter_transitions(tx):
                    if not self._matches(transition, function_name, feed_id):
                        continue
                    address = slashed_address(transition)
                    if address:
                        slashed.append(SlashedAddress(address=address, date=date, type=slash_type))

        slashed.sort(key=lambda item: item.date)
        return slashed

    def _matches(self, transition: dict[str, Any], function_name: str, feed_id: str) -> bool:
        program = transition.get("program") or transition.get("programId")
        function = transition.get("function") or transition.get("functionName")
        return (
            program == self.program_id
            and function == function_name
            and references_feed(transition, feed_id)
        )
