"""Shared test fixtures for the Eclipse Oracle SDK."""

from collections.abc import Callable

import httpx
import pytest

from eclipse_oracle.src.ExplorerClient import AleoExplorerClient
from eclipse_oracle.src.TransactionSearch import AleoRpcClient
from eclipse_oracle.tests.helpers import MappingTable, explorer_transport, rpc_transport


@pytest.fixture
def explorer_factory() -> Callable[..., AleoExplorerClient]:
    """Build an explorer client over a mocked mapping table."""

    def build(values: MappingTable, calls: list[str] | None = None) -> AleoExplorerClient:
        http_client = httpx.AsyncClient(transport=explorer_transport(values, calls))
        return AleoExplorerClient(http_client=http_client)

    return build


@pytest.fixture
def rpc_factory() -> Callable[..., AleoRpcClient]:
    """Build an RPC client over a mocked page function."""

    def build(
        pages: Callable[[dict], list],
        calls: list[dict] | None = None,
        page_size: int = 1000,
    ) -> AleoRpcClient:
        http_client = httpx.AsyncClient(transport=rpc_transport(pages, calls))
        return AleoRpcClient(http_client=http_client, page_size=page_size)

    return build
