"""Shared builders for the Eclipse Oracle SDK tests."""

import json
from collections.abc import Callable

import bech32
import httpx

from eclipse_oracle.src.address import BECH32M_CONST


def encode_bech32m(hrp: str, payload: bytes) -> str:
    """Encode bytes as a bech32m string."""
    words = bech32.convertbits(list(payload), 8, 5, True)
    values = bech32.bech32_hrp_expand(hrp) + words
    polymod = bech32.bech32_polymod(values + [0] * 6) ^ BECH32M_CONST
    checksum = [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]
    return hrp + "1" + "".join(bech32.CHARSET[d] for d in words + checksum)


def make_address(seed: int) -> str:
    """Build a valid Aleo address whose 32-byte payload is all ``seed``."""
    return encode_bech32m("aleo", bytes([seed]) * 32)


MappingTable = dict[tuple[str, str, str], str]


def explorer_transport(
    values: MappingTable, calls: list[str] | None = None
) -> httpx.MockTransport:
    """Mock explorer answering ``values[(program, mapping, key)]`` or JSON null."""

    def handler(request: httpx.Request) -> httpx.Response:
        parts = request.url.path.split("/")
        if calls is not None:
            calls.append(request.url.path)
        program, mapping, key = parts[-4], parts[-2], parts[-1]
        value = values.get((program, mapping, key))
        if value is None:
            return httpx.Response(200, text="null")
        return httpx.Response(200, json=value)

    return httpx.MockTransport(handler)


def rpc_transport(
    pages: Callable[[dict], list], calls: list[dict] | None = None
) -> httpx.MockTransport:
    """Mock JSON-RPC endpoint returning ``pages(params)`` as the result."""

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if calls is not None:
            calls.append(body["params"])
        result = pages(body["params"])
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    return httpx.MockTransport(handler)
