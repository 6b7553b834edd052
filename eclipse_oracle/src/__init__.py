"""
Eclipse Oracle SDK - Read-only client for Eclipse Oracle feeds on Aleo

This module provides typed access to on-chain feed state:
- AleoExplorerClient: Mapping lookups through the explorer REST API
- AleoRpcClient: Price history and slashing events via transaction search
- FeedService: Complete feed view assembled from concurrent lookups
- parsing: Scalar extractors over Leo plaintext mapping values
- address: Aleo address to field conversion
"""

from .address import (
    AddressDecodeError,
    AddressError,
    AddressPrefixError,
    convert_address_to_field,
)
from .base import BaseClient, ClientError, ClientHTTPError
from .ExplorerClient import AleoExplorerClient, ApiClientConfig
from .FeedService import FeedService
from .models import Feed, FeedInfo, PricePoint, Provider, SlashedAddress
from .parsing import parse_address, parse_bool, parse_field, parse_uint, parse_uint_or_none
from .TransactionSearch import AleoRpcClient

__all__ = [
    "AddressDecodeError",
    "AddressError",
    "AddressPrefixError",
    "AleoExplorerClient",
    "AleoRpcClient",
    "ApiClientConfig",
    "BaseClient",
    "ClientError",
    "ClientHTTPError",
    "Feed",
    "FeedInfo",
    "FeedService",
    "PricePoint",
    "Provider",
    "SlashedAddress",
    "convert_address_to_field",
    "parse_address",
    "parse_bool",
    "parse_field",
    "parse_uint",
    "parse_uint_or_none",
]
