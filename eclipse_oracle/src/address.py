"""Aleo address to field conversion.

Aleo addresses are bech32m strings (``aleo1...``). Mapping keys that combine
an address with a feed id use the address's field representation: the
decoded bytes, read little-endian.

.. code-block:: python

    >>> key = convert_address_to_field(address) + int(feed_id)
    >>> f"{key}field"
"""

import bech32

ADDRESS_PREFIX = "aleo1"
ADDRESS_HRP = "aleo"

# Checksum constant of the bech32m variant (BIP-350)
BECH32M_CONST = 0x2BC830A3

MAX_ENCODED_LENGTH = 90


class AddressError(ValueError):
    """Raised when a string is not a usable Aleo address."""

    pass


class AddressDecodeError(AddressError):
    """Raised when bech32m decoding fails (charset, case or checksum)."""

    pass


class AddressPrefixError(AddressError):
    """Raised when the decoded human-readable part is not ``aleo``."""

    pass


def bech32m_decode(bech: str) -> tuple[str | None, list[int] | None]:
    """Decode a bech32m string into its human-readable part and 5-bit words.

    Mirrors :func:`bech32.bech32_decode` but verifies the checksum against
    the bech32m constant.

    :param bech: Encoded string.
    :returns: ``(hrp, words)`` with the checksum stripped, or ``(None, None)``.
    """
    if any(ord(x) < 33 or ord(x) > 126 for x in bech):
        return (None, None)
    if bech.lower() != bech and bech.upper() != bech:
        return (None, None)
    bech = bech.lower()
    pos = bech.rfind("1")
    if pos < 1 or pos + 7 > len(bech) or len(bech) > MAX_ENCODED_LENGTH:
        return (None, None)
    if not all(x in bech32.CHARSET for x in bech[pos + 1:]):
        return (None, None)
    hrp = bech[:pos]
    data = [bech32.CHARSET.find(x) for x in bech[pos + 1:]]
    if bech32.bech32_polymod(bech32.bech32_hrp_expand(hrp) + data) != BECH32M_CONST:
        return (None, None)
    return (hrp, data[:-6])


def address_to_bytes(address: str) -> bytes:
    """Decode an Aleo address to its raw bytes.

    :param address: Bech32m-encoded address (e.g., "aleo1...").
    :returns: Decoded payload bytes.
    :raises AddressError: If the address does not start with ``aleo1``.
    :raises AddressDecodeError: If the address is not valid bech32m.
    :raises AddressPrefixError: If the human-readable part is not ``aleo``.
    """
    if not address.startswith(ADDRESS_PREFIX):
        raise AddressError(f"Invalid address: {address!r}")

    hrp, words = bech32m_decode(address)
    if words is None:
        raise AddressDecodeError(f"Failed to decode bech32m address: {address}")

    if hrp != ADDRESS_HRP:
        raise AddressPrefixError(
            f"Invalid Aleo address prefix: Expected '{ADDRESS_HRP}', got '{hrp}'"
        )

    # Convert 5-bit groups to bytes
    payload = bech32.convertbits(words, 5, 8, False)
    if payload is None:
        raise AddressDecodeError(f"Failed to convert address to bytes: {address}")

    return bytes(payload)


def convert_address_to_field(address: str) -> int:
    """Convert an Aleo address to its field element.

    The decoded bytes are reversed and read as a big-endian unsigned integer,
    i.e. the field is the payload in little-endian order.

    :param address: Bech32m-encoded address.
    :returns: Field value as int.
    :raises AddressError: On any address format violation.
    """
    return int.from_bytes(address_to_bytes(address)[::-1], "big")
