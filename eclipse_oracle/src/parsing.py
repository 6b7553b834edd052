"""Parsing of mapping values returned by the explorer API.

Mapping values arrive as Leo plaintext, a loosely structured text blob:

.. code-block:: text

    {
      creator: aleo1...,
      min_stake: 1000000u64,
      slashing_threshold: 3u64,
      aggregation_window: 10u32,
      challenge_window: 20u32,
      paused: false
    }

Two grammar rules cover everything the SDK reads:

    literal := <digits> <type-tag>
    type-tag := u8 | u16 | u32 | u64 | u128 | i8 | ... | i128 | field | scalar | group
    struct  := "{"? (name ":" value) ("," | newline) ... "}"?

All scalar extractors are total: ``None`` input or unmatched text yields the
documented sentinel (``0`` or ``None``), never an exception.

Note that :func:`parse_uint` returns ``0`` both when the value is present and
zero and when it is absent. Use :func:`parse_uint_or_none` where the
difference matters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

TYPE_TAGS = (
    "u128", "u64", "u32", "u16", "u8",
    "i128", "i64", "i32", "i16", "i8",
    "field", "scalar", "group",
)

# Tags ordered so longer widths win (u128 before u16...)
_LITERAL_RE = re.compile(r"([0-9]+)(" + "|".join(TYPE_TAGS) + r")")
_STRUCT_ENTRY_RE = re.compile(r"([A-Za-z_][A-Za-z0-9_]*)\s*:\s*([^,{}\n]*)")
_DIGITS_RE = re.compile(r"([0-9]+)")
_ADDRESS_RE = re.compile(r"([a-z0-9]{59,})")


@dataclass(frozen=True)
class Literal:
    """A typed numeric literal such as ``1000u64`` or ``3field``.

    :ivar value: Integer value.
    :ivar type_tag: Type suffix (e.g. "u64", "field").
    """

    value: int
    type_tag: str

    def __str__(self) -> str:
        return f"{self.value}{self.type_tag}"


def iter_literals(raw: str | None) -> Iterator[Literal]:
    """Yield every typed literal in ``raw`` in text order."""
    if not raw:
        return
    for match in _LITERAL_RE.finditer(raw):
        yield Literal(int(match.group(1)), match.group(2))


def parse_struct(raw: str | None) -> dict[str, str]:
    """Parse a flat Leo struct into a ``name -> value text`` dict.

    Nested structs are flattened: their members appear under their own
    names. Later duplicates do not override the first occurrence.

    :param raw: Raw mapping value.
    :returns: Dict of member names to stripped value text (empty if None).
    """
    entries: dict[str, str] = {}
    if not raw:
        return entries
    for name, value in _STRUCT_ENTRY_RE.findall(raw):
        entries.setdefault(name, value.strip())
    return entries


def parse_uint_or_none(raw: str | None, type_tag: str) -> int | None:
    """Return the first ``<digits><type_tag>`` literal, or None if absent.

    :param raw: Raw mapping value.
    :param type_tag: Width tag to anchor on ("u128", "u64", "u32", ...).
    """
    for literal in iter_literals(raw):
        if literal.type_tag == type_tag:
            return literal.value
    return None


def parse_uint(raw: str | None, type_tag: str) -> int:
    """Parse the first unsigned integer carrying ``type_tag``.

    :param raw: Raw mapping value.
    :param type_tag: Width tag to anchor on ("u128", "u64", "u32").
    :returns: Parsed value, or 0 if absent or ``raw`` is None.

    .. code-block:: python

        >>> parse_uint("42u64", "u64")
        42
        >>> parse_uint("42u64", "u128")
        0
    """
    value = parse_uint_or_none(raw, type_tag)
    return 0 if value is None else value


def parse_bool(raw: str | None) -> bool | None:
    """Return None for None or empty input, otherwise whether "true" occurs in ``raw``."""
    if not raw:
        return None
    return "true" in raw


def parse_field(raw: str | None) -> int | None:
    """Parse the first run of digits anywhere in ``raw``.

    No type suffix is required. Used for ids, block heights and counts.

    :returns: Parsed value, 0 if ``raw`` holds no digits, None if ``raw`` is
        None or empty.
    """
    if not raw:
        return None
    match = _DIGITS_RE.search(raw)
    return int(match.group(1)) if match else 0


def parse_address(raw: str | None) -> str | None:
    """Return the first lowercase alphanumeric run of 59+ characters."""
    if not raw:
        return None
    match = _ADDRESS_RE.search(raw)
    return match.group(1) if match else None
