"""Parsing utilities for common data transformations."""

from decimal import Decimal

from blockdiff.helpers.constants import UINT256_BITS, WEI_PER_ETH

_HEX_DIGITS = frozenset("0123456789abcdef")

# Characters that wrap a rendered address without being part of it
_ADDRESS_DECORATION = "\"' \t\r\n"


def parse_hex_int(hex_value: str | None, default: int = 0) -> int:
    """Parse hex string to integer.

    Args:
        hex_value: Hex-encoded string or None
        default: Default value if hex_value is None

    Returns:
        int: Parsed integer value

    Example:
        >>> parse_hex_int("0xff")
        255
        >>> parse_hex_int(None, 0)
        0
    """
    if hex_value is None:
        return default
    return int(hex_value, 16)


def parse_optional_hex_int(hex_value: str | None) -> int | None:
    """Parse a hex quantity, keeping None as None.

    Example:
        >>> parse_optional_hex_int("0x5208")
        21000
        >>> parse_optional_hex_int(None) is None
        True
    """
    if hex_value is None:
        return None
    return int(hex_value, 16)


def _normalize_hex(value: str, n_bytes: int) -> str | None:
    text = value.strip(_ADDRESS_DECORATION).lower()
    if text.startswith("0x"):
        text = text[2:]
    if len(text) != n_bytes * 2 or not set(text) <= _HEX_DIGITS:
        return None
    return "0x" + text


def normalize_address(value: str | None) -> str | None:
    """Normalize a rendered 20-byte address to lowercase 0x-prefixed hex.

    Surrounding quotes and whitespace are stripped. Anything that is not
    exactly 40 hex digits after the optional 0x prefix is rejected.

    Args:
        value: Address string as rendered by a node or a log line

    Returns:
        The normalized address, or None if value is not a valid address

    Example:
        >>> normalize_address('"0xABCDEF0000000000000000000000000000000001"')
        '0xabcdef0000000000000000000000000000000001'
        >>> normalize_address("0x1234") is None
        True
    """
    if value is None:
        return None
    return _normalize_hex(value, 20)


def normalize_hash(value: str | None) -> str | None:
    """Normalize a 32-byte hash to lowercase 0x-prefixed hex, or None if invalid."""
    if value is None:
        return None
    return _normalize_hex(value, 32)


def wrapping_sub(current: int, previous: int, bits: int = UINT256_BITS) -> int:
    """Subtract two unsigned integers modulo 2**bits.

    Mirrors fixed-width unsigned subtraction: it never raises, and a decrease
    wraps around to a large unsigned value.

    Example:
        >>> wrapping_sub(10, 3)
        7
        >>> wrapping_sub(95, 100) == 2**256 - 5
        True
    """
    return (current - previous) % (1 << bits)


def to_signed(value: int, bits: int = UINT256_BITS) -> int:
    """Interpret an unsigned bits-wide integer as two's complement.

    Example:
        >>> to_signed(2**256 - 5)
        -5
        >>> to_signed(7)
        7
    """
    value %= 1 << bits
    if value >= 1 << (bits - 1):
        return value - (1 << bits)
    return value


def wei_to_eth(wei: int | None) -> Decimal | None:
    """Convert Wei to ETH without losing precision.

    Example:
        >>> wei_to_eth(1500000000000000000)
        Decimal('1.5')
        >>> wei_to_eth(None) is None
        True
    """
    if wei is None:
        return None
    return Decimal(wei) / Decimal(WEI_PER_ETH)
