from __future__ import annotations

from typing import Tuple

from web3 import Web3

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Marker callers use to denote the chain's native asset instead of an ERC20.
NATIVE_ASSET = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"


def _norm(a: str | None) -> str:
    return (a or "").strip()


def _norm_lower(a: str | None) -> str:
    return _norm(a).lower()


def is_zero_address(addr: str | None) -> bool:
    addr = _norm_lower(addr)
    return not addr or addr == ZERO_ADDRESS


def is_native(addr: str | None) -> bool:
    return _norm_lower(addr) == NATIVE_ASSET


def norm_token(addr: str | None) -> str:
    """
    Validate and lower-case a token identifier.

    Raises ValueError when the value is not a 20-byte hex address.
    """
    addr = _norm(addr)
    if not Web3.is_address(addr):
        raise ValueError(f"Invalid address: {addr!r}")
    return addr.lower()


def to_wrapped(addr: str, wrapped_native: str) -> str:
    """Replace the native-asset marker with the wrapped-native token."""
    addr = _norm_lower(addr)
    return _norm_lower(wrapped_native) if addr == NATIVE_ASSET else addr


def sort_tokens(token_a: str, token_b: str) -> Tuple[str, str]:
    """
    Canonical ascending ordering of two addresses (numeric comparison).
    """
    a = _norm_lower(token_a)
    b = _norm_lower(token_b)
    return (a, b) if int(a, 16) < int(b, 16) else (b, a)
