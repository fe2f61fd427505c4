from __future__ import annotations

from web3 import Web3

ZERO = "0x0000000000000000000000000000000000000000"


def validate_addr(v: str, *, allow_zero: bool = False) -> str:
    """Lowercase 0x address; rejects malformed and (by default) zero addresses."""
    v = (v or "").strip()
    if not Web3.is_address(v):
        raise ValueError("Invalid address (expected 0x...).")
    if not allow_zero and v.lower() == ZERO:
        raise ValueError("Address cannot be zero.")
    return v.lower()


def validate_tx_hash(v: str) -> str:
    """Lowercase 0x-prefixed 32-byte transaction hash."""
    v = (v or "").strip().lower()
    if len(v) != 66 or not v.startswith("0x") or any(c not in "0123456789abcdef" for c in v[2:]):
        raise ValueError("Invalid transaction hash (expected 0x + 64 hex chars).")
    return v
