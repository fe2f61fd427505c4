# core/services/utils.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Optional

from hexbytes import HexBytes
from web3 import Web3


def to_json_safe(obj: Any) -> Any:
    """
    Turn web3 return values (AttributeDict receipts, HexBytes hashes, log
    tuples) into plain JSON primitives.

    Integers wider than 2**53 are kept as ints; callers that hand amounts to a
    browser stringify them themselves.
    """
    if isinstance(obj, HexBytes):
        return Web3.to_hex(obj)
    if isinstance(obj, (bytes, bytearray)):
        return "0x" + bytes(obj).hex()
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, Mapping):
        return {str(k): to_json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_json_safe(v) for v in obj]
    return str(obj)


def receipt_summary(receipt: Optional[Mapping]) -> Dict[str, Any]:
    """Fields of a transaction receipt the router reports back to its callers."""
    rcpt = receipt or {}
    return {
        "block_number": rcpt.get("blockNumber"),
        "status": None if receipt is None else int(rcpt.get("status", 0)),
        "gas_used": int(rcpt.get("gasUsed") or 0),
        "effective_price_wei": int(rcpt.get("effectiveGasPrice") or 0),
        "logs": len(rcpt.get("logs") or []),
    }
