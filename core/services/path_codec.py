"""
Multihop path encoding.

A path is the packed concatenation `token0 | fee0 | token1 | fee1 | ... | tokenN`
with 20-byte addresses and 3-byte big-endian fees, which is what the
exchange router expects for `exactInput` / `exactOutput`.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from web3 import Web3

from core.services.exceptions import InvalidInputError, LengthMismatchError
from core.services.normalize import to_wrapped

ADDR_SIZE = 20
FEE_SIZE = 3
HOP_SIZE = ADDR_SIZE + FEE_SIZE


class PathCodec:
    def __init__(self, wrapped_native: str) -> None:
        self.wrapped_native = wrapped_native

    def _encode(self, tokens: Sequence[str], fees: Sequence[int]) -> bytes:
        if len(tokens) < 2 or len(fees) != len(tokens) - 1:
            raise LengthMismatchError(len(tokens), len(fees))

        out = bytearray()
        for i, token in enumerate(tokens):
            out += Web3.to_bytes(hexstr=to_wrapped(token, self.wrapped_native))
            if i < len(fees):
                fee = int(fees[i])
                if fee < 0 or fee >= 1 << 24:
                    raise InvalidInputError(f"Fee does not fit uint24: {fee}")
                out += fee.to_bytes(FEE_SIZE, "big")
        return bytes(out)

    def build_forward(self, tokens: Sequence[str], fees: Sequence[int]) -> bytes:
        return self._encode(tokens, fees)

    def build_reversed(self, tokens: Sequence[str], fees: Sequence[int]) -> bytes:
        """Path walked from the output token back to the input token."""
        if len(fees) != len(tokens) - 1:
            raise LengthMismatchError(len(tokens), len(fees))
        return self._encode(list(reversed(tokens)), list(reversed(fees)))

    @staticmethod
    def decode(path: bytes) -> Tuple[List[str], List[int]]:
        if len(path) < 2 * ADDR_SIZE + FEE_SIZE or (len(path) - ADDR_SIZE) % HOP_SIZE != 0:
            raise InvalidInputError(f"Malformed path of {len(path)} bytes")

        tokens: List[str] = []
        fees: List[int] = []
        offset = 0
        while True:
            tokens.append(Web3.to_hex(path[offset:offset + ADDR_SIZE]))
            offset += ADDR_SIZE
            if offset == len(path):
                break
            fees.append(int.from_bytes(path[offset:offset + FEE_SIZE], "big"))
            offset += FEE_SIZE
        return tokens, fees
