from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from core.domain.gateways.token_gateway_interface import TokenGateway
from core.services.exceptions import ValueMismatchError
from core.services.normalize import is_native, to_wrapped

logger = logging.getLogger(__name__)


@dataclass
class CustodyLedger:
    """
    Per-call bookkeeping of value moved by the router.

    For exact-output calls `pulled - refunded` equals the realized input.
    """

    pulled: int = 0
    paid_out: int = 0
    refunded: int = 0

    def as_dict(self) -> dict:
        return {"pulled": str(self.pulled), "paid_out": str(self.paid_out), "refunded": str(self.refunded)}


class FundCustodian:
    """
    Moves value in and out of the router account for one swap call.

    Native-asset amounts are wrapped on the way in and unwrapped on the way
    out, so the exchange only ever sees the wrapped token.
    """

    def __init__(self, gateway: TokenGateway) -> None:
        self.gateway = gateway
        self.ledger = CustodyLedger()

    @property
    def holder(self) -> str:
        return self.gateway.holder

    def token_for(self, token: str) -> str:
        return to_wrapped(token, self.gateway.wrapped_native)

    def take_funds(
        self,
        caller: str,
        token: str,
        amount: int,
        attached_value: int,
        funding_tx: Optional[str] = None,
    ) -> None:
        amount = int(amount)
        attached_value = int(attached_value or 0)

        if is_native(token):
            if attached_value != amount:
                raise ValueMismatchError(expected=amount, attached=attached_value)
            self.gateway.claim_native(caller, amount, funding_tx)
            try:
                self.gateway.wrap(amount)
            except Exception:
                logger.error("Wrap of %s failed; returning native to %s", amount, caller)
                self.gateway.send_native(caller, amount)
                raise
        else:
            if attached_value != 0:
                raise ValueMismatchError(expected=0, attached=attached_value)
            self.gateway.transfer_from(token, caller, amount)

        self.ledger.pulled += amount
        logger.debug("Custodied %s of %s from %s", amount, token, caller)

    def _send(self, token: str, recipient: str, amount: int) -> None:
        if is_native(token):
            self.gateway.unwrap(amount)
            self.gateway.send_native(recipient, amount)
        else:
            self.gateway.transfer(token, recipient, amount)

    def send_funds(self, token: str, recipient: str, amount: int) -> None:
        amount = int(amount)
        if amount <= 0:
            return
        self._send(token, recipient, amount)
        self.ledger.paid_out += amount
        logger.debug("Paid %s of %s to %s", amount, token, recipient)

    def refund(self, token: str, recipient: str, amount: int) -> None:
        amount = int(amount)
        if amount <= 0:
            return
        self._send(token, recipient, amount)
        self.ledger.refunded += amount
        logger.debug("Refunded %s of %s to %s", amount, token, recipient)

    def approve_spender(self, token: str, spender: str, amount: int) -> None:
        self.gateway.approve(self.token_for(token), spender, int(amount))

    def revoke_spender(self, token: str, spender: str) -> None:
        self.gateway.approve(self.token_for(token), spender, 0)
