from __future__ import annotations

import logging

from fastapi import HTTPException

from core.services.exceptions import (
    AlreadyRegisteredError,
    AmountTooLargeError,
    InvalidInputError,
    NativeFundingError,
    NotRegisteredError,
    OraclePeriodInvalidError,
    PairNotFoundError,
    PairNotTrustedError,
    PausedError,
    PoolMismatchError,
    ReentrancyError,
    SlippageExceededError,
    SwapRouterError,
    TransactionBudgetExceededError,
    TransactionRevertedError,
    UnauthorizedError,
    ValueMismatchError,
)

logger = logging.getLogger(__name__)

# first match wins; subclasses before their bases
_STATUS_BY_ERROR = (
    (InvalidInputError, 400),
    (ValueMismatchError, 400),
    (NativeFundingError, 400),
    (AmountTooLargeError, 400),
    (OraclePeriodInvalidError, 400),
    (PairNotTrustedError, 404),
    (PairNotFoundError, 404),
    (NotRegisteredError, 404),
    (AlreadyRegisteredError, 409),
    (PoolMismatchError, 409),
    (ReentrancyError, 409),
    (UnauthorizedError, 403),
    (PausedError, 423),
    (SlippageExceededError, 422),
)


def to_http_exception(exc: Exception, action: str) -> HTTPException:
    """
    Translate a router/transaction failure into the HTTPException a view raises.
    """
    if isinstance(exc, SwapRouterError):
        for cls, status in _STATUS_BY_ERROR:
            if isinstance(exc, cls):
                return HTTPException(status_code=status, detail={"error": type(exc).__name__, "message": str(exc), **exc.details})
        return HTTPException(status_code=400, detail={"error": type(exc).__name__, "message": str(exc), **exc.details})

    if isinstance(exc, TransactionRevertedError):
        logger.error("%s: transaction %s reverted", action, exc.tx_hash)
        return HTTPException(status_code=500, detail={"error": "TransactionReverted", "message": str(exc), "tx_hash": exc.tx_hash})

    if isinstance(exc, TransactionBudgetExceededError):
        return HTTPException(status_code=400, detail={"error": "TransactionBudgetExceeded", "message": str(exc)})

    if isinstance(exc, ValueError):
        return HTTPException(status_code=400, detail=str(exc))

    logger.exception("%s failed", action)
    return HTTPException(status_code=500, detail=f"Failed to {action}: {exc}")
