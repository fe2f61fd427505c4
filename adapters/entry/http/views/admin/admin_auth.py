from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, FrozenSet

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from privy import PrivyAPI

from config import get_settings

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class WalletPrincipal:
    """
    Authenticated caller identity derived from a Privy access token.

    `wallet_address` (lowercase) is the caller the router acts for: funds are
    pulled from and paid out to it, and role checks are made against it.
    """
    privy_did: str
    wallet_address: str


@lru_cache(maxsize=1)
def _admin_allowlist() -> FrozenSet[str]:
    return frozenset(get_settings().ADMIN_WALLETS)


@lru_cache(maxsize=1)
def _privy_client() -> PrivyAPI:
    s = get_settings()
    if not s.PRIVY_APP_ID:
        raise RuntimeError("Missing settings.PRIVY_APP_ID")
    if not s.PRIVY_APP_SECRET:
        raise RuntimeError("Missing settings.PRIVY_APP_SECRET")

    return PrivyAPI(app_id=s.PRIVY_APP_ID, app_secret=s.PRIVY_APP_SECRET)


def _get(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def _is_addr(v: Any) -> bool:
    return isinstance(v, str) and v.startswith("0x")


def _extract_wallet_from_privy_user(user: Any) -> str:
    """
    First Ethereum address found on a Privy user, checking in order:
    top-level address fields, `wallet`, `wallets[]`, then wallet entries of
    `linked_accounts[]`.
    """
    for key in ("wallet_address", "address"):
        v = _get(user, key)
        if _is_addr(v):
            return v

    wallet_obj = _get(user, "wallet")
    addr = _get(wallet_obj, "address") or _get(wallet_obj, "wallet_address")
    if _is_addr(addr):
        return addr

    for w in _get(user, "wallets") or []:
        addr = _get(w, "address") or _get(w, "wallet_address")
        if _is_addr(addr):
            return addr

    for acc in _get(user, "linked_accounts") or []:
        if (_get(acc, "type") or "").lower() != "wallet":
            continue
        addr = _get(acc, "address") or _get(acc, "wallet_address")
        if _is_addr(addr):
            return addr

    return ""


def _get_user_by_did(client: PrivyAPI, did: str) -> Any:
    # method name differs across privy SDK releases
    users = client.users
    for name, kwargs in (("get", None), ("get_by_id", "user_id"), ("retrieve", "user_id")):
        fn = getattr(users, name, None)
        if callable(fn):
            return fn(did) if kwargs is None else fn(**{kwargs: did})

    raise RuntimeError("Privy SDK does not expose a method to fetch user by DID (users.get/get_by_id/retrieve).")


def require_wallet(
    creds: HTTPAuthorizationCredentials = Depends(bearer),
) -> WalletPrincipal:
    if not creds or not creds.credentials:
        raise HTTPException(status_code=401, detail="Missing Authorization bearer token.")

    try:
        client = _privy_client()
        claims = client.users.verify_access_token(auth_token=creds.credentials)

        privy_did = str(_get(claims, "user_id") or "")
        if not privy_did:
            raise HTTPException(status_code=401, detail="Invalid token (missing user_id).")

        wallet = _extract_wallet_from_privy_user(_get_user_by_did(client, privy_did)).lower()
        if not wallet:
            raise HTTPException(status_code=403, detail="Token verified but user has no linked wallet address.")

        return WalletPrincipal(privy_did=privy_did, wallet_address=wallet)

    except HTTPException:
        raise
    except Exception as e:
        msg = str(e) or "Invalid token"
        low = msg.lower()
        if "invalid" in low or "expired" in low or "auth token" in low:
            raise HTTPException(status_code=401, detail=msg)
        raise HTTPException(status_code=401, detail=f"Authentication failed: {msg}")


def require_admin(principal: WalletPrincipal = Depends(require_wallet)) -> WalletPrincipal:
    if principal.wallet_address not in _admin_allowlist():
        raise HTTPException(status_code=403, detail="Not authorized (wallet not allowlisted).")
    return principal
