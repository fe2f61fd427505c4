# core/services/web3_cache.py

from __future__ import annotations

import logging
import threading
from time import time
from typing import Dict, Tuple

from web3 import Web3
from web3.providers.rpc import HTTPProvider

logger = logging.getLogger(__name__)

_W3_CACHE: Dict[str, Tuple[float, Web3]] = {}
_W3_LOCK = threading.Lock()
_W3_TTL_SEC = 10 * 60
_RPC_TIMEOUT_SEC = 30


def get_web3(rpc_url: str) -> Web3:
    """
    One Web3 client per RPC url, rebuilt after _W3_TTL_SEC.

    The oracle backend, the token gateway and the router engine of a process
    all share the same client.
    """
    url = (rpc_url or "").strip()
    if not url:
        raise ValueError("rpc_url is required (set RPC_URL_DEFAULT)")

    now = time()
    with _W3_LOCK:
        hit = _W3_CACHE.get(url)
        if hit and (now - hit[0]) < _W3_TTL_SEC:
            return hit[1]

        w3 = Web3(HTTPProvider(url, request_kwargs={"timeout": _RPC_TIMEOUT_SEC}))
        _W3_CACHE[url] = (now, w3)
        logger.debug("Created Web3 client for %s", url)
        return w3


def clear_web3_cache() -> None:
    with _W3_LOCK:
        _W3_CACHE.clear()
