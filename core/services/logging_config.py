"""
Console logging for the API process.

Usage:
    from core.services import logging_config
    logging_config.setup("INFO")
"""

import logging
import sys


def setup(level="INFO"):
    """
    Configure the root logger with one compact console handler.

    - Accepts a level name ("DEBUG", "INFO"...) or a logging constant
    - Hides per-request uvicorn access logs unless running at DEBUG
    - Keeps web3 / pymongo chatter at WARNING
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper() or "INFO")
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(
        logging.Formatter(fmt="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s", datefmt="%H:%M:%S")
    )
    root.addHandler(console)

    logging.getLogger("uvicorn.access").setLevel(logging.INFO if level <= logging.DEBUG else logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("web3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
