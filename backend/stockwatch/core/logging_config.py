from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    global _configured
    if _configured:
        return
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT)
    # httpx logs every request line at INFO, which includes the api token in the query string.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _configured = True
