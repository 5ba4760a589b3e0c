from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_HANDLER_NAME = "duty-rules-stdout"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single stdout handler to the root logger; safe to call repeatedly."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))
    if any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        return root
    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    return root
