"""Logging setup and JSON rendering helpers."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

VERSION = "0.1.0"
COMMIT = "UNKNOWN"
LOG_FILE_NAME = ".helper.log"

_HANDLER_MARK = "_kubehelper_handler"


class _BelowWarning(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


def setup_logging(hide_time: bool) -> None:
    """Send warnings and errors to stderr, info and debug records to stdout."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root.removeHandler(handler)

    fmt = "[%(levelname)s] %(message)s" if hide_time else "%(asctime)s [%(levelname)s] %(message)s"
    formatter = logging.Formatter(fmt)

    err = logging.StreamHandler(sys.stderr)
    err.setLevel(logging.WARNING)
    err.setFormatter(formatter)

    out = logging.StreamHandler(sys.stdout)
    out.addFilter(_BelowWarning())
    out.setFormatter(formatter)

    for handler in (err, out):
        setattr(handler, _HANDLER_MARK, True)
        root.addHandler(handler)
    root.setLevel(logging.INFO)


def _default(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


def to_json(obj: Any) -> str:
    """Render a value as JSON indented by two spaces."""
    try:
        return json.dumps(obj, indent=2, default=_default, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        logging.getLogger(__name__).warning(
            "to_json: failed to json marshal (%s): %s", type(obj).__name__, exc
        )
        return ""