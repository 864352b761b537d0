import logging
import os
from typing import Optional, Union


ROOT_NAME = "pms"

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def _coerce_level(value: Union[str, int, None]) -> int:
    if isinstance(value, str):
        return _LEVELS.get(value.upper().strip(), logging.INFO)
    if isinstance(value, int):
        return value
    return logging.INFO


def _root() -> logging.Logger:
    """The ``pms`` logger that owns every handler; configured on first use.

    - Honors LOG_LEVEL (default INFO) and LOG_FILE (optional path).
    - Does not propagate to the interpreter's root logger, so uvicorn or
      host applications never print store messages twice.
    """
    root = logging.getLogger(ROOT_NAME)
    if getattr(root, "_pms_configured", False):
        return root

    level = _coerce_level(os.environ.get("LOG_LEVEL", "INFO"))
    root.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    root.addHandler(sh)

    log_file = os.environ.get("LOG_FILE")
    if log_file:
        try:
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setFormatter(formatter)
            root.addHandler(fh)
        except OSError:
            root.warning("LOG_FILE could not be opened; continuing without file logging")

    root.propagate = False
    setattr(root, "_pms_configured", True)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return ``pms.<name>``; records flow up to the shared ``pms`` handlers."""
    _root()
    return logging.getLogger(f"{ROOT_NAME}.{name}")


def set_level(level: Union[str, int]) -> int:
    """Change the level of every ``pms.*`` logger at runtime and return it."""
    resolved = _coerce_level(level)
    _root().setLevel(resolved)
    return resolved
