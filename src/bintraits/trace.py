# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Process-wide diagnostic trace of registration operations."""

from __future__ import annotations

import logging
from typing import Any

__all__ = ("is_verbose", "set_verbose", "trace")

logger = logging.getLogger(__name__)

_VERBOSE = False


def set_verbose(flag: bool) -> None:
    """Switch the registration trace on or off."""
    global _VERBOSE
    _VERBOSE = bool(flag)


def is_verbose() -> bool:
    return _VERBOSE


def trace(operation: str, **fields: Any) -> None:
    """Log a registration operation when the verbose flag is on.

    Has no effect on registry state.
    """
    if not _VERBOSE:
        return
    rendered = ", ".join(f"{k}={v!r}" for k, v in fields.items())
    logger.info(f"Registered {operation}: {rendered}")
